from gallery.render.view import FALLBACK_VIEW, Err, GalleryView, Ok, render_gallery
from gallery.render.virtualizer import (
    VirtualizedList,
    VisibleRange,
    VisibleRow,
    compute_visible_range,
    estimate_height,
)

__all__ = [
    "Err",
    "FALLBACK_VIEW",
    "GalleryView",
    "Ok",
    "VirtualizedList",
    "VisibleRange",
    "VisibleRow",
    "compute_visible_range",
    "estimate_height",
    "render_gallery",
]
