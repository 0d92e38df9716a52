"""Top-level render entry point.

Rendering never raises: a failure anywhere while building the view yields
``Err`` and the host swaps the whole gallery for :data:`FALLBACK_VIEW`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from gallery.domain.models import CacheEntrySnapshot, FetchStatus
from gallery.logging import logger
from gallery.render.virtualizer import VirtualizedList, VisibleRow
from gallery.services.exceptions import RenderError

T = TypeVar("T")
E = TypeVar("E", bound=Exception)

NO_RESULTS_MESSAGE = "No images found"
DEFAULT_ERROR_MESSAGE = "Failed to load images"


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class GalleryView:
    term: str
    rows: tuple[VisibleRow, ...]
    total_height: int
    scroll_offset: float
    status: FetchStatus
    page: int
    has_next_page: bool
    is_loading: bool
    message: str | None = None


@dataclass(frozen=True, slots=True)
class FallbackView:
    title: str
    detail: str


FALLBACK_VIEW = FallbackView(
    title="Something went wrong",
    detail="Please try refreshing the page or contact support.",
)

RenderResult = Ok[GalleryView] | Err[RenderError]


def _message_for(state: CacheEntrySnapshot) -> str | None:
    if state.status == "error":
        return state.error or DEFAULT_ERROR_MESSAGE
    if state.is_empty and state.status in ("idle", "exhausted") and state.page_count:
        return NO_RESULTS_MESSAGE
    return None


def build_view(state: CacheEntrySnapshot, viewport: VirtualizedList) -> GalleryView:
    return GalleryView(
        term=state.term,
        rows=tuple(viewport.visible_rows()),
        total_height=viewport.total_height,
        scroll_offset=viewport.scroll_offset,
        status=state.status,
        page=max(1, state.page_count),
        has_next_page=state.has_next_page,
        is_loading=state.is_fetching,
        message=_message_for(state),
    )


def render_gallery(state: CacheEntrySnapshot, viewport: VirtualizedList) -> RenderResult:
    try:
        return Ok(build_view(state, viewport))
    except Exception as exc:
        logger.exception(
            "gallery_render_failed",
            term=state.term,
            exception_type=exc.__class__.__name__,
        )
        error = RenderError(f"{exc.__class__.__name__}: {exc}")
        error.__cause__ = exc
        return Err(error)


__all__ = [
    "DEFAULT_ERROR_MESSAGE",
    "Err",
    "FALLBACK_VIEW",
    "FallbackView",
    "GalleryView",
    "NO_RESULTS_MESSAGE",
    "Ok",
    "RenderResult",
    "build_view",
    "render_gallery",
]
