"""Variable-height list virtualization.

Only rows intersecting the viewport (plus a few overscan rows) are
materialized; everything else is represented by its estimated height so the
total scroll extent stays correct.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from itertools import accumulate
from typing import Callable, Hashable, Sequence

from gallery.domain.models import ImageRecord

IMAGE_HEIGHT = 48 * 4
SHORT_TEXT_HEIGHT = 80
LONG_TEXT_HEIGHT = 100
CARD_PADDING = 32
LONG_DESCRIPTION_THRESHOLD = 50
PLACEHOLDER_HEIGHT = 300


def estimate_height(record: ImageRecord | None) -> int:
    """Card height before measurement: image band, one of two text bands, padding."""

    if record is None:
        return PLACEHOLDER_HEIGHT
    text = LONG_TEXT_HEIGHT if len(record.description) > LONG_DESCRIPTION_THRESHOLD else SHORT_TEXT_HEIGHT
    return IMAGE_HEIGHT + text + CARD_PADDING


@dataclass(frozen=True, slots=True)
class VisibleRange:
    start_index: int
    end_index: int  # exclusive
    offsets: tuple[int, ...] = ()
    total_height: int = 0

    def __len__(self) -> int:
        return self.end_index - self.start_index

    def __iter__(self):
        return iter(range(self.start_index, self.end_index))


@dataclass(frozen=True, slots=True)
class VisibleRow:
    index: int
    record: ImageRecord
    offset: int
    height: int


def clamp_scroll(scroll_offset: float, viewport_height: int, total_height: int) -> float:
    max_scroll = max(0, total_height - viewport_height)
    return max(0, min(scroll_offset, max_scroll))


def _range_from_offsets(
    offsets: Sequence[int],
    scroll_offset: float,
    viewport_height: int,
    overscan_count: int,
) -> VisibleRange:
    # offsets has one more element than there are items; offsets[-1] is the extent.
    item_count = len(offsets) - 1
    total = offsets[-1]
    if item_count <= 0 or viewport_height <= 0:
        return VisibleRange(0, 0, (), total)

    top = clamp_scroll(scroll_offset, viewport_height, total)
    bottom = top + viewport_height
    # First item whose bottom edge lies below the viewport top.
    start = min(bisect_right(offsets, top) - 1, item_count - 1)
    # First item whose top edge is at or below the viewport bottom.
    end = min(bisect_right(offsets, bottom, lo=start + 1), item_count)
    if end > start + 1 and offsets[end - 1] >= bottom:
        end -= 1

    start = max(0, start - overscan_count)
    end = min(item_count, end + overscan_count)
    return VisibleRange(start, end, tuple(offsets[start:end]), total)


def compute_visible_range(
    scroll_offset: float,
    viewport_height: int,
    item_count: int,
    height_of: Callable[[int], int],
    overscan_count: int = 0,
) -> VisibleRange:
    """Return the contiguous index range intersecting the viewport."""

    offsets = [0, *accumulate(height_of(index) for index in range(item_count))]
    return _range_from_offsets(offsets, scroll_offset, viewport_height, overscan_count)


@dataclass
class VirtualizedList:
    """Viewport state over the accumulated item list of the active term."""

    viewport_height: int = 600
    overscan_count: int = 2
    estimator: Callable[[ImageRecord | None], int] = estimate_height
    scroll_offset: float = 0
    _items: tuple[ImageRecord, ...] = field(default=(), init=False, repr=False)
    _key: Hashable = field(default=None, init=False, repr=False)
    _heights: list[int] = field(default_factory=list, init=False, repr=False)
    _measured: set[int] = field(default_factory=set, init=False, repr=False)
    _offsets: list[int] = field(default_factory=lambda: [0], init=False, repr=False)

    @property
    def items(self) -> tuple[ImageRecord, ...]:
        return self._items

    @property
    def total_height(self) -> int:
        return self._offsets[-1]

    def height_of(self, index: int) -> int:
        return self._heights[index]

    def offset_of(self, index: int) -> int:
        return self._offsets[index]

    def is_measured(self, index: int) -> bool:
        return index in self._measured

    def sync(self, items: Sequence[ImageRecord], key: Hashable) -> bool:
        """Adopt a new item list; return True when it replaced the old one."""

        items = tuple(items)
        old = self._items
        if key != self._key or len(items) < len(old):
            self._key = key
            self._items = items
            self._heights = [self.estimator(record) for record in items]
            self._measured.clear()
            self._rebuild_offsets(0)
            self.scroll_offset = 0
            return True

        first_changed = len(old)
        for index, (before, after) in enumerate(zip(old, items)):
            if before != after:
                self._heights[index] = self.estimator(after)
                self._measured.discard(index)
                first_changed = min(first_changed, index)
        self._heights.extend(self.estimator(record) for record in items[len(old):])
        self._items = items
        if first_changed < len(items):
            self._rebuild_offsets(first_changed)
        return False

    def measure(self, index: int, height: int) -> None:
        """Replace the estimate for ``index`` with the host's measured height."""

        if not 0 <= index < len(self._heights):
            raise IndexError(f"index {index} out of range for {len(self._heights)} items")
        if height < 0:
            raise ValueError("height must be non-negative")
        self._measured.add(index)
        if self._heights[index] == height:
            return
        self._heights[index] = height
        self._rebuild_offsets(index)

    def scroll_to(self, offset: float) -> float:
        self.scroll_offset = clamp_scroll(offset, self.viewport_height, self.total_height)
        return self.scroll_offset

    def scroll_by(self, delta: float) -> float:
        return self.scroll_to(self.scroll_offset + delta)

    def visible_range(self) -> VisibleRange:
        return _range_from_offsets(
            self._offsets, self.scroll_offset, self.viewport_height, self.overscan_count
        )

    def visible_rows(self) -> list[VisibleRow]:
        visible = self.visible_range()
        return [
            VisibleRow(index, self._items[index], offset, self._heights[index])
            for index, offset in zip(visible, visible.offsets)
        ]

    def index_at(self, offset: float) -> int | None:
        """Index of the item covering content offset ``offset``."""

        if offset < 0 or offset >= self.total_height:
            return None
        return bisect_right(self._offsets, offset) - 1

    def end_reached(self, margin: int = 0) -> bool:
        """Whether the sentinel after the last row is within ``margin`` of the viewport."""

        return self.scroll_offset + self.viewport_height + margin >= self.total_height

    def _rebuild_offsets(self, start: int) -> None:
        del self._offsets[start + 1:]
        running = self._offsets[start]
        for height in self._heights[start:]:
            running += height
            self._offsets.append(running)


__all__ = [
    "VirtualizedList",
    "VisibleRange",
    "VisibleRow",
    "clamp_scroll",
    "compute_visible_range",
    "estimate_height",
]
