"""Variable-height virtualization."""

from __future__ import annotations

import pytest

from fakes import make_records
from gallery.domain.models import ImageRecord
from gallery.render.virtualizer import (
    VirtualizedList,
    compute_visible_range,
    estimate_height,
)


def _heights(count: int) -> list[int]:
    return [324 if index % 3 == 0 else 304 for index in range(count)]


def test_estimate_height_uses_two_description_bands():
    short = ImageRecord(id="1", url="u", title="t", description="x" * 50)
    long = ImageRecord(id="2", url="u", title="t", description="x" * 51)

    assert estimate_height(short) == 304
    assert estimate_height(long) == 324
    assert estimate_height(None) == 300
    assert estimate_height(short.model_copy()) == estimate_height(short)


def test_visible_range_covers_window_exactly():
    heights = _heights(1000)

    visible = compute_visible_range(3000, 600, 1000, heights.__getitem__)

    assert visible.total_height == sum(heights)
    assert (visible.start_index, visible.end_index) == (9, 12)
    first, last = visible.start_index, visible.end_index - 1
    assert visible.offsets[0] <= 3000 < visible.offsets[0] + heights[first]
    assert visible.offsets[-1] < 3600 <= visible.offsets[-1] + heights[last]
    for position, index in enumerate(range(first, last)):
        assert visible.offsets[position + 1] == visible.offsets[position] + heights[index]


def test_visible_range_adds_overscan_rows():
    heights = _heights(1000)

    visible = compute_visible_range(3000, 600, 1000, heights.__getitem__, overscan_count=2)

    assert (visible.start_index, visible.end_index) == (7, 14)
    assert len(visible.offsets) == len(visible)


def test_visible_range_handles_short_and_empty_lists():
    assert len(compute_visible_range(0, 600, 0, lambda index: 300)) == 0

    visible = compute_visible_range(500, 600, 2, lambda index: 100)
    assert (visible.start_index, visible.end_index) == (0, 2)
    assert visible.total_height == 200


def test_scroll_offset_is_clamped_to_content():
    visible = compute_visible_range(10_000, 600, 10, lambda index: 100)

    assert visible.end_index == 10
    assert visible.offsets[0] <= 400


def test_appending_items_keeps_scroll_and_measurements():
    viewport = VirtualizedList(viewport_height=600, overscan_count=0)
    page_one = make_records(8)
    viewport.sync(page_one, ("", 0))
    viewport.measure(0, 280)
    viewport.scroll_to(1200)

    replaced = viewport.sync(page_one + make_records(3, start=8, long=True), ("", 0))

    assert replaced is False
    assert viewport.scroll_offset == 1200
    assert viewport.is_measured(0)
    assert viewport.height_of(0) == 280
    assert viewport.height_of(10) == 324
    assert viewport.total_height == 280 + 7 * 304 + 3 * 324


def test_changed_record_drops_its_measurement():
    viewport = VirtualizedList()
    records = make_records(4)
    viewport.sync(records, "k")
    viewport.measure(1, 500)

    edited = records[1].model_copy(update={"description": "y" * 90})
    viewport.sync((records[0], edited, *records[2:]), "k")

    assert not viewport.is_measured(1)
    assert viewport.height_of(1) == 324
    assert viewport.offset_of(2) == 304 + 324


def test_new_key_replaces_list_and_scrolls_to_top():
    viewport = VirtualizedList()
    viewport.sync(make_records(20), ("cats", 0))
    viewport.scroll_to(2000)
    viewport.measure(3, 100)

    replaced = viewport.sync(make_records(8, prefix="dogs"), ("dogs", 0))

    assert replaced is True
    assert viewport.scroll_offset == 0
    assert not viewport.is_measured(3)
    assert viewport.total_height == 8 * 304


def test_visible_rows_expose_offsets_and_records():
    viewport = VirtualizedList(viewport_height=600, overscan_count=1)
    records = make_records(20)
    viewport.sync(records, "k")
    viewport.scroll_to(304 * 5)

    rows = viewport.visible_rows()

    assert [row.index for row in rows] == [4, 5, 6, 7]
    assert rows[1].record is records[5]
    assert rows[1].offset == 304 * 5
    assert all(row.height == 304 for row in rows)


def test_measure_shifts_following_offsets():
    viewport = VirtualizedList()
    viewport.sync(make_records(5), "k")

    viewport.measure(1, 400)

    assert viewport.offset_of(2) == 304 + 400
    assert viewport.total_height == 4 * 304 + 400
    with pytest.raises(ValueError):
        viewport.measure(0, -1)
    for index in (-1, 5):
        with pytest.raises(IndexError):
            viewport.measure(index, 400)

    assert viewport.height_of(4) == 304
    assert not viewport.is_measured(-1)
    assert not viewport.is_measured(5)
    assert viewport.total_height == 4 * 304 + 400
    assert viewport.visible_range().start_index == 0


def test_index_at_and_end_sentinel():
    viewport = VirtualizedList(viewport_height=600)
    viewport.sync(make_records(8), "k")

    assert viewport.index_at(0) == 0
    assert viewport.index_at(305) == 1
    assert viewport.index_at(viewport.total_height) is None
    assert viewport.end_reached(200) is False

    viewport.scroll_to(viewport.total_height)
    assert viewport.scroll_offset == viewport.total_height - 600
    assert viewport.end_reached(200) is True
