"""
Tests for ats_grid.core.virtualizer — window computation, clamping and
lazy prefix sum rebuilding.
"""

import math

import pytest

from ats_grid.core.virtualizer import ViewportVirtualizer


@pytest.fixture
def virtualizer():
    return ViewportVirtualizer(overscan=0)


# ── Fixed heights ───────────────────────────────────────────────────────────


class TestFixedHeights:
    def test_first_page(self, virtualizer):
        window = virtualizer.compute_window(1000, 0, 100, 20)
        assert (window.first_visible_index, window.last_visible_index) == (0, 4)
        assert window.row_offsets == [0, 20, 40, 60, 80]
        assert window.total_height == 20000

    def test_partial_rows_included(self, virtualizer):
        window = virtualizer.compute_window(1000, 30, 100, 20)
        assert (window.first_visible_index, window.last_visible_index) == (1, 6)

    def test_overscan_extends_both_sides(self):
        window = ViewportVirtualizer(overscan=3).compute_window(1000, 200, 100, 20)
        assert (window.first_in_view, window.last_in_view) == (10, 14)
        assert (window.first_visible_index, window.last_visible_index) == (7, 17)

    def test_overscan_clamped_at_edges(self):
        window = ViewportVirtualizer(overscan=10).compute_window(5, 0, 40, 20)
        assert (window.first_visible_index, window.last_visible_index) == (0, 4)

    def test_per_call_overscan(self, virtualizer):
        window = virtualizer.compute_window(100, 0, 100, 20, overscan=2)
        assert window.last_visible_index == 6


# ── Edge cases ──────────────────────────────────────────────────────────────


class TestEdgeCases:
    def test_zero_rows_is_empty(self, virtualizer):
        window = virtualizer.compute_window(0, 0, 100, 20)
        assert window.is_empty
        assert window.last_visible_index == -1
        assert len(window) == 0

    def test_scroll_past_end_clamps_to_last_page(self, virtualizer):
        window = virtualizer.compute_window(100, 10_000_000, 100, 20)
        assert window.last_visible_index == 99
        assert window.first_visible_index == 95
        assert window.scroll_offset == 1900

    def test_negative_scroll_clamps_to_top(self, virtualizer):
        window = virtualizer.compute_window(100, -50, 100, 20)
        assert window.first_visible_index == 0
        assert window.scroll_offset == 0

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), -10])
    def test_non_finite_viewport_is_clamped(self, virtualizer, bad):
        window = virtualizer.compute_window(100, 0, bad, 20)
        assert 0 <= window.first_visible_index <= window.last_visible_index <= 99

    def test_viewport_taller_than_content(self, virtualizer):
        window = virtualizer.compute_window(3, 0, 1000, 20)
        assert (window.first_visible_index, window.last_visible_index) == (0, 2)

    @pytest.mark.parametrize("height", [0, -5, float("nan"), None])
    def test_invalid_heights_use_minimum(self, height):
        virtualizer = ViewportVirtualizer(overscan=0, min_row_height=1.0)
        assert virtualizer.total_height(10, lambda i: height) == 10


# ── Variable heights ────────────────────────────────────────────────────────


class TestVariableHeights:
    def test_offsets_follow_heights(self, virtualizer):
        heights = [10, 50, 10, 10, 100]
        window = virtualizer.compute_window(5, 0, 60, lambda i: heights[i])
        assert window.row_offsets == [0, 10]
        assert window.row_heights == [10, 50]

    def test_binary_search_for_first_row(self, virtualizer):
        heights = [10, 50, 10, 10, 100]
        window = virtualizer.compute_window(5, 65, 10, lambda i: heights[i])
        assert window.first_in_view == 2
        assert window.last_in_view == 3

    def test_offset_for_index(self, virtualizer):
        assert virtualizer.offset_for_index(50, 100, 100, 20, align="start") == 1000
        assert virtualizer.offset_for_index(50, 100, 100, 20, align="end") == 920
        assert virtualizer.offset_for_index(50, 100, 100, 20, align="center") == 960
        assert virtualizer.offset_for_index(99, 100, 100, 20, align="start") == 1900

    def test_offset_for_index_auto(self, virtualizer):
        assert virtualizer.offset_for_index(2, 100, 100, 20, current_offset=0) == 0
        assert virtualizer.offset_for_index(10, 100, 100, 20, current_offset=0) == 120
        assert virtualizer.offset_for_index(1, 100, 100, 20, current_offset=200) == 20


# ── Rebuilds ────────────────────────────────────────────────────────────────


class TestRebuilds:
    def test_scrolling_does_not_rebuild(self, virtualizer):
        height = lambda i: 20 + (i % 3)
        for offset in range(0, 5000, 137):
            virtualizer.compute_window(1000, offset, 300, height)
        assert virtualizer.rebuild_count == 1

    def test_row_count_change_rebuilds(self, virtualizer):
        virtualizer.compute_window(10, 0, 100, 20)
        virtualizer.compute_window(11, 0, 100, 20)
        assert virtualizer.rebuild_count == 2

    def test_invalidate_rebuilds(self, virtualizer):
        heights = {0: 20}
        height = lambda i: heights.get(i, 20)
        virtualizer.compute_window(10, 0, 100, height)
        heights[0] = 80
        virtualizer.invalidate()
        assert virtualizer.compute_window(10, 0, 100, height).row_heights[0] == 80
        assert virtualizer.rebuild_count == 2


# ── Properties ──────────────────────────────────────────────────────────────


class TestVirtualizerProperties:
    @pytest.mark.parametrize("total_rows", [10, 1_000, 100_000])
    def test_window_covers_viewport_and_is_bounded(self, total_rows):
        virtualizer = ViewportVirtualizer(overscan=2)
        viewport = 300
        height = lambda i: 20 + (i * 7) % 30
        content = virtualizer.total_height(total_rows, height)
        max_scroll = max(0, content - viewport)

        for step in range(25):
            scroll = max_scroll * step / 24
            window = virtualizer.compute_window(total_rows, scroll, viewport, height)
            top = window.row_offsets[0]
            bottom = window.row_offsets[-1] + window.row_heights[-1]
            assert top <= window.scroll_offset
            assert bottom >= min(window.scroll_offset + viewport, content) - 1e-9
            for prev, nxt, h in zip(window.row_offsets, window.row_offsets[1:], window.row_heights):
                assert math.isclose(prev + h, nxt)
            # Shortest row is 20px
            assert len(window) <= viewport / 20 + 2 + 2 * 2
