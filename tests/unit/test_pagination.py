"""
Tests for ats_grid.core.pagination — page windows over a row count.
"""

import pytest

from ats_grid.core.pagination import page_window, total_pages


class TestPageWindow:
    def test_middle_page(self):
        info = page_window(42, 2, 10)
        assert (info.start, info.end) == (10, 20)
        assert info.has_previous and info.has_next
        assert info.summary() == "Showing 11 to 20 of 42 results"

    def test_last_page_is_partial(self):
        info = page_window(42, 5, 10)
        assert (info.start, info.end, len(info)) == (40, 42, 2)
        assert not info.has_next

    @pytest.mark.parametrize("requested,expected", [(-3, 1), (0, 1), (6, 5), (500, 5)])
    def test_page_is_clamped(self, requested, expected):
        assert page_window(42, requested, 10).page == expected

    def test_no_rows(self):
        info = page_window(0, 3, 10)
        assert (info.page, info.total_pages) == (1, 0)
        assert info.is_empty
        assert not info.has_next
        assert info.summary() == "No results"

    def test_total_pages(self):
        assert total_pages(40, 10) == 4
        assert total_pages(41, 10) == 5
        with pytest.raises(ValueError):
            total_pages(5, 0)
