"""
Client-side pagination over the derived rows.

Pages are 1-based. ``page_window`` is pure: it clamps the requested page
into range and reports the slice of the derived list that page covers.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PageInfo:
    """One page of a result of ``total_rows`` rows."""

    page: int
    page_size: int
    total_rows: int
    total_pages: int
    start: int
    end: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def is_empty(self) -> bool:
        return self.end <= self.start

    def __len__(self) -> int:
        return self.end - self.start

    def summary(self) -> str:
        """Footer text, e.g. 'Showing 11 to 20 of 42 results'."""
        if self.is_empty:
            return "No results"
        return f"Showing {self.start + 1} to {self.end} of {self.total_rows} results"


def total_pages(total_rows: int, page_size: int) -> int:
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    return math.ceil(max(0, total_rows) / page_size)


def page_window(total_rows: int, page: int, page_size: int) -> PageInfo:
    """
    Slice bounds of one page.

    Args:
        total_rows: Length of the derived row list
        page: Requested 1-based page; clamped to the available pages
        page_size: Rows per page

    Returns:
        PageInfo with ``start`` inclusive and ``end`` exclusive
    """
    total_rows = max(0, int(total_rows))
    pages = total_pages(total_rows, page_size)
    page = min(max(1, int(page)), max(1, pages))
    start = min((page - 1) * page_size, total_rows)
    end = min(start + page_size, total_rows)
    return PageInfo(
        page=page,
        page_size=page_size,
        total_rows=total_rows,
        total_pages=pages,
        start=start,
        end=end,
    )
