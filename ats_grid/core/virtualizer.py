"""
Viewport virtualizer for the grid core.

Given the number of derived rows, the scroll offset and the viewport
height, computes the contiguous slice of rows that must be rendered and
their absolute offsets. Row heights may vary per index. A prefix sum of
heights is rebuilt lazily, only when the row count, the height function or
an explicit invalidation changes; each scroll is then two binary searches.
"""

import math
from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field
from typing import Callable, Literal, Optional, Union

from ats_grid.utils.constants import DEFAULT_OVERSCAN, MIN_ROW_HEIGHT
from ats_grid.utils.logger import get_logger

logger = get_logger(__name__)

RowHeight = Union[float, int, Callable[[int], float]]
Align = Literal["start", "center", "end", "auto"]


@dataclass(frozen=True)
class ViewportWindow:
    """
    Rows to render for one scroll position.

    ``first_visible_index``..``last_visible_index`` is the rendered range,
    overscan included; ``first_in_view``..``last_in_view`` are the rows
    that actually intersect the viewport. An empty window has
    ``last_visible_index == -1``.
    """

    first_visible_index: int = 0
    last_visible_index: int = -1
    row_offsets: list[float] = field(default_factory=list)
    row_heights: list[float] = field(default_factory=list)
    first_in_view: int = 0
    last_in_view: int = -1
    total_height: float = 0.0
    scroll_offset: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.last_visible_index < self.first_visible_index

    @property
    def indexes(self) -> range:
        return range(self.first_visible_index, self.last_visible_index + 1)

    def __len__(self) -> int:
        return len(self.indexes)


class ViewportVirtualizer:
    """
    Computes viewport windows over a variable-height row list.

    The virtualizer does not read any scroll container; the rendering
    adapter passes measured ``scroll_offset`` and ``viewport_height``.
    """

    def __init__(self, overscan: int = DEFAULT_OVERSCAN, min_row_height: float = MIN_ROW_HEIGHT):
        """
        Initialize the virtualizer.

        Args:
            overscan: Default number of extra rows rendered on each side
            min_row_height: Floor applied to non-positive or invalid heights
        """
        self.overscan = max(0, int(overscan))
        self.min_row_height = min_row_height if min_row_height > 0 else MIN_ROW_HEIGHT
        self._prefix: list[float] = [0.0]
        self._heights: list[float] = []
        self._built_rows = -1
        self._built_height: Optional[RowHeight] = None
        self._dirty = True
        self.rebuild_count = 0

    # -------------------------------------------------------------------------
    # Prefix sums
    # -------------------------------------------------------------------------

    def invalidate(self) -> None:
        """Mark row heights as changed; the next computation rebuilds."""
        self._dirty = True

    def _sanitize(self, height: object) -> float:
        try:
            value = float(height)
        except (TypeError, ValueError):
            return self.min_row_height
        if not math.isfinite(value) or value <= 0:
            return self.min_row_height
        return max(value, self.min_row_height)

    def _ensure(self, total_rows: int, row_height: RowHeight) -> None:
        if (
            not self._dirty
            and total_rows == self._built_rows
            and (row_height is self._built_height or row_height == self._built_height)
        ):
            return

        if callable(row_height):
            heights = [self._sanitize(row_height(i)) for i in range(total_rows)]
        else:
            heights = [self._sanitize(row_height)] * total_rows

        prefix = [0.0] * (total_rows + 1)
        running = 0.0
        for i, height in enumerate(heights):
            running += height
            prefix[i + 1] = running

        self._heights = heights
        self._prefix = prefix
        self._built_rows = total_rows
        self._built_height = row_height
        self._dirty = False
        self.rebuild_count += 1
        logger.debug(f"Rebuilt row offsets for {total_rows} rows ({running:.0f}px)")

    def total_height(self, total_rows: int, row_height: RowHeight) -> float:
        """Height of all rows stacked."""
        total_rows = max(0, int(total_rows))
        self._ensure(total_rows, row_height)
        return self._prefix[-1]

    # -------------------------------------------------------------------------
    # Windows
    # -------------------------------------------------------------------------

    @staticmethod
    def _clamp(value: float, low: float, high: float) -> float:
        if value is None or math.isnan(value):
            return low
        return max(low, min(value, high))

    def compute_window(
        self,
        total_rows: int,
        scroll_offset: float,
        viewport_height: float,
        row_height: RowHeight,
        overscan: Optional[int] = None,
    ) -> ViewportWindow:
        """
        Compute the rows to render.

        Args:
            total_rows: Length of the derived row list
            scroll_offset: Pixels scrolled from the top
            viewport_height: Visible pixel height
            row_height: Fixed height or per-index height function
            overscan: Extra rows rendered before and after the viewport

        Returns:
            ViewportWindow for the clamped scroll position
        """
        total_rows = max(0, int(total_rows))
        if total_rows == 0:
            return ViewportWindow()

        self._ensure(total_rows, row_height)
        prefix = self._prefix
        content = prefix[-1]
        overscan = self.overscan if overscan is None else max(0, int(overscan))

        viewport = self._clamp(float(viewport_height), 0.0, content)
        max_scroll = max(0.0, content - viewport)
        scroll = self._clamp(float(scroll_offset), 0.0, max_scroll)

        last_index = total_rows - 1
        first = min(max(bisect_right(prefix, scroll) - 1, 0), last_index)
        if viewport > 0:
            last = bisect_left(prefix, scroll + viewport) - 1
            last = min(max(last, first), last_index)
        else:
            last = first

        start = max(0, first - overscan)
        end = min(last_index, last + overscan)

        return ViewportWindow(
            first_visible_index=start,
            last_visible_index=end,
            row_offsets=prefix[start:end + 1],
            row_heights=self._heights[start:end + 1],
            first_in_view=first,
            last_in_view=last,
            total_height=content,
            scroll_offset=scroll,
        )

    def offset_for_index(
        self,
        index: int,
        total_rows: int,
        viewport_height: float,
        row_height: RowHeight,
        align: Align = "auto",
        current_offset: float = 0.0,
    ) -> float:
        """
        Scroll offset that brings a row into view.

        ``auto`` leaves the offset unchanged when the row is already fully
        visible, and otherwise scrolls the minimum distance.
        """
        total_rows = max(0, int(total_rows))
        if total_rows == 0:
            return 0.0
        self._ensure(total_rows, row_height)
        index = max(0, min(int(index), total_rows - 1))
        top = self._prefix[index]
        bottom = self._prefix[index + 1]
        viewport = self._clamp(float(viewport_height), 0.0, self._prefix[-1])
        max_scroll = max(0.0, self._prefix[-1] - viewport)

        if align == "start":
            target = top
        elif align == "end":
            target = bottom - viewport
        elif align == "center":
            target = top - (viewport - (bottom - top)) / 2
        else:
            if top >= current_offset and bottom <= current_offset + viewport:
                target = current_offset
            elif top < current_offset:
                target = top
            else:
                target = bottom - viewport
        return self._clamp(target, 0.0, max_scroll)
