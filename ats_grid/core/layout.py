"""
Column layout manager for the grid core.

Tracks column order, widths, pin sides and visibility. The order always
holds every column id; hiding a column only removes it from the rendered
set, so showing it again restores its place. Drag gestures are translated
by the presentation layer into ``reorder`` or ``move`` calls.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence

from ats_grid.core.columns import Column, ColumnModel, as_column_model
from ats_grid.core.exceptions import UnknownColumnError
from ats_grid.utils.constants import PinSide
from ats_grid.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LayoutState:
    """Immutable column layout snapshot."""

    order: tuple[str, ...] = ()
    widths: dict[str, float] = field(default_factory=dict)
    hidden: frozenset = field(default_factory=frozenset)
    pinned: dict[str, PinSide] = field(default_factory=dict)

    @classmethod
    def from_columns(cls, columns: ColumnModel | Sequence[Column]) -> "LayoutState":
        """Default layout declared by the columns themselves."""
        model = as_column_model(columns)
        return cls(
            order=model.ids,
            widths={c.id: c.width for c in model},
            hidden=frozenset(c.id for c in model if c.hidden),
            pinned={c.id: c.pinned for c in model if c.pinned is not None},
        )


class ColumnLayoutManager:
    """
    Applies layout operations to a LayoutState.

    Each operation replaces ``state`` with a new snapshot and returns it.
    """

    def __init__(self, columns: ColumnModel | Sequence[Column], state: Optional[LayoutState] = None):
        self.columns = as_column_model(columns)
        self.state = state if state is not None else LayoutState.from_columns(self.columns)

    def _require(self, column_id: str) -> Column:
        column = self.columns.get(column_id)
        if column is None or column_id not in self.state.order:
            raise UnknownColumnError(column_id)
        return column

    def _group(self, column_id: str) -> Optional[PinSide]:
        return self.state.pinned.get(column_id)

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    def reorder(self, column_id: str, before_column_id: Optional[str]) -> LayoutState:
        """
        Move a column so it sits immediately before another (list-move).

        Args:
            column_id: Column being dragged
            before_column_id: Drop target; None moves the column to the end
                of its region

        Returns:
            The new layout state. Moves across pin regions are ignored.
        """
        self._require(column_id)
        if before_column_id is not None:
            self._require(before_column_id)
            if before_column_id == column_id:
                return self.state
            if self._group(before_column_id) != self._group(column_id):
                logger.debug(
                    f"Ignoring reorder of {column_id!r} before {before_column_id!r}: "
                    "columns are in different pin regions"
                )
                return self.state

        order = [c for c in self.state.order if c != column_id]
        if before_column_id is None:
            group = self._group(column_id)
            last_in_group = max(
                (i for i, c in enumerate(order) if self._group(c) == group),
                default=len(order) - 1,
            )
            order.insert(last_in_group + 1, column_id)
        else:
            order.insert(order.index(before_column_id), column_id)

        self.state = replace(self.state, order=tuple(order))
        return self.state

    def move(self, column_id: str, target_index: int) -> LayoutState:
        """
        Move a column to a position within its pin region.

        ``target_index`` counts the region's columns after the dragged
        column is removed, hidden columns included; it is clamped.
        """
        self._require(column_id)
        group = self._group(column_id)
        region = [c for c in self.state.order if c != column_id and self._group(c) == group]
        target_index = max(0, min(int(target_index), len(region)))
        before = region[target_index] if target_index < len(region) else None
        return self.reorder(column_id, before)

    def render_order(self) -> list[str]:
        """Visible column ids: start-pinned, then free, then end-pinned."""
        start, free, end = [], [], []
        for column_id in self.state.order:
            if column_id in self.state.hidden:
                continue
            side = self._group(column_id)
            if side is PinSide.START:
                start.append(column_id)
            elif side is PinSide.END:
                end.append(column_id)
            else:
                free.append(column_id)
        return start + free + end

    # -------------------------------------------------------------------------
    # Sizing, pinning, visibility
    # -------------------------------------------------------------------------

    def resize(self, column_id: str, new_width: float) -> LayoutState:
        """Set a width, clamped to the column's minimum."""
        column = self._require(column_id)
        if not column.resizable:
            return self.state
        try:
            width = float(new_width)
        except (TypeError, ValueError):
            width = column.min_width
        if not math.isfinite(width):
            width = column.min_width if width < 0 or math.isnan(width) else self.width_of(column_id)
        widths = dict(self.state.widths)
        widths[column_id] = max(column.min_width, width)
        self.state = replace(self.state, widths=widths)
        return self.state

    def width_of(self, column_id: str) -> float:
        column = self._require(column_id)
        return self.state.widths.get(column_id, column.width)

    def total_width(self) -> float:
        """Sum of rendered column widths."""
        return sum(self.width_of(c) for c in self.render_order())

    def pin(self, column_id: str, side: Optional[PinSide | str]) -> LayoutState:
        """Pin a column to a side, or unpin it with None."""
        self._require(column_id)
        pinned = dict(self.state.pinned)
        if side is None:
            pinned.pop(column_id, None)
        else:
            pinned[column_id] = PinSide(side)
        self.state = replace(self.state, pinned=pinned)
        return self.state

    def unpin(self, column_id: str) -> LayoutState:
        return self.pin(column_id, None)

    def hide(self, column_id: str) -> LayoutState:
        self._require(column_id)
        self.state = replace(self.state, hidden=self.state.hidden | {column_id})
        return self.state

    def show(self, column_id: str) -> LayoutState:
        self._require(column_id)
        self.state = replace(self.state, hidden=self.state.hidden - {column_id})
        return self.state

    def is_visible(self, column_id: str) -> bool:
        self._require(column_id)
        return column_id not in self.state.hidden

    def reset(self) -> LayoutState:
        """Restore the layout the columns declare."""
        self.state = LayoutState.from_columns(self.columns)
        return self.state
