"""
Selection manager for the grid core.

Tracks selected row ids independently of sort and filter order. Selecting
"all filtered" sets a flag rather than materializing ids, and rows
deselected afterwards are kept in an exclusion set, so selection stays
O(1) in space however large the filtered result is.
"""

from collections.abc import Collection
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Sequence

from ats_grid.core.row_store import RowId
from ats_grid.utils.constants import HeaderCheckState


@dataclass(frozen=True)
class AllFiltered:
    """
    Bulk target meaning "every row matching the current filter except these".
    """

    excluded: frozenset = field(default_factory=frozenset)

    def includes(self, row_id: RowId) -> bool:
        return row_id not in self.excluded


@dataclass(frozen=True)
class SelectionState:
    """
    Immutable selection snapshot.

    ``selected`` is the explicit set used while ``all_filtered`` is off.
    While it is on, membership is "not in ``excluded``". Ids that do not
    match the current filter are never dropped, so widening a filter
    brings earlier selections back.
    """

    selected: frozenset = field(default_factory=frozenset)
    all_filtered: bool = False
    excluded: frozenset = field(default_factory=frozenset)
    anchor: Optional[RowId] = None  # Last toggled row, origin for range selection


class SelectionManager:
    """
    Mutable wrapper applying selection operations to a SelectionState.

    Each operation replaces ``state`` with a new snapshot.
    """

    def __init__(self, state: Optional[SelectionState] = None):
        self.state = state or SelectionState()

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def toggle(self, row_id: RowId) -> SelectionState:
        """Flip one row's membership in the effective selection."""
        s = self.state
        if s.all_filtered:
            excluded = s.excluded - {row_id} if row_id in s.excluded else s.excluded | {row_id}
            self.state = replace(s, excluded=excluded, anchor=row_id)
        else:
            selected = s.selected - {row_id} if row_id in s.selected else s.selected | {row_id}
            self.state = replace(s, selected=selected, anchor=row_id)
        return self.state

    def select_range(
        self,
        from_id: Optional[RowId],
        to_id: RowId,
        ordered_ids: Sequence[RowId],
    ) -> SelectionState:
        """
        Select every row between two ids, inclusive (shift-click).

        The range is taken over ``ordered_ids``, the currently displayed
        order. When ``from_id`` is None the last toggled row is the origin;
        when the origin is not displayed only ``to_id`` is selected.
        """
        origin = from_id if from_id is not None else self.state.anchor
        ids = list(ordered_ids)
        try:
            end = ids.index(to_id)
        except ValueError:
            return self.state
        try:
            start = ids.index(origin) if origin is not None else end
        except ValueError:
            start = end
        low, high = sorted((start, end))
        span = ids[low:high + 1]

        s = self.state
        if s.all_filtered:
            self.state = replace(s, excluded=s.excluded.difference(span), anchor=to_id)
        else:
            self.state = replace(s, selected=s.selected.union(span), anchor=to_id)
        return self.state

    def select_all_filtered(self) -> SelectionState:
        """Select every row matching the current filter."""
        self.state = replace(self.state, all_filtered=True, excluded=frozenset())
        return self.state

    def select_ids(self, row_ids: Iterable[RowId]) -> SelectionState:
        """Add explicit ids (for example, every id on the rendered page)."""
        s = self.state
        ids = frozenset(row_ids)
        if s.all_filtered:
            self.state = replace(s, excluded=s.excluded - ids)
        else:
            self.state = replace(s, selected=s.selected | ids)
        return self.state

    def clear(self) -> SelectionState:
        """Drop every selection, including the select-all flag."""
        self.state = SelectionState()
        return self.state

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_selected(self, row_id: RowId) -> bool:
        """
        Whether a row is in the effective selection.

        In select-all mode this does not know the filter; callers holding
        the derived rows should also check the row is currently displayed.
        """
        s = self.state
        if s.all_filtered:
            return row_id not in s.excluded
        return row_id in s.selected

    def selected_count(
        self,
        total_filtered_count: int,
        filtered_ids: Optional[Collection] = None,
    ) -> int:
        """
        Number of selected rows within the filtered set.

        Args:
            total_filtered_count: Size of the current filtered result
            filtered_ids: Ids of that result; when given, stale ids and
                exclusions that do not match the filter are not counted

        Returns:
            Effective selection size
        """
        s = self.state
        if s.all_filtered:
            if filtered_ids is None:
                excluded = len(s.excluded)
            else:
                excluded = sum(1 for row_id in s.excluded if row_id in filtered_ids)
            return max(0, total_filtered_count - excluded)
        if filtered_ids is None:
            return min(len(s.selected), total_filtered_count)
        return sum(1 for row_id in s.selected if row_id in filtered_ids)

    def get_bulk_targets(self) -> list[RowId] | AllFiltered:
        """
        Rows a bulk action should act on.

        Returns:
            The explicit ids, or AllFiltered carrying the exclusions
        """
        s = self.state
        if s.all_filtered:
            return AllFiltered(excluded=s.excluded)
        return sorted(s.selected, key=lambda row_id: (type(row_id).__name__, row_id))

    @property
    def has_selection(self) -> bool:
        """Whether any bulk action is eligible."""
        s = self.state
        return s.all_filtered or bool(s.selected)

    def header_state(self, filtered_ids: Collection) -> HeaderCheckState:
        """Tri-state for the select-all header checkbox."""
        total = len(filtered_ids)
        count = self.selected_count(total, filtered_ids)
        if total == 0 or count == 0:
            return HeaderCheckState.NONE
        if count >= total:
            return HeaderCheckState.ALL
        return HeaderCheckState.SOME
