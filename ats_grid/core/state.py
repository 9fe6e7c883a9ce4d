"""
Explicit grid state and pure transition functions.

``GridState`` bundles every piece of user-controlled grid configuration.
The reducers below never mutate their input; each returns a new state,
so the engine can be driven and tested without any rendering framework.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional, Sequence

from ats_grid.core.columns import Column, ColumnModel, as_column_model
from ats_grid.core.exceptions import UnknownColumnError
from ats_grid.core.filtering import FilterState
from ats_grid.core.layout import ColumnLayoutManager, LayoutState
from ats_grid.core.row_store import RowId
from ats_grid.core.selection import SelectionManager, SelectionState
from ats_grid.core.sorting import SortEntry, SortState, next_sort_state
from ats_grid.utils.constants import PinSide, SortDirection


@dataclass(frozen=True)
class GridState:
    """Complete, immutable grid configuration."""

    filters: FilterState = field(default_factory=FilterState)
    sort: SortState = field(default_factory=SortState)
    layout: LayoutState = field(default_factory=LayoutState)
    selection: SelectionState = field(default_factory=SelectionState)
    quick_filter_preset_id: Optional[str] = None
    active_view_id: Optional[str] = None
    page: int = 1
    page_size: Optional[int] = None  # None: not paginated
    group_by: Optional[str] = None
    # Group keys flipped away from the default expansion
    group_toggles: frozenset = field(default_factory=frozenset)

    @classmethod
    def initial(cls, columns: ColumnModel | Sequence[Column]) -> "GridState":
        """Fresh state with the layout the columns declare."""
        return cls(layout=LayoutState.from_columns(as_column_model(columns)))


# -------------------------------------------------------------------------
# Filter reducers
# -------------------------------------------------------------------------


def apply_filter(state: GridState, column_id: str, value: Any) -> GridState:
    """Set (or, with a blank value, remove) one column filter."""
    return replace(state, filters=state.filters.with_filter(column_id, value))


def clear_filter(state: GridState, column_id: str) -> GridState:
    return replace(state, filters=state.filters.without_filter(column_id))


def clear_filters(state: GridState) -> GridState:
    """Remove every column filter and the quick filter."""
    return replace(state, filters=FilterState(), quick_filter_preset_id=None)


def set_quick_filter(state: GridState, text: Optional[str]) -> GridState:
    return replace(state, filters=state.filters.with_quick_filter(text))


# -------------------------------------------------------------------------
# Sort reducers
# -------------------------------------------------------------------------


def apply_sort(state: GridState, sort: SortState | Sequence[SortEntry]) -> GridState:
    """Replace the whole comparator chain."""
    if not isinstance(sort, SortState):
        sort = SortState(tuple(sort))
    return replace(state, sort=sort)


def sort_by(state: GridState, column_id: str, direction: SortDirection | str = SortDirection.ASC) -> GridState:
    """Sort by a single column."""
    return replace(state, sort=SortState((SortEntry(column_id, SortDirection(direction)),)))


def toggle_sort(state: GridState, column_id: str, additive: bool = False) -> GridState:
    """Header click: asc, then desc, then unsorted."""
    return replace(state, sort=next_sort_state(state.sort, column_id, additive=additive))


def clear_sort(state: GridState) -> GridState:
    return replace(state, sort=SortState())


# -------------------------------------------------------------------------
# Selection reducers
# -------------------------------------------------------------------------


def toggle_selection(state: GridState, row_id: RowId) -> GridState:
    return replace(state, selection=SelectionManager(state.selection).toggle(row_id))


def select_range(
    state: GridState,
    from_id: Optional[RowId],
    to_id: RowId,
    ordered_ids: Sequence[RowId],
) -> GridState:
    manager = SelectionManager(state.selection)
    return replace(state, selection=manager.select_range(from_id, to_id, ordered_ids))


def select_all_filtered(state: GridState) -> GridState:
    return replace(state, selection=SelectionManager(state.selection).select_all_filtered())


def select_ids(state: GridState, row_ids: Iterable[RowId]) -> GridState:
    """Add ids to the selection, e.g. every row on the current page."""
    return replace(state, selection=SelectionManager(state.selection).select_ids(row_ids))


def clear_selection(state: GridState) -> GridState:
    return replace(state, selection=SelectionState())


# -------------------------------------------------------------------------
# Pagination reducers
# -------------------------------------------------------------------------


def set_page(state: GridState, page: int) -> GridState:
    """Move to a 1-based page; the upper bound is clamped when rows are paged."""
    return replace(state, page=max(1, int(page)))


def set_page_size(state: GridState, page_size: Optional[int]) -> GridState:
    """Change rows per page and go back to the first page; None turns paging off."""
    if page_size is not None and page_size < 1:
        raise ValueError("page_size must be >= 1")
    return replace(state, page_size=page_size, page=1)


# -------------------------------------------------------------------------
# Grouping reducers
# -------------------------------------------------------------------------


def set_group_by(
    state: GridState,
    columns: ColumnModel | Sequence[Column],
    column_id: Optional[str],
) -> GridState:
    """Group by a column, or stop grouping with None. Group expansion resets."""
    if column_id is not None and column_id not in as_column_model(columns):
        raise UnknownColumnError(column_id)
    return replace(state, group_by=column_id, group_toggles=frozenset())


def toggle_group(state: GridState, key: str) -> GridState:
    """Flip one group between expanded and collapsed."""
    return replace(state, group_toggles=state.group_toggles ^ {key})


def set_group_toggles(state: GridState, keys: Iterable[str]) -> GridState:
    return replace(state, group_toggles=frozenset(keys))


# -------------------------------------------------------------------------
# Layout reducers
# -------------------------------------------------------------------------


def _layout(state: GridState, columns: ColumnModel | Sequence[Column]) -> ColumnLayoutManager:
    return ColumnLayoutManager(columns, state.layout)


def reorder_column(
    state: GridState,
    columns: ColumnModel | Sequence[Column],
    column_id: str,
    before_column_id: Optional[str],
) -> GridState:
    return replace(state, layout=_layout(state, columns).reorder(column_id, before_column_id))


def move_column(
    state: GridState,
    columns: ColumnModel | Sequence[Column],
    column_id: str,
    target_index: int,
) -> GridState:
    return replace(state, layout=_layout(state, columns).move(column_id, target_index))


def resize_column(
    state: GridState,
    columns: ColumnModel | Sequence[Column],
    column_id: str,
    width: float,
) -> GridState:
    return replace(state, layout=_layout(state, columns).resize(column_id, width))


def pin_column(
    state: GridState,
    columns: ColumnModel | Sequence[Column],
    column_id: str,
    side: Optional[PinSide | str],
) -> GridState:
    return replace(state, layout=_layout(state, columns).pin(column_id, side))


def hide_column(state: GridState, columns: ColumnModel | Sequence[Column], column_id: str) -> GridState:
    return replace(state, layout=_layout(state, columns).hide(column_id))


def show_column(state: GridState, columns: ColumnModel | Sequence[Column], column_id: str) -> GridState:
    return replace(state, layout=_layout(state, columns).show(column_id))


def reset_layout(state: GridState, columns: ColumnModel | Sequence[Column]) -> GridState:
    return replace(state, layout=LayoutState.from_columns(as_column_model(columns)))
