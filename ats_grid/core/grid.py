"""
Data grid facade.

``DataGrid`` owns one row store and one GridState, and keeps the derived
row list (filtered, then sorted) in step with them. Every operation runs
to completion before returning: filter, sort and row changes re-derive
synchronously, while selection and layout changes leave the derived list
untouched. The grid never renders anything itself; ``visible_rows``
returns plain RenderedRow records for whatever surface draws them.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Optional, Sequence

from ats_grid.core import state as reducers
from ats_grid.core.columns import (
    ACCESSOR_FAILED,
    Column,
    ColumnModel,
    as_column_model,
    cell_text,
    safe_value,
)
from ats_grid.core.exceptions import GridNotInitializedError, GridReentrancyError
from ats_grid.core.filtering import ActiveFilter, FilterEngine, FilterState, active_filters, filter_options
from ats_grid.core.grouping import RowGroup, group_rows
from ats_grid.core.layout import ColumnLayoutManager
from ats_grid.core.pagination import PageInfo, page_window
from ats_grid.core.row_store import DerivedRows, GetRowId, RowId, RowStore
from ats_grid.core.selection import AllFiltered, SelectionManager
from ats_grid.core.sorting import SortEngine, SortEntry, SortState
from ats_grid.core.state import GridState
from ats_grid.core.values import coerce_number
from ats_grid.core.virtualizer import Align, ViewportVirtualizer, ViewportWindow
from ats_grid.utils.config import GridSettings, get_settings
from ats_grid.utils.constants import (
    CELL_PLACEHOLDER,
    AggregateFunc,
    AuditType,
    ExportScope,
    HeaderCheckState,
    PinSide,
    SortDirection,
)
from ats_grid.utils.logger import audit_log, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class QuickFilterPreset:
    """A one-click filter (and optional sort) shortcut."""

    id: str
    label: str
    filters: dict[str, Any] = field(default_factory=dict)
    sort: tuple[SortEntry, ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "sort", SortState(tuple(self.sort)).entries)


@dataclass(frozen=True)
class BulkAction:
    """An action an external handler performs on the targeted rows."""

    id: str
    label: str
    handler: Callable[[list[Any]], Any]
    destructive: bool = False
    show_in_toolbar: bool = True
    shortcut: Optional[str] = None


@dataclass(frozen=True)
class RenderedRow:
    """One row of the visible window, ready for a renderer."""

    row_id: RowId
    index: int
    offset_top: float
    height: float
    cells: dict[str, str]
    selected: bool
    row: Any = None


class DataGrid:
    """
    Headless data grid.

    Example:
        grid = DataGrid(columns, get_row_id=lambda r: r["id"], rows=rows)
        grid.set_quick_filter("hired")
        grid.toggle_sort("name")
        window = grid.visible_rows(scroll_offset=0, viewport_height=600)

    Accessors must be pure. Mutating the grid from inside an accessor
    while rows are being derived raises GridReentrancyError.
    """

    def __init__(
        self,
        columns: ColumnModel | Sequence[Column],
        get_row_id: GetRowId,
        rows: Optional[Iterable[Any]] = None,
        settings: Optional[GridSettings] = None,
        quick_filter_presets: Iterable[QuickFilterPreset] = (),
        bulk_actions: Iterable[BulkAction] = (),
    ):
        """
        Initialize the grid.

        Args:
            columns: Column model or column list
            get_row_id: Returns a unique, stable id for a row
            rows: Initial rows; until rows are supplied, row-reading
                operations raise GridNotInitializedError
            settings: Grid settings; defaults to the configured ones
            quick_filter_presets: Presets offered by the quick filter bar
            bulk_actions: Actions offered for the selected rows
        """
        self.columns = as_column_model(columns)
        self.get_row_id = get_row_id
        self.settings = settings or get_settings().grid

        self.filter_engine = FilterEngine()
        self.sort_engine = SortEngine(self.settings.nulls_position)
        self.virtualizer = ViewportVirtualizer(
            overscan=self.settings.overscan,
            min_row_height=self.settings.min_row_height,
        )

        self.quick_filter_presets: dict[str, QuickFilterPreset] = {p.id: p for p in quick_filter_presets}
        self.bulk_actions: dict[str, BulkAction] = {a.id: a for a in bulk_actions}

        self._state = replace(GridState.initial(self.columns), page_size=self.settings.page_size)
        self._store: Optional[RowStore] = None
        self._derived: DerivedRows = DerivedRows()
        self._row_heights: dict[RowId, float] = {}
        # (scroll_offset, viewport_height, overscan) of the last computed window
        self._viewport: Optional[tuple[float, float, Optional[int]]] = None
        self._computing = False

        if rows is not None:
            self.set_rows(rows)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> GridState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._store is not None

    @property
    def store(self) -> RowStore:
        self._require_rows()
        return self._store

    @property
    def derived(self) -> DerivedRows:
        """The filtered and sorted rows."""
        self._require_rows()
        return self._derived

    def _require_rows(self) -> None:
        if self._store is None:
            raise GridNotInitializedError("DataGrid has no rows yet; call set_rows() first")

    def _check_reentrancy(self) -> None:
        if self._computing:
            raise GridReentrancyError(
                "Grid state cannot change while rows are being derived; accessors must be pure"
            )

    def _derive(self, store: RowStore, state: GridState) -> DerivedRows:
        self._computing = True
        try:
            filtered = self.filter_engine.apply(store.rows, state.filters, self.columns)
            ordered = self.sort_engine.apply(filtered, state.sort, self.columns)
            return DerivedRows.build(ordered, store.get_row_id)
        finally:
            self._computing = False

    def _commit(self, state: GridState, rederive: bool) -> GridState:
        self._check_reentrancy()
        if state.filters != self._state.filters and state.page != 1:
            # A new filter result starts from its first page
            state = replace(state, page=1)
        if rederive and self._store is not None:
            self._derived = self._derive(self._store, state)
            self.virtualizer.invalidate()
        self._state = state
        return state

    def set_state(self, state: GridState) -> GridState:
        """Replace the whole grid state and re-derive."""
        return self._commit(state, rederive=True)

    def set_rows(self, rows: Iterable[Any]) -> DerivedRows:
        """
        Replace the row collection.

        Raises:
            DuplicateRowIdError: if get_row_id collides for two rows
        """
        self._check_reentrancy()
        store = RowStore(rows, self.get_row_id)
        derived = self._derive(store, self._state)
        self._store = store
        self._derived = derived
        self._row_heights = {k: v for k, v in self._row_heights.items() if k in store}
        self.virtualizer.invalidate()
        logger.info(f"Grid loaded {len(store)} rows ({len(derived)} after filter)")
        return derived

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    def apply_filter(self, column_id: str, value: Any) -> GridState:
        """Set one column filter; a blank value removes it."""
        return self._commit(reducers.apply_filter(self._state, column_id, value), rederive=True)

    def clear_filter(self, column_id: str) -> GridState:
        return self._commit(reducers.clear_filter(self._state, column_id), rederive=True)

    def clear_filters(self) -> GridState:
        return self._commit(reducers.clear_filters(self._state), rederive=True)

    def set_quick_filter(self, text: Optional[str]) -> GridState:
        return self._commit(reducers.set_quick_filter(self._state, text), rederive=True)

    def apply_quick_filter_preset(self, preset_id: Optional[str]) -> GridState:
        """
        Apply a quick filter preset, replacing the column filters.

        The preset's sort, when it has one, replaces the sort as well.
        Passing None clears the active preset's filters.

        Raises:
            ValueError: if the preset id is unknown
        """
        if preset_id is None:
            state = replace(
                self._state,
                filters=FilterState(quick_filter=self._state.filters.quick_filter),
                quick_filter_preset_id=None,
            )
            return self._commit(state, rederive=True)

        preset = self.quick_filter_presets.get(preset_id)
        if preset is None:
            raise ValueError(f"Unknown quick filter preset: {preset_id!r}")

        filters = FilterState(quick_filter=self._state.filters.quick_filter)
        for column_id, value in preset.filters.items():
            filters = filters.with_filter(column_id, value)
        sort = SortState(preset.sort) if preset.sort else self._state.sort
        state = replace(self._state, filters=filters, sort=sort, quick_filter_preset_id=preset.id)
        logger.debug(f"Applied quick filter preset {preset.id!r}")
        return self._commit(state, rederive=True)

    def active_filters(self) -> list[ActiveFilter]:
        return active_filters(self._state.filters, self.columns)

    def filter_options(self, column_id: str) -> list[str]:
        """Options for a select filter, drawn from every row."""
        return filter_options(self.store.rows, self.columns[column_id])

    # -------------------------------------------------------------------------
    # Sort
    # -------------------------------------------------------------------------

    def apply_sort(self, sort: SortState | Sequence[SortEntry]) -> GridState:
        return self._commit(reducers.apply_sort(self._state, sort), rederive=True)

    def sort_by(self, column_id: str, direction: SortDirection | str = SortDirection.ASC) -> GridState:
        return self._commit(reducers.sort_by(self._state, column_id, direction), rederive=True)

    def toggle_sort(self, column_id: str, additive: bool = False) -> GridState:
        return self._commit(reducers.toggle_sort(self._state, column_id, additive), rederive=True)

    def clear_sort(self) -> GridState:
        return self._commit(reducers.clear_sort(self._state), rederive=True)

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    @property
    def _selection(self) -> SelectionManager:
        return SelectionManager(self._state.selection)

    def toggle_selection(self, row_id: RowId) -> GridState:
        return self._commit(reducers.toggle_selection(self._state, row_id), rederive=False)

    def select_range(self, from_id: Optional[RowId], to_id: RowId) -> GridState:
        """Shift-click selection over the displayed order."""
        ordered = self.derived.ids
        return self._commit(reducers.select_range(self._state, from_id, to_id, ordered), rederive=False)

    def select_all_filtered(self) -> GridState:
        return self._commit(reducers.select_all_filtered(self._state), rederive=False)

    def clear_selection(self) -> GridState:
        return self._commit(reducers.clear_selection(self._state), rederive=False)

    def is_selected(self, row_id: RowId) -> bool:
        """Whether a row is selected; in select-all mode only displayed rows count."""
        if self._state.selection.all_filtered and self._store is not None and row_id not in self._derived:
            return False
        return self._selection.is_selected(row_id)

    def selected_count(self) -> int:
        derived = self.derived
        return self._selection.selected_count(len(derived), derived.id_set)

    def header_check_state(self) -> HeaderCheckState:
        return self._selection.header_state(self.derived.id_set)

    @property
    def has_selection(self) -> bool:
        return self._selection.has_selection

    # -------------------------------------------------------------------------
    # Bulk actions
    # -------------------------------------------------------------------------

    def get_bulk_targets(self) -> list[RowId] | AllFiltered:
        """Explicit ids, or AllFiltered carrying the exclusions."""
        return self._selection.get_bulk_targets()

    def resolve_bulk_targets(self) -> list[Any]:
        """
        Rows a bulk action acts on, in displayed order.

        Selected ids hidden by the current filter are not included.
        """
        derived = self.derived
        targets = self.get_bulk_targets()
        if isinstance(targets, AllFiltered):
            return [row for row, row_id in zip(derived.rows, derived.ids) if targets.includes(row_id)]
        wanted = set(targets)
        return [row for row, row_id in zip(derived.rows, derived.ids) if row_id in wanted]

    def run_bulk_action(self, action: BulkAction | str) -> Any:
        """
        Hand the targeted rows to an action's handler.

        The grid never changes rows itself; callers that mutate data
        supply the new rows through ``set_rows`` afterwards.

        Returns:
            The handler's return value, or None when nothing is selected
        """
        if isinstance(action, str):
            if action not in self.bulk_actions:
                raise ValueError(f"Unknown bulk action: {action!r}")
            action = self.bulk_actions[action]

        rows = self.resolve_bulk_targets()
        if not rows:
            logger.debug(f"Bulk action {action.id!r} skipped: no rows selected")
            return None

        audit_log(
            f"bulk_{action.id}",
            {"action": action.id, "row_count": len(rows), "all_filtered": self._state.selection.all_filtered},
            AuditType.BULK_ACTION.value,
        )
        return action.handler(rows)

    # -------------------------------------------------------------------------
    # Layout
    # -------------------------------------------------------------------------

    @property
    def _layout(self) -> ColumnLayoutManager:
        return ColumnLayoutManager(self.columns, self._state.layout)

    def reorder_column(self, column_id: str, before_column_id: Optional[str]) -> GridState:
        return self._commit(
            reducers.reorder_column(self._state, self.columns, column_id, before_column_id), rederive=False
        )

    def move_column(self, column_id: str, target_index: int) -> GridState:
        return self._commit(
            reducers.move_column(self._state, self.columns, column_id, target_index), rederive=False
        )

    def resize_column(self, column_id: str, width: float) -> GridState:
        return self._commit(reducers.resize_column(self._state, self.columns, column_id, width), rederive=False)

    def pin_column(self, column_id: str, side: Optional[PinSide | str]) -> GridState:
        return self._commit(reducers.pin_column(self._state, self.columns, column_id, side), rederive=False)

    def hide_column(self, column_id: str) -> GridState:
        return self._commit(reducers.hide_column(self._state, self.columns, column_id), rederive=False)

    def show_column(self, column_id: str) -> GridState:
        return self._commit(reducers.show_column(self._state, self.columns, column_id), rederive=False)

    def reset_layout(self) -> GridState:
        return self._commit(reducers.reset_layout(self._state, self.columns), rederive=False)

    def visible_columns(self) -> list[Column]:
        """Rendered columns: start-pinned, free, end-pinned."""
        return [self.columns[c] for c in self._layout.render_order()]

    def column_width(self, column_id: str) -> float:
        return self._layout.width_of(column_id)

    def total_width(self) -> float:
        return self._layout.total_width()

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    @property
    def is_paginated(self) -> bool:
        return self._state.page_size is not None

    def set_page_size(self, page_size: Optional[int]) -> GridState:
        """Rows per page; resets to the first page. None turns paging off."""
        return self._commit(reducers.set_page_size(self._state, page_size), rederive=False)

    def set_page(self, page: int) -> PageInfo:
        """
        Go to a 1-based page, clamped to the pages the derived rows fill.

        Raises:
            ValueError: if the grid is not paginated
        """
        if self._state.page_size is None:
            raise ValueError("Grid is not paginated; call set_page_size() first")
        info = page_window(len(self.derived), page, self._state.page_size)
        self._commit(reducers.set_page(self._state, info.page), rederive=False)
        return info

    def page_info(self) -> PageInfo:
        """
        The current page over the derived rows.

        An unpaginated grid reports a single page holding every row.
        """
        total = len(self.derived)
        if self._state.page_size is None:
            return page_window(total, 1, max(1, total))
        return page_window(total, self._state.page, self._state.page_size)

    def page_rows(self) -> tuple[Any, ...]:
        info = self.page_info()
        return self._derived.rows[info.start:info.end]

    def page_ids(self) -> tuple[RowId, ...]:
        info = self.page_info()
        return self._derived.ids[info.start:info.end]

    def select_page(self) -> GridState:
        """Add every row on the current page to the selection."""
        return self._commit(reducers.select_ids(self._state, self.page_ids()), rederive=False)

    # -------------------------------------------------------------------------
    # Grouping
    # -------------------------------------------------------------------------

    def set_group_by(self, column_id: Optional[str]) -> GridState:
        """Group the derived rows by a column; None stops grouping."""
        return self._commit(reducers.set_group_by(self._state, self.columns, column_id), rederive=False)

    def groups(self) -> list[RowGroup]:
        """
        Derived rows grouped by the ``group_by`` column, in displayed order.

        Returns an empty list when the grid is not grouped.
        """
        derived = self.derived
        if self._state.group_by is None:
            return []
        self._computing = True
        try:
            return group_rows(
                derived.rows,
                derived.ids,
                self.columns[self._state.group_by],
                self._state.group_toggles,
                self.settings.groups_expanded_by_default,
            )
        finally:
            self._computing = False

    def toggle_group(self, key: str) -> GridState:
        return self._commit(reducers.toggle_group(self._state, key), rederive=False)

    def expand_all_groups(self) -> GridState:
        return self._set_all_groups(expanded=True)

    def collapse_all_groups(self) -> GridState:
        return self._set_all_groups(expanded=False)

    def _set_all_groups(self, expanded: bool) -> GridState:
        if expanded == self.settings.groups_expanded_by_default:
            keys: list[str] = []
        else:
            keys = [group.key for group in self.groups()]
        return self._commit(reducers.set_group_toggles(self._state, keys), rederive=False)

    # -------------------------------------------------------------------------
    # Virtualization
    # -------------------------------------------------------------------------

    def _row_height(self, index: int) -> float:
        row_id = self._derived.ids[index]
        return self._row_heights.get(row_id, self.settings.effective_row_height)

    def set_row_height(self, row_id: RowId, height: Optional[float]) -> None:
        """Record a measured height for a row; None restores the default."""
        self._check_reentrancy()
        if height is None:
            self._row_heights.pop(row_id, None)
        else:
            self._row_heights[row_id] = float(height)
        self.virtualizer.invalidate()

    def total_height(self) -> float:
        return self.virtualizer.total_height(len(self.derived), self._row_height)

    def compute_window(
        self,
        scroll_offset: float,
        viewport_height: float,
        overscan: Optional[int] = None,
    ) -> ViewportWindow:
        window = self.virtualizer.compute_window(
            len(self.derived), scroll_offset, viewport_height, self._row_height, overscan
        )
        self._viewport = (scroll_offset, viewport_height, overscan)
        return window

    def visible_rows(
        self,
        scroll_offset: float,
        viewport_height: float,
        overscan: Optional[int] = None,
    ) -> list[RenderedRow]:
        """
        Rows to render for a scroll position.

        Cells are keyed by column id in rendered column order. A cell whose
        accessor fails shows a placeholder instead.
        """
        window = self.compute_window(scroll_offset, viewport_height, overscan)
        columns = self.visible_columns()
        selection = self._selection
        derived = self._derived

        rendered = []
        self._computing = True
        try:
            for position, index in enumerate(window.indexes):
                row = derived.rows[index]
                row_id = derived.ids[index]
                cells = {}
                for column in columns:
                    value = safe_value(column, row)
                    cells[column.id] = CELL_PLACEHOLDER if value is ACCESSOR_FAILED else cell_text(value)
                rendered.append(RenderedRow(
                    row_id=row_id,
                    index=index,
                    offset_top=window.row_offsets[position],
                    height=window.row_heights[position],
                    cells=cells,
                    selected=selection.is_selected(row_id),
                    row=row,
                ))
        finally:
            self._computing = False
        return rendered

    def scroll_offset_for_row(
        self,
        row_id: RowId,
        viewport_height: float,
        align: Align = "auto",
        current_offset: float = 0.0,
    ) -> Optional[float]:
        """Scroll offset that brings a row into view, or None if it is filtered out."""
        derived = self.derived
        if row_id not in derived:
            return None
        index = derived.ids.index(row_id)
        return self.virtualizer.offset_for_index(
            index, len(derived), viewport_height, self._row_height, align, current_offset
        )

    # -------------------------------------------------------------------------
    # Export and aggregates
    # -------------------------------------------------------------------------

    def export_rows(self, scope: ExportScope | str = ExportScope.FILTERED) -> tuple[Any, ...]:
        """
        Read-only snapshot of rows for an external writer.

        ``visible`` is the rows inside the last requested viewport, with
        the window recomputed against the current derived rows;
        ``filtered`` the derived rows in displayed order, ``all`` every row
        in input order.
        """
        scope = ExportScope(scope)
        if scope is ExportScope.ALL:
            return self.store.rows
        derived = self.derived
        if scope is ExportScope.FILTERED:
            return derived.rows
        if self._viewport is None:
            return ()
        window = self.compute_window(*self._viewport)
        if window.is_empty:
            return ()
        last = min(window.last_in_view, len(derived) - 1)
        return derived.rows[window.first_in_view:last + 1]

    def export_records(self, scope: ExportScope | str = ExportScope.FILTERED) -> list[dict[str, str]]:
        """Rows as label-keyed text records over the rendered columns."""
        columns = self.visible_columns()
        records = []
        for row in self.export_rows(scope):
            records.append({column.label: cell_text(safe_value(column, row)) for column in columns})
        return records

    def aggregate(self, column_id: str, func: Optional[AggregateFunc | str] = None) -> Optional[float]:
        """
        Aggregate a column over the filtered rows.

        ``count`` counts non-empty cells; the other functions use numeric
        cells only and return None when there are none.
        """
        column = self.columns[column_id]
        func = AggregateFunc(func or column.aggregate or AggregateFunc.COUNT)
        values = [safe_value(column, row) for row in self.derived.rows]
        present = [v for v in values if v is not None and v is not ACCESSOR_FAILED]

        if func is AggregateFunc.COUNT:
            return len(present)

        numbers = [n for n in (coerce_number(v) for v in present) if n is not None and math.isfinite(n)]
        if not numbers:
            return None
        if func is AggregateFunc.SUM:
            return sum(numbers)
        if func is AggregateFunc.AVG:
            return sum(numbers) / len(numbers)
        if func is AggregateFunc.MIN:
            return min(numbers)
        return max(numbers)
