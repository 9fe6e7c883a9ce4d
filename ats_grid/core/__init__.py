"""
Grid core for ats-grid.

Submodules:
- columns: Column model and cell access
- row_store: Row snapshots and derived rows
- filtering: Filter engine
- sorting: Sort engine
- selection: Selection manager
- layout: Column layout manager
- pagination: Page windows over the derived rows
- grouping: Group-by over the derived rows
- virtualizer: Viewport virtualizer
- saved_views: Saved view manager
- state: Grid state and reducers
- grid: DataGrid facade
"""

from .columns import ACCESSOR_FAILED, Column, ColumnModel, cell_text, safe_value
from .exceptions import (
    DuplicateRowIdError,
    GridError,
    GridNotInitializedError,
    GridReentrancyError,
    UnknownColumnError,
    ViewNotFoundError,
)
from .filtering import ActiveFilter, FilterEngine, FilterState
from .grid import BulkAction, DataGrid, QuickFilterPreset, RenderedRow
from .grouping import RowGroup, group_rows
from .layout import ColumnLayoutManager, LayoutState
from .pagination import PageInfo, page_window
from .row_store import DerivedRows, RowStore
from .saved_views import SavedViewManager, ViewApplyResult
from .selection import AllFiltered, SelectionManager, SelectionState
from .sorting import SortEngine, SortEntry, SortState
from .state import GridState
from .virtualizer import ViewportVirtualizer, ViewportWindow

__all__ = [
    # Columns
    "ACCESSOR_FAILED",
    "Column",
    "ColumnModel",
    "cell_text",
    "safe_value",
    # Errors
    "DuplicateRowIdError",
    "GridError",
    "GridNotInitializedError",
    "GridReentrancyError",
    "UnknownColumnError",
    "ViewNotFoundError",
    # Engines and managers
    "ActiveFilter",
    "FilterEngine",
    "FilterState",
    "SortEngine",
    "SortEntry",
    "SortState",
    "SelectionManager",
    "SelectionState",
    "AllFiltered",
    "ColumnLayoutManager",
    "LayoutState",
    "ViewportVirtualizer",
    "ViewportWindow",
    "PageInfo",
    "page_window",
    "RowGroup",
    "group_rows",
    "SavedViewManager",
    "ViewApplyResult",
    # Rows and state
    "RowStore",
    "DerivedRows",
    "GridState",
    # Facade
    "DataGrid",
    "QuickFilterPreset",
    "BulkAction",
    "RenderedRow",
]
