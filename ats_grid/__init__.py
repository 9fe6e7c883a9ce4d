"""
ats-grid: headless data-grid core for applicant tracking tables.

Filtering, sorting, selection, column layout, viewport virtualization
and saved views over an in-memory row collection.
"""

__app_name__ = "ats-grid"
__version__ = "0.1.0"

from ats_grid.core import (
    AllFiltered,
    Column,
    ColumnModel,
    DataGrid,
    GridState,
    SavedViewManager,
    ViewportVirtualizer,
)

__all__ = [
    "__app_name__",
    "__version__",
    "AllFiltered",
    "Column",
    "ColumnModel",
    "DataGrid",
    "GridState",
    "SavedViewManager",
    "ViewportVirtualizer",
]
