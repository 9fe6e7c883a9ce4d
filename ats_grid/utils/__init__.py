"""
Utility modules for ats-grid.

This package contains shared utilities used across the library:
- config: Configuration management
- logger: Logging infrastructure
- constants: Grid-wide constants and enums
"""

from ats_grid.utils.config import (
    AppSettings,
    DatabaseSettings,
    GridSettings,
    LoggingSettings,
    ViewStoreSettings,
    get_settings,
    reload_settings,
    ROOT_DIR,
    DATA_DIR,
)
from ats_grid.utils.constants import (
    APP_NAME,
    APP_DISPLAY_NAME,
    VERSION,
    CELL_PLACEHOLDER,
    AggregateFunc,
    ExportScope,
    FieldType,
    FilterKind,
    HeaderCheckState,
    NullsPosition,
    PinSide,
    SortDirection,
    TableDensity,
)
from ats_grid.utils.logger import (
    setup_logging,
    get_logger,
    audit_log,
)

__all__ = [
    # Config
    "AppSettings",
    "DatabaseSettings",
    "GridSettings",
    "LoggingSettings",
    "ViewStoreSettings",
    "get_settings",
    "reload_settings",
    "ROOT_DIR",
    "DATA_DIR",
    # Constants
    "APP_NAME",
    "APP_DISPLAY_NAME",
    "VERSION",
    "CELL_PLACEHOLDER",
    "AggregateFunc",
    "ExportScope",
    "FieldType",
    "FilterKind",
    "HeaderCheckState",
    "NullsPosition",
    "PinSide",
    "SortDirection",
    "TableDensity",
    # Logger
    "setup_logging",
    "get_logger",
    "audit_log",
]
