"""
Grid-wide constants for ats-grid.

This module contains the enums and default values shared by the grid core,
the ATS presets and the CLI. Modify these values to customize behavior
without changing code logic.
"""

from enum import Enum
from typing import Final


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "ats-grid"
APP_DISPLAY_NAME: Final[str] = "ATS Data Grid Core"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# Column Defaults
# =============================================================================

DEFAULT_COLUMN_WIDTH: Final[int] = 150
DEFAULT_MIN_COLUMN_WIDTH: Final[int] = 50

# Rendered in place of a cell whose accessor raised
CELL_PLACEHOLDER: Final[str] = "—"


# =============================================================================
# Viewport Defaults
# =============================================================================

DEFAULT_OVERSCAN: Final[int] = 5
MIN_ROW_HEIGHT: Final[float] = 1.0


# =============================================================================
# Pagination and Grouping
# =============================================================================

DEFAULT_PAGE_SIZE: Final[int] = 10
PAGE_SIZE_OPTIONS: Final[tuple[int, ...]] = (10, 25, 50, 100)

# Label of the group holding rows with an empty grouping value
NO_VALUE_GROUP_LABEL: Final[str] = "(No value)"


# =============================================================================
# Enums
# =============================================================================


class SortDirection(str, Enum):
    """Direction of a single sort entry."""

    ASC = "asc"
    DESC = "desc"


class NullsPosition(str, Enum):
    """Where missing values land in a sorted result, independent of direction."""

    FIRST = "first"
    LAST = "last"


class PinSide(str, Enum):
    """Side a pinned column is rendered on."""

    START = "start"
    END = "end"


class FilterKind(str, Enum):
    """How a column interprets its filter value."""

    TEXT = "text"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    NUMBER = "number"
    DATE = "date"
    DATE_RANGE = "date_range"


class FieldType(str, Enum):
    """Semantic type of a column's values."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    USER = "user"
    BADGE = "badge"
    LINK = "link"
    EMAIL = "email"
    PHONE = "phone"
    CURRENCY = "currency"
    PERCENT = "percent"
    RATING = "rating"
    CHECKBOX = "checkbox"
    PROGRESS = "progress"


NUMERIC_FIELD_TYPES: Final[frozenset[FieldType]] = frozenset({
    FieldType.NUMBER,
    FieldType.CURRENCY,
    FieldType.PERCENT,
    FieldType.RATING,
    FieldType.PROGRESS,
})

DATE_FIELD_TYPES: Final[frozenset[FieldType]] = frozenset({
    FieldType.DATE,
    FieldType.DATETIME,
})


class AggregateFunc(str, Enum):
    """Summary computed over a column of the filtered rows."""

    SUM = "sum"
    COUNT = "count"
    AVG = "avg"
    MIN = "min"
    MAX = "max"


class TableDensity(str, Enum):
    """Row density presets."""

    COMPACT = "compact"
    DEFAULT = "default"
    COMFORTABLE = "comfortable"


# Row heights in pixels for each density preset
DENSITY_ROW_HEIGHTS: Final[dict[TableDensity, int]] = {
    TableDensity.COMPACT: 40,
    TableDensity.DEFAULT: 48,
    TableDensity.COMFORTABLE: 60,
}


class ExportScope(str, Enum):
    """Which rows an export hands to the writer."""

    VISIBLE = "visible"
    FILTERED = "filtered"
    ALL = "all"


class HeaderCheckState(str, Enum):
    """Tri-state of the select-all header checkbox."""

    NONE = "none"
    SOME = "some"
    ALL = "all"


class AuditType(str, Enum):
    """Categories written to the audit log."""

    BULK_ACTION = "BULK_ACTION"
    VIEW = "VIEW"
