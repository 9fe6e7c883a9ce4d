"""
Column model for the grid core.

A column is a typed, named projection of a row. The core never inspects a
row's shape except through the column's accessor, so rows may be dicts,
dataclasses, pydantic models or any other object.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, Optional

from ats_grid.core.exceptions import GridError, UnknownColumnError
from ats_grid.utils.constants import (
    DATE_FIELD_TYPES,
    DEFAULT_COLUMN_WIDTH,
    DEFAULT_MIN_COLUMN_WIDTH,
    NUMERIC_FIELD_TYPES,
    AggregateFunc,
    FieldType,
    FilterKind,
    PinSide,
)

Accessor = Callable[[Any], Any]


class _AccessorFailed:
    """Sentinel returned by safe_value when an accessor raises."""

    _instance: Optional["_AccessorFailed"] = None

    def __new__(cls) -> "_AccessorFailed":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ACCESSOR_FAILED"

    def __bool__(self) -> bool:
        return False


ACCESSOR_FAILED = _AccessorFailed()


@dataclass(frozen=True)
class Column:
    """
    Description of one grid column.

    Either ``accessor`` (a callable taking the row) or ``accessor_key`` (a
    mapping key or attribute name) supplies the cell value; when neither is
    given the column id is used as the key. Accessors must be pure.
    """

    id: str
    label: str = ""
    accessor: Optional[Accessor] = None
    accessor_key: Optional[str] = None
    width: float = DEFAULT_COLUMN_WIDTH
    min_width: float = DEFAULT_MIN_COLUMN_WIDTH
    sortable: bool = True
    filterable: bool = True  # Included in the quick filter
    pinned: Optional[PinSide] = None
    hidden: bool = False
    field_type: FieldType = FieldType.TEXT
    filter_kind: Optional[FilterKind] = None
    filter_options: tuple[str, ...] = ()
    resizable: bool = True
    aggregate: Optional[AggregateFunc] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Column id must be a non-empty string")
        if not self.label:
            object.__setattr__(self, "label", self.id)
        if self.accessor is None and self.accessor_key is None:
            object.__setattr__(self, "accessor_key", self.id)
        if self.pinned is not None and not isinstance(self.pinned, PinSide):
            object.__setattr__(self, "pinned", PinSide(self.pinned))
        if not isinstance(self.field_type, FieldType):
            object.__setattr__(self, "field_type", FieldType(self.field_type))
        if self.filter_kind is not None and not isinstance(self.filter_kind, FilterKind):
            object.__setattr__(self, "filter_kind", FilterKind(self.filter_kind))
        if self.aggregate is not None and not isinstance(self.aggregate, AggregateFunc):
            object.__setattr__(self, "aggregate", AggregateFunc(self.aggregate))
        if self.min_width < 0:
            object.__setattr__(self, "min_width", 0)
        if self.width < self.min_width:
            object.__setattr__(self, "width", self.min_width)
        object.__setattr__(self, "filter_options", tuple(self.filter_options))

    def value(self, row: Any) -> Any:
        """Read this column's value from a row. May raise if the accessor does."""
        if self.accessor is not None:
            return self.accessor(row)
        if isinstance(row, Mapping):
            return row.get(self.accessor_key)
        return getattr(row, self.accessor_key, None)

    @property
    def effective_filter_kind(self) -> FilterKind:
        """Filter kind, inferred from the field type when not declared."""
        if self.filter_kind is not None:
            return self.filter_kind
        if self.field_type in NUMERIC_FIELD_TYPES:
            return FilterKind.NUMBER
        if self.field_type in DATE_FIELD_TYPES:
            return FilterKind.DATE_RANGE
        if self.field_type == FieldType.SELECT:
            return FilterKind.SELECT
        if self.field_type == FieldType.MULTI_SELECT:
            return FilterKind.MULTI_SELECT
        return FilterKind.TEXT

    @property
    def is_date(self) -> bool:
        return self.field_type in DATE_FIELD_TYPES


def safe_value(column: Column, row: Any) -> Any:
    """
    Read a cell, returning ACCESSOR_FAILED instead of raising.

    One malformed row must never abort a filter, sort or render pass.
    Grid errors raised from inside an accessor still propagate.
    """
    try:
        return column.value(row)
    except GridError:
        raise
    except Exception:
        return ACCESSOR_FAILED


def cell_text(value: Any) -> str:
    """Stringify a cell value for searching, display and export."""
    if value is None or value is ACCESSOR_FAILED:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple, set, frozenset)):
        return ", ".join(cell_text(v) for v in value)
    return str(value)


class ColumnModel:
    """
    Ordered, id-indexed collection of columns.

    The declared order is the default layout order.
    """

    def __init__(self, columns: Iterable[Column]):
        self._columns: tuple[Column, ...] = tuple(columns)
        self._by_id: dict[str, Column] = {}
        for column in self._columns:
            if column.id in self._by_id:
                raise ValueError(f"Duplicate column id: {column.id!r}")
            self._by_id[column.id] = column

    def __iter__(self) -> Iterator[Column]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __contains__(self, column_id: object) -> bool:
        return column_id in self._by_id

    def __getitem__(self, column_id: str) -> Column:
        try:
            return self._by_id[column_id]
        except KeyError:
            raise UnknownColumnError(column_id) from None

    def get(self, column_id: str) -> Optional[Column]:
        """Get a column by id, or None."""
        return self._by_id.get(column_id)

    @property
    def ids(self) -> tuple[str, ...]:
        """Column ids in declared order."""
        return tuple(c.id for c in self._columns)

    @property
    def filterable(self) -> tuple[Column, ...]:
        """Columns searched by the quick filter."""
        return tuple(c for c in self._columns if c.filterable)


def as_column_model(columns: "ColumnModel | Iterable[Column]") -> ColumnModel:
    """Accept either a ColumnModel or a plain column sequence."""
    if isinstance(columns, ColumnModel):
        return columns
    return ColumnModel(columns)
