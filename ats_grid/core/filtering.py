"""
Filter engine for the grid core.

Evaluates per-column filters and the free-text quick filter against a row
collection. Column filters AND together, the quick filter ORs across every
filterable column, and the two results AND. Anything the engine cannot
interpret imposes no constraint, so the grid stays usable after a column
changes type.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Optional, Sequence

from ats_grid.core.columns import (
    ACCESSOR_FAILED,
    Column,
    ColumnModel,
    as_column_model,
    cell_text,
    safe_value,
)
from ats_grid.core.values import (
    MS_PER_DAY,
    coerce_number,
    is_date_only,
    is_number,
    parse_date_like,
    to_epoch_ms,
)
from ats_grid.utils.constants import FilterKind
from ats_grid.utils.logger import get_logger

logger = get_logger(__name__)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


@dataclass(frozen=True)
class FilterState:
    """
    Per-column filter values plus the quick-filter text.

    Absence of a column key means "no constraint", never "exclude all".
    Treat instances as immutable; every change returns a new state.
    """

    column_filters: dict[str, Any] = field(default_factory=dict)
    quick_filter: str = ""

    def with_filter(self, column_id: str, value: Any) -> "FilterState":
        """Set a column filter; a blank value removes it."""
        if _is_blank(value):
            return self.without_filter(column_id)
        filters = dict(self.column_filters)
        filters[column_id] = value
        return replace(self, column_filters=filters)

    def without_filter(self, column_id: str) -> "FilterState":
        if column_id not in self.column_filters:
            return self
        filters = dict(self.column_filters)
        del filters[column_id]
        return replace(self, column_filters=filters)

    def with_quick_filter(self, text: Optional[str]) -> "FilterState":
        return replace(self, quick_filter=text or "")

    def cleared(self) -> "FilterState":
        return FilterState()

    @property
    def is_empty(self) -> bool:
        return not self.column_filters and not self.quick_filter.strip()


# -------------------------------------------------------------------------
# Normalizers: turn a raw filter value into a predicate argument, or None
# when the value imposes no constraint.
# -------------------------------------------------------------------------


def _normalize_text(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip().casefold()


def _normalize_select(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value if value.strip() else None
    if is_number(value) or isinstance(value, bool):
        return str(value)
    return None


def _normalize_multi_select(value: Any) -> Optional[frozenset[str]]:
    if isinstance(value, str):
        return frozenset({value}) if value.strip() else None
    if not isinstance(value, (list, tuple, set, frozenset)):
        return None
    options = frozenset(cell_text(v) for v in value if v is not None)
    return options or None


def _normalize_number(value: Any) -> Optional[tuple[Optional[float], Optional[float]]]:
    if is_number(value):
        number = coerce_number(value)
        return None if number is None else (number, number)
    if isinstance(value, Mapping):
        low, high = value.get("min"), value.get("max")
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        low, high = value
    else:
        return None
    bounds = []
    for bound in (low, high):
        if bound is None:
            bounds.append(None)
        elif is_number(bound) and coerce_number(bound) is not None:
            bounds.append(float(bound))
        else:
            return None
    if bounds == [None, None]:
        return None
    return bounds[0], bounds[1]


def _day_span(value: Any) -> Optional[tuple[float, float]]:
    parsed = parse_date_like(value)
    if parsed is None:
        return None
    day = parsed if is_date_only(parsed) else parsed.date()
    start = to_epoch_ms(day)
    return start, start + MS_PER_DAY - 1


def _normalize_date(value: Any) -> Optional[tuple[float, float]]:
    return _day_span(value)


def _normalize_date_range(value: Any) -> Optional[tuple[Optional[float], Optional[float]]]:
    if isinstance(value, Mapping):
        start, end = value.get("start"), value.get("end")
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        start, end = value
    else:
        return None

    low = high = None
    if start is not None:
        low = to_epoch_ms(start)
        if low is None:
            return None
    if end is not None:
        parsed_end = parse_date_like(end)
        if parsed_end is None:
            return None
        # A date-only end includes the whole day
        high = _day_span(parsed_end)[1] if is_date_only(parsed_end) else to_epoch_ms(parsed_end)
    if low is None and high is None:
        return None
    return low, high


# -------------------------------------------------------------------------
# Predicates: (cell value, normalized filter) -> bool. A None cell never
# matches an active constraint.
# -------------------------------------------------------------------------


def _match_text(cell: Any, needle: str) -> bool:
    return needle in cell_text(cell).casefold()


def _match_select(cell: Any, expected: str) -> bool:
    return cell_text(cell) == expected


def _match_multi_select(cell: Any, options: frozenset[str]) -> bool:
    if isinstance(cell, (list, tuple, set, frozenset)):
        return any(cell_text(v) in options for v in cell)
    return cell_text(cell) in options


def _within(value: Optional[float], bounds: tuple[Optional[float], Optional[float]]) -> bool:
    if value is None:
        return False
    low, high = bounds
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def _match_number(cell: Any, bounds: tuple[Optional[float], Optional[float]]) -> bool:
    return _within(coerce_number(cell), bounds)


def _match_date(cell: Any, bounds: tuple[Optional[float], Optional[float]]) -> bool:
    return _within(to_epoch_ms(cell), bounds)


FilterSpec = tuple[Callable[[Any], Any], Callable[[Any, Any], bool]]

FILTER_KINDS: dict[FilterKind, FilterSpec] = {
    FilterKind.TEXT: (_normalize_text, _match_text),
    FilterKind.SELECT: (_normalize_select, _match_select),
    FilterKind.MULTI_SELECT: (_normalize_multi_select, _match_multi_select),
    FilterKind.NUMBER: (_normalize_number, _match_number),
    FilterKind.DATE: (_normalize_date, _match_date),
    FilterKind.DATE_RANGE: (_normalize_date_range, _match_date),
}


@dataclass(frozen=True)
class ActiveFilter:
    """One active column constraint, for display as a removable chip."""

    column_id: str
    label: str
    kind: FilterKind
    value: Any
    display: str


class FilterEngine:
    """
    Applies a FilterState to rows.

    Accessors are evaluated once per row and column. A throwing accessor
    makes that row fail that column's filter (and contribute nothing to the
    quick filter) without aborting the pass.
    """

    def apply(
        self,
        rows: Iterable[Any],
        filters: FilterState,
        columns: ColumnModel | Sequence[Column],
    ) -> list[Any]:
        """
        Filter rows.

        Args:
            rows: Input rows, in display order
            filters: Column filters and quick filter to apply
            columns: Column model used to read cells

        Returns:
            Matching rows, in input order
        """
        model = as_column_model(columns)
        checks = self._resolve_checks(filters, model)
        needle = _normalize_text(filters.quick_filter)
        search_columns = model.filterable if needle is not None else ()

        if not checks and needle is None:
            return list(rows)

        result = [
            row for row in rows
            if self._row_matches(row, checks) and self._quick_matches(row, needle, search_columns)
        ]
        logger.debug(
            f"Filtered to {len(result)} rows "
            f"({len(checks)} column filters, quick filter={'on' if needle else 'off'})"
        )
        return result

    def matches(self, row: Any, filters: FilterState, columns: ColumnModel | Sequence[Column]) -> bool:
        """Check a single row against a filter state."""
        return bool(self.apply([row], filters, columns))

    @staticmethod
    def _resolve_checks(
        filters: FilterState, model: ColumnModel
    ) -> list[tuple[Column, Callable[[Any, Any], bool], Any]]:
        checks = []
        for column_id, raw_value in filters.column_filters.items():
            column = model.get(column_id)
            if column is None:
                logger.debug(f"Ignoring filter for unknown column {column_id!r}")
                continue
            normalize, predicate = FILTER_KINDS[column.effective_filter_kind]
            normalized = normalize(raw_value)
            if normalized is None:
                logger.debug(
                    f"Filter value {raw_value!r} is not valid for "
                    f"{column.effective_filter_kind.value} column {column_id!r}; ignoring"
                )
                continue
            checks.append((column, predicate, normalized))
        return checks

    @staticmethod
    def _row_matches(row: Any, checks: list[tuple[Column, Callable[[Any, Any], bool], Any]]) -> bool:
        for column, predicate, normalized in checks:
            value = safe_value(column, row)
            if value is ACCESSOR_FAILED or value is None:
                return False
            if not predicate(value, normalized):
                return False
        return True

    @staticmethod
    def _quick_matches(row: Any, needle: Optional[str], search_columns: Sequence[Column]) -> bool:
        if needle is None:
            return True
        for column in search_columns:
            value = safe_value(column, row)
            if value is ACCESSOR_FAILED:
                continue
            if needle in cell_text(value).casefold():
                return True
        return False


# -------------------------------------------------------------------------
# Display helpers
# -------------------------------------------------------------------------


def describe_filter_value(value: Any) -> str:
    """Human-readable rendering of a filter value."""
    if value is None:
        return ""
    if isinstance(value, Mapping):
        if "min" in value or "max" in value:
            low, high = value.get("min"), value.get("max")
            if low is not None and high is not None:
                return f"{low} – {high}"
            return f"≥ {low}" if low is not None else f"≤ {high}"
        if "start" in value or "end" in value:
            start, end = value.get("start"), value.get("end")
            if start is not None and end is not None:
                return f"{cell_text(start)} – {cell_text(end)}"
            return f"from {cell_text(start)}" if start is not None else f"until {cell_text(end)}"
    return cell_text(value)


def active_filters(filters: FilterState, columns: ColumnModel | Sequence[Column]) -> list[ActiveFilter]:
    """List the column filters that currently constrain rows."""
    model = as_column_model(columns)
    active = []
    for column_id, value in filters.column_filters.items():
        column = model.get(column_id)
        if column is None:
            continue
        kind = column.effective_filter_kind
        normalize, _ = FILTER_KINDS[kind]
        if normalize(value) is None:
            continue
        active.append(ActiveFilter(
            column_id=column_id,
            label=column.label,
            kind=kind,
            value=value,
            display=describe_filter_value(value),
        ))
    return active


def filter_options(rows: Iterable[Any], column: Column) -> list[str]:
    """
    Options offered by a select filter.

    Declared options win; otherwise the sorted distinct cell values.
    """
    if column.filter_options:
        return list(column.filter_options)
    seen: set[str] = set()
    for row in rows:
        value = safe_value(column, row)
        if value is None or value is ACCESSOR_FAILED:
            continue
        values = value if isinstance(value, (list, tuple, set, frozenset)) else (value,)
        seen.update(cell_text(v) for v in values if v is not None)
    return sorted(seen)
