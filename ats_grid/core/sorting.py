"""
Sort engine for the grid core.

Applies a stable comparator chain to the filtered rows. Values are compared
by type: numbers numerically, dates by epoch milliseconds, strings by
collation key. Missing values go to one configured end regardless of
direction, so flipping a sort never buries them in the middle.
"""

import math
from dataclasses import dataclass, field, replace
from functools import cmp_to_key
from typing import Any, Iterable, Optional, Sequence

from ats_grid.core.columns import ACCESSOR_FAILED, Column, ColumnModel, as_column_model, safe_value
from ats_grid.core.values import collation_key, is_number, to_epoch_ms
from ats_grid.utils.constants import NullsPosition, SortDirection
from ats_grid.utils.logger import get_logger

logger = get_logger(__name__)

# Type ranks keep mixed-type columns totally ordered instead of raising
_RANK_NUMBER = 0
_RANK_DATE = 1
_RANK_STRING = 2
_RANK_OTHER = 3


@dataclass(frozen=True)
class SortEntry:
    """One link of the comparator chain."""

    column_id: str
    direction: SortDirection = SortDirection.ASC

    def __post_init__(self) -> None:
        if not isinstance(self.direction, SortDirection):
            object.__setattr__(self, "direction", SortDirection(self.direction))


@dataclass(frozen=True)
class SortState:
    """
    Ordered sort entries; the first is primary.

    A column id appears at most once; later duplicates are discarded.
    """

    entries: tuple[SortEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        unique = []
        for entry in self.entries:
            if not isinstance(entry, SortEntry):
                entry = SortEntry(*entry) if isinstance(entry, (tuple, list)) else SortEntry(**entry)
            if entry.column_id in seen:
                continue
            seen.add(entry.column_id)
            unique.append(entry)
        object.__setattr__(self, "entries", tuple(unique))

    @classmethod
    def of(cls, *entries: tuple[str, str | SortDirection]) -> "SortState":
        """Build from (column_id, direction) pairs."""
        return cls(tuple(SortEntry(column_id, SortDirection(direction)) for column_id, direction in entries))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def direction_of(self, column_id: str) -> Optional[SortDirection]:
        for entry in self.entries:
            if entry.column_id == column_id:
                return entry.direction
        return None

    def without(self, column_id: str) -> "SortState":
        return replace(self, entries=tuple(e for e in self.entries if e.column_id != column_id))

    @property
    def primary(self) -> Optional[SortEntry]:
        return self.entries[0] if self.entries else None


def next_sort_state(state: SortState, column_id: str, additive: bool = False) -> SortState:
    """
    Advance a column through the header-click cycle asc -> desc -> unsorted.

    Args:
        state: Current sort state
        column_id: Column whose header was clicked
        additive: Keep the other entries (shift-click) instead of replacing them

    Returns:
        The new sort state
    """
    current = state.direction_of(column_id)
    if current is None:
        new_entry: Optional[SortEntry] = SortEntry(column_id, SortDirection.ASC)
    elif current is SortDirection.ASC:
        new_entry = SortEntry(column_id, SortDirection.DESC)
    else:
        new_entry = None

    if not additive:
        return SortState((new_entry,) if new_entry else ())

    entries = []
    for entry in state.entries:
        if entry.column_id == column_id:
            if new_entry is not None:
                entries.append(new_entry)
        else:
            entries.append(entry)
    if current is None:
        entries.append(new_entry)
    return SortState(tuple(entries))


def _typed_key(value: Any, column: Column) -> Optional[tuple[int, Any]]:
    """Comparable key for a cell, or None when the value counts as missing."""
    if value is None or value is ACCESSOR_FAILED:
        return None
    if is_number(value):
        number = float(value)
        if math.isnan(number):
            return None
        return _RANK_NUMBER, number
    if isinstance(value, bool):
        return _RANK_NUMBER, float(value)
    if isinstance(value, str) and not column.is_date:
        return _RANK_STRING, collation_key(value)
    epoch = to_epoch_ms(value)
    if epoch is not None:
        return _RANK_DATE, epoch
    if isinstance(value, str):
        return _RANK_STRING, collation_key(value)
    return _RANK_OTHER, collation_key(str(value))


def _compare(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


class SortEngine:
    """
    Stable multi-key sort over rows.

    Entries naming unknown or non-sortable columns are dropped from the
    chain. Rows that compare equal on every active key keep their input
    order.
    """

    def __init__(self, nulls_position: NullsPosition = NullsPosition.LAST):
        self.nulls_position = NullsPosition(nulls_position)

    def active_entries(self, sort_state: SortState, columns: ColumnModel | Sequence[Column]) -> list[tuple[Column, SortEntry]]:
        """Resolve sort entries to columns, dropping stale references."""
        model = as_column_model(columns)
        active = []
        for entry in sort_state.entries:
            column = model.get(entry.column_id)
            if column is None:
                logger.debug(f"Dropping sort on unknown column {entry.column_id!r}")
                continue
            if not column.sortable:
                logger.debug(f"Dropping sort on non-sortable column {entry.column_id!r}")
                continue
            active.append((column, entry))
        return active

    def apply(
        self,
        rows: Iterable[Any],
        sort_state: SortState,
        columns: ColumnModel | Sequence[Column],
    ) -> list[Any]:
        """
        Sort rows.

        Args:
            rows: Filtered rows, in input order
            sort_state: Comparator chain to apply
            columns: Column model used to read cells

        Returns:
            A new sorted list; the input is not modified
        """
        rows = list(rows)
        active = self.active_entries(sort_state, columns)
        if not active or len(rows) < 2:
            return rows

        # Decorate once so each accessor runs once per row
        decorated = [
            (position, [_typed_key(safe_value(column, row), column) for column, _ in active])
            for position, row in enumerate(rows)
        ]
        descending = [entry.direction is SortDirection.DESC for _, entry in active]
        missing_sign = 1 if self.nulls_position is NullsPosition.LAST else -1

        def compare(left: tuple[int, list], right: tuple[int, list]) -> int:
            for key_index, is_desc in enumerate(descending):
                a = left[1][key_index]
                b = right[1][key_index]
                if a is None or b is None:
                    if a is None and b is None:
                        continue
                    return missing_sign if a is None else -missing_sign
                result = _compare(a[0], b[0]) or _compare(a[1], b[1])
                if result:
                    return -result if is_desc else result
            return 0

        decorated.sort(key=cmp_to_key(compare))
        return [rows[position] for position, _ in decorated]
