"""
Group-by over the derived rows.

Rows are bucketed by the display text of one column. Groups keep the
order in which their first row appears in the derived list, and rows
inside a group keep displayed order, so grouping never re-sorts.
"""

from dataclasses import dataclass
from typing import Any, Collection, Sequence

from ats_grid.core.columns import Column, cell_text, safe_value
from ats_grid.core.row_store import RowId
from ats_grid.utils.constants import NO_VALUE_GROUP_LABEL


@dataclass(frozen=True)
class RowGroup:
    """Rows sharing one grouping value."""

    key: str
    rows: tuple[Any, ...]
    ids: tuple[RowId, ...]
    expanded: bool = True

    @property
    def label(self) -> str:
        return self.key or NO_VALUE_GROUP_LABEL

    @property
    def count(self) -> int:
        return len(self.rows)


def group_key(column: Column, row: Any) -> str:
    """Grouping value of a row; empty and failed cells share the '' key."""
    return cell_text(safe_value(column, row))


def group_rows(
    rows: Sequence[Any],
    ids: Sequence[RowId],
    column: Column,
    toggled: Collection[str] = (),
    expanded_by_default: bool = True,
) -> list[RowGroup]:
    """
    Bucket derived rows by a column's value.

    Args:
        rows: Derived rows in displayed order
        ids: Their row ids, index-aligned with ``rows``
        column: Column to group by
        toggled: Group keys flipped away from the default expansion
        expanded_by_default: Whether untouched groups start expanded

    Returns:
        Groups in order of first appearance
    """
    buckets: dict[str, tuple[list[Any], list[RowId]]] = {}
    for row, row_id in zip(rows, ids):
        bucket_rows, bucket_ids = buckets.setdefault(group_key(column, row), ([], []))
        bucket_rows.append(row)
        bucket_ids.append(row_id)

    return [
        RowGroup(
            key=key,
            rows=tuple(bucket_rows),
            ids=tuple(bucket_ids),
            expanded=expanded_by_default != (key in toggled),
        )
        for key, (bucket_rows, bucket_ids) in buckets.items()
    ]
