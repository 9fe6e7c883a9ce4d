"""
Row store for the grid core.

Holds one immutable snapshot of the caller's rows keyed by a caller-supplied
row id, and the derived (filtered, then sorted) snapshot computed from it.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, TypeVar, Union

from ats_grid.core.exceptions import DuplicateRowIdError
from ats_grid.utils.logger import get_logger

logger = get_logger(__name__)

R = TypeVar("R")
RowId = Union[str, int]
GetRowId = Callable[[Any], RowId]


class RowStore(Generic[R]):
    """
    Immutable snapshot of a row collection.

    Replaced wholesale whenever the caller supplies new rows. Colliding
    row ids are a programmer error and raise immediately, since they would
    silently corrupt selection and virtualization.
    """

    def __init__(self, rows: Iterable[R], get_row_id: GetRowId):
        self._rows: tuple[R, ...] = tuple(rows)
        self._get_row_id = get_row_id
        self._ids: tuple[RowId, ...] = tuple(get_row_id(row) for row in self._rows)
        self._index: dict[RowId, int] = {}

        for position, row_id in enumerate(self._ids):
            first = self._index.setdefault(row_id, position)
            if first != position:
                raise DuplicateRowIdError(row_id, first, position)

        logger.debug(f"Row store built with {len(self._rows)} rows")

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[R]:
        return iter(self._rows)

    def __contains__(self, row_id: object) -> bool:
        return row_id in self._index

    @property
    def rows(self) -> tuple[R, ...]:
        return self._rows

    @property
    def ids(self) -> tuple[RowId, ...]:
        return self._ids

    @property
    def get_row_id(self) -> GetRowId:
        return self._get_row_id

    def get(self, row_id: RowId) -> Optional[R]:
        """Get a row by id, or None when the id is not in this snapshot."""
        position = self._index.get(row_id)
        if position is None:
            return None
        return self._rows[position]

    def position_of(self, row_id: RowId) -> Optional[int]:
        """Input position of a row id, or None."""
        return self._index.get(row_id)


@dataclass(frozen=True)
class DerivedRows(Generic[R]):
    """The row sequence after filter and sort, prior to virtualization."""

    rows: tuple[R, ...] = ()
    ids: tuple[RowId, ...] = ()
    _id_set: frozenset = field(default=frozenset(), repr=False)

    @classmethod
    def build(cls, rows: Iterable[R], get_row_id: GetRowId) -> "DerivedRows[R]":
        rows = tuple(rows)
        ids = tuple(get_row_id(row) for row in rows)
        return cls(rows=rows, ids=ids, _id_set=frozenset(ids))

    def __len__(self) -> int:
        return len(self.rows)

    def __contains__(self, row_id: object) -> bool:
        return row_id in self._id_set

    @property
    def id_set(self) -> frozenset:
        return self._id_set
