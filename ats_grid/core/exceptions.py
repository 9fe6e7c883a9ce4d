"""
Exceptions raised by the grid core.

Only programmer errors raise. Data problems (failing accessors, stale
filter or sort references, schema drift in saved views) are recovered
locally and never surface as exceptions.
"""

from typing import Any


class GridError(Exception):
    """Base class for grid core errors."""


class GridNotInitializedError(GridError, RuntimeError):
    """The grid was used before a row collection was supplied."""


class DuplicateRowIdError(GridError, ValueError):
    """get_row_id returned the same id for two distinct rows."""

    def __init__(self, row_id: Any, first_index: int, second_index: int):
        self.row_id = row_id
        self.first_index = first_index
        self.second_index = second_index
        super().__init__(
            f"Row id {row_id!r} is returned for rows {first_index} and {second_index}; "
            "get_row_id must be unique within a row collection"
        )


class UnknownColumnError(GridError, KeyError):
    """A layout or grid operation named a column that is not in the model."""

    def __init__(self, column_id: str):
        self.column_id = column_id
        super().__init__(column_id)

    def __str__(self) -> str:
        return f"Unknown column: {self.column_id!r}"


class GridReentrancyError(GridError, RuntimeError):
    """A grid mutation was attempted while the derived rows were being computed."""


class ViewNotFoundError(GridError, KeyError):
    """A saved view id does not exist."""

    def __init__(self, view_id: str):
        self.view_id = view_id
        super().__init__(view_id)

    def __str__(self) -> str:
        return f"Saved view not found: {self.view_id!r}"
