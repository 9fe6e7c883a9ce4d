"""
Saved view document model for ats-grid.

A saved view is a named, complete snapshot of filter, sort and column
configuration. Applying one produces fresh grid state; the document is
never aliased by the live grid.
"""

from typing import Any, Optional

from pydantic import Field, field_validator

from ats_grid.utils.constants import PinSide, SortDirection

from .base import BaseDocument, EmbeddedModel


class SortEntryModel(EmbeddedModel):
    """Serialized sort entry."""

    column_id: str
    direction: SortDirection = SortDirection.ASC


class SavedView(BaseDocument):
    """A named grid configuration."""

    name: str
    filter_state: dict[str, Any] = Field(default_factory=dict)
    quick_filter: str = ""
    quick_filter_preset_id: Optional[str] = None
    sort_state: list[SortEntryModel] = Field(default_factory=list)
    column_order: list[str] = Field(default_factory=list)
    column_widths: dict[str, float] = Field(default_factory=dict)
    hidden_columns: list[str] = Field(default_factory=list)
    pinned_columns: dict[str, PinSide] = Field(default_factory=dict)
    is_default: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """View names are trimmed and must not be empty."""
        v = v.strip()
        if not v:
            raise ValueError("View name must not be empty")
        return v

    @field_validator("sort_state")
    @classmethod
    def dedupe_sort_state(cls, v: list[SortEntryModel]) -> list[SortEntryModel]:
        """A column may appear at most once in the sort chain."""
        seen: set[str] = set()
        unique = []
        for entry in v:
            if entry.column_id not in seen:
                seen.add(entry.column_id)
                unique.append(entry)
        return unique
