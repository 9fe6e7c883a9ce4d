"""
Pydantic data models for ats-grid.

Persisted documents and their embedded models.
"""

# Base models
from .base import BaseDocument, EmbeddedModel, TimestampMixin, new_object_id, utc_now

# Saved view models
from .saved_view import SavedView, SortEntryModel

__all__ = [
    # Base
    "BaseDocument",
    "EmbeddedModel",
    "TimestampMixin",
    "new_object_id",
    "utc_now",
    # Saved views
    "SavedView",
    "SortEntryModel",
]
