"""
Base model classes for ats-grid documents.

Provides common fields and functionality shared across persisted models.
"""

from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


def new_object_id() -> str:
    """Generate a document id as an ObjectId hex string."""
    return str(ObjectId())


class TimestampMixin(BaseModel):
    """Mixin providing timestamp fields for models."""

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class BaseDocument(TimestampMixin):
    """
    Base model for persisted documents.

    Ids are ObjectId hex strings so the same document round-trips through
    JSON files and MongoDB unchanged.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
    )

    id: str = Field(default_factory=new_object_id, alias="_id")

    def model_dump_mongo(self) -> dict[str, Any]:
        """Convert model to a MongoDB-compatible dictionary."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)

    def touch(self) -> None:
        """Refresh the update timestamp."""
        self.updated_at = utc_now()


class EmbeddedModel(BaseModel):
    """
    Base model for embedded documents (subdocuments).

    Use this for models that are embedded within other documents
    rather than stored in their own collection.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
    )
