"""
MongoDB saved view repository.

One document per view, keyed by the view id in ``_id``.
"""

from typing import Any, Optional

from pydantic import ValidationError
from pymongo import ASCENDING
from pymongo.results import DeleteResult

from ats_grid.data.database import get_database_manager
from ats_grid.data.models import SavedView
from ats_grid.utils.config import get_settings
from ats_grid.utils.logger import get_logger

from .base import ViewRepository

logger = get_logger(__name__)


class MongoViewRepository(ViewRepository):
    """Saved views in a MongoDB collection."""

    def __init__(self, collection: Any = None, collection_name: Optional[str] = None):
        """
        Initialize the repository.

        Args:
            collection: A pymongo collection (or compatible object); when
                omitted it is resolved lazily from the database manager
            collection_name: Collection to use with the database manager
        """
        self._collection = collection
        self._collection_name = collection_name or get_settings().views.collection_name

    # -------------------------------------------------------------------------
    # Collection Access
    # -------------------------------------------------------------------------

    def _get_collection(self) -> Any:
        if self._collection is None:
            self._collection = get_database_manager().get_collection(self._collection_name)
        return self._collection

    # -------------------------------------------------------------------------
    # Document Conversion
    # -------------------------------------------------------------------------

    def _to_model(self, document: Optional[dict[str, Any]]) -> Optional[SavedView]:
        if document is None:
            return None
        try:
            return SavedView.model_validate(document)
        except ValidationError as e:
            logger.warning(f"Skipping unreadable saved view {document.get('_id')!r}: {e}")
            return None

    # -------------------------------------------------------------------------
    # Persistence collaborator
    # -------------------------------------------------------------------------

    def save_view(self, view: SavedView) -> str:
        document = view.model_dump_mongo()
        self._get_collection().replace_one({"_id": view.id}, document, upsert=True)
        logger.debug(f"Saved view {view.id} ({view.name!r}) to {self._collection_name}")
        return view.id

    def load_views(self) -> list[SavedView]:
        cursor = self._get_collection().find({}).sort("created_at", ASCENDING)
        views = [self._to_model(document) for document in cursor]
        return self._sorted([v for v in views if v is not None])

    def get_view(self, view_id: str) -> Optional[SavedView]:
        return self._to_model(self._get_collection().find_one({"_id": view_id}))

    def delete_view(self, view_id: str) -> bool:
        result: DeleteResult = self._get_collection().delete_one({"_id": view_id})
        if result.deleted_count > 0:
            logger.debug(f"Deleted view {view_id} from {self._collection_name}")
            return True
        return False
