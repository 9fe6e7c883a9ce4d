"""
Saved view repository selection.
"""

from typing import Optional

from ats_grid.utils.config import ViewStoreSettings, get_settings

from .base import ViewRepository
from .json_repository import JsonViewRepository
from .memory_repository import InMemoryViewRepository
from .mongo_repository import MongoViewRepository


def create_view_repository(settings: Optional[ViewStoreSettings] = None) -> ViewRepository:
    """Build the repository named by the ``VIEWS_BACKEND`` setting."""
    settings = settings or get_settings().views
    if settings.backend == "memory":
        return InMemoryViewRepository()
    if settings.backend == "mongo":
        return MongoViewRepository(collection_name=settings.collection_name)
    return JsonViewRepository(settings.json_path)


_view_repository: Optional[ViewRepository] = None


def get_view_repository() -> ViewRepository:
    """Get the configured saved view repository singleton instance."""
    global _view_repository
    if _view_repository is None:
        _view_repository = create_view_repository()
    return _view_repository
