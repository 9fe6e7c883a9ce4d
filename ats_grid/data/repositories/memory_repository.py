"""
In-memory saved view repository.

Used by tests and by short-lived grids that do not need persistence.
"""

from ats_grid.data.models import SavedView
from ats_grid.utils.logger import get_logger

from .base import ViewRepository

logger = get_logger(__name__)


class InMemoryViewRepository(ViewRepository):
    """Stores deep copies so callers never alias stored documents."""

    def __init__(self) -> None:
        self._views: dict[str, SavedView] = {}

    def save_view(self, view: SavedView) -> str:
        self._views[view.id] = view.model_copy(deep=True)
        logger.debug(f"Saved view {view.id} ({view.name!r}) in memory")
        return view.id

    def load_views(self) -> list[SavedView]:
        return self._sorted([v.model_copy(deep=True) for v in self._views.values()])

    def delete_view(self, view_id: str) -> bool:
        return self._views.pop(view_id, None) is not None
