"""
Base repository for saved views.

Defines the persistence collaborator the grid core relies on. The core
only needs ``save_view``, ``load_views`` and ``delete_view``; the storage
medium is up to the concrete repository.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ats_grid.data.models import SavedView


class ViewRepository(ABC):
    """
    Abstract saved view store.

    Implementations persist full SavedView documents keyed by ``view.id``.
    Saving an existing id replaces the stored document.
    """

    @abstractmethod
    def save_view(self, view: SavedView) -> str:
        """Insert or replace a view. Returns its id."""
        pass

    @abstractmethod
    def load_views(self) -> list[SavedView]:
        """Load every stored view, oldest first."""
        pass

    @abstractmethod
    def delete_view(self, view_id: str) -> bool:
        """Delete a view. Returns False when it did not exist."""
        pass

    def get_view(self, view_id: str) -> Optional[SavedView]:
        """Get a single view by id."""
        for view in self.load_views():
            if view.id == view_id:
                return view
        return None

    @staticmethod
    def _sorted(views: list[SavedView]) -> list[SavedView]:
        return sorted(views, key=lambda v: (v.created_at, v.id))
