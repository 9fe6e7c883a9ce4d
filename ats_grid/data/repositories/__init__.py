"""
Saved view repositories for ats-grid.

Concrete implementations of the persistence collaborator used by the
saved view manager.
"""

# Base repository
from .base import ViewRepository

# Implementations
from .memory_repository import InMemoryViewRepository
from .json_repository import JsonViewRepository
from .mongo_repository import MongoViewRepository
from .factory import create_view_repository, get_view_repository

__all__ = [
    # Base
    "ViewRepository",
    # Implementations
    "InMemoryViewRepository",
    "JsonViewRepository",
    "MongoViewRepository",
    "create_view_repository",
    "get_view_repository",
]
