"""
Data layer for ats-grid.

Submodules:
- database: MongoDB connection management
- models: Pydantic document models
- repositories: Saved view persistence
"""

from .database import DatabaseManager, get_database_manager

__all__ = [
    "DatabaseManager",
    "get_database_manager",
]
