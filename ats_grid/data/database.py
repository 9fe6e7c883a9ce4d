"""
Database connection manager for ats-grid.

Provides the synchronous MongoDB (PyMongo) client used by the Mongo saved
view repository. The grid core is synchronous, so no async client is kept.
"""

from typing import Any, Optional
from urllib.parse import quote_plus

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from ats_grid.utils.config import DatabaseSettings, get_settings
from ats_grid.utils.logger import get_logger

logger = get_logger(__name__)


class DatabaseManager:
    """
    Manages the MongoDB connection.

    The client is created lazily on first use, so constructing the
    manager never touches the network.
    """

    def __init__(self, settings: Optional[DatabaseSettings] = None) -> None:
        """Initialize database manager with settings."""
        self._settings = settings or get_settings().database
        self._db_name = self._settings.name
        self._uri = self._build_uri()
        self._client: Optional[MongoClient] = None

    def _build_uri(self) -> str:
        """
        Build MongoDB connection URI from settings.

        Credentials are URL-encoded; hosts carrying shell or URI
        metacharacters are rejected.
        """
        host = self._settings.host.strip()
        if not host or any(c in host for c in [";", "&", "|", "$", "`", "@", "/"]):
            raise ValueError(f"Invalid database host: {host}")

        auth = ""
        if self._settings.username and self._settings.password:
            auth = f"{quote_plus(self._settings.username)}:{quote_plus(self._settings.password)}@"

        return f"mongodb://{auth}{host}:{self._settings.port}"

    def get_client(self) -> MongoClient:
        """Get or create the MongoDB client."""
        if self._client is None:
            logger.info("Creating MongoDB client")
            self._client = MongoClient(
                self._uri,
                serverSelectionTimeoutMS=self._settings.timeout_ms,
                connectTimeoutMS=self._settings.timeout_ms,
            )
        return self._client

    def get_database(self) -> Database:
        """Get the configured database."""
        return self.get_client()[self._db_name]

    def get_collection(self, collection_name: str) -> Any:
        """Get a collection by name."""
        return self.get_database()[collection_name]

    def check_connection(self) -> bool:
        """Check if the connection is healthy."""
        try:
            self.get_client().admin.command("ping")
            return True
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(f"Connection check failed: {e}")
            self.close()
            return False

    def ensure_view_indexes(self, collection_name: str) -> None:
        """Create the indexes the saved view collection relies on."""
        collection = self.get_collection(collection_name)
        collection.create_index([("created_at", ASCENDING)])
        collection.create_index([("name", ASCENDING)])
        logger.info(f"Ensured indexes on {collection_name}")

    def close(self) -> None:
        """Close the client connection."""
        if self._client is not None:
            logger.info("Closing MongoDB client")
            self._client.close()
            self._client = None


_db_manager: Optional[DatabaseManager] = None


def get_database_manager() -> DatabaseManager:
    """Get the global database manager instance."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager
