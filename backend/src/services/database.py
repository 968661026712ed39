"""MongoDB connection helpers for the document store."""

from __future__ import annotations

from functools import lru_cache
import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from .config import AppConfig, get_config

logger = logging.getLogger(__name__)


class DatabaseService:
    """Own the Mongo client and expose the notes collection."""

    def __init__(self, config: AppConfig | None = None, client: MongoClient | None = None):
        self.config = config or get_config()
        self._client = client

    @property
    def client(self) -> MongoClient:
        if self._client is None:
            # Connection is lazy; the first operation opens the socket.
            self._client = MongoClient(self.config.mongodb_uri)
        return self._client

    def database(self) -> Database:
        return self.client.get_default_database(default=self.config.mongodb_database)

    def collection(self) -> Collection:
        return self.database()[self.config.mongodb_collection]

    def ensure_indexes(self) -> None:
        """Create the owner and owner/updatedAt listing indexes."""
        docs = self.collection()
        docs.create_index([("owner", ASCENDING)])
        docs.create_index([("owner", ASCENDING), ("updatedAt", DESCENDING)])
        logger.info(
            "Mongo indexes ready",
            extra={"collection": self.config.mongodb_collection},
        )

    def ping(self) -> bool:
        try:
            self.client.admin.command("ping")
            return True
        except Exception as exc:
            logger.warning("Mongo ping failed: %s", exc)
            return False

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


@lru_cache(maxsize=1)
def get_database_service() -> DatabaseService:
    """Process-wide database service (one client per process)."""
    return DatabaseService()


__all__ = ["DatabaseService", "get_database_service"]
