"""MongoDB gateway owning the client lifecycle."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from settings import Settings

logger = logging.getLogger(__name__)

RECORDS_COLLECTION = "records"
SENSORS_COLLECTION = "sensors"

_KNOWN_COLLECTIONS = frozenset({RECORDS_COLLECTION, SENSORS_COLLECTION})


class StorageConnectionError(RuntimeError):
    """Raised when the database connection cannot be established."""


class StorageNotConnectedError(RuntimeError):
    """Raised when a collection is requested before ``connect()``."""


class MongoGateway:

    def __init__(
        self,
        uri: str,
        database_name: str,
        client_factory: Callable[..., Any] = MongoClient,
    ) -> None:
        self.uri = uri
        self.database_name = database_name
        self._client_factory = client_factory
        self._client: Optional[Any] = None
        self._database: Optional[Database] = None

    @property
    def connected(self) -> bool:
        return self._database is not None

    def connect(self) -> None:
        """Create the shared client and verify the server answers a ping."""
        if self._database is not None:
            return

        client = None
        try:
            client = self._client_factory(self.uri)
            client.admin.command("ping")
        except PyMongoError as exc:
            if client is not None:
                client.close()
            logger.error(
                "Failed to connect to MongoDB",
                extra={"database": self.database_name, "reason": str(exc)},
            )
            raise StorageConnectionError(f"Failed to connect to MongoDB: {exc}") from exc

        self._client = client
        self._database = client[self.database_name]
        logger.info("Connected to MongoDB", extra={"database": self.database_name})

    def get_collection(self, name: str) -> Collection:
        if name not in _KNOWN_COLLECTIONS:
            raise KeyError(f"Unknown collection {name!r}.")
        if self._database is None:
            raise StorageNotConnectedError("connect() must be called before accessing collections.")
        return self._database[name]

    @property
    def records(self) -> Collection:
        return self.get_collection(RECORDS_COLLECTION)

    @property
    def sensors(self) -> Collection:
        return self.get_collection(SENSORS_COLLECTION)

    def close(self) -> None:
        if self._client is None:
            return
        self._client.close()
        self._client = None
        self._database = None


def build_gateway(
    settings: Settings,
    client_factory: Callable[..., Any] = MongoClient,
) -> MongoGateway:
    return MongoGateway(
        uri=settings.mongo_uri,
        database_name=settings.database_name,
        client_factory=client_factory,
    )
