"""MongoDB document store built on PyMongo's native async API."""

import logging
from collections.abc import Sequence
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from ...exceptions import ConfigurationError, StorageReadError, StorageWriteError
from ...storage import Document, DocumentCollection, DocumentStore
from ...storage.base import Filter, Sort
from .config import MongoConfiguration

LOGGER = logging.getLogger(__name__)


class MongoCollection(DocumentCollection):
    """Adapts an AsyncCollection to the repository's collection contract.

    Driver failures are re-raised as `StorageReadError` for queries and
    `StorageWriteError` for index builds and inserts, chained to the
    original `PyMongoError`.
    """

    def __init__(self, collection: AsyncCollection[dict[str, Any]]) -> None:
        self._collection = collection
        self.name = collection.name

    async def ensure_index(self, field: str) -> None:
        try:
            await self._collection.create_index(field)
        except PyMongoError as err:
            raise StorageWriteError(f"Failed to create index {field!r} on {self.name}") from err

    async def find(
        self,
        filter: Filter,
        sort: Sort | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        cursor = self._collection.find(dict(filter))
        if sort:
            field, direction = sort
            cursor = cursor.sort(field, int(direction))
        if limit:
            cursor = cursor.limit(limit)

        try:
            return await cursor.to_list()
        except PyMongoError as err:
            raise StorageReadError(f"Failed to query {self.name}") from err

    async def insert_one(self, document: Document) -> None:
        try:
            await self._collection.insert_one(document)
        except PyMongoError as err:
            raise StorageWriteError(f"Failed to insert into {self.name}") from err

    async def insert_many(self, documents: Sequence[Document]) -> None:
        try:
            await self._collection.insert_many(list(documents), ordered=True)
        except PyMongoError as err:
            raise StorageWriteError(
                f"Failed to insert {len(documents)} documents into {self.name}"
            ) from err


class MongoDocumentStore(DocumentStore):
    """An explicit, connected handle to a MongoDB database.

    The handle replaces any process-wide connection state: create one per
    database, connect it, and pass it to every repository that should use it.

    Attributes:
        config: MongoDB configuration object

    Examples:
        >>> config = MongoConfiguration(
        ...     uri="mongodb://localhost:27017",
        ...     database="myapp"
        ... )
        >>> store = MongoDocumentStore(config)
        >>> await store.connect()
        >>> repository = Repository(BankAccount, store, indices=["owner"])
        >>> await store.close()

        >>> # Using async context manager
        >>> async with MongoDocumentStore(config) as store:
        ...     repository = Repository(BankAccount, store)
    """

    def __init__(self, config: MongoConfiguration):
        """Initialize the store handle without connecting.

        Args:
            config: MongoDB configuration object
        """
        self.config = config
        self._client: AsyncMongoClient[dict[str, Any]] | None = None
        self._connected = False

    @property
    def client(self) -> AsyncMongoClient[dict[str, Any]]:
        """Get or create the MongoDB async client instance."""
        if self._client is None:
            kwargs: dict[str, Any] = {
                "maxPoolSize": self.config.max_pool_size,
                "minPoolSize": self.config.min_pool_size,
                "serverSelectionTimeoutMS": self.config.server_selection_timeout_ms,
                "connectTimeoutMS": self.config.connect_timeout_ms,
            }

            if self.config.max_idle_time_ms is not None:
                kwargs["maxIdleTimeMS"] = self.config.max_idle_time_ms

            if self.config.socket_timeout_ms is not None:
                kwargs["socketTimeoutMS"] = self.config.socket_timeout_ms

            self._client = AsyncMongoClient(self.config.uri, **kwargs)
        return self._client

    @property
    def database(self) -> AsyncDatabase[dict[str, Any]]:
        """Get the configured database."""
        return self.client[self.config.database]

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        """Verify the server is reachable and mark the handle connected.

        Raises:
            ConfigurationError: If the server cannot be reached.
        """
        try:
            await self.client.admin.command("ping")
        except PyMongoError as err:
            raise ConfigurationError(f"Could not connect to MongoDB at {self.config.uri}") from err

        self._connected = True
        LOGGER.info("connected to MongoDB database %s", self.config.database)

    def collection(self, name: str) -> MongoCollection:
        return MongoCollection(self.database[name])

    async def close(self) -> None:
        """Close the client and all connections."""
        self._connected = False
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def __aenter__(self) -> "MongoDocumentStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> bool:
        await self.close()
        return False
