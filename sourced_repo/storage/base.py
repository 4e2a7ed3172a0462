"""Document store contract consumed by the repository.

The repository needs very little from its storage engine: named collections
supporting single-field indexes, filtered queries with a sort and a limit,
and single or batched inserts. Implementations translate engine failures
into `StorageReadError` and `StorageWriteError`.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from enum import IntEnum
from typing import Any


class SortDirection(IntEnum):
    """Sort direction for queries and indexes."""

    ASC = 1
    """Ascending order (1)."""

    DESC = -1
    """Descending order (-1)."""


Document = dict[str, Any]
Filter = Mapping[str, Any]
Sort = tuple[str, SortDirection]


class DocumentCollection(ABC):
    """A named collection of documents for one entity type."""

    name: str

    @abstractmethod
    async def ensure_index(self, field: str) -> None:
        """Request an ascending index on ``field``.

        Raises:
            StorageWriteError: If the index cannot be created.
        """
        ...

    @abstractmethod
    async def find(
        self,
        filter: Filter,
        sort: Sort | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        """Find documents matching the filter.

        Filters match fields by equality, or by comparison when the value is
        a mapping of ``$gt``, ``$gte``, ``$lt`` or ``$lte`` operators.

        Args:
            filter: Query filter.
            sort: Optional (field, direction) to order the results by.
            limit: Optional maximum number of documents to return.

        Returns:
            The matching documents, in sort order.

        Raises:
            StorageReadError: If the query fails.
        """
        ...

    @abstractmethod
    async def insert_one(self, document: Document) -> None:
        """Insert a single document.

        Raises:
            StorageWriteError: If the insert fails.
        """
        ...

    @abstractmethod
    async def insert_many(self, documents: Sequence[Document]) -> None:
        """Insert a batch of documents in a single write.

        Raises:
            StorageWriteError: If the insert fails.
        """
        ...


class DocumentStore(ABC):
    """A connected handle to a document store."""

    @property
    @abstractmethod
    def connected(self) -> bool:
        """Whether the handle is connected and ready to serve collections."""
        ...

    @abstractmethod
    def collection(self, name: str) -> DocumentCollection:
        """Get the collection with the given name."""
        ...
