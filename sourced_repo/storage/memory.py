import copy
import operator
from collections.abc import Callable, Sequence
from itertools import count
from typing import Any

from .base import Document, DocumentCollection, DocumentStore, Filter, Sort, SortDirection

_COMPARISONS: dict[str, Callable[[Any, Any], bool]] = {
    "$gt": operator.gt,
    "$gte": operator.ge,
    "$lt": operator.lt,
    "$lte": operator.le,
}

_MISSING = object()


def matches(document: Document, filter: Filter) -> bool:
    """Check whether a document satisfies a query filter.

    Raises:
        ValueError: If the filter uses an unsupported operator.
    """
    for field, condition in filter.items():
        value = document.get(field, _MISSING)
        if isinstance(condition, dict):
            if value is _MISSING:
                return False
            for op, operand in condition.items():
                try:
                    compare = _COMPARISONS[op]
                except KeyError:
                    raise ValueError(f"Unsupported query operator: {op}") from None
                if not compare(value, operand):
                    return False
        elif value is _MISSING or value != condition:
            return False
    return True


class InMemoryCollection(DocumentCollection):
    """A collection that keeps its documents in a list.

    This is not intended for production use. Documents are deep-copied on
    insert and on read so that stored documents can never be mutated by
    callers, and every inserted document is assigned a sequential ``_id``.
    """

    def __init__(self, name: str, ids: "count[int]") -> None:
        self.name = name
        self.documents: list[Document] = []
        self.indexes: set[str] = set()
        self._ids = ids

    async def ensure_index(self, field: str) -> None:
        self.indexes.add(field)

    async def find(
        self,
        filter: Filter,
        sort: Sort | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        found = [doc for doc in self.documents if matches(doc, filter)]

        if sort:
            field, direction = sort
            # sorted() is stable, so ties keep insertion order.
            # Documents missing the field sort first, as in MongoDB.
            found = sorted(
                found,
                key=lambda doc: (field in doc, doc.get(field)),
                reverse=direction == SortDirection.DESC,
            )
        if limit:
            found = found[:limit]

        return copy.deepcopy(found)

    async def insert_one(self, document: Document) -> None:
        self.documents.append(self._prepare(document))

    async def insert_many(self, documents: Sequence[Document]) -> None:
        prepared = [self._prepare(document) for document in documents]
        self.documents.extend(prepared)

    def _prepare(self, document: Document) -> Document:
        stored = copy.deepcopy(document)
        stored.setdefault("_id", next(self._ids))
        return stored


class InMemoryDocumentStore(DocumentStore):
    """A document store that keeps collections in memory.

    Useful for tests and single-process tools. It is connected on creation;
    `close()` disconnects it so that repositories can no longer be built on it.

    Example:
        >>> store = InMemoryDocumentStore()
        >>> repository = Repository(BankAccount, store, indices=["owner"])
    """

    def __init__(self) -> None:
        self.collections: dict[str, InMemoryCollection] = {}
        self._ids = count(1)
        self._connected = True

    @property
    def connected(self) -> bool:
        return self._connected

    def collection(self, name: str) -> InMemoryCollection:
        if name not in self.collections:
            self.collections[name] = InMemoryCollection(name, self._ids)
        return self.collections[name]

    async def connect(self) -> None:
        self._connected = True

    async def close(self) -> None:
        self._connected = False
