"""Storage contracts and the in-memory document store."""

from .base import Document, DocumentCollection, DocumentStore, SortDirection
from .memory import InMemoryCollection, InMemoryDocumentStore

__all__ = [
    "Document",
    "DocumentCollection",
    "DocumentStore",
    "SortDirection",
    "InMemoryCollection",
    "InMemoryDocumentStore",
]
