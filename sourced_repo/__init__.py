"""Snapshot-plus-event-log persistence for event-sourced entities.

This module provides the public API for defining entities and persisting
them through a Repository.
"""

from .domain import Entity, Event, Notification
from .exceptions import (
    ConfigurationError,
    ReplayError,
    SourcedRepoError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from .repository import Repository, SnapshotEveryN, SnapshotStrategy
from .routing import applies_event
from .storage import DocumentCollection, DocumentStore, InMemoryDocumentStore

__all__ = [
    # Repository
    "Repository",
    "SnapshotStrategy",
    "SnapshotEveryN",
    # Domain primitives
    "Entity",
    "Event",
    "Notification",
    "applies_event",
    # Storage
    "DocumentStore",
    "DocumentCollection",
    "InMemoryDocumentStore",
    # Errors
    "SourcedRepoError",
    "ConfigurationError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "ReplayError",
]
