"""MongoDB integration for the snapshot-and-event repository.

This module provides a MongoDB implementation of the DocumentStore
contract using the async PyMongo driver.

Usage:
    >>> from sourced_repo import Repository
    >>> from sourced_repo.integrations.mongodb import (
    ...     MongoConfiguration,
    ...     MongoDocumentStore,
    ... )
    >>>
    >>> config = MongoConfiguration(
    ...     uri="mongodb://localhost:27017",
    ...     database="myapp"
    ... )
    >>> async with MongoDocumentStore(config) as store:
    ...     accounts = Repository(BankAccount, store, indices=["owner"])
    ...     account = await accounts.get("account-1")
"""

from .config import MongoConfiguration
from .store import MongoCollection, MongoDocumentStore

__all__ = [
    "MongoConfiguration",
    "MongoCollection",
    "MongoDocumentStore",
]
