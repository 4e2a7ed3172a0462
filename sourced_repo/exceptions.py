"""Exceptions raised by the snapshot-and-event repository."""


class SourcedRepoError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(SourcedRepoError):
    """Raised when a repository or storage handle is misconfigured.

    This covers constructing a repository without a connected storage
    handle, declaring an index field the entity type does not have, and
    failing to reach the document store when connecting.
    """


class StorageError(SourcedRepoError):
    """Base class for failures reported by the underlying document store.

    The driver's own exception is always available as ``__cause__``.
    """


class StorageReadError(StorageError):
    """Raised when a snapshot or event query fails."""


class StorageWriteError(StorageError):
    """Raised when an index build, snapshot insert or event batch insert fails."""


class ReplayError(SourcedRepoError):
    """Raised when an entity cannot be reconstructed from stored data."""
