"""Custom exception hierarchy for ani-shelf.

Provides specific exception types for different failure scenarios,
making error handling more precise and testable.
"""


class AniShelfError(Exception):
    """Base exception for all ani-shelf errors."""

    pass


class PersistenceError(AniShelfError):
    """Raised when key-value storage operations fail."""

    pass


class StorageUnavailableError(PersistenceError):
    """Raised when the storage backend cannot be read or written.

    Covers disabled storage, quota/disk exhaustion, permission errors
    and values that cannot be serialized.
    """

    pass


class CorruptRecordError(PersistenceError):
    """Raised when a stored value is not a JSON array of the expected shape."""

    pass


class CatalogError(AniShelfError):
    """Raised when catalog API operations fail."""

    pass

