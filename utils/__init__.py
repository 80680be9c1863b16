"""Utilities and helper functions.

Consolidated utilities:
- persistence: Key-value storage backends (memory, JSON file, diskcache)
- logging: loguru configuration
- exceptions: Exception hierarchy
"""

from utils import exceptions, persistence
from utils.persistence import (
    DiskCacheStorage,
    JSONFileStorage,
    KeyValueStorage,
    MemoryStorage,
    build_storage,
)

__all__ = [
    "exceptions",
    "persistence",
    "DiskCacheStorage",
    "JSONFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "build_storage",
]
