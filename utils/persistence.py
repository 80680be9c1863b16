"""Key-value persistence backends.

Provides a unified string key-value interface (the "local storage" of the
app) with interchangeable backends:
- MemoryStorage: dict-backed, for tests and throwaway sessions
- JSONFileStorage: one JSON object file mapping key -> string
- DiskCacheStorage: diskcache directory (SQLite)

Every backend raises StorageUnavailableError, never a raw OS/DB error.
"""

import sqlite3
from json import dump, load
from pathlib import Path
from typing import Protocol

from diskcache import Cache, Timeout

from models.config import StorageSettings
from utils.exceptions import StorageUnavailableError


class KeyValueStorage(Protocol):
    """Durable string key-value storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStorage:
    """In-memory storage. Nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JSONFileStorage:
    """Manages a JSON object file of string values.

    Handles missing files, corrupt content and file permissions, creating
    parent directories on first write.
    """

    def __init__(self, file_path: Path) -> None:
        """Initialize JSONFileStorage with a file path.

        Args:
            file_path: Path to the JSON file to manage
        """
        self.file_path = Path(file_path)

    def _load(self) -> dict:
        """Load the whole key-value object.

        Returns:
            Dict of stored values, empty if the file doesn't exist or is invalid

        Raises:
            StorageUnavailableError: On permission or other OS errors
        """
        try:
            with self.file_path.open(encoding="utf-8") as f:
                data = load(f)
        except FileNotFoundError:
            return {}
        except ValueError:
            # JSON decode error: the whole file is unusable, start over
            return {}
        except OSError as e:
            raise StorageUnavailableError(f"Cannot read {self.file_path}: {e}") from e

        return data if isinstance(data, dict) else {}

    def _save(self, data: dict) -> None:
        """Save the whole key-value object.

        Raises:
            StorageUnavailableError: On serialization or OS errors
        """
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with self.file_path.open("w", encoding="utf-8") as f:
                dump(data, f, indent=2, ensure_ascii=False)
        except TypeError as e:
            raise StorageUnavailableError(f"Cannot serialize data: {e}") from e
        except OSError as e:
            raise StorageUnavailableError(f"Cannot write {self.file_path}: {e}") from e

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> None:
        """Delete a key (silently succeeds if key doesn't exist)."""
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def exists(self) -> bool:
        return self.file_path.exists()


class DiskCacheStorage:
    """Storage on a diskcache directory (SQLite backend), no expiry."""

    def __init__(self, directory: Path, timeout: float = 1.0) -> None:
        self.directory = Path(directory)
        self.timeout = timeout
        self._cache: Cache | None = None

    def _get_cache(self) -> Cache:
        """Lazy init so a broken directory only fails on first use."""
        if self._cache is None:
            try:
                self._cache = Cache(directory=str(self.directory), timeout=self.timeout)
            except (OSError, sqlite3.Error) as e:
                raise StorageUnavailableError(f"Cannot open cache at {self.directory}: {e}") from e
        return self._cache

    def get(self, key: str) -> str | None:
        try:
            value = self._get_cache().get(key)
        except (OSError, sqlite3.Error, Timeout) as e:
            raise StorageUnavailableError(f"Cannot read '{key}': {e}") from e
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            self._get_cache().set(key, value)
        except (OSError, sqlite3.Error, Timeout) as e:
            raise StorageUnavailableError(f"Cannot write '{key}': {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._get_cache().delete(key)
        except (OSError, sqlite3.Error, Timeout) as e:
            raise StorageUnavailableError(f"Cannot delete '{key}': {e}") from e

    def close(self) -> None:
        if self._cache is not None:
            self._cache.close()
            self._cache = None


def build_storage(storage_settings: StorageSettings) -> KeyValueStorage:
    """Create the backend selected in settings.

    Args:
        storage_settings: ``settings.storage``

    Returns:
        A KeyValueStorage instance
    """
    if storage_settings.backend == "memory":
        return MemoryStorage()
    if storage_settings.backend == "diskcache":
        return DiskCacheStorage(storage_settings.cache_dir)
    return JSONFileStorage(storage_settings.json_file)
