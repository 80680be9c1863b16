"""Persisted watch history and My List.

This module provides the local state layer shared by every view:
- Watch history: one row per anime, most recently updated first, capped
- My List: anime saved for later, most recently added first, unbounded

Both collections live as JSON arrays in a KeyValueStorage. Storage failures
never reach the caller: reads degrade to empty lists, writes to no-ops,
and both are logged.

Used by: commands/history.py, commands/mylist.py, commands/watch.py, commands/menu.py
"""

import time
from collections.abc import Callable, Mapping
from json import dumps, loads
from typing import Any

from pydantic import BaseModel, ValidationError

from models.config import MY_LIST_KEY, WATCH_HISTORY_KEY, AppSettings
from models.models import (
    ListItem,
    MyListEntry,
    StoreStatus,
    WatchHistoryEntry,
    WatchRecord,
)
from utils.exceptions import CorruptRecordError, StorageUnavailableError
from utils.logging import get_logger
from utils.persistence import KeyValueStorage, build_storage

logger = get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 20


def now_millis() -> int:
    """Wall clock in epoch milliseconds."""
    return int(time.time() * 1000)


def _parse_records(raw: str, model: type[BaseModel], key: str) -> list:
    """Parse a stored JSON array into models.

    Raises:
        CorruptRecordError: If the value is not JSON or not an array
    """
    try:
        data = loads(raw)
    except ValueError as e:
        raise CorruptRecordError(f"'{key}' is not valid JSON") from e

    if not isinstance(data, list):
        raise CorruptRecordError(f"'{key}' is not a JSON array")

    records = []
    for item in data:
        try:
            records.append(model.model_validate(item))
        except ValidationError:
            logger.warning(f"Skipping malformed '{key}' element: {item!r}")
    return records


class PersistedStateStore:
    """Owns the watch history and My List collections.

    Args:
        storage: Key-value backend (injected; use MemoryStorage in tests)
        clock: Callable returning epoch milliseconds
        history_limit: Maximum history rows kept after every write
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        clock: Callable[[], int] = now_millis,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self.storage = storage
        self.clock = clock
        self.history_limit = history_limit

    # ========== Storage round-trip ==========

    def _read(self, key: str, model: type[BaseModel]) -> tuple[StoreStatus, list]:
        """Read one collection, classifying the outcome."""
        try:
            raw = self.storage.get(key)
        except StorageUnavailableError as e:
            logger.warning(f"Storage unavailable reading '{key}': {e}")
            return StoreStatus.UNAVAILABLE, []

        if raw is None:
            return StoreStatus.ABSENT, []

        try:
            return StoreStatus.OK, _parse_records(raw, model, key)
        except CorruptRecordError as e:
            logger.warning(f"Ignoring corrupt record: {e}")
            return StoreStatus.CORRUPT, []

    def _write(self, key: str, records: list) -> StoreStatus:
        """Persist one collection as a JSON array."""
        try:
            payload = dumps([record.to_storage() for record in records], ensure_ascii=False)
            self.storage.set(key, payload)
        except (StorageUnavailableError, TypeError, ValueError) as e:
            logger.error(f"Failed to persist '{key}': {e}")
            return StoreStatus.UNAVAILABLE
        return StoreStatus.OK

    # ========== Watch history ==========

    def record_watch_history(self, entry: WatchRecord | Mapping[str, Any]) -> None:
        """Record the episode currently being watched.

        Replaces any existing row for the same anime (one row per anime,
        regardless of episode), moves it to the front and keeps only the
        most recent ``history_limit`` rows.

        Args:
            entry: WatchRecord, or mapping with animeId/anime_id, animeTitle,
                animeImage and episode
        """
        record = entry if isinstance(entry, WatchRecord) else WatchRecord.model_validate(entry)
        status, history = self._read(WATCH_HISTORY_KEY, WatchHistoryEntry)
        if status is StoreStatus.UNAVAILABLE:
            return

        new_entry = WatchHistoryEntry(
            anime_id=record.anime_id,
            anime_title=record.anime_title,
            anime_image=record.anime_image,
            episode=record.episode,
            timestamp=self.clock(),
        )
        history = [new_entry] + [h for h in history if h.anime_id != record.anime_id]
        # Stable sort: a same-millisecond write stays ahead of older rows
        history.sort(key=lambda h: h.timestamp, reverse=True)
        del history[self.history_limit :]

        if self._write(WATCH_HISTORY_KEY, history) is StoreStatus.OK:
            logger.debug(f"Recorded '{record.anime_title}' ({record.anime_id}) ep {record.episode}")

    def list_watch_history(self) -> list[WatchHistoryEntry]:
        """Return history, most recently updated first. Never raises."""
        _, history = self._read(WATCH_HISTORY_KEY, WatchHistoryEntry)
        # Portal arrays keep updated rows in place, so order by timestamp here too
        history.sort(key=lambda h: h.timestamp, reverse=True)
        return history

    def get_watch_entry(self, anime_id: int) -> WatchHistoryEntry | None:
        """Return the history row for one anime, if any."""
        for entry in self.list_watch_history():
            if entry.anime_id == anime_id:
                return entry
        return None

    def clear_watch_history(self) -> None:
        """Delete the whole history. Safe to call when already empty."""
        try:
            self.storage.delete(WATCH_HISTORY_KEY)
            logger.info("Watch history cleared")
        except StorageUnavailableError as e:
            logger.error(f"Failed to clear watch history: {e}")

    # ========== My List ==========

    def add_to_my_list(self, item: ListItem | Mapping[str, Any]) -> bool:
        """Save an anime to My List.

        Returns:
            True if the anime was newly added, False if it was already there
            (nothing changes, the original ``added_at`` is kept) or the
            write failed
        """
        list_item = item if isinstance(item, ListItem) else ListItem.model_validate(item)
        status, my_list = self._read(MY_LIST_KEY, MyListEntry)
        if status is StoreStatus.UNAVAILABLE:
            return False

        if any(entry.anime_id == list_item.anime_id for entry in my_list):
            return False

        my_list.insert(
            0,
            MyListEntry(
                anime_id=list_item.anime_id,
                anime_title=list_item.anime_title,
                anime_image=list_item.anime_image,
                added_at=self.clock(),
            ),
        )
        if self._write(MY_LIST_KEY, my_list) is not StoreStatus.OK:
            return False

        logger.info(f"Added '{list_item.anime_title}' ({list_item.anime_id}) to My List")
        return True

    def remove_from_my_list(self, anime_id: int) -> None:
        """Remove an anime from My List (no-op if it isn't there)."""
        status, my_list = self._read(MY_LIST_KEY, MyListEntry)
        if status is StoreStatus.UNAVAILABLE:
            return

        filtered = [entry for entry in my_list if entry.anime_id != anime_id]
        self._write(MY_LIST_KEY, filtered)
        if len(filtered) != len(my_list):
            logger.info(f"Removed {anime_id} from My List")

    def is_in_my_list(self, anime_id: int) -> bool:
        return any(entry.anime_id == anime_id for entry in self.list_my_list())

    def list_my_list(self) -> list[MyListEntry]:
        """Return My List, most recently added first. Never raises."""
        _, my_list = self._read(MY_LIST_KEY, MyListEntry)
        return my_list


def build_state_store(app_settings: AppSettings) -> PersistedStateStore:
    """Compose the store from settings (backend + history limit)."""
    return PersistedStateStore(
        build_storage(app_settings.storage),
        history_limit=app_settings.storage.history_limit,
    )
