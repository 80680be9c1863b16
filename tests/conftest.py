"""
Shared test fixtures and configuration for ani-shelf test suite.

This module provides:
- Storage fixtures (in-memory, failing, file-backed)
- A deterministic clock and a ready-made state store
- Sample data fixtures (watch records, list items, Jikan payloads)
"""

from argparse import Namespace
from unittest.mock import Mock

import pytest
import requests

from models.models import ListItem, WatchRecord
from services.state_store import PersistedStateStore
from utils.exceptions import StorageUnavailableError
from utils.persistence import JSONFileStorage, MemoryStorage


# ========== Clock & Storage Fixtures ==========


class FakeClock:
    """Epoch-ms clock that advances ``step`` ms after every read."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1000) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value


class FailingStorage:
    """Storage whose every call fails like a disabled/full backend."""

    def __init__(self, fail_reads: bool = True, fail_writes: bool = True) -> None:
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageUnavailableError("storage disabled")
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageUnavailableError("quota exceeded")
        self.data[key] = value

    def delete(self, key: str) -> None:
        if self.fail_writes:
            raise StorageUnavailableError("storage disabled")
        self.data.pop(key, None)


@pytest.fixture
def clock():
    """Deterministic clock, 1 second per read."""
    return FakeClock()


@pytest.fixture
def memory_storage():
    """Fresh in-memory key-value storage."""
    return MemoryStorage()


@pytest.fixture
def store(memory_storage, clock):
    """State store on in-memory storage with the deterministic clock."""
    return PersistedStateStore(memory_storage, clock=clock)


@pytest.fixture
def json_storage(tmp_path):
    """JSON file storage inside a temp directory (file not created yet)."""
    return JSONFileStorage(tmp_path / "state" / "state.json")


# ========== Sample Data Fixtures ==========


@pytest.fixture
def record_frieren():
    """Watch record for Frieren episode 3."""
    return WatchRecord(
        anime_id=52991,
        anime_title="Sousou no Frieren",
        anime_image="https://cdn.myanimelist.net/images/anime/1015/138006l.jpg",
        episode=3,
    )


@pytest.fixture
def item_fmab():
    """My List item for Fullmetal Alchemist: Brotherhood."""
    return ListItem(
        anime_id=5114,
        anime_title="Fullmetal Alchemist: Brotherhood",
        anime_image="https://cdn.myanimelist.net/images/anime/1208/94745l.jpg",
    )


@pytest.fixture
def jikan_fmab():
    """Realistic (trimmed) Jikan v4 anime payload."""
    return {
        "mal_id": 5114,
        "url": "https://myanimelist.net/anime/5114/Fullmetal_Alchemist__Brotherhood",
        "images": {
            "jpg": {
                "image_url": "https://cdn.myanimelist.net/images/anime/1208/94745.jpg",
                "large_image_url": "https://cdn.myanimelist.net/images/anime/1208/94745l.jpg",
            }
        },
        "title": "Fullmetal Alchemist: Brotherhood",
        "type": "TV",
        "episodes": 64,
        "score": 9.1,
        "synopsis": "After a horrific alchemy experiment goes wrong...",
    }


@pytest.fixture
def jikan_frieren_airing():
    """Jikan payload for a show whose episode count is unknown."""
    return {
        "mal_id": 52991,
        "title": "Sousou no Frieren",
        "images": {"jpg": {"large_image_url": "https://cdn.myanimelist.net/images/anime/1015/138006l.jpg"}},
        "episodes": None,
        "score": None,
    }


# ========== HTTP Fixtures ==========


def make_response(status_code: int = 200, body=None, json_error: bool = False) -> Mock:
    """Build a requests.Response-like mock."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def mock_session():
    """requests.Session mock; set ``.get.return_value`` per test."""
    return Mock(spec=requests.Session)


# ========== CLI Fixtures ==========


@pytest.fixture
def make_args():
    """Build argparse Namespaces for command handlers."""

    def _make(**kwargs):
        defaults = {"title": None, "image": None, "episode": None, "anime_id": None}
        defaults.update(kwargs)
        return Namespace(**defaults)

    return _make
