"""Data models and configuration.

Pydantic models and configuration:
- models: Watch history, My List and catalog data models
- config: Centralized configuration (Pydantic Settings)
"""

from models.models import (
    CatalogAnime,
    CatalogResult,
    ListItem,
    MyListEntry,
    StoreStatus,
    WatchHistoryEntry,
    WatchRecord,
)
from models.config import settings, get_data_path

__all__ = [
    "CatalogAnime",
    "CatalogResult",
    "ListItem",
    "MyListEntry",
    "StoreStatus",
    "WatchHistoryEntry",
    "WatchRecord",
    "settings",
    "get_data_path",
]
