"""Application configuration using Pydantic v2.

Centralized settings for ani-shelf including:
- Storage backend and collection limits
- Catalog API endpoint
- OS-specific data paths

Configuration can be overridden via environment variables:
    ANI_SHELF__STORAGE__BACKEND=diskcache
    ANI_SHELF__STORAGE__HISTORY_LIMIT=50
    ANI_SHELF__CATALOG__TIMEOUT_SECONDS=5
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Storage keys shared with the web portal's local storage layout
WATCH_HISTORY_KEY = "watchHistory"
MY_LIST_KEY = "myList"


def get_data_path() -> Path:
    """Get OS-specific data directory for ani-shelf.

    Returns:
        Path: ~/.local/state/ani-shelf (Linux/macOS) or %APPDATA%\\ani-shelf (Windows)
    """
    if os.name == "nt":
        return Path(os.environ.get("APPDATA", Path.home())) / "ani-shelf"
    return Path.home() / ".local" / "state" / "ani-shelf"


class StorageSettings(BaseModel):
    """Persisted state configuration."""

    backend: Literal["json", "diskcache", "memory"] = Field(
        "json",
        description="Key-value backend: json file, diskcache (SQLite) or in-memory",
    )
    json_file: Path = Field(
        default_factory=lambda: get_data_path() / "state.json",
        description="Path to the JSON key-value file (json backend)",
    )
    cache_dir: Path = Field(
        default_factory=lambda: get_data_path() / "state",
        description="Path to the diskcache directory (diskcache backend)",
    )
    history_limit: int = Field(
        20,
        ge=1,
        le=500,
        description="Maximum number of watch history entries kept",
    )


class CatalogSettings(BaseModel):
    """Anime catalog (Jikan v4) configuration."""

    api_url: str = Field(
        "https://api.jikan.moe/v4",
        description="Jikan REST API base URL",
    )
    timeout_seconds: float = Field(
        10.0,
        gt=0,
        le=60,
        description="HTTP timeout for catalog requests",
    )
    default_episode_count: int = Field(
        12,
        ge=1,
        description="Episode count assumed when the catalog doesn't know it",
    )


class AppSettings(BaseSettings):
    """Root application settings with environment variable support.

    Environment variables use the prefix ANI_SHELF__ with nested delimiters:
    - ANI_SHELF__STORAGE__BACKEND=memory
    - ANI_SHELF__CATALOG__API_URL=http://localhost:8080/v4

    Can also be configured via .env file in project root.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",  # ANI_SHELF__STORAGE__BACKEND
        env_prefix="ANI_SHELF__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )

    storage: StorageSettings = Field(default_factory=StorageSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)


# Singleton instance - import and use throughout the app
settings = AppSettings()
