"""Pydantic data models for persisted state and catalog data.

Defines DTOs (Data Transfer Objects) for:
- WatchRecord / WatchHistoryEntry: Last-viewed episode per anime
- ListItem / MyListEntry: Anime saved to the personal list
- StoreStatus: Internal result of a storage round-trip
- CatalogAnime / CatalogResult: Validated catalog API payloads

Field names are snake_case in Python; the stored JSON uses the camelCase
keys of the web portal's local storage (``animeId``, ``addedAt`` ...).
"""

from enum import Enum
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Type aliases for common patterns
AnimeID: TypeAlias = int
TimestampMillis: TypeAlias = int


class _StoredModel(BaseModel):
    """Base for records stored as camelCase JSON."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_storage(self) -> dict[str, Any]:
        """Dump with the camelCase keys used on disk."""
        return self.model_dump(by_alias=True)


class WatchRecord(_StoredModel):
    """A watch event supplied by the caller (no timestamp yet).

    Attributes:
        anime_id: Stable catalog identifier of the anime
        anime_title: Display title (may be empty)
        anime_image: Poster URL, informational only (may be empty)
        episode: Last-viewed episode, 1-based
    """

    anime_id: AnimeID = Field(..., alias="animeId", description="Catalog anime ID")
    anime_title: str = Field("", alias="animeTitle", description="Display title")
    anime_image: str = Field("", alias="animeImage", description="Poster URL")
    episode: int = Field(..., ge=1, description="Last-viewed episode (1-based)")


class WatchHistoryEntry(WatchRecord):
    """Single row of watch history, stamped at write time."""

    timestamp: TimestampMillis = Field(..., description="Epoch milliseconds of the write")


class ListItem(_StoredModel):
    """An anime the caller wants to save to My List."""

    anime_id: AnimeID = Field(..., alias="animeId", description="Catalog anime ID")
    anime_title: str = Field("", alias="animeTitle", description="Display title")
    anime_image: str = Field("", alias="animeImage", description="Poster URL")


class MyListEntry(ListItem):
    """Single row of My List. ``added_at`` is set once, on insertion."""

    added_at: TimestampMillis = Field(..., alias="addedAt", description="Epoch milliseconds of insertion")


class StoreStatus(str, Enum):
    """Outcome of a storage read or write inside the state store."""

    OK = "ok"
    ABSENT = "absent"
    CORRUPT = "corrupt"
    UNAVAILABLE = "unavailable"


class CatalogAnime(BaseModel):
    """Anime as returned by the catalog API, reduced to what the app uses.

    Attributes:
        mal_id: MyAnimeList ID (used as ``anime_id`` everywhere else)
        title: Default title
        image_url: Large JPG poster, empty when the payload has none
        episodes: Total episodes, None while airing/unknown
        score: Average score, None when unrated
        synopsis: Optional synopsis
        genres: Genre names, flattened from Jikan's ``[{"name": ...}]``
    """

    model_config = ConfigDict(extra="ignore")

    mal_id: AnimeID = Field(..., gt=0, description="MyAnimeList ID")
    title: str = Field(..., min_length=1, description="Default title")
    image_url: str = Field("", description="Poster URL")
    episodes: int | None = Field(None, ge=0, description="Total episodes")
    score: float | None = Field(None, ge=0, le=10, description="Average score")
    synopsis: str | None = Field(None, description="Synopsis")
    genres: list[str] = Field(default_factory=list, description="Genre names")

    @model_validator(mode="before")
    @classmethod
    def flatten_images(cls, data: Any) -> Any:
        """Pull ``images.jpg.large_image_url`` up into ``image_url``."""
        if isinstance(data, dict) and "image_url" not in data:
            images = data.get("images")
            jpg = images.get("jpg") if isinstance(images, dict) else None
            url = jpg.get("large_image_url") if isinstance(jpg, dict) else None
            data = {**data, "image_url": url or ""}
        return data

    @field_validator("episodes", mode="before")
    @classmethod
    def zero_episodes_unknown(cls, v: Any) -> Any:
        """Jikan reports 0 for unknown counts on some entries."""
        if v == 0:
            return None
        return v

    @field_validator("genres", mode="before")
    @classmethod
    def genre_names(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            names = [g.get("name") if isinstance(g, dict) else g for g in v]
            return [name for name in names if isinstance(name, str) and name]
        return v

    def to_list_item(self) -> ListItem:
        """Convert to the input shape accepted by My List."""
        return ListItem(anime_id=self.mal_id, anime_title=self.title, anime_image=self.image_url)


class CatalogResult(BaseModel):
    """Tagged success/failure result of a catalog call.

    Attributes:
        ok: True when the payload was fetched and validated
        data: CatalogAnime (detail) or list of CatalogAnime (listings)
        error: Human-readable reason when ok is False
    """

    ok: bool = Field(..., description="Whether the call succeeded")
    data: CatalogAnime | list[CatalogAnime] | None = Field(None, description="Validated payload")
    error: str | None = Field(None, description="Failure reason")

    @classmethod
    def success(cls, data: CatalogAnime | list[CatalogAnime]) -> "CatalogResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: str) -> "CatalogResult":
        return cls(ok=False, error=error)
