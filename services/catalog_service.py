"""Anime catalog client (Jikan v4 REST API).

Read-only lookups used to fill in watch records and list items:
- get_anime(): detail for one MyAnimeList ID
- get_top_anime(): most popular anime
- search_anime(): title search
- get_recommendations(): anime recommended alongside one ID

Payloads are validated at the boundary. Every call returns a CatalogResult;
network errors, bad statuses and malformed payloads become ``ok=False``.
"""

import requests
from pydantic import ValidationError

from models.config import CatalogSettings
from models.models import CatalogAnime, CatalogResult
from utils.exceptions import CatalogError
from utils.logging import get_logger

logger = get_logger(__name__)


class CatalogClient:
    """REST client for the Jikan API."""

    def __init__(
        self,
        api_url: str = "https://api.jikan.moe/v4",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, catalog_settings: CatalogSettings) -> "CatalogClient":
        return cls(catalog_settings.api_url, catalog_settings.timeout_seconds)

    def _get(self, path: str, params: dict | None = None):
        """GET a Jikan endpoint and return its ``data`` member.

        Raises:
            CatalogError: On network errors, non-200 status or non-JSON body
        """
        url = f"{self.api_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise CatalogError(f"Request to {url} failed: {e}") from e

        if response.status_code != 200:
            raise CatalogError(f"Request to {url} failed with status {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise CatalogError(f"Response from {url} is not JSON") from e

        if not isinstance(body, dict) or "data" not in body:
            raise CatalogError(f"Response from {url} has no 'data'")
        return body["data"]

    def _get_one(self, path: str) -> CatalogResult:
        try:
            data = self._get(path)
            return CatalogResult.success(CatalogAnime.model_validate(data))
        except CatalogError as e:
            logger.warning(str(e))
            return CatalogResult.failure(str(e))
        except ValidationError as e:
            logger.warning(f"Invalid anime payload from {path}: {e.error_count()} errors")
            return CatalogResult.failure(f"Invalid anime payload from {path}")

    def _get_many(self, path: str, params: dict | None = None, entry_key: str | None = None) -> CatalogResult:
        """GET a listing; ``entry_key`` unwraps items nested like ``{"entry": {...}}``."""
        try:
            data = self._get(path, params)
        except CatalogError as e:
            logger.warning(str(e))
            return CatalogResult.failure(str(e))

        if not isinstance(data, list):
            return CatalogResult.failure(f"Expected a list from {path}")

        items = []
        for raw in data:
            if entry_key is not None:
                raw = raw.get(entry_key) if isinstance(raw, dict) else None
            try:
                items.append(CatalogAnime.model_validate(raw))
            except ValidationError:
                logger.debug(f"Skipping invalid item from {path}")
        return CatalogResult.success(items)

    def get_anime(self, anime_id: int) -> CatalogResult:
        """Fetch one anime by MyAnimeList ID."""
        return self._get_one(f"/anime/{anime_id}")

    def get_top_anime(self, limit: int = 12) -> CatalogResult:
        """Fetch the most popular anime (same feed as the watch page's recommendations)."""
        return self._get_many("/top/anime", {"filter": "bypopularity", "limit": limit})

    def search_anime(self, query: str, limit: int = 10) -> CatalogResult:
        """Search anime by title."""
        return self._get_many("/anime", {"q": query, "limit": limit})

    def get_recommendations(self, anime_id: int, limit: int = 10) -> CatalogResult:
        """Fetch anime recommended alongside ``anime_id`` (first ``limit`` entries)."""
        result = self._get_many(f"/anime/{anime_id}/recommendations", entry_key="entry")
        if not result.ok:
            return result
        return CatalogResult.success(result.data[:limit])


def episode_count(anime: CatalogAnime | None, default: int = 12) -> int:
    """Number of episodes to offer for an anime, ``default`` when unknown."""
    if anime is None or not anime.episodes:
        return default
    return anime.episodes
