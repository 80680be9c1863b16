"""Watch command handler.

This module handles:
- Resolving title/poster for an anime (flags first, catalog second)
- Picking the episode to record (explicit, or the one after the last watched)
- Recording the view in watch history
"""

from pydantic import ValidationError
from rich.markup import escape

from models.models import CatalogAnime, WatchRecord
from services.catalog_service import CatalogClient, episode_count
from services.state_store import PersistedStateStore
from ui.components import console, loading


def next_episode(store: PersistedStateStore, anime_id: int, total_episodes: int) -> int:
    """Episode after the last watched one, never past ``total_episodes``."""
    entry = store.get_watch_entry(anime_id)
    if entry is None:
        return 1
    return min(entry.episode + 1, max(total_episodes, entry.episode))


def fetch_anime(catalog: CatalogClient, anime_id: int) -> CatalogAnime | None:
    """Catalog detail for one anime, None when the lookup fails."""
    with loading(f"Fetching anime {anime_id}..."):
        result = catalog.get_anime(anime_id)
    if not result.ok:
        console.print(f"[warning]⚠️  Catalog lookup failed: {escape(result.error or '')}[/warning]")
        return None
    return result.data


def watch(args, store: PersistedStateStore, catalog: CatalogClient, default_episode_count: int = 12) -> None:
    """Record that an episode of ``args.anime_id`` is being watched."""
    if args.episode is not None and args.episode < 1:
        console.print(f"[error]❌ Episode must be 1 or greater (got {args.episode}).[/error]")
        return

    anime = None
    if args.title is None:
        anime = fetch_anime(catalog, args.anime_id)

    title = args.title if args.title is not None else (anime.title if anime else "")
    image = args.image if args.image is not None else (anime.image_url if anime else "")

    if args.episode is not None:
        episode = args.episode
    else:
        episode = next_episode(store, args.anime_id, episode_count(anime, default_episode_count))

    try:
        record = WatchRecord(anime_id=args.anime_id, anime_title=title, anime_image=image, episode=episode)
    except ValidationError as e:
        console.print(f"[error]❌ Invalid watch record: {e.error_count()} errors[/error]")
        return

    store.record_watch_history(record)
    console.print(f"[success]▶️  {escape(title) or args.anime_id} - episode {episode} saved to history.[/success]")
