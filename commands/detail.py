"""Anime detail command handler.

Shows one anime from the catalog (score, episodes, genres, synopsis) with
its My List / watch history state, followed by recommended anime.
"""

from rich.markup import escape

from commands.watch import fetch_anime
from services.catalog_service import CatalogClient
from services.state_store import PersistedStateStore
from ui.components import anime_panel, catalog_table, console, loading


def info(args, store: PersistedStateStore, catalog: CatalogClient) -> None:
    anime = fetch_anime(catalog, args.anime_id)
    if anime is None:
        return

    last = store.get_watch_entry(anime.mal_id)
    saved_ids = {entry.anime_id for entry in store.list_my_list()}
    console.print(
        anime_panel(anime, saved=anime.mal_id in saved_ids, last_episode=last.episode if last else None)
    )

    with loading("Fetching recommendations..."):
        result = catalog.get_recommendations(anime.mal_id)
    if not result.ok:
        console.print(f"[warning]⚠️  Could not load recommendations: {escape(result.error or '')}[/warning]")
        return
    if not result.data:
        console.print("[menu.muted]No recommendations yet.[/menu.muted]")
        return
    console.print(catalog_table(result.data, saved_ids, title="Recommendations"))
