"""Catalog browsing command handlers.

This module handles:
- Top anime (the catalog's most popular list)
- Title search

Both star the anime already saved in My List.
"""

from rich.markup import escape

from models.models import CatalogResult
from services.catalog_service import CatalogClient
from services.state_store import PersistedStateStore
from ui.components import catalog_table, console, loading


def _show(result: CatalogResult, store: PersistedStateStore, title: str) -> None:
    if not result.ok:
        console.print(f"[error]❌ Could not load {title.lower()}: {escape(result.error or '')}[/error]")
        return
    if not result.data:
        console.print("[menu.muted]Catalog returned no anime.[/menu.muted]")
        return

    saved_ids = {entry.anime_id for entry in store.list_my_list()}
    console.print(catalog_table(result.data, saved_ids, title=title))


def top(args, store: PersistedStateStore, catalog: CatalogClient) -> None:
    with loading("Fetching top anime..."):
        result = catalog.get_top_anime(limit=args.limit)
    _show(result, store, "Top Anime")


def search(args, store: PersistedStateStore, catalog: CatalogClient) -> None:
    with loading(f"Searching '{escape(args.query)}'..."):
        result = catalog.search_anime(args.query, limit=args.limit)
    _show(result, store, f"Results for '{escape(args.query)}'")
