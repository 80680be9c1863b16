"""My List command handler.

This module handles:
- Showing saved anime
- Adding (with catalog lookup for title/poster), removing and checking entries
"""

from rich.markup import escape

from commands.watch import fetch_anime
from models.models import ListItem
from services.catalog_service import CatalogClient
from services.state_store import PersistedStateStore
from ui.components import console, my_list_table


def my_list(args, store: PersistedStateStore, catalog: CatalogClient) -> None:
    """Dispatch ``list [show|add|remove|check]``."""
    action = args.action or "show"

    if action == "show":
        entries = store.list_my_list()
        if not entries:
            console.print("[menu.muted]My List is empty.[/menu.muted]")
            return
        console.print(my_list_table(entries, store.clock()))
        return

    if args.anime_id is None:
        console.print(f"[error]❌ '{action}' needs an anime ID.[/error]")
        return

    if action == "add":
        if store.is_in_my_list(args.anime_id):
            console.print(f"[warning]{args.anime_id} is already in My List.[/warning]")
            return

        title, image = args.title, args.image
        if title is None:
            anime = fetch_anime(catalog, args.anime_id)
            title = anime.title if anime else ""
            if image is None and anime:
                image = anime.image_url
        item = ListItem(anime_id=args.anime_id, anime_title=title, anime_image=image or "")
        if store.add_to_my_list(item):
            console.print(f"[success]✅ {escape(title) or args.anime_id} added to My List.[/success]")
        else:
            console.print(f"[error]❌ Could not save {escape(title) or args.anime_id} to My List.[/error]")
    elif action == "remove":
        if not store.is_in_my_list(args.anime_id):
            console.print(f"[menu.muted]{args.anime_id} is not in My List.[/menu.muted]")
            return
        store.remove_from_my_list(args.anime_id)
        console.print(f"[success]🗑️  {args.anime_id} removed from My List.[/success]")
    elif action == "check":
        if store.is_in_my_list(args.anime_id):
            console.print(f"[success]★ {args.anime_id} is in My List.[/success]")
        else:
            console.print(f"[menu.muted]{args.anime_id} is not in My List.[/menu.muted]")
