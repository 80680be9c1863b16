"""Interactive main menu.

This module handles:
- Continue watching from history (same or next episode)
- Browsing My List (watch next episode or remove)
- Clearing history with confirmation
"""

from rich.markup import escape

from models.models import WatchRecord
from services.state_store import PersistedStateStore
from ui.components import console, format_relative, menu_navigate

CONTINUE = "▶️  Continue watching"
MY_LIST = "⭐ My List"
CLEAR = "🗑️  Clear history"


def continue_watching(store: PersistedStateStore) -> None:
    """Pick a history entry and record the same or the next episode."""
    entries = store.list_watch_history()
    if not entries:
        console.print("[menu.muted]No watch history yet.[/menu.muted]")
        return

    now = store.clock()
    labels = {
        f"{e.anime_title or '(untitled)'} [{e.anime_id}] (Ep {e.episode}, {format_relative(e.timestamp, now)})": e
        for e in entries
    }
    selected = menu_navigate(list(labels), msg="Continue watching.")
    if not selected:
        return
    entry = labels[selected]

    options = {
        f"▶️  Episode {entry.episode} (again)": entry.episode,
        f"⏭️  Episode {entry.episode + 1} (next)": entry.episode + 1,
    }
    choice = menu_navigate(list(options), msg=f"{entry.anime_title} - where to continue?")
    if not choice:
        return

    episode = options[choice]
    store.record_watch_history(
        WatchRecord(
            anime_id=entry.anime_id,
            anime_title=entry.anime_title,
            anime_image=entry.anime_image,
            episode=episode,
        )
    )
    console.print(f"[success]▶️  {escape(entry.anime_title)} - episode {episode} saved to history.[/success]")


def browse_my_list(store: PersistedStateStore) -> None:
    """Pick a saved anime and start watching it or remove it."""
    entries = store.list_my_list()
    if not entries:
        console.print("[menu.muted]My List is empty.[/menu.muted]")
        return

    labels = {f"{e.anime_title or '(untitled)'} [{e.anime_id}]": e for e in entries}
    selected = menu_navigate(list(labels), msg="My List")
    if not selected:
        return
    entry = labels[selected]

    watch_label = "▶️  Start watching"
    remove_label = "🗑️  Remove from My List"
    choice = menu_navigate([watch_label, remove_label], msg=entry.anime_title)

    if choice == watch_label:
        last = store.get_watch_entry(entry.anime_id)
        episode = last.episode + 1 if last else 1
        store.record_watch_history(
            WatchRecord(
                anime_id=entry.anime_id,
                anime_title=entry.anime_title,
                anime_image=entry.anime_image,
                episode=episode,
            )
        )
        console.print(f"[success]▶️  {escape(entry.anime_title)} - episode {episode} saved to history.[/success]")
    elif choice == remove_label:
        store.remove_from_my_list(entry.anime_id)
        console.print(f"[success]🗑️  {escape(entry.anime_title)} removed from My List.[/success]")


def clear_history(store: PersistedStateStore) -> None:
    confirm = menu_navigate(
        ["✅ Yes, clear", "❌ Cancel"],
        msg="Clear the whole watch history?",
    )
    if confirm == "✅ Yes, clear":
        store.clear_watch_history()
        console.print("[success]✅ Watch history cleared.[/success]")


def main_menu(store: PersistedStateStore) -> None:
    """Loop over the main menu until the user goes back."""
    actions = {
        CONTINUE: continue_watching,
        MY_LIST: browse_my_list,
        CLEAR: clear_history,
    }
    while True:
        selected = menu_navigate(list(actions), msg="ani-shelf")
        if not selected:
            break
        actions[selected](store)
