"""Watch history command handler.

This module handles:
- Showing the watch history table
- Clearing the whole history
"""

from services.state_store import PersistedStateStore
from ui.components import console, history_table


def history(args, store: PersistedStateStore) -> None:
    """Show or clear watch history."""
    if args.clear:
        store.clear_watch_history()
        console.print("[success]✅ Watch history cleared.[/success]")
        return

    entries = store.list_watch_history()
    if not entries:
        console.print("[menu.muted]No watch history yet.[/menu.muted]")
        return

    console.print(history_table(entries, store.clock()))
