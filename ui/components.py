"""Reusable UI components: menu_navigate(), loading(), tables

This module consolidates the terminal presentation layer:
- menu_navigate() - Interactive menus with InquirerPy
- loading() - Rich spinners for API calls
- history_table() / my_list_table() / catalog_table() - Rich tables
- anime_panel() - Detail view for one anime
- format_relative() - "5 minutes ago" style timestamps
"""

import sys
from contextlib import contextmanager
from datetime import datetime

from InquirerPy import inquirer
from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table
from rich.theme import Theme

from models.models import CatalogAnime, MyListEntry, WatchHistoryEntry

# Catppuccin Mocha Theme
CATPPUCCIN_MOCHA = Theme(
    {
        "menu.title": "bold #cba6f7",  # Purple header
        "menu.text": "#cdd6f4",  # Light text
        "menu.muted": "#6c7086",  # Muted gray
        "info": "#89dceb",  # Sky blue for info
        "success": "#a6e3a1",  # Green for success
        "warning": "#f9e2af",  # Yellow for warnings
        "error": "#f38ba8",  # Red for errors
    }
)

# Global console with theme
console = Console(theme=CATPPUCCIN_MOCHA)

BACK = "← Back"
QUIT = "Quit"


def format_relative(timestamp_ms: int, now_ms: int) -> str:
    """Format an epoch-ms timestamp relative to ``now_ms``.

    Under an hour shows minutes, under a day hours, under a week days;
    older timestamps show the calendar date.
    """
    diff_ms = max(0, now_ms - timestamp_ms)
    minutes = diff_ms // 60_000
    hours = diff_ms // 3_600_000
    days = diff_ms // 86_400_000

    if minutes < 60:
        return f"{minutes} min ago"
    if hours < 24:
        return f"{hours} h ago"
    if days < 7:
        return f"{days} d ago"
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d")


def history_table(history: list[WatchHistoryEntry], now_ms: int) -> Table:
    table = Table(title="Watch History", title_style="menu.title", header_style="info")
    table.add_column("ID", justify="right", style="menu.muted")
    table.add_column("Title", style="menu.text")
    table.add_column("Episode", justify="right")
    table.add_column("Watched")

    for entry in history:
        table.add_row(
            str(entry.anime_id),
            escape(entry.anime_title) or "(untitled)",
            str(entry.episode),
            format_relative(entry.timestamp, now_ms),
        )
    return table


def my_list_table(my_list: list[MyListEntry], now_ms: int) -> Table:
    table = Table(title="My List", title_style="menu.title", header_style="info")
    table.add_column("ID", justify="right", style="menu.muted")
    table.add_column("Title", style="menu.text")
    table.add_column("Added")

    for entry in my_list:
        table.add_row(
            str(entry.anime_id),
            escape(entry.anime_title) or "(untitled)",
            format_relative(entry.added_at, now_ms),
        )
    return table


def catalog_table(animes: list[CatalogAnime], saved_ids: set[int], title: str = "Top Anime") -> Table:
    table = Table(title=title, title_style="menu.title", header_style="info")
    table.add_column("ID", justify="right", style="menu.muted")
    table.add_column("Title", style="menu.text")
    table.add_column("Episodes", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Saved", justify="center")

    for anime in animes:
        table.add_row(
            str(anime.mal_id),
            escape(anime.title),
            str(anime.episodes) if anime.episodes else "?",
            f"{anime.score:.2f}" if anime.score is not None else "-",
            "★" if anime.mal_id in saved_ids else "",
        )
    return table


def anime_panel(anime: CatalogAnime, saved: bool, last_episode: int | None = None) -> Panel:
    """Detail view: score, episodes, genres, synopsis and local state."""
    score = f"{anime.score:.2f}" if anime.score is not None else "-"
    episodes = str(anime.episodes) if anime.episodes else "?"
    lines = [
        f"[info]Score:[/info] {score}    [info]Episodes:[/info] {episodes}    [info]ID:[/info] {anime.mal_id}",
    ]
    if anime.genres:
        lines.append(f"[info]Genres:[/info] {escape(', '.join(anime.genres))}")
    lines.append("[success]★ In My List[/success]" if saved else "[menu.muted]Not in My List[/menu.muted]")
    if last_episode is not None:
        lines.append(f"[info]Last watched:[/info] episode {last_episode}")
    lines.append("")
    lines.append(escape(anime.synopsis) if anime.synopsis else "[menu.muted]No synopsis available.[/menu.muted]")

    return Panel("\n".join(lines), title=f"[menu.title]{escape(anime.title)}[/menu.title]", style="menu.text")


def menu_navigate(opts: list[str], msg: str = "") -> str | None:
    """Display interactive menu for navigation (returns None instead of exit).

    Args:
        opts: List of menu options
        msg: Title message

    Returns:
        Selected option or None if user cancels

    Behavior:
        - Adds "← Back" and "Quit" automatically
        - "← Back" returns None (go back)
        - "Quit" exits to terminal
        - Q key goes back
    """
    choices = [*opts, BACK, QUIT]

    answer = inquirer.fuzzy(
        message=msg or "Menu",
        choices=choices,
        default=None,
        qmark="",
        amark="►",
        pointer="►",
        instruction="(Type to search, Q to go back)",
        mandatory=False,
        keybindings={
            "skip": [
                {"key": "q"},
                {"key": "Q"},
            ],
        },
        max_height="70%",
        raise_keyboard_interrupt=False,
    ).execute()

    if answer == BACK or answer is None:
        return None

    if answer == QUIT:
        sys.exit(0)

    return answer


@contextmanager
def loading(msg: str = "Loading..."):
    """Context manager for displaying loading indicators during operations.

    Args:
        msg: The message to display alongside the spinner

    Usage:
        with loading("Fetching anime..."):
            result = client.get_anime(5114)

    """
    with Live(
        Spinner("dots", text=msg),
        console=console,
        refresh_per_second=12.5,
        transient=True,  # Spinner disappears after completion
    ):
        yield
