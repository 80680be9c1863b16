"""ani-shelf command line: argument parsing and command dispatch."""

import argparse

from models.config import settings
from services.catalog_service import CatalogClient
from services.state_store import build_state_store
from utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def positive_int(value: str) -> int:
    """argparse type for episode numbers (1-based)."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not a whole number") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be 1 or greater, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ani-shelf",
        description="Keep track of the anime you watch, from the terminal.",
    )
    parser.add_argument("--debug", "-d", action="store_true")
    parser.add_argument(
        "--storage",
        choices=["json", "diskcache", "memory"],
        help="Override the storage backend for this run",
    )

    # Create subparsers for commands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    history_parser = subparsers.add_parser("history", help="Show watch history")
    history_parser.add_argument("--clear", action="store_true", help="Delete the whole history")

    watch_parser = subparsers.add_parser("watch", help="Record the episode you are watching")
    watch_parser.add_argument("anime_id", type=int)
    watch_parser.add_argument(
        "--episode",
        "-e",
        type=positive_int,
        help="Episode number (default: the one after the last watched)",
    )
    watch_parser.add_argument("--title", help="Title (skips the catalog lookup)")
    watch_parser.add_argument("--image", help="Poster URL")

    list_parser = subparsers.add_parser("list", help="My List")
    list_parser.add_argument(
        "action",
        nargs="?",
        default="show",
        choices=["show", "add", "remove", "check"],
        help="show (default) | add | remove | check",
    )
    list_parser.add_argument("anime_id", nargs="?", type=int)
    list_parser.add_argument("--title", help="Title (skips the catalog lookup)")
    list_parser.add_argument("--image", help="Poster URL")

    top_parser = subparsers.add_parser("top", help="Most popular anime in the catalog")
    top_parser.add_argument("--limit", "-n", type=int, default=12)

    search_parser = subparsers.add_parser("search", help="Search the catalog by title")
    search_parser.add_argument("query")
    search_parser.add_argument("--limit", "-n", type=int, default=10)

    info_parser = subparsers.add_parser("info", help="Anime details and recommendations")
    info_parser.add_argument("anime_id", type=int)

    return parser


def cli(argv: list[str] | None = None) -> None:
    """Parse arguments and dispatch to a command handler."""
    args = build_parser().parse_args(argv)
    configure_logging(debug=args.debug)

    app_settings = settings
    if args.storage:
        app_settings = settings.model_copy(
            update={"storage": settings.storage.model_copy(update={"backend": args.storage})}
        )
    store = build_state_store(app_settings)
    catalog = CatalogClient.from_settings(app_settings.catalog)
    logger.debug(f"Using {app_settings.storage.backend} storage")

    if args.command == "history":
        from commands.history import history

        history(args, store)
    elif args.command == "watch":
        from commands.watch import watch

        watch(args, store, catalog, app_settings.catalog.default_episode_count)
    elif args.command == "list":
        from commands.mylist import my_list

        my_list(args, store, catalog)
    elif args.command == "top":
        from commands.top import top

        top(args, store, catalog)
    elif args.command == "search":
        from commands.top import search

        search(args, store, catalog)
    elif args.command == "info":
        from commands.detail import info

        info(args, store, catalog)
    else:
        from commands.menu import main_menu

        main_menu(store)


if __name__ == "__main__":
    cli()
