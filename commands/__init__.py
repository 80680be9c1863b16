"""Command handlers for ani-shelf CLI.

Each module handles a specific user interaction flow:
- history.py: Show or clear watch history
- watch.py: Record the episode being watched
- mylist.py: Show, add, remove and check My List entries
- top.py: Popular anime and title search in the catalog
- detail.py: Detail view for one anime with recommendations
- menu.py: Interactive main menu
"""

from commands.history import history
from commands.detail import info
from commands.menu import main_menu
from commands.mylist import my_list
from commands.top import search, top
from commands.watch import watch

__all__ = ["history", "info", "main_menu", "my_list", "search", "top", "watch"]
