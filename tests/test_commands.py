"""
Tests for commands/ and main.py

Coverage:
- history: show / clear
- watch: catalog lookup, explicit flags, next-episode logic
- list: show / add / remove / check
- top: saved markers and catalog failures
- info: detail panel, My List state, recommendations
- menu: continue watching, My List actions, clear confirmation
- main.cli: argument parsing and dispatch
"""

from unittest.mock import Mock, patch

import pytest

import main
from commands import history, info, my_list, search, top, watch
from commands.menu import CLEAR, CONTINUE, MY_LIST, main_menu
from commands.watch import next_episode
from models.config import settings
from models.models import CatalogAnime, CatalogResult, ListItem, WatchRecord
from services.catalog_service import CatalogClient
from services.state_store import PersistedStateStore

from conftest import FailingStorage


@pytest.fixture
def catalog(jikan_fmab):
    """Catalog mock that knows Fullmetal Alchemist: Brotherhood."""
    client = Mock(spec=CatalogClient)
    client.get_anime.return_value = CatalogResult.success(CatalogAnime.model_validate(jikan_fmab))
    return client


@pytest.fixture
def offline_catalog():
    client = Mock(spec=CatalogClient)
    client.get_anime.return_value = CatalogResult.failure("connection refused")
    client.get_top_anime.return_value = CatalogResult.failure("connection refused")
    return client


class TestHistoryCommand:
    def test_empty_history(self, store, make_args, capsys):
        history(make_args(clear=False), store)
        assert "No watch history" in capsys.readouterr().out

    def test_shows_entries(self, store, record_frieren, make_args, capsys):
        store.record_watch_history(record_frieren)
        history(make_args(clear=False), store)

        out = capsys.readouterr().out
        assert "Frieren" in out
        assert "52991" in out

    def test_clear(self, store, record_frieren, make_args):
        store.record_watch_history(record_frieren)
        history(make_args(clear=True), store)
        assert store.list_watch_history() == []


class TestWatchCommand:
    def test_fetches_title_from_catalog(self, store, catalog, make_args):
        watch(make_args(anime_id=5114), store, catalog)

        entry = store.get_watch_entry(5114)
        assert entry.anime_title == "Fullmetal Alchemist: Brotherhood"
        assert entry.anime_image.endswith("94745l.jpg")
        assert entry.episode == 1

    def test_explicit_title_skips_catalog(self, store, catalog, make_args):
        watch(make_args(anime_id=1, title="Cowboy Bebop", episode=5), store, catalog)

        catalog.get_anime.assert_not_called()
        entry = store.get_watch_entry(1)
        assert (entry.anime_title, entry.episode) == ("Cowboy Bebop", 5)

    def test_next_episode_after_last_watched(self, store, catalog, make_args):
        watch(make_args(anime_id=5114, episode=10), store, catalog)
        watch(make_args(anime_id=5114), store, catalog)

        assert store.get_watch_entry(5114).episode == 11
        assert len(store.list_watch_history()) == 1

    def test_catalog_failure_still_records(self, store, offline_catalog, make_args, capsys):
        watch(make_args(anime_id=5114), store, offline_catalog)

        entry = store.get_watch_entry(5114)
        assert entry.anime_title == ""
        assert "Catalog lookup failed" in capsys.readouterr().out

    @pytest.mark.parametrize("episode", [0, -3])
    def test_rejects_episode_below_one(self, store, make_args, capsys, episode):
        catalog = Mock(spec=CatalogClient)
        watch(make_args(anime_id=1, title="X", episode=episode), store, catalog)

        assert "Episode must be 1 or greater" in capsys.readouterr().out
        assert store.list_watch_history() == []
        catalog.get_anime.assert_not_called()

    def test_title_markup_printed_literally(self, store, catalog, make_args, capsys):
        watch(make_args(anime_id=2, title="Oshi no Ko [bold]", episode=1), store, catalog)
        assert "Oshi no Ko [bold]" in capsys.readouterr().out


class TestNextEpisode:
    def test_first_episode(self, store):
        assert next_episode(store, 1, total_episodes=12) == 1

    def test_increments(self, store):
        store.record_watch_history(WatchRecord(anime_id=1, episode=4))
        assert next_episode(store, 1, total_episodes=12) == 5

    def test_stops_at_last_episode(self, store):
        store.record_watch_history(WatchRecord(anime_id=1, episode=12))
        assert next_episode(store, 1, total_episodes=12) == 12

    def test_never_goes_backwards(self, store):
        """An episode past the default count (unknown total) still advances."""
        store.record_watch_history(WatchRecord(anime_id=1, episode=20))
        assert next_episode(store, 1, total_episodes=12) == 20


class TestListCommand:
    def test_show_empty(self, store, catalog, make_args, capsys):
        my_list(make_args(action="show"), store, catalog)
        assert "empty" in capsys.readouterr().out

    def test_add_with_catalog_lookup(self, store, catalog, make_args, capsys):
        my_list(make_args(action="add", anime_id=5114), store, catalog)

        assert store.is_in_my_list(5114)
        assert store.list_my_list()[0].anime_title == "Fullmetal Alchemist: Brotherhood"
        assert "added" in capsys.readouterr().out

    def test_add_twice_reports_existing(self, store, catalog, make_args, capsys):
        args = make_args(action="add", anime_id=1, title="Cowboy Bebop")
        my_list(args, store, catalog)
        my_list(args, store, catalog)

        assert "already" in capsys.readouterr().out
        assert len(store.list_my_list()) == 1

    def test_add_write_failure_is_not_reported_as_existing(self, catalog, make_args, capsys):
        store = PersistedStateStore(FailingStorage(fail_reads=False, fail_writes=True))
        my_list(make_args(action="add", anime_id=1, title="Cowboy Bebop"), store, catalog)

        out = capsys.readouterr().out
        assert "Could not save" in out
        assert "already" not in out

    def test_remove(self, store, catalog, item_fmab, make_args, capsys):
        store.add_to_my_list(item_fmab)
        my_list(make_args(action="remove", anime_id=5114), store, catalog)

        assert not store.is_in_my_list(5114)
        assert "removed" in capsys.readouterr().out

    def test_remove_absent(self, store, catalog, make_args, capsys):
        my_list(make_args(action="remove", anime_id=42), store, catalog)

        out = capsys.readouterr().out
        assert "42 is not in My List" in out
        assert "removed" not in out

    def test_show_escapes_titles(self, store, catalog, make_args, capsys):
        store.add_to_my_list(ListItem(anime_id=7, anime_title="[red]Akira"))
        my_list(make_args(action="show"), store, catalog)
        assert "[red]Akira" in capsys.readouterr().out

    def test_check(self, store, catalog, item_fmab, make_args, capsys):
        store.add_to_my_list(item_fmab)
        my_list(make_args(action="check", anime_id=5114), store, catalog)
        my_list(make_args(action="check", anime_id=1), store, catalog)

        out = capsys.readouterr().out
        assert "5114 is in My List" in out
        assert "1 is not in My List" in out

    def test_action_without_id(self, store, catalog, make_args, capsys):
        my_list(make_args(action="add"), store, catalog)
        assert "needs an anime ID" in capsys.readouterr().out


class TestTopCommand:
    def test_marks_saved(self, store, catalog, jikan_fmab, make_args, capsys):
        catalog.get_top_anime.return_value = CatalogResult.success([CatalogAnime.model_validate(jikan_fmab)])
        store.add_to_my_list(ListItem(anime_id=5114))

        top(make_args(limit=5), store, catalog)

        catalog.get_top_anime.assert_called_once_with(limit=5)
        out = capsys.readouterr().out
        assert "Fullmetal" in out
        assert "★" in out

    def test_catalog_failure(self, store, offline_catalog, make_args, capsys):
        top(make_args(limit=5), store, offline_catalog)
        assert "Could not load top anime" in capsys.readouterr().out

    def test_search(self, store, catalog, jikan_fmab, make_args, capsys):
        catalog.search_anime.return_value = CatalogResult.success([CatalogAnime.model_validate(jikan_fmab)])

        search(make_args(query="fullmetal", limit=3), store, catalog)

        catalog.search_anime.assert_called_once_with("fullmetal", limit=3)
        assert "Fullmetal" in capsys.readouterr().out

    def test_search_no_results(self, store, catalog, make_args, capsys):
        catalog.search_anime.return_value = CatalogResult.success([])
        search(make_args(query="zzz", limit=3), store, catalog)
        assert "no anime" in capsys.readouterr().out


class TestInfoCommand:
    @pytest.fixture
    def detail_catalog(self, catalog, jikan_fmab, jikan_frieren_airing):
        payload = {**jikan_fmab, "genres": [{"mal_id": 1, "name": "Action"}, {"mal_id": 10, "name": "Fantasy"}]}
        catalog.get_anime.return_value = CatalogResult.success(CatalogAnime.model_validate(payload))
        catalog.get_recommendations.return_value = CatalogResult.success(
            [CatalogAnime.model_validate(jikan_frieren_airing)]
        )
        return catalog

    def test_shows_detail_and_recommendations(self, store, detail_catalog, make_args, capsys):
        info(make_args(anime_id=5114), store, detail_catalog)

        detail_catalog.get_recommendations.assert_called_once_with(5114)
        out = capsys.readouterr().out
        assert "Fullmetal Alchemist: Brotherhood" in out
        assert "Action, Fantasy" in out
        assert "horrific alchemy" in out
        assert "Not in My List" in out
        assert "Sousou no Frieren" in out

    def test_shows_local_state(self, store, detail_catalog, item_fmab, make_args, capsys):
        store.add_to_my_list(item_fmab)
        store.record_watch_history(WatchRecord(anime_id=5114, episode=7))

        info(make_args(anime_id=5114), store, detail_catalog)

        out = capsys.readouterr().out
        assert "In My List" in out
        assert "Not in My List" not in out
        assert "episode 7" in out

    def test_missing_synopsis(self, store, catalog, jikan_frieren_airing, make_args, capsys):
        catalog.get_anime.return_value = CatalogResult.success(CatalogAnime.model_validate(jikan_frieren_airing))
        catalog.get_recommendations.return_value = CatalogResult.success([])

        info(make_args(anime_id=52991), store, catalog)

        out = capsys.readouterr().out
        assert "No synopsis available" in out
        assert "No recommendations yet" in out

    def test_recommendations_failure(self, store, detail_catalog, make_args, capsys):
        detail_catalog.get_recommendations.return_value = CatalogResult.failure("status 429")

        info(make_args(anime_id=5114), store, detail_catalog)

        out = capsys.readouterr().out
        assert "Fullmetal" in out
        assert "Could not load recommendations" in out

    def test_catalog_failure(self, store, offline_catalog, make_args, capsys):
        info(make_args(anime_id=5114), store, offline_catalog)

        assert "Catalog lookup failed" in capsys.readouterr().out
        offline_catalog.get_recommendations.assert_not_called()


class TestMainMenu:
    """Interactive menu with menu_navigate patched."""

    def test_continue_watching_next_episode(self, store):
        store.record_watch_history(WatchRecord(anime_id=1, anime_title="Cowboy Bebop", episode=3))

        def answers(opts, msg=""):
            if msg == "ani-shelf":
                return next(main_answers)
            if msg == "Continue watching.":
                return opts[0]
            return next(o for o in opts if "next" in o)

        main_answers = iter([CONTINUE, None])
        with patch("commands.menu.menu_navigate", side_effect=answers):
            main_menu(store)

        assert store.get_watch_entry(1).episode == 4

    def test_my_list_remove(self, store, item_fmab):
        store.add_to_my_list(item_fmab)
        main_answers = iter([MY_LIST, None])

        def answers(opts, msg=""):
            if msg == "ani-shelf":
                return next(main_answers)
            if msg == "My List":
                return opts[0]
            return next(o for o in opts if "Remove" in o)

        with patch("commands.menu.menu_navigate", side_effect=answers):
            main_menu(store)

        assert store.list_my_list() == []

    def test_my_list_start_watching(self, store, item_fmab):
        store.add_to_my_list(item_fmab)
        main_answers = iter([MY_LIST, None])

        def answers(opts, msg=""):
            if msg == "ani-shelf":
                return next(main_answers)
            if msg == "My List":
                return opts[0]
            return next(o for o in opts if "Start" in o)

        with patch("commands.menu.menu_navigate", side_effect=answers):
            main_menu(store)

        assert store.get_watch_entry(5114).episode == 1

    def test_my_list_same_titles_stay_selectable(self, store):
        store.add_to_my_list(ListItem(anime_id=20, anime_title="Hunter x Hunter"))
        store.add_to_my_list(ListItem(anime_id=11061, anime_title="Hunter x Hunter"))
        main_answers = iter([MY_LIST, None])
        seen = []

        def answers(opts, msg=""):
            if msg == "ani-shelf":
                return next(main_answers)
            if msg == "My List":
                seen.extend(opts)
                return next(o for o in opts if "[20]" in o)
            return next(o for o in opts if "Remove" in o)

        with patch("commands.menu.menu_navigate", side_effect=answers):
            main_menu(store)

        assert len(seen) == 2
        assert [e.anime_id for e in store.list_my_list()] == [11061]

    def test_clear_history_needs_confirmation(self, store, record_frieren):
        store.record_watch_history(record_frieren)

        with patch("commands.menu.menu_navigate", side_effect=[CLEAR, "❌ Cancel", None]):
            main_menu(store)
        assert store.list_watch_history() != []

        with patch("commands.menu.menu_navigate", side_effect=[CLEAR, "✅ Yes, clear", None]):
            main_menu(store)
        assert store.list_watch_history() == []


class TestCli:
    """Test main.cli argument parsing and dispatch."""

    @pytest.fixture(autouse=True)
    def isolated(self, monkeypatch):
        monkeypatch.setattr(main, "configure_logging", lambda debug=False: None)

    def test_parse_watch(self):
        args = main.build_parser().parse_args(["watch", "5114", "-e", "3"])
        assert (args.command, args.anime_id, args.episode) == ("watch", 5114, 3)

    def test_parse_list_defaults_to_show(self):
        args = main.build_parser().parse_args(["list"])
        assert args.action == "show"
        assert args.anime_id is None

    def test_parse_search(self):
        args = main.build_parser().parse_args(["search", "frieren", "-n", "5"])
        assert (args.command, args.query, args.limit) == ("search", "frieren", 5)

    def test_parse_list_add(self):
        args = main.build_parser().parse_args(["list", "add", "5114", "--title", "FMA:B"])
        assert (args.action, args.anime_id, args.title) == ("add", 5114, "FMA:B")

    def test_rejects_non_integer_id(self):
        with pytest.raises(SystemExit):
            main.build_parser().parse_args(["watch", "abc"])

    @pytest.mark.parametrize("episode", ["0", "-2", "two"])
    def test_rejects_bad_episode(self, episode):
        with pytest.raises(SystemExit):
            main.build_parser().parse_args(["watch", "5114", "-e", episode])

    def test_parse_info(self):
        args = main.build_parser().parse_args(["info", "5114"])
        assert (args.command, args.anime_id) == ("info", 5114)

    def test_history_with_memory_storage(self, capsys):
        main.cli(["--storage", "memory", "history"])
        assert "No watch history" in capsys.readouterr().out

    def test_storage_override_leaves_settings_untouched(self):
        backend = settings.storage.backend
        with patch("main.build_state_store", wraps=main.build_state_store) as build:
            main.cli(["--storage", "memory", "history"])

        assert build.call_args.args[0].storage.backend == "memory"
        assert settings.storage.backend == backend

    def test_info_dispatch(self):
        with patch("commands.detail.info") as handler:
            main.cli(["--storage", "memory", "info", "5114"])
        handler.assert_called_once()

    def test_no_command_opens_menu(self):
        with patch("commands.menu.main_menu") as menu:
            main.cli(["--storage", "memory"])
        menu.assert_called_once()
