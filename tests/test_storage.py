"""Tests for storage module."""

import pytest
import os
import sqlite3
import threading
from datetime import timedelta
from unittest.mock import patch

from league_scoring.storage import get_database, reset_database, DatabaseInterface
from league_scoring.storage.exceptions import ConfigurationError, ConnectionError, NotFoundError
from league_scoring.storage.sqlite_db import SQLiteDatabase

from conftest import NOW, make_golfer, make_team


class TestFactory:
    """Tests for factory function."""

    def setup_method(self):
        """Reset singleton before each test."""
        reset_database()

    def teardown_method(self):
        reset_database()

    def test_default_is_sqlite(self, test_data_dir):
        """Default DB_TYPE should be sqlite."""
        env = {'DATA_DIR': test_data_dir}
        with patch.dict(os.environ, env, clear=False):
            os.environ.pop('DB_TYPE', None)
            db = get_database()
            assert db.__class__.__name__ == 'SQLiteDatabase'
            assert isinstance(db, DatabaseInterface)
            reset_database()  # Close before cleanup

    def test_invalid_db_type_raises(self):
        """Invalid DB_TYPE raises ConfigurationError."""
        with patch.dict(os.environ, {'DB_TYPE': 'invalid'}, clear=False):
            with pytest.raises(ConfigurationError):
                get_database()

    def test_singleton_returns_same_instance(self, test_data_dir):
        """Factory returns same instance on subsequent calls."""
        with patch.dict(os.environ, {'DB_TYPE': 'sqlite', 'DATA_DIR': test_data_dir}, clear=False):
            db1 = get_database()
            db2 = get_database()
            assert db1 is db2
            reset_database()


class TestSQLiteDatabase:
    """Tests for SQLite implementation."""

    def test_health_check(self, db_fixture):
        assert db_fixture.health_check() is True

    def test_tournament_states(self, seeded_db):
        """Upcoming, active and completed lookups follow the dates."""
        assert seeded_db.get_tournament_by_state("active", NOW).id == "t_masters"
        assert seeded_db.get_tournament_by_state("upcoming", NOW).id == "t_heritage"
        assert seeded_db.get_tournament_by_state("completed", NOW) is None
        later = NOW + timedelta(days=5)
        assert seeded_db.get_tournament_by_state("completed", later).id == "t_masters"

    def test_unknown_state_raises(self, seeded_db):
        with pytest.raises(ValueError):
            seeded_db.get_tournament_by_state("cancelled", NOW)

    def test_tournament_round_trip(self, seeded_db, active_tournament):
        loaded = seeded_db.get_tournament("t_masters")
        assert loaded == active_tournament
        assert loaded.start_date.tzinfo is not None

    def test_create_golfers_skips_duplicates(self, seeded_db):
        golfers = [make_golfer(1), make_golfer(2)]
        assert seeded_db.create_golfers(golfers) == 2
        assert seeded_db.create_golfers([make_golfer(2), make_golfer(3)]) == 1
        stored = seeded_db.get_golfers_by_tournament("t_masters")
        assert [g.api_id for g in stored] == [1, 2, 3]
        assert all(g.id is not None for g in stored)

    def test_update_golfer_merges(self, seeded_db):
        seeded_db.create_golfers([make_golfer(1, group=2)])
        golfer = seeded_db.get_golfers_by_tournament("t_masters")[0]
        seeded_db.update_golfer(golfer.id, {"round_one": 70, "position": "T3"})
        updated = seeded_db.get_golfers_by_tournament("t_masters")[0]
        assert updated.round_one == 70
        assert updated.position == "T3"
        assert updated.group == 2

    def test_update_with_explicit_none(self, seeded_db):
        seeded_db.save_team(make_team("team_1", [1], score=-2.0))
        seeded_db.update_team("team_1", {"score": None})
        assert seeded_db.get_teams_by_tournament("t_masters")[0].score is None

    def test_update_missing_row_raises(self, seeded_db):
        with pytest.raises(NotFoundError):
            seeded_db.update_team("nope", {"score": 1})

    def test_empty_update_is_noop(self, seeded_db):
        seeded_db.update_team("nope", {})

    def test_update_tournament(self, seeded_db):
        seeded_db.update_tournament("t_masters", {"current_round": 3, "live_play": True})
        loaded = seeded_db.get_tournament("t_masters")
        assert loaded.current_round == 3
        assert loaded.live_play is True

    def test_current_season(self, seeded_db):
        assert seeded_db.get_current_season(NOW).id == "s_2025"

    def test_teams_by_tour_cards(self, seeded_db):
        seeded_db.save_team(make_team("a", [1], tour_card_id="tc_1"))
        seeded_db.save_team(make_team("b", [1], tour_card_id="tc_2"))
        seeded_db.save_team(make_team("c", [1], tour_card_id="tc_3"))
        teams = seeded_db.get_teams_by_tour_cards(["tc_1", "tc_3"])
        assert [t.id for t in teams] == ["a", "c"]
        assert seeded_db.get_teams_by_tour_cards([]) == []

    def test_tour_cards_by_season(self, seeded_db):
        cards = seeded_db.get_tour_cards_by_season("s_2025")
        assert [c.id for c in cards] == ["tc_1", "tc_2", "tc_3"]

    def test_clear_all(self, seeded_db):
        seeded_db.clear_all()
        assert seeded_db.get_tournament("t_masters") is None
        assert seeded_db.get_current_season(NOW) is None


class TestConnections:
    """Tests for per-thread connection handling."""

    def test_close_reaches_every_thread(self, db_fixture):
        """Connections opened by worker threads are closed too."""
        opened = []

        def worker():
            opened.append(db_fixture._get_connection())

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()
        main = db_fixture._get_connection()
        assert opened[0] is not main

        db_fixture.close()

        for conn in (opened[0], main):
            with pytest.raises(sqlite3.ProgrammingError):
                conn.execute("SELECT 1")

    def test_reopens_after_close(self, db_fixture):
        db_fixture.close()
        assert db_fixture.health_check() is True

    def test_unreachable_path_raises_connection_error(self, test_data_dir):
        db = SQLiteDatabase(os.path.join(test_data_dir, "missing", "league.db"))
        with pytest.raises(ConnectionError):
            db._get_connection()
        assert db.health_check() is False
