"""
SQLite Database Storage for the league scoring engine.

Provides storage and retrieval of league data with:
- Indexed columns for the lookups the scoring stages run
- Atomic transactions for data safety
- Partial updates merged into JSON documents
- Concurrent read access via WAL mode

This is the SQLite implementation of the DatabaseInterface.
"""

import sqlite3
import json
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional, Iterator, List, Dict, Any
import threading

from pydantic import BaseModel

from .base import DatabaseInterface, TOURNAMENT_STATES
from .exceptions import ConnectionError, NotFoundError, QueryError, SchemaError
from ..models import Course, Golfer, Season, Team, Tier, Tour, TourCard, Tournament
from ..utils.timeutil import ensure_utc


def _ts(value: datetime) -> str:
    """Sortable UTC timestamp used by the date columns."""
    return ensure_utc(value).strftime('%Y-%m-%dT%H:%M:%S')


def _dump(model: BaseModel, exclude: Optional[set] = None) -> str:
    return json.dumps(model.model_dump(mode='json', exclude=exclude), ensure_ascii=False)


class SQLiteDatabase(DatabaseInterface):
    """
    SQLite database for league data storage.
    Thread-safe with connection per thread.

    Implements the DatabaseInterface abstract base class.
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str = "data/league.db"):
        """
        Create SQLite database instance.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = Path(db_path)
        self._local = threading.local()
        # Connections opened by every thread
        self._connections: List[sqlite3.Connection] = []
        self._connections_lock = threading.Lock()
        self._initialized = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initialize(self) -> None:
        """Initialize the database connection and schema."""
        if self._initialized:
            return

        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()
        self._initialized = True

    def close(self) -> None:
        """Close the connections of every thread and clean up resources."""
        with self._connections_lock:
            connections, self._connections = self._connections, []
        for conn in connections:
            conn.close()
        self._local = threading.local()

    def health_check(self) -> bool:
        """Check if the database connection is healthy."""
        try:
            conn = self._get_connection()
            conn.execute("SELECT 1")
            return True
        except (sqlite3.Error, ConnectionError):
            return False

    # =========================================================================
    # CONNECTION MANAGEMENT
    # =========================================================================

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if not hasattr(self._local, 'conn') or self._local.conn is None:
            try:
                conn = sqlite3.connect(
                    str(self.db_path),
                    check_same_thread=False,
                    timeout=30.0
                )
                conn.row_factory = sqlite3.Row
                # Enable WAL mode for better concurrent access
                conn.execute("PRAGMA journal_mode=WAL")
                conn.execute("PRAGMA synchronous=NORMAL")
            except sqlite3.Error as e:
                raise ConnectionError(f"Cannot open {self.db_path}: {e}") from e
            with self._connections_lock:
                self._connections.append(conn)
            self._local.conn = conn
        return self._local.conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise QueryError(str(e)) from e
        except Exception:
            conn.rollback()
            raise

    def _init_schema(self) -> None:
        """Initialize database schema."""
        try:
            with self.transaction() as conn:
                conn.executescript('''
                    CREATE TABLE IF NOT EXISTS metadata (
                        key TEXT PRIMARY KEY,
                        value TEXT,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE TABLE IF NOT EXISTS seasons (
                        id TEXT PRIMARY KEY,
                        year INTEGER NOT NULL,
                        number INTEGER NOT NULL DEFAULT 1,
                        data JSON NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE TABLE IF NOT EXISTS tours (
                        id TEXT PRIMARY KEY,
                        season_id TEXT NOT NULL,
                        data JSON NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE TABLE IF NOT EXISTS tiers (
                        id TEXT PRIMARY KEY,
                        data JSON NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE TABLE IF NOT EXISTS courses (
                        id TEXT PRIMARY KEY,
                        data JSON NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE TABLE IF NOT EXISTS tournaments (
                        id TEXT PRIMARY KEY,
                        season_id TEXT NOT NULL,
                        start_date TEXT NOT NULL,
                        end_date TEXT NOT NULL,
                        data JSON NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    -- Golfers are tournament scoped, one row per provider id
                    CREATE TABLE IF NOT EXISTS golfers (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        tournament_id TEXT NOT NULL,
                        api_id INTEGER NOT NULL,
                        data JSON NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        UNIQUE (tournament_id, api_id)
                    );

                    CREATE TABLE IF NOT EXISTS teams (
                        id TEXT PRIMARY KEY,
                        tournament_id TEXT NOT NULL,
                        tour_card_id TEXT NOT NULL,
                        data JSON NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE TABLE IF NOT EXISTS tour_cards (
                        id TEXT PRIMARY KEY,
                        season_id TEXT NOT NULL,
                        tour_id TEXT NOT NULL,
                        data JSON NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE INDEX IF NOT EXISTS idx_tournaments_start ON tournaments(start_date);
                    CREATE INDEX IF NOT EXISTS idx_tournaments_end ON tournaments(end_date);
                    CREATE INDEX IF NOT EXISTS idx_tournaments_season ON tournaments(season_id);
                    CREATE INDEX IF NOT EXISTS idx_golfers_tournament ON golfers(tournament_id);
                    CREATE INDEX IF NOT EXISTS idx_teams_tournament ON teams(tournament_id);
                    CREATE INDEX IF NOT EXISTS idx_teams_tour_card ON teams(tour_card_id);
                    CREATE INDEX IF NOT EXISTS idx_tour_cards_season ON tour_cards(season_id);
                ''')

                conn.execute(
                    "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
                    ('schema_version', str(self.SCHEMA_VERSION))
                )
        except QueryError as e:
            raise SchemaError(f"Failed to initialize schema: {e}") from e

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    def save_season(self, season: Season) -> None:
        with self.transaction() as conn:
            conn.execute('''
                INSERT OR REPLACE INTO seasons (id, year, number, data)
                VALUES (?, ?, ?, ?)
            ''', (season.id, season.year, season.number, _dump(season)))

    def save_tour(self, tour: Tour) -> None:
        with self.transaction() as conn:
            conn.execute('''
                INSERT OR REPLACE INTO tours (id, season_id, data)
                VALUES (?, ?, ?)
            ''', (tour.id, tour.season_id, _dump(tour)))

    def save_tier(self, tier: Tier) -> None:
        with self.transaction() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO tiers (id, data) VALUES (?, ?)",
                (tier.id, _dump(tier))
            )

    def save_course(self, course: Course) -> None:
        with self.transaction() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO courses (id, data) VALUES (?, ?)",
                (course.id, _dump(course))
            )

    def save_tournament(self, tournament: Tournament) -> None:
        with self.transaction() as conn:
            conn.execute('''
                INSERT OR REPLACE INTO tournaments (id, season_id, start_date, end_date, data)
                VALUES (?, ?, ?, ?, ?)
            ''', (
                tournament.id,
                tournament.season_id,
                _ts(tournament.start_date),
                _ts(tournament.end_date),
                _dump(tournament)
            ))

    def save_tour_card(self, tour_card: TourCard) -> None:
        with self.transaction() as conn:
            conn.execute('''
                INSERT OR REPLACE INTO tour_cards (id, season_id, tour_id, data)
                VALUES (?, ?, ?, ?)
            ''', (tour_card.id, tour_card.season_id, tour_card.tour_id, _dump(tour_card)))

    def save_team(self, team: Team) -> None:
        with self.transaction() as conn:
            conn.execute('''
                INSERT OR REPLACE INTO teams (id, tournament_id, tour_card_id, data)
                VALUES (?, ?, ?, ?)
            ''', (team.id, team.tournament_id, team.tour_card_id, _dump(team)))

    def create_golfers(self, golfers: List[Golfer]) -> int:
        """Insert golfers, skipping any already on the tournament. Returns count inserted."""
        inserted = 0
        with self.transaction() as conn:
            for golfer in golfers:
                cursor = conn.execute('''
                    INSERT OR IGNORE INTO golfers (tournament_id, api_id, data)
                    VALUES (?, ?, ?)
                ''', (golfer.tournament_id, golfer.api_id, _dump(golfer, exclude={'id'})))
                inserted += cursor.rowcount
        return inserted

    def _merge_update(self, table: str, key: Any, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Merge changes into a row's JSON document and return the new document."""
        with self.transaction() as conn:
            row = conn.execute(
                f"SELECT data FROM {table} WHERE id = ?", (key,)
            ).fetchone()
            if row is None:
                raise NotFoundError(f"{table} row {key} not found")

            data = {**json.loads(row['data']), **changes}
            conn.execute(
                f"UPDATE {table} SET data = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (json.dumps(data, ensure_ascii=False), key)
            )
        return data

    def update_golfer(self, golfer_id: int, changes: Dict[str, Any]) -> None:
        if changes:
            self._merge_update('golfers', golfer_id, changes)

    def update_team(self, team_id: str, changes: Dict[str, Any]) -> None:
        if changes:
            self._merge_update('teams', team_id, changes)

    def update_tour_card(self, tour_card_id: str, changes: Dict[str, Any]) -> None:
        if changes:
            self._merge_update('tour_cards', tour_card_id, changes)

    def update_tournament(self, tournament_id: str, changes: Dict[str, Any]) -> None:
        if changes:
            self._merge_update('tournaments', tournament_id, changes)

    def clear_all(self) -> None:
        """Clear all data from database."""
        with self.transaction() as conn:
            conn.executescript('''
                DELETE FROM golfers;
                DELETE FROM teams;
                DELETE FROM tour_cards;
                DELETE FROM tournaments;
                DELETE FROM courses;
                DELETE FROM tiers;
                DELETE FROM tours;
                DELETE FROM seasons;
            ''')

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    def _fetch_one(self, query: str, params: tuple) -> Optional[sqlite3.Row]:
        conn = self._get_connection()
        try:
            return conn.execute(query, params).fetchone()
        except sqlite3.Error as e:
            raise QueryError(str(e)) from e

    def _fetch_all(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        conn = self._get_connection()
        try:
            return conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise QueryError(str(e)) from e

    def get_current_season(self, now: datetime) -> Optional[Season]:
        row = self._fetch_one('''
            SELECT data FROM seasons
            WHERE year <= ?
            ORDER BY year DESC, number DESC
            LIMIT 1
        ''', (ensure_utc(now).year,))
        return Season.model_validate_json(row['data']) if row else None

    def get_tournament(self, tournament_id: str) -> Optional[Tournament]:
        row = self._fetch_one(
            "SELECT data FROM tournaments WHERE id = ?", (tournament_id,)
        )
        return Tournament.model_validate_json(row['data']) if row else None

    def get_tournament_by_state(self, state: str, now: datetime) -> Optional[Tournament]:
        """Get the upcoming, active or completed tournament at a point in time."""
        if state not in TOURNAMENT_STATES:
            raise ValueError(f"Unknown tournament state: {state}")

        stamp = _ts(now)
        if state == 'upcoming':
            row = self._fetch_one('''
                SELECT data FROM tournaments
                WHERE start_date > ?
                ORDER BY start_date ASC
                LIMIT 1
            ''', (stamp,))
        elif state == 'active':
            row = self._fetch_one('''
                SELECT data FROM tournaments
                WHERE start_date <= ? AND end_date >= ?
                ORDER BY start_date DESC
                LIMIT 1
            ''', (stamp, stamp))
        else:
            row = self._fetch_one('''
                SELECT data FROM tournaments
                WHERE end_date < ?
                ORDER BY end_date DESC
                LIMIT 1
            ''', (stamp,))

        return Tournament.model_validate_json(row['data']) if row else None

    def get_tournaments_by_season(self, season_id: str) -> List[Tournament]:
        rows = self._fetch_all('''
            SELECT data FROM tournaments
            WHERE season_id = ?
            ORDER BY start_date ASC, id ASC
        ''', (season_id,))
        return [Tournament.model_validate_json(row['data']) for row in rows]

    def get_tier(self, tier_id: str) -> Optional[Tier]:
        row = self._fetch_one("SELECT data FROM tiers WHERE id = ?", (tier_id,))
        return Tier.model_validate_json(row['data']) if row else None

    def get_course(self, course_id: str) -> Optional[Course]:
        row = self._fetch_one("SELECT data FROM courses WHERE id = ?", (course_id,))
        return Course.model_validate_json(row['data']) if row else None

    def get_golfers_by_tournament(self, tournament_id: str) -> List[Golfer]:
        rows = self._fetch_all('''
            SELECT id, data FROM golfers
            WHERE tournament_id = ?
            ORDER BY id ASC
        ''', (tournament_id,))
        return [
            Golfer.model_validate({**json.loads(row['data']), 'id': row['id']})
            for row in rows
        ]

    def get_teams_by_tournament(self, tournament_id: str) -> List[Team]:
        rows = self._fetch_all('''
            SELECT data FROM teams
            WHERE tournament_id = ?
            ORDER BY id ASC
        ''', (tournament_id,))
        return [Team.model_validate_json(row['data']) for row in rows]

    def get_teams_by_tour_cards(self, tour_card_ids: List[str]) -> List[Team]:
        if not tour_card_ids:
            return []
        placeholders = ','.join('?' * len(tour_card_ids))
        rows = self._fetch_all(f'''
            SELECT data FROM teams
            WHERE tour_card_id IN ({placeholders})
            ORDER BY id ASC
        ''', tuple(tour_card_ids))
        return [Team.model_validate_json(row['data']) for row in rows]

    def get_tour_cards_by_season(self, season_id: str) -> List[TourCard]:
        rows = self._fetch_all('''
            SELECT data FROM tour_cards
            WHERE season_id = ?
            ORDER BY id ASC
        ''', (season_id,))
        return [TourCard.model_validate_json(row['data']) for row in rows]
