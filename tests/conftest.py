"""
Shared test fixtures and configuration.

Provides reusable fixtures for all test files including database instances,
a seeded league, provider snapshots and a fake DataGolf client.
"""

import pytest
import os
import shutil
import tempfile
from datetime import datetime, timedelta, timezone
from typing import List
from unittest.mock import AsyncMock, patch

from league_scoring.models import (
    Course,
    FieldGolfer,
    FieldUpdates,
    Golfer,
    InPlay,
    LiveGolfer,
    LiveInfo,
    RankingEntry,
    Rankings,
    Season,
    Team,
    Tier,
    Tour,
    TourCard,
    Tournament,
)
from league_scoring.storage import get_database, reset_database

NOW = datetime(2025, 4, 10, 18, 0, tzinfo=timezone.utc)
EVENT_NAME = "The Masters"


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture
def test_data_dir():
    """Provide a temporary directory for test data."""
    temp_dir = tempfile.mkdtemp(prefix="league_scoring_test_")
    yield temp_dir

    # Cleanup
    if os.path.exists(temp_dir):
        try:
            shutil.rmtree(temp_dir)
        except PermissionError:
            pass  # Windows file locking, ignore


@pytest.fixture
def db_fixture(test_data_dir):
    """Provide a clean test database instance."""
    with patch.dict(os.environ, {'DB_TYPE': 'sqlite', 'DATA_DIR': test_data_dir}, clear=False):
        reset_database()
        db = get_database()
        yield db
        reset_database()  # Close connection before cleanup


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

def make_golfer(api_id: int, tournament_id: str = "t_masters", **fields) -> Golfer:
    """Build a golfer with sensible defaults."""
    return Golfer(
        api_id=api_id,
        player_name=fields.pop("player_name", f"Golfer {api_id}"),
        tournament_id=tournament_id,
        **fields,
    )


def make_team(team_id: str, golfer_ids: List[int], tour_card_id: str = "tc_1", **fields) -> Team:
    return Team(
        id=team_id,
        tournament_id=fields.pop("tournament_id", "t_masters"),
        tour_card_id=tour_card_id,
        golfer_ids=golfer_ids,
        **fields,
    )


@pytest.fixture
def season() -> Season:
    return Season(id="s_2025", year=2025)


@pytest.fixture
def tier() -> Tier:
    """Major tier with a short points and payout table."""
    return Tier(
        id="tier_major",
        name="Major",
        year=2025,
        points=[500, 300, 200, 100, 50],
        payouts=[10000.0, 6000.0, 4000.0, 2000.0, 1000.0],
    )


@pytest.fixture
def course() -> Course:
    return Course(id="c_augusta", name="Augusta National", par=72)


@pytest.fixture
def active_tournament() -> Tournament:
    """Tournament running at NOW."""
    return Tournament(
        id="t_masters",
        name=EVENT_NAME,
        start_date=NOW - timedelta(days=1),
        end_date=NOW + timedelta(days=3),
        season_id="s_2025",
        tier_id="tier_major",
        course_id="c_augusta",
        tour_ids=["tour_pga"],
        current_round=1,
    )


@pytest.fixture
def upcoming_tournament() -> Tournament:
    """Tournament starting a week after NOW."""
    return Tournament(
        id="t_heritage",
        name="RBC Heritage",
        start_date=NOW + timedelta(days=7),
        end_date=NOW + timedelta(days=10),
        season_id="s_2025",
        tier_id="tier_major",
        course_id="c_augusta",
        tour_ids=["tour_pga"],
    )


@pytest.fixture
def seeded_db(db_fixture, season, tier, course, active_tournament, upcoming_tournament):
    """Database holding one season, two tours, two tournaments and tour cards."""
    db_fixture.save_season(season)
    db_fixture.save_tour(Tour(id="tour_pga", name="PGA", short_form="PGA", season_id=season.id))
    db_fixture.save_tour(Tour(id="tour_ccg", name="CCG", short_form="CCG", season_id=season.id))
    db_fixture.save_tier(tier)
    db_fixture.save_course(course)
    db_fixture.save_tournament(active_tournament)
    db_fixture.save_tournament(upcoming_tournament)
    for card_id, tour_id in (("tc_1", "tour_pga"), ("tc_2", "tour_pga"), ("tc_3", "tour_ccg")):
        db_fixture.save_tour_card(TourCard(
            id=card_id,
            display_name=card_id.upper(),
            tour_id=tour_id,
            season_id=season.id,
        ))
    return db_fixture


# =============================================================================
# PROVIDER FIXTURES
# =============================================================================

def make_field(ids: List[int], event_name: str = EVENT_NAME) -> FieldUpdates:
    return FieldUpdates(
        event_name=event_name,
        current_round=1,
        field=[
            FieldGolfer(
                dg_id=dg_id,
                player_name=f"Player{dg_id}, Test",
                country="USA",
                r1_teetime="2025-04-10 12:00",
            )
            for dg_id in ids
        ],
    )


def make_rankings(ids: List[int]) -> Rankings:
    """Rankings where lower ids have higher skill."""
    return Rankings(rankings=[
        RankingEntry(
            dg_id=dg_id,
            player_name=f"Player{dg_id}, Test",
            dg_skill_estimate=3.0 - index * 0.01,
            owgr_rank=index + 1,
        )
        for index, dg_id in enumerate(ids)
    ])


def make_in_play(rows: List[LiveGolfer], event_name: str = EVENT_NAME, current_round: int = 1) -> InPlay:
    return InPlay(info=LiveInfo(event_name=event_name, current_round=current_round), data=rows)


@pytest.fixture
def fake_client():
    """DataGolf client double with async feed methods."""
    ids = list(range(1, 21))
    client = AsyncMock()
    client.get_field_updates.return_value = make_field(ids)
    client.get_rankings.return_value = make_rankings(ids)
    client.get_in_play.return_value = make_in_play([])
    return client
