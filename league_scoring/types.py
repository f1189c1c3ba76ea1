"""
Type definitions for the league scoring engine.

Provides TypedDict classes for response bodies and stage summaries.
"""

from typing import TypedDict, Any, Dict, Optional


class StageResponseDict(TypedDict, total=False):
    """Body returned by every cron trigger endpoint."""
    success: bool
    message: str
    data: Dict[str, Any]
    error: str


class HealthResponseDict(TypedDict):
    """Response from /health endpoint."""
    status: str  # ok, degraded
    database: bool


class GroupSummaryDict(TypedDict, total=False):
    """Data reported by Group Assignment."""
    tournament_id: str
    groups_created: int
    golfers_created: int
    copied_from: Optional[str]


class GolferSummaryDict(TypedDict, total=False):
    """Data reported by Golfer Update."""
    tournament_id: str
    golfers: int
    golfers_created: int
    golfers_updated: int
    failed: int
    live_golfers: int
    current_round: int
    live_play: bool


class TeamSummaryDict(TypedDict, total=False):
    """Data reported by Team Update."""
    tournament_id: str
    teams: int
    teams_updated: int
    positions_updated: int
    failed: int
    current_round: int
    live_play: bool
    playoff_event: int


class StandingsSummaryDict(TypedDict, total=False):
    """Data reported by Standings Update."""
    season_id: str
    tour_cards: int
    tour_cards_updated: int
    failed: int


class PlayoffSummaryDict(TypedDict, total=False):
    """Data reported by Playoff Team Creation."""
    season_id: str
    source_tournament_id: str
    tournaments: int
    teams_created: int
    teams_existing: int
