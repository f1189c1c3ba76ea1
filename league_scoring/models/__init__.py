"""Data models for the league scoring engine."""

from league_scoring.models.datagolf import (
    FieldGolfer,
    FieldUpdates,
    InPlay,
    LiveGolfer,
    LiveInfo,
    RankingEntry,
    Rankings,
)
from league_scoring.models.golfer import Golfer
from league_scoring.models.league import Course, Season, Tier, Tour, Tournament
from league_scoring.models.patches import (
    GolferPatch,
    TeamPatch,
    TourCardPatch,
    TournamentPatch,
    merge_fragments,
)
from league_scoring.models.position import Position
from league_scoring.models.team import Team, TourCard

__all__ = [
    "Season",
    "Tour",
    "Tier",
    "Course",
    "Tournament",
    "Golfer",
    "Team",
    "TourCard",
    "Position",
    "GolferPatch",
    "TeamPatch",
    "TourCardPatch",
    "TournamentPatch",
    "merge_fragments",
    "FieldGolfer",
    "FieldUpdates",
    "LiveGolfer",
    "LiveInfo",
    "InPlay",
    "RankingEntry",
    "Rankings",
]
