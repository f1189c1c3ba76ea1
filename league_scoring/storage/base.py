"""
Abstract base class defining the database interface.

All database implementations must inherit from this class and implement
all abstract methods. This ensures consistent behavior across backends.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..models import Course, Golfer, Season, Team, Tier, Tour, TourCard, Tournament

# Tournament lifecycle states understood by get_tournament_by_state
TOURNAMENT_STATES = ("upcoming", "active", "completed")


class DatabaseInterface(ABC):
    """
    Abstract interface for league data storage.

    All methods must be implemented by concrete database classes.
    Methods should be thread-safe where applicable.
    """

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @abstractmethod
    def initialize(self) -> None:
        """
        Initialize the database connection and schema.

        Called once when the database is first created.
        Should create tables if they don't exist.
        Should be idempotent (safe to call multiple times).
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close database connections and clean up resources."""
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """
        Check if the database connection is healthy.

        Returns:
            True if database is accessible, False otherwise
        """
        pass

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    @abstractmethod
    def save_season(self, season: Season) -> None:
        """Insert or replace a season."""
        pass

    @abstractmethod
    def save_tour(self, tour: Tour) -> None:
        """Insert or replace a tour."""
        pass

    @abstractmethod
    def save_tier(self, tier: Tier) -> None:
        """Insert or replace a tier."""
        pass

    @abstractmethod
    def save_course(self, course: Course) -> None:
        """Insert or replace a course."""
        pass

    @abstractmethod
    def save_tournament(self, tournament: Tournament) -> None:
        """Insert or replace a tournament."""
        pass

    @abstractmethod
    def save_tour_card(self, tour_card: TourCard) -> None:
        """Insert or replace a tour card."""
        pass

    @abstractmethod
    def save_team(self, team: Team) -> None:
        """Insert or replace a team (a submitted lineup)."""
        pass

    @abstractmethod
    def create_golfers(self, golfers: List[Golfer]) -> int:
        """
        Create golfer rows for a tournament in one transaction.

        Args:
            golfers: New golfers, ids are assigned by the store

        Returns:
            Number of rows actually inserted

        Behavior:
            - A golfer whose (tournament_id, api_id) already exists is skipped
            - Either every row of the call is committed or none is
        """
        pass

    @abstractmethod
    def update_golfer(self, golfer_id: int, changes: Dict[str, Any]) -> None:
        """
        Apply a partial update to a golfer.

        Args:
            golfer_id: Golfer row id
            changes: Field values to set, None clears a field

        Raises:
            NotFoundError: If the golfer does not exist
        """
        pass

    @abstractmethod
    def update_team(self, team_id: str, changes: Dict[str, Any]) -> None:
        """Apply a partial update to a team. Raises NotFoundError if missing."""
        pass

    @abstractmethod
    def update_tour_card(self, tour_card_id: str, changes: Dict[str, Any]) -> None:
        """Apply a partial update to a tour card. Raises NotFoundError if missing."""
        pass

    @abstractmethod
    def update_tournament(self, tournament_id: str, changes: Dict[str, Any]) -> None:
        """Apply a partial update to a tournament. Raises NotFoundError if missing."""
        pass

    @abstractmethod
    def clear_all(self) -> None:
        """Delete all data. Used by tests and local resets."""
        pass

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    @abstractmethod
    def get_current_season(self, now: datetime) -> Optional[Season]:
        """
        Get the season in play at ``now``.

        Returns:
            The latest season whose year is not after now's year, or None
        """
        pass

    @abstractmethod
    def get_tournament(self, tournament_id: str) -> Optional[Tournament]:
        """Get a tournament by id."""
        pass

    @abstractmethod
    def get_tournament_by_state(self, state: str, now: datetime) -> Optional[Tournament]:
        """
        Get the tournament in a lifecycle state at ``now``.

        Args:
            state: One of "upcoming", "active", "completed"
            now: Reference time

        Returns:
            - upcoming: earliest tournament starting after now
            - active: latest-starting tournament with start <= now <= end
            - completed: tournament with the latest end before now
            None when no tournament matches.

        Raises:
            ValueError: If state is not a known lifecycle state
        """
        pass

    @abstractmethod
    def get_tournaments_by_season(self, season_id: str) -> List[Tournament]:
        """Get a season's tournaments ordered by start date."""
        pass

    @abstractmethod
    def get_tier(self, tier_id: str) -> Optional[Tier]:
        """Get a tier by id."""
        pass

    @abstractmethod
    def get_course(self, course_id: str) -> Optional[Course]:
        """Get a course by id."""
        pass

    @abstractmethod
    def get_golfers_by_tournament(self, tournament_id: str) -> List[Golfer]:
        """Get a tournament's golfers ordered by id."""
        pass

    @abstractmethod
    def get_teams_by_tournament(self, tournament_id: str) -> List[Team]:
        """Get a tournament's teams."""
        pass

    @abstractmethod
    def get_teams_by_tour_cards(self, tour_card_ids: List[str]) -> List[Team]:
        """Get every team belonging to any of the given tour cards."""
        pass

    @abstractmethod
    def get_tour_cards_by_season(self, season_id: str) -> List[TourCard]:
        """Get a season's tour cards."""
        pass
