"""Season-level data models: seasons, tours, tiers, courses and tournaments."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from league_scoring.utils.timeutil import ensure_utc


class Season(BaseModel):
    """Represents a league season."""

    id: str
    year: int
    number: int = 1


class Tour(BaseModel):
    """A sub-league within a season that members join with a tour card."""

    id: str
    name: str
    short_form: str = Field(default="", alias="shortForm")
    season_id: str = Field(..., alias="seasonId")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class Tier(BaseModel):
    """Points and payout tables for a class of tournament."""

    id: str
    name: str
    year: Optional[int] = None
    points: List[float] = []
    payouts: List[float] = []

    def is_playoff(self) -> bool:
        """Check if tournaments of this tier are playoff events."""
        return "playoff" in self.name.lower()


class Course(BaseModel):
    """Represents a golf course."""

    id: str
    api_id: Optional[str] = Field(default=None, alias="apiId")
    name: str = ""
    location: Optional[str] = None
    par: int = 72

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class Tournament(BaseModel):
    """Represents a tournament on the league schedule."""

    id: str
    name: str
    start_date: datetime = Field(..., alias="startDate")
    end_date: datetime = Field(..., alias="endDate")
    season_id: str = Field(..., alias="seasonId")
    tier_id: str = Field(..., alias="tierId")
    course_id: str = Field(..., alias="courseId")
    tour_ids: List[str] = Field(default_factory=list, alias="tourIds")
    api_id: Optional[str] = Field(default=None, alias="apiId")
    current_round: Optional[int] = Field(default=None, alias="currentRound")
    live_play: bool = Field(default=False, alias="livePlay")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    @field_validator("start_date", "end_date")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    def shares_tour_with(self, other: "Tournament") -> bool:
        """Check if the two tournaments have at least one tour in common."""
        return bool(set(self.tour_ids) & set(other.tour_ids))
