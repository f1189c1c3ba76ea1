"""Team and tour card data models."""

from typing import List, Optional

from pydantic import BaseModel

TEAM_ROUND_FIELDS = ("round_one", "round_two", "round_three", "round_four")
TEAM_TEE_TIME_FIELDS = (
    "round_one_tee_time",
    "round_two_tee_time",
    "round_three_tee_time",
    "round_four_tee_time",
)


class Team(BaseModel):
    """One tour card's ten golfer lineup for a tournament."""

    id: str
    tournament_id: str
    tour_card_id: str
    golfer_ids: List[int] = []

    round: Optional[int] = None
    round_one: Optional[float] = None
    round_two: Optional[float] = None
    round_three: Optional[float] = None
    round_four: Optional[float] = None
    round_one_tee_time: Optional[str] = None
    round_two_tee_time: Optional[str] = None
    round_three_tee_time: Optional[str] = None
    round_four_tee_time: Optional[str] = None

    today: Optional[float] = None
    thru: Optional[float] = None
    score: Optional[float] = None
    position: Optional[str] = None
    past_position: Optional[str] = None
    points: Optional[float] = None
    earnings: Optional[float] = None

    # Filled by the simulator, stored as-is
    make_cut: Optional[float] = None
    top_ten: Optional[float] = None
    top_five: Optional[float] = None
    top_three: Optional[float] = None
    win: Optional[float] = None

    def tee_time(self, round_number: int) -> Optional[str]:
        """Get tee time for a round (1-4)."""
        return getattr(self, TEAM_TEE_TIME_FIELDS[round_number - 1])


class TourCard(BaseModel):
    """A member's enrollment in one tour for a season."""

    id: str
    member_id: Optional[str] = None
    display_name: str = ""
    tour_id: str
    season_id: str

    points: float = 0
    earnings: float = 0
    win: int = 0
    top_ten: int = 0
    made_cut: int = 0
    appearances: int = 0
    position: Optional[str] = None
    # Playoff division the card qualified for, 0 none, 1 gold, 2 silver
    playoff: int = 0
