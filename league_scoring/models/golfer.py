"""Tournament golfer data model."""

from typing import Optional

from pydantic import BaseModel

from league_scoring.models.position import is_terminal

# Per-round field names, index 0 is round one
ROUND_FIELDS = ("round_one", "round_two", "round_three", "round_four")
TEE_TIME_FIELDS = (
    "round_one_tee_time",
    "round_two_tee_time",
    "round_three_tee_time",
    "round_four_tee_time",
)


class Golfer(BaseModel):
    """A golfer entered in one tournament."""

    id: Optional[int] = None
    api_id: int
    player_name: str
    tournament_id: str
    group: int = 0
    world_rank: Optional[int] = None
    rating: Optional[float] = None
    country: Optional[str] = None

    round_one: Optional[float] = None
    round_two: Optional[float] = None
    round_three: Optional[float] = None
    round_four: Optional[float] = None
    round_one_tee_time: Optional[str] = None
    round_two_tee_time: Optional[str] = None
    round_three_tee_time: Optional[str] = None
    round_four_tee_time: Optional[str] = None

    round: Optional[int] = None
    score: Optional[float] = None
    today: Optional[float] = None
    thru: Optional[int] = None
    end_hole: Optional[int] = None
    position: Optional[str] = None
    pos_change: Optional[int] = None

    make_cut: Optional[float] = None
    top_ten: Optional[float] = None
    win: Optional[float] = None
    usage: Optional[float] = None
    earnings: Optional[float] = None

    def strokes(self, round_number: int) -> Optional[float]:
        """Get strokes for a round (1-4)."""
        return getattr(self, ROUND_FIELDS[round_number - 1])

    def tee_time(self, round_number: int) -> Optional[str]:
        """Get tee time for a round (1-4)."""
        return getattr(self, TEE_TIME_FIELDS[round_number - 1])

    def is_terminal(self) -> bool:
        """Check if the golfer has been cut, withdrawn or disqualified."""
        return is_terminal(self.position)

    def total_through(self, round_number: int) -> Optional[float]:
        """Cumulative strokes through a round, None if any round is missing."""
        total = 0.0
        for n in range(1, round_number + 1):
            value = self.strokes(n)
            if value is None:
                return None
            total += value
        return total
