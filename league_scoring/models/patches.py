"""
Partial update records.

A patch names only the fields a stage decided to change. Every field is
optional and only explicitly set fields (an explicit None included) are
written, so an empty patch means "leave the row alone".

Patches are assembled from dict fragments returned by small rule
functions and merged without mutating any fragment.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel


def merge_fragments(*fragments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge update fragments into a new dict, later fragments win."""
    merged: Dict[str, Any] = {}
    for fragment in fragments:
        if fragment:
            merged = {**merged, **fragment}
    return merged


class _Patch(BaseModel):
    """Base class for partial updates."""

    class Config:
        """Pydantic configuration."""

        extra = "forbid"
        frozen = True

    @classmethod
    def from_fragments(cls, *fragments: Optional[Dict[str, Any]]):
        """Build a patch from rule fragments."""
        return cls(**merge_fragments(*fragments))

    def changes(self) -> Dict[str, Any]:
        """Fields to persist."""
        return self.model_dump(exclude_unset=True)

    def is_empty(self) -> bool:
        return not self.model_fields_set


class GolferPatch(_Patch):
    """Changed golfer fields."""

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
    country: Optional[str] = None


class TeamPatch(_Patch):
    """Changed team fields."""

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


class TourCardPatch(_Patch):
    """Changed tour card fields."""

    points: Optional[float] = None
    earnings: Optional[float] = None
    win: Optional[int] = None
    top_ten: Optional[int] = None
    made_cut: Optional[int] = None
    appearances: Optional[int] = None
    position: Optional[str] = None


class TournamentPatch(_Patch):
    """Changed tournament fields."""

    current_round: Optional[int] = None
    live_play: Optional[bool] = None
