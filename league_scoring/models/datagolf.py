"""DataGolf feed models."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class FieldGolfer(BaseModel):
    """Entrant from the field-updates feed."""

    dg_id: int
    player_name: str = ""
    country: Optional[str] = None
    r1_teetime: Optional[str] = None
    r2_teetime: Optional[str] = None
    r3_teetime: Optional[str] = None
    r4_teetime: Optional[str] = None

    def tee_time(self, round_number: int) -> Optional[str]:
        """Get tee time for a round (1-4), empty strings are None."""
        return getattr(self, f"r{round_number}_teetime") or None


class FieldUpdates(BaseModel):
    """Snapshot of the field-updates feed."""

    event_name: str = ""
    current_round: Optional[int] = None
    course_name: Optional[str] = None
    field: List[FieldGolfer] = []


class LiveGolfer(BaseModel):
    """Player row from the in-play predictions feed."""

    dg_id: int
    player_name: str = ""
    country: Optional[str] = None
    current_pos: Optional[str] = None
    current_score: Optional[float] = None
    today: Optional[float] = None
    thru: Optional[int] = None
    end_hole: Optional[int] = None
    round: Optional[int] = None
    r1: Optional[float] = Field(default=None, alias="R1")
    r2: Optional[float] = Field(default=None, alias="R2")
    r3: Optional[float] = Field(default=None, alias="R3")
    r4: Optional[float] = Field(default=None, alias="R4")
    top_10: Optional[float] = None
    make_cut: Optional[float] = None
    win: Optional[float] = None

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    @field_validator("thru", "end_hole", mode="before")
    @classmethod
    def _holes(cls, value):
        # The feed sends "F" for a finished round and "--" before tee off
        if isinstance(value, str):
            text = value.strip().upper()
            if text == "F":
                return 18
            return int(text) if text.isdigit() else None
        return value

    @field_validator("today", "current_score", mode="before")
    @classmethod
    def _to_par(cls, value):
        if isinstance(value, str):
            text = value.strip().upper()
            if text == "E":
                return 0
            try:
                return float(text)
            except ValueError:
                return None
        return value

    def strokes(self, round_number: int) -> Optional[float]:
        """Get strokes for a round (1-4), zero counts as missing."""
        return getattr(self, f"r{round_number}") or None


class LiveInfo(BaseModel):
    """Header of the in-play feed."""

    event_name: str = ""
    current_round: Optional[int] = None
    last_update: Optional[str] = None


class InPlay(BaseModel):
    """Snapshot of the in-play predictions feed."""

    info: LiveInfo = Field(default_factory=LiveInfo)
    data: List[LiveGolfer] = []


class RankingEntry(BaseModel):
    """Row from the skill rankings feed."""

    dg_id: int
    player_name: str = ""
    country: Optional[str] = None
    dg_skill_estimate: Optional[float] = None
    owgr_rank: Optional[int] = None


class Rankings(BaseModel):
    """Snapshot of the skill rankings feed."""

    rankings: List[RankingEntry] = []
