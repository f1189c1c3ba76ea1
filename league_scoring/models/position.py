"""Finishing position value type."""

import re
from typing import Optional, Union

from pydantic import BaseModel

CUT = "CUT"
WD = "WD"
DQ = "DQ"

# Statuses that end a golfer's (or team's) tournament
TERMINAL_STATUSES = (CUT, WD, DQ)

_NON_DIGIT_PREFIX = re.compile(r"^\D+")


class Position(BaseModel):
    """A ranked position such as ``3`` or ``T3``."""

    rank: int
    tied: bool = False

    class Config:
        """Pydantic configuration."""

        frozen = True

    @classmethod
    def parse(cls, value: Union[str, int, None]) -> Optional["Position"]:
        """Parse a stored position string.

        Any non-digit prefix is stripped, so ``"T3"`` and ``"=3"`` both
        parse to rank 3. Status sentinels and unranked values return None.

        Args:
            value: Position as persisted or as sent by the provider

        Returns:
            Position, or None when the value carries no rank
        """
        if value is None:
            return None
        if isinstance(value, int):
            return cls(rank=value) if value > 0 else None

        text = str(value).strip().upper()
        if not text or text in TERMINAL_STATUSES or text == "--":
            return None

        digits = _NON_DIGIT_PREFIX.sub("", text)
        if not digits.isdigit():
            return None
        return cls(rank=int(digits), tied=text.startswith("T"))

    def format(self) -> str:
        """Encode as the display string (``T3`` or ``3``)."""
        return f"T{self.rank}" if self.tied else str(self.rank)

    def __str__(self) -> str:
        return self.format()


def rank_of(value: Union[str, int, None]) -> Optional[int]:
    """Numeric rank of a position string, ignoring any tie marker."""
    position = Position.parse(value)
    return position.rank if position else None


def is_terminal(status: Optional[str]) -> bool:
    """Check if a position string is CUT, WD or DQ."""
    return status is not None and status.strip().upper() in TERMINAL_STATUSES
