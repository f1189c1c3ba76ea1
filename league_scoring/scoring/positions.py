"""Tie-aware ranking and award splitting."""

from bisect import bisect_left
from collections import Counter
from typing import Dict, Hashable, Mapping, Sequence, TypeVar

from league_scoring.models import Position

K = TypeVar("K", bound=Hashable)


def competition_ranks(values: Mapping[K, float], descending: bool = False) -> Dict[K, Position]:
    """
    Rank keys by value using standard competition ranking.

    Rank is one plus the number of strictly better values, so equal values
    share the best rank among them and are flagged as tied ("1, T2, T2, 4").

    Args:
        values: Key to comparable value
        descending: True when higher values are better

    Returns:
        Key to Position
    """
    signed = {key: (-value if descending else value) for key, value in values.items()}
    ordered = sorted(signed.values())
    counts = Counter(ordered)
    return {
        key: Position(rank=bisect_left(ordered, value) + 1, tied=counts[value] > 1)
        for key, value in signed.items()
    }


def split_award(table: Sequence[float], rank: int, count: int) -> float:
    """
    Share of a points or payout table for ``count`` teams tied at ``rank``.

    The tied band covers table entries ``rank-1`` through ``rank-2+count``,
    entries past the end of the table count as zero.

    >>> split_award([10, 8, 6, 4], 3, 2)
    5.0
    """
    if count <= 0 or rank <= 0:
        return 0.0
    start = rank - 1
    band = [table[i] if i < len(table) else 0 for i in range(start, start + count)]
    return sum(band) / count
