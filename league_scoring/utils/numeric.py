"""Rounding and averaging helpers used by the scoring stages."""

import math
from typing import Iterable, Optional


def round_half_up(value: Optional[float], places: int = 0) -> Optional[float]:
    """
    Round half away from negative infinity, the way scoreboards do.

    ``round_half_up(-0.25, 1)`` gives ``-0.2`` and ``round_half_up(2.5)``
    gives ``3``, unlike the builtin ``round`` which rounds half to even.

    Args:
        value: Number to round, None passes through
        places: Decimal places to keep

    Returns:
        Rounded value, or None
    """
    if value is None:
        return None
    factor = 10 ** places
    # Guard against binary noise such as 71.85 being stored as 71.8499999
    scaled = round(value * factor, 9)
    result = math.floor(scaled + 0.5) / factor
    if places == 0:
        return float(int(result))
    return result


def round_one(value: Optional[float]) -> Optional[float]:
    """Round to one decimal place."""
    return round_half_up(value, 1)


def round_cents(value: Optional[float]) -> Optional[float]:
    """Round a money amount to the cent."""
    return round_half_up(value, 2)


def mean(values: Iterable[float]) -> Optional[float]:
    """Arithmetic mean, None for an empty sequence."""
    items = list(values)
    if not items:
        return None
    return sum(items) / len(items)


def differential(strokes: Optional[float], par: int) -> Optional[float]:
    """Strokes relative to par."""
    if strokes is None:
        return None
    return strokes - par
