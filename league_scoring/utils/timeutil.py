"""Time helpers shared by the models and the scoring stages."""

from datetime import datetime, timezone
from typing import Optional

# Formats seen in provider tee time fields, tried in order
TEE_TIME_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y %H:%M",
)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_tee_time(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a tee time string into an aware UTC datetime.

    Args:
        value: Tee time as stored on a golfer or team

    Returns:
        Parsed datetime, or None if empty or unparseable
    """
    if not value:
        return None
    text = value.strip()
    try:
        return ensure_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass
    for fmt in TEE_TIME_FORMATS:
        try:
            return ensure_utc(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


def tee_time_passed(value: Optional[str], now: datetime) -> bool:
    """Check if a tee time is set and not in the future."""
    parsed = parse_tee_time(value)
    return parsed is not None and parsed <= ensure_utc(now)
