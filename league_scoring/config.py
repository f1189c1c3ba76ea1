"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

import os
from typing import List


def _get_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool(key: str, default: bool) -> bool:
    """Get boolean from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes')


def _get_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


def _get_int_list(key: str, default: List[int]) -> List[int]:
    """Get comma separated integers from environment variable.

    Entries that are not integers are skipped.
    """
    value = os.environ.get(key)
    if value is None:
        return list(default)
    result = []
    for part in value.split(','):
        part = part.strip()
        if not part:
            continue
        try:
            result.append(int(part))
        except ValueError:
            continue
    return result


def get_data_dir() -> str:
    """Resolve the data directory at call time."""
    return (
        os.environ.get('DATA_DIR') or
        ('/app/data' if os.path.exists('/app') else 'data')
    )


# =============================================================================
# SERVER SETTINGS
# =============================================================================
PORT = _get_int('PORT', 8000)
HOST = _get_str('HOST', '0.0.0.0')

# Shared secret for the cron trigger endpoints. Empty disables the check.
CRON_SECRET = _get_str('CRON_SECRET', '')

# =============================================================================
# STORAGE SETTINGS
# =============================================================================
DB_TYPE = _get_str('DB_TYPE', 'sqlite')
DATA_DIR = get_data_dir()

# =============================================================================
# DATAGOLF PROVIDER
# =============================================================================
DATAGOLF_BASE_URL = _get_str('DATAGOLF_BASE_URL', 'https://feeds.datagolf.com')
DATAGOLF_API_KEY = _get_str('DATAGOLF_API_KEY', '')
DATAGOLF_TIMEOUT = _get_float('DATAGOLF_TIMEOUT', 30.0)

# Provider snapshot cache (seconds). In-play data is never cached.
CACHE_FIELD_TTL = _get_int('CACHE_FIELD_TTL', 60)
CACHE_RANKINGS_TTL = _get_int('CACHE_RANKINGS_TTL', 3600)

# =============================================================================
# SCORING SETTINGS
# =============================================================================
# Golfers never added to a tournament roster (DataGolf ids)
EXCLUDED_GOLFER_IDS = _get_int_list('EXCLUDED_GOLFER_IDS', [18417])

# "alternate" splits overflow golfers between groups 4 and 5,
# "last" sends all of them to group 5
GROUP_OVERFLOW_POLICY = _get_str('GROUP_OVERFLOW_POLICY', 'alternate')

# Strokes over par charged for a missing round
PENALTY_STROKES = _get_int('PENALTY_STROKES', 8)

DEFAULT_WORLD_RANK = _get_int('DEFAULT_WORLD_RANK', 501)

# Later playoff events get their teams once the first one is this close
PLAYOFF_TEAMS_LEAD_DAYS = _get_float('PLAYOFF_TEAMS_LEAD_DAYS', 1.0)

# =============================================================================
# BATCH SETTINGS
# =============================================================================
BATCH_SIZE = _get_int('BATCH_SIZE', 10)
BATCH_DELAY_SECONDS = _get_float('BATCH_DELAY_SECONDS', 0.1)

# =============================================================================
# SCHEDULER
# =============================================================================
SCHEDULE_MINUTES = _get_int('SCHEDULE_MINUTES', 5)
STANDINGS_SCHEDULE_MINUTES = _get_int('STANDINGS_SCHEDULE_MINUTES', 60)

# =============================================================================
# LOGGING
# =============================================================================
LOG_LEVEL = _get_str('LOG_LEVEL', 'INFO')
