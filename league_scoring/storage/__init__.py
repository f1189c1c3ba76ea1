"""
Storage module for league data.

Provides a unified interface over database backends:
- SQLite (local development, self-hosted)

Usage:
    from league_scoring.storage import get_database

    db = get_database()  # Uses DB_TYPE env var
    golfers = db.get_golfers_by_tournament(tournament_id)
"""

from .base import DatabaseInterface, TOURNAMENT_STATES
from .factory import get_database, reset_database
from .exceptions import (
    DatabaseError,
    ConnectionError,
    ConfigurationError,
    SchemaError,
    QueryError,
    NotFoundError
)

__all__ = [
    'DatabaseInterface',
    'TOURNAMENT_STATES',
    'get_database',
    'reset_database',
    'DatabaseError',
    'ConnectionError',
    'ConfigurationError',
    'SchemaError',
    'QueryError',
    'NotFoundError'
]
