"""
Factory function to create the appropriate database implementation.

Reads configuration from environment variables to determine which
database backend to use.
"""

import logging
import os
from typing import Optional

from .base import DatabaseInterface
from .exceptions import ConfigurationError
from ..config import get_data_dir

logger = logging.getLogger(__name__)

# Singleton instance
_db_instance: Optional[DatabaseInterface] = None


def get_database() -> DatabaseInterface:
    """
    Get or create the database instance.

    Uses the DB_TYPE environment variable to determine which implementation:
    - "sqlite" (default): Local SQLite database stored in DATA_DIR

    Returns:
        DatabaseInterface implementation

    Raises:
        ConfigurationError: If DB_TYPE names an unknown backend
    """
    global _db_instance

    if _db_instance is not None:
        return _db_instance

    db_type = os.environ.get('DB_TYPE', 'sqlite').lower()
    logger.info(f"Database type: {db_type}")

    if db_type == 'sqlite':
        from .sqlite_db import SQLiteDatabase

        db_path = os.path.join(get_data_dir(), 'league.db')
        _db_instance = SQLiteDatabase(db_path=db_path)

    else:
        raise ConfigurationError(
            f"Unknown DB_TYPE: {db_type}. "
            f"Valid options: sqlite"
        )

    # Initialize the database
    _db_instance.initialize()

    return _db_instance


def reset_database() -> None:
    """
    Reset the database singleton.

    Used for testing or when switching configurations.
    """
    global _db_instance
    if _db_instance is not None:
        _db_instance.close()
        _db_instance = None
