"""FastAPI dependencies for dependency injection."""

import hmac
from typing import Optional

from fastapi import Header, HTTPException

from league_scoring import config
from league_scoring.clients.datagolf import DataGolfClient, get_datagolf_client
from league_scoring.storage import DatabaseInterface, get_database


def get_store() -> DatabaseInterface:
    """Get database dependency."""
    return get_database()


def get_client() -> DataGolfClient:
    """Get DataGolf client dependency."""
    return get_datagolf_client()


def verify_cron_secret(x_cron_secret: Optional[str] = Header(default=None)) -> None:
    """Reject trigger calls without the shared secret, when one is configured."""
    if not config.CRON_SECRET:
        return
    if x_cron_secret is None or not hmac.compare_digest(x_cron_secret, config.CRON_SECRET):
        raise HTTPException(status_code=401, detail="Invalid cron secret")
