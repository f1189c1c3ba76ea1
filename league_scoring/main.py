"""
League Scoring - FastAPI Application

Exposes the four scoring stages as cron trigger endpoints.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import __version__, config
from .api.routes import router
from .services.cache import get_cache_service
from .storage import get_database, reset_database

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    store = get_database()
    logger.info(f"Database ready (healthy={store.health_check()})")
    logger.info("App is ready.")

    yield

    logger.info("Shutting down...")
    get_cache_service().clear()
    reset_database()


app = FastAPI(
    title="League Scoring",
    description="Fantasy golf tournament scoring engine",
    version=__version__,
    lifespan=lifespan,
)
app.include_router(router)


# Run with: uvicorn league_scoring.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
