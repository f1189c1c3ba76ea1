"""
Background scheduler for the scoring stages.

Runs the tournament stages on a short interval and standings on a longer
one, without going through the HTTP layer.
"""

import asyncio
import logging
import time

import schedule

from . import config
from .clients.datagolf import get_datagolf_client
from .services.golfer_service import GolferService
from .services.group_service import GroupService
from .services.playoff_service import PlayoffService
from .services.stage import run_stage
from .services.standings_service import StandingsService
from .services.team_service import TeamService
from .storage import get_database

logger = logging.getLogger(__name__)


async def _pipeline() -> None:
    store = get_database()
    client = get_datagolf_client()
    await run_stage("create-groups", GroupService(store, client).create_groups)
    await run_stage("update-golfers", GolferService(store, client).update_golfers)
    await run_stage("create-playoff-teams", PlayoffService(store).create_playoff_teams)
    await run_stage("update-teams", TeamService(store).update_teams)


def run_pipeline() -> None:
    """Background job for the tournament stages."""
    asyncio.run(_pipeline())


def run_standings() -> None:
    """Background job for season standings."""
    asyncio.run(run_stage("update-standings", StandingsService(get_database()).update_standings))


def main():
    """Main entry point for scheduler."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.info("Running initial pipeline...")
    run_pipeline()
    run_standings()

    schedule.every(config.SCHEDULE_MINUTES).minutes.do(run_pipeline)
    schedule.every(config.STANDINGS_SCHEDULE_MINUTES).minutes.do(run_standings)
    logger.info(
        f"Scheduled stages every {config.SCHEDULE_MINUTES} minutes, "
        f"standings every {config.STANDINGS_SCHEDULE_MINUTES} minutes"
    )

    while True:
        schedule.run_pending()
        time.sleep(30)


if __name__ == '__main__':
    main()
