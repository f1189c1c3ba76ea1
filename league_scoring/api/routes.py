"""API route definitions."""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from league_scoring.api.dependencies import get_client, get_store, verify_cron_secret
from league_scoring.clients.datagolf import DataGolfClient
from league_scoring.services.cache import get_cache_service
from league_scoring.services.golfer_service import GolferService
from league_scoring.services.group_service import GroupService
from league_scoring.services.playoff_service import PlayoffService
from league_scoring.services.stage import StageResult, run_stage
from league_scoring.services.standings_service import StandingsService
from league_scoring.services.team_service import TeamService
from league_scoring.storage import DatabaseInterface
from league_scoring.types import HealthResponseDict

logger = logging.getLogger(__name__)
router = APIRouter()

NO_STORE = {"Cache-Control": "no-store"}


def _respond(result: StageResult) -> JSONResponse:
    return JSONResponse(content=result.to_response(), status_code=result.status_code, headers=NO_STORE)


@router.get("/api/cron/create-groups", dependencies=[Depends(verify_cron_secret)])
async def create_groups(
    store: DatabaseInterface = Depends(get_store),
    client: DataGolfClient = Depends(get_client),
) -> JSONResponse:
    """Assign the upcoming tournament's field to groups.

    Returns:
        Stage result, 404 when there is no upcoming tournament
    """
    service = GroupService(store, client)
    return _respond(await run_stage("create-groups", service.create_groups))


@router.get("/api/cron/update-golfers", dependencies=[Depends(verify_cron_secret)])
async def update_golfers(
    store: DatabaseInterface = Depends(get_store),
    client: DataGolfClient = Depends(get_client),
) -> JSONResponse:
    """Refresh golfers of the active tournament from DataGolf."""
    service = GolferService(store, client)
    return _respond(await run_stage("update-golfers", service.update_golfers))


@router.get("/api/cron/create-playoff-teams", dependencies=[Depends(verify_cron_secret)])
async def create_playoff_teams(store: DatabaseInterface = Depends(get_store)) -> JSONResponse:
    """Copy first playoff event teams into the later playoff events.

    Returns:
        Stage result, 200 while the first playoff event is still far off
    """
    service = PlayoffService(store)
    return _respond(await run_stage("create-playoff-teams", service.create_playoff_teams))


@router.get("/api/cron/update-teams", dependencies=[Depends(verify_cron_secret)])
async def update_teams(
    tournament_id: Optional[str] = Query(default=None, description="Tournament to update"),
    store: DatabaseInterface = Depends(get_store),
) -> JSONResponse:
    """Score and rank teams.

    Args:
        tournament_id: Defaults to the active tournament
    """
    service = TeamService(store)
    return _respond(await run_stage("update-teams", lambda: service.update_teams(tournament_id)))


@router.get("/api/cron/update-standings", dependencies=[Depends(verify_cron_secret)])
async def update_standings(store: DatabaseInterface = Depends(get_store)) -> JSONResponse:
    """Recompute season standings for every tour card."""
    service = StandingsService(store)
    return _respond(await run_stage("update-standings", service.update_standings))


@router.get("/health")
async def health_check(store: DatabaseInterface = Depends(get_store)) -> JSONResponse:
    """Health check endpoint.

    Returns:
        Health status, 503 when the database is unreachable
    """
    healthy = await asyncio.to_thread(store.health_check)
    body: HealthResponseDict = {"status": "ok" if healthy else "degraded", "database": healthy}
    return JSONResponse(content=body, status_code=200 if healthy else 503)


@router.get("/api/cache/stats")
async def cache_stats() -> JSONResponse:
    """Get provider cache statistics.

    Returns:
        Size and capacity of the field and rankings caches
    """
    return JSONResponse(content=get_cache_service().stats(), headers=NO_STORE)
