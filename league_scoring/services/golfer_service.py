"""Golfer Update stage: refreshes the active tournament's golfers from DataGolf."""

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

from league_scoring import config
from league_scoring.clients.datagolf import DataGolfClient
from league_scoring.models import Golfer, LiveGolfer
from league_scoring.scoring.golfer_rules import (
    GolferContext,
    apply_patch,
    build_golfer_patch,
    build_tournament_patch,
    is_live,
    missing_entrants,
    usage_by_golfer,
)
from league_scoring.scoring.grouping import new_golfer
from league_scoring.services.stage import StageResult
from league_scoring.storage import DatabaseInterface
from league_scoring.types import GolferSummaryDict
from league_scoring.utils.batch import batch_process
from league_scoring.utils.timeutil import utcnow

logger = logging.getLogger(__name__)

DEFAULT_PAR = 72
# Group given to golfers who joined the field after groups were made
LATE_ENTRY_GROUP = 0


class GolferService:
    """Merges provider data into stored golfers."""

    def __init__(
        self,
        store: DatabaseInterface,
        client: DataGolfClient,
        batch_size: Optional[int] = None,
        batch_delay: Optional[float] = None,
    ):
        self.store = store
        self.client = client
        self.batch_size = batch_size or config.BATCH_SIZE
        self.batch_delay = config.BATCH_DELAY_SECONDS if batch_delay is None else batch_delay

    async def update_golfers(self, now: Optional[datetime] = None) -> StageResult:
        """
        Refresh every golfer of the active tournament.

        All three feeds are fetched before anything is written, so a provider
        failure leaves stored data untouched. A golfer that fails to update
        is logged and skipped.

        Args:
            now: Reference time, defaults to the current time

        Returns:
            StageResult
        """
        now = now or utcnow()
        tournament = await asyncio.to_thread(self.store.get_tournament_by_state, "active", now)
        if tournament is None:
            return StageResult.nothing_to_do("No active tournament found")

        field, in_play, rankings = await asyncio.gather(
            self.client.get_field_updates(),
            self.client.get_in_play(),
            self.client.get_rankings(),
        )

        course = await asyncio.to_thread(self.store.get_course, tournament.course_id)
        par = course.par if course else DEFAULT_PAR
        golfers = await asyncio.to_thread(self.store.get_golfers_by_tournament, tournament.id)
        teams = await asyncio.to_thread(self.store.get_teams_by_tournament, tournament.id)

        matched = field.event_name == in_play.info.event_name
        if not matched:
            logger.warning(
                f"Live feed is for '{in_play.info.event_name}', field is for "
                f"'{field.event_name}'; ignoring live data"
            )
        live_by_id: Dict[int, LiveGolfer] = {g.dg_id: g for g in in_play.data} if matched else {}
        field_by_id = {g.dg_id: g for g in field.field}

        created = await self._create_missing(tournament.id, field.field, golfers, rankings.rankings)
        if created:
            golfers = await asyncio.to_thread(self.store.get_golfers_by_tournament, tournament.id)

        current_round = tournament.current_round or 1
        if matched and in_play.info.current_round:
            current_round = max(current_round, in_play.info.current_round)

        ctx = GolferContext(
            par=par,
            current_round=current_round,
            live_play=tournament.live_play,
            now=now,
            usage=usage_by_golfer(teams),
            team_count=len(teams),
            golfers=golfers,
        )

        refreshed: Dict[int, Golfer] = {}
        changed = 0

        async def update(golfer: Golfer) -> None:
            nonlocal changed
            patch = build_golfer_patch(
                golfer,
                live_by_id.get(golfer.api_id),
                field_by_id.get(golfer.api_id),
                ctx,
            )
            if not patch.is_empty():
                await asyncio.to_thread(self.store.update_golfer, golfer.id, patch.changes())
                changed += 1
            refreshed[golfer.api_id] = apply_patch(golfer, patch)

        report = await batch_process(
            golfers,
            self.batch_size,
            update,
            self.batch_delay,
            label=lambda g: f"golfer {g.id} ({g.player_name})",
        )

        live_count = sum(1 for g in golfers if is_live(live_by_id.get(g.api_id)))
        final = [refreshed.get(g.api_id, g) for g in golfers]
        tournament_patch = build_tournament_patch(tournament, final, live_count)
        if not tournament_patch.is_empty():
            await asyncio.to_thread(self.store.update_tournament, tournament.id, tournament_patch.changes())

        changes = tournament_patch.changes()
        summary: GolferSummaryDict = {
            "tournament_id": tournament.id,
            "golfers": len(golfers),
            "golfers_created": created,
            "golfers_updated": changed,
            "failed": report.failed,
            "live_golfers": live_count,
            "current_round": changes.get("current_round", tournament.current_round),
            "live_play": changes.get("live_play", tournament.live_play),
        }
        return StageResult.done(
            f"Updated {changed} of {len(golfers)} golfers for {tournament.name}",
            **summary,
        )

    async def _create_missing(self, tournament_id, field, golfers, rankings) -> int:
        """Add field entrants that have no golfer row yet."""
        excluded = set(config.EXCLUDED_GOLFER_IDS)
        missing = [e for e in missing_entrants(field, golfers) if e.dg_id not in excluded]
        if not missing:
            return 0
        by_id = {r.dg_id: r for r in rankings}
        new: List[Golfer] = [
            new_golfer(entrant, by_id.get(entrant.dg_id), tournament_id, LATE_ENTRY_GROUP)
            for entrant in missing
        ]
        created = await asyncio.to_thread(self.store.create_golfers, new)
        logger.info(f"Added {created} late entrants to tournament {tournament_id}")
        return created
