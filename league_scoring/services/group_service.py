"""Group Assignment stage: splits the upcoming tournament's field into groups."""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from league_scoring.clients.datagolf import DataGolfClient
from league_scoring.models import Tournament
from league_scoring.scoring.grouping import (
    assign_groups,
    copy_roster,
    first_playoff_event,
    new_golfer,
    playoff_event_index,
    rank_field,
)
from league_scoring.services.playoff_service import playoff_tier_ids
from league_scoring.services.stage import StageResult
from league_scoring.storage import DatabaseInterface
from league_scoring.types import GroupSummaryDict
from league_scoring.utils.timeutil import utcnow

logger = logging.getLogger(__name__)


class GroupService:
    """Creates the golfer roster of the next tournament."""

    def __init__(self, store: DatabaseInterface, client: DataGolfClient):
        self.store = store
        self.client = client

    async def create_groups(self, now: Optional[datetime] = None) -> StageResult:
        """
        Assign the upcoming tournament's field to skill groups.

        Does nothing when the tournament already has golfers. Later playoff
        events copy the roster of the first playoff event instead of
        regrouping.

        Args:
            now: Reference time, defaults to the current time

        Returns:
            StageResult
        """
        now = now or utcnow()
        tournament = await asyncio.to_thread(self.store.get_tournament_by_state, "upcoming", now)
        if tournament is None:
            return StageResult.nothing_to_do("No upcoming tournament found")

        existing = await asyncio.to_thread(self.store.get_golfers_by_tournament, tournament.id)
        if existing:
            return StageResult.skipped(
                "Tournament already has golfers - groups already created",
                tournament_id=tournament.id,
            )

        source = await self._playoff_source(tournament)
        if source is not None:
            return await self._copy_playoff_roster(tournament, source)

        rankings, field = await asyncio.gather(
            self.client.get_rankings(),
            self.client.get_field_updates(),
        )
        groups = assign_groups(rank_field(field.field, rankings.rankings))

        created = 0
        for number, members in enumerate(groups, start=1):
            if not members:
                continue
            # One transaction per group
            golfers = [new_golfer(entrant, ranking, tournament.id, number) for entrant, ranking in members]
            created += await asyncio.to_thread(self.store.create_golfers, golfers)
            logger.info(f"Group {number}: {len(members)} golfers for {tournament.name}")

        groups_created = sum(1 for members in groups if members)
        summary: GroupSummaryDict = {
            "tournament_id": tournament.id,
            "groups_created": groups_created,
            "golfers_created": created,
        }
        return StageResult.done(
            f"Successfully created {groups_created} groups with {created} golfers",
            **summary,
        )

    async def _playoff_source(self, tournament: Tournament) -> Optional[Tournament]:
        """First playoff event to copy from, None unless this is a later playoff event."""
        season = await asyncio.to_thread(self.store.get_tournaments_by_season, tournament.season_id)
        playoff_tiers = await playoff_tier_ids(self.store, season)
        if playoff_event_index(tournament, season, playoff_tiers) <= 1:
            return None
        first = first_playoff_event(tournament, season, playoff_tiers)
        if first is None or first.id == tournament.id:
            return None
        return first

    async def _copy_playoff_roster(self, tournament: Tournament, source: Tournament) -> StageResult:
        base = await asyncio.to_thread(self.store.get_golfers_by_tournament, source.id)
        golfers = copy_roster(base, tournament.id)
        created = await asyncio.to_thread(self.store.create_golfers, golfers) if golfers else 0
        summary: GroupSummaryDict = {
            "tournament_id": tournament.id,
            "groups_created": len({g.group for g in golfers}),
            "golfers_created": created,
            "copied_from": source.id,
        }
        return StageResult.done(
            f"Copied {created} golfers from first playoff event into {tournament.name}",
            **summary,
        )
