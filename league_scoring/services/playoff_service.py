"""Playoff Team Creation stage: carries first playoff event lineups forward."""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import List, Optional, Set

from league_scoring import config
from league_scoring.models import Tournament
from league_scoring.scoring.grouping import playoff_events
from league_scoring.scoring.playoffs import series_team
from league_scoring.services.stage import StageResult
from league_scoring.storage import DatabaseInterface
from league_scoring.types import PlayoffSummaryDict
from league_scoring.utils.timeutil import utcnow

logger = logging.getLogger(__name__)


async def playoff_tier_ids(store: DatabaseInterface, tournaments: List[Tournament]) -> Set[str]:
    """Ids of the tiers among ``tournaments`` that are playoff tiers."""
    playoff: Set[str] = set()
    for tier_id in {t.tier_id for t in tournaments}:
        tier = await asyncio.to_thread(store.get_tier, tier_id)
        if tier is not None and tier.is_playoff():
            playoff.add(tier_id)
    return playoff


class PlayoffService:
    """Gives every playoff tour card a team in each later playoff event."""

    def __init__(self, store: DatabaseInterface):
        self.store = store

    async def create_playoff_teams(self, now: Optional[datetime] = None) -> StageResult:
        """
        Copy the first playoff event's teams into the later playoff events.

        Only teams of tour cards in a playoff division are copied, and a
        tour card that already has a team in an event keeps it. Nothing
        happens until the first playoff event is about to start.

        Args:
            now: Reference time, defaults to the current time

        Returns:
            StageResult
        """
        now = now or utcnow()
        season = await asyncio.to_thread(self.store.get_current_season, now)
        if season is None:
            return StageResult.nothing_to_do("No current season found")

        tournaments = await asyncio.to_thread(self.store.get_tournaments_by_season, season.id)
        playoff_tiers = await playoff_tier_ids(self.store, tournaments)
        series = sorted(
            (t for t in tournaments if t.tier_id in playoff_tiers),
            key=lambda t: (t.start_date, t.id),
        )
        if not series:
            return StageResult.nothing_to_do("No playoff tournaments found", season_id=season.id)

        first = series[0]
        until_start = first.start_date - now
        if until_start > timedelta(days=config.PLAYOFF_TEAMS_LEAD_DAYS):
            days = until_start.total_seconds() / 86400
            return StageResult.skipped(
                f"First playoff tournament starts in {days:.1f} days",
                season_id=season.id,
            )

        cards = await asyncio.to_thread(self.store.get_tour_cards_by_season, season.id)
        qualified = {card.id for card in cards if card.playoff > 0}
        source = [
            team for team in await asyncio.to_thread(self.store.get_teams_by_tournament, first.id)
            if team.tour_card_id in qualified
        ]
        if not source:
            return StageResult.nothing_to_do(
                f"No playoff teams found for {first.name}",
                season_id=season.id,
            )

        later = playoff_events(first, tournaments, playoff_tiers)[1:]
        created = 0
        existing = 0
        for event in later:
            have = {
                team.tour_card_id
                for team in await asyncio.to_thread(self.store.get_teams_by_tournament, event.id)
            }
            for team in source:
                if team.tour_card_id in have:
                    existing += 1
                    continue
                await asyncio.to_thread(self.store.save_team, series_team(team, event.id))
                created += 1
            logger.info(f"{event.name}: playoff teams in place for {len(source)} tour cards")

        summary: PlayoffSummaryDict = {
            "season_id": season.id,
            "source_tournament_id": first.id,
            "tournaments": len(later),
            "teams_created": created,
            "teams_existing": existing,
        }
        if not created:
            return StageResult.skipped("Playoff teams already created", **summary)
        return StageResult.done(
            f"Created {created} playoff teams from {first.name}",
            **summary,
        )
