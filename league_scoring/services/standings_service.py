"""Standings Update stage: season totals and positions for tour cards."""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from league_scoring import config
from league_scoring.scoring.standings import position_patch, season_positions, season_stats, stats_patch
from league_scoring.services.stage import StageResult
from league_scoring.storage import DatabaseInterface
from league_scoring.types import StandingsSummaryDict
from league_scoring.utils.batch import batch_process
from league_scoring.utils.timeutil import utcnow

logger = logging.getLogger(__name__)


class StandingsService:
    """Recomputes tour card statistics for the current season."""

    def __init__(
        self,
        store: DatabaseInterface,
        batch_size: Optional[int] = None,
        batch_delay: Optional[float] = None,
    ):
        self.store = store
        self.batch_size = batch_size or config.BATCH_SIZE
        self.batch_delay = config.BATCH_DELAY_SECONDS if batch_delay is None else batch_delay

    async def update_standings(self, now: Optional[datetime] = None) -> StageResult:
        """
        Update every tour card of the current season.

        Stats and positions are computed from one read of the season's
        teams, then written in two passes.
        """
        now = now or utcnow()
        season = await asyncio.to_thread(self.store.get_current_season, now)
        if season is None:
            return StageResult.nothing_to_do("No current season found")

        cards = await asyncio.to_thread(self.store.get_tour_cards_by_season, season.id)
        if not cards:
            return StageResult.nothing_to_do(f"No tour cards found for season {season.year}", season_id=season.id)
        teams = await asyncio.to_thread(self.store.get_teams_by_tour_cards, [card.id for card in cards])

        stats = season_stats(cards, teams)
        positions = season_positions(cards, stats)

        stat_patches = [(card, stats_patch(card, stats[card.id])) for card in cards]
        position_patches = [(card, position_patch(card, positions[card.id])) for card in cards]

        async def write(item) -> None:
            card, patch = item
            await asyncio.to_thread(self.store.update_tour_card, card.id, patch.changes())

        first = await batch_process(
            [item for item in stat_patches if not item[1].is_empty()],
            self.batch_size,
            write,
            self.batch_delay,
            label=lambda item: f"tour card {item[0].id} stats",
        )
        second = await batch_process(
            [item for item in position_patches if not item[1].is_empty()],
            self.batch_size,
            write,
            self.batch_delay,
            label=lambda item: f"tour card {item[0].id} position",
        )

        updated = {card.id for card, patch in stat_patches + position_patches if not patch.is_empty()}
        failed = first.failed + second.failed
        logger.info(f"Standings for season {season.year}: {len(updated)} cards changed, {failed} failed")

        summary: StandingsSummaryDict = {
            "season_id": season.id,
            "tour_cards": len(cards),
            "tour_cards_updated": len(updated),
            "failed": failed,
        }
        return StageResult.done(
            f"Updated standings for {len(cards)} tour cards",
            **summary,
        )
