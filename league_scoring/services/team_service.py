"""Team Update stage: scores and ranks every team of a tournament."""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from league_scoring import config
from league_scoring.models import Team, Tier, TourCard, Tournament
from league_scoring.scoring.grouping import playoff_event_index, playoff_events
from league_scoring.scoring.playoffs import carried_scores, starting_strokes
from league_scoring.scoring.team_scoring import TeamContext, diff_team, rank_teams, score_team
from league_scoring.services.playoff_service import playoff_tier_ids
from league_scoring.services.stage import StageResult
from league_scoring.storage import DatabaseInterface
from league_scoring.types import TeamSummaryDict
from league_scoring.utils.batch import BatchReport, batch_process
from league_scoring.utils.timeutil import utcnow

logger = logging.getLogger(__name__)

DEFAULT_PAR = 72


class TeamService:
    """Recomputes team rounds, scores, positions and awards."""

    def __init__(
        self,
        store: DatabaseInterface,
        batch_size: Optional[int] = None,
        batch_delay: Optional[float] = None,
    ):
        self.store = store
        self.batch_size = batch_size or config.BATCH_SIZE
        self.batch_delay = config.BATCH_DELAY_SECONDS if batch_delay is None else batch_delay

    async def update_teams(
        self,
        tournament_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> StageResult:
        """
        Update every team of a tournament.

        Args:
            tournament_id: Tournament to update, defaults to the active one
            now: Reference time, defaults to the current time

        Returns:
            StageResult
        """
        now = now or utcnow()
        if tournament_id:
            tournament = await asyncio.to_thread(self.store.get_tournament, tournament_id)
            if tournament is None:
                return StageResult.nothing_to_do(f"Tournament {tournament_id} not found")
        else:
            tournament = await asyncio.to_thread(self.store.get_tournament_by_state, "active", now)
            if tournament is None:
                return StageResult.nothing_to_do("No active tournament found")

        course = await asyncio.to_thread(self.store.get_course, tournament.course_id)
        tier = await asyncio.to_thread(self.store.get_tier, tournament.tier_id)
        golfers = await asyncio.to_thread(self.store.get_golfers_by_tournament, tournament.id)
        teams = await asyncio.to_thread(self.store.get_teams_by_tournament, tournament.id)
        if not teams:
            return StageResult.nothing_to_do(f"No teams found for {tournament.name}", tournament_id=tournament.id)

        cards = await asyncio.to_thread(self.store.get_tour_cards_by_season, tournament.season_id)
        card_by_id = {card.id: card for card in cards}
        season = await asyncio.to_thread(self.store.get_tournaments_by_season, tournament.season_id)
        playoff_tiers = await playoff_tier_ids(self.store, season)
        playoff_event = playoff_event_index(tournament, season, playoff_tiers)

        if playoff_event:
            # Playoff teams are ranked within their division
            bracket_by_team = {
                team.id: card_by_id[team.tour_card_id].playoff if team.tour_card_id in card_by_id else 0
                for team in teams
            }
            earlier = playoff_events(tournament, season, playoff_tiers)[:playoff_event - 1]
            carry_over = await self._carry_over(teams, cards, tier, earlier)
        else:
            bracket_by_team = {
                team.id: card_by_id[team.tour_card_id].tour_id if team.tour_card_id in card_by_id else None
                for team in teams
            }
            carry_over = {}

        ctx = TeamContext(
            par=course.par if course else DEFAULT_PAR,
            current_round=tournament.current_round or 1,
            live_play=tournament.live_play,
            now=now,
            playoff_event=playoff_event,
        )
        golfers_by_api_id = {g.api_id: g for g in golfers}

        # Pass 1: rounds and scores
        scored: Dict[str, Dict[str, Any]] = {
            team.id: score_team(team, golfers_by_api_id, ctx, carry_over.get(team.id, 0.0))
            for team in teams
        }
        scored_teams = [team.model_copy(update=scored[team.id]) for team in teams]
        first = await self._write(teams, scored, "score")

        # Pass 2: positions and awards over every team's new score
        ranked = rank_teams(scored, bracket_by_team, tier, ctx)
        second = await self._write(scored_teams, ranked, "position")

        summary: TeamSummaryDict = {
            "tournament_id": tournament.id,
            "teams": len(teams),
            "teams_updated": first.processed,
            "positions_updated": second.processed,
            "failed": first.failed + second.failed,
            "current_round": ctx.current_round,
            "live_play": ctx.live_play,
            "playoff_event": playoff_event,
        }
        return StageResult.done(
            f"Updated {first.processed} teams for {tournament.name}",
            **summary,
        )

    async def _carry_over(
        self,
        teams: List[Team],
        cards: List[TourCard],
        tier: Optional[Tier],
        earlier: Sequence[Tournament],
    ) -> Dict[str, float]:
        """
        Strokes each team starts a playoff event on.

        The first event hands out starting strokes from the tier's table
        by season points. Later events carry the score from the event
        before.
        """
        if not earlier:
            card_by_id = {card.id: card for card in cards}
            table = tier.points if tier else []
            return {
                team.id: starting_strokes(card_by_id[team.tour_card_id], cards, table)
                for team in teams
                if team.tour_card_id in card_by_id
            }

        earlier_teams = [
            await asyncio.to_thread(self.store.get_teams_by_tournament, event.id)
            for event in earlier
        ]
        by_card = carried_scores(earlier_teams)
        logger.debug(f"Carrying playoff scores for {len(by_card)} tour cards")
        return {team.id: by_card.get(team.tour_card_id, 0.0) for team in teams}

    async def _write(
        self,
        teams: List[Team],
        values: Dict[str, Dict[str, Any]],
        kind: str,
    ) -> BatchReport:
        """Write the changed part of ``values`` for each team."""
        patches = [(team, diff_team(team, values.get(team.id, {}))) for team in teams]
        pending = [(team, patch) for team, patch in patches if not patch.is_empty()]

        async def write(item) -> None:
            team, patch = item
            await asyncio.to_thread(self.store.update_team, team.id, patch.changes())

        report = await batch_process(
            pending,
            self.batch_size,
            write,
            self.batch_delay,
            label=lambda item: f"team {item[0].id} {kind}",
        )
        logger.debug(f"{kind} pass: {report.processed} written, {report.failed} failed")
        return report
