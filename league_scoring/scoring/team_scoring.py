"""
Team scoring.

A team's round is the average of its golfers: all ten count in rounds one
and two, the best five still in contention count in rounds three and four.
A team left with fewer than five contenders after the cut is itself cut.
Playoff events count fewer golfers later in the series and add the score
each team carries in.

Scoring runs in two passes. ``score_team`` works on one team at a time,
``rank_teams`` then needs every team's score to place them within a tour
or playoff division.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from league_scoring import config
from league_scoring.models import Golfer, Team, TeamPatch, Tier
from league_scoring.models.position import CUT
from league_scoring.models.team import TEAM_ROUND_FIELDS, TEAM_TEE_TIME_FIELDS
from league_scoring.scoring.playoffs import FINAL_EVENT, division_payouts, event_counting
from league_scoring.scoring.positions import competition_ranks, split_award
from league_scoring.utils.numeric import differential, mean, round_cents, round_half_up, round_one
from league_scoring.utils.timeutil import parse_tee_time, tee_time_passed

COUNTING_GOLFERS = 5
# Tee time slot used per round, rounds 3-4 go off with the sixth golfer
TEE_TIME_SLOT = {1: 0, 2: 0, 3: 5, 4: 5}


@dataclass
class TeamContext:
    """Tournament state shared by every team in one update cycle."""

    par: int
    current_round: int
    live_play: bool
    now: datetime
    # Position in the playoff series, 0 for a regular event
    playoff_event: int = 0

    def counting(self, number: int) -> Optional[int]:
        """Golfers counted for a round, None when the whole team counts."""
        playoff = event_counting(self.playoff_event)
        if playoff is not None:
            return playoff
        return None if number <= 2 else COUNTING_GOLFERS

    @property
    def live(self) -> bool:
        return self.live_play and self.current_round <= 4

    @property
    def finished(self) -> bool:
        return self.current_round >= 5 and not self.live_play


def team_golfers(team: Team, golfers_by_api_id: Mapping[int, Golfer]) -> List[Golfer]:
    """The team's golfers that exist on the tournament, in pick order."""
    return [golfers_by_api_id[api_id] for api_id in team.golfer_ids if api_id in golfers_by_api_id]


def contenders(golfers: Sequence[Golfer], ctx: TeamContext) -> List[Golfer]:
    """Golfers still counting for rounds three and four."""
    pool = [g for g in golfers if not g.is_terminal()]
    if ctx.live:
        pool = [g for g in pool if (g.round or 1) >= ctx.current_round]
    return pool


def _penalty(ctx: TeamContext) -> float:
    return ctx.par + config.PENALTY_STROKES


def best_golfers(golfers: Sequence[Golfer], key, count: int = COUNTING_GOLFERS) -> List[Golfer]:
    """Lowest ``count`` golfers by ``key``, ties broken by DataGolf id."""
    return sorted(golfers, key=lambda g: (key(g), g.api_id))[:count]


def _counted(
    golfers: Sequence[Golfer],
    pool: Sequence[Golfer],
    number: int,
    key,
    ctx: TeamContext,
) -> Sequence[Golfer]:
    count = ctx.counting(number)
    if count is None:
        return golfers
    return best_golfers(golfers if number <= 2 else pool, key, count)


def closed_round(golfers: Sequence[Golfer], pool: Sequence[Golfer], number: int, ctx: TeamContext) -> Optional[float]:
    """Team strokes for a finished round, missing strokes cost par plus the penalty."""
    penalty = _penalty(ctx)

    def strokes(golfer: Golfer) -> float:
        value = golfer.strokes(number)
        return penalty if value is None else value

    return mean(strokes(g) for g in _counted(golfers, pool, number, strokes, ctx))


def live_round(golfers: Sequence[Golfer], pool: Sequence[Golfer], number: int, ctx: TeamContext):
    """
    Team today and thru for the round being played.

    Returns:
        (today, thru), both None without any golfers
    """
    def today(golfer: Golfer) -> float:
        return config.PENALTY_STROKES if golfer.today is None else golfer.today

    counted = _counted(golfers, pool, number, today, ctx)
    return (
        mean(today(g) for g in counted),
        mean((g.thru or 0) for g in counted),
    )


def team_tee_time(golfers: Sequence[Golfer], number: int) -> Optional[str]:
    """Tee time the team goes off with for a round."""
    timed = [
        (parse_tee_time(g.tee_time(number)), g.tee_time(number))
        for g in golfers
        if parse_tee_time(g.tee_time(number)) is not None
    ]
    if not timed:
        return None
    ordered = sorted(timed, key=lambda pair: pair[0])
    slot = min(TEE_TIME_SLOT[number], len(ordered) - 1)
    return ordered[slot][1]


def _tee_times(team: Team, golfers: Sequence[Golfer], ctx: TeamContext) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for number in range(1, min(ctx.current_round, 4) + 1):
        existing = team.tee_time(number)
        if existing is not None and not tee_time_passed(existing, ctx.now):
            continue
        value = team_tee_time(golfers, number)
        if value is not None:
            values[TEAM_TEE_TIME_FIELDS[number - 1]] = value
    return values


def _par_rounds(ctx: TeamContext, carry_over: float) -> Dict[str, Any]:
    """Values for a playoff team without any golfers on the tournament."""
    values: Dict[str, Any] = {}
    for number, name in enumerate(TEAM_ROUND_FIELDS, start=1):
        values[name] = float(ctx.par) if number < ctx.current_round else None
    values.update({"today": 0, "thru": 18, "score": round_one(carry_over)})
    return values


def score_team(
    team: Team,
    golfers_by_api_id: Mapping[int, Golfer],
    ctx: TeamContext,
    carry_over: float = 0.0,
) -> Dict[str, Any]:
    """
    Target round, score, today and thru values for one team.

    Args:
        team: Stored team
        golfers_by_api_id: Tournament golfers keyed by DataGolf id
        ctx: Tournament state
        carry_over: Strokes the team starts a playoff event on

    Returns:
        Field values the team should hold. A cut team also gets its
        position, points and earnings here.
    """
    golfers = team_golfers(team, golfers_by_api_id)
    pool = contenders(golfers, ctx)
    current = ctx.current_round

    values: Dict[str, Any] = {"round": current}
    values.update(_tee_times(team, golfers, ctx))

    if ctx.playoff_event and not golfers:
        values.update(_par_rounds(ctx, carry_over))
        return values

    cut = current >= 3 and len(pool) < ctx.counting(3)

    closed: List[float] = []
    for number, name in enumerate(TEAM_ROUND_FIELDS, start=1):
        if number < current and golfers and not (cut and number >= 3):
            strokes = closed_round(golfers, pool, number, ctx)
            values[name] = round_one(strokes)
            closed.append(differential(strokes, ctx.par))
        else:
            values[name] = None

    if cut:
        values.update({
            "today": None,
            "thru": None,
            "score": None,
            "position": CUT,
            "past_position": CUT,
            "points": 0,
            "earnings": 0,
        })
        return values

    if ctx.live and golfers:
        today, thru = live_round(golfers, pool, current, ctx)
        values["today"] = round_one(today)
        values["thru"] = round_one(thru)
        values["score"] = round_one(carry_over + sum(closed) + today)
    elif closed:
        values["today"] = round_one(closed[-1])
        values["thru"] = 18
        values["score"] = round_one(carry_over + sum(closed))
    else:
        # Playoff teams sit on their carried strokes before a round closes
        start = round_one(carry_over) if ctx.playoff_event else None
        values.update({"today": None, "thru": None, "score": start})

    return values


def rank_teams(
    scored: Mapping[str, Dict[str, Any]],
    bracket_by_team: Mapping[str, Any],
    tier: Optional[Tier],
    ctx: TeamContext,
) -> Dict[str, Dict[str, Any]]:
    """
    Positions, past positions and awards for every team.

    Teams are ranked by score within their bracket: the tour of their tour
    card, or the playoff division during a playoff event. Cut teams and
    teams without a score are left out of the ranking. Points and earnings
    are only handed out once the tournament is finished, split evenly
    across tied teams. Playoff events hand out no points, and only the
    final event pays earnings, each division from its own part of the
    payout table.

    Args:
        scored: Team id to score_team output
        bracket_by_team: Team id to its tour, or playoff division
        tier: Tier holding the points and payout tables
        ctx: Tournament state

    Returns:
        Team id to position fields
    """
    points_table = tier.points if tier else []
    payouts_table = tier.payouts if tier else []

    brackets: Dict[Any, List[str]] = defaultdict(list)
    for team_id in scored:
        brackets[bracket_by_team.get(team_id)].append(team_id)

    results: Dict[str, Dict[str, Any]] = {}
    for bracket, team_ids in brackets.items():
        if ctx.playoff_event:
            points_for = []
            payouts_for = division_payouts(payouts_table, bracket) if ctx.playoff_event >= FINAL_EVENT else []
        else:
            points_for, payouts_for = points_table, payouts_table

        ranked = [
            team_id for team_id in team_ids
            if scored[team_id].get("position") != CUT and scored[team_id].get("score") is not None
        ]
        positions = competition_ranks({t: scored[t]["score"] for t in ranked})
        past = competition_ranks({
            t: round_one(scored[t]["score"] - (scored[t].get("today") or 0)) for t in ranked
        })
        band_sizes = Counter(p.rank for p in positions.values())

        for team_id in team_ids:
            if scored[team_id].get("position") == CUT:
                results[team_id] = {"position": CUT, "past_position": CUT, "points": 0, "earnings": 0}
                continue
            if team_id not in positions:
                results[team_id] = {"position": None, "past_position": None, "points": 0, "earnings": 0}
                continue

            position = positions[team_id]
            points, earnings = 0, 0
            if ctx.finished:
                width = band_sizes[position.rank]
                points = round_half_up(split_award(points_for, position.rank, width))
                earnings = round_cents(split_award(payouts_for, position.rank, width))
            results[team_id] = {
                "position": position.format(),
                "past_position": past[team_id].format(),
                "points": points,
                "earnings": earnings,
            }
    return results


def diff_team(team: Team, values: Mapping[str, Any]) -> TeamPatch:
    """Patch holding only the values that differ from the stored team."""
    return TeamPatch(**{
        name: value for name, value in values.items()
        if getattr(team, name) != value
    })
