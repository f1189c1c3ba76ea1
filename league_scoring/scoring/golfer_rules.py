"""
Golfer update rules.

Each rule looks at a stored golfer and the provider rows for it and returns
a fragment holding only the fields that should change. ``build_golfer_patch``
merges the fragments into a GolferPatch. Feeding the same provider data
twice therefore yields an empty patch the second time.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from league_scoring import config
from league_scoring.models import (
    FieldGolfer,
    Golfer,
    GolferPatch,
    LiveGolfer,
    Team,
    Tournament,
    TournamentPatch,
)
from league_scoring.models.golfer import ROUND_FIELDS, TEE_TIME_FIELDS
from league_scoring.models.position import CUT, DQ, WD, Position, is_terminal
from league_scoring.utils.timeutil import tee_time_passed

Fragment = Dict[str, object]

# Positions that carry no score yet
NOT_STARTED = "--"
FINISHED_ROUND = 5


@dataclass
class GolferContext:
    """Tournament-wide inputs shared by every golfer in one update cycle."""

    par: int
    current_round: int
    live_play: bool
    now: datetime
    usage: Dict[int, float] = field(default_factory=dict)
    team_count: int = 0
    golfers: Sequence[Golfer] = ()


def _status(live: Optional[LiveGolfer]) -> Optional[str]:
    if live is None or live.current_pos is None:
        return None
    return live.current_pos.strip().upper()


def _withdrawn(status: Optional[str]) -> bool:
    return status in (WD, DQ)


def is_live(live: Optional[LiveGolfer]) -> bool:
    """Check if a golfer is on the course right now."""
    return live is not None and live.thru is not None and 0 < live.thru < 18


# =============================================================================
# RULES
# =============================================================================

def tee_times(golfer: Golfer, entrant: Optional[FieldGolfer]) -> Fragment:
    """Tee times from the field feed, only for rounds without one yet."""
    if entrant is None:
        return {}
    changes: Fragment = {}
    for number, name in enumerate(TEE_TIME_FIELDS, start=1):
        value = entrant.tee_time(number)
        if value and getattr(golfer, name) is None:
            changes[name] = value
    return changes


def round_strokes(
    golfer: Golfer,
    live: Optional[LiveGolfer],
    ctx: GolferContext,
    known_tee_times: Fragment,
) -> Fragment:
    """
    Per-round strokes.

    Live strokes win. Without them a round that is over (tournament moved
    past it, or the golfer withdrew) and whose tee time has passed is
    charged ``par + PENALTY_STROKES``.
    """
    status = _status(live)
    penalty = ctx.par + config.PENALTY_STROKES
    changes: Fragment = {}

    for number, name in enumerate(ROUND_FIELDS, start=1):
        stored = getattr(golfer, name)
        live_value = live.strokes(number) if live is not None else None

        if live_value is not None:
            if live_value != stored:
                changes[name] = live_value
            continue

        if stored is not None:
            continue
        if status == CUT and number >= 3:
            continue

        tee_time = known_tee_times.get(TEE_TIME_FIELDS[number - 1]) or golfer.tee_time(number)
        closed = ctx.current_round > number or _withdrawn(status)
        if closed and tee_time_passed(tee_time, ctx.now):
            changes[name] = penalty

    return changes


def status_flags(golfer: Golfer, live: Optional[LiveGolfer]) -> Fragment:
    """Mirror the provider's probabilities, position and extras."""
    if live is None:
        return {}
    changes: Fragment = {}
    if live.current_pos and live.current_pos != golfer.position:
        changes["position"] = live.current_pos
    if live.top_10 is not None and live.top_10 != golfer.top_ten:
        changes["top_ten"] = live.top_10
    if live.make_cut is not None and live.make_cut != golfer.make_cut:
        changes["make_cut"] = live.make_cut
    if live.win is not None and live.win != golfer.win:
        changes["win"] = live.win
    if live.country and golfer.country is None:
        changes["country"] = live.country
    if live.end_hole is not None and live.end_hole != golfer.end_hole:
        changes["end_hole"] = live.end_hole
    return changes


def score(golfer: Golfer, live: Optional[LiveGolfer]) -> Fragment:
    """Score to par, frozen once a golfer withdraws or is disqualified."""
    status = _status(live)
    if live is None or live.current_score is None:
        return {}
    if status is None or status == NOT_STARTED or _withdrawn(status):
        return {}
    if live.current_score != golfer.score:
        return {"score": live.current_score}
    return {}


def today_thru(golfer: Golfer, live: Optional[LiveGolfer], ctx: GolferContext) -> Fragment:
    """Today's score and holes played."""
    if live is None:
        return {}
    status = _status(live)

    if _withdrawn(status):
        today, thru = config.PENALTY_STROKES, 18
    elif status == CUT and ctx.current_round >= 3:
        today, thru = None, None
    else:
        today, thru = live.today, live.thru

    changes: Fragment = {}
    if today != golfer.today:
        changes["today"] = today
    if thru != golfer.thru:
        changes["thru"] = thru
    return changes


def previous_round_rank(golfer: Golfer, golfers: Iterable[Golfer]) -> Optional[int]:
    """Rank by total strokes through the round before the golfer's current one."""
    current = golfer.round or 1
    if current <= 1:
        return None
    through = min(current - 1, 4)
    own = golfer.total_through(through)
    if own is None:
        return None
    better = 0
    for other in golfers:
        total = other.total_through(through)
        if total is not None and total < own:
            better += 1
    return better + 1


def position_change(golfer: Golfer, live: Optional[LiveGolfer], golfers: Sequence[Golfer]) -> Fragment:
    """Places gained since the previous round, positive means moving up."""
    if live is None or not live.current_pos or live.current_pos == golfer.position:
        return {}
    current = Position.parse(live.current_pos)
    previous = previous_round_rank(golfer, golfers)
    if current is None or previous is None:
        return {}
    change = previous - current.rank
    if change != golfer.pos_change:
        return {"pos_change": change}
    return {}


def usage(golfer: Golfer, ctx: GolferContext) -> Fragment:
    """
    Share of teams rostering the golfer, set during round one of live play.

    Golfers nobody picked get 0 once the tournament has teams.
    """
    if ctx.current_round != 1 or not ctx.live_play or not ctx.team_count:
        return {}
    value = ctx.usage.get(golfer.api_id, 0.0)
    if value != golfer.usage:
        return {"usage": value}
    return {}


def round_pointer(golfer: Golfer, pending: Fragment) -> Fragment:
    """
    Round the golfer is playing.

    The first round without strokes, 5 once all four are in. Cut, withdrawn
    and disqualified golfers stay on the last round they completed.
    """
    strokes = [pending.get(name, getattr(golfer, name)) for name in ROUND_FIELDS]
    started = any(value is not None for value in strokes) or any(
        pending.get(name, getattr(golfer, name)) for name in TEE_TIME_FIELDS
    )
    if not started:
        return {}

    first_missing = next(
        (number for number, value in enumerate(strokes, start=1) if value is None),
        FINISHED_ROUND,
    )
    position = pending.get("position", golfer.position)
    value = max(1, first_missing - 1) if is_terminal(position) else first_missing
    if value != golfer.round:
        return {"round": value}
    return {}


def build_golfer_patch(
    golfer: Golfer,
    live: Optional[LiveGolfer],
    entrant: Optional[FieldGolfer],
    ctx: GolferContext,
) -> GolferPatch:
    """
    Combine every rule into one patch for a golfer.

    Args:
        golfer: Stored golfer
        live: Matching in-play row, None when the golfer is not in the live feed
        entrant: Matching field row
        ctx: Tournament-wide context

    Returns:
        GolferPatch holding only changed fields
    """
    teed = tee_times(golfer, entrant)
    fragments = [
        teed,
        round_strokes(golfer, live, ctx, teed),
        status_flags(golfer, live),
        score(golfer, live),
        today_thru(golfer, live, ctx),
        position_change(golfer, live, ctx.golfers),
        usage(golfer, ctx),
    ]
    pending: Fragment = {}
    for fragment in fragments:
        pending = {**pending, **fragment}
    return GolferPatch.from_fragments(*fragments, round_pointer(golfer, pending))


# =============================================================================
# TOURNAMENT LEVEL
# =============================================================================

def usage_by_golfer(teams: Sequence[Team]) -> Dict[int, float]:
    """Fraction of teams that roster each golfer."""
    if not teams:
        return {}
    counts = Counter(api_id for team in teams for api_id in team.golfer_ids)
    return {api_id: count / len(teams) for api_id, count in counts.items()}


def tournament_round(golfers: Sequence[Golfer], fallback: Optional[int]) -> int:
    """
    Lowest round still being played by a golfer who is not cut or out.

    Returns 5 once every active golfer has four rounds, and ``fallback``
    (or 1) when no active golfer is on file.
    """
    active = [g for g in golfers if not g.is_terminal()]
    if not active:
        return fallback or 1
    return min(g.round or 1 for g in active)


def build_tournament_patch(
    tournament: Tournament,
    golfers: Sequence[Golfer],
    live_count: int,
) -> TournamentPatch:
    """Current round and live flag after a golfer update."""
    changes: Fragment = {}
    current_round = tournament_round(golfers, tournament.current_round)
    live_play = live_count > 0
    if current_round != tournament.current_round:
        changes["current_round"] = current_round
    if live_play != tournament.live_play:
        changes["live_play"] = live_play
    return TournamentPatch(**changes)


def apply_patch(golfer: Golfer, patch: GolferPatch) -> Golfer:
    """Golfer as it will be stored once the patch is written."""
    return golfer.model_copy(update=patch.changes())


def missing_entrants(field: Iterable[FieldGolfer], golfers: Iterable[Golfer]) -> List[FieldGolfer]:
    """Field entrants with no golfer row yet."""
    known = {g.api_id for g in golfers}
    return [entrant for entrant in field if entrant.dg_id not in known]
