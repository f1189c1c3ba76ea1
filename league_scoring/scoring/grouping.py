"""
Skill group assignment.

Splits a tournament field into five groups by descending DataGolf skill
estimate so every team drafts from comparable pools.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from league_scoring import config
from league_scoring.models import FieldGolfer, Golfer, RankingEntry, Tournament
from league_scoring.utils.numeric import round_half_up

# (share of field, hard cap) for groups 1-4, group 5 takes the rest
GROUP_LIMITS = (
    (0.10, 10),
    (0.175, 16),
    (0.225, 22),
    (0.25, 30),
)
GROUP_COUNT = 5

# Sort position for golfers missing from the rankings feed
SKILL_FLOOR = -50.0
# Skill assumed when computing a rating without ranking data
DEFAULT_SKILL = -1.875

OVERFLOW_ALTERNATE = "alternate"
OVERFLOW_LAST = "last"

RankedEntrant = Tuple[FieldGolfer, Optional[RankingEntry]]


def display_name(player_name: str) -> str:
    """Convert the provider's "Last, First" to "First Last"."""
    if ", " not in player_name:
        return player_name.strip()
    last, first = player_name.split(", ", 1)
    return f"{first.strip()} {last.strip()}"


def rating_for(ranking: Optional[RankingEntry]) -> float:
    """Rating derived from the skill estimate."""
    skill = DEFAULT_SKILL
    if ranking is not None and ranking.dg_skill_estimate is not None:
        skill = ranking.dg_skill_estimate
    return round_half_up((skill + 2) / 0.0004) / 100


def world_rank_for(ranking: Optional[RankingEntry]) -> int:
    if ranking is not None and ranking.owgr_rank:
        return ranking.owgr_rank
    return config.DEFAULT_WORLD_RANK


def rank_field(
    field: Iterable[FieldGolfer],
    rankings: Iterable[RankingEntry],
    excluded: Optional[Set[int]] = None,
) -> List[RankedEntrant]:
    """
    Pair each entrant with its ranking row and sort best first.

    Args:
        field: Entrants from the field feed
        rankings: Rows from the skill rankings feed
        excluded: DataGolf ids to leave out

    Returns:
        New list of (entrant, ranking) pairs, highest skill first. Unranked
        entrants sort last and ties keep a stable order by DataGolf id.
    """
    excluded = excluded if excluded is not None else set(config.EXCLUDED_GOLFER_IDS)
    by_id: Dict[int, RankingEntry] = {r.dg_id: r for r in rankings}

    entrants = [
        (golfer, by_id.get(golfer.dg_id))
        for golfer in field
        if golfer.dg_id not in excluded
    ]

    def sort_key(entrant: RankedEntrant):
        golfer, ranking = entrant
        skill = SKILL_FLOOR
        if ranking is not None and ranking.dg_skill_estimate is not None:
            skill = ranking.dg_skill_estimate
        return (-skill, golfer.dg_id)

    return sorted(entrants, key=sort_key)


def _group_index(index: int, total: int, groups: List[list], policy: str) -> int:
    """Pick the 0-based group for the golfer at ``index`` of the ranked field."""
    for group_index, (share, cap) in enumerate(GROUP_LIMITS):
        size = len(groups[group_index])
        if size < total * share and size < cap:
            return group_index

    remaining = total - index
    fourth, fifth = groups[3], groups[4]
    if remaining <= len(fourth) + len(fifth) * 0.5 or remaining == 1:
        return 4
    if policy == OVERFLOW_LAST:
        return 4

    # Odd positions go to group 4 while it is under its hard cap
    if index % 2 and len(fourth) < GROUP_LIMITS[3][1]:
        return 3
    return 4


def assign_groups(
    ranked: Sequence[RankedEntrant],
    policy: Optional[str] = None,
) -> List[List[RankedEntrant]]:
    """
    Split a ranked field into five groups.

    Groups 1-4 fill in order up to their share of the field and hard cap.
    The rest land in group 5, except that with the "alternate" policy
    overflow golfers at odd positions are handed to group 4 until the
    remaining field is small relative to groups 4 and 5.

    Args:
        ranked: Output of rank_field
        policy: "alternate" or "last" (defaults to GROUP_OVERFLOW_POLICY)

    Returns:
        Five lists, index 0 is group 1
    """
    policy = (policy or config.GROUP_OVERFLOW_POLICY).lower()
    groups: List[List[RankedEntrant]] = [[] for _ in range(GROUP_COUNT)]
    total = len(ranked)
    for index, entrant in enumerate(ranked):
        groups[_group_index(index, total, groups, policy)].append(entrant)
    return groups


def new_golfer(
    entrant: FieldGolfer,
    ranking: Optional[RankingEntry],
    tournament_id: str,
    group: int,
) -> Golfer:
    """Golfer record for an entrant, group 0 marks a late addition."""
    return Golfer(
        api_id=entrant.dg_id,
        player_name=display_name(entrant.player_name),
        tournament_id=tournament_id,
        group=group,
        world_rank=world_rank_for(ranking),
        rating=rating_for(ranking),
        country=entrant.country or (ranking.country if ranking else None),
    )


# =============================================================================
# PLAYOFFS
# =============================================================================

def playoff_event_index(
    tournament: Tournament,
    season_tournaments: Sequence[Tournament],
    playoff_tier_ids: Set[str],
) -> int:
    """
    1-based position of a playoff tournament in its series.

    Only playoff events that share a tour with ``tournament`` count.
    Returns 0 when ``tournament`` is not a playoff event.
    """
    if tournament.tier_id not in playoff_tier_ids:
        return 0
    events = playoff_events(tournament, season_tournaments, playoff_tier_ids)
    for position, event in enumerate(events, start=1):
        if event.id == tournament.id:
            return position
    return len([e for e in events if e.start_date < tournament.start_date]) + 1


def first_playoff_event(
    tournament: Tournament,
    season_tournaments: Sequence[Tournament],
    playoff_tier_ids: Set[str],
) -> Optional[Tournament]:
    """The season's first playoff event sharing a tour with ``tournament``."""
    events = playoff_events(tournament, season_tournaments, playoff_tier_ids)
    return events[0] if events else None


def playoff_events(
    tournament: Tournament,
    season_tournaments: Sequence[Tournament],
    playoff_tier_ids: Set[str],
) -> List[Tournament]:
    """Playoff events sharing a tour with ``tournament``, in series order."""
    events = [
        t for t in season_tournaments
        if t.tier_id in playoff_tier_ids
        and (t.id == tournament.id or not tournament.tour_ids or t.shares_tour_with(tournament))
    ]
    return sorted(events, key=lambda t: (t.start_date, t.id))


def copy_roster(source: Iterable[Golfer], tournament_id: str) -> List[Golfer]:
    """Copy identity and group fields of a roster onto another tournament."""
    return [
        Golfer(
            api_id=golfer.api_id,
            player_name=golfer.player_name,
            tournament_id=tournament_id,
            group=golfer.group,
            world_rank=golfer.world_rank,
            rating=golfer.rating,
            country=golfer.country,
        )
        for golfer in source
    ]
