"""
Playoff series scoring.

Playoff events run as one series per division. The first event starts each
team on strokes earned by its regular season finish. Later events start the
team on its score from the event before, which already holds everything
carried into that event, so the series score keeps adding up.
"""

from typing import Dict, List, Optional, Sequence

from league_scoring.models import Team, TourCard
from league_scoring.scoring.positions import split_award
from league_scoring.utils.numeric import round_one

GOLD = 1
SILVER = 2
FINAL_EVENT = 3
# Payout table entries reserved for each division in the final event
DIVISION_SLOTS = 75
# Golfers counted in every round of the later events
EVENT_COUNTING = {2: 5, 3: 3}


def event_counting(event: int) -> Optional[int]:
    """Golfers counted per round in a playoff event, None to use the regular rule."""
    if event <= 1:
        return None
    return EVENT_COUNTING[min(event, FINAL_EVENT)]


def starting_strokes(card: TourCard, cards: Sequence[TourCard], table: Sequence[float]) -> float:
    """
    Strokes a team starts the first playoff event on.

    Cards are placed by season points within their division. Tied cards
    share the average of the table entries their band covers.
    """
    if not card.playoff:
        return 0.0
    division = [c for c in cards if c.playoff == card.playoff]
    better = sum(1 for c in division if c.points > card.points)
    tied = sum(1 for c in division if c.points == card.points)
    return round_one(split_award(table, better + 1, tied))


def carried_scores(earlier_events: Sequence[Sequence[Team]]) -> Dict[str, float]:
    """
    Tour card id to the score carried into the next playoff event.

    Args:
        earlier_events: Teams of each earlier playoff event, in series order

    Returns:
        The latest score each tour card posted, rounded to one decimal
    """
    carried: Dict[str, float] = {}
    for teams in earlier_events:
        for team in teams:
            if team.score is not None:
                carried[team.tour_card_id] = round_one(team.score)
    return carried


def division_payouts(table: Sequence[float], division: int) -> List[float]:
    """Part of the payout table a division is paid from in the final event."""
    if division not in (GOLD, SILVER):
        return []
    start = (division - 1) * DIVISION_SLOTS
    return list(table[start:start + DIVISION_SLOTS])


def series_team(team: Team, tournament_id: str) -> Team:
    """Copy of a first playoff event lineup, reset for a later event."""
    return Team(
        id=f"{tournament_id}_{team.tour_card_id}",
        tournament_id=tournament_id,
        tour_card_id=team.tour_card_id,
        golfer_ids=list(team.golfer_ids),
        round=1,
    )
