"""Season standings for tour cards."""

from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from league_scoring.models import Team, TourCard, TourCardPatch
from league_scoring.models.position import CUT, rank_of
from league_scoring.scoring.positions import competition_ranks
from league_scoring.utils.numeric import round_cents, round_half_up

FINAL_ROUND = 4


def completed_teams(teams: Iterable[Team]) -> List[Team]:
    """Teams from tournaments that have finished every round."""
    return [team for team in teams if (team.round or 0) > FINAL_ROUND]


def card_stats(teams: Sequence[Team]) -> Dict[str, float]:
    """
    Season totals for one tour card.

    Args:
        teams: The card's teams, unfinished tournaments are ignored

    Returns:
        Dict with win, top_ten, made_cut, appearances, earnings and points
    """
    finished = completed_teams(teams)
    ranks = [rank_of(team.position) for team in finished]
    earnings = sum(round_cents(team.earnings or 0) for team in finished)
    points = sum(round_half_up(team.points or 0) for team in finished)
    return {
        "win": sum(1 for rank in ranks if rank == 1),
        "top_ten": sum(1 for rank in ranks if rank is not None and rank <= 10),
        "made_cut": sum(1 for team in finished if team.position != CUT),
        "appearances": len(finished),
        "earnings": round_cents(earnings),
        "points": points,
    }


def season_stats(tour_cards: Sequence[TourCard], teams: Iterable[Team]) -> Dict[str, Dict[str, float]]:
    """Stats for every tour card from one snapshot of teams."""
    by_card: Dict[str, List[Team]] = defaultdict(list)
    for team in teams:
        by_card[team.tour_card_id].append(team)
    return {card.id: card_stats(by_card.get(card.id, [])) for card in tour_cards}


def standings_order(tour_cards: Sequence[TourCard], stats: Dict[str, Dict[str, float]]) -> List[TourCard]:
    """Cards by tour, then points and earnings, best first."""
    return sorted(
        tour_cards,
        key=lambda card: (
            card.tour_id,
            -stats[card.id]["points"],
            -stats[card.id]["earnings"],
            card.id,
        ),
    )


def season_positions(tour_cards: Sequence[TourCard], stats: Dict[str, Dict[str, float]]) -> Dict[str, str]:
    """
    Standings position of every card within its tour.

    Position is one plus the number of cards in the tour with more points.
    Cards level on points share a "T" position whatever their earnings.
    """
    by_tour: Dict[str, Dict[str, float]] = defaultdict(dict)
    for card in standings_order(tour_cards, stats):
        by_tour[card.tour_id][card.id] = stats[card.id]["points"]

    positions: Dict[str, str] = {}
    for points in by_tour.values():
        for card_id, position in competition_ranks(points, descending=True).items():
            positions[card_id] = position.format()
    return positions


def stats_patch(card: TourCard, stats: Dict[str, float]) -> TourCardPatch:
    """Changed stat fields for a card."""
    return TourCardPatch(**{
        name: value for name, value in stats.items()
        if getattr(card, name) != value
    })


def position_patch(card: TourCard, position: str) -> TourCardPatch:
    if card.position == position:
        return TourCardPatch()
    return TourCardPatch(position=position)
