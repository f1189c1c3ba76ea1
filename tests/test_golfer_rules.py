"""Tests for golfer update rules."""

import pytest
from datetime import datetime, timezone

from league_scoring.models import FieldGolfer, LiveGolfer, Team, Tournament
from league_scoring.scoring.golfer_rules import (
    GolferContext,
    apply_patch,
    build_golfer_patch,
    build_tournament_patch,
    is_live,
    missing_entrants,
    round_pointer,
    round_strokes,
    tee_times,
    today_thru,
    tournament_round,
    usage_by_golfer,
)

from conftest import make_golfer, make_team

NOW = datetime(2025, 4, 12, 20, 0, tzinfo=timezone.utc)


def ctx(current_round=1, live_play=True, **kwargs):
    return GolferContext(par=72, current_round=current_round, live_play=live_play, now=NOW, **kwargs)


class TestTeeTimes:
    """Tests for tee time rule."""

    def test_sets_missing_tee_times(self):
        golfer = make_golfer(1)
        entrant = FieldGolfer(dg_id=1, r1_teetime="2025-04-10 12:00", r2_teetime="")
        assert tee_times(golfer, entrant) == {"round_one_tee_time": "2025-04-10 12:00"}

    def test_keeps_existing_tee_time(self):
        golfer = make_golfer(1, round_one_tee_time="2025-04-10 11:00")
        entrant = FieldGolfer(dg_id=1, r1_teetime="2025-04-10 12:00")
        assert tee_times(golfer, entrant) == {}


class TestRoundStrokes:
    """Tests for per-round strokes."""

    def test_live_strokes_written(self):
        golfer = make_golfer(1)
        live = LiveGolfer(dg_id=1, current_pos="T4", R1=68, R2=70)
        assert round_strokes(golfer, live, ctx(3), {}) == {"round_one": 68, "round_two": 70}

    def test_unchanged_strokes_skipped(self):
        golfer = make_golfer(1, round_one=68)
        live = LiveGolfer(dg_id=1, current_pos="T4", R1=68)
        assert round_strokes(golfer, live, ctx(2), {}) == {}

    def test_missing_closed_round_penalised(self):
        """A round the tournament moved past with no strokes costs par plus eight."""
        golfer = make_golfer(1, round_one_tee_time="2025-04-10 12:00")
        live = LiveGolfer(dg_id=1, current_pos="T40")
        assert round_strokes(golfer, live, ctx(2), {}) == {"round_one": 80}

    def test_open_round_not_penalised(self):
        golfer = make_golfer(1, round_one_tee_time="2025-04-10 12:00")
        live = LiveGolfer(dg_id=1, current_pos="T40")
        assert round_strokes(golfer, live, ctx(1), {}) == {}

    def test_future_tee_time_not_penalised(self):
        golfer = make_golfer(1, round_one_tee_time="2025-04-20 12:00")
        assert round_strokes(golfer, LiveGolfer(dg_id=1, current_pos="T40"), ctx(2), {}) == {}

    def test_withdrawn_golfer_penalised_in_current_round(self):
        golfer = make_golfer(
            1,
            round_one=70,
            round_two=71,
            round_three_tee_time="2025-04-12 14:00",
        )
        live = LiveGolfer(dg_id=1, current_pos="WD", R1=70, R2=71)
        assert round_strokes(golfer, live, ctx(3), {}) == {"round_three": 80}

    def test_cut_golfer_not_charged_weekend(self):
        golfer = make_golfer(1, round_one=75, round_two=76, round_three_tee_time="2025-04-12 14:00")
        live = LiveGolfer(dg_id=1, current_pos="CUT", R1=75, R2=76)
        assert round_strokes(golfer, live, ctx(4), {}) == {}


class TestTodayThru:
    """Tests for today and thru."""

    def test_mirrors_live_values(self):
        live = LiveGolfer(dg_id=1, current_pos="3", today=-2, thru=9)
        assert today_thru(make_golfer(1), live, ctx()) == {"today": -2, "thru": 9}

    def test_withdrawn_reports_penalty(self):
        live = LiveGolfer(dg_id=1, current_pos="WD", today=1, thru=4)
        assert today_thru(make_golfer(1), live, ctx(3)) == {"today": 8, "thru": 18}

    def test_cut_clears_weekend(self):
        golfer = make_golfer(1, today=3, thru=18)
        live = LiveGolfer(dg_id=1, current_pos="CUT", today=3, thru=18)
        assert today_thru(golfer, live, ctx(3)) == {"today": None, "thru": None}


class TestRoundPointer:
    """Tests for the golfer's current round."""

    def test_first_missing_round(self):
        golfer = make_golfer(1, round_one=70)
        assert round_pointer(golfer, {}) == {"round": 2}

    def test_all_rounds_done(self):
        golfer = make_golfer(1, round_one=70, round_two=70, round_three=70, round_four=70, round=4)
        assert round_pointer(golfer, {}) == {"round": 5}

    def test_cut_stays_on_last_completed_round(self):
        golfer = make_golfer(1, round_one=75, round_two=76, position="CUT")
        assert round_pointer(golfer, {}) == {"round": 2}

    def test_not_started(self):
        assert round_pointer(make_golfer(1), {}) == {}

    def test_pending_tee_time_starts_golfer(self):
        assert round_pointer(make_golfer(1), {"round_one_tee_time": "2025-04-10 12:00"}) == {"round": 1}


class TestBuildGolferPatch:
    """Tests for the combined patch."""

    def test_full_update(self):
        golfer = make_golfer(1, id=10, round_one_tee_time="2025-04-10 12:00")
        live = LiveGolfer(
            dg_id=1,
            current_pos="T2",
            current_score=-4,
            today=-2,
            thru="F",
            R1=70,
            top_10=0.6,
            make_cut=0.99,
            win=0.1,
        )
        patch = build_golfer_patch(golfer, live, None, ctx(2, golfers=[golfer]))
        changes = patch.changes()
        assert changes["round_one"] == 70
        assert changes["position"] == "T2"
        assert changes["score"] == -4
        assert changes["thru"] == 18
        assert changes["round"] == 2
        assert changes["top_ten"] == 0.6

    def test_idempotent(self):
        """Applying the same data twice yields an empty second patch."""
        golfer = make_golfer(1, id=10)
        entrant = FieldGolfer(dg_id=1, r1_teetime="2025-04-10 12:00")
        live = LiveGolfer(dg_id=1, current_pos="5", current_score=-1, today=-1, thru=12, R1=None)
        context = ctx(1, golfers=[golfer])

        first = build_golfer_patch(golfer, live, entrant, context)
        assert not first.is_empty()
        updated = apply_patch(golfer, first)
        second = build_golfer_patch(updated, live, entrant, context)
        assert second.is_empty()

    def test_withdrawn_score_frozen(self):
        """A WD golfer keeps the last score, reports 8 today and 18 thru."""
        golfer = make_golfer(1, id=10, round_one=70, round_two=71, score=-3, position="T20", round=3)
        live = LiveGolfer(dg_id=1, current_pos="WD", current_score=5, today=2, thru=7, R1=70, R2=71)
        changes = build_golfer_patch(golfer, live, None, ctx(3, golfers=[golfer])).changes()
        assert "score" not in changes
        assert changes["today"] == 8
        assert changes["thru"] == 18
        assert changes["position"] == "WD"

    def test_not_started_has_no_score(self):
        live = LiveGolfer(dg_id=1, current_pos="--", current_score=0)
        changes = build_golfer_patch(make_golfer(1), live, None, ctx()).changes()
        assert "score" not in changes

    def test_usage_set_in_round_one(self):
        golfer = make_golfer(1)
        patch = build_golfer_patch(golfer, None, None, ctx(1, usage={1: 0.25}, team_count=4))
        assert patch.changes() == {"usage": 0.25}

    def test_unpicked_golfer_gets_zero_usage(self):
        """A golfer on no team gets 0 once the tournament has teams."""
        teams = [make_team("team_1", [1])]
        context = ctx(1, usage=usage_by_golfer(teams), team_count=len(teams))
        patch = build_golfer_patch(make_golfer(2), None, None, context)
        assert patch.changes() == {"usage": 0.0}

    def test_no_usage_without_teams(self):
        patch = build_golfer_patch(make_golfer(2), None, None, ctx(1))
        assert patch.is_empty()

    def test_usage_ignored_later(self):
        golfer = make_golfer(1)
        patch = build_golfer_patch(golfer, None, None, ctx(2, usage={1: 0.25}))
        assert patch.is_empty()

    def test_position_change(self):
        """Places gained against the rank after the previous round."""
        leader = make_golfer(1, round_one=66, round=2)
        chaser = make_golfer(2, round_one=70, round=2, position="T30")
        third = make_golfer(3, round_one=68, round=2)
        live = LiveGolfer(dg_id=2, current_pos="1", R1=70)
        changes = build_golfer_patch(chaser, live, None, ctx(2, golfers=[leader, chaser, third])).changes()
        assert changes["pos_change"] == 2


class TestTournamentLevel:
    """Tests for tournament round and live flag."""

    @pytest.fixture
    def tournament(self):
        return Tournament(
            id="t",
            name="T",
            start_date=datetime(2025, 4, 10, tzinfo=timezone.utc),
            end_date=datetime(2025, 4, 13, tzinfo=timezone.utc),
            season_id="s",
            tier_id="tier",
            course_id="c",
            current_round=2,
            live_play=False,
        )

    def test_is_live(self):
        assert is_live(LiveGolfer(dg_id=1, thru=9))
        assert not is_live(LiveGolfer(dg_id=1, thru="F"))
        assert not is_live(LiveGolfer(dg_id=1, thru=0))
        assert not is_live(None)

    def test_round_ignores_terminal_golfers(self):
        golfers = [
            make_golfer(1, round=3),
            make_golfer(2, round=2, position="CUT"),
            make_golfer(3, round=4),
        ]
        assert tournament_round(golfers, 1) == 3

    def test_round_fallback(self):
        assert tournament_round([make_golfer(1, position="WD", round=1)], 2) == 2
        assert tournament_round([], None) == 1

    def test_tournament_patch(self, tournament):
        golfers = [make_golfer(1, round=3), make_golfer(2, round=3)]
        patch = build_tournament_patch(tournament, golfers, live_count=1)
        assert patch.changes() == {"current_round": 3, "live_play": True}

    def test_tournament_patch_unchanged(self, tournament):
        golfers = [make_golfer(1, round=2)]
        assert build_tournament_patch(tournament, golfers, live_count=0).is_empty()

    def test_usage_by_golfer(self):
        teams = [
            Team(id="a", tournament_id="t", tour_card_id="x", golfer_ids=[1, 2]),
            Team(id="b", tournament_id="t", tour_card_id="y", golfer_ids=[1, 3]),
        ]
        assert usage_by_golfer(teams) == {1: 1.0, 2: 0.5, 3: 0.5}
        assert usage_by_golfer([]) == {}

    def test_missing_entrants(self):
        field = [FieldGolfer(dg_id=1), FieldGolfer(dg_id=2)]
        assert [e.dg_id for e in missing_entrants(field, [make_golfer(1)])] == [2]
