"""Tests for the background scheduler jobs."""

from unittest.mock import AsyncMock, patch

from league_scoring import scheduler
from league_scoring.services.stage import StageResult


class TestSchedulerJobs:
    """Tests for the scheduled job functions."""

    def test_pipeline_runs_tournament_stages_in_order(self, db_fixture, fake_client):
        runner = AsyncMock(return_value=StageResult.nothing_to_do("none"))
        with patch.object(scheduler, "get_database", return_value=db_fixture), \
                patch.object(scheduler, "get_datagolf_client", return_value=fake_client), \
                patch.object(scheduler, "run_stage", runner):
            scheduler.run_pipeline()

        names = [call.args[0] for call in runner.call_args_list]
        assert names == ["create-groups", "update-golfers", "create-playoff-teams", "update-teams"]

    def test_standings_job(self, db_fixture):
        runner = AsyncMock(return_value=StageResult.nothing_to_do("none"))
        with patch.object(scheduler, "get_database", return_value=db_fixture), \
                patch.object(scheduler, "run_stage", runner):
            scheduler.run_standings()

        assert runner.call_args.args[0] == "update-standings"
