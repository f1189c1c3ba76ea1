"""Tests for the DataGolf API client."""

import json

import httpx
import pytest

from league_scoring.clients.datagolf import DataGolfClient, DataGolfError
from league_scoring.models import FieldUpdates, InPlay, Rankings
from league_scoring.services.cache import CacheService

FIELD_BODY = {
    "event_name": "The Masters",
    "current_round": 2,
    "field": [
        {"dg_id": 1, "player_name": "Scheffler, Scottie", "country": "USA", "r1_teetime": "2025-04-10 08:30"},
        {"dg_id": 2, "player_name": "McIlroy, Rory", "country": "NIR", "r1_teetime": ""},
    ],
}

IN_PLAY_BODY = {
    "info": {"event_name": "The Masters", "current_round": 2},
    "data": [
        {
            "dg_id": 1,
            "player_name": "Scheffler, Scottie",
            "current_pos": "T1",
            "current_score": "-6",
            "today": "E",
            "thru": "F",
            "R1": 66,
            "R2": 0,
            "top_10": 0.9,
        },
    ],
}

RANKINGS_BODY = {"rankings": [{"dg_id": 1, "dg_skill_estimate": 3.1, "owgr_rank": 1}]}


def _transport(calls, responses):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        status, body = responses[request.url.path]
        content = body if isinstance(body, (bytes, str)) else json.dumps(body)
        return httpx.Response(status, content=content)
    return httpx.MockTransport(handler)


class TestDataGolfClient:
    """Tests for DataGolfClient."""

    @pytest.fixture
    def calls(self):
        return []

    @pytest.fixture
    def client(self, calls):
        responses = {
            "/field-updates": (200, FIELD_BODY),
            "/preds/in-play": (200, IN_PLAY_BODY),
            "/preds/get-dg-rankings": (200, RANKINGS_BODY),
        }
        return DataGolfClient(
            base_url="https://feeds.test",
            api_key="secret",
            cache=CacheService(field_ttl=60, rankings_ttl=60),
            transport=_transport(calls, responses),
        )

    @pytest.mark.asyncio
    async def test_get_field_updates(self, client, calls):
        field = await client.get_field_updates()

        assert isinstance(field, FieldUpdates)
        assert field.event_name == "The Masters"
        assert field.field[0].tee_time(1) == "2025-04-10 08:30"
        assert field.field[1].tee_time(1) is None

        params = calls[0].url.params
        assert params["key"] == "secret"
        assert params["file_format"] == "json"
        assert params["tour"] == "pga"

    @pytest.mark.asyncio
    async def test_field_updates_cached(self, client, calls):
        await client.get_field_updates()
        await client.get_field_updates()
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_in_play_not_cached(self, client, calls):
        await client.get_in_play()
        await client.get_in_play()
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_in_play_normalises_values(self, client):
        """Provider strings for even par and finished rounds become numbers."""
        in_play = await client.get_in_play()

        assert isinstance(in_play, InPlay)
        golfer = in_play.data[0]
        assert golfer.today == 0
        assert golfer.thru == 18
        assert golfer.current_score == -6
        assert golfer.strokes(1) == 66
        assert golfer.strokes(2) is None

    @pytest.mark.asyncio
    async def test_get_rankings(self, client):
        rankings = await client.get_rankings()
        assert isinstance(rankings, Rankings)
        assert rankings.rankings[0].owgr_rank == 1

    @pytest.mark.asyncio
    async def test_http_error(self, calls):
        client = DataGolfClient(
            base_url="https://feeds.test",
            api_key="k",
            cache=CacheService(),
            transport=_transport(calls, {"/preds/in-play": (503, {"error": "down"})}),
        )
        with pytest.raises(DataGolfError, match="503"):
            await client.get_in_play()

    @pytest.mark.asyncio
    async def test_invalid_json(self, calls):
        client = DataGolfClient(
            base_url="https://feeds.test",
            api_key="k",
            cache=CacheService(),
            transport=_transport(calls, {"/preds/in-play": (200, b"<html>")}),
        )
        with pytest.raises(DataGolfError):
            await client.get_in_play()

    @pytest.mark.asyncio
    async def test_unexpected_payload(self, calls):
        client = DataGolfClient(
            base_url="https://feeds.test",
            api_key="k",
            cache=CacheService(),
            transport=_transport(calls, {"/preds/in-play": (200, [1, 2])}),
        )
        with pytest.raises(DataGolfError):
            await client.get_in_play()

    @pytest.mark.asyncio
    async def test_validation_error(self, calls):
        client = DataGolfClient(
            base_url="https://feeds.test",
            api_key="k",
            cache=CacheService(),
            transport=_transport(calls, {"/preds/in-play": (200, {"data": [{"player_name": "no id"}]})}),
        )
        with pytest.raises(DataGolfError):
            await client.get_in_play()


class TestCacheService:
    """Tests for CacheService."""

    def test_set_and_get(self):
        cache = CacheService()
        cache.set("k", 1, "field")
        assert cache.get("k", "field") == 1
        assert cache.get("k", "rankings") is None

    def test_clear(self):
        cache = CacheService()
        cache.set("k", 1, "field")
        cache.set("k", 2, "rankings")
        cache.clear("field")
        assert cache.get("k", "field") is None
        assert cache.get("k", "rankings") == 2
        cache.clear()
        assert cache.get("k", "rankings") is None

    def test_unknown_cache_type(self):
        with pytest.raises(KeyError):
            CacheService().get("k", "nope")

    def test_stats(self):
        cache = CacheService()
        cache.set("k", 1, "field")
        stats = cache.stats()
        assert stats["field"]["size"] == 1
