"""DataGolf feeds API client."""

import logging
from functools import lru_cache
from typing import Optional

import httpx
from pydantic import ValidationError

from league_scoring import config
from league_scoring.models import FieldUpdates, InPlay, Rankings
from league_scoring.services.cache import CacheService, get_cache_service

logger = logging.getLogger(__name__)


class DataGolfError(Exception):
    """The provider was unreachable or returned unusable data."""


class DataGolfClient:
    """Async client for the DataGolf feeds API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        tour: str = "pga",
        cache: Optional[CacheService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the API client.

        Args:
            base_url: Feed base URL (defaults to DATAGOLF_BASE_URL)
            api_key: Subscription key (defaults to DATAGOLF_API_KEY)
            tour: Tour code passed to every feed
            cache: Snapshot cache for field and rankings data
            transport: Optional httpx transport, used by tests
        """
        self.base_url = (base_url or config.DATAGOLF_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else config.DATAGOLF_API_KEY
        self.tour = tour
        self.cache = cache or get_cache_service()
        self.transport = transport
        self.headers = {"Accept": "application/json"}

    async def _request(self, endpoint: str, params: Optional[dict] = None) -> dict:
        """Make an async HTTP request to the API.

        Args:
            endpoint: API endpoint path
            params: Query parameters

        Returns:
            JSON response data

        Raises:
            DataGolfError: If the request fails or the body is not a JSON object
        """
        url = f"{self.base_url}{endpoint}"
        query = {"file_format": "json", "key": self.api_key}
        if params:
            query.update(params)

        try:
            async with httpx.AsyncClient(
                headers=self.headers,
                timeout=config.DATAGOLF_TIMEOUT,
                transport=self.transport,
            ) as client:
                response = await client.get(url, params=query)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise DataGolfError(
                f"{endpoint} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise DataGolfError(f"{endpoint} request failed: {e}") from e
        except ValueError as e:
            raise DataGolfError(f"{endpoint} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise DataGolfError(f"{endpoint} returned unexpected payload")
        return data

    async def get_field_updates(self) -> FieldUpdates:
        """Fetch the current event's field with tee times.

        Returns:
            FieldUpdates snapshot
        """
        cache_key = f"field_{self.tour}"
        cached = self.cache.get(cache_key, "field")
        if cached:
            logger.debug("Returning cached field updates")
            return cached

        logger.info("Fetching field updates from DataGolf")
        data = await self._request("/field-updates", {"tour": self.tour})
        field = self._parse(FieldUpdates, data, "/field-updates")
        self.cache.set(cache_key, field, "field")
        return field

    async def get_in_play(self) -> InPlay:
        """Fetch live in-play predictions. Never cached.

        Returns:
            InPlay snapshot
        """
        logger.info("Fetching in-play data from DataGolf")
        data = await self._request(
            "/preds/in-play",
            {"tour": self.tour, "dead_heat": "no", "odds_format": "percent"},
        )
        return self._parse(InPlay, data, "/preds/in-play")

    async def get_rankings(self) -> Rankings:
        """Fetch global skill rankings.

        Returns:
            Rankings snapshot
        """
        cache_key = "rankings"
        cached = self.cache.get(cache_key, "rankings")
        if cached:
            logger.debug("Returning cached rankings")
            return cached

        logger.info("Fetching skill rankings from DataGolf")
        data = await self._request("/preds/get-dg-rankings")
        rankings = self._parse(Rankings, data, "/preds/get-dg-rankings")
        self.cache.set(cache_key, rankings, "rankings")
        return rankings

    @staticmethod
    def _parse(model, data: dict, endpoint: str):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise DataGolfError(f"{endpoint} payload did not validate: {e}") from e


@lru_cache
def get_datagolf_client() -> DataGolfClient:
    """Get the global DataGolf client instance."""
    return DataGolfClient()
