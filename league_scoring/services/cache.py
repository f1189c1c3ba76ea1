"""In-memory caching of provider snapshots with TTL support."""

from functools import lru_cache
from typing import Any, Optional
from cachetools import TTLCache
import threading

from league_scoring import config


class CacheService:
    """Thread-safe in-memory cache with separate TTLs per feed."""

    def __init__(
        self,
        field_ttl: Optional[int] = None,
        rankings_ttl: Optional[int] = None,
    ) -> None:
        """Initialize cache stores.

        Args:
            field_ttl: Seconds to keep field snapshots (defaults to config)
            rankings_ttl: Seconds to keep ranking snapshots (defaults to config)
        """
        self._field_cache: TTLCache = TTLCache(
            maxsize=50,
            ttl=field_ttl if field_ttl is not None else config.CACHE_FIELD_TTL,
        )
        self._rankings_cache: TTLCache = TTLCache(
            maxsize=10,
            ttl=rankings_ttl if rankings_ttl is not None else config.CACHE_RANKINGS_TTL,
        )

        # Lock for thread safety
        self._lock = threading.RLock()

    def _get_cache(self, cache_type: str) -> TTLCache:
        """Get the appropriate cache based on type."""
        caches = {
            "field": self._field_cache,
            "rankings": self._rankings_cache,
        }
        if cache_type not in caches:
            raise KeyError(f"Unknown cache type: {cache_type}")
        return caches[cache_type]

    def get(self, key: str, cache_type: str) -> Optional[Any]:
        """Get a value from the cache.

        Args:
            key: The cache key
            cache_type: Type of cache (field, rankings)

        Returns:
            Cached value or None if not found/expired
        """
        with self._lock:
            return self._get_cache(cache_type).get(key)

    def set(self, key: str, value: Any, cache_type: str) -> None:
        """Set a value in the cache."""
        with self._lock:
            self._get_cache(cache_type)[key] = value

    def clear(self, cache_type: Optional[str] = None) -> None:
        """Clear cache(s).

        Args:
            cache_type: Type of cache to clear, or None to clear all
        """
        with self._lock:
            if cache_type:
                self._get_cache(cache_type).clear()
            else:
                self._field_cache.clear()
                self._rankings_cache.clear()

    def stats(self) -> dict[str, dict[str, int]]:
        """Get cache statistics."""
        with self._lock:
            return {
                "field": {
                    "size": len(self._field_cache),
                    "maxsize": self._field_cache.maxsize,
                },
                "rankings": {
                    "size": len(self._rankings_cache),
                    "maxsize": self._rankings_cache.maxsize,
                },
            }


@lru_cache
def get_cache_service() -> CacheService:
    """Get the global cache service instance."""
    return CacheService()
