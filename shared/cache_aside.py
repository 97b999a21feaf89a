"""
Cache-aside reads over the Redis cache.

Reads check the cache first and fall back to the source of truth on a miss,
populating the cache with the freshly loaded value. Writes go to the store
and then invalidate the affected keys through :meth:`CacheAsideReader.invalidate`.

The cache is best-effort: a failing cache degrades to a miss and never fails
the read. Loader failures propagate and never populate the cache.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, List, Optional, TYPE_CHECKING

from .logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .metrics import MetricsCollector


CACHE_TTL_SECONDS = 3600

POSTS_NAMESPACE = "posts"
POSTS_ALL_KEY = f"{POSTS_NAMESPACE}:all"


def post_key(post_id: Optional[int] = None) -> str:
    """Cache key for one post, or for the full listing when no id is given."""
    if post_id is None:
        return POSTS_ALL_KEY
    return f"{POSTS_NAMESPACE}:{post_id}"


def invalidation_keys(post_id: Optional[int] = None) -> List[str]:
    """Keys a successful write must invalidate.

    A create has no entity entry yet, so only the listing is dropped. Updates
    and deletes drop the entity entry and the listing.
    """
    if post_id is None:
        return [POSTS_ALL_KEY]
    return [post_key(post_id), POSTS_ALL_KEY]


def _namespace(key: str) -> str:
    return key.split(":", 1)[0]


@dataclass
class CacheResult:
    """Value returned by a cache-aside read."""

    value: Any
    cached: bool


class CacheAsideReader:
    """Get-or-populate reads and invalidation against a key/value cache."""

    def __init__(
        self,
        cache,
        ttl: int = CACHE_TTL_SECONDS,
        *,
        metrics: Optional["MetricsCollector"] = None,
        serializer: Callable[[Any], str] = json.dumps,
        deserializer: Callable[[str], Any] = json.loads,
    ):
        self.cache = cache
        self.ttl = ttl
        self.metrics = metrics
        self.serializer = serializer
        self.deserializer = deserializer
        self.logger = get_logger("shared.cache_aside")

    async def get(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        ttl: Optional[int] = None,
        *,
        serializer: Optional[Callable[[Any], str]] = None,
        deserializer: Optional[Callable[[str], Any]] = None,
    ) -> CacheResult:
        """Return the cached value for ``key`` or load, cache and return it."""
        serializer = serializer or self.serializer
        deserializer = deserializer or self.deserializer
        namespace = _namespace(key)

        cached_data = await self._safe_get(key)
        if cached_data is not None:
            try:
                value = deserializer(cached_data)
            except Exception as exc:
                self.logger.warning("Discarding undecodable cache entry", cache_key=key, error=str(exc))
                self._count("cache_errors_total", operation="decode")
            else:
                self.logger.debug("Cache hit", cache_key=key)
                self._count("cache_hits_total", namespace=namespace)
                return CacheResult(value=value, cached=True)

        self.logger.debug("Cache miss", cache_key=key)
        self._count("cache_misses_total", namespace=namespace)

        start = time.perf_counter()
        value = await loader()
        if self.metrics:
            self.metrics.observe_histogram(
                "cache_load_duration_seconds",
                time.perf_counter() - start,
                namespace=namespace,
            )

        try:
            payload = serializer(value)
        except Exception as exc:
            self.logger.error("Failed to serialize value for cache", cache_key=key, error=str(exc))
            self._count("cache_errors_total", operation="encode")
            return CacheResult(value=value, cached=False)

        await self._safe_set(key, payload, ttl if ttl is not None else self.ttl)
        return CacheResult(value=value, cached=False)

    async def invalidate(self, key: str) -> None:
        """Remove ``key`` from the cache; a missing key is not an error."""
        try:
            deleted = await self.cache.delete(key)
        except Exception as exc:
            self.logger.error("Cache invalidation failed", cache_key=key, error=str(exc))
            self._count("cache_errors_total", operation="delete")
            return

        if deleted is False:
            self.logger.warning("Cache invalidation not acknowledged", cache_key=key)
            self._count("cache_errors_total", operation="delete")
            return

        self.logger.debug("Cache key invalidated", cache_key=key)
        self._count("cache_invalidations_total", namespace=_namespace(key))

    async def invalidate_many(self, keys: Iterable[str]) -> None:
        """Invalidate each key in order."""
        for key in keys:
            await self.invalidate(key)

    async def _safe_get(self, key: str) -> Optional[str]:
        """Fetch a raw entry, treating cache failures as a miss."""
        try:
            return await self.cache.get(key)
        except Exception as exc:
            self.logger.error("Cache fetch error", cache_key=key, error=str(exc))
            self._count("cache_errors_total", operation="get")
            return None

    async def _safe_set(self, key: str, payload: str, ttl: int) -> None:
        """Populate an entry, logging instead of failing the read."""
        try:
            stored = await self.cache.set(key, payload, ttl)
        except Exception as exc:
            self.logger.error("Cache store error", cache_key=key, error=str(exc))
            self._count("cache_errors_total", operation="set")
            return

        if stored is False:
            self._count("cache_errors_total", operation="set")
            return

        self.logger.debug("Cached value", cache_key=key, ttl=ttl)

    def _count(self, metric_name: str, **labels) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric_name, **labels)
