"""
Redis caching layer shared by the posts API and the cache service.
"""

from typing import Dict, Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
from .logging import get_logger
from .errors import BackendError


class RedisCache:
    """Redis-backed key/value cache with per-entry expiry."""

    def __init__(self, redis_url: str, logger_name: str = "shared.cache.redis"):
        self.redis_url = redis_url
        self.logger = get_logger(logger_name)
        self.redis: Optional[redis.Redis] = None

    async def start(self):
        """Start the Redis cache."""
        try:
            self.redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30
            )

            await self.redis.ping()

            self.logger.info("Redis cache started")

        except Exception as e:
            self.logger.error("Failed to start Redis cache", error=str(e))
            raise BackendError("redis", "Failed to start Redis cache", {"error": str(e)})

    async def stop(self):
        """Stop the Redis cache."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis cache stopped")

    async def get(self, key: str) -> Optional[str]:
        """Get a raw cached value, or None when absent.

        Read failures raise :class:`BackendError` so callers can tell an outage
        from a miss.
        """
        try:
            return await self._client().get(key)
        except (RedisError, OSError) as e:
            self.logger.error("Error getting cache key", cache_key=key, error=str(e))
            raise BackendError("redis", "Cache read failed", {"error": str(e)})

    async def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Store a value that expires after ``ttl_seconds``."""
        try:
            await self._client().setex(key, ttl_seconds, value)
            return True
        except Exception as e:
            self.logger.error("Error setting cache key", cache_key=key, error=str(e))
            return False

    async def delete(self, key: str) -> bool:
        """Delete a key; deleting a missing key still succeeds."""
        try:
            await self._client().delete(key)
            return True
        except Exception as e:
            self.logger.error("Error deleting cache key", cache_key=key, error=str(e))
            return False

    async def get_cache_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        try:
            info = await self._client().info()

            return {
                "redis_version": info.get("redis_version"),
                "used_memory": info.get("used_memory_human"),
                "connected_clients": info.get("connected_clients"),
                "keyspace_hits": info.get("keyspace_hits"),
                "keyspace_misses": info.get("keyspace_misses"),
                "hit_rate": self._calculate_hit_rate(info)
            }

        except Exception as e:
            self.logger.error("Error getting cache stats", error=str(e))
            return {}

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise BackendError("redis", "Redis cache is not started")
        return self.redis

    def _calculate_hit_rate(self, info: Dict[str, Any]) -> float:
        """Calculate cache hit rate."""
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        total = hits + misses

        if total == 0:
            return 0.0

        return hits / total

    async def health_check(self) -> bool:
        """Check Redis health."""
        try:
            await self._client().ping()
            return True
        except Exception:
            return False
