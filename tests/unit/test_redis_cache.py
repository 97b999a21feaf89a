"""
Unit tests for the Redis cache wrapper.
"""

import pytest
import pytest_asyncio
from fakeredis import aioredis as fakeredis_aioredis
from unittest.mock import AsyncMock, patch
from redis.exceptions import ConnectionError as RedisConnectionError

from shared.cache_aside import CacheAsideReader
from shared.errors import BackendError
from shared.metrics import MetricsCollector
from shared.redis_cache import RedisCache


@pytest_asyncio.fixture
async def cache():
    cache = RedisCache("redis://localhost:6379/0", logger_name="test.cache.redis")
    cache.redis = fakeredis_aioredis.FakeRedis(decode_responses=True)
    yield cache
    await cache.stop()


class TestRedisCache:
    """Test cases for RedisCache."""

    @pytest.mark.asyncio
    async def test_get_missing_key(self, cache):
        assert await cache.get("posts:all") is None

    @pytest.mark.asyncio
    async def test_set_stores_value_with_expiry(self, cache):
        assert await cache.set("posts:1", '{"id": 1}', 3600) is True

        assert await cache.get("posts:1") == '{"id": 1}'
        ttl = await cache.redis.ttl("posts:1")
        assert 0 < ttl <= 3600

    @pytest.mark.asyncio
    async def test_set_overwrites(self, cache):
        await cache.set("posts:1", "old", 60)
        await cache.set("posts:1", "new", 60)

        assert await cache.get("posts:1") == "new"

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, cache):
        await cache.set("posts:1", "value", 60)

        assert await cache.delete("posts:1") is True
        assert await cache.delete("posts:1") is True
        assert await cache.get("posts:1") is None

    @pytest.mark.asyncio
    async def test_health_check(self, cache):
        assert await cache.health_check() is True

    @pytest.mark.asyncio
    async def test_stop_releases_client(self, cache):
        await cache.stop()
        assert cache.redis is None


class TestRedisCacheUnavailable:
    """Behavior when Redis cannot be reached."""

    @pytest.mark.asyncio
    async def test_operations_degrade_when_not_started(self):
        cache = RedisCache("redis://localhost:6379/0")

        with pytest.raises(BackendError):
            await cache.get("posts:1")
        assert await cache.set("posts:1", "value", 60) is False
        assert await cache.delete("posts:1") is False
        assert await cache.health_check() is False
        assert await cache.get_cache_stats() == {}

    @pytest.mark.asyncio
    async def test_operations_degrade_on_connection_error(self):
        cache = RedisCache("redis://localhost:6379/0")
        cache.redis = AsyncMock()
        cache.redis.get.side_effect = ConnectionError("connection refused")
        cache.redis.setex.side_effect = ConnectionError("connection refused")

        with pytest.raises(BackendError) as exc_info:
            await cache.get("posts:1")
        assert exc_info.value.details == {"error": "connection refused"}
        assert await cache.set("posts:1", "value", 60) is False

    @pytest.mark.asyncio
    async def test_read_outage_is_counted_by_reader(self):
        metrics = MetricsCollector("redis-cache-outage-test")
        cache = RedisCache("redis://localhost:6379/0")
        cache.redis = AsyncMock()
        cache.redis.get.side_effect = RedisConnectionError("connection refused")
        cache.redis.setex.return_value = True
        reader = CacheAsideReader(cache, metrics=metrics)

        async def load():
            return {"id": 1}

        result = await reader.get("posts:1", load)

        assert result.cached is False
        assert result.value == {"id": 1}
        assert metrics.registry.get_sample_value("cache_errors_total", {"operation": "get"}) == 1.0

    @pytest.mark.asyncio
    async def test_start_failure_raises_backend_error(self):
        cache = RedisCache("redis://localhost:6379/0")
        client = AsyncMock()
        client.ping.side_effect = ConnectionError("connection refused")

        with patch("shared.redis_cache.redis.from_url", return_value=client):
            with pytest.raises(BackendError) as exc_info:
                await cache.start()

        assert exc_info.value.code == "BACKEND_ERROR"

    def test_hit_rate(self):
        cache = RedisCache("redis://localhost:6379/0")

        assert cache._calculate_hit_rate({}) == 0.0
        assert cache._calculate_hit_rate({"keyspace_hits": 3, "keyspace_misses": 1}) == 0.75
