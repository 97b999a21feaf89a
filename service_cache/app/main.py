"""
Cache service for the blog platform.
"""

from datetime import datetime, timezone
from typing import Optional

from shared.base_service import BaseService
from shared.cache_aside import CacheAsideReader, post_key
from shared.config import ServiceConfig
from shared.models import ApiResponse
from shared.persistence import PostgresStore
from shared.posts import PostQueries
from shared.redis_cache import RedisCache


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class CacheService(BaseService):
    """Cache service implementation."""

    def __init__(self, store=None, cache=None, config: Optional[ServiceConfig] = None):
        super().__init__("cache", 3000, config)

        self.store = store or PostgresStore(self.config.postgres_dsn, logger_name="cache.persistence.postgres")
        self.cache = cache or RedisCache(self.config.cache_service_redis_url, logger_name="cache.cache.redis")
        self.reader = CacheAsideReader(self.cache, self.config.cache_ttl_seconds, metrics=self.metrics)
        self.queries = PostQueries(self.store, self.reader)

        self._setup_cache_routes()

    def _setup_cache_routes(self):
        """Set up cache-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "cache",
                "message": "Blog platform - Cache Service",
                "version": "1.0.0",
                "endpoints": {
                    "health": "/health",
                    "posts": "/cache/posts",
                    "single_post": "/cache/posts/{id}",
                    "stats": "/cache/stats"
                }
            }

        @self.app.get("/cache/posts")
        async def get_posts():
            """All posts, served from cache when possible."""
            result = await self.queries.list_posts()
            return ApiResponse(
                success=True,
                message="Posts retrieved from cache" if result.cached else "Posts retrieved from database and cached",
                data=[post.model_dump(mode="json") for post in result.value],
                cached=result.cached,
                timestamp=_timestamp(),
            ).to_payload()

        @self.app.get("/cache/posts/{post_id}")
        async def get_post(post_id: int):
            """One post, served from cache when possible."""
            result = await self.queries.get_post(post_id)
            return ApiResponse(
                success=True,
                message="Post retrieved from cache" if result.cached else "Post retrieved from database and cached",
                data=result.value.model_dump(mode="json"),
                cached=result.cached,
                timestamp=_timestamp(),
            ).to_payload()

        @self.app.delete("/cache/posts")
        async def clear_posts():
            """Drop the cached post listing."""
            await self.reader.invalidate(post_key())
            self.logger.info("Posts listing cache cleared")
            return ApiResponse(
                success=True,
                message="Posts cache cleared successfully",
                timestamp=_timestamp(),
            ).to_payload()

        @self.app.delete("/cache/posts/{post_id}")
        async def clear_post(post_id: int):
            """Drop one cached post."""
            await self.reader.invalidate(post_key(post_id))
            self.logger.info("Post cache cleared", post_id=post_id)
            return ApiResponse(
                success=True,
                message=f"Post {post_id} cache cleared successfully",
                timestamp=_timestamp(),
            ).to_payload()

        @self.app.get("/cache/stats")
        async def get_stats():
            """Backing cache statistics."""
            return {
                "cache": await self.cache.get_cache_stats(),
                "ttl_seconds": self.reader.ttl,
                "timestamp": _timestamp()
            }

    async def _check_dependencies(self):
        """Check cache service dependencies."""
        dependencies = {}

        try:
            dependencies["redis"] = "ok" if await self.cache.health_check() else "error"
        except Exception:
            dependencies["redis"] = "error"

        try:
            dependencies["postgres"] = "ok" if await self.store.health_check() else "error"
        except Exception:
            dependencies["postgres"] = "error"

        return dependencies

    async def start(self):
        """Start cache service components."""
        await self.store.start()
        await self.cache.start()
        self.logger.info("Cache service started")

    async def stop(self):
        """Stop cache service components."""
        await self.cache.stop()
        await self.store.stop()
        self.logger.info("Cache service stopped")


def create_app(store=None, cache=None, config: Optional[ServiceConfig] = None):
    """Create cache service application."""
    service = CacheService(store=store, cache=cache, config=config)
    return service.app


if __name__ == "__main__":
    CacheService().run()
