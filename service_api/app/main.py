"""
Posts API service for the blog platform.
"""

from typing import Optional

from fastapi import Depends, Header

from shared.base_service import BaseService
from shared.cache_aside import CacheAsideReader
from shared.config import ServiceConfig
from shared.models import User
from shared.persistence import PostgresStore
from shared.redis_cache import RedisCache

from .auth import AccountHandler, PasswordHasher, TokenManager
from .posts import PostHandler
from .schemas import LoginRequest, PostCreateRequest, PostUpdateRequest, RegisterRequest


class ApiService(BaseService):
    """Posts API service implementation."""

    def __init__(self, store=None, cache=None, config: Optional[ServiceConfig] = None):
        super().__init__("api", 8000, config)

        self.store = store or PostgresStore(self.config.postgres_dsn, logger_name="api.persistence.postgres")
        self.cache = cache or RedisCache(self.config.redis_url, logger_name="api.cache.redis")
        self.reader = CacheAsideReader(self.cache, self.config.cache_ttl_seconds, metrics=self.metrics)

        self.tokens = TokenManager(
            self.config.jwt_secret,
            algorithm=self.config.jwt_algorithm,
            ttl_minutes=self.config.jwt_ttl_minutes,
            issuer=self.config.jwt_issuer,
        )
        self.accounts = AccountHandler(self.store, self.tokens, PasswordHasher(self.config.bcrypt_rounds))
        self.posts = PostHandler(self.store, self.reader)

        self._setup_api_routes()

    def _setup_api_routes(self):
        """Set up account and post routes."""

        async def current_user(authorization: Optional[str] = Header(default=None)) -> User:
            return await self.accounts.authenticate(authorization)

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "api",
                "message": "Blog platform - Posts API",
                "version": "1.0.0",
                "endpoints": {
                    "register": "/api/register",
                    "login": "/api/login",
                    "me": "/api/me",
                    "posts": "/api/posts",
                    "single_post": "/api/posts/{id}"
                }
            }

        @self.app.post("/api/register", status_code=201)
        async def register(request: RegisterRequest):
            """Create an account and return a token for it."""
            return (await self.accounts.register(request)).to_payload()

        @self.app.post("/api/login")
        async def login(request: LoginRequest):
            """Exchange credentials for a token."""
            return (await self.accounts.login(request)).to_payload()

        @self.app.get("/api/me")
        async def me(user: User = Depends(current_user)):
            """Profile of the authenticated user."""
            return self.accounts.me(user).to_payload()

        @self.app.post("/api/logout")
        async def logout(user: User = Depends(current_user)):
            """Log out the authenticated user."""
            return self.accounts.logout(user).to_payload()

        @self.app.get("/api/posts")
        async def list_posts(user: User = Depends(current_user)):
            """All posts, served from cache when possible."""
            return (await self.posts.list_posts()).to_payload()

        @self.app.post("/api/posts", status_code=201)
        async def create_post(request: PostCreateRequest, user: User = Depends(current_user)):
            """Create a post owned by the authenticated user."""
            return (await self.posts.create_post(user.id, request)).to_payload()

        @self.app.get("/api/posts/{post_id}")
        async def get_post(post_id: int, user: User = Depends(current_user)):
            """One post, served from cache when possible."""
            return (await self.posts.get_post(post_id)).to_payload()

        @self.app.put("/api/posts/{post_id}")
        async def update_post(post_id: int, request: PostUpdateRequest, user: User = Depends(current_user)):
            """Update a post owned by the authenticated user."""
            return (await self.posts.update_post(user.id, post_id, request)).to_payload()

        @self.app.delete("/api/posts/{post_id}")
        async def delete_post(post_id: int, user: User = Depends(current_user)):
            """Delete a post owned by the authenticated user."""
            return (await self.posts.delete_post(user.id, post_id)).to_payload()

    async def _check_dependencies(self):
        """Check API service dependencies."""
        dependencies = {}

        try:
            dependencies["postgres"] = "ok" if await self.store.health_check() else "error"
        except Exception:
            dependencies["postgres"] = "error"

        try:
            dependencies["redis"] = "ok" if await self.cache.health_check() else "error"
        except Exception:
            dependencies["redis"] = "error"

        return dependencies

    async def start(self):
        """Start API service components."""
        await self.store.start()
        await self.cache.start()
        self.logger.info("API service started")

    async def stop(self):
        """Stop API service components."""
        await self.cache.stop()
        await self.store.stop()
        self.logger.info("API service stopped")


def create_app(store=None, cache=None, config: Optional[ServiceConfig] = None):
    """Create posts API application."""
    service = ApiService(store=store, cache=cache, config=config)
    return service.app


if __name__ == "__main__":
    ApiService().run()
