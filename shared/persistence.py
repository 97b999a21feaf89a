"""
PostgreSQL persistence layer for posts and users.
"""

from typing import Dict, Any, Optional, List

import asyncpg
from .logging import get_logger
from .errors import BackendError, ValidationError
from .models import Post, PostOwner, User


POST_COLUMNS = """
    p.id,
    p.title,
    p.content,
    p.user_id,
    p.created_at,
    p.updated_at,
    u.name AS user_name,
    u.email AS user_email
"""

UPDATABLE_POST_FIELDS = ("title", "content")

STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class PostgresStore:
    """Source of truth for posts and users."""

    def __init__(self, dsn: str, logger_name: str = "shared.persistence.postgres"):
        self.dsn = dsn
        self.logger = get_logger(logger_name)
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self):
        """Start the persistence layer."""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=2,
                max_size=10,
                command_timeout=30
            )

            await self._create_tables()

            self.logger.info("PostgreSQL persistence started")

        except Exception as e:
            self.logger.error("Failed to start PostgreSQL persistence", error=str(e))
            raise BackendError("postgres", "Failed to start PostgreSQL persistence", {"error": str(e)})

    async def stop(self):
        """Stop the persistence layer."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("PostgreSQL persistence stopped")

    async def _create_tables(self):
        """Create database tables."""
        async with self.pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id BIGSERIAL PRIMARY KEY,
                    name VARCHAR(255) NOT NULL,
                    email VARCHAR(255) NOT NULL UNIQUE,
                    password_hash VARCHAR(255) NOT NULL,
                    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
                    updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
                );
            """)
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS posts (
                    id BIGSERIAL PRIMARY KEY,
                    title VARCHAR(255) NOT NULL,
                    content TEXT NOT NULL,
                    user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
                    updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
                );
            """)
            await conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_posts_user ON posts(user_id);
            """)
            await conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_posts_created ON posts(created_at DESC);
            """)

    async def get_all_posts(self) -> List[Post]:
        """Load every post, newest first, with its owner."""
        rows = await self._fetch(f"""
            SELECT {POST_COLUMNS}
            FROM posts p
            JOIN users u ON p.user_id = u.id
            ORDER BY p.created_at DESC, p.id DESC
        """)
        return [self._row_to_post(row) for row in rows]

    async def get_post(self, post_id: int) -> Optional[Post]:
        """Load one post with its owner, or None."""
        row = await self._fetchrow(f"""
            SELECT {POST_COLUMNS}
            FROM posts p
            JOIN users u ON p.user_id = u.id
            WHERE p.id = $1
        """, post_id)
        return self._row_to_post(row) if row else None

    async def create_post(self, title: str, content: str, user_id: int) -> Post:
        """Insert a post and return it with its owner."""
        row = await self._fetchrow("""
            INSERT INTO posts (title, content, user_id)
            VALUES ($1, $2, $3)
            RETURNING id
        """, title, content, user_id)

        self.logger.info("Post created", post_id=row["id"], user_id=user_id)
        return await self.get_post(row["id"])

    async def update_post(self, post_id: int, fields: Dict[str, Any]) -> Optional[Post]:
        """Apply ``fields`` to a post; returns None when it does not exist."""
        updates = {name: value for name, value in fields.items() if name in UPDATABLE_POST_FIELDS}

        if updates:
            assignments = ", ".join(
                f"{name} = ${index}" for index, name in enumerate(updates, start=2)
            )
            status = await self._execute(
                f"UPDATE posts SET {assignments}, updated_at = NOW() WHERE id = $1",
                post_id, *updates.values()
            )
            if status.endswith(" 0"):
                return None
            self.logger.info("Post updated", post_id=post_id, fields=list(updates))

        return await self.get_post(post_id)

    async def delete_post(self, post_id: int) -> bool:
        """Delete a post; returns False when it does not exist."""
        status = await self._execute("DELETE FROM posts WHERE id = $1", post_id)
        deleted = not status.endswith(" 0")
        if deleted:
            self.logger.info("Post deleted", post_id=post_id)
        return deleted

    async def is_owned_by(self, post_id: int, user_id: int) -> bool:
        """Whether ``user_id`` owns the post."""
        owner_id = await self._fetchval("SELECT user_id FROM posts WHERE id = $1", post_id)
        return owner_id is not None and owner_id == user_id

    async def create_user(self, name: str, email: str, password_hash: str) -> User:
        """Insert a user; a taken email is a validation error."""
        try:
            row = await self._fetchrow("""
                INSERT INTO users (name, email, password_hash)
                VALUES ($1, $2, $3)
                RETURNING id, name, email, password_hash, created_at, updated_at
            """, name, email, password_hash)
        except asyncpg.UniqueViolationError:
            raise ValidationError(errors={"email": ["The email has already been taken."]})

        self.logger.info("User created", user_id=row["id"])
        return User(**dict(row))

    async def get_user_by_email(self, email: str) -> Optional[User]:
        row = await self._fetchrow("""
            SELECT id, name, email, password_hash, created_at, updated_at
            FROM users WHERE email = $1
        """, email)
        return User(**dict(row)) if row else None

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        row = await self._fetchrow("""
            SELECT id, name, email, password_hash, created_at, updated_at
            FROM users WHERE id = $1
        """, user_id)
        return User(**dict(row)) if row else None

    async def health_check(self) -> bool:
        """Check PostgreSQL health."""
        try:
            await self._fetchval("SELECT 1")
            return True
        except Exception:
            return False

    async def _fetch(self, query: str, *args) -> List[asyncpg.Record]:
        try:
            async with self._pool().acquire() as conn:
                return await conn.fetch(query, *args)
        except STORE_ERRORS as e:
            raise self._backend_error(e)

    async def _fetchrow(self, query: str, *args) -> Optional[asyncpg.Record]:
        try:
            async with self._pool().acquire() as conn:
                return await conn.fetchrow(query, *args)
        except asyncpg.UniqueViolationError:
            raise
        except STORE_ERRORS as e:
            raise self._backend_error(e)

    async def _fetchval(self, query: str, *args) -> Any:
        try:
            async with self._pool().acquire() as conn:
                return await conn.fetchval(query, *args)
        except STORE_ERRORS as e:
            raise self._backend_error(e)

    async def _execute(self, query: str, *args) -> str:
        try:
            async with self._pool().acquire() as conn:
                return await conn.execute(query, *args)
        except STORE_ERRORS as e:
            raise self._backend_error(e)

    def _pool(self) -> asyncpg.Pool:
        if self.pool is None:
            raise BackendError("postgres", "PostgreSQL persistence is not started")
        return self.pool

    def _backend_error(self, error: Exception) -> BackendError:
        self.logger.error("PostgreSQL query failed", error=str(error))
        return BackendError("postgres", "Database query failed", {"error": str(error)})

    def _row_to_post(self, row: asyncpg.Record) -> Post:
        """Convert database row to a post with its owner."""
        return Post(
            id=row["id"],
            title=row["title"],
            content=row["content"],
            user_id=row["user_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            user=PostOwner(
                id=row["user_id"],
                name=row["user_name"],
                email=row["user_email"]
            )
        )
