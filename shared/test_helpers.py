"""
Test helper doubles and factories for the blog platform.

The in-memory store and cache implement the same async interfaces as
:class:`shared.persistence.PostgresStore` and :class:`shared.redis_cache.RedisCache`
so services can be exercised end to end without PostgreSQL or Redis.
"""

import time
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import ServiceConfig, get_config
from .errors import ValidationError
from .models import Post, PostOwner, User


@dataclass
class TestUser:
    """Test user data."""
    __test__ = False

    name: str
    email: str
    password: str = "password123"


class TestDataFactory:
    """Factory for creating test data."""

    __test__ = False

    @staticmethod
    def create_test_users() -> List[TestUser]:
        return [
            TestUser(name="John Doe", email="john@example.com"),
            TestUser(name="Jane Smith", email="jane@example.com"),
        ]


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryCache:
    """Dictionary-backed cache with per-entry expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self.entries: Dict[str, Tuple[str, float]] = {}
        self.set_calls: List[Tuple[str, str, int]] = []
        self.delete_calls: List[str] = []
        self.started = False

    async def start(self):
        self.started = True

    async def stop(self):
        self.started = False

    async def get(self, key: str) -> Optional[str]:
        entry = self.entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if self.clock() >= expires_at:
            del self.entries[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        self.set_calls.append((key, value, ttl_seconds))
        self.entries[key] = (value, self.clock() + ttl_seconds)
        return True

    async def delete(self, key: str) -> bool:
        self.delete_calls.append(key)
        self.entries.pop(key, None)
        return True

    async def health_check(self) -> bool:
        return True

    async def get_cache_stats(self) -> Dict[str, Any]:
        return {"keys": len(self.entries)}

    def has(self, key: str) -> bool:
        entry = self.entries.get(key)
        return entry is not None and self.clock() < entry[1]


class InMemoryStore:
    """Dictionary-backed source of truth for posts and users."""

    def __init__(self):
        self.users: Dict[int, User] = {}
        self.posts: Dict[int, Dict[str, Any]] = {}
        self.calls: Dict[str, int] = defaultdict(int)
        self._next_user_id = 1
        self._next_post_id = 1

    async def start(self):
        pass

    async def stop(self):
        pass

    async def health_check(self) -> bool:
        return True

    async def get_all_posts(self) -> List[Post]:
        self.calls["get_all_posts"] += 1
        rows = sorted(self.posts.values(), key=lambda row: (row["created_at"], row["id"]), reverse=True)
        return [self._to_post(row) for row in rows]

    async def get_post(self, post_id: int) -> Optional[Post]:
        self.calls["get_post"] += 1
        row = self.posts.get(post_id)
        return self._to_post(row) if row else None

    async def create_post(self, title: str, content: str, user_id: int) -> Post:
        self.calls["create_post"] += 1
        now = _now()
        row = {
            "id": self._next_post_id,
            "title": title,
            "content": content,
            "user_id": user_id,
            "created_at": now,
            "updated_at": now,
        }
        self.posts[row["id"]] = row
        self._next_post_id += 1
        return self._to_post(row)

    async def update_post(self, post_id: int, fields: Dict[str, Any]) -> Optional[Post]:
        self.calls["update_post"] += 1
        row = self.posts.get(post_id)
        if row is None:
            return None

        changes = {name: value for name, value in fields.items() if name in ("title", "content")}
        if changes:
            row.update(changes)
            row["updated_at"] = _now()
        return self._to_post(row)

    async def delete_post(self, post_id: int) -> bool:
        self.calls["delete_post"] += 1
        return self.posts.pop(post_id, None) is not None

    async def is_owned_by(self, post_id: int, user_id: int) -> bool:
        row = self.posts.get(post_id)
        return row is not None and row["user_id"] == user_id

    async def create_user(self, name: str, email: str, password_hash: str) -> User:
        if any(user.email == email for user in self.users.values()):
            raise ValidationError(errors={"email": ["The email has already been taken."]})

        now = _now()
        user = User(
            id=self._next_user_id,
            name=name,
            email=email,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        self.users[user.id] = user
        self._next_user_id += 1
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return next((user for user in self.users.values() if user.email == email), None)

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def _to_post(self, row: Dict[str, Any]) -> Post:
        owner = self.users[row["user_id"]]
        return Post(
            **row,
            user=PostOwner(id=owner.id, name=owner.name, email=owner.email),
        )


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_test_config(service_name: str = "api", port: int = 8000, **overrides) -> ServiceConfig:
    """Configuration with cheap password hashing and a fixed signing secret."""
    settings = {
        "env": "test",
        "jwt_secret": "test-jwt-secret-key-for-testing-environment",
        "bcrypt_rounds": 4,
    }
    settings.update(overrides)
    return get_config(service_name, port, **settings)


test_data_factory = TestDataFactory()
