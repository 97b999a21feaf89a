"""
Unit tests for the post handler.
"""

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock

from service_api.app.posts import PostHandler
from service_api.app.schemas import PostCreateRequest, PostUpdateRequest
from shared.cache_aside import CacheAsideReader
from shared.errors import AuthorizationError, BackendError, NotFoundError
from shared.test_helpers import InMemoryCache, InMemoryStore


@pytest_asyncio.fixture
async def store():
    store = InMemoryStore()
    await store.create_user("John Doe", "john@example.com", "hash")
    await store.create_user("Jane Smith", "jane@example.com", "hash")
    return store


@pytest.fixture
def cache():
    return InMemoryCache()


@pytest.fixture
def handler(store, cache):
    return PostHandler(store, CacheAsideReader(cache))


class TestPostHandler:
    """Test cases for PostHandler."""

    @pytest.mark.asyncio
    async def test_list_posts_miss_then_hit(self, handler, store):
        await handler.create_post(1, PostCreateRequest(title="T", content="C"))

        miss = await handler.list_posts()
        hit = await handler.list_posts()

        assert miss.cached is False
        assert hit.cached is True
        assert hit.data == miss.data
        assert store.calls["get_all_posts"] == 1

    @pytest.mark.asyncio
    async def test_get_missing_post(self, handler, cache):
        with pytest.raises(NotFoundError):
            await handler.get_post(999)

        assert cache.set_calls == []

    @pytest.mark.asyncio
    async def test_create_only_invalidates_listing(self, handler, cache):
        await handler.create_post(1, PostCreateRequest(title="T", content="C"))

        assert cache.delete_calls == ["posts:all"]

    @pytest.mark.asyncio
    async def test_update_invalidates_entity_then_listing(self, handler, cache):
        created = await handler.create_post(1, PostCreateRequest(title="T", content="C"))
        post_id = created.data["id"]
        cache.delete_calls.clear()

        response = await handler.update_post(1, post_id, PostUpdateRequest(content="Changed"))

        assert response.data["content"] == "Changed"
        assert response.data["title"] == "T"
        assert cache.delete_calls == [f"posts:{post_id}", "posts:all"]

    @pytest.mark.asyncio
    async def test_delete_invalidates_entity_then_listing(self, handler, store, cache):
        created = await handler.create_post(1, PostCreateRequest(title="T", content="C"))
        post_id = created.data["id"]
        cache.delete_calls.clear()

        await handler.delete_post(1, post_id)

        assert post_id not in store.posts
        assert cache.delete_calls == [f"posts:{post_id}", "posts:all"]

    @pytest.mark.asyncio
    async def test_ownership_checked_before_write(self, handler, store, cache):
        created = await handler.create_post(1, PostCreateRequest(title="T", content="C"))
        post_id = created.data["id"]
        cache.delete_calls.clear()

        with pytest.raises(AuthorizationError) as exc_info:
            await handler.delete_post(2, post_id)

        assert exc_info.value.message == "Unauthorized to delete this post"
        assert post_id in store.posts
        assert store.calls["delete_post"] == 0
        assert cache.delete_calls == []

    @pytest.mark.asyncio
    async def test_store_failure_skips_invalidation(self, store, cache):
        store.create_post = AsyncMock(side_effect=BackendError("postgres", "Database query failed"))
        handler = PostHandler(store, CacheAsideReader(cache))

        with pytest.raises(BackendError):
            await handler.create_post(1, PostCreateRequest(title="T", content="C"))

        assert cache.delete_calls == []

    @pytest.mark.asyncio
    async def test_post_vanishing_between_check_and_write(self, handler, store, cache):
        created = await handler.create_post(1, PostCreateRequest(title="T", content="C"))
        post_id = created.data["id"]
        store.update_post = AsyncMock(return_value=None)
        cache.delete_calls.clear()

        with pytest.raises(NotFoundError):
            await handler.update_post(1, post_id, PostUpdateRequest(title="New"))

        assert cache.delete_calls == []

    @pytest.mark.asyncio
    async def test_ownership_uses_the_loaded_post(self, handler, store):
        created = await handler.create_post(1, PostCreateRequest(title="T", content="C"))
        post_id = created.data["id"]
        store.is_owned_by = AsyncMock()
        store.calls.clear()

        with pytest.raises(AuthorizationError):
            await handler.update_post(2, post_id, PostUpdateRequest(title="New"))
        await handler.update_post(1, post_id, PostUpdateRequest(title="New"))

        assert store.calls["get_post"] == 2
        store.is_owned_by.assert_not_awaited()
