"""
Post CRUD handler for the posts API.

Reads go through the shared cache-aside read path. Every successful write
invalidates the affected cache keys before the response is built, so the next
read after a write always reloads from the store.
"""

from shared.cache_aside import CacheAsideReader, invalidation_keys
from shared.errors import AuthorizationError, NotFoundError
from shared.logging import get_logger
from shared.models import ApiResponse, Post
from shared.posts import PostQueries
from ..schemas import PostCreateRequest, PostUpdateRequest


class PostHandler:
    """Maps post operations onto the store, the cache and the envelope."""

    def __init__(self, store, reader: CacheAsideReader):
        self.store = store
        self.reader = reader
        self.queries = PostQueries(store, reader)
        self.logger = get_logger("api.posts")

    async def list_posts(self) -> ApiResponse:
        result = await self.queries.list_posts()
        return ApiResponse(
            success=True,
            message="Posts retrieved from cache" if result.cached else "Posts retrieved successfully",
            data=[post.model_dump(mode="json") for post in result.value],
            cached=result.cached,
        )

    async def get_post(self, post_id: int) -> ApiResponse:
        result = await self.queries.get_post(post_id)
        return ApiResponse(
            success=True,
            message="Post retrieved from cache" if result.cached else "Post retrieved successfully",
            data=result.value.model_dump(mode="json"),
            cached=result.cached,
        )

    async def create_post(self, principal_id: int, request: PostCreateRequest) -> ApiResponse:
        post = await self.store.create_post(request.title, request.content, principal_id)

        await self.reader.invalidate_many(invalidation_keys())

        self.logger.info("Post created", post_id=post.id, user_id=principal_id)
        return ApiResponse(
            success=True,
            message="Post created successfully",
            data=post.model_dump(mode="json"),
        )

    async def update_post(self, principal_id: int, post_id: int, request: PostUpdateRequest) -> ApiResponse:
        await self._require_owner(principal_id, post_id, "update")

        post = await self.store.update_post(post_id, request.changes())
        if post is None:
            raise NotFoundError("Post not found", details={"post_id": post_id})

        await self.reader.invalidate_many(invalidation_keys(post_id))

        self.logger.info("Post updated", post_id=post_id, user_id=principal_id)
        return ApiResponse(
            success=True,
            message="Post updated successfully",
            data=post.model_dump(mode="json"),
        )

    async def delete_post(self, principal_id: int, post_id: int) -> ApiResponse:
        await self._require_owner(principal_id, post_id, "delete")

        if not await self.store.delete_post(post_id):
            raise NotFoundError("Post not found", details={"post_id": post_id})

        await self.reader.invalidate_many(invalidation_keys(post_id))

        self.logger.info("Post deleted", post_id=post_id, user_id=principal_id)
        return ApiResponse(success=True, message="Post deleted successfully")

    async def _require_owner(self, principal_id: int, post_id: int, action: str) -> Post:
        post = await self.store.get_post(post_id)
        if post is None:
            raise NotFoundError("Post not found", details={"post_id": post_id})

        if post.user_id != principal_id:
            self.logger.warning(
                "Post ownership check failed",
                post_id=post_id,
                user_id=principal_id,
                action=action,
            )
            raise AuthorizationError(f"Unauthorized to {action} this post")

        return post
