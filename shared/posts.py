"""
Cached read path for post listings and details.

Both the posts API and the cache service serve reads through this module so
they share one key policy and one serialized form.
"""

from typing import List

from .cache_aside import CacheAsideReader, CacheResult, post_key
from .errors import NotFoundError
from .models import Post, serialize_post, deserialize_post, serialize_posts, deserialize_posts


class PostQueries:
    """Post reads through the cache-aside reader."""

    def __init__(self, store, reader: CacheAsideReader):
        self.store = store
        self.reader = reader

    async def list_posts(self) -> CacheResult:
        """All posts, newest first; ``value`` is a list of :class:`Post`."""

        async def load() -> List[Post]:
            return await self.store.get_all_posts()

        return await self.reader.get(
            post_key(),
            load,
            serializer=serialize_posts,
            deserializer=deserialize_posts,
        )

    async def get_post(self, post_id: int) -> CacheResult:
        """One post; raises :class:`NotFoundError` without caching anything."""

        async def load() -> Post:
            post = await self.store.get_post(post_id)
            if post is None:
                raise NotFoundError("Post not found", details={"post_id": post_id})
            return post

        return await self.reader.get(
            post_key(post_id),
            load,
            serializer=serialize_post,
            deserializer=deserialize_post,
        )
