"""
Data models shared by the posts API and the cache service.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class PostOwner(BaseModel):
    """Public fields of the user owning a post."""

    id: int
    name: str
    email: str


class Post(BaseModel):
    """Blog post with the owning user denormalized into it."""

    id: int
    title: str = Field(min_length=1, max_length=255)
    content: str
    user_id: int
    created_at: datetime
    updated_at: datetime
    user: PostOwner


class User(BaseModel):
    """Stored user record."""

    id: int
    name: str
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime

    def public(self) -> Dict[str, Any]:
        """Fields safe to return to clients."""
        return {"id": self.id, "name": self.name, "email": self.email}


class ApiResponse(BaseModel):
    """Uniform response envelope."""

    model_config = ConfigDict(extra="allow")

    success: bool
    message: str
    data: Optional[Any] = None
    cached: Optional[bool] = None
    errors: Optional[Dict[str, List[str]]] = None

    def to_payload(self) -> Dict[str, Any]:
        """Envelope as a JSON body, dropping the fields that were not set."""
        return self.model_dump(mode="json", exclude_none=True)


_post_list_adapter = TypeAdapter(List[Post])


def serialize_post(post: Post) -> str:
    """Serialize a post to the JSON snapshot stored in the cache."""
    return post.model_dump_json()


def deserialize_post(payload: str) -> Post:
    """Rebuild a post from its cached JSON snapshot."""
    return Post.model_validate_json(payload)


def serialize_posts(posts: List[Post]) -> str:
    return _post_list_adapter.dump_json(posts).decode("utf-8")


def deserialize_posts(payload: str) -> List[Post]:
    return _post_list_adapter.validate_json(payload)
