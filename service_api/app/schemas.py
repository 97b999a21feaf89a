"""
Request bodies accepted by the posts API.
"""

from typing import Dict, Any, Optional

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(BaseModel):
    """Request model for account registration."""
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    """Request model for login."""
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


def _require_text(value: Optional[str]) -> Optional[str]:
    # Reached only for fields present in the body, so None is an explicit null
    if value is None:
        raise ValueError("Field may not be null")
    if not value.strip():
        raise ValueError("Field may not be blank")
    return value


class PostCreateRequest(BaseModel):
    """Request model for creating a post."""
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)

    @field_validator("title", "content")
    @classmethod
    def check_text(cls, value: str) -> str:
        return _require_text(value)


class PostUpdateRequest(BaseModel):
    """Request model for updating a post; omitted fields are left unchanged."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = Field(default=None, min_length=1)

    @field_validator("title", "content")
    @classmethod
    def check_text(cls, value: Optional[str]) -> Optional[str]:
        return _require_text(value)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(include=self.model_fields_set)
