"""
Shared error handling for the blog posts platform.
"""

from typing import Dict, Any, List, Optional

from .models import ApiResponse


class BlogServiceException(Exception):
    """Base exception for blog platform services."""

    status_code = 400

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse:
        """Convert to the failure envelope."""
        return ApiResponse(success=False, message=self.message)


class ValidationError(BlogServiceException):
    """Missing or malformed input fields."""

    status_code = 422

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[Dict[str, List[str]]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.errors = errors or {}
        super().__init__("VALIDATION_ERROR", message, details)

    def to_response(self) -> ApiResponse:
        return ApiResponse(success=False, message=self.message, errors=self.errors)


class AuthenticationError(BlogServiceException):
    """Missing, invalid or expired credentials."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class AuthorizationError(BlogServiceException):
    """Authenticated principal is not allowed to act on the resource."""

    status_code = 403

    def __init__(self, message: str = "Authorization failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHORIZATION_ERROR", message, details)


class NotFoundError(BlogServiceException):
    """Identifier has no corresponding record."""

    status_code = 404

    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class BackendError(BlogServiceException):
    """Store or cache unreachable or failing."""

    status_code = 500

    def __init__(self, backend: str, message: str = "Backend error", details: Optional[Dict[str, Any]] = None):
        self.backend = backend
        super().__init__("BACKEND_ERROR", message, details)
