"""
Bearer token issuance and verification for the posts API.
"""

import time
import uuid
from typing import Dict, Any, Optional

import jwt

from shared.logging import get_logger
from shared.errors import AuthenticationError


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Pull the token out of an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise AuthenticationError("Authorization token not provided")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Invalid authorization header format")

    return token.strip()


class TokenManager:
    """Issues signed tokens for users and resolves them back to a user id."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl_minutes: int = 60,
        issuer: str = "blog-api",
        leeway: int = 0
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl_seconds = ttl_minutes * 60
        self.issuer = issuer
        self.leeway = leeway
        self.logger = get_logger("api.auth.tokens")

    def issue_token(self, user_id: int) -> Dict[str, Any]:
        """Create a token whose subject is ``user_id``."""
        now = int(time.time())
        payload = {
            "iss": self.issuer,
            "sub": str(user_id),
            "iat": now,
            "nbf": now,
            "exp": now + self.ttl_seconds,
            "jti": uuid.uuid4().hex,
        }

        token = jwt.encode(payload, self.secret, algorithm=self.algorithm)
        self.logger.debug("Token issued", user_id=user_id, jti=payload["jti"])

        return {
            "access_token": token,
            "token_type": "Bearer",
            "expires_in": self.ttl_seconds,
        }

    def resolve_principal(self, token: str) -> int:
        """Return the user id a valid token was issued for."""
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                leeway=self.leeway,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError as e:
            self.logger.warning("Token verification failed", error=str(e))
            raise AuthenticationError("Token is invalid")

        try:
            return int(claims["sub"])
        except (TypeError, ValueError):
            raise AuthenticationError("Token is invalid", details={"reason": "non-numeric subject"})
