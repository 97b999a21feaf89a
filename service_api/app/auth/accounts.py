"""
Account operations: registration, login and principal lookup.
"""

from typing import Optional

from shared.logging import get_logger, set_user_context
from shared.errors import AuthenticationError, NotFoundError, ValidationError
from shared.models import ApiResponse, User
from ..schemas import RegisterRequest, LoginRequest
from .tokens import TokenManager, extract_bearer_token
from .passwords import PasswordHasher


class AccountHandler:
    """Registers users, logs them in and resolves request principals."""

    def __init__(self, store, tokens: TokenManager, passwords: PasswordHasher):
        self.store = store
        self.tokens = tokens
        self.passwords = passwords
        self.logger = get_logger("api.accounts")

    async def register(self, request: RegisterRequest) -> ApiResponse:
        if await self.store.get_user_by_email(request.email):
            raise ValidationError(errors={"email": ["The email has already been taken."]})

        user = await self.store.create_user(
            request.name,
            request.email,
            self.passwords.hash(request.password),
        )
        token = self.tokens.issue_token(user.id)

        self.logger.info("User registered", user_id=user.id)

        return ApiResponse(
            success=True,
            message="User registered successfully",
            user=user.public(),
            token=token["access_token"],
            token_type=token["token_type"],
            expires_in=token["expires_in"],
        )

    async def login(self, request: LoginRequest) -> ApiResponse:
        user = await self.store.get_user_by_email(request.email)
        if user is None or not self.passwords.verify(request.password, user.password_hash):
            self.logger.info("Login rejected", email=request.email)
            raise AuthenticationError("Invalid credentials")

        token = self.tokens.issue_token(user.id)

        self.logger.info("User logged in", user_id=user.id)

        return ApiResponse(
            success=True,
            message="Login successful",
            user=user.public(),
            token=token["access_token"],
            token_type=token["token_type"],
            expires_in=token["expires_in"],
        )

    async def authenticate(self, authorization: Optional[str]) -> User:
        """Resolve the ``Authorization`` header to an existing user."""
        user_id = self.tokens.resolve_principal(extract_bearer_token(authorization))

        user = await self.store.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found", details={"user_id": user_id})

        set_user_context(user.id)
        return user

    def me(self, user: User) -> ApiResponse:
        return ApiResponse(success=True, message="User retrieved successfully", user=user.public())

    def logout(self, user: User) -> ApiResponse:
        # Tokens are stateless; the client discards its copy.
        self.logger.info("User logged out", user_id=user.id)
        return ApiResponse(success=True, message="Successfully logged out")
