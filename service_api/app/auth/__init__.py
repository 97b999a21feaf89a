"""
Authentication for the posts API.

- tokens: HS256 bearer tokens and principal resolution.
- passwords: bcrypt password hashing.
- accounts: register, login and authenticated profile lookups.
"""

from .tokens import TokenManager, extract_bearer_token
from .passwords import PasswordHasher
from .accounts import AccountHandler

__all__ = ["TokenManager", "extract_bearer_token", "PasswordHasher", "AccountHandler"]
