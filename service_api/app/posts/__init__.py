"""
Post CRUD handling for the posts API.
"""

from .handler import PostHandler

__all__ = ["PostHandler"]
