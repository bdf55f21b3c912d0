"""Data models for the user roster."""

from pyroster.models.user import User

__all__ = [
    "User",
]
