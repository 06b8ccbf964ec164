"""Database models."""

from warrantycheck.models.user import UserAccount
from warrantycheck.models.session import AuthSession

__all__ = [
    "UserAccount",
    "AuthSession",
]
