"""
SQLAlchemy models for Codiro.

Usage:
    from codiro.models import User, GitHubIdentity, AuthSession
"""

from .base import Base
from .session import AuthSession
from .user import GitHubIdentity, User

__all__ = [
    "Base",
    "User",
    "GitHubIdentity",
    "AuthSession",
]
