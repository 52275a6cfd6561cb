"""
SQLAlchemy ORM models for the backend.

Re-exports the models from codiro.models.
"""

from codiro.models import AuthSession, Base, GitHubIdentity, User

__all__ = [
    "Base",
    "User",
    "GitHubIdentity",
    "AuthSession",
]
