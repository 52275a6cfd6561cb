"""
Repository pattern implementations for data access.

Usage:
    from codiro.repositories import UserRepository
    from codiro.db import db

    with db.session() as session:
        result = UserRepository(session).upsert_from_provider(profile)
"""

from .base import BaseRepository
from .session_repository import SessionRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "SessionRepository",
    "UserRepository",
]
