"""
Codiro Core Library.

Configuration, logging, database management, models and repositories
shared by the API backend.

Usage:
    # Database
    from codiro.db import db, get_db
    from codiro.models import User, GitHubIdentity, AuthSession
    from codiro.repositories import SessionRepository, UserRepository

    # Config
    from codiro.config import get_settings, Settings

    # Logging
    from codiro.logging import get_logger, configure_logging
"""

__version__ = "0.1.0"
