"""
Database session and base configuration.

Re-exports from codiro.db. Database initialization happens explicitly in
the application startup hook, NOT at import time.
"""

from codiro.db import Base, db, get_db

__all__ = ["Base", "db", "get_db"]
