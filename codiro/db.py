"""
Database engine and session plumbing.

The auth flows write in three places: the OAuth callback (user, identity
and session rows in one unit), refresh (deleting an expired session) and
logout (deleting sessions). Each request gets one session from `get_db`;
it is committed when the handler returns normally and rolled back when the
handler raises, so a failed callback never leaves a half-created user.

Usage:
    from codiro.db import db

    db.initialize()
    with db.session() as session:
        SessionRepository(session).delete_expired(utc_now())
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import get_settings


class Base(DeclarativeBase):
    """Declarative base for the users, github_identities and sessions tables."""


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection."""

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """
    Build an engine for `url`.

    SQLite shares a single connection (StaticPool) so an in-memory database
    survives across requests; other backends get a pre-pinged QueuePool
    sized from settings.
    """
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        enable_sqlite_foreign_keys(engine)
        return engine

    settings = get_settings()
    return create_engine(
        url,
        echo=echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    # Rows stay readable after commit; handlers build responses from them
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


class DatabaseManager:
    """Owns the process-wide engine. Initialized once by the app startup hook."""

    def __init__(self) -> None:
        self.engine: Engine | None = None
        self.SessionLocal: sessionmaker[Session] | None = None

    def initialize(self, database_url: str | None = None) -> None:
        if self.engine is not None:
            return
        settings = get_settings()
        self.engine = create_db_engine(database_url or settings.database_url, echo=settings.debug)
        self.SessionLocal = create_session_factory(self.engine)

    def create_all_tables(self) -> None:
        from . import models  # noqa: F401  registers tables on Base.metadata

        Base.metadata.create_all(bind=self._require_engine())

    @contextmanager
    def session(self) -> Iterator[Session]:
        """One unit of work: commit on success, roll back on any exception."""
        self._require_engine()
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def health_check(self) -> dict:
        """Round-trip `SELECT 1`; returns healthy flag, latency and error text."""
        if self.engine is None:
            return {"healthy": False, "latency_ms": 0, "error": "Database not initialized"}

        started = time.perf_counter()
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            error = None
        except Exception as e:
            error = str(e)
        latency_ms = round((time.perf_counter() - started) * 1000, 2)
        return {"healthy": error is None, "latency_ms": latency_ms, "error": error}

    def _require_engine(self) -> Engine:
        if self.engine is None:
            raise RuntimeError("DatabaseManager not initialized. Call initialize() first.")
        return self.engine


db = DatabaseManager()


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding the request's unit of work."""
    with db.session() as session:
        yield session


__all__ = [
    "Base",
    "DatabaseManager",
    "create_db_engine",
    "create_session_factory",
    "db",
    "enable_sqlite_foreign_keys",
    "get_db",
]
