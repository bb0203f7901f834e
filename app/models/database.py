"""Database setup and session management using SQLAlchemy 2.0.

This module builds the database engine and session factory used by the
survey and response stores. Both are created once during application
startup and handed to the stores, so no connection state lives at module
level.
"""

import threading
from contextlib import AbstractContextManager, nullcontext

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings


class Base(DeclarativeBase):
    """Base class for all ORM models.

    Uses SQLAlchemy 2.0's DeclarativeBase for modern type-safe models.
    All models should inherit from this class.
    """
    pass


def create_db_engine(settings: Settings) -> Engine:
    """Create the engine for the configured database.

    Args:
        settings: Application settings

    Returns:
        Engine: SQLAlchemy engine

    Note:
        SQLite doesn't support pool_size/max_overflow. An in-memory SQLite
        database is only visible to a single connection, so it is pinned
        with StaticPool and shared across threads.
    """
    url = settings.database_url
    engine_kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
    }

    if url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_size"] = settings.database_pool_size
        engine_kwargs["max_overflow"] = settings.database_max_overflow

    return create_engine(url, **engine_kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create the session factory bound to an engine.

    Args:
        engine: SQLAlchemy engine

    Returns:
        sessionmaker: Factory producing Session objects
    """
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,  # Prevent lazy loading after commit
    )


def create_connection_lock(engine: Engine) -> AbstractContextManager:
    """Create the lock the stores hold around each database call.

    An in-memory SQLite database lives on the single connection kept by
    StaticPool, and every thread shares it. Calls on that connection must
    not interleave, or concurrent commits fail and increments are lost.
    Pooled engines hand each session its own connection and need no lock.

    Args:
        engine: SQLAlchemy engine

    Returns:
        A threading.Lock for StaticPool engines, otherwise a no-op context
    """
    if isinstance(engine.pool, StaticPool):
        return threading.Lock()
    return nullcontext()
