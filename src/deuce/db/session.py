"""
Database session management for DMR.

Provides the SQLAlchemy engine and session factory with connection pooling
configured from config.py, plus the unit-of-work context manager the rating
service uses to make every match update atomic.

Usage:
    # As a context manager (recommended for scripts)
    from deuce.db import get_session

    with get_session() as session:
        ratings = session.query(PlayerRating).all()
        # Commits automatically on exit, rolls back on exception

    # With an explicit factory (tests, services)
    from deuce.db import unit_of_work

    with unit_of_work(session_factory) as session:
        ...
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from deuce.config import settings


def get_engine() -> Engine:
    """
    Build a pooled engine for settings.database_url.

    SQL is echoed only when LOG_LEVEL=DEBUG. Connections are pinged on
    checkout so a restarted database does not fail the next rating update.
    """
    return create_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
        echo=settings.log_level == "DEBUG",
    )


# Created on first use so importing the package never opens a connection
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def _get_engine() -> Engine:
    """Get or create the process-wide engine instance."""
    global _engine
    if _engine is None:
        _engine = get_engine()
    return _engine


def get_session_factory() -> sessionmaker:
    """
    Session factory bound to the configured database.

    autoflush is disabled so that rating rows read for update are only
    written when the unit of work flushes them.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=_get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


@contextmanager
def unit_of_work(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Run a block of work in one transaction.

    Commits on successful exit, rolls back on exception. Every participant
    update of a match happens inside one of these, so either all ratings move
    together or none do.

    Raises:
        Any exception from the wrapped block (after rollback)
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Context manager for sessions against the configured database.

    Example:
        with get_session() as session:
            rating = session.query(PlayerRating).filter_by(player_id="u1").first()
    """
    with unit_of_work(get_session_factory()) as session:
        yield session
