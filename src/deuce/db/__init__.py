"""
Database module for DMR.

Provides SQLAlchemy ORM models and session management.

Usage:
    from deuce.db import get_session, PlayerRating

    with get_session() as session:
        ratings = session.query(PlayerRating).all()
"""

from deuce.db.models import (
    Base,
    PlayerRating,
    RatingHistory,
    InitialRating,
    RatingParameterSet,
)
from deuce.db.session import get_session, get_engine, get_session_factory, unit_of_work

__all__ = [
    # Base
    "Base",
    # Models
    "PlayerRating",
    "RatingHistory",
    "InitialRating",
    "RatingParameterSet",
    # Session
    "get_session",
    "get_engine",
    "get_session_factory",
    "unit_of_work",
]
