"""
Pytest configuration and fixtures.

This file is automatically loaded by pytest and provides
shared fixtures for all tests.
"""

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from deuce.db.models import Base, PlayerRating
from deuce.rating.params import DMRParams
from deuce.rating.service import DMRRatingService
from deuce.sports import PICKLEBALL, SINGLES

SEASON = "2026-fall"


@pytest.fixture
def test_engine():
    """
    Create a test database engine.

    Uses SQLite in-memory for fast tests that don't need
    PostgreSQL-specific features. StaticPool keeps the single in-memory
    database alive across the sessions one test opens.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory configured like the production one."""
    return sessionmaker(
        bind=test_engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
def db_session(session_factory):
    """A plain session for arranging and inspecting rows directly."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def params():
    return DMRParams()


@pytest.fixture
def service(session_factory, params):
    """Pickleball rating service over the test database."""
    return DMRRatingService(session_factory, sport=PICKLEBALL, params=params)


@pytest.fixture
def make_rating(db_session):
    """
    Insert a rating row directly and return it.

    Example:
        row = make_rating("p1", rating=1600, rd=120)
    """
    def _make(
        player_id: str,
        rating: float = 1500.0,
        rd: float = 350.0,
        volatility: float = 0.06,
        matches_played: int = 0,
        last_updated_at: datetime | None = None,
        sport: str = PICKLEBALL,
        game_type: str = SINGLES,
        season_id: str = SEASON,
    ) -> PlayerRating:
        row = PlayerRating(
            player_id=player_id,
            season_id=season_id,
            sport=sport,
            game_type=game_type,
            rating=rating,
            rating_deviation=rd,
            volatility=volatility,
            matches_played=matches_played,
            is_provisional=matches_played < 10,
            peak_rating=rating,
            lowest_rating=rating,
            last_updated_at=last_updated_at,
        )
        db_session.add(row)
        db_session.commit()
        return row

    return _make
