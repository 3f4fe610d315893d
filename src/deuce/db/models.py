"""
SQLAlchemy ORM models for DMR.

Only the tables the rating engine owns or reads are defined here. Users,
seasons and matches belong to the surrounding league application and are
referenced by their string identifiers without foreign keys.

Key design decisions:
- One player_ratings row per (player, season, sport, game type)
- rating_history is an append-only ledger; reversal annotates, never deletes
- initial_ratings is written by the onboarding questionnaire and only read here
- Parameter sets are versioned so a rating run can be reproduced

Tables:
- player_ratings: Current rating state per player identity
- rating_history: Audit trail of every rating-affecting event
- initial_ratings: Externally computed starting ratings
- rating_parameter_sets: Persisted algorithm parameter bundles
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns below."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# =============================================================================
# Rating Models
# =============================================================================

class PlayerRating(Base):
    """
    Current Glicko-2 state for one player in one season, sport and game type.

    Ratings are created lazily the first time a player appears in a rated
    match. Only the rating processors, the inactivity adjuster and match
    reversal mutate these rows.
    """
    __tablename__ = "player_ratings"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Identity key
    player_id: Mapped[str] = mapped_column(String(64), nullable=False)
    season_id: Mapped[str] = mapped_column(String(64), nullable=False)
    sport: Mapped[str] = mapped_column(String(20), nullable=False)
    game_type: Mapped[str] = mapped_column(String(10), nullable=False)

    # Glicko-2 state (display scale)
    rating: Mapped[float] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=False, default=1500.0)
    rating_deviation: Mapped[float] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=False, default=350.0)
    volatility: Mapped[float] = mapped_column(Float, nullable=False, default=0.06)

    matches_played: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_provisional: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Peak / low tracking
    peak_rating: Mapped[Optional[float]] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=True)
    peak_rating_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    lowest_rating: Mapped[Optional[float]] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=True)

    # Date of the last rated match (drives inactivity adjustment)
    last_updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    last_match_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    # RD as of the last rated match; inactivity growth is measured from here
    rd_at_last_match: Mapped[Optional[float]] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    history: Mapped[list["RatingHistory"]] = relationship(
        back_populates="player_rating",
        order_by="RatingHistory.id",
    )

    __table_args__ = (
        UniqueConstraint(
            "player_id", "season_id", "sport", "game_type",
            name="uq_player_ratings_identity",
        ),
        CheckConstraint("volatility > 0", name="ck_player_ratings_volatility_positive"),
        Index("idx_player_ratings_last_updated", "last_updated_at"),
        Index("idx_player_ratings_season", "season_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<PlayerRating(player_id='{self.player_id}', {self.game_type}, "
            f"rating={self.rating}, rd={self.rating_deviation})>"
        )


class RatingHistory(Base):
    """
    One ledger row per rating-affecting event.

    rating_after - rating_before always equals delta. Rows are kept for audit
    even when the match they belong to is voided; reversal only appends a
    marker to the notes.
    """
    __tablename__ = "rating_history"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_rating_id: Mapped[int] = mapped_column(
        ForeignKey("player_ratings.id"), nullable=False, index=True
    )
    match_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    rating_before: Mapped[float] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=False)
    rating_after: Mapped[float] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=False)
    delta: Mapped[float] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=False)
    rd_before: Mapped[Optional[float]] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=True)
    rd_after: Mapped[Optional[float]] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=True)

    # One of deuce.sports.RATING_CHANGE_REASONS
    reason: Mapped[str] = mapped_column(String(30), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    player_rating: Mapped["PlayerRating"] = relationship(back_populates="history")

    def __repr__(self) -> str:
        return (
            f"<RatingHistory(rating_id={self.player_rating_id}, match_id={self.match_id}, "
            f"{self.rating_before} -> {self.rating_after}, reason={self.reason})>"
        )


class InitialRating(Base):
    """
    Starting rating computed outside the engine (skill questionnaire).

    Read once, when a player's first rating row for a game type is created.
    """
    __tablename__ = "initial_ratings"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    singles: Mapped[Optional[float]] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=True)
    doubles: Mapped[Optional[float]] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=True)
    rd: Mapped[Optional[float]] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<InitialRating(player_id='{self.player_id}', singles={self.singles}, "
            f"doubles={self.doubles}, rd={self.rd})>"
        )


class RatingParameterSet(Base):
    """Persisted rating parameter sets (defaults and tuned variants)."""

    __tablename__ = "rating_parameter_sets"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    params: Mapped[dict] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
    source: Mapped[str] = mapped_column(String(30), nullable=False, default="manual")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    __table_args__ = (
        Index("idx_rating_parameter_sets_active", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<RatingParameterSet(name='{self.name}', active={self.is_active})>"
