"""
Starting ratings for players entering a season.

A brand-new rating row is seeded from an external initial rating when one
exists (the onboarding skill questionnaire writes these to the
initial_ratings table), otherwise from the DMRParams defaults.

An initial rating source is any callable taking (session, player_id,
game_type) and returning a SeedRating or None, so callers can plug in a
different onboarding system without touching the store.
"""

from __future__ import annotations

from typing import NamedTuple, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from deuce.db.models import InitialRating
from deuce.sports import DOUBLES


class SeedRating(NamedTuple):
    """Externally supplied starting point. Missing parts fall back to defaults."""
    rating: Optional[float]
    rd: Optional[float]


class InitialRatingSource(Protocol):
    def __call__(self, session: Session, player_id: str, game_type: str) -> Optional[SeedRating]:
        ...


def questionnaire_initial_rating(
    session: Session,
    player_id: str,
    game_type: str,
) -> Optional[SeedRating]:
    """
    Latest completed questionnaire result for the player.

    Doubles ratings use the doubles estimate, everything else the singles one.
    """
    stmt = (
        select(InitialRating)
        .where(InitialRating.player_id == player_id)
        .where(InitialRating.completed_at.isnot(None))
        .order_by(InitialRating.completed_at.desc(), InitialRating.id.desc())
        .limit(1)
    )
    result = session.execute(stmt).scalar_one_or_none()
    if result is None:
        return None

    rating = result.doubles if game_type == DOUBLES else result.singles
    return SeedRating(rating=rating, rd=result.rd)


def no_initial_rating(session: Session, player_id: str, game_type: str) -> Optional[SeedRating]:
    """Source that always defers to the defaults."""
    return None
