"""
DMR (Deuce Match Rating) rating system module.

Implements a Glicko-2 based rating engine for racquet sports with:
- Margin-of-victory score factor (sets and points)
- RD-relative rating change caps
- Doubles team decomposition weighted by each partner's RD
- Inactivity RD growth
- Reversible, append-only rating history
- Persisted, versioned parameter sets
"""

from deuce.rating.errors import DMRError, InvalidMatchDataError, PlayerNotFoundError
from deuce.rating.params import DMRParams
from deuce.rating.params_store import get_active_params, get_params_by_name, persist_params
from deuce.rating.seeding import SeedRating, no_initial_rating, questionnaire_initial_rating
from deuce.rating.service import DMRRatingService
from deuce.rating.types import (
    DoublesMatchInput,
    DoublesRatingResult,
    MatchRatingResult,
    RatingUpdate,
    SetScore,
    SinglesMatchInput,
)

__all__ = [
    "DMRError",
    "InvalidMatchDataError",
    "PlayerNotFoundError",
    "DMRParams",
    "get_active_params",
    "get_params_by_name",
    "persist_params",
    "SeedRating",
    "no_initial_rating",
    "questionnaire_initial_rating",
    "DMRRatingService",
    "DoublesMatchInput",
    "DoublesRatingResult",
    "MatchRatingResult",
    "RatingUpdate",
    "SetScore",
    "SinglesMatchInput",
]
