"""Shared sport, game-type and rating-change vocabularies.

This module is the single source of truth for the string values stored in
the rating tables and accepted by the rating service.
"""

from __future__ import annotations

PICKLEBALL = "PICKLEBALL"
TENNIS = "TENNIS"
PADEL = "PADEL"

SPORTS: tuple[str, ...] = (PICKLEBALL, TENNIS, PADEL)

SINGLES = "SINGLES"
DOUBLES = "DOUBLES"

GAME_TYPES: tuple[str, ...] = (SINGLES, DOUBLES)

# Reasons recorded on rating_history rows.
INITIAL_PLACEMENT = "INITIAL_PLACEMENT"
MATCH_WIN = "MATCH_WIN"
MATCH_LOSS = "MATCH_LOSS"
WALKOVER_WIN = "WALKOVER_WIN"
WALKOVER_LOSS = "WALKOVER_LOSS"
MANUAL_ADJUSTMENT = "MANUAL_ADJUSTMENT"
RECALCULATION = "RECALCULATION"
SEASON_RESET = "SEASON_RESET"

RATING_CHANGE_REASONS: tuple[str, ...] = (
    MATCH_WIN,
    MATCH_LOSS,
    WALKOVER_WIN,
    WALKOVER_LOSS,
    MANUAL_ADJUSTMENT,
    RECALCULATION,
    INITIAL_PLACEMENT,
    SEASON_RESET,
)


def normalize_sport(raw: str) -> str:
    """Return the canonical sport name, raising ValueError for unknown sports."""
    sport = raw.strip().upper()
    if sport not in SPORTS:
        raise ValueError(f"Unknown sport '{raw}'. Expected one of {SPORTS}")
    return sport


def outcome_reason(won: bool) -> str:
    """
    History reason for one side of a rated match.

    Walkovers use the same reasons as played matches and are told apart by
    their history note. WALKOVER_WIN / WALKOVER_LOSS remain valid values for
    rows written by other tools.
    """
    return MATCH_WIN if won else MATCH_LOSS
