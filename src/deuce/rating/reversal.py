"""
Voiding a match's rating changes.

Used when a match is disputed or cancelled after it was rated. Every history
row the match wrote is rolled back onto its rating row and then annotated
with the reversed marker, which keeps the ledger append-only while making a
second reversal of the same match a no-op.

Only rating, RD and matches played are restored. Volatility and peak/lowest
tracking keep their post-match values, and reversing a match that later
matches built on does not replay those later matches.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from deuce.db.models import utcnow
from deuce.rating.constants import REVERSED_MARKER
from deuce.rating.store import RatingStore

logger = logging.getLogger(__name__)


def reverse_match_ratings(
    store: RatingStore,
    match_id: str,
    now: Optional[datetime] = None,
) -> int:
    """
    Restore every rating touched by a match to its pre-match values.

    Args:
        store: Store bound to the caller's unit of work
        match_id: Match whose changes are voided
        now: Timestamp written to last_updated_at (defaults to current UTC time)

    Returns:
        Number of history rows reversed (0 when there was nothing to reverse)
    """
    now = now or utcnow()
    entries = [
        entry for entry in store.history_for_match(match_id)
        if REVERSED_MARKER not in (entry.notes or "")
    ]

    if not entries:
        logger.warning("No rating history to reverse for match %s", match_id)
        return 0

    threshold = store.params.provisional_threshold
    for entry in entries:
        rating = entry.player_rating
        rating.rating = entry.rating_before
        rating.rating_deviation = entry.rd_before
        rating.rd_at_last_match = entry.rd_before
        rating.matches_played = max(0, rating.matches_played - 1)
        rating.is_provisional = rating.matches_played < threshold
        rating.last_updated_at = now

        entry.notes = f"{entry.notes} {REVERSED_MARKER}" if entry.notes else REVERSED_MARKER

        logger.debug(
            "Reversed match %s for player %s: rating %s -> %s",
            match_id, rating.player_id, entry.rating_after, entry.rating_before,
        )

    logger.info("Reversed %d rating changes for match %s", len(entries), match_id)
    return len(entries)
