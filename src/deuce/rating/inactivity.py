"""
RD growth for players who stop playing.

Run once a day. A rating that has not been touched by a match for at least
inactivity_threshold_days gets its RD raised in proportion to the number of
threshold periods elapsed (fractions included), so the next match result
moves it further. last_updated_at is left alone: the sweep is not activity.

The increase is always measured from the RD the player had after their last
match (rd_at_last_match), never from the current RD, so re-running the sweep
with the same reference time leaves every rating where the first run put it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from deuce.db.models import utcnow
from deuce.rating.capping import round_rating
from deuce.rating.params import DMRParams
from deuce.rating.store import RatingStore

logger = logging.getLogger(__name__)


def inactivity_rd_increase(
    rd: float,
    days_inactive: int,
    threshold_days: int,
    increase_rate: float,
    min_increase: float,
) -> float:
    """
    RD increase for a player inactive for days_inactive whole days.

    Each elapsed threshold period adds rd * increase_rate, and at least
    min_increase. Partial periods count pro rata once the threshold has
    been reached.

    Examples:
        inactivity_rd_increase(100, 60, 30, 0.1, 5.0)  # 20.0
        inactivity_rd_increase(40, 60, 30, 0.1, 5.0)   # 10.0
        inactivity_rd_increase(100, 45, 30, 0.1, 5.0)  # 15.0
        inactivity_rd_increase(100, 29, 30, 0.1, 5.0)  # 0.0
    """
    if days_inactive < threshold_days:
        return 0.0
    periods = days_inactive / threshold_days
    return max(min_increase * periods, rd * increase_rate * periods)


class InactivityAdjuster:
    """Raises the RD of inactive ratings for one sport."""

    def __init__(self, params: DMRParams) -> None:
        self.params = params

    def adjust(
        self,
        store: RatingStore,
        season_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Apply inactivity RD growth to every eligible rating.

        Args:
            store: Store bound to the caller's unit of work
            season_id: Restrict the sweep to one season
            now: Reference time (defaults to current UTC time)

        Returns:
            Number of ratings whose RD changed
        """
        params = self.params
        now = now or utcnow()
        cutoff = now - timedelta(days=params.inactivity_threshold_days)

        candidates = store.find_inactive(cutoff, season_id=season_id)
        logger.debug("Found %d ratings inactive since before %s", len(candidates), cutoff)

        adjusted = 0
        for rating in candidates:
            # Rows with no recorded baseline start from their current RD
            if rating.rd_at_last_match is None:
                rating.rd_at_last_match = rating.rating_deviation
            base_rd = rating.rd_at_last_match

            days_inactive = (now - rating.last_updated_at).days
            increase = inactivity_rd_increase(
                base_rd,
                days_inactive,
                params.inactivity_threshold_days,
                params.inactivity_rd_increase_rate,
                params.min_rd_increase,
            )
            new_rd = round_rating(min(params.max_rd, base_rd + increase))
            if new_rd <= rating.rating_deviation:
                continue

            logger.debug(
                "Inactivity: player %s %s RD %s -> %s (%d days)",
                rating.player_id, rating.game_type,
                rating.rating_deviation, new_rd, days_inactive,
            )
            rating.rating_deviation = new_rd
            adjusted += 1

        logger.info(
            "Inactivity sweep for %s%s: adjusted %d of %d ratings",
            store.sport,
            f" season {season_id}" if season_id else "",
            adjusted,
            len(candidates),
        )
        return adjusted
