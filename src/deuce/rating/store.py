"""
Rating store: the persistence boundary of the rating engine.

Wraps one SQLAlchemy session (one unit of work) and provides everything the
processors need:
1. get-or-create a player's rating row, seeding new rows and logging an
   INITIAL_PLACEMENT history entry
2. apply a computed RatingUpdate and append its history row
3. queries for reversal, inactivity and history reads

Rows are read with SELECT ... FOR UPDATE so two matches touching the same
player serialize on that row. Multi-player loads lock in sorted player-id
order to avoid deadlocks between concurrent doubles matches. The store never
commits; the caller's unit of work does.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from deuce.db.models import PlayerRating, RatingHistory, utcnow
from deuce.rating.errors import PlayerNotFoundError
from deuce.rating.params import DMRParams
from deuce.rating.seeding import InitialRatingSource, questionnaire_initial_rating
from deuce.rating.types import RatingUpdate
from deuce.sports import INITIAL_PLACEMENT

logger = logging.getLogger(__name__)


class RatingStore:
    """
    Reads and writes player_ratings and rating_history for one sport.

    Usage:
        with unit_of_work(session_factory) as session:
            store = RatingStore(session, params, sport="PICKLEBALL")
            rating = store.get_or_create("user-1", "season-1", "SINGLES")
    """

    def __init__(
        self,
        session: Session,
        params: DMRParams,
        sport: str,
        initial_rating_source: InitialRatingSource = questionnaire_initial_rating,
    ) -> None:
        self.session = session
        self.params = params
        self.sport = sport
        self.initial_rating_source = initial_rating_source

    # ------------------------------------------------------------------
    # Player ratings
    # ------------------------------------------------------------------

    def find(
        self,
        player_id: str,
        season_id: str,
        game_type: str,
        for_update: bool = True,
    ) -> Optional[PlayerRating]:
        """Load a rating row by identity key, or None."""
        stmt = select(PlayerRating).where(
            PlayerRating.player_id == player_id,
            PlayerRating.season_id == season_id,
            PlayerRating.sport == self.sport,
            PlayerRating.game_type == game_type,
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def get(self, player_id: str, season_id: str, game_type: str) -> PlayerRating:
        """
        Load a rating row that must already exist.

        Raises:
            PlayerNotFoundError: If the player has no rating for this key
        """
        rating = self.find(player_id, season_id, game_type, for_update=False)
        if rating is None:
            raise PlayerNotFoundError(
                f"No {self.sport} {game_type} rating for player {player_id} in season {season_id}"
            )
        return rating

    def get_or_create(self, player_id: str, season_id: str, game_type: str) -> PlayerRating:
        """
        Load a player's rating row, creating and seeding it on first use.

        New rows start from the initial rating source when it has a value
        for the player, otherwise from the defaults, and get an
        INITIAL_PLACEMENT history entry.
        """
        rating = self.find(player_id, season_id, game_type)
        if rating is not None:
            return rating
        return self._create(player_id, season_id, game_type)

    def get_or_create_many(
        self,
        player_ids: Iterable[str],
        season_id: str,
        game_type: str,
    ) -> dict[str, PlayerRating]:
        """get_or_create for several players, locking rows in sorted id order."""
        return {
            player_id: self.get_or_create(player_id, season_id, game_type)
            for player_id in sorted(set(player_ids))
        }

    def _create(self, player_id: str, season_id: str, game_type: str) -> PlayerRating:
        params = self.params
        seed = self.initial_rating_source(self.session, player_id, game_type)

        initial_rating = params.default_rating
        initial_rd = params.default_rd
        source = "defaults"
        if seed is not None:
            if seed.rating:
                initial_rating = float(seed.rating)
                source = "questionnaire"
            if seed.rd:
                initial_rd = params.clamp_rd(float(seed.rd))

        now = utcnow()
        rating = PlayerRating(
            player_id=player_id,
            season_id=season_id,
            sport=self.sport,
            game_type=game_type,
            rating=initial_rating,
            rating_deviation=initial_rd,
            volatility=params.default_volatility,
            matches_played=0,
            is_provisional=True,
            peak_rating=initial_rating,
            peak_rating_date=now,
            lowest_rating=initial_rating,
        )
        self.session.add(rating)
        # Flush to get the id for the history row
        self.session.flush()

        self.session.add(
            RatingHistory(
                player_rating_id=rating.id,
                rating_before=params.default_rating,
                rating_after=initial_rating,
                delta=initial_rating - params.default_rating,
                rd_before=params.default_rd,
                rd_after=initial_rd,
                reason=INITIAL_PLACEMENT,
                notes=f"Initial rating from {source}",
            )
        )

        logger.info(
            "Created initial %s rating for player %s: %s (rd=%s, from %s)",
            game_type, player_id, initial_rating, initial_rd, source,
        )
        return rating

    def apply_update(
        self,
        rating: PlayerRating,
        update: RatingUpdate,
        reason: str,
        match_id: Optional[str],
        match_date: datetime,
        notes: Optional[str] = None,
    ) -> RatingHistory:
        """
        Write a computed update to the rating row and append its history row.

        Also maintains the provisional flag and peak/lowest tracking.
        """
        rating.rating = update.new_rating
        rating.rating_deviation = update.new_rd
        rating.rd_at_last_match = update.new_rd
        rating.volatility = update.new_volatility
        rating.matches_played = update.matches_played
        rating.is_provisional = update.matches_played < self.params.provisional_threshold
        rating.last_updated_at = match_date
        if match_id:
            rating.last_match_id = match_id

        if rating.peak_rating is None or update.new_rating > rating.peak_rating:
            rating.peak_rating = update.new_rating
            rating.peak_rating_date = match_date
        if rating.lowest_rating is None or update.new_rating < rating.lowest_rating:
            rating.lowest_rating = update.new_rating

        entry = RatingHistory(
            player_rating_id=rating.id,
            match_id=match_id,
            rating_before=update.old_rating,
            rating_after=update.new_rating,
            delta=update.new_rating - update.old_rating,
            rd_before=update.old_rd,
            rd_after=update.new_rd,
            reason=reason,
            notes=notes,
        )
        self.session.add(entry)
        return entry

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def history_for_match(self, match_id: str) -> list[RatingHistory]:
        """All history rows written for a match, oldest first."""
        stmt = (
            select(RatingHistory)
            .join(PlayerRating, RatingHistory.player_rating_id == PlayerRating.id)
            .where(RatingHistory.match_id == match_id)
            .where(PlayerRating.sport == self.sport)
            .order_by(RatingHistory.id.asc())
        )
        return list(self.session.execute(stmt).scalars())

    def history_for_player(
        self,
        player_id: str,
        season_id: str,
        game_type: str,
        limit: Optional[int] = None,
    ) -> list[RatingHistory]:
        """A player's rating history for one season and game type, newest first."""
        rating = self.get(player_id, season_id, game_type)
        stmt = (
            select(RatingHistory)
            .where(RatingHistory.player_rating_id == rating.id)
            .order_by(RatingHistory.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars())

    def find_inactive(
        self,
        cutoff: datetime,
        season_id: Optional[str] = None,
    ) -> list[PlayerRating]:
        """
        Ratings whose last match precedes the cutoff and whose RD can still grow.

        Players who have never completed a rated match (last_updated_at is
        NULL) are skipped.
        """
        stmt = (
            select(PlayerRating)
            .where(PlayerRating.sport == self.sport)
            .where(PlayerRating.last_updated_at.isnot(None))
            .where(PlayerRating.last_updated_at < cutoff)
            .where(PlayerRating.rating_deviation < self.params.max_rd)
        )
        if season_id:
            stmt = stmt.where(PlayerRating.season_id == season_id)
        stmt = stmt.order_by(PlayerRating.id.asc()).with_for_update()
        return list(self.session.execute(stmt).scalars())
