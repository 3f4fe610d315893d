"""
DMR rating service: the entry point the league application calls.

One service instance is bound to one sport and one immutable DMRParams
bundle. Every write operation opens its own unit of work, so a match is
either fully rated (all participants plus history) or not at all.

Usage:
    from deuce.db import get_session_factory
    from deuce.rating import DMRRatingService, SetScore, SinglesMatchInput

    service = DMRRatingService.from_session_factory(get_session_factory())
    result = service.process_singles_match(
        SinglesMatchInput(
            winner_id="u1",
            loser_id="u2",
            set_scores=[SetScore(11, 5), SetScore(11, 7)],
            season_id="2026-fall",
            match_id="m-42",
        )
    )
    print(result.winner.delta, result.loser.delta)
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import sessionmaker

from deuce.db.models import PlayerRating, RatingHistory
from deuce.db.session import unit_of_work
from deuce.rating import reversal
from deuce.rating.doubles import DoublesProcessor
from deuce.rating.glicko2 import confidence_interval, win_probability
from deuce.rating.inactivity import InactivityAdjuster
from deuce.rating.params import DMRParams
from deuce.rating.params_store import DEFAULT_PARAMS_VERSION, get_active_params, get_params_by_name
from deuce.rating.seeding import InitialRatingSource, questionnaire_initial_rating
from deuce.rating.singles import SinglesProcessor
from deuce.rating.store import RatingStore
from deuce.rating.types import (
    DoublesMatchInput,
    DoublesRatingResult,
    MatchRatingResult,
    SinglesMatchInput,
)
from deuce.rating.validation import get_score_validator
from deuce.sports import PICKLEBALL, normalize_sport

logger = logging.getLogger(__name__)


class DMRRatingService:
    """
    Rates matches and maintains ratings for one sport.

    Usage - explicit parameters (tests, tuning runs):

        service = DMRRatingService(session_factory, sport="TENNIS", params=DMRParams(cap_k=0.1))

    Usage - parameters from the database:

        service = DMRRatingService.from_session_factory(session_factory)
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        sport: str = PICKLEBALL,
        params: Optional[DMRParams] = None,
        initial_rating_source: InitialRatingSource = questionnaire_initial_rating,
        params_version: str = DEFAULT_PARAMS_VERSION,
    ) -> None:
        self.session_factory = session_factory
        self.sport = normalize_sport(sport)
        self.params = params or DMRParams()
        self.params_version = params_version
        self.initial_rating_source = initial_rating_source

        validator = get_score_validator(self.sport, self.params.max_sets)
        self.singles = SinglesProcessor(self.params, validator)
        self.doubles = DoublesProcessor(self.params, validator)
        self.inactivity = InactivityAdjuster(self.params)

    @classmethod
    def from_session_factory(
        cls,
        session_factory: sessionmaker,
        sport: str = PICKLEBALL,
        params_name: Optional[str] = None,
        initial_rating_source: InitialRatingSource = questionnaire_initial_rating,
    ) -> "DMRRatingService":
        """
        Instantiate using a persisted parameter set.

        The named set when params_name is given, otherwise the active set
        (or the defaults when none is active).
        """
        with unit_of_work(session_factory) as session:
            if params_name:
                params, version = get_params_by_name(session, params_name)
            else:
                params, version = get_active_params(session)

        logger.info("Rating service for %s using parameter set '%s'", sport, version)
        return cls(
            session_factory,
            sport=sport,
            params=params,
            initial_rating_source=initial_rating_source,
            params_version=version,
        )

    def _store(self, session) -> RatingStore:
        return RatingStore(session, self.params, self.sport, self.initial_rating_source)

    # ------------------------------------------------------------------
    # Match processing
    # ------------------------------------------------------------------

    def process_singles_match(self, match: SinglesMatchInput) -> MatchRatingResult:
        """
        Rate a completed singles match.

        Raises:
            InvalidMatchDataError: Bad participants or scores (nothing written)
        """
        with unit_of_work(self.session_factory) as session:
            return self.singles.process(self._store(session), match)

    def process_doubles_match(self, match: DoublesMatchInput) -> DoublesRatingResult:
        """
        Rate a completed doubles match.

        Raises:
            InvalidMatchDataError: Bad teams or scores (nothing written)
        """
        with unit_of_work(self.session_factory) as session:
            return self.doubles.process(self._store(session), match)

    def reverse_match_ratings(self, match_id: str, now: Optional[datetime] = None) -> int:
        """Void a match's rating changes. Returns the number of rows reversed."""
        with unit_of_work(self.session_factory) as session:
            return reversal.reverse_match_ratings(self._store(session), match_id, now=now)

    def adjust_for_inactivity(
        self,
        season_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Grow the RD of inactive players. Returns the number of ratings adjusted."""
        with unit_of_work(self.session_factory) as session:
            return self.inactivity.adjust(self._store(session), season_id=season_id, now=now)

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def calculate_win_probability(
        self,
        rating_a: float,
        rd_a: float,
        rating_b: float,
        rd_b: float,
    ) -> float:
        return win_probability(rating_a, rd_a, rating_b, rd_b)

    def get_confidence_interval(self, rating: float, rd: float) -> tuple[float, float]:
        return confidence_interval(rating, rd)

    def get_player_rating(self, player_id: str, season_id: str, game_type: str) -> PlayerRating:
        """
        Current rating row, without creating one.

        The row is detached from its session before the commit, so its loaded
        values stay readable whatever expire_on_commit the factory uses.

        Raises:
            PlayerNotFoundError: If the player has no rating for this key
        """
        with unit_of_work(self.session_factory) as session:
            rating = self._store(session).get(player_id, season_id, game_type)
            session.expunge(rating)
        return rating

    def get_rating_history(
        self,
        player_id: str,
        season_id: str,
        game_type: str,
        limit: Optional[int] = None,
    ) -> list[RatingHistory]:
        """History rows for a player, newest first, detached from the session."""
        with unit_of_work(self.session_factory) as session:
            history = self._store(session).history_for_player(player_id, season_id, game_type, limit=limit)
            session.expunge_all()
        return history
