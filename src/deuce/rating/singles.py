"""
Singles (1v1) rating updates.

Flow for one match:
1. Validate everything up front - no store access until the match is known
   to be ratable
2. Load or create both players' SINGLES ratings
3. Compute the margin-of-victory score factor (1.0 for walkovers)
4. Run Glicko-2 once per player against the other's pre-match values
5. Scale the raw change by the score factor and dampening, cap it against the
   player's own RD, round to whole rating points
6. Write both players and their history rows in the caller's unit of work
"""

from __future__ import annotations

import logging

from deuce.db.models import PlayerRating, utcnow
from deuce.rating.capping import cap_rating_change, round_rating, scale_rating_change
from deuce.rating.constants import WALKOVER_NOTE
from deuce.rating.errors import InvalidMatchDataError
from deuce.rating.glicko2 import (
    Glicko2Result,
    Observation,
    compute_new_rating,
    scale_down,
    scale_down_rd,
    scale_up,
    scale_up_rd,
)
from deuce.rating.margin import SetTally, calculate_score_factor, tally_set_scores
from deuce.rating.params import DMRParams
from deuce.rating.store import RatingStore
from deuce.rating.types import MatchRatingResult, RatingUpdate, SinglesMatchInput
from deuce.rating.validation import ScoreValidator
from deuce.sports import SINGLES, outcome_reason

logger = logging.getLogger(__name__)


def rate_one_game(
    rating: float,
    rd: float,
    volatility: float,
    opponent_rating: float,
    opponent_rd: float,
    score: float,
    params: DMRParams,
) -> Glicko2Result:
    """
    One Glicko-2 update against a single opponent, in display-scale units.

    The returned RD is scaled up but not clamped.
    """
    result = compute_new_rating(
        scale_down(rating),
        scale_down_rd(rd),
        volatility,
        [Observation(scale_down(opponent_rating), scale_down_rd(opponent_rd), score)],
        tau=params.tau,
        epsilon=params.epsilon,
        max_rd=params.max_rd,
        max_iterations=params.max_iterations,
    )
    return Glicko2Result(
        rating=scale_up(result.rating),
        rd=scale_up_rd(result.rd),
        volatility=result.volatility,
    )


class SinglesProcessor:
    """
    Computes and records rating changes for singles matches.

    Usage:
        processor = SinglesProcessor(params, get_score_validator("PICKLEBALL"))
        with unit_of_work(session_factory) as session:
            store = RatingStore(session, params, "PICKLEBALL")
            result = processor.process(store, match)
    """

    def __init__(self, params: DMRParams, validator: ScoreValidator) -> None:
        self.params = params
        self.validator = validator

    def validate(self, match: SinglesMatchInput) -> SetTally:
        """
        Check the match can be rated and tally its scores.

        Scores are read from the winner's perspective: score1 is the
        winner's column.

        Raises:
            InvalidMatchDataError: Self-play, bad scores, or the declared
                winner did not win more sets
        """
        if match.winner_id == match.loser_id:
            raise InvalidMatchDataError("A player cannot play against themselves")

        self.validator.validate(match.set_scores)

        tally = tally_set_scores(match.set_scores)
        if tally.sets1 <= tally.sets2:
            raise InvalidMatchDataError("Winner must have won more sets than loser")
        return tally

    def process(self, store: RatingStore, match: SinglesMatchInput) -> MatchRatingResult:
        params = self.params
        tally = self.validate(match)
        match_date = match.match_date or utcnow()

        ratings = store.get_or_create_many(
            (match.winner_id, match.loser_id), match.season_id, SINGLES
        )
        winner = ratings[match.winner_id]
        loser = ratings[match.loser_id]

        score_factor = calculate_score_factor(
            tally.sets1,
            tally.sets2,
            tally.points1,
            tally.points2,
            tally.num_sets,
            set_weight=params.set_weight,
            point_weight=params.point_weight,
            is_walkover=match.is_walkover,
        )

        winner_update = self._compute_update(winner, loser, 1.0, score_factor)
        loser_update = self._compute_update(loser, winner, 0.0, score_factor)

        notes = WALKOVER_NOTE if match.is_walkover else None
        store.apply_update(
            winner, winner_update, outcome_reason(True), match.match_id, match_date, notes=notes
        )
        store.apply_update(
            loser, loser_update, outcome_reason(False), match.match_id, match_date, notes=notes
        )

        logger.info(
            "Processed singles match %s: %s %+g, %s %+g (score factor %.3f)",
            match.match_id or "unknown",
            match.winner_id, winner_update.delta,
            match.loser_id, loser_update.delta,
            score_factor,
        )

        return MatchRatingResult(
            winner=winner_update,
            loser=loser_update,
            score_factor=score_factor,
        )

    def _compute_update(
        self,
        player: PlayerRating,
        opponent: PlayerRating,
        score: float,
        score_factor: float,
    ) -> RatingUpdate:
        """New state for one player, from pre-match values of both players."""
        params = self.params
        new = rate_one_game(
            player.rating,
            player.rating_deviation,
            player.volatility,
            opponent.rating,
            opponent.rating_deviation,
            score,
            params,
        )

        delta = scale_rating_change(new.rating - player.rating, score_factor, params)
        delta = cap_rating_change(delta, player.rating_deviation, params.cap_k, params.abs_max_delta)
        delta = round_rating(delta)

        return RatingUpdate(
            player_id=player.player_id,
            rating_id=player.id,
            old_rating=player.rating,
            new_rating=player.rating + delta,
            delta=delta,
            old_rd=player.rating_deviation,
            new_rd=params.clamp_rd(round_rating(new.rd)),
            old_volatility=player.volatility,
            new_volatility=new.volatility,
            matches_played=player.matches_played + 1,
        )
