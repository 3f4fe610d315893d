"""
Doubles (2v2) rating updates with RD-weighted distribution.

Each team is rated as one virtual player:
- team rating     = mean of the two players' ratings
- team RD         = root-mean-square of the two RDs (combined uncertainty)
- team volatility = mean of the two volatilities

Glicko-2 runs once per team against the other team's composite. The team's
rating change is then split between the partners in proportion to their RD,
so the partner the system knows least about absorbs more of the movement.

Individual RDs shrink by Bayesian composition with the information the team
gained (how much the team RD fell). When the team gained nothing, for
example because the composite was already at its floor, a plain linear
blend with the team's new RD is used instead. Both branches and their blend
factors are heuristics awaiting domain-expert review.
"""

from __future__ import annotations

import logging
import math
from typing import NamedTuple, Sequence

from deuce.db.models import PlayerRating, utcnow
from deuce.rating.capping import cap_rating_change, round_rating, scale_rating_change
from deuce.rating.constants import WALKOVER_NOTE
from deuce.rating.errors import InvalidMatchDataError
from deuce.rating.margin import SetTally, calculate_score_factor, tally_set_scores
from deuce.rating.params import DMRParams
from deuce.rating.singles import rate_one_game
from deuce.rating.store import RatingStore
from deuce.rating.types import DoublesMatchInput, DoublesRatingResult, RatingUpdate
from deuce.rating.validation import ScoreValidator
from deuce.sports import DOUBLES, outcome_reason

logger = logging.getLogger(__name__)


class TeamComposite(NamedTuple):
    """A doubles team seen as a single virtual player (display scale)."""
    rating: float
    rd: float
    volatility: float


class _Sides(NamedTuple):
    """Winner/loser split of a doubles match."""
    winner_ids: list[str]
    loser_ids: list[str]
    winner_sets: int
    loser_sets: int
    winner_points: int
    loser_points: int


def team_composite(players: Sequence[PlayerRating]) -> TeamComposite:
    """Mean rating, RMS RD and mean volatility of a team."""
    n = len(players)
    return TeamComposite(
        rating=sum(p.rating for p in players) / n,
        rd=math.sqrt(sum(p.rating_deviation ** 2 for p in players) / n),
        volatility=sum(p.volatility for p in players) / n,
    )


def update_doubles_rd(
    player_rd: float,
    team_updated_rd: float,
    team_initial_rd: float,
    blend_factor: float,
    min_rd: float,
    max_rd: float,
) -> float:
    """
    New individual RD after a doubles match.

    Args:
        player_rd: The player's pre-match RD
        team_updated_rd: The team composite RD after the match
        team_initial_rd: The team composite RD before the match
        blend_factor: Weight of the team information
        min_rd: Lower RD bound
        max_rd: Upper RD bound

    Returns:
        Unrounded RD within [min_rd, max_rd]
    """
    rd_reduction = max(0.0, team_initial_rd - team_updated_rd)

    if rd_reduction > 0:
        variance_prior = player_rd ** 2
        variance_new_info = (team_initial_rd ** 2) * blend_factor
        if variance_new_info > 0:
            variance_post = 1 / (1 / variance_prior + 1 / variance_new_info)
            return max(min_rd, min(max_rd, math.sqrt(variance_post)))

    # No information gained: linear blend toward the team's RD
    new_rd = (1 - blend_factor) * player_rd + blend_factor * team_updated_rd
    return max(min_rd, min(max_rd, new_rd))


class DoublesProcessor:
    """
    Computes and records rating changes for doubles matches.

    set_scores are read with score1 as team 1 and score2 as team 2.
    """

    def __init__(self, params: DMRParams, validator: ScoreValidator) -> None:
        self.params = params
        self.validator = validator

    def validate(self, match: DoublesMatchInput) -> SetTally:
        """
        Check the teams and scores.

        Raises:
            InvalidMatchDataError: Wrong team sizes, repeated players or
                bad scores
        """
        if len(match.team1_ids) != 2 or len(match.team2_ids) != 2:
            raise InvalidMatchDataError("Each team must have exactly 2 players")

        all_players = [*match.team1_ids, *match.team2_ids]
        if len(set(all_players)) != 4:
            raise InvalidMatchDataError("All players must be unique (no duplicates)")

        self.validator.validate(match.set_scores)
        return tally_set_scores(match.set_scores)

    @staticmethod
    def _split_sides(match: DoublesMatchInput, tally: SetTally) -> _Sides:
        """Winner by sets won; a tie on sets goes to the team with more points."""
        team1 = list(match.team1_ids)
        team2 = list(match.team2_ids)

        if tally.sets1 != tally.sets2:
            team1_won = tally.sets1 > tally.sets2
        else:
            team1_won = tally.points1 > tally.points2

        if team1_won:
            return _Sides(team1, team2, tally.sets1, tally.sets2, tally.points1, tally.points2)
        return _Sides(team2, team1, tally.sets2, tally.sets1, tally.points2, tally.points1)

    def process(self, store: RatingStore, match: DoublesMatchInput) -> DoublesRatingResult:
        params = self.params
        tally = self.validate(match)
        sides = self._split_sides(match, tally)
        match_date = match.match_date or utcnow()

        ratings = store.get_or_create_many(
            [*sides.winner_ids, *sides.loser_ids], match.season_id, DOUBLES
        )
        winners = [ratings[pid] for pid in sides.winner_ids]
        losers = [ratings[pid] for pid in sides.loser_ids]

        score_factor = calculate_score_factor(
            sides.winner_sets,
            sides.loser_sets,
            sides.winner_points,
            sides.loser_points,
            tally.num_sets,
            set_weight=params.set_weight,
            point_weight=params.point_weight,
            is_walkover=match.is_walkover,
        )

        win_team = team_composite(winners)
        lose_team = team_composite(losers)

        rating_changes: dict[str, RatingUpdate] = {}
        rating_changes.update(self._distribute(winners, win_team, lose_team, 1.0, score_factor))
        rating_changes.update(self._distribute(losers, lose_team, win_team, 0.0, score_factor))

        notes = WALKOVER_NOTE if match.is_walkover else None
        for player_id, update in rating_changes.items():
            won = player_id in sides.winner_ids
            store.apply_update(
                ratings[player_id],
                update,
                outcome_reason(won),
                match.match_id,
                match_date,
                notes=notes,
            )

        logger.info(
            "Processed doubles match %s: winners=%s losers=%s score factor %.3f deltas=%s",
            match.match_id or "unknown",
            sides.winner_ids,
            sides.loser_ids,
            score_factor,
            {pid: u.delta for pid, u in rating_changes.items()},
        )

        return DoublesRatingResult(
            rating_changes=rating_changes,
            winner_ids=sides.winner_ids,
            loser_ids=sides.loser_ids,
            score_factor=score_factor,
        )

    def _distribute(
        self,
        players: Sequence[PlayerRating],
        team: TeamComposite,
        opponents: TeamComposite,
        score: float,
        score_factor: float,
    ) -> dict[str, RatingUpdate]:
        """Rate the team as one player, then split the result between partners."""
        params = self.params
        new_team = rate_one_game(
            team.rating,
            team.rd,
            team.volatility,
            opponents.rating,
            opponents.rd,
            score,
            params,
        )
        team_delta = scale_rating_change(new_team.rating - team.rating, score_factor, params)

        rd_sum = sum(p.rating_deviation for p in players)
        updates: dict[str, RatingUpdate] = {}
        for player in players:
            weight = player.rating_deviation / rd_sum
            delta = round_rating(team_delta * weight)
            delta = round_rating(
                cap_rating_change(delta, player.rating_deviation, params.cap_k, params.abs_max_delta)
            )

            new_rd = update_doubles_rd(
                player.rating_deviation,
                new_team.rd,
                team.rd,
                params.doubles_rd_blend_factor,
                params.min_rd,
                params.max_rd,
            )
            new_volatility = (
                (1 - params.doubles_vol_blend_factor) * player.volatility
                + params.doubles_vol_blend_factor * new_team.volatility
            )

            updates[player.player_id] = RatingUpdate(
                player_id=player.player_id,
                rating_id=player.id,
                old_rating=player.rating,
                new_rating=player.rating + delta,
                delta=delta,
                old_rd=player.rating_deviation,
                new_rd=params.clamp_rd(round_rating(new_rd)),
                old_volatility=player.volatility,
                new_volatility=new_volatility,
                matches_played=player.matches_played + 1,
            )
        return updates
