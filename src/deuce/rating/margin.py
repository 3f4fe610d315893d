"""
Margin-of-victory score factor.

Plain Glicko-2 treats an 11-0 11-0 rout and an 11-9 9-11 13-11 thriller the
same way. The score factor scales the rating change up for dominant wins,
blending how many more sets the winner took with how many more points they
scored:

    set_diff   = (winner_sets - loser_sets) / max(num_sets, 3)
    point_diff = (winner_points - loser_points) / total_points
    factor     = 1 + 0.5 * (set_weight * set_diff + point_weight * point_diff)

The factor is never below 1.0, so close matches are not penalised, and a
walkover always gets exactly 1.0 because nothing was contested.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from deuce.rating.constants import MIN_SETS_FOR_NORMALISATION, SCORE_FACTOR_SCALE
from deuce.rating.types import SetScore


@dataclass
class SetTally:
    """
    Sets and points per score column.

    Attributes:
        sets1: Sets where score1 > score2
        sets2: Sets where score2 > score1
        points1: Total of the score1 column
        points2: Total of the score2 column
        num_sets: Number of sets played
    """
    sets1: int
    sets2: int
    points1: int
    points2: int
    num_sets: int


def tally_set_scores(set_scores: Sequence[SetScore]) -> SetTally:
    """Count sets won and points scored for each column."""
    sets1 = sets2 = points1 = points2 = 0
    for score1, score2 in set_scores:
        points1 += score1
        points2 += score2
        if score1 > score2:
            sets1 += 1
        elif score2 > score1:
            sets2 += 1

    return SetTally(
        sets1=sets1,
        sets2=sets2,
        points1=points1,
        points2=points2,
        num_sets=len(set_scores),
    )


def calculate_score_factor(
    winner_sets: int,
    loser_sets: int,
    winner_points: int,
    loser_points: int,
    num_sets: int,
    set_weight: float,
    point_weight: float,
    is_walkover: bool = False,
) -> float:
    """
    Calculate the margin-of-victory multiplier.

    Args:
        winner_sets: Sets won by the winning side
        loser_sets: Sets won by the losing side
        winner_points: Points (or games) scored by the winning side
        loser_points: Points (or games) scored by the losing side
        num_sets: Sets played
        set_weight: Weight of the set differential
        point_weight: Weight of the point differential
        is_walkover: Uncontested result; forces the factor to 1.0

    Returns:
        Multiplier >= 1.0

    Examples:
        # One-set shutout 11-0 with default weights
        calculate_score_factor(1, 0, 11, 0, 1, 0.7, 0.3)  # ~1.267

        # Walkover
        calculate_score_factor(2, 0, 22, 0, 2, 0.7, 0.3, is_walkover=True)  # 1.0
    """
    if is_walkover:
        return 1.0

    set_differential = (winner_sets - loser_sets) / max(num_sets, MIN_SETS_FOR_NORMALISATION)

    total_points = winner_points + loser_points
    point_differential = 0.0
    if total_points > 0:
        point_differential = (winner_points - loser_points) / total_points

    factor = 1 + (
        set_weight * set_differential + point_weight * point_differential
    ) * SCORE_FACTOR_SCALE

    return max(1.0, factor)
