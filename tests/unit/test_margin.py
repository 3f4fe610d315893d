"""
Unit tests for the score factor and rating change capping.
"""

import pytest

from deuce.rating.capping import (
    cap_rating_change,
    effective_score_factor,
    round_rating,
    scale_rating_change,
)
from deuce.rating.margin import calculate_score_factor, tally_set_scores
from deuce.rating.params import DMRParams
from deuce.rating.types import SetScore


class TestTally:
    def test_counts_sets_and_points(self):
        tally = tally_set_scores([SetScore(11, 5), SetScore(9, 11), SetScore(11, 7)])

        assert (tally.sets1, tally.sets2) == (2, 1)
        assert (tally.points1, tally.points2) == (31, 23)
        assert tally.num_sets == 3


class TestScoreFactor:
    """Tests for calculate_score_factor()."""

    def test_one_set_shutout(self):
        """11-0: set diff normalised by 3 sets, full point diff."""
        factor = calculate_score_factor(1, 0, 11, 0, 1, set_weight=0.7, point_weight=0.3)
        assert factor == pytest.approx(1 + 0.5 * (0.7 / 3 + 0.3))

    def test_walkover_is_neutral(self):
        factor = calculate_score_factor(2, 0, 22, 0, 2, set_weight=0.7, point_weight=0.3, is_walkover=True)
        assert factor == 1.0

    def test_never_below_one(self):
        """A winner who scored fewer points is not penalised."""
        factor = calculate_score_factor(2, 1, 30, 40, 3, set_weight=0.0, point_weight=1.0)
        assert factor == 1.0

    def test_dominant_win_beats_close_win(self):
        dominant = calculate_score_factor(2, 0, 22, 4, 2, set_weight=0.7, point_weight=0.3)
        close = calculate_score_factor(2, 1, 31, 29, 3, set_weight=0.7, point_weight=0.3)
        assert dominant > close > 1.0

    def test_zero_points(self):
        factor = calculate_score_factor(1, 0, 0, 0, 1, set_weight=0.7, point_weight=0.3)
        assert factor == pytest.approx(1 + 0.5 * 0.7 / 3)


class TestCapping:
    """Tests for cap_rating_change() and scaling."""

    def test_cap_relative_to_rd(self):
        assert cap_rating_change(160.0, 350.0, 0.08, 75.0) == pytest.approx(28.0)
        assert cap_rating_change(-160.0, 350.0, 0.08, 75.0) == pytest.approx(-28.0)

    def test_absolute_ceiling(self):
        assert cap_rating_change(500.0, 2000.0, 0.08, 75.0) == 75.0

    def test_small_change_untouched(self):
        assert cap_rating_change(-5.0, 350.0, 0.08, 75.0) == -5.0

    @pytest.mark.parametrize("delta", [-400.0, -30.0, 0.0, 12.5, 90.0, 1000.0])
    @pytest.mark.parametrize("rd", [30.0, 100.0, 350.0])
    def test_bound_holds(self, delta, rd):
        capped = cap_rating_change(delta, rd, 0.08, 75.0)
        assert abs(capped) <= min(0.08 * rd, 75.0)

    def test_softened_factor(self):
        assert effective_score_factor(1.44, soften=True) == pytest.approx(1.2)
        assert effective_score_factor(1.44, soften=False) == 1.44

    def test_scale_rating_change(self):
        params = DMRParams(dampening=0.5, score_factor_soften=False)
        assert scale_rating_change(100.0, 1.2, params) == pytest.approx(60.0)


class TestRounding:
    def test_halves_round_up(self):
        assert round_rating(2.5) == 3
        assert round_rating(-2.5) == -2
        assert round_rating(-2.6) == -3
        assert round_rating(1527.49) == 1527

    def test_returns_int(self):
        assert isinstance(round_rating(290.3), int)
