"""
Unit tests for the Glicko-2 core.

Checks the pure math against known values:
- Expected score symmetry
- Glickman's worked example
- RD growth when a player has no games
- Volatility solver termination on extreme inputs
"""

import math

import pytest

from deuce.rating.glicko2 import (
    Observation,
    compute_new_rating,
    confidence_interval,
    expected_score,
    g,
    scale_down,
    scale_down_rd,
    scale_up,
    scale_up_rd,
    win_probability,
)


class TestScaleConversion:
    """Tests for display <-> internal scale conversion."""

    def test_centre_maps_to_zero(self):
        assert scale_down(1500) == 0.0
        assert scale_up(0.0) == 1500.0

    def test_round_trip(self):
        assert scale_up(scale_down(1732.5)) == pytest.approx(1732.5)
        assert scale_up_rd(scale_down_rd(200)) == pytest.approx(200)

    def test_rd_scale(self):
        assert scale_down_rd(173.7178) == pytest.approx(1.0)


class TestExpectedScore:
    """Tests for g() and E()."""

    def test_g_is_one_for_certain_opponent(self):
        assert g(0.0) == 1.0

    def test_g_decreases_with_uncertainty(self):
        assert g(2.0) < g(1.0) < g(0.5)

    def test_equal_ratings_exactly_half(self):
        """Equal ratings give exactly 0.5 whatever the opponent RD."""
        for rd in (0.1, 1.0, 2.0):
            assert expected_score(0.3, 0.3, rd) == 0.5

    def test_symmetry_with_equal_rd(self):
        """With equal RDs the two expectations sum to 1."""
        a, b, rd = scale_down(1650), scale_down(1420), scale_down_rd(80)
        assert expected_score(a, b, rd) + expected_score(b, a, rd) == pytest.approx(1.0)

    def test_favourite_above_half(self):
        assert expected_score(scale_down(1700), scale_down(1500), scale_down_rd(50)) > 0.5


class TestComputeNewRating:
    """Tests for one rating period."""

    def test_glickman_example(self):
        """
        Glickman's worked example: 1500/200/0.06 plays three games.

        Published result is rating 1464.06, RD 151.52, volatility 0.05999.
        """
        result = compute_new_rating(
            scale_down(1500),
            scale_down_rd(200),
            0.06,
            [
                Observation(scale_down(1400), scale_down_rd(30), 1.0),
                Observation(scale_down(1550), scale_down_rd(100), 0.0),
                Observation(scale_down(1700), scale_down_rd(300), 0.0),
            ],
            tau=0.5,
            epsilon=0.000001,
            max_rd=350,
        )

        assert scale_up(result.rating) == pytest.approx(1464.06, abs=0.5)
        assert scale_up_rd(result.rd) == pytest.approx(151.52, abs=0.5)
        assert result.volatility == pytest.approx(0.06, abs=0.001)

    def test_no_games_grows_rd_only(self):
        """A player who sat the period out keeps their rating; RD grows."""
        rd = scale_down_rd(100)
        result = compute_new_rating(0.5, rd, 0.06, [], tau=0.5, epsilon=1e-6, max_rd=350)

        assert result.rating == 0.5
        assert result.volatility == 0.06
        assert result.rd == pytest.approx(math.sqrt(rd * rd + 0.06 * 0.06))

    def test_no_games_rd_capped(self):
        result = compute_new_rating(0.0, scale_down_rd(350), 0.06, [], tau=0.5, epsilon=1e-6, max_rd=350)
        assert scale_up_rd(result.rd) == pytest.approx(350)

    def test_win_raises_loss_lowers(self):
        opponent = Observation(0.0, scale_down_rd(350), 1.0)
        win = compute_new_rating(0.0, scale_down_rd(350), 0.06, [opponent], tau=0.5, epsilon=1e-6, max_rd=350)
        loss = compute_new_rating(
            0.0, scale_down_rd(350), 0.06, [opponent._replace(score=0.0)], tau=0.5, epsilon=1e-6, max_rd=350
        )

        assert win.rating > 0.0
        assert loss.rating < 0.0
        assert win.rating == pytest.approx(-loss.rating)

    def test_new_player_vs_new_player(self):
        """Two default players: the raw change is about +162 and RD falls to about 290."""
        result = compute_new_rating(
            0.0,
            scale_down_rd(350),
            0.06,
            [Observation(0.0, scale_down_rd(350), 1.0)],
            tau=0.5,
            epsilon=1e-6,
            max_rd=350,
        )

        assert scale_up(result.rating) - 1500 == pytest.approx(162.3, abs=1.0)
        assert scale_up_rd(result.rd) == pytest.approx(290.3, abs=1.0)

    def test_extreme_mismatch_terminates(self):
        """Hopeless mismatches are handled by the variance floor, not exceptions."""
        result = compute_new_rating(
            scale_down(3500),
            scale_down_rd(30),
            0.06,
            [Observation(scale_down(100), scale_down_rd(30), 0.0)],
            tau=0.5,
            epsilon=1e-6,
            max_rd=350,
            max_iterations=100,
        )

        assert math.isfinite(result.rating)
        assert math.isfinite(result.rd)
        assert result.volatility > 0


class TestHelpers:
    """Tests for the display-scale helpers."""

    def test_win_probability_equal(self):
        assert win_probability(1500, 100, 1500, 100) == 0.5

    def test_win_probability_favourite(self):
        p = win_probability(1700, 80, 1500, 80)
        assert 0.5 < p < 1.0
        assert p + win_probability(1500, 80, 1700, 80) == pytest.approx(1.0)

    def test_confidence_interval(self):
        assert confidence_interval(1500, 100) == (1300, 1700)
