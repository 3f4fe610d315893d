"""
Unit tests for sport-specific score validation.
"""

import pytest

from deuce.rating.errors import InvalidMatchDataError
from deuce.rating.types import SetScore
from deuce.rating.validation import (
    PickleballScoreValidator,
    ScoreValidator,
    get_score_validator,
    validate_set_scores,
)
from deuce.sports import PADEL, PICKLEBALL, TENNIS


class TestBaselineValidation:
    """Rules shared by every sport."""

    @pytest.fixture
    def validator(self):
        return ScoreValidator()

    def test_accepts_tennis_sets(self, validator):
        validator.validate([SetScore(6, 4), SetScore(3, 6), SetScore(7, 6)])

    def test_empty_rejected(self, validator):
        with pytest.raises(InvalidMatchDataError, match="cannot be empty"):
            validator.validate([])

    def test_too_many_sets(self, validator):
        with pytest.raises(InvalidMatchDataError, match="Maximum 5 sets"):
            validator.validate([SetScore(6, 4)] * 6)

    def test_negative_rejected(self, validator):
        with pytest.raises(InvalidMatchDataError, match="negative"):
            validator.validate([SetScore(-1, 6)])

    def test_tie_rejected(self, validator):
        with pytest.raises(InvalidMatchDataError, match="tied"):
            validator.validate([SetScore(6, 6)])

    def test_error_names_the_set(self, validator):
        with pytest.raises(InvalidMatchDataError, match="Set 2"):
            validator.validate([SetScore(6, 4), SetScore(5, 5)])


class TestPickleballValidation:
    """Pickleball: to 11, 15 or 21, win by 2, deuce extensions."""

    @pytest.fixture
    def validator(self):
        return PickleballScoreValidator()

    @pytest.mark.parametrize(
        "score",
        [(11, 0), (11, 9), (5, 11), (12, 10), (16, 14), (15, 13), (21, 19), (21, 3)],
    )
    def test_valid_scores(self, validator, score):
        validator.validate([SetScore(*score)])

    def test_must_win_by_two(self, validator):
        with pytest.raises(InvalidMatchDataError, match="win by at least 2"):
            validator.validate([SetScore(11, 10)])

    def test_extension_must_end_at_two(self, validator):
        with pytest.raises(InvalidMatchDataError, match="exactly 2"):
            validator.validate([SetScore(13, 10)])

    def test_short_game_rejected(self, validator):
        with pytest.raises(InvalidMatchDataError, match="Invalid score"):
            validator.validate([SetScore(9, 7)])

    def test_implausible_score_rejected(self, validator):
        with pytest.raises(InvalidMatchDataError, match="unrealistically high"):
            validator.validate([SetScore(52, 50)])

    def test_baseline_rules_still_apply(self, validator):
        with pytest.raises(InvalidMatchDataError, match="tied"):
            validator.validate([SetScore(11, 11)])


class TestRegistry:
    """Tests for validator lookup."""

    def test_pickleball_gets_dedicated_rules(self):
        assert isinstance(get_score_validator(PICKLEBALL), PickleballScoreValidator)

    @pytest.mark.parametrize("sport", [TENNIS, PADEL, "SQUASH"])
    def test_other_sports_use_baseline(self, sport):
        validator = get_score_validator(sport)
        assert type(validator) is ScoreValidator

    def test_max_sets_passed_through(self):
        assert get_score_validator(TENNIS, max_sets=3).max_sets == 3

    def test_validate_set_scores(self):
        validate_set_scores(TENNIS, [SetScore(6, 0)])
        with pytest.raises(InvalidMatchDataError):
            validate_set_scores(PICKLEBALL, [SetScore(6, 0)])
