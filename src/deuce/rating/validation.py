"""
Sport-specific validation of submitted set scores.

Each sport gets its own ScoreValidator subclass registered in
SCORE_VALIDATORS. Sports without dedicated rules fall back to the baseline
checks (no negative scores, no tied sets). Adding a sport means adding a
class and a registry entry.

Pickleball rules:
- Games are played to 11, 15 or 21 and must be won by at least 2
- A game that goes past its target (deuce) ends as soon as one side leads
  by exactly 2, and the loser must have reached at least 10
- Anything above 50 points is treated as a data-entry error
"""

from __future__ import annotations

import logging
from typing import Sequence

from deuce.rating.errors import InvalidMatchDataError
from deuce.rating.types import SetScore
from deuce.sports import PADEL, PICKLEBALL, TENNIS

logger = logging.getLogger(__name__)

DEFAULT_MAX_SETS = 5


class ScoreValidator:
    """
    Baseline validation shared by every sport.

    Subclasses override validate_set() to add sport rules; the set count
    checks in validate() always apply.
    """

    sport: str = "BASELINE"

    def __init__(self, max_sets: int = DEFAULT_MAX_SETS):
        self.max_sets = max_sets

    def validate(self, set_scores: Sequence[SetScore]) -> None:
        """
        Check a whole match.

        Raises:
            InvalidMatchDataError: On the first problem found
        """
        if not set_scores:
            raise InvalidMatchDataError("Set scores cannot be empty")

        if len(set_scores) > self.max_sets:
            raise InvalidMatchDataError(f"Maximum {self.max_sets} sets allowed")

        for index, set_score in enumerate(set_scores, start=1):
            self.validate_set(index, set_score)

    def validate_set(self, set_num: int, set_score: SetScore) -> None:
        score1, score2 = set_score
        if score1 < 0 or score2 < 0:
            raise InvalidMatchDataError(
                f"Set {set_num}: Scores cannot be negative ({score1}-{score2})"
            )
        if score1 == score2:
            raise InvalidMatchDataError(
                f"Set {set_num}: Scores cannot be tied ({score1}-{score2})"
            )


class PickleballScoreValidator(ScoreValidator):
    """Pickleball: rally scoring to 11, 15 or 21, win by 2."""

    sport = PICKLEBALL

    STANDARD_TARGET = 11
    TARGETS: tuple[int, ...] = (11, 15, 21)
    MAX_PLAUSIBLE_SCORE = 50

    def validate_set(self, set_num: int, set_score: SetScore) -> None:
        super().validate_set(set_num, set_score)

        score1, score2 = set_score
        high = max(score1, score2)
        low = min(score1, score2)

        if high > self.MAX_PLAUSIBLE_SCORE:
            raise InvalidMatchDataError(
                f"Set {set_num}: Score {high} seems unrealistically high ({score1}-{score2})"
            )

        if high in self.TARGETS:
            if high - low < 2:
                raise InvalidMatchDataError(
                    f"Set {set_num}: Must win by at least 2 points ({score1}-{score2})"
                )
        elif high > self.STANDARD_TARGET:
            # Deuce extension: play continues until one side leads by 2
            if high - low != 2:
                raise InvalidMatchDataError(
                    f"Set {set_num}: Extended games must win by exactly 2 points ({score1}-{score2})"
                )
            if low < self.STANDARD_TARGET - 1:
                raise InvalidMatchDataError(
                    f"Set {set_num}: Invalid deuce score ({score1}-{score2})"
                )
        else:
            targets = ", ".join(str(t) for t in self.TARGETS)
            raise InvalidMatchDataError(
                f"Set {set_num}: Invalid score ({score1}-{score2}). "
                f"Valid endings: {targets} or deuce extensions"
            )


# Sport -> validator class. Tennis and Padel use the baseline rules until
# their own set formats are modelled.
SCORE_VALIDATORS: dict[str, type[ScoreValidator]] = {
    PICKLEBALL: PickleballScoreValidator,
    TENNIS: ScoreValidator,
    PADEL: ScoreValidator,
}


def get_score_validator(sport: str, max_sets: int = DEFAULT_MAX_SETS) -> ScoreValidator:
    """Return a validator for the sport, falling back to the baseline rules."""
    validator_cls = SCORE_VALIDATORS.get(sport)
    if validator_cls is None:
        logger.debug("No dedicated score rules for %s; using baseline validation", sport)
        validator_cls = ScoreValidator
    return validator_cls(max_sets=max_sets)


def validate_set_scores(
    sport: str,
    set_scores: Sequence[SetScore],
    max_sets: int = DEFAULT_MAX_SETS,
) -> None:
    """Validate a match's set scores under the rules for its sport."""
    get_score_validator(sport, max_sets=max_sets).validate(set_scores)
