"""Inputs and results exchanged with the rating processors."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple, Optional, Sequence


class SetScore(NamedTuple):
    """
    Points (or games) for one set.

    For singles score1 is the winner's column; for doubles score1 is team 1.
    """
    score1: int
    score2: int


@dataclass
class SinglesMatchInput:
    winner_id: str
    loser_id: str
    set_scores: Sequence[SetScore]
    season_id: str
    match_id: Optional[str] = None
    match_date: Optional[datetime] = None
    is_walkover: bool = False


@dataclass
class DoublesMatchInput:
    team1_ids: Sequence[str]
    team2_ids: Sequence[str]
    set_scores: Sequence[SetScore]
    season_id: str
    match_id: Optional[str] = None
    match_date: Optional[datetime] = None
    is_walkover: bool = False


@dataclass
class RatingUpdate:
    """
    Before/after state for one player in one rated match.

    Ratings, RDs and deltas are on the display scale.
    """
    player_id: str
    rating_id: int
    old_rating: float
    new_rating: float
    delta: float
    old_rd: float
    new_rd: float
    old_volatility: float
    new_volatility: float
    matches_played: int

    @property
    def rd_change(self) -> float:
        return self.new_rd - self.old_rd


@dataclass
class MatchRatingResult:
    """Result of a singles match."""
    winner: RatingUpdate
    loser: RatingUpdate
    score_factor: float


@dataclass
class DoublesRatingResult:
    """Result of a doubles match, keyed by player id."""
    rating_changes: dict[str, RatingUpdate]
    winner_ids: list[str]
    loser_ids: list[str]
    score_factor: float
