"""
Scaling and capping of raw Glicko-2 rating changes.

The raw change from the Glicko-2 core is multiplied by the (optionally
square-root softened) score factor and a dampening constant, then clamped.
The clamp is relative to the player's own RD, so uncertain players can move
further in one match, with an absolute ceiling on top.
"""

import math
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal

from deuce.rating.params import DMRParams


def cap_rating_change(
    rating_change: float,
    rd: float,
    cap_k: float,
    abs_max_delta: float,
) -> float:
    """
    Clamp a rating change to +/- min(cap_k * rd, abs_max_delta).

    Examples:
        cap_rating_change(160.0, 350.0, 0.08, 75.0)  # 28.0
        cap_rating_change(-5.0, 350.0, 0.08, 75.0)   # -5.0
    """
    max_delta = min(cap_k * rd, abs_max_delta)
    return max(-max_delta, min(max_delta, rating_change))


def effective_score_factor(score_factor: float, soften: bool) -> float:
    """Square-root soften the score factor when configured."""
    return math.sqrt(score_factor) if soften else score_factor


def scale_rating_change(base_delta: float, score_factor: float, params: DMRParams) -> float:
    """Apply the score factor and dampening to a raw rating change."""
    factor = effective_score_factor(score_factor, params.score_factor_soften)
    return base_delta * factor * params.dampening


def round_rating(value: float) -> int:
    """
    Round a rating, RD or delta to a whole rating point, halves upward.

    Examples:
        round_rating(2.5)   # 3
        round_rating(-2.5)  # -2
    """
    rounding = ROUND_HALF_UP if value >= 0 else ROUND_HALF_DOWN
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=rounding))
