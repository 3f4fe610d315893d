"""
The immutable parameter bundle bound to a rating service.

One DMRParams instance is created per service and never changes while that
service is alive. Tuned variants can be persisted and activated through
deuce.rating.params_store.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any

from deuce.rating.constants import (
    CAP_DEFAULTS,
    DEFAULT_RATING,
    DEFAULT_RD,
    DEFAULT_VOLATILITY,
    DOUBLES_DEFAULTS,
    GLICKO_DEFAULTS,
    INACTIVITY_DEFAULTS,
    PROVISIONAL_THRESHOLD,
    RD_DEFAULTS,
    SCORE_FACTOR_DEFAULTS,
)


@dataclass(frozen=True)
class DMRParams:
    """
    All tunable DMR parameters in one object.

    Defaults come from deuce.rating.constants.
    """
    # System constants
    tau: float = GLICKO_DEFAULTS["tau"]
    epsilon: float = GLICKO_DEFAULTS["epsilon"]
    max_iterations: int = GLICKO_DEFAULTS["max_iterations"]

    # Weighting factors
    set_weight: float = SCORE_FACTOR_DEFAULTS["set_weight"]
    point_weight: float = SCORE_FACTOR_DEFAULTS["point_weight"]
    # Reserved multiplier for doubles; carried in persisted sets but not
    # applied by the doubles processor.
    doubles_weight: float = SCORE_FACTOR_DEFAULTS["doubles_weight"]
    dampening: float = SCORE_FACTOR_DEFAULTS["dampening"]
    score_factor_soften: bool = SCORE_FACTOR_DEFAULTS["score_factor_soften"]

    # Default values
    default_rating: float = DEFAULT_RATING
    default_rd: float = DEFAULT_RD
    default_volatility: float = DEFAULT_VOLATILITY
    min_rd: float = RD_DEFAULTS["min_rd"]
    max_rd: float = RD_DEFAULTS["max_rd"]
    provisional_threshold: int = PROVISIONAL_THRESHOLD

    # Inactivity parameters
    inactivity_threshold_days: int = INACTIVITY_DEFAULTS["inactivity_threshold_days"]
    inactivity_rd_increase_rate: float = INACTIVITY_DEFAULTS["inactivity_rd_increase_rate"]
    min_rd_increase: float = INACTIVITY_DEFAULTS["min_rd_increase"]

    # Rating caps
    cap_k: float = CAP_DEFAULTS["cap_k"]
    abs_max_delta: float = CAP_DEFAULTS["abs_max_delta"]

    # Doubles-specific
    doubles_rd_blend_factor: float = DOUBLES_DEFAULTS["doubles_rd_blend_factor"]
    doubles_vol_blend_factor: float = DOUBLES_DEFAULTS["doubles_vol_blend_factor"]

    # Score validation
    max_sets: int = 5

    def __post_init__(self) -> None:
        if self.tau <= 0 or self.epsilon <= 0:
            raise ValueError("tau and epsilon must be positive")
        if not 0 < self.min_rd <= self.max_rd:
            raise ValueError(
                f"RD bounds must satisfy 0 < min_rd <= max_rd, got [{self.min_rd}, {self.max_rd}]"
            )
        if self.default_volatility <= 0:
            raise ValueError("default_volatility must be positive")
        if self.inactivity_threshold_days <= 0:
            raise ValueError("inactivity_threshold_days must be positive")

    def clamp_rd(self, rd: float) -> float:
        """Bound an RD to [min_rd, max_rd]."""
        return max(self.min_rd, min(self.max_rd, rd))

    def with_overrides(self, **overrides: Any) -> "DMRParams":
        """Return a copy with some fields replaced."""
        return replace(self, **overrides)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DMRParams":
        """
        Build params from a stored mapping.

        Unknown keys raise TypeError so that a set written by a newer
        version is never silently half-applied.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise TypeError(f"Unknown DMR parameters: {sorted(unknown)}")
        return cls(**data)
