"""
DMR rating system constants.

Glicko-2 works on an internal scale where ratings are centred at 0. The
display scale most players see is centred at 1500, and the conversion factor
is 400 / ln(10).

The remaining values are the production defaults used to build DMRParams.
They were chosen for league play where players meet a handful of opponents
per month:
  - tau limits how quickly volatility can change
  - dampening and the cap keep a single result from dominating a rating
  - the doubles blend factors control how much a team result moves each
    individual's uncertainty
"""

# Glicko-2 scale conversion: 400 / ln(10)
GLICKO_SCALE = 173.7178

# Centre of the display scale
GLICKO_CENTER = 1500.0

# Starting state for a player with no external initial rating
DEFAULT_RATING = 1500.0
DEFAULT_RD = 350.0
DEFAULT_VOLATILITY = 0.06

# Matches needed before a rating stops being provisional
PROVISIONAL_THRESHOLD = 10

# Share of the raw weighted differential that becomes the score factor bonus
SCORE_FACTOR_SCALE = 0.5

# Minimum number of sets used when normalising the set differential,
# so a one-set match is treated like a best-of-three
MIN_SETS_FOR_NORMALISATION = 3

GLICKO_DEFAULTS = {
    "tau": 0.5,
    "epsilon": 0.000001,
    "max_iterations": 100,
}

SCORE_FACTOR_DEFAULTS = {
    "set_weight": 0.7,
    "point_weight": 0.3,
    "doubles_weight": 0.7,
    "dampening": 0.7,
    "score_factor_soften": True,
}

RD_DEFAULTS = {
    "min_rd": 30.0,
    "max_rd": 350.0,
}

INACTIVITY_DEFAULTS = {
    "inactivity_threshold_days": 30,
    "inactivity_rd_increase_rate": 0.1,
    "min_rd_increase": 5.0,
}

CAP_DEFAULTS = {
    "cap_k": 0.08,
    "abs_max_delta": 75.0,
}

DOUBLES_DEFAULTS = {
    "doubles_rd_blend_factor": 0.5,
    "doubles_vol_blend_factor": 0.35,
}

# History note appended when a match's rating changes are voided
REVERSED_MARKER = "[REVERSED]"

# History note on rows written for a walkover; the reason stays MATCH_WIN / MATCH_LOSS
WALKOVER_NOTE = "Walkover"
