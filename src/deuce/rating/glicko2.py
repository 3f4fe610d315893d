"""
Glicko-2 core for DMR.

Pure math, no database access. Follows the steps of Glickman's "Example of
the Glicko-2 system", using the reduced volatility function below.
Ratings and RDs are passed in on the internal Glicko-2 scale; use
scale_down / scale_up to convert from and to the 1500-centred display scale.

The formulas:
  g(phi)          = 1 / sqrt(1 + 3 phi^2 / pi^2)
  E(mu, mu_j, phi_j) = 1 / (1 + exp(-g(phi_j) (mu - mu_j)))
  v               = 1 / sum(g(phi_j)^2 E_j (1 - E_j))
  delta           = v * sum(g(phi_j) (s_j - E_j))
  phi*            = sqrt(phi^2 + sigma'^2)
  phi'            = 1 / sqrt(1 / phi*^2 + 1 / v)
  mu'             = mu + phi'^2 * sum(g(phi_j) (s_j - E_j))

Where sigma' (the new volatility) is the root of f(x) found with the
Illinois variant of regula falsi:
  f(x) = e^x (delta^2 - v - e^x) / (2 (v + e^x)^2) - (x - a) / tau^2,  a = ln(sigma^2)
"""

import math
from typing import NamedTuple, Sequence

from deuce.rating.constants import GLICKO_CENTER, GLICKO_SCALE


class Observation(NamedTuple):
    """One game result from the rated player's point of view (internal scale)."""
    opponent_rating: float
    opponent_rd: float
    score: float  # 1.0 win, 0.0 loss


class Glicko2Result(NamedTuple):
    """Updated state on the internal scale."""
    rating: float
    rd: float
    volatility: float


def scale_down(rating: float) -> float:
    """Display rating -> Glicko-2 mu."""
    return (rating - GLICKO_CENTER) / GLICKO_SCALE


def scale_up(mu: float) -> float:
    """Glicko-2 mu -> display rating."""
    return mu * GLICKO_SCALE + GLICKO_CENTER


def scale_down_rd(rd: float) -> float:
    """Display RD -> Glicko-2 phi."""
    return rd / GLICKO_SCALE


def scale_up_rd(phi: float) -> float:
    """Glicko-2 phi -> display RD."""
    return phi * GLICKO_SCALE


def g(rd: float) -> float:
    """Weighting that shrinks the impact of opponents with uncertain ratings."""
    return 1 / math.sqrt(1 + 3 * rd * rd / (math.pi * math.pi))


def expected_score(rating: float, opponent_rating: float, opponent_rd: float) -> float:
    """
    Expected score (win probability) against one opponent.

    All arguments are on the internal scale. Equal ratings give exactly 0.5.
    """
    return 1 / (1 + math.exp(-g(opponent_rd) * (rating - opponent_rating)))


def _solve_volatility(
    delta: float,
    v: float,
    volatility: float,
    tau: float,
    epsilon: float,
    max_iterations: int,
) -> float:
    """
    Step 5: find the new volatility with the Illinois algorithm.

    Both the bracket search and the main iteration are capped at
    max_iterations, so the solver always terminates.
    """
    a = math.log(volatility * volatility)

    def f(x: float) -> float:
        ex = math.exp(x)
        term1 = (ex * (delta * delta - v - ex)) / (2 * (v + ex) ** 2)
        term2 = (x - a) / (tau * tau)
        return term1 - term2

    # Initial bracket [A, B]
    A = a
    if delta * delta > v + volatility * volatility:
        B = math.log(delta * delta - v - volatility * volatility)
    else:
        k = 1
        while f(a - k * tau) < 0:
            k += 1
            if k > max_iterations:
                break
        B = a - k * tau

    f_a = f(A)
    f_b = f(B)

    iteration = 0
    while abs(B - A) > epsilon and iteration < max_iterations:
        iteration += 1
        C = A + (A - B) * f_a / (f_b - f_a)
        f_c = f(C)

        if f_c * f_b <= 0:
            A = B
            f_a = f_b
        else:
            f_a = f_a / 2

        B = C
        f_b = f_c

    return math.exp(A / 2)


def compute_new_rating(
    rating: float,
    rd: float,
    volatility: float,
    observations: Sequence[Observation],
    *,
    tau: float,
    epsilon: float,
    max_rd: float,
    max_iterations: int = 100,
) -> Glicko2Result:
    """
    Run one Glicko-2 rating period.

    Args:
        rating: Current mu (internal scale)
        rd: Current phi (internal scale)
        volatility: Current sigma
        observations: Results in this period. Empty means the player sat
            the period out and only their RD grows.
        tau: System constant limiting volatility change
        epsilon: Convergence tolerance, also the floor for the variance sum
        max_rd: Upper RD bound on the display scale (used when no games)
        max_iterations: Cap on solver iterations

    Returns:
        Glicko2Result on the internal scale. RD is not clamped to the
        display bounds here (except in the no-games case); callers clamp
        after scaling up.
    """
    if not observations:
        new_rd = math.sqrt(rd * rd + volatility * volatility)
        return Glicko2Result(rating, min(new_rd, scale_down_rd(max_rd)), volatility)

    # Step 3: estimated variance of the rating based on game outcomes
    v_sum = 0.0
    score_sum = 0.0
    for opp_rating, opp_rd, score in observations:
        g_rd = g(opp_rd)
        e = expected_score(rating, opp_rating, opp_rd)
        v_sum += g_rd * g_rd * e * (1 - e)
        score_sum += g_rd * (score - e)

    # Guard against division by zero for hopeless mismatches
    if v_sum < epsilon:
        v_sum = epsilon
    v = 1 / v_sum

    # Step 4: estimated improvement
    delta = v * score_sum

    # Step 5: new volatility
    new_volatility = _solve_volatility(
        delta, v, volatility, tau, epsilon, max_iterations
    )

    # Steps 6 and 7: new RD and rating
    pre_rd = math.sqrt(rd * rd + new_volatility * new_volatility)
    new_rd = 1 / math.sqrt(1 / (pre_rd * pre_rd) + 1 / v)
    new_rating = rating + new_rd * new_rd * score_sum

    return Glicko2Result(new_rating, new_rd, new_volatility)


def win_probability(
    rating_a: float,
    rd_a: float,
    rating_b: float,
    rd_b: float,
) -> float:
    """
    Probability that player A beats player B, from display-scale values.

    Uses B's RD only, as the Glicko-2 expected score does; rd_a is accepted
    so callers can pass both players symmetrically.
    """
    return expected_score(scale_down(rating_a), scale_down(rating_b), scale_down_rd(rd_b))


def confidence_interval(rating: float, rd: float) -> tuple[float, float]:
    """Approximate 95% interval for a display-scale rating."""
    return (rating - 2 * rd, rating + 2 * rd)
