"""
Stability and Difficulty Updates

Implements the FSRS-4.5 update formulas. Every function is pure and takes
the weight vector explicitly so that custom parameters can be scheduled
side by side with the defaults.

Key principles:
- Spaced, effortful success produces the largest stability gains
- Failures shrink stability, less so for well-established memories
- Difficulty drifts with ratings and reverts slowly toward its default
"""

from __future__ import annotations
import math
from typing import Sequence

from legendas.fsrs.constants import (
    D_MAX,
    D_MIN,
    DECAY,
    FACTOR,
    MAXIMUM_INTERVAL,
    REQUEST_RETENTION,
    S_MIN,
    Rating,
)


def _clamp_difficulty(value: float) -> float:
    return min(max(value, D_MIN), D_MAX)


def init_stability(w: Sequence[float], rating: Rating) -> float:
    """
    Stability after the very first rating: S0 = w[rating - 1].
    """
    return max(w[rating - 1], S_MIN)


def init_difficulty(w: Sequence[float], rating: Rating) -> float:
    """
    Difficulty after the very first rating.

    Formula: D0 = w4 - w5 * (rating - 3), clipped to [1, 10]
    """
    return _clamp_difficulty(w[4] - w[5] * (rating - 3))


def mean_reversion(w: Sequence[float], init: float, current: float) -> float:
    return w[7] * init + (1 - w[7]) * current


def next_difficulty(w: Sequence[float], difficulty: float, rating: Rating) -> float:
    """
    Difficulty after a review.

    Formula:
        D' = D - w6 * (rating - 3)
        D'' = w7 * D0(Good) + (1 - w7) * D'
    clipped to [1, 10].
    """
    next_d = difficulty - w[6] * (rating - 3)
    return _clamp_difficulty(mean_reversion(w, w[4], next_d))


def next_recall_stability(
    w: Sequence[float],
    difficulty: float,
    stability: float,
    retrievability: float,
    rating: Rating
) -> float:
    """
    Stability after a successful review (Hard/Good/Easy).

    Formula:
        S' = S * (1 + e^w8 * (11 - D) * S^-w9 * (e^(w10 * (1 - R)) - 1)
                  * hard_penalty * easy_bonus)

    Low retrievability at review time (a well-spaced review) grows
    stability the most.
    """
    if rating == Rating.AGAIN:
        raise ValueError("Use next_forget_stability for AGAIN ratings")

    hard_penalty = w[15] if rating == Rating.HARD else 1.0
    easy_bonus = w[16] if rating == Rating.EASY else 1.0
    growth = (
        math.exp(w[8])
        * (11 - difficulty)
        * math.pow(stability, -w[9])
        * (math.exp((1 - retrievability) * w[10]) - 1)
        * hard_penalty
        * easy_bonus
    )
    return max(S_MIN, stability * (1 + growth))


def next_forget_stability(
    w: Sequence[float],
    difficulty: float,
    stability: float,
    retrievability: float
) -> float:
    """
    Stability after a lapse (Again on a Review card).

    Formula:
        S' = w11 * D^-w12 * ((S + 1)^w13 - 1) * e^(w14 * (1 - R))
    """
    new_stability = (
        w[11]
        * math.pow(difficulty, -w[12])
        * (math.pow(stability + 1, w[13]) - 1)
        * math.exp((1 - retrievability) * w[14])
    )
    return max(S_MIN, new_stability)


def next_interval(
    stability: float,
    request_retention: float = REQUEST_RETENTION,
    maximum_interval: int = MAXIMUM_INTERVAL
) -> int:
    """
    Interval (whole days) at which recall probability reaches the target.

    Formula: I = S / FACTOR * (R_target ^ (1 / DECAY) - 1)

    At the default 0.9 retention the interval equals the stability.
    """
    interval = stability / FACTOR * (math.pow(request_retention, 1 / DECAY) - 1)
    return min(max(round(interval), 1), maximum_interval)
