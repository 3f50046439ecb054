"""
Statistical significance primitives for period-over-period metric changes.

WHAT:
    percent_change, is_significant_change and z_score. Pure functions with
    no I/O, shared by the funnel walker, advisors and the correlator.

WHY:
    "Did CPA really move?" depends on how much volume the account buys.
    Larger spend means a larger sample, so smaller relative swings become
    meaningful; a $50/week account needs a very large swing before it is
    trusted.
"""

import math
from typing import Optional, Sequence

# Minimum detectable effect bounds (percent) for the spend heuristic
MIN_DETECTABLE_FLOOR = 5.0
MIN_DETECTABLE_CEILING = 50.0

# A change must exceed this multiple of the normal variance to be flagged
VARIANCE_MULTIPLIER = 2.0

MIN_ZSCORE_HISTORY = 3


def percent_change(current: float, previous: float) -> float:
    """
    Percentage change from previous to current.

    From zero to something returns +/-100 following the sign of current
    rather than an infinite change. 0 -> 0 is 0.
    """
    if previous == 0:
        if current == 0:
            return 0.0
        return 100.0 if current > 0 else -100.0
    return (current - previous) / previous * 100


def minimum_detectable_effect(spend: float) -> float:
    """100 / sqrt(spend), clamped to [5, 50] percent."""
    return max(MIN_DETECTABLE_FLOOR, min(MIN_DETECTABLE_CEILING, 100 / math.sqrt(spend)))


def is_significant_change(
    delta_percent: float,
    spend: float,
    benchmark_variance: Optional[float] = None,
) -> bool:
    """
    Whether a percentage change is meaningful at the given spend level.

    Parameters:
        delta_percent: Period-over-period change in percent
        spend: Spend in the current period
        benchmark_variance: Normal variance (percent), account-specific or
            vertical default. When given, the change must exceed twice it.

    Returns:
        False for non-positive spend, otherwise the threshold comparison.
    """
    if spend <= 0:
        return False

    if benchmark_variance is not None:
        return abs(delta_percent) > benchmark_variance * VARIANCE_MULTIPLIER

    return abs(delta_percent) > minimum_detectable_effect(spend)


def z_score(value: float, history: Sequence[float]) -> Optional[float]:
    """
    Standardize value against historical values (population stddev).

    Returns None with fewer than 3 points, or when history has zero variance
    and value differs from its mean (cannot standardize against zero spread).
    """
    if len(history) < MIN_ZSCORE_HISTORY:
        return None

    mean = sum(history) / len(history)
    variance = sum((v - mean) ** 2 for v in history) / len(history)
    std_dev = math.sqrt(variance)

    if std_dev == 0:
        return 0.0 if value == mean else None
    return (value - mean) / std_dev
