"""
Conversion lag (data maturity) model.

WHAT:
    Estimates what fraction of a period's eventual conversions have been
    reported as of a given date, flags comparisons where the current period
    is materially less mature than the previous one, and inflates recent
    daily counts to an estimated mature total.

WHY:
    Platforms attribute conversions with a delay. Comparing a period that
    ended yesterday against a fully reported one manufactures a fake
    conversion drop. This is a warning on the result, never an error.

Typical lag pattern (fraction reported by day age):
    day of: ~35%, 1 day: ~65%, 2 days: ~85%, 3 days: ~95%, 4+ days: 100%
"""

from dataclasses import replace
from datetime import date, timedelta
from typing import Dict, List

from funnelscope.models import ConversionLagAssessment, DailyBreakdown

MATURITY_FACTORS: Dict[int, float] = {
    0: 0.35,
    1: 0.65,
    2: 0.85,
    3: 0.95,
}

FULLY_MATURE_AFTER_DAYS = 4

# Maturity gap (fraction) above which a comparison is flagged unsafe
SIGNIFICANT_MATURITY_GAP = 0.1


def day_maturity(day: date, as_of: date) -> float:
    """Maturity factor for a single reporting day."""
    days_ago = max(0, (as_of - day).days)
    return MATURITY_FACTORS.get(days_ago, 1.0)


def compute_period_maturity(period_end: date, as_of: date, period_days: int) -> float:
    """Mean maturity of the period_days days ending at period_end."""
    if period_days <= 0:
        return 1.0
    if (as_of - period_end).days >= FULLY_MATURE_AFTER_DAYS:
        return 1.0

    total = sum(
        day_maturity(period_end - timedelta(days=offset), as_of)
        for offset in range(period_days)
    )
    return total / period_days


def assess_conversion_lag(
    current_period_end: date,
    previous_period_end: date,
    as_of: date,
    period_days: int,
) -> ConversionLagAssessment:
    """Compare the maturity of two periods; gap > 10 points is significant."""
    current_maturity = compute_period_maturity(current_period_end, as_of, period_days)
    previous_maturity = compute_period_maturity(previous_period_end, as_of, period_days)
    maturity_gap = previous_maturity - current_maturity

    return ConversionLagAssessment(
        current_maturity=current_maturity,
        previous_maturity=previous_maturity,
        maturity_gap=maturity_gap,
        lag_is_significant=maturity_gap > SIGNIFICANT_MATURITY_GAP,
    )


def mature_estimate(observed: float, maturity: float) -> float:
    """Observed count divided by its maturity fraction."""
    if maturity <= 0 or maturity >= 1.0:
        return observed
    return observed / maturity


def adjust_for_conversion_lag(daily: List[DailyBreakdown], as_of: date) -> List[DailyBreakdown]:
    """Inflate each immature day's conversions to its estimated mature count (rounded)."""
    adjusted = []
    for day in daily:
        factor = day_maturity(day.date, as_of)
        if factor >= 1.0:
            adjusted.append(day)
            continue
        adjusted.append(replace(day, conversions=round(mature_estimate(day.conversions, factor))))
    return adjusted


def estimate_conversion_deficit(daily: List[DailyBreakdown], as_of: date) -> int:
    """Estimated conversions not yet reported (mature estimate - observed), rounded."""
    deficit = 0.0
    for day in daily:
        factor = day_maturity(day.date, as_of)
        if 0 < factor < 1.0:
            deficit += mature_estimate(day.conversions, factor) - day.conversions
    return round(deficit)
