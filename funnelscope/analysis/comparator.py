"""Time period construction for period-over-period comparisons."""

from datetime import date, timedelta
from typing import List

from funnelscope.exceptions import InvalidTimeRangeError
from funnelscope.models import ComparisonPeriods, TimeRange


def _check_period_days(period_days: int) -> None:
    if period_days < 1:
        raise InvalidTimeRangeError(f"period length must be at least 1 day, got {period_days}")


def build_comparison_periods(reference_date: date, period_days: int) -> ComparisonPeriods:
    """
    Current = period_days ending at reference_date (inclusive);
    previous = the period_days immediately before it.

    Example: reference 2024-01-14, 7 days
        current:  2024-01-08 .. 2024-01-14
        previous: 2024-01-01 .. 2024-01-07
    """
    _check_period_days(period_days)
    current_start = reference_date - timedelta(days=period_days - 1)
    previous_end = current_start - timedelta(days=1)
    previous_start = previous_end - timedelta(days=period_days - 1)

    return ComparisonPeriods(
        current=TimeRange(current_start, reference_date),
        previous=TimeRange(previous_start, previous_end),
    )


def build_trailing_periods(reference_date: date, period_days: int, count: int) -> List[TimeRange]:
    """count contiguous periods ending at reference_date, most recent first."""
    _check_period_days(period_days)
    periods = []
    end = reference_date
    for _ in range(count):
        start = end - timedelta(days=period_days - 1)
        periods.append(TimeRange(start, end))
        end = start - timedelta(days=1)
    return periods
