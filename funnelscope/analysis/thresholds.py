"""
Dynamic threshold resolution.

WHAT:
    Resolves the "normal" week-over-week variance for a metric: the account's
    own coefficient of variation when it has at least 4 weeks of history,
    otherwise the vertical's static benchmark (15% when unspecified).

WHY:
    Vertical benchmarks are a cold-start fallback. Once an account has
    enough history its own volatility is a far better yardstick.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from funnelscope.models import VerticalBenchmarks

MIN_WEEKS_OF_HISTORY = 4
DEFAULT_VARIANCE_PERCENT = 15.0


@dataclass
class AccountHistory:
    """Weekly metric values keyed by metric, most recent first."""

    weekly_values: Dict[str, List[float]] = field(default_factory=dict)

    @property
    def weeks_of_data(self) -> int:
        return max((len(v) for v in self.weekly_values.values()), default=0)


def account_variance(metric_key: str, history: AccountHistory) -> Optional[float]:
    """
    Coefficient of variation (stddev / mean) in percent.

    Returns None with fewer than 4 weeks of data or a zero mean.
    """
    values = history.weekly_values.get(metric_key)
    if not values or len(values) < MIN_WEEKS_OF_HISTORY:
        return None

    mean = sum(values) / len(values)
    if mean == 0:
        return None

    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance) / mean * 100


def get_effective_variance(
    metric_key: str,
    history: Optional[AccountHistory],
    benchmarks: Optional[VerticalBenchmarks],
    default: float = DEFAULT_VARIANCE_PERCENT,
) -> float:
    """Account history first, then vertical benchmark, then the default."""
    if history is not None:
        acct_var = account_variance(metric_key, history)
        if acct_var is not None:
            return acct_var

    if benchmarks is not None:
        benchmark_var = benchmarks.variance_for(metric_key)
        if benchmark_var is not None:
            return benchmark_var

    return default
