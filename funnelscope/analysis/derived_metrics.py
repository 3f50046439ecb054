"""
Derived metric lookups over MetricSnapshot.top_level.

WHAT:
    Well-known top-level keys and the exact fallback order used to read
    ROAS, revenue and CPA from a snapshot, whatever platform produced it.

WHY:
    Platforms name these fields differently (Meta: roas_<action_type>,
    Google: roas / conversions_value, TikTok: complete_payment_value).
    Centralizing the chains keeps advisors and the context builder in sync.

Well-known keys:
    ctr, cpm, cpc, frequency, bid_strategy, roas, roas_<action>,
    conversions_value, complete_payment_value, purchase_value,
    cost_per_conversion, cost_per_complete_payment
"""

from typing import Optional

from funnelscope.models import MetricSnapshot

REVENUE_KEYS = ("conversions_value", "complete_payment_value", "purchase_value")
CPA_KEYS = ("cost_per_conversion", "cost_per_complete_payment")
ROAS_PREFIX = "roas_"


def top_level_number(snapshot: MetricSnapshot, key: str, default: float = 0.0) -> float:
    value = snapshot.top_level.get(key)
    if value is None:
        return default
    return float(value)


def extract_revenue(snapshot: MetricSnapshot) -> float:
    """conversions_value -> complete_payment_value -> purchase_value -> 0."""
    for key in REVENUE_KEYS:
        value = snapshot.top_level.get(key)
        if value is not None:
            return float(value)
    return 0.0


def extract_cpa(snapshot: MetricSnapshot) -> Optional[float]:
    """cost_per_conversion -> cost_per_complete_payment -> None."""
    for key in CPA_KEYS:
        value = snapshot.top_level.get(key)
        if value is not None:
            return float(value)
    return None


def extract_roas(snapshot: MetricSnapshot) -> Optional[float]:
    """
    First positive roas_<action> key (insertion order), then a positive
    plain roas, then revenue / spend. None when nothing is available.
    """
    top_level = snapshot.top_level
    for key, value in top_level.items():
        if key.startswith(ROAS_PREFIX) and value is not None and value > 0:
            return float(value)

    roas = top_level.get("roas")
    if roas is not None and roas > 0:
        return float(roas)

    revenue = extract_revenue(snapshot)
    if snapshot.spend > 0 and revenue > 0:
        return revenue / snapshot.spend

    return None
