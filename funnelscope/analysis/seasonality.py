"""
Seasonality calendar.

WHAT:
    Known high-competition periods (BFCM, Prime Day, ...) with CPM/CPA
    threshold multipliers.

WHY:
    During these windows CPM increases are expected; the correlator names
    the active event so a market-wide CPM spike is read in context.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class SeasonalEvent:
    name: str
    start: Tuple[int, int]  # (month, day), inclusive
    end: Tuple[int, int]
    cpm_threshold_multiplier: float
    cpa_threshold_multiplier: float


SEASONAL_EVENTS: List[SeasonalEvent] = [
    SeasonalEvent("Valentine's Day", (2, 7), (2, 14), 1.2, 1.15),
    SeasonalEvent("Easter / Spring Sale", (3, 20), (4, 5), 1.15, 1.1),
    SeasonalEvent("Mother's Day", (5, 1), (5, 12), 1.2, 1.15),
    SeasonalEvent("Prime Day", (7, 10), (7, 17), 1.4, 1.25),
    SeasonalEvent("Back to School", (8, 1), (8, 31), 1.2, 1.1),
    SeasonalEvent("Singles' Day (11.11)", (11, 8), (11, 12), 1.3, 1.2),
    SeasonalEvent("Black Friday / Cyber Monday", (11, 20), (12, 2), 1.8, 1.4),
    SeasonalEvent("Holiday Season (Dec)", (12, 3), (12, 26), 1.5, 1.3),
    SeasonalEvent("Year-End Clearance", (12, 26), (12, 31), 1.3, 1.2),
]


def _ranges_overlap(a_start: Tuple[int, int], a_end: Tuple[int, int],
                    b_start: Tuple[int, int], b_end: Tuple[int, int]) -> bool:
    # A range that wraps the year boundary (Dec -> Jan) is treated as overlapping
    if a_start > a_end or b_start > b_end:
        return True
    return a_start <= b_end and b_start <= a_end


def get_active_seasonal_event(period_start: date, period_end: date) -> Optional[SeasonalEvent]:
    """Overlapping event with the highest CPM multiplier, or None."""
    start = (period_start.month, period_start.day)
    end = (period_end.month, period_end.day)

    best_match = None
    for event in SEASONAL_EVENTS:
        if not _ranges_overlap(start, end, event.start, event.end):
            continue
        if best_match is None or event.cpm_threshold_multiplier > best_match.cpm_threshold_multiplier:
            best_match = event
    return best_match


def get_seasonal_cpm_multiplier(period_start: date, period_end: date) -> float:
    event = get_active_seasonal_event(period_start, period_end)
    return event.cpm_threshold_multiplier if event else 1.0
