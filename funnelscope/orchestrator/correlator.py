"""
Cross-Source Correlator.

WHAT:
    Detects patterns that only show up across the whole media portfolio:
    - market-wide CPM increase (every source's CPM up > 15%)
    - halo effect (spend up on one source, KPI cost down on another)
    - conflict (some sources improving, others worsening) with one budget
      reallocation recommendation per (worsening, improving) pair

WHY:
    A CPM spike on one source is an account problem; the same spike on all
    of them is the market. Per-source diagnostics cannot tell the two apart.

DESIGN:
    - Runs only when at least 2 sources succeeded
    - Pure reduction over DiagnosticResults; never fetches
    - Primary KPI deltas are cost deltas: negative means improving

REFERENCES:
    - funnelscope/orchestrator/types.py
    - funnelscope/analysis/seasonality.py (names the overlapping event)
"""

import logging
import math
from dataclasses import dataclass, field
from itertools import permutations
from typing import List, Optional, Tuple

from funnelscope.analysis.funnel_walker import find_awareness_stage
from funnelscope.analysis.seasonality import get_active_seasonal_event
from funnelscope.analysis.significance import percent_change
from funnelscope.models import DiagnosticResult, Severity
from funnelscope.orchestrator.types import (
    HALO_EFFECT,
    MARKET_WIDE_CPM_INCREASE,
    PLATFORM_CONFLICT,
    BudgetRecommendation,
    CrossPlatformFinding,
    PlatformResult,
)

logger = logging.getLogger(__name__)

MIN_SOURCES_FOR_CORRELATION = 2

MARKET_WIDE_CPM_THRESHOLD = 15.0
MARKET_WIDE_CRITICAL_AVERAGE = 40.0

HALO_SPEND_INCREASE = 20.0
HALO_KPI_IMPROVEMENT = -10.0

IMPROVING_KPI_DELTA = -10.0
WORSENING_KPI_DELTA = 15.0
MAX_SHIFT_PERCENT = 30
HIGH_CONFIDENCE_WORSENING = 30.0
HIGH_CONFIDENCE_IMPROVING = 20.0


@dataclass
class CorrelationResult:
    findings: List[CrossPlatformFinding] = field(default_factory=list)
    budget_recommendations: List[BudgetRecommendation] = field(default_factory=list)


def correlate(platform_results: List[PlatformResult]) -> CorrelationResult:
    successful = [p for p in platform_results if p.succeeded]
    if len(successful) < MIN_SOURCES_FOR_CORRELATION:
        logger.debug("[CORRELATOR] %d successful sources, skipping correlation", len(successful))
        return CorrelationResult()

    correlation = CorrelationResult()
    correlation.findings.extend(detect_market_wide_signals(successful))
    correlation.findings.extend(detect_halo_effects(successful))

    conflict_findings, recommendations = detect_platform_conflicts(successful)
    correlation.findings.extend(conflict_findings)
    correlation.budget_recommendations.extend(recommendations)

    logger.info(
        "[CORRELATOR] %d cross-source findings, %d budget recommendations",
        len(correlation.findings), len(correlation.budget_recommendations),
    )
    return correlation

# =============================================================================
# MARKET-WIDE CPM
# =============================================================================

def cpm_change(result: DiagnosticResult) -> Optional[float]:
    """
    CPM change derived from spend and awareness-stage impressions.

    None when either period has no impressions, so a source that stopped
    delivering never counts as a CPM increase.
    """
    awareness = find_awareness_stage(result.stage_analysis)
    if awareness is None or awareness.current_value <= 0 or awareness.previous_value <= 0:
        return None

    current_cpm = result.spend_current / awareness.current_value * 1000
    previous_cpm = result.spend_previous / awareness.previous_value * 1000
    if previous_cpm <= 0:
        return None
    return percent_change(current_cpm, previous_cpm)


def detect_market_wide_signals(successful: List[PlatformResult]) -> List[CrossPlatformFinding]:
    changes = []
    for platform_result in successful:
        change = cpm_change(platform_result.result)
        # Every source must show the increase; one without usable CPM data breaks "every"
        if change is None or change <= MARKET_WIDE_CPM_THRESHOLD:
            return []
        changes.append(change)

    average = sum(changes) / len(changes)
    critical = average > MARKET_WIDE_CRITICAL_AVERAGE

    message = (
        f"CPMs increased across all platforms (avg +{average:.1f}%). This suggests "
        "market-wide competition rather than an account-specific issue."
    )
    current_period = successful[0].result.periods.current
    event = get_active_seasonal_event(current_period.since, current_period.until)
    if event is not None:
        message += f" The current period overlaps {event.name}, when auction pressure is expected."

    return [CrossPlatformFinding(
        signal=MARKET_WIDE_CPM_INCREASE,
        severity=Severity.critical if critical else Severity.warning,
        platforms=[p.platform for p in successful],
        message=message,
        recommendation=(
            "Market-wide CPM increases are typically seasonal or driven by macro events. "
            "Consider reducing spend until costs normalize, or shift budget to lower-CPM "
            "placements and channels."
        ),
        confidence_score=min(average / 60, 1.0),
        risk_level="high" if critical else "medium",
    )]

# =============================================================================
# HALO EFFECT
# =============================================================================

def spend_change(result: DiagnosticResult) -> float:
    if result.spend_previous <= 0:
        return 0.0
    return (result.spend_current - result.spend_previous) / result.spend_previous * 100


def detect_halo_effects(successful: List[PlatformResult]) -> List[CrossPlatformFinding]:
    findings = []
    for driver, receiver in permutations(successful, 2):
        driver_spend_change = spend_change(driver.result)
        receiver_kpi_delta = receiver.result.primary_kpi.delta_percent
        if driver_spend_change <= HALO_SPEND_INCREASE or receiver_kpi_delta >= HALO_KPI_IMPROVEMENT:
            continue

        findings.append(CrossPlatformFinding(
            signal=HALO_EFFECT,
            severity=Severity.info,
            platforms=[driver.platform, receiver.platform],
            message=(
                f"{driver.platform} spend increased {driver_spend_change:.1f}% and "
                f"{receiver.platform} conversion costs improved {receiver_kpi_delta:.1f}%. "
                f"{driver.platform} awareness may be driving {receiver.platform} conversions."
            ),
            recommendation=(
                f"Evaluate {driver.platform} as an awareness driver rather than purely on direct CPA. "
                f"Monitor {receiver.platform} before cutting {driver.platform} spend."
            ),
            confidence_score=min(driver_spend_change * abs(receiver_kpi_delta) / 2000, 0.8),
            risk_level="low",
        ))
    return findings

# =============================================================================
# CONFLICT + BUDGET REALLOCATION
# =============================================================================

def suggested_shift_percent(worsening_delta: float, improving_delta: float) -> int:
    # Half rounds up (12.5 -> 13), not to even
    raw = (abs(worsening_delta) + abs(improving_delta)) / 4
    return min(MAX_SHIFT_PERCENT, math.floor(raw + 0.5))


def shift_risk_level(shift_percent: float) -> str:
    if shift_percent > 30:
        return "high"
    if shift_percent > 10:
        return "medium"
    return "low"


def detect_platform_conflicts(
    successful: List[PlatformResult],
) -> Tuple[List[CrossPlatformFinding], List[BudgetRecommendation]]:
    improving = [p for p in successful if p.result.primary_kpi.delta_percent < IMPROVING_KPI_DELTA]
    worsening = [p for p in successful if p.result.primary_kpi.delta_percent > WORSENING_KPI_DELTA]
    if not improving or not worsening:
        return [], []

    improving_names = ", ".join(p.platform for p in improving)
    worsening_names = ", ".join(p.platform for p in worsening)
    delta_total = sum(abs(p.result.primary_kpi.delta_percent) for p in improving + worsening)

    finding = CrossPlatformFinding(
        signal=PLATFORM_CONFLICT,
        severity=Severity.warning,
        platforms=[p.platform for p in improving + worsening],
        message=(
            f"Performance is diverging across platforms: {improving_names} KPI improving while "
            f"{worsening_names} KPI worsening. This suggests a budget reallocation opportunity."
        ),
        recommendation=(
            "Shift incremental budget from underperforming platforms to those with improving "
            "efficiency, then re-run the diagnostic to verify the trend holds."
        ),
        confidence_score=min(delta_total / 100, 0.9),
        risk_level="medium",
    )

    recommendations = []
    for worse in worsening:
        for better in improving:
            worse_delta = worse.result.primary_kpi.delta_percent
            better_delta = better.result.primary_kpi.delta_percent
            shift = suggested_shift_percent(worse_delta, better_delta)
            high_confidence = abs(worse_delta) > HIGH_CONFIDENCE_WORSENING and abs(better_delta) > HIGH_CONFIDENCE_IMPROVING

            recommendations.append(BudgetRecommendation(
                from_platform=worse.platform,
                to_platform=better.platform,
                reason=(
                    f"{worse.platform} CPA worsened {worse_delta:.1f}% while "
                    f"{better.platform} CPA improved {better_delta:.1f}%"
                ),
                confidence="high" if high_confidence else "medium",
                suggested_shift_percent=shift,
                estimated_kpi_improvement=abs(better_delta) * 0.5,
                risk_level=shift_risk_level(shift),
            ))

    return [finding], recommendations
