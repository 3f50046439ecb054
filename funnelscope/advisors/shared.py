"""
Shared Advisors (all platforms).

WHAT:
    Creative fatigue, auction competition, creative exhaustion and ROAS
    efficiency checks that only need top-level snapshot fields.

WHY:
    These patterns look the same on Meta, Google and TikTok. Only the
    recommendation text differs per vertical, so each advisor is built by
    a factory that takes the recommendation.

DESIGN:
    - Factories return closures matching the FindingAdvisor signature
    - Module-level instances are what the registry composes
    - Missing baselines (previous CTR/CPM of 0) mean "no finding", never an error

REFERENCES:
    - funnelscope/analysis/derived_metrics.py (ROAS / CPA fallback chains)
    - funnelscope/advisors/registry.py
"""

from typing import List, Optional

from funnelscope.advisors._helpers import cpm, ctr
from funnelscope.analysis.derived_metrics import extract_cpa, extract_roas
from funnelscope.analysis.funnel_walker import FindingAdvisor
from funnelscope.analysis.significance import percent_change
from funnelscope.models import (
    DiagnosticContext,
    Finding,
    FunnelDropoff,
    MetricSnapshot,
    Severity,
    StageDiagnostic,
)

# =============================================================================
# CREATIVE FATIGUE
# =============================================================================

CREATIVE_FATIGUE_CTR_DROP = -15.0
CREATIVE_FATIGUE_CRITICAL_CTR_DROP = -30.0
# CPM falling by more than this means cheaper, lower-intent inventory, not fatigue
CREATIVE_FATIGUE_CPM_TOLERANCE = -5.0

DEFAULT_FATIGUE_RECOMMENDATION = (
    "Introduce new creative variations. Test different hooks in the first 3 seconds "
    "of video, or swap primary images. Avoid changing targeting at the same time so "
    "you can isolate the variable."
)
LEADGEN_FATIGUE_RECOMMENDATION = (
    "Refresh creative with new angles. For leadgen, test different value propositions "
    "in the hook (free consultation, downloadable resource, limited spots). Lead magnets "
    "fatigue faster than product ads because the perceived value diminishes after "
    "repeated exposure."
)


def create_creative_fatigue_advisor(recommendation: Optional[str] = None) -> FindingAdvisor:
    """CTR dropping while CPM holds: the audience is reached but not engaging."""
    recommendation = recommendation or DEFAULT_FATIGUE_RECOMMENDATION

    def creative_fatigue_advisor(
        stage_analysis: List[StageDiagnostic],
        dropoffs: List[FunnelDropoff],
        current: MetricSnapshot,
        previous: MetricSnapshot,
        context: Optional[DiagnosticContext] = None,
    ) -> List[Finding]:
        previous_ctr = ctr(previous)
        if previous_ctr == 0:
            return []

        ctr_change = percent_change(ctr(current), previous_ctr)
        previous_cpm = cpm(previous)
        cpm_change = percent_change(cpm(current), previous_cpm) if previous_cpm > 0 else 0.0

        if ctr_change >= CREATIVE_FATIGUE_CTR_DROP or cpm_change < CREATIVE_FATIGUE_CPM_TOLERANCE:
            return []

        return [Finding(
            severity=Severity.critical if ctr_change < CREATIVE_FATIGUE_CRITICAL_CTR_DROP else Severity.warning,
            stage="click",
            message=(
                f"CTR dropped {ctr_change:.1f}% while CPMs held steady ({cpm_change:+.1f}%). "
                "The audience is being reached but not engaging, which points to creative fatigue."
            ),
            recommendation=recommendation,
        )]

    return creative_fatigue_advisor


creative_fatigue_advisor = create_creative_fatigue_advisor()
leadgen_creative_fatigue_advisor = create_creative_fatigue_advisor(LEADGEN_FATIGUE_RECOMMENDATION)

# =============================================================================
# AUCTION COMPETITION
# =============================================================================

AUCTION_CPM_INCREASE = 25.0
AUCTION_CRITICAL_CPM_INCREASE = 50.0

DEFAULT_AUCTION_RECOMMENDATION = (
    "Check if this coincides with a seasonal competition spike (BFCM, Q4). Consider "
    "broadening audience targeting to access cheaper inventory. If using interest-based "
    "targeting, the audience may be oversaturated."
)
LEADGEN_AUCTION_RECOMMENDATION = (
    "Leadgen audiences (especially B2B) tend to be narrow, making them sensitive to "
    "auction pressure. Consider broadening your audience or shifting budget to "
    "lower-competition placements (Reels, Stories)."
)


def create_auction_competition_advisor(recommendation: Optional[str] = None) -> FindingAdvisor:
    """Rising CPM is an auction-level problem that inflates every downstream cost."""
    recommendation = recommendation or DEFAULT_AUCTION_RECOMMENDATION

    def auction_competition_advisor(
        stage_analysis: List[StageDiagnostic],
        dropoffs: List[FunnelDropoff],
        current: MetricSnapshot,
        previous: MetricSnapshot,
        context: Optional[DiagnosticContext] = None,
    ) -> List[Finding]:
        previous_cpm = cpm(previous)
        if previous_cpm == 0:
            return []

        current_cpm = cpm(current)
        cpm_change = percent_change(current_cpm, previous_cpm)
        if cpm_change <= AUCTION_CPM_INCREASE:
            return []

        return [Finding(
            severity=Severity.critical if cpm_change > AUCTION_CRITICAL_CPM_INCREASE else Severity.warning,
            stage="awareness",
            message=(
                f"CPMs increased {cpm_change:.1f}% (${previous_cpm:.2f} -> ${current_cpm:.2f}). "
                "This inflates costs at every downstream stage even if conversion rates hold."
            ),
            recommendation=recommendation,
        )]

    return auction_competition_advisor


auction_competition_advisor = create_auction_competition_advisor()
leadgen_auction_competition_advisor = create_auction_competition_advisor(LEADGEN_AUCTION_RECOMMENDATION)

# =============================================================================
# CREATIVE EXHAUSTION (multi-period trend)
# =============================================================================

MIN_HISTORICAL_PERIODS = 3
MIN_CTR_POINTS = 4
MIN_CONSECUTIVE_DECLINES = 3


def creative_exhaustion_advisor(
    stage_analysis: List[StageDiagnostic],
    dropoffs: List[FunnelDropoff],
    current: MetricSnapshot,
    previous: MetricSnapshot,
    context: Optional[DiagnosticContext] = None,
) -> List[Finding]:
    """
    Sustained CTR decay across trailing periods.

    Catches gradual exhaustion that never trips the single-period fatigue
    check. Needs at least 3 historical snapshots in the context.
    """
    history = context.historical_snapshots if context is not None else None
    # Trailing periods start at the reference date, so the first one is the current period
    history = [
        s for s in history or ()
        if (s.period_start, s.period_end) != (current.period_start, current.period_end)
    ]
    if len(history) < MIN_HISTORICAL_PERIODS:
        return []

    # Most recent first: current period, then trailing periods
    timeline = [value for value in [ctr(current)] + [ctr(s) for s in history] if value > 0]
    if len(timeline) < MIN_CTR_POINTS:
        return []

    decline_rates = []
    for newer, older in zip(timeline, timeline[1:]):
        if older <= 0 or newer >= older:
            break
        decline_rates.append((newer - older) / older * 100)

    if len(decline_rates) < MIN_CONSECUTIVE_DECLINES:
        return []

    accelerating = abs(decline_rates[0]) > abs(decline_rates[1])
    average_decline = sum(decline_rates) / len(decline_rates)
    cumulative = percent_change(timeline[0], timeline[len(decline_rates)])

    message = (
        f"Creative exhaustion detected: CTR has declined for {len(decline_rates)} consecutive "
        f"periods (avg {average_decline:.1f}%/period, cumulative {cumulative:.1f}%)."
    )
    if accelerating:
        message += " The decline is accelerating."

    return [Finding(
        severity=Severity.critical if accelerating else Severity.warning,
        stage="click",
        message=message,
        recommendation=(
            "Prepare new creative variations immediately and pause the worst-performing ads."
            if accelerating
            else "Begin testing new creative angles, formats or hooks over the next 1-2 weeks."
        ),
    )]

# =============================================================================
# ROAS EFFICIENCY
# =============================================================================

ROAS_DECLINE = -15.0
ROAS_CRITICAL_DECLINE = -30.0
ROAS_IMPROVEMENT = 20.0
# CPA moving less than this while ROAS falls points at order value, not acquisition cost
STABLE_CPA_BAND = 10.0
TARGET_SHORTFALL_CRITICAL = 30.0


def create_roas_efficiency_advisor(target_roas: Optional[float] = None) -> FindingAdvisor:
    """ROAS trend period over period, plus a shortfall check against target_roas."""

    def roas_efficiency_advisor(
        stage_analysis: List[StageDiagnostic],
        dropoffs: List[FunnelDropoff],
        current: MetricSnapshot,
        previous: MetricSnapshot,
        context: Optional[DiagnosticContext] = None,
    ) -> List[Finding]:
        findings = []
        current_roas = extract_roas(current)
        previous_roas = extract_roas(previous)

        if current_roas is not None and previous_roas is not None:
            roas_change = percent_change(current_roas, previous_roas)
            trend = f"({previous_roas:.2f}x -> {current_roas:.2f}x)"

            if roas_change < ROAS_DECLINE:
                current_cpa = extract_cpa(current)
                previous_cpa = extract_cpa(previous)
                order_value_issue = (
                    current_cpa is not None
                    and previous_cpa is not None
                    and previous_cpa > 0
                    and abs(percent_change(current_cpa, previous_cpa)) < STABLE_CPA_BAND
                )
                if order_value_issue:
                    message = (
                        f"ROAS declined {roas_change:.1f}% {trend} while CPA remained stable. "
                        "Average order value is dropping rather than acquisition cost rising."
                    )
                    recommendation = (
                        "Investigate product mix shifts and promotional discounts. "
                        "Consider value-based bidding to prioritize higher-value customers."
                    )
                else:
                    message = f"ROAS declined {roas_change:.1f}% {trend}."
                    recommendation = "Review bid strategy and audience targeting."

                findings.append(Finding(
                    severity=Severity.critical if roas_change < ROAS_CRITICAL_DECLINE else Severity.warning,
                    stage="roas",
                    message=message,
                    recommendation=recommendation,
                ))
            elif roas_change > ROAS_IMPROVEMENT:
                findings.append(Finding(
                    severity=Severity.healthy,
                    stage="roas",
                    message=f"ROAS improved {roas_change:.1f}% {trend}.",
                ))

        if target_roas and current_roas is not None and current_roas < target_roas:
            shortfall = (target_roas - current_roas) / target_roas * 100
            critical = shortfall > TARGET_SHORTFALL_CRITICAL
            findings.append(Finding(
                severity=Severity.critical if critical else Severity.warning,
                stage="roas",
                message=(
                    f"Current ROAS ({current_roas:.2f}x) is {shortfall:.1f}% below "
                    f"target ({target_roas:.2f}x)."
                ),
                recommendation=(
                    "Reduce spend on underperforming campaigns or tighten audience targeting."
                    if critical
                    else "Monitor closely and make incremental bid or audience adjustments."
                ),
            ))

        return findings

    return roas_efficiency_advisor


roas_efficiency_advisor = create_roas_efficiency_advisor()
