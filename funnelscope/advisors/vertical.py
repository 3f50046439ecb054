"""
Vertical and platform-specific advisors.

WHAT:
    - landing_page_advisor: click -> landing_page transition (Meta commerce,
      the only funnel with a landing page view stage)
    - checkout_friction_advisor: add_to_cart -> purchase transition (commerce)
    - lead_quality_advisor: lead vs qualified_lead volume (leadgen)

WHY:
    These read specific stage names, so the registry only attaches them to
    funnels that define those stages. On any other funnel the lookups miss
    and the advisor returns [].
"""

from typing import List, Optional

from funnelscope.advisors._helpers import find_dropoff, find_stage
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
# LANDING PAGE (Meta commerce)
# =============================================================================

LANDING_PAGE_DROP = -15.0
LANDING_PAGE_CRITICAL_DROP = -30.0
# Click-to-LPV below this is a load/redirect problem regardless of trend
LANDING_PAGE_MIN_RATE = 0.6


def landing_page_advisor(
    stage_analysis: List[StageDiagnostic],
    dropoffs: List[FunnelDropoff],
    current: MetricSnapshot,
    previous: MetricSnapshot,
    context: Optional[DiagnosticContext] = None,
) -> List[Finding]:
    click_to_lpv = find_dropoff(dropoffs, "click", "landing_page")
    if click_to_lpv is None:
        return []

    findings = []
    stage = "click -> landing_page"

    if click_to_lpv.delta_percent < LANDING_PAGE_DROP:
        findings.append(Finding(
            severity=Severity.critical if click_to_lpv.delta_percent < LANDING_PAGE_CRITICAL_DROP else Severity.warning,
            stage=stage,
            message=(
                f"Click-to-landing-page rate dropped {click_to_lpv.delta_percent:.1f}% "
                f"({click_to_lpv.previous_rate * 100:.1f}% -> {click_to_lpv.current_rate * 100:.1f}%). "
                "Visitors are clicking but not reaching the page."
            ),
            recommendation=(
                "Check mobile page load speed (target < 3s), broken redirects and "
                "consent banners blocking page load."
            ),
        ))

    if 0 < click_to_lpv.current_rate < LANDING_PAGE_MIN_RATE:
        findings.append(Finding(
            severity=Severity.warning,
            stage=stage,
            message=(
                f"Only {click_to_lpv.current_rate * 100:.1f}% of clicks are resulting in "
                "landing page views. Industry baseline is 70-90%."
            ),
            recommendation="Test the landing page URL on mobile with a throttled connection.",
        ))

    return findings

# =============================================================================
# CHECKOUT FRICTION (commerce)
# =============================================================================

CHECKOUT_DROP = -20.0
CHECKOUT_CRITICAL_DROP = -35.0
CHECKOUT_MIN_RATE = 0.15


def checkout_friction_advisor(
    stage_analysis: List[StageDiagnostic],
    dropoffs: List[FunnelDropoff],
    current: MetricSnapshot,
    previous: MetricSnapshot,
    context: Optional[DiagnosticContext] = None,
) -> List[Finding]:
    atc_to_purchase = find_dropoff(dropoffs, "add_to_cart", "purchase")
    if atc_to_purchase is None:
        return []

    findings = []
    stage = "add_to_cart -> purchase"

    if atc_to_purchase.delta_percent < CHECKOUT_DROP:
        findings.append(Finding(
            severity=Severity.critical if atc_to_purchase.delta_percent < CHECKOUT_CRITICAL_DROP else Severity.warning,
            stage=stage,
            message=(
                f"ATC-to-purchase rate dropped {atc_to_purchase.delta_percent:.1f}% "
                f"({atc_to_purchase.previous_rate * 100:.1f}% -> {atc_to_purchase.current_rate * 100:.1f}%). "
                "Shoppers are adding to cart but abandoning at checkout."
            ),
            recommendation=(
                "Verify the purchase event is firing. Check for payment gateway issues, "
                "shipping cost changes or new checkout form fields."
            ),
        ))

    if 0 < atc_to_purchase.current_rate < CHECKOUT_MIN_RATE:
        findings.append(Finding(
            severity=Severity.info,
            stage=stage,
            message=(
                f"Only {atc_to_purchase.current_rate * 100:.1f}% of add-to-carts are converting "
                "to purchases. This is below the typical 20-50% range."
            ),
            recommendation="Consider cart abandonment sequences or guest checkout.",
        ))

    return findings

# =============================================================================
# LEAD QUALITY (leadgen)
# =============================================================================

LEAD_VOLUME_UP = 5.0
QUALIFIED_DROP = -15.0
QUALIFIED_CRITICAL_DROP = -30.0
QUALITY_RATE_STABLE = -10.0
MIN_QUALITY_RATE = 0.08


def lead_quality_advisor(
    stage_analysis: List[StageDiagnostic],
    dropoffs: List[FunnelDropoff],
    current: MetricSnapshot,
    previous: MetricSnapshot,
    context: Optional[DiagnosticContext] = None,
) -> List[Finding]:
    """Lead volume holding or rising while qualified leads fall means the form captures junk."""
    lead = find_stage(stage_analysis, "lead")
    qualified = find_stage(stage_analysis, "qualified_lead")
    if lead is None or qualified is None:
        return []
    if qualified.current_value == 0 and qualified.previous_value == 0:
        return []

    current_rate = qualified.current_value / lead.current_value if lead.current_value > 0 else 0.0
    previous_rate = qualified.previous_value / lead.previous_value if lead.previous_value > 0 else 0.0
    rate_change = percent_change(current_rate, previous_rate)

    findings = []

    if lead.delta_percent > LEAD_VOLUME_UP and qualified.delta_percent < QUALIFIED_DROP:
        findings.append(Finding(
            severity=Severity.critical if qualified.delta_percent < QUALIFIED_CRITICAL_DROP else Severity.warning,
            stage="lead -> qualified_lead",
            message=(
                f"Lead volume increased {lead.delta_percent:.1f}% but qualified leads dropped "
                f"{qualified.delta_percent:.1f}%. Quality rate fell from {previous_rate * 100:.1f}% "
                f"to {current_rate * 100:.1f}%."
            ),
            recommendation=(
                "Switch instant forms to Higher Intent optimization and add qualifying questions."
            ),
        ))

    if (
        lead.delta_percent < QUALIFIED_DROP
        and qualified.delta_percent < QUALIFIED_DROP
        and rate_change > QUALITY_RATE_STABLE
    ):
        findings.append(Finding(
            severity=Severity.warning,
            stage="lead",
            message=(
                f"Both total leads ({lead.delta_percent:.1f}%) and qualified leads "
                f"({qualified.delta_percent:.1f}%) dropped while quality rate held "
                f"({rate_change:.1f}%). This is a delivery issue, not a quality issue."
            ),
            recommendation="Check budget changes, audience exhaustion and CPM movement.",
        ))

    if qualified.current_value > 0 and current_rate < MIN_QUALITY_RATE:
        findings.append(Finding(
            severity=Severity.warning,
            stage="qualified_lead",
            message=(
                f"Only {current_rate * 100:.1f}% of leads are qualifying. "
                "A healthy range is 15-40% with higher-intent optimization."
            ),
            recommendation="Make the form harder to submit without intent and review targeting.",
        ))

    return findings
