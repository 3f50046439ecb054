"""
Structural advisors.

Read sub-entity breakdowns (ad sets / ad groups) from the diagnostic
context. Silent when the context carries none, which is the case for
clients without the breakdown capability or when structural analysis is
disabled for the account.
"""

from typing import List, Optional

from funnelscope.models import (
    DiagnosticContext,
    Finding,
    FunnelDropoff,
    MetricSnapshot,
    Severity,
    StageDiagnostic,
)

RECENT_EDIT_DAYS = 3
UNSTABLE_SPEND_WARNING = 30.0
UNSTABLE_SPEND_CRITICAL = 60.0


def learning_instability_advisor(
    stage_analysis: List[StageDiagnostic],
    dropoffs: List[FunnelDropoff],
    current: MetricSnapshot,
    previous: MetricSnapshot,
    context: Optional[DiagnosticContext] = None,
) -> List[Finding]:
    """
    Flags spend concentrated in ad sets that are still learning and were
    edited within the last 3 days. Entities with an unknown edit age
    (days_since_last_edit is None) are never counted as unstable.
    """
    sub_entities = context.sub_entities if context is not None else None
    if not sub_entities:
        return []

    active = [entity for entity in sub_entities if entity.spend > 0]
    total_spend = sum(entity.spend for entity in active)
    if total_spend == 0:
        return []

    unstable = [
        entity for entity in active
        if entity.in_learning_phase
        and entity.days_since_last_edit is not None
        and entity.days_since_last_edit <= RECENT_EDIT_DAYS
    ]
    if not unstable:
        return []

    unstable_spend = sum(entity.spend for entity in unstable)
    unstable_percent = unstable_spend / total_spend * 100
    if unstable_percent <= UNSTABLE_SPEND_WARNING:
        return []

    plural = "s" if len(unstable) != 1 else ""
    return [Finding(
        severity=Severity.critical if unstable_percent > UNSTABLE_SPEND_CRITICAL else Severity.warning,
        stage="account_structure",
        message=(
            f"Learning instability: {unstable_percent:.1f}% of spend (${unstable_spend:.2f}) is in "
            f"{len(unstable)} ad set{plural} in learning phase that were edited within the last "
            f"{RECENT_EDIT_DAYS} days. Frequent edits reset the learning algorithm."
        ),
        recommendation=(
            "Avoid editing ad sets during the learning phase. Wait at least 7 days after "
            "creation or significant budget changes before making further edits."
        ),
    )]
