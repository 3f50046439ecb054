"""
Portfolio Action Generator.

WHAT:
    Merges per-source elasticity data, cross-source findings and budget
    recommendations into one ranked decision list.

WHY:
    Operators act on a short list, not on three separate reports. Ranking
    by recoverable revenue puts the biggest money first.

DESIGN:
    - Elasticity actions: one per source, from its top impact entry;
      skipped under $10 of estimated loss
    - Budget actions: one per recommendation
    - Market-wide actions: one per market-wide CPM finding
    - Sort by recovery (desc); recoveries within $1 are ordered by
      confidence instead; priorities are 1..n
"""

from functools import cmp_to_key
from typing import List, Optional

from funnelscope.models import DiagnosticResult, Severity
from funnelscope.orchestrator.correlator import shift_risk_level
from funnelscope.orchestrator.types import (
    MARKET_WIDE_CPM_INCREASE,
    BudgetRecommendation,
    CrossPlatformFinding,
    PlatformResult,
    PortfolioAction,
)

MIN_REVENUE_LOSS = 10.0
RECOVERY_TIE_BAND = 1.0

BUDGET_CONFIDENCE_SCORES = {"high": 0.85, "medium": 0.6, "low": 0.35}
MARKET_WIDE_CONFIDENCE = 0.7


def generate_portfolio_actions(
    platform_results: List[PlatformResult],
    findings: List[CrossPlatformFinding],
    budget_recommendations: List[BudgetRecommendation],
) -> List[PortfolioAction]:
    actions = []

    for platform_result in platform_results:
        if not platform_result.succeeded:
            continue
        action = _elasticity_action(platform_result)
        if action is not None:
            actions.append(action)

    for recommendation in budget_recommendations:
        shift = recommendation.suggested_shift_percent or 0
        actions.append(PortfolioAction(
            priority=0,
            action=(
                f"Shift {shift}% budget from {recommendation.from_platform} -> "
                f"{recommendation.to_platform}: {recommendation.reason}"
            ),
            platforms=[recommendation.from_platform, recommendation.to_platform],
            confidence_score=BUDGET_CONFIDENCE_SCORES.get(recommendation.confidence, 0.35),
            estimated_revenue_recovery=recommendation.estimated_kpi_improvement or 0.0,
            risk_level=shift_risk_level(shift),
            required_budget_shift_percent=shift,
        ))

    for finding in findings:
        if finding.signal != MARKET_WIDE_CPM_INCREASE:
            continue
        actions.append(PortfolioAction(
            priority=0,
            action="Market-wide CPM increase detected: consider reducing spend until costs normalize",
            platforms=list(finding.platforms),
            confidence_score=(
                finding.confidence_score if finding.confidence_score is not None else MARKET_WIDE_CONFIDENCE
            ),
            estimated_revenue_recovery=finding.estimated_revenue_recovery or 0.0,
            risk_level="medium",
        ))

    actions.sort(key=cmp_to_key(_compare_actions))
    for priority, action in enumerate(actions, start=1):
        action.priority = priority
    return actions


def _compare_actions(a: PortfolioAction, b: PortfolioAction) -> float:
    recovery_diff = b.estimated_revenue_recovery - a.estimated_revenue_recovery
    if abs(recovery_diff) > RECOVERY_TIE_BAND:
        return recovery_diff
    return b.confidence_score - a.confidence_score


def _elasticity_action(platform_result: PlatformResult) -> Optional[PortfolioAction]:
    result = platform_result.result
    if result.elasticity is None or not result.elasticity.impact_ranking:
        return None

    top_impact = result.elasticity.impact_ranking[0]
    revenue_loss = abs(top_impact.estimated_revenue_delta)
    if revenue_loss < MIN_REVENUE_LOSS:
        return None

    return PortfolioAction(
        priority=0,
        action=(
            f"Fix {top_impact.stage} bottleneck on {platform_result.platform}: "
            f"estimated ${revenue_loss:.0f}/period revenue loss"
        ),
        platforms=[platform_result.platform],
        confidence_score=result_confidence(result),
        estimated_revenue_recovery=revenue_loss,
        risk_level="low",
    )


def result_confidence(result: DiagnosticResult) -> float:
    """Higher with a large KPI move and many corroborating signals."""
    kpi_magnitude = min(abs(result.primary_kpi.delta_percent) / 50, 1.0)

    total_stages = len(result.stage_analysis)
    significant = sum(1 for stage in result.stage_analysis if stage.is_significant)
    signal_density = significant / total_stages if total_stages else 0.0

    critical = sum(1 for finding in result.findings if finding.severity is Severity.critical)
    finding_boost = min(critical * 0.1, 0.3)

    return min(0.3 + kpi_magnitude * 0.4 + signal_density * 0.2 + finding_boost, 1.0)
