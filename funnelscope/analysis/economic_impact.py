"""
Economic Impact - dollar-denominated funnel elasticity.

WHAT:
    Converts stage and drop-off deltas into estimated revenue impact and
    ranks stages by absolute dollar loss.

WHY:
    A -40% swing in impressions and a -40% swing in purchases are not the
    same problem. Ranking by estimated dollars tells the advertiser which
    bottleneck to fix first.

DESIGN:
    - Bottom-of-funnel (primary KPI) stages: delta x AOV
    - Upper-funnel stages are attenuated since a lost click or impression
      does not convert 1:1 (clicks 0.1, impressions 0.01)
    - Drop-offs use their own upstream volume (previous from-stage count)
      as the base, never the bottom-of-funnel count
"""

from typing import List, Optional

from funnelscope.models import (
    EconomicImpact,
    ElasticityEntry,
    ElasticityRanking,
    FunnelDropoff,
    RevenueData,
    StageDiagnostic,
)

CLICK_LEVEL_MULTIPLIER = 0.1
IMPRESSION_LEVEL_MULTIPLIER = 0.01

IMPRESSION_METRICS = frozenset({"impressions"})


def _impact_percent(revenue_delta: float, previous_total_revenue: float) -> float:
    # Unknown baseline: no percentage
    if previous_total_revenue == 0:
        return 0.0
    return revenue_delta / previous_total_revenue * 100


def funnel_multiplier(stage: StageDiagnostic, is_bottom_of_funnel: bool) -> float:
    if is_bottom_of_funnel:
        return 1.0
    if stage.metric in IMPRESSION_METRICS:
        return IMPRESSION_LEVEL_MULTIPLIER
    return CLICK_LEVEL_MULTIPLIER


def compute_stage_economic_impact(
    stage: StageDiagnostic,
    average_order_value: float,
    is_bottom_of_funnel: bool,
    previous_total_revenue: float = 0.0,
) -> EconomicImpact:
    """Revenue impact of one stage's count change."""
    conversion_delta = stage.current_value - stage.previous_value
    revenue_delta = conversion_delta * average_order_value * funnel_multiplier(stage, is_bottom_of_funnel)

    return EconomicImpact(
        conversion_delta=conversion_delta,
        estimated_revenue_delta=revenue_delta,
        revenue_impact_percent=_impact_percent(revenue_delta, previous_total_revenue),
    )


def compute_dropoff_economic_impact(
    dropoff: FunnelDropoff,
    expected_conversions: float,
    average_order_value: float,
    previous_total_revenue: float = 0.0,
) -> EconomicImpact:
    """
    Revenue impact of a transition's rate change.

    expected_conversions is the transition's upstream base, i.e. the
    previous period's from-stage count.
    """
    conversion_delta = (dropoff.current_rate - dropoff.previous_rate) * expected_conversions
    revenue_delta = conversion_delta * average_order_value

    return EconomicImpact(
        conversion_delta=conversion_delta,
        estimated_revenue_delta=revenue_delta,
        revenue_impact_percent=_impact_percent(revenue_delta, previous_total_revenue),
    )


def attach_economic_impacts(
    stage_analysis: List[StageDiagnostic],
    dropoffs: List[FunnelDropoff],
    primary_kpi: str,
    revenue_data: Optional[RevenueData],
) -> None:
    """Fill economic_impact on freshly built stage/drop-off diagnostics."""
    if revenue_data is None:
        return

    aov = revenue_data.average_order_value
    previous_revenue = revenue_data.previous_total_revenue

    for stage in stage_analysis:
        stage.economic_impact = compute_stage_economic_impact(
            stage, aov, stage.metric == primary_kpi, previous_revenue
        )

    for index, dropoff in enumerate(dropoffs):
        upstream = stage_analysis[index].previous_value
        dropoff.economic_impact = compute_dropoff_economic_impact(dropoff, upstream, aov, previous_revenue)


def build_elasticity_ranking(stage_analysis: List[StageDiagnostic]) -> ElasticityRanking:
    """
    Significant stages with a negative revenue delta, worst first.

    total_estimated_revenue_loss is the sum of included deltas (<= 0).
    """
    losses = [
        stage for stage in stage_analysis
        if stage.is_significant
        and stage.economic_impact is not None
        and stage.economic_impact.estimated_revenue_delta < 0
    ]
    losses.sort(key=lambda s: s.economic_impact.estimated_revenue_delta)

    impact_ranking = [
        ElasticityEntry(
            stage=stage.stage_name,
            estimated_revenue_delta=stage.economic_impact.estimated_revenue_delta,
            severity=stage.severity,
        )
        for stage in losses
    ]

    return ElasticityRanking(
        total_estimated_revenue_loss=sum((e.estimated_revenue_delta for e in impact_ranking), 0.0),
        impact_ranking=impact_ranking,
    )
