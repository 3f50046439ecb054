"""
Diagnostic Context Builder.

WHAT:
    Assembles the optional DiagnosticContext consumed by advisors and the
    elasticity ranker: trailing historical snapshots, sub-entity
    breakdowns and revenue data extracted from the comparison snapshots.

WHY:
    Advisors stay pure. Anything they need beyond the two comparison
    snapshots is fetched once here, before the funnel walk.

DESIGN:
    - Historical periods are fetched together with gather_fail_fast; one
      failed period fails the whole build (partial history is unsafe)
    - Sub-entity breakdowns only when the client advertises the capability
    - No feature requested -> empty context, no network activity

REFERENCES:
    - funnelscope/analysis/comparator.py (build_trailing_periods)
    - funnelscope/analysis/derived_metrics.py (revenue fallback chain)
"""

import logging
from datetime import date, timedelta
from typing import Optional

from funnelscope.analysis.comparator import build_trailing_periods
from funnelscope.analysis.derived_metrics import extract_revenue
from funnelscope.models import DiagnosticContext, FunnelSchema, MetricSnapshot, RevenueData, TimeRange
from funnelscope.platforms.base import PlatformClient
from funnelscope.utils.concurrency import gather_fail_fast

logger = logging.getLogger(__name__)

DEFAULT_HISTORICAL_PERIODS = 4


async def build_diagnostic_context(
    client: PlatformClient,
    entity_id: str,
    entity_level: str,
    funnel: FunnelSchema,
    reference_date: date,
    period_days: int,
    enable_historical: bool = False,
    historical_periods: int = DEFAULT_HISTORICAL_PERIODS,
    enable_structural: bool = False,
    current_snapshot: Optional[MetricSnapshot] = None,
    previous_snapshot: Optional[MetricSnapshot] = None,
) -> DiagnosticContext:
    """
    Build a DiagnosticContext for one entity.

    Parameters:
        client: Platform client for the entity's source
        entity_id / entity_level: Entity being diagnosed
        funnel: Funnel schema passed through to fetches (never mutated)
        reference_date: Last day of the current period
        period_days: Length of each period
        enable_historical: Fetch trailing snapshots for trend advisors
        historical_periods: How many trailing periods (most recent first)
        enable_structural: Fetch sub-entity breakdowns if supported
        current_snapshot / previous_snapshot: Source of revenue data

    Raises:
        Whatever the client raises for a failed historical/structural fetch.
    """
    context = DiagnosticContext()

    if enable_historical:
        trailing = build_trailing_periods(reference_date, period_days, historical_periods)
        logger.debug("[CONTEXT] Fetching %d trailing periods for %s", len(trailing), entity_id)
        context.historical_snapshots = await gather_fail_fast(*[
            client.fetch_snapshot(entity_id, entity_level, period, funnel)
            for period in trailing
        ])

    if enable_structural:
        if client.supports_sub_entity_breakdowns:
            current_range = TimeRange(reference_date - timedelta(days=period_days - 1), reference_date)
            context.sub_entities = await client.fetch_sub_entity_breakdowns(
                entity_id, entity_level, current_range, funnel
            )
        else:
            logger.info(
                "[CONTEXT] %s client has no sub-entity breakdowns; skipping structural analysis",
                client.platform,
            )

    if current_snapshot is not None and previous_snapshot is not None:
        context.revenue_data = extract_revenue_data(current_snapshot, previous_snapshot, funnel)

    return context


def extract_revenue_data(
    current: MetricSnapshot,
    previous: MetricSnapshot,
    funnel: FunnelSchema,
) -> Optional[RevenueData]:
    """AOV = current revenue / primary KPI conversions; None if either is 0."""
    total_revenue = extract_revenue(current)
    previous_total_revenue = extract_revenue(previous)
    conversions = current.stage_count(funnel.primary_kpi)

    if conversions == 0 or total_revenue == 0:
        return None

    return RevenueData(
        average_order_value=total_revenue / conversions,
        total_revenue=total_revenue,
        previous_total_revenue=previous_total_revenue,
    )
