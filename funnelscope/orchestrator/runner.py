"""
Diagnostic Runner.

WHAT:
    - run_funnel_diagnostic: one source end to end (resolve registry,
      fetch comparison snapshots, build context, walk the funnel, tag the
      result with its source and data maturity)
    - run_multi_platform_diagnostic: every enabled source of an account in
      parallel, then correlation, portfolio actions and the summary

WHY:
    One failing source (expired token, API outage, unsupported vertical)
    must not take down the portfolio report for the others.

DESIGN:
    - Periods are built (and validated) before any fetch is issued
    - Sources run concurrently under gather_settled; each pipeline catches
      its own failure and returns an error record
    - Results keep source-declaration order
    - Post-processing is pure: nothing is re-fetched or re-analyzed

REFERENCES:
    - funnelscope/utils/concurrency.py
    - funnelscope/orchestrator/correlator.py
    - funnelscope/telemetry/sentry.py
"""

import logging
from datetime import date, timedelta
from typing import Optional

from funnelscope.analysis.comparator import build_comparison_periods
from funnelscope.analysis.context_builder import build_diagnostic_context
from funnelscope.analysis.conversion_lag import assess_conversion_lag
from funnelscope.analysis.funnel_walker import analyze_funnel
from funnelscope.config import get_settings
from funnelscope.models import ComparisonPeriods, DiagnosticResult
from funnelscope.orchestrator.correlator import correlate
from funnelscope.orchestrator.portfolio_actions import generate_portfolio_actions
from funnelscope.orchestrator.summary import generate_executive_summary
from funnelscope.orchestrator.types import (
    STATUS_ERROR,
    STATUS_SUCCESS,
    MultiPlatformResult,
    PlatformResult,
)
from funnelscope.platforms.base import PlatformClient
from funnelscope.platforms.registry import PlatformRegistry
from funnelscope.schemas import AccountConfig, PlatformAccountConfig
from funnelscope.telemetry import capture_exception
from funnelscope.utils.concurrency import gather_settled

logger = logging.getLogger(__name__)


def default_reference_date(as_of: Optional[date] = None) -> date:
    """Yesterday: the most recent complete day."""
    return (as_of or date.today()) - timedelta(days=1)


async def run_funnel_diagnostic(
    client: PlatformClient,
    vertical: str,
    entity_id: str,
    entity_level: str = "account",
    registry: Optional[PlatformRegistry] = None,
    reference_date: Optional[date] = None,
    period_days: Optional[int] = None,
    qualified_lead_action: Optional[str] = None,
    target_roas: Optional[float] = None,
    enable_historical: bool = False,
    historical_periods: Optional[int] = None,
    enable_structural: bool = False,
    as_of: Optional[date] = None,
    periods: Optional[ComparisonPeriods] = None,
) -> DiagnosticResult:
    """
    Diagnose one entity on one source.

    Parameters:
        client: Platform client; client.platform selects funnel and advisors
        vertical: commerce, leadgen or brand
        entity_id / entity_level: Entity to diagnose
        registry: Funnel/benchmark registry (built-in defaults when None)
        reference_date: Last day of the current period (default: yesterday)
        period_days: Days per period (default: Settings.DEFAULT_PERIOD_DAYS)
        as_of: Date used for data maturity (default: today)
        periods: Pre-built periods; overrides reference_date/period_days

    Raises:
        InvalidTimeRangeError: period_days < 1
        UnknownFunnelError: no funnel/benchmarks for (client.platform, vertical)
        Anything the client raises while fetching
    """
    settings = get_settings()
    registry = registry or PlatformRegistry()
    as_of = as_of or date.today()
    platform = client.platform

    if periods is None:
        reference_date = reference_date or default_reference_date(as_of)
        if period_days is None:
            period_days = settings.DEFAULT_PERIOD_DAYS
        periods = build_comparison_periods(reference_date, period_days)
    period_days = periods.current.days

    funnel = registry.resolve_funnel(platform, vertical, qualified_lead_action)
    benchmarks = registry.resolve_benchmarks(platform, vertical, qualified_lead_action)
    advisors = registry.resolve_advisors(platform, vertical, target_roas)

    current, previous = await client.fetch_comparison_snapshots(
        entity_id, entity_level, periods.current, periods.previous, funnel
    )

    context = await build_diagnostic_context(
        client,
        entity_id,
        entity_level,
        funnel,
        reference_date=periods.current.until,
        period_days=period_days,
        enable_historical=enable_historical,
        historical_periods=historical_periods or settings.DEFAULT_HISTORICAL_PERIODS,
        enable_structural=enable_structural,
        current_snapshot=current,
        previous_snapshot=previous,
    )

    result = analyze_funnel(
        funnel,
        current,
        previous,
        periods,
        benchmarks=benchmarks,
        advisors=advisors,
        context=context,
    )
    result.platform = platform
    result.data_maturity = assess_conversion_lag(
        periods.current.until, periods.previous.until, as_of, period_days
    )

    if result.data_maturity.lag_is_significant:
        logger.info(
            "[RUNNER] %s current period is %.0f%% mature vs %.0f%% previous; recent conversions under-reported",
            platform,
            result.data_maturity.current_maturity * 100,
            result.data_maturity.previous_maturity * 100,
        )

    return result


async def _run_platform(
    config: AccountConfig,
    platform_config: PlatformAccountConfig,
    registry: PlatformRegistry,
    periods: ComparisonPeriods,
    as_of: date,
) -> PlatformResult:
    platform = platform_config.platform
    try:
        client = registry.create_client(platform_config)
        result = await run_funnel_diagnostic(
            client,
            config.vertical,
            platform_config.entity_id,
            entity_level=platform_config.entity_level,
            registry=registry,
            qualified_lead_action=platform_config.qualified_lead_action_type,
            target_roas=platform_config.target_roas,
            enable_historical=config.enable_historical,
            historical_periods=config.historical_periods,
            enable_structural=config.enable_structural,
            as_of=as_of,
            periods=periods,
        )
    except Exception as e:
        logger.exception("[RUNNER] %s diagnostic failed for %s", platform, platform_config.entity_id)
        capture_exception(e, extra={"platform": platform, "entity_id": platform_config.entity_id})
        return PlatformResult(platform=platform, status=STATUS_ERROR, error=str(e))

    return PlatformResult(platform=platform, status=STATUS_SUCCESS, result=result)


async def run_multi_platform_diagnostic(
    config: AccountConfig,
    registry: PlatformRegistry,
    as_of: Optional[date] = None,
) -> MultiPlatformResult:
    """
    Diagnose every enabled source of an account and correlate them.

    Raises:
        InvalidTimeRangeError: invalid period configuration (before any fetch)
    """
    as_of = as_of or date.today()
    reference_date = config.reference_date or default_reference_date(as_of)
    periods = build_comparison_periods(reference_date, config.period_days)
    enabled = config.enabled_platforms

    logger.info(
        "[RUNNER] Diagnosing '%s' (%s) on %d sources, %s..%s vs %s..%s",
        config.name,
        config.vertical,
        len(enabled),
        periods.current.since, periods.current.until,
        periods.previous.since, periods.previous.until,
    )

    outcomes = await gather_settled(*[
        _run_platform(config, platform_config, registry, periods, as_of)
        for platform_config in enabled
    ])

    platform_results = []
    for platform_config, outcome in zip(enabled, outcomes):
        if isinstance(outcome, BaseException):
            # _run_platform records its own failures; only cancellation lands here
            logger.error("[RUNNER] %s pipeline aborted: %r", platform_config.platform, outcome)
            outcome = PlatformResult(platform=platform_config.platform, status=STATUS_ERROR, error=str(outcome))
        platform_results.append(outcome)

    correlation = correlate(platform_results)
    portfolio_actions = generate_portfolio_actions(
        platform_results, correlation.findings, correlation.budget_recommendations
    )
    summary = generate_executive_summary(
        platform_results,
        correlation.findings,
        correlation.budget_recommendations,
        portfolio_actions,
    )

    succeeded = sum(1 for p in platform_results if p.succeeded)
    logger.info("[RUNNER] Completed '%s': %d succeeded, %d failed", config.name, succeeded, len(platform_results) - succeeded)

    return MultiPlatformResult(
        platforms=platform_results,
        cross_platform_findings=correlation.findings,
        budget_recommendations=correlation.budget_recommendations,
        executive_summary=summary,
        portfolio_actions=portfolio_actions,
    )
