"""Snapshot and result builders shared by the test modules."""

from datetime import date
from typing import Dict, List, Optional

from funnelscope.models import (
    ComparisonPeriods,
    DiagnosticResult,
    Finding,
    MetricSnapshot,
    PrimaryKPISummary,
    Severity,
    StageDiagnostic,
    StageMetrics,
    TimeRange,
)

# Mid-June: no seasonal event overlaps these periods
CURRENT = TimeRange(date(2024, 6, 10), date(2024, 6, 16))
PREVIOUS = TimeRange(date(2024, 6, 3), date(2024, 6, 9))
PERIODS = ComparisonPeriods(current=CURRENT, previous=PREVIOUS)

COMMERCE_BASELINE = {
    "impressions": 100000,
    "inline_link_clicks": 2000,
    "landing_page_view": 1600,
    "view_content": 1200,
    "add_to_cart": 100,
    "purchase": 20,
}


def make_snapshot(
    counts: Dict[str, float],
    spend: float = 1000.0,
    costs: Optional[Dict[str, float]] = None,
    top_level: Optional[Dict[str, float]] = None,
    time_range: TimeRange = CURRENT,
    entity_id: str = "act_123",
) -> MetricSnapshot:
    costs = costs or {}
    return MetricSnapshot(
        entity_id=entity_id,
        entity_level="account",
        period_start=time_range.since,
        period_end=time_range.until,
        spend=spend,
        stages={metric: StageMetrics(count, costs.get(metric)) for metric, count in counts.items()},
        top_level=dict(top_level or {}),
    )


def commerce_snapshot(
    time_range: TimeRange = CURRENT,
    spend: float = 1000.0,
    top_level: Optional[Dict[str, float]] = None,
    **overrides: float,
) -> MetricSnapshot:
    """Meta commerce snapshot; purchase cost is derived from spend / purchases."""
    counts = dict(COMMERCE_BASELINE, **overrides)
    purchases = counts["purchase"]
    return make_snapshot(
        counts,
        spend=spend,
        costs={"purchase": spend / purchases if purchases else None},
        top_level=top_level,
        time_range=time_range,
    )


def make_result(
    kpi_delta: float = 0.0,
    spend_current: float = 1000.0,
    spend_previous: float = 1000.0,
    impressions_current: float = 100000,
    impressions_previous: float = 100000,
    findings: Optional[List[Finding]] = None,
    platform: Optional[str] = None,
) -> DiagnosticResult:
    """Minimal DiagnosticResult for correlator / portfolio tests."""
    awareness = StageDiagnostic(
        stage_name="awareness",
        metric="impressions",
        current_value=impressions_current,
        previous_value=impressions_previous,
        delta=impressions_current - impressions_previous,
        delta_percent=0.0,
        is_significant=False,
        severity=Severity.healthy,
    )
    return DiagnosticResult(
        vertical="commerce",
        entity_id="act_123",
        periods=PERIODS,
        spend_current=spend_current,
        spend_previous=spend_previous,
        primary_kpi=PrimaryKPISummary(
            name="purchase",
            current=50.0 * (1 + kpi_delta / 100),
            previous=50.0,
            delta_percent=kpi_delta,
            severity=Severity.healthy,
        ),
        stage_analysis=[awareness],
        dropoffs=[],
        bottleneck=None,
        findings=findings or [],
        platform=platform,
    )
