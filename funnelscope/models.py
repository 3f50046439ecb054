"""
Funnel Diagnostic Data Model
============================

WHAT:
    Value objects shared by the analysis engine, the advisors and the
    multi-source orchestrator: funnel definitions, normalized metric
    snapshots, per-stage/per-transition diagnostics, findings and the
    complete per-source DiagnosticResult.

WHY:
    Every platform normalizes into the same MetricSnapshot shape so the
    funnel walker stays vertical- and platform-agnostic. Output records are
    plain data with a to_dict() so the reporting layer can serialize them
    without knowing anything about the engine.

DESIGN:
    - Inputs (FunnelSchema, MetricSnapshot, TimeRange) are frozen dataclasses
    - Outputs are regular dataclasses produced fresh on every run
    - Severity carries its own sort rank (critical < warning < info < healthy)

RELATED FILES:
    - funnelscope/analysis/funnel_walker.py: produces DiagnosticResult
    - funnelscope/analysis/context_builder.py: produces DiagnosticContext
    - funnelscope/orchestrator/types.py: cross-source records
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .exceptions import InvalidInputError, InvalidTimeRangeError


# =============================================================================
# ENUMS
# =============================================================================

class Severity(str, Enum):
    """Finding/diagnostic severity. Ordering is fixed: critical first."""

    critical = "critical"
    warning = "warning"
    info = "info"
    healthy = "healthy"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.critical: 0,
    Severity.warning: 1,
    Severity.info: 2,
    Severity.healthy: 3,
}


ENTITY_LEVELS = ("account", "campaign", "adset", "ad")


def _serialize(value: Any) -> Any:
    """Recursively convert enums/dates inside asdict() output."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value


class SerializableMixin:
    """to_dict() for dataclass records consumed by the reporting layer."""

    def to_dict(self) -> Dict[str, Any]:
        return _serialize(asdict(self))


# =============================================================================
# FUNNEL DEFINITION
# =============================================================================

@dataclass(frozen=True)
class FunnelStage(SerializableMixin):
    """
    One step of a conversion path.

    Attributes:
        name: Human-readable stage name shown in diagnostics ("awareness", "click")
        metric: Key into MetricSnapshot.stages for this stage's count
        metric_source: Where the platform client finds the count ("top_level", "actions")
        cost_metric: Key of the stage's cost metric (None if not directly billable)
        cost_metric_source: Where the platform client finds the cost metric
    """

    name: str
    metric: str
    metric_source: str
    cost_metric: Optional[str] = None
    cost_metric_source: Optional[str] = None


@dataclass(frozen=True)
class FunnelSchema(SerializableMixin):
    """Ordered funnel stages for one (source, vertical) pair."""

    vertical: str
    stages: Tuple[FunnelStage, ...]
    primary_kpi: str
    roas_metric: Optional[str] = None

    def find_stage(self, metric: str) -> Optional[FunnelStage]:
        for stage in self.stages:
            if stage.metric == metric or stage.cost_metric == metric:
                return stage
        return None


@dataclass(frozen=True)
class StageBenchmark(SerializableMixin):
    # expected_dropoff_rate: share of the stage above that reaches this stage
    expected_dropoff_rate: float
    normal_variance_percent: float


@dataclass(frozen=True)
class VerticalBenchmarks(SerializableMixin):
    vertical: str
    benchmarks: Mapping[str, StageBenchmark]

    def variance_for(self, metric: str) -> Optional[float]:
        benchmark = self.benchmarks.get(metric)
        return benchmark.normal_variance_percent if benchmark else None


# =============================================================================
# TIME RANGES
# =============================================================================

@dataclass(frozen=True)
class TimeRange(SerializableMixin):
    """
    Inclusive calendar date range.

    Validation happens on construction so a malformed range is rejected
    before any fetch is issued.
    """

    since: date
    until: date

    def __post_init__(self):
        if not isinstance(self.since, date) or not isinstance(self.until, date):
            raise InvalidTimeRangeError(
                f"TimeRange bounds must be dates, got {self.since!r} and {self.until!r}"
            )
        if self.since > self.until:
            raise InvalidTimeRangeError(
                f"TimeRange since ({self.since.isoformat()}) is after until ({self.until.isoformat()})"
            )

    @classmethod
    def from_strings(cls, since: str, until: str) -> "TimeRange":
        try:
            return cls(date.fromisoformat(since), date.fromisoformat(until))
        except ValueError as e:
            raise InvalidTimeRangeError(f"Malformed time range {since!r}..{until!r}: {e}") from e

    @property
    def days(self) -> int:
        return (self.until - self.since).days + 1


@dataclass(frozen=True)
class ComparisonPeriods(SerializableMixin):
    current: TimeRange
    previous: TimeRange


# =============================================================================
# METRIC SNAPSHOTS
# =============================================================================

@dataclass(frozen=True)
class StageMetrics(SerializableMixin):
    count: float
    cost: Optional[float] = None

    def __post_init__(self):
        if self.count < 0:
            raise InvalidInputError(f"Stage count cannot be negative, got {self.count}")


@dataclass(frozen=True)
class MetricSnapshot(SerializableMixin):
    """
    All funnel metrics for one entity over one period.

    WHAT:
        stages maps FunnelStage.metric -> StageMetrics. top_level holds
        derived/raw platform fields (ctr, cpm, roas, frequency, revenue keys).

    WHY:
        Produced only by platform clients; the engine treats it as read-only.
        A missing stage key is read as count 0 / cost None.
    """

    entity_id: str
    entity_level: str
    period_start: date
    period_end: date
    spend: float
    stages: Mapping[str, StageMetrics] = field(default_factory=dict)
    top_level: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.spend < 0:
            raise InvalidInputError(f"Spend cannot be negative for {self.entity_id}, got {self.spend}")

    def stage_count(self, metric: str) -> float:
        metrics = self.stages.get(metric)
        return metrics.count if metrics is not None else 0

    def stage_cost(self, metric: str) -> Optional[float]:
        metrics = self.stages.get(metric)
        return metrics.cost if metrics is not None else None

    @classmethod
    def empty(cls, entity_id: str, entity_level: str, time_range: TimeRange) -> "MetricSnapshot":
        """Zero-filled snapshot for a period with no delivery."""
        return cls(
            entity_id=entity_id,
            entity_level=entity_level,
            period_start=time_range.since,
            period_end=time_range.until,
            spend=0.0,
        )


# =============================================================================
# BREAKDOWNS (diagnostic context inputs)
# =============================================================================

@dataclass(frozen=True)
class SubEntityBreakdown(SerializableMixin):
    """One ad set / ad group inside the diagnosed entity."""

    entity_id: str
    entity_name: str
    spend: float
    conversions: float
    daily_budget: Optional[float] = None
    in_learning_phase: bool = False
    days_since_last_edit: Optional[int] = None


@dataclass(frozen=True)
class DailyBreakdown(SerializableMixin):
    date: date
    spend: float
    conversions: float
    day_of_week: Optional[int] = None


@dataclass(frozen=True)
class PlacementBreakdown(SerializableMixin):
    placement: str
    spend: float
    conversions: float


@dataclass(frozen=True)
class DeviceBreakdown(SerializableMixin):
    device: str
    spend: float
    conversions: float


@dataclass(frozen=True)
class AdBreakdown(SerializableMixin):
    ad_id: str
    ad_set_id: str
    spend: float
    conversions: float
    format: Optional[str] = None


@dataclass(frozen=True)
class AudienceOverlapPair(SerializableMixin):
    ad_set_id: str
    other_ad_set_id: str
    overlap_rate: float


@dataclass(frozen=True)
class RevenueData(SerializableMixin):
    average_order_value: float
    total_revenue: float
    previous_total_revenue: float


@dataclass
class DiagnosticContext(SerializableMixin):
    """
    Optional auxiliary data for advisors and the elasticity ranker.

    Built once per diagnostic run and never mutated afterwards.
    historical_snapshots is ordered most-recent first.

    The placement, device, ad, daily, audience-overlap and attribution-window
    fields are reserved for breakdowns supplied by platform clients or
    embedding code; the built-in advisors do not read them.
    """

    historical_snapshots: Optional[List[MetricSnapshot]] = None
    sub_entities: Optional[List[SubEntityBreakdown]] = None
    revenue_data: Optional[RevenueData] = None
    placement_breakdowns: Optional[List[PlacementBreakdown]] = None
    device_breakdowns: Optional[List[DeviceBreakdown]] = None
    ad_breakdowns: Optional[List[AdBreakdown]] = None
    daily_breakdowns: Optional[List[DailyBreakdown]] = None
    previous_daily_breakdowns: Optional[List[DailyBreakdown]] = None
    audience_overlaps: Optional[List[AudienceOverlapPair]] = None
    attribution_window: Optional[str] = None
    previous_attribution_window: Optional[str] = None

    def is_empty(self) -> bool:
        return all(value is None for value in self.__dict__.values())


# =============================================================================
# DIAGNOSTIC OUTPUT
# =============================================================================

@dataclass(frozen=True)
class EconomicImpact(SerializableMixin):
    conversion_delta: float
    estimated_revenue_delta: float
    revenue_impact_percent: float


@dataclass
class StageDiagnostic(SerializableMixin):
    stage_name: str
    metric: str
    current_value: float
    previous_value: float
    delta: float
    delta_percent: float
    is_significant: bool
    severity: Severity
    economic_impact: Optional[EconomicImpact] = None


@dataclass
class FunnelDropoff(SerializableMixin):
    from_stage: str
    to_stage: str
    current_rate: float
    previous_rate: float
    delta_percent: float
    economic_impact: Optional[EconomicImpact] = None


@dataclass(frozen=True)
class Finding(SerializableMixin):
    severity: Severity
    stage: str
    message: str
    recommendation: Optional[str] = None


@dataclass(frozen=True)
class PrimaryKPISummary(SerializableMixin):
    name: str
    current: float
    previous: float
    delta_percent: float
    severity: Severity


@dataclass(frozen=True)
class ElasticityEntry(SerializableMixin):
    stage: str
    estimated_revenue_delta: float
    severity: Severity


@dataclass(frozen=True)
class ElasticityRanking(SerializableMixin):
    total_estimated_revenue_loss: float
    impact_ranking: List[ElasticityEntry]


@dataclass(frozen=True)
class ConversionLagAssessment(SerializableMixin):
    current_maturity: float
    previous_maturity: float
    maturity_gap: float
    lag_is_significant: bool


@dataclass
class DiagnosticResult(SerializableMixin):
    """Full output of one funnel-walker pass for one source."""

    vertical: str
    entity_id: str
    periods: ComparisonPeriods
    spend_current: float
    spend_previous: float
    primary_kpi: PrimaryKPISummary
    stage_analysis: List[StageDiagnostic]
    dropoffs: List[FunnelDropoff]
    bottleneck: Optional[StageDiagnostic]
    findings: List[Finding]
    elasticity: Optional[ElasticityRanking] = None
    platform: Optional[str] = None
    data_maturity: Optional[ConversionLagAssessment] = None
