"""
Generic Funnel Walker.

WHAT:
    Walks any FunnelSchema, compares two MetricSnapshots and produces a
    DiagnosticResult: per-stage diagnostics, per-transition drop-offs, the
    bottleneck, a primary KPI summary and a severity-sorted finding list.

WHY:
    The walker is vertical-agnostic. The schema defines the shape of the
    funnel; advisors append vertical/platform-specific findings.

DESIGN:
    - Stage and drop-off lists always follow funnel-definition order
    - Significance uses the stage's variance (account history, then
      vertical benchmark) or the spend heuristic when neither exists
    - Economic impact and the elasticity ranking are attached only when the
      diagnostic context carries revenue data
    - Advisors are called in order and must return [] when silent; an
      advisor raising is a bug and propagates

REFERENCES:
    - funnelscope/analysis/significance.py
    - funnelscope/analysis/economic_impact.py
    - funnelscope/advisors/registry.py
"""

import logging
from typing import Callable, List, Optional, Sequence

from funnelscope.analysis.economic_impact import attach_economic_impacts, build_elasticity_ranking
from funnelscope.analysis.significance import is_significant_change, percent_change
from funnelscope.analysis.thresholds import AccountHistory, get_effective_variance
from funnelscope.models import (
    ComparisonPeriods,
    DiagnosticContext,
    DiagnosticResult,
    Finding,
    FunnelDropoff,
    FunnelSchema,
    MetricSnapshot,
    PrimaryKPISummary,
    Severity,
    StageDiagnostic,
    VerticalBenchmarks,
)

logger = logging.getLogger(__name__)

FindingAdvisor = Callable[
    [List[StageDiagnostic], List[FunnelDropoff], MetricSnapshot, MetricSnapshot, Optional[DiagnosticContext]],
    List[Finding],
]

# Drop-off rate changes worse than these (percent) produce findings
DROPOFF_WARNING_THRESHOLD = -20.0
DROPOFF_CRITICAL_THRESHOLD = -40.0

AWARENESS_SHIFT_THRESHOLD = 20.0


def analyze_funnel(
    funnel: FunnelSchema,
    current: MetricSnapshot,
    previous: MetricSnapshot,
    periods: ComparisonPeriods,
    benchmarks: Optional[VerticalBenchmarks] = None,
    advisors: Optional[Sequence[FindingAdvisor]] = None,
    context: Optional[DiagnosticContext] = None,
    account_history: Optional[AccountHistory] = None,
) -> DiagnosticResult:
    """
    Compare two snapshots along a funnel.

    Parameters:
        funnel: Ordered stage definitions for this source + vertical
        current: Snapshot for the current period
        previous: Snapshot for the previous period
        periods: The two periods being compared
        benchmarks: Vertical benchmarks (per-stage normal variance)
        advisors: Ordered advisor functions appending findings
        context: Optional auxiliary data for advisors / economic impact
        account_history: Weekly history for account-specific variance

    Returns:
        DiagnosticResult (platform is left unset; the caller tags it)
    """
    stage_analysis = analyze_stages(funnel, current, previous, benchmarks, account_history)
    dropoffs = analyze_dropoffs(funnel, current, previous)
    bottleneck = find_bottleneck(stage_analysis)
    primary_kpi = summarize_primary_kpi(funnel, current, previous)

    elasticity = None
    revenue_data = context.revenue_data if context is not None else None
    if revenue_data is not None:
        attach_economic_impacts(stage_analysis, dropoffs, funnel.primary_kpi, revenue_data)
        elasticity = build_elasticity_ranking(stage_analysis)

    findings = generate_generic_findings(stage_analysis, dropoffs, bottleneck, primary_kpi)
    for advisor in advisors or ():
        findings.extend(advisor(stage_analysis, dropoffs, current, previous, context))

    # list.sort is stable: equal severities keep generation order
    findings.sort(key=lambda f: f.severity.rank)

    logger.debug(
        "Funnel walk for %s: %d stages, bottleneck=%s, %d findings",
        current.entity_id,
        len(stage_analysis),
        bottleneck.stage_name if bottleneck else None,
        len(findings),
    )

    return DiagnosticResult(
        vertical=funnel.vertical,
        entity_id=current.entity_id,
        periods=periods,
        spend_current=current.spend,
        spend_previous=previous.spend,
        primary_kpi=primary_kpi,
        stage_analysis=stage_analysis,
        dropoffs=dropoffs,
        bottleneck=bottleneck,
        findings=findings,
        elasticity=elasticity,
    )


# =============================================================================
# STAGE-LEVEL ANALYSIS
# =============================================================================

def _stage_variance(
    metric: str,
    benchmarks: Optional[VerticalBenchmarks],
    account_history: Optional[AccountHistory],
) -> Optional[float]:
    if account_history is not None:
        return get_effective_variance(metric, account_history, benchmarks)
    if benchmarks is not None:
        return benchmarks.variance_for(metric)
    return None


def analyze_stages(
    funnel: FunnelSchema,
    current: MetricSnapshot,
    previous: MetricSnapshot,
    benchmarks: Optional[VerticalBenchmarks] = None,
    account_history: Optional[AccountHistory] = None,
) -> List[StageDiagnostic]:
    stages = []
    for stage in funnel.stages:
        current_value = current.stage_count(stage.metric)
        previous_value = previous.stage_count(stage.metric)
        delta_percent = percent_change(current_value, previous_value)

        stages.append(StageDiagnostic(
            stage_name=stage.name,
            metric=stage.metric,
            current_value=current_value,
            previous_value=previous_value,
            delta=current_value - previous_value,
            delta_percent=delta_percent,
            is_significant=is_significant_change(
                delta_percent,
                current.spend,
                _stage_variance(stage.metric, benchmarks, account_history),
            ),
            severity=classify_severity(delta_percent, current.spend, is_cost_metric=False),
        ))
    return stages


# =============================================================================
# DROP-OFF ANALYSIS
# =============================================================================

def _rate(to_count: float, from_count: float) -> float:
    return to_count / from_count if from_count > 0 else 0.0


def analyze_dropoffs(
    funnel: FunnelSchema,
    current: MetricSnapshot,
    previous: MetricSnapshot,
) -> List[FunnelDropoff]:
    dropoffs = []
    for from_stage, to_stage in zip(funnel.stages, funnel.stages[1:]):
        current_rate = _rate(current.stage_count(to_stage.metric), current.stage_count(from_stage.metric))
        previous_rate = _rate(previous.stage_count(to_stage.metric), previous.stage_count(from_stage.metric))

        dropoffs.append(FunnelDropoff(
            from_stage=from_stage.name,
            to_stage=to_stage.name,
            current_rate=current_rate,
            previous_rate=previous_rate,
            delta_percent=percent_change(current_rate, previous_rate),
        ))
    return dropoffs


# =============================================================================
# BOTTLENECK + PRIMARY KPI
# =============================================================================

def find_bottleneck(stage_analysis: List[StageDiagnostic]) -> Optional[StageDiagnostic]:
    """Most negative significant decline; first encountered wins ties."""
    worst = None
    for stage in stage_analysis:
        if not stage.is_significant or stage.delta_percent >= 0:
            continue
        if worst is None or stage.delta_percent < worst.delta_percent:
            worst = stage
    return worst


def summarize_primary_kpi(
    funnel: FunnelSchema,
    current: MetricSnapshot,
    previous: MetricSnapshot,
) -> PrimaryKPISummary:
    """Cost (not count) of the primary KPI in both periods."""
    metric = funnel.primary_kpi
    primary_stage = funnel.find_stage(metric)

    current_cost = current.stage_cost(metric) or 0.0
    previous_cost = previous.stage_cost(metric) or 0.0
    delta_percent = percent_change(current_cost, previous_cost)

    return PrimaryKPISummary(
        name=primary_stage.name if primary_stage else metric,
        current=current_cost,
        previous=previous_cost,
        delta_percent=delta_percent,
        severity=classify_severity(delta_percent, current.spend, is_cost_metric=True),
    )


def find_awareness_stage(stage_analysis: List[StageDiagnostic]) -> Optional[StageDiagnostic]:
    for stage in stage_analysis:
        if stage.metric == "impressions":
            return stage
    return None


# =============================================================================
# SEVERITY
# =============================================================================

def spend_multiplier(spend: float) -> float:
    """Larger accounts get tighter thresholds."""
    if spend > 5000:
        return 0.7
    if spend > 1000:
        return 0.85
    return 1.0


def classify_severity(delta_percent: float, spend: float, is_cost_metric: bool) -> Severity:
    """
    Direction-aware severity.

    Cost metrics (CPA, CPL): increases are bad.
    Volume metrics (clicks, purchases): decreases are bad.
    """
    bad_direction = delta_percent > 0 if is_cost_metric else delta_percent < 0
    if not bad_direction:
        return Severity.healthy

    magnitude = abs(delta_percent)
    multiplier = spend_multiplier(spend)

    if magnitude > 30 * multiplier:
        return Severity.critical
    if magnitude > 15 * multiplier:
        return Severity.warning
    if magnitude > 5 * multiplier:
        return Severity.info
    return Severity.healthy


# =============================================================================
# GENERIC FINDINGS
# =============================================================================

def generate_generic_findings(
    stage_analysis: List[StageDiagnostic],
    dropoffs: List[FunnelDropoff],
    bottleneck: Optional[StageDiagnostic],
    primary_kpi: PrimaryKPISummary,
) -> List[Finding]:
    findings = []

    change = f"{primary_kpi.delta_percent:+.1f}% vs previous period"
    if primary_kpi.severity is Severity.healthy:
        message = f"{primary_kpi.name} is stable at ${primary_kpi.current:.2f} ({change})."
    else:
        message = f"{primary_kpi.name} cost increased to ${primary_kpi.current:.2f} ({change})."
    findings.append(Finding(severity=primary_kpi.severity, stage=primary_kpi.name, message=message))

    if bottleneck is not None:
        findings.append(Finding(
            severity=bottleneck.severity,
            stage=bottleneck.stage_name,
            message=(
                f"Largest volume drop is at the {bottleneck.stage_name} stage: "
                f"{bottleneck.delta_percent:.1f}% "
                f"({bottleneck.previous_value:g} -> {bottleneck.current_value:g})."
            ),
        ))

    for dropoff in dropoffs:
        if dropoff.delta_percent >= DROPOFF_WARNING_THRESHOLD:
            continue
        findings.append(Finding(
            severity=Severity.critical if dropoff.delta_percent < DROPOFF_CRITICAL_THRESHOLD else Severity.warning,
            stage=f"{dropoff.from_stage} -> {dropoff.to_stage}",
            message=(
                f"Conversion rate from {dropoff.from_stage} to {dropoff.to_stage} dropped "
                f"{dropoff.delta_percent:.1f}% ({dropoff.previous_rate * 100:.2f}% -> "
                f"{dropoff.current_rate * 100:.2f}%)."
            ),
        ))

    awareness = find_awareness_stage(stage_analysis)
    if awareness is not None and abs(awareness.delta_percent) > AWARENESS_SHIFT_THRESHOLD:
        findings.append(Finding(
            severity=Severity.info,
            stage="awareness",
            message=(
                f"Impression volume shifted {awareness.delta_percent:+.1f}%. "
                "Large volume swings affect all downstream metrics."
            ),
        ))

    return findings
