"""Executive summary: markdown rendering of a multi-source run."""

from typing import List

from funnelscope.models import Severity
from funnelscope.orchestrator.types import (
    BudgetRecommendation,
    CrossPlatformFinding,
    PlatformResult,
    PortfolioAction,
)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def generate_executive_summary(
    platform_results: List[PlatformResult],
    findings: List[CrossPlatformFinding],
    budget_recommendations: List[BudgetRecommendation],
    portfolio_actions: List[PortfolioAction],
) -> str:
    lines = ["## Multi-Platform Diagnostic Summary", ""]

    successful = [p for p in platform_results if p.succeeded]
    failed = [p for p in platform_results if not p.succeeded]
    overview = f"Analyzed {_plural(len(successful), 'platform')}"
    if failed:
        overview += f" ({len(failed)} failed)"
    lines += [overview + ".", ""]

    for platform_result in platform_results:
        lines += _platform_block(platform_result)

    if findings:
        lines.append("### Cross-Platform Insights")
        for finding in findings:
            lines.append(f"[{finding.severity.value.upper()}] {finding.message}")
            lines.append(f"  -> {finding.recommendation}")
            lines.append("")

    if budget_recommendations:
        lines.append("### Budget Recommendations")
        for rec in budget_recommendations:
            shift = f" (shift ~{rec.suggested_shift_percent}%)" if rec.suggested_shift_percent else ""
            lines.append(
                f"[{rec.confidence}] Consider shifting budget from {rec.from_platform} -> "
                f"{rec.to_platform}{shift}: {rec.reason}"
            )
        lines.append("")

    if portfolio_actions:
        lines.append("### Portfolio Actions (Ranked)")
        for action in portfolio_actions:
            recovery = ""
            if action.estimated_revenue_recovery > 0:
                recovery = f", est. ${action.estimated_revenue_recovery:.0f} recovery"
            lines.append(
                f"{action.priority}. [{action.risk_level.upper()} RISK] {action.action} "
                f"({action.confidence_score * 100:.0f}% confidence{recovery})"
            )
        lines.append("")

    return "\n".join(lines)


def _platform_block(platform_result: PlatformResult) -> List[str]:
    name = platform_result.platform.upper()
    if not platform_result.succeeded:
        return [f"### {name} - Error", platform_result.error or "Unknown error", ""]

    result = platform_result.result
    kpi = result.primary_kpi
    lines = [
        f"### {name} - [{kpi.severity.value.upper()}]",
        f"{kpi.name}: ${kpi.current:.2f} ({kpi.delta_percent:+.1f}% vs previous period)",
        f"Spend: ${result.spend_current:.2f} (prev: ${result.spend_previous:.2f})",
    ]

    if result.bottleneck is not None:
        lines.append(
            f"Bottleneck: {result.bottleneck.stage_name} ({result.bottleneck.delta_percent:.1f}% drop)"
        )

    if result.data_maturity is not None and result.data_maturity.lag_is_significant:
        lines.append(
            f"Data maturity: current period {result.data_maturity.current_maturity * 100:.0f}% "
            f"reported vs {result.data_maturity.previous_maturity * 100:.0f}% previous"
        )

    critical = sum(1 for f in result.findings if f.severity is Severity.critical)
    warning = sum(1 for f in result.findings if f.severity is Severity.warning)
    counts = []
    if critical:
        counts.append(f"{critical} critical")
    if warning:
        counts.append(f"{warning} warning")
    if counts:
        lines.append(f"Findings: {', '.join(counts)}")

    lines.append("")
    return lines
