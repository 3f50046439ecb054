"""Multi-source orchestration: runner, correlator, portfolio actions, summary."""

from funnelscope.orchestrator.correlator import correlate
from funnelscope.orchestrator.runner import run_funnel_diagnostic, run_multi_platform_diagnostic
from funnelscope.orchestrator.types import (
    BudgetRecommendation,
    CrossPlatformFinding,
    MultiPlatformResult,
    PlatformResult,
    PortfolioAction,
)

__all__ = [
    "BudgetRecommendation",
    "CrossPlatformFinding",
    "MultiPlatformResult",
    "PlatformResult",
    "PortfolioAction",
    "correlate",
    "run_funnel_diagnostic",
    "run_multi_platform_diagnostic",
]
