"""
Multi-source orchestrator result types.

Plain dataclasses with to_dict(); no behavior beyond small status checks.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from funnelscope.models import DiagnosticResult, SerializableMixin, Severity

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"

# Cross-source signal names
MARKET_WIDE_CPM_INCREASE = "market_wide_cpm_increase"
HALO_EFFECT = "halo_effect"
PLATFORM_CONFLICT = "platform_conflict"


@dataclass
class PlatformResult(SerializableMixin):
    """Outcome of one source's pipeline: a result or an error string, never both."""

    platform: str
    status: str
    result: Optional[DiagnosticResult] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_SUCCESS and self.result is not None


@dataclass
class CrossPlatformFinding(SerializableMixin):
    signal: str
    severity: Severity
    platforms: List[str]
    message: str
    recommendation: str
    confidence_score: Optional[float] = None
    estimated_revenue_recovery: Optional[float] = None
    risk_level: Optional[str] = None


@dataclass
class BudgetRecommendation(SerializableMixin):
    from_platform: str
    to_platform: str
    reason: str
    confidence: str
    suggested_shift_percent: Optional[int] = None
    estimated_kpi_improvement: Optional[float] = None
    risk_level: Optional[str] = None


@dataclass
class PortfolioAction(SerializableMixin):
    priority: int
    action: str
    platforms: List[str]
    confidence_score: float
    estimated_revenue_recovery: float
    risk_level: str
    required_budget_shift_percent: Optional[int] = None


@dataclass
class MultiPlatformResult(SerializableMixin):
    platforms: List[PlatformResult]
    cross_platform_findings: List[CrossPlatformFinding] = field(default_factory=list)
    budget_recommendations: List[BudgetRecommendation] = field(default_factory=list)
    executive_summary: str = ""
    portfolio_actions: List[PortfolioAction] = field(default_factory=list)

    @property
    def successful(self) -> List[PlatformResult]:
        return [p for p in self.platforms if p.succeeded]

    @property
    def failed(self) -> List[PlatformResult]:
        return [p for p in self.platforms if p.status == STATUS_ERROR]
