"""Unit tests for portfolio actions and the executive summary.

WHAT:
    Action generation per source/recommendation/finding, ranking rules
    and the markdown summary layout.

WHY:
    Both are pure reductions; they must reflect exactly what the runner
    and correlator produced.

REFERENCES:
    funnelscope/orchestrator/portfolio_actions.py
    funnelscope/orchestrator/summary.py
"""

import pytest

from funnelscope.models import ElasticityEntry, ElasticityRanking, Finding, Severity
from funnelscope.orchestrator.portfolio_actions import generate_portfolio_actions, result_confidence
from funnelscope.orchestrator.summary import generate_executive_summary
from funnelscope.orchestrator.types import (
    MARKET_WIDE_CPM_INCREASE,
    BudgetRecommendation,
    CrossPlatformFinding,
    PlatformResult,
)
from tests.factories import make_result


def _with_loss(platform, loss, kpi_delta=25.0):
    result = make_result(kpi_delta=kpi_delta, platform=platform)
    result.elasticity = ElasticityRanking(
        total_estimated_revenue_loss=-loss,
        impact_ranking=[ElasticityEntry("purchase", -loss, Severity.critical)],
    )
    return PlatformResult(platform=platform, status="success", result=result)


def _budget_rec(confidence="high", shift=16, improvement=12.5):
    return BudgetRecommendation(
        from_platform="meta",
        to_platform="google",
        reason="meta CPA worsened 40.0% while google CPA improved -25.0%",
        confidence=confidence,
        suggested_shift_percent=shift,
        estimated_kpi_improvement=improvement,
        risk_level="medium",
    )


def _market_finding(confidence_score=0.5):
    return CrossPlatformFinding(
        signal=MARKET_WIDE_CPM_INCREASE,
        severity=Severity.warning,
        platforms=["meta", "google"],
        message="CPMs increased across all platforms (avg +30.0%).",
        recommendation="Consider reducing spend.",
        confidence_score=confidence_score,
        risk_level="medium",
    )


class TestPortfolioActions:
    """Test action generation and ranking."""

    def test_elasticity_action(self):
        [action] = generate_portfolio_actions([_with_loss("meta", 500)], [], [])
        assert action.priority == 1
        assert action.action.startswith("Fix purchase bottleneck on meta")
        assert action.estimated_revenue_recovery == 500
        assert action.risk_level == "low"
        assert action.required_budget_shift_percent is None

    def test_small_losses_are_skipped(self):
        assert generate_portfolio_actions([_with_loss("meta", 9.99)], [], []) == []

    def test_failed_sources_are_ignored(self):
        failed = PlatformResult(platform="meta", status="error", error="boom")
        assert generate_portfolio_actions([failed], [], []) == []

    def test_budget_action(self):
        [action] = generate_portfolio_actions([], [], [_budget_rec()])
        assert action.confidence_score == 0.85
        assert action.estimated_revenue_recovery == 12.5
        assert action.required_budget_shift_percent == 16
        assert action.risk_level == "medium"
        assert action.platforms == ["meta", "google"]

    def test_market_wide_action_uses_finding_confidence(self):
        [action] = generate_portfolio_actions([], [_market_finding(confidence_score=1.0)], [])
        assert action.confidence_score == 1.0
        assert action.estimated_revenue_recovery == 0
        assert action.risk_level == "medium"

    def test_market_wide_action_default_confidence(self):
        [action] = generate_portfolio_actions([], [_market_finding(confidence_score=None)], [])
        assert action.confidence_score == 0.7

    def test_ranked_by_recovery_then_confidence(self):
        """WHAT: Recoveries within $1 fall back to confidence ordering."""
        actions = generate_portfolio_actions(
            [_with_loss("meta", 500), _with_loss("tiktok", 1000)],
            [_market_finding()],
            [_budget_rec(confidence="low", improvement=0.5)],
        )
        assert [a.priority for a in actions] == [1, 2, 3, 4]
        assert actions[0].platforms == ["tiktok"]
        assert actions[1].platforms == ["meta"]
        # 0 vs 0.5 recovery: within $1, so confidence 0.5 beats 0.35
        assert actions[2].confidence_score == 0.5
        assert actions[3].confidence_score == 0.35

    def test_result_confidence(self):
        result = make_result(kpi_delta=25.0, findings=[Finding(Severity.critical, "purchase", "x")] * 2)
        # 0.3 + 0.5 * 0.4 + 0 * 0.2 + 0.2
        assert result_confidence(result) == pytest.approx(0.7)

    def test_result_confidence_is_capped(self):
        result = make_result(kpi_delta=200.0, findings=[Finding(Severity.critical, "purchase", "x")] * 5)
        result.stage_analysis[0].is_significant = True
        assert result_confidence(result) == 1.0


class TestExecutiveSummary:
    """Test summary layout."""

    def test_sections(self):
        platforms = [
            _with_loss("meta", 500),
            PlatformResult(platform="google", status="error", error="token expired"),
        ]
        actions = generate_portfolio_actions(platforms, [_market_finding()], [_budget_rec()])
        summary = generate_executive_summary(platforms, [_market_finding()], [_budget_rec()], actions)

        assert summary.startswith("## Multi-Platform Diagnostic Summary")
        assert "Analyzed 1 platform (1 failed)." in summary
        assert "### META - [HEALTHY]" in summary
        assert "### GOOGLE - Error\ntoken expired" in summary
        assert "### Cross-Platform Insights" in summary
        assert "  -> Consider reducing spend." in summary
        assert "[high] Consider shifting budget from meta -> google (shift ~16%)" in summary
        assert "### Portfolio Actions (Ranked)" in summary
        assert "1. [LOW RISK] Fix purchase bottleneck on meta" in summary

    def test_empty_sections_are_omitted(self):
        summary = generate_executive_summary([_with_loss("meta", 0)], [], [], [])
        assert "Analyzed 1 platform." in summary
        assert "Cross-Platform Insights" not in summary
        assert "Budget Recommendations" not in summary
        assert "Portfolio Actions" not in summary

    def test_finding_counts(self):
        result = make_result(findings=[
            Finding(Severity.critical, "purchase", "a"),
            Finding(Severity.warning, "click", "b"),
            Finding(Severity.warning, "click", "c"),
        ])
        summary = generate_executive_summary(
            [PlatformResult(platform="tiktok", status="success", result=result)], [], [], []
        )
        assert "Findings: 1 critical, 2 warning" in summary
