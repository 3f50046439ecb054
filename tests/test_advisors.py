"""Unit tests for finding advisors and the advisor registry.

WHAT:
    Trigger and silence conditions for each advisor; registry layering per
    (platform, vertical).

WHY:
    Advisors are contract participants: they must return [] when they have
    nothing to say, never raise.

REFERENCES:
    funnelscope/advisors/shared.py
    funnelscope/advisors/structural.py
    funnelscope/advisors/vertical.py
    funnelscope/advisors/registry.py
"""

from datetime import date, timedelta

import pytest

from funnelscope.advisors.registry import resolve_advisors
from funnelscope.advisors.shared import (
    auction_competition_advisor,
    create_roas_efficiency_advisor,
    creative_exhaustion_advisor,
    creative_fatigue_advisor,
    leadgen_creative_fatigue_advisor,
    roas_efficiency_advisor,
)
from funnelscope.advisors.structural import learning_instability_advisor
from funnelscope.advisors.vertical import checkout_friction_advisor, landing_page_advisor, lead_quality_advisor
from funnelscope.analysis.funnel_walker import analyze_funnel
from funnelscope.models import DiagnosticContext, FunnelDropoff, Severity, SubEntityBreakdown, TimeRange
from funnelscope.orchestrator.runner import run_funnel_diagnostic
from funnelscope.platforms.funnels import META_LEADGEN_FUNNEL
from funnelscope.platforms.static import StaticPlatformClient
from tests.factories import CURRENT, PERIODS, PREVIOUS, commerce_snapshot, make_snapshot


def _top(**top_level):
    return make_snapshot({}, top_level=top_level)


def _run(advisor, current=None, previous=None, dropoffs=None, stage_analysis=None, context=None):
    return advisor(stage_analysis or [], dropoffs or [], current or _top(), previous or _top(), context)


def _weeks_before(time_range, weeks):
    shift = timedelta(days=7 * weeks)
    return TimeRange(time_range.since - shift, time_range.until - shift)


class TestCreativeFatigue:
    """Test CTR drop with stable CPM."""

    def test_ctr_drop_with_stable_cpm(self):
        findings = _run(creative_fatigue_advisor, _top(ctr=0.8, cpm=10), _top(ctr=1.0, cpm=10))
        assert len(findings) == 1
        assert findings[0].severity is Severity.warning
        assert findings[0].stage == "click"

    def test_critical_when_ctr_collapses(self):
        findings = _run(creative_fatigue_advisor, _top(ctr=0.5, cpm=10), _top(ctr=1.0, cpm=10))
        assert findings[0].severity is Severity.critical

    def test_silent_when_cpm_fell(self):
        assert _run(creative_fatigue_advisor, _top(ctr=0.5, cpm=8), _top(ctr=1.0, cpm=10)) == []

    def test_silent_without_baseline(self):
        assert _run(creative_fatigue_advisor, _top(ctr=0.5), _top()) == []

    def test_leadgen_recommendation(self):
        findings = _run(leadgen_creative_fatigue_advisor, _top(ctr=0.5, cpm=10), _top(ctr=1.0, cpm=10))
        assert "leadgen" in findings[0].recommendation


class TestAuctionCompetition:
    """Test CPM increase detection."""

    @pytest.mark.parametrize("current_cpm,expected", [(13, Severity.warning), (16, Severity.critical)])
    def test_cpm_increase(self, current_cpm, expected):
        findings = _run(auction_competition_advisor, _top(cpm=current_cpm), _top(cpm=10))
        assert [f.severity for f in findings] == [expected]

    def test_silent_below_threshold(self):
        assert _run(auction_competition_advisor, _top(cpm=12), _top(cpm=10)) == []


class TestCreativeExhaustion:
    """Test multi-period CTR decay."""

    def _context(self, *ctrs):
        """Trailing snapshots one week apart, most recent first."""
        return DiagnosticContext(historical_snapshots=[
            make_snapshot({}, top_level={"ctr": value}, time_range=_weeks_before(CURRENT, i + 1))
            for i, value in enumerate(ctrs)
        ])

    def test_three_consecutive_declines(self):
        findings = _run(creative_exhaustion_advisor, _top(ctr=0.95), context=self._context(1.0, 1.1, 1.2))
        assert len(findings) == 1
        assert findings[0].severity is Severity.warning

    def test_accelerating_decline_is_critical(self):
        findings = _run(creative_exhaustion_advisor, _top(ctr=0.6), context=self._context(1.0, 1.1, 1.2))
        assert findings[0].severity is Severity.critical
        assert "accelerating" in findings[0].message

    def test_interrupted_decline_is_silent(self):
        assert _run(creative_exhaustion_advisor, _top(ctr=0.9), context=self._context(1.0, 0.9, 1.3)) == []

    def test_needs_history(self):
        assert _run(creative_exhaustion_advisor, _top(ctr=0.5)) == []
        assert _run(creative_exhaustion_advisor, _top(ctr=0.5), context=self._context(1.0, 1.1)) == []

    def test_current_period_in_history_is_ignored(self):
        history = self._context(1.0, 1.1, 1.2).historical_snapshots
        context = DiagnosticContext(historical_snapshots=[_top(ctr=0.95)] + history)
        assert len(_run(creative_exhaustion_advisor, _top(ctr=0.95), context=context)) == 1

    @pytest.mark.asyncio
    async def test_fires_through_historical_run(self):
        """WHAT: Trailing fetches start with the current period itself.
        WHY: Comparing the current CTR against itself must not break the decline streak.
        """
        ctrs = [1.0, 1.3, 1.6, 1.9, 2.2]
        client = StaticPlatformClient("meta", {
            _weeks_before(CURRENT, weeks): commerce_snapshot(
                _weeks_before(CURRENT, weeks), top_level={"ctr": value, "cpm": 10.0}
            )
            for weeks, value in enumerate(ctrs)
        })

        result = await run_funnel_diagnostic(
            client, "commerce", "act_123",
            reference_date=CURRENT.until, enable_historical=True, historical_periods=5,
            as_of=date(2024, 6, 30),
        )

        exhaustion = [f for f in result.findings if f.message.startswith("Creative exhaustion")]
        assert len(exhaustion) == 1
        assert "4 consecutive periods" in exhaustion[0].message


class TestROASEfficiency:
    """Test ROAS trend and target shortfall."""

    def test_decline_with_stable_cpa_points_at_order_value(self):
        current = _top(roas=2.0, cost_per_conversion=20)
        previous = _top(roas=3.0, cost_per_conversion=20)
        findings = _run(roas_efficiency_advisor, current, previous)
        assert findings[0].severity is Severity.critical
        assert "order value" in findings[0].message

    def test_improvement_is_healthy(self):
        findings = _run(roas_efficiency_advisor, _top(roas=3.0), _top(roas=2.0))
        assert [f.severity for f in findings] == [Severity.healthy]

    def test_target_shortfall(self):
        advisor = create_roas_efficiency_advisor(target_roas=4.0)
        findings = _run(advisor, _top(roas=3.0), _top(roas=3.0))
        assert len(findings) == 1
        assert "below target" in findings[0].message
        assert findings[0].severity is Severity.warning

    def test_silent_without_roas(self):
        assert _run(roas_efficiency_advisor) == []


class TestVerticalAdvisors:
    """Test stage-specific advisors."""

    def test_checkout_friction(self):
        dropoffs = [FunnelDropoff("add_to_cart", "purchase", current_rate=0.1, previous_rate=0.2, delta_percent=-50)]
        findings = _run(checkout_friction_advisor, dropoffs=dropoffs)
        assert [f.severity for f in findings] == [Severity.critical, Severity.info]

    def test_checkout_friction_silent_on_other_funnels(self):
        assert _run(checkout_friction_advisor, dropoffs=[FunnelDropoff("click", "conversion", 0.1, 0.2, -50)]) == []

    def test_landing_page_absolute_rate(self):
        dropoffs = [FunnelDropoff("click", "landing_page", current_rate=0.5, previous_rate=0.52, delta_percent=-3.8)]
        findings = _run(landing_page_advisor, dropoffs=dropoffs)
        assert len(findings) == 1
        assert "Industry baseline" in findings[0].message

    def test_lead_quality_junk_leads(self):
        """WHAT: Leads up, qualified leads down on the Meta leadgen funnel."""
        qualified = META_LEADGEN_FUNNEL.stages[-1].metric
        current = make_snapshot({"lead": 120, qualified: 10}, time_range=CURRENT)
        previous = make_snapshot({"lead": 100, qualified: 20}, time_range=PREVIOUS)
        result = analyze_funnel(META_LEADGEN_FUNNEL, current, previous, PERIODS)
        findings = _run(lead_quality_advisor, current, previous, stage_analysis=result.stage_analysis)
        # 10 / 120 = 8.3%: above the 8% floor, so only the junk-lead pattern fires
        assert [f.stage for f in findings] == ["lead -> qualified_lead"]
        assert findings[0].severity is Severity.critical


class TestLearningInstability:
    """Test structural learning-phase check."""

    def _entity(self, entity_id, spend, learning, days):
        return SubEntityBreakdown(entity_id, entity_id, spend=spend, conversions=1,
                                  in_learning_phase=learning, days_since_last_edit=days)

    def test_unstable_spend_share(self):
        context = DiagnosticContext(sub_entities=[
            self._entity("a", 700, True, 1),
            self._entity("b", 300, False, 10),
        ])
        findings = _run(learning_instability_advisor, context=context)
        assert findings[0].severity is Severity.critical
        assert findings[0].stage == "account_structure"

    def test_unknown_edit_age_is_skipped(self):
        context = DiagnosticContext(sub_entities=[self._entity("a", 700, True, None)])
        assert _run(learning_instability_advisor, context=context) == []

    def test_silent_without_breakdowns(self):
        assert _run(learning_instability_advisor) == []
        assert _run(learning_instability_advisor, context=DiagnosticContext()) == []


class TestAdvisorRegistry:
    """Test layering per platform and vertical."""

    def test_meta_commerce(self):
        advisors = resolve_advisors("meta", "commerce")
        assert advisors[0] is creative_fatigue_advisor
        assert advisors[2] is creative_exhaustion_advisor
        assert advisors[3] is learning_instability_advisor
        assert landing_page_advisor in advisors
        assert checkout_friction_advisor in advisors
        assert len(advisors) == 7

    def test_google_commerce_has_no_checkout_advisor(self):
        advisors = resolve_advisors("google", "commerce")
        assert checkout_friction_advisor not in advisors
        assert landing_page_advisor not in advisors
        assert roas_efficiency_advisor in advisors

    def test_leadgen_uses_leadgen_variants(self):
        advisors = resolve_advisors("tiktok", "leadgen")
        assert advisors[0] is leadgen_creative_fatigue_advisor
        assert lead_quality_advisor in advisors

    def test_target_roas_builds_dedicated_advisor(self):
        advisors = resolve_advisors("meta", "commerce", target_roas=3.0)
        assert roas_efficiency_advisor not in advisors
        assert len(advisors) == 7

    def test_brand_has_shared_layers_only(self):
        assert len(resolve_advisors("meta", "brand")) == 4
