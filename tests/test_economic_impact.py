"""Unit tests for economic impact and the elasticity ranking.

WHAT:
    Funnel-position multipliers, drop-off impact against the upstream base,
    and ranking/exclusion rules.

WHY:
    Portfolio actions are ranked on these dollar figures.

REFERENCES:
    funnelscope/analysis/economic_impact.py
"""

import pytest

from funnelscope.analysis.economic_impact import (
    attach_economic_impacts,
    build_elasticity_ranking,
    compute_dropoff_economic_impact,
    compute_stage_economic_impact,
)
from funnelscope.models import EconomicImpact, FunnelDropoff, RevenueData, Severity, StageDiagnostic


def _stage(metric, current, previous, significant=True, stage_name=None):
    return StageDiagnostic(
        stage_name=stage_name or metric,
        metric=metric,
        current_value=current,
        previous_value=previous,
        delta=current - previous,
        delta_percent=(current - previous) / previous * 100 if previous else 0.0,
        is_significant=significant,
        severity=Severity.warning,
    )


class TestStageImpact:
    """Test per-stage revenue deltas."""

    def test_bottom_of_funnel_uses_full_order_value(self):
        impact = compute_stage_economic_impact(_stage("purchase", 80, 100), 50.0, True, 5000.0)
        assert impact.conversion_delta == -20
        assert impact.estimated_revenue_delta == pytest.approx(-1000)
        assert impact.revenue_impact_percent == pytest.approx(-20)

    def test_click_level_is_attenuated(self):
        impact = compute_stage_economic_impact(_stage("inline_link_clicks", 900, 1000), 50.0, False)
        assert impact.estimated_revenue_delta == pytest.approx(-500)

    def test_impression_level_is_attenuated_further(self):
        impact = compute_stage_economic_impact(_stage("impressions", 9000, 10000), 50.0, False)
        assert impact.estimated_revenue_delta == pytest.approx(-500)

    def test_unknown_previous_revenue_gives_zero_percent(self):
        impact = compute_stage_economic_impact(_stage("purchase", 80, 100), 50.0, True, 0.0)
        assert impact.revenue_impact_percent == 0


class TestDropoffImpact:
    """Test drop-off impact against its own upstream volume."""

    def test_rate_change_times_upstream_base(self):
        dropoff = FunnelDropoff("add_to_cart", "purchase", current_rate=0.1, previous_rate=0.2, delta_percent=-50)
        impact = compute_dropoff_economic_impact(dropoff, 100, 80.0, 4000.0)
        assert impact.conversion_delta == pytest.approx(-10)
        assert impact.estimated_revenue_delta == pytest.approx(-800)
        assert impact.revenue_impact_percent == pytest.approx(-20)

    def test_attach_uses_previous_from_stage_count(self):
        """WHAT: Each transition's base is its own from-stage previous count."""
        stages = [_stage("inline_link_clicks", 1000, 2000), _stage("purchase", 10, 20)]
        dropoffs = [FunnelDropoff("click", "purchase", current_rate=0.01, previous_rate=0.01, delta_percent=0)]
        dropoffs[0].current_rate = 0.005
        attach_economic_impacts(stages, dropoffs, "purchase", RevenueData(100.0, 1000.0, 2000.0))
        assert dropoffs[0].economic_impact.conversion_delta == pytest.approx(-0.005 * 2000)

    def test_attach_without_revenue_is_noop(self):
        stages = [_stage("purchase", 10, 20)]
        attach_economic_impacts(stages, [], "purchase", None)
        assert stages[0].economic_impact is None


class TestElasticityRanking:
    """Test ranking inclusion and order."""

    def _with_impact(self, name, revenue_delta, significant=True):
        stage = _stage(name, 1, 1, significant=significant)
        stage.economic_impact = EconomicImpact(0, revenue_delta, 0)
        return stage

    def test_sorted_worst_first(self):
        ranking = build_elasticity_ranking([
            self._with_impact("click", -100),
            self._with_impact("purchase", -900),
            self._with_impact("add_to_cart", -300),
        ])
        assert [e.stage for e in ranking.impact_ranking] == ["purchase", "add_to_cart", "click"]
        assert ranking.total_estimated_revenue_loss == pytest.approx(-1300)

    def test_excludes_insignificant_and_non_negative(self):
        ranking = build_elasticity_ranking([
            self._with_impact("click", -100, significant=False),
            self._with_impact("purchase", 0),
            self._with_impact("add_to_cart", 250),
        ])
        assert ranking.impact_ranking == []
        assert ranking.total_estimated_revenue_loss == 0.0
        assert isinstance(ranking.total_estimated_revenue_loss, float)
