"""Unit tests for significance primitives and account variance resolution.

WHAT:
    percent_change, is_significant_change, z_score and the
    account -> benchmark -> default variance chain.

WHY:
    Every finding downstream depends on these thresholds; the exact
    numeric behavior is relied on by callers and must not drift.

REFERENCES:
    funnelscope/analysis/significance.py
    funnelscope/analysis/thresholds.py
"""

import pytest

from funnelscope.analysis.significance import (
    is_significant_change,
    minimum_detectable_effect,
    percent_change,
    z_score,
)
from funnelscope.analysis.thresholds import AccountHistory, account_variance, get_effective_variance
from funnelscope.verticals.benchmarks import COMMERCE_BENCHMARKS


class TestPercentChange:
    """Test period-over-period change with zero baselines."""

    def test_zero_to_zero_is_flat(self):
        assert percent_change(0, 0) == 0

    def test_from_zero_follows_sign_of_current(self):
        """WHAT: A zero baseline returns +/-100.
        WHY: Division by zero must never reach callers.
        """
        assert percent_change(50, 0) == 100
        assert percent_change(-5, 0) == -100

    def test_regular_change(self):
        assert percent_change(90, 100) == pytest.approx(-10)
        assert percent_change(150, 100) == pytest.approx(50)


class TestIsSignificantChange:
    """Test the spend heuristic and the benchmark-variance rule."""

    @pytest.mark.parametrize("delta", [-80, 0, 5, 99])
    def test_zero_spend_is_never_significant(self, delta):
        assert is_significant_change(delta, 0) is False

    def test_low_spend_uses_ten_percent_threshold(self):
        """WHAT: At $100, 100/sqrt(100) = 10% minimum detectable effect."""
        assert is_significant_change(15, 100) is True
        assert is_significant_change(5, 100) is False

    def test_high_spend_threshold_floors_at_five_percent(self):
        """WHAT: At $10,000 the raw effect is 1% but the floor is 5%."""
        assert is_significant_change(6, 10000) is True
        assert is_significant_change(3, 10000) is False

    def test_minimum_detectable_effect_is_clamped(self):
        assert minimum_detectable_effect(1) == 50
        assert minimum_detectable_effect(100) == pytest.approx(10)
        assert minimum_detectable_effect(1_000_000) == 5

    def test_benchmark_variance_doubles_as_threshold(self):
        """WHAT: With a variance of 20%, only changes beyond 40% count."""
        assert is_significant_change(-41, 5000, benchmark_variance=20) is True
        assert is_significant_change(-39, 5000, benchmark_variance=20) is False

    def test_negative_deltas_use_magnitude(self):
        assert is_significant_change(-15, 100) is True


class TestZScore:
    """Test z-score against a short history."""

    def test_needs_three_points(self):
        assert z_score(10, []) is None
        assert z_score(10, [10, 12]) is None

    def test_flat_history_matching_value(self):
        assert z_score(10, [10, 10, 10]) == 0

    def test_flat_history_different_value_is_undefined(self):
        assert z_score(20, [10, 10, 10]) is None

    def test_regular_history(self):
        score = z_score(16, [8, 10, 12])
        assert score is not None and score > 0


class TestEffectiveVariance:
    """Test variance resolution order."""

    def test_account_history_requires_four_weeks(self):
        history = AccountHistory({"purchase": [10, 12, 11]})
        assert history.weeks_of_data == 3
        assert account_variance("purchase", history) is None

    def test_account_history_wins_over_benchmark(self):
        history = AccountHistory({"purchase": [10, 10, 10, 10]})
        assert get_effective_variance("purchase", history, COMMERCE_BENCHMARKS) == 0

    def test_zero_mean_history_is_ignored(self):
        history = AccountHistory({"purchase": [0, 0, 0, 0]})
        assert account_variance("purchase", history) is None

    def test_falls_back_to_benchmark_then_default(self):
        empty = AccountHistory()
        assert get_effective_variance("purchase", empty, COMMERCE_BENCHMARKS) == 20
        assert get_effective_variance("unknown_metric", empty, COMMERCE_BENCHMARKS) == 15
        assert get_effective_variance("purchase", None, None, default=12.5) == 12.5
