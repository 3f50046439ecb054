"""
Analysis engine: significance primitives, funnel walking, economic impact
and diagnostic context assembly.
"""

from funnelscope.analysis.comparator import build_comparison_periods, build_trailing_periods
from funnelscope.analysis.context_builder import build_diagnostic_context, extract_revenue_data
from funnelscope.analysis.conversion_lag import assess_conversion_lag, compute_period_maturity
from funnelscope.analysis.economic_impact import (
    build_elasticity_ranking,
    compute_dropoff_economic_impact,
    compute_stage_economic_impact,
)
from funnelscope.analysis.funnel_walker import FindingAdvisor, analyze_funnel, classify_severity
from funnelscope.analysis.significance import is_significant_change, percent_change, z_score
