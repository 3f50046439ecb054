"""
Vertical default benchmarks.

Fallback thresholds for accounts with fewer than 4 weeks of history. Keys
are stage metric keys; platforms sharing a vertical share the table, so it
covers every platform's metric names for that vertical.
"""

from funnelscope.models import StageBenchmark, VerticalBenchmarks
from funnelscope.platforms.funnels import DEFAULT_QUALIFIED_LEAD_ACTION

COMMERCE_BENCHMARKS = VerticalBenchmarks(
    vertical="commerce",
    benchmarks={
        # Auction dynamics move impression volume ~20% week to week
        "impressions": StageBenchmark(1.0, 20),
        "inline_link_clicks": StageBenchmark(0.02, 15),
        "landing_page_view": StageBenchmark(0.8, 10),
        "view_content": StageBenchmark(0.7, 12),
        "add_to_cart": StageBenchmark(0.08, 18),
        "purchase": StageBenchmark(0.35, 20),
    },
)

# Instant forms: 5-15% qualify on "more volume", 15-40% with a review screen
QUALIFIED_LEAD_BENCHMARK = StageBenchmark(0.15, 30)


def create_leadgen_benchmarks(qualified_lead_action: str = DEFAULT_QUALIFIED_LEAD_ACTION) -> VerticalBenchmarks:
    return VerticalBenchmarks(
        vertical="leadgen",
        benchmarks={
            # Narrow (often B2B) audiences make delivery more volatile
            "impressions": StageBenchmark(1.0, 25),
            "inline_link_clicks": StageBenchmark(0.025, 15),
            "lead": StageBenchmark(0.2, 18),
            qualified_lead_action: QUALIFIED_LEAD_BENCHMARK,
        },
    )


LEADGEN_BENCHMARKS = create_leadgen_benchmarks()

BRAND_BENCHMARKS = VerticalBenchmarks(
    vertical="brand",
    benchmarks={
        "impressions": StageBenchmark(1.0, 25),
        "reach": StageBenchmark(0.5, 20),
        "video_thruplay_actions": StageBenchmark(0.25, 20),
        "video_views": StageBenchmark(0.3, 18),
        "video_views_p50": StageBenchmark(0.2, 22),
        "estimated_ad_recall_lift": StageBenchmark(0.1, 30),
        "clicks": StageBenchmark(0.01, 25),
    },
)
