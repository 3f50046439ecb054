"""
Built-in funnel schemas per platform and vertical.

Stage metric keys match what each platform client writes into
MetricSnapshot.stages. Every funnel starts at an "awareness" stage keyed on
"impressions" so CPM can be derived uniformly across sources.
"""

from funnelscope.models import FunnelSchema, FunnelStage

DEFAULT_QUALIFIED_LEAD_ACTION = "offsite_conversion.fb_pixel_lead"


def _awareness(source: str) -> FunnelStage:
    return FunnelStage("awareness", "impressions", source, "cpm", source)


# =============================================================================
# META
# =============================================================================

META_COMMERCE_FUNNEL = FunnelSchema(
    vertical="commerce",
    stages=(
        _awareness("top_level"),
        FunnelStage("click", "inline_link_clicks", "top_level", "cpc", "top_level"),
        FunnelStage("landing_page", "landing_page_view", "actions"),
        FunnelStage("view_content", "view_content", "actions"),
        FunnelStage("add_to_cart", "add_to_cart", "actions", "add_to_cart", "cost_per_action_type"),
        FunnelStage("purchase", "purchase", "actions", "purchase", "cost_per_action_type"),
    ),
    primary_kpi="purchase",
    roas_metric="website_purchase_roas",
)


def create_meta_leadgen_funnel(qualified_lead_action: str = DEFAULT_QUALIFIED_LEAD_ACTION) -> FunnelSchema:
    """
    Meta instant-form funnel. The qualified lead stage is the CAPI/offline
    event the advertiser sends back, so its action type is configurable.
    """
    return FunnelSchema(
        vertical="leadgen",
        stages=(
            _awareness("top_level"),
            FunnelStage("click", "inline_link_clicks", "top_level", "cpc", "top_level"),
            FunnelStage("lead", "lead", "actions", "lead", "cost_per_action_type"),
            FunnelStage(
                "qualified_lead", qualified_lead_action, "actions",
                qualified_lead_action, "cost_per_action_type",
            ),
        ),
        primary_kpi="lead",
    )


META_LEADGEN_FUNNEL = create_meta_leadgen_funnel()

META_BRAND_FUNNEL = FunnelSchema(
    vertical="brand",
    stages=(
        _awareness("top_level"),
        FunnelStage("reach", "reach", "top_level"),
        FunnelStage(
            "thruplay", "video_thruplay_actions", "actions",
            "video_thruplay_actions", "cost_per_action_type",
        ),
        FunnelStage("ad_recall", "estimated_ad_recall_lift", "top_level"),
    ),
    primary_kpi="video_thruplay_actions",
)

# =============================================================================
# GOOGLE
# =============================================================================

GOOGLE_COMMERCE_FUNNEL = FunnelSchema(
    vertical="commerce",
    stages=(
        _awareness("metrics"),
        FunnelStage("click", "clicks", "metrics", "cpc", "metrics"),
        FunnelStage("conversion", "conversions", "metrics", "cost_per_conversion", "metrics"),
    ),
    primary_kpi="conversions",
    roas_metric="roas",
)

GOOGLE_LEADGEN_FUNNEL = FunnelSchema(
    vertical="leadgen",
    stages=(
        _awareness("metrics"),
        FunnelStage("click", "clicks", "metrics", "cpc", "metrics"),
        FunnelStage("lead", "conversions", "conversion_action", "cost_per_conversion", "metrics"),
    ),
    primary_kpi="conversions",
)

GOOGLE_BRAND_FUNNEL = FunnelSchema(
    vertical="brand",
    stages=(
        _awareness("metrics"),
        FunnelStage("view", "video_views", "metrics", "video_views", "metrics"),
        FunnelStage("engagement", "clicks", "metrics", "cpc", "metrics"),
    ),
    primary_kpi="video_views",
)

# =============================================================================
# TIKTOK
# =============================================================================

TIKTOK_COMMERCE_FUNNEL = FunnelSchema(
    vertical="commerce",
    stages=(
        _awareness("metrics"),
        FunnelStage("click", "clicks", "metrics", "cpc", "metrics"),
        FunnelStage("view_content", "page_browse", "metrics"),
        FunnelStage("add_to_cart", "onsite_add_to_cart", "metrics", "onsite_add_to_cart", "metrics"),
        FunnelStage("purchase", "complete_payment", "metrics", "complete_payment", "metrics"),
    ),
    primary_kpi="complete_payment",
    roas_metric="complete_payment_roas",
)

TIKTOK_LEADGEN_FUNNEL = FunnelSchema(
    vertical="leadgen",
    stages=(
        _awareness("metrics"),
        FunnelStage("click", "clicks", "metrics", "cpc", "metrics"),
        FunnelStage("lead", "onsite_form", "metrics", "onsite_form", "metrics"),
    ),
    primary_kpi="onsite_form",
)

TIKTOK_BRAND_FUNNEL = FunnelSchema(
    vertical="brand",
    stages=(
        _awareness("metrics"),
        FunnelStage("reach", "reach", "metrics"),
        FunnelStage("video_view", "video_views_p50", "metrics", "video_views_p50", "metrics"),
        FunnelStage("engagement", "clicks", "metrics", "cpc", "metrics"),
    ),
    primary_kpi="video_views_p50",
)
