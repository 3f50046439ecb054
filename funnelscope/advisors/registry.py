"""
Advisor registry.

Composes the ordered advisor list for a (platform, vertical) pair in
layers: shared -> creative exhaustion -> structural -> platform-specific
-> vertical-specific. Findings are later stable-sorted by severity, so
this order is the tie-break order within a severity.
"""

from typing import List, Optional

from funnelscope.advisors.shared import (
    auction_competition_advisor,
    create_roas_efficiency_advisor,
    creative_exhaustion_advisor,
    creative_fatigue_advisor,
    leadgen_auction_competition_advisor,
    leadgen_creative_fatigue_advisor,
    roas_efficiency_advisor,
)
from funnelscope.advisors.structural import learning_instability_advisor
from funnelscope.advisors.vertical import (
    checkout_friction_advisor,
    landing_page_advisor,
    lead_quality_advisor,
)
from funnelscope.analysis.funnel_walker import FindingAdvisor


def resolve_advisors(
    platform: str,
    vertical: str,
    target_roas: Optional[float] = None,
) -> List[FindingAdvisor]:
    """
    Examples:
        meta + commerce   -> fatigue, auction, exhaustion, learning, landing page, ROAS, checkout
        google + commerce -> fatigue, auction, exhaustion, learning, ROAS
        meta + leadgen    -> fatigue, auction, exhaustion, learning, lead quality
    """
    advisors: List[FindingAdvisor] = []

    if vertical == "leadgen":
        advisors += [leadgen_creative_fatigue_advisor, leadgen_auction_competition_advisor]
    else:
        advisors += [creative_fatigue_advisor, auction_competition_advisor]

    advisors.append(creative_exhaustion_advisor)
    advisors.append(learning_instability_advisor)

    if platform == "meta" and vertical == "commerce":
        advisors.append(landing_page_advisor)

    if vertical == "commerce":
        advisors.append(create_roas_efficiency_advisor(target_roas) if target_roas else roas_efficiency_advisor)
        # Google's commerce funnel has no add_to_cart stage
        if platform in ("meta", "tiktok"):
            advisors.append(checkout_friction_advisor)
    elif vertical == "leadgen":
        advisors.append(lead_quality_advisor)

    return advisors
