"""
Finding advisors.

An advisor is a plain function with the FindingAdvisor signature:

    advisor(stage_analysis, dropoffs, current, previous, context) -> List[Finding]

Advisors are pure with respect to their inputs and return [] when they
have nothing to say. resolve_advisors() composes the ordered list for a
(platform, vertical) pair.
"""

from funnelscope.advisors.registry import resolve_advisors

__all__ = ["resolve_advisors"]
