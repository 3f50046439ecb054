"""
Platform Registry.

WHAT:
    Read-only lookup of funnel schemas, vertical benchmarks, advisors and
    client factories keyed by (platform, vertical).

WHY:
    Built once at startup and passed by reference into the orchestrator,
    so tests can swap in their own clients and funnels without touching
    module globals.

DESIGN:
    - Mappings are wrapped in MappingProxyType; the registry never changes
      after construction
    - Meta leadgen funnel/benchmarks are rebuilt when the account sets a
      custom qualified-lead action
    - A lookup miss raises UnknownFunnelError (hard failure)

REFERENCES:
    - funnelscope/platforms/funnels.py
    - funnelscope/verticals/benchmarks.py
    - funnelscope/advisors/registry.py
"""

from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from funnelscope.advisors.registry import resolve_advisors
from funnelscope.analysis.funnel_walker import FindingAdvisor
from funnelscope.exceptions import ConfigurationError, UnknownFunnelError
from funnelscope.models import FunnelSchema, VerticalBenchmarks
from funnelscope.platforms import funnels
from funnelscope.platforms.base import PlatformClient
from funnelscope.schemas import PlatformAccountConfig
from funnelscope.verticals.benchmarks import (
    BRAND_BENCHMARKS,
    COMMERCE_BENCHMARKS,
    LEADGEN_BENCHMARKS,
    create_leadgen_benchmarks,
)

ClientFactory = Callable[[PlatformAccountConfig], PlatformClient]

DEFAULT_FUNNELS: Dict[Tuple[str, str], FunnelSchema] = {
    ("meta", "commerce"): funnels.META_COMMERCE_FUNNEL,
    ("meta", "leadgen"): funnels.META_LEADGEN_FUNNEL,
    ("meta", "brand"): funnels.META_BRAND_FUNNEL,
    ("google", "commerce"): funnels.GOOGLE_COMMERCE_FUNNEL,
    ("google", "leadgen"): funnels.GOOGLE_LEADGEN_FUNNEL,
    ("google", "brand"): funnels.GOOGLE_BRAND_FUNNEL,
    ("tiktok", "commerce"): funnels.TIKTOK_COMMERCE_FUNNEL,
    ("tiktok", "leadgen"): funnels.TIKTOK_LEADGEN_FUNNEL,
    ("tiktok", "brand"): funnels.TIKTOK_BRAND_FUNNEL,
}

DEFAULT_BENCHMARKS: Dict[str, VerticalBenchmarks] = {
    "commerce": COMMERCE_BENCHMARKS,
    "leadgen": LEADGEN_BENCHMARKS,
    "brand": BRAND_BENCHMARKS,
}


class PlatformRegistry:
    """
    Usage:
        registry = PlatformRegistry(client_factories={"meta": build_meta_client})
        funnel = registry.resolve_funnel("meta", "commerce")
        client = registry.create_client(platform_config)
    """

    def __init__(
        self,
        funnels: Optional[Mapping[Tuple[str, str], FunnelSchema]] = None,
        benchmarks: Optional[Mapping[str, VerticalBenchmarks]] = None,
        client_factories: Optional[Mapping[str, ClientFactory]] = None,
    ):
        self._funnels = MappingProxyType(dict(DEFAULT_FUNNELS if funnels is None else funnels))
        self._benchmarks = MappingProxyType(dict(DEFAULT_BENCHMARKS if benchmarks is None else benchmarks))
        self._client_factories = MappingProxyType(dict(client_factories or {}))

    @property
    def platforms(self) -> List[str]:
        return sorted({platform for platform, _ in self._funnels})

    def resolve_funnel(
        self,
        platform: str,
        vertical: str,
        qualified_lead_action: Optional[str] = None,
    ) -> FunnelSchema:
        funnel = self._funnels.get((platform, vertical))
        if funnel is None:
            raise UnknownFunnelError(platform, vertical)
        if platform == "meta" and vertical == "leadgen" and qualified_lead_action:
            return funnels.create_meta_leadgen_funnel(qualified_lead_action)
        return funnel

    def resolve_benchmarks(
        self,
        platform: str,
        vertical: str,
        qualified_lead_action: Optional[str] = None,
    ) -> VerticalBenchmarks:
        benchmarks = self._benchmarks.get(vertical)
        if benchmarks is None:
            raise UnknownFunnelError(platform, vertical, f'No benchmarks for vertical "{vertical}"')
        if vertical == "leadgen" and qualified_lead_action:
            return create_leadgen_benchmarks(qualified_lead_action)
        return benchmarks

    def resolve_advisors(
        self,
        platform: str,
        vertical: str,
        target_roas: Optional[float] = None,
    ) -> List[FindingAdvisor]:
        return resolve_advisors(platform, vertical, target_roas)

    def create_client(self, platform_config: PlatformAccountConfig) -> PlatformClient:
        factory = self._client_factories.get(platform_config.platform)
        if factory is None:
            raise ConfigurationError(
                f'No client factory registered for platform "{platform_config.platform}"',
                platform=platform_config.platform,
            )
        return factory(platform_config)
