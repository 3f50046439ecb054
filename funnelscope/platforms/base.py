"""
Platform client contract.

WHAT:
    Abstract base class every ad-platform client implements. Subclasses
    only provide fetch_snapshot(); comparison fetches are shared here.

WHY:
    The engine never talks HTTP. Authentication, pagination, rate limiting
    and response normalization live in the concrete clients. The engine
    only relies on this contract:
    - fetch_* never mutates the FunnelSchema it is given
    - a period with no data yields a zero-filled snapshot, not an error
    - upstream failures raise (ideally PlatformFetchError)

Optional capability:
    fetch_sub_entity_breakdowns() - clients that can list ad sets / ad
    groups override it and set supports_sub_entity_breakdowns = True.
"""

from abc import ABC, abstractmethod
from typing import List, Tuple

from funnelscope.models import FunnelSchema, MetricSnapshot, SubEntityBreakdown, TimeRange
from funnelscope.utils.concurrency import gather_fail_fast


class PlatformClient(ABC):
    """Base class for ad platform clients."""

    platform: str = ""
    supports_sub_entity_breakdowns: bool = False

    @abstractmethod
    async def fetch_snapshot(
        self,
        entity_id: str,
        entity_level: str,
        time_range: TimeRange,
        funnel: FunnelSchema,
    ) -> MetricSnapshot:
        """Fetch one normalized snapshot for one period."""

    async def fetch_comparison_snapshots(
        self,
        entity_id: str,
        entity_level: str,
        current: TimeRange,
        previous: TimeRange,
        funnel: FunnelSchema,
    ) -> Tuple[MetricSnapshot, MetricSnapshot]:
        """Current and previous snapshots, fetched together; either failing fails both."""
        current_snapshot, previous_snapshot = await gather_fail_fast(
            self.fetch_snapshot(entity_id, entity_level, current, funnel),
            self.fetch_snapshot(entity_id, entity_level, previous, funnel),
        )
        return current_snapshot, previous_snapshot

    async def fetch_sub_entity_breakdowns(
        self,
        entity_id: str,
        entity_level: str,
        time_range: TimeRange,
        funnel: FunnelSchema,
    ) -> List[SubEntityBreakdown]:
        raise NotImplementedError(f"{type(self).__name__} does not provide sub-entity breakdowns")
