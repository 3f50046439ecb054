"""
In-memory platform client.

WHAT:
    Serves pre-built snapshots keyed by time range. Used for offline
    replays of exported data and as the test double for the engine.

WHY:
    Lets the orchestrator run end-to-end without network access while
    honoring the client contract (zero-filled snapshots for unknown
    periods, funnel never mutated).
"""

import logging
from typing import Dict, List, Optional

from funnelscope.models import FunnelSchema, MetricSnapshot, SubEntityBreakdown, TimeRange
from funnelscope.platforms.base import PlatformClient

logger = logging.getLogger(__name__)


class StaticPlatformClient(PlatformClient):
    """
    Usage:
        client = StaticPlatformClient("meta", {periods.current: snap_a, periods.previous: snap_b})
        current, previous = await client.fetch_comparison_snapshots(...)
    """

    def __init__(
        self,
        platform: str,
        snapshots: Optional[Dict[TimeRange, MetricSnapshot]] = None,
        sub_entities: Optional[List[SubEntityBreakdown]] = None,
    ):
        self.platform = platform
        self._snapshots = dict(snapshots or {})
        self._sub_entities = sub_entities
        self.supports_sub_entity_breakdowns = sub_entities is not None
        self.fetched_ranges: List[TimeRange] = []

    def add_snapshot(self, time_range: TimeRange, snapshot: MetricSnapshot) -> None:
        self._snapshots[time_range] = snapshot

    async def fetch_snapshot(
        self,
        entity_id: str,
        entity_level: str,
        time_range: TimeRange,
        funnel: FunnelSchema,
    ) -> MetricSnapshot:
        self.fetched_ranges.append(time_range)
        snapshot = self._snapshots.get(time_range)
        if snapshot is None:
            logger.debug(
                "[STATIC_CLIENT] No %s data for %s %s..%s, returning zero-filled snapshot",
                self.platform, entity_id, time_range.since, time_range.until,
            )
            return MetricSnapshot.empty(entity_id, entity_level, time_range)
        return snapshot

    async def fetch_sub_entity_breakdowns(
        self,
        entity_id: str,
        entity_level: str,
        time_range: TimeRange,
        funnel: FunnelSchema,
    ) -> List[SubEntityBreakdown]:
        if self._sub_entities is None:
            return await super().fetch_sub_entity_breakdowns(entity_id, entity_level, time_range, funnel)
        return list(self._sub_entities)
