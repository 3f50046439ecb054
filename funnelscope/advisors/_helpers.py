"""Lookups shared by advisors."""

from typing import List, Optional

from funnelscope.analysis.derived_metrics import top_level_number
from funnelscope.models import FunnelDropoff, MetricSnapshot, StageDiagnostic


def find_dropoff(dropoffs: List[FunnelDropoff], from_stage: str, to_stage: str) -> Optional[FunnelDropoff]:
    for dropoff in dropoffs:
        if dropoff.from_stage == from_stage and dropoff.to_stage == to_stage:
            return dropoff
    return None


def find_stage(stage_analysis: List[StageDiagnostic], stage_name: str) -> Optional[StageDiagnostic]:
    for stage in stage_analysis:
        if stage.stage_name == stage_name:
            return stage
    return None


def ctr(snapshot: MetricSnapshot) -> float:
    return top_level_number(snapshot, "ctr")


def cpm(snapshot: MetricSnapshot) -> float:
    return top_level_number(snapshot, "cpm")
