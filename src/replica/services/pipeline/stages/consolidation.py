"""Stage: temporal grouping, box aggregation, motion synthesis and instance building."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from replica.exceptions import InvariantViolation
from replica.schemas.detection import RawFrameAnalysis
from replica.schemas.overlay import ConsolidatedTextInstance
from replica.services.grouping import DetectionGroup, TemporalGrouper
from replica.services.instance_builder import InstanceBuilder
from replica.services.pipeline.base import PipelineContext
from replica.utils.types import ProgressCallback

logger = logging.getLogger(__name__)


def consolidate_frames(
    analyses: Sequence[RawFrameAnalysis],
    fps: float,
    grouper: TemporalGrouper,
    builder: InstanceBuilder,
) -> tuple[list[DetectionGroup], list[ConsolidatedTextInstance]]:
    """Pure, synchronous consolidation of raw frame analyses."""
    if fps <= 0:
        raise InvariantViolation(f"fps must be positive, got {fps}")
    groups = grouper.group(analyses)
    instances = builder.build_all(groups, analyses, fps)
    logger.info(
        "Consolidated %d groups into %d text instances (%d dropped as noise)",
        len(groups),
        len(instances),
        len(groups) - len(instances),
    )
    return groups, instances


class ConsolidationStage:
    name = "consolidation"

    def __init__(self, grouper: TemporalGrouper, builder: InstanceBuilder) -> None:
        self._grouper = grouper
        self._builder = builder

    def should_run(self, ctx: PipelineContext) -> bool:
        return True

    async def execute(
        self,
        ctx: PipelineContext,
        on_progress: ProgressCallback | None = None,
    ) -> PipelineContext:
        groups, instances = consolidate_frames(ctx.analyses, ctx.fps, self._grouper, self._builder)
        return replace(ctx, groups=tuple(groups), instances=tuple(instances))
