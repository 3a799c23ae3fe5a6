"""Stage: per-frame OCR + style inference through the vision collaborator."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from replica.services.pipeline.base import PipelineContext
from replica.utils.types import ProgressCallback

if TYPE_CHECKING:
    from replica.services.collaborators import VisionCollaborator

logger = logging.getLogger(__name__)


class FrameAnalysisStage:
    name = "frame_analysis"

    def __init__(self, vision: VisionCollaborator) -> None:
        self._vision = vision

    def should_run(self, ctx: PipelineContext) -> bool:
        return len(ctx.frames) > 0 and not ctx.analyses

    async def execute(
        self,
        ctx: PipelineContext,
        on_progress: ProgressCallback | None = None,
    ) -> PipelineContext:
        analyses = await self._vision.analyze_frames(list(ctx.frames))
        detections = sum(len(a.detections) for a in analyses)
        logger.info("Vision: %d detections from %d frames", detections, len(analyses))
        if on_progress:
            on_progress(len(analyses), len(ctx.frames))
        return replace(ctx, analyses=tuple(analyses))
