"""Pipeline service facade.

``process_video`` is the single entry point: frames -> vision -> temporal
consolidation -> enrichment -> PipelineResult.  Each call starts from a
fresh context; nothing video-specific outlives the call.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Sequence
from typing import TYPE_CHECKING

from replica.exceptions import ReplicaError
from replica.schemas.detection import Frame, RawFrameAnalysis
from replica.schemas.overlay import ConsolidatedTextInstance, TrackedMotion
from replica.schemas.pipeline import PipelineResult
from replica.services.enrichment import EnrichmentMerger
from replica.services.grouping import TemporalGrouper
from replica.services.instance_builder import InstanceBuilder
from replica.services.motion import MotionPathSynthesizer
from replica.services.motion_tracker import MotionTracker
from replica.services.pipeline.base import PipelineContext, StageProgressCallback
from replica.services.pipeline.orchestrator import PipelineOrchestrator
from replica.services.pipeline.stages import (
    ConsolidationStage,
    EnrichmentStage,
    FrameAnalysisStage,
    consolidate_frames,
)

if TYPE_CHECKING:
    from replica.config import Settings
    from replica.services.collaborators import (
        DesignSystemCollaborator,
        LayoutCollaborator,
        RoleCollaborator,
        VariationCollaborator,
        VisionCollaborator,
    )

logger = logging.getLogger(__name__)

__all__ = [
    "PipelineContext",
    "PipelineService",
]


class PipelineService:
    """Facade over the stage orchestrator."""

    def __init__(
        self,
        *,
        layout: LayoutCollaborator,
        roles: RoleCollaborator,
        design: DesignSystemCollaborator,
        variations: VariationCollaborator,
        vision: VisionCollaborator | None = None,
        settings: Settings | None = None,
    ) -> None:
        if settings is None:
            from replica.config import settings as default_settings

            settings = default_settings

        self._grouper = TemporalGrouper(
            settings.grouping_mode,
            similarity_threshold=settings.fuzzy_similarity_threshold,
            singleton_ratio=settings.fuzzy_singleton_ratio,
        )
        self._builder = InstanceBuilder(
            MotionPathSynthesizer(
                static_variance=settings.static_variance_threshold,
                static_displacement=settings.static_displacement_threshold,
                pop_in_jump=settings.pop_in_jump_threshold,
                velocity_analysis=settings.velocity_analysis,
                easing_ratio=settings.easing_ratio,
                linear_tolerance=settings.linear_tolerance,
            ),
            min_detections=settings.min_group_detections,
        )
        self._tracker = MotionTracker(
            similarity_threshold=settings.fuzzy_similarity_threshold,
            static_displacement=settings.static_displacement_threshold,
            easing_ratio=settings.easing_ratio,
            linear_tolerance=settings.linear_tolerance,
        )
        merger = EnrichmentMerger(
            layout,
            roles,
            design,
            variations,
            timeout=settings.enrichment_timeout_s,
        )
        self._has_vision = vision is not None

        self._pipeline = PipelineOrchestrator()
        # 1. Frames -> raw analyses (skipped when analyses are supplied)
        if vision is not None:
            self._pipeline.register(FrameAnalysisStage(vision))
        # 2. Raw analyses -> consolidated instances
        self._pipeline.register(ConsolidationStage(self._grouper, self._builder))
        # 3. Instances -> enriched overlays + design system + variations
        self._pipeline.register(EnrichmentStage(merger))

    def consolidate(
        self, analyses: Sequence[RawFrameAnalysis], fps: float
    ) -> list[ConsolidatedTextInstance]:
        """Consolidation only: no collaborators, no I/O."""
        _, instances = consolidate_frames(analyses, fps, self._grouper, self._builder)
        return instances

    def track_motion(self, analyses: Sequence[RawFrameAnalysis]) -> dict[str, TrackedMotion]:
        """Editor-facing motion for moving text, keyed by normalized text."""
        return self._tracker.track_text_motion(analyses)

    async def process_video(
        self,
        frames: Sequence[Frame],
        fps: float,
        on_stage_progress: StageProgressCallback | None = None,
    ) -> PipelineResult:
        if not self._has_vision:
            raise ReplicaError("PipelineService was built without a vision collaborator")
        logger.info("Pipeline process_video started for %d frames (fps=%.2f)", len(frames), fps)
        ctx = PipelineContext(fps=fps, frames=tuple(frames))
        return await self._run(ctx, on_stage_progress)

    async def process_analyses(
        self,
        analyses: Sequence[RawFrameAnalysis],
        fps: float,
        on_stage_progress: StageProgressCallback | None = None,
    ) -> PipelineResult:
        """Same as process_video, for callers that already ran frame analysis."""
        logger.info("Pipeline process_analyses started for %d frames (fps=%.2f)", len(analyses), fps)
        ctx = PipelineContext(fps=fps, analyses=tuple(analyses))
        return await self._run(ctx, on_stage_progress)

    async def _run(
        self,
        ctx: PipelineContext,
        on_stage_progress: StageProgressCallback | None,
    ) -> PipelineResult:
        start = time.perf_counter()
        ctx = await self._pipeline.run(ctx, on_stage_progress=on_stage_progress)
        enrichment = ctx.enrichment
        assert enrichment is not None and enrichment.design_system is not None

        result = PipelineResult(
            project_id=str(uuid.uuid4()),
            overlays=enrichment.overlays,
            design_system=enrichment.design_system,
            variations=enrichment.variations,
            warnings=enrichment.warnings,
        )
        logger.info(
            "Pipeline complete in %.0fms: %d overlays, %d variation sets, %d warnings",
            (time.perf_counter() - start) * 1000,
            len(result.overlays),
            len(result.variations),
            len(result.warnings),
        )
        return result
