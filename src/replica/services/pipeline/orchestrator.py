"""Stage runner: executes registered stages in order and records their timing."""

import logging
import time
from dataclasses import replace

from replica.services.pipeline.base import (
    PipelineContext,
    Stage,
    StageProgressCallback,
)
from replica.utils.types import ProgressCallback

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """Runs a sequence of Stage instances, skipping those where should_run is False."""

    def __init__(self) -> None:
        self._stages: list[Stage] = []

    def register(self, stage: Stage) -> "PipelineOrchestrator":
        self._stages.append(stage)
        return self

    def _progress_for(
        self,
        on_stage_progress: StageProgressCallback | None,
        name: str,
        index: int,
    ) -> ProgressCallback | None:
        if on_stage_progress is None:
            return None
        total_stages = len(self._stages)

        def _cb(current: int, total: int) -> None:
            on_stage_progress(name, index, total_stages, current, total)

        return _cb

    async def run(
        self,
        ctx: PipelineContext,
        on_stage_progress: StageProgressCallback | None = None,
    ) -> PipelineContext:
        total = len(self._stages)

        for index, stage in enumerate(self._stages):
            if not stage.should_run(ctx):
                logger.debug("Stage %s skipped (should_run=False)", stage.name)
                continue

            logger.info("Stage [%d/%d] %s starting...", index + 1, total, stage.name)
            start = time.perf_counter()
            ctx = await stage.execute(
                ctx, on_progress=self._progress_for(on_stage_progress, stage.name, index)
            )
            elapsed = (time.perf_counter() - start) * 1000
            ctx = replace(ctx, processing_times={**ctx.processing_times, stage.name: elapsed})

            logger.info("Stage [%d/%d] %s completed in %.0fms", index + 1, total, stage.name, elapsed)

        return ctx
