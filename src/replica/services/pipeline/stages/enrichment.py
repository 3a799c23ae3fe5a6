"""Stage: merge layout, role, design-system and variation enrichment."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from replica.services.pipeline.base import PipelineContext
from replica.utils.types import ProgressCallback

if TYPE_CHECKING:
    from replica.services.enrichment import EnrichmentMerger


class EnrichmentStage:
    name = "enrichment"

    def __init__(self, merger: EnrichmentMerger) -> None:
        self._merger = merger

    def should_run(self, ctx: PipelineContext) -> bool:
        return ctx.enrichment is None

    async def execute(
        self,
        ctx: PipelineContext,
        on_progress: ProgressCallback | None = None,
    ) -> PipelineContext:
        result = await self._merger.merge(list(ctx.instances))
        if on_progress:
            on_progress(1, 1)
        return replace(ctx, enrichment=result)
