"""Pipeline core abstractions: PipelineContext and Stage protocol."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from replica.schemas.detection import Frame, RawFrameAnalysis
from replica.schemas.overlay import ConsolidatedTextInstance
from replica.services.enrichment import EnrichmentResult
from replica.services.grouping import DetectionGroup
from replica.utils.types import ProgressCallback

# (stage_name, stage_index, total_stages, current, total)
StageProgressCallback = Callable[[str, int, int, int, int], None]


@dataclass(frozen=True)
class PipelineContext:
    """Snapshot passed between stages; each stage returns a new one."""

    fps: float
    frames: tuple[Frame, ...] = ()

    # Vision output
    analyses: tuple[RawFrameAnalysis, ...] = ()

    # Consolidation output
    groups: tuple[DetectionGroup, ...] = ()
    instances: tuple[ConsolidatedTextInstance, ...] = ()

    # Enrichment output
    enrichment: EnrichmentResult | None = None

    # Timing (stage name -> ms)
    processing_times: dict[str, float] = field(default_factory=dict)


@runtime_checkable
class Stage(Protocol):
    """Protocol that all pipeline stages must implement."""

    name: str

    async def execute(
        self,
        ctx: PipelineContext,
        on_progress: ProgressCallback | None = None,
    ) -> PipelineContext: ...

    def should_run(self, ctx: PipelineContext) -> bool: ...
