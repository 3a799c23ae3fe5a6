"""Pipeline stages."""

from replica.services.pipeline.stages.consolidation import ConsolidationStage, consolidate_frames
from replica.services.pipeline.stages.enrichment import EnrichmentStage
from replica.services.pipeline.stages.frame_analysis import FrameAnalysisStage

__all__ = [
    "ConsolidationStage",
    "EnrichmentStage",
    "FrameAnalysisStage",
    "consolidate_frames",
]
