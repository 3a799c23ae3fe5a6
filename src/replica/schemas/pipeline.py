from pydantic import BaseModel, Field

from replica.schemas.design import DesignSystem
from replica.schemas.detection import Frame, RawFrameAnalysis
from replica.schemas.overlay import EnrichedOverlay


class SegmentVariations(BaseModel):
    segment_id: str
    variations: list[str] = Field(default_factory=list)


class PipelineResult(BaseModel):
    """Final artifact handed to the rendering / persistence stages."""

    project_id: str
    overlays: list[EnrichedOverlay] = Field(default_factory=list)
    design_system: DesignSystem
    variations: list[SegmentVariations] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class AnalysesRequest(BaseModel):
    frames: list[RawFrameAnalysis] = Field(min_length=1)
    fps: float = Field(default=2.0, gt=0)


class FramesRequest(BaseModel):
    frames: list[Frame] = Field(min_length=1)
    fps: float = Field(default=2.0, gt=0)


class HealthResponse(BaseModel):
    llm_reachable: bool
