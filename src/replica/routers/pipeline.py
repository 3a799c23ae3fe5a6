from fastapi import APIRouter, Depends, HTTPException

from replica.dependencies import get_chat_client, get_pipeline
from replica.exceptions import InvariantViolation
from replica.schemas.overlay import ConsolidatedTextInstance, TextOverlay, TrackedMotion
from replica.schemas.pipeline import (
    AnalysesRequest,
    FramesRequest,
    HealthResponse,
    PipelineResult,
)
from replica.services.llm import ChatClient
from replica.services.overlay_mapper import map_overlays
from replica.services.pipeline import PipelineService

router = APIRouter(prefix="/api/v1", tags=["pipeline"])


@router.get("/health", response_model=HealthResponse)
async def health(client: ChatClient = Depends(get_chat_client)) -> HealthResponse:
    return HealthResponse(llm_reachable=await client.is_reachable())


@router.post("/pipeline/consolidate", response_model=list[ConsolidatedTextInstance])
async def consolidate(
    body: AnalysesRequest,
    pipeline: PipelineService = Depends(get_pipeline),
) -> list[ConsolidatedTextInstance]:
    """Group raw frame analyses into consolidated text instances (no LLM calls)."""
    try:
        return pipeline.consolidate(body.frames, body.fps)
    except InvariantViolation as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/pipeline/analyze", response_model=PipelineResult)
async def analyze(
    body: AnalysesRequest,
    pipeline: PipelineService = Depends(get_pipeline),
) -> PipelineResult:
    """Consolidate + enrich pre-computed frame analyses."""
    return await pipeline.process_analyses(body.frames, body.fps)


@router.post("/pipeline/process", response_model=PipelineResult)
async def process(
    body: FramesRequest,
    pipeline: PipelineService = Depends(get_pipeline),
) -> PipelineResult:
    """Full run: vision analysis of extracted frames, consolidation, enrichment."""
    return await pipeline.process_video(body.frames, body.fps)


@router.post("/pipeline/overlays", response_model=list[TextOverlay])
async def overlays(result: PipelineResult) -> list[TextOverlay]:
    """Render-ready overlays for a pipeline result."""
    return map_overlays(result)


@router.post("/pipeline/motion", response_model=dict[str, TrackedMotion])
async def motion(
    body: AnalysesRequest,
    pipeline: PipelineService = Depends(get_pipeline),
) -> dict[str, TrackedMotion]:
    """Editor-facing motion paths for text that moves across frames."""
    return pipeline.track_motion(body.frames)
