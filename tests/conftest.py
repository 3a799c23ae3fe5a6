from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from replica.config import Settings
from replica.schemas.design import PartialDesignSystem
from replica.schemas.detection import (
    BoundingBox,
    FrameVisuals,
    RawFrameAnalysis,
    RawTextDetection,
    Styling,
    Typography,
)
from replica.schemas.overlay import ConsolidatedTextInstance
from replica.services.pipeline import PipelineService


@pytest.fixture
def mock_settings() -> Settings:
    return Settings(
        llm_api_key="test-key",
        llm_base_url="http://localhost:9999/v1",
        llm_model_name="test-model",
        llm_retry_delay=0.0,
        enrichment_timeout_s=1.0,
    )


@pytest.fixture
def make_detection() -> Callable[..., RawTextDetection]:
    def _make(
        text: str,
        frame_index: int,
        x: float = 10,
        y: float = 80,
        width: float = 30,
        height: float = 8,
        confidence: float = 0.9,
    ) -> RawTextDetection:
        return RawTextDetection(
            text=text,
            frame_index=frame_index,
            bounding_box=BoundingBox(x=x, y=y, width=width, height=height),
            confidence=confidence,
        )

    return _make


@pytest.fixture
def make_frames() -> Callable[..., list[RawFrameAnalysis]]:
    """Build one RawFrameAnalysis per frame index from a flat detection list."""

    def _make(
        detections: list[RawTextDetection],
        frame_count: int | None = None,
        fps: float = 2.0,
    ) -> list[RawFrameAnalysis]:
        last = max((d.frame_index for d in detections), default=-1)
        count = frame_count if frame_count is not None else last + 1
        return [
            RawFrameAnalysis(
                frame_index=i,
                timestamp=i * 1000 / fps,
                detections=[d for d in detections if d.frame_index == i],
                visuals=FrameVisuals(
                    typography=Typography(font_family=f"Font{i}"),
                    styling=Styling(text_color="#FFFFFF"),
                ),
            )
            for i in range(count)
        ]

    return _make


@pytest.fixture
def make_instance() -> Callable[..., ConsolidatedTextInstance]:
    def _make(id: str, text: str, start_frame: int = 0, end_frame: int = 2) -> ConsolidatedTextInstance:
        return ConsolidatedTextInstance(
            id=id,
            text=text,
            start_frame=start_frame,
            end_frame=end_frame,
            start_time=start_frame / 2,
            end_time=end_frame / 2,
            duration=max((end_frame - start_frame) / 2, 1.0),
            bounding_box=BoundingBox(x=10, y=80, width=30, height=8),
            detection_confidence=0.9,
        )

    return _make


@pytest.fixture
def collaborators() -> dict[str, MagicMock]:
    """Enrichment collaborators that return nothing (all defaults)."""
    layout = MagicMock()
    layout.analyze_layout = AsyncMock(return_value={})
    roles = MagicMock()
    roles.classify_roles = AsyncMock(return_value={})
    design = MagicMock()
    design.generate_design_system = AsyncMock(return_value=PartialDesignSystem())
    variations = MagicMock()
    variations.generate_variations = AsyncMock(return_value={})
    return {"layout": layout, "roles": roles, "design": design, "variations": variations}


@pytest.fixture
def pipeline_service(collaborators: dict[str, MagicMock], mock_settings: Settings) -> PipelineService:
    return PipelineService(settings=mock_settings, **collaborators)
