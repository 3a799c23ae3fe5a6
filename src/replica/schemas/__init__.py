"""Replica schemas."""

from replica.schemas.design import DesignSystem, PartialDesignSystem
from replica.schemas.detection import (
    BoundingBox,
    Frame,
    FrameVisuals,
    RawFrameAnalysis,
    RawTextDetection,
)
from replica.schemas.overlay import (
    ConsolidatedTextInstance,
    Easing,
    EnrichedOverlay,
    LayoutLogic,
    MotionKeyframe,
    MotionPath,
    MotionType,
    TextOverlay,
    TextRole,
    TrackedMotion,
)
from replica.schemas.pipeline import PipelineResult, SegmentVariations

__all__ = [
    "BoundingBox",
    "ConsolidatedTextInstance",
    "DesignSystem",
    "Easing",
    "EnrichedOverlay",
    "Frame",
    "FrameVisuals",
    "LayoutLogic",
    "MotionKeyframe",
    "MotionPath",
    "MotionType",
    "PartialDesignSystem",
    "PipelineResult",
    "RawFrameAnalysis",
    "RawTextDetection",
    "SegmentVariations",
    "TextOverlay",
    "TextRole",
    "TrackedMotion",
]
