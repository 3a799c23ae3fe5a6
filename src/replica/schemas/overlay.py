"""Consolidated overlay schemas: motion, instances, roles and layout."""

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from replica.schemas.detection import BoundingBox, FrameVisuals, Styling


class MotionType(StrEnum):
    STATIC = "STATIC"
    LINEAR = "LINEAR"
    EASE_IN = "EASE_IN"
    EASE_OUT = "EASE_OUT"
    POP_IN = "POP_IN"


class Easing(StrEnum):
    """Easing vocabulary understood by the editor / renderer."""

    LINEAR = "linear"
    EASE_IN = "ease-in"
    EASE_OUT = "ease-out"
    EASE_IN_OUT = "ease-in-out"


class TextRole(StrEnum):
    HOOK = "HOOK"
    BODY = "BODY"
    CTA = "CTA"


class MotionKeyframe(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: float
    x: float
    y: float


def _check_ordered(keyframes: list[MotionKeyframe]) -> None:
    for prev, cur in zip(keyframes, keyframes[1:]):
        if cur.time < prev.time:
            raise ValueError("keyframes must be non-decreasing in time")


class MotionPath(BaseModel):
    """Engine motion path; keyframe times are seconds relative to the instance start."""

    model_config = ConfigDict(frozen=True)

    keyframes: list[MotionKeyframe] = Field(default_factory=list)
    type: MotionType = MotionType.STATIC
    variance: float = Field(default=0.0, ge=0.0)

    @model_validator(mode="after")
    def _ordered(self) -> "MotionPath":
        _check_ordered(self.keyframes)
        return self


class TrackedMotion(BaseModel):
    """Editor-facing motion path; keyframe times are absolute milliseconds."""

    model_config = ConfigDict(frozen=True)

    keyframes: list[MotionKeyframe]
    easing: Easing = Easing.LINEAR
    duration: float = 0.0

    @model_validator(mode="after")
    def _ordered(self) -> "TrackedMotion":
        _check_ordered(self.keyframes)
        return self


class ConsolidatedTextInstance(BaseModel):
    """One logical on-screen text element spanning several frames."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    start_frame: int
    end_frame: int
    start_time: float  # seconds
    end_time: float
    duration: float
    bounding_box: BoundingBox
    motion_path: MotionPath | None = None
    visuals: FrameVisuals = Field(default_factory=FrameVisuals)
    detection_confidence: float

    @model_validator(mode="after")
    def _temporal_bounds(self) -> "ConsolidatedTextInstance":
        if self.end_frame < self.start_frame:
            raise ValueError("end_frame must be >= start_frame")
        if self.end_time < self.start_time:
            raise ValueError("end_time must be >= start_time")
        return self


class EdgeInsets(BaseModel):
    model_config = ConfigDict(frozen=True)

    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0


class LayoutLogic(BaseModel):
    model_config = ConfigDict(frozen=True)

    anchor: Literal["top", "center", "bottom"] = "center"
    alignment: Literal["left", "center", "right"] = "center"
    padding: EdgeInsets = Field(default_factory=EdgeInsets)
    margin: EdgeInsets = Field(default_factory=EdgeInsets)
    z_index: int = 1


DEFAULT_LAYOUT = LayoutLogic()


class EnrichedOverlay(ConsolidatedTextInstance):
    role: TextRole = TextRole.BODY
    layout: LayoutLogic = Field(default_factory=LayoutLogic)


class Position(BaseModel):
    x: float
    y: float


class OverlayStyle(BaseModel):
    font_size: str
    color: str
    background: str
    position: Position
    alignment: str
    font_weight: str
    font_family: str
    letter_spacing: float | None = None
    stroke_color: str | None = None
    stroke_width: float | None = None


class TextOverlay(BaseModel):
    """Render-ready overlay handed to the compositing stage."""

    id: str
    text: str
    role: TextRole
    start_time: float
    end_time: float
    style: OverlayStyle
    motion_path: MotionPath | None = None
    styling: Styling = Field(default_factory=Styling)
