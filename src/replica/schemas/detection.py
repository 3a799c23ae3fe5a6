"""Per-frame vision schemas: raw OCR detections and best-effort style hints.

These models are the validation boundary for vision-service payloads.
Everything downstream works on these types, never on raw dicts.
"""

import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

logger = logging.getLogger(__name__)


class BoundingBox(BaseModel):
    """Axis-aligned box in percentage-of-frame coordinates (0-100)."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float
    height: float

    @field_validator("x", "y", "width", "height")
    @classmethod
    def _clamp_percentage(cls, v: float) -> float:
        return min(max(v, 0.0), 100.0)


class RawTextDetection(BaseModel):
    """One OCR hit from one frame."""

    model_config = ConfigDict(frozen=True)

    text: str
    frame_index: int = Field(ge=0)
    bounding_box: BoundingBox
    confidence: float = 0.0
    language: str | None = None

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, v: float) -> float:
        return min(max(v, 0.0), 1.0)


class Shadow(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0
    blur: float = 0.0
    opacity: float = 0.0


class Typography(BaseModel):
    model_config = ConfigDict(frozen=True)

    font_family: str | None = None
    font_size: float | None = None  # relative scale 0-100
    font_weight: str | int | None = None
    line_height: float | None = None
    letter_spacing: float | None = None


class Styling(BaseModel):
    model_config = ConfigDict(frozen=True)

    text_color: str | None = None
    stroke_color: str | None = None
    stroke_width: float | None = None
    shadow: Shadow | None = None
    opacity: float | None = None


class FrameVisuals(BaseModel):
    model_config = ConfigDict(frozen=True)

    typography: Typography = Field(default_factory=Typography)
    styling: Styling = Field(default_factory=Styling)


class RawFrameAnalysis(BaseModel):
    """Vision result for a single extracted frame (may have zero detections)."""

    model_config = ConfigDict(frozen=True)

    frame_index: int = Field(ge=0)
    timestamp: float = 0.0  # milliseconds
    detections: list[RawTextDetection] = Field(default_factory=list)
    visuals: FrameVisuals = Field(default_factory=FrameVisuals)

    @field_validator("detections", mode="before")
    @classmethod
    def _drop_malformed(cls, value: object, info: ValidationInfo) -> list:
        if not isinstance(value, list):
            return []
        frame_index = info.data.get("frame_index")
        kept: list = []
        for raw in value:
            if isinstance(raw, RawTextDetection):
                kept.append(raw)
                continue
            if isinstance(raw, dict) and "frame_index" not in raw and frame_index is not None:
                raw = {**raw, "frame_index": frame_index}
            try:
                kept.append(RawTextDetection.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    "Skipping malformed detection in frame %s: %s",
                    frame_index,
                    e.errors()[0].get("msg", "invalid"),
                )
        return kept


class Frame(BaseModel):
    """An extracted video frame handed to the vision collaborator."""

    timestamp: float  # milliseconds
    base64: str  # data URL or bare base64 image payload
    path: str | None = None
