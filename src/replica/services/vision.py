"""Per-frame OCR and style inference through a vision-language model.

Frames are analyzed in batches of concurrent requests.  A frame whose call
or reply fails yields an empty analysis so the batch keeps its one-entry-
per-frame shape; only a run where every frame fails is an error.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence
from typing import Any

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from replica.config import Settings
from replica.exceptions import LLMResponseError, VisionError
from replica.schemas.detection import Frame, FrameVisuals, RawFrameAnalysis
from replica.utils.llm_parse import parse_json_payload

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = """\
You are a vision-language AI specialized in reading and normalizing text from video frames.
STRICT JSON OUTPUT ONLY. DO NOT HALLUCINATE.
If no text is visible, return empty arrays.
IMPORTANT: RETURN JSON ONLY. NO MARKDOWN. NO EXPLANATIONS."""

_USER_PROMPT = """\
Analyze this video frame.

Task 1: Text Extraction (OCR)
For each detected text instance, return:
- Exact text string (verbatim)
- Bounding box (x, y, width, height) normalized to frame size (0-100)
- Confidence score (0-1)
- Detected language (ISO code)

Task 2: Visual Analysis
Infer the visual properties of the text overlays:
- Typography: font family, font size (relative), font weight, line height, letter spacing
- Styling: text color (HEX), stroke, shadow, opacity

Return a JSON object with this structure:
{
  "detections": [
    {"text": "string", "boundingBox": {"x": 0, "y": 0, "width": 0, "height": 0},
     "confidence": 0.0, "language": "en"}
  ],
  "visuals": {"typography": {...}, "styling": {...}}
}"""

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def snake_keys(value: Any) -> Any:
    """Recursively convert camelCase dict keys (model output) to snake_case."""
    if isinstance(value, dict):
        return {_CAMEL_RE.sub("_", str(k)).lower(): snake_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [snake_keys(v) for v in value]
    return value


def _image_url(frame: Frame) -> str:
    if frame.base64.startswith("data:image"):
        return frame.base64
    return f"data:image/jpeg;base64,{frame.base64}"


def _empty_analysis(index: int, frame: Frame) -> RawFrameAnalysis:
    return RawFrameAnalysis(frame_index=index, timestamp=frame.timestamp)


class VisionService:
    def __init__(self, settings: Settings) -> None:
        self._client = AsyncOpenAI(
            api_key=settings.llm_api_key or "unset",
            base_url=settings.llm_base_url,
            timeout=settings.llm_timeout,
            max_retries=settings.llm_max_retries,
        )
        self._model = settings.vision_model_name
        self._temperature = settings.vision_temperature
        self._max_tokens = settings.llm_max_tokens
        self._batch_size = max(settings.vision_batch_size, 1)

    async def analyze_frames(self, frames: Sequence[Frame]) -> list[RawFrameAnalysis]:
        results: list[RawFrameAnalysis] = []
        failures = 0
        total = len(frames)

        for start in range(0, total, self._batch_size):
            batch = frames[start : start + self._batch_size]
            logger.info(
                "Vision batch %d (%d frames)...", start // self._batch_size + 1, len(batch)
            )
            outcomes = await asyncio.gather(
                *(self._analyze_safe(start + i, f) for i, f in enumerate(batch))
            )
            for analysis, ok in outcomes:
                results.append(analysis)
                failures += 0 if ok else 1

        if total and failures == total:
            raise VisionError(f"Vision analysis failed for all {total} frames")
        if failures:
            logger.warning("Vision analysis failed for %d/%d frames", failures, total)
        return sorted(results, key=lambda a: a.frame_index)

    async def _analyze_safe(self, index: int, frame: Frame) -> tuple[RawFrameAnalysis, bool]:
        try:
            return await self.analyze_frame(frame, index), True
        except (OpenAIError, LLMResponseError, ValidationError) as e:
            logger.warning("Frame %d analysis failed: %s", index, e)
            return _empty_analysis(index, frame), False

    async def analyze_frame(self, frame: Frame, index: int) -> RawFrameAnalysis:
        completion = await self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": _SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": _USER_PROMPT},
                        {"type": "image_url", "image_url": {"url": _image_url(frame)}},
                    ],
                },
            ],
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            response_format={"type": "json_object"},
        )
        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise LLMResponseError("Vision model returned no content")

        parsed = snake_keys(parse_json_payload(content))
        if not isinstance(parsed, dict):
            raise LLMResponseError("Vision reply is not a JSON object")

        detections = [
            {**d, "frame_index": index} for d in parsed.get("detections") or [] if isinstance(d, dict)
        ]
        try:
            visuals = FrameVisuals.model_validate(parsed.get("visuals") or {})
        except ValidationError as e:
            logger.debug("Frame %d: ignoring malformed visuals: %s", index, e)
            visuals = FrameVisuals()

        return RawFrameAnalysis(
            frame_index=index,
            timestamp=frame.timestamp,
            detections=detections,
            visuals=visuals,
        )

    async def close(self) -> None:
        await self._client.close()
