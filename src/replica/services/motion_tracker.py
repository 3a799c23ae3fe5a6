"""Editor-facing motion tracking.

Independent of consolidation: groups detections by fuzzy text similarity,
follows each element's center point over absolute frame timestamps and
labels the movement with a CSS-style easing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from replica.schemas.detection import RawFrameAnalysis
from replica.schemas.overlay import MotionKeyframe, TrackedMotion
from replica.services.geometry import box_center
from replica.services.motion import classify_easing, displacement
from replica.utils.text import collapse_whitespace, text_similarity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _TrackPoint:
    timestamp: float
    x: float
    y: float


class MotionTracker:
    def __init__(
        self,
        *,
        similarity_threshold: float = 0.8,
        static_displacement: float = 5.0,
        easing_ratio: float = 0.7,
        linear_tolerance: float = 0.3,
    ) -> None:
        self._similarity_threshold = similarity_threshold
        self._static_displacement = static_displacement
        self._easing_ratio = easing_ratio
        self._linear_tolerance = linear_tolerance

    def track_text_motion(self, frames: Iterable[RawFrameAnalysis]) -> dict[str, TrackedMotion]:
        """Map of group key -> motion, for elements that actually move."""
        motions: dict[str, TrackedMotion] = {}
        for key, points in self._group_similar_text(frames).items():
            if len(points) < 2:
                continue
            motion = self._motion_from_points(points)
            if motion is not None:
                motions[key] = motion
        logger.debug("Tracked %d moving text element(s)", len(motions))
        return motions

    def _group_similar_text(
        self, frames: Iterable[RawFrameAnalysis]
    ) -> dict[str, list[_TrackPoint]]:
        groups: dict[str, list[_TrackPoint]] = {}
        for frame in sorted(frames, key=lambda f: f.frame_index):
            for detection in frame.detections:
                normalized = collapse_whitespace(detection.text)
                key = next(
                    (
                        existing
                        for existing in groups
                        if text_similarity(existing, normalized) >= self._similarity_threshold
                    ),
                    normalized,
                )
                cx, cy = box_center(detection.bounding_box)
                groups.setdefault(key, []).append(_TrackPoint(frame.timestamp, cx, cy))
        return groups

    def _motion_from_points(self, points: list[_TrackPoint]) -> TrackedMotion | None:
        ordered = sorted(points, key=lambda p: p.timestamp)
        keyframes = [MotionKeyframe(time=p.timestamp, x=p.x, y=p.y) for p in ordered]

        if displacement(keyframes) < self._static_displacement:
            return None

        return TrackedMotion(
            keyframes=keyframes,
            easing=classify_easing(
                keyframes,
                easing_ratio=self._easing_ratio,
                linear_tolerance=self._linear_tolerance,
            ),
            duration=ordered[-1].timestamp - ordered[0].timestamp,
        )
