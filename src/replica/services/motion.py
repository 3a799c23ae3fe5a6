"""Motion-path synthesis and classification.

Keyframes are built from each detection's top-left corner, timed relative
to the owning instance's start.  Classification is deliberately coarse:

- total (x + y) population variance at or below ``static_variance`` is OCR
  jitter -> STATIC
- a large first step followed by a settled position -> POP_IN
- net displacement below ``static_displacement`` -> STATIC
- otherwise LINEAR, or an easing resolved from the velocity profile when
  ``velocity_analysis`` is enabled
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import numpy as np

from replica.schemas.detection import RawTextDetection
from replica.schemas.overlay import Easing, MotionKeyframe, MotionPath, MotionType

logger = logging.getLogger(__name__)

_EASING_TO_MOTION = {
    Easing.EASE_IN: MotionType.EASE_IN,
    Easing.EASE_OUT: MotionType.EASE_OUT,
    Easing.LINEAR: MotionType.LINEAR,
    # The engine enumeration has no symmetric ease; it renders as LINEAR.
    Easing.EASE_IN_OUT: MotionType.LINEAR,
}


def _distance(a: MotionKeyframe, b: MotionKeyframe) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def total_variance(keyframes: Sequence[MotionKeyframe]) -> float:
    """Population variance of x plus population variance of y."""
    if not keyframes:
        return 0.0
    xs = np.fromiter((k.x for k in keyframes), dtype=float)
    ys = np.fromiter((k.y for k in keyframes), dtype=float)
    return float(np.var(xs) + np.var(ys))


def displacement(keyframes: Sequence[MotionKeyframe]) -> float:
    """Straight-line distance between the first and last keyframe."""
    if len(keyframes) < 2:
        return 0.0
    return _distance(keyframes[0], keyframes[-1])


def classify_easing(
    keyframes: Sequence[MotionKeyframe],
    *,
    easing_ratio: float = 0.7,
    linear_tolerance: float = 0.3,
) -> Easing:
    """Resolve an easing from the first-half vs. second-half mean speed."""
    if len(keyframes) < 3:
        return Easing.LINEAR

    velocities: list[float] = []
    for prev, cur in zip(keyframes, keyframes[1:]):
        dt = cur.time - prev.time
        if dt <= 0:
            continue
        velocities.append(_distance(prev, cur) / dt)

    if len(velocities) < 2:
        return Easing.LINEAR

    half = len(velocities) // 2
    first = float(np.mean(velocities[:half]))
    second = float(np.mean(velocities[half:]))

    if first < second * easing_ratio:
        return Easing.EASE_IN
    if second < first * easing_ratio:
        return Easing.EASE_OUT
    if abs(first - second) < first * linear_tolerance:
        return Easing.LINEAR
    return Easing.EASE_IN_OUT


class MotionPathSynthesizer:
    def __init__(
        self,
        *,
        static_variance: float = 2.0,
        static_displacement: float = 5.0,
        pop_in_jump: float = 10.0,
        velocity_analysis: bool = False,
        easing_ratio: float = 0.7,
        linear_tolerance: float = 0.3,
    ) -> None:
        self._static_variance = static_variance
        self._static_displacement = static_displacement
        self._pop_in_jump = pop_in_jump
        self._velocity_analysis = velocity_analysis
        self._easing_ratio = easing_ratio
        self._linear_tolerance = linear_tolerance

    def synthesize(
        self,
        detections: Sequence[RawTextDetection],
        fps: float,
        segment_start_time: float,
    ) -> MotionPath:
        keyframes = sorted(
            (
                MotionKeyframe(
                    time=d.frame_index / fps - segment_start_time,
                    x=d.bounding_box.x,
                    y=d.bounding_box.y,
                )
                for d in detections
            ),
            key=lambda k: k.time,
        )
        variance = total_variance(keyframes)
        motion_type = self.classify(keyframes, variance)
        return MotionPath(keyframes=keyframes, type=motion_type, variance=variance)

    def classify(self, keyframes: Sequence[MotionKeyframe], variance: float) -> MotionType:
        if variance <= self._static_variance:
            return MotionType.STATIC
        if self._is_pop_in(keyframes):
            return MotionType.POP_IN
        if displacement(keyframes) < self._static_displacement:
            logger.debug(
                "Variance %.2f but net displacement below %.1f%%, treating as jitter",
                variance,
                self._static_displacement,
            )
            return MotionType.STATIC
        if not self._velocity_analysis:
            return MotionType.LINEAR
        easing = classify_easing(
            keyframes,
            easing_ratio=self._easing_ratio,
            linear_tolerance=self._linear_tolerance,
        )
        return _EASING_TO_MOTION[easing]

    def _is_pop_in(self, keyframes: Sequence[MotionKeyframe]) -> bool:
        """Large jump into place on the first step, then (almost) no movement."""
        if len(keyframes) < 3:
            return False
        return (
            _distance(keyframes[0], keyframes[1]) >= self._pop_in_jump
            and displacement(keyframes[1:]) < self._static_displacement
        )
