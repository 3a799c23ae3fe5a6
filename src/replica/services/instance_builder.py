"""Build consolidated text instances from detection groups.

Canonical label policy: the text, visuals and confidence of an instance
all come from its single highest-confidence detection (first one wins on
ties), not from a majority vote.  One confident misread can therefore
become the label.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping

from replica.schemas.detection import FrameVisuals, RawFrameAnalysis
from replica.schemas.overlay import ConsolidatedTextInstance
from replica.services.geometry import aggregate_boxes
from replica.services.grouping import DetectionGroup
from replica.services.motion import MotionPathSynthesizer

logger = logging.getLogger(__name__)

_INSTANCE_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "replica/consolidated-text-instance")

MIN_DURATION = 1.0


def instance_id(key: str, start_frame: int, end_frame: int) -> str:
    """Stable id so identical inputs yield identical instances."""
    return str(uuid.uuid5(_INSTANCE_NAMESPACE, f"{key}:{start_frame}:{end_frame}"))


class InstanceBuilder:
    def __init__(
        self,
        synthesizer: MotionPathSynthesizer | None = None,
        *,
        min_detections: int = 2,
    ) -> None:
        self._synthesizer = synthesizer or MotionPathSynthesizer()
        self._min_detections = max(min_detections, 2)

    def build(
        self,
        group: DetectionGroup,
        frames_by_index: Mapping[int, RawFrameAnalysis],
        fps: float,
    ) -> ConsolidatedTextInstance | None:
        frame_count = len({d.frame_index for d in group.detections})
        if frame_count < self._min_detections:
            logger.debug("Dropping %r: seen in %d frame(s), treated as noise", group.key, frame_count)
            return None

        members = sorted(group.detections, key=lambda d: d.frame_index)
        start_frame = members[0].frame_index
        end_frame = members[-1].frame_index
        start_time = start_frame / fps
        end_time = end_frame / fps

        best = max(members, key=lambda d: d.confidence)
        frame = frames_by_index.get(best.frame_index)
        visuals = frame.visuals if frame is not None else FrameVisuals()

        return ConsolidatedTextInstance(
            id=instance_id(group.key, start_frame, end_frame),
            text=best.text,
            start_frame=start_frame,
            end_frame=end_frame,
            start_time=start_time,
            end_time=end_time,
            duration=max(end_time - start_time, MIN_DURATION),
            bounding_box=aggregate_boxes([d.bounding_box for d in members]),
            motion_path=self._synthesizer.synthesize(members, fps, start_time),
            visuals=visuals,
            detection_confidence=best.confidence,
        )

    def build_all(
        self,
        groups: Iterable[DetectionGroup],
        frames: Iterable[RawFrameAnalysis],
        fps: float,
    ) -> list[ConsolidatedTextInstance]:
        frames_by_index: dict[int, RawFrameAnalysis] = {}
        for f in frames:
            frames_by_index.setdefault(f.frame_index, f)

        instances = [
            inst
            for g in groups
            if (inst := self.build(g, frames_by_index, fps)) is not None
        ]
        instances.sort(key=lambda i: (i.start_frame, i.end_frame, i.id))
        return instances
