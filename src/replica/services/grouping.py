"""Temporal grouping of per-frame OCR detections.

Detections that normalize to the same key are treated as the same logical
text element.  The fuzzy pass additionally folds near-duplicate OCR reads
("SUBCRIBE" / "SUBSCRIBE") into an existing group.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from replica.schemas.detection import RawFrameAnalysis, RawTextDetection
from replica.utils.text import normalize_text, text_similarity

logger = logging.getLogger(__name__)


class GroupingMode(StrEnum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    AUTO = "auto"  # exact, then fuzzy when too many singletons


@dataclass
class DetectionGroup:
    """Detections believed to describe the same on-screen text element."""

    key: str
    detections: list[RawTextDetection] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.detections)


def flatten_detections(frames: Iterable[RawFrameAnalysis]) -> list[RawTextDetection]:
    """All detections across frames, in frame order."""
    ordered = sorted(frames, key=lambda f: f.frame_index)
    return [d for frame in ordered for d in frame.detections]


class TemporalGrouper:
    def __init__(
        self,
        mode: GroupingMode | str = GroupingMode.AUTO,
        *,
        similarity_threshold: float = 0.8,
        singleton_ratio: float = 0.5,
    ) -> None:
        self._mode = GroupingMode(mode)
        self._similarity_threshold = similarity_threshold
        self._singleton_ratio = singleton_ratio

    def group(self, frames: Iterable[RawFrameAnalysis]) -> list[DetectionGroup]:
        detections = flatten_detections(frames)

        if self._mode is GroupingMode.FUZZY:
            return self._group_fuzzy(detections)

        groups = self._group_exact(detections)
        if self._mode is GroupingMode.AUTO and self._too_many_singletons(groups):
            logger.info(
                "Exact grouping produced %d/%d singleton groups, running fuzzy pass",
                sum(1 for g in groups if len(g) == 1),
                len(groups),
            )
            return self._group_fuzzy(detections)
        return groups

    def _too_many_singletons(self, groups: list[DetectionGroup]) -> bool:
        if len(groups) < 2:
            return False
        singletons = sum(1 for g in groups if len(g) == 1)
        return singletons / len(groups) > self._singleton_ratio

    @staticmethod
    def _group_exact(detections: list[RawTextDetection]) -> list[DetectionGroup]:
        groups: dict[str, DetectionGroup] = {}
        for d in detections:
            key = normalize_text(d.text)
            if not key:
                continue
            groups.setdefault(key, DetectionGroup(key)).detections.append(d)
        # Input is frame-ordered, so each member list already is too.
        return list(groups.values())

    def _group_fuzzy(self, detections: list[RawTextDetection]) -> list[DetectionGroup]:
        groups: dict[str, DetectionGroup] = {}
        for d in detections:
            key = normalize_text(d.text)
            if not key:
                continue
            target = groups.get(key)
            if target is None:
                target = next(
                    (
                        g
                        for existing, g in groups.items()
                        if text_similarity(existing, key) >= self._similarity_threshold
                    ),
                    None,
                )
            if target is None:
                target = groups[key] = DetectionGroup(key)
            target.detections.append(d)

        for g in groups.values():
            g.detections.sort(key=lambda d: d.frame_index)
        return list(groups.values())
