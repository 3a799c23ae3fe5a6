from __future__ import annotations

from collections.abc import Sequence

from replica.exceptions import InvariantViolation
from replica.schemas.detection import BoundingBox


def aggregate_boxes(boxes: Sequence[BoundingBox]) -> BoundingBox:
    """Mean box of a group: the element's resting position.

    Genuine motion is captured by the motion path, not by this average.
    """
    if not boxes:
        raise InvariantViolation("aggregate_boxes called with an empty group")
    n = len(boxes)
    return BoundingBox(
        x=sum(b.x for b in boxes) / n,
        y=sum(b.y for b in boxes) / n,
        width=sum(b.width for b in boxes) / n,
        height=sum(b.height for b in boxes) / n,
    )


def box_center(box: BoundingBox) -> tuple[float, float]:
    return box.x + box.width / 2, box.y + box.height / 2
