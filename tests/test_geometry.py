import pytest

from replica.exceptions import InvariantViolation
from replica.schemas.detection import BoundingBox
from replica.services.geometry import aggregate_boxes, box_center


class TestAggregateBoxes:
    def test_identical_boxes_are_exact(self):
        box = BoundingBox(x=10, y=80, width=30, height=8)
        assert aggregate_boxes([box, box, box]) == BoundingBox(x=10, y=80, width=30, height=8)

    def test_mean_of_moving_boxes(self):
        boxes = [
            BoundingBox(x=10, y=50, width=20, height=10),
            BoundingBox(x=30, y=60, width=40, height=20),
        ]
        result = aggregate_boxes(boxes)
        assert (result.x, result.y, result.width, result.height) == (20, 55, 30, 15)

    def test_empty_group_is_a_programmer_error(self):
        with pytest.raises(InvariantViolation):
            aggregate_boxes([])


class TestBoxCenter:
    def test_center(self):
        assert box_center(BoundingBox(x=10, y=80, width=30, height=8)) == (25, 84)


class TestBoundingBoxValidation:
    def test_clamps_out_of_range_values(self):
        box = BoundingBox(x=-2, y=101.5, width=30, height=8)
        assert box.x == 0
        assert box.y == 100
