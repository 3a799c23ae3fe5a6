import pytest

from replica.schemas.overlay import Easing, MotionKeyframe, MotionPath, MotionType
from replica.services.motion import (
    MotionPathSynthesizer,
    classify_easing,
    displacement,
    total_variance,
)


def _keyframes(xs, y=50.0, dt=1.0):
    return [MotionKeyframe(time=i * dt, x=x, y=y) for i, x in enumerate(xs)]


class TestVariance:
    def test_population_variance_sums_axes(self):
        kfs = [MotionKeyframe(time=0, x=0, y=0), MotionKeyframe(time=1, x=2, y=4)]
        # var(x) = 1, var(y) = 4
        assert total_variance(kfs) == pytest.approx(5.0)

    def test_empty(self):
        assert total_variance([]) == 0.0

    def test_displacement(self):
        kfs = [MotionKeyframe(time=0, x=0, y=0), MotionKeyframe(time=1, x=3, y=4)]
        assert displacement(kfs) == pytest.approx(5.0)


class TestClassifyEasing:
    def test_fewer_than_three_keyframes_is_linear(self):
        assert classify_easing(_keyframes([0, 50])) is Easing.LINEAR

    def test_constant_speed_is_linear(self):
        assert classify_easing(_keyframes([10, 20, 30, 40])) is Easing.LINEAR

    def test_accelerating_is_ease_in(self):
        assert classify_easing(_keyframes([0, 2, 10, 30])) is Easing.EASE_IN

    def test_decelerating_is_ease_out(self):
        assert classify_easing(_keyframes([0, 20, 28, 30])) is Easing.EASE_OUT

    def test_mixed_profile_is_ease_in_out(self):
        # speeds 10 then 13.5: no clear ease, but too far apart to be linear
        assert classify_easing(_keyframes([0, 10, 23.5])) is Easing.EASE_IN_OUT

    def test_zero_time_steps_are_ignored(self):
        kfs = [
            MotionKeyframe(time=0, x=0, y=0),
            MotionKeyframe(time=0, x=5, y=0),
            MotionKeyframe(time=1, x=15, y=0),
        ]
        assert classify_easing(kfs) is Easing.LINEAR


class TestSynthesize:
    def test_static_group(self, make_detection):
        detections = [make_detection("SUBSCRIBE NOW", i) for i in range(3)]
        path = MotionPathSynthesizer().synthesize(detections, fps=2, segment_start_time=0)

        assert path.type is MotionType.STATIC
        assert path.variance == 0
        assert [k.time for k in path.keyframes] == [0, 0.5, 1.0]

    def test_moving_group_is_linear(self, make_detection):
        detections = [make_detection("GO", i, x=x) for i, x in enumerate([10, 20, 30, 40])]
        path = MotionPathSynthesizer().synthesize(detections, fps=1, segment_start_time=0)

        assert path.type is MotionType.LINEAR
        assert path.variance > 2
        assert len(path.keyframes) == 4
        times = [k.time for k in path.keyframes]
        assert times == sorted(times)

    def test_keyframes_are_relative_and_sorted(self, make_detection):
        detections = [
            make_detection("GO", 7, x=40),
            make_detection("GO", 4, x=10),
            make_detection("GO", 5, x=20),
        ]
        path = MotionPathSynthesizer().synthesize(detections, fps=2, segment_start_time=2.0)

        assert [k.time for k in path.keyframes] == [0.0, 0.5, 1.5]
        assert [k.x for k in path.keyframes] == [10, 20, 40]

    def test_two_detections_give_two_keyframes(self, make_detection):
        detections = [make_detection("GO", 0, x=10), make_detection("GO", 1, x=40)]
        path = MotionPathSynthesizer().synthesize(detections, fps=1, segment_start_time=0)

        assert path.type is MotionType.LINEAR
        assert len(path.keyframes) == 2

    def test_jitter_with_no_net_displacement_is_static(self, make_detection):
        detections = [make_detection("GO", i, x=x) for i, x in enumerate([10, 14, 10, 14])]
        path = MotionPathSynthesizer().synthesize(detections, fps=1, segment_start_time=0)

        assert path.variance == pytest.approx(4.0)
        assert path.type is MotionType.STATIC

    def test_pop_in(self, make_detection):
        detections = [make_detection("WOW", i, x=x) for i, x in enumerate([0, 40, 41, 41])]
        path = MotionPathSynthesizer().synthesize(detections, fps=1, segment_start_time=0)
        assert path.type is MotionType.POP_IN

    def test_velocity_analysis_resolves_easing(self, make_detection):
        synth = MotionPathSynthesizer(velocity_analysis=True)
        ease_in = [make_detection("GO", i, x=x) for i, x in enumerate([0, 2, 10, 30])]
        ease_out = [make_detection("GO", i, x=x) for i, x in enumerate([0, 20, 28, 30])]

        assert synth.synthesize(ease_in, 1, 0).type is MotionType.EASE_IN
        assert synth.synthesize(ease_out, 1, 0).type is MotionType.EASE_OUT

    def test_ease_in_out_maps_to_linear(self, make_detection):
        synth = MotionPathSynthesizer(velocity_analysis=True)
        detections = [make_detection("GO", i, x=x) for i, x in enumerate([0, 10, 23.5])]
        assert synth.synthesize(detections, 1, 0).type is MotionType.LINEAR


class TestMotionPathModel:
    def test_rejects_unordered_keyframes(self):
        with pytest.raises(ValueError):
            MotionPath(
                keyframes=[MotionKeyframe(time=1, x=0, y=0), MotionKeyframe(time=0, x=0, y=0)],
                type=MotionType.LINEAR,
            )
