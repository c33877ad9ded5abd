import numpy as np
import pytest

from handrom.config import AssessmentConfig
from handrom.core.session import SessionContext
from handrom.domain.enums import DataQualityIssue, HandLandmark as H, HandType
from handrom.metrics.wrist_deviation import (
    WristDeviationCalculator,
    is_radial,
    is_reproducible,
    orientation_confidence,
    orientation_vector,
    wrist_deviation,
)

from helpers import build_hand, frame, oriented_hand, repetition, with_landmark

REFERENCE = np.array([0.2, 0.0, 0.0])


class TestFrameDeviation:
    def test_neutral_is_zero(self):
        result = wrist_deviation(oriented_hand(0.0), REFERENCE, HandType.RIGHT)
        assert result.magnitude == pytest.approx(0.0, abs=1e-4)

    def test_right_hand_sign(self):
        radial = wrist_deviation(oriented_hand(-20.0), REFERENCE, HandType.RIGHT)
        ulnar = wrist_deviation(oriented_hand(25.0), REFERENCE, HandType.RIGHT)
        assert radial.deviation_angle == pytest.approx(20.0)
        assert radial.radial_angle == pytest.approx(20.0)
        assert ulnar.deviation_angle == pytest.approx(-25.0)
        assert ulnar.ulnar_angle == pytest.approx(25.0)

    def test_left_hand_is_mirrored(self):
        result = wrist_deviation(oriented_hand(-20.0), REFERENCE, HandType.LEFT)
        assert result.deviation_angle == pytest.approx(-20.0)
        assert is_radial(0.5, HandType.LEFT)
        assert not is_radial(0.5, HandType.RIGHT)

    def test_unknown_hand_keeps_magnitude_only(self):
        result = wrist_deviation(oriented_hand(-20.0), REFERENCE, HandType.UNKNOWN)
        assert result.magnitude == pytest.approx(20.0)
        assert result.deviation_angle is None
        assert DataQualityIssue.UNRESOLVED_HANDEDNESS in result.issues

    def test_degenerate_orientation(self):
        hand = with_landmark(oriented_hand(0.0), H.PINKY_MCP, (0.4, 0.5, 0.0))
        result = wrist_deviation(hand, REFERENCE, HandType.RIGHT)
        assert result.deviation_angle == 0.0
        assert result.low_confidence

    def test_missing_landmark(self):
        hand = with_landmark(oriented_hand(0.0), H.INDEX_MCP, None)
        assert orientation_vector(hand) is None
        assert wrist_deviation(hand, REFERENCE, HandType.RIGHT) is None

    def test_orientation_confidence(self):
        assert orientation_confidence(build_hand()) == 1.0
        assert orientation_confidence(build_hand(visibility=0.6)) == pytest.approx(0.6)


def test_reproducibility():
    assert is_reproducible([], 5.0)
    assert is_reproducible([20.0], 5.0)
    assert is_reproducible([18.0, 22.0, 20.0], 5.0)
    assert not is_reproducible([10.0, 25.0], 5.0)


class TestWristDeviationCalculator:
    def test_reference_from_first_frame(self):
        frames = [frame(oriented_hand(theta), t=i) for i, theta in enumerate([0.0, -20.0, 15.0, -10.0])]
        context = SessionContext(hand_type=HandType.RIGHT)
        result = WristDeviationCalculator().score_session([repetition(frames)], context)
        assert result.max_radial == pytest.approx(20.0)
        assert result.max_ulnar == pytest.approx(15.0)
        assert result.total_rom == pytest.approx(35.0)
        assert result.frame_count == 4
        assert result.hand_type is HandType.RIGHT
        assert context.neutral_deviation_vector is not None

    def test_caller_supplied_reference(self):
        context = SessionContext(hand_type=HandType.RIGHT, neutral_deviation_vector=(1.0, 0.0, 0.0))
        frames = [frame(oriented_hand(-10.0), t=0)]
        result = WristDeviationCalculator().score_session([repetition(frames)], context)
        assert result.max_radial == pytest.approx(10.0)
        assert result.max_ulnar == pytest.approx(0.0, abs=1e-9)

    def test_low_confidence_frames_skipped(self):
        hands = [oriented_hand(0.0), build_hand(visibility=0.5)]
        frames = [frame(hand, t=i) for i, hand in enumerate(hands)]
        result = WristDeviationCalculator().score_session(
            [repetition(frames)], SessionContext(hand_type=HandType.RIGHT)
        )
        assert result.frame_count == 1

    def test_occluded_frame_never_becomes_reference(self):
        frames = [
            frame(with_visibility(oriented_hand(30.0), 0.2), t=0),
            frame(oriented_hand(0.0), t=1),
            frame(oriented_hand(-10.0), t=2),
        ]
        context = SessionContext(hand_type=HandType.RIGHT)
        result = WristDeviationCalculator().score_session([repetition(frames)], context)
        assert result.max_radial == pytest.approx(10.0)
        assert result.max_ulnar == pytest.approx(0.0, abs=1e-4)
        assert result.frame_count == 2
        assert context.neutral_deviation_vector.tolist() == pytest.approx([0.2, 0.0, 0.0])
        assert result.issues == (DataQualityIssue.LOW_VISIBILITY,)

    def test_skipped_frames_recorded_as_issues(self):
        frames = [
            frame(oriented_hand(0.0), t=0),
            frame(with_landmark(oriented_hand(0.0), H.PINKY_MCP, None), t=1),
            frame(None, t=2),
            frame(build_hand(visibility=0.5), t=3),
        ]
        result = WristDeviationCalculator().score_session(
            [repetition(frames)], SessionContext(hand_type=HandType.RIGHT)
        )
        assert result.issues == (DataQualityIssue.MISSING_LANDMARK, DataQualityIssue.LOW_VISIBILITY)
        assert result.to_dict()["issues"] == ["MISSING_LANDMARK", "LOW_VISIBILITY"]

    def test_reproducibility_across_repetitions(self):
        reps = [
            repetition([frame(oriented_hand(0.0), t=0), frame(oriented_hand(-20.0), t=1)]),
            repetition([frame(oriented_hand(-5.0), t=2)]),
        ]
        result = WristDeviationCalculator().score_session(reps, SessionContext(hand_type=HandType.RIGHT))
        assert result.max_radial == pytest.approx(20.0)
        assert not result.reproducible

    def test_unresolved_session(self):
        frames = [frame(oriented_hand(theta), t=i) for i, theta in enumerate([0.0, -20.0])]
        result = WristDeviationCalculator().score_session([repetition(frames)], SessionContext())
        assert result.max_radial is None
        assert result.max_ulnar is None
        assert result.frame_count == 2

    def test_optional_temporal_validation(self):
        # visible enough to be measured, not enough to bypass the consistency check
        jumpy = [
            frame(with_visibility(oriented_hand(theta)), t=i)
            for i, theta in enumerate([0.0, -60.0, 0.0])
        ]
        config = AssessmentConfig(temporal_validation_for_wrist=True)
        validated = WristDeviationCalculator(config).score_session(
            [repetition(jumpy)], SessionContext(config, hand_type=HandType.RIGHT)
        )
        plain = WristDeviationCalculator().score_session(
            [repetition(jumpy)], SessionContext(hand_type=HandType.RIGHT)
        )
        assert plain.max_radial == pytest.approx(60.0)
        assert validated.max_radial is None
        assert validated.issues == (DataQualityIssue.TEMPORAL_INCONSISTENCY,)


def with_visibility(hand, visibility=0.75):
    return type(hand).from_list([
        None if lm is None else (lm.x, lm.y, lm.z, visibility) for lm in hand.landmarks
    ])
