import pytest

from handrom.config import AssessmentConfig
from handrom.domain.enums import HandLandmark as H
from handrom.metrics.kapandji import (
    KapandjiCalculator,
    LEVEL_NAMES,
    kapandji_frame_score,
    reached_level_names,
)
from handrom.utils.constants import PALMAR_CREASE_POINTS
from handrom.utils.geometry import centroid

from helpers import build_hand, frame, repetition, with_landmark


def thumb_at(point, offset=(0.0, 0.0, 0.0)):
    hand = build_hand()
    target = tuple(float(p) + o for p, o in zip(point, offset))
    return with_landmark(hand, H.THUMB_TIP, target)


def thumb_on(landmark, offset=(0.0, 0.0, 0.0)):
    lm = build_hand()[landmark]
    return thumb_at((lm.x, lm.y, lm.z), offset)


def palm_centre():
    return centroid(build_hand().get(*PALMAR_CREASE_POINTS))


class TestFrameScore:
    def test_open_hand_scores_zero(self):
        result = kapandji_frame_score(build_hand())
        assert result.max_score == 0
        assert result.reached_levels == (False,) * 10

    def test_index_tip(self):
        result = kapandji_frame_score(thumb_on(H.INDEX_TIP))
        assert result.max_score == 3
        assert result.reached_levels[2]

    def test_little_tip_reaches_level_six(self):
        result = kapandji_frame_score(thumb_on(H.PINKY_TIP))
        assert result.max_score >= 6
        assert result.reached_levels[5]

    def test_distal_palmar_crease(self):
        result = kapandji_frame_score(thumb_at(palm_centre()))
        assert result.max_score == 10
        assert result.reached_levels[9]

    def test_threshold_is_strict(self):
        threshold = AssessmentConfig().kapandji_threshold(3)
        exact = kapandji_frame_score(thumb_on(H.INDEX_TIP, (0.0, 0.0, threshold)))
        near = kapandji_frame_score(thumb_on(H.INDEX_TIP, (0.0, 0.0, threshold * 0.9)))
        assert not exact.reached_levels[2]
        assert near.reached_levels[2]

    def test_thresholds_are_configurable(self):
        hand = thumb_on(H.INDEX_TIP, (0.0, 0.0, 0.1))
        assert kapandji_frame_score(hand).max_score == 0
        loose = AssessmentConfig(kapandji_thresholds=(0.2,) * 10)
        assert kapandji_frame_score(hand, loose).max_score >= 3

    def test_missing_thumb_tip_scores_zero(self):
        hand = with_landmark(thumb_on(H.INDEX_TIP), H.THUMB_TIP, None)
        assert kapandji_frame_score(hand).max_score == 0

    def test_missing_target_is_not_reached(self):
        hand = with_landmark(thumb_at(palm_centre()), H.RING_MCP, None)
        assert not kapandji_frame_score(hand).reached_levels[9]


def test_level_names():
    assert len(LEVEL_NAMES) == 10
    reached = (True, False, True) + (False,) * 7
    assert reached_level_names(reached) == [LEVEL_NAMES[0], LEVEL_NAMES[2]]


class TestKapandjiCalculator:
    def test_mostly_touching_little_finger_scores_at_least_six(self, context):
        frames = [frame(thumb_on(H.PINKY_TIP, (0.01, 0.0, 0.0)), t=i) for i in range(9)]
        frames.append(frame(build_hand(), t=9))
        result = KapandjiCalculator().score_session([repetition(frames)], context)
        assert result.max_score >= 6

    def test_later_worse_frames_never_lower_the_score(self, context):
        hands = [
            build_hand(),
            thumb_on(H.INDEX_PIP),
            thumb_on(H.MIDDLE_TIP),
            build_hand(),
            thumb_on(H.INDEX_TIP),
            thumb_at(palm_centre()),
            build_hand(),
        ]
        frames = [frame(hand, t=i) for i, hand in enumerate(hands)]
        calculator = KapandjiCalculator()
        scores = [
            calculator.score_session([repetition(frames[:n])], context).max_score
            for n in range(1, len(frames) + 1)
        ]
        assert scores == sorted(scores)
        assert scores[-1] == 10

    def test_reached_levels_are_the_union(self, context):
        frames = [frame(thumb_on(H.INDEX_PIP), t=0), frame(thumb_on(H.MIDDLE_TIP), t=1)]
        result = KapandjiCalculator().score_session([repetition(frames)], context)
        assert result.max_score == 4
        assert result.reached_levels[0]
        assert result.reached_levels[3]
        assert result.best_frame_index == 1

    def test_best_over_repetitions(self, context):
        first = repetition([frame(thumb_at(palm_centre()), t=0)])
        second = repetition([frame(thumb_on(H.INDEX_TIP), t=0)])
        result = KapandjiCalculator().score_session([first, second], context)
        assert result.max_score == 10
        assert result.best_frame_index == 0

    def test_no_hand_frames(self, context):
        result = KapandjiCalculator().score_session([repetition([frame(None)])], context)
        assert result.max_score == 0
        assert result.best_frame_index is None
