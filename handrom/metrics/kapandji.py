"""
Kapandji opposition scorer.

The thumb tip is compared against ten targets of increasing difficulty.
A frame scores the highest level whose proximity criterion is met; the
scale is monotone, so intermediate levels are not re-verified.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from handrom.config import AssessmentConfig, default_config
from handrom.core.aggregator import SessionAggregator
from handrom.core.session import SessionContext
from handrom.domain.enums import AssessmentType, HandLandmark
from handrom.domain.models import HandFrame, KapandjiResult, KapandjiSessionResult, Repetition
from handrom.metrics.base import Calculator
from handrom.utils.constants import KAPANDJI_TARGETS, PALMAR_CREASE_POINTS
from handrom.utils.geometry import as_vector, centroid, distance

logger = logging.getLogger(__name__)

LEVEL_NAMES = tuple(name for _, name, _ in KAPANDJI_TARGETS)


def _target_position(hand: HandFrame, landmark: Optional[HandLandmark]):
    if landmark is None:
        points = hand.get(*PALMAR_CREASE_POINTS)
        return None if points is None else centroid(points)
    lm = hand[landmark]
    return None if lm is None else as_vector(lm)


def kapandji_frame_score(hand: HandFrame,
                         config: AssessmentConfig = default_config) -> KapandjiResult:
    """Score one frame. A missing thumb tip scores 0; a missing target is not reached."""
    thumb_tip = hand[HandLandmark.THUMB_TIP]
    if thumb_tip is None:
        return KapandjiResult(max_score=0)

    reached: List[bool] = []
    max_score = 0
    for level, _name, landmark in KAPANDJI_TARGETS:
        target = _target_position(hand, landmark)
        hit = target is not None and distance(thumb_tip, target) < config.kapandji_threshold(level)
        reached.append(hit)
        if hit:
            max_score = max(max_score, level)
    return KapandjiResult(max_score=max_score, reached_levels=tuple(reached))


def reached_level_names(reached_levels: Sequence[bool]) -> List[str]:
    return [name for name, hit in zip(LEVEL_NAMES, reached_levels) if hit]


class KapandjiCalculator(Calculator):
    """
    Session score is the best frame: a later, worse frame never lowers it.
    Reached levels are the union over all frames.
    """
    NAME = "KAPANDJI"
    ASSESSMENT = AssessmentType.KAPANDJI

    def score_session(self, repetitions: Sequence[Repetition],
                      context: SessionContext) -> KapandjiSessionResult:
        aggregator = SessionAggregator()
        reached = [False] * 10

        for rep_index, frame_index, frame in self.iter_frames(repetitions):
            context.resolve_hand_type(frame)
            if frame.hand is None:
                continue
            result = kapandji_frame_score(frame.hand, self.config)
            reached = [a or b for a, b in zip(reached, result.reached_levels)]
            aggregator.add(self.NAME, rep_index, frame_index, score=result.max_score)

        summary = aggregator.summarize(self.NAME, "score")
        max_score = int(summary.maximum) if summary.maximum is not None else 0
        logger.debug("[KAPANDJI] session score %d over %d frames", max_score, summary.count)
        return KapandjiSessionResult(
            max_score=max_score,
            reached_levels=tuple(reached),
            best_frame_index=summary.max_frame,
        )
