"""
Wrist radial/ulnar deviation.

The hand-plane orientation vector (index MCP → pinky MCP) is compared to
a neutral reference taken at the start of the assessment. The magnitude
is the angle between the two; its sign comes from the Z component of
reference × current, mirrored between left and right hands.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from handrom.config import AssessmentConfig, default_config
from handrom.core.aggregator import SessionAggregator
from handrom.core.session import SessionContext
from handrom.core.temporal import TemporalQualityValidator
from handrom.domain.enums import AssessmentType, DataQualityIssue, HandLandmark, HandType
from handrom.domain.models import (
    CapturedFrame,
    DeviationResult,
    DeviationSessionResult,
    HandFrame,
    Repetition,
    merge_issues,
)
from handrom.metrics.base import Calculator
from handrom.utils.geometry import angle_between, cross, is_degenerate, segment

logger = logging.getLogger(__name__)


def orientation_vector(hand: HandFrame) -> Optional[np.ndarray]:
    points = hand.get(HandLandmark.INDEX_MCP, HandLandmark.PINKY_MCP)
    if points is None:
        return None
    return segment(points[0], points[1])


def orientation_confidence(hand: HandFrame) -> float:
    """Mean visibility of index and pinky MCP (unscored landmarks count as 1.0)."""
    scores = []
    for index in (HandLandmark.INDEX_MCP, HandLandmark.PINKY_MCP):
        lm = hand[index]
        if lm is None:
            scores.append(0.0)
        else:
            scores.append(1.0 if lm.visibility is None else lm.visibility)
    return sum(scores) / len(scores)


def is_radial(cross_z: float, hand_type: HandType) -> bool:
    """RIGHT: negative Z is radial. LEFT: mirrored."""
    if hand_type is HandType.LEFT:
        return cross_z > 0
    return cross_z < 0


def wrist_deviation(hand: HandFrame, reference: np.ndarray, hand_type: HandType,
                    config: AssessmentConfig = default_config) -> Optional[DeviationResult]:
    """
    Signed deviation for one frame (positive = radial), or None if the
    orientation landmarks are missing.
    """
    current = orientation_vector(hand)
    if current is None:
        return None

    confidence = orientation_confidence(hand)
    eps = config.degenerate_epsilon
    if is_degenerate(current, eps) or is_degenerate(reference, eps):
        return DeviationResult(
            magnitude=0.0,
            deviation_angle=0.0 if hand_type is not HandType.UNKNOWN else None,
            confidence=0.0,
            issues=(DataQualityIssue.DEGENERATE_VECTOR,),
        )

    magnitude = angle_between(reference, current, eps)
    if hand_type is HandType.UNKNOWN:
        return DeviationResult(
            magnitude=magnitude, deviation_angle=None, confidence=confidence,
            issues=(DataQualityIssue.UNRESOLVED_HANDEDNESS,),
        )

    sign = 1.0 if is_radial(float(cross(reference, current)[2]), hand_type) else -1.0
    return DeviationResult(magnitude=magnitude, deviation_angle=sign * magnitude, confidence=confidence)


def is_reproducible(values: Sequence[float], tolerance: float) -> bool:
    """All values within ±tolerance of their mean (trivially true for < 2 values)."""
    if len(values) < 2:
        return True
    mean = sum(values) / len(values)
    return all(abs(v - mean) <= tolerance for v in values)


class WristDeviationCalculator(Calculator):
    """Keeps separate running maxima for the radial and ulnar directions."""
    NAME = "WRIST_DEVIATION"
    ASSESSMENT = AssessmentType.WRIST_DEVIATION

    def __init__(self, config: AssessmentConfig = default_config) -> None:
        super().__init__(config)
        self._validator = TemporalQualityValidator(config)

    def _reference(self, hand: HandFrame, context: SessionContext) -> Optional[np.ndarray]:
        if context.neutral_deviation_vector is None:
            vector = orientation_vector(hand)
            if vector is None or is_degenerate(vector, self.config.degenerate_epsilon):
                return None
            context.neutral_deviation_vector = vector
            logger.debug("[DEVIATION] neutral reference set to %s", np.round(vector, 4))
        return context.neutral_deviation_vector

    def _measure(self, frame: CapturedFrame, hand_type: HandType, context: SessionContext
                 ) -> Tuple[Optional[DeviationResult], Optional[DataQualityIssue]]:
        """One frame's deviation, or the issue that kept it out of the session."""
        if frame.hand is None or orientation_vector(frame.hand) is None:
            return None, DataQualityIssue.MISSING_LANDMARK
        # checked before the reference is taken so an occluded frame never calibrates
        if orientation_confidence(frame.hand) < self.config.landmark_visibility_threshold:
            return None, DataQualityIssue.LOW_VISIBILITY
        reference = self._reference(frame.hand, context)
        if reference is None:
            return None, DataQualityIssue.DEGENERATE_VECTOR
        result = wrist_deviation(frame.hand, reference, hand_type, self.config)
        if result.low_confidence:
            return None, DataQualityIssue.DEGENERATE_VECTOR
        return result, None

    def score_session(self, repetitions: Sequence[Repetition],
                      context: SessionContext) -> DeviationSessionResult:
        aggregator = SessionAggregator()
        confidences: List[float] = []
        issues: List[DataQualityIssue] = []
        radial_values: List[float] = []
        ulnar_values: List[float] = []
        frame_index = 0

        for rep_index, repetition in enumerate(repetitions):
            rows = []
            for frame in repetition.frames:
                hand_type = context.resolve_hand_type(frame)
                result, issue = self._measure(frame, hand_type, context)
                if issue is not None:
                    logger.debug("[DEVIATION] frame %d skipped: %s", frame_index, issue.value)
                    issues.append(issue)
                else:
                    issues.extend(result.issues)
                    rows.append((frame_index, result))
                frame_index += 1

            if self.config.temporal_validation_for_wrist and rows:
                verdict = self._validator.validate(
                    [r.magnitude for _, r in rows],
                    [r.confidence >= self.config.finger_visibility_threshold for _, r in rows],
                    label=f"deviation rep {rep_index}",
                )
                if not verdict.accepted:
                    issues.append(DataQualityIssue.TEMPORAL_INCONSISTENCY)
                    continue

            for index, result in rows:
                confidences.append(result.confidence)
                if result.deviation_angle is None:
                    continue
                aggregator.add("radial", rep_index, index, angle=result.radial_angle)
                aggregator.add("ulnar", rep_index, index, angle=result.ulnar_angle)
                if result.deviation_angle > 0:
                    radial_values.append(result.deviation_angle)
                elif result.deviation_angle < 0:
                    ulnar_values.append(-result.deviation_angle)

        tolerance = self.config.reproducibility_tolerance
        return DeviationSessionResult(
            max_radial=aggregator.column_max("radial", "angle"),
            max_ulnar=aggregator.column_max("ulnar", "angle"),
            hand_type=context.hand_type,
            average_confidence=sum(confidences) / len(confidences) if confidences else 0.0,
            frame_count=len(confidences),
            reproducible=is_reproducible(radial_values, tolerance)
            and is_reproducible(ulnar_values, tolerance),
            issues=merge_issues(issues),
        )
