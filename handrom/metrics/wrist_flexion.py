"""
Elbow-referenced wrist flexion/extension.

Forearm vector: pose elbow → hand wrist. Hand vector: hand wrist → middle
MCP. Deflection is 180° minus the interior angle at the wrist, so a
straight wrist reads 0°. The sign of the cross product's Y component
(mirrored between hands) picks flexion or extension; the whole deflection
goes to that side and the other side is 0.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from handrom.config import AssessmentConfig, default_config
from handrom.core.aggregator import SessionAggregator
from handrom.core.session import SessionContext
from handrom.core.temporal import TemporalQualityValidator
from handrom.domain.enums import (
    AssessmentType,
    DataQualityIssue,
    HandLandmark,
    HandType,
    PoseLandmark,
)
from handrom.domain.models import (
    CapturedFrame,
    Landmark,
    Repetition,
    WristAngleResult,
    WristSessionResult,
    merge_issues,
)
from handrom.metrics.base import Calculator
from handrom.utils.geometry import angle_at, cross, distance, is_degenerate, segment

logger = logging.getLogger(__name__)

ELBOW_FOR_HAND = {
    HandType.LEFT:  (PoseLandmark.LEFT_ELBOW, PoseLandmark.LEFT_WRIST),
    HandType.RIGHT: (PoseLandmark.RIGHT_ELBOW, PoseLandmark.RIGHT_WRIST),
}


def _visibility(lm: Optional[Landmark]) -> float:
    if lm is None or lm.visibility is None:
        return 1.0
    return lm.visibility


def is_flexion(cross_y: float, hand_type: HandType) -> bool:
    """RIGHT: positive Y is flexion. LEFT: mirrored."""
    if hand_type is HandType.LEFT:
        return cross_y < 0
    return cross_y > 0


def _pick_elbow(frame: CapturedFrame, hand_type: HandType):
    """
    Elbow and pose-wrist for the tracked side. With unresolved handedness
    the elbow nearer the hand wrist is used for the magnitude only.
    """
    if hand_type in ELBOW_FOR_HAND:
        elbow_idx, wrist_idx = ELBOW_FOR_HAND[hand_type]
        return frame.pose[elbow_idx], frame.pose[wrist_idx]

    hand_wrist = frame.hand[HandLandmark.WRIST]
    candidates = [
        (frame.pose[elbow_idx], frame.pose[wrist_idx])
        for elbow_idx, wrist_idx in ELBOW_FOR_HAND.values()
        if frame.pose[elbow_idx] is not None
    ]
    if not candidates or hand_wrist is None:
        return None, None
    return min(candidates, key=lambda pair: distance(pair[0], hand_wrist))


def unmeasurable_reason(frame: CapturedFrame, hand_type: HandType,
                        config: AssessmentConfig = default_config) -> Optional[DataQualityIssue]:
    """Why a frame cannot be measured, or None when it can."""
    if frame.hand is None or frame.pose is None:
        return DataQualityIssue.MISSING_LANDMARK
    elbow, _ = _pick_elbow(frame, hand_type)
    if elbow is None or frame.hand.get(HandLandmark.WRIST, HandLandmark.MIDDLE_MCP) is None:
        return DataQualityIssue.MISSING_LANDMARK
    if _visibility(elbow) < config.min_elbow_visibility:
        return DataQualityIssue.LOW_VISIBILITY
    return None


def wrist_angle(frame: CapturedFrame, hand_type: HandType,
                config: AssessmentConfig = default_config) -> Optional[WristAngleResult]:
    """
    Wrist bend for one frame, or None when the frame cannot be measured
    (missing hand/pose data, or elbow visibility below the minimum).
    """
    reason = unmeasurable_reason(frame, hand_type, config)
    if reason is not None:
        logger.debug("[WRIST] frame skipped: %s", reason.value)
        return None

    elbow, pose_wrist = _pick_elbow(frame, hand_type)
    hand_wrist, middle_mcp = frame.hand.get(HandLandmark.WRIST, HandLandmark.MIDDLE_MCP)
    confidence = min(_visibility(elbow), _visibility(pose_wrist))
    issues: List[DataQualityIssue] = []
    resolved = hand_type is not HandType.UNKNOWN
    if not resolved:
        issues.append(DataQualityIssue.UNRESOLVED_HANDEDNESS)

    forearm = segment(elbow, hand_wrist)
    hand_vec = segment(hand_wrist, middle_mcp)
    eps = config.degenerate_epsilon
    if is_degenerate(forearm, eps) or is_degenerate(hand_vec, eps):
        issues.append(DataQualityIssue.DEGENERATE_VECTOR)
        return WristAngleResult(
            deflection_angle=0.0,
            flexion_angle=0.0 if resolved else None,
            extension_angle=0.0 if resolved else None,
            hand_type=hand_type,
            confidence=0.0,
            issues=tuple(issues),
        )

    # interior angle at the wrist: 180° when forearm and hand are colinear
    interior = angle_at(elbow, hand_wrist, middle_mcp, eps)
    deflection = max(0.0, 180.0 - interior)

    if not resolved:
        return WristAngleResult(
            deflection_angle=deflection, flexion_angle=None, extension_angle=None,
            hand_type=hand_type, confidence=confidence, issues=tuple(issues),
        )

    if deflection <= config.neutral_angle_tolerance:
        flexion, extension = 0.0, 0.0
    elif is_flexion(float(cross(forearm, hand_vec)[1]), hand_type):
        flexion, extension = deflection, 0.0
    else:
        flexion, extension = 0.0, deflection

    return WristAngleResult(
        deflection_angle=deflection,
        flexion_angle=flexion,
        extension_angle=extension,
        hand_type=hand_type,
        confidence=confidence,
        issues=tuple(issues),
    )


class WristFlexionCalculator(Calculator):
    """
    Session maxima of flexion and extension, taken independently.
    Frames seen before handedness is resolved contribute no direction.
    """
    NAME = "WRIST_FLEXION"
    ASSESSMENT = AssessmentType.WRIST_FLEXION

    def __init__(self, config: AssessmentConfig = default_config) -> None:
        super().__init__(config)
        self._validator = TemporalQualityValidator(config)

    def score_session(self, repetitions: Sequence[Repetition],
                      context: SessionContext) -> WristSessionResult:
        aggregator = SessionAggregator()
        confidences: List[float] = []
        issues: List[DataQualityIssue] = []
        measured = 0
        frame_index = 0

        for rep_index, repetition in enumerate(repetitions):
            rows = []
            for frame in repetition.frames:
                hand_type = context.resolve_hand_type(frame)
                result = wrist_angle(frame, hand_type, self.config)
                if result is None:
                    issues.append(unmeasurable_reason(frame, hand_type, self.config))
                else:
                    measured += 1
                    confidences.append(result.confidence)
                    issues.extend(result.issues)
                    rows.append((frame_index, result))
                frame_index += 1

            if self.config.temporal_validation_for_wrist and rows:
                verdict = self._validator.validate(
                    [r.deflection_angle for _, r in rows],
                    [r.confidence >= self.config.landmark_visibility_threshold for _, r in rows],
                    label=f"wrist rep {rep_index}",
                )
                if not verdict.accepted:
                    issues.append(DataQualityIssue.TEMPORAL_INCONSISTENCY)
                    continue

            for index, result in rows:
                if result.flexion_angle is None:
                    continue
                aggregator.add("flexion", rep_index, index, angle=result.flexion_angle)
                aggregator.add("extension", rep_index, index, angle=result.extension_angle)

        flexion = aggregator.summarize("flexion", "angle")
        extension = aggregator.summarize("extension", "angle")
        if flexion.count == 0 and measured:
            logger.info("[WRIST] direction withheld: handedness never resolved")

        return WristSessionResult(
            max_flexion=flexion.maximum,
            max_extension=extension.maximum,
            hand_type=context.hand_type,
            average_confidence=sum(confidences) / len(confidences) if confidences else 0.0,
            frame_count=measured,
            max_flexion_frame=flexion.max_frame if flexion.maximum else None,
            max_extension_frame=extension.max_frame if extension.maximum else None,
            issues=merge_issues(issues),
        )
