"""
Joint Angle / TAM calculator.

Per joint, the flexion angle is the angle between the two bone segments
meeting there (0° = straight). TAM is MCP + PIP + DIP for one finger.
Works from hand landmarks alone, so handedness never matters here.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple

from handrom.config import AssessmentConfig, default_config
from handrom.core.aggregator import SessionAggregator
from handrom.core.session import SessionContext
from handrom.core.temporal import TemporalQualityValidator
from handrom.domain.enums import AssessmentType, DataQualityIssue, Finger, Joint
from handrom.domain.models import (
    FingerSummary,
    HandFrame,
    JointAngles,
    Repetition,
    TamSessionResult,
    merge_issues,
)
from handrom.metrics.base import Calculator
from handrom.utils.constants import FINGER_CHAINS, JOINT_VERTEX
from handrom.utils.geometry import angle_between, is_degenerate, segment

logger = logging.getLogger(__name__)


# ---- per-frame geometry ----------------------------------------------------
def joint_flexion(hand: HandFrame, finger: Finger, joint: Joint,
                  eps: float = 1e-9) -> Optional[Tuple[float, bool]]:
    """
    (angle, degenerate) for one joint, or None if a landmark is missing.
    A zero-length bone yields (0.0, True).
    """
    chain = FINGER_CHAINS[finger]
    vertex = JOINT_VERTEX[joint]
    points = hand.get(chain[vertex - 1], chain[vertex], chain[vertex + 1])
    if points is None:
        return None
    proximal, center, distal = points
    incoming = segment(proximal, center)
    outgoing = segment(center, distal)
    if is_degenerate(incoming, eps) or is_degenerate(outgoing, eps):
        return 0.0, True
    return angle_between(incoming, outgoing, eps), False


def finger_joint_angles(hand: HandFrame, finger: Finger,
                        config: AssessmentConfig = default_config) -> Optional[JointAngles]:
    """MCP/PIP/DIP flexion and TAM for one finger, or None if a landmark is missing."""
    angles: Dict[Joint, float] = {}
    issues: List[DataQualityIssue] = []
    for joint in (Joint.MCP, Joint.PIP, Joint.DIP):
        measured = joint_flexion(hand, finger, joint, config.degenerate_epsilon)
        if measured is None:
            return None
        angle, degenerate = measured
        angles[joint] = angle
        if degenerate and DataQualityIssue.DEGENERATE_VECTOR not in issues:
            issues.append(DataQualityIssue.DEGENERATE_VECTOR)

    result = JointAngles(
        mcp_angle=angles[Joint.MCP],
        pip_angle=angles[Joint.PIP],
        dip_angle=angles[Joint.DIP],
        total_active_rom=angles[Joint.MCP] + angles[Joint.PIP] + angles[Joint.DIP],
        issues=tuple(issues),
    )
    if config.clamp_anatomical_limits:
        result, _ = validate_anatomical_limits(result, config)
    return result


def validate_anatomical_limits(
    angles: JointAngles, config: AssessmentConfig = default_config
) -> Tuple[JointAngles, List[str]]:
    """
    Clamp each joint into its anatomical range.
    Returns the corrected angles and a description of every violation.
    """
    violations: List[str] = []
    corrected: Dict[str, float] = {}
    for joint, value in (("MCP", angles.mcp_angle), ("PIP", angles.pip_angle), ("DIP", angles.dip_angle)):
        low, high = config.anatomical_limits[joint]
        if value > high:
            violations.append(f"{joint}: {value:.1f}° > {high:.0f}°")
        corrected[joint] = min(max(value, low), high)

    fixed = replace(
        angles,
        mcp_angle=corrected["MCP"],
        pip_angle=corrected["PIP"],
        dip_angle=corrected["DIP"],
        total_active_rom=corrected["MCP"] + corrected["PIP"] + corrected["DIP"],
    )
    return fixed, violations


@dataclass(frozen=True)
class FingerVisibility:
    average: float
    visible_ratio: float
    is_visible: bool


def assess_finger_visibility(hand: HandFrame, finger: Finger,
                             config: AssessmentConfig = default_config) -> FingerVisibility:
    """
    Average landmark visibility of a finger chain and the share of its
    landmarks at or above the landmark threshold. Landmarks without a
    visibility score count as fully visible; absent landmarks as invisible.
    """
    scores: List[float] = []
    for index in FINGER_CHAINS[finger]:
        lm = hand[index]
        if lm is None:
            scores.append(0.0)
        else:
            scores.append(1.0 if lm.visibility is None else lm.visibility)

    average = sum(scores) / len(scores)
    ratio = sum(1 for s in scores if s >= config.landmark_visibility_threshold) / len(scores)
    is_visible = (
        average >= config.finger_visibility_threshold
        and ratio >= config.visibility_bypass_fraction
    )
    return FingerVisibility(average=average, visible_ratio=ratio, is_visible=is_visible)


# ---- session calculator ------------------------------------------------------
class TamCalculator(Calculator):
    """
    Scores Total Active Motion for the four long fingers.

    Each finger's series within a repetition goes through the temporal
    validator; a rejected finger contributes nothing for that repetition.
    """
    NAME = "TAM"
    ASSESSMENT = AssessmentType.TAM

    def __init__(self, config: AssessmentConfig = default_config) -> None:
        super().__init__(config)
        self._validator = TemporalQualityValidator(config)

    def frame_angles(self, hand: HandFrame) -> Dict[Finger, Optional[JointAngles]]:
        return {finger: finger_joint_angles(hand, finger, self.config) for finger in Finger}

    def score_session(self, repetitions: Sequence[Repetition],
                      context: SessionContext) -> TamSessionResult:
        aggregator = SessionAggregator()
        quality: Dict[Finger, Dict[int, float]] = {f: {} for f in Finger}
        issues: Dict[Finger, List[DataQualityIssue]] = {f: [] for f in Finger}

        series: Dict[Tuple[int, Finger], List[Dict[str, float]]] = {}
        visibility: Dict[Tuple[int, Finger], List[bool]] = {}

        for rep_index, frame_index, frame in self.iter_frames(repetitions):
            # handedness is irrelevant to TAM but the lock still follows the session
            context.resolve_hand_type(frame)
            if frame.hand is None:
                for finger in Finger:
                    issues[finger].append(DataQualityIssue.MISSING_LANDMARK)
                continue
            for finger in Finger:
                angles = finger_joint_angles(frame.hand, finger, self.config)
                if angles is None:
                    logger.debug("[TAM] frame %d: %s missing landmark, skipped", frame_index, finger.value)
                    issues[finger].append(DataQualityIssue.MISSING_LANDMARK)
                    continue
                issues[finger].extend(angles.issues)
                key = (rep_index, finger)
                series.setdefault(key, []).append({
                    "frame_index": frame_index,
                    "tam": angles.total_active_rom,
                    "mcp": angles.mcp_angle,
                    "pip": angles.pip_angle,
                    "dip": angles.dip_angle,
                })
                visibility.setdefault(key, []).append(
                    assess_finger_visibility(frame.hand, finger, self.config).is_visible
                )

        for (rep_index, finger), rows in series.items():
            verdict = self._validator.validate(
                [r["tam"] for r in rows],
                visibility[(rep_index, finger)],
                label=f"{finger.value} rep {rep_index}",
            )
            quality[finger][rep_index] = verdict.quality
            if verdict.accepted:
                aggregator.extend(finger.value, rep_index, rows)
            else:
                issues[finger].append(DataQualityIssue.TEMPORAL_INCONSISTENCY)

        fingers = {
            finger: self._summarize(aggregator, finger, quality[finger], merge_issues(issues[finger]))
            for finger in Finger
        }
        return TamSessionResult(fingers=fingers)

    @staticmethod
    def _summarize(aggregator: SessionAggregator, finger: Finger,
                   quality: Dict[int, float], issues: Tuple[DataQualityIssue, ...]) -> FingerSummary:
        tam = aggregator.summarize(finger.value, "tam")
        if tam.maximum is None:
            if quality:
                logger.info("[TAM] %s unavailable: no repetition passed validation", finger.value)
            return FingerSummary(
                finger=finger, max_rom=None, joint_angles=None,
                max_frame_index=None, min_frame_index=None,
                temporal_quality=quality, accepted_repetitions=(), issues=issues,
            )

        # Per-joint maxima are independent; they need not share a frame.
        joint_angles = JointAngles(
            mcp_angle=aggregator.column_max(finger.value, "mcp"),
            pip_angle=aggregator.column_max(finger.value, "pip"),
            dip_angle=aggregator.column_max(finger.value, "dip"),
            total_active_rom=tam.maximum,
        )
        return FingerSummary(
            finger=finger,
            max_rom=tam.maximum,
            joint_angles=joint_angles,
            max_frame_index=tam.max_frame,
            min_frame_index=tam.min_frame,
            temporal_quality=quality,
            accepted_repetitions=tuple(aggregator.repetitions(finger.value)),
            issues=issues,
        )
