"""
Hand-type resolution and the per-session handedness lock.

The tracked hand is identified by comparing the hand-wrist landmark with
the pose left/right wrists. Once a session has seen a determinable frame,
the answer is frozen so tracking noise cannot flip it mid-recording.
"""
from __future__ import annotations
import logging
from typing import Optional

from handrom.domain.enums import HandLandmark, HandType, PoseLandmark
from handrom.domain.models import CapturedFrame
from handrom.utils.geometry import distance

logger = logging.getLogger(__name__)

TIE_TOLERANCE = 1e-9


def resolve_hand_type(frame: CapturedFrame) -> HandType:
    """
    Stateless per-frame hand type: the pose wrist closest to the hand wrist wins.
    Ties and missing data give UNKNOWN.
    """
    if frame.hand is None or frame.pose is None:
        return HandType.UNKNOWN

    hand_wrist = frame.hand[HandLandmark.WRIST]
    pose_wrists = frame.pose.get(PoseLandmark.LEFT_WRIST, PoseLandmark.RIGHT_WRIST)
    if hand_wrist is None or pose_wrists is None:
        return HandType.UNKNOWN

    left_wrist, right_wrist = pose_wrists
    to_left = distance(hand_wrist, left_wrist)
    to_right = distance(hand_wrist, right_wrist)

    if abs(to_left - to_right) <= TIE_TOLERANCE:
        return HandType.UNKNOWN
    return HandType.LEFT if to_left < to_right else HandType.RIGHT


class SessionHandednessLock:
    """
    Two-state machine: UNLOCKED → LOCKED.

    The first non-UNKNOWN value offered locks the session. Later offers are
    ignored. Only reset() (a new recording session) unlocks it again.
    """

    def __init__(self) -> None:
        self._resolved: HandType = HandType.UNKNOWN

    # ------------------------------------------------------------------
    def offer(self, hand_type: HandType) -> HandType:
        """
        Feed a per-frame reading. Returns the (possibly just) locked value,
        or UNKNOWN while still unlocked.
        """
        if self._resolved is HandType.UNKNOWN and hand_type is not HandType.UNKNOWN:
            self._resolved = hand_type
            logger.info("[HAND] session locked to %s", hand_type.value)
        return self._resolved

    @property
    def resolved(self) -> HandType:
        return self._resolved

    @property
    def is_locked(self) -> bool:
        return self._resolved is not HandType.UNKNOWN

    def reset(self) -> None:
        if self.is_locked:
            logger.info("[HAND] session lock reset (was %s)", self._resolved.value)
        self._resolved = HandType.UNKNOWN


class HandTypeResolver:
    """
    Resolves the hand type for a frame, honouring a session lock.

    Usage
    -----
    resolver = HandTypeResolver()
    hand_type = resolver.resolve(frame, context.handedness)
    """

    def resolve(
        self, frame: CapturedFrame, lock: Optional[SessionHandednessLock] = None
    ) -> HandType:
        if lock is not None and lock.is_locked:
            return lock.resolved

        detected = resolve_hand_type(frame)
        if lock is None:
            return detected
        return lock.offer(detected)
