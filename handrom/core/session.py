"""
SessionContext — caller-owned state for one recording session.

Previously the handedness lock lived in module-level variables. Now each
session carries its own context, so concurrent sessions never interfere
and the reset point is explicit.
"""
from __future__ import annotations
import logging
from typing import Optional

import numpy as np

from handrom.config import AssessmentConfig, default_config
from handrom.core.handedness import HandTypeResolver, SessionHandednessLock
from handrom.domain.enums import HandType
from handrom.domain.models import CapturedFrame

logger = logging.getLogger(__name__)


class SessionContext:
    """
    Parameters
    ----------
    config : AssessmentConfig
        Thresholds shared by every calculator in this session.
    hand_type : HandType, optional
        Force the tracked hand (e.g. known from the patient record or a
        replay). Locks the session immediately.
    neutral_deviation_vector : array-like, optional
        Index-MCP → pinky-MCP reference for wrist deviation. When omitted
        the first usable frame of the session establishes it.
    """

    def __init__(
        self,
        config: AssessmentConfig = default_config,
        hand_type: Optional[HandType] = None,
        neutral_deviation_vector=None,
    ) -> None:
        self.config = config
        self.handedness = SessionHandednessLock()
        self._resolver = HandTypeResolver()
        self._forced_hand_type = hand_type
        self._initial_reference = (
            None if neutral_deviation_vector is None
            else np.asarray(neutral_deviation_vector, dtype=float)
        )
        self.neutral_deviation_vector: Optional[np.ndarray] = self._initial_reference
        if hand_type is not None:
            self.handedness.offer(HandType(hand_type))

    # ------------------------------------------------------------------
    def resolve_hand_type(self, frame: CapturedFrame) -> HandType:
        return self._resolver.resolve(frame, self.handedness)

    @property
    def hand_type(self) -> HandType:
        return self.handedness.resolved

    def new_session(self) -> None:
        """
        Explicit "new recording session" signal: unlock handedness and drop
        the deviation reference learned from the previous session.
        """
        self.handedness.reset()
        if self._forced_hand_type is not None:
            self.handedness.offer(HandType(self._forced_hand_type))
        self.neutral_deviation_vector = self._initial_reference
        logger.debug("[SESSION] new session started")
