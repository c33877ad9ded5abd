"""
Abstract base class for all assessment calculators.

Every calculator must:
  - implement score_session(repetitions, context) → session result
  - declare its NAME and ASSESSMENT class attributes

Per-frame geometry lives in plain module-level functions next to each
calculator; the class only walks repetitions and aggregates.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Iterator, Sequence, Tuple

from handrom.config import AssessmentConfig, default_config
from handrom.core.session import SessionContext
from handrom.domain.enums import AssessmentType
from handrom.domain.models import CapturedFrame, Repetition


class Calculator(ABC):
    """Base class for all session-level calculators."""

    # Override in subclasses for logging / registration
    NAME: str = "UNNAMED_CALCULATOR"
    ASSESSMENT: AssessmentType

    def __init__(self, config: AssessmentConfig = default_config) -> None:
        self.config = config

    @abstractmethod
    def score_session(
        self, repetitions: Sequence[Repetition], context: SessionContext
    ) -> Any:
        """
        Reduce every repetition of a recording session to one result.

        Parameters
        ----------
        repetitions : sequence of Repetition
            Frames inside each repetition are already in capture order.
        context : SessionContext
            Caller-owned session state (handedness lock, references).
        """

    @staticmethod
    def iter_frames(
        repetitions: Sequence[Repetition],
    ) -> Iterator[Tuple[int, int, CapturedFrame]]:
        """
        Yield (repetition index, session-wide frame index, frame) in capture
        order. The session-wide index is what replay tooling refers to.
        """
        frame_index = 0
        for rep_index, repetition in enumerate(repetitions):
            for frame in repetition.frames:
                yield rep_index, frame_index, frame
                frame_index += 1

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.NAME!r}>"
