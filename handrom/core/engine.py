"""
AssessmentEngine — single entry point for scoring a recording session.

Design decisions:
  - One calculator per assessment type, all sharing one AssessmentConfig.
  - Session state (handedness lock, deviation reference) is owned by the
    caller through SessionContext, never by the engine.
  - The engine is read-only over its input; frames are never mutated.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, Optional, Sequence, Union

from handrom.config import AssessmentConfig, default_config
from handrom.core.session import SessionContext
from handrom.domain.enums import AssessmentType
from handrom.domain.models import CapturedFrame, Repetition
from handrom.metrics.base import Calculator
from handrom.metrics.kapandji import KapandjiCalculator
from handrom.metrics.tam import TamCalculator
from handrom.metrics.wrist_deviation import WristDeviationCalculator
from handrom.metrics.wrist_flexion import WristFlexionCalculator

logger = logging.getLogger(__name__)

RepetitionsLike = Union[Repetition, Iterable[Repetition], Iterable[CapturedFrame]]


def as_repetitions(data: RepetitionsLike) -> Sequence[Repetition]:
    """
    Accept a Repetition, a sequence of repetitions or a bare frame list
    (treated as a single repetition).
    """
    if isinstance(data, Repetition):
        return [data]
    items = list(data)
    if items and all(isinstance(item, CapturedFrame) for item in items):
        return [Repetition(frames=tuple(items))]
    for item in items:
        if not isinstance(item, Repetition):
            raise ValueError(f"Expected Repetition or CapturedFrame, got {type(item).__name__}")
    return items


class AssessmentEngine:
    """
    Usage
    -----
    engine  = AssessmentEngine(config)
    context = SessionContext(config)
    result  = engine.score(repetitions, AssessmentType.TAM, context)

    Parameters
    ----------
    config : AssessmentConfig
        Thresholds shared by every calculator.
    """

    def __init__(self, config: AssessmentConfig = default_config) -> None:
        self.config = config

        # ---- finger assessments --------------------------------------
        self._tam      = TamCalculator(config)
        self._kapandji = KapandjiCalculator(config)

        # ---- wrist assessments ---------------------------------------
        self._wrist_flexion   = WristFlexionCalculator(config)
        self._wrist_deviation = WristDeviationCalculator(config)

        self._calculators: Dict[AssessmentType, Calculator] = {
            calc.ASSESSMENT: calc
            for calc in (self._tam, self._kapandji, self._wrist_flexion, self._wrist_deviation)
        }

    # ------------------------------------------------------------------
    def calculator(self, assessment_type: Union[AssessmentType, str]) -> Calculator:
        try:
            return self._calculators[AssessmentType(assessment_type)]
        except ValueError:
            raise ValueError(f"Unknown assessment type: {assessment_type!r}") from None

    def score(
        self,
        repetitions: RepetitionsLike,
        assessment_type: Union[AssessmentType, str],
        context: Optional[SessionContext] = None,
    ) -> Any:
        """
        Score one recording session.

        Parameters
        ----------
        repetitions : Repetition, sequence of Repetition, or frame list
        assessment_type : AssessmentType or its string value
        context : SessionContext, optional
            A fresh context is created when omitted, so handedness is
            resolved from this session's frames only.
        """
        calculator = self.calculator(assessment_type)
        reps = as_repetitions(repetitions)
        if context is None:
            context = SessionContext(self.config)

        frame_count = sum(len(r) for r in reps)
        logger.info("[%s] scoring %d repetition(s), %d frame(s)",
                    calculator.NAME, len(reps), frame_count)
        result = calculator.score_session(reps, context)
        logger.debug("[%s] result %r", calculator.NAME, result)
        return result

    @property
    def supported(self) -> Sequence[AssessmentType]:
        return list(self._calculators)
