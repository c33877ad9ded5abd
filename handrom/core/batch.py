"""
Batch scoring of independent recordings.

Each recording gets its own SessionContext, so handedness locks and
deviation references never leak between sessions and the work can be
spread over joblib workers.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from joblib import Parallel, delayed

from handrom.config import AssessmentConfig, default_config
from handrom.core.engine import AssessmentEngine
from handrom.core.session import SessionContext
from handrom.domain.enums import AssessmentType, HandType
from handrom.domain.models import Repetition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recording:
    """One recorded session: what was assessed and the captured repetitions."""
    assessment_type: AssessmentType
    repetitions: Tuple[Repetition, ...]
    hand_type: Optional[HandType] = None
    neutral_deviation_vector: Optional[Tuple[float, float, float]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Recording":
        if "assessmentType" not in data:
            raise ValueError("Recording is missing 'assessmentType'")
        try:
            assessment = AssessmentType(data["assessmentType"])
        except ValueError:
            raise ValueError(f"Unknown assessment type: {data['assessmentType']!r}") from None

        hand = data.get("handType")
        reference = data.get("neutralDeviationVector")
        if reference is not None and len(reference) != 3:
            raise ValueError("neutralDeviationVector needs 3 components")

        return cls(
            assessment_type=assessment,
            repetitions=tuple(Repetition.from_dict(r) for r in data.get("repetitions", [])),
            hand_type=HandType(hand) if hand else None,
            neutral_deviation_vector=None if reference is None else tuple(float(v) for v in reference),
        )

    def new_context(self, config: AssessmentConfig = default_config) -> SessionContext:
        return SessionContext(
            config,
            hand_type=self.hand_type,
            neutral_deviation_vector=self.neutral_deviation_vector,
        )


def score_recording(recording: Recording, config: AssessmentConfig = default_config) -> Any:
    engine = AssessmentEngine(config)
    return engine.score(recording.repetitions, recording.assessment_type,
                        recording.new_context(config))


def score_sessions(
    recordings: Sequence[Recording],
    n_jobs: int = 1,
    config: AssessmentConfig = default_config,
) -> List[Any]:
    """
    Score many recordings, results in input order.

    Parameters
    ----------
    recordings : sequence of Recording
    n_jobs : int
        joblib worker count (-1 = all cores, 1 = run in-process).
    config : AssessmentConfig
        Shared by every worker.
    """
    if not recordings:
        return []
    logger.info("[BATCH] scoring %d recording(s) with n_jobs=%d", len(recordings), n_jobs)
    return Parallel(n_jobs=n_jobs)(
        delayed(score_recording)(recording, config) for recording in recordings
    )
