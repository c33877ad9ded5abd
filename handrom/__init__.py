"""
handrom — hand and wrist range-of-motion scoring from skeletal landmarks.
"""

from handrom.config import AssessmentConfig, default_config
from handrom.core.batch import Recording, score_sessions
from handrom.core.engine import AssessmentEngine
from handrom.core.session import SessionContext
from handrom.domain.enums import AssessmentType, DataQualityIssue, Finger, HandType
from handrom.domain.models import CapturedFrame, HandFrame, Landmark, PoseFrame, Repetition
from handrom.metrics.interpretation import interpret

__version__ = "0.1.0"

__all__ = [
    "AssessmentConfig",
    "default_config",
    "AssessmentEngine",
    "SessionContext",
    "Recording",
    "score_sessions",
    "AssessmentType",
    "DataQualityIssue",
    "Finger",
    "HandType",
    "Landmark",
    "HandFrame",
    "PoseFrame",
    "CapturedFrame",
    "Repetition",
    "interpret",
]
