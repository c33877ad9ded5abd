from handrom.core.handedness import HandTypeResolver, SessionHandednessLock, resolve_hand_type
from handrom.core.session import SessionContext
from handrom.core.temporal import TemporalQualityValidator, TemporalVerdict
from handrom.core.aggregator import MetricSummary, SessionAggregator

__all__ = [
    "HandTypeResolver",
    "SessionHandednessLock",
    "resolve_hand_type",
    "SessionContext",
    "TemporalQualityValidator",
    "TemporalVerdict",
    "MetricSummary",
    "SessionAggregator",
]
