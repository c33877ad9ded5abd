"""
Clinical interpretation bands for session results.

Unavailable measurements (None) are reported as unavailable rather than
as 0°, since 0° is a legitimate neutral reading.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional

from handrom.domain.enums import Finger
from handrom.domain.models import (
    DeviationSessionResult,
    KapandjiSessionResult,
    TamSessionResult,
    WristSessionResult,
)
from handrom.metrics.kapandji import reached_level_names
from handrom.utils.constants import (
    DEVIATION_PERCENT_CAP,
    NORMAL_RADIAL_DEVIATION,
    NORMAL_TAM_MAX,
    NORMAL_ULNAR_DEVIATION,
    NORMAL_WRIST_EXTENSION,
    NORMAL_WRIST_FLEXION,
)

UNAVAILABLE = "Unavailable"

# (minimum percentage of normal, level)
TAM_BANDS = (
    (90.0, "Excellent"),
    (75.0, "Good"),
    (60.0, "Fair"),
    (40.0, "Limited"),
)
KAPANDJI_BANDS = (
    (9, "Excellent"),
    (7, "Good"),
    (5, "Fair"),
    (3, "Poor"),
)


@dataclass(frozen=True)
class Interpretation:
    level: str
    percentages: Dict[str, Optional[float]]
    notes: List[str]

    def to_dict(self) -> Dict[str, object]:
        return {"level": self.level, "percentages": self.percentages, "notes": self.notes}


def _band(value: float, bands, fallback: str) -> str:
    for minimum, level in bands:
        if value >= minimum:
            return level
    return fallback


def tam_finger_level(finger: Finger, rom: Optional[float]) -> tuple:
    """(level, percentage of normal) for one finger."""
    if rom is None:
        return UNAVAILABLE, None
    percentage = max(0.0, min(100.0, round(rom / NORMAL_TAM_MAX[finger] * 100.0)))
    return _band(percentage, TAM_BANDS, "Severely Limited"), percentage


def interpret_tam(result: TamSessionResult) -> Interpretation:
    percentages: Dict[str, Optional[float]] = {}
    notes: List[str] = []
    for finger in Finger:
        level, percentage = tam_finger_level(finger, result.rom(finger))
        percentages[finger.value.lower()] = percentage
        notes.append(f"{finger.value.title()}: {level}")

    measured = [p for p in percentages.values() if p is not None]
    if not measured:
        return Interpretation(UNAVAILABLE, percentages, notes)
    overall = sum(measured) / len(measured)
    return Interpretation(_band(overall, TAM_BANDS, "Severely Limited"), percentages, notes)


def interpret_kapandji(result: KapandjiSessionResult) -> Interpretation:
    level = _band(result.max_score, KAPANDJI_BANDS, "Severe Limitation")
    return Interpretation(
        level,
        {"score": result.max_score * 10.0},
        reached_level_names(result.reached_levels),
    )


def interpret_wrist(result: WristSessionResult) -> Interpretation:
    flexion, extension = result.max_flexion, result.max_extension
    if flexion is None or extension is None:
        return Interpretation(UNAVAILABLE, {"flexion": None, "extension": None},
                              ["Direction unavailable: hand type unresolved"])

    if flexion >= 60 and extension >= 50:
        level = "Normal"
    elif flexion >= 40 or extension >= 30:
        level = "Moderate"
    else:
        level = "Limited"
    return Interpretation(level, {
        "flexion": min(flexion / NORMAL_WRIST_FLEXION * 100.0, 100.0),
        "extension": min(extension / NORMAL_WRIST_EXTENSION * 100.0, 100.0),
    }, [])


def interpret_deviation(result: DeviationSessionResult) -> Interpretation:
    radial, ulnar = result.max_radial, result.max_ulnar
    if radial is None or ulnar is None:
        return Interpretation(UNAVAILABLE, {"radial": None, "ulnar": None},
                              ["Direction unavailable: hand type unresolved"])

    total = radial + ulnar
    if radial >= 18 and ulnar >= 25 and total >= 45:
        level = "Normal"
    elif radial >= 12 and ulnar >= 18 and total >= 30:
        level = "Moderate"
    else:
        level = "Limited"
    notes = [] if result.reproducible else ["Repeated measurements differ by more than tolerance"]
    return Interpretation(level, {
        "radial": min(radial / NORMAL_RADIAL_DEVIATION * 100.0, DEVIATION_PERCENT_CAP),
        "ulnar": min(ulnar / NORMAL_ULNAR_DEVIATION * 100.0, DEVIATION_PERCENT_CAP),
    }, notes)


def interpret(result) -> Interpretation:
    """Dispatch on the session result type."""
    if isinstance(result, TamSessionResult):
        return interpret_tam(result)
    if isinstance(result, KapandjiSessionResult):
        return interpret_kapandji(result)
    if isinstance(result, WristSessionResult):
        return interpret_wrist(result)
    if isinstance(result, DeviationSessionResult):
        return interpret_deviation(result)
    raise TypeError(f"No interpretation for {type(result).__name__}")
