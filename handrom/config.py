from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True)
class AssessmentConfig:
    """
    Central configuration passed by reference into every calculator.
    No more thresholds scattered across modules.
    """
    # ---- landmark / finger visibility ----------------------------------
    landmark_visibility_threshold: float = 0.7
    finger_visibility_threshold: float = 0.8
    visibility_bypass_fraction: float = 0.8

    # ---- temporal validation -------------------------------------------
    temporal_quality_threshold: float = 0.7
    max_change_per_frame: float = 30.0      # degrees
    short_sequence_quality: float = 0.5

    # ---- kapandji (one proximity threshold per level, 1..10) -----------
    kapandji_thresholds: Tuple[float, ...] = (0.055,) * 10

    # ---- wrist ---------------------------------------------------------
    min_elbow_visibility: float = 0.3
    reproducibility_tolerance: float = 5.0  # degrees
    # run the temporal validator over wrist series too (TAM always uses it)
    temporal_validation_for_wrist: bool = False

    # ---- anatomical limits (degrees) -----------------------------------
    anatomical_limits: Dict[str, Tuple[float, float]] = field(
        default_factory=lambda: {"MCP": (0.0, 95.0), "PIP": (0.0, 115.0), "DIP": (0.0, 90.0)}
    )
    clamp_anatomical_limits: bool = False

    # ---- numerics ------------------------------------------------------
    degenerate_epsilon: float = 1e-9
    # bends below this many degrees are reported as neutral
    neutral_angle_tolerance: float = 1e-4

    def __post_init__(self) -> None:
        if len(self.kapandji_thresholds) != 10:
            raise ValueError(
                f"kapandji_thresholds needs 10 values, got {len(self.kapandji_thresholds)}"
            )

    def kapandji_threshold(self, level: int) -> float:
        """Proximity threshold for Kapandji level 1..10."""
        return self.kapandji_thresholds[level - 1]

    @classmethod
    def from_dict(cls, overrides: Mapping[str, Any]) -> "AssessmentConfig":
        """Build a config from a (possibly partial) mapping of field overrides."""
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        values = dict(overrides)
        if "kapandji_thresholds" in values:
            values["kapandji_thresholds"] = tuple(float(v) for v in values["kapandji_thresholds"])
        if "anatomical_limits" in values:
            values["anatomical_limits"] = {
                k: (float(lo), float(hi)) for k, (lo, hi) in values["anatomical_limits"].items()
            }
        return replace(default_config, **values)


# Shared default; pass a replaced copy to override thresholds.
default_config = AssessmentConfig()
