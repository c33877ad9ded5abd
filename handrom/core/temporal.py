"""
TemporalQualityValidator — decides whether a repetition's per-frame ROM
series is consistent enough to be trusted.

Clearly visible landmarks bypass the consistency check entirely so that
genuinely large excursions are not thrown away as "sudden changes".
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from handrom.config import AssessmentConfig, default_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemporalVerdict:
    """
    Outcome of validating one series.
    value is the representative (maximum) value, or None when rejected.
    """
    accepted: bool
    quality: float
    bypassed: bool
    value: Optional[float]


class TemporalQualityValidator:
    """
    Parameters
    ----------
    config : AssessmentConfig
        Supplies max_change_per_frame, temporal_quality_threshold and
        visibility_bypass_fraction.
    """

    def __init__(self, config: AssessmentConfig = default_config) -> None:
        self._config = config

    # ------------------------------------------------------------------
    def quality_score(self, values: Sequence[float]) -> float:
        """
        Frame-to-frame smoothness in [0, 1]: mean of the fraction of
        transitions within max_change_per_frame and 1 - mean|Δ| / max_change.
        """
        if len(values) < 2:
            return self._config.short_sequence_quality

        limit = self._config.max_change_per_frame
        changes = np.abs(np.diff(np.asarray(values, dtype=float)))
        transition_quality = float(np.mean(changes <= limit))
        smoothness_quality = max(0.0, 1.0 - float(np.mean(changes)) / limit)
        return (transition_quality + smoothness_quality) / 2.0

    def is_clearly_visible(self, visible_flags: Sequence[bool]) -> bool:
        """True when enough frames of the series were clearly visible."""
        if not visible_flags:
            return False
        fraction = sum(1 for v in visible_flags if v) / len(visible_flags)
        return fraction >= self._config.visibility_bypass_fraction

    def validate(
        self,
        values: Sequence[float],
        visible_flags: Sequence[bool] = (),
        label: str = "",
    ) -> TemporalVerdict:
        """
        Parameters
        ----------
        values : sequence of float
            Per-frame measurements in capture order.
        visible_flags : sequence of bool
            Per-frame "clearly visible" assessment for the tracked landmarks.
        label : str
            Used in log messages only.
        """
        if len(values) == 0:
            return TemporalVerdict(accepted=False, quality=0.0, bypassed=False, value=None)

        if self.is_clearly_visible(visible_flags):
            logger.debug("[TEMPORAL] %s clearly visible, bypassing consistency check", label)
            return TemporalVerdict(
                accepted=True, quality=1.0, bypassed=True, value=float(max(values))
            )

        quality = self.quality_score(values)
        if quality >= self._config.temporal_quality_threshold:
            return TemporalVerdict(
                accepted=True, quality=quality, bypassed=False, value=float(max(values))
            )

        logger.info(
            "[TEMPORAL] %s rejected: quality %.2f < %.2f over %d frames",
            label, quality, self._config.temporal_quality_threshold, len(values),
        )
        return TemporalVerdict(accepted=False, quality=quality, bypassed=False, value=None)
