"""
SessionAggregator — collects accepted per-frame measurements of a session
into a pandas table and reduces them to representative values.

Only maxima are kept across repetitions, so the order in which
repetitions are added does not matter.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pandas as pd

COLUMNS = ["key", "repetition", "frame_index"]


@dataclass(frozen=True)
class MetricSummary:
    """Max/min of one column for one key, with the frame indices they came from."""
    maximum: Optional[float]
    max_frame: Optional[int]
    minimum: Optional[float]
    min_frame: Optional[int]
    count: int

    @classmethod
    def empty(cls) -> "MetricSummary":
        return cls(None, None, None, None, 0)


class SessionAggregator:
    """
    Usage
    -----
    agg = SessionAggregator()
    agg.add("INDEX", repetition=0, frame_index=12, tam=187.5, mcp=70.0)
    agg.summarize("INDEX", "tam").maximum
    """

    def __init__(self) -> None:
        self._rows: List[Dict[str, Any]] = []

    # ------------------------------------------------------------------
    def add(self, key: str, repetition: int, frame_index: int, **values: float) -> None:
        row: Dict[str, Any] = {"key": key, "repetition": repetition, "frame_index": frame_index}
        row.update({name: float(v) for name, v in values.items()})
        self._rows.append(row)

    def extend(self, key: str, repetition: int, rows: List[Dict[str, float]]) -> None:
        """Add several rows; each mapping must carry a 'frame_index'."""
        for row in rows:
            values = dict(row)
            frame_index = int(values.pop("frame_index"))
            self.add(key, repetition, frame_index, **values)

    def table(self, key: Optional[str] = None) -> pd.DataFrame:
        df = pd.DataFrame(self._rows)
        if df.empty:
            return pd.DataFrame(columns=COLUMNS)
        if key is not None:
            df = df[df["key"] == key]
        return df.reset_index(drop=True)

    def summarize(self, key: str, column: str) -> MetricSummary:
        df = self.table(key)
        if df.empty or column not in df.columns:
            return MetricSummary.empty()
        series = df[column].dropna()
        if series.empty:
            return MetricSummary.empty()

        max_pos = series.idxmax()
        min_pos = series.idxmin()
        return MetricSummary(
            maximum=float(series.loc[max_pos]),
            max_frame=int(df.loc[max_pos, "frame_index"]),
            minimum=float(series.loc[min_pos]),
            min_frame=int(df.loc[min_pos, "frame_index"]),
            count=int(series.size),
        )

    def column_max(self, key: str, column: str) -> Optional[float]:
        return self.summarize(key, column).maximum

    def repetitions(self, key: str) -> List[int]:
        df = self.table(key)
        if df.empty:
            return []
        return sorted(int(r) for r in df["repetition"].unique())
