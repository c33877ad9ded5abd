"""
Pure geometric utility functions.
Accepts Landmarks or plain 3-sequences; no project imports.
"""
from __future__ import annotations
import math
from typing import Sequence

import numpy as np

Vector = np.ndarray


def as_vector(point) -> Vector:
    """Accept a Landmark (anything with x/y/z) or a 3-sequence."""
    if hasattr(point, "x"):
        return np.array([point.x, point.y, getattr(point, "z", 0.0)], dtype=float)
    return np.asarray(point, dtype=float)


def segment(a, b) -> Vector:
    """Vector pointing from a to b."""
    return as_vector(b) - as_vector(a)


def distance(a, b) -> float:
    """Euclidean 3D distance."""
    return float(np.linalg.norm(segment(a, b)))


def centroid(points: Sequence) -> Vector:
    return np.mean([as_vector(p) for p in points], axis=0)


def is_degenerate(v: Vector, eps: float = 1e-9) -> bool:
    return float(np.linalg.norm(v)) <= eps


def angle_between(v1: Vector, v2: Vector, eps: float = 1e-9) -> float:
    """
    Angle between two vectors in degrees, in [0, 180].
    Returns 0.0 if either vector has zero length.
    """
    n1 = float(np.linalg.norm(v1))
    n2 = float(np.linalg.norm(v2))
    if n1 <= eps or n2 <= eps:
        return 0.0
    cos_val = float(np.dot(v1 / n1, v2 / n2))
    cos_val = max(-1.0, min(1.0, cos_val))
    return math.degrees(math.acos(cos_val))


def angle_at(a, b, c, eps: float = 1e-9) -> float:
    """Angle ABC in degrees (vertex at B)."""
    return angle_between(segment(b, a), segment(b, c), eps)


def cross(v1: Vector, v2: Vector) -> Vector:
    return np.cross(v1, v2)
