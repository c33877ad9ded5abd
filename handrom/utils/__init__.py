"""
Geometry helpers and skeletal constants
"""

from .geometry import angle_between, cross, distance, segment

__all__ = [
    'angle_between',
    'cross',
    'distance',
    'segment',
]
