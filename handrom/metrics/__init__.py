"""
Session calculators, one per assessment protocol.
"""

from .base import Calculator
from .tam import TamCalculator
from .kapandji import KapandjiCalculator
from .wrist_flexion import WristFlexionCalculator
from .wrist_deviation import WristDeviationCalculator

__all__ = [
    'Calculator',
    'TamCalculator',
    'KapandjiCalculator',
    'WristFlexionCalculator',
    'WristDeviationCalculator',
]
