"""
Distance measures between numeric sequences.
"""

from .measure import DistanceMeasure
from .lockstep import EuclideanDistance, LpDistance, ManhattanDistance

__all__ = [
    'DistanceMeasure',
    'LpDistance',
    'EuclideanDistance',
    'ManhattanDistance',
]
