"""
Classifiers runnable by an Experiment.
"""

from .base import ClassifierBase
from .knn import KNearestNeighbours

__all__ = [
    'ClassifierBase',
    'KNearestNeighbours',
]
