"""
Lock-step (point-to-point) distance measures.
"""

import math

import numpy as np

from ..params.handler import set_param
from ..params.parameter import ParameterSet
from .measure import DistanceMeasure


class LpDistance(DistanceMeasure):
    """
    Minkowski distance of order p between two sequences.

    Sequences of unequal length are compared over the length of the shorter
    one. Differences are accumulated block by block so that a finite cutoff
    can end the computation early.
    """

    block_size = 32

    def __init__(self, p: float = 2.0):
        self._p = 2.0
        self.set_p(p)

    @property
    def p(self) -> float:
        return self._p

    def set_p(self, p: float) -> None:
        if p < 1:
            raise ValueError(f"p must be >= 1, got {p}")
        self._p = float(p)

    def get_params(self) -> ParameterSet:
        return ParameterSet().put('p', self._p)

    def set_params(self, params: ParameterSet) -> None:
        set_param(params, 'p', self.set_p, float)

    def _measure(self, longer: np.ndarray, shorter: np.ndarray, cutoff: float) -> float:
        length = len(shorter)
        p = self._p
        if math.isinf(cutoff):
            total = float(np.sum(np.abs(longer[:length] - shorter) ** p))
            return total ** (1.0 / p)

        threshold = cutoff ** p if cutoff > 0 else -1.0
        total = 0.0
        for start in range(0, length, self.block_size):
            end = min(start + self.block_size, length)
            total += float(np.sum(np.abs(longer[start:end] - shorter[start:end]) ** p))
            if total > threshold:
                return max(total ** (1.0 / p), cutoff)
        return total ** (1.0 / p)


class EuclideanDistance(LpDistance):

    def __init__(self):
        super().__init__(p=2.0)


class ManhattanDistance(LpDistance):

    def __init__(self):
        super().__init__(p=1.0)
