"""
Distance measure contract for numeric sequences.
"""

import math
from abc import abstractmethod
from typing import Sequence

import numpy as np

from ..data.dataset import Case, extract_series
from ..params.handler import ParameterHandler


class DistanceMeasure(ParameterHandler):
    """
    Base class for distances between two numeric sequences.

    distance() always passes the longer sequence first, so implementations
    of _measure() may rely on ``len(longer) >= len(shorter)``.

    A finite cutoff lets an implementation stop as soon as its partial
    distance exceeds the cutoff. Partial distances must never decrease as the
    computation proceeds, and an abandoned computation returns some value
    >= cutoff, which callers only use to reject the candidate.

    Measures never normalise their inputs. Any scaling a measure needs is
    its own responsibility.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def _measure(self, longer: np.ndarray, shorter: np.ndarray, cutoff: float) -> float:
        """
        Args:
            longer: the longer of the two sequences (or either, if of equal length)
            shorter: the other sequence
            cutoff: abandon once the partial distance exceeds this value
        """
        pass

    def distance(self, series_a: Sequence[float], series_b: Sequence[float], cutoff: float = math.inf) -> float:
        series_a = np.asarray(series_a, dtype=float)
        series_b = np.asarray(series_b, dtype=float)
        if len(series_a) < len(series_b):
            series_a, series_b = series_b, series_a
        return self._measure(series_a, series_b, cutoff)

    def case_distance(self, case_a: Case, case_b: Case, cutoff: float = math.inf) -> float:
        """Distance between the series of two cases, ignoring their labels."""
        return self.distance(extract_series(case_a), extract_series(case_b), cutoff)

    def __call__(self, series_a: Sequence[float], series_b: Sequence[float], cutoff: float = math.inf) -> float:
        return self.distance(series_a, series_b, cutoff)

    def __repr__(self) -> str:
        options = ' '.join(self.get_options())
        return f"{self.name}({options})" if options else f"{self.name}()"
