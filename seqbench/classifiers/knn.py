"""
k-nearest-neighbours classification with a pluggable distance measure.
"""

import bisect
import math
import time
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..data.dataset import Case, Dataset
from ..distance.lockstep import EuclideanDistance
from ..distance.measure import DistanceMeasure
from ..experiment.capabilities import Randomizable, TrainEstimateable
from ..experiment.results import ExperimentResults
from ..params.handler import ParameterHandler, set_param, set_params
from ..params.parameter import ParameterSet
from .base import ClassifierBase


class KNearestNeighbours(ClassifierBase, ParameterHandler, Randomizable, TrainEstimateable):
    """
    Classifies a case by the labels of its k nearest training cases.

    The distance to the current k-th nearest neighbour is passed as the
    cutoff to the distance measure, so hopeless candidates are abandoned
    early. Training cases are scanned in an order shuffled with the seed,
    which decides between equally distant neighbours.

    Parameters:
        k: number of neighbours (``-k``)
        distance_measure: nested parameters of the distance measure
        estimate_own_performance: leave-one-out estimate during fit()
    """

    def __init__(self, k: int = 1, distance_measure: Optional[DistanceMeasure] = None,
                 instance_name: str = "knn"):
        super().__init__(instance_name)
        self._k = 1
        self.set_k(k)
        self._distance_measure = distance_measure or EuclideanDistance()
        self._estimate_own_performance = False
        self._seed: Optional[int] = None
        self._rng = np.random.default_rng()
        self._train_cases: List[Case] = []
        self._train_results: Optional[ExperimentResults] = None

    # Parameters

    @property
    def k(self) -> int:
        return self._k

    def set_k(self, k: int) -> None:
        if k < 1:
            raise ValueError(f"k must be at least 1, got {k}")
        self._k = int(k)

    @property
    def distance_measure(self) -> DistanceMeasure:
        return self._distance_measure

    def set_distance_measure(self, distance_measure: DistanceMeasure) -> None:
        self._distance_measure = distance_measure

    def get_params(self) -> ParameterSet:
        return (ParameterSet()
                .put('k', self._k)
                .put('distance_measure', self._distance_measure.get_params())
                .put('estimate_own_performance', self._estimate_own_performance))

    def set_params(self, params: ParameterSet) -> None:
        unknown = set(params.names()) - {'k', 'distance_measure', 'estimate_own_performance'}
        if unknown:
            self.logger.warning(f"{self.name}: ignoring unknown parameters {sorted(unknown)}")
        set_param(params, 'k', self.set_k, int)
        set_param(params, 'distance_measure',
                  lambda nested: set_params(self._distance_measure, nested), ParameterSet)
        set_param(params, 'estimate_own_performance', self.set_estimate_own_performance, bool)

    # Seeding

    def set_seed(self, seed: int) -> None:
        self._seed = seed
        self._rng = np.random.default_rng(seed)

    def get_seed(self) -> Optional[int]:
        return self._seed

    # Train estimate

    def set_estimate_own_performance(self, estimate: bool) -> None:
        self._estimate_own_performance = bool(estimate)

    def get_estimate_own_performance(self) -> bool:
        return self._estimate_own_performance

    def get_train_results(self) -> Optional[ExperimentResults]:
        return self._train_results

    # Classification

    def _fit(self, dataset: Dataset) -> None:
        order = self._rng.permutation(len(dataset))
        self._train_cases = [dataset[int(i)] for i in order]
        self._train_results = None
        if self._estimate_own_performance:
            self._train_results = self._leave_one_out()

    def _predict_proba(self, case: Case) -> np.ndarray:
        return self._vote(self._nearest(case, self._train_cases))

    def _nearest(self, case: Case, candidates: Sequence[Case]) -> List[Tuple[float, int]]:
        neighbours: List[Tuple[float, int]] = []
        for candidate in candidates:
            cutoff = neighbours[-1][0] if len(neighbours) == self._k else math.inf
            d = self._distance_measure.case_distance(candidate, case, cutoff)
            if d < cutoff:
                # keys only compare distances, earlier candidates win ties
                position = bisect.bisect_right([n[0] for n in neighbours], d)
                neighbours.insert(position, (d, candidate.label))
                del neighbours[self._k:]
        return neighbours

    def _vote(self, neighbours: List[Tuple[float, int]]) -> np.ndarray:
        if not neighbours:
            raise ValueError(f"{self.name}: no neighbour at a finite distance")
        distribution = np.zeros(self.num_classes)
        for _, label in neighbours:
            distribution[label] += 1
        return distribution / distribution.sum()

    def _leave_one_out(self) -> ExperimentResults:
        results = ExperimentResults()
        for i, case in enumerate(self._train_cases):
            timestamp = time.perf_counter_ns()
            others = self._train_cases[:i] + self._train_cases[i + 1:]
            if others:
                distribution = self._vote(self._nearest(case, others))
            else:
                distribution = np.full(self.num_classes, 1.0 / self.num_classes)
            predicted = int(np.argmax(distribution))
            results.add_prediction(case.label, distribution, predicted,
                                   time.perf_counter_ns() - timestamp, "leave-one-out")
        self.logger.debug(f"{self.name}: leave-one-out accuracy {results.accuracy():.4f}")
        return results
