"""
Base classifier class for components run by an Experiment.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np

from ..data.dataset import Case, Dataset
from ..experiment.capabilities import Loggable


class ClassifierBase(Loggable, ABC):
    """
    Base class for classifiers.

    Subclasses implement _fit() and _predict_proba(). The base class checks
    the training data, remembers the class labels and refuses predictions
    before fit() has been called. Each instance logs to
    ``component.<instance_name>`` so an experiment can adjust its level.
    """

    def __init__(self, instance_name: Optional[str] = None):
        self.instance_name = instance_name or type(self).__name__
        self._logger = logging.getLogger(f"component.{self.instance_name}")
        self._fitted = False
        self.class_labels: Tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.instance_name

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def fitted(self) -> bool:
        return self._fitted

    @property
    def num_classes(self) -> int:
        return len(self.class_labels)

    def fit(self, dataset: Dataset) -> None:
        if len(dataset) == 0:
            raise ValueError(f"{self.name}: cannot fit on an empty dataset")
        if any(label is None for label in dataset.labels()):
            raise ValueError(f"{self.name}: training data contains cases without a label")
        for i, case in enumerate(dataset):
            self._check_finite(case, f"training case {i}")
        self._fitted = False
        self.class_labels = dataset.class_labels
        self._fit(dataset)
        self._fitted = True
        self.logger.info(f"Classifier {self.name} fitted on {len(dataset)} cases, {self.num_classes} classes")

    def predict_proba(self, case: Case) -> np.ndarray:
        if not self._fitted:
            raise RuntimeError(f"Classifier {self.name} must be fitted before predicting")
        self._check_finite(case, "case")
        return self._predict_proba(case)

    def _check_finite(self, case: Case, what: str) -> None:
        if not np.all(np.isfinite(case.series)):
            raise ValueError(f"{self.name}: {what} contains missing or infinite values")

    def predict(self, case: Case) -> int:
        return int(np.argmax(self.predict_proba(case)))

    @abstractmethod
    def _fit(self, dataset: Dataset) -> None:
        pass

    @abstractmethod
    def _predict_proba(self, case: Case) -> np.ndarray:
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.instance_name}', fitted={self._fitted})"
