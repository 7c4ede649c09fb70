"""
Labeled numeric-sequence datasets.
"""

import copy
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

import numpy as np


@dataclass
class Case:
    """A single numeric sequence and its class index (None when the label is missing)."""
    series: np.ndarray
    label: Optional[int] = None

    def __post_init__(self):
        self.series = np.asarray(self.series, dtype=float)

    @property
    def has_label(self) -> bool:
        return self.label is not None


def extract_series(case: Case) -> np.ndarray:
    """The numeric values of a case, without its label or any other attribute."""
    return case.series


class Dataset:
    """
    An ordered collection of cases sharing a set of class labels.

    Experiments copy datasets before handing them to a component, so the same
    instance can back several experiments.
    """

    def __init__(self, cases: Sequence[Case], class_labels: Sequence[str], name: str = "dataset"):
        self.name = name
        self.class_labels = tuple(str(label) for label in class_labels)
        self._cases: List[Case] = list(cases)
        for case in self._cases:
            if case.label is not None and not 0 <= case.label < len(self.class_labels):
                raise ValueError(
                    f"Label {case.label} out of range for {len(self.class_labels)} classes in '{name}'"
                )

    @classmethod
    def from_arrays(cls, series: Sequence[Sequence[float]], labels: Sequence[Optional[int]],
                    class_labels: Optional[Sequence[str]] = None, name: str = "dataset") -> 'Dataset':
        if len(series) != len(labels):
            raise ValueError(f"Got {len(series)} series but {len(labels)} labels")
        if class_labels is None:
            known = [label for label in labels if label is not None]
            class_labels = [str(i) for i in range(max(known) + 1)] if known else []
        cases = [Case(s, None if label is None else int(label)) for s, label in zip(series, labels)]
        return cls(cases, class_labels, name)

    @property
    def num_classes(self) -> int:
        return len(self.class_labels)

    def labels(self) -> List[Optional[int]]:
        return [case.label for case in self._cases]

    def copy(self) -> 'Dataset':
        return Dataset(copy.deepcopy(self._cases), self.class_labels, self.name)

    def with_labels_hidden(self) -> 'Dataset':
        """A copy with every label set to missing."""
        hidden = self.copy()
        for case in hidden._cases:
            case.label = None
        return hidden

    def __len__(self) -> int:
        return len(self._cases)

    def __iter__(self) -> Iterator[Case]:
        return iter(self._cases)

    def __getitem__(self, index: int) -> Case:
        return self._cases[index]

    def __repr__(self) -> str:
        return f"Dataset(name='{self.name}', cases={len(self)}, classes={self.num_classes})"
