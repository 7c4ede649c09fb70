"""
ExperimentResults - collects per-case predictions from a train estimate or a test pass.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


@dataclass
class PredictionRecord:
    """Outcome of predicting one case."""
    true_label: Optional[int]
    distribution: np.ndarray
    predicted_label: int
    latency_nanos: int
    note: str = ""

    @property
    def correct(self) -> bool:
        return self.true_label is not None and self.true_label == self.predicted_label


class ExperimentResults:
    """
    Prediction records plus descriptive details of the component and dataset
    that produced them.

    Records are kept in the order they were added, which for a test pass is
    the order of the test dataset.
    """

    def __init__(self):
        self._records: List[PredictionRecord] = []
        self.details: Dict[str, Any] = {}

    def add_prediction(self, true_label: Optional[int], distribution: Sequence[float], predicted_label: int,
                       latency_nanos: int, note: str = "") -> None:
        self._records.append(PredictionRecord(
            true_label=None if true_label is None else int(true_label),
            distribution=np.asarray(distribution, dtype=float),
            predicted_label=int(predicted_label),
            latency_nanos=int(latency_nanos),
            note=note or "",
        ))

    def set_details(self, component: Any, dataset: Any) -> None:
        """Record which component and dataset the predictions describe."""
        get_options = getattr(component, 'get_options', None)
        try:
            options = list(get_options()) if callable(get_options) else []
        except Exception as e:
            logger.debug(f"Could not read options of {type(component).__name__}: {e}")
            options = []
        self.details = {
            'component': getattr(component, 'name', type(component).__name__),
            'component_class': type(component).__name__,
            'component_options': options,
            'dataset': getattr(dataset, 'name', None),
            'num_cases': len(dataset) if dataset is not None else 0,
            'class_labels': list(getattr(dataset, 'class_labels', [])),
            'recorded_at': datetime.now().isoformat(),
        }

    @property
    def predictions(self) -> List[PredictionRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def accuracy(self) -> float:
        labelled = [r for r in self._records if r.true_label is not None]
        if not labelled:
            return float('nan')
        return sum(r.correct for r in labelled) / len(labelled)

    def mean_latency_nanos(self) -> float:
        if not self._records:
            return float('nan')
        return float(np.mean([r.latency_nanos for r in self._records]))

    def summary(self) -> str:
        return (
            f"component={self.details.get('component')} dataset={self.details.get('dataset')} "
            f"cases={len(self)} accuracy={self.accuracy():.4f} "
            f"mean_latency_ms={self.mean_latency_nanos() / 1e6:.3f}"
        )

    def to_dataframe(self) -> pd.DataFrame:
        rows = []
        for r in self._records:
            row = {
                'true_label': r.true_label,
                'predicted_label': r.predicted_label,
                'latency_nanos': r.latency_nanos,
                'note': r.note,
            }
            for i, p in enumerate(r.distribution):
                row[f'prob_{i}'] = p
            rows.append(row)
        return pd.DataFrame(rows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'details': self.details,
            'accuracy': self.accuracy(),
            'predictions': [
                {
                    'true_label': r.true_label,
                    'distribution': r.distribution.tolist(),
                    'predicted_label': r.predicted_label,
                    'latency_nanos': r.latency_nanos,
                    'note': r.note,
                }
                for r in self._records
            ],
        }

    def save_json(self, path: str) -> Path:
        filepath = Path(path)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)
        logger.info(f"Saved results to {filepath}")
        return filepath
