"""
Dataset types and loaders.
"""

from .dataset import Case, Dataset, extract_series
from .csv_loader import load_csv_dataset, load_train_test

__all__ = [
    'Case',
    'Dataset',
    'extract_series',
    'load_csv_dataset',
    'load_train_test',
]
