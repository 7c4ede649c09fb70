# seqbench/data/csv_loader.py
import logging
from pathlib import Path
from typing import Optional, Sequence, Tuple

import pandas as pd

from ..core.exceptions import ConfigurationError
from .dataset import Case, Dataset

logger = logging.getLogger(__name__)


def _read_csv(csv_file_path: str, label_column: str) -> pd.DataFrame:
    try:
        df_loaded = pd.read_csv(csv_file_path)
    except FileNotFoundError as e:
        logger.error(f"CSV file not found: {csv_file_path}")
        raise ConfigurationError(f"Dataset file not found: {csv_file_path}") from e
    except pd.errors.ParserError as e:
        logger.error(f"Could not parse CSV {csv_file_path}: {e}")
        raise ConfigurationError(f"Could not parse dataset file {csv_file_path}: {e}") from e

    if label_column not in df_loaded.columns:
        raise ConfigurationError(f"Label column '{label_column}' not found in '{csv_file_path}'.")
    logger.info(f"Loaded CSV file: {csv_file_path}. Shape: {df_loaded.shape}")
    return df_loaded


def _label_key(raw_label) -> str:
    # pandas reads an integer label column as float once a label is missing
    if isinstance(raw_label, float) and raw_label.is_integer():
        return str(int(raw_label))
    return str(raw_label)


def load_csv_dataset(csv_file_path: str,
                     label_column: str = "label",
                     class_labels: Optional[Sequence[str]] = None,
                     name: Optional[str] = None,
                     max_cases: Optional[int] = None) -> Dataset:
    """
    Reads one case per row. Every numeric column other than the label
    column, in file order, forms the series.

    Labels are mapped to indexes of ``class_labels``; when omitted the sorted
    distinct labels of the file are used. Rows with an empty label become
    cases with a missing label.
    """
    df_loaded = _read_csv(csv_file_path, label_column)
    if max_cases is not None and len(df_loaded) > max_cases:
        logger.info(f"Using first {max_cases} cases of {len(df_loaded)} from '{csv_file_path}'.")
        df_loaded = df_loaded.head(max_cases)

    raw_labels = df_loaded[label_column]
    if class_labels is None:
        class_labels = sorted(set(raw_labels.dropna().map(_label_key)))
    label_index = {label: i for i, label in enumerate(class_labels)}

    features = df_loaded.drop(columns=[label_column]).select_dtypes(include='number')
    dropped = set(df_loaded.columns) - set(features.columns) - {label_column}
    if dropped:
        logger.warning(f"Ignoring non-numeric columns in '{csv_file_path}': {sorted(dropped)}")

    cases = []
    for raw_label, values in zip(raw_labels, features.to_numpy(dtype=float)):
        if pd.isna(raw_label):
            cases.append(Case(values, None))
            continue
        key = _label_key(raw_label)
        if key not in label_index:
            raise ConfigurationError(f"Unknown class label '{key}' in '{csv_file_path}'.")
        cases.append(Case(values, label_index[key]))

    dataset_name = name or Path(csv_file_path).stem
    logger.debug(f"Dataset '{dataset_name}': {len(cases)} cases, {len(class_labels)} classes")
    return Dataset(cases, class_labels, dataset_name)


def load_train_test(train_path: str, test_path: str, label_column: str = "label",
                    name: Optional[str] = None, max_cases: Optional[int] = None) -> Tuple[Dataset, Dataset]:
    """Loads a train/test pair that shares one label-to-index mapping, optionally truncated to max_cases each."""
    labels = set()
    for path in (train_path, test_path):
        labels.update(_read_csv(path, label_column)[label_column].dropna().map(_label_key))
    class_labels = sorted(labels)
    train = load_csv_dataset(train_path, label_column, class_labels, name, max_cases)
    test = load_csv_dataset(test_path, label_column, class_labels, name, max_cases)
    return train, test
