"""
Data Loading for Adaptive Resonance.

Loads labelled tabular data from CSV files with pandas, scales features
into [0, 1] (the only range the learners accept) and one-hot encodes labels
for the target space of an ARTMAP session. Synthetic blob data is provided
for demos and tests.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from sklearn.datasets import make_blobs
from sklearn.model_selection import train_test_split
from sklearn.preprocessing import MinMaxScaler

from ..configs.schema import DataConfig, SystemConfig

logger = logging.getLogger(__name__)


def load_csv(
    path: Union[str, Path],
    label_column: Optional[str] = "label",
    feature_columns: Optional[List[str]] = None,
) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Load features (and labels, if present) from a CSV file.

    Args:
        path: CSV file path
        label_column: Name of the label column; None for unlabelled data
        feature_columns: Feature columns to use; defaults to every numeric
            column except the label

    Returns:
        Tuple of (features [N, D] float64, labels [N] or None)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    frame = pd.read_csv(path)
    if frame.empty:
        raise ValueError(f"Data file is empty: {path}")

    labels = None
    if label_column and label_column in frame.columns:
        labels = frame[label_column].to_numpy()

    if feature_columns is None:
        feature_columns = [
            column for column in frame.select_dtypes(include="number").columns
            if column != label_column
        ]
    missing = [column for column in feature_columns if column not in frame.columns]
    if missing:
        raise ValueError(f"Feature columns not found in {path}: {missing}")
    if not feature_columns:
        raise ValueError(f"No numeric feature columns in {path}")

    features = frame[feature_columns].to_numpy(dtype=np.float64)
    if np.isnan(features).any():
        raise ValueError(f"Missing feature values in {path}")

    logger.info(f"Loaded {len(features)} samples with {features.shape[1]} features from {path}")
    return features, labels


def fit_scaler(features: np.ndarray) -> MinMaxScaler:
    """Min-max scaler fitted to ``features``; transforms are clipped to [0, 1]."""
    return MinMaxScaler(feature_range=(0.0, 1.0), clip=True).fit(features)


def normalize(features: np.ndarray, scaler: Optional[MinMaxScaler] = None) -> np.ndarray:
    """Scale features into [0, 1], fitting a new scaler if none is given."""
    scaler = scaler or fit_scaler(features)
    return scaler.transform(features)


def one_hot_labels(
    labels: Sequence, classes: Optional[Sequence] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    One-hot encode labels.

    Args:
        labels: Label per sample
        classes: Known classes in column order; defaults to the sorted
            unique labels

    Returns:
        Tuple of (one-hot matrix [N, C], classes [C])
    """
    labels = np.asarray(labels)
    classes = np.unique(labels) if classes is None else np.asarray(classes)

    lookup = {label: column for column, label in enumerate(classes.tolist())}
    unknown = set(labels.tolist()) - set(lookup)
    if unknown:
        raise ValueError(f"Labels not among known classes: {sorted(map(str, unknown))}")

    encoded = np.zeros((len(labels), len(classes)), dtype=np.float64)
    encoded[np.arange(len(labels)), [lookup[label] for label in labels.tolist()]] = 1.0
    return encoded, classes


def make_synthetic(
    n_samples: int = 300,
    n_features: int = 2,
    centers: int = 3,
    cluster_std: float = 0.5,
    seed: int = 42,
) -> Tuple[np.ndarray, np.ndarray]:
    """Gaussian blobs scaled into [0, 1], with integer labels."""
    features, labels = make_blobs(
        n_samples=n_samples,
        n_features=n_features,
        centers=centers,
        cluster_std=cluster_std,
        random_state=seed,
    )
    return normalize(features), labels


class ARTDataModule:
    """
    Train/test data for one experiment.

    Uses ``data.test_path`` when given, otherwise splits ``data.train_path``
    with ``data.test_size``. The scaler is fitted on the training split only.
    """

    def __init__(self, config: SystemConfig):
        self.config = config
        self.data_config: DataConfig = config.data

        self.scaler: Optional[MinMaxScaler] = None
        self.classes: Optional[np.ndarray] = None
        self.train_features: Optional[np.ndarray] = None
        self.train_labels: Optional[np.ndarray] = None
        self.test_features: Optional[np.ndarray] = None
        self.test_labels: Optional[np.ndarray] = None

    def setup(self) -> None:
        """Load, split and scale the data."""
        if self.data_config.train_path is None:
            raise ValueError("data.train_path is required")

        features, labels = self._load(self.data_config.train_path)
        if labels is None:
            raise ValueError(
                f"Label column '{self.data_config.label_column}' not found in "
                f"{self.data_config.train_path}"
            )

        if self.data_config.test_path is not None:
            train_x, train_y = features, labels
            test_x, test_y = self._load(self.data_config.test_path)
        elif self.data_config.test_size > 0:
            train_x, test_x, train_y, test_y = train_test_split(
                features,
                labels,
                test_size=self.data_config.test_size,
                shuffle=self.data_config.shuffle,
                random_state=self.config.seed,
            )
        else:
            train_x, train_y = features, labels
            test_x, test_y = features[:0], labels[:0]

        if self.data_config.normalize:
            self.scaler = fit_scaler(train_x)
            train_x = self.scaler.transform(train_x)
            if len(test_x):
                test_x = self.scaler.transform(test_x)

        self.train_features, self.train_labels = train_x, train_y
        self.test_features, self.test_labels = test_x, test_y
        self.classes = np.unique(train_y)

        logger.info(
            f"Data ready: {len(train_x)} train / {len(test_x)} test samples, "
            f"{len(self.classes)} classes"
        )

    def _load(self, path: Path) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        return load_csv(
            path,
            label_column=self.data_config.label_column,
            feature_columns=self.data_config.feature_columns,
        )

    def transform(self, features: np.ndarray) -> np.ndarray:
        """Apply the training scaler (if any) to new features."""
        if self.scaler is None:
            return np.asarray(features, dtype=np.float64)
        return self.scaler.transform(features)

    def get_dataset_info(self) -> Dict[str, Any]:
        return {
            "train_size": 0 if self.train_features is None else len(self.train_features),
            "test_size": 0 if self.test_features is None else len(self.test_features),
            "num_features": None if self.train_features is None else self.train_features.shape[1],
            "classes": [] if self.classes is None else self.classes.tolist(),
            "normalized": self.scaler is not None,
        }
