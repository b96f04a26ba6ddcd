"""
Offline Training for Fuzzy ARTMAP.

Runs labelled data through an ARTMAP session for a number of epochs,
records per-epoch outcome counts, evaluates on held-out data and writes
checkpoints that bundle the session state with the label classes and the
feature scaler needed to use it later.
"""

import logging
import pickle
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
from sklearn.preprocessing import MinMaxScaler

from ..configs.schema import SystemConfig
from ..core.artmap import FuzzyARTMAP
from ..core.results import ResultKind
from ..data.dataloader import ARTDataModule, one_hot_labels
from ..utils.logging import ExperimentLogger, MetricsLogger
from ..utils.metrics import (
    UNKNOWN_LABEL,
    CategoryAnalyzer,
    classification_metrics,
    confusion,
    per_class_metrics,
)

logger = logging.getLogger(__name__)


@dataclass
class Checkpoint:
    """A trained session plus what is needed to feed it raw features."""

    model: FuzzyARTMAP
    classes: np.ndarray
    scaler: Optional[MinMaxScaler] = None

    def transform(self, features: np.ndarray) -> np.ndarray:
        features = np.asarray(features, dtype=np.float64)
        if self.scaler is None:
            return features
        return self.scaler.transform(features)


def save_checkpoint(
    path: Union[str, Path],
    model: FuzzyARTMAP,
    classes: np.ndarray,
    scaler: Optional[MinMaxScaler] = None,
) -> Path:
    """Pickle session state, classes and scaler to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "wb") as f:
        pickle.dump({
            "model": model.state_dict(),
            "classes": np.asarray(classes).tolist(),
            "scaler": scaler,
        }, f)

    logger.info(f"Saved checkpoint to {path}")
    return path


def load_checkpoint(path: Union[str, Path]) -> Checkpoint:
    """Load a checkpoint written by ``save_checkpoint``."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Checkpoint not found: {path}")

    with open(path, "rb") as f:
        bundle = pickle.load(f)

    model = FuzzyARTMAP.from_state_dict(bundle["model"])
    logger.info(f"Loaded checkpoint from {path}: {model}")
    return Checkpoint(model=model, classes=np.asarray(bundle["classes"]), scaler=bundle.get("scaler"))


def target_class(model: FuzzyARTMAP, classes: np.ndarray, b_index: int) -> Any:
    """Class whose one-hot vector formed target category ``b_index``."""
    prototype = model.get_category(int(b_index), space="target")
    return classes[int(np.argmax(prototype.lower))]


def predict_labels(model: FuzzyARTMAP, classes: np.ndarray, features: np.ndarray) -> np.ndarray:
    """Predicted class per row, ``UNKNOWN_LABEL`` where no association exists."""
    labels = []
    for row in np.asarray(features, dtype=np.float64):
        outcome = model.predict_association(row)
        if outcome.kind == ResultKind.ASSOCIATION:
            labels.append(target_class(model, classes, outcome.b_index))
        else:
            labels.append(UNKNOWN_LABEL)

    if np.asarray(classes).dtype.kind in "iu":
        return np.asarray(labels, dtype=np.int64)
    return np.asarray(labels, dtype=object)


class ARTMAPTrainer:
    """
    Training coordinator for one experiment.

    Owns the session built from ``config.artmap`` and the data module it
    trains on.
    """

    def __init__(
        self,
        config: SystemConfig,
        data_module: ARTDataModule,
        experiment_name: Optional[str] = None,
        metrics_logger: Optional[MetricsLogger] = None,
        experiment_logger: Optional[ExperimentLogger] = None,
    ):
        self.config = config
        self.data_module = data_module
        self.experiment_name = experiment_name or config.experiment_name
        self.metrics_logger = metrics_logger
        self.experiment_logger = experiment_logger

        self.model = FuzzyARTMAP(config.artmap)
        self.history: List[Dict[str, Any]] = []

    def train(self) -> List[Dict[str, Any]]:
        """
        Train for ``training.epochs`` epochs.

        With ``training.stop_when_stable`` the loop ends early after an epoch
        in which every pair succeeded without creating an input category.

        Returns:
            Per-epoch summaries
        """
        if self.data_module.train_features is None:
            self.data_module.setup()

        features = self.data_module.train_features
        targets, _ = one_hot_labels(self.data_module.train_labels, self.data_module.classes)
        training = self.config.training

        logger.info(f"Starting training for {self.experiment_name}: {len(features)} samples")
        step = 0
        for epoch in range(1, training.epochs + 1):
            counts = {kind.value: 0 for kind in (
                ResultKind.TRAIN_SUCCESS,
                ResultKind.MAP_FIELD_MISMATCH,
                ResultKind.CAPACITY_EXHAUSTED,
            )}
            categories_before = self.model.get_category_count()

            for x, t in zip(features, targets):
                outcome = self.model.train(x, t)
                counts[outcome.kind.value] += 1
                step += 1
                if step % training.log_every == 0:
                    logger.info(
                        f"Step {step}: {self.model.get_category_count()} input categories"
                    )

            new_categories = self.model.get_category_count() - categories_before
            summary = {
                "epoch": epoch,
                "input_categories": self.model.get_category_count(),
                "target_categories": self.model.get_category_count("target"),
                "new_categories": new_categories,
                **counts,
            }
            self.history.append(summary)
            self._log_epoch(epoch, step, summary)

            stable = (
                new_categories == 0
                and counts[ResultKind.TRAIN_SUCCESS.value] == len(features)
            )
            if training.stop_when_stable and stable:
                logger.info(f"Training stable after epoch {epoch}")
                break

        logger.info("Training completed")
        return self.history

    def _log_epoch(self, epoch: int, step: int, summary: Dict[str, Any]) -> None:
        logger.info(
            f"Epoch {epoch}: {summary['input_categories']} input categories, "
            f"{summary[ResultKind.MAP_FIELD_MISMATCH.value]} mismatches"
        )
        if self.metrics_logger is not None:
            self.metrics_logger.log_metrics_dict(epoch, step, summary)
        if self.experiment_logger is not None:
            self.experiment_logger.log_epoch_metrics(epoch, summary)

    def evaluate(
        self,
        features: Optional[np.ndarray] = None,
        labels: Optional[np.ndarray] = None,
    ) -> Dict[str, Any]:
        """Classification metrics on the test split (or the given data)."""
        if features is None:
            features = self.data_module.test_features
            labels = self.data_module.test_labels
        return evaluate_model(self.model, self.data_module.classes, features, labels)

    def save_checkpoint(self, path: Optional[Union[str, Path]] = None) -> Path:
        if path is None:
            path = Path(self.config.output_dir) / f"{self.experiment_name}.pkl"
        return save_checkpoint(path, self.model, self.data_module.classes, self.data_module.scaler)


def evaluate_model(
    model: FuzzyARTMAP,
    classes: np.ndarray,
    features: np.ndarray,
    labels: np.ndarray,
) -> Dict[str, Any]:
    """
    Evaluate a session on labelled, already scaled features.

    Returns:
        Dictionary with overall metrics, per-class metrics, the confusion
        matrix and category statistics
    """
    if features is None or len(features) == 0:
        logger.warning("No evaluation data")
        return {"overall_metrics": {}, "num_samples": 0}

    # Score on class positions so unknown predictions mix with any label type
    lookup = {label: position for position, label in enumerate(np.asarray(classes).tolist())}
    predictions = predict_labels(model, classes, features)
    y_true = np.array([lookup.get(label, UNKNOWN_LABEL) for label in np.asarray(labels).tolist()])
    y_pred = np.array([lookup.get(label, UNKNOWN_LABEL) for label in predictions.tolist()])

    per_class = {
        (str(classes[int(position)]) if int(position) >= 0 else "unknown"): scores
        for position, scores in per_class_metrics(y_true, y_pred).items()
    }
    return {
        "num_samples": int(len(y_true)),
        "overall_metrics": classification_metrics(y_true, y_pred),
        "per_class_metrics": per_class,
        "confusion_matrix": confusion(y_true, y_pred).tolist(),
        "category_statistics": CategoryAnalyzer(
            model.input_module.get_categories()
        ).compute_statistics(),
    }
