"""
Metrics and Evaluation Utilities for Adaptive Resonance.

Classification scores for ARTMAP predictions, a retention measure for
incremental training, and summary statistics over learned categories.
"""

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    confusion_matrix,
    precision_recall_fscore_support,
)

from ..core.category_store import CategorySnapshot

logger = logging.getLogger(__name__)

# Label used for inputs the model could not classify
UNKNOWN_LABEL = -1


def classification_metrics(
    y_true: Sequence,
    y_pred: Sequence,
    average: str = "macro",
) -> Dict[str, float]:
    """
    Accuracy, precision, recall and F1 of ARTMAP predictions.

    Predictions equal to ``UNKNOWN_LABEL`` count as errors; ``coverage`` is
    the fraction of inputs that received any prediction.

    Args:
        y_true: Ground truth labels
        y_pred: Predicted labels
        average: Averaging strategy ('macro', 'micro', 'weighted')

    Returns:
        Dictionary with accuracy, precision, recall, f1 and coverage
    """
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    if y_true.shape != y_pred.shape:
        raise ValueError(f"Shape mismatch: {y_true.shape} vs {y_pred.shape}")
    if y_true.size == 0:
        return {"accuracy": 0.0, "precision": 0.0, "recall": 0.0, "f1": 0.0, "coverage": 0.0}

    labels = np.unique(y_true)
    precision, recall, f1, _ = precision_recall_fscore_support(
        y_true, y_pred, labels=labels, average=average, zero_division=0
    )
    coverage = np.mean([label != UNKNOWN_LABEL for label in y_pred.tolist()])

    return {
        "accuracy": float(accuracy_score(y_true, y_pred)),
        "precision": float(precision),
        "recall": float(recall),
        "f1": float(f1),
        "coverage": float(coverage),
    }


def per_class_metrics(y_true: Sequence, y_pred: Sequence) -> Dict[str, Dict[str, float]]:
    """Precision, recall, F1 and support for each true label."""
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    labels = np.unique(y_true)
    precision, recall, f1, support = precision_recall_fscore_support(
        y_true, y_pred, labels=labels, average=None, zero_division=0
    )
    return {
        str(label): {
            "precision": float(p),
            "recall": float(r),
            "f1": float(f),
            "support": int(s),
        }
        for label, p, r, f, s in zip(labels, precision, recall, f1, support)
    }


def confusion(y_true: Sequence, y_pred: Sequence, labels: Optional[Sequence] = None) -> np.ndarray:
    """Confusion matrix over ``labels`` (defaults to the true labels)."""
    if labels is None:
        labels = np.unique(np.asarray(y_true))
    return confusion_matrix(y_true, y_pred, labels=labels)


def compute_forgetting(accuracies: List[float]) -> float:
    """
    Average drop from each earlier accuracy to the latest one.

    Args:
        accuracies: Accuracy on a fixed evaluation set after each training
            stage, oldest first

    Returns:
        Average forgetting (0.0 means nothing was lost)
    """
    if len(accuracies) <= 1:
        return 0.0

    final = accuracies[-1]
    drops = [max(0.0, earlier - final) for earlier in accuracies[:-1] if earlier > 0]
    return float(np.mean(drops)) if drops else 0.0


def compute_retention(before: Sequence, after: Sequence) -> float:
    """
    Fraction of held-out predictions left unchanged by further training.

    Args:
        before: Predictions on a held-out set before further training
        after: Predictions on the same set afterwards

    Returns:
        Retention in [0, 1]; 1.0 when ``before`` is empty
    """
    before = np.asarray(before)
    after = np.asarray(after)
    if before.shape != after.shape:
        raise ValueError(f"Shape mismatch: {before.shape} vs {after.shape}")
    if before.size == 0:
        return 1.0
    return float(np.mean(before == after))


class CategoryAnalyzer:
    """Statistics over a module's learned categories."""

    def __init__(self, categories: Sequence[CategorySnapshot]):
        self.categories = list(categories)

    def compute_statistics(self) -> Dict[str, float]:
        if not self.categories:
            return {"num_categories": 0}

        counts = [c.usage_count for c in self.categories]
        sizes = [c.size for c in self.categories]
        return {
            "num_categories": len(self.categories),
            "mean_usage": float(np.mean(counts)),
            "usage_entropy": self._compute_entropy(counts),
            "usage_gini": self._compute_gini_coefficient(counts),
            "mean_box_size": float(np.mean(sizes)),
            "max_box_size": float(np.max(sizes)),
        }

    @staticmethod
    def _compute_entropy(counts: List[int]) -> float:
        """Entropy (bits) of category usage."""
        total = sum(counts)
        if not counts or total == 0:
            return 0.0

        probs = [c / total for c in counts if c > 0]
        return float(-sum(p * np.log2(p) for p in probs))

    @staticmethod
    def _compute_gini_coefficient(counts: List[int]) -> float:
        """Gini coefficient of category usage inequality."""
        if not counts:
            return 0.0

        sorted_counts = sorted(counts)
        n = len(sorted_counts)
        cumsum = np.cumsum(sorted_counts)
        if cumsum[-1] <= 0:
            return 0.0
        return float((n + 1 - 2 * np.sum(cumsum) / cumsum[-1]) / n)
