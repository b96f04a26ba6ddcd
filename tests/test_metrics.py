"""
Tests for the evaluation metrics.
"""

import pytest

from adaptive_resonance.core.art import FuzzyART
from adaptive_resonance.utils.metrics import (
    UNKNOWN_LABEL,
    CategoryAnalyzer,
    classification_metrics,
    compute_forgetting,
    compute_retention,
    confusion,
    per_class_metrics,
)


class TestClassificationMetrics:
    """Tests for classification scores."""

    def test_unknown_predictions_count_as_errors(self):
        metrics = classification_metrics([0, 0, 1, 1], [0, UNKNOWN_LABEL, 1, 1])

        assert metrics["accuracy"] == pytest.approx(0.75)
        assert metrics["coverage"] == pytest.approx(0.75)
        assert metrics["precision"] == pytest.approx(1.0)
        assert metrics["recall"] == pytest.approx(0.75)

    def test_perfect(self):
        metrics = classification_metrics(["a", "b"], ["a", "b"])
        assert metrics == pytest.approx(
            {"accuracy": 1.0, "precision": 1.0, "recall": 1.0, "f1": 1.0, "coverage": 1.0}
        )

    def test_empty(self):
        assert classification_metrics([], [])["accuracy"] == 0.0

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            classification_metrics([0, 1], [0])

    def test_per_class(self):
        result = per_class_metrics([0, 0, 1], [0, 1, 1])

        assert set(result) == {"0", "1"}
        assert result["0"]["recall"] == pytest.approx(0.5)
        assert result["1"]["precision"] == pytest.approx(0.5)
        assert result["0"]["support"] == 2

    def test_confusion(self):
        matrix = confusion([0, 0, 1], [0, 1, 1])
        assert matrix.tolist() == [[1, 1], [0, 1]]


class TestRetention:
    """Tests for forgetting and retention."""

    def test_forgetting(self):
        assert compute_forgetting([0.9, 0.8, 0.7]) == pytest.approx(0.15)
        assert compute_forgetting([0.5, 0.9]) == 0.0
        assert compute_forgetting([0.9]) == 0.0

    def test_retention(self):
        assert compute_retention([1, 2, 3], [1, 2, 4]) == pytest.approx(2 / 3)
        assert compute_retention([], []) == 1.0

    def test_retention_shape_mismatch(self):
        with pytest.raises(ValueError):
            compute_retention([1, 2], [1])


class TestCategoryAnalyzer:
    """Tests for CategoryAnalyzer."""

    def test_statistics(self):
        art = FuzzyART(vigilance=0.75)
        art.learn([0.2, 0.2])
        art.learn([0.3, 0.2])
        art.learn([0.9, 0.9])

        stats = CategoryAnalyzer(art.get_categories()).compute_statistics()

        assert stats["num_categories"] == 2
        assert stats["mean_usage"] == pytest.approx(1.5)
        assert stats["max_box_size"] == pytest.approx(0.1)
        assert stats["mean_box_size"] == pytest.approx(0.05)
        assert 0.0 < stats["usage_entropy"] < 1.0
        assert stats["usage_gini"] > 0.0

    def test_uniform_usage(self):
        art = FuzzyART(vigilance=0.9)
        art.learn([0.0])
        art.learn([1.0])

        stats = CategoryAnalyzer(art.get_categories()).compute_statistics()

        assert stats["usage_entropy"] == pytest.approx(1.0)
        assert stats["usage_gini"] == pytest.approx(0.0)

    def test_no_categories(self):
        assert CategoryAnalyzer([]).compute_statistics() == {"num_categories": 0}
