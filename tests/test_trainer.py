"""
Tests for the training loop, checkpoints and the logging helpers.
"""

import numpy as np
import pandas as pd
import pytest

from adaptive_resonance.configs.schema import ARTConfig, ARTMAPConfig, SystemConfig
from adaptive_resonance.core.artmap import FuzzyARTMAP
from adaptive_resonance.data.dataloader import ARTDataModule
from adaptive_resonance.training.trainer import (
    ARTMAPTrainer,
    evaluate_model,
    load_checkpoint,
    predict_labels,
    save_checkpoint,
)
from adaptive_resonance.utils.logging import ExperimentLogger, MetricsLogger
from adaptive_resonance.utils.metrics import UNKNOWN_LABEL


@pytest.fixture
def system_config(labelled_csv, tmp_path):
    return SystemConfig(
        experiment_name="unit",
        data={"train_path": labelled_csv, "test_size": 0.25},
        training={"epochs": 5},
        output_dir=tmp_path / "outputs",
    )


@pytest.fixture
def string_model():
    """Two boxes mapped to the classes "cat" and "dog"."""
    model = FuzzyARTMAP(ARTMAPConfig(input_module=ARTConfig(vigilance=0.9)))
    model.train([0.1, 0.1], [1.0, 0.0])
    model.train([0.9, 0.9], [0.0, 1.0])
    return model, np.array(["cat", "dog"])


class TestARTMAPTrainer:
    """Tests for ARTMAPTrainer."""

    def test_train_records_history(self, system_config):
        data = ARTDataModule(system_config)
        trainer = ARTMAPTrainer(system_config, data)

        history = trainer.train()

        assert 1 <= len(history) <= 5
        assert history[0]["epoch"] == 1
        assert history[0]["target_categories"] == 2
        assert history[0]["train_success"] + history[0]["map_field_mismatch"] + (
            history[0]["capacity_exhausted"]
        ) == 45
        counts = [epoch["input_categories"] for epoch in history]
        assert counts == sorted(counts)

    def test_stops_when_stable(self, system_config):
        trainer = ARTMAPTrainer(system_config, ARTDataModule(system_config))
        history = trainer.train()

        assert len(history) < 5
        assert history[-1]["new_categories"] == 0
        assert history[-1]["train_success"] == 45

    def test_evaluate_held_out(self, system_config):
        trainer = ARTMAPTrainer(system_config, ARTDataModule(system_config))
        trainer.train()

        results = trainer.evaluate()

        assert results["num_samples"] == 15
        assert results["overall_metrics"]["accuracy"] >= 0.8
        assert set(results["per_class_metrics"]) <= {"0", "1"}
        assert results["category_statistics"]["num_categories"] >= 2

    def test_loggers_receive_epochs(self, system_config, tmp_path):
        metrics_logger = MetricsLogger(tmp_path / "metrics.csv")
        experiment_logger = ExperimentLogger("unit", log_dir=tmp_path / "logs")
        trainer = ARTMAPTrainer(
            system_config,
            ARTDataModule(system_config),
            metrics_logger=metrics_logger,
            experiment_logger=experiment_logger,
        )

        history = trainer.train()
        experiment_logger.close()

        assert len(metrics_logger.get_metric_history("input_categories")) == len(history)
        frame = pd.read_csv(tmp_path / "metrics.csv")
        assert list(frame.columns) == MetricsLogger.FIELDS
        assert "Epoch   1" in (tmp_path / "logs" / "unit_experiment.log").read_text()

    def test_default_checkpoint_path(self, system_config):
        trainer = ARTMAPTrainer(system_config, ARTDataModule(system_config))
        trainer.train()

        path = trainer.save_checkpoint()

        assert path == system_config.output_dir / "unit.pkl"
        assert path.exists()


class TestCheckpoint:
    """Tests for checkpoint round trips."""

    def test_round_trip(self, string_model, tmp_path):
        model, classes = string_model
        path = save_checkpoint(tmp_path / "ckpt" / "model.pkl", model, classes)

        bundle = load_checkpoint(path)

        assert bundle.classes.tolist() == ["cat", "dog"]
        assert bundle.scaler is None
        assert dict(bundle.model.get_map_field()) == dict(model.get_map_field())
        assert bundle.transform([[0.2, 0.3]]).tolist() == [[0.2, 0.3]]

    def test_round_trip_with_scaler(self, system_config, tmp_path):
        data = ARTDataModule(system_config)
        trainer = ARTMAPTrainer(system_config, data)
        trainer.train()
        path = trainer.save_checkpoint(tmp_path / "model.pkl")

        bundle = load_checkpoint(path)

        raw = pd.read_csv(system_config.data.train_path)[["f0", "f1"]].to_numpy()
        assert np.allclose(bundle.transform(raw), data.transform(raw))
        assert bundle.classes.tolist() == [0, 1]

    def test_missing_checkpoint(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_checkpoint(tmp_path / "missing.pkl")


class TestEvaluateModel:
    """Tests for evaluate_model and predict_labels."""

    def test_predict_labels(self, string_model):
        model, classes = string_model
        labels = predict_labels(model, classes, [[0.1, 0.1], [0.9, 0.9], [0.5, 0.5]])

        assert labels.tolist() == ["cat", "dog", UNKNOWN_LABEL]

    def test_string_labels(self, string_model):
        model, classes = string_model
        results = evaluate_model(
            model,
            classes,
            np.array([[0.1, 0.1], [0.9, 0.9], [0.5, 0.5]]),
            np.array(["cat", "dog", "dog"]),
        )

        assert results["num_samples"] == 3
        assert results["overall_metrics"]["accuracy"] == pytest.approx(2 / 3)
        assert results["overall_metrics"]["coverage"] == pytest.approx(2 / 3)
        assert set(results["per_class_metrics"]) == {"cat", "dog"}
        assert results["per_class_metrics"]["dog"]["recall"] == pytest.approx(0.5)

    def test_empty(self, string_model):
        model, classes = string_model
        results = evaluate_model(model, classes, np.empty((0, 2)), np.array([]))

        assert results["num_samples"] == 0
