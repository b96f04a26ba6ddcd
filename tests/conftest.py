"""
Shared fixtures for the adaptive resonance tests.
"""

import logging

import numpy as np
import pandas as pd
import pytest

from adaptive_resonance.configs.schema import ARTConfig, ARTMAPConfig
from adaptive_resonance.core.art import FuzzyART
from adaptive_resonance.core.artmap import FuzzyARTMAP
from adaptive_resonance.data.dataloader import make_synthetic


LABEL_A = [1.0, 0.0]
LABEL_B = [0.0, 1.0]


@pytest.fixture(autouse=True)
def restore_root_logging():
    """CLI commands reconfigure the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def art():
    """Fuzzy ART module with vigilance 0.75 and fast learning."""
    return FuzzyART(ARTConfig(vigilance=0.75, learning_rate=1.0))


@pytest.fixture
def artmap_config():
    """Three-dimensional inputs, vigilance 0.9, fast learning."""
    return ARTMAPConfig(
        input_module=ARTConfig(vigilance=0.9, learning_rate=1.0),
        target_module=ARTConfig(vigilance=1.0, learning_rate=1.0),
    )


@pytest.fixture
def artmap(artmap_config):
    model = FuzzyARTMAP(artmap_config)
    yield model
    model.close()


@pytest.fixture
def trained_artmap(artmap):
    """[1,0,0] -> A and [0,1,0] -> B."""
    artmap.train([1.0, 0.0, 0.0], LABEL_A)
    artmap.train([0.0, 1.0, 0.0], LABEL_B)
    return artmap


@pytest.fixture
def labelled_csv(tmp_path):
    """Small two-class CSV with well separated clusters."""
    features, labels = make_synthetic(n_samples=60, n_features=2, centers=2, cluster_std=0.3, seed=0)
    frame = pd.DataFrame(features, columns=["f0", "f1"])
    frame["label"] = labels
    path = tmp_path / "train.csv"
    frame.to_csv(path, index=False)
    return path
