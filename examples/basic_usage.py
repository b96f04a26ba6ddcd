#!/usr/bin/env python3
"""
Example usage script for the Adaptive Resonance package.

This script demonstrates how to:
1. Cluster data with a single Fuzzy ART module
2. Train a Fuzzy ARTMAP session and read its match-tracking traces
3. Predict associations for new inputs
4. Learn tasks one after another without forgetting earlier ones

Run with: python examples/basic_usage.py
"""

import logging

import numpy as np

from adaptive_resonance import (
    ARTConfig,
    ARTMAPConfig,
    FuzzyART,
    FuzzyARTMAP,
    FuzzyARTMAPClassifier,
)
from adaptive_resonance.data.dataloader import make_synthetic, one_hot_labels
from adaptive_resonance.utils.logging import setup_logging
from adaptive_resonance.utils.metrics import CategoryAnalyzer, compute_retention

# Setup logging
setup_logging(level="INFO")
logger = logging.getLogger(__name__)


def create_minimal_config() -> ARTMAPConfig:
    """Create a small ARTMAP configuration for demonstration."""
    return ARTMAPConfig(
        input_module=ARTConfig(vigilance=0.75, max_categories=200),
        target_module=ARTConfig(vigilance=1.0),
        vigilance_increment=0.05,
        match_tracking="increment",
    )


def demonstrate_clustering():
    """Unsupervised clustering with one Fuzzy ART module."""
    logger.info("=== Demonstrating Fuzzy ART Clustering ===")

    features, _ = make_synthetic(n_samples=150, centers=3, cluster_std=0.4, seed=1)
    art = FuzzyART(vigilance=0.8)
    outcomes = art.fit(features, epochs=2)

    logger.info(f"Learned {art.get_category_count()} categories from {len(features)} samples")
    logger.info(f"Unplaced samples: {sum(not o.ok for o in outcomes)}")
    logger.info(f"Category statistics: {CategoryAnalyzer(art.get_categories()).compute_statistics()}")
    return art


def demonstrate_training():
    """Supervised training with match tracking."""
    logger.info("=== Demonstrating ARTMAP Training ===")

    model = FuzzyARTMAP(create_minimal_config())
    features, labels = make_synthetic(n_samples=200, centers=4, cluster_std=0.8, seed=2)
    targets, classes = one_hot_labels(labels)

    outcomes = model.train_batch(features, targets)
    searched = [o for o in outcomes if len(o.search_trace) > 1]

    logger.info(f"Classes: {classes.tolist()}")
    logger.info(f"Outcomes: {model.statistics()['outcomes']}")
    logger.info(f"Pairs that needed match tracking: {len(searched)}")
    if searched:
        vigilances = FuzzyARTMAP.trace_vigilances(searched[0].search_trace)
        logger.info(f"  First raised vigilance sequence: {np.round(vigilances, 3).tolist()}")
    return model, classes


def demonstrate_inference(model: FuzzyARTMAP, classes: np.ndarray):
    """Predict associations for new samples."""
    logger.info("=== Demonstrating Inference ===")

    samples, _ = make_synthetic(n_samples=5, centers=4, cluster_std=0.8, seed=2)
    for sample in samples:
        outcome = model.predict_association(sample)
        if outcome.ok:
            target = model.get_category(outcome.b_index, space="target")
            label = classes[int(np.argmax(target.lower))]
            logger.info(
                f"  {np.round(sample, 3).tolist()} -> class {label} "
                f"(category {outcome.a_index}, confidence {outcome.confidence:.3f})"
            )
        else:
            logger.info(f"  {np.round(sample, 3).tolist()} -> {outcome.reason.value}")


def demonstrate_continual_learning():
    """Learn tasks sequentially and measure what earlier tasks retain."""
    logger.info("=== Demonstrating Continual Learning ===")

    features, labels = make_synthetic(n_samples=300, centers=6, cluster_std=0.5, seed=3)
    tasks = [(0, 1), (2, 3), (4, 5)]

    classifier = FuzzyARTMAPClassifier(vigilance=0.7)
    snapshots = {}
    for task_id, task_classes in enumerate(tasks):
        mask = np.isin(labels, task_classes)
        classifier.partial_fit(features[mask], labels[mask], classes=np.arange(6))
        snapshots[task_id] = (features[mask], classifier.predict(features[mask]))
        logger.info(f"  After task {task_id}: {classifier.n_categories_} input categories")

    for task_id, (task_features, before) in snapshots.items():
        retention = compute_retention(before, classifier.predict(task_features))
        logger.info(f"  Task {task_id} retention: {retention:.3f}")

    logger.info("Continual learning demonstration completed!")


def main():
    """Main demonstration function."""
    logger.info("Starting Adaptive Resonance Demo")
    logger.info("=" * 60)

    try:
        demonstrate_clustering()
        print("\n")

        model, classes = demonstrate_training()
        print("\n")

        demonstrate_inference(model, classes)
        print("\n")

        demonstrate_continual_learning()
        print("\n")

        logger.info("All demonstrations completed successfully!")
        logger.info("Next steps:")
        logger.info("1. Generate a config: artmap generate-config -o config.yaml")
        logger.info("2. Train on a CSV: artmap train --config config.yaml")
        logger.info("3. Evaluate: artmap evaluate -m outputs/artmap_basic.pkl -d data/test.csv")
        logger.info("4. Predict: artmap predict -m outputs/artmap_basic.pkl -i 0.2,0.7")

    except Exception as e:
        logger.error(f"Demo failed: {e}")
        raise


if __name__ == "__main__":
    main()
