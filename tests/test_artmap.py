"""
Tests for the Fuzzy ARTMAP session.
"""

import threading

import numpy as np
import pytest

from adaptive_resonance.configs.schema import ARTConfig, ARTMAPConfig
from adaptive_resonance.core.artmap import FuzzyARTMAP
from adaptive_resonance.core.errors import (
    DimensionMismatchError,
    InputValidationError,
    SessionClosedError,
)
from adaptive_resonance.core.results import NoMatchReason, ResultKind

A = [1.0, 0.0]
B = [0.0, 1.0]


class TestSupervisedExample:
    """Three-dimensional inputs, vigilance 0.9, fast learning."""

    def test_training_creates_two_mappings(self, trained_artmap):
        assert trained_artmap.get_category_count() == 2
        assert trained_artmap.get_category_count("target") == 2
        assert dict(trained_artmap.get_map_field()) == {0: 0, 1: 1}

    def test_nearby_input_resolves_to_first_category(self, trained_artmap):
        outcome = trained_artmap.predict_association([0.9, 0.1, 0.0])

        assert outcome.kind == ResultKind.ASSOCIATION
        assert outcome.a_index == 0
        assert outcome.b_index == 0
        assert outcome.score > 0.85
        assert outcome.confidence == pytest.approx(outcome.score)

    def test_new_pattern_on_fresh_session_creates_category(self, artmap):
        outcome = artmap.train([0.0, 0.0, 1.0], A)

        assert outcome.ok
        assert outcome.was_new_mapping
        assert outcome.a_index == 0
        assert artmap.get_category_count() == 1

    def test_one_shot_recall(self, artmap):
        pairs = [([0.1, 0.2, 0.9], A), ([0.8, 0.7, 0.1], B), ([0.5, 0.9, 0.4], A)]
        for x, t in pairs:
            assert artmap.train(x, t).ok

        for x, t in pairs:
            b_index = artmap.predict_association(x).b_index
            assert artmap.get_category(b_index, "target").lower.tolist() == t

    def test_predict_target(self, trained_artmap):
        category = trained_artmap.predict_target([0.0, 0.95, 0.0])
        assert category.lower.tolist() == B

        assert trained_artmap.predict_target([0.0, 0.0, 1.0]) is None


class TestPredictOutcomes:
    """Every NoMatch reason of predict_association."""

    def test_empty(self, artmap):
        assert artmap.predict_association([0.5, 0.5, 0.5]).reason is NoMatchReason.EMPTY

    def test_no_resonance(self, trained_artmap):
        outcome = trained_artmap.predict_association([0.0, 0.0, 1.0])

        assert not outcome.ok
        assert outcome.reason is NoMatchReason.NO_RESONANCE

    def test_unmapped(self, artmap):
        artmap.learn([0.5, 0.5, 0.5])
        outcome = artmap.predict_association([0.5, 0.5, 0.5])

        assert outcome.reason is NoMatchReason.UNMAPPED

    def test_predict_does_not_mutate(self, trained_artmap):
        before = trained_artmap.state_dict()
        trained_artmap.predict([0.9, 0.1, 0.0])
        trained_artmap.predict_association([0.9, 0.1, 0.0])

        assert trained_artmap.state_dict() == before

    def test_vigilance_override(self, trained_artmap):
        assert trained_artmap.predict([0.9, 0.1, 0.0], vigilance=0.99).reason is (
            NoMatchReason.NO_RESONANCE
        )


class TestValidation:
    """Invalid calls raise and leave the session unchanged."""

    def test_input_dimension_mismatch(self, trained_artmap):
        before = trained_artmap.state_dict()
        with pytest.raises(DimensionMismatchError):
            trained_artmap.train([0.5, 0.5], A)
        assert trained_artmap.state_dict() == before

    def test_target_dimension_mismatch(self, trained_artmap):
        before = trained_artmap.state_dict()
        with pytest.raises(DimensionMismatchError):
            trained_artmap.train([0.5, 0.5, 0.5], [1.0, 0.0, 0.0])
        assert trained_artmap.state_dict() == before

    def test_out_of_range_target(self, artmap):
        with pytest.raises(InputValidationError):
            artmap.train([0.5, 0.5, 0.5], [2.0, 0.0])
        assert artmap.get_category_count() == 0
        assert artmap.get_category_count("target") == 0

    def test_bad_category_index(self, trained_artmap):
        with pytest.raises(IndexError):
            trained_artmap.get_category(5)
        with pytest.raises(ValueError):
            trained_artmap.get_category(0, space="output")

    def test_batch_length_mismatch(self, artmap):
        with pytest.raises(InputValidationError):
            artmap.train_batch([[0.1, 0.2, 0.3]], [A, B])


class TestStabilityPlasticity:
    """Old associations survive new learning."""

    def test_corners_survive_random_patterns(self, rng):
        model = FuzzyARTMAP(ARTMAPConfig(
            input_module=ARTConfig(vigilance=0.75, max_categories=200),
            target_module=ARTConfig(vigilance=1.0),
        ))
        labels = np.eye(4)
        corners = np.eye(4)
        for corner, label in zip(corners, labels):
            assert model.train(corner, label).ok

        counts = [model.get_category_count()]
        for _ in range(50):
            model.train(rng.uniform(0.4, 0.6, size=4), labels[rng.integers(4)])
            counts.append(model.get_category_count())

        assert counts == sorted(counts)
        assert counts[-1] <= 200
        for index, corner in enumerate(corners):
            outcome = model.predict_association(corner)
            assert outcome.ok
            assert outcome.a_index == index
            assert model.get_category(outcome.b_index, "target").lower.tolist() == labels[index].tolist()
            assert outcome.confidence >= 0.7

    def test_determinism(self, rng):
        inputs = rng.random((60, 3))
        targets = np.eye(3)[rng.integers(3, size=60)]
        config = ARTMAPConfig(input_module=ARTConfig(vigilance=0.7))

        first = FuzzyARTMAP(config)
        second = FuzzyARTMAP(config)

        assert first.train_batch(inputs, targets) == second.train_batch(inputs, targets)
        assert first.state_dict() == second.state_dict()


class TestLifecycle:
    """Closing, clearing, persistence and statistics."""

    def test_closed_session(self, trained_artmap):
        trained_artmap.close()

        assert trained_artmap.closed
        for call in (
            lambda: trained_artmap.train([0.1, 0.1, 0.1], A),
            lambda: trained_artmap.predict([0.1, 0.1, 0.1]),
            lambda: trained_artmap.predict_association([0.1, 0.1, 0.1]),
            lambda: trained_artmap.get_category_count(),
            lambda: trained_artmap.get_map_field(),
        ):
            with pytest.raises(SessionClosedError):
                call()

    def test_context_manager(self, artmap_config):
        with FuzzyARTMAP(artmap_config) as model:
            model.train([0.1, 0.2, 0.3], A)
        assert model.closed

    def test_clear(self, trained_artmap):
        trained_artmap.clear()

        assert trained_artmap.get_category_count() == 0
        assert trained_artmap.get_category_count("target") == 0
        assert len(trained_artmap.get_map_field()) == 0
        assert trained_artmap.statistics()["outcomes"]["train_success"] == 0

    def test_save_and_load(self, trained_artmap, tmp_path):
        path = tmp_path / "models" / "artmap.pkl"
        trained_artmap.save(path)

        restored = FuzzyARTMAP.load(path)

        assert restored.config == trained_artmap.config
        assert dict(restored.get_map_field()) == dict(trained_artmap.get_map_field())
        for index in range(2):
            assert np.array_equal(
                restored.get_category(index).prototype,
                trained_artmap.get_category(index).prototype,
            )
        sample = [0.9, 0.1, 0.0]
        assert restored.predict_association(sample) == trained_artmap.predict_association(sample)

    def test_load_rejects_dangling_mapping(self, trained_artmap):
        state = trained_artmap.state_dict()
        state["map_field"]["entries"].append([7, 0])

        with pytest.raises(ValueError):
            FuzzyARTMAP.from_state_dict(state)

    def test_failed_load_leaves_session_unchanged(self, trained_artmap, artmap_config):
        other = FuzzyARTMAP(artmap_config)
        other.train([0.0, 0.0, 1.0], A)
        state = other.state_dict()
        state["map_field"]["entries"].append([7, 0])
        before = trained_artmap.get_category(1).prototype

        with pytest.raises(ValueError, match="missing category"):
            trained_artmap.load_state_dict(state)

        assert trained_artmap.get_category_count() == 2
        assert trained_artmap.get_category_count("target") == 2
        assert dict(trained_artmap.get_map_field()) == {0: 0, 1: 1}
        assert np.array_equal(trained_artmap.get_category(1).prototype, before)
        assert trained_artmap.predict_association([0.0, 1.0, 0.0]).b_index == 1

    def test_failed_load_on_bad_store_leaves_session_unchanged(self, trained_artmap):
        state = trained_artmap.state_dict()
        state["target_module"]["store"]["categories"][1]["index"] = 5

        with pytest.raises(ValueError):
            trained_artmap.load_state_dict(state)

        assert trained_artmap.get_category_count("target") == 2
        assert dict(trained_artmap.get_map_field()) == {0: 0, 1: 1}

    def test_statistics(self, trained_artmap):
        stats = trained_artmap.statistics()

        assert stats["mappings"] == 2
        assert stats["input"]["total_categories"] == 2
        assert stats["target"]["total_categories"] == 2
        assert stats["outcomes"]["train_success"] == 2
        assert stats["input_vigilance"] == pytest.approx(0.9)

    def test_repr(self, trained_artmap):
        assert "mappings=2" in repr(trained_artmap)


class TestConcurrency:
    """Predictions may run while training is in progress."""

    def test_parallel_predict_and_train(self, rng):
        model = FuzzyARTMAP(ARTMAPConfig(input_module=ARTConfig(vigilance=0.8)))
        inputs = rng.random((200, 3))
        targets = np.eye(2)[rng.integers(2, size=200)]
        model.train(inputs[0], targets[0])
        errors = []

        def predictor():
            try:
                for x in inputs[:100]:
                    model.predict_association(x)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=predictor) for _ in range(4)]
        for thread in threads:
            thread.start()
        for x, t in zip(inputs[1:], targets[1:]):
            model.train(x, t)
        for thread in threads:
            thread.join()

        assert errors == []
        assert model.get_category_count() >= 1
