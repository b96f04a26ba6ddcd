"""
Tests for the category store.
"""

import numpy as np
import pytest

from adaptive_resonance.core.category_store import CategoryStore
from adaptive_resonance.core.complement import complement_code
from adaptive_resonance.core.errors import DimensionMismatchError


class TestCategoryStore:
    """Tests for CategoryStore."""

    def test_add_infers_dimension_and_indexes_in_order(self):
        store = CategoryStore(max_categories=5)
        assert store.is_empty
        assert store.dimension is None

        first = store.add(complement_code([0.1, 0.2]))
        second = store.add(complement_code([0.9, 0.8]))

        assert (first, second) == (0, 1)
        assert len(store) == 2
        assert store.dimension == 2
        assert store.weights.shape == (2, 4)

    def test_add_rejects_wrong_dimension(self):
        store = CategoryStore(max_categories=5, dimension=2)
        with pytest.raises(DimensionMismatchError):
            store.add(complement_code([0.1, 0.2, 0.3]))

    def test_full_store_refuses_add(self):
        store = CategoryStore(max_categories=1)
        store.add(complement_code([0.5]))

        assert store.is_full
        with pytest.raises(RuntimeError):
            store.add(complement_code([0.1]))

    def test_update_tracks_usage(self):
        store = CategoryStore(max_categories=3)
        store.tick()
        index = store.add(complement_code([0.5, 0.5]))
        store.tick()
        store.update(index, complement_code([0.4, 0.5]))

        snapshot = store.get(index)
        assert snapshot.usage_count == 2
        assert snapshot.created_step == 1
        assert snapshot.last_used_step == 2
        assert np.allclose(store.weights[index], complement_code([0.4, 0.5]))

    def test_snapshots_are_immutable(self):
        store = CategoryStore(max_categories=3)
        store.add(complement_code([0.5, 0.5]))

        snapshot = store.get(0)
        with pytest.raises(ValueError):
            snapshot.prototype[0] = 0.0
        with pytest.raises(ValueError):
            store.weights[0, 0] = 0.0
        with pytest.raises(ValueError):
            store.prototype(0)[0] = 0.0

    def test_bad_index(self):
        store = CategoryStore(max_categories=3)
        store.add(complement_code([0.5]))

        with pytest.raises(IndexError):
            store.get(1)
        with pytest.raises(IndexError):
            store.get(-1)
        with pytest.raises(TypeError):
            store.get("0")

    def test_clear_resets_inferred_dimension(self):
        store = CategoryStore(max_categories=3)
        store.add(complement_code([0.5, 0.5]))
        store.clear()

        assert len(store) == 0
        assert store.dimension is None
        assert store.step == 0

    def test_state_round_trip_preserves_order(self):
        store = CategoryStore(max_categories=4, name="target")
        for value in (0.1, 0.5, 0.9):
            store.tick()
            store.add(complement_code([value]))

        restored = CategoryStore(max_categories=4, name="target")
        restored.load_state_dict(store.state_dict())

        assert len(restored) == 3
        assert restored.step == store.step
        assert np.array_equal(restored.weights, store.weights)
        assert [c.created_step for c in restored.snapshot()] == [1, 2, 3]

    def test_load_rejects_over_capacity(self):
        store = CategoryStore(max_categories=3)
        for value in (0.1, 0.5, 0.9):
            store.add(complement_code([value]))

        small = CategoryStore(max_categories=2)
        with pytest.raises(ValueError):
            small.load_state_dict(store.state_dict())

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            CategoryStore(max_categories=0)

    def test_snapshot_box_properties(self):
        store = CategoryStore(max_categories=2)
        store.add(np.minimum(complement_code([0.2, 0.8]), complement_code([0.4, 0.5])))

        snapshot = store.get(0)
        assert snapshot.lower.tolist() == pytest.approx([0.2, 0.5])
        assert snapshot.upper.tolist() == pytest.approx([0.4, 0.8])
        assert snapshot.size == pytest.approx(0.5)
