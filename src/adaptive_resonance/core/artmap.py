"""
Fuzzy ARTMAP session.

A session owns two Fuzzy ART modules (input space "A", target space "B"),
the map field linking them and the operating vigilance of space A. Training
is serialised behind the write side of a reader/writer lock; predictions
share the read side and may run concurrently with each other.
"""

import logging
import pickle
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

import numpy as np

from ..configs.schema import ARTMAPConfig
from ..utils.locking import ReadWriteLock
from .art import FuzzyART
from .category_store import CategorySnapshot, CategoryStore
from .complement import VectorLike
from .errors import InputValidationError, SessionClosedError
from .map_field import MapField
from .match_tracking import MatchTracker
from .results import (
    AssociationOutcome,
    AssociationPrediction,
    CapacityExhausted,
    LearnOutcome,
    LearnState,
    NoMatch,
    NoMatchReason,
    PredictOutcome,
    ResultKind,
    SearchStep,
    Space,
    TrainOutcome,
)

logger = logging.getLogger(__name__)


class FuzzyARTMAP:
    """
    Supervised Fuzzy ARTMAP.

    Example:
        >>> model = FuzzyARTMAP(ARTMAPConfig(input_module={"vigilance": 0.9}))
        >>> outcome = model.train([1.0, 0.0, 0.0], [1.0, 0.0])
        >>> outcome.ok
        True
    """

    def __init__(self, config: Optional[ARTMAPConfig] = None):
        self.config = config.copy(deep=True) if config is not None else ARTMAPConfig()
        self.input_module = FuzzyART(self.config.input_module, name=Space.INPUT.value)
        self.target_module = FuzzyART(self.config.target_module, name=Space.TARGET.value)
        self.map_field = MapField()
        self.tracker = MatchTracker(self.config, self.input_module, self.map_field)

        self._lock = ReadWriteLock()
        self._closed = False
        self._vigilance = self.tracker.baseline_vigilance

        # Outcome counters
        self.outcome_counts: Dict[str, int] = {kind.value: 0 for kind in ResultKind}

        logger.info(
            f"Initialized FuzzyARTMAP (input vigilance={self.config.input_module.vigilance}, "
            f"map vigilance={self.config.map_vigilance}, "
            f"match tracking={self.config.match_tracking})"
        )

    def _check_open(self) -> None:
        if self._closed:
            raise SessionClosedError("FuzzyARTMAP session has been closed")

    def _module(self, space: Union[Space, str]) -> FuzzyART:
        space = Space(space)
        return self.input_module if space is Space.INPUT else self.target_module

    @property
    def input_vigilance(self) -> float:
        """Operating vigilance of space A at the end of the last training call."""
        return self._vigilance

    # ------------------------------------------------------------------
    # Training

    def train(self, input_values: VectorLike, target_values: VectorLike) -> TrainOutcome:
        """
        Learn one (input, target) pair.

        The target is learned first and its category becomes the expected
        association; match tracking then searches the input space.

        Returns:
            ``TrainSuccess``, ``MapFieldMismatch`` or ``CapacityExhausted``
        """
        self._check_open()
        with self._lock.write_locked():
            # Validate both sides before anything changes
            coded_input = self.input_module.encode(input_values)
            self.target_module.encode(target_values)

            self._vigilance = self.tracker.baseline_vigilance
            b_outcome = self.target_module.learn(target_values)
            if not b_outcome.ok:
                outcome = CapacityExhausted(space=Space.TARGET, search_trace=())
            else:
                with self.input_module._lock.write_locked():
                    outcome = self.tracker.track(
                        coded_input, b_outcome.category_index, b_outcome.score
                    )
                self._vigilance = self.tracker.last_vigilance

            self.outcome_counts[outcome.kind.value] += 1
            return outcome

    def train_batch(
        self, inputs: Sequence[VectorLike], targets: Sequence[VectorLike]
    ) -> List[TrainOutcome]:
        """Train on pairs in order."""
        if len(inputs) != len(targets):
            raise InputValidationError(
                f"inputs and targets must have the same length: {len(inputs)} != {len(targets)}"
            )
        return [self.train(x, t) for x, t in zip(inputs, targets)]

    def learn(self, input_values: VectorLike) -> LearnOutcome:
        """Unsupervised step on space A; the new category stays unmapped."""
        self._check_open()
        with self._lock.write_locked():
            return self.input_module.learn(input_values)

    # ------------------------------------------------------------------
    # Prediction

    def predict(self, input_values: VectorLike, vigilance: Optional[float] = None) -> PredictOutcome:
        """Best resonating space-A category, without learning."""
        self._check_open()
        with self._lock.read_locked():
            return self.input_module.predict(input_values, vigilance)

    def predict_association(
        self, input_values: VectorLike, vigilance: Optional[float] = None
    ) -> AssociationOutcome:
        """
        Predict the target category an input maps to.

        Returns:
            ``AssociationPrediction`` or ``NoMatch`` (``EMPTY`` when space A has
            no categories, ``NO_RESONANCE`` when none passes vigilance,
            ``UNMAPPED`` when the winner has no map-field entry)
        """
        self._check_open()
        with self._lock.read_locked():
            prediction = self.input_module.predict(input_values, vigilance)
            if not prediction.ok:
                return prediction

            b_index = self.map_field.lookup(prediction.category_index)
            if b_index is None:
                return NoMatch(reason=NoMatchReason.UNMAPPED)

            map_activation = self.map_field.activation(prediction.category_index, b_index)
            return AssociationPrediction(
                a_index=prediction.category_index,
                b_index=b_index,
                score=prediction.score,
                confidence=prediction.score * map_activation,
            )

    def predict_target(self, input_values: VectorLike) -> Optional[CategorySnapshot]:
        """Prototype of the predicted target category, if any."""
        outcome = self.predict_association(input_values)
        if not outcome.ok:
            return None
        return self.target_module.get_category(outcome.b_index)

    # ------------------------------------------------------------------
    # Collection management

    def get_category_count(self, space: Union[Space, str] = Space.INPUT) -> int:
        self._check_open()
        return self._module(space).get_category_count()

    def get_category(self, index: int, space: Union[Space, str] = Space.INPUT) -> CategorySnapshot:
        self._check_open()
        return self._module(space).get_category(index)

    def get_map_field(self) -> Mapping[int, int]:
        """Read-only snapshot of the map field."""
        self._check_open()
        with self._lock.read_locked():
            return self.map_field.snapshot()

    def clear(self) -> None:
        """Discard all categories and associations; vigilance returns to baseline."""
        self._check_open()
        with self._lock.write_locked():
            self.input_module.clear()
            self.target_module.clear()
            self.map_field.clear()
            self._vigilance = self.tracker.baseline_vigilance
            self.outcome_counts = {kind.value: 0 for kind in ResultKind}
        logger.info("Cleared FuzzyARTMAP session")

    def close(self) -> None:
        """Tear the session down; later calls raise ``SessionClosedError``."""
        if self._closed:
            return
        with self._lock.write_locked():
            self._closed = True
            self.input_module.close()
            self.target_module.close()
        logger.debug("Closed FuzzyARTMAP session")

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "FuzzyARTMAP":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # State

    def state_dict(self) -> Dict:
        """Everything needed to rebuild this session exactly."""
        self._check_open()
        with self._lock.read_locked():
            return {
                "config": self.config.dict(),
                "input_module": self.input_module.state_dict(),
                "target_module": self.target_module.state_dict(),
                "map_field": self.map_field.state_dict(),
                "outcome_counts": dict(self.outcome_counts),
            }

    def load_state_dict(self, state: Dict) -> None:
        """Restore a saved session. On any error the session is left untouched."""
        self._check_open()
        with self._lock.write_locked():
            self._validate_state(state)
            self.input_module.load_state_dict(state["input_module"])
            self.target_module.load_state_dict(state["target_module"])
            self.map_field.load_state_dict(state["map_field"])
            self.outcome_counts.update(state.get("outcome_counts", {}))
            self._vigilance = self.tracker.baseline_vigilance

    def _validate_state(self, state: Dict) -> None:
        """Load ``state`` into scratch stores and check map entries against them."""
        sizes = []
        for module, key in ((self.input_module, "input_module"), (self.target_module, "target_module")):
            scratch = CategoryStore(
                max_categories=module.config.max_categories,
                dimension=module.config.input_dim,
                name=module.name,
            )
            scratch.load_state_dict(state[key]["store"])
            sizes.append(len(scratch))

        entries = MapField()
        entries.load_state_dict(state["map_field"])
        for a_index, b_index in entries.snapshot().items():
            if a_index >= sizes[0] or b_index >= sizes[1]:
                raise ValueError(
                    f"Map field entry {a_index} -> {b_index} refers to a missing category"
                )

    @classmethod
    def from_state_dict(cls, state: Dict) -> "FuzzyARTMAP":
        model = cls(ARTMAPConfig(**state["config"]))
        model.load_state_dict(state)
        return model

    def save(self, path: Union[str, Path]) -> None:
        """Save session state."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "wb") as f:
            pickle.dump(self.state_dict(), f)

        logger.info(f"Saved FuzzyARTMAP state to {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> "FuzzyARTMAP":
        """Load a session saved with ``save``."""
        with open(path, "rb") as f:
            state = pickle.load(f)

        model = cls.from_state_dict(state)
        logger.info(f"Loaded FuzzyARTMAP state from {path}")
        return model

    def statistics(self) -> Dict:
        """Session statistics."""
        self._check_open()
        return {
            "input": self.input_module.statistics(),
            "target": self.target_module.statistics(),
            "mappings": len(self.map_field),
            "reassignments": len(self.map_field.reassignment_history),
            "outcomes": dict(self.outcome_counts),
            "input_vigilance": self._vigilance,
        }

    @staticmethod
    def trace_vigilances(trace: Sequence[SearchStep]) -> np.ndarray:
        """Vigilance of each attempt in a search trace."""
        return np.array([step.vigilance for step in trace], dtype=np.float64)

    @staticmethod
    def created_in(trace: Sequence[SearchStep]) -> bool:
        """True if the search ended by committing a new input category."""
        return bool(trace) and trace[-1].state is LearnState.CREATED

    def __repr__(self) -> str:
        return (
            f"FuzzyARTMAP(input={len(self.input_module.store)} categories, "
            f"target={len(self.target_module.store)} categories, "
            f"mappings={len(self.map_field)})"
        )
