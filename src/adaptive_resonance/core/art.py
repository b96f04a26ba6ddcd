"""
Fuzzy ART single-module learner.

One learning step moves through ``SEARCHING -> {MATCHED, CREATED,
EXHAUSTED}``. The step is split in two so the match-tracking controller
can inspect a decision before anything changes:

- ``search`` is a pure function of the input, the stored categories and
  the vigilance;
- ``commit`` is the single mutation point (update the winner or commit a
  new category).

``learn`` is ``search`` followed by ``commit``; ``predict`` never mutates.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

import numpy as np

from ..configs.schema import ARTConfig
from ..utils.locking import ReadWriteLock
from ..utils.registry import create_geometry
from .category_store import CategorySnapshot, CategoryStore
from .complement import VectorLike, as_vector, box_size
from .errors import InputValidationError, SessionClosedError
from .resonance import Activation, ResonanceEngine
from .results import (
    LearnOutcome,
    LearnResult,
    LearnState,
    NoMatch,
    NoMatchReason,
    PredictOutcome,
    Prediction,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchDecision:
    """
    Outcome of the search phase, before any mutation.

    Attributes:
        state: MATCHED, CREATED or EXHAUSTED
        category_index: Winner, or the index a new category would take;
            None when exhausted
        match: Match score of the winner (1.0 for a new category)
        choice: Choice score of the winner
        coded: Complement-coded input
        vigilance: Vigilance the search ran at
        activation: Scores against every existing category
        store_size: Number of categories when the search ran
    """

    state: LearnState
    category_index: Optional[int]
    match: float
    choice: float
    coded: np.ndarray
    vigilance: float
    activation: Activation
    store_size: int

    def redirect(self, index: int) -> "SearchDecision":
        """Same input, forced onto existing category ``index``."""
        return replace(
            self,
            state=LearnState.MATCHED,
            category_index=index,
            match=float(self.activation.match[index]),
            choice=float(self.activation.choice[index]),
        )


class FuzzyART:
    """
    Unsupervised Fuzzy ART module for one input space.

    Owns its category store and a reader/writer lock: ``learn`` takes the
    write side, ``predict`` the read side.
    """

    def __init__(self, config: Optional[ARTConfig] = None, name: str = "input", **overrides):
        if config is None:
            config = ARTConfig(**overrides)
        elif overrides:
            config = ARTConfig(**{**config.dict(), **overrides})
        else:
            # Later edits to the caller's config must not reach this module
            config = config.copy(deep=True)

        self.config = config
        self.name = name
        self.geometry = create_geometry(config.geometry, choice_alpha=config.choice_alpha)
        self.engine = ResonanceEngine(self.geometry)
        self.store = CategoryStore(
            max_categories=config.max_categories,
            dimension=config.input_dim,
            name=name,
        )
        self._lock = ReadWriteLock()
        self._closed = False

        logger.info(
            f"Initialized FuzzyART '{name}' (vigilance={config.vigilance}, "
            f"learning_rate={config.learning_rate}, max_categories={config.max_categories})"
        )

    # ------------------------------------------------------------------
    # Validation helpers

    def _check_open(self) -> None:
        if self._closed:
            raise SessionClosedError(f"FuzzyART '{self.name}' has been closed")

    def _resolve_vigilance(self, vigilance: Optional[float]) -> float:
        if vigilance is None:
            return self.config.vigilance
        if isinstance(vigilance, bool) or not isinstance(vigilance, (int, float, np.floating)):
            raise InputValidationError(f"vigilance must be a number, got {vigilance!r}")
        if not 0.0 <= vigilance <= 1.0:
            raise InputValidationError(f"vigilance must lie in [0, 1], got {vigilance}")
        return float(vigilance)

    def encode(self, values: VectorLike) -> np.ndarray:
        """Validate an input against this space and complement-code it."""
        vector = as_vector(values, expected_dim=self.store.dimension, space=self.name)
        coded = np.concatenate([vector, 1.0 - vector])
        coded.flags.writeable = False
        return coded

    # ------------------------------------------------------------------
    # Search / commit

    def search(self, values: VectorLike, vigilance: Optional[float] = None) -> SearchDecision:
        """Decide where ``values`` belongs without changing any category."""
        self._check_open()
        with self._lock.read_locked():
            return self._search(self.encode(values), self._resolve_vigilance(vigilance))

    def _search(self, coded: np.ndarray, vigilance: float) -> SearchDecision:
        winner, activation = self.engine.resonate(coded, self.store, vigilance)
        size = len(self.store)

        if winner is not None:
            return SearchDecision(
                state=LearnState.MATCHED,
                category_index=winner,
                match=float(activation.match[winner]),
                choice=float(activation.choice[winner]),
                coded=coded,
                vigilance=vigilance,
                activation=activation,
                store_size=size,
            )

        if self.store.is_full:
            return SearchDecision(
                state=LearnState.EXHAUSTED,
                category_index=None,
                match=0.0,
                choice=0.0,
                coded=coded,
                vigilance=vigilance,
                activation=activation,
                store_size=size,
            )

        # A new category is committed to the input: a perfect match
        choice = float(self.geometry.choice_score(coded, coded)[0])
        return SearchDecision(
            state=LearnState.CREATED,
            category_index=size,
            match=1.0,
            choice=choice,
            coded=coded,
            vigilance=vigilance,
            activation=activation,
            store_size=size,
        )

    def commit(self, decision: SearchDecision) -> LearnOutcome:
        """Apply a search decision; the only place categories change."""
        self._check_open()
        with self._lock.write_locked():
            return self._commit(decision)

    def _commit(self, decision: SearchDecision) -> LearnOutcome:
        if decision.state is LearnState.EXHAUSTED:
            logger.warning(
                f"{self.name} category store is full ({self.store.max_categories}); "
                f"input not learned"
            )
            return NoMatch(reason=NoMatchReason.EXHAUSTED)

        if len(self.store) != decision.store_size:
            raise RuntimeError(
                f"Stale search decision: store had {decision.store_size} categories, "
                f"now has {len(self.store)}"
            )

        self.store.tick()
        if decision.state is LearnState.CREATED:
            index = self.store.add(self.geometry.create_from_input(decision.coded))
        elif decision.state is LearnState.MATCHED:
            index = decision.category_index
            updated = self.geometry.update_weights(
                decision.coded, self.store.prototype(index), self.config.learning_rate
            )
            self.store.update(index, updated)
        else:
            raise ValueError(f"Cannot commit a decision in state {decision.state}")

        return LearnResult(
            category_index=index,
            score=decision.match,
            choice=decision.choice,
            state=decision.state,
        )

    # ------------------------------------------------------------------
    # Public operations

    def learn(self, values: VectorLike, vigilance: Optional[float] = None) -> LearnOutcome:
        """
        Present one input and learn it.

        Args:
            values: Input vector in [0, 1]
            vigilance: Optional override of the configured vigilance

        Returns:
            ``LearnResult`` for a matched or newly created category, or
            ``NoMatch(EXHAUSTED)`` if the store is full and nothing resonates
        """
        self._check_open()
        vigilance = self._resolve_vigilance(vigilance)
        with self._lock.write_locked():
            decision = self._search(self.encode(values), vigilance)
            return self._commit(decision)

    def predict(self, values: VectorLike, vigilance: Optional[float] = None) -> PredictOutcome:
        """Classify an input without learning."""
        self._check_open()
        vigilance = self._resolve_vigilance(vigilance)
        with self._lock.read_locked():
            if self.store.is_empty:
                # Dimension is still checked when it is fixed by configuration
                self.encode(values)
                return NoMatch(reason=NoMatchReason.EMPTY)

            winner, activation = self.engine.resonate(self.encode(values), self.store, vigilance)
            if winner is None:
                return NoMatch(reason=NoMatchReason.NO_RESONANCE)
            return Prediction(
                category_index=winner,
                score=float(activation.match[winner]),
                choice=float(activation.choice[winner]),
            )

    def activations(self, values: VectorLike) -> Activation:
        """Choice and match scores of an input against every category."""
        self._check_open()
        with self._lock.read_locked():
            return self.engine.activate(self.encode(values), self.store)

    def fit(self, data: np.ndarray, epochs: int = 1) -> List[LearnOutcome]:
        """Learn every row of ``data`` in order; returns the last epoch's outcomes."""
        outcomes: List[LearnOutcome] = []
        for epoch in range(epochs):
            outcomes = [self.learn(row) for row in np.asarray(data)]
            logger.debug(
                f"FuzzyART '{self.name}' epoch {epoch + 1}/{epochs}: "
                f"{len(self.store)} categories"
            )
        return outcomes

    # ------------------------------------------------------------------
    # Collection management

    def get_category_count(self) -> int:
        self._check_open()
        return len(self.store)

    def get_category(self, index: int) -> CategorySnapshot:
        self._check_open()
        with self._lock.read_locked():
            return self.store.get(index)

    def get_categories(self) -> List[CategorySnapshot]:
        self._check_open()
        with self._lock.read_locked():
            return self.store.snapshot()

    @property
    def dimension(self) -> Optional[int]:
        return self.store.dimension

    def clear(self) -> None:
        """Discard all categories."""
        self._check_open()
        with self._lock.write_locked():
            self.store.clear()
        logger.info(f"Cleared FuzzyART '{self.name}'")

    def close(self) -> None:
        """Tear the module down; later calls raise ``SessionClosedError``."""
        if not self._closed:
            self._closed = True
            logger.debug(f"Closed FuzzyART '{self.name}'")

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "FuzzyART":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # State

    def state_dict(self) -> Dict:
        """Configuration and categories, enough to rebuild this module exactly."""
        self._check_open()
        with self._lock.read_locked():
            return {
                "name": self.name,
                "config": self.config.dict(),
                "store": self.store.state_dict(),
            }

    def load_state_dict(self, state: Dict) -> None:
        self._check_open()
        with self._lock.write_locked():
            self.store.load_state_dict(state["store"])

    @classmethod
    def from_state_dict(cls, state: Dict) -> "FuzzyART":
        module = cls(ARTConfig(**state["config"]), name=state.get("name", "input"))
        module.load_state_dict(state)
        return module

    def statistics(self) -> Dict:
        """Summary of the module's categories."""
        self._check_open()
        with self._lock.read_locked():
            categories = self.store.snapshot()
            if not categories:
                return {"total_categories": 0, "capacity": self.store.max_categories}

            usage = [c.usage_count for c in categories]
            sizes = [box_size(c.prototype) for c in categories]
            return {
                "total_categories": len(categories),
                "capacity": self.store.max_categories,
                "dimension": self.store.dimension,
                "total_presentations": self.store.step,
                "total_usage": int(np.sum(usage)),
                "mean_usage": float(np.mean(usage)),
                "max_usage": int(np.max(usage)),
                "mean_box_size": float(np.mean(sizes)),
            }

    def __repr__(self) -> str:
        return f"FuzzyART(name='{self.name}', categories={len(self.store)})"
