"""
scikit-learn estimators.

``FuzzyARTClusterer`` wraps a single Fuzzy ART module as a clusterer and
``FuzzyARTMAPClassifier`` wraps an ARTMAP session as a classifier. Class
labels are one-hot encoded into the target space at vigilance 1.0, so each
class owns exactly one target category.
"""

import logging
from typing import Tuple

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin, ClusterMixin
from sklearn.utils.validation import check_array, check_is_fitted, check_X_y

from ..configs.schema import ARTConfig, ARTMAPConfig
from .art import FuzzyART
from .artmap import FuzzyARTMAP
from .results import ResultKind

logger = logging.getLogger(__name__)

NO_CATEGORY = -1


class FuzzyARTClusterer(ClusterMixin, BaseEstimator):
    """
    Incremental Fuzzy ART clustering.

    Inputs must already lie in [0, 1]. Samples that cannot be placed (the
    store is full and nothing resonates) are labelled ``-1``.
    """

    def __init__(
        self,
        vigilance: float = 0.75,
        learning_rate: float = 1.0,
        choice_alpha: float = 0.001,
        max_categories: int = 1000,
        epochs: int = 1,
    ):
        self.vigilance = vigilance
        self.learning_rate = learning_rate
        self.choice_alpha = choice_alpha
        self.max_categories = max_categories
        self.epochs = epochs

    def _build(self, n_features: int) -> FuzzyART:
        return FuzzyART(ARTConfig(
            vigilance=self.vigilance,
            learning_rate=self.learning_rate,
            choice_alpha=self.choice_alpha,
            max_categories=self.max_categories,
            input_dim=n_features,
        ))

    def fit(self, X, y=None):
        X = check_array(X, dtype=np.float64)
        self.module_ = self._build(X.shape[1])
        self.n_features_in_ = X.shape[1]

        outcomes = self.module_.fit(X, epochs=self.epochs)
        self.labels_ = np.array(
            [o.category_index if o.ok else NO_CATEGORY for o in outcomes], dtype=int
        )
        return self

    def partial_fit(self, X, y=None):
        """Learn a batch without discarding existing categories."""
        X = check_array(X, dtype=np.float64)
        if not hasattr(self, "module_"):
            self.module_ = self._build(X.shape[1])
            self.n_features_in_ = X.shape[1]

        outcomes = [self.module_.learn(row) for row in X]
        self.labels_ = np.array(
            [o.category_index if o.ok else NO_CATEGORY for o in outcomes], dtype=int
        )
        return self

    def predict(self, X) -> np.ndarray:
        """Winning category per sample, ``-1`` when nothing resonates."""
        check_is_fitted(self, "module_")
        X = check_array(X, dtype=np.float64)
        outcomes = [self.module_.predict(row) for row in X]
        return np.array(
            [o.category_index if o.ok else NO_CATEGORY for o in outcomes], dtype=int
        )

    @property
    def n_categories_(self) -> int:
        check_is_fitted(self, "module_")
        return self.module_.get_category_count()


class FuzzyARTMAPClassifier(ClassifierMixin, BaseEstimator):
    """
    Supervised Fuzzy ARTMAP classification.

    Samples whose winning input category passes vigilance but has no
    association, or that resonate with nothing, are labelled
    ``unknown_label``.
    """

    def __init__(
        self,
        vigilance: float = 0.75,
        map_vigilance: float = 0.95,
        vigilance_increment: float = 0.05,
        max_vigilance: float = 1.0,
        learning_rate: float = 1.0,
        choice_alpha: float = 0.001,
        max_categories: int = 1000,
        max_search_attempts: int = 50,
        match_tracking: str = "increment",
        allow_relaxed_reassignment: bool = False,
        epochs: int = 1,
        unknown_label=-1,
    ):
        self.vigilance = vigilance
        self.map_vigilance = map_vigilance
        self.vigilance_increment = vigilance_increment
        self.max_vigilance = max_vigilance
        self.learning_rate = learning_rate
        self.choice_alpha = choice_alpha
        self.max_categories = max_categories
        self.max_search_attempts = max_search_attempts
        self.match_tracking = match_tracking
        self.allow_relaxed_reassignment = allow_relaxed_reassignment
        self.epochs = epochs
        self.unknown_label = unknown_label

    def _build(self, n_features: int, n_classes: int) -> FuzzyARTMAP:
        config = ARTMAPConfig(
            input_module=ARTConfig(
                vigilance=self.vigilance,
                learning_rate=self.learning_rate,
                choice_alpha=self.choice_alpha,
                max_categories=self.max_categories,
                input_dim=n_features,
            ),
            target_module=ARTConfig(
                vigilance=1.0,
                learning_rate=1.0,
                max_categories=n_classes,
                input_dim=n_classes,
            ),
            map_vigilance=self.map_vigilance,
            vigilance_increment=self.vigilance_increment,
            max_vigilance=self.max_vigilance,
            max_search_attempts=self.max_search_attempts,
            match_tracking=self.match_tracking,
            allow_relaxed_reassignment=self.allow_relaxed_reassignment,
        )
        return FuzzyARTMAP(config)

    def _encode_labels(self, y: np.ndarray) -> np.ndarray:
        columns = np.searchsorted(self.classes_, y)
        if np.any(columns >= len(self.classes_)) or np.any(self.classes_[columns] != y):
            raise ValueError("y contains labels not seen in classes")
        encoded = np.zeros((len(y), len(self.classes_)), dtype=np.float64)
        encoded[np.arange(len(y)), columns] = 1.0
        return encoded

    def _train(self, X: np.ndarray, y: np.ndarray, epochs: int) -> None:
        targets = self._encode_labels(y)
        counts = {}
        for epoch in range(epochs):
            counts = {}
            for row, target in zip(X, targets):
                outcome = self.model_.train(row, target)
                counts[outcome.kind.value] = counts.get(outcome.kind.value, 0) + 1
            logger.debug(f"FuzzyARTMAPClassifier epoch {epoch + 1}/{epochs}: {counts}")
        self.train_outcomes_ = counts

    def fit(self, X, y):
        X, y = check_X_y(X, y, dtype=np.float64)
        self.classes_ = np.unique(y)
        self.n_features_in_ = X.shape[1]
        self.model_ = self._build(X.shape[1], len(self.classes_))
        self._train(X, y, self.epochs)
        return self

    def partial_fit(self, X, y, classes=None):
        """
        Train on a batch without discarding what was learned.

        ``classes`` must list every class on the first call, since the target
        space is sized from it.
        """
        X, y = check_X_y(X, y, dtype=np.float64)
        if not hasattr(self, "model_"):
            if classes is None:
                raise ValueError("classes must be passed on the first call to partial_fit")
            self.classes_ = np.unique(classes)
            self.n_features_in_ = X.shape[1]
            self.model_ = self._build(X.shape[1], len(self.classes_))
        self._train(X, y, 1)
        return self

    def predict_ab(self, X) -> Tuple[np.ndarray, np.ndarray]:
        """
        Input-space and target-space category per sample.

        Returns:
            Tuple of (input category indices, target category indices), each
            ``-1`` where no association was found
        """
        check_is_fitted(self, "model_")
        X = check_array(X, dtype=np.float64)
        a_indices = np.full(len(X), NO_CATEGORY, dtype=int)
        b_indices = np.full(len(X), NO_CATEGORY, dtype=int)
        for row, x in enumerate(X):
            outcome = self.model_.predict_association(x)
            if outcome.kind == ResultKind.ASSOCIATION:
                a_indices[row] = outcome.a_index
                b_indices[row] = outcome.b_index
        return a_indices, b_indices

    def predict(self, X) -> np.ndarray:
        _, b_indices = self.predict_ab(X)
        labels = [
            self.unknown_label if b == NO_CATEGORY else self._class_of(b)
            for b in b_indices
        ]
        if self.classes_.dtype.kind in "iuf" and isinstance(self.unknown_label, (int, float)):
            return np.asarray(labels, dtype=self.classes_.dtype)
        return np.asarray(labels, dtype=object)

    def _class_of(self, b_index: int):
        # Target categories are one-hot prototypes; the hot column is the class
        prototype = self.model_.get_category(int(b_index), space="target")
        return self.classes_[int(np.argmax(prototype.lower))]

    def predict_confidence(self, X) -> np.ndarray:
        """Association confidence per sample, 0.0 where nothing was predicted."""
        check_is_fitted(self, "model_")
        X = check_array(X, dtype=np.float64)
        confidence = np.zeros(len(X), dtype=np.float64)
        for row, x in enumerate(X):
            outcome = self.model_.predict_association(x)
            if outcome.ok:
                confidence[row] = outcome.confidence
        return confidence

    @property
    def n_categories_(self) -> int:
        check_is_fitted(self, "model_")
        return self.model_.get_category_count()
