"""
Category geometries.

A geometry defines how an input is compared with a category prototype and
how a prototype learns. The learner and the match-tracking controller only
talk to the ``CategoryGeometry`` interface; the fuzzy hyper-rectangle
geometry is registered under ``"fuzzy"``.
"""

import logging
from abc import ABC, abstractmethod

import numpy as np

from ..utils.registry import register_geometry

logger = logging.getLogger(__name__)


class CategoryGeometry(ABC):
    """Capability interface implemented by every category geometry."""

    name: str = "abstract"

    @abstractmethod
    def choice_score(self, coded: np.ndarray, weights: np.ndarray) -> np.ndarray:
        """Category choice (activation) of ``coded`` against each row of ``weights``."""

    @abstractmethod
    def match_score(self, coded: np.ndarray, weights: np.ndarray) -> np.ndarray:
        """Match (resonance) of ``coded`` against each row of ``weights``, in [0, 1]."""

    @abstractmethod
    def update_weights(
        self, coded: np.ndarray, weight: np.ndarray, learning_rate: float
    ) -> np.ndarray:
        """Return the prototype after learning ``coded``."""

    @abstractmethod
    def create_from_input(self, coded: np.ndarray) -> np.ndarray:
        """Return the prototype of a new category committed to ``coded``."""


@register_geometry("fuzzy")
class FuzzyGeometry(CategoryGeometry):
    """
    Fuzzy ART hyper-rectangle geometry.

    With complement-coded inputs each prototype is a box in the original
    space. Learning with the fuzzy min rule can only enlarge a box, so a
    pattern once inside a category stays inside it.

    Attributes:
        choice_alpha: Small positive bias in the choice denominator; it
            avoids division by zero and favours smaller (more specific) boxes
    """

    name = "fuzzy"

    def __init__(self, choice_alpha: float = 0.001):
        if choice_alpha <= 0:
            raise ValueError(f"choice_alpha must be positive, got {choice_alpha}")
        self.choice_alpha = choice_alpha

    @staticmethod
    def _overlap(coded: np.ndarray, weights: np.ndarray) -> np.ndarray:
        # |x ^ w| per category
        return np.minimum(coded, np.atleast_2d(weights)).sum(axis=1)

    def choice_score(self, coded: np.ndarray, weights: np.ndarray) -> np.ndarray:
        weights = np.atleast_2d(weights)
        return self._overlap(coded, weights) / (self.choice_alpha + weights.sum(axis=1))

    def match_score(self, coded: np.ndarray, weights: np.ndarray) -> np.ndarray:
        norm = coded.sum()
        if norm == 0:
            return np.zeros(np.atleast_2d(weights).shape[0])
        return self._overlap(coded, weights) / norm

    def update_weights(
        self, coded: np.ndarray, weight: np.ndarray, learning_rate: float
    ) -> np.ndarray:
        return learning_rate * np.minimum(coded, weight) + (1.0 - learning_rate) * weight

    def create_from_input(self, coded: np.ndarray) -> np.ndarray:
        return np.array(coded, dtype=np.float64, copy=True)

    def __repr__(self) -> str:
        return f"FuzzyGeometry(choice_alpha={self.choice_alpha})"
