"""
Resonance Engine.

Scores a complement-coded input against every category of a store and
selects the resonating winner: the admissible category (match score at or
above vigilance) with the highest choice score, ties going to the lowest
index.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .category_store import CategoryStore
from .geometry import CategoryGeometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Activation:
    """Choice and match scores of one input against all categories."""

    choice: np.ndarray
    match: np.ndarray

    def __len__(self) -> int:
        return self.choice.size

    def admissible(self, vigilance: float) -> np.ndarray:
        """Boolean mask of categories passing the vigilance test."""
        return self.match >= vigilance

    def winner(self, vigilance: float) -> Optional[int]:
        """
        Index of the resonating category, or None if none is admissible.

        ``np.argmax`` returns the first maximum, which gives the
        lowest-index tie-break.
        """
        mask = self.admissible(vigilance)
        if not mask.any():
            return None
        masked = np.where(mask, self.choice, -np.inf)
        return int(np.argmax(masked))

    def closest(self) -> Optional[int]:
        """Index with the highest match score regardless of vigilance."""
        if self.match.size == 0:
            return None
        return int(np.argmax(self.match))


class ResonanceEngine:
    """Per-category comparison kernel for one geometry."""

    def __init__(self, geometry: CategoryGeometry):
        self.geometry = geometry

    def activate(self, coded: np.ndarray, store: CategoryStore) -> Activation:
        """Compute choice and match scores against every stored category."""
        if store.is_empty:
            empty = np.empty(0)
            return Activation(choice=empty, match=empty)

        weights = store.weights
        choice = self.geometry.choice_score(coded, weights)
        match = self.geometry.match_score(coded, weights)
        return Activation(choice=choice, match=match)

    def resonate(
        self, coded: np.ndarray, store: CategoryStore, vigilance: float
    ) -> tuple[Optional[int], Activation]:
        """
        Find the winning category for ``coded`` at ``vigilance``.

        Returns:
            Tuple of (winner index or None, activation scores)
        """
        activation = self.activate(coded, store)
        winner = activation.winner(vigilance)
        if winner is not None:
            logger.debug(
                f"Resonance with {store.name} category {winner} "
                f"(match={activation.match[winner]:.4f}, vigilance={vigilance:.4f})"
            )
        return winner, activation
