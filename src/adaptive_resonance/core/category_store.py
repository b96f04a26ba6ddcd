"""
Category Store for Adaptive Resonance.

An ordered, append-only collection of category prototypes for one input
space. A category's index is its creation position; categories are never
removed or reordered, so indices are stable for the life of the store.
Prototypes change only through ``update``.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from .complement import box_bounds, box_size
from .errors import DimensionMismatchError

logger = logging.getLogger(__name__)


class Category:
    """
    A single committed category.

    Attributes:
        index: Stable category index (creation position)
        prototype: Complement-coded weight vector
        usage_count: Number of inputs this category has learned
        created_step: Store step at which the category was committed
        last_used_step: Last store step at which the category learned
    """

    def __init__(
        self,
        index: int,
        prototype: np.ndarray,
        created_step: int = 0,
        usage_count: int = 1,
        last_used_step: Optional[int] = None,
    ):
        self.index = index
        self.prototype = np.array(prototype, dtype=np.float64, copy=True)
        self.created_step = created_step
        self.usage_count = usage_count
        self.last_used_step = created_step if last_used_step is None else last_used_step

    def snapshot(self) -> "CategorySnapshot":
        """Read-only copy of this category."""
        prototype = self.prototype.copy()
        prototype.flags.writeable = False
        return CategorySnapshot(
            index=self.index,
            prototype=prototype,
            usage_count=self.usage_count,
            created_step=self.created_step,
            last_used_step=self.last_used_step,
        )

    def to_dict(self) -> Dict:
        """Convert category to dictionary for serialization."""
        return {
            "index": self.index,
            "prototype": self.prototype.tolist(),
            "usage_count": self.usage_count,
            "created_step": self.created_step,
            "last_used_step": self.last_used_step,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Category":
        """Create category from dictionary."""
        return cls(
            index=data["index"],
            prototype=np.array(data["prototype"], dtype=np.float64),
            created_step=data["created_step"],
            usage_count=data["usage_count"],
            last_used_step=data["last_used_step"],
        )


@dataclass(frozen=True)
class CategorySnapshot:
    """Immutable view of a category handed out to callers."""

    index: int
    prototype: np.ndarray
    usage_count: int
    created_step: int
    last_used_step: int

    @property
    def lower(self) -> np.ndarray:
        """Lower corner of the category box in the original space."""
        return box_bounds(self.prototype)[0]

    @property
    def upper(self) -> np.ndarray:
        """Upper corner of the category box in the original space."""
        return box_bounds(self.prototype)[1]

    @property
    def size(self) -> float:
        """L1 size of the category box."""
        return box_size(self.prototype)


class CategoryStore:
    """
    Bounded, append-only collection of categories for one space.

    The store keeps prototypes both as ``Category`` objects and as a stacked
    weight matrix so the resonance engine can score all categories at once.
    """

    def __init__(self, max_categories: int, dimension: Optional[int] = None, name: str = "input"):
        if max_categories < 1:
            raise ValueError(f"max_categories must be >= 1, got {max_categories}")
        if dimension is not None and dimension < 1:
            raise ValueError(f"dimension must be >= 1, got {dimension}")

        self.max_categories = max_categories
        self.name = name
        self._fixed_dimension = dimension
        self.dimension = dimension
        self._categories: List[Category] = []
        self._weights: Optional[np.ndarray] = None
        self.step = 0

    def __len__(self) -> int:
        return len(self._categories)

    @property
    def is_empty(self) -> bool:
        return not self._categories

    @property
    def is_full(self) -> bool:
        return len(self._categories) >= self.max_categories

    @property
    def weights(self) -> np.ndarray:
        """Stacked prototypes, one row per category (read-only view)."""
        if self._weights is None:
            width = 2 * self.dimension if self.dimension else 0
            return np.empty((0, width))
        view = self._weights.view()
        view.flags.writeable = False
        return view

    def check_dimension(self, size: int) -> None:
        """Raise if an original-space vector of length ``size`` does not fit this store."""
        if self.dimension is not None and size != self.dimension:
            raise DimensionMismatchError(self.dimension, size, space=self.name)

    def tick(self) -> int:
        """Advance the store's step counter (one per learning presentation)."""
        self.step += 1
        return self.step

    def add(self, prototype: np.ndarray) -> int:
        """
        Commit a new category.

        Args:
            prototype: Complement-coded prototype

        Returns:
            Index of the new category

        Raises:
            RuntimeError: If the store is at capacity; callers must check
                ``is_full`` first, since exhaustion is an outcome, not an error
        """
        if self.is_full:
            raise RuntimeError(
                f"{self.name} category store is full ({self.max_categories} categories)"
            )
        prototype = np.asarray(prototype, dtype=np.float64)
        if self.dimension is None:
            self.dimension = prototype.size // 2
        elif prototype.size != 2 * self.dimension:
            raise DimensionMismatchError(2 * self.dimension, prototype.size, space=self.name)

        index = len(self._categories)
        category = Category(index=index, prototype=prototype, created_step=self.step)
        self._categories.append(category)
        row = category.prototype.reshape(1, -1)
        self._weights = row.copy() if self._weights is None else np.vstack([self._weights, row])

        logger.debug(f"Created {self.name} category {index}")
        return index

    def update(self, index: int, prototype: np.ndarray) -> None:
        """Replace the prototype of an existing category in place."""
        category = self._get(index)
        category.prototype = np.array(prototype, dtype=np.float64, copy=True)
        category.usage_count += 1
        category.last_used_step = self.step
        self._weights[index] = category.prototype

        logger.debug(f"Updated {self.name} category {index}")

    def prototype(self, index: int) -> np.ndarray:
        """Read-only prototype of a category."""
        view = self._get(index).prototype.view()
        view.flags.writeable = False
        return view

    def get(self, index: int) -> CategorySnapshot:
        """Read-only snapshot of a category."""
        return self._get(index).snapshot()

    def snapshot(self) -> List[CategorySnapshot]:
        """Read-only snapshots of all categories in index order."""
        return [category.snapshot() for category in self._categories]

    def _get(self, index: int) -> Category:
        if not isinstance(index, (int, np.integer)) or isinstance(index, bool):
            raise TypeError(f"Category index must be an int, got {type(index).__name__}")
        if index < 0 or index >= len(self._categories):
            raise IndexError(
                f"Category index {index} out of bounds for "
                f"{len(self._categories)} {self.name} categories"
            )
        return self._categories[index]

    def clear(self) -> None:
        """Discard all categories."""
        self._categories.clear()
        self._weights = None
        self.dimension = self._fixed_dimension
        self.step = 0
        logger.debug(f"Cleared {self.name} category store")

    def state_dict(self) -> Dict:
        """Serializable state, categories in index order."""
        return {
            "name": self.name,
            "max_categories": self.max_categories,
            "dimension": self.dimension,
            "step": self.step,
            "categories": [category.to_dict() for category in self._categories],
        }

    def load_state_dict(self, state: Dict) -> None:
        """Restore categories exactly, preserving index order."""
        categories = [Category.from_dict(data) for data in state["categories"]]
        for position, category in enumerate(categories):
            if category.index != position:
                raise ValueError(
                    f"Category stored at position {position} has index {category.index}"
                )
        if len(categories) > self.max_categories:
            raise ValueError(
                f"State holds {len(categories)} categories, "
                f"capacity is {self.max_categories}"
            )

        self._categories = categories
        self.dimension = state.get("dimension", self._fixed_dimension)
        self.step = state.get("step", 0)
        if categories:
            self._weights = np.stack([category.prototype for category in categories])
        else:
            self._weights = None

    def __repr__(self) -> str:
        return (
            f"CategoryStore(name='{self.name}', categories={len(self)}, "
            f"max_categories={self.max_categories}, dimension={self.dimension})"
        )
