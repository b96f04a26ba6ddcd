"""
Map Field.

Associates input-space categories with target-space categories. Each
input category maps to at most one target category; an entry is created
once and is never overwritten by ``associate``. The only way to change an
entry is the explicit ``reassign`` path.
"""

import logging
from enum import Enum
from numbers import Integral
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)


class Association(str, Enum):
    """Result of ``MapField.associate``."""

    CREATED = "created"
    CONFIRMED = "confirmed"
    CONFLICT = "conflict"


class MapField:
    """One-to-one-per-input-category association table."""

    def __init__(self):
        self._entries: Dict[int, int] = {}
        self.reassignment_history: List[Dict[str, int]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, input_index: int) -> bool:
        return input_index in self._entries

    def lookup(self, input_index: int) -> Optional[int]:
        """Target category mapped from ``input_index``, if any."""
        return self._entries.get(input_index)

    def associate(self, input_index: int, target_index: int) -> Association:
        """
        Record ``input_index -> target_index``.

        The first association of an input category is definitional. An
        existing, different entry is reported as a conflict and left intact;
        resolving it is the caller's job.
        """
        self._check_index(input_index)
        self._check_index(target_index)

        existing = self._entries.get(input_index)
        if existing is None:
            self._entries[int(input_index)] = int(target_index)
            logger.debug(f"Map field: input {input_index} -> target {target_index}")
            return Association.CREATED
        if existing == target_index:
            return Association.CONFIRMED

        logger.debug(
            f"Map field conflict: input {input_index} maps to {existing}, "
            f"not {target_index}"
        )
        return Association.CONFLICT

    def activation(self, input_index: int, target_index: int) -> float:
        """
        Map-field confidence that ``input_index`` predicts ``target_index``.

        An uncommitted input category predicts every target equally (1.0);
        a committed one predicts only its own target.
        """
        existing = self._entries.get(input_index)
        if existing is None or existing == target_index:
            return 1.0
        return 0.0

    def reassign(self, input_index: int, target_index: int) -> Optional[int]:
        """
        Explicitly overwrite an entry.

        Returns:
            The previous target index, or None if there was no entry
        """
        self._check_index(input_index)
        self._check_index(target_index)

        previous = self._entries.get(input_index)
        self._entries[int(input_index)] = int(target_index)
        if previous is not None and previous != target_index:
            self.reassignment_history.append({
                "input_index": input_index,
                "previous_target": previous,
                "target_index": target_index,
            })
            logger.warning(
                f"Map field reassigned: input {input_index} {previous} -> {target_index}"
            )
        return previous

    def categories_for(self, target_index: int) -> List[int]:
        """Input categories currently mapped to ``target_index``, ascending."""
        return sorted(a for a, b in self._entries.items() if b == target_index)

    def snapshot(self) -> Mapping[int, int]:
        """Read-only copy of all entries."""
        return MappingProxyType(dict(sorted(self._entries.items())))

    def clear(self) -> None:
        self._entries.clear()
        self.reassignment_history.clear()

    def state_dict(self) -> Dict:
        return {
            "entries": [[a, b] for a, b in sorted(self._entries.items())],
            "reassignment_history": list(self.reassignment_history),
        }

    def load_state_dict(self, state: Dict) -> None:
        entries: Dict[int, int] = {}
        for input_index, target_index in state["entries"]:
            if input_index in entries:
                raise ValueError(f"Duplicate map field entry for input {input_index}")
            entries[int(input_index)] = int(target_index)
        self._entries = entries
        self.reassignment_history = list(state.get("reassignment_history", []))

    @staticmethod
    def _check_index(index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, Integral) or index < 0:
            raise ValueError(f"Category index must be a non-negative int, got {index!r}")

    def __repr__(self) -> str:
        return f"MapField(entries={len(self._entries)})"
