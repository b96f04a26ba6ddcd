"""
Result types returned by the learners and the ARTMAP session.

Every result is a frozen dataclass carrying a ``kind`` tag, so callers
branch on ``result.kind`` (or ``result.ok``) rather than on the class.
Capacity exhaustion and map-field mismatch are ordinary outcomes and are
always returned, never raised.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class ResultKind(str, Enum):
    """Tag shared by all result variants."""

    LEARNED = "learned"
    PREDICTED = "predicted"
    NO_MATCH = "no_match"
    ASSOCIATION = "association"
    TRAIN_SUCCESS = "train_success"
    MAP_FIELD_MISMATCH = "map_field_mismatch"
    CAPACITY_EXHAUSTED = "capacity_exhausted"


class LearnState(str, Enum):
    """States of one single-module learning step."""

    SEARCHING = "searching"
    MATCHED = "matched"
    CREATED = "created"
    EXHAUSTED = "exhausted"


class NoMatchReason(str, Enum):
    """Why no category was returned."""

    EMPTY = "empty"
    NO_RESONANCE = "no_resonance"
    EXHAUSTED = "exhausted"
    UNMAPPED = "unmapped"


class Space(str, Enum):
    """The two category spaces of an ARTMAP session."""

    INPUT = "input"
    TARGET = "target"


@dataclass(frozen=True)
class LearnResult:
    """A category learned the input (matched or newly created)."""

    category_index: int
    score: float
    choice: float
    state: LearnState
    kind: ResultKind = field(default=ResultKind.LEARNED, init=False)

    @property
    def was_new_category(self) -> bool:
        return self.state is LearnState.CREATED

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Prediction:
    """Read-only classification of an input against existing categories."""

    category_index: int
    score: float
    choice: float
    kind: ResultKind = field(default=ResultKind.PREDICTED, init=False)

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class NoMatch:
    """No category was returned; see ``reason``."""

    reason: NoMatchReason
    kind: ResultKind = field(default=ResultKind.NO_MATCH, init=False)

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class SearchStep:
    """One match-tracking attempt."""

    attempt: int
    vigilance: float
    input_index: Optional[int]
    match_score: float
    state: LearnState


SearchTrace = Tuple[SearchStep, ...]


@dataclass(frozen=True)
class TrainSuccess:
    """The input was associated with the target's category."""

    a_index: int
    b_index: int
    map_field_confidence: float
    was_new_mapping: bool
    a_score: float
    b_score: float
    search_trace: SearchTrace = ()
    reassigned_from: Optional[int] = None
    kind: ResultKind = field(default=ResultKind.TRAIN_SUCCESS, init=False)

    @property
    def ok(self) -> bool:
        return True

    @property
    def was_reassigned(self) -> bool:
        return self.reassigned_from is not None


@dataclass(frozen=True)
class MapFieldMismatch:
    """
    Match tracking could not reconcile the input with its target.

    Attributes:
        expected_index: Target-space category the input should map to
        actual_index: Target-space category the winning input category maps to
        input_index: Input-space category that won the final attempt
        search_trace: Every attempt, in order
    """

    expected_index: int
    actual_index: int
    input_index: int
    search_trace: SearchTrace = ()
    kind: ResultKind = field(default=ResultKind.MAP_FIELD_MISMATCH, init=False)

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class CapacityExhausted:
    """A category store was full and no admissible category existed."""

    space: Space
    target_index: Optional[int] = None
    search_trace: SearchTrace = ()
    kind: ResultKind = field(default=ResultKind.CAPACITY_EXHAUSTED, init=False)

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class AssociationPrediction:
    """Predicted input-space category and the target category it maps to."""

    a_index: int
    b_index: int
    score: float
    confidence: float
    kind: ResultKind = field(default=ResultKind.ASSOCIATION, init=False)

    @property
    def ok(self) -> bool:
        return True


LearnOutcome = Union[LearnResult, NoMatch]
PredictOutcome = Union[Prediction, NoMatch]
TrainOutcome = Union[TrainSuccess, MapFieldMismatch, CapacityExhausted]
AssociationOutcome = Union[AssociationPrediction, NoMatch]
