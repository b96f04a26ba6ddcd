"""
Adaptive Resonance.

Incremental, stability-plastic pattern categorization with Fuzzy ART and
its supervised extension, Fuzzy ARTMAP.

This package provides:
- Complement coding and hyper-box category geometry
- A single-module Fuzzy ART learner with bounded category capacity
- Fuzzy ARTMAP with a map field and match tracking
- scikit-learn compatible estimators
- Data loading, evaluation metrics and a command-line interface
"""

__version__ = "0.1.0"

from .configs.schema import ARTConfig, ARTMAPConfig, MatchTrackingMode, SystemConfig
from .core.art import FuzzyART
from .core.artmap import FuzzyARTMAP
from .core.complement import complement_code, decode
from .core.errors import (
    ARTError,
    DimensionMismatchError,
    InputValidationError,
    SessionClosedError,
)
from .core.estimator import FuzzyARTClusterer, FuzzyARTMAPClassifier
from .core.results import (
    AssociationPrediction,
    CapacityExhausted,
    LearnResult,
    LearnState,
    MapFieldMismatch,
    NoMatch,
    NoMatchReason,
    Prediction,
    ResultKind,
    SearchStep,
    Space,
    TrainSuccess,
)

__all__ = [
    "ARTConfig",
    "ARTMAPConfig",
    "MatchTrackingMode",
    "SystemConfig",
    "FuzzyART",
    "FuzzyARTMAP",
    "FuzzyARTClusterer",
    "FuzzyARTMAPClassifier",
    "complement_code",
    "decode",
    "ARTError",
    "DimensionMismatchError",
    "InputValidationError",
    "SessionClosedError",
    "AssociationPrediction",
    "CapacityExhausted",
    "LearnResult",
    "LearnState",
    "MapFieldMismatch",
    "NoMatch",
    "NoMatchReason",
    "Prediction",
    "ResultKind",
    "SearchStep",
    "Space",
    "TrainSuccess",
]
