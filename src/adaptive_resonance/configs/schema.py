"""
Configuration schemas for the Adaptive Resonance package.

This module defines Pydantic models for the single-module learner, the
supervised ARTMAP session and the command-line pipeline, so that every
threshold is validated once, at construction.
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, validator


class MatchTrackingMode(str, Enum):
    """How the input-space vigilance is raised after a map-field conflict."""

    INCREMENT = "increment"
    MATCH_PLUS = "match_plus"


class ARTConfig(BaseModel):
    """Configuration for one Fuzzy ART module (one input space)."""

    vigilance: float = Field(0.75, ge=0.0, le=1.0)
    learning_rate: float = Field(1.0, gt=0.0, le=1.0)
    choice_alpha: float = Field(0.001, gt=0.0)
    max_categories: int = Field(1000, ge=1)
    input_dim: Optional[int] = Field(None, ge=1)
    geometry: str = "fuzzy"

    class Config:
        """Pydantic config."""

        extra = "forbid"
        validate_assignment = True


class ARTMAPConfig(BaseModel):
    """Configuration for a supervised Fuzzy ARTMAP session."""

    input_module: ARTConfig = ARTConfig()
    target_module: ARTConfig = ARTConfig(vigilance=1.0)

    # Map field and match tracking
    map_vigilance: float = Field(0.95, gt=0.0, le=1.0)
    vigilance_increment: float = Field(0.05, gt=0.0, le=1.0)
    max_vigilance: float = Field(1.0, ge=0.0, le=1.0)
    max_search_attempts: int = Field(50, ge=1)
    match_tracking: MatchTrackingMode = MatchTrackingMode.INCREMENT

    # Opt-in: may overwrite an existing association when space A is full
    allow_relaxed_reassignment: bool = False

    @validator("max_vigilance")
    def validate_max_vigilance(cls, v: float, values: dict) -> float:
        """The vigilance ceiling cannot sit below the baseline it raises."""
        input_module = values.get("input_module")
        if input_module is not None and v < input_module.vigilance:
            raise ValueError(
                f"max_vigilance ({v}) must be >= input vigilance "
                f"({input_module.vigilance})"
            )
        return v

    class Config:
        """Pydantic config."""

        extra = "forbid"
        validate_assignment = True
        use_enum_values = True


class DataConfig(BaseModel):
    """Configuration for loading labelled tabular data."""

    train_path: Optional[Path] = None
    test_path: Optional[Path] = None
    label_column: str = "label"
    feature_columns: Optional[List[str]] = None
    normalize: bool = True
    test_size: float = Field(0.2, ge=0.0, lt=1.0)
    shuffle: bool = True

    class Config:
        """Pydantic config."""

        extra = "forbid"


class TrainingConfig(BaseModel):
    """Configuration for the offline training loop."""

    epochs: int = Field(1, ge=1, le=1000)
    log_every: int = Field(100, ge=1)
    stop_when_stable: bool = True

    class Config:
        """Pydantic config."""

        extra = "forbid"


class SystemConfig(BaseModel):
    """Main configuration combining model, data and run settings."""

    artmap: ARTMAPConfig = ARTMAPConfig()
    data: DataConfig = DataConfig()
    training: TrainingConfig = TrainingConfig()

    # Experiment metadata
    experiment_name: str = "adaptive_resonance_experiment"
    tags: List[str] = []

    # Logging and outputs
    log_level: str = Field("INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    log_dir: Optional[Path] = None
    output_dir: Path = Path("outputs")

    # Reproducibility (data shuffling only; learning is deterministic)
    seed: int = Field(42, ge=0)

    class Config:
        """Pydantic config."""

        extra = "forbid"
        validate_assignment = True
        use_enum_values = True
