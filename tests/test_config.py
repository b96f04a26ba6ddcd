"""
Tests for the configuration schemas.
"""

import pytest
from pydantic import ValidationError

from adaptive_resonance.configs.schema import (
    ARTConfig,
    ARTMAPConfig,
    DataConfig,
    MatchTrackingMode,
    SystemConfig,
    TrainingConfig,
)


class TestARTConfig:
    """Tests for ARTConfig."""

    def test_defaults(self):
        config = ARTConfig()

        assert config.vigilance == 0.75
        assert config.learning_rate == 1.0
        assert config.choice_alpha == 0.001
        assert config.max_categories == 1000
        assert config.input_dim is None
        assert config.geometry == "fuzzy"

    @pytest.mark.parametrize("field,value", [
        ("vigilance", -0.01),
        ("vigilance", 1.01),
        ("learning_rate", 0.0),
        ("learning_rate", 1.5),
        ("choice_alpha", 0.0),
        ("max_categories", 0),
        ("input_dim", 0),
    ])
    def test_out_of_range(self, field, value):
        with pytest.raises(ValidationError):
            ARTConfig(**{field: value})

    def test_boundary_vigilance(self):
        assert ARTConfig(vigilance=0.0).vigilance == 0.0
        assert ARTConfig(vigilance=1.0).vigilance == 1.0

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            ARTConfig(vigilence=0.8)

    def test_assignment_is_validated(self):
        config = ARTConfig()
        with pytest.raises(ValidationError):
            config.vigilance = 2.0


class TestARTMAPConfig:
    """Tests for ARTMAPConfig."""

    def test_defaults(self):
        config = ARTMAPConfig()

        assert config.target_module.vigilance == 1.0
        assert config.map_vigilance == 0.95
        assert config.max_vigilance == 1.0
        assert config.match_tracking == MatchTrackingMode.INCREMENT
        assert not config.allow_relaxed_reassignment

    def test_nested_dicts_are_parsed(self):
        config = ARTMAPConfig(input_module={"vigilance": 0.6}, match_tracking="match_plus")

        assert isinstance(config.input_module, ARTConfig)
        assert config.input_module.vigilance == 0.6
        assert config.match_tracking == MatchTrackingMode.MATCH_PLUS

    def test_ceiling_below_baseline_rejected(self):
        with pytest.raises(ValidationError):
            ARTMAPConfig(input_module={"vigilance": 0.8}, max_vigilance=0.7)

    def test_ceiling_equal_to_baseline_allowed(self):
        config = ARTMAPConfig(input_module={"vigilance": 0.8}, max_vigilance=0.8)
        assert config.max_vigilance == 0.8

    @pytest.mark.parametrize("field,value", [
        ("map_vigilance", 0.0),
        ("vigilance_increment", 0.0),
        ("max_search_attempts", 0),
        ("match_tracking", "sometimes"),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            ARTMAPConfig(**{field: value})

    def test_dict_round_trip(self):
        config = ARTMAPConfig(input_module={"vigilance": 0.6}, match_tracking="match_plus")
        assert ARTMAPConfig(**config.dict()) == config


class TestSystemConfig:
    """Tests for the pipeline configuration."""

    def test_defaults(self):
        config = SystemConfig()

        assert isinstance(config.data, DataConfig)
        assert isinstance(config.training, TrainingConfig)
        assert config.data.label_column == "label"
        assert config.training.epochs == 1
        assert config.log_level == "INFO"

    def test_log_level_pattern(self):
        with pytest.raises(ValidationError):
            SystemConfig(log_level="verbose")

    def test_test_size_range(self):
        with pytest.raises(ValidationError):
            DataConfig(test_size=1.0)

    def test_nested_overrides(self):
        config = SystemConfig(
            artmap={"input_module": {"vigilance": 0.85}},
            training={"epochs": 3},
            tags=["smoke"],
        )

        assert config.artmap.input_module.vigilance == 0.85
        assert config.training.epochs == 3
        assert config.tags == ["smoke"]
