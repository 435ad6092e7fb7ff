"""Test config resolution and validation with Pydantic."""

import pytest
from pydantic import ValidationError

from rala.schemas import InternalConfig, ParamConfig, UserConfig, resolve_config
from rala.schemas.resolve import deep_merge
from rala.schemas.user import UserSamplerConfig


class TestConfigResolution:
    """Test resolve_config() precedence and merging."""

    def test_resolve_config_all_defaults(self):
        config = resolve_config(ParamConfig(), None)

        assert isinstance(config, InternalConfig)
        assert config.scanner.magic == "GRIB"
        assert config.scanner.supported_edition == 2
        assert config.values.min_value == -50.0
        assert config.values.max_value == 100.0
        assert config.sampler.stride == 4
        assert config.sampler.min_value == -30.0
        assert config.validity.min_valid_fraction == 0.01
        assert config.default_grid.nx == 7000

    def test_no_arguments_uses_defaults(self):
        assert resolve_config() == resolve_config(ParamConfig(), UserConfig())

    def test_user_config_overrides_param_config(self):
        config = resolve_config(ParamConfig(), UserConfig(stride=2, threshold=5))

        assert config.sampler.stride == 2
        assert config.sampler.min_value == 5.0

    def test_nested_override_wins_over_flat(self):
        user = UserConfig(stride=2, sampler=UserSamplerConfig(stride=8))

        assert resolve_config(ParamConfig(), user).sampler.stride == 8

    def test_dict_inputs_are_validated(self):
        config = resolve_config({"sampler": {"stride": 3}}, {"MAX_VALUE": 80})

        assert config.sampler.stride == 3
        assert config.values.max_value == 80.0

    def test_internal_config_is_frozen(self):
        config = resolve_config()

        with pytest.raises(ValidationError):
            config.sampler = None


class TestConfigValidation:
    def test_inverted_bounds_rejected(self):
        with pytest.raises(ValueError, match="min_value"):
            resolve_config(ParamConfig(), UserConfig(min_value=50, max_value=10))

    def test_zero_stride_rejected(self):
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig(stride=0))

    def test_fraction_must_be_below_one(self):
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig(min_valid_fraction=1.0))

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig(log_level="verbose"))

    def test_param_config_forbids_extra(self):
        with pytest.raises(ValidationError):
            ParamConfig(unknown_section={})


def test_deep_merge():
    base = {"a": 1, "b": {"c": 2, "d": 3}}
    override = {"b": {"d": 4, "e": 5}, "f": 6}

    assert deep_merge(base, override) == {"a": 1, "b": {"c": 2, "d": 4, "e": 5}, "f": 6}
    assert base == {"a": 1, "b": {"c": 2, "d": 3}}
