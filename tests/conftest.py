"""Root-level pytest fixtures for the RALA test suite.

Provides shared configuration fixtures following the Pydantic-based
config layers. Tests use these fixtures instead of raw dict configs.
"""

import pytest

from rala.schemas import ParamConfig, UserConfig, resolve_config


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Examples
    --------
    >>> def test_sampler_init(internal_config):
    ...     sampler = GeoSampler(internal_config)
    ...     assert sampler.stride == 4
    """
    return resolve_config(param_config, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_custom_stride(make_config):
    ...     config = make_config(stride=1)
    ...     assert GeoSampler(config).stride == 1
    """
    def _make(**user_overrides):
        if user_overrides:
            return resolve_config(param_config, UserConfig(**user_overrides))
        return resolve_config(param_config, None)

    return _make
