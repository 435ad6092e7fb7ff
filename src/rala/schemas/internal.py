"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that decoding code depends on.
"""

from typing import Literal
from pydantic import ConfigDict, Field, model_validator
from rala.schemas.base import RalaBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalScannerConfig(RalaBaseModel):
    """Runtime scanner configuration."""
    magic: str = Field(min_length=4, max_length=4)
    supported_edition: int
    first_section_offset: int
    max_sections: int = Field(ge=1)


class InternalValuesConfig(RalaBaseModel):
    """Runtime value decoding configuration."""
    min_value: float
    max_value: float
    decimals: int

    @model_validator(mode="after")
    def check_bounds_order(self):
        if self.min_value >= self.max_value:
            raise ValueError(
                f"values.min_value ({self.min_value}) must be below values.max_value ({self.max_value})"
            )
        return self


class InternalSamplerConfig(RalaBaseModel):
    """Runtime sampler configuration."""
    stride: int = Field(ge=1)
    min_value: float


class InternalValidityConfig(RalaBaseModel):
    """Runtime validity gate configuration."""
    min_valid_fraction: float = Field(ge=0.0, lt=1.0)


class InternalDefaultGridConfig(RalaBaseModel):
    """Runtime fallback geometry."""
    nx: int = Field(ge=1)
    ny: int = Field(ge=1)
    la1: int
    lo1: int
    la2: int
    lo2: int
    dx: int
    dy: int


class InternalLoggingConfig(RalaBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(RalaBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that decoding code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.stride = config.sampler.stride  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation in runtime code
    """

    scanner: InternalScannerConfig
    values: InternalValuesConfig
    sampler: InternalSamplerConfig
    validity: InternalValidityConfig
    default_grid: InternalDefaultGridConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
