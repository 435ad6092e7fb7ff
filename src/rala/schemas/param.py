"""ParamConfig: Expert defaults for the RALA decoder.

This module defines the complete default configuration. ALL decoder
parameters must have defaults here. No runtime code should define
fallback values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal
from pydantic import Field, field_validator, model_validator
from rala.schemas.base import RalaBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class ScannerConfig(RalaBaseModel):
    """Section scanner configuration."""
    magic: str = Field("GRIB", min_length=4, max_length=4, description="Indicator marker at offset 0")
    supported_edition: int = Field(2, ge=0, le=255)
    first_section_offset: int = Field(16, ge=8, description="Length of the indicator section")
    max_sections: int = Field(32, ge=1, description="Iteration cap for the section loop")


class ValuesConfig(RalaBaseModel):
    """Value decoding configuration.

    The plausibility bound is tuned for MRMS reflectivity (dBZ).
    """
    min_value: float = -50.0
    max_value: float = 100.0
    decimals: int = Field(1, ge=0, le=6)

    @field_validator("min_value", "max_value", mode="before")
    @classmethod
    def coerce_bounds_to_float(cls, v):
        """Allow int or float for bounds."""
        return float(v)

    @model_validator(mode="after")
    def check_bounds_order(self):
        if self.min_value >= self.max_value:
            raise ValueError(
                f"values.min_value ({self.min_value}) must be below values.max_value ({self.max_value})"
            )
        return self


class SamplerConfig(RalaBaseModel):
    """Geographic sampler configuration."""
    stride: int = Field(4, ge=1, description="Down-sampling step applied to rows and columns")
    min_value: float = Field(-30.0, description="Samples at or below this value are dropped")

    @field_validator("min_value", mode="before")
    @classmethod
    def coerce_min_value_to_float(cls, v):
        """Allow int or float for min_value."""
        return float(v)


class ValidityConfig(RalaBaseModel):
    """Validity gate configuration."""
    min_valid_fraction: float = Field(0.01, ge=0.0, lt=1.0)


class DefaultGridConfig(RalaBaseModel):
    """Fallback geometry: the MRMS CONUS mosaic (micro-degrees)."""
    nx: int = Field(7000, ge=1)
    ny: int = Field(3500, ge=1)
    la1: int = 54500000
    lo1: int = -127000000
    la2: int = 20000000
    lo2: int = -60000000
    dx: int = 10000
    dy: int = 10000


class LoggingConfig(RalaBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(RalaBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all decoder parameters.
    Every tunable parameter MUST have a default here.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg)

    Runtime code only sees InternalConfig.
    """

    scanner: ScannerConfig = Field(default_factory=ScannerConfig)
    values: ValuesConfig = Field(default_factory=ValuesConfig)
    sampler: SamplerConfig = Field(default_factory=SamplerConfig)
    validity: ValidityConfig = Field(default_factory=ValidityConfig)
    default_grid: DefaultGridConfig = Field(default_factory=DefaultGridConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
