"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., STRIDE → stride, LOG_LEVEL → log_level).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient to accept
both uppercase and lowercase keys, integers where floats are expected, etc.
"""

from typing import Optional
from pydantic import Field, field_validator
from rala.schemas.base import RalaBaseModel


class UserValuesConfig(RalaBaseModel):
    """User-facing value decoding config."""
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    decimals: Optional[int] = None


class UserSamplerConfig(RalaBaseModel):
    """User-facing sampler config."""
    stride: Optional[int] = None
    min_value: Optional[float] = None


class UserScannerConfig(RalaBaseModel):
    """User-facing scanner config."""
    max_sections: Optional[int] = None
    supported_edition: Optional[int] = None


class UserConfig(RalaBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    This config is converted to internal overrides during resolution.

    Usage
    -----
        user_cfg = UserConfig(stride=2, threshold=0, max_value=80)
        internal = resolve_config(param_cfg, user_cfg)
    """

    # Sampler settings (flat aliases)
    stride: Optional[int] = Field(None, alias="STRIDE")
    threshold: Optional[float] = Field(None, alias="THRESHOLD")

    # Value bounds (flat aliases)
    min_value: Optional[float] = Field(None, alias="MIN_VALUE")
    max_value: Optional[float] = Field(None, alias="MAX_VALUE")

    # Gate and scanner (flat aliases)
    min_valid_fraction: Optional[float] = Field(None, alias="MIN_VALID_FRACTION")
    max_sections: Optional[int] = Field(None, alias="MAX_SECTIONS")

    log_level: Optional[str] = Field(None, alias="LOG_LEVEL")

    # Nested overrides (advanced users)
    scanner: Optional[UserScannerConfig] = None
    values: Optional[UserValuesConfig] = None
    sampler: Optional[UserSamplerConfig] = None
    default_grid: Optional[dict[str, int]] = None

    model_config = RalaBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("threshold", "min_value", "max_value", "min_valid_fraction", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        # Scanner section
        scanner = {}
        if self.max_sections is not None:
            scanner["max_sections"] = self.max_sections
        if self.scanner is not None:
            scanner.update(self.scanner.model_dump(exclude_none=True))
        if scanner:
            overrides["scanner"] = scanner

        # Values section
        values = {}
        if self.min_value is not None:
            values["min_value"] = self.min_value
        if self.max_value is not None:
            values["max_value"] = self.max_value
        if self.values is not None:
            values.update(self.values.model_dump(exclude_none=True))
        if values:
            overrides["values"] = values

        # Sampler section
        sampler = {}
        if self.stride is not None:
            sampler["stride"] = self.stride
        if self.threshold is not None:
            sampler["min_value"] = self.threshold
        if self.sampler is not None:
            sampler.update(self.sampler.model_dump(exclude_none=True))
        if sampler:
            overrides["sampler"] = sampler

        if self.min_valid_fraction is not None:
            overrides["validity"] = {"min_valid_fraction": self.min_valid_fraction}

        if self.default_grid:
            overrides["default_grid"] = dict(self.default_grid)

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
