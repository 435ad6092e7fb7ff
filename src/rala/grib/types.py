"""Data model shared by the GRIB2 decode stages.

Coordinates in GridGeometry stay in the on-disk micro-degree integers;
conversion to degrees happens only where samples or coordinate arrays
are produced.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Generic, Iterator, Optional, TypeVar, Union

import numpy as np
import xarray as xr

from rala.contracts.failure import MissingSection, describe_header

__all__ = [
    "RawSection",
    "ScanResult",
    "GridGeometry",
    "SimplePacking",
    "ImagePacking",
    "DegradedPacking",
    "PackingParameters",
    "StageOutcome",
    "DenseValueGrid",
    "GeoSample",
    "ProductMetadata",
    "RadarProduct",
    "normalize_longitude",
]

MICRO_DEGREES = 1e6

T = TypeVar("T")


def normalize_longitude(lon):
    """Shift longitudes from the 0-360 system into [-180, 180).

    Works on scalars and numpy arrays.
    """
    if np.ndim(lon) == 0:
        return lon - 360.0 if lon >= 180.0 else lon
    lon = np.asarray(lon, dtype=np.float64)
    return np.where(lon >= 180.0, lon - 360.0, lon)


@dataclass(frozen=True)
class RawSection:
    """One length-delimited section, header bytes included in ``data``."""
    offset: int
    length: int
    number: int
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class ScanResult:
    """Indicator fields plus the section table of one message."""
    discipline: int
    edition: int
    total_length: int
    sections: dict[int, RawSection]
    header: bytes = field(repr=False)

    def __contains__(self, number: int) -> bool:
        return number in self.sections

    def get(self, number: int) -> Optional[RawSection]:
        return self.sections.get(number)

    def section(self, number: int) -> RawSection:
        """Return a mandatory section or raise MissingSection."""
        try:
            return self.sections[number]
        except KeyError:
            raise MissingSection(
                f"Section {number} not found in GRIB2 message",
                section=number,
                found=self.lengths(),
                **describe_header(self.header),
            ) from None

    def lengths(self) -> dict[int, int]:
        return {number: s.length for number, s in sorted(self.sections.items())}


@dataclass(frozen=True)
class GridGeometry:
    """Regular lat/lon lattice, all angles in micro-degrees."""
    nx: int
    ny: int
    la1: int
    lo1: int
    la2: int
    lo2: int
    dx: int
    dy: int

    @property
    def npoints(self) -> int:
        return self.nx * self.ny

    def latitudes(self, rows=None) -> np.ndarray:
        """Latitude in degrees of each row (north to south)."""
        rows = np.arange(self.ny) if rows is None else np.asarray(rows)
        return self.la1 / MICRO_DEGREES - (rows * self.dy) / MICRO_DEGREES

    def longitudes(self, cols=None) -> np.ndarray:
        """Normalized longitude in degrees of each column."""
        cols = np.arange(self.nx) if cols is None else np.asarray(cols)
        return normalize_longitude(self.lo1 / MICRO_DEGREES + (cols * self.dx) / MICRO_DEGREES)

    def to_dict(self) -> dict[str, int]:
        return {
            "nx": self.nx, "ny": self.ny,
            "la1": self.la1, "lo1": self.lo1,
            "la2": self.la2, "lo2": self.lo2,
            "dx": self.dx, "dy": self.dy,
        }


@dataclass(frozen=True)
class _ScaledPacking:
    reference_value: float
    binary_scale: int
    decimal_scale: int
    bits_per_value: int

    @property
    def factors(self) -> tuple[float, float]:
        """(2^E, 10^D) as floats; inf or 0.0 when out of float64 range."""
        with np.errstate(over="ignore", under="ignore"):
            binary = float(np.ldexp(1.0, self.binary_scale))
            decimal = float(np.power(10.0, float(self.decimal_scale)))
        return binary, decimal

    @property
    def representable(self) -> bool:
        binary, decimal = self.factors
        return bool(np.isfinite(binary) and binary > 0 and np.isfinite(decimal) and decimal > 0)

    def scale(self, raw: np.ndarray) -> np.ndarray:
        """Apply (R + X * 2^E) / 10^D to raw integer codes."""
        raw = np.asarray(raw, dtype=np.float64)
        binary, decimal = self.factors
        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            return (self.reference_value + raw * binary) / decimal


@dataclass(frozen=True)
class SimplePacking(_ScaledPacking):
    """Template 5.0: flat big-endian array of fixed-width codes."""
    kind = "simple"
    template = 0


@dataclass(frozen=True)
class ImagePacking(_ScaledPacking):
    """Template 5.41: codes stored as pixels of an embedded PNG."""
    kind = "image"
    template = 41


@dataclass(frozen=True)
class DegradedPacking:
    """Unknown or unreadable template; carries no scale information."""
    template: Optional[int]
    bits_per_value: int = 16
    kind = "degraded"


PackingParameters = Union[SimplePacking, ImagePacking, DegradedPacking]


@dataclass(frozen=True)
class StageOutcome(Generic[T]):
    """Result of a stage that degrades instead of failing.

    ``defaulted`` is True when ``value`` is a substitute rather than
    what the input declared; ``reason`` says why.
    """
    value: T
    defaulted: bool = False
    reason: Optional[str] = None


@dataclass
class DenseValueGrid:
    """Row-major physical values, NaN where missing.

    Index of (row, col) is ``row * nx + col``.
    """
    nx: int
    ny: int
    values: np.ndarray = field(repr=False)

    @classmethod
    def empty(cls, nx: int, ny: int) -> "DenseValueGrid":
        return cls(nx, ny, np.full(nx * ny, np.nan, dtype=np.float64))

    def __len__(self) -> int:
        return int(self.values.size)

    def __getitem__(self, index: int) -> Optional[float]:
        value = self.values[index]
        return None if np.isnan(value) else float(value)

    def __iter__(self) -> Iterator[Optional[float]]:
        for value in self.values:
            yield None if np.isnan(value) else float(value)

    @property
    def valid_mask(self) -> np.ndarray:
        return ~np.isnan(self.values)

    @property
    def valid_count(self) -> int:
        return int(np.count_nonzero(self.valid_mask))

    @property
    def valid_fraction(self) -> float:
        if self.values.size == 0:
            return 0.0
        return self.valid_count / self.values.size

    def as_2d(self) -> np.ndarray:
        return self.values.reshape(self.ny, self.nx)

    def to_list(self) -> list[Optional[float]]:
        return list(self)

    def to_dataset(self, geometry: GridGeometry, var_name: str = "reflectivity") -> xr.Dataset:
        """Wrap the grid as a 2D xarray.Dataset on (y, x) with lat/lon coordinates."""
        return xr.Dataset(
            {var_name: (("y", "x"), self.as_2d())},
            coords={
                "y": np.arange(self.ny),
                "x": np.arange(self.nx),
                "lat": ("y", geometry.latitudes()),
                "lon": ("x", geometry.longitudes()),
            },
            attrs={
                "valid_count": self.valid_count,
                "valid_fraction": self.valid_fraction,
                **{f"grid_{k}": v for k, v in geometry.to_dict().items()},
            },
        )


@dataclass(frozen=True)
class GeoSample:
    lat: float
    lon: float
    value: float

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lon": self.lon, "value": self.value}


@dataclass(frozen=True)
class ProductMetadata:
    """Descriptive fields of one decoded product."""
    discipline: int
    parameter_category: int
    parameter_number: int
    packing: str
    valid_count: int
    total_count: int
    grid_defaulted: bool = False
    data_source: str = "MRMS"
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def valid_fraction(self) -> float:
        return self.valid_count / self.total_count if self.total_count else 0.0

    def to_dict(self) -> dict:
        return {
            "discipline": self.discipline,
            "parameter_category": self.parameter_category,
            "parameter_number": self.parameter_number,
            "packing": self.packing,
            "valid_count": self.valid_count,
            "total_count": self.total_count,
            "valid_fraction": self.valid_fraction,
            "grid_defaulted": self.grid_defaulted,
            "data_source": self.data_source,
            "timestamp": self.timestamp,
        }


@dataclass
class RadarProduct:
    """Everything the API layer serializes for one message."""
    samples: list[GeoSample]
    geometry: GridGeometry
    metadata: ProductMetadata
    values: Optional[DenseValueGrid] = field(default=None, repr=False)

    def to_dict(self) -> dict:
        return {
            "grid": self.geometry.to_dict(),
            "points": [s.to_dict() for s in self.samples],
            "metadata": self.metadata.to_dict(),
        }
