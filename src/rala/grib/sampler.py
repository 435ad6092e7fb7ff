"""Thin a dense grid into geo-tagged samples for transport."""

import logging
from typing import TYPE_CHECKING, Iterable, Optional

import numpy as np
import pandas as pd

from rala.grib.types import DenseValueGrid, GeoSample, GridGeometry

if TYPE_CHECKING:
    from rala.schemas import InternalConfig

__all__ = ['GeoSampler', 'samples_to_frame']

logger = logging.getLogger(__name__)


class GeoSampler:
    """Config-driven down-sampling and threshold filtering.

    Rows and columns are both stepped by ``stride``. Cells that are missing
    or at/below ``min_value`` are dropped. Output follows row-major order
    and is a pure function of the inputs.
    """

    def __init__(self, config: "InternalConfig"):
        self.stride = config.sampler.stride
        self.min_value = config.sampler.min_value
        self.decimals = config.values.decimals

    def sample(self, grid: DenseValueGrid, geometry: GridGeometry,
               stride: Optional[int] = None) -> list[GeoSample]:
        """Return the retained cells of ``grid`` as GeoSamples.

        Parameters
        ----------
        grid : DenseValueGrid
            Decoded values, length ``geometry.npoints``.
        geometry : GridGeometry
            Grid the values were decoded against.
        stride : int, optional
            Overrides the configured stride.
        """
        stride = self.stride if stride is None else stride
        if stride < 1:
            raise ValueError(f"stride must be >= 1, got {stride}")

        rows = np.arange(0, geometry.ny, stride)
        cols = np.arange(0, geometry.nx, stride)
        subset = grid.as_2d()[np.ix_(rows, cols)]

        with np.errstate(invalid="ignore"):
            keep = ~np.isnan(subset) & (subset > self.min_value)
        r_idx, c_idx = np.nonzero(keep)

        lats = geometry.latitudes(rows[r_idx])
        lons = geometry.longitudes(cols[c_idx])
        values = np.round(subset[r_idx, c_idx], self.decimals)

        samples = [GeoSample(float(lat), float(lon), float(value))
                   for lat, lon, value in zip(lats, lons, values)]
        logger.info("Sampled %d points (stride=%d, threshold=%g) from %dx%d grid",
                    len(samples), stride, self.min_value, geometry.nx, geometry.ny)
        return samples


def samples_to_frame(samples: Iterable[GeoSample]) -> pd.DataFrame:
    """Tabulate samples as a DataFrame with lat, lon, value columns."""
    return pd.DataFrame([s.to_dict() for s in samples], columns=["lat", "lon", "value"])
