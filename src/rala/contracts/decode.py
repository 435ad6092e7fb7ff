"""Value and sampling stage contracts.

Enforces the guarantees that downstream consumers (validity gate,
sampler, JSON serialization) rely on.
"""

import math

import numpy as np

from rala.contracts.base import require


def assert_dense_grid(grid, geometry) -> None:
    """Enforce value stage contract.

    Called immediately after value decoding.

    Parameters
    ----------
    grid : DenseValueGrid
        Output of ValueDecoder.decode()

    geometry : GridGeometry
        Geometry the grid was decoded against

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        grid.values.ndim == 1,
        f"Value contract violated: values have {grid.values.ndim} dims, expected 1"
    )
    require(
        len(grid) == geometry.nx * geometry.ny,
        f"Value contract violated: {len(grid)} slots for a {geometry.nx}x{geometry.ny} grid"
    )
    require(
        np.issubdtype(grid.values.dtype, np.floating),
        f"Value contract violated: dtype {grid.values.dtype} is not floating"
    )


def assert_samples(samples) -> None:
    """Enforce sampling stage contract: finite values, normalized longitudes."""
    for sample in samples:
        require(
            math.isfinite(sample.value),
            f"Sample contract violated: non-finite value at ({sample.lat}, {sample.lon})"
        )
        require(
            -180.0 <= sample.lon < 180.0,
            f"Sample contract violated: longitude {sample.lon} outside [-180, 180)"
        )
