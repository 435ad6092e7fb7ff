"""Decode the grid definition section (section 3).

Offsets are relative to the start of the section, header included:

    bytes  6-9   number of data points
    bytes 12-13  grid definition template number
    bytes 30-33  Ni (nx)            bytes 34-37  Nj (ny)
    bytes 46-49  La1                bytes 50-53  Lo1
    bytes 55-58  La2                bytes 59-62  Lo2
    bytes 63-66  Di (dx)            bytes 67-70  Dj (dy)

Angles are integers in micro-degrees.
"""

import logging
import struct
from typing import TYPE_CHECKING, Optional

from rala.grib.types import GridGeometry, StageOutcome

if TYPE_CHECKING:
    from rala.schemas import InternalConfig

__all__ = ['GridDefinitionDecoder']

logger = logging.getLogger(__name__)

MIN_SECTION_LENGTH = 72
TEMPLATE_OFFSET = 12
POINT_COUNT_OFFSET = 6
LATLON_TEMPLATES = {
    0: "latitude/longitude",
    30: "lambert conformal",
}

# (name, offset, format)
_FIELDS = (
    ("nx", 30, ">I"),
    ("ny", 34, ">I"),
    ("la1", 46, ">i"),
    ("lo1", 50, ">i"),
    ("la2", 55, ">i"),
    ("lo2", 59, ">i"),
    ("dx", 63, ">i"),
    ("dy", 67, ">i"),
)


class GridDefinitionDecoder:
    """Read grid geometry, substituting the default grid when unreadable.

    Every template is read with the lat/lon layout; MRMS mosaics only use
    that layout, so other template numbers are logged and decoded anyway.
    """

    def __init__(self, config: "InternalConfig"):
        self.default_geometry = GridGeometry(**config.default_grid.model_dump())

    def decode(self, payload: Optional[bytes]) -> StageOutcome[GridGeometry]:
        """Decode ``payload`` into a GridGeometry.

        Parameters
        ----------
        payload : bytes or None
            Complete section 3 bytes, or None if the section is absent.

        Returns
        -------
        StageOutcome[GridGeometry]
            ``defaulted`` is True when the default grid was substituted.
        """
        if payload is None:
            return self._defaulted("grid definition section absent")
        if len(payload) < MIN_SECTION_LENGTH:
            return self._defaulted(f"section too short: {len(payload)} bytes")

        try:
            (template,) = struct.unpack_from(">H", payload, TEMPLATE_OFFSET)
            (declared_points,) = struct.unpack_from(">I", payload, POINT_COUNT_OFFSET)
            fields = {name: struct.unpack_from(fmt, payload, offset)[0]
                      for name, offset, fmt in _FIELDS}
        except struct.error as exc:
            return self._defaulted(f"unreadable field: {exc}")

        if template not in LATLON_TEMPLATES:
            logger.warning("Grid template %d not supported; reading lat/lon layout anyway", template)
        elif template != 0:
            logger.info("Grid template %d (%s) read with lat/lon layout",
                        template, LATLON_TEMPLATES[template])

        geometry = GridGeometry(**fields)
        if geometry.nx == 0 or geometry.ny == 0:
            return self._defaulted(f"empty grid {geometry.nx}x{geometry.ny}")
        if declared_points != geometry.npoints:
            return self._defaulted(
                f"section declares {declared_points} points but grid is {geometry.nx}x{geometry.ny}")

        logger.info("Grid: %dx%d, lat %.4f to %.4f, lon %.4f to %.4f",
                    geometry.nx, geometry.ny,
                    geometry.la1 / 1e6, geometry.la2 / 1e6,
                    geometry.lo1 / 1e6, geometry.lo2 / 1e6)
        return StageOutcome(geometry)

    def _defaulted(self, reason: str) -> StageOutcome[GridGeometry]:
        logger.warning("Using default grid (%s)", reason)
        return StageOutcome(self.default_geometry, defaulted=True, reason=reason)
