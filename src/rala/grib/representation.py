"""Decode the data representation section (section 5).

Offsets are relative to the start of the section, header included:

    bytes  9-10  data representation template number
    bytes 11-14  reference value R (IEEE 32-bit float)
    bytes 15-16  binary scale factor E
    bytes 17-18  decimal scale factor D
    byte  19     bits per value
"""

import logging
import struct
from typing import Optional

from rala.grib.types import (
    DegradedPacking,
    ImagePacking,
    PackingParameters,
    SimplePacking,
    StageOutcome,
)

__all__ = ['RepresentationDecoder', 'SIMPLE_PACKING', 'IMAGE_PACKING']

logger = logging.getLogger(__name__)

SIMPLE_PACKING = 0
IMAGE_PACKING = 41

TEMPLATE_OFFSET = 9
MIN_TEMPLATE_LENGTH = 11
SCALED_FIELDS = struct.Struct(">fhhB")  # R, E, D, bits at offset 11
SCALED_FIELDS_OFFSET = 11

_PACKING_TYPES = {
    SIMPLE_PACKING: SimplePacking,
    IMAGE_PACKING: ImagePacking,
}


class RepresentationDecoder:
    """Read packing parameters; unknown templates yield DegradedPacking."""

    def decode(self, payload: Optional[bytes]) -> StageOutcome[PackingParameters]:
        """Decode ``payload`` into packing parameters.

        Parameters
        ----------
        payload : bytes or None
            Complete section 5 bytes, or None if the section is absent.

        Returns
        -------
        StageOutcome[PackingParameters]
            SimplePacking or ImagePacking for templates 0 and 41, otherwise
            a defaulted DegradedPacking that the value stage will reject.
        """
        if payload is None or len(payload) < MIN_TEMPLATE_LENGTH:
            return self._degraded(None, "representation section absent or truncated")

        (template,) = struct.unpack_from(">H", payload, TEMPLATE_OFFSET)
        packing_type = _PACKING_TYPES.get(template)
        if packing_type is None:
            return self._degraded(template, f"template {template} not supported")

        if len(payload) < SCALED_FIELDS_OFFSET + SCALED_FIELDS.size:
            return self._degraded(template, f"template {template} fields truncated at {len(payload)} bytes")

        reference, binary_scale, decimal_scale, bits = SCALED_FIELDS.unpack_from(payload, SCALED_FIELDS_OFFSET)
        packing = packing_type(
            reference_value=reference,
            binary_scale=binary_scale,
            decimal_scale=decimal_scale,
            bits_per_value=bits,
        )
        logger.info("Data representation: template=%d R=%g E=%d D=%d bits=%d",
                    template, reference, binary_scale, decimal_scale, bits)
        return StageOutcome(packing)

    @staticmethod
    def _degraded(template: Optional[int], reason: str) -> StageOutcome[PackingParameters]:
        logger.warning("Degraded packing (%s)", reason)
        return StageOutcome(DegradedPacking(template=template), defaulted=True, reason=reason)
