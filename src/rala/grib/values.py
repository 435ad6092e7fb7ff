"""Unpack the data section (section 7) into physical values.

Section 7 is a 5-byte header (length, number) followed by the packed
codes. Simple packing stores big-endian 8- or 16-bit codes back to back;
PNG packing (template 5.41) stores them as pixels of an embedded PNG.

A code of 0 or all-bits-set means "no data". Every other code maps to
``(R + X * 2^E) / 10^D``; results outside the configured plausibility
bound are treated as missing and the rest are rounded.
"""

import logging
from typing import TYPE_CHECKING

import cv2
import numpy as np

from rala.contracts.failure import CompressedPayloadError, UnsupportedPacking
from rala.grib.types import (
    DegradedPacking,
    DenseValueGrid,
    GridGeometry,
    ImagePacking,
    PackingParameters,
)

if TYPE_CHECKING:
    from rala.schemas import InternalConfig

__all__ = ['ValueDecoder']

logger = logging.getLogger(__name__)

DATA_OFFSET = 5
SUPPORTED_BITS = {8: np.dtype("u1"), 16: np.dtype(">u2")}


class ValueDecoder:
    """Turn the data section into a DenseValueGrid of exactly nx * ny slots.

    Unlike the grid and representation stages, this stage never guesses:
    unsupported packing and undecodable PNG payloads raise.
    """

    def __init__(self, config: "InternalConfig"):
        self.min_value = config.values.min_value
        self.max_value = config.values.max_value
        self.decimals = config.values.decimals

    def decode(self, payload: bytes, packing: PackingParameters,
               geometry: GridGeometry) -> DenseValueGrid:
        """Decode ``payload`` against ``packing`` and ``geometry``.

        Parameters
        ----------
        payload : bytes
            Complete section 7 bytes.
        packing : PackingParameters
            Output of RepresentationDecoder.
        geometry : GridGeometry
            Output of GridDefinitionDecoder.

        Returns
        -------
        DenseValueGrid
            NaN marks missing slots. A short payload leaves trailing
            slots missing.

        Raises
        ------
        UnsupportedPacking
            Degraded packing, a bit width other than 8 or 16, or scale
            factors outside float64 range.
        CompressedPayloadError
            Embedded PNG could not be decoded, or is a colour PNG with
            16-bit channels.
        """
        grid = DenseValueGrid.empty(geometry.nx, geometry.ny)

        if isinstance(packing, DegradedPacking):
            raise UnsupportedPacking(
                f"Data representation template {packing.template} not supported",
                template=packing.template,
                bits_per_value=packing.bits_per_value,
                data_length=len(payload),
            )
        if packing.bits_per_value not in SUPPORTED_BITS:
            raise UnsupportedPacking(
                f"Unsupported bits per value: {packing.bits_per_value}",
                template=packing.template,
                bits_per_value=packing.bits_per_value,
                data_length=len(payload),
            )
        if not packing.representable:
            raise UnsupportedPacking(
                f"Scale factors out of range: E={packing.binary_scale} D={packing.decimal_scale}",
                template=packing.template,
                binary_scale=packing.binary_scale,
                decimal_scale=packing.decimal_scale,
                data_length=len(payload),
            )

        if isinstance(packing, ImagePacking):
            raw, sentinel = self._unpack_image(payload)
        else:
            raw = self._unpack_simple(payload, packing.bits_per_value, grid.values.size)
            sentinel = (1 << packing.bits_per_value) - 1

        count = min(raw.size, grid.values.size)
        if count < grid.values.size:
            logger.warning("Data section holds %d of %d values; remaining slots left missing",
                           count, grid.values.size)

        grid.values[:count] = self._to_physical(raw[:count], packing, sentinel)
        logger.info("Decoded %d values (%d valid) with %s packing",
                    grid.values.size, grid.valid_count, packing.kind)
        return grid

    @staticmethod
    def _unpack_simple(payload: bytes, bits: int, npoints: int) -> np.ndarray:
        dtype = SUPPORTED_BITS[bits]
        body = payload[DATA_OFFSET:]
        count = min(npoints, len(body) // dtype.itemsize)
        if count <= 0:
            return np.empty(0, dtype=np.uint32)
        return np.frombuffer(body, dtype=dtype, count=count).astype(np.uint32)

    @staticmethod
    def _unpack_image(payload: bytes) -> tuple[np.ndarray, int]:
        """Decode the embedded PNG into one code per pixel and its sentinel.

        Colour pixels combine the first two 8-bit PNG channels as
        ``channel0 << 8 | channel1``; grey pixels are used as-is, with the
        all-bits-set value of their own depth as sentinel.
        """
        if len(payload) <= DATA_OFFSET:
            raise CompressedPayloadError("Data section holds no PNG payload",
                                         data_length=len(payload))
        body = np.frombuffer(payload, dtype=np.uint8)[DATA_OFFSET:]
        try:
            image = cv2.imdecode(body, cv2.IMREAD_UNCHANGED)
        except cv2.error as exc:
            raise CompressedPayloadError(f"PNG decode failed: {exc}",
                                         data_length=len(payload)) from exc
        if image is None:
            raise CompressedPayloadError("PNG decode failed: not a readable image",
                                         data_length=len(payload),
                                         payload_head=bytes(body[:8]).hex())

        if image.ndim == 3 and image.dtype != np.uint8:
            raise CompressedPayloadError(
                f"Colour PNG with {image.dtype} channels not supported; expected 8-bit channels",
                data_length=len(payload),
                image_shape=image.shape,
            )
        if image.ndim == 3:
            # OpenCV returns BGR(A): PNG channel 0 is index 2, channel 1 is index 1
            high = image[..., 2].astype(np.uint32)
            low = image[..., 1].astype(np.uint32)
            raw = (high << 8) | low
            sentinel = 0xFFFF
        else:
            raw = image.astype(np.uint32)
            sentinel = int(np.iinfo(image.dtype).max)
        logger.debug("PNG payload: shape=%s dtype=%s", image.shape, image.dtype)
        return raw.ravel(), sentinel

    def _to_physical(self, raw: np.ndarray, packing, sentinel: int) -> np.ndarray:
        missing = (raw == 0) | (raw == sentinel)
        physical = packing.scale(raw)
        implausible = (physical < self.min_value) | (physical > self.max_value)
        out = np.round(physical, self.decimals)
        out[missing | implausible] = np.nan
        rejected = int(np.count_nonzero(implausible & ~missing))
        if rejected:
            logger.debug("Rejected %d values outside [%g, %g]", rejected, self.min_value, self.max_value)
        return out
