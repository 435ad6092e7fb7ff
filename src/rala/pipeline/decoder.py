"""End-to-end decode of one MRMS GRIB2 message.

Stages run in order:

1. **Scan**: verify the indicator section, build the section table.
2. **Grid** (section 3) and **Representation** (section 5): tolerant;
   unreadable input yields defaults flagged on the StageOutcome.
3. **Values** (section 7): strict; unsupported packing raises.
4. **Validity gate**: strict; nearly-empty grids raise LowValidity.
5. **Sampling**: down-sample and filter to GeoSamples.

Any DecodeError leaving this module carries the section lengths found
and a dump of the indicator bytes, so callers can tell a foreign file
from an unsupported variant from corrupted data.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Optional

from rala.contracts import DecodeError, assert_dense_grid, assert_samples, describe_header
from rala.grib import (
    GeoSampler,
    GridDefinitionDecoder,
    RepresentationDecoder,
    SectionScanner,
    ValidityGate,
    ValueDecoder,
)
from rala.grib.types import (
    DenseValueGrid,
    GridGeometry,
    PackingParameters,
    ProductMetadata,
    RadarProduct,
    ScanResult,
    StageOutcome,
)
from rala.schemas import InternalConfig, resolve_config

__all__ = ['MosaicDecoder', 'DecodedField', 'decode_mosaic', 'configure_logging']

logger = logging.getLogger(__name__)

GRID_SECTION = 3
PRODUCT_SECTION = 4
REPRESENTATION_SECTION = 5
DATA_SECTION = 7
PARAMETER_CATEGORY_OFFSET = 9
PARAMETER_NUMBER_OFFSET = 10


@dataclass
class DecodedField:
    """Dense decode result, before the validity gate and sampling."""
    scan: ScanResult
    geometry: StageOutcome[GridGeometry]
    packing: StageOutcome[PackingParameters]
    values: DenseValueGrid
    parameter_category: int = 0
    parameter_number: int = 0


class MosaicDecoder:
    """Decode GRIB2 mosaic buffers into RadarProducts.

    Holds no per-message state; one instance can decode any number of
    buffers and is safe to share between threads.

    Example usage::

        decoder = MosaicDecoder(resolve_config())
        try:
            product = decoder.decode(grib_bytes)
        except DecodeError as exc:
            ...  # fall back to synthetic data, report exc.to_dict()
        payload = product.to_dict()
    """

    def __init__(self, config: InternalConfig):
        self.config = config
        self.scanner = SectionScanner(config)
        self.grid_decoder = GridDefinitionDecoder(config)
        self.representation_decoder = RepresentationDecoder()
        self.value_decoder = ValueDecoder(config)
        self.gate = ValidityGate(config)
        self.sampler = GeoSampler(config)

    def decode_field(self, buffer: bytes) -> DecodedField:
        """Run the scan, grid, representation and value stages.

        Raises
        ------
        DecodeError
            FormatError, UnsupportedEdition, MissingSection,
            UnsupportedPacking or CompressedPayloadError.
        """
        scan = self.scanner.scan(buffer)
        try:
            grid_section = scan.section(GRID_SECTION)
            representation_section = scan.section(REPRESENTATION_SECTION)
            data_section = scan.section(DATA_SECTION)

            geometry = self.grid_decoder.decode(grid_section.data)
            packing = self.representation_decoder.decode(representation_section.data)
            values = self.value_decoder.decode(data_section.data, packing.value, geometry.value)
        except DecodeError as exc:
            exc.context.setdefault("sections", scan.lengths())
            for key, value in describe_header(buffer).items():
                exc.context.setdefault(key, value)
            raise

        assert_dense_grid(values, geometry.value)
        category, number = self._parameter(scan)

        return DecodedField(
            scan=scan,
            geometry=geometry,
            packing=packing,
            values=values,
            parameter_category=category,
            parameter_number=number,
        )

    def decode(self, buffer: bytes, stride: Optional[int] = None) -> RadarProduct:
        """Decode ``buffer`` all the way to a RadarProduct.

        Parameters
        ----------
        buffer : bytes
            Complete, decompressed GRIB2 message.
        stride : int, optional
            Overrides ``sampler.stride``.

        Raises
        ------
        DecodeError
            Any strict-stage failure, including LowValidity.
        """
        try:
            decoded = self.decode_field(buffer)
            self.gate.check(decoded.values)
        except DecodeError as exc:
            logger.error("GRIB2 decode failed: %s: %s (context=%s)",
                         type(exc).__name__, exc, exc.context)
            raise

        geometry = decoded.geometry.value
        samples = self.sampler.sample(decoded.values, geometry, stride=stride)
        assert_samples(samples)

        metadata = ProductMetadata(
            discipline=decoded.scan.discipline,
            parameter_category=decoded.parameter_category,
            parameter_number=decoded.parameter_number,
            packing=decoded.packing.value.kind,
            valid_count=decoded.values.valid_count,
            total_count=len(decoded.values),
            grid_defaulted=decoded.geometry.defaulted,
        )
        logger.info("Extracted %d radar points from %dx%d grid", len(samples), geometry.nx, geometry.ny)
        return RadarProduct(samples=samples, geometry=geometry, metadata=metadata, values=decoded.values)

    @staticmethod
    def _parameter(scan: ScanResult) -> tuple[int, int]:
        """Parameter category and number from the product definition section."""
        section = scan.get(PRODUCT_SECTION)
        if section is None or section.length <= PARAMETER_NUMBER_OFFSET:
            return 0, 0
        return struct.unpack_from(">BB", section.data, PARAMETER_CATEGORY_OFFSET)


def decode_mosaic(buffer: bytes, config: Optional[InternalConfig] = None,
                  stride: Optional[int] = None) -> RadarProduct:
    """Decode one message with ``config`` or the default configuration."""
    return MosaicDecoder(config if config is not None else resolve_config()).decode(buffer, stride=stride)


def configure_logging(config: InternalConfig) -> None:
    """Install a console handler on the root logger at the configured level."""
    log_level = getattr(logging, config.logging.level, logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    logger.info("Logging: level=%s", config.logging.level)
