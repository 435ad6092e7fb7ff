"""Pipeline modules.

- decoder: End-to-end decode of one GRIB2 message
"""

from rala.pipeline.decoder import MosaicDecoder, DecodedField, decode_mosaic, configure_logging

__all__ = [
    "MosaicDecoder",
    "DecodedField",
    "decode_mosaic",
    "configure_logging",
]
