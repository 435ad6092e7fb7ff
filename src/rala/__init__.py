"""`rala` - decoder for MRMS Reflectivity At Lowest Altitude GRIB2 mosaics.

Subpackages:
- grib: Section scanning, grid/packing decoding, value unpacking, sampling
- contracts: Typed decode failures and stage invariants
- schemas: Pydantic configuration layers
- pipeline: End-to-end decode entry point
"""

__version__ = "0.1.0"
