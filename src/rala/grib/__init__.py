"""GRIB2 decode stages.

- scanner: Split a message into numbered sections
- grid_definition: Section 3 grid geometry
- representation: Section 5 packing parameters
- values: Section 7 value unpacking
- validity: Valid-fraction gate
- sampler: Down-sampled geo-tagged points
"""

from rala.grib.scanner import SectionScanner
from rala.grib.grid_definition import GridDefinitionDecoder
from rala.grib.representation import RepresentationDecoder
from rala.grib.values import ValueDecoder
from rala.grib.validity import ValidityGate
from rala.grib.sampler import GeoSampler, samples_to_frame

__all__ = [
    "SectionScanner",
    "GridDefinitionDecoder",
    "RepresentationDecoder",
    "ValueDecoder",
    "ValidityGate",
    "GeoSampler",
    "samples_to_frame",
]
