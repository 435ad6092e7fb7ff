"""Decode contracts - typed failures and stage invariants.

Key principle:
- Pydantic validates config correctness
- DecodeError subclasses report bad or unsupported input
- Contracts validate decoder correctness
"""

from rala.contracts.failure import (
    CompressedPayloadError,
    ContractViolation,
    DecodeError,
    FormatError,
    LowValidity,
    MissingSection,
    UnsupportedEdition,
    UnsupportedPacking,
    describe_header,
)
from rala.contracts.base import require
from rala.contracts.decode import assert_dense_grid, assert_samples

__all__ = [
    "CompressedPayloadError",
    "ContractViolation",
    "DecodeError",
    "FormatError",
    "LowValidity",
    "MissingSection",
    "UnsupportedEdition",
    "UnsupportedPacking",
    "describe_header",
    "require",
    "assert_dense_grid",
    "assert_samples",
]
