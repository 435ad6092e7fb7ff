"""Decode failures and contract violations.

Decode errors describe the input: the buffer is not GRIB2 at all, is a
known format with an unsupported variant, or is a known format whose
data is corrupted. Every decode error carries a ``context`` dict that
the caller can log or serialize.

ContractViolation describes the decoder itself: a stage did not produce
the invariants it promised.
"""

from typing import Any, Optional

HEADER_DUMP_BYTES = 16


def describe_header(buffer: Optional[bytes]) -> dict[str, Any]:
    """Summarize the first bytes of a buffer for error reports."""
    if buffer is None:
        return {"buffer_length": None}
    head = bytes(buffer[:HEADER_DUMP_BYTES])
    return {
        "buffer_length": len(buffer),
        "header_hex": head.hex(),
        "header_ascii": "".join(chr(b) if 32 <= b < 127 else "." for b in head),
    }


class DecodeError(RuntimeError):
    """Base class for all GRIB2 decode failures.

    Parameters
    ----------
    message : str
        Human readable description.
    **context
        Diagnostic details (offsets, section lengths, header bytes).
    """

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context: dict[str, Any] = dict(context)

    def to_dict(self) -> dict[str, Any]:
        return {"error": type(self).__name__, "message": str(self), "context": self.context}


class FormatError(DecodeError):
    """Buffer does not start with the GRIB indicator section."""


class UnsupportedEdition(DecodeError):
    """Indicator section declares an edition other than the supported one."""


class MissingSection(DecodeError):
    """A mandatory section (grid, representation, data) was not found."""


class UnsupportedPacking(DecodeError):
    """Packing template or bit width cannot be decoded."""


class CompressedPayloadError(DecodeError):
    """Embedded PNG raster in the data section failed to decode."""


class LowValidity(DecodeError):
    """Decoded grid holds too few non-missing values to be trusted."""


class ContractViolation(RuntimeError):
    """Raised when a decode stage contract is violated.

    This indicates a bug in decoder logic, not bad input. It means a
    stage did not produce the invariants it promised.

    Key distinction:
    - ValueError: config error (handled by Pydantic)
    - DecodeError: bad or unsupported input bytes
    - ContractViolation: decoder bug (programmer error)
    """
    pass
