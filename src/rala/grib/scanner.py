"""Split a GRIB2 message into its numbered sections.

Layout of the indicator section (section 0, 16 bytes):

    bytes 0-3   "GRIB"
    bytes 4-5   reserved
    byte  6     discipline
    byte  7     edition number
    bytes 8-15  total message length

Every following section starts with a 4-byte big-endian length and a
1-byte section number. The message ends with the 4 bytes "7777".
"""

import logging
import struct
from typing import TYPE_CHECKING

from rala.contracts.failure import FormatError, UnsupportedEdition, describe_header
from rala.grib.types import RawSection, ScanResult

if TYPE_CHECKING:
    from rala.schemas import InternalConfig

__all__ = ['SectionScanner']

logger = logging.getLogger(__name__)

INDICATOR_LENGTH = 16
SECTION_HEADER = struct.Struct(">IB")
END_MARKER = b"7777"
END_SECTION = 8


class SectionScanner:
    """Build the section table of an in-memory GRIB2 message.

    The scan is tolerant: a section whose declared length does not fit in
    the remaining buffer ends the scan instead of failing it. Only a bad
    indicator section is fatal.
    """

    def __init__(self, config: "InternalConfig"):
        self.magic = config.scanner.magic.encode("ascii")
        self.supported_edition = config.scanner.supported_edition
        self.first_section_offset = config.scanner.first_section_offset
        self.max_sections = config.scanner.max_sections

    def scan(self, buffer: bytes) -> ScanResult:
        """Verify the indicator section and slice out every section.

        Parameters
        ----------
        buffer : bytes
            Complete, decompressed GRIB2 message.

        Returns
        -------
        ScanResult
            Discipline, edition, declared length and the section table.
            Repeated section numbers keep the last occurrence.

        Raises
        ------
        FormatError
            Marker absent or indicator section truncated.
        UnsupportedEdition
            Edition byte differs from ``scanner.supported_edition``.
        """
        buffer = bytes(buffer)
        if buffer[:len(self.magic)] != self.magic:
            raise FormatError(
                f"Not a GRIB2 message: expected {self.magic!r} marker",
                **describe_header(buffer),
            )
        if len(buffer) < INDICATOR_LENGTH:
            raise FormatError(
                f"Indicator section truncated: {len(buffer)} of {INDICATOR_LENGTH} bytes",
                **describe_header(buffer),
            )

        discipline = buffer[6]
        edition = buffer[7]
        if edition != self.supported_edition:
            raise UnsupportedEdition(
                f"GRIB edition {edition} not supported (expected {self.supported_edition})",
                edition=edition,
                **describe_header(buffer),
            )

        (total_length,) = struct.unpack_from(">Q", buffer, 8)
        if total_length != len(buffer):
            logger.warning("Declared message length %d differs from buffer length %d",
                           total_length, len(buffer))

        sections = self._scan_sections(buffer)
        logger.info("GRIB2 sections found: %s", sorted(sections))

        return ScanResult(
            discipline=discipline,
            edition=edition,
            total_length=total_length,
            sections=sections,
            header=buffer[:INDICATOR_LENGTH],
        )

    def _scan_sections(self, buffer: bytes) -> dict[int, RawSection]:
        """Bounded walk over length-prefixed sections."""
        sections = {}
        offset = self.first_section_offset
        end = len(buffer)

        for _ in range(self.max_sections):
            if buffer[offset:offset + len(END_MARKER)] == END_MARKER:
                logger.debug("End marker at offset %d", offset)
                break
            if offset + SECTION_HEADER.size > end:
                break

            length, number = SECTION_HEADER.unpack_from(buffer, offset)
            if length < SECTION_HEADER.size:
                logger.warning("Section %d at offset %d declares length %d; scan stopped",
                               number, offset, length)
                break
            if offset + length > end:
                logger.warning("Section %d at offset %d declares %d bytes, only %d remain; scan stopped",
                               number, offset, length, end - offset)
                break

            sections[number] = RawSection(
                offset=offset,
                length=length,
                number=number,
                data=buffer[offset:offset + length],
            )
            logger.debug("Section %d: offset=%d length=%d", number, offset, length)
            offset += length

            if number == END_SECTION:
                break
        else:
            logger.warning("Section scan stopped after %d iterations at offset %d",
                           self.max_sections, offset)

        return sections
