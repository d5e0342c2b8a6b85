"""
TAP Reader and Pulse Decoders
=============================

Reading side of the tape format: parsing TAP containers written by the
writer (or joined into compilations) and turning pulse sequences back into
bytes. The decoders mirror what the KERNAL and the turbo loader do with
the pulses, and are what the test suite uses to check the encoder.

Usage
-----
    >>> image = TapReader.from_file("game.tap")
    >>> image.is_length_consistent
    True
    >>> decode_turbo_byte(image.body[offset:offset + 8])
"""

from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple, Sequence, Union
import logging

from gyrotap.errors import TapeIOError, TapFormatError
from gyrotap.tap.header import TAP_HEADER_SIZE, TapHeader
from gyrotap.tap.pulses import (
    LONG_PULSE,
    MEDIUM_PULSE,
    SHORT_PULSE,
    TURBO_OFF_PULSE,
    TURBO_ON_PULSE,
)

logger = logging.getLogger(__name__)

# Pulses per encoded byte
STANDARD_BYTE_PULSES = 20
TURBO_BYTE_PULSES = 8


# =============================================================================
# Container
# =============================================================================

@dataclass(frozen=True)
class TapReader:
    """
    A parsed TAP file.

    Attributes:
        header: The 20-byte header
        body: Everything after the header
    """
    header: TapHeader
    body: bytes

    @classmethod
    def from_bytes(cls, data: bytes) -> "TapReader":
        """
        Parse a TAP image.

        Raises:
            TapFormatError: If the header is invalid
        """
        header = TapHeader.from_bytes(data)
        body = bytes(data[TAP_HEADER_SIZE:])
        if header.data_length != len(body):
            logger.warning(
                f"TAP length field says {header.data_length} bytes, "
                f"file has {len(body)}"
            )
        return cls(header=header, body=body)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "TapReader":
        """Read and parse a TAP file."""
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise TapeIOError(f"Cannot read {path}: {e}") from e
        return cls.from_bytes(data)

    @property
    def is_length_consistent(self) -> bool:
        """True if the header's length field matches the body size."""
        return self.header.data_length == len(self.body)


# =============================================================================
# Decoders
# =============================================================================

class StandardByte(NamedTuple):
    """A byte read back from CBM ROM encoding, with its parity bit."""
    value: int
    parity: int


def odd_parity_bit(value: int) -> int:
    """The CBM check bit: 1 when the byte has an even number of 1-bits."""
    return 1 ^ (bin(value & 0xFF).count("1") & 1)


def _decode_standard_bit(first: int, second: int) -> int:
    if (first, second) == (MEDIUM_PULSE, SHORT_PULSE):
        return 1
    if (first, second) == (SHORT_PULSE, MEDIUM_PULSE):
        return 0
    raise TapFormatError(f"Invalid bit pulse pair (0x{first:02X}, 0x{second:02X})")


def decode_standard_byte(pulses: Sequence[int]) -> StandardByte:
    """
    Decode one CBM ROM encoded byte from 20 pulses.

    Raises:
        TapFormatError: On a missing new-data marker, an invalid bit pair
            or a parity mismatch
    """
    if len(pulses) != STANDARD_BYTE_PULSES:
        raise TapFormatError(
            f"Standard byte needs {STANDARD_BYTE_PULSES} pulses, got {len(pulses)}"
        )
    if (pulses[0], pulses[1]) != (LONG_PULSE, MEDIUM_PULSE):
        raise TapFormatError("Missing new-data marker")

    value = 0
    for bit in range(8):
        if _decode_standard_bit(pulses[2 + bit * 2], pulses[3 + bit * 2]):
            value |= 1 << bit

    parity = _decode_standard_bit(pulses[18], pulses[19])
    if parity != odd_parity_bit(value):
        raise TapFormatError(f"Parity error in byte 0x{value:02X}")

    return StandardByte(value=value, parity=parity)


def decode_turbo_byte(pulses: Sequence[int]) -> int:
    """
    Decode one turbo encoded byte from 8 pulses (MSB first).

    Raises:
        TapFormatError: If a pulse is neither TURBO_ON nor TURBO_OFF
    """
    if len(pulses) != TURBO_BYTE_PULSES:
        raise TapFormatError(
            f"Turbo byte needs {TURBO_BYTE_PULSES} pulses, got {len(pulses)}"
        )

    value = 0
    for pulse in pulses:
        if pulse == TURBO_ON_PULSE:
            value = (value << 1) | 1
        elif pulse == TURBO_OFF_PULSE:
            value <<= 1
        else:
            raise TapFormatError(f"Invalid turbo pulse 0x{pulse:02X}")
    return value


def decode_turbo_bytes(pulses: Sequence[int]) -> bytes:
    """Decode a run of turbo bytes; the pulse count must be a multiple of 8."""
    if len(pulses) % TURBO_BYTE_PULSES:
        raise TapFormatError(f"{len(pulses)} pulses is not a whole number of turbo bytes")
    return bytes(
        decode_turbo_byte(pulses[i:i + TURBO_BYTE_PULSES])
        for i in range(0, len(pulses), TURBO_BYTE_PULSES)
    )
