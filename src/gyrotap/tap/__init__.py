"""
TAP Image Encoding
==================

This package turns C64 programs into TAP v1 cassette images that load with
the Gyrospeed turbo loader.

This package provides:
- **TapeImageWriter**: Build a complete tape image for one program
- **PulseEncoder**: Encoder session for standard and turbo pulses
- **TapHeader**: The 20-byte TAP container header
- **TapReader**: Parse TAP files and decode pulses back into bytes
- **xor_checksum**: The block checksum used on both sides of the tape

Quick Start
-----------
    >>> from gyrotap.tap import TapeImageWriter
    >>> writer = TapeImageWriter(header_template, boot_code)
    >>> result = writer.write(source, Path("game.tap"))

Reference
---------
- TAP format: https://vice-emu.sourceforge.io/vice_17.html#SEC349
"""

from gyrotap.tap.checksum import xor_checksum, verify_xor_checksum
from gyrotap.tap.header import (
    TAP_HEADER_SIZE,
    TAP_MAGIC,
    TAP_VERSION,
    TapHeader,
    patch_data_length,
)
from gyrotap.tap.pulses import (
    LONG_PULSE,
    MEDIUM_PULSE,
    PAL_CLOCK_HZ,
    SHORT_PULSE,
    TURBO_OFF_PULSE,
    TURBO_ON_PULSE,
    EncodingMode,
    PulseEncoder,
    cycles_seconds,
    pulse_seconds,
)
from gyrotap.tap.cbm import build_cbm_header, cbm_header_checksum
from gyrotap.tap.writer import EncodingResult, TapeImage, TapeImageWriter, encode_prg
from gyrotap.tap.reader import (
    StandardByte,
    TapReader,
    decode_standard_byte,
    decode_turbo_byte,
    decode_turbo_bytes,
    odd_parity_bit,
)

__all__ = [
    # Checksum
    "xor_checksum",
    "verify_xor_checksum",
    # Container
    "TAP_HEADER_SIZE",
    "TAP_MAGIC",
    "TAP_VERSION",
    "TapHeader",
    "patch_data_length",
    # Pulses
    "LONG_PULSE",
    "MEDIUM_PULSE",
    "SHORT_PULSE",
    "TURBO_OFF_PULSE",
    "TURBO_ON_PULSE",
    "PAL_CLOCK_HZ",
    "EncodingMode",
    "PulseEncoder",
    "cycles_seconds",
    "pulse_seconds",
    # Writer
    "build_cbm_header",
    "cbm_header_checksum",
    "EncodingResult",
    "TapeImage",
    "TapeImageWriter",
    "encode_prg",
    # Reader
    "StandardByte",
    "TapReader",
    "decode_standard_byte",
    "decode_turbo_byte",
    "decode_turbo_bytes",
    "odd_parity_bit",
]
