"""
Tape Image Writer
=================

This module builds the complete TAP image for one program. The layout is
fixed; nothing in it depends on the program's contents except the turbo
payload and the final length field.

Tape Layout
-----------
    pilot          $6a00 x SHORT
    sync           $89 $88 ... $81
    loader header  CBM header block (loader code, filename, effect)
    checksum       XOR of the header block
    end marker     LONG, SHORT
    trailer        $4f x SHORT
    sync (repeat)  $09 $08 ... $01
    loader header  repeated verbatim, with checksum and end marker
    trailer        $4e x SHORT
    pause          $50000 cycles (~330ms)

    pilot          $1500 x SHORT
    boot block     same structure as the loader header, both copies
    pause          $50000 cycles

    turbo sync     $40 x $40, then $5a               (turbo encoded)
    sub-header     load address, end address (LE)   (turbo encoded)
    program        PRG bytes after the load address (turbo encoded)
    checksum       XOR of the program bytes         (turbo encoded)
    pause          $4b2b20 cycles (~5s)

The standard blocks are read by the KERNAL ROM, the turbo section by the
loader code that arrives inside the header block.

Usage
-----
    >>> writer = TapeImageWriter(header_template, boot_code)
    >>> result = writer.write(PrgSource.from_file("game.prg"), Path("game.tap"))
    >>> print(f"{result.duration_seconds:.1f}s")
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Final, Optional
import logging

from gyrotap.effects import LOADING_EFFECTS, FoundMessageStyle, LoadingEffect
from gyrotap.errors import InvalidAssetError, TapeIOError
from gyrotap.prg import PrgSource
from gyrotap.tap.cbm import build_cbm_header, validate_header_template
from gyrotap.tap.checksum import PRG_PAYLOAD_OFFSET, xor_checksum
from gyrotap.tap.header import TAP_HEADER_SIZE, TapHeader, patch_data_length
from gyrotap.tap.pulses import (
    SHORT_PULSE,
    EncodingMode,
    PulseEncoder,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Layout Constants
# =============================================================================

HEADER_PILOT_PULSES: Final[int] = 0x6A00
BOOT_PILOT_PULSES: Final[int] = 0x1500

TRAILER_PULSES: Final[int] = 0x4F
REPEAT_TRAILER_PULSES: Final[int] = 0x4E

SYNC_CHAIN: Final[bytes] = bytes(range(0x89, 0x80, -1))
REPEAT_SYNC_CHAIN: Final[bytes] = bytes(range(0x09, 0x00, -1))

GAP_PAUSE_CYCLES: Final[int] = 0x50000
END_PAUSE_CYCLES: Final[int] = 0x4B2B20

TURBO_SYNC_BYTE: Final[int] = 0x40
TURBO_SYNC_COUNT: Final[int] = 0x40
TURBO_START_BYTE: Final[int] = 0x5A

# Boot block must carry at least one byte after its load address
MIN_BOOT_CODE_SIZE: Final[int] = PRG_PAYLOAD_OFFSET + 1


# =============================================================================
# Results
# =============================================================================

@dataclass(frozen=True)
class TapeImage:
    """
    An encoded tape image held in memory.

    Attributes:
        data: The complete TAP file, header included
        duration_seconds: Playback time on a PAL machine
    """
    data: bytes
    duration_seconds: float

    @property
    def data_length(self) -> int:
        """Length of the pulse stream (what the header's length field says)."""
        return TapHeader.from_bytes(self.data).data_length


@dataclass(frozen=True)
class EncodingResult:
    """
    Outcome of writing one program's tape image to disk.

    Attributes:
        source: The program that was encoded
        tap_path: Where the image was written
        data_length: Pulse stream length in bytes
        duration_seconds: Playback time on a PAL machine
    """
    source: PrgSource
    tap_path: Path
    data_length: int
    duration_seconds: float

    @property
    def stem(self) -> str:
        return self.source.stem


# =============================================================================
# Writer
# =============================================================================

class TapeImageWriter:
    """
    Encodes programs into Gyrospeed TAP images.

    The writer is created once per batch with the two loader blobs, then
    encodes each program with its own encoder session.

    Attributes:
        header_template: Loader header PRG (filename and effect filled per program)
        boot_code: Boot block PRG, written verbatim
    """

    def __init__(self, header_template: bytes, boot_code: bytes) -> None:
        validate_header_template(header_template)
        if len(boot_code) < MIN_BOOT_CODE_SIZE:
            raise InvalidAssetError(
                f"Boot code must be at least {MIN_BOOT_CODE_SIZE} bytes, got {len(boot_code)}"
            )
        self.header_template = bytes(header_template)
        self.boot_code = bytes(boot_code)

    def encode(
        self,
        source: PrgSource,
        effect: LoadingEffect = LOADING_EFFECTS[0],
        style: FoundMessageStyle = FoundMessageStyle(),
    ) -> TapeImage:
        """
        Encode a program into a complete TAP image.

        Args:
            source: Program to encode
            effect: Loading effect to install in the loader header
            style: Found-message styling for the filename

        Returns:
            The TAP image and its playback duration

        Raises:
            OutOfAddressRangeError: If the program does not fit $0400-$cfff
        """
        source.validate_address_range()

        header_block = build_cbm_header(self.header_template, source.display_name, effect, style)

        encoder = PulseEncoder()
        encoder.begin()
        encoder.output.extend(TapHeader().to_bytes())

        self._write_block(encoder, header_block, HEADER_PILOT_PULSES)
        encoder.write_pause(GAP_PAUSE_CYCLES)

        self._write_block(encoder, self.boot_code, BOOT_PILOT_PULSES)
        encoder.write_pause(GAP_PAUSE_CYCLES)

        self._write_turbo_payload(encoder, source)
        encoder.write_pause(END_PAUSE_CYCLES)

        data_length = patch_data_length(encoder.output)

        logger.debug(
            f"Encoded {source.name}: {data_length} pulse bytes, "
            f"{encoder.elapsed_seconds:.2f}s"
        )
        return TapeImage(data=bytes(encoder.output), duration_seconds=encoder.elapsed_seconds)

    def write(
        self,
        source: PrgSource,
        tap_path: Path,
        effect: LoadingEffect = LOADING_EFFECTS[0],
        style: FoundMessageStyle = FoundMessageStyle(),
    ) -> EncodingResult:
        """
        Encode a program and write its TAP image to disk.

        The image is built in memory first, so a program that fails
        validation never leaves a file behind.

        Raises:
            OutOfAddressRangeError: If the program does not fit $0400-$cfff
            TapeIOError: If the file cannot be written
        """
        image = self.encode(source, effect, style)

        tap_path = Path(tap_path)
        try:
            tap_path.write_bytes(image.data)
        except OSError as e:
            raise TapeIOError(f"Cannot write {tap_path}: {e}") from e

        logger.info(f"Wrote {tap_path} ({image.duration_seconds:.1f}s)")
        return EncodingResult(
            source=source,
            tap_path=tap_path,
            data_length=len(image.data) - TAP_HEADER_SIZE,
            duration_seconds=image.duration_seconds,
        )

    # =========================================================================
    # Sections
    # =========================================================================

    @staticmethod
    def _write_block(encoder: PulseEncoder, block: bytes, pilot_pulses: int) -> None:
        """Write a standard CBM block and its repeat."""
        checksum = xor_checksum(block, PRG_PAYLOAD_OFFSET)

        encoder.write_pulses(SHORT_PULSE, pilot_pulses)

        encoder.write_range(SYNC_CHAIN)
        encoder.write_range(block, PRG_PAYLOAD_OFFSET)
        encoder.encode_byte(checksum)
        encoder.write_end_of_data_marker()
        encoder.write_pulses(SHORT_PULSE, TRAILER_PULSES)

        encoder.write_range(REPEAT_SYNC_CHAIN)
        encoder.write_range(block, PRG_PAYLOAD_OFFSET)
        encoder.encode_byte(checksum)
        encoder.write_end_of_data_marker()
        encoder.write_pulses(SHORT_PULSE, REPEAT_TRAILER_PULSES)

    @staticmethod
    def _write_turbo_payload(encoder: PulseEncoder, source: PrgSource) -> None:
        """Write the turbo sync, sub-header, program and checksum."""
        turbo = EncodingMode.TURBO

        encoder.write_repeated(TURBO_SYNC_BYTE, TURBO_SYNC_COUNT, turbo)
        encoder.encode_byte(TURBO_START_BYTE, turbo)

        sub_header = (
            source.load_address.to_bytes(2, "little")
            + source.end_address.to_bytes(2, "little")
        )
        encoder.write_range(sub_header, mode=turbo)

        # The loader only checksums the program bytes
        encoder.reset_turbo_checksum()
        encoder.write_range(source.body, mode=turbo)
        encoder.encode_byte(encoder.turbo_checksum, turbo)


def encode_prg(
    data: bytes,
    header_template: bytes,
    boot_code: bytes,
    name: str = "PROGRAM.prg",
    effect: LoadingEffect = LOADING_EFFECTS[0],
    style: Optional[FoundMessageStyle] = None,
) -> TapeImage:
    """
    Encode an in-memory PRG image into a TAP image.

    Convenience wrapper around TapeImageWriter for single programs.
    """
    writer = TapeImageWriter(header_template, boot_code)
    source = PrgSource.from_bytes(data, name)
    return writer.encode(source, effect, style or FoundMessageStyle())
