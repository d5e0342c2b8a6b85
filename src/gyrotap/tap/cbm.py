"""
CBM Loader Header
=================

The first block on a Gyrospeed tape is a standard CBM tape header whose
192-byte cassette buffer image also carries the turbo loader itself. The
template comes from ``gyrospeed-header.prg``:

    Offset  Size    Description
    ------  ----    -----------
    0x00    2       PRG load address ($033c, not written to tape)
    0x02    1       Header type
    0x03    4       Start/end address of the boot code block
    0x07    16      Filename (shown in the FOUND message)
    0x17    ...     Turbo loader code
    0xA6    0x1C    Loading-effect routine (called once per bit)

For each program the filename field and the effect region are blanked with
spaces, then filled with the program's name (behind any PETSCII styling
prefix) and the chosen effect routine.
"""

from typing import Final
import logging

from gyrotap.errors import InvalidArgumentError, InvalidAssetError
from gyrotap.effects import FoundMessageStyle, LoadingEffect
from gyrotap.tap.checksum import PRG_PAYLOAD_OFFSET, xor_checksum

logger = logging.getLogger(__name__)

CBM_HEADER_SIZE: Final[int] = 0xC2
CBM_FILENAME_OFFSET: Final[int] = 0x07
CBM_FILENAME_LENGTH: Final[int] = 0x10
CBM_EFFECT_OFFSET: Final[int] = 0xA6

_BLANK: Final[int] = 0x20


def validate_header_template(template: bytes) -> None:
    """
    Check that a loader header template has the expected layout.

    Raises:
        InvalidAssetError: If the template is not exactly $c2 bytes
    """
    if len(template) != CBM_HEADER_SIZE:
        raise InvalidAssetError(
            f"Loader header must be {CBM_HEADER_SIZE} bytes, got {len(template)}"
        )


def petscii_filename(display_name: str, width: int) -> bytes:
    """
    Encode a display name for the CBM filename field.

    The name is expected to be upper case already, which PETSCII shows as
    normal capitals. Characters outside ASCII become '?'.
    """
    return display_name[:width].encode("ascii", errors="replace")


def build_cbm_header(
    template: bytes,
    display_name: str,
    effect: LoadingEffect,
    style: FoundMessageStyle = FoundMessageStyle(),
) -> bytes:
    """
    Build the loader header block for one program.

    Args:
        template: Contents of the loader header PRG
        display_name: Upper-case name shown in the FOUND message
        effect: Loading-effect routine to install
        style: Clear-screen/colour prefix for the filename

    Returns:
        The complete header PRG image, load address included

    Raises:
        InvalidAssetError: If the template has the wrong size
        InvalidArgumentError: If the effect or prefix does not fit
    """
    validate_header_template(template)

    prefix = style.prefix()
    width = CBM_FILENAME_LENGTH - len(prefix)
    if width < 0:
        raise InvalidArgumentError(f"Filename prefix of {len(prefix)} bytes does not fit")

    effect_region = len(template) - CBM_EFFECT_OFFSET
    if len(effect.code) > effect_region:
        raise InvalidArgumentError(
            f"Loading effect '{effect.name}' ({len(effect.code)} bytes) does not fit "
            f"the {effect_region}-byte effect region"
        )

    header = bytearray(template)

    filename = prefix + petscii_filename(display_name, width)
    header[CBM_FILENAME_OFFSET:CBM_FILENAME_OFFSET + CBM_FILENAME_LENGTH] = (
        filename.ljust(CBM_FILENAME_LENGTH, bytes([_BLANK]))
    )

    header[CBM_EFFECT_OFFSET:] = effect.code.ljust(effect_region, bytes([_BLANK]))

    logger.debug(f"Built loader header for {display_name!r} with effect '{effect.name}'")
    return bytes(header)


def cbm_header_checksum(header: bytes) -> int:
    """Checksum of a header block (the load address is not sent)."""
    return xor_checksum(header, PRG_PAYLOAD_OFFSET)
