"""
XOR Checksums
=============

Both the standard CBM blocks and the turbo payload are protected by a
single XOR checksum byte: the XOR of every byte in the block. Appending
the checksum to the block makes the XOR of the whole block zero, which is
exactly what the receiving loader tests for.

Usage
-----
    from gyrotap.tap.checksum import xor_checksum

    # The first two bytes of a PRG image are its load address and are
    # never sent as part of the block, so skip them.
    check = xor_checksum(header_blob, 2)
"""

from functools import reduce
from operator import xor
from typing import Final

from gyrotap.errors import InvalidArgumentError

# A CBM block checksum never covers the 2-byte load address prefix
PRG_PAYLOAD_OFFSET: Final[int] = 2


def xor_checksum(buffer: bytes, start_index: int = 0) -> int:
    """
    XOR together every byte of ``buffer[start_index:]``.

    Args:
        buffer: The bytes to checksum
        start_index: Index of the first byte to include

    Returns:
        The 8-bit checksum

    Raises:
        InvalidArgumentError: If start_index is not a valid index into buffer

    Example:
        >>> xor_checksum(bytes([0x01, 0x04, 0x0f, 0xf0]), 2)
        255
    """
    if start_index < 0 or start_index > len(buffer) - 1:
        raise InvalidArgumentError(
            f"Start index {start_index} is outside the bounds of a "
            f"{len(buffer)}-byte buffer"
        )
    return reduce(xor, buffer[start_index:], 0)


def verify_xor_checksum(block: bytes, checksum: int) -> bool:
    """Return True if ``checksum`` makes the XOR of ``block`` plus it zero."""
    return reduce(xor, block, checksum & 0xFF) == 0
