"""
TAP Container Header
====================

Every TAP v1 image starts with a fixed 20-byte header:

    Offset  Size    Description
    ------  ----    -----------
    0x00    12      Magic "C64-TAPE-RAW"
    0x0C    1       Version (1)
    0x0D    3       Reserved (zero)
    0x10    4       Data length, little-endian (bytes following the header)

The pulse stream follows immediately at offset 0x14.
"""

from dataclasses import dataclass
from typing import Final
import struct

from gyrotap.errors import TapFormatError

TAP_MAGIC: Final[bytes] = b"C64-TAPE-RAW"
TAP_VERSION: Final[int] = 1
TAP_HEADER_SIZE: Final[int] = 0x14
TAP_DATA_LENGTH_OFFSET: Final[int] = 0x10

_HEADER_STRUCT: Final[struct.Struct] = struct.Struct("<12sB3sI")


@dataclass(frozen=True)
class TapHeader:
    """
    The 20-byte TAP header.

    Attributes:
        data_length: Number of pulse-stream bytes following the header
        version: TAP format version (only 1 is written)
    """
    data_length: int = 0
    version: int = TAP_VERSION

    def to_bytes(self) -> bytes:
        """Serialize the header to 20 bytes."""
        return _HEADER_STRUCT.pack(TAP_MAGIC, self.version, b"\x00\x00\x00", self.data_length)

    @classmethod
    def from_bytes(cls, data: bytes) -> "TapHeader":
        """
        Parse a TAP header.

        Raises:
            TapFormatError: If the data is too short, the magic is wrong or
                the version is not 1
        """
        if len(data) < TAP_HEADER_SIZE:
            raise TapFormatError(
                f"TAP header too short: need {TAP_HEADER_SIZE} bytes, got {len(data)}"
            )

        magic, version, _reserved, data_length = _HEADER_STRUCT.unpack_from(data)
        if magic != TAP_MAGIC:
            raise TapFormatError(f"Invalid TAP magic: {magic!r}")
        if version != TAP_VERSION:
            raise TapFormatError(f"Unsupported TAP version {version}")

        return cls(data_length=data_length, version=version)


def patch_data_length(image: bytearray) -> int:
    """
    Write the data length of a complete image into its header.

    The length is everything after the fixed header, which is only known
    once the last pulse has been written.

    Returns:
        The patched data length
    """
    data_length = len(image) - TAP_HEADER_SIZE
    struct.pack_into("<I", image, TAP_DATA_LENGTH_OFFSET, data_length)
    return data_length
