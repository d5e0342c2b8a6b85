"""
PRG Program Sources
===================

A PRG file is a raw C64 memory image: a 2-byte little-endian load address
followed by the bytes to place there. Gyrospeed tapes expect crunched
programs (e.g. from Exomizer) that start with a one-line BASIC stub at
$0801 of the form ``10 SYS 2061``; the boot code RUNs that stub once the
turbo load finishes.

This module provides:
- **PrgSource**: immutable description of one input program
- **find_sys_address**: scanner for the SYS address in the BASIC stub
- **discover_programs**: enumerate the PRG files behind a CLI argument
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Final, Optional, Union
import logging
import re

from gyrotap.errors import (
    InvalidProgramError,
    MissingEntryPointError,
    OutOfAddressRangeError,
    TapeIOError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Memory Layout Constants
# =============================================================================

# Lowest address a program may load at (start of screen memory)
MIN_LOAD_ADDRESS: Final[int] = 0x0400

# Programs must end at or before the I/O area
MAX_END_ADDRESS: Final[int] = 0xD000

# Where BASIC programs start
BASIC_START_ADDRESS: Final[int] = 0x0801

# BASIC token for SYS
BASIC_SYS_TOKEN: Final[int] = 0x9E

# How far into the first BASIC line the SYS scanner will look
MAX_SYS_SCAN: Final[int] = 1000

# Crunched files from the OneLoad64 collection carry this suffix
_VENDOR_SUFFIX = re.compile(r"-\[ex\]", re.IGNORECASE)

PRG_EXTENSION: Final[str] = ".prg"


# =============================================================================
# BASIC SYS Scanner
# =============================================================================

def find_sys_address(data: bytes, load_address: int) -> Optional[int]:
    """
    Find the SYS jump address in the first BASIC line of a PRG image.

    Only a SYS at the very start of the first line is accepted, as more
    elaborate BASIC start-up code is unlikely to survive a turbo load.

    Args:
        data: Complete PRG image (load address included)
        load_address: The image's load address (must be <= $0801)

    Returns:
        The decimal SYS argument, or None if there is no such line
    """
    basic_offset = BASIC_START_ADDRESS - load_address
    if basic_offset < 0:
        return None

    # Skip load address, line link and line number
    i = basic_offset + 6
    if i >= len(data) or data[i] != BASIC_SYS_TOKEN:
        return None
    i += 1

    while i < len(data) and i - basic_offset < MAX_SYS_SCAN and data[i] != 0:
        if data[i] not in b" (":
            end = i
            while end < len(data) and 0x30 <= data[end] <= 0x39:
                end += 1
            if end > i:
                return int(data[i:end].decode("ascii"))
        i += 1

    return None


# =============================================================================
# Program Source
# =============================================================================

def strip_vendor_suffix(stem: str) -> str:
    """Remove the ``-[ex]`` cruncher suffix from a file stem."""
    return _VENDOR_SUFFIX.sub("", stem)


@dataclass(frozen=True)
class PrgSource:
    """
    One input program.

    Attributes:
        path: Where the PRG was read from
        data: Complete PRG image, load address included
        stem: File name without extension or vendor suffix
    """
    path: Path
    data: bytes
    stem: str

    def __post_init__(self) -> None:
        if len(self.data) < 2:
            raise InvalidProgramError(
                f"PRG is {len(self.data)} bytes, too short for a load address",
                path=self.path,
            )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "PrgSource":
        """
        Read a PRG file.

        Raises:
            TapeIOError: If the file cannot be read
            InvalidProgramError: If the file is shorter than 2 bytes
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise TapeIOError(f"Cannot read {path}: {e}") from e
        return cls.from_bytes(data, path)

    @classmethod
    def from_bytes(cls, data: bytes, path: Union[str, Path]) -> "PrgSource":
        """Build a source from an in-memory PRG image."""
        path = Path(path)
        return cls(path=path, data=bytes(data), stem=strip_vendor_suffix(path.stem))

    @property
    def name(self) -> str:
        """The file name, extension included."""
        return self.path.name

    @property
    def display_name(self) -> str:
        """Name as shown in the FOUND message (upper case for PETSCII)."""
        return self.stem.upper()

    @property
    def load_address(self) -> int:
        return self.data[0] | (self.data[1] << 8)

    @property
    def body(self) -> bytes:
        """The program bytes without the load address."""
        return self.data[2:]

    @property
    def end_address(self) -> int:
        """First address after the program (BASIC variables start here)."""
        return self.load_address + len(self.data) - 2

    def validate_address_range(self) -> None:
        """
        Check that the program fits $0400-$cfff.

        Raises:
            OutOfAddressRangeError: If it loads too low or ends too high
        """
        if self.load_address < MIN_LOAD_ADDRESS or self.end_address > MAX_END_ADDRESS:
            raise OutOfAddressRangeError(self.load_address, self.end_address, path=self.path)

    def sys_address(self) -> int:
        """
        The SYS address of the program's BASIC stub.

        Raises:
            MissingEntryPointError: If the program loads above $0801 or
                has no SYS line
        """
        address = None
        if self.load_address <= BASIC_START_ADDRESS:
            address = find_sys_address(self.data, self.load_address)
        if address is None:
            raise MissingEntryPointError(path=self.path)
        return address


# =============================================================================
# Discovery
# =============================================================================

def discover_programs(path: Union[str, Path]) -> list[Path]:
    """
    List the PRG files named by a command-line path.

    A file is returned as-is; a directory yields its ``*.prg`` files
    (any case) in name order.

    Raises:
        TapeIOError: If the path is neither a file nor a directory
    """
    path = Path(path)
    if path.is_file():
        return [path]
    if path.is_dir():
        found = sorted(
            p for p in path.iterdir()
            if p.is_file() and p.suffix.lower() == PRG_EXTENSION
        )
        logger.debug(f"Found {len(found)} PRG files in {path}")
        return found
    raise TapeIOError(f"{path} is neither a valid file or folder")
