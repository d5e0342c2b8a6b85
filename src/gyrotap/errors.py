"""
gyrotap Error Hierarchy
=======================

This module defines the exception hierarchy for the whole converter.
All exceptions inherit from GyrotapError, allowing callers to catch every
conversion failure with a single except clause if desired.

Exception Hierarchy
-------------------
GyrotapError (base)
├── InvalidArgumentError - encoder contract violation (bad range, oversize effect)
├── ProgramError (per-program validation, carries the offending path)
│   ├── InvalidProgramError - PRG too short to hold a load address
│   ├── OutOfAddressRangeError - program does not fit $0400-$cfff
│   └── MissingEntryPointError - no BASIC SYS line at $0801
├── AssetError (companion loader blobs)
│   ├── MissingAssetError - blob file not found
│   └── InvalidAssetError - blob has the wrong size
└── TapeIOError (filesystem and container problems)
    ├── TapFormatError - malformed TAP container or pulse stream
    └── OutputCollisionError - two programs map to the same output file

Batch Policy
------------
A ProgramError raised for any one program aborts the whole batch. Program
validation always happens before the output file is opened, so a failing
program never leaves a half-written TAP image behind.
"""

from pathlib import Path
from typing import Optional, Union


# =============================================================================
# Base Exception Class
# =============================================================================

class GyrotapError(Exception):
    """
    Base exception for all gyrotap errors.

        try:
            converter.convert(paths)
        except GyrotapError as e:
            print(f"Error: {e}")
    """
    pass


class InvalidArgumentError(GyrotapError):
    """
    An encoder routine was called outside its contract.

    Raised for programming errors rather than bad input files, e.g. a
    checksum start index past the end of its buffer or a loading effect
    that does not fit the header's effect region.
    """
    pass


# =============================================================================
# Program Validation Exceptions
# =============================================================================

class ProgramError(GyrotapError):
    """
    Base exception for per-program validation failures.

    Attributes:
        message: The error description
        path: The PRG file that failed validation (optional)
    """

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.message = message
        self.path = Path(path) if path is not None else None
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.path is not None:
            return f"{self.path.name}: {self.message}"
        return self.message


class InvalidProgramError(ProgramError):
    """PRG file is too short to contain its 2-byte load address."""
    pass


class OutOfAddressRangeError(ProgramError):
    """
    Program does not fit the loadable memory window.

    Programs must load at or above $0400 and must not extend past $d000
    (the start of the I/O area).
    """

    def __init__(
        self,
        load_address: int,
        end_address: int,
        path: Optional[Union[str, Path]] = None,
    ):
        self.load_address = load_address
        self.end_address = end_address
        super().__init__(
            f"program must load into the address range $0400 - $cfff "
            f"(loads at ${load_address:04x}, ends at ${end_address:04x})",
            path=path,
        )


class MissingEntryPointError(ProgramError):
    """
    No BASIC SYS line could be found at $0801.

    The boot code starts the program with a BASIC RUN, so the program must
    begin with a one-line SYS stub (as produced by crunchers such as
    Exomizer).
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        super().__init__("couldn't locate BASIC SYS line at $0801", path=path)


# =============================================================================
# Asset Exceptions
# =============================================================================

class AssetError(GyrotapError):
    """Base exception for problems with the loader companion blobs."""
    pass


class MissingAssetError(AssetError):
    """A required companion blob (header or boot code) does not exist."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"Cannot find {self.path.name} (looked in {self.path.parent})")


class InvalidAssetError(AssetError):
    """A companion blob exists but does not have the expected size."""
    pass


# =============================================================================
# I/O Exceptions
# =============================================================================

class TapeIOError(GyrotapError):
    """Filesystem failure while reading programs or writing tape images."""
    pass


class TapFormatError(TapeIOError):
    """
    Invalid TAP container or pulse stream.

    Raised when reading a TAP file that:
    - Is shorter than the 20-byte header
    - Has the wrong magic string or version
    - Contains a pulse sequence that does not decode to a byte
    """
    pass


class OutputCollisionError(TapeIOError):
    """Two programs in one batch would be written to the same TAP file."""

    def __init__(self, output_path: Union[str, Path], first: str, second: str):
        self.output_path = Path(output_path)
        super().__init__(
            f"{second} and {first} both map to {self.output_path.name}"
        )
