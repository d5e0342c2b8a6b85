"""
gyrotap - Gyrospeed Turbo Tape Builder for the Commodore 64
===========================================================

gyrotap converts crunched C64 PRG files into TAP v1 cassette images that
load with the Gyrospeed turbo loader, and can pack a batch of them onto
compilation cassettes.

Package Structure
-----------------
- **tap**: TAP container, pulse encoder, loader header and tape writer
- **prg**: PRG sources and the BASIC SYS line scanner
- **effects**: Loading-effect routines and found-message styling
- **packing**: Best-fit decreasing assignment of programs to tape sides
- **compilation**: Compilation cassettes and their contents listings
- **converter**: Batch conversion of a file or folder
- **config**: Converter configuration and environment overrides
- **cli**: The ``gyrotap`` command

Quick Start
-----------
    >>> from pathlib import Path
    >>> from gyrotap import Converter, ConverterConfig
    >>> config = ConverterConfig(asset_dir=Path("loader"), tape_length_minutes=90)
    >>> report = Converter(config).convert("games/")
    >>> [c.name for c in report.cassettes]
    ['C64 Compilation Cassette #1']

Loader assets
-------------
The loader itself is not part of this package. Conversion needs the two
assembled loader files, ``gyrospeed-header.prg`` and
``gyrospeed-boot.prg``, in the asset directory (the current directory by
default, or ``$GYROTAP_ASSET_DIR``).
"""

__version__ = "1.0.0"

from gyrotap.errors import (
    GyrotapError,
    InvalidArgumentError,
    ProgramError,
    InvalidProgramError,
    OutOfAddressRangeError,
    MissingEntryPointError,
    AssetError,
    MissingAssetError,
    InvalidAssetError,
    TapeIOError,
    TapFormatError,
    OutputCollisionError,
)
from gyrotap.effects import (
    LOADING_EFFECTS,
    TEXT_COLOURS,
    FoundMessageStyle,
    LoadingEffect,
    TextColour,
)
from gyrotap.prg import PrgSource, discover_programs, find_sys_address
from gyrotap.packing import BinAssignment, best_fit_decreasing
from gyrotap.tap import (
    EncodingResult,
    PulseEncoder,
    TapeImage,
    TapeImageWriter,
    TapHeader,
    TapReader,
    encode_prg,
    xor_checksum,
)
from gyrotap.assets import LoaderAssets
from gyrotap.compilation import Cassette, build_compilations, plan_cassettes
from gyrotap.config import ConverterConfig
from gyrotap.converter import ConversionReport, Converter

__all__ = [
    "__version__",
    # Errors
    "GyrotapError",
    "InvalidArgumentError",
    "ProgramError",
    "InvalidProgramError",
    "OutOfAddressRangeError",
    "MissingEntryPointError",
    "AssetError",
    "MissingAssetError",
    "InvalidAssetError",
    "TapeIOError",
    "TapFormatError",
    "OutputCollisionError",
    # Effects
    "LOADING_EFFECTS",
    "TEXT_COLOURS",
    "FoundMessageStyle",
    "LoadingEffect",
    "TextColour",
    # Programs
    "PrgSource",
    "discover_programs",
    "find_sys_address",
    # Packing
    "BinAssignment",
    "best_fit_decreasing",
    # Tape images
    "EncodingResult",
    "PulseEncoder",
    "TapeImage",
    "TapeImageWriter",
    "TapHeader",
    "TapReader",
    "encode_prg",
    "xor_checksum",
    # Batch conversion
    "LoaderAssets",
    "Cassette",
    "build_compilations",
    "plan_cassettes",
    "ConverterConfig",
    "ConversionReport",
    "Converter",
]
