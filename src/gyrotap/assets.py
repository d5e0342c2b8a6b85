"""
Loader Assets
=============

The Gyrospeed loader ships as two small PRG files built from the loader
sources:

- ``gyrospeed-header.prg``: the CBM header whose cassette buffer holds the
  turbo loader, the filename and the loading-effect routine
- ``gyrospeed-boot.prg``: boot code loaded as the first data block. It
  hijacks the BASIC idle loop vector at $0302, calls the loader in the
  header and finally RUNs the program.

Both are read once per batch.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union
import logging

from gyrotap.errors import MissingAssetError, TapeIOError
from gyrotap.tap.cbm import validate_header_template

logger = logging.getLogger(__name__)

HEADER_FILENAME = "gyrospeed-header.prg"
BOOT_FILENAME = "gyrospeed-boot.prg"


@dataclass(frozen=True)
class LoaderAssets:
    """The two loader blobs."""
    header_template: bytes
    boot_code: bytes

    @classmethod
    def load(
        cls,
        asset_dir: Union[str, Path],
        header_filename: str = HEADER_FILENAME,
        boot_filename: str = BOOT_FILENAME,
    ) -> "LoaderAssets":
        """
        Read the loader blobs from a directory.

        Raises:
            MissingAssetError: If either file does not exist
            InvalidAssetError: If the header has the wrong size
            TapeIOError: If a file exists but cannot be read
        """
        asset_dir = Path(asset_dir)
        header_template = _read_asset(asset_dir / header_filename)
        boot_code = _read_asset(asset_dir / boot_filename)

        validate_header_template(header_template)

        logger.debug(
            f"Loaded loader assets from {asset_dir}: header {len(header_template)} bytes, "
            f"boot {len(boot_code)} bytes"
        )
        return cls(header_template=header_template, boot_code=boot_code)


def _read_asset(path: Path) -> bytes:
    if not path.is_file():
        raise MissingAssetError(path)
    try:
        return path.read_bytes()
    except OSError as e:
        raise TapeIOError(f"Cannot read {path}: {e}") from e
