"""
Shared Test Fixtures
====================

Synthetic loader assets and PRG builders used across the test suite. The
real Gyrospeed loader blobs are assembled separately, so the tests use
stand-ins with the same layout: a $c2-byte header PRG loading at $033c and
a short boot PRG.
"""

from pathlib import Path
from typing import Callable

import pytest

from gyrotap.assets import BOOT_FILENAME, HEADER_FILENAME
from gyrotap.tap.cbm import CBM_EFFECT_OFFSET, CBM_HEADER_SIZE
from gyrotap.tap.writer import TapeImageWriter


def build_header_template() -> bytes:
    """A loader header stand-in with recognisable filler in every region."""
    prefix = bytes([0x3C, 0x03, 0x03, 0x01, 0x08, 0x00, 0x09])
    filename = b"GYROSPEED".ljust(16, b" ")
    loader_size = CBM_EFFECT_OFFSET - len(prefix) - len(filename)
    loader = bytes((i * 7 + 1) & 0xFF for i in range(loader_size))
    effect = bytes([0xEA]) * (CBM_HEADER_SIZE - CBM_EFFECT_OFFSET)
    return prefix + filename + loader + effect


def build_prg(
    load_address: int = 0x0801,
    sys_text: bytes = b"2061",
    payload: bytes = b"",
) -> bytes:
    """
    Build a PRG image with a one-line BASIC SYS stub at $0801.

    Images loading below $0801 get zero padding up to the BASIC start.
    """
    data = bytearray(load_address.to_bytes(2, "little"))
    data.extend(bytes(max(0x0801 - load_address, 0)))
    data.extend([0x0B, 0x08, 0x0A, 0x00, 0x9E])
    data.extend(sys_text)
    data.extend([0x00, 0x00, 0x00])
    data.extend(payload)
    return bytes(data)


@pytest.fixture
def header_template() -> bytes:
    return build_header_template()


@pytest.fixture
def boot_code() -> bytes:
    # lda #$00 / sta $d020 / rts, loading at $02a7
    return bytes([0xA7, 0x02, 0xA9, 0x00, 0x8D, 0x20, 0xD0, 0x60])


@pytest.fixture
def writer(header_template: bytes, boot_code: bytes) -> TapeImageWriter:
    return TapeImageWriter(header_template, boot_code)


@pytest.fixture
def make_prg() -> Callable[..., bytes]:
    return build_prg


@pytest.fixture
def asset_dir(tmp_path: Path, header_template: bytes, boot_code: bytes) -> Path:
    """A directory holding both loader blobs under their standard names."""
    directory = tmp_path / "loader"
    directory.mkdir()
    (directory / HEADER_FILENAME).write_bytes(header_template)
    (directory / BOOT_FILENAME).write_bytes(boot_code)
    return directory
