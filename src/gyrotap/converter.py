"""
Batch Conversion
================

Runs the whole pipeline for one command-line path:

1. Load the loader assets
2. Find the PRG files (a single file or every PRG in a directory)
3. For each program, validate it, pick its loading effect and found-message
   style, and write its tape image
4. For a directory, optionally join the images into compilation cassettes

Programs are processed one at a time, in name order. The first program
that fails validation stops the batch; programs already written stay on
disk, nothing after the failing program is written.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union
import logging
import random

from gyrotap.assets import LoaderAssets
from gyrotap.compilation import Cassette, build_compilations, side_capacity_seconds
from gyrotap.config import ConverterConfig
from gyrotap.effects import (
    LOADING_EFFECTS,
    TEXT_COLOURS,
    FoundMessageStyle,
    LoadingEffect,
    sample_excluding,
)
from gyrotap.errors import OutputCollisionError, TapeIOError
from gyrotap.prg import PrgSource, discover_programs
from gyrotap.tap.writer import EncodingResult, TapeImageWriter

logger = logging.getLogger(__name__)

TAP_EXTENSION = ".tap"


@dataclass
class ConversionReport:
    """
    What a conversion run produced.

    Attributes:
        output_dir: Where the TAP files were written
        results: One entry per program, in processing order
        sys_addresses: SYS address found for each program, by stem
        cassettes: Compilation cassettes (empty unless requested)
    """
    output_dir: Path
    results: list[EncodingResult] = field(default_factory=list)
    sys_addresses: dict[str, int] = field(default_factory=dict)
    cassettes: list[Cassette] = field(default_factory=list)


ProgressCallback = Callable[[EncodingResult, int], None]


def default_output_dir(input_path: Union[str, Path]) -> Path:
    """``<dir>-TAPs`` next to an input directory, ``<file>-TAP`` next to a file."""
    input_path = Path(input_path)
    suffix = "-TAPs" if input_path.is_dir() else "-TAP"
    return input_path.with_name(input_path.name + suffix)


class Converter:
    """
    Converts PRG files to Gyrospeed tape images.

    Example:
        >>> converter = Converter(ConverterConfig(asset_dir=Path("loader")))
        >>> report = converter.convert("games/")
        >>> len(report.results)
        12
    """

    def __init__(
        self,
        config: ConverterConfig,
        assets: Optional[LoaderAssets] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if config.builds_compilations:
            side_capacity_seconds(config.tape_length_minutes)

        self.config = config
        self.assets = assets or LoaderAssets.load(
            config.asset_dir, config.header_filename, config.boot_filename
        )
        self.rng = rng or random.Random(config.seed)
        self.writer = TapeImageWriter(self.assets.header_template, self.assets.boot_code)

        self._effect_index = config.effect if config.effect is not None else 0
        self._colour_index = 0

    # =========================================================================
    # Per-Program Choices
    # =========================================================================

    def next_effect(self) -> LoadingEffect:
        """The loading effect for the next program."""
        if self.config.random_effect:
            self._effect_index = sample_excluding(
                self.rng, len(LOADING_EFFECTS), self._effect_index
            )
        return LOADING_EFFECTS[self._effect_index]

    def next_style(self) -> FoundMessageStyle:
        """The found-message style for the next program."""
        if not self.config.random_colour:
            return self.config.found_message_style()

        self._colour_index = sample_excluding(self.rng, len(TEXT_COLOURS), self._colour_index)
        return FoundMessageStyle(
            clear_screen=self.config.clear_screen,
            colour=TEXT_COLOURS[self._colour_index],
        )

    # =========================================================================
    # Conversion
    # =========================================================================

    def convert(
        self,
        input_path: Union[str, Path],
        on_program: Optional[ProgressCallback] = None,
    ) -> ConversionReport:
        """
        Convert a PRG file, or every PRG in a directory.

        Args:
            input_path: File or directory to convert
            on_program: Called with each result and its SYS address

        Returns:
            A report of everything written

        Raises:
            ProgramError: If any program fails validation (stops the batch)
            TapeIOError: If the input has no PRG files or a write fails
        """
        input_path = Path(input_path)
        paths = discover_programs(input_path)
        if not paths:
            raise TapeIOError(f"{input_path} does not contain any PRG files")

        output_dir = Path(self.config.output_dir or default_output_dir(input_path))
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TapeIOError(f"Cannot create {output_dir}: {e}") from e

        report = ConversionReport(output_dir=output_dir)
        claimed: dict[Path, str] = {}

        for path in paths:
            source = PrgSource.from_file(path)
            source.validate_address_range()
            sys_address = source.sys_address()

            tap_path = output_dir / f"{source.stem}{TAP_EXTENSION}"
            if tap_path in claimed:
                raise OutputCollisionError(tap_path, claimed[tap_path], source.name)
            claimed[tap_path] = source.name

            effect = self.next_effect()
            style = self.next_style()
            logger.debug(
                f"{source.name}: SYS {sys_address}, effect '{effect.name}', "
                f"prefix {style.prefix().hex() or 'none'}"
            )

            result = self.writer.write(source, tap_path, effect, style)
            report.results.append(result)
            report.sys_addresses[source.stem] = sys_address

            if on_program is not None:
                on_program(result, sys_address)

        if self.config.builds_compilations and not input_path.is_dir():
            logger.warning("Compilations are only built for folders of PRG files")
        elif self.config.builds_compilations:
            report.cassettes = build_compilations(
                report.results,
                output_dir,
                self.config.tape_length_minutes,
                keep_individual=self.config.keep_individual,
            )

        return report
