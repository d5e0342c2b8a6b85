"""
gyrotap - PRG to Gyrospeed TAP Converter
========================================

Converts crunched C64 PRG files into TAP images that load with the
Gyrospeed turbo loader. The crunched PRG files should have a BASIC SYS
line at $0801 to run the program (e.g. crunched with Exomizer) and must
load into the address range $0400 - $cfff.

Gyrospeed was written by Gary Saunders and published as a type-in listing
in the April 1988 issue of Your Commodore.

Usage Examples
--------------
Convert a single program:
    $ gyrotap game.prg

Convert a folder with a random loading effect per program:
    $ gyrotap --effect R games/

Build C90 compilation cassettes, keeping the individual images:
    $ gyrotap --tape-length 90 --keep-individual games/

Clear the screen and print the found message in yellow:
    $ gyrotap --clear-screen --colour yellow game.prg
"""

import logging
from pathlib import Path
from typing import Optional

import click

from gyrotap import __version__
from gyrotap.cli.errors import ExitCode, handle_cli_exception
from gyrotap.compilation import format_duration
from gyrotap.config import ConverterConfig
from gyrotap.converter import Converter
from gyrotap.effects import LOADING_EFFECTS
from gyrotap.errors import InvalidArgumentError
from gyrotap.tap.writer import EncodingResult

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


def _list_effects(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    for effect in LOADING_EFFECTS:
        click.echo(f"{effect.key} - {effect.name}")
    click.echo("R - use a random effect for each PRG file")
    ctx.exit(ExitCode.SUCCESS)


def _report_program(result: EncodingResult, sys_address: int) -> None:
    click.echo(
        f"Processing {result.source.name} - found BASIC SYS line with jump address "
        f"${sys_address:04x} ({sys_address})"
    )
    click.echo(f"  Running length: {format_duration(result.duration_seconds)}")


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_path",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "-e", "--effect",
    help="Loading effect key (0-9, A-J) or R for a random effect per program "
         "(default: 0, see --list-effects)",
)
@click.option(
    "-c", "--colour",
    help="Found message text colour (e.g. yellow, light-red) or R for random "
         "(default: light-blue)",
)
@click.option(
    "--clear-screen",
    is_flag=True,
    help="Clear the screen before the found message",
)
@click.option(
    "-t", "--tape-length",
    type=click.IntRange(min=2),
    help="Build compilation cassettes for tapes of this many minutes (C60 = 60)",
)
@click.option(
    "-k", "--keep-individual",
    is_flag=True,
    help="Keep the individual TAP files when building compilations",
)
@click.option(
    "-a", "--assets",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory containing gyrospeed-header.prg and gyrospeed-boot.prg "
         "(default: $GYROTAP_ASSET_DIR or the current directory)",
)
@click.option(
    "-o", "--output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory (default: <file>-TAP or <folder>-TAPs)",
)
@click.option(
    "--seed",
    type=int,
    help="Seed for random effects and colours",
)
@click.option(
    "--list-effects",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=_list_effects,
    help="List the loading effects and exit",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(__version__, "--version", "-V", prog_name="gyrotap")
def main(
    input_path: Path,
    effect: Optional[str],
    colour: Optional[str],
    clear_screen: bool,
    tape_length: Optional[int],
    keep_individual: bool,
    assets: Optional[Path],
    output: Optional[Path],
    seed: Optional[int],
    verbose: bool,
) -> None:
    """
    Convert crunched PRG files to Gyrospeed turbo TAP images.

    INPUT_PATH is a PRG file or a folder of PRG files. Each program needs a
    BASIC SYS line at $0801 and must load into $0400 - $cfff.

    \b
    Examples:
      gyrotap game.prg
      gyrotap --effect R --colour R games/
      gyrotap --tape-length 90 games/
    """
    setup_logging(verbose)

    try:
        config = ConverterConfig.from_env()

        try:
            if effect is not None:
                config.set_effect(effect)
            if colour is not None:
                config.set_colour(colour)
        except InvalidArgumentError as e:
            raise click.BadParameter(str(e)) from e

        if clear_screen:
            config.clear_screen = True
        if tape_length is not None:
            config.tape_length_minutes = tape_length
        if keep_individual:
            config.keep_individual = True
        if assets is not None:
            config.asset_dir = assets
        if output is not None:
            config.output_dir = output
        if seed is not None:
            config.seed = seed

        converter = Converter(config)
        report = converter.convert(input_path, on_program=_report_program)

        if report.cassettes:
            click.echo("\nCompilations:")
            for cassette in report.cassettes:
                click.echo(
                    f"  {cassette.name}: side A {len(cassette.side_a)} programs "
                    f"({format_duration(cassette.side_a_seconds)}), side B "
                    f"{len(cassette.side_b)} programs "
                    f"({format_duration(cassette.side_b_seconds)})"
                )

        click.echo(f"\nWrote {len(report.results)} TAP files to {report.output_dir}")

    except Exception as e:
        handle_cli_exception(e, verbose)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
