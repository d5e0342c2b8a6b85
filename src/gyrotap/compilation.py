"""
Compilation Cassettes
=====================

Joins the individual tape images of a batch into compilation cassettes.
Programs are spread across cassette sides with best-fit decreasing; sides
are paired into cassettes (bins 0 and 1 make cassette #1, bins 2 and 3
make cassette #2, ...). For each cassette this writes:

- ``C64 Compilation Cassette #N - Side A.tap``
- ``C64 Compilation Cassette #N - Side B.tap`` (when side B has programs)
- ``C64 Compilation Cassette #N - Contents.txt``

Each side's programs are in alphabetical order. A joined image is simply
the bodies of the individual images one after another, behind a fresh
header whose length field covers them all.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence
import logging

from gyrotap.errors import InvalidArgumentError, TapeIOError
from gyrotap.packing import best_fit_decreasing
from gyrotap.tap.header import TapHeader
from gyrotap.tap.reader import TapReader
from gyrotap.tap.writer import EncodingResult

logger = logging.getLogger(__name__)

CASSETTE_NAME = "C64 Compilation Cassette #{number}"

# Column gap in the contents listing
LISTING_GUTTER = 4


def side_capacity_seconds(tape_length_minutes: int) -> int:
    """
    Playing time of one side of a tape, in seconds.

    A C90 has 45 minutes per side. Odd lengths round down to whole minutes
    per side.
    """
    if tape_length_minutes < 2:
        raise InvalidArgumentError(
            f"Tape length must be at least 2 minutes, got {tape_length_minutes}"
        )
    return (tape_length_minutes // 2) * 60


def format_duration(seconds: float) -> str:
    """Format a duration as mm:ss (whole seconds, truncated)."""
    total = int(seconds)
    return f"{total // 60:02d}:{total % 60:02d}"


# =============================================================================
# Cassette
# =============================================================================

@dataclass
class Cassette:
    """
    One two-sided compilation cassette.

    Attributes:
        number: Cassette number (1-based)
        side_a: Programs on side A, alphabetical
        side_b: Programs on side B, alphabetical
    """
    number: int
    side_a: list[EncodingResult]
    side_b: list[EncodingResult]

    @property
    def name(self) -> str:
        return CASSETTE_NAME.format(number=self.number)

    @property
    def side_a_seconds(self) -> float:
        return sum(r.duration_seconds for r in self.side_a)

    @property
    def side_b_seconds(self) -> float:
        return sum(r.duration_seconds for r in self.side_b)

    def side_path(self, output_dir: Path, side: str) -> Path:
        return output_dir / f"{self.name} - Side {side}.tap"

    def listing_path(self, output_dir: Path) -> Path:
        return output_dir / f"{self.name} - Contents.txt"

    def render_listing(self) -> str:
        """
        Render the contents listing for both sides.

        Side B's column starts past the longest side A name.
        """
        names_a = [r.stem for r in self.side_a]
        names_b = [r.stem for r in self.side_b]
        column = max((len(n) for n in names_a), default=0) + LISTING_GUTTER
        padding = " " * max(column - len("Side A"), 0)

        lines = [
            "",
            self.name,
            "",
            f"Side A{padding}Side B",
            f"------{padding}------",
            "",
        ]

        for row in range(max(len(names_a), len(names_b))):
            left = names_a[row] if row < len(names_a) else ""
            right = names_b[row] if row < len(names_b) else ""
            lines.append(f"{left.ljust(column)}{right}" if right else left)

        lines.extend([
            "",
            f"Length{padding}Length",
            f"------{padding}------",
            "",
            f"{format_duration(self.side_a_seconds)} {padding}"
            f"{format_duration(self.side_b_seconds)}",
        ])
        return "\n".join(lines) + "\n"


def _alphabetical(results: list[EncodingResult]) -> list[EncodingResult]:
    return sorted(results, key=lambda r: r.stem.casefold())


def plan_cassettes(results: Sequence[EncodingResult], tape_length_minutes: int) -> list[Cassette]:
    """
    Assign programs to cassette sides without touching the filesystem.

    Args:
        results: Encoded programs with their durations
        tape_length_minutes: Total tape length (both sides)

    Returns:
        The cassettes, in order
    """
    capacity = side_capacity_seconds(tape_length_minutes)
    assignment = best_fit_decreasing([r.duration_seconds for r in results], capacity)

    cassettes = []
    for first_side in range(0, assignment.bin_count, 2):
        side_a = [results[i] for i in assignment.items_in(first_side)]
        side_b = [results[i] for i in assignment.items_in(first_side + 1)]
        cassettes.append(Cassette(
            number=first_side // 2 + 1,
            side_a=_alphabetical(side_a),
            side_b=_alphabetical(side_b),
        ))

    logger.info(
        f"{len(results)} programs need {assignment.bin_count} sides "
        f"({len(cassettes)} cassettes of {tape_length_minutes} minutes)"
    )
    return cassettes


# =============================================================================
# Joining
# =============================================================================

def join_tap_files(tap_paths: Sequence[Path], output_path: Path) -> Optional[int]:
    """
    Concatenate TAP images into one.

    Args:
        tap_paths: Images to join, in playing order
        output_path: Joined image to write

    Returns:
        The joined data length, or None if there was nothing to join
        (in which case no file is written)

    Raises:
        TapFormatError: If an input is not a TAP image
        TapeIOError: If a file cannot be read or written
    """
    if not tap_paths:
        return None

    bodies = [TapReader.from_file(path).body for path in tap_paths]
    data_length = sum(len(body) for body in bodies)

    try:
        with open(output_path, "wb") as fd:
            fd.write(TapHeader(data_length=data_length).to_bytes())
            for body in bodies:
                fd.write(body)
    except OSError as e:
        raise TapeIOError(f"Cannot write {output_path}: {e}") from e

    logger.debug(f"Joined {len(tap_paths)} images into {output_path}")
    return data_length


def build_compilations(
    results: Sequence[EncodingResult],
    output_dir: Path,
    tape_length_minutes: int,
    keep_individual: bool = False,
) -> list[Cassette]:
    """
    Write compilation cassettes for a batch of encoded programs.

    Args:
        results: Encoded programs (their TAP files must exist)
        output_dir: Directory to write the cassettes into
        tape_length_minutes: Total tape length (C60 = 60)
        keep_individual: Keep the per-program TAP files afterwards

    Returns:
        The cassettes that were written
    """
    output_dir = Path(output_dir)
    cassettes = plan_cassettes(results, tape_length_minutes)

    for cassette in cassettes:
        join_tap_files([r.tap_path for r in cassette.side_a], cassette.side_path(output_dir, "A"))
        join_tap_files([r.tap_path for r in cassette.side_b], cassette.side_path(output_dir, "B"))

        listing_path = cassette.listing_path(output_dir)
        try:
            listing_path.write_text(cassette.render_listing(), encoding="utf-8")
        except OSError as e:
            raise TapeIOError(f"Cannot write {listing_path}: {e}") from e

    if not keep_individual:
        for result in results:
            try:
                result.tap_path.unlink()
            except OSError as e:
                raise TapeIOError(f"Cannot delete {result.tap_path}: {e}") from e

    return cassettes
