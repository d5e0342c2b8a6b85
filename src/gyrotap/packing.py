"""
Cassette Side Packing
=====================

Distributes programs across cassette sides with the offline best-fit
decreasing heuristic. Each side is a bin whose capacity is the playing
time of one side in seconds; each program is an item whose size is its
tape image's playback time.

Best-fit decreasing never uses more than 11/9 OPT + 6/9 bins, which in
practice means at most one side more than the optimum for any realistic
compilation.

Ties between equal durations keep the input order (the sort is stable),
so the same input always produces the same assignment.
"""

from dataclasses import dataclass
from typing import Sequence
import logging

from gyrotap.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BinAssignment:
    """
    Result of packing items into bins.

    Attributes:
        bin_count: Number of bins opened
        bins: Bin index of each item, in the input order
        remaining: Capacity left in each opened bin
    """
    bin_count: int
    bins: tuple[int, ...]
    remaining: tuple[float, ...]

    def items_in(self, bin_index: int) -> list[int]:
        """Input indices of the items assigned to ``bin_index``."""
        return [i for i, b in enumerate(self.bins) if b == bin_index]


def best_fit_decreasing(durations: Sequence[float], capacity: float) -> BinAssignment:
    """
    Assign items to bins using best-fit decreasing.

    Items are taken longest first. Each goes into the open bin that it
    leaves with the least spare capacity; if no open bin has room, a new
    bin is opened. An item longer than the capacity gets a bin of its own.

    Args:
        durations: Size of each item (seconds)
        capacity: Size of each bin (seconds)

    Returns:
        The bin count and each item's bin index

    Raises:
        InvalidArgumentError: If the capacity is not positive

    Example:
        >>> best_fit_decreasing([70, 60, 50, 40], 100).bins
        (0, 1, 2, 1)
    """
    if capacity <= 0:
        raise InvalidArgumentError(f"Bin capacity must be positive, got {capacity}")

    order = sorted(range(len(durations)), key=lambda i: durations[i], reverse=True)

    remaining: list[float] = []
    bins = [0] * len(durations)

    for item in order:
        duration = durations[item]
        best_bin = -1
        best_spare = capacity + 1

        for index, free in enumerate(remaining):
            if free >= duration and free - duration < best_spare:
                best_bin = index
                best_spare = free - duration

        if best_bin < 0:
            if duration > capacity:
                logger.warning(
                    f"Item of {duration:.1f}s exceeds bin capacity of {capacity:.1f}s"
                )
            remaining.append(capacity - duration)
            best_bin = len(remaining) - 1
        else:
            remaining[best_bin] -= duration

        bins[item] = best_bin

    logger.debug(f"Packed {len(durations)} items into {len(remaining)} bins")
    return BinAssignment(bin_count=len(remaining), bins=tuple(bins), remaining=tuple(remaining))
