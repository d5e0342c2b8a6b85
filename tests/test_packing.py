"""
Bin Packing Tests
=================
"""

import math
import random

import pytest

from gyrotap.errors import InvalidArgumentError
from gyrotap.packing import BinAssignment, best_fit_decreasing


def bin_loads(assignment: BinAssignment, durations) -> list[float]:
    loads = [0.0] * assignment.bin_count
    for item, bin_index in enumerate(assignment.bins):
        loads[bin_index] += durations[item]
    return loads


class TestBestFitDecreasing:
    """Tests for best_fit_decreasing."""

    def test_worked_example(self):
        assignment = best_fit_decreasing([70, 60, 50, 40], 100)
        assert assignment.bin_count == 3
        assert assignment.bins == (0, 1, 2, 1)
        assert assignment.remaining == (30, 0, 50)

    def test_tightest_fit_wins(self):
        # 20 fits both bins; the 75-bin leaves less spare
        assignment = best_fit_decreasing([50, 75, 20], 100)
        assert assignment.bins == (1, 0, 0)

    def test_equal_fit_prefers_first_bin(self):
        assignment = best_fit_decreasing([60, 60, 30], 100)
        assert assignment.bins == (0, 1, 0)

    def test_ties_keep_input_order(self):
        assignment = best_fit_decreasing([50, 50, 50], 100)
        assert assignment.bins == (0, 0, 1)

    def test_empty(self):
        assignment = best_fit_decreasing([], 100)
        assert assignment.bin_count == 0
        assert assignment.bins == ()

    def test_exact_fit(self):
        assignment = best_fit_decreasing([100], 100)
        assert assignment.bin_count == 1
        assert assignment.remaining == (0,)

    def test_oversize_item_gets_own_bin(self):
        assignment = best_fit_decreasing([150, 30], 100)
        assert assignment.bin_count == 2
        assert assignment.bins == (0, 1)

    @pytest.mark.parametrize("capacity", [0, -10])
    def test_invalid_capacity(self, capacity):
        with pytest.raises(InvalidArgumentError):
            best_fit_decreasing([10], capacity)

    def test_items_in(self):
        assignment = best_fit_decreasing([70, 60, 50, 40], 100)
        assert assignment.items_in(1) == [1, 3]
        assert assignment.items_in(5) == []

    @pytest.mark.parametrize("seed", range(5))
    def test_capacity_and_lower_bound(self, seed):
        rng = random.Random(seed)
        durations = [rng.uniform(20, 600) for _ in range(40)]
        capacity = 1350

        assignment = best_fit_decreasing(durations, capacity)

        assert all(load <= capacity + 1e-9 for load in bin_loads(assignment, durations))
        assert assignment.bin_count >= math.ceil(sum(durations) / capacity)
        assert sorted(set(assignment.bins)) == list(range(assignment.bin_count))

    def test_deterministic(self):
        durations = [95.5, 120.25, 95.5, 300.0, 12.0, 300.0]
        assert best_fit_decreasing(durations, 400) == best_fit_decreasing(durations, 400)
