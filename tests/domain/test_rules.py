"""Tests for life_sync.domain.rules."""

from __future__ import annotations

import numpy as np
import pytest

from life_sync.config.types import TieBreak
from life_sync.domain.grid import Cell, Grid
from life_sync.domain.rules import (
    OwnerCounts,
    count_alive,
    count_by_owner,
    evolve,
    find_majority_owner,
    neighbor_sum,
    step_generation,
)


def _alive(side: int, cells: dict[tuple[int, int], int]) -> Grid:
    return Grid.empty(side).with_cells(
        {xy: Cell(owner=owner, alive=True) for xy, owner in cells.items()}
    )


def _alive_coords(grid: Grid) -> set[tuple[int, int]]:
    ys, xs = np.nonzero(grid.alive)
    return {(int(x), int(y)) for y, x in zip(ys, xs)}


class TestSurvivalAndBirth:
    def test_lone_cell_dies_keeping_owner_and_coins(self) -> None:
        grid = Grid.empty(6).with_cells({(2, 2): Cell(owner=3, coins=2, alive=True)})
        nxt = step_generation(grid)
        assert nxt.cell(2, 2) == Cell(owner=3, coins=2, alive=False)
        assert count_alive(nxt) == 0

    def test_block_is_stable(self) -> None:
        grid = _alive(8, {(3, 3): 1, (4, 3): 1, (3, 4): 1, (4, 4): 1})
        assert step_generation(grid) == grid

    def test_blinker_oscillates_with_period_two(self) -> None:
        grid = _alive(10, {(4, 4): 1, (5, 4): 1, (6, 4): 1})
        first = step_generation(grid)
        assert _alive_coords(first) == {(5, 3), (5, 4), (5, 5)}
        assert first.cell(5, 3).owner == 1
        second = step_generation(first)
        assert _alive_coords(second) == {(4, 4), (5, 4), (6, 4)}

    def test_blinker_wraps_across_both_edges(self) -> None:
        grid = _alive(10, {(9, 0): 1, (0, 0): 1, (1, 0): 1})
        assert _alive_coords(step_generation(grid)) == {(0, 9), (0, 0), (0, 1)}

    def test_newborn_takes_majority_owner(self) -> None:
        grid = _alive(10, {(4, 4): 2, (5, 4): 2, (6, 4): 3})
        nxt = step_generation(grid)
        assert nxt.cell(5, 5).alive
        assert nxt.cell(5, 5).owner == 2

    def test_input_grid_untouched_and_deterministic(self) -> None:
        grid = _alive(10, {(4, 4): 1, (5, 4): 2, (6, 4): 3})
        snapshot = grid.alive.copy()
        assert step_generation(grid) == step_generation(grid)
        assert np.array_equal(grid.alive, snapshot)

    def test_step_counts(self) -> None:
        result = evolve(_alive(10, {(4, 4): 1, (5, 4): 1, (6, 4): 1}))
        assert result.births == 2
        assert result.deaths == 2
        assert result.captured == {}


class TestTieBreak:
    def test_positional_uses_cell_index(self) -> None:
        grid = _alive(10, {(4, 4): 1, (5, 4): 2, (6, 4): 3})
        nxt = step_generation(grid, tie_break=TieBreak.POSITIONAL)
        # (5, 5) has index 55; 55 % 3 == 1 -> second tied owner
        assert nxt.cell(5, 5).owner == 2
        # (5, 3) has index 35; 35 % 3 == 2 -> third tied owner
        assert nxt.cell(5, 3).owner == 3

    def test_lowest_id(self) -> None:
        grid = _alive(10, {(4, 4): 1, (5, 4): 2, (6, 4): 3})
        nxt = step_generation(grid, tie_break=TieBreak.LOWEST_ID)
        assert nxt.cell(5, 5).owner == 1
        assert nxt.cell(5, 3).owner == 1

    def test_scalar_reference(self) -> None:
        counts = [0, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0]
        assert find_majority_owner(counts, 55) == 2
        assert find_majority_owner(counts, 55, TieBreak.LOWEST_ID) == 1
        assert find_majority_owner([0, 0, 3] + [0] * 8, 7) == 2

    def test_no_owned_neighbours_defaults_to_owner_one(self) -> None:
        assert find_majority_owner([3] + [0] * 10, 0) == 1

    def test_owners_beyond_max_players_ignored(self) -> None:
        counts = [0] * 10 + [3]
        assert find_majority_owner(counts, 0, max_players=9) == 1


class TestCoinCapture:
    def _grid(self) -> Grid:
        return Grid.empty(4).with_cells(
            {
                (0, 0): Cell(owner=1, alive=True),
                (1, 0): Cell(owner=1, alive=True),
                (2, 0): Cell(owner=1, alive=True),
                (1, 1): Cell(owner=2, coins=5, alive=False),
            }
        )

    def test_controller_captures_enemy_coins(self) -> None:
        result = evolve(self._grid(), quadrant_controllers=[1, 0, 0, 0], quadrant_size=2)
        assert result.grid.cell(1, 1) == Cell(owner=1, coins=0, alive=True)
        assert result.captured == {1: 5}

    def test_non_controller_leaves_coins(self) -> None:
        result = evolve(self._grid(), quadrant_controllers=[2, 0, 0, 0], quadrant_size=2)
        assert result.grid.cell(1, 1) == Cell(owner=1, coins=5, alive=True)
        assert result.captured == {}

    def test_without_controllers_coins_stay(self) -> None:
        assert step_generation(self._grid()).cell(1, 1).coins == 5

    def test_controllers_require_quadrant_size(self) -> None:
        with pytest.raises(ValueError, match="quadrant_size"):
            evolve(self._grid(), quadrant_controllers=[1, 0, 0, 0])


def test_neighbor_sum_wraps() -> None:
    mask = np.zeros((5, 5), dtype=bool)
    mask[0, 0] = True
    sums = neighbor_sum(mask)
    assert sums[4, 4] == 1
    assert sums[0, 0] == 0
    assert int(sums.sum()) == 8


def test_count_by_owner() -> None:
    grid = Grid.empty(4).with_cells(
        {
            (0, 0): Cell(owner=1, coins=2, alive=True),
            (1, 0): Cell(owner=1, coins=1, alive=False),
            (2, 2): Cell(owner=3, coins=0, alive=False),
            (3, 3): Cell(owner=0, coins=4, alive=False),
        }
    )
    assert count_by_owner(grid) == {
        1: OwnerCounts(alive=1, territory=1, coins=3),
        3: OwnerCounts(alive=0, territory=1, coins=0),
    }
