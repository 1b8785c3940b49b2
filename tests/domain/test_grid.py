"""Tests for life_sync.domain.grid."""

from __future__ import annotations

import numpy as np
import pytest

from life_sync.domain.grid import Cell, Grid, GridStore, wrap


class TestGrid:
    def test_empty_grid_is_all_default(self) -> None:
        grid = Grid.empty(8)
        assert grid.side == 8
        assert grid.alive_count() == 0
        assert grid.cell(3, 4).is_default

    def test_arrays_are_read_only(self) -> None:
        grid = Grid.empty(4)
        with pytest.raises(ValueError):
            grid.alive[0, 0] = True

    def test_cell_coordinates_wrap(self) -> None:
        grid = Grid.empty(5).with_cells({(0, 0): Cell(owner=2, coins=3, alive=True)})
        assert grid.cell(5, -5) == Cell(owner=2, coins=3, alive=True)
        assert grid.is_alive(-5, 10)

    def test_with_cells_leaves_original_untouched(self) -> None:
        grid = Grid.empty(4)
        updated = grid.with_cells({(1, 2): Cell(owner=1, alive=True)})
        assert grid.alive_count() == 0
        assert updated.alive_count() == 1
        assert updated.alive[2, 1]

    def test_equality_compares_contents(self) -> None:
        a = Grid.empty(4).with_cells({(1, 1): Cell(owner=1, alive=True)})
        b = Grid.empty(4).with_cells({(1, 1): Cell(owner=1, alive=True)})
        c = Grid.empty(4).with_cells({(1, 1): Cell(owner=2, alive=True)})
        assert a == b
        assert a != c

    def test_from_arrays_copies_and_casts(self) -> None:
        owner = np.zeros((3, 3), dtype=np.int64)
        grid = Grid.from_arrays(owner, np.zeros((3, 3)), np.zeros((3, 3)))
        owner[0, 0] = 4
        assert grid.owner[0, 0] == 0
        assert grid.owner.dtype == np.uint8
        assert grid.alive.dtype == bool

    def test_rejects_mismatched_shapes(self) -> None:
        with pytest.raises(ValueError, match="square"):
            Grid.from_arrays(np.zeros((2, 3)), np.zeros((2, 3)), np.zeros((2, 3)))
        with pytest.raises(ValueError, match="share one shape"):
            Grid.from_arrays(np.zeros((3, 3)), np.zeros((2, 2)), np.zeros((3, 3)))


def test_wrap_negative_and_overflow() -> None:
    assert wrap(-1, 10, 10) == (9, 0)
    assert wrap(21, -11, 10) == (1, 9)


class TestGridStore:
    def test_starts_empty_at_generation_zero(self) -> None:
        store = GridStore(6)
        assert store.grid == Grid.empty(6)
        assert store.generation == 0

    def test_advance_increments_generation(self) -> None:
        store = GridStore(4)
        nxt = Grid.empty(4).with_cells({(0, 0): Cell(owner=1, alive=True)})
        store.advance(nxt)
        assert store.grid is nxt
        assert store.generation == 1

    def test_replace_sets_generation(self) -> None:
        store = GridStore(4, generation=7)
        store.replace(Grid.empty(4), 42)
        assert store.generation == 42

    def test_rejects_wrong_side(self) -> None:
        store = GridStore(4)
        with pytest.raises(ValueError):
            store.replace(Grid.empty(5), 1)
        with pytest.raises(ValueError):
            store.advance(Grid.empty(3))
        with pytest.raises(ValueError):
            GridStore(4, grid=Grid.empty(8))
