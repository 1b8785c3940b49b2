"""Tests for life_sync.domain.codec."""

from __future__ import annotations

import numpy as np
import pytest

from life_sync.domain.codec import SparseCell, SparseSnapshot, to_dense, to_sparse
from life_sync.domain.grid import Cell, Grid
from life_sync.errors import ProtocolViolation


def _random_grid(side: int, seed: int) -> Grid:
    rng = np.random.default_rng(seed)
    alive = rng.random((side, side)) < 0.3
    owner = rng.integers(0, 10, size=(side, side))
    owner[alive & (owner == 0)] = 1
    coins = rng.integers(0, 8, size=(side, side))
    return Grid.from_arrays(owner, coins, alive)


class TestToDense:
    def test_alive_and_territory_cells(self) -> None:
        snapshot = SparseSnapshot(
            alive_cells=(SparseCell(x=1, y=2, owner=3, coins=1),),
            territory=(SparseCell(x=0, y=0, owner=2, coins=5),),
        )
        grid = to_dense(snapshot, 4)
        assert grid.cell(1, 2) == Cell(owner=3, coins=1, alive=True)
        assert grid.cell(0, 0) == Cell(owner=2, coins=5, alive=False)
        assert grid.alive_count() == 1

    def test_alive_wins_over_territory(self) -> None:
        snapshot = SparseSnapshot(
            alive_cells=(SparseCell(x=2, y=2, owner=1, coins=0),),
            territory=(SparseCell(x=2, y=2, owner=4, coins=6),),
        )
        assert to_dense(snapshot, 4).cell(2, 2) == Cell(owner=1, coins=0, alive=True)

    def test_empty_snapshot(self) -> None:
        assert to_dense(SparseSnapshot(), 5) == Grid.empty(5)

    @pytest.mark.parametrize(
        "cell",
        [
            SparseCell(x=4, y=0, owner=1, coins=0),
            SparseCell(x=0, y=-1, owner=1, coins=0),
            SparseCell(x=0, y=0, owner=11, coins=0),
            SparseCell(x=0, y=0, owner=1, coins=-2),
            SparseCell(x=0, y=0, owner=0, coins=0),
        ],
    )
    def test_rejects_invalid_alive_cell(self, cell: SparseCell) -> None:
        with pytest.raises(ProtocolViolation):
            to_dense(SparseSnapshot(alive_cells=(cell,)), 4)

    def test_rejects_duplicate_coordinate(self) -> None:
        snapshot = SparseSnapshot(
            territory=(
                SparseCell(x=1, y=1, owner=1, coins=1),
                SparseCell(x=1, y=1, owner=2, coins=1),
            )
        )
        with pytest.raises(ProtocolViolation, match="listed twice"):
            to_dense(snapshot, 4)

    def test_unowned_territory_with_coins_allowed(self) -> None:
        snapshot = SparseSnapshot(territory=(SparseCell(x=3, y=3, owner=0, coins=2),))
        assert to_dense(snapshot, 4).cell(3, 3) == Cell(owner=0, coins=2, alive=False)


class TestToSparse:
    def test_row_major_order(self) -> None:
        grid = Grid.empty(4).with_cells(
            {
                (3, 0): Cell(owner=1, alive=True),
                (0, 1): Cell(owner=2, alive=True),
                (1, 0): Cell(owner=1, alive=True),
            }
        )
        coords = [(c.x, c.y) for c in to_sparse(grid).alive_cells]
        assert coords == [(1, 0), (3, 0), (0, 1)]

    def test_default_cells_omitted(self) -> None:
        grid = Grid.empty(6).with_cells({(2, 2): Cell(owner=5, coins=0, alive=False)})
        snapshot = to_sparse(grid)
        assert snapshot.alive_cells == ()
        assert snapshot.territory == (SparseCell(x=2, y=2, owner=5, coins=0),)
        assert len(snapshot) == 1

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_round_trip(self, seed: int) -> None:
        grid = _random_grid(16, seed)
        assert to_dense(to_sparse(grid), 16) == grid
