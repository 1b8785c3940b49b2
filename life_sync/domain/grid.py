"""Dense toroidal grid of cells and the store that owns the shared reference.

A ``Grid`` is three read-only ``numpy`` arrays indexed ``[y, x]``. Evolution
and reconciliation never mutate a grid; they build a new one and swap the
store's reference, so readers never observe a half-stepped grid.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

OWNER_DTYPE = np.uint8
COINS_DTYPE = np.int64


@dataclass(frozen=True)
class Cell:
    """A single grid cell as seen by callers."""

    owner: int = 0
    coins: int = 0
    alive: bool = False

    @property
    def is_default(self) -> bool:
        return self.owner == 0 and self.coins == 0 and not self.alive


def wrap(x: int, y: int, side: int) -> tuple[int, int]:
    """Wrap a raw coordinate onto the torus."""
    return x % side, y % side


@dataclass(frozen=True, eq=False)
class Grid:
    """Immutable square toroidal grid."""

    owner: np.ndarray
    coins: np.ndarray
    alive: np.ndarray

    def __post_init__(self) -> None:
        shape = self.alive.shape
        if len(shape) != 2 or shape[0] != shape[1] or shape[0] < 1:
            raise ValueError(f"grid arrays must be square and non-empty, got {shape}")
        if self.owner.shape != shape or self.coins.shape != shape:
            raise ValueError("owner, coins and alive arrays must share one shape")
        for array in (self.owner, self.coins, self.alive):
            array.setflags(write=False)

    @classmethod
    def empty(cls, side: int) -> Grid:
        return cls(
            owner=np.zeros((side, side), dtype=OWNER_DTYPE),
            coins=np.zeros((side, side), dtype=COINS_DTYPE),
            alive=np.zeros((side, side), dtype=bool),
        )

    @classmethod
    def from_arrays(cls, owner: np.ndarray, coins: np.ndarray, alive: np.ndarray) -> Grid:
        """Build a grid from caller-owned arrays (copied, cast to canonical dtypes)."""
        return cls(
            owner=np.array(owner, dtype=OWNER_DTYPE),
            coins=np.array(coins, dtype=COINS_DTYPE),
            alive=np.array(alive, dtype=bool),
        )

    @property
    def side(self) -> int:
        return int(self.alive.shape[0])

    def cell(self, x: int, y: int) -> Cell:
        """Return the cell at ``(x, y)``; coordinates wrap around the torus."""
        x, y = wrap(x, y, self.side)
        return Cell(
            owner=int(self.owner[y, x]),
            coins=int(self.coins[y, x]),
            alive=bool(self.alive[y, x]),
        )

    def is_alive(self, x: int, y: int) -> bool:
        x, y = wrap(x, y, self.side)
        return bool(self.alive[y, x])

    def alive_count(self) -> int:
        return int(np.count_nonzero(self.alive))

    def with_cells(self, cells: dict[tuple[int, int], Cell]) -> Grid:
        """Return a copy with the given ``(x, y) -> Cell`` overrides applied."""
        owner = self.owner.copy()
        coins = self.coins.copy()
        alive = self.alive.copy()
        for (x, y), cell in cells.items():
            x, y = wrap(x, y, self.side)
            owner[y, x] = cell.owner
            coins[y, x] = cell.coins
            alive[y, x] = cell.alive
        return Grid(owner=owner, coins=coins, alive=alive)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            np.array_equal(self.alive, other.alive)
            and np.array_equal(self.owner, other.owner)
            and np.array_equal(self.coins, other.coins)
        )

    __hash__ = None  # type: ignore[assignment]


class GridStore:
    """Single owner of the session's working grid and local generation counter.

    Exactly one writer role is active at a time (stepper or reconciler, both on
    one event loop); each write is one reference assignment.
    """

    def __init__(self, side: int, grid: Grid | None = None, generation: int = 0) -> None:
        if grid is not None and grid.side != side:
            raise ValueError(f"grid side {grid.side} does not match store side {side}")
        self.side = side
        self._grid = grid if grid is not None else Grid.empty(side)
        self._generation = generation

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def generation(self) -> int:
        return self._generation

    def replace(self, grid: Grid, generation: int) -> None:
        """Overwrite the grid wholesale (authoritative snapshot)."""
        if grid.side != self.side:
            raise ValueError(f"grid side {grid.side} does not match store side {self.side}")
        self._grid = grid
        self._generation = generation

    def advance(self, grid: Grid) -> None:
        """Swap in the next locally computed generation."""
        if grid.side != self.side:
            raise ValueError(f"grid side {grid.side} does not match store side {self.side}")
        self._grid = grid
        self._generation += 1
