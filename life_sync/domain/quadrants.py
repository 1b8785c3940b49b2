"""Quadrant partitioning, read-side quadrant statistics and the wipe schedule.

The grid divides into ``quadrants_per_row ** 2`` equal squares with row-major
ids. Wipes themselves are performed by the authority; the local
:class:`WipeSchedule` is a prediction corrected on every sync.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from life_sync.config.constants import MAX_PLAYERS, WIPE_INTERVAL_SECONDS
from life_sync.domain.grid import Grid, GridStore


@dataclass(frozen=True)
class QuadrantBounds:
    """Half-open cell bounds ``[x0, x1) x [y0, y1)``."""

    x0: int
    y0: int
    x1: int
    y1: int


@dataclass(frozen=True)
class QuadrantStats:
    """Territory and coins per player inside one quadrant."""

    quadrant: int
    territory_by_player: tuple[int, ...]
    coins_by_player: tuple[int, ...]

    @property
    def total_territory(self) -> int:
        return sum(self.territory_by_player)

    @property
    def total_coins(self) -> int:
        return sum(self.coins_by_player)


def quadrant_bounds(quadrant: int, quadrant_size: int, quadrants_per_row: int) -> QuadrantBounds:
    count = quadrants_per_row * quadrants_per_row
    if not 0 <= quadrant < count:
        raise ValueError(f"quadrant must be in [0, {count}), got {quadrant}")
    x0 = (quadrant % quadrants_per_row) * quadrant_size
    y0 = (quadrant // quadrants_per_row) * quadrant_size
    return QuadrantBounds(x0=x0, y0=y0, x1=x0 + quadrant_size, y1=y0 + quadrant_size)


def wipe_quadrant(
    grid: Grid, quadrant: int, quadrant_size: int, quadrants_per_row: int
) -> Grid:
    """Kill every alive cell in ``quadrant``; owner and coins are preserved."""
    b = quadrant_bounds(quadrant, quadrant_size, quadrants_per_row)
    alive = grid.alive.copy()
    alive[b.y0 : b.y1, b.x0 : b.x1] = False
    return Grid(owner=grid.owner.copy(), coins=grid.coins.copy(), alive=alive)


class QuadrantIndex:
    """Read-only quadrant view over a :class:`GridStore`."""

    def __init__(self, store: GridStore, quadrant_size: int, quadrants_per_row: int) -> None:
        if quadrant_size * quadrants_per_row != store.side:
            raise ValueError("quadrant_size * quadrants_per_row must equal the grid side")
        self.store = store
        self.quadrant_size = quadrant_size
        self.quadrants_per_row = quadrants_per_row

    @property
    def count(self) -> int:
        return self.quadrants_per_row * self.quadrants_per_row

    def quadrant_of(self, x: int, y: int) -> int:
        side = self.store.side
        if not (0 <= x < side and 0 <= y < side):
            raise ValueError(f"({x},{y}) is outside a {side}x{side} grid")
        return (y // self.quadrant_size) * self.quadrants_per_row + (x // self.quadrant_size)

    def bounds(self, quadrant: int) -> QuadrantBounds:
        return quadrant_bounds(quadrant, self.quadrant_size, self.quadrants_per_row)

    def density(self, quadrant: int) -> float:
        """Fraction of cells in ``quadrant`` that are alive and owned."""
        b = self.bounds(quadrant)
        grid = self.store.grid
        alive = grid.alive[b.y0 : b.y1, b.x0 : b.x1]
        owned = grid.owner[b.y0 : b.y1, b.x0 : b.x1] > 0
        return float(np.count_nonzero(alive & owned)) / (self.quadrant_size**2)

    def densities(self) -> list[float]:
        return [self.density(q) for q in range(self.count)]

    def stats(self, quadrant: int, max_players: int = MAX_PLAYERS) -> QuadrantStats:
        b = self.bounds(quadrant)
        grid = self.store.grid
        owner = grid.owner[b.y0 : b.y1, b.x0 : b.x1]
        coins = grid.coins[b.y0 : b.y1, b.x0 : b.x1]
        return QuadrantStats(
            quadrant=quadrant,
            territory_by_player=tuple(
                int(np.count_nonzero(owner == p)) for p in range(1, max_players + 1)
            ),
            coins_by_player=tuple(
                int(coins[owner == p].sum()) for p in range(1, max_players + 1)
            ),
        )


class WipeSchedule:
    """Predicted rotation of quadrant wipes.

    Armed with a countdown; when it reaches zero the next quadrant is armed
    with a fresh period. :meth:`correct` overwrites the prediction with the
    authority's value.
    """

    def __init__(
        self,
        count: int,
        period: int = WIPE_INTERVAL_SECONDS,
        quadrant: int = 0,
        seconds_until: int | None = None,
    ) -> None:
        if count < 1:
            raise ValueError("count must be >= 1")
        if period < 1:
            raise ValueError("period must be >= 1")
        self.count = count
        self.period = period
        self.quadrant = 0
        self.seconds_until = period
        self.correct(quadrant, period if seconds_until is None else seconds_until)

    def tick(self, seconds: int = 1) -> list[int]:
        """Advance the countdown; return the quadrants whose wipe came due."""
        if seconds < 0:
            raise ValueError("seconds must be >= 0")
        due: list[int] = []
        remaining = seconds
        while remaining > 0 and remaining >= self.seconds_until:
            remaining -= self.seconds_until
            due.append(self.quadrant)
            self.quadrant = (self.quadrant + 1) % self.count
            self.seconds_until = self.period
        self.seconds_until -= remaining
        return due

    def correct(self, quadrant: int, seconds_until: int) -> None:
        if not 0 <= quadrant < self.count:
            raise ValueError(f"quadrant must be in [0, {self.count}), got {quadrant}")
        if seconds_until < 0:
            raise ValueError("seconds_until must be >= 0")
        self.quadrant = quadrant
        self.seconds_until = seconds_until

    def upcoming(self, n: int = 3) -> list[int]:
        """The next ``n`` quadrants due, imminent first."""
        return [(self.quadrant + i) % self.count for i in range(min(n, self.count))]
