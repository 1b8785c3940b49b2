"""Conway evolution rule with owner inheritance, matching the authority.

Rules:

- a living cell survives with 2 or 3 live neighbours
- a dead cell is born with exactly 3 live neighbours
- the newborn belongs to the owner holding most of those neighbours; ties are
  broken by :class:`~life_sync.config.types.TieBreak`
- owner and coins persist on cells that die or stay dead
- a newborn whose new owner controls the quadrant captures (zeroes) enemy coins

Every cell reads the generation-start state; the result is a new grid.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from life_sync.config.constants import MAX_PLAYERS
from life_sync.config.types import TieBreak
from life_sync.domain.grid import OWNER_DTYPE, Grid

NEIGHBOR_OFFSETS: tuple[tuple[int, int], ...] = tuple(
    (dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)
)
"""The eight Moore-neighbourhood offsets as ``(dy, dx)``."""

DEFAULT_BIRTH_OWNER = 1
"""Owner given to a newborn whose live neighbours carry no owner."""


@dataclass(frozen=True)
class StepResult:
    """One generation's outcome plus per-owner bookkeeping."""

    grid: Grid
    births: int
    deaths: int
    captured: dict[int, int] = field(default_factory=dict)


@dataclass(frozen=True)
class OwnerCounts:
    alive: int
    territory: int
    coins: int


def neighbor_sum(mask: np.ndarray) -> np.ndarray:
    """Sum of the 8 toroidal neighbours of every cell in a 0/1 array."""
    plane = mask.astype(np.int8)
    total = np.zeros(plane.shape, dtype=np.int8)
    for dy, dx in NEIGHBOR_OFFSETS:
        total += np.roll(plane, (dy, dx), axis=(0, 1))
    return total


def find_majority_owner(
    counts: Sequence[int],
    cell_index: int,
    tie_break: TieBreak = TieBreak.POSITIONAL,
    max_players: int = MAX_PLAYERS,
) -> int:
    """Pick the newborn owner from per-owner neighbour tallies.

    ``counts[o]`` is the number of live neighbours owned by ``o``; index 0 is
    ignored. Scalar reference for the vectorised path in :func:`evolve`.
    """
    candidates = range(1, min(max_players, len(counts) - 1) + 1)
    max_count = max((counts[o] for o in candidates), default=0)
    if max_count == 0:
        return DEFAULT_BIRTH_OWNER
    tied = [o for o in candidates if counts[o] == max_count]
    if tie_break is TieBreak.LOWEST_ID or len(tied) == 1:
        return tied[0]
    return tied[cell_index % len(tied)]


def _majority_owner(
    tallies: np.ndarray, owner_ids: np.ndarray, tie_break: TieBreak
) -> np.ndarray:
    """Vectorised :func:`find_majority_owner` over stacked ``(k, side, side)`` tallies."""
    side = tallies.shape[1]
    max_count = tallies.max(axis=0)
    tied = (tallies == max_count) & (max_count > 0)
    if tie_break is TieBreak.POSITIONAL:
        n_tied = tied.sum(axis=0)
        flat_index = np.arange(side * side, dtype=np.int64).reshape(side, side)
        pick = flat_index % np.maximum(n_tied, 1)
    else:
        pick = np.zeros((side, side), dtype=np.int64)
    rank = np.cumsum(tied, axis=0) - 1
    chosen = tied & (rank == pick)
    winner = owner_ids[np.argmax(chosen, axis=0)]
    return np.where(max_count > 0, winner, DEFAULT_BIRTH_OWNER).astype(OWNER_DTYPE)


def quadrant_id_map(side: int, quadrant_size: int) -> np.ndarray:
    """Row-major quadrant id of every cell."""
    per_row = side // quadrant_size
    coords = np.arange(side) // quadrant_size
    return coords[:, None] * per_row + coords[None, :]


def evolve(
    grid: Grid,
    *,
    max_players: int = MAX_PLAYERS,
    tie_break: TieBreak = TieBreak.POSITIONAL,
    quadrant_controllers: Sequence[int] | None = None,
    quadrant_size: int | None = None,
) -> StepResult:
    """Advance one generation and report births, deaths and captured coins."""
    alive = grid.alive
    live_neighbors = neighbor_sum(alive)

    survives = alive & ((live_neighbors == 2) | (live_neighbors == 3))
    born = ~alive & (live_neighbors == 3)
    next_alive = survives | born

    owner = grid.owner.copy()
    coins = grid.coins.copy()
    captured: dict[int, int] = {}

    if born.any():
        present = np.unique(grid.owner[alive])
        owner_ids = present[(present >= 1) & (present <= max_players)].astype(np.int64)
        if owner_ids.size:
            tallies = np.stack([neighbor_sum(alive & (grid.owner == o)) for o in owner_ids])
            new_owner = _majority_owner(tallies, owner_ids, tie_break)
        else:
            new_owner = np.full(alive.shape, DEFAULT_BIRTH_OWNER, dtype=OWNER_DTYPE)

        if quadrant_controllers is not None:
            if quadrant_size is None:
                raise ValueError("quadrant_size is required with quadrant_controllers")
            controllers = np.asarray(quadrant_controllers, dtype=np.int64)
            controller = controllers[quadrant_id_map(grid.side, quadrant_size)]
            old_owner = grid.owner.astype(np.int64)
            capture = (
                born
                & (old_owner > 0)
                & (old_owner != new_owner)
                & (grid.coins > 0)
                & (controller == new_owner)
            )
            if capture.any():
                for o in np.unique(new_owner[capture]):
                    captured[int(o)] = int(grid.coins[capture & (new_owner == o)].sum())
                coins[capture] = 0

        owner[born] = new_owner[born]

    return StepResult(
        grid=Grid(owner=owner, coins=coins, alive=next_alive),
        births=int(np.count_nonzero(born)),
        deaths=int(np.count_nonzero(alive & ~survives)),
        captured=captured,
    )


def step_generation(
    grid: Grid,
    *,
    max_players: int = MAX_PLAYERS,
    tie_break: TieBreak = TieBreak.POSITIONAL,
    quadrant_controllers: Sequence[int] | None = None,
    quadrant_size: int | None = None,
) -> Grid:
    """Return the next generation of ``grid`` (pure; ``grid`` is untouched)."""
    return evolve(
        grid,
        max_players=max_players,
        tie_break=tie_break,
        quadrant_controllers=quadrant_controllers,
        quadrant_size=quadrant_size,
    ).grid


def count_alive(grid: Grid) -> int:
    return grid.alive_count()


def count_by_owner(grid: Grid) -> dict[int, OwnerCounts]:
    """Alive cells, dead territory and coins held per owner (owners > 0 only)."""
    result: dict[int, OwnerCounts] = {}
    for o in np.unique(grid.owner):
        if o == 0:
            continue
        mask = grid.owner == o
        result[int(o)] = OwnerCounts(
            alive=int(np.count_nonzero(mask & grid.alive)),
            territory=int(np.count_nonzero(mask & ~grid.alive)),
            coins=int(grid.coins[mask].sum()),
        )
    return result
