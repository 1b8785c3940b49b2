"""Sparse/dense conversion between authoritative snapshots and the dense grid.

The authority transfers only non-default cells, split into alive cells and
territory (dead but owned or holding coins). A coordinate listed as alive
wins over the same coordinate listed as territory.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from life_sync.config.constants import MAX_OWNER_ID
from life_sync.domain.grid import COINS_DTYPE, OWNER_DTYPE, Grid
from life_sync.errors import ProtocolViolation


@dataclass(frozen=True)
class SparseCell:
    """One non-default cell in a sparse snapshot."""

    x: int
    y: int
    owner: int
    coins: int


@dataclass(frozen=True)
class SparseSnapshot:
    """Authoritative sparse grid state."""

    alive_cells: tuple[SparseCell, ...] = ()
    territory: tuple[SparseCell, ...] = ()

    def __len__(self) -> int:
        return len(self.alive_cells) + len(self.territory)


def _columns(
    cells: Sequence[SparseCell], side: int, max_owner: int, label: str
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Validate one cell list and return ``(y, x, owner, coins)`` columns."""
    if not cells:
        empty = np.zeros(0, dtype=np.int64)
        return empty, empty, empty, empty
    xs = np.fromiter((c.x for c in cells), dtype=np.int64, count=len(cells))
    ys = np.fromiter((c.y for c in cells), dtype=np.int64, count=len(cells))
    owners = np.fromiter((c.owner for c in cells), dtype=np.int64, count=len(cells))
    coins = np.fromiter((c.coins for c in cells), dtype=np.int64, count=len(cells))

    out_of_range = (xs < 0) | (xs >= side) | (ys < 0) | (ys >= side)
    if out_of_range.any():
        i = int(np.argmax(out_of_range))
        raise ProtocolViolation(
            f"{label} cell ({xs[i]},{ys[i]}) is outside a {side}x{side} grid"
        )
    bad_owner = (owners < 0) | (owners > max_owner)
    if bad_owner.any():
        i = int(np.argmax(bad_owner))
        raise ProtocolViolation(f"{label} cell ({xs[i]},{ys[i]}) has invalid owner {owners[i]}")
    if (coins < 0).any():
        i = int(np.argmax(coins < 0))
        raise ProtocolViolation(f"{label} cell ({xs[i]},{ys[i]}) has negative coins")

    flat = ys * side + xs
    unique, counts = np.unique(flat, return_counts=True)
    if (counts > 1).any():
        dup = int(unique[np.argmax(counts > 1)])
        raise ProtocolViolation(f"{label} cell ({dup % side},{dup // side}) is listed twice")
    return ys, xs, owners, coins


def to_dense(snapshot: SparseSnapshot, side: int, max_owner: int = MAX_OWNER_ID) -> Grid:
    """Expand a sparse snapshot into a full grid.

    Raises :exc:`ProtocolViolation` for out-of-range coordinates or owners,
    negative coins, ownerless alive cells, and coordinates repeated within
    one list. Nothing is partially applied.
    """
    ay, ax, a_owner, a_coins = _columns(snapshot.alive_cells, side, max_owner, "alive")
    ty, tx, t_owner, t_coins = _columns(snapshot.territory, side, max_owner, "territory")
    if (a_owner == 0).any():
        i = int(np.argmax(a_owner == 0))
        raise ProtocolViolation(f"alive cell ({ax[i]},{ay[i]}) has no owner")

    owner = np.zeros((side, side), dtype=OWNER_DTYPE)
    coins = np.zeros((side, side), dtype=COINS_DTYPE)
    alive = np.zeros((side, side), dtype=bool)

    owner[ay, ax] = a_owner
    coins[ay, ax] = a_coins
    alive[ay, ax] = True

    keep = ~alive[ty, tx]
    owner[ty[keep], tx[keep]] = t_owner[keep]
    coins[ty[keep], tx[keep]] = t_coins[keep]
    return Grid(owner=owner, coins=coins, alive=alive)


def to_sparse(grid: Grid) -> SparseSnapshot:
    """Collapse a grid into alive and territory lists in row-major order."""
    ys, xs = np.nonzero(grid.alive)
    alive_cells = tuple(
        SparseCell(x=int(x), y=int(y), owner=int(grid.owner[y, x]), coins=int(grid.coins[y, x]))
        for y, x in zip(ys, xs, strict=True)
    )
    territory_mask = ~grid.alive & ((grid.owner > 0) | (grid.coins > 0))
    ys, xs = np.nonzero(territory_mask)
    territory = tuple(
        SparseCell(x=int(x), y=int(y), owner=int(grid.owner[y, x]), coins=int(grid.coins[y, x]))
        for y, x in zip(ys, xs, strict=True)
    )
    return SparseSnapshot(alive_cells=alive_cells, territory=territory)
