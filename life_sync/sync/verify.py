"""Compare local and authoritative grids."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from life_sync.domain.grid import Cell, Grid


@dataclass(frozen=True)
class CellDifference:
    x: int
    y: int
    local: Cell
    remote: Cell


def state_fingerprint(grid: Grid) -> str:
    """``"<alive_count>:<xor of alive flat indices>"``; equal grids share a fingerprint."""
    flat = np.flatnonzero(grid.alive)
    digest = int(np.bitwise_xor.reduce(flat)) if flat.size else 0
    return f"{flat.size}:{digest}"


def find_cell_differences(
    local: Grid, remote: Grid, limit: int | None = None
) -> list[CellDifference]:
    """Cells whose owner, coins or alive flag differ, in row-major order."""
    if local.side != remote.side:
        raise ValueError(f"grid sides differ: {local.side} != {remote.side}")
    mask = (
        (local.alive != remote.alive)
        | (local.owner != remote.owner)
        | (local.coins != remote.coins)
    )
    ys, xs = np.nonzero(mask)
    if limit is not None:
        ys, xs = ys[:limit], xs[:limit]
    differences = []
    for y, x in zip(ys.tolist(), xs.tolist(), strict=True):
        differences.append(
            CellDifference(x=x, y=y, local=local.cell(x, y), remote=remote.cell(x, y))
        )
    return differences
