"""Pending-placement batcher.

Users accumulate several patterns before paying for them. The batch is local
state only: nothing touches the grid until the authority accepts the whole
batch, and the next sync brings the placed cells back as truth.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from life_sync.config.constants import CELL_COST, COMMIT_TIMEOUT_SECONDS
from life_sync.domain.grid import GridStore, wrap
from life_sync.errors import (
    CommitInProgress,
    CommitTimeout,
    EmptyBatch,
    InsufficientFunds,
    InternalOverlap,
    LiveCellConflict,
    NetworkFailure,
    PlacementError,
    ServerRejection,
)
from life_sync.remote.protocol import PlacementErr, PlacementOk, RemoteAuthority

logger = logging.getLogger(__name__)

Coord = tuple[int, int]


class BatchState(Enum):
    EMPTY = "empty"
    ACCUMULATING = "accumulating"
    VALIDATING = "validating"
    COMMITTED = "committed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class PendingPlacement:
    """One not-yet-committed pattern at absolute, wrapped coordinates."""

    id: str
    cells: tuple[Coord, ...]
    pattern_name: str
    centroid: Coord


class PlacementBatcher:
    """Accumulates pending placements and commits them as one batch.

    At most one commit is in flight. Every failure leaves the batch intact so
    the user can correct and retry. ``state`` follows the pending placements;
    the result of the most recent commit is kept in ``last_outcome``.
    """

    def __init__(
        self,
        store: GridStore,
        authority: RemoteAuthority,
        balance: int = 0,
        commit_timeout: float = COMMIT_TIMEOUT_SECONDS,
    ) -> None:
        self.store = store
        self.authority = authority
        self.balance = balance
        self.commit_timeout = commit_timeout
        self._placements: dict[str, PendingPlacement] = {}
        self._next_id = 1
        self._committing = False
        self.last_outcome: BatchState | None = None

    @property
    def state(self) -> BatchState:
        if self._committing:
            return BatchState.VALIDATING
        return BatchState.ACCUMULATING if self._placements else BatchState.EMPTY

    @property
    def placements(self) -> tuple[PendingPlacement, ...]:
        return tuple(self._placements.values())

    def __len__(self) -> int:
        return len(self._placements)

    @property
    def cost(self) -> int:
        return CELL_COST * sum(len(p.cells) for p in self._placements.values())

    def coordinates(self) -> list[Coord]:
        """All pending coordinates concatenated in insertion order."""
        return [c for p in self._placements.values() for c in p.cells]

    def add(
        self, pattern: Sequence[Coord], anchor: Coord, pattern_name: str = "custom"
    ) -> PendingPlacement:
        """Queue ``pattern`` offsets anchored at ``anchor``; the grid is not touched."""
        side = self.store.side
        ax, ay = anchor
        placement = PendingPlacement(
            id=f"placement-{self._next_id}",
            cells=tuple(wrap(ax + dx, ay + dy, side) for dx, dy in pattern),
            pattern_name=pattern_name,
            centroid=wrap(ax, ay, side),
        )
        self._next_id += 1
        self._placements[placement.id] = placement
        return placement

    def remove(self, placement_id: str) -> PendingPlacement:
        try:
            placement = self._placements.pop(placement_id)
        except KeyError:
            raise KeyError(f"no pending placement {placement_id!r}") from None
        return placement

    def clear(self) -> None:
        self._placements.clear()

    def validate(self) -> None:
        """Check the batch against the balance and the current grid.

        Raises the first failing check: :exc:`EmptyBatch`,
        :exc:`InsufficientFunds`, :exc:`LiveCellConflict`, then
        :exc:`InternalOverlap`.
        """
        coords = self.coordinates()
        if not coords:
            raise EmptyBatch()
        if self.cost > self.balance:
            raise InsufficientFunds(self.cost, self.balance)

        grid = self.store.grid
        conflicts = list(dict.fromkeys(c for c in coords if grid.alive[c[1], c[0]]))
        if conflicts:
            raise LiveCellConflict(conflicts)

        seen: set[Coord] = set()
        duplicates: dict[Coord, None] = {}
        for c in coords:
            if c in seen:
                duplicates[c] = None
            seen.add(c)
        if duplicates:
            raise InternalOverlap(list(duplicates))

    async def commit(self) -> PlacementOk:
        """Validate and submit the batch; on success drop the committed placements."""
        if self._committing:
            raise CommitInProgress()
        self._committing = True
        try:
            return await self._commit()
        except (PlacementError, NetworkFailure):
            self.last_outcome = BatchState.REJECTED
            raise
        finally:
            self._committing = False

    async def _commit(self) -> PlacementOk:
        self.validate()
        committed = list(self._placements)
        cells = self.coordinates()
        try:
            result = await asyncio.wait_for(
                self.authority.submit_placement(cells), self.commit_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Placement of %d cells timed out after %ss", len(cells), self.commit_timeout
            )
            raise CommitTimeout(self.commit_timeout) from None
        except NetworkFailure as exc:
            logger.warning("Placement of %d cells failed: %s", len(cells), exc)
            raise

        if isinstance(result, PlacementErr):
            logger.info("Placement rejected by authority: %s", result.message)
            raise ServerRejection(result.message)

        for placement_id in committed:
            self._placements.pop(placement_id, None)
        self.balance = result.new_balance
        self.last_outcome = BatchState.COMMITTED
        logger.info(
            "Committed %d placement(s), %d cells; balance now %d",
            len(committed),
            len(cells),
            result.new_balance,
        )
        return result
