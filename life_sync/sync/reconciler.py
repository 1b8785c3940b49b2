"""Reconciliation of the local grid against authoritative snapshots.

Every scheduled tick fetches the authority's state and, when it is valid,
replaces the local grid wholesale, discarding any speculative local
generations. Failures never escape :meth:`Reconciler.sync_once`: transport
problems and malformed snapshots are logged and the previous grid stays in
place until the next tick.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from life_sync.config.constants import MAX_OWNER_ID
from life_sync.config.types import SyncConfig
from life_sync.domain.codec import to_dense
from life_sync.domain.grid import GridStore
from life_sync.domain.placement import PlacementBatcher
from life_sync.domain.quadrants import WipeSchedule
from life_sync.errors import NetworkFailure, ProtocolViolation
from life_sync.remote.protocol import GameState, RemoteAuthority

logger = logging.getLogger(__name__)


class SyncOutcome(Enum):
    APPLIED = "applied"
    FAILED = "failed"
    REJECTED = "rejected"
    SKIPPED = "skipped"


class LatencyStats:
    """Rolling fetch round-trip times in milliseconds."""

    def __init__(self, window: int) -> None:
        if window < 1:
            raise ValueError("window must be >= 1")
        self._samples: deque[float] = deque(maxlen=window)

    def record(self, latency_ms: float) -> None:
        self._samples.append(latency_ms)

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def samples(self) -> tuple[float, ...]:
        return tuple(self._samples)

    @property
    def avg(self) -> float:
        return sum(self._samples) / len(self._samples) if self._samples else 0.0

    @property
    def min(self) -> float:
        return min(self._samples, default=0.0)

    @property
    def max(self) -> float:
        return max(self._samples, default=0.0)


@dataclass(frozen=True)
class SyncState:
    local_generation: int
    last_synced_generation: int | None
    last_sync_time: float | None
    in_sync: bool
    drift: int


class Reconciler:
    """Pulls authoritative state into a :class:`GridStore`.

    Besides the grid, each applied snapshot refreshes the known players,
    balances and quadrant controllers, pushes the principal's balance into
    ``batcher`` and corrects the wipe ``schedule``.
    """

    def __init__(
        self,
        store: GridStore,
        authority: RemoteAuthority,
        config: SyncConfig | None = None,
        schedule: WipeSchedule | None = None,
        batcher: PlacementBatcher | None = None,
        principal: str | None = None,
        max_owner: int = MAX_OWNER_ID,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.authority = authority
        self.config = config if config is not None else SyncConfig()
        self.schedule = schedule
        self.batcher = batcher
        self.principal = principal
        self.max_owner = max_owner
        self.clock = clock
        self.latency = LatencyStats(self.config.latency_window)
        self.players: tuple[str, ...] = ()
        self.balances: tuple[int, ...] = ()
        self.player_num: int | None = None
        self.quadrant_controllers: tuple[int, ...] = ()
        self.last_synced_generation: int | None = None
        self.last_sync_time: float | None = None
        self.last_outcome: SyncOutcome | None = None
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def tick(self) -> SyncOutcome:
        """One scheduled interval; skipped while a fetch is still outstanding."""
        return await self.sync_once()

    async def sync_once(self) -> SyncOutcome:
        if self._in_flight:
            logger.debug("Sync skipped: previous fetch still in flight")
            return SyncOutcome.SKIPPED
        self._in_flight = True
        try:
            outcome = await self._sync()
        finally:
            self._in_flight = False
        self.last_outcome = outcome
        return outcome

    def sync_state(self) -> SyncState:
        last = self.last_synced_generation
        local = self.store.generation
        return SyncState(
            local_generation=local,
            last_synced_generation=last,
            last_sync_time=self.last_sync_time,
            in_sync=self.last_outcome is SyncOutcome.APPLIED,
            drift=0 if last is None else local - last,
        )

    async def _sync(self) -> SyncOutcome:
        started = self.clock()
        try:
            state = await asyncio.wait_for(
                self.authority.fetch_state(), self.config.fetch_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("State fetch timed out after %ss", self.config.fetch_timeout)
            return SyncOutcome.FAILED
        except NetworkFailure as exc:
            logger.warning("State fetch failed: %s", exc)
            return SyncOutcome.FAILED
        except ProtocolViolation as exc:
            logger.error("Discarding malformed state response: %s", exc)
            return SyncOutcome.REJECTED
        latency_ms = (self.clock() - started) * 1000
        self.latency.record(latency_ms)

        last = self.last_synced_generation
        if last is not None and state.generation < last:
            logger.debug(
                "Ignoring stale snapshot generation %d (already at %d)",
                state.generation,
                self.last_synced_generation,
            )
            return SyncOutcome.SKIPPED

        try:
            grid = to_dense(state.snapshot, self.store.side, self.max_owner)
        except ProtocolViolation as exc:
            logger.error("Discarding snapshot generation %d: %s", state.generation, exc)
            return SyncOutcome.REJECTED

        previous = self.store.generation
        self.store.replace(grid, state.generation)
        self.last_synced_generation = state.generation
        self.last_sync_time = self.clock()
        self._adopt(state)
        logger.debug(
            "Applied snapshot generation %d over local %d (%d cells, %.0fms)",
            state.generation,
            previous,
            len(state.snapshot),
            latency_ms,
        )

        await self._refresh_wipe()
        return SyncOutcome.APPLIED

    def _adopt(self, state: GameState) -> None:
        self.players = state.players
        self.balances = state.balances
        self.player_num = state.player_num
        self.quadrant_controllers = state.quadrant_controllers
        if self.batcher is not None and self.principal is not None:
            balance = state.balance_of(self.principal)
            if balance is not None:
                self.batcher.balance = balance

    async def _refresh_wipe(self) -> None:
        if self.schedule is None:
            return
        try:
            info = await asyncio.wait_for(
                self.authority.fetch_next_wipe(), self.config.fetch_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Wipe schedule fetch timed out after %ss", self.config.fetch_timeout)
            return
        except NetworkFailure as exc:
            logger.warning("Wipe schedule fetch failed: %s", exc)
            return
        except ProtocolViolation as exc:
            logger.error("Discarding malformed wipe schedule: %s", exc)
            return
        try:
            self.schedule.correct(info.quadrant, info.seconds_until)
        except ValueError as exc:
            logger.error("Discarding wipe schedule: %s", exc)
