"""Cooperative timeline for one client session.

Three periodic tasks share one event loop:

- stepping: advances the local grid every ``tick_interval`` (never awaits I/O)
- reconciliation: starts a sync every ``sync_interval``; a tick that finds a
  fetch still outstanding is skipped, not queued
- wipe countdown: ticks the :class:`WipeSchedule` once per second

Because all three run on one loop, each grid swap is a single reference
assignment that no other task can interleave with.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable, Callable

from life_sync.config.types import SyncConfig, WorldConfig
from life_sync.domain.grid import GridStore
from life_sync.domain.placement import PlacementBatcher
from life_sync.domain.quadrants import WipeSchedule
from life_sync.domain.rules import StepResult, evolve
from life_sync.sync.reconciler import Reconciler, SyncOutcome

logger = logging.getLogger(__name__)

WIPE_TICK_SECONDS = 1.0


class LifeSession:
    def __init__(
        self,
        store: GridStore,
        reconciler: Reconciler,
        world: WorldConfig | None = None,
        config: SyncConfig | None = None,
        batcher: PlacementBatcher | None = None,
        schedule: WipeSchedule | None = None,
    ) -> None:
        self.store = store
        self.reconciler = reconciler
        if world is None:
            world = WorldConfig(side=store.side, quadrant_size=store.side, quadrants_per_row=1)
        self.world = world
        if self.world.side != store.side:
            raise ValueError(f"world side {self.world.side} does not match store side {store.side}")
        self.config = config if config is not None else reconciler.config
        self.batcher = batcher
        self.schedule = schedule
        self.outcomes: Counter[SyncOutcome] = Counter()
        self.due_wipes: list[int] = []
        self._tasks: list[asyncio.Task[None]] = []
        self._syncs: set[asyncio.Task[None]] = set()

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    def step(self) -> StepResult:
        """Advance the local grid one generation.

        Coin capture is predicted with the controllers from the last
        applied snapshot.
        """
        controllers = self.reconciler.quadrant_controllers
        if len(controllers) != self.world.quadrant_count:
            controllers = None
        result = evolve(
            self.store.grid,
            max_players=self.world.max_players,
            tie_break=self.world.tie_break,
            quadrant_controllers=controllers,
            quadrant_size=self.world.quadrant_size,
        )
        self.store.advance(result.grid)
        return result

    async def sync(self) -> SyncOutcome:
        outcome = await self.reconciler.tick()
        self.outcomes[outcome] += 1
        return outcome

    def wipe_tick(self) -> list[int]:
        if self.schedule is None:
            return []
        due = self.schedule.tick(1)
        for quadrant in due:
            logger.info("Quadrant %d wipe due", quadrant)
        self.due_wipes.extend(due)
        return due

    def start(self) -> None:
        """Schedule the periodic tasks on the running loop."""
        if self._tasks:
            raise RuntimeError("session already started")
        self._tasks = [
            asyncio.create_task(self._every(self.config.tick_interval, self._step_async)),
            asyncio.create_task(self._every(self.config.sync_interval, self._spawn_sync)),
        ]
        if self.schedule is not None:
            self._tasks.append(
                asyncio.create_task(self._every(WIPE_TICK_SECONDS, self._wipe_async))
            )
        logger.debug("Session started with %d periodic tasks", len(self._tasks))

    async def stop(self) -> None:
        """Cancel the periodic tasks and any outstanding sync, then wait for them."""
        tasks = [*self._tasks, *self._syncs]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks = []
        self._syncs.clear()
        logger.debug("Session stopped at generation %d", self.store.generation)

    async def run_for(self, seconds: float) -> None:
        self.start()
        try:
            await asyncio.sleep(seconds)
        finally:
            await self.stop()

    async def _every(self, interval: float, action: Callable[[], Awaitable[None]]) -> None:
        while True:
            await asyncio.sleep(interval)
            await action()

    async def _step_async(self) -> None:
        self.step()

    async def _wipe_async(self) -> None:
        self.wipe_tick()

    async def _spawn_sync(self) -> None:
        task = asyncio.create_task(self._sync_task())
        self._syncs.add(task)
        task.add_done_callback(self._sync_done)

    def _sync_done(self, task: asyncio.Task[None]) -> None:
        self._syncs.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Sync task crashed", exc_info=exc)

    async def _sync_task(self) -> None:
        await self.sync()
