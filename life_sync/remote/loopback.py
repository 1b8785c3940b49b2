"""In-process authority with the remote service's rules.

``LoopbackAuthority`` owns its own grid and applies the authority semantics:
positional tie-break stepping, coin capture by quadrant controllers,
all-or-nothing cell placement, the faucet and the rotating quadrant wipe. It
satisfies :class:`~life_sync.remote.protocol.RemoteAuthority` and backs the
headless recorder and the tests.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

import numpy as np

from life_sync.config.constants import (
    CONTROLLER_THRESHOLD_PERCENT,
    FAUCET_AMOUNT,
    MAX_COINS,
    MAX_OWNER_ID,
)
from life_sync.config.types import TieBreak, WipeConfig, WorldConfig
from life_sync.domain.codec import to_sparse
from life_sync.domain.grid import Grid, wrap
from life_sync.domain.quadrants import WipeSchedule, wipe_quadrant
from life_sync.domain.rules import StepResult, evolve, quadrant_id_map
from life_sync.errors import NetworkFailure
from life_sync.remote.protocol import (
    GameState,
    PlacementErr,
    PlacementOk,
    PlacementResult,
    WipeInfo,
)

logger = logging.getLogger(__name__)

Coord = tuple[int, int]

DEFAULT_PRINCIPAL = "local-player"


class LoopbackAuthority:
    """Authoritative world held in memory.

    The async protocol methods act on behalf of ``principal``. ``latency``
    delays every async response and :meth:`fail_next` makes the next async
    calls raise :exc:`NetworkFailure`.
    """

    def __init__(
        self,
        world: WorldConfig | None = None,
        wipe: WipeConfig | None = None,
        principal: str = DEFAULT_PRINCIPAL,
        grid: Grid | None = None,
        generation: int = 0,
    ) -> None:
        self.world = world if world is not None else WorldConfig()
        wipe = wipe if wipe is not None else WipeConfig()
        if grid is not None and grid.side != self.world.side:
            raise ValueError(f"grid side {grid.side} does not match world side {self.world.side}")
        self.principal = principal
        self.grid = grid if grid is not None else Grid.empty(self.world.side)
        self.generation = generation
        self.players: list[str] = []
        self.balances: dict[str, int] = {}
        self.controllers: list[int] = [0] * self.world.quadrant_count
        self.schedule = WipeSchedule(self.world.quadrant_count, wipe.period)
        self.latency = 0.0
        self._failures = 0
        self._quadrant_ids = quadrant_id_map(self.world.side, self.world.quadrant_size).ravel()
        self._update_controllers(sticky=False)

    # ------------------------------------------------------------------
    # Players and wallets
    # ------------------------------------------------------------------

    def join(self, principal: str | None = None) -> int:
        """Return the caller's player number, assigning the next free slot."""
        principal = principal or self.principal
        if principal in self.players:
            return self.players.index(principal) + 1
        if len(self.players) >= self.world.max_players:
            raise ValueError(f"Game full - max {self.world.max_players} players")
        self.players.append(principal)
        return len(self.players)

    def faucet(self, principal: str | None = None, amount: int = FAUCET_AMOUNT) -> int:
        principal = principal or self.principal
        self.balances[principal] = self.balances.get(principal, 0) + amount
        return self.balances[principal]

    def balance_of(self, principal: str | None = None) -> int:
        return self.balances.get(principal or self.principal, 0)

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def step(self, generations: int = 1) -> list[StepResult]:
        """Advance the authoritative world; captured coins go to the capturer's wallet."""
        results = []
        for _ in range(generations):
            result = evolve(
                self.grid,
                max_players=self.world.max_players,
                tie_break=TieBreak.POSITIONAL,
                quadrant_controllers=self.controllers,
                quadrant_size=self.world.quadrant_size,
            )
            for owner, coins in result.captured.items():
                if owner <= len(self.players):
                    principal = self.players[owner - 1]
                    self.balances[principal] = self.balances.get(principal, 0) + coins
            self.grid = result.grid
            self.generation += 1
            self._update_controllers()
            results.append(result)
        return results

    def advance_clock(self, seconds: int = 1) -> list[int]:
        """Run the wipe countdown; wipe and return every quadrant that came due."""
        due = self.schedule.tick(seconds)
        for quadrant in due:
            self.grid = wipe_quadrant(
                self.grid, quadrant, self.world.quadrant_size, self.world.quadrants_per_row
            )
            logger.info("Wiped quadrant %d at generation %d", quadrant, self.generation)
        return due

    def place_cells(
        self, cells: Sequence[Coord], principal: str | None = None
    ) -> PlacementResult:
        """All-or-nothing placement of raw coordinates, 1 coin per cell."""
        principal = principal or self.principal
        try:
            player = self.join(principal)
        except ValueError as exc:
            return PlacementErr(str(exc))

        cost = len(cells)
        balance = self.balance_of(principal)
        if balance < cost:
            return PlacementErr(f"Need {cost} coins, have {balance}")

        side = self.world.side
        wrapped = [wrap(x, y, side) for x, y in cells]
        for x, y in wrapped:
            if self.grid.alive[y, x]:
                return PlacementErr("Cannot place on living cells")
            coins = int(self.grid.coins[y, x])
            if coins >= MAX_COINS:
                return PlacementErr("Cannot place on cells with max coins")
            owner = int(self.grid.owner[y, x])
            if coins > 0 and owner > 0 and owner != player:
                return PlacementErr("Cannot place on enemy territory with coins")

        owner = self.grid.owner.copy()
        coins = self.grid.coins.copy()
        alive = self.grid.alive.copy()
        for x, y in wrapped:
            owner[y, x] = player
            coins[y, x] = min(coins[y, x] + 1, MAX_COINS)
            alive[y, x] = True
        self.grid = Grid(owner=owner, coins=coins, alive=alive)
        self.balances[principal] = balance - cost
        self._update_controllers()
        return PlacementOk(
            new_balance=self.balances[principal], placed=cost, generation=self.generation
        )

    def state(self, principal: str | None = None) -> GameState:
        principal = principal or self.principal
        snapshot = to_sparse(self.grid)
        player_num = self.players.index(principal) + 1 if principal in self.players else None
        return GameState(
            generation=self.generation,
            alive_cells=snapshot.alive_cells,
            territory=snapshot.territory,
            players=tuple(self.players),
            balances=tuple(self.balances.get(p, 0) for p in self.players),
            player_num=player_num,
            quadrant_controllers=tuple(self.controllers),
        )

    def next_wipe(self) -> WipeInfo:
        return WipeInfo(quadrant=self.schedule.quadrant, seconds_until=self.schedule.seconds_until)

    # ------------------------------------------------------------------
    # RemoteAuthority
    # ------------------------------------------------------------------

    def fail_next(self, calls: int = 1) -> None:
        self._failures += calls

    async def fetch_state(self) -> GameState:
        await self._round_trip("fetch_state")
        return self.state()

    async def fetch_next_wipe(self) -> WipeInfo:
        await self._round_trip("fetch_next_wipe")
        return self.next_wipe()

    async def submit_placement(self, cells: Sequence[Coord]) -> PlacementResult:
        await self._round_trip("submit_placement")
        return self.place_cells(cells)

    async def _round_trip(self, call: str) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)
        if self._failures > 0:
            self._failures -= 1
            raise NetworkFailure(f"{call}: connection refused")

    # ------------------------------------------------------------------
    # Quadrant control
    # ------------------------------------------------------------------

    def _update_controllers(self, sticky: bool = True) -> None:
        """Recount territory; a player holding the threshold share takes control.

        With ``sticky`` a quadrant nobody dominates keeps its controller; an
        empty quadrant always loses it.
        """
        width = MAX_OWNER_ID + 1
        owner = self.grid.owner.ravel().astype(np.int64)
        counts = np.bincount(
            self._quadrant_ids * width + owner, minlength=self.world.quadrant_count * width
        ).reshape(self.world.quadrant_count, width)
        players = counts[:, 1 : self.world.max_players + 1]
        for q, territory in enumerate(players):
            total = int(territory.sum())
            if total == 0:
                self.controllers[q] = 0
                continue
            threshold = total * CONTROLLER_THRESHOLD_PERCENT // 100
            leaders = np.flatnonzero((territory >= threshold) & (territory > 0))
            if leaders.size:
                self.controllers[q] = int(leaders[0]) + 1
            elif not sticky:
                self.controllers[q] = 0
