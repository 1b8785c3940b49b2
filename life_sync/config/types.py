"""Configuration dataclasses for the simulation client.

All frozen dataclasses that parameterise the world geometry, the sync
timeline, the wipe schedule and headless recording runs live here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from life_sync.config.constants import (
    BACKEND_SYNC_MS,
    COMMIT_TIMEOUT_SECONDS,
    FETCH_TIMEOUT_SECONDS,
    GENERATIONS_PER_SYNC,
    GRID_SIZE,
    LATENCY_WINDOW,
    LOCAL_TICK_MS,
    MAX_OWNER_ID,
    MAX_PLAYERS,
    QUADRANT_SIZE,
    QUADRANTS_PER_ROW,
    WIPE_INTERVAL_SECONDS,
)

__all__ = [
    "RecordConfig",
    "SyncConfig",
    "TieBreak",
    "WipeConfig",
    "WorldConfig",
]


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TieBreak(Enum):
    """Owner selection when several owners tie for a newborn cell."""

    POSITIONAL = "positional"
    LOWEST_ID = "lowest_id"


# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WorldConfig:
    """Grid geometry and evolution-rule parameters shared with the authority."""

    side: int = GRID_SIZE
    quadrant_size: int = QUADRANT_SIZE
    quadrants_per_row: int = QUADRANTS_PER_ROW
    max_players: int = MAX_PLAYERS
    tie_break: TieBreak = TieBreak.POSITIONAL

    def __post_init__(self) -> None:
        if self.side < 1:
            raise ValueError("side must be >= 1")
        if self.quadrant_size < 1 or self.quadrants_per_row < 1:
            raise ValueError("quadrant dimensions must be >= 1")
        if self.quadrant_size * self.quadrants_per_row != self.side:
            raise ValueError("quadrant_size * quadrants_per_row must equal side")
        if not 1 <= self.max_players <= MAX_OWNER_ID:
            raise ValueError(f"max_players must be in [1, {MAX_OWNER_ID}]")

    @property
    def quadrant_count(self) -> int:
        return self.quadrants_per_row * self.quadrants_per_row


@dataclass(frozen=True)
class SyncConfig:
    """Timing knobs for the local stepping and reconciliation tasks."""

    tick_interval: float = LOCAL_TICK_MS / 1000
    sync_interval: float = BACKEND_SYNC_MS / 1000
    fetch_timeout: float = FETCH_TIMEOUT_SECONDS
    commit_timeout: float = COMMIT_TIMEOUT_SECONDS
    latency_window: int = LATENCY_WINDOW

    def __post_init__(self) -> None:
        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be > 0")
        if self.sync_interval <= 0:
            raise ValueError("sync_interval must be > 0")
        if self.fetch_timeout <= 0 or self.commit_timeout <= 0:
            raise ValueError("timeouts must be > 0")
        if self.latency_window < 1:
            raise ValueError("latency_window must be >= 1")


@dataclass(frozen=True)
class WipeConfig:
    """Rotating quadrant-wipe period."""

    period: int = WIPE_INTERVAL_SECONDS

    def __post_init__(self) -> None:
        if self.period < 1:
            raise ValueError("period must be >= 1")


@dataclass(frozen=True)
class RecordConfig:
    """Settings for a headless local-vs-authority recording run."""

    generations: int = 64
    sync_every: int = GENERATIONS_PER_SYNC
    out_dir: Path = Path("data")
    seed: int = 0
    soup_density: float = 0.2
    starting_balance: int = 0

    def __post_init__(self) -> None:
        if self.generations < 1:
            raise ValueError("generations must be >= 1")
        if self.sync_every < 1:
            raise ValueError("sync_every must be >= 1")
        if not 0.0 <= self.soup_density <= 1.0:
            raise ValueError("soup_density must be in [0.0, 1.0]")
        if self.starting_balance < 0:
            raise ValueError("starting_balance must be >= 0")
