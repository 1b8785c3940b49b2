"""Configuration layer: constants and typed config dataclasses."""

from life_sync.config.constants import (
    BACKEND_SYNC_MS,
    CELL_COST,
    COMMIT_TIMEOUT_SECONDS,
    CONTROLLER_THRESHOLD_PERCENT,
    FAUCET_AMOUNT,
    FETCH_TIMEOUT_SECONDS,
    FLUSH_THRESHOLD,
    GENERATIONS_PER_SYNC,
    GRID_SIZE,
    LATENCY_WINDOW,
    LOCAL_TICK_MS,
    MAX_COINS,
    MAX_OWNER_ID,
    MAX_PLAYERS,
    QUADRANT_SIZE,
    QUADRANTS_PER_ROW,
    TOTAL_QUADRANTS,
    WIPE_INTERVAL_SECONDS,
)
from life_sync.config.types import (
    RecordConfig,
    SyncConfig,
    TieBreak,
    WipeConfig,
    WorldConfig,
)

__all__ = [
    "BACKEND_SYNC_MS",
    "CELL_COST",
    "COMMIT_TIMEOUT_SECONDS",
    "CONTROLLER_THRESHOLD_PERCENT",
    "FAUCET_AMOUNT",
    "FETCH_TIMEOUT_SECONDS",
    "FLUSH_THRESHOLD",
    "GENERATIONS_PER_SYNC",
    "GRID_SIZE",
    "LATENCY_WINDOW",
    "LOCAL_TICK_MS",
    "MAX_COINS",
    "MAX_OWNER_ID",
    "MAX_PLAYERS",
    "QUADRANT_SIZE",
    "QUADRANTS_PER_ROW",
    "RecordConfig",
    "SyncConfig",
    "TOTAL_QUADRANTS",
    "TieBreak",
    "WIPE_INTERVAL_SECONDS",
    "WipeConfig",
    "WorldConfig",
]
