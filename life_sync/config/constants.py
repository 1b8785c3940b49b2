"""Centralized domain constants for the simulation client.

All magic numbers shared by the grid, the stepper, the reconciler and the
placement flow are defined here. Consuming modules should import from this
module rather than defining their own inline literals.
"""

from __future__ import annotations

GRID_SIZE = 512
"""Default grid side length in cells."""

QUADRANT_SIZE = 128
"""Side length of one quadrant in cells."""

QUADRANTS_PER_ROW = 4
"""Quadrants along each axis of the grid."""

TOTAL_QUADRANTS = QUADRANTS_PER_ROW * QUADRANTS_PER_ROW
"""Total quadrant count (row-major ids 0..TOTAL_QUADRANTS-1)."""

MAX_PLAYERS = 9
"""Player slots served by the authority."""

MAX_OWNER_ID = 10
"""Largest owner id the stepper tallies."""

MAX_COINS = 7
"""Coin cap per cell (the authority packs coins into three bits)."""

CELL_COST = 1
"""Currency units charged per placed cell."""

LOCAL_TICK_MS = 100
"""Local generation stepping period in milliseconds."""

BACKEND_SYNC_MS = 5_000
"""Authoritative snapshot fetch period in milliseconds."""

FETCH_TIMEOUT_SECONDS = 4.0
"""Upper bound on one snapshot fetch round trip."""

COMMIT_TIMEOUT_SECONDS = 15.0
"""Upper bound on one placement commit round trip."""

WIPE_INTERVAL_SECONDS = 300
"""Seconds between two consecutive quadrant wipes."""

LATENCY_WINDOW = 20
"""Number of latency samples kept for rolling statistics."""

CONTROLLER_THRESHOLD_PERCENT = 80
"""Share of a quadrant's territory a player needs to control it."""

FAUCET_AMOUNT = 1_000
"""Coins granted by one loopback faucet call."""

GENERATIONS_PER_SYNC = 8
"""Default generations between reconciliations in headless recording."""

FLUSH_THRESHOLD = 8_192
"""Flush generation log rows to Parquet once this in-memory row count is reached."""
