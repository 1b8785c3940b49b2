"""Reconciliation, session timeline and state verification."""

from life_sync.sync.reconciler import LatencyStats, Reconciler, SyncOutcome, SyncState
from life_sync.sync.session import LifeSession
from life_sync.sync.verify import CellDifference, find_cell_differences, state_fingerprint

__all__ = [
    "CellDifference",
    "LatencyStats",
    "LifeSession",
    "Reconciler",
    "SyncOutcome",
    "SyncState",
    "find_cell_differences",
    "state_fingerprint",
]
