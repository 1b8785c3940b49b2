"""Error taxonomy for the simulation client.

Simulation-core errors (``ProtocolViolation``, ``NetworkFailure``) are
contained inside the reconciler. Placement errors reach the caller and carry
enough detail (offending coordinates, counts) to correct the batch.
"""

from __future__ import annotations

from collections.abc import Sequence

Coord = tuple[int, int]


class LifeSyncError(Exception):
    """Base class for every error raised by this package."""


class ProtocolViolation(LifeSyncError):
    """A snapshot or server response is structurally invalid."""


class NetworkFailure(LifeSyncError):
    """A fetch or submit round trip could not complete."""


class CommitTimeout(NetworkFailure):
    """A placement commit exceeded its bounded timeout."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Placement timed out after {timeout:g}s; the batch was kept, try again")
        self.timeout = timeout


# ---------------------------------------------------------------------------
# Placement batch errors
# ---------------------------------------------------------------------------


def _preview(cells: Sequence[Coord], limit: int = 5) -> str:
    shown = ", ".join(f"({x},{y})" for x, y in cells[:limit])
    if len(cells) > limit:
        shown += f", +{len(cells) - limit} more"
    return shown


class PlacementError(LifeSyncError):
    """Base class for failures surfaced to the user placing a batch."""


class EmptyBatch(PlacementError):
    def __init__(self) -> None:
        super().__init__("Nothing to place: add a pattern first")


class InsufficientFunds(PlacementError):
    def __init__(self, cost: int, balance: int) -> None:
        super().__init__(f"Not enough coins. Need {cost}, have {balance}")
        self.cost = cost
        self.balance = balance


class LiveCellConflict(PlacementError):
    def __init__(self, cells: Sequence[Coord]) -> None:
        super().__init__(
            f"{len(cells)} cell(s) overlap with existing alive cells: {_preview(cells)}. "
            "Reposition or wait for cells to die."
        )
        self.cells = tuple(cells)


class InternalOverlap(PlacementError):
    def __init__(self, cells: Sequence[Coord]) -> None:
        super().__init__(
            f"{len(cells)} cell(s) overlap between placements: {_preview(cells)}. "
            "Remove overlapping patterns."
        )
        self.cells = tuple(cells)


class ServerRejection(PlacementError):
    """The authority refused the batch; ``str(exc)`` is its message verbatim."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CommitInProgress(PlacementError):
    def __init__(self) -> None:
        super().__init__("A placement is already being confirmed")
