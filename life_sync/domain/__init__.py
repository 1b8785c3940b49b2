"""Grid model, evolution rule, quadrants, patterns and the placement batcher."""

from life_sync.domain.codec import SparseCell, SparseSnapshot, to_dense, to_sparse
from life_sync.domain.grid import Cell, Grid, GridStore, wrap
from life_sync.domain.patterns import (
    PATTERNS,
    Pattern,
    PatternCategory,
    get_pattern,
    parse_rle,
    rotate_pattern,
)
from life_sync.domain.placement import BatchState, PendingPlacement, PlacementBatcher
from life_sync.domain.quadrants import (
    QuadrantBounds,
    QuadrantIndex,
    QuadrantStats,
    WipeSchedule,
    quadrant_bounds,
    wipe_quadrant,
)
from life_sync.domain.rules import (
    OwnerCounts,
    StepResult,
    count_alive,
    count_by_owner,
    evolve,
    find_majority_owner,
    step_generation,
)

__all__ = [
    "PATTERNS",
    "BatchState",
    "Cell",
    "Grid",
    "GridStore",
    "OwnerCounts",
    "Pattern",
    "PatternCategory",
    "PendingPlacement",
    "PlacementBatcher",
    "QuadrantBounds",
    "QuadrantIndex",
    "QuadrantStats",
    "SparseCell",
    "SparseSnapshot",
    "StepResult",
    "WipeSchedule",
    "count_alive",
    "count_by_owner",
    "evolve",
    "find_majority_owner",
    "get_pattern",
    "parse_rle",
    "quadrant_bounds",
    "rotate_pattern",
    "step_generation",
    "to_dense",
    "to_sparse",
    "wipe_quadrant",
    "wrap",
]
