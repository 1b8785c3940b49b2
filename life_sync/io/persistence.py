"""Parquet persistence helpers for generation logs."""

from __future__ import annotations

from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from life_sync.domain.codec import to_sparse
from life_sync.domain.grid import Grid


def flush_generation_columns(
    columns: dict[str, list],
    path: Path,
    writer: pq.ParquetWriter | None,
    schema: pa.Schema,
) -> pq.ParquetWriter | None:
    """Write buffered rows to Parquet and clear the in-memory buffers."""
    if not columns[schema.names[0]]:
        return writer
    table = pa.Table.from_pydict(columns, schema=schema)
    if writer is None:
        writer = pq.ParquetWriter(path, schema)
    writer.write_table(table)
    for values in columns.values():
        values.clear()
    return writer


def append_grid_rows(columns: dict[str, list], run_id: str, generation: int, grid: Grid) -> int:
    """Buffer every non-default cell of ``grid``; return the number of rows added."""
    snapshot = to_sparse(grid)
    for alive, cells in ((True, snapshot.alive_cells), (False, snapshot.territory)):
        for cell in cells:
            columns["run_id"].append(run_id)
            columns["generation"].append(generation)
            columns["x"].append(cell.x)
            columns["y"].append(cell.y)
            columns["owner"].append(cell.owner)
            columns["coins"].append(cell.coins)
            columns["alive"].append(alive)
    return len(snapshot)
