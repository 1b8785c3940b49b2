"""Arrow schemas, output paths and Parquet persistence."""

from life_sync.io.paths import (
    generation_log_path,
    generation_summary_path,
    logs_dir,
    run_summary_path,
)
from life_sync.io.persistence import append_grid_rows, flush_generation_columns
from life_sync.io.schemas import (
    GENERATION_LOG_SCHEMA,
    GENERATION_LOG_SCHEMA_VERSION,
    GENERATION_SUMMARY_SCHEMA,
    empty_columns,
)

__all__ = [
    "GENERATION_LOG_SCHEMA",
    "GENERATION_LOG_SCHEMA_VERSION",
    "GENERATION_SUMMARY_SCHEMA",
    "append_grid_rows",
    "empty_columns",
    "flush_generation_columns",
    "generation_log_path",
    "generation_summary_path",
    "logs_dir",
    "run_summary_path",
]
