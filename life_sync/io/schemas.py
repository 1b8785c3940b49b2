"""Parquet schema definitions for recorded generation logs.

Every module that reads or writes recorder output works against the column
contracts declared here.
"""

from __future__ import annotations

import pyarrow as pa

GENERATION_LOG_SCHEMA_VERSION = 1

# ---------------------------------------------------------------------------
# Per-cell log
# ---------------------------------------------------------------------------

GENERATION_LOG_SCHEMA = pa.schema(
    [
        ("run_id", pa.string()),
        ("generation", pa.int64()),
        ("x", pa.int64()),
        ("y", pa.int64()),
        ("owner", pa.int64()),
        ("coins", pa.int64()),
        ("alive", pa.bool_()),
    ]
)

# ---------------------------------------------------------------------------
# Per-generation summary
# ---------------------------------------------------------------------------

GENERATION_SUMMARY_SCHEMA = pa.schema(
    [
        ("run_id", pa.string()),
        ("generation", pa.int64()),
        ("alive_count", pa.int64()),
        ("territory_count", pa.int64()),
        ("fingerprint", pa.string()),
        ("synced", pa.bool_()),
    ]
)


def empty_columns(schema: pa.Schema) -> dict[str, list]:
    """Return an empty column buffer keyed by ``schema``'s field names."""
    return {name: [] for name in schema.names}
