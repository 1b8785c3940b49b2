"""Path construction helpers for recorder output directories."""

from __future__ import annotations

from pathlib import Path


def logs_dir(out_dir: Path) -> Path:
    """Return path to the logs subdirectory within an output directory."""
    return out_dir / "logs"


def generation_log_path(out_dir: Path) -> Path:
    """Return path to the per-cell generation log Parquet file."""
    return logs_dir(out_dir) / "generation_log.parquet"


def generation_summary_path(out_dir: Path) -> Path:
    """Return path to the per-generation summary Parquet file."""
    return logs_dir(out_dir) / "generation_summary.parquet"


def run_summary_path(out_dir: Path) -> Path:
    """Return path to the run summary JSON file."""
    return out_dir / "run_summary.json"
