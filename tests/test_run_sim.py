"""Tests for the life_sync.run_sim recorder CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pyarrow.parquet as pq
import pytest

from life_sync.config.types import RecordConfig, TieBreak, WorldConfig
from life_sync.io.schemas import GENERATION_LOG_SCHEMA
from life_sync.run_sim import PatternPlacement, main, run_record

WORLD = WorldConfig(side=32, quadrant_size=8, quadrants_per_row=4)


class TestRunRecord:
    def test_patterns_track_authority_exactly(self, tmp_path: Path) -> None:
        summary = run_record(
            WORLD,
            RecordConfig(generations=12, sync_every=4, out_dir=tmp_path),
            [PatternPlacement("glider", (5, 5)), PatternPlacement("blinker", (20, 20))],
        )
        assert summary["cells_placed"] == 8
        assert summary["mismatched_generations"] == 0
        assert summary["fingerprint"] == summary["authority_fingerprint"]
        assert summary["final_generation"] == 12
        assert summary["syncs_applied"] == 4
        assert summary["balance"] == 0

    def test_writes_logs_and_summary(self, tmp_path: Path) -> None:
        run_record(
            WORLD,
            RecordConfig(generations=6, sync_every=3, out_dir=tmp_path),
            [PatternPlacement("block", (10, 10))],
        )
        summary_table = pq.read_table(tmp_path / "logs" / "generation_summary.parquet")
        assert summary_table.column("generation").to_pylist() == [1, 2, 3, 4, 5, 6]
        assert all(summary_table.column("synced").to_pylist())
        assert set(summary_table.column("alive_count").to_pylist()) == {4}

        log_table = pq.read_table(tmp_path / "logs" / "generation_log.parquet")
        assert set(log_table.column_names) == set(GENERATION_LOG_SCHEMA.names)
        assert log_table.num_rows == 6 * 4

        saved = json.loads((tmp_path / "run_summary.json").read_text())
        assert saved["run_id"] == "side32_seed0_positional"

    def test_random_soup_with_several_players(self, tmp_path: Path) -> None:
        summary = run_record(
            WORLD,
            RecordConfig(generations=8, sync_every=2, out_dir=tmp_path, seed=3, soup_density=0.3),
            players=3,
        )
        assert summary["cells_placed"] > 0
        assert 0 <= summary["mismatched_generations"] <= 8
        assert (tmp_path / "logs" / "generation_log.parquet").exists()

    def test_players_out_of_range(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            run_record(WORLD, RecordConfig(out_dir=tmp_path), players=0)


class TestMain:
    def test_cli_prints_summary(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(
            [
                "--side",
                "16",
                "--generations",
                "4",
                "--sync-every",
                "2",
                "--pattern",
                "Blinker",
                "--at",
                "8,8",
                "--out-dir",
                str(tmp_path),
            ]
        )
        summary = json.loads(capsys.readouterr().out)
        assert summary["side"] == 16
        assert summary["generations"] == 4
        assert summary["tie_break"] == TieBreak.POSITIONAL.value
        assert (tmp_path / "run_summary.json").exists()

    def test_config_file_with_cli_override(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config = tmp_path / "config.json"
        config.write_text(
            json.dumps({"side": 16, "generations": 3, "tie_break": "lowest_id", "players": 1})
        )
        main(["--config", str(config), "--generations", "5", "--out-dir", str(tmp_path / "out")])
        summary = json.loads(capsys.readouterr().out)
        assert summary["generations"] == 5
        assert summary["tie_break"] == "lowest_id"
        assert summary["side"] == 16

    def test_pattern_without_anchor(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            main(["--pattern", "glider", "--out-dir", str(tmp_path)])

    def test_unknown_pattern(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            main(["--pattern", "nope", "--at", "1,1", "--out-dir", str(tmp_path)])

    def test_missing_config_file(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            main(["--config", str(tmp_path / "missing.json")])

    def test_side_must_divide_into_quadrants(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            main(["--side", "10", "--out-dir", str(tmp_path)])
