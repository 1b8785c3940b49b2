"""Headless recorder: local prediction against a loopback authority.

Seeds a loopback authority with patterns (or a seeded random soup), then
advances the authority and the local stepper one generation at a time,
reconciling every ``sync_every`` generations. Each generation's cells and a
summary row recording whether the local grid matched the authority are
written to Parquet; the run summary is printed as JSON.

Usage::

    python -m life_sync.run_sim --side 64 --generations 128 --sync-every 8
    python -m life_sync.run_sim --pattern glider --at 10,10 --pattern blinker --at 30,30
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pyarrow.parquet as pq

from life_sync.config.constants import FLUSH_THRESHOLD, QUADRANTS_PER_ROW
from life_sync.config.types import RecordConfig, SyncConfig, TieBreak, WorldConfig
from life_sync.domain.grid import GridStore
from life_sync.domain.patterns import get_pattern
from life_sync.domain.placement import PlacementBatcher
from life_sync.domain.rules import count_by_owner
from life_sync.errors import PlacementError
from life_sync.io.paths import (
    generation_log_path,
    generation_summary_path,
    logs_dir,
    run_summary_path,
)
from life_sync.io.persistence import append_grid_rows, flush_generation_columns
from life_sync.io.schemas import GENERATION_LOG_SCHEMA, GENERATION_SUMMARY_SCHEMA, empty_columns
from life_sync.remote.loopback import LoopbackAuthority
from life_sync.remote.protocol import PlacementErr
from life_sync.sync.reconciler import Reconciler, SyncOutcome
from life_sync.sync.session import LifeSession
from life_sync.sync.verify import find_cell_differences, state_fingerprint

logger = logging.getLogger(__name__)

DEFAULT_SIDE = 64


@dataclass(frozen=True)
class PatternPlacement:
    name: str
    anchor: tuple[int, int]


def _deterministic_run_id(side: int, seed: int, tie_break: TieBreak) -> str:
    """Build reproducible run ID stable across runs for identical settings."""
    return f"side{side}_seed{seed}_{tie_break.value}"


def _soup_cells(
    side: int, density: float, players: int, seed: int
) -> dict[int, list[tuple[int, int]]]:
    """Seeded random soup split between ``players`` owners, row-major per owner."""
    rng = np.random.default_rng(seed)
    alive = rng.random((side, side)) < density
    owners = rng.integers(1, players + 1, size=(side, side))
    cells: dict[int, list[tuple[int, int]]] = {p: [] for p in range(1, players + 1)}
    for y, x in zip(*np.nonzero(alive), strict=True):
        cells[int(owners[y, x])].append((int(x), int(y)))
    return cells


def _seed_authority(
    authority: LoopbackAuthority,
    batcher: PlacementBatcher,
    patterns: list[PatternPlacement],
    record: RecordConfig,
    players: int,
) -> int:
    """Place the requested patterns or a random soup; return the cells placed."""
    authority.join()
    if patterns:
        for placement in patterns:
            pattern = get_pattern(placement.name)
            batcher.add(pattern.offsets, placement.anchor, pattern.name)
        own_cells: list[tuple[int, int]] = []
        others: dict[int, list[tuple[int, int]]] = {}
    else:
        soup = _soup_cells(authority.world.side, record.soup_density, players, record.seed)
        own_cells = soup.pop(1)
        others = soup
        if own_cells:
            batcher.add(own_cells, (0, 0), "soup")

    placed = 0
    if len(batcher):
        authority.faucet(amount=max(record.starting_balance, batcher.cost))
        batcher.balance = authority.balance_of()
        result = asyncio.run(batcher.commit())
        placed += result.placed

    for player, cells in others.items():
        principal = f"player-{player}"
        authority.join(principal)
        if not cells:
            continue
        authority.faucet(principal, amount=max(record.starting_balance, len(cells)))
        result = authority.place_cells(cells, principal)
        if isinstance(result, PlacementErr):
            raise PlacementError(f"{principal}: {result.message}")
        placed += result.placed
    return placed


async def _record(
    session: LifeSession,
    authority: LoopbackAuthority,
    record: RecordConfig,
    run_id: str,
    out_dir: Path,
) -> dict[str, object]:
    store = session.store
    log_path = generation_log_path(out_dir)
    summary_path = generation_summary_path(out_dir)
    log_columns = empty_columns(GENERATION_LOG_SCHEMA)
    summary_columns = empty_columns(GENERATION_SUMMARY_SCHEMA)
    log_writer: pq.ParquetWriter | None = None
    summary_writer: pq.ParquetWriter | None = None
    mismatched: list[int] = []
    first_difference: dict[str, object] | None = None

    await session.sync()
    try:
        for _ in range(record.generations):
            authority.step()
            session.step()
            generation = store.generation
            synced = store.grid == authority.grid
            if not synced:
                mismatched.append(generation)
                if first_difference is None:
                    diff = find_cell_differences(store.grid, authority.grid, limit=1)[0]
                    first_difference = {"generation": generation, "x": diff.x, "y": diff.y}

            append_grid_rows(log_columns, run_id, generation, store.grid)
            by_owner = count_by_owner(store.grid)
            summary_columns["run_id"].append(run_id)
            summary_columns["generation"].append(generation)
            summary_columns["alive_count"].append(store.grid.alive_count())
            summary_columns["territory_count"].append(sum(c.territory for c in by_owner.values()))
            summary_columns["fingerprint"].append(state_fingerprint(store.grid))
            summary_columns["synced"].append(synced)

            if len(log_columns["run_id"]) >= FLUSH_THRESHOLD:
                log_writer = flush_generation_columns(
                    log_columns, log_path, log_writer, GENERATION_LOG_SCHEMA
                )
            if generation % record.sync_every == 0:
                await session.sync()

        log_writer = flush_generation_columns(
            log_columns, log_path, log_writer, GENERATION_LOG_SCHEMA
        )
        summary_writer = flush_generation_columns(
            summary_columns, summary_path, summary_writer, GENERATION_SUMMARY_SCHEMA
        )
    finally:
        if log_writer is not None:
            log_writer.close()
        if summary_writer is not None:
            summary_writer.close()

    reconciler = session.reconciler
    return {
        "run_id": run_id,
        "generations": record.generations,
        "sync_every": record.sync_every,
        "final_generation": store.generation,
        "alive_count": store.grid.alive_count(),
        "fingerprint": state_fingerprint(store.grid),
        "authority_fingerprint": state_fingerprint(authority.grid),
        "mismatched_generations": len(mismatched),
        "first_difference": first_difference,
        "syncs_applied": session.outcomes[SyncOutcome.APPLIED],
        "syncs_failed": session.outcomes[SyncOutcome.FAILED],
        "mean_latency_ms": reconciler.latency.avg,
        "balance": authority.balance_of(),
    }


def run_record(
    world: WorldConfig,
    record: RecordConfig,
    patterns: list[PatternPlacement] | None = None,
    players: int = 2,
) -> dict[str, object]:
    """Run one recording and write its logs under ``record.out_dir``."""
    if not 1 <= players <= world.max_players:
        raise ValueError(f"players must be in [1, {world.max_players}]")
    out_dir = Path(record.out_dir)
    logs_dir(out_dir).mkdir(parents=True, exist_ok=True)

    authority = LoopbackAuthority(world=world)
    store = GridStore(world.side)
    batcher = PlacementBatcher(store, authority)
    placed = _seed_authority(authority, batcher, list(patterns or []), record, players)
    logger.info("Seeded %d cells for %d player(s)", placed, len(authority.players))

    reconciler = Reconciler(
        store, authority, SyncConfig(), batcher=batcher, principal=authority.principal
    )
    session = LifeSession(store, reconciler, world=world)
    run_id = _deterministic_run_id(world.side, record.seed, world.tie_break)
    summary = asyncio.run(_record(session, authority, record, run_id, out_dir))
    summary.update({"side": world.side, "tie_break": world.tie_break.value, "cells_placed": placed})
    run_summary_path(out_dir).write_text(json.dumps(summary, ensure_ascii=False, indent=2))
    return summary


# ---------------------------------------------------------------------------
# Config resolution helpers
# ---------------------------------------------------------------------------


def _coerce_int(raw: object, key: str) -> int:
    """Coerce raw value to int; rejects booleans and non-integer floats."""
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be an integer value")
    if isinstance(raw, float):
        if raw != int(raw):
            raise ValueError(f"{key} must be an integer value, got {raw!r}")
        return int(raw)
    if isinstance(raw, (int, str)):
        return int(raw)
    raise ValueError(f"{key} must be an integer value")


def _coerce_float(raw: object, key: str) -> float:
    """Coerce raw value to float; rejects booleans."""
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be a float value")
    if isinstance(raw, (int, float, str)):
        return float(raw)
    raise ValueError(f"{key} must be a float value")


def _coerce_str(raw: object, key: str) -> str:
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be a string-coercible value")
    if isinstance(raw, (str, Path, int, float)):
        return str(raw)
    raise ValueError(f"{key} must be a string-coercible value")


def _get_val(cli_val: object, key: str, file_cfg: dict[str, object], default: object) -> object:
    """CLI > file > default resolution."""
    if cli_val is not None:
        return cli_val
    return file_cfg.get(key, default)


def _get_int(cli_val: int | None, key: str, file_cfg: dict[str, object], default: int) -> int:
    return _coerce_int(_get_val(cli_val, key, file_cfg, default), key)


def _get_float(
    cli_val: float | None, key: str, file_cfg: dict[str, object], default: float
) -> float:
    return _coerce_float(_get_val(cli_val, key, file_cfg, default), key)


def _get_str(cli_val: str | None, key: str, file_cfg: dict[str, object], default: str) -> str:
    return _coerce_str(_get_val(cli_val, key, file_cfg, default), key)


def _parse_anchor(raw: str) -> tuple[int, int]:
    """Parse an ``X,Y`` anchor."""
    parts = [p.strip() for p in raw.split(",")]
    if len(parts) != 2 or not all(p.lstrip("-").isdigit() for p in parts):
        raise ValueError(f"anchor must look like X,Y, got {raw!r}")
    return int(parts[0]), int(parts[1])


def _parse_patterns(
    names: list[str] | None, anchors: list[str] | None
) -> list[PatternPlacement]:
    names = names or []
    anchors = anchors or []
    if len(names) != len(anchors):
        raise ValueError("every --pattern needs a matching --at X,Y")
    placements = []
    for name, raw_anchor in zip(names, anchors, strict=True):
        get_pattern(name)
        placements.append(PatternPlacement(name=name.lower(), anchor=_parse_anchor(raw_anchor)))
    return placements


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Record local Game of Life prediction against a loopback authority"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file (CLI args override file values)",
    )
    parser.add_argument("--side", type=int, default=None)
    parser.add_argument("--quadrants-per-row", type=int, default=None)
    parser.add_argument("--generations", type=int, default=None)
    parser.add_argument("--sync-every", type=int, default=None)
    parser.add_argument("--pattern", action="append", default=None, help="Pattern name")
    parser.add_argument("--at", action="append", default=None, help="Anchor X,Y")
    parser.add_argument("--players", type=int, default=None)
    parser.add_argument("--density", type=float, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--tie-break",
        type=str,
        choices=[mode.value for mode in TieBreak],
        default=None,
    )
    parser.add_argument("--out-dir", type=Path, default=None)
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
    )
    return parser


# ---------------------------------------------------------------------------
# Main CLI
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for a recording run.

    CLI arguments override config-file values; config-file values override
    built-in defaults.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    file_cfg: dict[str, object] = {}
    if args.config is not None:
        try:
            file_cfg = json.loads(Path(args.config).read_text())
        except FileNotFoundError:
            parser.error(f"Config file not found: {args.config}")
        except json.JSONDecodeError as exc:
            parser.error(f"Config file is not valid JSON: {args.config}: {exc}")

    defaults = RecordConfig()
    try:
        side = _get_int(args.side, "side", file_cfg, DEFAULT_SIDE)
        per_row = _get_int(args.quadrants_per_row, "quadrants_per_row", file_cfg, QUADRANTS_PER_ROW)
        if per_row < 1 or side % per_row:
            raise ValueError("side must be a positive multiple of quadrants_per_row")
        tie_break = TieBreak(
            _get_str(args.tie_break, "tie_break", file_cfg, TieBreak.POSITIONAL.value)
        )
        world = WorldConfig(
            side=side,
            quadrant_size=side // per_row,
            quadrants_per_row=per_row,
            tie_break=tie_break,
        )
        record = RecordConfig(
            generations=_get_int(args.generations, "generations", file_cfg, defaults.generations),
            sync_every=_get_int(args.sync_every, "sync_every", file_cfg, defaults.sync_every),
            out_dir=Path(_get_str(args.out_dir, "out_dir", file_cfg, str(defaults.out_dir))),
            seed=_get_int(args.seed, "seed", file_cfg, defaults.seed),
            soup_density=_get_float(args.density, "density", file_cfg, defaults.soup_density),
        )
        players = _get_int(args.players, "players", file_cfg, 2)
        patterns = _parse_patterns(args.pattern, args.at)
    except (KeyError, ValueError) as exc:
        parser.error(str(exc))

    try:
        summary = run_record(world, record, patterns, players=players)
    except (PlacementError, ValueError) as exc:
        parser.error(f"Seeding failed: {exc}")
    print(json.dumps(summary, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
