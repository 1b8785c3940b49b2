"""Typed interface to the remote authority.

Responses are parsed into frozen dataclasses with a fixed schema. Payload
parsers raise :exc:`~life_sync.errors.ProtocolViolation` on structural
problems so a malformed response never reaches the grid.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from life_sync.domain.codec import SparseCell, SparseSnapshot
from life_sync.errors import ProtocolViolation

Coord = tuple[int, int]


@dataclass(frozen=True)
class GameState:
    """Authoritative world state as returned by ``fetch_state``."""

    generation: int
    alive_cells: tuple[SparseCell, ...]
    territory: tuple[SparseCell, ...]
    players: tuple[str, ...] = ()
    balances: tuple[int, ...] = ()
    player_num: int | None = None
    quadrant_controllers: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        if len(self.players) != len(self.balances):
            raise ProtocolViolation(
                f"players ({len(self.players)}) and balances "
                f"({len(self.balances)}) differ in length"
            )

    @property
    def snapshot(self) -> SparseSnapshot:
        return SparseSnapshot(alive_cells=self.alive_cells, territory=self.territory)

    def balance_of(self, principal: str) -> int | None:
        try:
            return self.balances[self.players.index(principal)]
        except ValueError:
            return None

    @classmethod
    def from_payload(cls, payload: Mapping[str, object]) -> GameState:
        """Parse a decoded response body (e.g. JSON) into a ``GameState``."""
        player_num = payload.get("player_num")
        return cls(
            generation=_int(payload, "generation"),
            alive_cells=_cells(payload, "alive_cells"),
            territory=_cells(payload, "territory"),
            players=tuple(str(p) for p in _list(payload, "players", required=False)),
            balances=tuple(
                _as_int(b, "balances") for b in _list(payload, "balances", required=False)
            ),
            player_num=None if player_num is None else _as_int(player_num, "player_num"),
            quadrant_controllers=tuple(
                _as_int(c, "quadrant_controllers")
                for c in _list(payload, "quadrant_controllers", required=False)
            ),
        )

    def to_payload(self) -> dict[str, object]:
        return {
            "generation": self.generation,
            "alive_cells": [_cell_payload(c) for c in self.alive_cells],
            "territory": [_cell_payload(c) for c in self.territory],
            "players": list(self.players),
            "balances": list(self.balances),
            "player_num": self.player_num,
            "quadrant_controllers": list(self.quadrant_controllers),
        }


@dataclass(frozen=True)
class WipeInfo:
    quadrant: int
    seconds_until: int

    @classmethod
    def from_payload(cls, payload: Sequence[object]) -> WipeInfo:
        """Parse the ``(quadrant_id, seconds_until)`` pair."""
        if isinstance(payload, (str, bytes)) or len(payload) != 2:
            raise ProtocolViolation("next-wipe response must be a (quadrant, seconds) pair")
        return cls(
            quadrant=_as_int(payload[0], "quadrant"),
            seconds_until=_as_int(payload[1], "seconds_until"),
        )


@dataclass(frozen=True)
class PlacementOk:
    new_balance: int
    placed: int = 0
    generation: int = 0


@dataclass(frozen=True)
class PlacementErr:
    message: str


PlacementResult = PlacementOk | PlacementErr


def placement_result_from_payload(payload: Mapping[str, object]) -> PlacementResult:
    """Parse a ``{"Ok": {...}}`` / ``{"Err": "..."}`` variant."""
    if "Err" in payload:
        return PlacementErr(message=str(payload["Err"]))
    ok = payload.get("Ok")
    if not isinstance(ok, Mapping):
        raise ProtocolViolation("placement response must hold an Ok or Err variant")
    return PlacementOk(
        new_balance=_int(ok, "new_balance"),
        placed=_as_int(ok.get("placed", 0), "placed"),
        generation=_as_int(ok.get("generation", 0), "generation"),
    )


class RemoteAuthority(Protocol):
    """The authoritative world service. Transport errors raise ``NetworkFailure``."""

    async def fetch_state(self) -> GameState: ...

    async def fetch_next_wipe(self) -> WipeInfo: ...

    async def submit_placement(self, cells: Sequence[Coord]) -> PlacementResult: ...


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def _as_int(raw: object, key: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ProtocolViolation(f"{key} must be an integer, got {type(raw).__name__}")
    return raw


def _int(payload: Mapping[str, object], key: str) -> int:
    if key not in payload:
        raise ProtocolViolation(f"missing field {key!r}")
    return _as_int(payload[key], key)


def _list(payload: Mapping[str, object], key: str, required: bool = True) -> list[object]:
    if key not in payload:
        if required:
            raise ProtocolViolation(f"missing field {key!r}")
        return []
    raw = payload[key]
    if not isinstance(raw, (list, tuple)):
        raise ProtocolViolation(f"{key} must be a list")
    return list(raw)


def _cells(payload: Mapping[str, object], key: str) -> tuple[SparseCell, ...]:
    cells: list[SparseCell] = []
    for raw in _list(payload, key):
        if not isinstance(raw, Mapping):
            raise ProtocolViolation(f"{key} entries must be objects")
        cells.append(
            SparseCell(
                x=_int(raw, "x"),
                y=_int(raw, "y"),
                owner=_int(raw, "owner"),
                coins=_int(raw, "coins"),
            )
        )
    return tuple(cells)


def _cell_payload(cell: SparseCell) -> dict[str, int]:
    return {"x": cell.x, "y": cell.y, "owner": cell.owner, "coins": cell.coins}
