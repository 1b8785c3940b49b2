"""Typed remote-authority interface and the in-process loopback authority."""

from life_sync.remote.loopback import DEFAULT_PRINCIPAL, LoopbackAuthority
from life_sync.remote.protocol import (
    GameState,
    PlacementErr,
    PlacementOk,
    PlacementResult,
    RemoteAuthority,
    WipeInfo,
    placement_result_from_payload,
)

__all__ = [
    "DEFAULT_PRINCIPAL",
    "GameState",
    "LoopbackAuthority",
    "PlacementErr",
    "PlacementOk",
    "PlacementResult",
    "RemoteAuthority",
    "WipeInfo",
    "placement_result_from_payload",
]
