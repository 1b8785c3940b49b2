from life_sync.config.constants import (
    BACKEND_SYNC_MS,
    CELL_COST,
    COMMIT_TIMEOUT_SECONDS,
    CONTROLLER_THRESHOLD_PERCENT,
    FETCH_TIMEOUT_SECONDS,
    FLUSH_THRESHOLD,
    GRID_SIZE,
    LATENCY_WINDOW,
    LOCAL_TICK_MS,
    MAX_COINS,
    MAX_OWNER_ID,
    MAX_PLAYERS,
    QUADRANT_SIZE,
    QUADRANTS_PER_ROW,
    TOTAL_QUADRANTS,
    WIPE_INTERVAL_SECONDS,
)


def test_quadrants_tile_the_grid() -> None:
    assert QUADRANT_SIZE * QUADRANTS_PER_ROW == GRID_SIZE
    assert TOTAL_QUADRANTS == QUADRANTS_PER_ROW**2 == 16


def test_player_ids_fit_owner_range() -> None:
    assert 1 <= MAX_PLAYERS < MAX_OWNER_ID


def test_coin_cap_fits_three_bits() -> None:
    assert 0 < MAX_COINS < 8


def test_local_ticks_are_faster_than_syncs() -> None:
    assert 0 < LOCAL_TICK_MS < BACKEND_SYNC_MS


def test_fetch_timeout_shorter_than_sync_interval() -> None:
    assert 0 < FETCH_TIMEOUT_SECONDS < BACKEND_SYNC_MS / 1000
    assert COMMIT_TIMEOUT_SECONDS > FETCH_TIMEOUT_SECONDS


def test_misc_positive() -> None:
    assert CELL_COST == 1
    assert LATENCY_WINDOW == 20
    assert FLUSH_THRESHOLD > 0
    assert WIPE_INTERVAL_SECONDS > 0
    assert 50 < CONTROLLER_THRESHOLD_PERCENT <= 100
