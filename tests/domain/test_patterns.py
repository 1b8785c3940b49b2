"""Tests for life_sync.domain.patterns."""

from __future__ import annotations

import numpy as np
import pytest

from life_sync.domain.grid import Cell, Grid
from life_sync.domain.patterns import (
    PATTERNS,
    PatternCategory,
    get_pattern,
    parse_rle,
    rotate_pattern,
)
from life_sync.domain.rules import step_generation


class TestParseRle:
    def test_blinker_centred(self) -> None:
        assert parse_rle("x = 3, y = 1\n3o!") == [(-1, 0), (0, 0), (1, 0)]

    def test_glider(self) -> None:
        assert sorted(parse_rle("x = 3, y = 3\nbo$2bo$3o!")) == sorted(
            [(0, -1), (1, 0), (-1, 1), (0, 1), (1, 1)]
        )

    def test_comments_and_multiline_body(self) -> None:
        rle = "#N Block\n#C a comment\nx = 2, y = 2, rule = B3/S23\n2o$\n2o!"
        assert parse_rle(rle) == [(-1, -1), (0, -1), (-1, 0), (0, 0)]

    def test_run_counts_on_row_breaks(self) -> None:
        assert parse_rle("x = 1, y = 3\no2$o!") == [(0, -1), (0, 1)]

    def test_unexpected_token(self) -> None:
        with pytest.raises(ValueError, match="unexpected RLE token"):
            parse_rle("x = 1, y = 1\nz!")


class TestRotatePattern:
    def test_quarter_turn(self) -> None:
        assert rotate_pattern([(1, 0)], 1) == [(0, -1)]
        assert rotate_pattern([(1, 0)], 2) == [(-1, 0)]
        assert rotate_pattern([(1, 0)], 3) == [(0, 1)]

    def test_four_turns_is_identity(self) -> None:
        offsets = get_pattern("glider").offsets
        turned = offsets
        for _ in range(4):
            turned = rotate_pattern(turned, 1)
        assert turned == offsets

    def test_invalid_rotation(self) -> None:
        with pytest.raises(ValueError):
            rotate_pattern([(0, 0)], 4)


class TestCatalog:
    def test_names_are_unique(self) -> None:
        names = [p.name for p in PATTERNS]
        assert len(names) == len(set(names))

    def test_lookup_is_case_insensitive(self) -> None:
        assert get_pattern("LWSS").category is PatternCategory.SPACESHIP

    def test_unknown_pattern(self) -> None:
        with pytest.raises(KeyError, match="unknown pattern"):
            get_pattern("gosper")

    @pytest.mark.parametrize("name", ["block", "beehive"])
    def test_still_lifes_are_stable(self, name: str) -> None:
        offsets = get_pattern(name).offsets
        cells = {(10 + dx, 10 + dy): Cell(owner=1, alive=True) for dx, dy in offsets}
        grid = Grid.empty(20).with_cells(cells)
        assert step_generation(grid) == grid

    @pytest.mark.parametrize("name", ["blinker", "toad"])
    def test_oscillators_have_period_two(self, name: str) -> None:
        offsets = get_pattern(name).offsets
        cells = {(10 + dx, 10 + dy): Cell(owner=1, alive=True) for dx, dy in offsets}
        grid = Grid.empty(20).with_cells(cells)
        once = step_generation(grid)
        assert not np.array_equal(once.alive, grid.alive)
        assert np.array_equal(step_generation(once).alive, grid.alive)
