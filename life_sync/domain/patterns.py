"""Pattern library: RLE parsing, rotation and a catalog of classic patterns.

Parsed patterns are lists of ``(dx, dy)`` offsets centred on the pattern's
``(width // 2, height // 2)`` cell, ready to be anchored by the batcher.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

Offset = tuple[int, int]

_HEADER = re.compile(r"x\s*=\s*(\d+).*y\s*=\s*(\d+)")


class PatternCategory(Enum):
    STILL_LIFE = "still_life"
    OSCILLATOR = "oscillator"
    SPACESHIP = "spaceship"
    METHUSELAH = "methuselah"


@dataclass(frozen=True)
class Pattern:
    name: str
    rle: str
    category: PatternCategory
    description: str = ""

    @property
    def offsets(self) -> list[Offset]:
        return parse_rle(self.rle)


def parse_rle(rle: str) -> list[Offset]:
    """Decode a run-length-encoded pattern into centred offsets.

    ``b`` is a dead run, ``o`` a live run, ``$`` ends rows and ``!`` ends the
    pattern. Lines starting with ``#`` are comments.
    """
    width = height = 0
    body: list[str] = []
    for line in rle.splitlines():
        stripped = line.strip()
        if stripped.startswith("#"):
            continue
        if stripped.startswith("x"):
            match = _HEADER.search(stripped)
            if match:
                width, height = int(match.group(1)), int(match.group(2))
            continue
        body.append(stripped)

    coords: list[Offset] = []
    x = y = 0
    run = ""
    for char in "".join(body):
        if char.isdigit():
            run += char
            continue
        count = int(run) if run else 1
        run = ""
        if char == "b":
            x += count
        elif char == "o":
            coords.extend((x + i, y) for i in range(count))
            x += count
        elif char == "$":
            y += count
            x = 0
        elif char == "!":
            break
        else:
            raise ValueError(f"unexpected RLE token {char!r}")

    cx, cy = width // 2, height // 2
    return [(px - cx, py - cy) for px, py in coords]


def rotate_pattern(offsets: Sequence[Offset], rotation: int) -> list[Offset]:
    """Rotate offsets clockwise by ``rotation`` quarter turns (0-3)."""
    if rotation not in (0, 1, 2, 3):
        raise ValueError("rotation must be 0, 1, 2 or 3")
    if rotation == 1:
        return [(y, -x) for x, y in offsets]
    if rotation == 2:
        return [(-x, -y) for x, y in offsets]
    if rotation == 3:
        return [(-y, x) for x, y in offsets]
    return list(offsets)


PATTERNS: tuple[Pattern, ...] = (
    Pattern("block", "x = 2, y = 2\n2o$2o!", PatternCategory.STILL_LIFE, "2x2 still life"),
    Pattern("beehive", "x = 4, y = 3\nb2ob$o2bo$b2ob!", PatternCategory.STILL_LIFE),
    Pattern("blinker", "x = 3, y = 1\n3o!", PatternCategory.OSCILLATOR, "Period 2"),
    Pattern("toad", "x = 4, y = 2\nb3o$3o!", PatternCategory.OSCILLATOR, "Period 2"),
    Pattern("glider", "x = 3, y = 3\nbo$2bo$3o!", PatternCategory.SPACESHIP, "c/4 diagonal"),
    Pattern("lwss", "x = 5, y = 4\nbo2bo$o4b$o3bo$4o!", PatternCategory.SPACESHIP, "c/2"),
    Pattern("rpentomino", "x = 3, y = 3\nb2o$2ob$bo!", PatternCategory.METHUSELAH),
    Pattern("acorn", "x = 7, y = 3\nbo5b$3bo3b$2o2b3o!", PatternCategory.METHUSELAH),
)

_BY_NAME = {p.name: p for p in PATTERNS}


def get_pattern(name: str) -> Pattern:
    try:
        return _BY_NAME[name.lower()]
    except KeyError:
        valid = ", ".join(sorted(_BY_NAME))
        raise KeyError(f"unknown pattern {name!r}; expected one of {valid}") from None
