"""Cell kinds, directions and the shape transforms applied to gem patterns."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, NamedTuple, Sequence, Tuple


class PatternError(ValueError):
    """Raised when a gem pattern is empty or not rectangular."""


class Direction(Enum):
    """Cardinal directions for a light ray, in screen coordinates."""

    UP = (0, -1)
    RIGHT = (1, 0)
    DOWN = (0, 1)
    LEFT = (-1, 0)

    @property
    def vector(self) -> Tuple[int, int]:
        return self.value

    def turn_left(self) -> "Direction":
        mapping = {
            Direction.UP: Direction.LEFT,
            Direction.LEFT: Direction.DOWN,
            Direction.DOWN: Direction.RIGHT,
            Direction.RIGHT: Direction.UP,
        }
        return mapping[self]

    def turn_right(self) -> "Direction":
        mapping = {
            Direction.UP: Direction.RIGHT,
            Direction.RIGHT: Direction.DOWN,
            Direction.DOWN: Direction.LEFT,
            Direction.LEFT: Direction.UP,
        }
        return mapping[self]

    def reverse(self) -> "Direction":
        mapping = {
            Direction.UP: Direction.DOWN,
            Direction.DOWN: Direction.UP,
            Direction.RIGHT: Direction.LEFT,
            Direction.LEFT: Direction.RIGHT,
        }
        return mapping[self]


class Edges(NamedTuple):
    """Which axis-aligned sides of a cell are solid boundaries."""

    top: bool
    right: bool
    bottom: bool
    left: bool

    def facing(self, direction: Direction) -> bool:
        """Return whether the side pointing towards ``direction`` is physical."""

        if direction is Direction.UP:
            return self.top
        if direction is Direction.RIGHT:
            return self.right
        if direction is Direction.DOWN:
            return self.bottom
        return self.left


class CellKind(Enum):
    """Occupancy state of one grid cell.

    The four triangle kinds are named after their solid corner, so ``TRI_TL``
    fills the top-left half of the cell and has a ``/`` shaped hypotenuse.
    """

    EMPTY = 0
    BLOCK = 1
    TRI_TL = 2
    TRI_TR = 3
    TRI_BR = 4
    TRI_BL = 5
    ABSORB = 6

    @staticmethod
    def from_token(token: str) -> "CellKind":
        try:
            return _KIND_BY_TOKEN[token.upper()]
        except KeyError as exc:
            raise PatternError(f"Unknown cell token '{token}'") from exc

    @property
    def token(self) -> str:
        return _TOKEN_BY_KIND[self]

    def rotated(self) -> "CellKind":
        """Kind after the containing pattern is rotated 90 degrees clockwise."""

        return ROTATION_TABLE[self]

    def flipped(self) -> "CellKind":
        """Kind after the containing pattern is mirrored left to right."""

        return FLIP_TABLE[self]

    @property
    def edges(self) -> Edges:
        return EDGE_TABLE[self]


ROTATION_TABLE = {
    CellKind.EMPTY: CellKind.EMPTY,
    CellKind.BLOCK: CellKind.BLOCK,
    CellKind.ABSORB: CellKind.ABSORB,
    CellKind.TRI_TL: CellKind.TRI_TR,
    CellKind.TRI_TR: CellKind.TRI_BR,
    CellKind.TRI_BR: CellKind.TRI_BL,
    CellKind.TRI_BL: CellKind.TRI_TL,
}

FLIP_TABLE = {
    CellKind.EMPTY: CellKind.EMPTY,
    CellKind.BLOCK: CellKind.BLOCK,
    CellKind.ABSORB: CellKind.ABSORB,
    CellKind.TRI_TL: CellKind.TRI_TR,
    CellKind.TRI_TR: CellKind.TRI_TL,
    CellKind.TRI_BR: CellKind.TRI_BL,
    CellKind.TRI_BL: CellKind.TRI_BR,
}

# Triangles keep the two edges adjacent to their solid corner, never the
# hypotenuse.
EDGE_TABLE = {
    CellKind.EMPTY: Edges(False, False, False, False),
    CellKind.BLOCK: Edges(True, True, True, True),
    CellKind.ABSORB: Edges(True, True, True, True),
    CellKind.TRI_TL: Edges(True, False, False, True),
    CellKind.TRI_TR: Edges(True, True, False, False),
    CellKind.TRI_BR: Edges(False, True, True, False),
    CellKind.TRI_BL: Edges(False, False, True, True),
}

_TOKEN_BY_KIND = {
    CellKind.EMPTY: ".",
    CellKind.BLOCK: "#",
    CellKind.TRI_TL: "TL",
    CellKind.TRI_TR: "TR",
    CellKind.TRI_BR: "BR",
    CellKind.TRI_BL: "BL",
    CellKind.ABSORB: "X",
}
_KIND_BY_TOKEN = {token: kind for kind, token in _TOKEN_BY_KIND.items()}


@dataclass(frozen=True)
class Pattern:
    """Rectangular grid of cell kinds describing one oriented gem shape."""

    rows: Tuple[Tuple[CellKind, ...], ...]

    def __post_init__(self) -> None:
        rows = tuple(tuple(row) for row in self.rows)
        if not rows or not rows[0]:
            raise PatternError("Pattern must have at least one row and one column.")
        width = len(rows[0])
        for index, row in enumerate(rows):
            if len(row) != width:
                raise PatternError(
                    f"Jagged pattern: row 0 has {width} cells but row {index} has {len(row)}."
                )
            for kind in row:
                if not isinstance(kind, CellKind):
                    raise PatternError(f"Invalid cell value {kind!r} in row {index}.")
        object.__setattr__(self, "rows", rows)

    @classmethod
    def from_tokens(cls, rows: Sequence[str]) -> "Pattern":
        """Build a pattern from whitespace separated token rows such as ``"BR # TL"``."""

        return cls(tuple(tuple(CellKind.from_token(tok) for tok in row.split()) for row in rows))

    def to_tokens(self) -> List[str]:
        return [" ".join(kind.token for kind in row) for row in self.rows]

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def width(self) -> int:
        return len(self.rows[0])

    def at(self, row: int, col: int) -> CellKind:
        return self.rows[row][col]

    def filled_cells(self) -> Iterator[Tuple[int, int, CellKind]]:
        """Yield ``(row, col, kind)`` for every non-empty cell."""

        for r, row in enumerate(self.rows):
            for c, kind in enumerate(row):
                if kind is not CellKind.EMPTY:
                    yield r, c, kind

    def is_empty(self) -> bool:
        return not any(True for _ in self.filled_cells())


def rotate_clockwise(pattern: Pattern) -> Pattern:
    rows, cols = pattern.height, pattern.width
    grid = [[CellKind.EMPTY] * rows for _ in range(cols)]
    for r in range(rows):
        for c in range(cols):
            grid[c][rows - 1 - r] = pattern.at(r, c).rotated()
    return Pattern(tuple(tuple(row) for row in grid))


def flip_horizontal(pattern: Pattern) -> Pattern:
    return Pattern(
        tuple(tuple(kind.flipped() for kind in reversed(row)) for row in pattern.rows)
    )


def rotations(pattern: Pattern) -> List[Pattern]:
    """Return the pattern followed by its three clockwise rotations."""

    result = [pattern]
    for _ in range(3):
        result.append(rotate_clockwise(result[-1]))
    return result


def is_flippable(pattern: Pattern) -> bool:
    """A shape is flippable when its mirror image is not reachable by rotation."""

    flipped = flip_horizontal(pattern)
    return all(flipped != candidate for candidate in rotations(pattern))


def orient(pattern: Pattern, rotation: int, flipped: bool = False) -> Pattern:
    """Apply the optional horizontal flip first, then ``rotation`` clockwise turns."""

    result = flip_horizontal(pattern) if flipped else pattern
    for _ in range(rotation % 4):
        result = rotate_clockwise(result)
    return result


def crop_to_bounding_box(pattern: Pattern) -> Pattern:
    filled = [(r, c) for r, c, _ in pattern.filled_cells()]
    if not filled:
        return Pattern(((CellKind.EMPTY,),))
    top = min(r for r, _ in filled)
    bottom = max(r for r, _ in filled)
    left = min(c for _, c in filled)
    right = max(c for _, c in filled)
    return Pattern(
        tuple(tuple(row[left : right + 1]) for row in pattern.rows[top : bottom + 1])
    )
