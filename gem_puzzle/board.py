"""Board dimensions, placed gem instances and the painted grid projection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .catalog import GemDefinition
from .geometry import CellKind, Pattern

DEFAULT_WIDTH = 8
DEFAULT_HEIGHT = 10


@dataclass(frozen=True)
class Board:
    """Playing field dimensions; emitters sit on the four edges around it."""

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Board must be at least 1x1, got {self.width}x{self.height}.")

    def inside(self, position: Tuple[int, int]) -> bool:
        x, y = position
        return 0 <= x < self.width and 0 <= y < self.height

    def fits(self, x: int, y: int, pattern: Pattern) -> bool:
        return x >= 0 and y >= 0 and x + pattern.width <= self.width and y + pattern.height <= self.height

    def clamp_anchor(self, x: int, y: int, pattern: Pattern) -> Tuple[int, int]:
        return (
            max(0, min(x, self.width - pattern.width)),
            max(0, min(y, self.height - pattern.height)),
        )


@dataclass
class GemInstance:
    """A gem definition placed on the board at an anchor with an orientation."""

    id: str
    gem: GemDefinition
    x: int
    y: int
    pattern: Pattern
    rotation: int = 0
    flipped: bool = False
    valid: bool = True

    @classmethod
    def place(cls, instance_id: str, gem: GemDefinition, x: int, y: int) -> "GemInstance":
        return cls(id=instance_id, gem=gem, x=x, y=y, pattern=gem.pattern)

    @property
    def name(self) -> str:
        return self.gem.name

    @property
    def width(self) -> int:
        return self.pattern.width

    @property
    def height(self) -> int:
        return self.pattern.height

    @property
    def absorbs(self) -> bool:
        return self.gem.absorbs

    def cells(self) -> Iterator[Tuple[int, int, CellKind]]:
        """Yield ``(x, y, kind)`` board coordinates of every filled cell."""

        for r, c, kind in self.pattern.filled_cells():
            yield self.x + c, self.y + r, kind

    def layout_key(self) -> Tuple[str, int, int, Pattern]:
        return self.gem.name, self.x, self.y, self.pattern


@dataclass
class PaintedGrid:
    """Cell kinds of a board plus the instance owning each filled cell."""

    board: Board
    cells: List[List[CellKind]]
    owners: Dict[Tuple[int, int], GemInstance] = field(default_factory=dict)

    @property
    def width(self) -> int:
        return self.board.width

    @property
    def height(self) -> int:
        return self.board.height

    def kind_at(self, x: int, y: int) -> CellKind:
        return self.cells[y][x]

    def owner_at(self, x: int, y: int) -> Optional[GemInstance]:
        return self.owners.get((x, y))

    def to_tokens(self) -> List[str]:
        return [" ".join(kind.token.ljust(2) for kind in row).rstrip() for row in self.cells]


def empty_grid(board: Board) -> PaintedGrid:
    return PaintedGrid(
        board=board,
        cells=[[CellKind.EMPTY] * board.width for _ in range(board.height)],
    )


def paint_grid(board: Board, instances: Iterable[GemInstance]) -> PaintedGrid:
    """Project gem instances onto a fresh grid.

    Cells falling outside the board are skipped; overlap is the validator's
    concern, so a later instance simply wins a shared cell.
    """

    grid = empty_grid(board)
    for instance in instances:
        for x, y, kind in instance.cells():
            if board.inside((x, y)):
                grid.cells[y][x] = kind
                grid.owners[(x, y)] = instance
    return grid
