"""Ray tracing from perimeter emitters through a painted grid."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Set, Tuple

from .board import Board, PaintedGrid
from .catalog import ABSORBED_COLOR, MixedColor, color_key, mix_colors
from .geometry import CellKind, Direction
from .physics import reflect

MAX_TRACE_STEPS = 100

ABSORBED_EXIT = "Absorbed"
LOOP_EXIT = "Loop?"

_EMITTER_PATTERN = re.compile(r"^(?P<edge>[TBLR])(?P<index>\d+)$")

PathPoint = Tuple[float, float]


@dataclass(frozen=True)
class TraceResult:
    """Outcome of one ray: where it left the board and what it picked up."""

    emitter_id: str
    exit_id: str
    path: Tuple[PathPoint, ...]
    colors: Tuple[str, ...]
    absorbed: bool = False

    @property
    def undetermined(self) -> bool:
        return self.exit_id == LOOP_EXIT

    @property
    def color_key(self) -> str:
        return color_key(self.colors)

    @property
    def mixed_color(self) -> MixedColor:
        if self.absorbed:
            return ABSORBED_COLOR
        return mix_colors(self.colors)

    def matches(self, other: "TraceResult") -> bool:
        return self.exit_id == other.exit_id and self.color_key == other.color_key


def emitter_ids(board: Board) -> List[str]:
    ids: List[str] = []
    for index in range(1, board.width + 1):
        ids.extend((f"T{index}", f"B{index}"))
    for index in range(1, board.height + 1):
        ids.extend((f"L{index}", f"R{index}"))
    return ids


def parse_emitter(board: Board, emitter_id: str) -> Tuple[Tuple[int, int], Direction]:
    """Return the off-board start cell and heading for an emitter id."""

    match = _EMITTER_PATTERN.match(emitter_id.strip().upper())
    if not match:
        raise ValueError(f"Malformed emitter id '{emitter_id}'")
    edge = match.group("edge")
    index = int(match.group("index"))
    limit = board.width if edge in "TB" else board.height
    if not 1 <= index <= limit:
        raise ValueError(f"Emitter '{emitter_id}' is outside the {board.width}x{board.height} board")
    offset = index - 1
    if edge == "T":
        return (offset, -1), Direction.DOWN
    if edge == "B":
        return (offset, board.height), Direction.UP
    if edge == "L":
        return (-1, offset), Direction.RIGHT
    return (board.width, offset), Direction.LEFT


def exit_id_for(board: Board, position: Tuple[int, int]) -> str:
    x, y = position
    if y < 0:
        return f"T{x + 1}"
    if y >= board.height:
        return f"B{x + 1}"
    if x < 0:
        return f"L{y + 1}"
    if x >= board.width:
        return f"R{y + 1}"
    raise ValueError(f"Position {position} is on the board, not an exit")


def _edge_point(position: Tuple[int, int], direction: Direction, sign: int) -> PathPoint:
    # Midpoint of the cell side the ray crosses, in cell units.
    dx, dy = direction.vector
    return (position[0] + 0.5 + sign * dx * 0.5, position[1] + 0.5 + sign * dy * 0.5)


def trace(grid: PaintedGrid, emitter_id: str, max_steps: int = MAX_TRACE_STEPS) -> TraceResult:
    """Follow a ray fired from ``emitter_id`` until it exits, is absorbed or stalls."""

    board = grid.board
    start, direction = parse_emitter(board, emitter_id)
    emitter_id = emitter_id.strip().upper()
    x, y = start
    path: List[PathPoint] = [_edge_point(start, direction, 1)]
    colors: Set[str] = set()
    hit_gems: Set[str] = set()

    for _ in range(max_steps):
        dx, dy = direction.vector
        x, y = x + dx, y + dy

        if not board.inside((x, y)):
            path.append(_edge_point((x, y), direction, -1))
            return TraceResult(
                emitter_id=emitter_id,
                exit_id=exit_id_for(board, (x, y)),
                path=tuple(path),
                colors=tuple(sorted(colors)),
            )

        kind = grid.kind_at(x, y)
        if kind is CellKind.EMPTY:
            continue

        path.append((x + 0.5, y + 0.5))
        owner = grid.owner_at(x, y)
        if owner is not None and owner.id not in hit_gems:
            hit_gems.add(owner.id)
            colors.update(owner.gem.base_colors)

        if kind is CellKind.ABSORB:
            return TraceResult(
                emitter_id=emitter_id,
                exit_id=ABSORBED_EXIT,
                path=tuple(path),
                colors=(),
                absorbed=True,
            )

        reflected = reflect(kind, direction)
        if reflected is not None:
            direction = reflected

    return TraceResult(
        emitter_id=emitter_id,
        exit_id=LOOP_EXIT,
        path=tuple(path),
        colors=tuple(sorted(colors)),
    )


def trace_all(grid: PaintedGrid, max_steps: int = MAX_TRACE_STEPS) -> List[TraceResult]:
    return [trace(grid, emitter_id, max_steps) for emitter_id in emitter_ids(grid.board)]


def all_emitters_match(
    secret: PaintedGrid, player: PaintedGrid, max_steps: int = MAX_TRACE_STEPS
) -> bool:
    """Compare exit and color of every emitter on both grids; one mismatch fails."""

    for emitter_id in emitter_ids(secret.board):
        if not trace(secret, emitter_id, max_steps).matches(trace(player, emitter_id, max_steps)):
            return False
    return True
