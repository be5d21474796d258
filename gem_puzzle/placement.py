"""Placement legality: overlap, edge contact and absorber spacing."""

from __future__ import annotations

from typing import Iterable

from .board import Board, GemInstance
from .geometry import Direction


def _boxes_apart(a: GemInstance, b: GemInstance) -> bool:
    # Anchors are integers, so a one cell gap between bounding boxes already
    # puts every pair of cells at Chebyshev distance >= 2.
    assert isinstance(a.x, int) and isinstance(a.y, int), "gem anchors must be integers"
    assert isinstance(b.x, int) and isinstance(b.y, int), "gem anchors must be integers"
    return (
        a.x + a.width < b.x
        or b.x + b.width < a.x
        or a.y + a.height < b.y
        or b.y + b.height < a.y
    )


def _direction_between(dx: int, dy: int) -> Direction:
    for direction in Direction:
        if direction.vector == (dx, dy):
            return direction
    raise ValueError(f"Cells are not orthogonal neighbours: ({dx}, {dy})")


def gems_collide(a: GemInstance, b: GemInstance) -> bool:
    """Return whether two placed gems overlap or touch illegally."""

    if _boxes_apart(a, b):
        return False

    absorbing = a.absorbs or b.absorbs
    cells_b = list(b.cells())
    for xa, ya, kind_a in a.cells():
        for xb, yb, kind_b in cells_b:
            dx, dy = xb - xa, yb - ya
            if absorbing:
                if abs(dx) <= 1 and abs(dy) <= 1:
                    return True
                continue
            if dx == 0 and dy == 0:
                return True
            if abs(dx) + abs(dy) == 1:
                towards_b = _direction_between(dx, dy)
                if kind_a.edges.facing(towards_b) and kind_b.edges.facing(towards_b.reverse()):
                    return True
    return False


def is_placement_valid(board: Board, candidate: GemInstance, others: Iterable[GemInstance]) -> bool:
    """Check ``candidate`` against the board bounds and every other gem.

    A gem sharing the candidate's id is the candidate itself at its old
    position and is ignored.
    """

    if not board.fits(candidate.x, candidate.y, candidate.pattern):
        return False
    for other in others:
        if other.id == candidate.id:
            continue
        if gems_collide(candidate, other):
            return False
    return True
