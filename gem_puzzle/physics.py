"""Reflection rules for light rays striking gem cells."""

from __future__ import annotations

from typing import Dict, Optional

from .geometry import CellKind, Direction

# Each triangle turns the two directions that hit its hypotenuse from the open
# side by 90 degrees. The remaining two directions are absent from the table
# and pass straight through.
TRIANGLE_REFLECTIONS: Dict[CellKind, Dict[Direction, Direction]] = {
    CellKind.TRI_TL: {
        Direction.UP: Direction.RIGHT,
        Direction.LEFT: Direction.DOWN,
    },
    CellKind.TRI_TR: {
        Direction.UP: Direction.LEFT,
        Direction.RIGHT: Direction.DOWN,
    },
    CellKind.TRI_BR: {
        Direction.RIGHT: Direction.UP,
        Direction.DOWN: Direction.LEFT,
    },
    CellKind.TRI_BL: {
        Direction.DOWN: Direction.RIGHT,
        Direction.LEFT: Direction.UP,
    },
}


def reflect(kind: CellKind, direction: Direction) -> Optional[Direction]:
    """Return the outgoing direction, or ``None`` when the ray passes through.

    Absorbing cells terminate a ray before reflection is consulted, so passing
    ``CellKind.ABSORB`` is a caller error.
    """

    if kind is CellKind.EMPTY:
        return None
    if kind is CellKind.BLOCK:
        return direction.reverse()
    if kind is CellKind.ABSORB:
        raise ValueError("Absorbing cells do not reflect; the tracer handles them first.")
    return TRIANGLE_REFLECTIONS[kind].get(direction)
