"""User interface helpers for the gem puzzle."""

from .layout import BoardGeometry, compute_geometry
from .toolkit import GemBoardUI

__all__ = [
    "BoardGeometry",
    "GemBoardUI",
    "compute_geometry",
]
