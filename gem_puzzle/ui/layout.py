"""Layout constants for the gem puzzle board renderer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

CELL_SIZE: int = 32
# Emitters occupy a one cell frame around the board.
EMITTER_MARGIN: int = 1

# Colors expressed as RGB tuples
BACKGROUND_COLOR: Tuple[int, int, int] = (12, 14, 26)
BOARD_BACKGROUND_COLOR: Tuple[int, int, int] = (20, 24, 44)
GRID_LINE_COLOR: Tuple[int, int, int] = (58, 64, 96)
EMITTER_COLOR: Tuple[int, int, int] = (90, 96, 130)
SELECTED_EMITTER_COLOR: Tuple[int, int, int] = (255, 94, 0)
INVALID_OUTLINE_COLOR: Tuple[int, int, int] = (231, 76, 60)

PATH_WIDTH: int = 3


@dataclass(frozen=True)
class BoardGeometry:
    """Pixel rectangles for the emitter frame and the board inside it."""

    board: Tuple[int, int, int, int]
    window: Tuple[int, int]
    cell_size: int

    def cell_to_topleft(self, cell: Tuple[int, int]) -> Tuple[int, int]:
        return (
            self.board[0] + cell[0] * self.cell_size,
            self.board[1] + cell[1] * self.cell_size,
        )

    def point_to_pixel(self, point: Tuple[float, float]) -> Tuple[int, int]:
        """Convert a path point in cell units to pixels."""

        return (
            int(round(self.board[0] + point[0] * self.cell_size)),
            int(round(self.board[1] + point[1] * self.cell_size)),
        )

    def pixel_to_cell(self, pos: Tuple[int, int]) -> Tuple[int, int]:
        """Board cell under a pixel; the emitter frame maps to -1 or the board size."""

        return (
            (pos[0] - self.board[0]) // self.cell_size,
            (pos[1] - self.board[1]) // self.cell_size,
        )


def compute_geometry(board_width: int, board_height: int, cell_size: int = CELL_SIZE) -> BoardGeometry:
    offset = EMITTER_MARGIN * cell_size
    board_rect = (offset, offset, board_width * cell_size, board_height * cell_size)
    window = (
        (board_width + 2 * EMITTER_MARGIN) * cell_size,
        (board_height + 2 * EMITTER_MARGIN) * cell_size,
    )
    return BoardGeometry(board=board_rect, window=window, cell_size=cell_size)
