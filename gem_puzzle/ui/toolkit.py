"""Minimal pygame based board renderer for headless testing.

Rendering is kept deterministic so it can be exercised in automated tests
using the SDL ``dummy`` video driver.
"""

from __future__ import annotations

import os
from typing import Iterable, List, Optional, Tuple

from ..board import GemInstance
from ..game import PuzzleSession, WaveLogEntry
from ..geometry import CellKind
from ..tracer import TraceResult
from . import layout


# Pygame is imported lazily in ``ensure_pygame`` so test environments can
# choose the SDL drivers first.
_PYGAME = None


def ensure_pygame():
    global _PYGAME
    if _PYGAME is None:
        os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
        _PYGAME = __import__("pygame")
        _PYGAME.display.init()
    return _PYGAME


def cell_polygon(kind: CellKind, left: int, top: int, size: int) -> List[Tuple[int, int]]:
    """Outline of the solid part of a cell in pixel coordinates."""

    right, bottom = left + size, top + size
    if kind is CellKind.TRI_TL:
        return [(left, top), (right, top), (left, bottom)]
    if kind is CellKind.TRI_TR:
        return [(left, top), (right, top), (right, bottom)]
    if kind is CellKind.TRI_BR:
        return [(right, top), (right, bottom), (left, bottom)]
    if kind is CellKind.TRI_BL:
        return [(left, top), (left, bottom), (right, bottom)]
    return [(left, top), (right, top), (right, bottom), (left, bottom)]


class GemBoardUI:
    """Very small pygame driven view of a puzzle session."""

    def __init__(
        self,
        session: PuzzleSession,
        *,
        cell_size: int = layout.CELL_SIZE,
        surface=None,
        use_display: bool = False,
        show_secret: bool = False,
    ) -> None:
        pygame = ensure_pygame()
        self.session = session
        self.geometry = layout.compute_geometry(
            session.board.width, session.board.height, cell_size
        )
        self.surface = surface if surface is not None else pygame.Surface(self.geometry.window)
        self.screen = None
        if use_display:
            self.screen = pygame.display.set_mode(self.geometry.window)
        self.show_secret = show_secret
        self.selected_gem: Optional[str] = None
        self.selected_wave: Optional[WaveLogEntry] = None

    # ------------------------------------------------------------------
    # Input handling
    def select_gem(self, name: Optional[str]) -> None:
        self.selected_gem = name

    def emitter_at(self, cell: Tuple[int, int]) -> Optional[str]:
        x, y = cell
        width, height = self.session.board.width, self.session.board.height
        if 0 <= x < width and y == -1:
            return f"T{x + 1}"
        if 0 <= x < width and y == height:
            return f"B{x + 1}"
        if 0 <= y < height and x == -1:
            return f"L{y + 1}"
        if 0 <= y < height and x == width:
            return f"R{y + 1}"
        return None

    def gem_at(self, cell: Tuple[int, int]) -> Optional[GemInstance]:
        return self.session.player_grid().owner_at(*cell) if self.session.board.inside(cell) else None

    def process_events(self, events: Iterable[object]) -> None:
        pygame = ensure_pygame()
        for event in events:
            if event.type != pygame.MOUSEBUTTONDOWN:
                continue
            cell = self.geometry.pixel_to_cell(event.pos)
            if event.button == 1:
                self._handle_click(cell)
            elif event.button == 3:
                gem = self.gem_at(cell)
                if gem is not None:
                    self.session.rotate_player_gem(gem.id)

    def _handle_click(self, cell: Tuple[int, int]) -> None:
        emitter_id = self.emitter_at(cell)
        if emitter_id is not None:
            self.selected_wave = self.session.send_wave(emitter_id)
            return
        if self.selected_gem and self.session.board.inside(cell):
            self.session.add_player_gem(self.selected_gem, cell[0], cell[1])
            if self.selected_gem not in self.session.remaining_gems():
                self.selected_gem = None

    # ------------------------------------------------------------------
    # Rendering helpers
    def render(self):
        pygame = ensure_pygame()
        self.surface.fill(layout.BACKGROUND_COLOR)
        self.surface.fill(layout.BOARD_BACKGROUND_COLOR, pygame.Rect(self.geometry.board))
        self._draw_emitters()
        self._draw_grid()
        gems = self.session.secret_gems if self.show_secret else self.session.player_gems
        for gem in gems:
            self._draw_gem(gem)
        if self.selected_wave is not None:
            self._draw_path(self.selected_wave.result)
        if self.screen:
            self.screen.blit(self.surface, (0, 0))
            pygame.display.flip()
        return self.surface

    def _draw_grid(self) -> None:
        pygame = ensure_pygame()
        size = self.geometry.cell_size
        for x in range(self.session.board.width):
            for y in range(self.session.board.height):
                left, top = self.geometry.cell_to_topleft((x, y))
                pygame.draw.rect(self.surface, layout.GRID_LINE_COLOR, pygame.Rect(left, top, size, size), 1)

    def _draw_emitters(self) -> None:
        pygame = ensure_pygame()
        size = self.geometry.cell_size
        board = self.session.board
        frame = [(x, -1) for x in range(board.width)] + [(x, board.height) for x in range(board.width)]
        frame += [(-1, y) for y in range(board.height)] + [(board.width, y) for y in range(board.height)]
        selected = self.selected_wave.emitter_id if self.selected_wave else None
        for cell in frame:
            color = layout.EMITTER_COLOR
            if selected is not None and self.emitter_at(cell) == selected:
                color = layout.SELECTED_EMITTER_COLOR
            left, top = self.geometry.cell_to_topleft(cell)
            inset = size // 4
            self.surface.fill(color, pygame.Rect(left + inset, top + inset, size - 2 * inset, size - 2 * inset))

    def _draw_gem(self, gem: GemInstance) -> None:
        pygame = ensure_pygame()
        size = self.geometry.cell_size
        color = pygame.Color(gem.gem.color)
        for x, y, kind in gem.cells():
            left, top = self.geometry.cell_to_topleft((x, y))
            pygame.draw.polygon(self.surface, color, cell_polygon(kind, left, top, size))
        if not gem.valid:
            left, top = self.geometry.cell_to_topleft((gem.x, gem.y))
            outline = pygame.Rect(left, top, gem.width * size, gem.height * size)
            pygame.draw.rect(self.surface, layout.INVALID_OUTLINE_COLOR, outline, 2)

    def _draw_path(self, result: TraceResult) -> None:
        pygame = ensure_pygame()
        if len(result.path) < 2:
            return
        color = pygame.Color(result.mixed_color.hex)
        points = [self.geometry.point_to_pixel(point) for point in result.path]
        pygame.draw.lines(self.surface, color, False, points, layout.PATH_WIDTH)


__all__ = ["GemBoardUI", "cell_polygon", "ensure_pygame"]
