"""Headless puzzle session: secret layout, player guesses and wave log."""

from __future__ import annotations

import itertools
import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .board import Board, GemInstance, PaintedGrid, paint_grid
from .catalog import GemCatalog
from .generator import GenerationFailure, GenerationResult, SecretLayoutGenerator
from .geometry import is_flippable, orient
from .placement import is_placement_valid
from .tracer import MAX_TRACE_STEPS, TraceResult, all_emitters_match, trace

logger = logging.getLogger(__name__)


class GameStatus(Enum):
    NOT_STARTED = "not_started"
    PLAYING = "playing"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class WaveLogEntry:
    """One fired wave, traced on the hidden layout and on the player's guess."""

    emitter_id: str
    result: TraceResult
    player_result: TraceResult


@dataclass(frozen=True)
class SolutionReport:
    won: bool
    wave_count: int
    identical: bool = False
    rating: Optional[str] = None


@dataclass
class PuzzleSession:
    """Game manager tying the generator, validator and tracer together."""

    catalog: GemCatalog
    difficulty: str
    board: Board = field(default_factory=Board)
    max_steps: int = MAX_TRACE_STEPS
    generator: Optional[SecretLayoutGenerator] = None

    def __post_init__(self) -> None:
        self.difficulty = self.difficulty.upper()
        self.gem_names: List[str] = self.catalog.gem_set(self.difficulty)
        if self.generator is None:
            self.generator = SecretLayoutGenerator(
                self.board, self.catalog, max_trace_steps=self.max_steps
            )
        self.status = GameStatus.NOT_STARTED
        self.secret_gems: List[GemInstance] = []
        self.secret_grid: PaintedGrid = paint_grid(self.board, [])
        self.player_gems: List[GemInstance] = []
        self.log: List[WaveLogEntry] = []
        self.wave_count = 0
        self._ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Lifecycle
    def start(self, rng: Optional[random.Random] = None) -> GenerationResult:
        outcome = self.generator.generate(self.gem_names, rng)
        if isinstance(outcome, GenerationFailure):
            logger.warning("Could not start %s puzzle: %s", self.difficulty, outcome)
            self.status = GameStatus.NOT_STARTED
            return outcome
        self.secret_gems = outcome.instances
        self.secret_grid = outcome.grid
        self.player_gems = []
        self.log = []
        self.wave_count = 0
        self.status = GameStatus.PLAYING
        return outcome

    def give_up(self) -> SolutionReport:
        self.status = GameStatus.GAME_OVER
        return SolutionReport(won=False, wave_count=self.wave_count)

    # ------------------------------------------------------------------
    # Player gems
    def player_grid(self) -> PaintedGrid:
        return paint_grid(self.board, self.player_gems)

    def find_player_gem(self, gem_id: str) -> GemInstance:
        for gem in self.player_gems:
            if gem.id == gem_id:
                return gem
        raise KeyError(f"No player gem with id '{gem_id}'")

    def remaining_gems(self) -> Dict[str, int]:
        remaining: Dict[str, int] = {}
        for name in self.gem_names:
            remaining[name] = remaining.get(name, 0) + 1
        for gem in self.player_gems:
            if gem.name in remaining:
                remaining[gem.name] -= 1
        return {name: count for name, count in remaining.items() if count > 0}

    def add_player_gem(self, name: str, x: int, y: int) -> GemInstance:
        if name not in self.remaining_gems():
            raise ValueError(f"No '{name}' gem left to place")
        definition = self.catalog.get(name)
        x, y = self.board.clamp_anchor(x, y, definition.pattern)
        gem = GemInstance.place(f"player_{next(self._ids)}", definition, x, y)
        self.player_gems.append(gem)
        self._revalidate()
        return gem

    def move_player_gem(self, gem_id: str, x: int, y: int) -> GemInstance:
        gem = self.find_player_gem(gem_id)
        gem.x, gem.y = self.board.clamp_anchor(x, y, gem.pattern)
        self._revalidate()
        return gem

    def rotate_player_gem(self, gem_id: str) -> GemInstance:
        """Turn a gem clockwise about its centre, keeping it on the board."""

        gem = self.find_player_gem(gem_id)
        center_x = gem.x + gem.width / 2
        center_y = gem.y + gem.height / 2
        gem.rotation = (gem.rotation + 1) % 4
        gem.pattern = orient(gem.gem.pattern, gem.rotation, gem.flipped)
        x = math.floor(center_x - gem.width / 2 + 0.5)
        y = math.floor(center_y - gem.height / 2 + 0.5)
        gem.x, gem.y = self.board.clamp_anchor(x, y, gem.pattern)
        self._revalidate()
        return gem

    def flip_player_gem(self, gem_id: str) -> GemInstance:
        gem = self.find_player_gem(gem_id)
        if not is_flippable(gem.gem.pattern):
            return gem
        gem.flipped = not gem.flipped
        gem.pattern = orient(gem.gem.pattern, gem.rotation, gem.flipped)
        gem.x, gem.y = self.board.clamp_anchor(gem.x, gem.y, gem.pattern)
        self._revalidate()
        return gem

    def remove_player_gem(self, gem_id: str) -> None:
        gem = self.find_player_gem(gem_id)
        self.player_gems.remove(gem)
        self._revalidate()

    def can_place(self, candidate: GemInstance) -> bool:
        return is_placement_valid(self.board, candidate, self.player_gems)

    def _revalidate(self) -> None:
        for gem in self.player_gems:
            gem.valid = is_placement_valid(self.board, gem, self.player_gems)

    # ------------------------------------------------------------------
    # Waves and solution
    def send_wave(self, emitter_id: str) -> WaveLogEntry:
        if self.status is not GameStatus.PLAYING:
            raise RuntimeError("Waves can only be sent while a puzzle is being played")
        result = trace(self.secret_grid, emitter_id, self.max_steps)
        player_result = trace(self.player_grid(), emitter_id, self.max_steps)
        self.wave_count += 1
        entry = WaveLogEntry(emitter_id=result.emitter_id, result=result, player_result=player_result)
        self.log.append(entry)
        return entry

    def solution_ready(self) -> bool:
        return (
            len(self.player_gems) == len(self.gem_names)
            and all(gem.valid for gem in self.player_gems)
        )

    def check_solution(self) -> SolutionReport:
        if self.status is not GameStatus.PLAYING:
            raise RuntimeError("Solutions can only be checked while a puzzle is being played")
        if not self.solution_ready():
            raise RuntimeError("Place every gem in a valid position before checking the solution")
        won = all_emitters_match(self.secret_grid, self.player_grid(), self.max_steps)
        self.status = GameStatus.GAME_OVER
        if not won:
            return SolutionReport(won=False, wave_count=self.wave_count)
        identical = {gem.layout_key() for gem in self.secret_gems} == {
            gem.layout_key() for gem in self.player_gems
        }
        return SolutionReport(
            won=True,
            wave_count=self.wave_count,
            identical=identical,
            rating=self.catalog.rate(self.difficulty, self.wave_count),
        )
