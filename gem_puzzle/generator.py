"""Randomised construction of the hidden gem layout."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from .board import Board, GemInstance, PaintedGrid, paint_grid
from .catalog import GemCatalog, GemDefinition
from .geometry import is_flippable, orient
from .placement import is_placement_valid
from .tracer import MAX_TRACE_STEPS, emitter_ids, trace

logger = logging.getLogger(__name__)

MAX_LAYOUT_ATTEMPTS = 500
MAX_GEM_ATTEMPTS = 200


@dataclass
class SecretLayout:
    instances: List[GemInstance]
    grid: PaintedGrid
    attempts: int = 1


@dataclass(frozen=True)
class GenerationFailure:
    """Every layout attempt failed.

    ``gem_name`` is the gem that found no room on the last attempt, or ``None``
    when that attempt placed every gem but trapped a ray.
    """

    attempts: int
    gem_name: Optional[str] = None

    def __bool__(self) -> bool:
        return False


GenerationResult = Union[SecretLayout, GenerationFailure]


class SecretLayoutGenerator:
    """Place every required gem at a random legal position and orientation."""

    def __init__(
        self,
        board: Board,
        catalog: GemCatalog,
        *,
        max_layout_attempts: int = MAX_LAYOUT_ATTEMPTS,
        max_gem_attempts: int = MAX_GEM_ATTEMPTS,
        max_trace_steps: int = MAX_TRACE_STEPS,
    ):
        self.board = board
        self.catalog = catalog
        self.max_layout_attempts = max_layout_attempts
        self.max_gem_attempts = max_gem_attempts
        self.max_trace_steps = max_trace_steps

    def generate(self, gem_names: Sequence[str], rng: Optional[random.Random] = None) -> GenerationResult:
        rng = rng or random.Random()
        definitions = [self.catalog.get(name) for name in gem_names]
        failed_gem: Optional[str] = None

        for attempt in range(1, self.max_layout_attempts + 1):
            placed: List[GemInstance] = []
            for definition in definitions:
                instance = self._place_one(definition, placed, rng)
                if instance is None:
                    failed_gem = definition.name
                    logger.debug("Layout attempt %d: no room for %s", attempt, definition.name)
                    break
                placed.append(instance)
            else:
                grid = paint_grid(self.board, placed)
                trapped = self._trapping_emitter(grid)
                if trapped is not None:
                    failed_gem = None
                    logger.debug("Layout attempt %d: ray from %s never leaves the board", attempt, trapped)
                    continue
                logger.info("Placed %d secret gems after %d attempt(s)", len(placed), attempt)
                return SecretLayout(instances=placed, grid=grid, attempts=attempt)

        logger.warning(
            "Failed to place all secret gems after %d attempts (last blocked: %s)",
            self.max_layout_attempts,
            failed_gem,
        )
        return GenerationFailure(attempts=self.max_layout_attempts, gem_name=failed_gem)

    def _trapping_emitter(self, grid: PaintedGrid) -> Optional[str]:
        for emitter_id in emitter_ids(self.board):
            if trace(grid, emitter_id, self.max_trace_steps).undetermined:
                return emitter_id
        return None

    def _place_one(
        self,
        definition: GemDefinition,
        placed: List[GemInstance],
        rng: random.Random,
    ) -> Optional[GemInstance]:
        flippable = is_flippable(definition.pattern)
        for _ in range(self.max_gem_attempts):
            rotation = rng.randrange(4)
            flipped = flippable and rng.random() < 0.5
            pattern = orient(definition.pattern, rotation, flipped)
            if pattern.width > self.board.width or pattern.height > self.board.height:
                continue
            candidate = GemInstance(
                id=f"secret_{definition.name}_{len(placed)}",
                gem=definition,
                x=rng.randrange(self.board.width - pattern.width + 1),
                y=rng.randrange(self.board.height - pattern.height + 1),
                pattern=pattern,
                rotation=rotation,
                flipped=flipped,
            )
            if is_placement_valid(self.board, candidate, placed):
                return candidate
        return None
