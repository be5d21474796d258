"""Shared fixtures for the engine tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from gem_puzzle.board import Board, GemInstance
from gem_puzzle.catalog import GemCatalog, GemDefinition, load_default_catalog
from gem_puzzle.geometry import Pattern


@pytest.fixture(scope="session")
def catalog() -> GemCatalog:
    return load_default_catalog()


@pytest.fixture
def board() -> Board:
    return Board(width=8, height=10)


@pytest.fixture
def make_gem() -> Callable[..., GemInstance]:
    """Build a gem instance from token rows without going through the catalog."""

    def factory(
        rows: Sequence[str],
        x: int,
        y: int,
        *,
        name: str = "GEM",
        colors: Iterable[str] = (),
        absorbs: bool = False,
        gem_id: Optional[str] = None,
    ) -> GemInstance:
        definition = GemDefinition(
            name=name,
            pattern=Pattern.from_tokens(rows),
            color="#ffffff",
            base_colors=frozenset(colors),
            absorbs=absorbs,
        )
        return GemInstance.place(gem_id or f"{name}_{x}_{y}", definition, x, y)

    return factory
