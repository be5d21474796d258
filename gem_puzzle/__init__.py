"""Gem Puzzle package."""

from .board import Board, GemInstance, PaintedGrid, paint_grid
from .catalog import CatalogLoader, GemCatalog, GemDefinition
from .game import PuzzleSession
from .generator import GenerationFailure, SecretLayout, SecretLayoutGenerator
from .tracer import TraceResult, all_emitters_match, trace

__all__ = [
    "Board",
    "CatalogLoader",
    "GemCatalog",
    "GemDefinition",
    "GemInstance",
    "GenerationFailure",
    "PaintedGrid",
    "PuzzleSession",
    "SecretLayout",
    "SecretLayoutGenerator",
    "TraceResult",
    "all_emitters_match",
    "paint_grid",
    "trace",
]
