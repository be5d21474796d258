"""Simple command line demo for the gem puzzle engine."""

from __future__ import annotations

import argparse
import logging
import random
from pathlib import Path
from typing import List, Optional

from .board import Board
from .catalog import CatalogError, CatalogLoader
from .generator import GenerationFailure, SecretLayoutGenerator
from .tracer import trace_all


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Gem puzzle demo")
    parser.add_argument("--difficulty", default="TRAINING", help="Gem set to place.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible layout.")
    parser.add_argument("--catalog", type=Path, default=None, help="Path to a catalog JSON file.")
    parser.add_argument("--width", type=int, default=8)
    parser.add_argument("--height", type=int, default=10)
    parser.add_argument("--list-difficulties", action="store_true", help="List gem sets and exit.")
    parser.add_argument("--reveal", action="store_true", help="Print the secret layout.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        catalog = CatalogLoader(args.catalog).load()
    except (FileNotFoundError, CatalogError) as exc:
        print(f"Could not load catalog: {exc}")
        return 1

    if args.list_difficulties:
        print("Available difficulties:")
        for difficulty in catalog.difficulties:
            print(f"  {difficulty}: {', '.join(catalog.gem_set(difficulty))}")
        return 0

    try:
        gem_names = catalog.gem_set(args.difficulty)
    except KeyError:
        print(f"Unknown difficulty '{args.difficulty}'. Use --list-difficulties.")
        return 1

    board = Board(width=args.width, height=args.height)
    generator = SecretLayoutGenerator(board, catalog)
    layout = generator.generate(gem_names, random.Random(args.seed))
    if isinstance(layout, GenerationFailure):
        print(f"Failed to place all secret gems after {layout.attempts} attempts.")
        return 1

    print("=== Gem Puzzle Demo ===")
    print(f"Difficulty: {args.difficulty.upper()} on a {board.width}x{board.height} board")
    if args.reveal:
        for gem in layout.instances:
            print(f"  {gem.name} at ({gem.x}, {gem.y}) rotation={gem.rotation * 90} flipped={gem.flipped}")
        for row in layout.grid.to_tokens():
            print(f"  {row}")
    print("Emitter results:")
    for result in trace_all(layout.grid):
        print(f"  {result.emitter_id:>3} -> {result.exit_id:<8} {result.mixed_color.name}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
