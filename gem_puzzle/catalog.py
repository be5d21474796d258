"""Gem definitions, color mixing and the catalog loader."""

from __future__ import annotations

import json
import os
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from .geometry import CellKind, Pattern, PatternError, crop_to_bounding_box


CATALOG_ENV_VAR = "GEM_PUZZLE_CATALOG"
CUSTOM_DIFFICULTY = "CUSTOM"

BASE_COLORS: Tuple[str, ...] = ("BLUE", "RED", "WHITE", "YELLOW")

# Display colors of traced rays, one per mixing-table entry. Gem fill colors
# come from the catalog palette.
RAY_COLORS: Dict[str, str] = {
    "YELLOW": "#f1c40f",
    "RED": "#e74c3c",
    "BLUE": "#3498db",
    "WHITE": "#ecf0f1",
    "PURPLE": "#9b59b6",
    "SKY_BLUE": "#5dade2",
    "GREEN": "#2ecc71",
    "LIGHT_RED": "#ff8a80",
    "ORANGE": "#e67e22",
    "LIGHT_YELLOW": "#ffff8d",
    "LIGHT_PURPLE": "#ba68c8",
    "DARK_GRAY": "#34495e",
    "LIGHT_GREEN": "#81c784",
    "LIGHT_ORANGE": "#ffb74d",
    "GRAY": "#9e9e9e",
    "ABSORBED": "#17202a",
    "NO_COLOR": "#ecf0f1",
    "UNKNOWN": "#cccccc",
}


class CatalogError(ValueError):
    """Raised when catalog data describes an impossible gem or gem set."""


@dataclass(frozen=True)
class MixedColor:
    key: str
    hex: str
    name: str


COLOR_MIXING: Dict[str, MixedColor] = {
    key: MixedColor(key, RAY_COLORS[color], name)
    for key, color, name in (
        ("", "NO_COLOR", "No color"),
        ("BLUE", "BLUE", "Blue"),
        ("RED", "RED", "Red"),
        ("WHITE", "WHITE", "White"),
        ("YELLOW", "YELLOW", "Yellow"),
        ("BLUE,RED", "PURPLE", "Purple"),
        ("BLUE,WHITE", "SKY_BLUE", "Sky blue"),
        ("BLUE,YELLOW", "GREEN", "Green"),
        ("RED,WHITE", "LIGHT_RED", "Light red"),
        ("RED,YELLOW", "ORANGE", "Orange"),
        ("WHITE,YELLOW", "LIGHT_YELLOW", "Light yellow"),
        ("BLUE,RED,WHITE", "LIGHT_PURPLE", "Light purple"),
        ("BLUE,RED,YELLOW", "DARK_GRAY", "Dark gray"),
        ("BLUE,WHITE,YELLOW", "LIGHT_GREEN", "Light green"),
        ("RED,WHITE,YELLOW", "LIGHT_ORANGE", "Light orange"),
        ("BLUE,RED,WHITE,YELLOW", "GRAY", "Gray"),
    )
}

UNKNOWN_MIXTURE = MixedColor("?", RAY_COLORS["UNKNOWN"], "Unknown mixture")
ABSORBED_COLOR = MixedColor("ABSORBED", RAY_COLORS["ABSORBED"], "Absorbed")


def color_key(colors: Iterable[str]) -> str:
    return ",".join(sorted(set(colors)))


def mix_colors(colors: Iterable[str]) -> MixedColor:
    return COLOR_MIXING.get(color_key(colors), UNKNOWN_MIXTURE)


@dataclass(frozen=True)
class PaletteEntry:
    """A gem color: display hex plus the base colors it lends to a ray."""

    key: str
    color: str
    base_colors: FrozenSet[str] = frozenset()
    absorbs: bool = False


@dataclass(frozen=True)
class GemDefinition:
    name: str
    pattern: Pattern
    color: str
    base_colors: FrozenSet[str] = frozenset()
    absorbs: bool = False
    palette_key: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_colors", frozenset(self.base_colors))
        if self.pattern.is_empty():
            raise CatalogError(f"Gem '{self.name}' has an empty pattern.")
        if crop_to_bounding_box(self.pattern) != self.pattern:
            raise CatalogError(f"Gem '{self.name}' pattern is not cropped to its bounding box.")
        kinds = {kind for _, _, kind in self.pattern.filled_cells()}
        if self.absorbs:
            if self.base_colors:
                raise CatalogError(f"Absorbing gem '{self.name}' cannot carry base colors.")
            if kinds != {CellKind.ABSORB}:
                raise CatalogError(f"Absorbing gem '{self.name}' must only use absorbing cells.")
        elif CellKind.ABSORB in kinds:
            raise CatalogError(f"Gem '{self.name}' uses absorbing cells but does not absorb.")


@dataclass(frozen=True)
class RatingTier:
    limit: Optional[int]
    text: str

    def accepts(self, wave_count: int) -> bool:
        return self.limit is None or wave_count <= self.limit


@dataclass
class GemCatalog:
    """Gem definitions plus the difficulty gem sets and rating tiers."""

    palette: Dict[str, PaletteEntry] = field(default_factory=dict)
    gems: Dict[str, GemDefinition] = field(default_factory=dict)
    shapes: Dict[str, Pattern] = field(default_factory=dict)
    gem_sets: Dict[str, List[str]] = field(default_factory=dict)
    ratings: Dict[str, List[RatingTier]] = field(default_factory=dict)

    def get(self, name: str) -> GemDefinition:
        try:
            return self.gems[name]
        except KeyError as exc:
            raise KeyError(f"Unknown gem '{name}'") from exc

    def gem_set(self, difficulty: str) -> List[str]:
        try:
            return list(self.gem_sets[difficulty.upper()])
        except KeyError as exc:
            raise KeyError(f"Unknown difficulty '{difficulty}'") from exc

    @property
    def difficulties(self) -> List[str]:
        return list(self.gem_sets)

    def rate(self, difficulty: str, wave_count: int) -> Optional[str]:
        key = difficulty.upper()
        tiers = self.ratings.get(key)
        if tiers is None and key == CUSTOM_DIFFICULTY:
            tiers = self.ratings.get("HARD")
        for tier in tiers or []:
            if tier.accepts(wave_count):
                return tier.text
        return None

    def with_custom_gems(self, gems: Iterable[GemDefinition]) -> "GemCatalog":
        """Return a copy with ``gems`` registered as the ``CUSTOM`` gem set."""

        custom = list(gems)
        merged = dict(self.gems)
        for gem in custom:
            merged[gem.name] = gem
        gem_sets = dict(self.gem_sets)
        gem_sets[CUSTOM_DIFFICULTY] = [gem.name for gem in custom]
        return GemCatalog(
            palette=dict(self.palette),
            gems=merged,
            shapes=dict(self.shapes),
            gem_sets=gem_sets,
            ratings=dict(self.ratings),
        )

    def build_custom_gem(self, name: str, palette_key: str, pattern: Pattern) -> GemDefinition:
        """Combine a palette color with a shape into a new gem definition.

        Black gems turn every filled cell into an absorbing cell.
        """

        try:
            entry = self.palette[palette_key]
        except KeyError as exc:
            raise CatalogError(f"Unknown palette color '{palette_key}'") from exc
        shape = crop_to_bounding_box(pattern)
        if shape.is_empty():
            raise CatalogError("Custom gems need at least one filled cell.")
        if entry.absorbs:
            shape = Pattern(
                tuple(
                    tuple(CellKind.EMPTY if kind is CellKind.EMPTY else CellKind.ABSORB for kind in row)
                    for row in shape.rows
                )
            )
        return GemDefinition(
            name=name,
            pattern=shape,
            color=entry.color,
            base_colors=entry.base_colors,
            absorbs=entry.absorbs,
            palette_key=entry.key,
        )


CUSTOM_SET_RULES: Tuple[Tuple[str, str, int, Optional[int]], ...] = (
    # (palette key, error key, minimum, maximum)
    ("RED", "exact_one_red", 1, 1),
    ("YELLOW", "exact_one_yellow", 1, 1),
    ("BLUE", "exact_one_blue", 1, 1),
    ("WHITE", "at_least_one_white", 1, None),
    ("WHITE", "max_two_white", 0, 2),
    ("TRANSPARENT", "max_two_transparent", 0, 2),
    ("BLACK", "max_one_black", 0, 1),
)


def validate_custom_set(gems: Iterable[GemDefinition]) -> Optional[str]:
    """Return the key of the first broken custom-set rule, or ``None``."""

    counts = Counter(gem.palette_key for gem in gems)
    for palette_key, error_key, minimum, maximum in CUSTOM_SET_RULES:
        count = counts.get(palette_key, 0)
        if count < minimum or (maximum is not None and count > maximum):
            return error_key
    return None


def default_catalog_path() -> Path:
    return Path(__file__).resolve().parent / "data" / "catalog.json"


def resolve_catalog_path() -> Path:
    """Resolve the catalog file, honouring ``GEM_PUZZLE_CATALOG``."""

    value = os.environ.get(CATALOG_ENV_VAR)
    path = Path(value).expanduser() if value else default_catalog_path()
    if not path.exists():
        raise FileNotFoundError(path)
    return path


class CatalogLoader:
    """Load and validate gem catalogs stored as JSON."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else resolve_catalog_path()

    def load(self) -> GemCatalog:
        if not self.path.exists():
            raise FileNotFoundError(self.path)
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise CatalogError(f"{self.path}: invalid JSON ({exc})") from exc
        return self.parse(data)

    @classmethod
    def parse(cls, data: Mapping) -> GemCatalog:
        catalog = GemCatalog()
        for key, entry in data.get("palette", {}).items():
            base_colors = frozenset(entry.get("base_colors", []))
            unknown = base_colors - set(BASE_COLORS)
            if unknown:
                raise CatalogError(f"Palette '{key}' uses unknown base colors {sorted(unknown)}")
            catalog.palette[key] = PaletteEntry(
                key=key,
                color=str(entry["color"]),
                base_colors=base_colors,
                absorbs=bool(entry.get("absorbs", False)),
            )
        for name, entry in data.get("shapes", {}).items():
            catalog.shapes[name] = cls._parse_pattern(name, entry)
        for name, entry in data.get("gems", {}).items():
            palette_key = entry.get("palette", name)
            palette = catalog.palette.get(palette_key)
            if palette is None:
                raise CatalogError(f"Gem '{name}' references unknown palette '{palette_key}'")
            catalog.gems[name] = GemDefinition(
                name=name,
                pattern=cls._parse_pattern(name, entry.get("pattern")),
                color=palette.color,
                base_colors=palette.base_colors,
                absorbs=palette.absorbs,
                palette_key=palette_key,
            )
        for difficulty, names in data.get("gem_sets", {}).items():
            missing = [gem for gem in names if gem not in catalog.gems]
            if missing:
                raise CatalogError(f"Gem set '{difficulty}' names unknown gems {missing}")
            catalog.gem_sets[str(difficulty).upper()] = list(names)
        for difficulty, tiers in data.get("ratings", {}).items():
            catalog.ratings[str(difficulty).upper()] = [
                RatingTier(limit=None if limit is None else int(limit), text=str(text))
                for limit, text in tiers
            ]
        return catalog

    @staticmethod
    def _parse_pattern(name: str, rows: object) -> Pattern:
        if not isinstance(rows, list) or not all(isinstance(row, str) for row in rows):
            raise CatalogError(f"'{name}' pattern must be a list of token rows")
        try:
            return Pattern.from_tokens(rows)
        except PatternError as exc:
            raise CatalogError(f"'{name}': {exc}") from exc


def load_default_catalog() -> GemCatalog:
    return CatalogLoader().load()
