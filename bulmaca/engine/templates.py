"""Grid template catalog and registry.

Templates are written as rows of ``.`` (letter cell) and ``#`` (black cell)
and parsed once at import time. Every catalog template has 180 degree
rotational symmetry; layouts with ragged rows or broken symmetry are kept in
the registry for inspection but flagged invalid and never offered to the
generator.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from ..core.constants import Difficulty, SymmetryType
from ..core.exceptions import TemplateError
from ..core.models import GridTemplate
from ..utils.logger import get_logger
from .slots import scan_spans

LOGGER = get_logger(__name__)

TemplateRows = Tuple[str, ...]

# -- 7x7 (easy) --
TEMPLATES_7X7: Tuple[TemplateRows, ...] = (
    # Classic
    (
        "...#...",
        ".#.#.#.",
        ".......",
        "##.#.##",
        ".......",
        ".#.#.#.",
        "...#...",
    ),
    # Open center
    (
        "...#...",
        ".#...#.",
        "...#...",
        "#.###.#",
        "...#...",
        ".#...#.",
        "...#...",
    ),
    # Diamond
    (
        "...#...",
        "..#.#..",
        ".......",
        "#.....#",
        ".......",
        "..#.#..",
        "...#...",
    ),
    # Steps
    (
        "..##...",
        "...#.#.",
        "#......",
        "##...##",
        "......#",
        ".#.#...",
        "...##..",
    ),
    # Corridor
    (
        "...#...",
        ".#...#.",
        ".......",
        "#..#..#",
        ".......",
        ".#...#.",
        "...#...",
    ),
)

# -- 9x9 (medium): mostly 3-4 letter slots --
TEMPLATES_9X9: Tuple[TemplateRows, ...] = (
    (
        "....#....",
        ".#.#..#.#",
        ".........",
        ".#.#.#.#.",
        "#...#...#",
        ".#.#.#.#.",
        ".........",
        "#.#..#.#.",
        "....#....",
    ),
    (
        "...#.....",
        ".#...#.#.",
        "...#.....",
        "#.#...#.#",
        "....#....",
        "#.#...#.#",
        ".....#...",
        ".#.#...#.",
        ".....#...",
    ),
    # Staircase
    (
        "....#....",
        "..#...#..",
        ".#...#...",
        "#...#...#",
        "...###...",
        "#...#...#",
        "...#...#.",
        "..#...#..",
        "....#....",
    ),
)

# -- 11x11 (hard): mostly 3-5 letter slots --
TEMPLATES_11X11: Tuple[TemplateRows, ...] = (
    (
        "....#....#.",
        ".#.#..#.#..",
        ".....#.....",
        ".#.#...#.#.",
        "#...#.#...#",
        "..#.....#..",
        "#...#.#...#",
        ".#.#...#.#.",
        ".....#.....",
        "..#.#..#.#.",
        ".#....#....",
    ),
    (
        ".....#.....",
        ".#.#...#.#.",
        "....#.#....",
        ".#.#...#.#.",
        ".....#.....",
        "#.#.###.#.#",
        ".....#.....",
        ".#.#...#.#.",
        "....#.#....",
        ".#.#...#.#.",
        ".....#.....",
    ),
)

# -- 13x13 (hard): mostly 3-5 letter slots, a few 6s --
TEMPLATES_13X13: Tuple[TemplateRows, ...] = (
    (
        "...#.....#...",
        ".#.#.#.#.#.#.",
        "......#......",
        ".#.#.#.#.#.#.",
        "...#.....#...",
        "#.#.#.#.#.#.#",
        "....#...#....",
        "#.#.#.#.#.#.#",
        "...#.....#...",
        ".#.#.#.#.#.#.",
        "......#......",
        ".#.#.#.#.#.#.",
        "...#.....#...",
    ),
)


def parse_rows(rows: Sequence[str]) -> Tuple[Tuple[bool, ...], ...]:
    """Convert ``.``/``#`` rows into a boolean matrix (``True`` = letter cell)."""

    return tuple(tuple(char == "." for char in row.strip()) for row in rows)


def check_cells(cells: Sequence[Sequence[bool]], size: int) -> List[str]:
    """Return the problems that make ``cells`` unusable as a ``size`` template."""

    problems: List[str] = []
    if len(cells) != size:
        problems.append(f"expected {size} rows, found {len(cells)}")
    for r, row in enumerate(cells):
        if len(row) != size:
            problems.append(f"row {r} has {len(row)} cells, expected {size}")
    if problems:
        return problems

    for r in range(size):
        for c in range(size):
            if cells[r][c] != cells[size - 1 - r][size - 1 - c]:
                problems.append(f"cell ({r},{c}) breaks 180 degree symmetry")
                return problems

    if not scan_spans(cells):
        problems.append("template has no slots")
    return problems


def build_template(
    template_id: str,
    cells: Sequence[Sequence[bool]],
    size: int,
    tier: Difficulty,
) -> GridTemplate:
    """Validate ``cells`` and precompute slot statistics."""

    matrix = tuple(tuple(bool(cell) for cell in row) for row in cells)
    problems = check_cells(matrix, size)
    if problems:
        LOGGER.warning("Template %s is invalid: %s", template_id, "; ".join(problems))
        return GridTemplate(
            id=template_id,
            size=size,
            cells=matrix,
            symmetry=SymmetryType.NONE,
            slot_count=0,
            avg_slot_length=0.0,
            difficulty_tier=tier,
            is_valid=False,
            problems=tuple(problems),
        )

    spans = scan_spans(matrix)
    avg_length = sum(span.length for span in spans) / len(spans)
    return GridTemplate(
        id=template_id,
        size=size,
        cells=matrix,
        symmetry=SymmetryType.ROTATIONAL_180,
        slot_count=len(spans),
        avg_slot_length=round(avg_length, 1),
        difficulty_tier=tier,
    )


def build_templates(
    visuals: Iterable[Sequence[str]],
    size: int,
    tier: Difficulty,
) -> List[GridTemplate]:
    """Build templates named ``{size}x{size}_{NN}`` from ``.``/``#`` rows."""

    return [
        build_template(f"{size}x{size}_{i:02d}", parse_rows(rows), size, tier)
        for i, rows in enumerate(visuals, start=1)
    ]


class TemplateRegistry:
    """Read-only catalog of grid templates, shareable across threads."""

    def __init__(self, templates: Iterable[GridTemplate]) -> None:
        self._templates: Tuple[GridTemplate, ...] = tuple(templates)
        self._by_id: Dict[str, GridTemplate] = {t.id: t for t in self._templates}

    def __len__(self) -> int:
        return len(self._templates)

    def all(self) -> List[GridTemplate]:
        """Valid templates only."""
        return [t for t in self._templates if t.is_valid]

    def invalid(self) -> List[GridTemplate]:
        return [t for t in self._templates if not t.is_valid]

    def by_size(self, size: int) -> List[GridTemplate]:
        return [t for t in self.all() if t.size == size]

    def by_tier(self, tier: Difficulty) -> List[GridTemplate]:
        return [t for t in self.all() if t.difficulty_tier == tier]

    def sizes(self) -> List[int]:
        return sorted({t.size for t in self.all()})

    def get(self, template_id: str) -> GridTemplate:
        try:
            return self._by_id[template_id]
        except KeyError:
            raise TemplateError(f"Unknown template: {template_id}") from None

    def candidate_groups(
        self, size: int, tier: Difficulty
    ) -> Tuple[List[GridTemplate], List[GridTemplate], List[GridTemplate]]:
        """Valid templates split into target size, same tier, and the rest."""

        sized = self.by_size(size)
        tiered = [t for t in self.by_tier(tier) if t not in sized]
        rest = [t for t in self.all() if t not in sized and t not in tiered]
        return sized, tiered, rest

    def candidates(self, size: int, tier: Difficulty) -> List[GridTemplate]:
        sized, tiered, rest = self.candidate_groups(size, tier)
        return sized + tiered + rest


DEFAULT_REGISTRY = TemplateRegistry(
    build_templates(TEMPLATES_7X7, 7, Difficulty.EASY)
    + build_templates(TEMPLATES_9X9, 9, Difficulty.MEDIUM)
    + build_templates(TEMPLATES_11X11, 11, Difficulty.HARD)
    + build_templates(TEMPLATES_13X13, 13, Difficulty.HARD)
)


def default_registry() -> TemplateRegistry:
    """The built-in catalog."""

    return DEFAULT_REGISTRY


__all__ = [
    "DEFAULT_REGISTRY",
    "TemplateRegistry",
    "build_template",
    "build_templates",
    "check_cells",
    "default_registry",
    "parse_rows",
]
