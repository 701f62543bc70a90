"""Pretty-print helpers for generated puzzles."""

from __future__ import annotations

import sys
from collections import Counter
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from ..core.constants import Direction

if TYPE_CHECKING:
    from ..core.models import GeneratedPuzzle, GridTemplate
    from ..data.word_index import WordIndex


BLACK = "#"
UNFILLED = "."


def puzzle_letters(puzzle: GeneratedPuzzle) -> Dict[Tuple[int, int], str]:
    letters: Dict[Tuple[int, int], str] = {}
    for word in puzzle.words:
        for cell, letter in zip(word.cells(), word.answer):
            letters[cell] = letter
    return letters


def format_puzzle(puzzle: GeneratedPuzzle, template: Optional[GridTemplate] = None) -> str:
    """Render the filled grid with row and column headers.

    Without a template, any cell no word covers is drawn as a black square.
    """

    size = puzzle.grid_size
    letters = puzzle_letters(puzzle)
    header_cells = [f"{c:>2}" for c in range(size)]
    lines = ["    " + " ".join(header_cells)]
    lines.append("    " + "-" * (3 * size - 1))
    for r in range(size):
        row_cells: List[str] = []
        for c in range(size):
            if (r, c) in letters:
                row_cells.append(letters[(r, c)])
            elif template is not None and template.cells[r][c]:
                row_cells.append(UNFILLED)
            else:
                row_cells.append(BLACK)
        row_render = " ".join(f"{symbol:>2}" for symbol in row_cells)
        lines.append(f"{r:>2} | {row_render}")
    return "\n".join(lines)


def format_clues(puzzle: GeneratedPuzzle) -> str:
    lines: List[str] = []
    for direction, title in ((Direction.ACROSS, "Soldan sağa"), (Direction.DOWN, "Yukarıdan aşağıya")):
        lines.append(f"{title}:")
        for word in puzzle.words:
            if word.direction == direction:
                lines.append(f"  {word.num:>2}. {word.clue} ({len(word.answer)})")
    return "\n".join(lines)


def print_puzzle_stats(
    puzzle: GeneratedPuzzle,
    template: Optional[GridTemplate] = None,
    word_index: Optional[WordIndex] = None,
    *,
    stream=None,
) -> None:
    """Print grid, clues and summary stats for a generated puzzle."""

    stream = stream or sys.stdout
    print(format_puzzle(puzzle, template), file=stream)
    print(file=stream)
    print(format_clues(puzzle), file=stream)

    # --- Grid geometry ---
    size = puzzle.grid_size
    total_cells = size * size
    letter_cells = len(puzzle_letters(puzzle))

    print(file=stream)
    print("--- Grid ---", file=stream)
    print(f"  Template:      {puzzle.template_id}", file=stream)
    print(f"  Size:          {size} x {size} ({total_cells} cells)", file=stream)
    print(f"  Letters:       {letter_cells} ({letter_cells / total_cells * 100:.0f}%)", file=stream)

    # --- Words ---
    lengths = [len(word.answer) for word in puzzle.words]
    across = sum(1 for word in puzzle.words if word.direction == Direction.ACROSS)
    print(file=stream)
    print("--- Words ---", file=stream)
    print(f"  Total words:   {len(lengths)} ({across} across, {len(lengths) - across} down)", file=stream)
    if lengths:
        dist_parts = [f"{length}:{count}" for length, count in sorted(Counter(lengths).items())]
        print(f"  Length range:  {min(lengths)}-{max(lengths)} (avg {sum(lengths) / len(lengths):.1f})", file=stream)
        print(f"  Distribution:  {' '.join(dist_parts)}", file=stream)

    # --- Difficulty ---
    print(file=stream)
    print("--- Difficulty ---", file=stream)
    print(f"  Puzzle score:  {puzzle.difficulty_score:.1f}", file=stream)
    if word_index is not None:
        scores = [
            entry.difficulty_score
            for entry in (word_index.get(word.word_entry_id) for word in puzzle.words)
            if entry is not None
        ]
        if scores:
            print(f"  Avg word score: {sum(scores) / len(scores):.1f} (max {max(scores):.1f})", file=stream)

    print(file=stream)
    print(f"Level: {puzzle.level}  Seed: {puzzle.seed}", file=stream)


__all__ = ["format_clues", "format_puzzle", "print_puzzle_stats", "puzzle_letters"]
