"""Deterministic rule validation for generated puzzles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from ..core.exceptions import ValidationError
from ..core.constants import Direction
from ..core.models import GeneratedPuzzle, GeneratedWord, GridTemplate
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


@dataclass
class ValidationResult:
    ok: bool
    messages: List[str]


class PuzzleValidator:
    """Runs deterministic validation over a finished puzzle."""

    def validate(
        self,
        puzzle: GeneratedPuzzle,
        template: Optional[GridTemplate] = None,
    ) -> ValidationResult:
        messages: List[str] = []
        try:
            self._check_bounds(puzzle, template)
            self._check_crossings(puzzle)
            self._check_no_duplicate_words(puzzle)
            self._check_numbering(puzzle)
        except ValidationError as exc:
            messages.append(str(exc))
            LOGGER.error("Validation failed: %s", exc)
            return ValidationResult(ok=False, messages=messages)
        return ValidationResult(ok=True, messages=[])

    def _check_bounds(self, puzzle: GeneratedPuzzle, template: Optional[GridTemplate]) -> None:
        size = puzzle.grid_size
        for word in puzzle.words:
            for r, c in word.cells():
                if not (0 <= r < size and 0 <= c < size):
                    raise ValidationError(f"Word {word.id} leaves the grid at ({r},{c})")
                if template is not None and not template.cells[r][c]:
                    raise ValidationError(f"Word {word.id} covers black cell ({r},{c})")
            if template is not None:
                self._check_run_length(word, template)

    @staticmethod
    def _check_run_length(word: GeneratedWord, template: GridTemplate) -> None:
        # The word must span the whole run of letter cells it sits in
        dr, dc = (0, 1) if word.direction == Direction.ACROSS else (1, 0)
        before = (word.start_row - dr, word.start_col - dc)
        end_r, end_c = word.cells()[-1]
        after = (end_r + dr, end_c + dc)
        for r, c in (before, after):
            if 0 <= r < template.size and 0 <= c < template.size and template.cells[r][c]:
                raise ValidationError(
                    f"Word {word.id} ({len(word.answer)} letters) does not fill its slot"
                )

    @staticmethod
    def _check_crossings(puzzle: GeneratedPuzzle) -> None:
        letters: Dict[Tuple[int, int], Tuple[str, str]] = {}
        for word in puzzle.words:
            for (r, c), letter in zip(word.cells(), word.answer):
                seen = letters.get((r, c))
                if seen is not None and seen[0] != letter:
                    raise ValidationError(
                        f"Crossing conflict at ({r},{c}): {seen[1]} has '{seen[0]}', "
                        f"{word.id} has '{letter}'"
                    )
                letters[(r, c)] = (letter, word.id)

    @staticmethod
    def _check_no_duplicate_words(puzzle: GeneratedPuzzle) -> None:
        seen_ids: Set[str] = set()
        seen_answers: Set[str] = set()
        for word in puzzle.words:
            if word.word_entry_id in seen_ids:
                raise ValidationError(f"Word bank entry {word.word_entry_id} used twice")
            if word.answer in seen_answers:
                raise ValidationError(f"Duplicate answer '{word.answer}'")
            seen_ids.add(word.word_entry_id)
            seen_answers.add(word.answer)

    @staticmethod
    def _check_numbering(puzzle: GeneratedPuzzle) -> None:
        numbers: Dict[Tuple[int, int], int] = {}
        for word in puzzle.words:
            start = (word.start_row, word.start_col)
            number = numbers.setdefault(start, word.num)
            if number != word.num:
                raise ValidationError(f"Cell {start} carries numbers {number} and {word.num}")
            expected_id = f"{word.num}{word.direction.suffix}"
            if word.id != expected_id:
                raise ValidationError(f"Word id {word.id} should be {expected_id}")

        ordered = sorted(numbers.items())
        for (prev_cell, prev_num), (cell, num) in zip(ordered, ordered[1:]):
            if num <= prev_num:
                raise ValidationError(
                    f"Clue number {num} at {cell} does not follow {prev_num} at {prev_cell}"
                )


__all__ = ["PuzzleValidator", "ValidationResult"]
