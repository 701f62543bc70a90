import unittest
from typing import List

from bulmaca.core.constants import Direction
from bulmaca.core.models import GeneratedPuzzle, GeneratedWord
from bulmaca.engine.validator import PuzzleValidator

from sample_bank import unchecked_template

CORNER = unchecked_template("corner", ("...", ".##", ".##"))


def word(word_id, direction, row, col, answer, num, entry_id=None) -> GeneratedWord:
    return GeneratedWord(
        id=word_id,
        direction=direction,
        start_row=row,
        start_col=col,
        answer=answer,
        clue=f"İpucu {answer}",
        num=num,
        word_entry_id=entry_id or answer.lower(),
    )


def puzzle(words: List[GeneratedWord], size: int = 3) -> GeneratedPuzzle:
    return GeneratedPuzzle("corner", size, words, 2.0, 1, 42)


class PuzzleValidatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = PuzzleValidator()

    def test_valid_puzzle_passes(self) -> None:
        result = self.validator.validate(
            puzzle([word("1a", Direction.ACROSS, 0, 0, "KOD", 1), word("1d", Direction.DOWN, 0, 0, "KUŞ", 1)]),
            CORNER,
        )
        self.assertTrue(result.ok)
        self.assertEqual(result.messages, [])

    def test_crossing_conflict(self) -> None:
        result = self.validator.validate(
            puzzle([word("1a", Direction.ACROSS, 0, 0, "KOD", 1), word("1d", Direction.DOWN, 0, 0, "SAZ", 1)])
        )
        self.assertFalse(result.ok)
        self.assertIn("Crossing conflict at (0,0)", result.messages[0])

    def test_duplicate_answer(self) -> None:
        result = self.validator.validate(
            puzzle(
                [
                    word("1a", Direction.ACROSS, 0, 0, "KOD", 1, "a"),
                    word("1d", Direction.DOWN, 0, 0, "KOD", 1, "b"),
                ]
            )
        )
        self.assertFalse(result.ok)
        self.assertIn("Duplicate answer", result.messages[0])

    def test_word_leaving_grid(self) -> None:
        result = self.validator.validate(puzzle([word("1a", Direction.ACROSS, 0, 1, "KOD", 1)]))
        self.assertFalse(result.ok)
        self.assertIn("leaves the grid", result.messages[0])

    def test_word_on_black_cell(self) -> None:
        result = self.validator.validate(puzzle([word("1a", Direction.ACROSS, 1, 0, "KOD", 1)]), CORNER)
        self.assertFalse(result.ok)
        self.assertIn("black cell", result.messages[0])

    def test_word_shorter_than_its_slot(self) -> None:
        result = self.validator.validate(puzzle([word("1a", Direction.ACROSS, 0, 0, "KO", 1)]), CORNER)
        self.assertFalse(result.ok)
        self.assertIn("does not fill its slot", result.messages[0])

    def test_id_must_match_number_and_direction(self) -> None:
        result = self.validator.validate(puzzle([word("2a", Direction.ACROSS, 0, 0, "KOD", 1)]))
        self.assertFalse(result.ok)
        self.assertIn("should be 1a", result.messages[0])

    def test_numbers_follow_reading_order(self) -> None:
        result = self.validator.validate(
            puzzle(
                [
                    word("2a", Direction.ACROSS, 0, 0, "KOD", 2),
                    word("1d", Direction.DOWN, 0, 2, "DUR", 1),
                ]
            )
        )
        self.assertFalse(result.ok)
        self.assertIn("does not follow", result.messages[0])

    def test_start_cell_shares_one_number(self) -> None:
        result = self.validator.validate(
            puzzle([word("1a", Direction.ACROSS, 0, 0, "KOD", 1), word("2d", Direction.DOWN, 0, 0, "KUŞ", 2)])
        )
        self.assertFalse(result.ok)
        self.assertIn("carries numbers 1 and 2", result.messages[0])


if __name__ == "__main__":
    unittest.main()
