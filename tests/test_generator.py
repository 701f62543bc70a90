import unittest
from unittest.mock import patch

from bulmaca.core.constants import Difficulty, Direction, SolverBackend
from bulmaca.core.exceptions import EngineNotInitializedError
from bulmaca.core.models import GenerateOptions, GeneratedPuzzle, GeneratedWord
from bulmaca.data.word_index import build_word_index
from bulmaca.engine.generator import (CrosswordGenerator, GenerationStage, GeneratorConfig,
                                      generate_puzzle, to_level_data, widen_band)
from bulmaca.engine.templates import TemplateRegistry, default_registry
from bulmaca.engine.validator import ValidationResult
from bulmaca.utils.seeded_random import SeededRandom

from sample_bank import ring_bank, ring_registry, seven_by_seven_bank


class GeneratorScenarioTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.index = build_word_index(seven_by_seven_bank())

    def generate(self, **kwargs) -> GeneratedPuzzle:
        puzzle = CrosswordGenerator(self.index).generate(GenerateOptions(**kwargs))
        self.assertIsNotNone(puzzle)
        assert puzzle is not None
        return puzzle

    def test_level_one_fills_a_seven_by_seven_grid(self) -> None:
        puzzle = self.generate(level=1, seed=42)
        self.assertEqual(puzzle.grid_size, 7)
        self.assertTrue(puzzle.template_id.startswith("7x7_"))
        self.assertEqual(puzzle.level, 1)
        self.assertEqual(puzzle.seed, 42)
        self.assertGreaterEqual(puzzle.difficulty_score, 1.0)
        self.assertLessEqual(puzzle.difficulty_score, 10.0)

        template = default_registry().get(puzzle.template_id)
        self.assertEqual(len(puzzle.words), template.slot_count)

        letters = {}
        for word in puzzle.words:
            for cell, letter in zip(word.cells(), word.answer):
                self.assertTrue(template.cells[cell[0]][cell[1]])
                self.assertEqual(letters.setdefault(cell, letter), letter)
        answers = [w.answer for w in puzzle.words]
        self.assertEqual(len(answers), len(set(answers)))

    def test_same_seed_same_puzzle(self) -> None:
        first = self.generate(level=1, seed=42)
        second = self.generate(level=1, seed=42)
        self.assertEqual(first.template_id, second.template_id)
        self.assertEqual([w.answer for w in first.words], [w.answer for w in second.words])
        self.assertEqual(first.to_dict(), second.to_dict())

    def test_different_seed_different_puzzle(self) -> None:
        first = self.generate(level=1, seed=42)
        other = self.generate(level=1, seed=43)
        self.assertNotEqual(
            (first.template_id, [w.answer for w in first.words]),
            (other.template_id, [w.answer for w in other.words]),
        )

    def test_excluding_every_three_letter_word_yields_none(self) -> None:
        excluded = frozenset(e.id for e in self.index.iter_length(3))
        generator = CrosswordGenerator(self.index)
        puzzle = generator.generate(GenerateOptions(level=1, seed=42, exclude_word_ids=excluded))
        self.assertIsNone(puzzle)

        stages = [step.stage for step in generator.last_trace]
        self.assertEqual(stages[-1], GenerationStage.EXHAUSTED)
        inits = [step for step in generator.last_trace if step.stage == GenerationStage.INIT_DOMAINS]
        self.assertGreaterEqual(len(inits), 20)
        self.assertEqual(len(inits) % 4, 0)
        self.assertEqual([step.band for step in inits[:4]], [(1.0, 6.0), (1.0, 8.0), None, None])

    def test_missing_length_is_rejected_before_solving(self) -> None:
        registry = TemplateRegistry([default_registry().get("9x9_01")])
        generator = CrosswordGenerator(self.index, registry)
        self.assertIsNone(generator.generate(GenerateOptions(level=1, seed=1)))
        stages = [step.stage for step in generator.last_trace]
        self.assertNotIn(GenerationStage.INIT_DOMAINS, stages)
        self.assertIn(GenerationStage.NEXT_TEMPLATE, stages)
        self.assertIn("no words", generator.last_trace[0].detail)
        self.assertEqual(generator.last_trace[0].template_id, "9x9_01")

    def test_length_coverage_uses_the_given_index(self) -> None:
        generator = CrosswordGenerator()
        registry = default_registry()
        self.assertTrue(generator._has_words_for(registry.get("7x7_01"), self.index))
        self.assertFalse(generator._has_words_for(registry.get("9x9_01"), self.index))

    def test_level_one_candidates_start_with_target_size(self) -> None:
        generator = CrosswordGenerator(self.index)
        candidates = generator._template_candidates(7, Difficulty.EASY, SeededRandom(1))
        self.assertEqual(len(candidates), 8)
        self.assertEqual([t.size for t in candidates[:5]], [7] * 5)
        self.assertTrue(all(t.is_valid for t in candidates))


class GeneratorBehaviourTests(unittest.TestCase):
    def setUp(self) -> None:
        self.index = build_word_index(ring_bank())

    def test_uninitialized_engine_raises(self) -> None:
        with self.assertRaises(EngineNotInitializedError):
            CrosswordGenerator().generate(GenerateOptions(level=1, seed=1))
        with self.assertRaises(EngineNotInitializedError):
            generate_puzzle(None, GenerateOptions(level=1, seed=1))

    def test_initialize_builds_index(self) -> None:
        generator = CrosswordGenerator(registry=ring_registry())
        self.assertFalse(generator.is_initialized)
        index = generator.initialize(ring_bank())
        self.assertTrue(generator.is_initialized)
        self.assertEqual(len(index), 45)
        self.assertIsNotNone(generator.generate(GenerateOptions(level=1, seed=7)))

    def test_numbering_follows_reading_order(self) -> None:
        puzzle = generate_puzzle(self.index, GenerateOptions(level=1, seed=3), ring_registry())
        assert puzzle is not None
        self.assertEqual(
            [w.id for w in puzzle.words],
            ["1a", "1d", "2d", "3a", "3d", "4d", "5a", "6a",
             "7a", "7d", "8d", "9a", "9d", "10d", "11a", "12a"],
        )
        starts = {(w.start_row, w.start_col): w.num for w in puzzle.words}
        self.assertEqual(starts[(0, 0)], 1)
        self.assertEqual(starts[(6, 4)], 12)
        self.assertEqual(puzzle.words[0].direction, Direction.ACROSS)

    def test_exclusions_are_respected(self) -> None:
        excluded = frozenset(e.id for e in self.index.all if e.answer[1] == "A")
        puzzle = generate_puzzle(
            self.index,
            GenerateOptions(level=1, seed=11, exclude_word_ids=excluded),
            ring_registry(),
        )
        assert puzzle is not None
        self.assertFalse({w.word_entry_id for w in puzzle.words} & excluded)

    def test_failed_validation_widens_then_gives_up(self) -> None:
        generator = CrosswordGenerator(self.index, ring_registry())
        failing = ValidationResult(ok=False, messages=["forced"])
        with patch.object(generator.validator, "validate", return_value=failing):
            self.assertIsNone(generator.generate(GenerateOptions(level=1, seed=2)))
        solves = [s for s in generator.last_trace if s.stage == GenerationStage.SOLVE]
        self.assertEqual(len(solves), 4)

    def test_cpsat_backend(self) -> None:
        config = GeneratorConfig(backend=SolverBackend.CPSAT, solve_time_ms=10000)
        puzzle = generate_puzzle(self.index, GenerateOptions(level=1, seed=5), ring_registry(), config)
        assert puzzle is not None
        self.assertEqual(len(puzzle.words), 16)
        self.assertEqual(len({w.answer for w in puzzle.words}), 16)

    def test_attempt_limits_by_size(self) -> None:
        config = GeneratorConfig()
        self.assertEqual(config.attempt_limit(7), 2000)
        self.assertEqual(config.attempt_limit(13), 12000)
        self.assertEqual(config.attempt_limit(5), 800)


class WidenBandTests(unittest.TestCase):
    def test_widen_and_clamp(self) -> None:
        self.assertEqual(widen_band((1.0, 6.0), 2.0), (1.0, 8.0))
        self.assertEqual(widen_band((4.0, 5.0), 2.0), (2.0, 7.0))

    def test_full_range_becomes_unrestricted(self) -> None:
        self.assertIsNone(widen_band((1.0, 8.0), 2.0))
        self.assertIsNone(widen_band(None, 2.0))


class LevelDataTests(unittest.TestCase):
    def make_puzzle(self, score: float, level: int) -> GeneratedPuzzle:
        words = [
            GeneratedWord("1a", Direction.ACROSS, 0, 0, "KOD", "Program metni", 1, "w1"),
            GeneratedWord("1d", Direction.DOWN, 0, 0, "KUŞ", "Kanatlı", 1, "w2"),
        ]
        return GeneratedPuzzle("corner", 3, words, score, level, 99)

    def test_labels_and_titles(self) -> None:
        cases = [
            (3.0, 1, "Kolay", "Isınma"),
            (4.0, 5, "Kolay", "Başlangıç"),
            (5.0, 7, "Orta", "Zihin Jimnastiği"),
            (8.0, 25, "Zor", "Kelime Üstadı"),
        ]
        for score, level, label, title in cases:
            with self.subTest(score=score, level=level):
                data = to_level_data(self.make_puzzle(score, level))
                self.assertEqual(data.difficulty, label)
                self.assertEqual(data.title, title)
                self.assertEqual(data.id, level)

    def test_words_drop_bank_ids(self) -> None:
        data = to_level_data(self.make_puzzle(3.0, 1)).to_dict()
        self.assertEqual(data["gridSize"], 3)
        self.assertEqual(
            data["words"][0],
            {"id": "1a", "direction": "across", "startRow": 0, "startCol": 0,
             "answer": "KOD", "clue": "Program metni", "num": 1},
        )


if __name__ == "__main__":
    unittest.main()
