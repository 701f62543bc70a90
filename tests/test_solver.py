import unittest
from typing import List

from bulmaca.core.constants import Difficulty
from bulmaca.core.models import Slot
from bulmaca.data.word_index import build_word_index
from bulmaca.engine.slots import extract_slots
from bulmaca.engine.solver import (DomainUndoLog, SolverConfig, ac3, forward_check,
                                   initialize_domains, revise, select_mrv, solve)
from bulmaca.utils.seeded_random import SeededRandom

from sample_bank import FOUR_RINGS, raw, ring_bank, rows_template, unchecked_template

CORNER = ("...", ".##", ".##")


def corner_slots(words) -> List[Slot]:
    index = build_word_index(words)
    slots = extract_slots(unchecked_template("corner", CORNER))
    initialize_domains(slots, index, None)
    return slots


def assert_consistent(test: unittest.TestCase, slots: List[Slot]) -> None:
    letters = {}
    for slot in slots:
        test.assertIsNotNone(slot.assigned_word)
        test.assertEqual(len(slot.assigned_word.answer), slot.length)
        for cell, letter in zip(slot.cells, slot.assigned_word.answer):
            test.assertEqual(letters.setdefault(cell, letter), letter)
    answers = [slot.assigned_word.answer for slot in slots]
    test.assertEqual(len(answers), len(set(answers)))


class PropagationTests(unittest.TestCase):
    def test_revise_drops_unsupported_words(self) -> None:
        across, down = corner_slots([raw("1", "KOD"), raw("2", "SAZ"), raw("3", "KUŞ")])
        down.domain = [w for w in down.domain if w.answer == "KUŞ"]
        self.assertTrue(revise(across, down))
        self.assertEqual([w.answer for w in across.domain], ["KOD", "KUŞ"])
        self.assertFalse(revise(across, down))

    def test_ac3_reports_wipeout(self) -> None:
        across, down = corner_slots([raw("1", "KOD"), raw("2", "SAZ")])
        across.domain = [w for w in across.domain if w.answer == "KOD"]
        down.domain = [w for w in down.domain if w.answer == "SAZ"]
        self.assertFalse(ac3([across, down]))

    def test_ac3_iteration_cap_stops_without_failing(self) -> None:
        across, down = corner_slots([raw("1", "KOD"), raw("2", "SAZ")])
        across.domain = [w for w in across.domain if w.answer == "KOD"]
        down.domain = [w for w in down.domain if w.answer == "SAZ"]
        self.assertTrue(ac3([across, down], max_iterations=0))
        self.assertEqual(len(across.domain), 1)

    def test_forward_check_filters_crossing_domain(self) -> None:
        slots = corner_slots([raw("1", "KOD"), raw("2", "SAZ"), raw("3", "KUŞ")])
        across, down = slots
        kod = across.domain[0]
        across.assigned_word = kod
        self.assertTrue(forward_check(across, kod, slots))
        self.assertEqual([w.answer for w in down.domain], ["KOD", "KUŞ"])

        saz = [w for w in across.domain if w.answer == "SAZ"][0]
        down.domain = [w for w in down.domain if w.answer == "KUŞ"]
        self.assertFalse(forward_check(across, saz, slots))

    def test_select_mrv_breaks_ties_on_crossings(self) -> None:
        slots = extract_slots(rows_template("7x7_rings", FOUR_RINGS))
        index = build_word_index(ring_bank())
        initialize_domains(slots, index, None)
        slots[5].domain = slots[5].domain[:3]
        self.assertIs(select_mrv(slots), slots[5])

        for slot in slots:
            slot.domain = slot.domain[:2]
        slots[0].intersections = slots[0].intersections + slots[0].intersections[:1]
        self.assertIs(select_mrv(slots), slots[0])

        for slot in slots:
            slot.assigned_word = index.all[0]
        self.assertIsNone(select_mrv(slots))

    def test_undo_log_restores_previous_domains(self) -> None:
        slots = corner_slots([raw("1", "KOD"), raw("2", "SAZ"), raw("3", "KUŞ")])
        across, down = slots
        original = down.domain
        log = DomainUndoLog()
        mark = log.mark()
        log.save_neighbours(across, slots)
        across.assigned_word = across.domain[0]
        forward_check(across, across.domain[0], slots)
        self.assertEqual(len(down.domain), 2)
        log.rollback(mark, slots)
        self.assertIs(down.domain, original)
        self.assertEqual(log.mark(), mark)


class SolveTests(unittest.TestCase):
    def config(self, seed: int = 1, **overrides) -> SolverConfig:
        params = {"max_attempts": 2000, "max_time_ms": 3000.0, "rng": SeededRandom(seed)}
        params.update(overrides)
        return SolverConfig(**params)

    def test_shared_cell_gets_common_letter(self) -> None:
        slots = corner_slots(
            [
                raw("1", "KOD", Difficulty.HARD),
                raw("2", "KUŞ", Difficulty.EASY),
                raw("3", "ARABA", Difficulty.MEDIUM),
            ]
        )
        self.assertTrue(all(len(w.answer) == 3 for s in slots for w in s.domain))

        result = solve(slots, self.config())
        self.assertTrue(result.success)
        self.assertEqual({s.assigned_word.answer for s in slots}, {"KOD", "KUŞ"})
        assert_consistent(self, slots)

    def test_answers_are_never_repeated(self) -> None:
        slots = corner_slots([raw("1", "KOD"), raw("2", "KOD")])
        result = solve(slots, self.config())
        self.assertFalse(result.success)

    def test_rings_fill_consistently(self) -> None:
        slots = extract_slots(rows_template("7x7_rings", FOUR_RINGS))
        initialize_domains(slots, build_word_index(ring_bank()), None)
        result = solve(slots, self.config(seed=99))
        self.assertTrue(result.success)
        self.assertGreater(result.attempts_used, 0)
        assert_consistent(self, slots)

    def test_same_seed_same_fill(self) -> None:
        index = build_word_index(ring_bank())
        fills = []
        for _ in range(2):
            slots = extract_slots(rows_template("7x7_rings", FOUR_RINGS))
            initialize_domains(slots, index, None)
            solve(slots, self.config(seed=5))
            fills.append([s.assigned_word.id for s in slots])
        self.assertEqual(fills[0], fills[1])

    def test_attempt_budget_stops_search(self) -> None:
        slots = extract_slots(rows_template("7x7_rings", FOUR_RINGS))
        initialize_domains(slots, build_word_index(ring_bank()), None)
        result = solve(slots, self.config(max_attempts=0))
        self.assertFalse(result.success)
        self.assertLessEqual(result.attempts_used, 1)

    def test_time_budget_stops_search(self) -> None:
        slots = extract_slots(rows_template("7x7_rings", FOUR_RINGS))
        initialize_domains(slots, build_word_index(ring_bank()), None)
        result = solve(slots, self.config(max_time_ms=-1.0))
        self.assertFalse(result.success)
        self.assertEqual(result.attempts_used, 0)


class InitializeDomainsTests(unittest.TestCase):
    def test_band_and_exclusions(self) -> None:
        index = build_word_index(
            [raw("e", "KOD", Difficulty.EASY), raw("h", "KUŞ", Difficulty.HARD), raw("x", "SAZ", Difficulty.EASY)]
        )
        slots = extract_slots(unchecked_template("corner", CORNER))
        easy_score = index.get("e").difficulty_score
        initialize_domains(slots, index, (easy_score, easy_score), {"x"})
        for slot in slots:
            self.assertEqual([w.id for w in slot.domain], ["e"])


if __name__ == "__main__":
    unittest.main()
