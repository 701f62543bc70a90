"""Backtracking crossword solver with AC-3, MRV and forward checking.

The search is bounded twice: by a global attempt counter (one per candidate
word tried) and by a wall-clock budget. Both are checked at the top of every
recursive call, so a pathological template or a sparse word bank ends in a
plain failure instead of an unbounded search.

Domains are never mutated in place. Pruning replaces ``slot.domain`` with a
filtered list, which lets the undo log keep plain references to the previous
lists instead of copies.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List, Optional, Set, Tuple

from ..core.models import Slot, WordEntry
from ..data.word_index import DifficultyBand, WordIndex, in_band
from ..utils.logger import get_logger
from ..utils.seeded_random import SeededRandom

LOGGER = get_logger(__name__)

MAX_CANDIDATES_PER_SLOT = 40
MAX_AC3_ITERATIONS = 10_000


@dataclass
class SolverConfig:
    max_attempts: int
    max_time_ms: float
    rng: SeededRandom
    max_candidates_per_slot: int = MAX_CANDIDATES_PER_SLOT
    max_ac3_iterations: int = MAX_AC3_ITERATIONS


@dataclass
class SolverResult:
    success: bool
    slots: List[Slot]
    attempts_used: int
    elapsed_ms: float


# ----------------------------------------------------------------------
# Arc consistency
# ----------------------------------------------------------------------
def revise(si: Slot, sj: Slot) -> bool:
    """Drop words of ``si`` that no candidate of ``sj`` supports. True if ``si`` shrank."""

    intersection = next((ix for ix in si.intersections if ix.other_slot_id == sj.id), None)
    if intersection is None:
        return False

    supported = {word.answer[intersection.other_position] for word in sj.domain}
    if sj.assigned_word is not None:
        supported.add(sj.assigned_word.answer[intersection.other_position])

    before = len(si.domain)
    pos = intersection.this_position
    si.domain = [word for word in si.domain if word.answer[pos] in supported]
    return len(si.domain) < before


def ac3(slots: List[Slot], max_iterations: int = MAX_AC3_ITERATIONS) -> bool:
    """Propagate arc consistency over every crossing.

    Returns ``False`` once a domain is wiped out. Hitting ``max_iterations``
    stops propagation early without failing.
    """

    queue: Deque[Tuple[int, int]] = deque(
        (slot.id, ix.other_slot_id) for slot in slots for ix in slot.intersections
    )

    iterations = 0
    while queue and iterations < max_iterations:
        iterations += 1
        si_id, sj_id = queue.popleft()
        si, sj = slots[si_id], slots[sj_id]
        if si.assigned_word is not None or sj.assigned_word is not None:
            continue
        if revise(si, sj):
            if not si.domain:
                LOGGER.debug("AC-3 emptied slot %d after %d iterations", si.id, iterations)
                return False
            for ix in si.intersections:
                if ix.other_slot_id != sj_id:
                    queue.append((ix.other_slot_id, si.id))

    if queue:
        LOGGER.debug("AC-3 stopped at the %d iteration cap", max_iterations)
    return True


# ----------------------------------------------------------------------
# Search helpers
# ----------------------------------------------------------------------
def forward_check(slot: Slot, word: WordEntry, slots: List[Slot]) -> bool:
    """Prune crossing domains after placing ``word`` in ``slot``."""

    for ix in slot.intersections:
        other = slots[ix.other_slot_id]
        letter = word.answer[ix.this_position]
        if other.assigned_word is not None:
            if other.assigned_word.answer[ix.other_position] != letter:
                return False
            continue

        pos = ix.other_position
        other.domain = [candidate for candidate in other.domain if candidate.answer[pos] == letter]
        if not other.domain:
            return False
    return True


def select_mrv(slots: Iterable[Slot]) -> Optional[Slot]:
    """Unassigned slot with the fewest candidates; ties go to the most crossings."""

    best: Optional[Slot] = None
    best_key: Tuple[int, int] = (0, 0)
    for slot in slots:
        if slot.assigned_word is not None:
            continue
        key = (len(slot.domain), -len(slot.intersections))
        if best is None or key < best_key:
            best, best_key = slot, key
    return best


class DomainUndoLog:
    """Stack of ``(slot_id, previous_domain)`` entries for backtracking."""

    def __init__(self) -> None:
        self._entries: List[Tuple[int, List[WordEntry]]] = []

    def mark(self) -> int:
        return len(self._entries)

    def save_neighbours(self, slot: Slot, slots: List[Slot]) -> None:
        for ix in slot.intersections:
            other = slots[ix.other_slot_id]
            if other.assigned_word is None:
                self._entries.append((other.id, other.domain))

    def rollback(self, mark: int, slots: List[Slot]) -> None:
        while len(self._entries) > mark:
            slot_id, domain = self._entries.pop()
            slots[slot_id].domain = domain


class _BacktrackSearch:
    def __init__(self, slots: List[Slot], config: SolverConfig) -> None:
        self.slots = slots
        self.config = config
        self.attempts = 0
        self.started = time.monotonic()
        self.aborted = False
        self.used_ids: Set[str] = set()
        self.used_answers: Set[str] = set()
        self.undo = DomainUndoLog()

    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.started) * 1000.0

    def _out_of_budget(self) -> bool:
        if self.attempts > self.config.max_attempts or self.elapsed_ms() > self.config.max_time_ms:
            self.aborted = True
        return self.aborted

    def run(self) -> bool:
        if self._out_of_budget():
            return False

        slot = select_mrv(self.slots)
        if slot is None:
            return True
        if not slot.domain:
            return False

        candidates = self.config.rng.shuffle(list(slot.domain))
        for word in candidates[: self.config.max_candidates_per_slot]:
            if word.id in self.used_ids or word.answer in self.used_answers:
                continue

            self.attempts += 1
            if self.attempts > self.config.max_attempts:
                self.aborted = True
                return False

            mark = self.undo.mark()
            self.undo.save_neighbours(slot, self.slots)
            slot.assigned_word = word
            self.used_ids.add(word.id)
            self.used_answers.add(word.answer)

            if forward_check(slot, word, self.slots) and self.run():
                return True

            slot.assigned_word = None
            self.used_ids.discard(word.id)
            self.used_answers.discard(word.answer)
            self.undo.rollback(mark, self.slots)
            if self.aborted:
                return False

        return False


def solve(slots: List[Slot], config: SolverConfig) -> SolverResult:
    """Fill ``slots`` in place.

    On success every slot holds a word and all crossings agree. On failure
    the slots are left in an unspecified state and must be discarded.
    """

    search = _BacktrackSearch(slots, config)
    if not ac3(slots, config.max_ac3_iterations):
        return SolverResult(False, slots, 0, search.elapsed_ms())

    success = search.run()
    elapsed = search.elapsed_ms()
    LOGGER.debug(
        "Backtracking %s: %d slots, %d attempts, %.1f ms%s",
        "solved" if success else "failed",
        len(slots),
        search.attempts,
        elapsed,
        " (budget exhausted)" if search.aborted else "",
    )
    return SolverResult(success, slots, search.attempts, elapsed)


def initialize_domains(
    slots: Iterable[Slot],
    word_index: WordIndex,
    difficulty_band: Optional[DifficultyBand],
    exclude_ids: Optional[Set[str]] = None,
) -> None:
    """Fill every slot's domain by length, difficulty band and exclusions."""

    excluded = exclude_ids or set()
    for slot in slots:
        slot.domain = [
            entry
            for entry in word_index.iter_length(slot.length)
            if in_band(entry, difficulty_band) and entry.id not in excluded
        ]


__all__ = [
    "DomainUndoLog",
    "MAX_AC3_ITERATIONS",
    "MAX_CANDIDATES_PER_SLOT",
    "SolverConfig",
    "SolverResult",
    "ac3",
    "forward_check",
    "initialize_domains",
    "revise",
    "select_mrv",
    "solve",
]
