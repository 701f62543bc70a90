"""CP-SAT crossword filling backend using OR-Tools.

An alternative to the backtracking solver for large or tightly constrained
templates. Every letter cell becomes an integer variable over the alphabet
seen in the slot domains, each slot gets an allowed-assignments table built
from its domain, and same-length slots are forced to differ in at least one
position so no answer is used twice.
"""

from __future__ import annotations

from collections import defaultdict
from itertools import combinations
from typing import Dict, List, Set, Tuple

from ortools.sat.python import cp_model

from ..core.models import Slot, WordEntry
from ..utils.logger import get_logger
from .solver import SolverResult

LOGGER = get_logger(__name__)

Cell = Tuple[int, int]


def solve_with_cpsat(
    slots: List[Slot],
    timeout_seconds: float = 3.0,
    seed: int = 0,
) -> SolverResult:
    """Fill ``slots`` from their current domains.

    Returns the same :class:`SolverResult` shape as the backtracking solver.
    ``attempts_used`` reports the CP-SAT branch count.
    """

    if not slots:
        return SolverResult(True, slots, 0, 0.0)
    if any(not slot.domain for slot in slots):
        LOGGER.debug("CP-SAT: at least one slot has an empty domain")
        return SolverResult(False, slots, 0, 0.0)

    alphabet = sorted({char for slot in slots for word in slot.domain for char in word.answer})
    codes = {char: code for code, char in enumerate(alphabet)}

    model = cp_model.CpModel()

    # ------------------------------------------------------------------
    # Step 1: Cell letter variables
    # ------------------------------------------------------------------
    cell_vars: Dict[Cell, cp_model.IntVar] = {}
    for slot in slots:
        for r, c in slot.cells:
            if (r, c) not in cell_vars:
                cell_vars[(r, c)] = model.new_int_var(0, len(alphabet) - 1, f"L_{r}_{c}")

    # ------------------------------------------------------------------
    # Step 2: Per-slot table constraints
    # ------------------------------------------------------------------
    for slot in slots:
        tuples = sorted({tuple(codes[char] for char in word.answer) for word in slot.domain})
        model.add_allowed_assignments([cell_vars[cell] for cell in slot.cells], tuples)

    # ------------------------------------------------------------------
    # Step 3: Uniqueness constraints
    # ------------------------------------------------------------------
    by_length: Dict[int, List[Slot]] = defaultdict(list)
    for slot in slots:
        by_length[slot.length].append(slot)
    for group in by_length.values():
        for s1, s2 in combinations(group, 2):
            _add_differ_constraint(model, cell_vars, s1, s2)

    # ------------------------------------------------------------------
    # Step 4: Solve
    # ------------------------------------------------------------------
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout_seconds
    # One worker keeps the search reproducible for a given seed
    solver.parameters.num_workers = 1
    solver.parameters.random_seed = seed & 0x7FFFFFFF

    LOGGER.debug(
        "CP-SAT: %d slots, %d cell vars, solving (timeout=%0.1fs)...",
        len(slots),
        len(cell_vars),
        timeout_seconds,
    )
    status = solver.solve(model)
    elapsed_ms = solver.wall_time * 1000.0
    branches = int(solver.num_branches)

    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        LOGGER.debug("CP-SAT: no solution found (status=%s)", solver.status_name(status))
        return SolverResult(False, slots, branches, elapsed_ms)

    # ------------------------------------------------------------------
    # Step 5: Extract solution
    # ------------------------------------------------------------------
    used_ids: Set[str] = set()
    for slot in slots:
        answer = "".join(alphabet[solver.value(cell_vars[cell])] for cell in slot.cells)
        entry = _pick_entry(slot.domain, answer, used_ids)
        if entry is None:
            LOGGER.debug("CP-SAT: answer %s has no unused entry in slot %d", answer, slot.id)
            return SolverResult(False, slots, branches, elapsed_ms)
        slot.assigned_word = entry
        used_ids.add(entry.id)

    LOGGER.debug("CP-SAT: solution found in %.1f ms", elapsed_ms)
    return SolverResult(True, slots, branches, elapsed_ms)


def _pick_entry(domain: List[WordEntry], answer: str, used_ids: Set[str]) -> WordEntry | None:
    for entry in domain:
        if entry.answer == answer and entry.id not in used_ids:
            return entry
    return None


def _add_differ_constraint(
    model: cp_model.CpModel,
    cell_vars: Dict[Cell, cp_model.IntVar],
    s1: Slot,
    s2: Slot,
) -> None:
    """Ensure two same-length slots cannot contain identical words."""
    diffs = []
    for pos in range(s1.length):
        v1 = cell_vars[s1.cells[pos]]
        v2 = cell_vars[s2.cells[pos]]
        if s1.cells[pos] == s2.cells[pos]:
            continue
        b = model.new_bool_var(f"d_{s1.id}_{s2.id}_{pos}")
        model.add(v1 != v2).only_enforce_if(b)
        model.add(v1 == v2).only_enforce_if(~b)
        diffs.append(b)
    if diffs:
        model.add_bool_or(diffs)


__all__ = ["solve_with_cpsat"]
