"""Slot extraction: word positions and their crossings within a template."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from ..core.constants import MIN_WORD_LENGTH, Direction
from ..core.models import GridTemplate, Intersection, Slot


@dataclass(frozen=True)
class SlotSpan:
    """A maximal run of letter cells, before it becomes a :class:`Slot`."""

    direction: Direction
    row: int
    col: int
    length: int

    @property
    def cells(self) -> List[Tuple[int, int]]:
        if self.direction == Direction.ACROSS:
            return [(self.row, self.col + i) for i in range(self.length)]
        return [(self.row + i, self.col) for i in range(self.length)]


def scan_spans(cells: Sequence[Sequence[bool]]) -> List[SlotSpan]:
    """Return every across run (row by row) then every down run (column by column)."""

    size = len(cells)
    spans: List[SlotSpan] = []

    for r in range(size):
        run_start = -1
        for c in range(size + 1):
            is_white = c < size and cells[r][c]
            if is_white and run_start == -1:
                run_start = c
            elif not is_white and run_start != -1:
                if c - run_start >= MIN_WORD_LENGTH:
                    spans.append(SlotSpan(Direction.ACROSS, r, run_start, c - run_start))
                run_start = -1

    for c in range(size):
        run_start = -1
        for r in range(size + 1):
            is_white = r < size and cells[r][c]
            if is_white and run_start == -1:
                run_start = r
            elif not is_white and run_start != -1:
                if r - run_start >= MIN_WORD_LENGTH:
                    spans.append(SlotSpan(Direction.DOWN, run_start, c, r - run_start))
                run_start = -1

    return spans


def extract_slots(template: GridTemplate) -> List[Slot]:
    """Build fresh :class:`Slot` objects, with intersections, for ``template``.

    Ids are dense and follow extraction order, so ``slots[i].id == i``. Every
    call returns new objects; solver mutations never reach the template.
    """

    slots = [
        Slot(
            id=idx,
            direction=span.direction,
            row=span.row,
            col=span.col,
            length=span.length,
            cells=span.cells,
        )
        for idx, span in enumerate(scan_spans(template.cells))
    ]

    cell_to_slots: Dict[Tuple[int, int], List[Tuple[Slot, int]]] = defaultdict(list)
    for slot in slots:
        for pos, cell in enumerate(slot.cells):
            cell_to_slots[cell].append((slot, pos))

    for touching in cell_to_slots.values():
        for i, (a, pos_a) in enumerate(touching):
            for b, pos_b in touching[i + 1:]:
                if a.direction == b.direction:
                    continue
                a.intersections.append(Intersection(b.id, pos_a, pos_b))
                b.intersections.append(Intersection(a.id, pos_b, pos_a))

    return slots


__all__ = ["SlotSpan", "extract_slots", "scan_spans"]
