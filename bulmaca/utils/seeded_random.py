"""Deterministic pseudo-random numbers for reproducible puzzles.

``random.Random`` does not promise a stable ``shuffle`` across Python
releases, so puzzles that must be reproducible everywhere use this small
Mulberry32 generator instead. The same seed yields the same sequence in every
process and on every platform.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import MutableSequence, Sequence, TypeVar, Union

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF
_DAILY_SALT = 0xB01DFACE
_EPOCH = date(1970, 1, 1)


def _imul(a: int, b: int) -> int:
    """32-bit multiply with wrap-around."""
    return (a * b) & _MASK32


class SeededRandom:
    """Mulberry32 generator with the helpers the solver needs."""

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self._state = seed & _MASK32

    def next(self) -> float:
        """Return a float in ``[0, 1)``."""
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        state = self._state
        t = _imul(state ^ (state >> 15), 1 | state)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & _MASK32) ^ t
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296.0

    def next_int(self, upper: int) -> int:
        """Return an integer in ``[0, upper)``."""
        return int(self.next() * upper)

    def shuffle(self, items: MutableSequence[T]) -> MutableSequence[T]:
        """Fisher-Yates shuffle in place; returns ``items`` for chaining."""
        for i in range(len(items) - 1, 0, -1):
            j = int(self.next() * (i + 1))
            items[i], items[j] = items[j], items[i]
        return items

    def pick(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("Cannot pick from an empty sequence")
        return items[int(self.next() * len(items))]


def daily_seed(day: Union[date, datetime]) -> int:
    """Return the puzzle-of-the-day seed for ``day``.

    Every caller asking for the same calendar day gets the same seed.
    """

    if isinstance(day, datetime):
        day = day.date()
    x = ((day - _EPOCH).days ^ _DAILY_SALT) & _MASK32
    x = _imul((x >> 16) ^ x, 0x45D9F3B)
    x = _imul((x >> 16) ^ x, 0x45D9F3B)
    return (x >> 16) ^ x


__all__ = ["SeededRandom", "daily_seed"]
