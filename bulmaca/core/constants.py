"""Shared constants and enumerations for the crossword engine."""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet


class Difficulty(str, Enum):
    """Word bank and template difficulty tiers."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Direction(str, Enum):
    """Word directions supported by the grid."""

    ACROSS = "across"
    DOWN = "down"

    @property
    def suffix(self) -> str:
        return "a" if self is Direction.ACROSS else "d"


class SymmetryType(str, Enum):
    """Symmetry declared by a grid template."""

    ROTATIONAL_180 = "rotational_180"
    NONE = "none"


class SolverBackend(str, Enum):
    """Fill strategies understood by the generator."""

    BACKTRACKING = "backtracking"
    CPSAT = "cpsat"


RARE_LETTERS: FrozenSet[str] = frozenset({"Ğ", "Ş", "Ç", "Ü", "Ö", "İ", "Â"})

# Relative letter frequencies of written Turkish.
TURKISH_LETTER_FREQ: Dict[str, float] = {
    "E": 0.087, "A": 0.085, "İ": 0.07, "N": 0.067, "R": 0.063,
    "L": 0.056, "K": 0.051, "D": 0.047, "T": 0.046, "S": 0.042,
    "M": 0.037, "U": 0.034, "Y": 0.033, "B": 0.028, "O": 0.025,
    "Ü": 0.019, "Ş": 0.017, "Z": 0.01, "Ç": 0.012, "H": 0.011,
    "G": 0.01, "P": 0.009, "Ö": 0.007, "C": 0.007, "V": 0.004,
    "F": 0.003, "Ğ": 0.003, "J": 0.001, "I": 0.05,
}
UNKNOWN_LETTER_FREQ = 0.005

MIN_WORD_LENGTH = 2
SCORE_MIN = 1.0
SCORE_MAX = 10.0
