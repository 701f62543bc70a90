"""Data models supporting the crossword engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .constants import Difficulty, Direction, SymmetryType


@dataclass
class RawWord:
    """One record of the input word bank, before indexing."""

    id: str
    answer: str
    clue: str
    difficulty: Difficulty = Difficulty.MEDIUM
    level: int = 0
    category: str = ""
    tags: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class WordEntry:
    """An indexed, immutable word bank entry."""

    id: str
    answer: str
    length: int
    clue: str
    difficulty: Difficulty
    difficulty_score: float
    category: str
    tags: Tuple[str, ...]
    letter_freq_score: float


@dataclass(frozen=True)
class GridTemplate:
    """A fixed black/white cell layout. ``True`` marks a letter cell."""

    id: str
    size: int
    cells: Tuple[Tuple[bool, ...], ...]
    symmetry: SymmetryType
    slot_count: int
    avg_slot_length: float
    difficulty_tier: Difficulty
    is_valid: bool = True
    problems: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Intersection:
    """A shared cell between this slot and ``other_slot_id``."""

    other_slot_id: int
    this_position: int
    other_position: int


@dataclass
class Slot:
    """Scratch state for one word position during a single solve attempt."""

    id: int
    direction: Direction
    row: int
    col: int
    length: int
    cells: List[Tuple[int, int]]
    intersections: List[Intersection] = field(default_factory=list)
    assigned_word: Optional[WordEntry] = None
    domain: List[WordEntry] = field(default_factory=list)

    def is_assigned(self) -> bool:
        return self.assigned_word is not None


@dataclass(frozen=True)
class DifficultyConfig:
    """Generation parameters derived from a requested level."""

    level: int
    grid_size: int
    word_difficulty_band: Tuple[float, float]
    min_word_length: int
    target_avg_word_length: float
    rare_letter_ratio_target: float
    difficulty_tier: Difficulty


@dataclass(frozen=True)
class GenerateOptions:
    level: int
    seed: Optional[int] = None
    exclude_word_ids: FrozenSet[str] = frozenset()


@dataclass
class GeneratedWord:
    id: str
    direction: Direction
    start_row: int
    start_col: int
    answer: str
    clue: str
    num: int
    word_entry_id: str

    def cells(self) -> List[Tuple[int, int]]:
        if self.direction == Direction.ACROSS:
            return [(self.start_row, self.start_col + i) for i in range(len(self.answer))]
        return [(self.start_row + i, self.start_col) for i in range(len(self.answer))]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "direction": self.direction.value,
            "startRow": self.start_row,
            "startCol": self.start_col,
            "answer": self.answer,
            "clue": self.clue,
            "num": self.num,
            "wordEntryId": self.word_entry_id,
        }


@dataclass
class GeneratedPuzzle:
    """A completed, numbered fill of one template."""

    template_id: str
    grid_size: int
    words: List[GeneratedWord]
    difficulty_score: float
    level: int
    seed: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "templateId": self.template_id,
            "gridSize": self.grid_size,
            "words": [word.to_dict() for word in self.words],
            "difficultyScore": self.difficulty_score,
            "level": self.level,
            "seed": self.seed,
        }


@dataclass
class LevelData:
    """Puzzle shape consumed by the game screens."""

    id: int
    grid_size: int
    words: List[Dict[str, Any]]
    difficulty: str
    title: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "gridSize": self.grid_size,
            "words": list(self.words),
            "difficulty": self.difficulty,
            "title": self.title,
        }
