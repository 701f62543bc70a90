"""Word bank indexing and candidate retrieval.

The index is built once per process and then shared read-only by every
generation call, including calls running on other threads. All containers
exposed here are immutable.
"""

from __future__ import annotations

from collections import defaultdict
from types import MappingProxyType
from typing import (Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence,
                    Set, Tuple, Union)

from ..core.constants import (MIN_WORD_LENGTH, RARE_LETTERS, SCORE_MAX, SCORE_MIN,
                              TURKISH_LETTER_FREQ, UNKNOWN_LETTER_FREQ, Difficulty)
from ..core.models import RawWord, Slot, WordEntry
from ..utils.logger import get_logger
from .normalization import clean_answer
from .word_bank import parse_records

LOGGER = get_logger(__name__)

DifficultyBand = Tuple[float, float]

_BASE_TIER_WEIGHT = {Difficulty.EASY: 2.0, Difficulty.MEDIUM: 5.0, Difficulty.HARD: 7.5}
_ARCHAIC_TAGS = frozenset({"eski dil", "edebi"})


def compute_letter_freq_score(answer: str) -> float:
    """Mean Turkish letter frequency of ``answer``; lower means rarer letters."""

    if not answer:
        return 0.0
    total = sum(TURKISH_LETTER_FREQ.get(char, UNKNOWN_LETTER_FREQ) for char in answer)
    return total / len(answer)


def compute_difficulty_score(answer: str, tier: Difficulty, tags: Iterable[str]) -> float:
    """Compute a 1.0-10.0 difficulty score (higher = harder).

    Longer answers, rare letters, a harder source tier and archaic or literary
    tags all push the score up.
    """

    length = len(answer)
    length_factor = min(length * 0.8, 7.5)
    rare_count = sum(1 for char in answer if char in RARE_LETTERS)
    rare_ratio = (rare_count / length) * 10 if length else 0.0
    base_factor = _BASE_TIER_WEIGHT[tier]
    archaic_bonus = 2.0 if any(tag in _ARCHAIC_TAGS for tag in tags) else 0.0

    score = 0.3 * length_factor + 0.25 * base_factor + 0.25 * rare_ratio + 0.2 * archaic_bonus
    return round(max(SCORE_MIN, min(SCORE_MAX, score)), 1)


def in_band(entry: WordEntry, band: Optional[DifficultyBand]) -> bool:
    if band is None:
        return True
    return band[0] <= entry.difficulty_score <= band[1]


class WordIndex:
    """Lookup structures over the word bank.

    * ``all``: every entry, in bank order.
    * ``by_length``: exact length -> entries.
    * ``by_letter_position``: ``"pos:letter"`` -> indices into ``all``.
    * ``by_difficulty``: source tier -> entries.
    * ``by_id``: id -> entry.
    """

    def __init__(self, entries: Sequence[WordEntry]) -> None:
        by_length: Dict[int, List[WordEntry]] = defaultdict(list)
        by_letter_position: Dict[str, Set[int]] = defaultdict(set)
        by_difficulty: Dict[Difficulty, List[WordEntry]] = defaultdict(list)
        by_id: Dict[str, WordEntry] = {}

        for idx, entry in enumerate(entries):
            by_length[entry.length].append(entry)
            for pos, char in enumerate(entry.answer):
                by_letter_position[f"{pos}:{char}"].add(idx)
            by_difficulty[entry.difficulty].append(entry)
            by_id[entry.id] = entry

        self._all: Tuple[WordEntry, ...] = tuple(entries)
        self._by_length: Mapping[int, Tuple[WordEntry, ...]] = MappingProxyType(
            {length: tuple(group) for length, group in by_length.items()}
        )
        self._by_letter_position: Mapping[str, FrozenSet[int]] = MappingProxyType(
            {key: frozenset(indices) for key, indices in by_letter_position.items()}
        )
        self._by_difficulty: Mapping[Difficulty, Tuple[WordEntry, ...]] = MappingProxyType(
            {tier: tuple(group) for tier, group in by_difficulty.items()}
        )
        self._by_id: Mapping[str, WordEntry] = MappingProxyType(by_id)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def all(self) -> Tuple[WordEntry, ...]:
        return self._all

    @property
    def by_length(self) -> Mapping[int, Tuple[WordEntry, ...]]:
        return self._by_length

    @property
    def by_letter_position(self) -> Mapping[str, FrozenSet[int]]:
        return self._by_letter_position

    @property
    def by_difficulty(self) -> Mapping[Difficulty, Tuple[WordEntry, ...]]:
        return self._by_difficulty

    @property
    def by_id(self) -> Mapping[str, WordEntry]:
        return self._by_id

    def __len__(self) -> int:
        return len(self._all)

    def iter_length(self, length: int) -> Tuple[WordEntry, ...]:
        return self._by_length.get(length, ())

    def get(self, word_id: str) -> Optional[WordEntry]:
        return self._by_id.get(word_id)

    def has_length(self, length: int) -> bool:
        return bool(self._by_length.get(length))

    def length_histogram(self) -> Dict[int, int]:
        return {length: len(group) for length, group in sorted(self._by_length.items())}


def build_word_index(raw_words: Iterable[Union[RawWord, Mapping[str, Any]]]) -> WordIndex:
    """Build all indices from raw word bank records.

    Call once at startup and reuse the result for every generation. Answers
    shorter than two letters are discarded; when two records share an id the
    later one wins in ``by_id``.
    """

    entries: List[WordEntry] = []
    skipped = 0
    for raw in parse_records(raw_words):
        answer = clean_answer(raw.answer)
        if len(answer) < MIN_WORD_LENGTH:
            skipped += 1
            continue
        tags = tuple(raw.tags)
        entries.append(
            WordEntry(
                id=raw.id,
                answer=answer,
                length=len(answer),
                clue=raw.clue,
                difficulty=raw.difficulty,
                difficulty_score=compute_difficulty_score(answer, raw.difficulty, tags),
                category=raw.category,
                tags=tags,
                letter_freq_score=compute_letter_freq_score(answer),
            )
        )

    index = WordIndex(entries)
    LOGGER.info(
        "Word index built: %d entries (%d skipped), lengths %s",
        len(index),
        skipped,
        index.length_histogram(),
    )
    return index


def pattern_match(
    index: WordIndex,
    pattern: Sequence[Optional[str]],
    length: int,
    difficulty_band: Optional[DifficultyBand] = None,
    exclude_ids: Optional[Set[str]] = None,
) -> List[WordEntry]:
    """Return all entries of ``length`` consistent with ``pattern``.

    ``pattern`` holds one letter or ``None`` (wildcard) per position, e.g.
    ``[None, "A", None, None, "K"]`` matches ``_A__K``. The call has no side
    effects.
    """

    candidates = index.iter_length(length)
    if not candidates:
        return []

    constraints: List[FrozenSet[int]] = []
    for pos, letter in enumerate(pattern):
        if letter is None:
            continue
        matching = index.by_letter_position.get(f"{pos}:{letter}")
        if not matching:
            return []
        constraints.append(matching)

    if constraints:
        # Intersect smallest sets first
        constraints.sort(key=len)
        allowed = set(constraints[0])
        for indices in constraints[1:]:
            allowed &= indices
            if not allowed:
                return []
        # Bank order, same as ``by_length``
        matches = [index.all[idx] for idx in sorted(allowed) if index.all[idx].length == length]
    else:
        matches = list(candidates)

    excluded = exclude_ids or set()
    return [
        entry
        for entry in matches
        if in_band(entry, difficulty_band) and entry.id not in excluded
    ]


def build_pattern_for_slot(slot: Slot, slots: Sequence[Slot]) -> List[Optional[str]]:
    """Letters fixed in ``slot`` by the words assigned to crossing slots."""

    pattern: List[Optional[str]] = [None] * slot.length
    for intersection in slot.intersections:
        other = slots[intersection.other_slot_id]
        if other.assigned_word is not None:
            pattern[intersection.this_position] = other.assigned_word.answer[
                intersection.other_position
            ]
    return pattern


__all__ = [
    "DifficultyBand",
    "WordIndex",
    "build_pattern_for_slot",
    "build_word_index",
    "compute_difficulty_score",
    "compute_letter_freq_score",
    "in_band",
    "pattern_match",
]
