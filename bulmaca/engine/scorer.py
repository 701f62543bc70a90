"""Post-generation difficulty scoring and per-level generation settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from ..core.constants import RARE_LETTERS, SCORE_MAX, SCORE_MIN, Difficulty
from ..core.models import DifficultyConfig, Slot

Range = Tuple[float, float]


@dataclass(frozen=True)
class PuzzleMetrics:
    avg_word_difficulty: float = 0.0
    max_word_difficulty: float = 0.0
    avg_word_length: float = 0.0
    intersection_density: float = 0.0
    rare_letter_ratio: float = 0.0
    word_count: int = 0


@dataclass(frozen=True)
class ScoringConfig:
    """Empirical normalization ranges for :func:`score_puzzle`.

    None of these bounds has a documented derivation; tune them against real
    word banks rather than treating them as fixed.
    """

    avg_length_range: Range = (2.0, 10.0)
    intersection_density_range: Range = (0.5, 3.0)
    rare_letter_ratio_range: Range = (0.0, 0.5)
    word_count_range: Range = (5.0, 35.0)


DEFAULT_SCORING = ScoringConfig()

# Accepted aggregate score per puzzle tier
PUZZLE_SCORE_BANDS: Dict[Difficulty, Range] = {
    Difficulty.EASY: (1.0, 4.0),
    Difficulty.MEDIUM: (3.0, 6.5),
    Difficulty.HARD: (5.0, 9.0),
}


def compute_metrics(slots: Iterable[Slot]) -> PuzzleMetrics:
    """Descriptive statistics over the slots that hold a word."""

    filled = [slot for slot in slots if slot.assigned_word is not None]
    if not filled:
        return PuzzleMetrics()

    scores = [slot.assigned_word.difficulty_score for slot in filled]
    lengths = [slot.assigned_word.length for slot in filled]
    letters = "".join(slot.assigned_word.answer for slot in filled)
    rare_count = sum(1 for char in letters if char in RARE_LETTERS)
    # Each crossing is recorded on both of its slots
    crossings = sum(len(slot.intersections) for slot in filled) / 2

    return PuzzleMetrics(
        avg_word_difficulty=sum(scores) / len(scores),
        max_word_difficulty=max(scores),
        avg_word_length=sum(lengths) / len(lengths),
        intersection_density=crossings / len(filled),
        rare_letter_ratio=rare_count / len(letters) if letters else 0.0,
        word_count=len(filled),
    )


def normalize(value: float, bounds: Range) -> float:
    """Map ``value`` linearly from ``bounds`` onto ``[0, 10]``, clamped."""

    low, high = bounds
    if high <= low:
        return 5.0
    return max(0.0, min(10.0, (value - low) / (high - low) * 10.0))


def score_puzzle(metrics: PuzzleMetrics, scoring: Optional[ScoringConfig] = None) -> float:
    """Fold ``metrics`` into one score in ``[1.0, 10.0]``, one decimal."""

    scoring = scoring or DEFAULT_SCORING
    score = (
        0.30 * metrics.avg_word_difficulty
        + 0.15 * metrics.max_word_difficulty
        + 0.15 * normalize(metrics.avg_word_length, scoring.avg_length_range)
        + 0.15 * normalize(metrics.intersection_density, scoring.intersection_density_range)
        + 0.15 * normalize(metrics.rare_letter_ratio, scoring.rare_letter_ratio_range)
        + 0.10 * normalize(metrics.word_count, scoring.word_count_range)
    )
    return round(max(SCORE_MIN, min(SCORE_MAX, score)), 1)


def get_difficulty_config(level: int) -> DifficultyConfig:
    """Generation settings for ``level``.

    Grids stay at 7x7 and 9x9 while the bundled word bank is a few hundred
    entries; the 11x11 and 13x13 templates are reached through the
    generator's fallback ordering.
    """

    if level <= 5:
        return DifficultyConfig(level, 7, (1.0, 6.0), 2, 3.5, 0.08, Difficulty.EASY)
    if level <= 10:
        return DifficultyConfig(level, 7, (1.0, 8.0), 2, 4.0, 0.12, Difficulty.MEDIUM)
    if level <= 20:
        return DifficultyConfig(level, 9, (1.0, 10.0), 2, 4.5, 0.18, Difficulty.MEDIUM)
    return DifficultyConfig(level, 9, (1.0, 10.0), 3, 5.0, 0.22, Difficulty.HARD)


def is_in_difficulty_band(score: float, tier: Difficulty) -> bool:
    low, high = PUZZLE_SCORE_BANDS[tier]
    return low <= score <= high


__all__ = [
    "DEFAULT_SCORING",
    "PUZZLE_SCORE_BANDS",
    "PuzzleMetrics",
    "ScoringConfig",
    "compute_metrics",
    "get_difficulty_config",
    "is_in_difficulty_band",
    "normalize",
    "score_puzzle",
]
