"""Main crossword generator orchestration.

Flow for one call:
  1. Derive the level's difficulty config and order candidate templates.
  2. For each template, walk a retry ladder: fresh slots, domains from the
     word index within a difficulty band, solve, widen the band on failure.
  3. Score and number the first successful fill.

The ladder is an explicit state machine (:class:`GenerationStage`) so every
transition can be logged and inspected through ``last_trace``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Set, Union

from ..core.constants import SCORE_MAX, SCORE_MIN, Difficulty, Direction, SolverBackend
from ..core.exceptions import EngineNotInitializedError, ValidationError
from ..core.models import (GenerateOptions, GeneratedPuzzle, GeneratedWord, GridTemplate,
                           LevelData, RawWord, Slot)
from ..data.word_index import DifficultyBand, WordIndex, build_word_index
from ..utils.logger import get_logger
from ..utils.seeded_random import SeededRandom
from .scorer import (DEFAULT_SCORING, ScoringConfig, compute_metrics, get_difficulty_config,
                     is_in_difficulty_band, score_puzzle)
from .slots import extract_slots, scan_spans
from .solver import SolverConfig, SolverResult, initialize_domains, solve
from .templates import TemplateRegistry, default_registry
from .validator import PuzzleValidator


LOGGER = get_logger(__name__)

DEFAULT_ATTEMPT_LIMITS: Dict[int, int] = {
    7: 2000,
    9: 5000,
    11: 8000,
    13: 12000,
    15: 15000,
}

LEVEL_LABELS: Dict[Difficulty, str] = {
    Difficulty.EASY: "Kolay",
    Difficulty.MEDIUM: "Orta",
    Difficulty.HARD: "Zor",
}

LEVEL_TITLES: Dict[Difficulty, List[str]] = {
    Difficulty.EASY: ["Başlangıç", "Isınma", "Harfler", "İlk Adım", "Kolay Bulmaca"],
    Difficulty.MEDIUM: ["Kelime Avı", "Keşif", "Zihin Jimnastiği", "Meydan Okuma", "Bilgi Küpü"],
    Difficulty.HARD: ["Kelime Üstadı", "Zorlu Yarış", "Efsane", "Akıl Oyunları", "Büyük Final"],
}


@dataclass
class GeneratorConfig:
    max_templates: int = 8
    max_band_retries: int = 4
    band_step: float = 2.0
    solve_time_ms: float = 3000.0
    attempt_limits: Dict[int, int] = field(default_factory=lambda: dict(DEFAULT_ATTEMPT_LIMITS))
    default_attempt_limit: int = 800
    backend: SolverBackend = SolverBackend.BACKTRACKING
    validate: bool = True
    scoring: ScoringConfig = DEFAULT_SCORING

    def attempt_limit(self, grid_size: int) -> int:
        return self.attempt_limits.get(grid_size, self.default_attempt_limit)


class GenerationStage(str, Enum):
    SELECT_TEMPLATE = "select_template"
    INIT_DOMAINS = "init_domains"
    SOLVE = "solve"
    ACCEPT = "accept"
    WIDEN_BAND = "widen_band"
    NEXT_TEMPLATE = "next_template"
    EXHAUSTED = "exhausted"


@dataclass
class LadderStep:
    """One state visited by the retry ladder."""

    stage: GenerationStage
    template_id: Optional[str] = None
    band: Optional[DifficultyBand] = None
    detail: str = ""


def widen_band(band: Optional[DifficultyBand], step: float) -> Optional[DifficultyBand]:
    """Widen ``band`` by ``step`` on both ends; ``None`` once it spans everything."""

    if band is None:
        return None
    widened = (max(SCORE_MIN, band[0] - step), min(SCORE_MAX, band[1] + step))
    if widened[0] <= SCORE_MIN and widened[1] >= SCORE_MAX:
        return None
    return widened


def build_puzzle(
    slots: Iterable[Slot],
    template: GridTemplate,
    difficulty_score: float,
    level: int,
    seed: int,
) -> GeneratedPuzzle:
    """Number filled slots in reading order and emit the public puzzle.

    A cell that starts both an across and a down word carries one number.
    """

    filled = sorted(
        (slot for slot in slots if slot.assigned_word is not None),
        key=lambda slot: (slot.row, slot.col, 0 if slot.direction == Direction.ACROSS else 1),
    )

    numbers: Dict[tuple, int] = {}
    for slot in filled:
        numbers.setdefault((slot.row, slot.col), len(numbers) + 1)

    words = []
    for slot in filled:
        entry = slot.assigned_word
        num = numbers[(slot.row, slot.col)]
        words.append(
            GeneratedWord(
                id=f"{num}{slot.direction.suffix}",
                direction=slot.direction,
                start_row=slot.row,
                start_col=slot.col,
                answer=entry.answer,
                clue=entry.clue,
                num=num,
                word_entry_id=entry.id,
            )
        )

    return GeneratedPuzzle(
        template_id=template.id,
        grid_size=template.size,
        words=words,
        difficulty_score=difficulty_score,
        level=level,
        seed=seed,
    )


class CrosswordGenerator:
    """High-level orchestrator: template selection, retry ladder, finalization.

    The word index and template registry are read-only and may be shared
    between generators running on different threads. ``last_trace`` holds the
    ladder states visited by the most recent :meth:`generate` call on this
    instance.
    """

    def __init__(
        self,
        word_index: Optional[WordIndex] = None,
        registry: Optional[TemplateRegistry] = None,
        config: Optional[GeneratorConfig] = None,
    ) -> None:
        self.word_index = word_index
        self.registry = registry or default_registry()
        self.config = config or GeneratorConfig()
        self.validator = PuzzleValidator()
        self.last_trace: List[LadderStep] = []

    def initialize(self, raw_words: Iterable[Union[RawWord, Mapping[str, Any]]]) -> WordIndex:
        """Build the word index from raw bank records. Call once before generating."""

        self.word_index = build_word_index(raw_words)
        return self.word_index

    @property
    def is_initialized(self) -> bool:
        return self.word_index is not None

    # ------------------------------------------------------------------
    # Public entrypoint
    # ------------------------------------------------------------------
    def generate(self, options: GenerateOptions) -> Optional[GeneratedPuzzle]:
        """Return a filled puzzle, or ``None`` when every template and band failed."""

        if self.word_index is None:
            raise EngineNotInitializedError(
                "Word index not built. Call initialize() or pass a WordIndex first."
            )

        seed = options.seed if options.seed is not None else int(time.time() * 1000)
        rng = SeededRandom(seed)
        difficulty = get_difficulty_config(options.level)
        templates = self._template_candidates(difficulty.grid_size, difficulty.difficulty_tier, rng)
        LOGGER.info(
            "Generating level %d (seed %d, %dx%d target): %d candidate templates",
            options.level,
            seed,
            difficulty.grid_size,
            difficulty.grid_size,
            len(templates),
        )

        trace: List[LadderStep] = []
        try:
            puzzle = self._run_ladder(
                self.word_index,
                iter(templates),
                difficulty.word_difficulty_band,
                set(options.exclude_word_ids),
                rng,
                options.level,
                seed,
                trace,
            )
        finally:
            self.last_trace = trace

        if puzzle is None:
            LOGGER.warning(
                "No puzzle for level %d (seed %d) after %d templates",
                options.level,
                seed,
                len(templates),
            )
            return None

        LOGGER.info(
            "Puzzle generated: template %s, %d words, score %.1f%s",
            puzzle.template_id,
            len(puzzle.words),
            puzzle.difficulty_score,
            "" if is_in_difficulty_band(puzzle.difficulty_score, difficulty.difficulty_tier)
            else f" (outside the {difficulty.difficulty_tier.value} band)",
        )
        return puzzle

    # ------------------------------------------------------------------
    # Retry ladder
    # ------------------------------------------------------------------
    def _run_ladder(
        self,
        word_index: WordIndex,
        templates: Iterator[GridTemplate],
        initial_band: DifficultyBand,
        exclude_ids: Set[str],
        rng: SeededRandom,
        level: int,
        seed: int,
        trace: List[LadderStep],
    ) -> Optional[GeneratedPuzzle]:
        stage = GenerationStage.SELECT_TEMPLATE
        template: Optional[GridTemplate] = None
        band: Optional[DifficultyBand] = initial_band
        band_attempt = 0
        slots: List[Slot] = []
        puzzle: Optional[GeneratedPuzzle] = None

        while True:
            template_id = template.id if template is not None else None
            trace.append(LadderStep(stage, template_id, band))
            LOGGER.debug("Ladder: %s template=%s band=%s", stage.value, template_id, band)

            if stage is GenerationStage.SELECT_TEMPLATE:
                template = next(templates, None)
                if template is None:
                    stage = GenerationStage.EXHAUSTED
                    continue
                trace[-1].template_id = template.id
                if not self._has_words_for(template, word_index):
                    trace[-1].detail = f"{template.id}: a slot length has no words"
                    stage = GenerationStage.NEXT_TEMPLATE
                else:
                    band, band_attempt = initial_band, 0
                    stage = GenerationStage.INIT_DOMAINS

            elif stage is GenerationStage.INIT_DOMAINS:
                band_attempt += 1
                slots = extract_slots(template)
                initialize_domains(slots, word_index, band, exclude_ids)
                empty = [slot.id for slot in slots if not slot.domain]
                if empty:
                    trace[-1].detail = f"empty domains for slots {empty}"
                    stage = GenerationStage.WIDEN_BAND
                else:
                    stage = GenerationStage.SOLVE

            elif stage is GenerationStage.SOLVE:
                result = self._solve(slots, template, rng)
                trace[-1].detail = f"{result.attempts_used} attempts, {result.elapsed_ms:.0f} ms"
                if not result.success:
                    stage = GenerationStage.WIDEN_BAND
                    continue
                try:
                    puzzle = self._finalize(result.slots, template, level, seed)
                except ValidationError as exc:
                    LOGGER.warning("Discarding fill of %s: %s", template.id, exc)
                    stage = GenerationStage.WIDEN_BAND
                    continue
                stage = GenerationStage.ACCEPT

            elif stage is GenerationStage.WIDEN_BAND:
                if band_attempt >= self.config.max_band_retries:
                    stage = GenerationStage.NEXT_TEMPLATE
                else:
                    band = widen_band(band, self.config.band_step)
                    stage = GenerationStage.INIT_DOMAINS

            elif stage is GenerationStage.NEXT_TEMPLATE:
                stage = GenerationStage.SELECT_TEMPLATE

            elif stage is GenerationStage.ACCEPT:
                return puzzle

            else:
                return None

    def _template_candidates(
        self,
        grid_size: int,
        tier: Difficulty,
        rng: SeededRandom,
    ) -> List[GridTemplate]:
        sized, tiered, rest = self.registry.candidate_groups(grid_size, tier)
        # Shuffle within each group so the target size is always tried first
        ordered = rng.shuffle(sized) + rng.shuffle(tiered) + rng.shuffle(rest)
        return list(ordered[: self.config.max_templates])

    def _has_words_for(self, template: GridTemplate, word_index: WordIndex) -> bool:
        lengths = {span.length for span in scan_spans(template.cells)}
        return bool(lengths) and all(word_index.has_length(length) for length in lengths)

    def _solve(self, slots: List[Slot], template: GridTemplate, rng: SeededRandom) -> SolverResult:
        if self.config.backend == SolverBackend.CPSAT:
            from .solver_cpsat import solve_with_cpsat

            return solve_with_cpsat(
                slots,
                timeout_seconds=self.config.solve_time_ms / 1000.0,
                seed=rng.next_int(0x7FFFFFFF),
            )
        return solve(
            slots,
            SolverConfig(
                max_attempts=self.config.attempt_limit(template.size),
                max_time_ms=self.config.solve_time_ms,
                rng=rng,
            ),
        )

    def _finalize(
        self,
        slots: List[Slot],
        template: GridTemplate,
        level: int,
        seed: int,
    ) -> GeneratedPuzzle:
        # Difficulty is informational only; it never rejects a fill
        score = score_puzzle(compute_metrics(slots), self.config.scoring)
        puzzle = build_puzzle(slots, template, score, level, seed)
        if self.config.validate:
            validation = self.validator.validate(puzzle, template)
            if not validation.ok:
                raise ValidationError(f"Puzzle validation failed: {validation.messages}")
        return puzzle


def generate_puzzle(
    word_index: Optional[WordIndex],
    options: GenerateOptions,
    registry: Optional[TemplateRegistry] = None,
    config: Optional[GeneratorConfig] = None,
) -> Optional[GeneratedPuzzle]:
    """One-shot helper around :class:`CrosswordGenerator`."""

    return CrosswordGenerator(word_index, registry, config).generate(options)


def level_tier(difficulty_score: float) -> Difficulty:
    if difficulty_score <= 4:
        return Difficulty.EASY
    if difficulty_score <= 7:
        return Difficulty.MEDIUM
    return Difficulty.HARD


def to_level_data(puzzle: GeneratedPuzzle) -> LevelData:
    """Convert a generated puzzle into the level shape used by the game UI."""

    tier = level_tier(puzzle.difficulty_score)
    titles = LEVEL_TITLES[tier]
    return LevelData(
        id=puzzle.level,
        grid_size=puzzle.grid_size,
        words=[
            {
                "id": word.id,
                "direction": word.direction.value,
                "startRow": word.start_row,
                "startCol": word.start_col,
                "answer": word.answer,
                "clue": word.clue,
                "num": word.num,
            }
            for word in puzzle.words
        ],
        difficulty=LEVEL_LABELS[tier],
        title=titles[puzzle.level % len(titles)],
    )


__all__ = [
    "CrosswordGenerator",
    "DEFAULT_ATTEMPT_LIMITS",
    "GenerationStage",
    "GeneratorConfig",
    "LadderStep",
    "build_puzzle",
    "generate_puzzle",
    "level_tier",
    "to_level_data",
    "widen_band",
]
