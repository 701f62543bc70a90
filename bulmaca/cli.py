"""CLI entrypoint for the Turkish crossword generator."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from .core.constants import SolverBackend
from .core.exceptions import CrosswordError
from .core.models import GenerateOptions
from .data.word_bank import load_word_bank
from .engine.generator import CrosswordGenerator, GeneratorConfig, to_level_data
from .utils.logger import configure_logging
from .utils.pretty import print_puzzle_stats
from .utils.seeded_random import daily_seed


def parse_day(value: str) -> date:
    if value == "today":
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate Turkish crossword puzzles from a word bank",
    )
    parser.add_argument(
        "--words",
        type=Path,
        required=True,
        metavar="FILE",
        help="Word bank as a JSON list or a TSV with id/answer/difficulty/level/category/clue/tags columns",
    )
    parser.add_argument("--level", type=int, required=True, help="Level number (1 and up)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument(
        "--daily",
        type=parse_day,
        nargs="?",
        const="today",
        default=None,
        metavar="YYYY-MM-DD",
        help="Use the puzzle-of-the-day seed for the given date (today when no date is given)",
    )
    parser.add_argument(
        "--exclude",
        nargs="+",
        default=[],
        metavar="ID",
        help="Word bank ids that must not appear in the puzzle",
    )
    parser.add_argument(
        "--backend",
        type=str,
        choices=[b.value for b in SolverBackend],
        default=SolverBackend.BACKTRACKING.value,
        help="Fill strategy",
    )
    parser.add_argument(
        "--level-data",
        action="store_true",
        help="Emit the game level shape (id, gridSize, words, difficulty, title)",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Also print the filled grid, clues and stats to stderr",
    )
    parser.add_argument("--output", type=Path, help="Optional path to JSON output")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = getattr(logging, args.log_level.upper(), logging.INFO)
    configure_logging(level)

    if args.level < 1:
        parser.error("--level must be 1 or greater")
    if args.seed is not None and args.daily is not None:
        parser.error("--seed cannot be combined with --daily")

    seed = daily_seed(args.daily) if args.daily is not None else args.seed

    try:
        raw_words = load_word_bank(args.words)
    except CrosswordError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    generator = CrosswordGenerator(config=GeneratorConfig(backend=SolverBackend(args.backend)))
    generator.initialize(raw_words)
    puzzle = generator.generate(
        GenerateOptions(level=args.level, seed=seed, exclude_word_ids=frozenset(args.exclude))
    )
    if puzzle is None:
        print(
            f"error: no puzzle could be generated for level {args.level} "
            f"from {len(generator.word_index)} words",
            file=sys.stderr,
        )
        return 1

    if args.pretty:
        template = generator.registry.get(puzzle.template_id)
        print_puzzle_stats(puzzle, template, generator.word_index, stream=sys.stderr)

    payload: Dict[str, Any] = to_level_data(puzzle).to_dict() if args.level_data else puzzle.to_dict()
    output_text = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.output:
        args.output.write_text(output_text, encoding="utf-8")
    else:
        print(output_text)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
