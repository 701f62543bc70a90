"""Turkish crossword (bulmaca) generator.

This package exposes the public API surface via:

- ``bulmaca.engine.generator.CrosswordGenerator``: template selection, retry
  ladder and puzzle numbering.
- ``bulmaca.data.word_index.build_word_index``: indexes a word bank once for
  every later generation.
- ``bulmaca.data.word_bank.load_word_bank``: reads JSON or TSV word banks.
"""

from .core.models import GenerateOptions, GeneratedPuzzle, LevelData, RawWord
from .data.word_bank import load_word_bank
from .data.word_index import WordIndex, build_word_index
from .engine.generator import CrosswordGenerator, GeneratorConfig, generate_puzzle, to_level_data
from .utils.seeded_random import SeededRandom, daily_seed

__all__ = [
    "CrosswordGenerator",
    "GenerateOptions",
    "GeneratedPuzzle",
    "GeneratorConfig",
    "LevelData",
    "RawWord",
    "SeededRandom",
    "WordIndex",
    "build_word_index",
    "daily_seed",
    "generate_puzzle",
    "load_word_bank",
    "to_level_data",
]

__version__ = "0.1.0"
