"""Word bank loading helpers for JSON and TSV sources."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set, Union

from ..core.constants import Difficulty
from ..core.exceptions import WordBankLoadError
from ..core.models import RawWord
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

FIELDNAMES = (
    "id",
    "answer",
    "difficulty",
    "level",
    "category",
    "clue",
    "tags",
)


def _parse_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _parse_difficulty(value: Any) -> Difficulty:
    if isinstance(value, Difficulty):
        return value
    normalized = str(value or "").strip().lower()
    try:
        return Difficulty(normalized)
    except ValueError:
        return Difficulty.MEDIUM


def _parse_tags(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split("|") if part.strip()]
    return [str(part).strip() for part in value if str(part).strip()]


def parse_record(record: Mapping[str, Any], fallback_id: Optional[str] = None) -> Optional[RawWord]:
    """Convert one bank record into a :class:`RawWord`.

    Records without an answer are skipped (``None``). A record without an id
    receives ``fallback_id``.
    """

    answer = str(record.get("answer") or "").strip()
    if not answer:
        return None
    word_id = str(record.get("id") or "").strip() or fallback_id or answer
    return RawWord(
        id=word_id,
        answer=answer,
        clue=str(record.get("clue") or "").strip(),
        difficulty=_parse_difficulty(record.get("difficulty")),
        level=_parse_int(record.get("level")),
        category=str(record.get("category") or "").strip(),
        tags=_parse_tags(record.get("tags")),
    )


def parse_records(records: Iterable[Union[RawWord, Mapping[str, Any]]]) -> List[RawWord]:
    """Normalize a mix of :class:`RawWord` objects and plain mappings.

    Records without an id are named ``#<position>``. Repeated ids are kept but
    logged, since only the last one stays reachable by id.
    """

    parsed: List[RawWord] = []
    seen: Set[str] = set()
    for position, record in enumerate(records):
        if isinstance(record, RawWord):
            word: Optional[RawWord] = record
        else:
            word = parse_record(record, fallback_id=f"#{position}")
        if word is None:
            continue
        if word.id in seen:
            LOGGER.warning("Duplicate word id %r at record %d; the later record wins", word.id, position)
        seen.add(word.id)
        parsed.append(word)
    return parsed


def load_word_bank(path: Path | str) -> List[RawWord]:
    """Load a word bank from a ``.json`` list or a ``.tsv`` table."""

    source = Path(path)
    if not source.exists():
        raise WordBankLoadError(f"Missing word bank: {source}")

    try:
        if source.suffix.lower() == ".json":
            payload = json.loads(source.read_text(encoding="utf-8"))
            if not isinstance(payload, list):
                raise WordBankLoadError(f"Word bank {source} must contain a JSON list")
            rows: Sequence[Mapping[str, Any]] = payload
        else:
            with source.open("r", encoding="utf-8", newline="") as handle:
                rows = list(csv.DictReader(handle, delimiter="\t"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise WordBankLoadError(f"Unable to read word bank {source}: {exc}") from exc

    words = parse_records(row for row in rows if isinstance(row, Mapping))
    LOGGER.info("Loaded %d words from %s", len(words), source)
    return words


def write_word_bank(words: Iterable[RawWord], destination: Path | str) -> None:
    """Persist raw words as a TSV readable by :func:`load_word_bank`."""

    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, delimiter="\t", fieldnames=FIELDNAMES)
        writer.writeheader()
        for word in words:
            writer.writerow(
                {
                    "id": word.id,
                    "answer": word.answer,
                    "difficulty": word.difficulty.value,
                    "level": word.level,
                    "category": word.category,
                    "clue": word.clue,
                    "tags": "|".join(word.tags),
                }
            )


__all__ = [
    "FIELDNAMES",
    "load_word_bank",
    "parse_record",
    "parse_records",
    "write_word_bank",
]
