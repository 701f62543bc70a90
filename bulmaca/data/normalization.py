"""Shared helpers for Turkish answer normalization."""

from __future__ import annotations

# ``str.upper`` maps the dotted ``i`` to ASCII ``I``; Turkish keeps the dot.
TURKISH_CASE_MAP = {
    "i": "İ",
    "ı": "I",
}


def turkish_upper(text: str) -> str:
    """Upper-case ``text`` following Turkish casing rules."""

    if not text:
        return ""
    return "".join(TURKISH_CASE_MAP.get(char, char) for char in text).upper()


def clean_answer(text: str) -> str:
    """Return the upper-case letters of ``text`` with spacing and punctuation removed."""

    return "".join(char for char in turkish_upper(text) if char.isalpha())


__all__ = ["clean_answer", "turkish_upper", "TURKISH_CASE_MAP"]
