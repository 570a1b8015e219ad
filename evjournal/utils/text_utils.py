"""Text normalization helpers for labels and spreadsheet headers."""

import re
import unicodedata
from typing import Any

_WHITESPACE_RE = re.compile(r"\s+")


def strip_accents(value: str) -> str:
    """
    Remove diacritics from a string.

    Examples:
        >>> strip_accents("Km arrivée")
        'Km arrivee'
    """
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_label(value: Any) -> str:
    """
    Normalize a label for case- and diacritic-insensitive comparison.

    Trims, lowercases, strips accents and collapses inner whitespace.

    Examples:
        >>> normalize_label("  Batterie  Départ (%) ")
        'batterie depart (%)'
    """
    if value is None:
        return ""
    text = strip_accents(str(value)).lower().strip()
    return _WHITESPACE_RE.sub(" ", text)
