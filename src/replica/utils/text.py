from __future__ import annotations

import re

from rapidfuzz.distance import Levenshtein

_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Canonical grouping key: lower-case, trimmed, punctuation stripped.

    Intentionally lossy; "SUBSCRIBE!" and "subscribe" share a key while
    OCR misreads such as "SUBCRIBE" do not (see ``text_similarity``).
    """
    return _NON_WORD_RE.sub("", text.strip().lower())


def collapse_whitespace(text: str) -> str:
    """Lighter key used by the motion tracker: case-fold and collapse runs of whitespace."""
    return _WHITESPACE_RE.sub(" ", text.lower().strip())


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance (insert / delete / substitute, unit cost)."""
    return Levenshtein.distance(a, b)


def text_similarity(a: str, b: str) -> float:
    """Edit-distance similarity in [0, 1], relative to the longer string."""
    return Levenshtein.normalized_similarity(a, b)
