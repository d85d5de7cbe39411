"""Text normalization and edit-distance similarity for fuzzy matching"""

import re

from rapidfuzz.distance import Levenshtein

# Anything that is not a letter or digit, in any script (underscore is a \w char)
_NON_ALNUM = re.compile(r"[\W_]+", re.UNICODE)


def _require_str(value, argument: str) -> None:
    if not isinstance(value, str):
        raise TypeError(f"{argument} must be str, got {type(value).__name__}")


def normalize(text: str) -> str:
    """
    Normalize text for comparison.

    Lowercases and drops every character that is not a letter or digit. Accented
    letters (ä, ö, ü, ß, é, ...) are kept. Removed runs leave no placeholder, so
    "Artikel-Nr." and "artikel nr" both become "artikelnr".

    Args:
        text: Raw text

    Returns:
        Normalized text (possibly empty)

    Raises:
        TypeError: If text is not a string
    """
    _require_str(text, "text")
    return _NON_ALNUM.sub("", text.lower())


def similarity(a: str, b: str) -> float:
    """
    Calculate the edit-distance similarity ratio of two normalized strings.

    ratio = (max_len - levenshtein(a, b)) / max_len, with unit costs for insert,
    delete and substitute. Two empty strings are identical (ratio 1.0).

    Args:
        a: First normalized string
        b: Second normalized string

    Returns:
        Similarity ratio (0.0 to 1.0)

    Raises:
        TypeError: If either argument is not a string
    """
    _require_str(a, "a")
    _require_str(b, "b")

    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0

    return (max_len - Levenshtein.distance(a, b)) / max_len


def normalized_equals(a: str, b: str) -> bool:
    """Compare two raw strings after normalization"""
    return normalize(a) == normalize(b)
