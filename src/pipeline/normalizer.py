"""Canonical form for raw ingredient names."""

import re

from src.pipeline.tables import NORMALIZATION_RULES

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def clean_ingredient(raw: str) -> str:
    """Lower-case, trim, drop punctuation and collapse whitespace."""
    cleaned = _PUNCTUATION.sub("", raw.lower().strip())
    return _WHITESPACE.sub(" ", cleaned).strip()


def normalize(raw: str, rules: tuple[tuple[str, str], ...] = NORMALIZATION_RULES) -> str:
    """Map a raw ingredient token to its canonical string form.

    Applies the first rule whose pattern equals or is contained in the cleaned
    string. Every replacement is a fixed point of the rule table, so the
    function is idempotent.

    Args:
        raw: Ingredient name as produced by the vision model.
        rules: Ordered (pattern, replacement) pairs.

    Returns:
        Canonical ingredient name (unchanged apart from cleaning if no rule fires).
    """
    normalized = clean_ingredient(raw)

    for pattern, replacement in rules:
        if normalized == pattern or pattern in normalized:
            return replacement

    return normalized
