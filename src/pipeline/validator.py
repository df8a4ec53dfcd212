"""Acceptance rules for detected ingredient tokens."""

from typing import Optional

from src.pipeline.tables import BLOCKED_TERMS, DIETARY_EXCLUSIONS
from src.utils.logger import logger


def _violates(item: str, blocked: tuple[str, ...]) -> Optional[str]:
    """Return the first blocked substring found in item, if any."""
    for term in blocked:
        if term in item:
            return term
    return None


def is_valid(
    ingredient: str,
    dietary_restrictions: Optional[str] = None,
    blocked_terms: frozenset[str] = BLOCKED_TERMS,
) -> bool:
    """Decide whether a token names a concrete, allowed food item.

    Rejects tokens shorter than two characters, tokens with no letters, exact
    matches of generic/category/container words, and (when restrictions are
    given) ingredients excluded by vegan, vegetarian or gluten-free diets.
    Dietary checks are case-insensitive substring matches. Vegan takes
    precedence over vegetarian; gluten-free is checked independently.

    Args:
        ingredient: Raw ingredient token.
        dietary_restrictions: Free-text restrictions, e.g. "vegan, gluten-free".
        blocked_terms: Exact-match blocklist.

    Returns:
        True if no rejection rule fires.
    """
    item = ingredient.lower().strip()
    if len(item) < 2 or not any(ch.isalpha() for ch in item):
        return False

    if item in blocked_terms:
        return False

    if not dietary_restrictions:
        return True

    restrictions = dietary_restrictions.lower()

    diet = None
    if "vegan" in restrictions:
        diet = "vegan"
    elif "vegetarian" in restrictions:
        diet = "vegetarian"

    if diet:
        term = _violates(item, DIETARY_EXCLUSIONS[diet])
        if term:
            logger.debug(f"Filtered out non-{diet} ingredient: {ingredient} (matched '{term}')")
            return False

    if "gluten-free" in restrictions:
        term = _violates(item, DIETARY_EXCLUSIONS["gluten-free"])
        if term:
            logger.debug(f"Filtered out gluten-containing ingredient: {ingredient} (matched '{term}')")
            return False

    return True
