"""Collapse near-duplicate ingredient names."""

from src.pipeline.tables import EQUIVALENCE_GROUPS


def dedupe(ingredients: list[str], groups: tuple[frozenset[str], ...] = EQUIVALENCE_GROUPS) -> list[str]:
    """Drop ingredients already seen, directly or through an equivalence group.

    Comparison uses the lowercased, trimmed form; the original strings are
    returned in first-seen order. ``["lemon", "lemons", "lime"]`` becomes
    ``["lemon", "lime"]``.
    """
    seen: set[str] = set()
    result: list[str] = []

    for ingredient in ingredients:
        key = ingredient.lower().strip()
        if key in seen:
            continue

        group = next((g for g in groups if key in g), None)
        if group is not None and not seen.isdisjoint(group):
            continue

        seen.add(key)
        result.append(ingredient)

    return result
