"""Score recipes by what the user would still need to buy, and rank them."""

from typing import Collection

from src.models.models import Recipe, RecipeWithMissing


def _pantry(available: Collection[str]) -> set[str]:
    """Lowercased, trimmed, non-blank pantry items."""
    return {item.lower().strip() for item in available if item and item.strip()}


def _is_available(phrase: str, pantry: Collection[str]) -> bool:
    return any(item in phrase or phrase in item for item in pantry)


def distinct_pantry_size(available: Collection[str]) -> int:
    """Number of distinct non-blank items, compared case-insensitively."""
    return len(_pantry(available))


def score_missing(recipe_ingredients: list[str], available: Collection[str]) -> tuple[list[str], int]:
    """Return the recipe ingredients not covered by the available set.

    A phrase counts as available when it and some available item contain one
    another as a case-insensitive substring, so "2 red bell peppers" is
    covered by "peppers". Blank phrases and blank available items are ignored.

    Returns:
        (missing phrases in recipe order, number of missing phrases)
    """
    pantry = _pantry(available)
    missing = [
        phrase
        for phrase in recipe_ingredients
        if phrase.strip() and not _is_available(phrase.lower().strip(), pantry)
    ]
    return missing, len(missing)


def adaptive_threshold(pantry_size: int) -> int:
    """Maximum number of missing ingredients tolerated for a pantry of this size.

    Very small pantries get more slack so the user still sees results:
    0 -> 2, 1..3 -> 3, 4 and up -> 2.
    """
    if pantry_size <= 3:
        return min(3, pantry_size + 2)
    if pantry_size <= 6:
        return 2
    return 2


def rank_recipes(
    recipes: list[Recipe],
    available: Collection[str],
    is_saved: bool = False,
) -> list[RecipeWithMissing]:
    """Decorate, filter by the adaptive threshold and sort by missing count.

    The sort is stable: recipes with equal missing counts keep input order.
    """
    threshold = adaptive_threshold(distinct_pantry_size(available))

    decorated = []
    for recipe in recipes:
        missing, _ = score_missing(recipe.ingredients, available)
        decorated.append(RecipeWithMissing.from_recipe(recipe, missing, is_saved=is_saved))

    in_range = [recipe for recipe in decorated if recipe.missing_count <= threshold]
    return sorted(in_range, key=lambda recipe: recipe.missing_count)
