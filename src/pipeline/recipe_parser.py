"""Extract recipes from recipe-generation model output.

Unlike vision parsing this is a hard-failure path: there is no safe fallback
shape for a recipe, so output without a usable ``recipes`` array raises
MalformedRecipeResponse. Individual entries, on the other hand, are coerced
field by field and never rejected for a bad value.
"""

import json
import math
import time
from typing import Any, Optional

from src.models.models import Recipe
from src.pipeline.json_span import find_json_object_span
from src.utils.logger import logger

DIFFICULTIES = ("easy", "medium", "hard")


class MalformedRecipeResponse(ValueError):
    """Raised when model output holds no parseable ``recipes`` array."""


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a meaningful duration or count
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _minutes(value: Any, default: int) -> int:
    if not _is_number(value):
        return default
    return max(0, int(value))


def _servings(value: Any) -> int:
    if _is_number(value) and int(value) >= 1:
        return int(value)
    return 4


def _string_list(value: Any) -> Optional[list[str]]:
    """Stringify list items, dropping nulls; None if value is not a list."""
    if not isinstance(value, list):
        return None
    return [item if isinstance(item, str) else str(item) for item in value if item is not None]


def _coerce_recipe(entry: dict, recipe_id: str) -> Recipe:
    title = entry.get("title")
    description = entry.get("description")
    difficulty = entry.get("difficulty")
    cuisine = _string_list(entry.get("cuisine"))

    return Recipe(
        id=recipe_id,
        title=title if isinstance(title, str) and title.strip() else "Untitled Recipe",
        description=description if isinstance(description, str) else "",
        ingredients=_string_list(entry.get("ingredients")) or [],
        instructions=_string_list(entry.get("instructions")) or [],
        prep_time=_minutes(entry.get("prep_time"), 15),
        cook_time=_minutes(entry.get("cook_time"), 30),
        servings=_servings(entry.get("servings")),
        cuisine=cuisine if cuisine is not None else ["International"],
        dietary_tags=_string_list(entry.get("dietary_tags")) or [],
        difficulty=difficulty if difficulty in DIFFICULTIES else "medium",
        tips=_string_list(entry.get("tips")),
        variations=_string_list(entry.get("variations")),
    )


def parse_recipe_response(raw_text: str, now: Optional[float] = None) -> list[Recipe]:
    """Parse the first JSON object in raw_text into a list of recipes.

    Args:
        raw_text: Text returned by the recipe-generation model.
        now: Epoch seconds used to build ids; defaults to the current time.

    Returns:
        One Recipe per object entry of the ``recipes`` array. Ids have the form
        ``generated_{epoch_ms}_{index}`` where index is the entry's position
        in the raw array. Non-object entries are skipped.

    Raises:
        MalformedRecipeResponse: If there is no JSON object, it does not parse,
            or it has no ``recipes`` list.
    """
    if not isinstance(raw_text, str):
        raise MalformedRecipeResponse("Recipe response is not text")

    span = find_json_object_span(raw_text)
    if span is None:
        raise MalformedRecipeResponse("No JSON object found in recipe response")

    try:
        payload = json.loads(span)
    except json.JSONDecodeError as e:
        raise MalformedRecipeResponse(f"Invalid JSON in recipe response: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedRecipeResponse("Recipe response JSON is not an object")

    entries = payload.get("recipes")
    if not isinstance(entries, list):
        raise MalformedRecipeResponse("Recipe response has no 'recipes' array")

    epoch_ms = int((time.time() if now is None else now) * 1000)

    recipes = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.debug(f"Skipping recipe entry {index}: not an object")
            continue
        recipes.append(_coerce_recipe(entry, f"generated_{epoch_ms}_{index}"))

    logger.debug(f"Parsed {len(recipes)} of {len(entries)} recipe entries")
    return recipes
