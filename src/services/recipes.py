"""Recipe generation and ranked suggestions.

generate_recipes() calls the Gemini text model and parses its JSON; errors
propagate. suggest_recipes() wraps it for the discovery flow: generated
recipes are ranked by missing ingredients, and when generation fails or
nothing is in range the caller's saved recipes are ranked instead.
"""

import asyncio
from typing import Optional

from google import genai
from google.genai import types

from src.models.models import Recipe, RecipeSuggestions, UserPreferences
from src.pipeline.matcher import adaptive_threshold, distinct_pantry_size, rank_recipes
from src.pipeline.recipe_parser import parse_recipe_response
from src.prompts.prompts import build_recipe_prompt
from src.utils.config import config
from src.utils.logger import logger

SAVED_FALLBACK_MESSAGE = "Using your saved recipes. Recipe generation temporarily unavailable."
NO_RECIPES_MESSAGE = "No recipes found. Try uploading more ingredient photos or generate some new recipes!"


def resolve_recipe_count(count: Optional[int]) -> int:
    """Apply DEFAULT_RECIPE_COUNT when unset and cap at MAX_RECIPE_COUNT."""
    if count is None:
        return config.DEFAULT_RECIPE_COUNT
    return max(1, min(count, config.MAX_RECIPE_COUNT))


async def generate_recipes(
    ingredients: list[str],
    preferences: Optional[UserPreferences] = None,
    count: Optional[int] = None,
) -> list[Recipe]:
    """Generate recipes for the given ingredients.

    Args:
        ingredients: Available ingredients.
        preferences: User preferences; defaults apply when None.
        count: Recipes to request (default DEFAULT_RECIPE_COUNT, capped at MAX_RECIPE_COUNT).

    Returns:
        Parsed recipes, possibly fewer than requested.

    Raises:
        ProviderConfigurationError: If GEMINI_API_KEY is not set.
        MalformedRecipeResponse: If the model output holds no recipes array.
        asyncio.TimeoutError: If the call exceeds REQUEST_TIMEOUT_SECONDS.
    """
    preferences = preferences or UserPreferences()
    count = resolve_recipe_count(count)

    client = genai.Client(api_key=config.require_api_key())
    prompt = build_recipe_prompt(ingredients, preferences, count)

    logger.info(
        f"Generating {count} recipes for {len(ingredients)} ingredients "
        f"(diet: {preferences.dietary_preferences or 'none'}, "
        f"cuisines: {', '.join(preferences.food_genres) or 'any'})"
    )

    response = await asyncio.wait_for(
        asyncio.to_thread(
            client.models.generate_content,
            model=config.GEMINI_MODEL,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=config.TEMPERATURE,
                max_output_tokens=config.MAX_OUTPUT_TOKENS,
            ),
        ),
        timeout=config.REQUEST_TIMEOUT_SECONDS,
    )

    recipes = parse_recipe_response(response.text or "")
    logger.info(f"Generated {len(recipes)} recipes")
    return recipes


async def suggest_recipes(
    ingredients: list[str],
    preferences: Optional[UserPreferences] = None,
    count: Optional[int] = None,
    saved_recipes: Optional[list[Recipe]] = None,
) -> RecipeSuggestions:
    """Suggest recipes ranked by how few ingredients the user is missing.

    Generated recipes are preferred. If generation raises, or no generated
    recipe is within the adaptive threshold, the saved recipes are ranked the
    same way and marked is_saved. Provider and parse errors never escape.
    """
    threshold = adaptive_threshold(distinct_pantry_size(ingredients))
    generation_failed = False

    try:
        generated = await generate_recipes(ingredients, preferences, count)
    except Exception as e:
        logger.warning(f"Recipe generation failed, falling back to saved recipes: {str(e) or type(e).__name__}")
        generated = []
        generation_failed = True

    ranked = rank_recipes(generated, ingredients)
    if ranked:
        return RecipeSuggestions(recipes=ranked, source="generated", threshold=threshold)

    ranked = rank_recipes(saved_recipes or [], ingredients, is_saved=True)
    if ranked:
        logger.info(f"Using {len(ranked)} saved recipes within threshold {threshold}")
        return RecipeSuggestions(
            recipes=ranked,
            source="saved",
            message=SAVED_FALLBACK_MESSAGE if generation_failed else None,
            threshold=threshold,
        )

    logger.info(f"No generated or saved recipes within threshold {threshold}")
    return RecipeSuggestions(recipes=[], source="none", message=NO_RECIPES_MESSAGE, threshold=threshold)
