"""Prompts for the vision and recipe-generation models.

VISION_PROMPT asks the vision model for tiered JSON (see
src.pipeline.vision_parser for how non-compliant output is handled).
build_recipe_prompt() renders the recipe-generation instruction for one
request, including dietary rule blocks and the JSON shape parsed by
src.pipeline.recipe_parser.
"""

from src.models.models import UserPreferences

VISION_PROMPT = """You are an ingredient detector. Examine this fridge or pantry photo item by item.

## Rules
- List only food items you can actually see and are at least 90% sure about
- Do NOT list items that are merely likely to be in a kitchen
- Do NOT use category words: name "gala apples", not "fruit"
- At most 15 items
- Food only: never list containers, shelves or packaging

## Confidence
1. high_confidence: readable labels or unmistakable shapes
2. medium_confidence: partly hidden items you can still reasonably identify
3. Leave out categories, duplicates and anything unclear

## Never use these words as an item
fruit, fruits, vegetables, veggies, condiments, sauces, dressings, grains, nuts, herbs, spices, oils, dairy, produce, meat, beverages

## Be specific when these are visible
- Root vegetables: yam, cassava, sweet potato, taro, plantain
- International produce: okra, bok choy, napa cabbage, daikon
- Varieties: gala apples, roma tomatoes, yukon potatoes

## Output (JSON only)
{
  "high_confidence": [
    {"name": "hellmann's mayonnaise", "evidence": "label clearly visible"},
    {"name": "avocados", "evidence": "distinctive shape and skin"}
  ],
  "medium_confidence": [
    {"name": "red bell peppers", "evidence": "red color, partly hidden"}
  ]
}

Good names: "chobani greek yogurt", "carbone marinara sauce", "gala apples", "yam", "okra"
Bad names: "yogurt", "sauce", "fruit", "condiments", "vegetables", "root vegetables"
"""

DIETARY_RULES = {
    "vegetarian": """
## Dietary Restrictions (MANDATORY)
- VEGETARIAN: no meat, poultry, fish or seafood of any kind
- Never include: chicken, beef, pork, lamb, turkey, duck, fish, salmon, tuna, shrimp
- Proteins: beans, lentils, tofu, tempeh, nuts, seeds, eggs (lacto-ovo)""",
    "vegan": """
## Dietary Restrictions (MANDATORY)
- VEGAN: no animal products at all
- Never include: meat, poultry, fish, dairy, eggs, honey, gelatin
- Use plant-based ingredients only: vegetables, fruits, grains, legumes, nuts, seeds""",
    "gluten-free": """
## Dietary Restrictions (MANDATORY)
- GLUTEN-FREE: no wheat, barley, rye or other gluten sources
- Never include: bread, pasta, flour, soy sauce (unless labelled gluten-free)
- Use: rice, quinoa, corn, potatoes, gluten-free alternatives""",
}

SKILL_GUIDANCE = {
    "beginner": "simple techniques, few steps, no special equipment",
    "intermediate": "everyday home-cooking techniques",
    "advanced": "advanced techniques are welcome",
}

TIME_GUIDANCE = {
    "quick": "total time under 30 minutes",
    "normal": "total time around 30-60 minutes",
    "elaborate": "longer preparations are fine",
}

RECIPE_JSON_FORMAT = """{
  "recipes": [
    {
      "title": "Recipe Name",
      "description": "Short appetizing description (1-2 sentences)",
      "ingredients": ["ingredient 1", "ingredient 2"],
      "instructions": ["Step 1", "Step 2"],
      "prep_time": 15,
      "cook_time": 25,
      "servings": 4,
      "cuisine": ["Korean"],
      "dietary_tags": ["vegetarian", "gluten-free"],
      "difficulty": "easy",
      "tips": ["Optional tip"],
      "variations": ["Optional variation"]
    }
  ]
}"""


def get_dietary_rules(dietary_preferences: str | None) -> str:
    """Return the rule block for the first matching diet, or "".

    Checked in order vegetarian, vegan, gluten-free; only one block is used.
    """
    if not dietary_preferences or dietary_preferences.lower() == "none":
        return ""

    restrictions = dietary_preferences.lower()
    for diet, rules in DIETARY_RULES.items():
        if diet in restrictions:
            return rules
    return ""


def build_recipe_prompt(ingredients: list[str], preferences: UserPreferences, count: int) -> str:
    """Render the recipe-generation prompt.

    Args:
        ingredients: Available ingredients (staples included).
        preferences: User preferences shaping cuisine, diet, skill and time.
        count: Number of recipes to ask for.

    Returns:
        Prompt text requesting JSON only.
    """
    ingredient_list = ", ".join(ingredients)
    cuisines = ", ".join(preferences.food_genres) or "any"
    dietary = preferences.dietary_preferences or "none"
    dietary_rules = get_dietary_rules(preferences.dietary_preferences)

    return f"""You are a professional chef helping someone cook with what they already have.

## Available Ingredients
{ingredient_list}

## User Preferences
- Preferred cuisines: {cuisines}
- Dietary restrictions: {dietary}
- Cooking skill: {preferences.cooking_skill} ({SKILL_GUIDANCE[preferences.cooking_skill]})
- Time preference: {preferences.time_preference} ({TIME_GUIDANCE[preferences.time_preference]})
{dietary_rules}

## Constraints
- Use ONLY ingredients from the available list
- Do NOT assume extras like garlic, onion or ginger unless they are listed
- Common staples (salt, pepper, oil) are fine

## Task
Generate {count} creative, practical recipes that:
1. Strictly follow every dietary restriction above
2. Use only the available ingredients
3. Match the preferred cuisines, skill level and time preference
4. Carry accurate dietary_tags

## Output Format
Return valid JSON only, with no text before or after, in exactly this shape:

{RECIPE_JSON_FORMAT}
"""
