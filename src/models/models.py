"""Data models and schemas for the pantry recipe service.

Defines Pydantic models for the ingredient/recipe domain objects and for the
HTTP request/response bodies. All models use Pydantic v2. HTTP bodies keep the
camelCase field names the web client sends (``imageUrls``, ``savedRecipes``)
through aliases, while Python code uses snake_case attributes.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConfidenceTier(str, Enum):
    """How sure the vision model was about an ingredient.

    The tier comes from the section of the structured vision response an item
    was listed in; plain comma-separated output gets the default tier, and
    items carrying their own score get the tier that score reaches.
    """

    HIGH = "high"
    MEDIUM = "medium"
    DEFAULT = "default"

    @property
    def score(self) -> float:
        return _TIER_SCORES[self]

    @classmethod
    def for_score(cls, score: float) -> "ConfidenceTier":
        """Highest tier whose score does not exceed the given score."""
        if score >= _TIER_SCORES[cls.HIGH]:
            return cls.HIGH
        if score >= _TIER_SCORES[cls.MEDIUM]:
            return cls.MEDIUM
        return cls.DEFAULT


_TIER_SCORES = {
    ConfidenceTier.HIGH: 0.95,
    ConfidenceTier.MEDIUM: 0.8,
    ConfidenceTier.DEFAULT: 0.7,
}


class DetectedIngredient(BaseModel):
    """Canonical ingredient name tagged with the tier it was detected at.

    ``score`` holds the model-reported confidence when the response carried
    one per item; otherwise the tier score applies.
    """

    model_config = ConfigDict(frozen=True)

    name: Annotated[str, Field(min_length=1, description="Normalized ingredient name")]
    tier: ConfidenceTier = ConfidenceTier.DEFAULT
    score: Annotated[Optional[float], Field(ge=0.0, le=1.0)] = None

    @property
    def confidence(self) -> float:
        return self.tier.score if self.score is None else self.score


Difficulty = Literal["easy", "medium", "hard"]


class Recipe(BaseModel):
    """Domain model for a recipe produced by the generation provider.

    Ingredient phrases are kept as the model wrote them ("2 red bell peppers"),
    they are not canonicalized. Defaults mirror the ones applied when a
    generated recipe is missing a field.
    """

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: Annotated[str, Field(description="Opaque id, unique within one generation batch")] = ""
    title: Annotated[str, Field(min_length=1, description="Recipe name")] = "Untitled Recipe"
    description: str = ""
    ingredients: Annotated[List[str], Field(default_factory=list, description="Free-text ingredient phrases")]
    instructions: Annotated[List[str], Field(default_factory=list, description="Ordered cooking steps")]
    prep_time: Annotated[int, Field(ge=0, description="Preparation time in minutes")] = 15
    cook_time: Annotated[int, Field(ge=0, description="Cooking time in minutes")] = 30
    servings: Annotated[int, Field(ge=1, description="Number of servings")] = 4
    cuisine: Annotated[List[str], Field(default_factory=lambda: ["International"])]
    dietary_tags: Annotated[List[str], Field(default_factory=list)]
    difficulty: Difficulty = "medium"
    tips: Optional[List[str]] = None
    variations: Optional[List[str]] = None


class RecipeWithMissing(Recipe):
    """Recipe decorated with the ingredients the user would still need to buy."""

    missing_ingredients: List[str] = Field(default_factory=list)
    missing_count: Annotated[int, Field(ge=0)] = 0
    is_saved: bool = False

    @classmethod
    def from_recipe(cls, recipe: Recipe, missing: list[str], is_saved: bool = False) -> "RecipeWithMissing":
        return cls(
            **recipe.model_dump(),
            missing_ingredients=missing,
            missing_count=len(missing),
            is_saved=is_saved,
        )


class UserPreferences(BaseModel):
    """Preferences read from the user's profile and used to shape generation.

    ``dietary_preferences`` is free text and may hold several comma-joined
    tags ("vegan, gluten-free"); a list of tags is joined into that form.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    dietary_preferences: Optional[str] = None
    food_genres: List[str] = Field(default_factory=list)
    cooking_skill: Literal["beginner", "intermediate", "advanced"] = "intermediate"
    time_preference: Literal["quick", "normal", "elaborate"] = "normal"

    @field_validator("dietary_preferences", mode="before")
    @classmethod
    def join_dietary_tags(cls, value):
        """Accept either a string or a list of tags."""
        if isinstance(value, list):
            tags = [str(tag).strip() for tag in value if tag]
            return ", ".join(tags) or None
        return value or None

    @field_validator("food_genres", mode="before")
    @classmethod
    def default_food_genres(cls, value):
        return value or []


# ============================================================================
# Service results
# ============================================================================


class AnalysisMetadata(BaseModel):
    """Counts and tier information reported alongside analyzed ingredients."""

    model_config = ConfigDict(populate_by_name=True)

    detected: int = 0
    with_staples: int = Field(0, alias="withStaples")
    staples: List[str] = Field(default_factory=list)
    images_processed: int = Field(0, alias="imagesProcessed")
    images_failed: int = Field(0, alias="imagesFailed")
    confidence: dict[str, ConfidenceTier] = Field(default_factory=dict)


class IngredientAnalysis(BaseModel):
    """Outcome of analyzing one batch of pantry photos."""

    ingredients: List[str] = Field(default_factory=list, description="Sorted ingredients including staples")
    detected: List[DetectedIngredient] = Field(default_factory=list, description="Deduplicated detections")
    metadata: AnalysisMetadata = Field(default_factory=AnalysisMetadata)


class RecipeSuggestions(BaseModel):
    """Ranked recipes plus where they came from."""

    recipes: List[RecipeWithMissing] = Field(default_factory=list)
    source: Literal["generated", "saved", "none"] = "none"
    message: Optional[str] = None
    threshold: int = 0


# ============================================================================
# HTTP request/response bodies
# ============================================================================


class AnalyzeIngredientsRequest(BaseModel):
    """Body of POST /api/analyze-ingredients."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    image_urls: Annotated[List[str], Field(alias="imageUrls", description="Photo URLs; only the first five are used")]
    dietary_restrictions: Optional[str] = Field(None, alias="dietaryRestrictions")
    cuisine_preferences: Optional[List[str]] = Field(None, alias="cuisinePreferences")

    @field_validator("image_urls", mode="before")
    @classmethod
    def drop_blank_urls(cls, value):
        if isinstance(value, list):
            return [url for url in value if isinstance(url, str) and url.strip()]
        return value


class AnalyzeIngredientsResponse(BaseModel):
    """Response of POST /api/analyze-ingredients."""

    ingredients: List[str]
    metadata: AnalysisMetadata


class GenerateRecipesRequest(BaseModel):
    """Body of POST /api/generate-recipes."""

    ingredients: List[str]
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    count: Annotated[Optional[int], Field(ge=1, description="Number of recipes to request")] = None

    @field_validator("preferences", mode="before")
    @classmethod
    def default_preferences(cls, value):
        return value or {}


class GenerateRecipesResponse(BaseModel):
    """Response of POST /api/generate-recipes."""

    recipes: List[Recipe]


class SuggestRecipesRequest(GenerateRecipesRequest):
    """Body of POST /api/suggest-recipes."""

    model_config = ConfigDict(populate_by_name=True)

    saved_recipes: List[Recipe] = Field(default_factory=list, alias="savedRecipes")


class ErrorResponse(BaseModel):
    """Error body returned by every endpoint."""

    error: str
