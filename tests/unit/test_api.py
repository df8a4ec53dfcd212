"""Unit tests for the HTTP API.

Tests verify:
- Response bodies for each endpoint (services mocked)
- Error mapping: missing API key and failures → 500, bad bodies → 400
- Method handling: OPTIONS → 200 with CORS headers, others → 405
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from src.api.app import app
from src.models.models import (
    AnalysisMetadata,
    ConfidenceTier,
    DetectedIngredient,
    IngredientAnalysis,
    Recipe,
    RecipeSuggestions,
    RecipeWithMissing,
    UserPreferences,
)
from src.pipeline.recipe_parser import MalformedRecipeResponse
from src.utils.config import config


@pytest.fixture
def client():
    return TestClient(app)


def _analysis() -> IngredientAnalysis:
    return IngredientAnalysis(
        ingredients=["kale", "olive oil", "pepper", "salt", "water"],
        detected=[DetectedIngredient(name="kale", tier=ConfidenceTier.HIGH)],
        metadata=AnalysisMetadata(
            detected=1,
            with_staples=5,
            staples=["salt", "pepper", "olive oil", "water"],
            images_processed=1,
            images_failed=0,
            confidence={"kale": ConfidenceTier.HIGH},
        ),
    )


class TestHealth:
    def test_health(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestAnalyzeIngredients:
    """POST /api/analyze-ingredients."""

    def test_success(self, client):
        analyze = AsyncMock(return_value=_analysis())
        with patch("src.api.app.analyze_images", new=analyze):
            response = client.post(
                "/api/analyze-ingredients",
                json={"imageUrls": ["https://example.com/fridge.jpg"], "dietaryRestrictions": "vegan"},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["ingredients"] == ["kale", "olive oil", "pepper", "salt", "water"]
        assert body["metadata"]["withStaples"] == 5
        assert body["metadata"]["imagesProcessed"] == 1
        assert body["metadata"]["confidence"] == {"kale": "high"}
        analyze.assert_awaited_once_with(["https://example.com/fridge.jpg"], "vegan")

    def test_missing_api_key(self, client):
        """The real service raises before any image work when the key is missing."""
        with patch.object(config, "GEMINI_API_KEY", ""):
            response = client.post("/api/analyze-ingredients", json={"imageUrls": ["https://example.com/a.jpg"]})

        assert response.status_code == 500
        assert response.json() == {"error": "Gemini API key not configured"}

    def test_unexpected_failure(self, client):
        with patch("src.api.app.analyze_images", new=AsyncMock(side_effect=RuntimeError("boom"))):
            response = client.post("/api/analyze-ingredients", json={"imageUrls": ["https://example.com/a.jpg"]})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to analyze ingredients"}

    def test_missing_image_urls(self, client):
        response = client.post("/api/analyze-ingredients", json={"dietaryRestrictions": "vegan"})

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request body")

    def test_malformed_json(self, client):
        response = client.post(
            "/api/analyze-ingredients",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert "error" in response.json()


class TestGenerateRecipes:
    """POST /api/generate-recipes."""

    def test_success(self, client):
        recipes = [Recipe(id="generated_1_0", title="Toast", ingredients=["bread"])]
        generate = AsyncMock(return_value=recipes)

        with patch("src.api.app.generate_recipes", new=generate):
            response = client.post(
                "/api/generate-recipes",
                json={"ingredients": ["bread"], "preferences": {"food_genres": ["French"]}, "count": 3},
            )

        assert response.status_code == 200
        [recipe] = response.json()["recipes"]
        assert recipe["title"] == "Toast"
        assert recipe["prep_time"] == 15
        generate.assert_awaited_once_with(["bread"], UserPreferences(food_genres=["French"]), 3)

    def test_missing_api_key(self, client):
        with patch.object(config, "GEMINI_API_KEY", ""):
            response = client.post("/api/generate-recipes", json={"ingredients": ["bread"], "preferences": {}})

        assert response.status_code == 500
        assert response.json() == {"error": "Gemini API key not configured"}

    def test_malformed_model_output(self, client):
        with patch("src.api.app.generate_recipes", new=AsyncMock(side_effect=MalformedRecipeResponse("no json"))):
            response = client.post("/api/generate-recipes", json={"ingredients": ["bread"], "preferences": {}})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate recipes"}

    def test_invalid_count(self, client):
        response = client.post("/api/generate-recipes", json={"ingredients": ["bread"], "count": 0})
        assert response.status_code == 400


class TestSuggestRecipes:
    """POST /api/suggest-recipes."""

    def test_success(self, client):
        suggestion = RecipeSuggestions(
            recipes=[
                RecipeWithMissing.from_recipe(Recipe(title="Toast", ingredients=["bread", "jam"]), ["jam"], is_saved=True)
            ],
            source="saved",
            message="Using your saved recipes. Recipe generation temporarily unavailable.",
            threshold=3,
        )
        suggest = AsyncMock(return_value=suggestion)

        with patch("src.api.app.suggest_recipes", new=suggest):
            response = client.post(
                "/api/suggest-recipes",
                json={"ingredients": ["bread"], "savedRecipes": [{"title": "Toast", "ingredients": ["bread", "jam"]}]},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["source"] == "saved"
        assert body["threshold"] == 3
        assert body["recipes"][0]["missing_ingredients"] == ["jam"]
        assert body["recipes"][0]["is_saved"] is True
        saved_arg = suggest.await_args.args[3]
        assert saved_arg[0].title == "Toast"


class TestMethodsAndCors:
    """OPTIONS, 405 handling and CORS headers."""

    @pytest.mark.parametrize("path", ["/api/analyze-ingredients", "/api/generate-recipes", "/api/suggest-recipes"])
    def test_options(self, client, path):
        response = client.options(path)

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-headers"] == "Content-Type"
        assert "POST" in response.headers["access-control-allow-methods"]

    def test_browser_preflight(self, client):
        """A preflight carrying Origin and extra request headers is answered by the route."""
        response = client.options(
            "/api/analyze-ingredients",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type, authorization",
            },
        )

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-headers"] == "Content-Type"
        assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"

    def test_cross_origin_post_carries_cors_headers(self, client):
        response = client.post("/api/generate-recipes", json={}, headers={"Origin": "https://app.example.com"})
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.parametrize("method", ["get", "put", "delete"])
    def test_method_not_allowed(self, client, method):
        response = client.request(method.upper(), "/api/generate-recipes")

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}
        assert response.headers["access-control-allow-origin"] == "*"

    def test_error_responses_carry_cors_headers(self, client):
        response = client.post("/api/generate-recipes", json={})
        assert response.status_code == 400
        assert response.headers["access-control-allow-origin"] == "*"

    def test_unknown_path(self, client):
        response = client.post("/recipes")
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}

    def test_options_unknown_endpoint(self, client):
        response = client.options("/api/unknown")
        assert response.status_code == 404
