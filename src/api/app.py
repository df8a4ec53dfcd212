"""HTTP API for the pantry recipe service.

Endpoints:
- POST /api/analyze-ingredients: photos → sorted ingredient list + metadata
- POST /api/generate-recipes: ingredients + preferences → recipes
- POST /api/suggest-recipes: ranked recipes with saved-recipe fallback
- GET /: health check

Every response carries CORS headers, every error body is ``{"error": "..."}``,
OPTIONS on an API path answers 200 with an empty body, and other methods get
405.
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.models.models import (
    AnalyzeIngredientsRequest,
    AnalyzeIngredientsResponse,
    ErrorResponse,
    GenerateRecipesRequest,
    GenerateRecipesResponse,
    RecipeSuggestions,
    SuggestRecipesRequest,
)
from src.services.ingredients import analyze_images
from src.services.recipes import generate_recipes, suggest_recipes
from src.utils.config import ProviderConfigurationError, config
from src.utils.logger import logger

SERVICE_NAME = "pantry-recipes"
VERSION = "1.0.0"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": config.CORS_ALLOW_ORIGIN,
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

API_PATHS = ("/api/analyze-ingredients", "/api/generate-recipes", "/api/suggest-recipes")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request body"},
    500: {"model": ErrorResponse, "description": "Provider not configured or request failed"},
}


app = FastAPI(
    title="Pantry Recipe Service",
    description="Detect ingredients in pantry photos and generate recipes from them",
    version=VERSION,
)


@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    """Attach CORS headers to every response, including errors."""
    response = await call_next(request)
    for header, value in CORS_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=CORS_HEADERS)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405:
        return error_response(405, "Method not allowed")
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        detail = "malformed body"
    logger.debug(f"Rejected request body on {request.url.path}: {detail}", extra={"endpoint": request.url.path})
    return error_response(400, f"Invalid request body: {detail}")


# ============================================================================
# Routes
# ============================================================================


@app.get("/")
async def health() -> dict:
    return {"status": "ok", "service": SERVICE_NAME, "version": VERSION}


@app.options("/api/{endpoint}")
async def preflight(endpoint: str) -> Response:
    """Answer CORS preflight requests that reach the router."""
    if f"/api/{endpoint}" not in API_PATHS:
        return error_response(404, "Not Found")
    return Response(status_code=200, headers=CORS_HEADERS)


@app.post("/api/analyze-ingredients", response_model=AnalyzeIngredientsResponse, responses=ERROR_RESPONSES)
async def analyze_ingredients(body: AnalyzeIngredientsRequest):
    """Detect ingredients in up to five pantry photos."""
    context = {"request_id": uuid.uuid4().hex[:8], "endpoint": "analyze-ingredients"}
    logger.info(f"Analyzing {len(body.image_urls)} image(s)", extra=context)

    try:
        analysis = await analyze_images(body.image_urls, body.dietary_restrictions)
    except ProviderConfigurationError as e:
        logger.error(str(e), extra=context)
        return error_response(500, str(e))
    except Exception as e:
        logger.error(f"Ingredient analysis failed: {e}", exc_info=True, extra=context)
        return error_response(500, "Failed to analyze ingredients")

    return AnalyzeIngredientsResponse(ingredients=analysis.ingredients, metadata=analysis.metadata)


@app.post("/api/generate-recipes", response_model=GenerateRecipesResponse, responses=ERROR_RESPONSES)
async def generate_recipes_endpoint(body: GenerateRecipesRequest):
    """Generate recipes from the given ingredients and preferences."""
    context = {"request_id": uuid.uuid4().hex[:8], "endpoint": "generate-recipes"}
    logger.info(f"Generating recipes for {len(body.ingredients)} ingredients", extra=context)

    try:
        recipes = await generate_recipes(body.ingredients, body.preferences, body.count)
    except ProviderConfigurationError as e:
        logger.error(str(e), extra=context)
        return error_response(500, str(e))
    except Exception as e:
        logger.error(f"Recipe generation failed: {str(e) or type(e).__name__}", exc_info=True, extra=context)
        return error_response(500, "Failed to generate recipes")

    return GenerateRecipesResponse(recipes=recipes)


@app.post("/api/suggest-recipes", response_model=RecipeSuggestions, responses=ERROR_RESPONSES)
async def suggest_recipes_endpoint(body: SuggestRecipesRequest):
    """Rank generated recipes by missing ingredients, falling back to saved ones."""
    context = {"request_id": uuid.uuid4().hex[:8], "endpoint": "suggest-recipes"}
    logger.info(
        f"Suggesting recipes for {len(body.ingredients)} ingredients "
        f"({len(body.saved_recipes)} saved recipes available)",
        extra=context,
    )

    try:
        return await suggest_recipes(body.ingredients, body.preferences, body.count, body.saved_recipes)
    except Exception as e:
        logger.error(f"Recipe suggestion failed: {e}", exc_info=True, extra=context)
        return error_response(500, "Failed to generate recipes")
