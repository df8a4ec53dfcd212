"""Pantry Recipe Service - HTTP server entry point.

Serves the FastAPI app from src/api/app.py:
- POST /api/analyze-ingredients
- POST /api/generate-recipes
- POST /api/suggest-recipes
- GET / (health)

Run with: python app.py
"""

import uvicorn

from src.utils.config import config
from src.utils.logger import logger


if __name__ == "__main__":
    logger.info(f"Starting Pantry Recipe Service on port {config.PORT}")
    logger.info(f"Recipe model: {config.GEMINI_MODEL}, vision model: {config.IMAGE_DETECTION_MODEL}")
    if not config.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY not set: analysis and generation requests will return HTTP 500")
    logger.info(f"API docs available at: http://localhost:{config.PORT}/docs")

    uvicorn.run("src.api.app:app", host="0.0.0.0", port=config.PORT)
