"""Pytest configuration and fixtures for integration tests.

Ensures environment variables are loaded and validates the Gemini API key
before running integration tests against the live provider.
"""

import base64
import io
import os
from pathlib import Path

import pytest
from dotenv import load_dotenv
from PIL import Image, ImageDraw


def pytest_configure(config):
    """Load .env (in project root) before test collection."""
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)

    # Keep live runs small and quick
    os.environ.setdefault("MAX_RETRIES", "2")
    os.environ.setdefault("DEFAULT_RECIPE_COUNT", "3")

    print("\n" + "=" * 70)
    print("Note: These tests require a valid GEMINI_API_KEY")
    print(f"Environment loaded from: {env_path}")
    print("=" * 70 + "\n")


@pytest.fixture(scope="session", autouse=True)
def check_api_keys():
    """Skip the integration session when GEMINI_API_KEY is not configured."""
    if not os.getenv("GEMINI_API_KEY"):
        pytest.skip(
            "Integration tests skipped. Missing API key: GEMINI_API_KEY. Please set it in your .env file.",
            allow_module_level=True,
        )


@pytest.fixture(scope="session")
def pantry_photo_url() -> str:
    """A synthetic shelf photo (three coloured shapes) as a PNG data URL."""
    image = Image.new("RGB", (320, 240), "white")
    draw = ImageDraw.Draw(image)
    draw.ellipse((20, 60, 110, 150), fill="red")
    draw.ellipse((130, 60, 220, 150), fill="orange")
    draw.rectangle((240, 40, 300, 200), fill="yellow")

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")
