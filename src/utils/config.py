"""Configuration management for the pantry recipe service.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class ProviderConfigurationError(ValueError):
    """Raised when a model provider cannot be called because it is not configured."""


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Gemini API key: shared by the vision and recipe-generation calls.
        # Missing key is reported per request (HTTP 500), not at startup.
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Recipe generation model
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        # Image Detection Model: separate model optimized for vision tasks
        self.IMAGE_DETECTION_MODEL: str = os.getenv("IMAGE_DETECTION_MODEL", "gemini-2.5-flash-lite")
        # Server Port
        self.PORT: int = int(os.getenv("PORT", "3001"))
        # Photos analyzed per request; extra URLs are ignored. Default: 5
        self.MAX_IMAGES_PER_BATCH: int = int(os.getenv("MAX_IMAGES_PER_BATCH", "5"))
        # Maximum image size (in MB) that can be processed. Default: 5 MB
        self.MAX_IMAGE_SIZE_MB: int = int(os.getenv("MAX_IMAGE_SIZE_MB", "5"))
        # Minimum confidence score (0.0 - 1.0) for ingredient detection. Default: 0.7
        # Tiers: high=0.95, medium=0.8, default=0.7
        self.MIN_INGREDIENT_CONFIDENCE: float = float(os.getenv("MIN_INGREDIENT_CONFIDENCE", "0.7"))
        # Image Compression: Enable/disable image compression before processing
        self.COMPRESS_IMG: bool = _env_bool("COMPRESS_IMG", "true")
        # Only compress images larger than this (in KB)
        self.COMPRESS_IMG_THRESHOLD_KB: int = int(os.getenv("COMPRESS_IMG_THRESHOLD_KB", "300"))
        # Upper bound for each external call (image fetch, model call), in seconds
        self.REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))
        # MAX_RETRIES: attempts per vision call on transient failures (exponential backoff)
        self.MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "3"))
        # DELAY_BETWEEN_RETRIES: initial delay in seconds, doubled each retry
        self.DELAY_BETWEEN_RETRIES: int = int(os.getenv("DELAY_BETWEEN_RETRIES", "1"))
        # Recipes requested when the caller does not specify a count
        self.DEFAULT_RECIPE_COUNT: int = int(os.getenv("DEFAULT_RECIPE_COUNT", "5"))
        # Hard cap on recipes requested per generation call
        self.MAX_RECIPE_COUNT: int = int(os.getenv("MAX_RECIPE_COUNT", "10"))
        # LLM Model Parameters for recipe generation
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.7"))
        self.MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "4000"))
        # Value of Access-Control-Allow-Origin on every API response
        self.CORS_ALLOW_ORIGIN: str = os.getenv("CORS_ALLOW_ORIGIN", "*")

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If a numeric setting is out of range.
        """
        if self.MAX_IMAGES_PER_BATCH < 1:
            raise ValueError(f"MAX_IMAGES_PER_BATCH must be at least 1, got: {self.MAX_IMAGES_PER_BATCH}")
        if self.MAX_IMAGE_SIZE_MB < 1:
            raise ValueError(f"MAX_IMAGE_SIZE_MB must be at least 1, got: {self.MAX_IMAGE_SIZE_MB}")
        if not (0.0 <= self.MIN_INGREDIENT_CONFIDENCE <= 1.0):
            raise ValueError(
                f"MIN_INGREDIENT_CONFIDENCE must be between 0.0 and 1.0, got: {self.MIN_INGREDIENT_CONFIDENCE}"
            )
        if self.REQUEST_TIMEOUT_SECONDS <= 0:
            raise ValueError(f"REQUEST_TIMEOUT_SECONDS must be positive, got: {self.REQUEST_TIMEOUT_SECONDS}")
        if self.MAX_RETRIES < 1:
            raise ValueError(f"MAX_RETRIES must be at least 1, got: {self.MAX_RETRIES}")
        if self.DELAY_BETWEEN_RETRIES < 0:
            raise ValueError(f"DELAY_BETWEEN_RETRIES must not be negative, got: {self.DELAY_BETWEEN_RETRIES}")
        if not (1 <= self.DEFAULT_RECIPE_COUNT <= self.MAX_RECIPE_COUNT):
            raise ValueError(
                f"DEFAULT_RECIPE_COUNT must be between 1 and MAX_RECIPE_COUNT ({self.MAX_RECIPE_COUNT}), "
                f"got: {self.DEFAULT_RECIPE_COUNT}"
            )
        if not (0.0 <= self.TEMPERATURE <= 2.0):
            raise ValueError(f"TEMPERATURE must be between 0.0 and 2.0, got: {self.TEMPERATURE}")
        if self.MAX_OUTPUT_TOKENS < 512:
            raise ValueError(f"MAX_OUTPUT_TOKENS must be at least 512, got: {self.MAX_OUTPUT_TOKENS}")

    def require_api_key(self) -> str:
        """Return the Gemini API key.

        Raises:
            ProviderConfigurationError: If GEMINI_API_KEY is not set.
        """
        if not self.GEMINI_API_KEY:
            raise ProviderConfigurationError("Gemini API key not configured")
        return self.GEMINI_API_KEY


# Create module-level config instance and validate immediately
config = Config()
config.validate()
