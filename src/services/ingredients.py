"""Ingredient analysis from pantry photos using the Gemini vision API.

Pipeline per image (images run concurrently, results reassembled in order):

1. get_image_bytes(): http(s) URL, data URL or plain base64 → bytes
2. validate_image_format() / validate_image_size(): JPEG, PNG or WEBP under MAX_IMAGE_SIZE_MB
3. compress_image(): optional, only above COMPRESS_IMG_THRESHOLD_KB
4. call_vision_with_retries(): Gemini call bounded by REQUEST_TIMEOUT_SECONDS,
   retried with exponential backoff on transient errors
5. parse_vision_response() + filter_by_confidence()

A failure at any step skips that image only. analyze_images() then unions the
per-image results, deduplicates, adds the assumed staples and sorts.
"""

import asyncio
import base64
from io import BytesIO
from typing import Optional

import aiohttp
import filetype
from google import genai
from google.genai import types
from PIL import Image

from src.models.models import AnalysisMetadata, DetectedIngredient, IngredientAnalysis
from src.pipeline.dedupe import dedupe
from src.pipeline.tables import ASSUMED_STAPLES
from src.pipeline.vision_parser import filter_by_confidence, parse_vision_response
from src.prompts.prompts import VISION_PROMPT
from src.utils.config import config
from src.utils.logger import logger

SUPPORTED_FORMATS = ("jpg", "png", "webp")

TRANSIENT_KEYWORDS = ("timeout", "connection", "429", "500", "503", "502", "retryable")


# ============================================================================
# Error Handling Helpers
# ============================================================================


def _log_error(operation_name: str, exception: Exception, log_level: str = "warning", extra: Optional[dict] = None) -> None:
    """Log error with appropriate level.

    Args:
        operation_name: Description for logging
        exception: Exception that occurred
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
        extra: Context fields passed through to the log record.
    """
    msg = f"{operation_name}: {str(exception) or type(exception).__name__}"
    if log_level == "debug":
        logger.debug(msg, extra=extra)
    elif log_level == "error":
        logger.error(msg, extra=extra)
    else:
        logger.warning(msg, extra=extra)


async def safe_execute_async(
    coro,
    operation_name: str,
    log_level: str = "warning",
    default_return=None,
    reraise: bool = False,
    extra: Optional[dict] = None,
):
    """Safely execute async operation with consistent error logging.

    Used for optional operations that should degrade gracefully, such as
    fetching one image out of a batch.

    Args:
        coro: Awaitable coroutine to execute.
        operation_name: Description for logging (e.g., "Fetch image from URL").
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
        default_return: Value to return on exception. Default: None.
        reraise: If True, re-raise exception after logging. Default: False.
        extra: Context fields passed through to the log record.

    Returns:
        Result of coroutine, or default_return on exception if reraise=False.

    Example:
        image_bytes = await safe_execute_async(fetch(url), "Fetch image", default_return=None)
    """
    try:
        return await coro
    except Exception as e:
        _log_error(operation_name, e, log_level, extra)
        if reraise:
            raise
        return default_return


def safe_execute_sync(
    func,
    operation_name: str,
    log_level: str = "warning",
    default_return=None,
    reraise: bool = False,
    extra: Optional[dict] = None,
):
    """Safely execute sync operation with consistent error logging.

    Synchronous version of safe_execute_async. Same behavior and arguments,
    except func is a zero-argument callable.
    """
    try:
        return func()
    except Exception as e:
        _log_error(operation_name, e, log_level, extra)
        if reraise:
            raise
        return default_return


def is_transient_error(error: Exception) -> bool:
    """True for timeouts, connection problems and retryable HTTP statuses."""
    if isinstance(error, (asyncio.TimeoutError, aiohttp.ClientError)):
        return True
    error_str = str(error).lower()
    return any(keyword in error_str for keyword in TRANSIENT_KEYWORDS)


# ============================================================================
# Image loading and validation
# ============================================================================


async def fetch_image_bytes(url: str) -> bytes:
    """Download an image over http(s).

    Raises:
        aiohttp.ClientResponseError: On a non-2xx status.
        asyncio.TimeoutError: If the download exceeds REQUEST_TIMEOUT_SECONDS.
    """
    timeout = aiohttp.ClientTimeout(total=config.REQUEST_TIMEOUT_SECONDS)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        async with session.get(url) as response:
            response.raise_for_status()
            return await response.read()


def decode_base64_image(image_source: str) -> bytes:
    """Decode a data URL (data:image/png;base64,...) or a plain base64 string."""
    if image_source.startswith("data:"):
        _, image_source = image_source.split(",", 1)
    return base64.b64decode(image_source, validate=True)


async def get_image_bytes(image_source: str, idx: int = 0) -> Optional[bytes]:
    """Resolve an image source to bytes.

    Supports http(s) URLs, data URLs and plain base64 strings.

    Returns:
        Image bytes, or None on any failure (logged as warning).
    """
    extra = {"image_index": idx}

    if image_source.startswith(("http://", "https://")):
        return await safe_execute_async(
            fetch_image_bytes(image_source),
            f"Fetch image from URL: {image_source}",
            default_return=None,
            extra=extra,
        )

    return safe_execute_sync(
        lambda: decode_base64_image(image_source),
        "Decode base64 image",
        default_return=None,
        extra=extra,
    )


def detect_image_format(image_bytes: bytes):
    """Guess the image type from magic bytes, not from any extension."""
    return filetype.guess(image_bytes)


def validate_image_format(image_bytes: bytes) -> bool:
    """Validate image format (JPEG, PNG or WEBP)."""
    kind = detect_image_format(image_bytes)
    if kind is None or kind.extension not in SUPPORTED_FORMATS:
        logger.warning(f"Invalid image format: {kind.mime if kind else 'unknown'}. Only JPEG, PNG and WEBP supported.")
        return False
    return True


def validate_image_size(image_bytes: bytes) -> bool:
    """Validate image size against MAX_IMAGE_SIZE_MB."""
    size_mb = len(image_bytes) / (1024 * 1024)
    if size_mb > config.MAX_IMAGE_SIZE_MB:
        logger.warning(f"Image size {size_mb:.2f}MB exceeds limit of {config.MAX_IMAGE_SIZE_MB}MB")
        return False
    return True


def compress_image(image_bytes: bytes, max_width: int = 1024) -> bytes:
    """Compress image for API transmission using Pillow.

    Images under COMPRESS_IMG_THRESHOLD_KB are returned unchanged. Larger ones
    are converted to RGB, resized to max_width and re-encoded as JPEG
    (quality 85, optimize, progressive).

    Returns:
        Compressed JPEG bytes, or the original bytes if compression fails.
    """
    size_kb = len(image_bytes) / 1024
    if size_kb < config.COMPRESS_IMG_THRESHOLD_KB:
        logger.debug(
            f"Image size {size_kb:.1f}KB below compression threshold "
            f"({config.COMPRESS_IMG_THRESHOLD_KB}KB), skipping compression"
        )
        return image_bytes

    def _compress():
        img = Image.open(BytesIO(image_bytes))

        if img.mode in ("RGBA", "LA", "P"):
            img = img.convert("RGBA")
            rgb_img = Image.new("RGB", img.size, (255, 255, 255))
            rgb_img.paste(img, mask=img.split()[-1])
            img = rgb_img
        elif img.mode != "RGB":
            img = img.convert("RGB")

        if img.width > max_width:
            ratio = max_width / img.width
            img = img.resize((max_width, int(img.height * ratio)), Image.Resampling.LANCZOS)

        output = BytesIO()
        img.save(output, format="JPEG", quality=85, optimize=True, progressive=True)
        compressed_bytes = output.getvalue()

        logger.debug(
            f"Image compressed: {size_kb:.1f}KB → {len(compressed_bytes) / 1024:.1f}KB "
            f"({(1 - len(compressed_bytes) / len(image_bytes)) * 100:.1f}% reduction)"
        )
        return compressed_bytes

    return safe_execute_sync(_compress, "Image compression", log_level="warning", default_return=image_bytes)


# ============================================================================
# Vision provider
# ============================================================================


async def call_vision_provider(image_bytes: bytes) -> str:
    """Single Gemini vision call, bounded by REQUEST_TIMEOUT_SECONDS.

    The sync SDK client runs in a worker thread.

    Returns:
        Raw response text (may be empty).

    Raises:
        ProviderConfigurationError: If GEMINI_API_KEY is not set.
        asyncio.TimeoutError: If the call exceeds the timeout.
        Exception: Any SDK error, unchanged.
    """
    kind = detect_image_format(image_bytes)
    mime_type = kind.mime if kind else "image/jpeg"

    client = genai.Client(api_key=config.require_api_key())

    response = await asyncio.wait_for(
        asyncio.to_thread(
            client.models.generate_content,
            model=config.IMAGE_DETECTION_MODEL,
            contents=[
                types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                VISION_PROMPT,
            ],
        ),
        timeout=config.REQUEST_TIMEOUT_SECONDS,
    )
    return response.text or ""


async def call_vision_with_retries(image_bytes: bytes, idx: int = 0, max_retries: Optional[int] = None) -> Optional[str]:
    """Call the vision provider with exponential backoff on transient errors.

    Transient errors (timeouts, connection failures, 429/5xx) are retried
    after DELAY_BETWEEN_RETRIES seconds, doubling each time. Permanent errors
    fail immediately.

    Args:
        image_bytes: Validated image bytes.
        idx: Image index in batch (0-based), for log context.
        max_retries: Total attempts. Default: config.MAX_RETRIES.

    Returns:
        Raw response text, or None once attempts are exhausted or on a
        permanent error (logged as warning).
    """
    max_retries = max_retries or config.MAX_RETRIES
    delay_seconds = config.DELAY_BETWEEN_RETRIES
    extra = {"image_index": idx}

    for attempt in range(1, max_retries + 1):
        try:
            return await call_vision_provider(image_bytes)
        except Exception as e:
            if is_transient_error(e) and attempt < max_retries:
                _log_error(
                    f"Transient error, retrying (attempt {attempt + 1}/{max_retries}) after {delay_seconds}s",
                    e,
                    log_level="debug",
                    extra=extra,
                )
                await asyncio.sleep(delay_seconds)
                delay_seconds *= 2
            else:
                _log_error(f"Vision call failed after {attempt} attempt(s)", e, extra=extra)
                return None

    return None


# ============================================================================
# Batch processing
# ============================================================================


async def _process_single_image(
    image_source: str,
    idx: int,
    dietary_restrictions: Optional[str] = None,
) -> Optional[list[DetectedIngredient]]:
    """Run one image through fetch → validate → compress → vision → parse.

    Returns:
        Detected ingredients above the confidence threshold (possibly empty),
        or None if the image failed at any step.
    """
    extra = {"image_index": idx}

    image_bytes = await get_image_bytes(image_source, idx)
    if not image_bytes:
        logger.warning(f"Image {idx + 1}: Failed to get image bytes", extra=extra)
        return None

    if not validate_image_format(image_bytes) or not validate_image_size(image_bytes):
        return None

    if config.COMPRESS_IMG:
        image_bytes = compress_image(image_bytes)

    raw_text = await call_vision_with_retries(image_bytes, idx)
    if raw_text is None:
        logger.warning(f"Image {idx + 1}: Failed to extract ingredients", extra=extra)
        return None

    detected = parse_vision_response(raw_text, dietary_restrictions)
    detected = filter_by_confidence(detected, config.MIN_INGREDIENT_CONFIDENCE)

    logger.info(
        f"Image {idx + 1}: Extracted {len(detected)} ingredients "
        f"(confidence threshold: {config.MIN_INGREDIENT_CONFIDENCE})",
        extra=extra,
    )
    return detected


def aggregate_detections(per_image: list[Optional[list[DetectedIngredient]]]) -> IngredientAnalysis:
    """Combine per-image results into the final analysis.

    Union in source order (first tier seen for a name wins), deduplicate,
    add assumed staples, then sort. None entries count as failed images.
    """
    union: dict[str, DetectedIngredient] = {}
    for result in per_image:
        for item in result or []:
            union.setdefault(item.name, item)

    names = dedupe(list(union))
    detected = [union[name] for name in names]
    ingredients = sorted(set(names) | set(ASSUMED_STAPLES))

    failed = sum(1 for result in per_image if result is None)

    metadata = AnalysisMetadata(
        detected=len(detected),
        with_staples=len(ingredients),
        staples=list(ASSUMED_STAPLES),
        images_processed=len(per_image) - failed,
        images_failed=failed,
        confidence={item.name: item.tier for item in detected},
    )
    return IngredientAnalysis(ingredients=ingredients, detected=detected, metadata=metadata)


async def analyze_images(image_urls: list[str], dietary_restrictions: Optional[str] = None) -> IngredientAnalysis:
    """Detect pantry ingredients across a batch of photos.

    Only the first MAX_IMAGES_PER_BATCH sources are used. Images are processed
    in parallel; a failing image is logged and skipped.

    Args:
        image_urls: Image sources (http(s) URL, data URL or base64).
        dietary_restrictions: Free-text restrictions applied while parsing.

    Returns:
        IngredientAnalysis with sorted ingredients (staples included).

    Raises:
        ProviderConfigurationError: If GEMINI_API_KEY is not set.
    """
    config.require_api_key()

    sources = image_urls[: config.MAX_IMAGES_PER_BATCH]
    if len(image_urls) > len(sources):
        logger.info(f"Received {len(image_urls)} images, analyzing the first {len(sources)}")

    logger.debug(f"Processing {len(sources)} image(s) in parallel...")
    tasks = [_process_single_image(source, idx, dietary_restrictions) for idx, source in enumerate(sources)]
    results = await asyncio.gather(*tasks)

    analysis = aggregate_detections(list(results))
    logger.info(
        f"Ingredient analysis complete: {analysis.metadata.detected} detected, "
        f"{analysis.metadata.with_staples} with staples, "
        f"{analysis.metadata.images_failed}/{len(sources)} image(s) failed"
    )
    return analysis
