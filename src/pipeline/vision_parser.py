"""Turn raw vision-model output into canonical, tier-tagged ingredients.

The vision model is asked for JSON with ``high_confidence`` and
``medium_confidence`` arrays, but it does not always comply. Raw output is
first classified into one of four shapes and then handled per shape:

- StructuredVisionResponse: a JSON object holding at least one of the arrays
- ScoredItemsResponse: a JSON object with an ``items`` array of
  ``{name, confidence, variant}`` entries
- PlainTextResponse: any other non-blank text, read as a comma-separated list
- UnparseableResponse: empty, blank or non-string output

Parsing never raises; unusable output yields an empty list.
"""

import math
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from src.models.models import ConfidenceTier, DetectedIngredient
from src.pipeline.json_span import load_json_object
from src.pipeline.normalizer import normalize
from src.pipeline.validator import is_valid
from src.utils.logger import logger


class StructuredVisionResponse(BaseModel):
    kind: Literal["structured"] = "structured"
    high_confidence: list[Any] = Field(default_factory=list)
    medium_confidence: list[Any] = Field(default_factory=list)


class ScoredItemsResponse(BaseModel):
    kind: Literal["scored_items"] = "scored_items"
    items: list[Any] = Field(default_factory=list)


class PlainTextResponse(BaseModel):
    kind: Literal["plain"] = "plain"
    text: str


class UnparseableResponse(BaseModel):
    kind: Literal["unparseable"] = "unparseable"


VisionResponse = Union[StructuredVisionResponse, ScoredItemsResponse, PlainTextResponse, UnparseableResponse]


def classify_vision_response(raw_text: Any) -> VisionResponse:
    """Classify raw model output into one of the four response shapes.

    Tier sections win over ``items``; a section only counts when it is an
    array, so ``{"high_confidence": null}`` falls through to plain text.
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        return UnparseableResponse()

    parsed = load_json_object(raw_text)
    if isinstance(parsed, dict):
        high = parsed.get("high_confidence")
        medium = parsed.get("medium_confidence")
        if isinstance(high, list) or isinstance(medium, list):
            return StructuredVisionResponse(
                high_confidence=high if isinstance(high, list) else [],
                medium_confidence=medium if isinstance(medium, list) else [],
            )
        if isinstance(parsed.get("items"), list):
            return ScoredItemsResponse(items=parsed["items"])

    return PlainTextResponse(text=raw_text)


def _canonical(token: str, dietary_restrictions: Optional[str]) -> Optional[str]:
    """Lowercase, validate and normalize one token; None if rejected."""
    token = token.lower().strip()
    if not token or not is_valid(token, dietary_restrictions):
        return None
    name = normalize(token)
    return name or None


def _item_score(value: Any) -> Optional[float]:
    """Reported confidence clamped to [0, 1]; None unless a finite number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        return None
    return max(0.0, min(1.0, float(value)))


def _parse_structured(response: StructuredVisionResponse, dietary_restrictions: Optional[str]) -> list[DetectedIngredient]:
    found: dict[str, DetectedIngredient] = {}

    sections = (
        (response.high_confidence, ConfidenceTier.HIGH),
        (response.medium_confidence, ConfidenceTier.MEDIUM),
    )
    for entries, tier in sections:
        for entry in entries:
            if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
                continue
            name = _canonical(entry["name"], dietary_restrictions)
            if name and name not in found:
                found[name] = DetectedIngredient(name=name, tier=tier)

    return list(found.values())


def _parse_plain(response: PlainTextResponse, dietary_restrictions: Optional[str]) -> list[DetectedIngredient]:
    found: dict[str, DetectedIngredient] = {}

    for token in response.text.lower().split(","):
        name = _canonical(token, dietary_restrictions)
        if name and name not in found:
            found[name] = DetectedIngredient(name=name, tier=ConfidenceTier.DEFAULT)

    return list(found.values())


def _parse_scored_items(response: ScoredItemsResponse, dietary_restrictions: Optional[str]) -> list[DetectedIngredient]:
    """Read ``{name, confidence, variant}`` entries.

    The name alone is validated; a variant ("red", "greek") is prefixed to it
    before normalizing. Entries without a string name or a numeric confidence
    are skipped.
    """
    found: dict[str, DetectedIngredient] = {}

    for entry in response.items:
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            continue
        score = _item_score(entry.get("confidence"))
        if score is None:
            continue

        base = entry["name"].lower().strip()
        if not base or not is_valid(base, dietary_restrictions):
            continue

        variant = entry.get("variant")
        full_name = f"{variant.lower().strip()} {base}" if isinstance(variant, str) and variant.strip() else base
        name = normalize(full_name)
        if name and name not in found:
            found[name] = DetectedIngredient(name=name, tier=ConfidenceTier.for_score(score), score=score)

    return list(found.values())


def parse_vision_response(raw_text: Any, dietary_restrictions: Optional[str] = None) -> list[DetectedIngredient]:
    """Parse vision output into unique, validated, normalized ingredients.

    Args:
        raw_text: Text returned by the vision model.
        dietary_restrictions: Free-text restrictions forwarded to the validator.

    Returns:
        Ingredients unique by name. For structured output the first occurrence
        of a name wins, so a high-tier entry shadows a medium-tier duplicate.
    """
    response = classify_vision_response(raw_text)

    if isinstance(response, StructuredVisionResponse):
        items = _parse_structured(response, dietary_restrictions)
    elif isinstance(response, ScoredItemsResponse):
        items = _parse_scored_items(response, dietary_restrictions)
    elif isinstance(response, PlainTextResponse):
        items = _parse_plain(response, dietary_restrictions)
    else:
        logger.debug("Vision response empty or not text, no ingredients parsed")
        return []

    logger.debug(f"Parsed {len(items)} ingredients from {response.kind} vision response")
    return items


def filter_by_confidence(items: list[DetectedIngredient], threshold: float) -> list[DetectedIngredient]:
    """Keep items whose confidence is at least threshold, preserving order."""
    filtered = [item for item in items if item.confidence >= threshold]

    if len(filtered) < len(items):
        logger.debug(f"Filtered ingredients: {len(items)} → {len(filtered)} (confidence threshold: {threshold})")

    return filtered
