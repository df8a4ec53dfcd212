"""Locate the first balanced JSON object embedded in model output.

Models often wrap the JSON they were asked for in prose or markdown fences.
A greedy ``\\{.*\\}`` regex spans from the first brace to the last one in the
text and can backtrack badly on hostile input, so this scanner walks the text
once and tracks brace depth, ignoring braces inside string literals.
"""

import json
from typing import Any, Optional


def find_json_object_span(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` substring of text.

    Scanning starts at the first opening brace. Braces inside double-quoted
    strings (with backslash escapes) do not count toward depth.

    Args:
        text: Raw model output.

    Returns:
        The balanced substring, or None if there is no opening brace or the
        first object never closes.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False

    for pos in range(start, len(text)):
        ch = text[pos]

        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : pos + 1]

    return None


def load_json_object(text: str) -> Optional[Any]:
    """Parse the first balanced JSON object in text.

    Returns:
        The decoded value, or None if no span exists or it is not valid JSON.
    """
    span = find_json_object_span(text)
    if span is None:
        return None

    try:
        return json.loads(span)
    except json.JSONDecodeError:
        return None
