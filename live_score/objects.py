# live_score/objects.py
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional, Tuple

from live_score.errors import (
    ExtractionError,
    FragmentNotFound,
    MalformedStructure,
    UnbalancedObject,
)
from live_score.fragments import rewrite_sentinels

logger = logging.getLogger(__name__)


def _key_pattern(key: str) -> re.Pattern:
    return re.compile(r'"' + re.escape(key) + r'"\s*:\s*')


def balanced_span(text: str, start: int) -> Tuple[int, int]:
    """
    Depth-counted scan from the `{` at `start`.

    Returns (start, end) with `end` exclusive, at the point where depth goes
    back to zero. Braces inside string literals are not counted.
    Raises UnbalancedObject if the text ends first.
    """
    if start >= len(text) or text[start] != "{":
        raise UnbalancedObject(f"Expected '{{' at offset {start}")

    depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        ch = text[i]

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
                return start, i + 1

    raise UnbalancedObject(f"Object starting at offset {start} never closes (depth {depth})")


def locate_object(text: str, key: str) -> str:
    """
    Substring of the object literal that follows the first `"key":`.

    Raises FragmentNotFound when the key is absent or its value is not an
    object (e.g. `"miniscore":null`), UnbalancedObject when truncated.
    """
    m = _key_pattern(key).search(text)
    if not m:
        raise FragmentNotFound(f'Key "{key}" not found')

    value_start = m.end()
    if value_start >= len(text) or text[value_start] != "{":
        raise FragmentNotFound(f'Key "{key}" is not followed by an object')

    start, end = balanced_span(text, value_start)
    return text[start:end]


def find_balanced_object(text: str, key: str) -> Optional[str]:
    try:
        return locate_object(text, key)
    except ExtractionError:
        return None


def load_object(text: str, key: str) -> Dict[str, Any]:
    """
    Locate, sentinel-fix and parse the object under `key`.

    Raises FragmentNotFound / UnbalancedObject / MalformedStructure.
    """
    raw = locate_object(text, key)
    fixed = rewrite_sentinels(raw)
    try:
        value = json.loads(fixed, strict=False)
    except ValueError as e:
        raise MalformedStructure(f'"{key}" object failed to parse: {e}') from e

    if not isinstance(value, dict):
        raise MalformedStructure(f'"{key}" did not parse to an object')
    return value


def extract_object(text: str, key: str) -> Optional[Dict[str, Any]]:
    """Best-effort load_object(): logs and returns None instead of raising."""
    try:
        return load_object(text, key)
    except FragmentNotFound:
        return None
    except ExtractionError as e:
        logger.warning("%s parse error: %s", key, e)
        return None
