"""Pull structured JSON out of free-text model output.

Tiers, each tried only when the previous one fails:

1. parse the trimmed text as JSON;
2. parse the brace-balanced span opening at the first ``{`` (nesting
   bounded by ``MAX_NESTING``);
3. for song picks only, read ``title``/``artist``/``year``/``reason`` one by one.

Failure yields ``None``; provider text is unreliable and callers fall back.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

MAX_NESTING = 3


def _nested_object_pattern(depth: int) -> str:
    pattern = r"\{[^{}]*\}"
    for _ in range(depth):
        pattern = r"\{[^{}]*(?:" + pattern + r"[^{}]*)*\}"
    return pattern


JSON_OBJECT_RE = re.compile(_nested_object_pattern(MAX_NESTING))

SONG_FIELDS = ("title", "artist", "year", "reason")
SONG_FIELD_RES = {
    name: re.compile(rf'"{name}"\s*:\s*"([^"]+)"') for name in SONG_FIELDS
}


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        value = json.loads(text)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


def extract_json_object(raw: str | None) -> dict[str, Any] | None:
    if not raw:
        return None
    text = raw.strip()

    parsed = _loads_object(text)
    if parsed is not None:
        return parsed

    # Anchor on the first brace so a truncated object never yields one of its children.
    start = text.find("{")
    match = JSON_OBJECT_RE.match(text, start) if start >= 0 else None
    if match:
        parsed = _loads_object(match.group(0))
        if parsed is not None:
            logger.info("Recovered JSON object embedded in prose")
            return parsed

    return None


def extract_concept(raw: str | None) -> dict[str, Any] | None:
    """Return the provider's concept object, or None if nothing parses."""
    return extract_json_object(raw)


def extract_song(raw: str | None) -> dict[str, Any] | None:
    parsed = extract_json_object(raw)
    if parsed is not None:
        return parsed
    if not raw:
        return None

    found = {}
    for name, pattern in SONG_FIELD_RES.items():
        match = pattern.search(raw)
        if match:
            found[name] = match.group(1)
    if all(name in found for name in ("title", "artist", "reason")):
        found.setdefault("year", "Unknown")
        logger.info("Recovered song fields individually")
        return found
    return None
