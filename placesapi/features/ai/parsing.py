"""Defensive parsing of model output that should be a JSON object."""

import json
import re
from typing import Optional

_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL | re.IGNORECASE)


def parse_json_object(text: Optional[str]) -> Optional[dict]:
    """
    Parse `text` as a JSON object.

    Tolerates a surrounding markdown code fence. Returns None for empty
    input, invalid JSON or a top-level value that is not an object.
    """
    if not text or not isinstance(text, str):
        return None

    body = text.strip()
    fenced = _FENCE.match(body)
    if fenced:
        body = fenced.group(1)

    try:
        value = json.loads(body)
    except (ValueError, RecursionError):
        return None

    return value if isinstance(value, dict) else None
