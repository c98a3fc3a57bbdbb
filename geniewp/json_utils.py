from __future__ import annotations

import json
import re
from typing import Any, Optional

_FENCED_JSON_RE = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)


def parse_json_lenient(text: Optional[str]) -> Optional[Any]:
    """Decode JSON from model output.

    Tries the whole text first, then the first ```json fenced block.
    Returns None when neither decodes.
    """
    if not text or not isinstance(text, str):
        return None
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        pass
    match = _FENCED_JSON_RE.search(text)
    if not match:
        return None
    try:
        return json.loads(match.group(1))
    except (ValueError, RecursionError):
        return None


def parse_json_object(text: Optional[str]) -> Optional[dict]:
    data = parse_json_lenient(text)
    return data if isinstance(data, dict) else None
