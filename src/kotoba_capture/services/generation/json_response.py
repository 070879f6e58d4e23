"""Parsing helpers for JSON answers from generative backends."""

import json
import re
from typing import Any, Dict

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_json_object(raw: str) -> Dict[str, Any]:
    """
    Decode a backend answer that must be a JSON object.

    Markdown code fences around the document are tolerated.

    Raises:
        ValueError: If the text is not JSON or not a JSON object.
    """
    text = _FENCE.sub("", (raw or "").strip())
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data
