from __future__ import annotations

import json
import re
from typing import Any

from career_advisor.services.errors import MalformedResponseError

# Greedy on purpose: spans the first "{" to the last "}" so nested objects stay whole.
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def extract_json_span(text: str) -> str:
    match = _JSON_OBJECT_RE.search(text or "")
    if not match:
        raise MalformedResponseError("No JSON object found in completion content.", raw_text=text or "")
    return match.group(0)


def parse_json_object(text: str) -> dict[str, Any]:
    """Pull the brace-delimited JSON object out of free-form model output and parse it."""
    span = extract_json_span(text)
    try:
        parsed = json.loads(span)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Completion content is not valid JSON: {exc}", raw_text=text) from exc
    return parsed
