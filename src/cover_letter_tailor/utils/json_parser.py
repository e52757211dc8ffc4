"""Utility to pull a JSON object out of an LLM response."""

from __future__ import annotations

import json
import re

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def extract_json(text: str) -> dict:
    """Extract a JSON object from an LLM response.

    Tries in order:
    1. Direct json.loads on the full text
    2. The contents of the first fenced code block
    3. First '{' to last '}'

    A response cut off mid-object (max_tokens hit) is not recovered.

    Raises:
        ValueError: if no JSON object can be recovered.
    """
    text = (text or "").strip()

    candidates = [text]
    fenced = _FENCE_RE.search(text)
    if fenced:
        candidates.append(fenced.group(1).strip())

    for candidate in candidates:
        result = _loads_object(candidate)
        if result is not None:
            return result
        result = _loads_object(_between_braces(candidate))
        if result is not None:
            return result

    raise ValueError(f"Could not extract JSON from text: {text[:200]}...")


def _loads_object(text: str | None) -> dict | None:
    if not text:
        return None
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def _between_braces(text: str) -> str | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]

