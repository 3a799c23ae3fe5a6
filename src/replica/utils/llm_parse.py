"""LLM output parsing utilities.

Structured-output models still wrap JSON in markdown fences, prepend
reasoning blocks, or wrap the expected array in an object.  These helpers
turn such replies into plain Python values before pydantic validation.
"""

import json
import re
from typing import Any

from replica.exceptions import LLMResponseError

_THINK_RE = re.compile(r"<think>.*?</think>|<think>.*|^.*?</think>", re.DOTALL)
_FENCE_RE = re.compile(r"```(?:json)?")


def strip_think_tags(text: str) -> str:
    """Remove <think>...</think> reasoning blocks, including unterminated ones."""
    return _THINK_RE.sub("", text)


def _candidate(text: str, open_ch: str, close_ch: str) -> str | None:
    start = text.find(open_ch)
    end = text.rfind(close_ch)
    if start >= 0 and end > start:
        return text[start : end + 1]
    return None


def parse_json_payload(text: str) -> Any:
    """Parse the JSON value carried by an LLM reply.

    Tries the cleaned reply as-is first, then the outermost object, then
    the outermost array.  Raises LLMResponseError when nothing parses.
    """
    cleaned = _FENCE_RE.sub("", strip_think_tags(text)).strip()
    if not cleaned:
        raise LLMResponseError("Empty LLM response")

    candidates = [cleaned, _candidate(cleaned, "{", "}"), _candidate(cleaned, "[", "]")]
    for candidate in candidates:
        if candidate is None:
            continue
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    raise LLMResponseError(f"LLM response is not valid JSON: {cleaned[:100]!r}")


def extract_items(payload: Any, *keys: str) -> list[Any]:
    """Return the list of items from a bare array or an object wrapping one.

    ``keys`` are tried in order; if none match, the first list-valued
    field of the object is used.
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    for key in keys:
        value = payload.get(key)
        if isinstance(value, list):
            return value
    for value in payload.values():
        if isinstance(value, list):
            return value
    return []
