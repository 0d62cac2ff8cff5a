"""Cleaning and parsing helpers shared by the quiz and flowchart pipelines."""
from __future__ import annotations

import json
import re
from typing import Any

_FENCE_OPEN = re.compile(r"```json\s*", re.IGNORECASE)
_FENCE = re.compile(r"```\s*")


def strip_code_fences(content: str) -> str:
    """Remove Markdown code-fence markers the model adds despite instructions."""

    content = _FENCE_OPEN.sub("", content or "")
    content = _FENCE.sub("", content)
    return content.strip()


def slice_json_object(content: str) -> str:
    """Keep the span from the first ``{`` to the last ``}`` when both exist."""

    first = content.find("{")
    last = content.rfind("}")
    if first != -1 and last > first:
        return content[first:last + 1]
    return content


def parse_json(content: str) -> Any:
    """Parse cleaned model output.

    Raises ``ValueError`` on empty, invalid, or too deeply nested JSON.
    """

    text = (content or "").strip()
    if not text:
        raise ValueError("Empty response from LLM")
    try:
        return json.loads(text)
    except RecursionError as exc:
        raise ValueError("JSON response is too deeply nested") from exc


__all__ = ["parse_json", "slice_json_object", "strip_code_fences"]
