# Parser utilities to extract structured content from LLM responses
from __future__ import annotations

import json
import re
from typing import Any

from ...errors import ParseError
from ...services.payload_classifier import ANGLES

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)


def parse_json_response(raw_content: str, expect: type = dict) -> Any:
    """
    Parse JSON out of a model response.

    Models often wrap JSON in markdown fences or add a sentence before or
    after it. Tries, in order: the whole string, the first fenced block,
    then the span from the first opening bracket to the last closing one.

    Args:
        raw_content: Raw model output
        expect: dict or list, the top-level type the caller needs

    Raises:
        ParseError: if no candidate parses to the expected type
    """
    text = (raw_content or "").strip()
    if not text:
        raise ParseError("Model returned an empty response", code="EMPTY_RESPONSE")

    candidates = [text]
    fence = _FENCE_RE.search(text)
    if fence:
        candidates.append(fence.group(1).strip())

    open_char, close_char = ("[", "]") if expect is list else ("{", "}")
    start = text.find(open_char)
    end = text.rfind(close_char)
    if start != -1 and end > start:
        candidates.append(text[start:end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, expect):
            return parsed

    raise ParseError(
        "Model response was not valid JSON",
        code="PARSE_ERROR",
        details=text[:500],
    )


def parse_angle_copy(raw_content: str, fields: tuple[str, ...]) -> dict[str, dict[str, Any]]:
    """
    Parse copy partitioned by the four angles. Each angle must be an object;
    missing string fields are filled with "" so the UI can render every card.
    """
    parsed = parse_json_response(raw_content)
    result: dict[str, dict[str, Any]] = {}
    for angle in ANGLES:
        block = parsed.get(angle)
        if not isinstance(block, dict):
            raise ParseError(
                f"Model response is missing the '{angle}' angle",
                code="PARSE_ERROR",
                details=raw_content[:500],
            )
        result[angle] = {f: block.get(f, "") for f in fields}
    return result


def parse_bullet_points(raw_content: str, max_points: int | None = None) -> list[str]:
    """
    Parse a list of points. Accepts a JSON array or {"points": [...]},
    falling back to bullet/numbered lines.
    """
    try:
        parsed = parse_json_response(raw_content, expect=list)
    except ParseError:
        parsed = None
        try:
            obj = parse_json_response(raw_content)
            if isinstance(obj.get("points"), list):
                parsed = obj["points"]
        except ParseError:
            pass

    if parsed is None:
        parsed = []
        for line in raw_content.splitlines():
            line = re.sub(r"^\s*(?:[-*•]|\d+[.)])\s*", "", line).strip()
            if line:
                parsed.append(line)

    points = [str(p).strip() for p in parsed if str(p).strip()]
    if max_points:
        points = points[:max_points]
    return points
