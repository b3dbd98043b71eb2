"""
Heuristic classification of untyped node input.

Nodes in the editor receive a single "inputValue" that may be plain text,
HTML, or a JSON encoding of an upstream result (report, advertorial,
angle-partitioned copy). This module infers which one it is so a node can
render it and pick the field the next operation needs.

Rules are ordered and the first match wins:
  1. empty input                                  -> unrecognized
  2. JSON-parse strings (dicts/lists are used as-is)
  3. "sections" list or "executiveSummary"        -> report
  4. truthy "content" (headline optional)         -> advertorial
  5. any angle key (fear/greed/curiosity/urgency) -> copy-variants
  6. raw string containing both "<" and ">"       -> markup
  7. {"text": "..."} or a JSON string literal     -> plain-text (that text)
  8. any other string                             -> plain-text (verbatim)
  9. anything else                                -> unrecognized

Any object with a truthy "content" field is an advertorial, whatever
produced it.
Classification is pure; calling it twice on the same value gives the
same answer.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

ANGLES = ("fear", "greed", "curiosity", "urgency")


class PayloadKind(str, Enum):
    REPORT = "report"
    ADVERTORIAL = "advertorial"
    COPY_VARIANTS = "copy-variants"
    MARKUP = "markup"
    PLAIN_TEXT = "plain-text"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class ClassifiedPayload:
    kind: PayloadKind
    value: Any
    parsed: Any = None
    text: str | None = None
    content: str | None = None
    headline: str | None = None

    @property
    def report(self) -> dict[str, Any] | None:
        return self.parsed if self.kind is PayloadKind.REPORT else None

    @property
    def angles(self) -> dict[str, Any] | None:
        if self.kind is not PayloadKind.COPY_VARIANTS:
            return None
        return {angle: self.parsed[angle] for angle in ANGLES if angle in self.parsed}

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "text": self.text,
            "content": self.content,
            "headline": self.headline,
            "report": self.report,
            "angles": self.angles,
        }


def _try_parse(raw: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(raw)
    except (ValueError, TypeError):
        return False, None


def _is_report(parsed: Any) -> bool:
    if not isinstance(parsed, dict):
        return False
    return isinstance(parsed.get("sections"), list) or bool(parsed.get("executiveSummary"))


def flatten_report(report: dict[str, Any]) -> str:
    """
    Flatten a report into plain text: the executive summary, then each
    section's content, in order, separated by a blank line.
    """
    parts: list[str] = []
    summary = report.get("executiveSummary")
    if isinstance(summary, str) and summary.strip():
        parts.append(summary)

    sections = report.get("sections")
    if isinstance(sections, list):
        for section in sections:
            if not isinstance(section, dict):
                continue
            content = section.get("content")
            if isinstance(content, str) and content.strip():
                parts.append(content)

    return "\n\n".join(parts)


def classify_payload(value: Any) -> ClassifiedPayload:
    """Infer the semantic kind of a node input value."""
    if value is None:
        return ClassifiedPayload(PayloadKind.UNRECOGNIZED, value)

    raw: str | None = None
    if isinstance(value, str):
        if not value.strip():
            return ClassifiedPayload(PayloadKind.UNRECOGNIZED, value)
        raw = value
        ok, parsed = _try_parse(raw)
        if not ok:
            parsed = None
    elif isinstance(value, (dict, list)):
        parsed = value
    else:
        return ClassifiedPayload(PayloadKind.UNRECOGNIZED, value)

    if _is_report(parsed):
        return ClassifiedPayload(
            PayloadKind.REPORT,
            value,
            parsed=parsed,
            text=flatten_report(parsed),
        )

    if isinstance(parsed, dict) and parsed.get("content"):
        content = parsed["content"]
        if not isinstance(content, str):
            content = json.dumps(content)
        headline = parsed.get("headline")
        return ClassifiedPayload(
            PayloadKind.ADVERTORIAL,
            value,
            parsed=parsed,
            text=content,
            content=content,
            headline=headline if isinstance(headline, str) else None,
        )

    if isinstance(parsed, dict) and any(angle in parsed for angle in ANGLES):
        return ClassifiedPayload(PayloadKind.COPY_VARIANTS, value, parsed=parsed)

    if raw is not None and "<" in raw and ">" in raw:
        return ClassifiedPayload(PayloadKind.MARKUP, value, parsed=parsed, text=raw, content=raw)

    if isinstance(parsed, dict) and isinstance(parsed.get("text"), str):
        return ClassifiedPayload(PayloadKind.PLAIN_TEXT, value, parsed=parsed, text=parsed["text"])
    if isinstance(parsed, str):
        return ClassifiedPayload(PayloadKind.PLAIN_TEXT, value, parsed=parsed, text=parsed)

    if raw is not None:
        return ClassifiedPayload(PayloadKind.PLAIN_TEXT, value, parsed=parsed, text=raw)

    return ClassifiedPayload(PayloadKind.UNRECOGNIZED, value, parsed=parsed)


def extract_text(value: Any) -> str | None:
    """
    Plain text for steps that consume text: flattened reports, advertorial
    content, markup and plain strings. None when nothing usable is present.
    """
    payload = classify_payload(value)
    if payload.text and payload.text.strip():
        return payload.text
    return None


def select_angle(value: Any, angle: str) -> str | None:
    """
    Pick one angle out of angle-partitioned copy, encoded as a string so it
    can be forwarded as another node's inputValue.
    """
    if angle not in ANGLES:
        raise ValueError(f"Unknown angle {angle!r}; expected one of {', '.join(ANGLES)}")
    payload = classify_payload(value)
    if payload.kind is not PayloadKind.COPY_VARIANTS:
        return None
    selected = payload.parsed.get(angle)
    if selected is None:
        return None
    if isinstance(selected, str):
        return selected
    return json.dumps(selected)
