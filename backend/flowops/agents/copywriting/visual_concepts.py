"""
Visual concepts for ad images.

The source may be a report, advertorial content or free text; the mode
decides which one the concepts are written for.
"""

from __future__ import annotations

import logging
from typing import Any

from ...errors import ParseError
from ...providers.base import TextModel
from ..text_generation.content_parser import parse_json_response

logger = logging.getLogger(__name__)

CONCEPT_FIELDS = ("concept", "targetEmotion", "colorScheme")

VISUAL_CONCEPTS_PROMPT = """You are an art director for direct-response ads on Meta (Facebook/Instagram).
Based on the {source_label} below, propose {count} distinct visual concepts for ad images.
Each concept has:
- concept: one or two sentences describing the scene so a photographer or image model can produce it
- targetEmotion: the single emotion the image should trigger
- colorScheme: the dominant colors
Return JSON only: {{"concepts": [{{"concept": "...", "targetEmotion": "...", "colorScheme": "..."}}]}}

{source_label}:
{source_text}"""

_SOURCE_LABELS = {
    "report": "Research report",
    "newsletter": "Newsletter issue",
    "advertorial": "Advertorial",
    "custom": "Brief",
}


def normalize_concepts(parsed: dict[str, Any], count: int, raw: str = "") -> list[dict[str, str]]:
    concepts = parsed.get("concepts")
    if not isinstance(concepts, list):
        raise ParseError("Model response has no concepts", code="PARSE_ERROR", details=raw[:500])

    normalized = []
    for item in concepts:
        if not isinstance(item, dict) or not str(item.get("concept") or "").strip():
            continue
        normalized.append({f: str(item.get(f) or "").strip() for f in CONCEPT_FIELDS})
    if not normalized:
        raise ParseError("Model response has no usable concepts", code="PARSE_ERROR", details=raw[:500])
    return normalized[:count]


async def generate_visual_concepts(
    text_model: TextModel,
    source_text: str,
    count: int = 5,
    mode: str | None = "custom",
) -> dict[str, list[dict[str, str]]]:
    """
    Returns:
        {"concepts": [{"concept", "targetEmotion", "colorScheme"}]}
    """
    source_label = _SOURCE_LABELS.get(mode or "custom", _SOURCE_LABELS["custom"])
    raw = await text_model.generate(
        VISUAL_CONCEPTS_PROMPT.format(source_label=source_label, count=count, source_text=source_text)
    )
    concepts = normalize_concepts(parse_json_response(raw), count, raw)
    logger.info("Generated %d visual concepts (%s mode)", len(concepts), mode or "custom")
    return {"concepts": concepts}
