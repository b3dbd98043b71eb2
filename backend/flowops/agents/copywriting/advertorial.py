# Advertorial and ad-copy generation for the report -> advertorial -> ads pipeline.
# Copy is partitioned into the four angles (fear, greed, curiosity, urgency).
from __future__ import annotations

import logging
from typing import Any

from ...errors import ParseError, ValidationError
from ...providers.base import TextModel
from ...services.payload_classifier import PayloadKind, classify_payload, flatten_report
from ..text_generation.content_parser import parse_angle_copy, parse_json_response

logger = logging.getLogger(__name__)

ADVERTORIAL_PROMPT = """You are a direct-response copywriter writing a native advertorial for an investing newsletter.
Using ONLY the facts in the research report below, write a long-form advertorial (800-1,200 words) in HTML
(<h2>, <p>, <ul>, <strong> only; no <html>/<body> wrapper).
Return JSON only: {{"headline": "...", "content": "<p>...</p>"}}

Research report:
{report_text}"""

ADVERTORIAL_COPY_PROMPT = """You write Meta (Facebook/Instagram) ads that drive clicks to an advertorial.
Write one ad per psychological angle: fear, greed, curiosity, urgency.
Each ad has a primaryText (2-4 sentences) and a headline (max 40 characters).
Return JSON only:
{{"fear": {{"primaryText": "...", "headline": "..."}}, "greed": {{...}}, "curiosity": {{...}}, "urgency": {{...}}}}

Advertorial:
{content}"""

COPY_PROMPT = """You write {platform} ad copy{mode_part}.
Using ONLY the facts in the research report below, write one ad per psychological angle: fear, greed, curiosity, urgency.
Each ad has a headline, a body and a cta (call to action).
Return JSON only:
{{"fear": {{"headline": "...", "body": "...", "cta": "..."}}, "greed": {{...}}, "curiosity": {{...}}, "urgency": {{...}}}}

Research report:
{report_text}"""


def report_to_text(report: Any) -> str:
    """
    Resolve a report given as an object or its JSON string into plain text.
    Anything that is not report-shaped is rejected.
    """
    payload = classify_payload(report)
    if payload.kind is not PayloadKind.REPORT:
        raise ValidationError(
            "report must have an executiveSummary or sections",
            code="INVALID_REPORT",
        )
    text = flatten_report(payload.parsed)
    if not text:
        raise ValidationError("report has no content", code="INVALID_REPORT")
    return text


async def generate_advertorial(text_model: TextModel, report: Any) -> dict[str, str]:
    """
    Returns:
        {"headline": str, "content": HTML str}
    """
    raw = await text_model.generate(ADVERTORIAL_PROMPT.format(report_text=report_to_text(report)))
    parsed = parse_json_response(raw)
    content = parsed.get("content")
    if not isinstance(content, str) or not content.strip():
        raise ParseError("Model response has no advertorial content", code="PARSE_ERROR", details=raw[:500])
    logger.info("Advertorial generated: %d chars", len(content))
    return {"headline": str(parsed.get("headline") or "").strip(), "content": content.strip()}


async def generate_advertorial_copy(text_model: TextModel, advertorial_content: str) -> dict[str, Any]:
    """
    Returns:
        {angle: {"primaryText": str, "headline": str}} for each angle
    """
    raw = await text_model.generate(ADVERTORIAL_COPY_PROMPT.format(content=advertorial_content))
    return parse_angle_copy(raw, ("primaryText", "headline"))


async def generate_copy(
    text_model: TextModel,
    report: Any,
    platform: str | None = "meta",
    mode: str | None = None,
) -> dict[str, Any]:
    """
    Returns:
        {angle: {"headline": str, "body": str, "cta": str}} for each angle
    """
    mode_part = f" in {mode} mode" if mode and mode != "standard" else ""
    raw = await text_model.generate(
        COPY_PROMPT.format(
            platform=platform or "meta",
            mode_part=mode_part,
            report_text=report_to_text(report),
        )
    )
    return parse_angle_copy(raw, ("headline", "body", "cta"))

