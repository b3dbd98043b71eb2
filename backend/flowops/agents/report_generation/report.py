"""
Report generation from a transcript.

The report shape ({executiveSummary, sections: [{title, content}]}) is what
downstream nodes sniff for, so the model output is normalized to exactly
that before it leaves here.
"""
from __future__ import annotations

import logging
from typing import Any

from ...errors import ParseError
from ...providers.base import TextModel
from ..text_generation.content_parser import parse_json_response

logger = logging.getLogger(__name__)

REPORT_PROMPT = """You are an investment research analyst. Turn the transcript below into a structured report.{title_part}
Return JSON only:
{{
  "executiveSummary": "3-5 sentence overview",
  "sections": [{{"title": "Section title", "content": "2-4 paragraphs"}}]
}}
Write 4 to 8 sections. Use only facts present in the transcript.

Transcript:
{transcript}"""


def normalize_report(parsed: dict[str, Any], raw: str = "") -> dict[str, Any]:
    summary = parsed.get("executiveSummary")
    sections = parsed.get("sections")
    if not isinstance(summary, str) or not isinstance(sections, list):
        raise ParseError(
            "Model response is not a report",
            code="PARSE_ERROR",
            details=raw[:500],
        )

    normalized = []
    for section in sections:
        if not isinstance(section, dict):
            continue
        content = section.get("content")
        if not isinstance(content, str) or not content.strip():
            continue
        normalized.append({"title": str(section.get("title") or "").strip(), "content": content.strip()})

    return {"executiveSummary": summary.strip(), "sections": normalized}


async def generate_report(text_model: TextModel, transcript: str, episode_title: str | None = None) -> dict[str, Any]:
    """
    Returns:
        {"executiveSummary": str, "sections": [{"title": str, "content": str}]}
    """
    title_part = f'\nThe episode is titled "{episode_title}".' if episode_title else ""
    raw = await text_model.generate(REPORT_PROMPT.format(title_part=title_part, transcript=transcript))
    report = normalize_report(parse_json_response(raw), raw)
    logger.info("Report generated with %d sections", len(report["sections"]))
    return report
