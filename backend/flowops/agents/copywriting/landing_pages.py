# Landing page copy, one page per angle, built from a research report.
from __future__ import annotations

import logging
from typing import Any

from ...providers.base import TextModel
from ..text_generation.content_parser import parse_angle_copy
from .advertorial import report_to_text

logger = logging.getLogger(__name__)

LANDING_PAGE_FIELDS = ("headline", "subheadline", "bullets", "cta", "heroContent")

LANDING_PAGES_PROMPT = """You write high-converting landing pages for {audience}.
Using ONLY the facts in the research report below, write one landing page per psychological angle: fear, greed, curiosity, urgency.
Each page has:
- headline (max 12 words)
- subheadline (one sentence)
- bullets (3-5 short benefit statements)
- cta (button text, max 5 words)
- heroContent (2-3 paragraphs of body copy above the fold)
Return JSON only:
{{"fear": {{"headline": "...", "subheadline": "...", "bullets": ["..."], "cta": "...", "heroContent": "..."}}, "greed": {{...}}, "curiosity": {{...}}, "urgency": {{...}}}}

Research report:
{report_text}"""

_AUDIENCES = {
    "report": "readers of an investment research report",
    "newsletter": "subscribers of a paid investing newsletter",
}


def _bullets(value: Any) -> list[str]:
    if isinstance(value, str):
        value = value.splitlines()
    if not isinstance(value, list):
        return []
    return [str(item).strip().lstrip("-*• ").strip() for item in value if str(item).strip()]


async def generate_landing_pages(text_model: TextModel, report: Any, mode: str | None = "report") -> dict[str, Any]:
    """
    Returns:
        {angle: {"headline", "subheadline", "bullets": [str], "cta", "heroContent"}} for each angle
    """
    audience = _AUDIENCES.get(mode or "report", _AUDIENCES["report"])
    raw = await text_model.generate(
        LANDING_PAGES_PROMPT.format(audience=audience, report_text=report_to_text(report))
    )
    pages = parse_angle_copy(raw, LANDING_PAGE_FIELDS)
    for page in pages.values():
        page["bullets"] = _bullets(page["bullets"])
    logger.info("Landing pages generated (%s mode)", mode or "report")
    return pages
