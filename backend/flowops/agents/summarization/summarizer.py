# Summarizes text into a dense summary, or into a short list of key points.
# Input may be a transcript, an article, or a flattened report; callers
# resolve node input to plain text before calling these.
from __future__ import annotations

from ...errors import UpstreamError
from ...providers.base import TextModel
from ..text_generation.content_parser import parse_bullet_points

SUMMARY_PROMPT = """You are a precise summarization model.
Convert the following text into a concise, information-dense summary that keeps every important claim, name, date and number.{length_part}
Output only the summary, no preamble.

Text:
{text}
"""

KEY_POINTS_PROMPT = """Extract the {max_points} most important key points from the text below.
Each point should be one self-contained sentence.
Return a JSON array of strings and nothing else.

Text:
{text}
"""


async def summarize(text_model: TextModel, text: str, max_length: int | None = None) -> dict[str, str]:
    length_part = f"\nKeep it under {max_length} words." if max_length else ""
    summary = await text_model.generate(SUMMARY_PROMPT.format(text=text, length_part=length_part))
    if not summary:
        raise UpstreamError("Empty summary generated", code="NO_CONTENT")
    return {"summary": summary}


async def extract_key_points(text_model: TextModel, text: str, max_points: int = 5) -> dict[str, list[str]]:
    raw = await text_model.generate(KEY_POINTS_PROMPT.format(text=text, max_points=max_points))
    points = parse_bullet_points(raw, max_points=max_points)
    if not points:
        raise UpstreamError("No key points extracted", code="NO_CONTENT")
    return {"points": points}
