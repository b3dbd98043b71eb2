"""
Free-form text generation: rewriting/enhancing text and Meta ad headlines.
"""
from __future__ import annotations

from typing import Any

from ...errors import ParseError
from ...providers.base import TextModel
from .content_parser import parse_json_response

ENHANCE_PROMPT = """You are a creative writing assistant. Take the user's text and enhance it to be more vivid and detailed. Keep the core meaning but make it more evocative and interesting. Output only the enhanced text, no explanations.{extra_part}

Original text: {text}"""

META_HEADLINES_PROMPT = """You write direct-response ads for Meta (Facebook/Instagram).
From the source text below, write 5 primary texts (2-4 sentences each) and 5 headlines (max 40 characters each).
Return JSON only, in the form {{"primaryTexts": ["..."], "headlines": ["..."]}}.

Source text:
{text}"""


async def enhance_text(text_model: TextModel, text: str, style: str | None = None) -> dict[str, str]:
    extra_part = f"\n\nAdditional instructions: {style}" if style else ""
    result = await text_model.generate(ENHANCE_PROMPT.format(extra_part=extra_part, text=text))
    return {"result": result}


def _string_list(value: Any, field: str, raw: str) -> list[str]:
    if not isinstance(value, list):
        raise ParseError(f"Model response is missing '{field}'", code="PARSE_ERROR", details=raw[:500])
    return [str(item).strip() for item in value if str(item).strip()]


async def generate_meta_headlines(text_model: TextModel, text: str) -> dict[str, list[str]]:
    raw = await text_model.generate(META_HEADLINES_PROMPT.format(text=text))
    parsed = parse_json_response(raw)
    return {
        "primaryTexts": _string_list(parsed.get("primaryTexts"), "primaryTexts", raw),
        "headlines": _string_list(parsed.get("headlines"), "headlines", raw),
    }
