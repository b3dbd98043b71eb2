"""
Article extraction: fetch a web page, reduce it to text, and let the text
model pick out the main article.
"""

from __future__ import annotations

import logging
import re

import httpx
from bs4 import BeautifulSoup

from ...errors import UpstreamError
from ...providers.base import TextModel

logger = logging.getLogger(__name__)

MAX_PAGE_CHARS = 50_000

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

_BOILERPLATE_BLOCKS = ("script", "style", "nav", "header", "footer", "aside")
_WS_RE = re.compile(r"\s+")

EXTRACT_PROMPT = """You are an expert at extracting article content from web pages.

Given the following raw text extracted from a webpage, identify and return ONLY the main article content. Remove:
- Navigation text
- Ads and promotional content
- Related article links
- Comments
- Author bios (unless relevant)
- Social sharing text
- Cookie notices and legal disclaimers

Return the clean article text, preserving important formatting like paragraphs and headings. If there's no clear article (e.g., it's a homepage or product page), extract the most relevant content.{extra_part}

Raw webpage text:
{page_text}"""


def html_to_text(page_html: str, limit: int = MAX_PAGE_CHARS) -> str:
    """Drop boilerplate blocks and tags, decode entities, collapse whitespace."""
    soup = BeautifulSoup(page_html, "html.parser")

    for tag in soup(list(_BOILERPLATE_BLOCKS)):
        tag.decompose()

    text = soup.get_text(" ", strip=True).replace("\xa0", " ")
    text = _WS_RE.sub(" ", text).strip()
    return text[:limit]


async def fetch_page(http: httpx.AsyncClient, url: str) -> str:
    try:
        response = await http.get(url, headers=BROWSER_HEADERS, follow_redirects=True)
    except httpx.HTTPError as e:
        logger.error("Failed to fetch URL %s: %s", url, e)
        raise UpstreamError(f"Failed to fetch page: {e}", code="FETCH_ERROR") from e

    if response.status_code >= 400:
        reason = f"HTTP {response.status_code}: {response.reason_phrase}"
        logger.error("Failed to fetch URL %s: %s", url, reason)
        raise UpstreamError(f"Failed to fetch page: {reason}", code="FETCH_ERROR")
    if not response.text:
        raise UpstreamError("Failed to fetch page: empty body", code="FETCH_ERROR")
    return response.text


async def extract_article(
    http: httpx.AsyncClient,
    text_model: TextModel,
    url: str,
    instructions: str | None = None,
) -> dict[str, str]:
    """
    Returns:
        {"text": article text}
    """
    page_html = await fetch_page(http, url)
    page_text = html_to_text(page_html)
    logger.info("Fetched %s: %d chars of page text", url, len(page_text))

    extra_part = f"\n\nAdditional instructions from the user: {instructions}" if instructions else ""
    article = await text_model.generate(EXTRACT_PROMPT.format(extra_part=extra_part, page_text=page_text))
    if not article:
        raise UpstreamError("Could not extract article content", code="NO_CONTENT")
    return {"text": article}
