"""
Gemini text, vision and image generation through the google-genai SDK.
"""

from __future__ import annotations

import base64
import logging

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..errors import UpstreamError
from .base import ImageModel, InlineMedia, TextModel

logger = logging.getLogger(__name__)


def _error_details(e: genai_errors.APIError) -> str:
    return f"{e.code}: {e.message}" if getattr(e, "message", None) else str(e)


class GeminiTextModel(TextModel):
    """Text generation, with optional single-image vision input."""

    def __init__(self, client: genai.Client, model: str = "gemini-2.5-flash"):
        self.client = client
        self.model = model
        self.name = model

    async def generate(self, prompt: str, image: InlineMedia | None = None) -> str:
        contents: list = [prompt]
        if image is not None:
            contents.append(types.Part.from_bytes(data=image.to_bytes(), mime_type=image.mime_type))

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,
            )
        except genai_errors.APIError as e:
            logger.error("Gemini API error (%s): %s", self.model, e)
            raise UpstreamError(
                "Gemini request failed",
                code="GEMINI_ERROR",
                details=_error_details(e),
            ) from e

        return (response.text or "").strip()


class GeminiImageModel(ImageModel):
    def __init__(self, client: genai.Client, model: str = "gemini-2.5-flash-image"):
        self.client = client
        self.model = model
        self.name = model

    async def generate(self, prompt: str, aspect_ratio: str = "1:1") -> str:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_modalities=["IMAGE"],
                    image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
                ),
            )
        except genai_errors.APIError as e:
            logger.error("Gemini image API error (%s): %s", self.model, e)
            raise UpstreamError(
                "Failed to generate image",
                code="GEMINI_IMAGE_ERROR",
                details=_error_details(e),
            ) from e

        logger.info("Gemini image response received, model=%s", self.model)
        for part in response.parts or []:
            if part.inline_data is not None and part.inline_data.data:
                mime_type = part.inline_data.mime_type or "image/png"
                image_data = base64.b64encode(part.inline_data.data).decode("utf-8")
                return f"data:{mime_type};base64,{image_data}"

        raise UpstreamError("No image returned", code="NO_IMAGE")
