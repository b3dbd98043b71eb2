"""
OpenAI image generation (gpt-image-1) through the openai SDK.
"""

from __future__ import annotations

import logging

from openai import APIError, AsyncOpenAI

from ..errors import UpstreamError
from .base import ImageModel

logger = logging.getLogger(__name__)

# gpt-image-1 only accepts a fixed set of sizes
_SIZES = {
    "1:1": "1024x1024",
    "16:9": "1536x1024",
    "4:5": "1024x1536",
    "9:16": "1024x1536",
}


class OpenAIImageModel(ImageModel):
    def __init__(self, client: AsyncOpenAI, model: str = "gpt-image-1", quality: str = "medium"):
        self.client = client
        self.model = model
        self.name = model
        self.quality = quality

    async def generate(self, prompt: str, aspect_ratio: str = "1:1") -> str:
        try:
            result = await self.client.images.generate(
                model=self.model,
                prompt=prompt,
                n=1,
                size=_SIZES.get(aspect_ratio, "1024x1024"),
                quality=self.quality,
            )
        except APIError as e:
            logger.error("OpenAI API error: %s", e)
            raise UpstreamError(
                "Failed to generate image",
                code="OPENAI_ERROR",
                details=str(e),
            ) from e

        b64 = result.data[0].b64_json if result.data else None
        if not b64:
            raise UpstreamError("No image returned", code="NO_IMAGE")
        return f"data:image/png;base64,{b64}"
