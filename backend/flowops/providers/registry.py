"""
Provider lookup tables.

A request's "model" field selects a provider from these tables; unknown or
missing values fall back to the table default. Providers are built on
demand so an operation only needs the credentials it actually uses.
"""

from __future__ import annotations

import logging
from typing import Callable

import httpx
from google import genai
from openai import AsyncOpenAI

from ..config import Settings
from .assemblyai import AssemblyAITranscriptionModel
from .base import ImageModel, TextModel, TranscriptionModel, VideoModel
from .gemini import GeminiImageModel, GeminiTextModel
from .openai_images import OpenAIImageModel
from .veo import VeoVideoModel

logger = logging.getLogger(__name__)

# UI model key -> provider model name
TEXT_MODELS: dict[str, str] = {
    "gemini-flash": "gemini-2.5-flash",
    "gemini-pro": "gemini-3.1-pro-preview",
}
DEFAULT_TEXT_MODEL = "gemini-flash"

VIDEO_MODELS: dict[str, str] = {
    "veo-2": "veo-2.0-generate-001",
    "veo-3.1-fast": "veo-3.1-fast-generate-preview",
    "veo-3.1": "veo-3.1-generate-preview",
}
DEFAULT_VIDEO_MODEL = "veo-2"

DEFAULT_IMAGE_MODEL = "gemini-flash"


class SDKClients:
    """
    Process-wide SDK clients, one per vendor. Each owns a connection pool,
    so the application creates one of these at startup and closes it at
    shutdown. A client is only constructed the first time an operation
    needs it, so a missing key only fails the operations that use it.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._genai: genai.Client | None = None
        self._openai: AsyncOpenAI | None = None

    @property
    def genai(self) -> genai.Client:
        if self._genai is None:
            self._genai = genai.Client(api_key=self.settings.require("gemini_api_key"))
        return self._genai

    @property
    def openai(self) -> AsyncOpenAI:
        if self._openai is None:
            self._openai = AsyncOpenAI(
                api_key=self.settings.require("openai_api_key"),
                timeout=self.settings.http_timeout,
            )
        return self._openai

    async def aclose(self) -> None:
        if self._genai is not None:
            await self._genai.aio.aclose()
            self._genai = None
        if self._openai is not None:
            await self._openai.close()
            self._openai = None


class ProviderRegistry:
    """Per-request provider lookup over the shared SDK clients."""

    def __init__(self, settings: Settings, http: httpx.AsyncClient, clients: SDKClients):
        self.settings = settings
        self.http = http
        self.clients = clients

    @property
    def genai_client(self) -> genai.Client:
        return self.clients.genai

    @property
    def openai_client(self) -> AsyncOpenAI:
        return self.clients.openai

    def text(self, model: str | None = None) -> TextModel:
        key = model if model in TEXT_MODELS else DEFAULT_TEXT_MODEL
        return GeminiTextModel(self.genai_client, TEXT_MODELS[key])

    def image(self, model: str | None = None) -> ImageModel:
        key = model if model in IMAGE_MODELS else DEFAULT_IMAGE_MODEL
        return IMAGE_MODELS[key](self)

    def video(self, model: str | None = None) -> VideoModel:
        key = model if model in VIDEO_MODELS else DEFAULT_VIDEO_MODEL
        if model and model != key:
            logger.warning("Unknown video model %r, using %s", model, key)
        return VeoVideoModel(self.http, self.settings.require("gemini_api_key"), VIDEO_MODELS[key])

    def transcription(self) -> TranscriptionModel:
        return AssemblyAITranscriptionModel(self.http, self.settings.require("assemblyai_api_key"))


IMAGE_MODELS: dict[str, Callable[[ProviderRegistry], ImageModel]] = {
    "gemini-flash": lambda r: GeminiImageModel(r.genai_client, "gemini-2.5-flash-image"),
    "gemini-pro": lambda r: GeminiImageModel(r.genai_client, "gemini-3-pro-image-preview"),
    "gpt-image-1": lambda r: OpenAIImageModel(r.openai_client, "gpt-image-1"),
}
