"""
Provider capability interfaces.

Each hosted backend (Gemini, Veo, OpenAI images, AssemblyAI) implements one
of these. Operations only talk to the interfaces; which concrete provider
serves a request is decided by the lookup tables in providers.registry.
"""

from __future__ import annotations

import base64
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ..services.lro_poller import PollResult

_DATA_URL_RE = re.compile(r"^data:([^;]+);base64,")


@dataclass(frozen=True)
class InlineMedia:
    """Raw base64 media bytes plus mime type, as providers expect them."""

    data: str
    mime_type: str = "image/png"

    @classmethod
    def from_data_url(cls, value: str, default_mime: str = "image/png") -> "InlineMedia":
        """Accept either a data URL or bare base64."""
        if value.startswith("data:"):
            match = _DATA_URL_RE.match(value)
            mime_type = match.group(1) if match else default_mime
            return cls(data=value.split(",", 1)[1], mime_type=mime_type)
        return cls(data=value, mime_type=default_mime)

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


class TextModel(ABC):
    """Chat/vision LLM: prompt (and optionally one image) in, text out."""

    name: str

    @abstractmethod
    async def generate(self, prompt: str, image: InlineMedia | None = None) -> str:
        ...


class ImageModel(ABC):
    """Image generation: prompt in, data URL out."""

    name: str

    @abstractmethod
    async def generate(self, prompt: str, aspect_ratio: str = "1:1") -> str:
        ...


class VideoModel(ABC):
    """Long-running image-to-video generation."""

    name: str

    @abstractmethod
    async def start(
        self,
        image: InlineMedia,
        prompt: str,
        aspect_ratio: str,
        duration: int,
    ) -> str:
        """Start the job and return its operation handle."""

    @abstractmethod
    async def poll(self, handle: str) -> PollResult:
        """Query job status once."""

    @abstractmethod
    async def download(self, artifact_ref: str) -> bytes:
        """Fetch the finished video; the URI requires provider credentials."""


@dataclass
class TranscriptionRequest:
    audio_url: str
    speaker_labels: bool = True
    speaker_identification: bool = False
    speaker_type: str = "name"
    known_values: list[str] = field(default_factory=list)


class TranscriptionModel(ABC):
    """Long-running speech transcription."""

    name: str

    @abstractmethod
    async def upload(self, audio: bytes) -> str:
        """Upload raw audio and return a URL the service can read."""

    @abstractmethod
    async def submit(self, request: TranscriptionRequest) -> str:
        """Start the job and return its id."""

    @abstractmethod
    async def poll(self, job_id: str) -> PollResult:
        """Query job status once. A done result carries the transcript payload."""
