"""
Veo image-to-video generation over the Generative Language REST API.

The SDK's own waiter hides the status loop, so the job is started, polled
and downloaded with plain HTTP calls that the LRO poller drives.
"""

from __future__ import annotations

import json
import logging

import httpx

from ..errors import DownloadError, ParseError, UpstreamError
from ..services.lro_poller import PollResult, TransientPollError
from .base import InlineMedia, VideoModel

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


class VeoVideoModel(VideoModel):
    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str,
        model: str = "veo-2.0-generate-001",
        base_url: str = GEMINI_API_BASE,
    ):
        self.http = http
        self.api_key = api_key
        self.model = model
        self.name = model
        self.base_url = base_url.rstrip("/")

    @property
    def _headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self.api_key}

    async def start(self, image: InlineMedia, prompt: str, aspect_ratio: str, duration: int) -> str:
        body = {
            "instances": [
                {
                    "image": {"bytesBase64Encoded": image.data, "mimeType": image.mime_type},
                    "prompt": prompt,
                }
            ],
            "parameters": {"aspectRatio": aspect_ratio, "durationSeconds": duration},
        }
        logger.info("Veo request - model=%s prompt=%r", self.model, prompt[:120])

        response = await self.http.post(
            f"{self.base_url}/models/{self.model}:predictLongRunning",
            headers=self._headers,
            json=body,
        )
        if response.status_code >= 400:
            logger.error("Veo API start error (%s): %s", response.status_code, response.text[:500])
            raise UpstreamError(
                "Failed to start video generation",
                code="VEO_START_ERROR",
                details=response.text,
            )

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise ParseError(
                "Invalid response from Veo",
                code="VEO_PARSE_ERROR",
                details=response.text,
            ) from e

        operation_name = data.get("name") if isinstance(data, dict) else None
        if not operation_name:
            raise UpstreamError(
                "No operation name returned",
                code="NO_OPERATION",
                details=response.text,
            )
        logger.info("Veo operation started: %s", operation_name)
        return operation_name

    async def poll(self, handle: str) -> PollResult:
        response = await self.http.get(f"{self.base_url}/{handle}", headers=self._headers)
        if response.status_code >= 400:
            raise TransientPollError(f"HTTP {response.status_code}: {response.text[:200]}")
        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise TransientPollError(f"Unreadable poll response: {e}") from e
        if not isinstance(data, dict):
            raise TransientPollError("Poll response was not a JSON object")

        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            return PollResult.failed(message or "Video generation failed", payload=data)

        if not data.get("done"):
            return PollResult.pending(payload=data)

        video_response = (data.get("response") or {}).get("generateVideoResponse") or {}
        samples = video_response.get("generatedSamples") or []
        uri = ((samples[0] if samples else {}).get("video") or {}).get("uri")
        if not uri:
            return PollResult.failed("Video generation finished without a video", payload=data)
        logger.info("Extracted video URI: %s", uri)
        return PollResult.done(artifact_ref=uri, payload=data)

    async def download(self, artifact_ref: str) -> bytes:
        logger.info("Downloading video from: %s", artifact_ref)
        response = await self.http.get(artifact_ref, headers=self._headers, follow_redirects=True)
        if response.status_code >= 400:
            logger.error("Video download failed (%s): %s", response.status_code, response.text[:500])
            raise DownloadError(
                "Failed to download video",
                code="VIDEO_DOWNLOAD_ERROR",
                details=response.text[:500],
            )
        logger.info("Video downloaded, size=%d bytes", len(response.content))
        return response.content
