"""
AssemblyAI speech transcription over its REST API.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..errors import ParseError, UpstreamError
from ..services.lro_poller import PollResult, TransientPollError
from .base import TranscriptionModel, TranscriptionRequest

logger = logging.getLogger(__name__)

ASSEMBLYAI_API_BASE = "https://api.assemblyai.com/v2"


class AssemblyAITranscriptionModel(TranscriptionModel):
    name = "assemblyai"

    def __init__(self, http: httpx.AsyncClient, api_key: str, base_url: str = ASSEMBLYAI_API_BASE):
        self.http = http
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    @property
    def _headers(self) -> dict[str, str]:
        return {"authorization": self.api_key}

    def _json(self, response: httpx.Response, what: str) -> dict[str, Any]:
        if response.status_code >= 400:
            logger.error("AssemblyAI %s failed (%s): %s", what, response.status_code, response.text[:500])
            raise UpstreamError(
                f"AssemblyAI {what} failed",
                code="ASSEMBLYAI_ERROR",
                details=response.text,
            )
        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise ParseError(
                f"Invalid {what} response from AssemblyAI",
                code="ASSEMBLYAI_PARSE_ERROR",
                details=response.text[:500],
            ) from e
        if not isinstance(data, dict):
            raise ParseError(f"Invalid {what} response from AssemblyAI", code="ASSEMBLYAI_PARSE_ERROR")
        return data

    async def upload(self, audio: bytes) -> str:
        response = await self.http.post(
            f"{self.base_url}/upload",
            headers={**self._headers, "content-type": "application/octet-stream"},
            content=audio,
        )
        data = self._json(response, "upload")
        upload_url = data.get("upload_url")
        if not upload_url:
            raise UpstreamError("AssemblyAI upload returned no URL", code="ASSEMBLYAI_ERROR")
        logger.info("Uploaded %d bytes of audio to AssemblyAI", len(audio))
        return upload_url

    async def submit(self, request: TranscriptionRequest) -> str:
        body: dict[str, Any] = {
            "audio_url": request.audio_url,
            "speaker_labels": request.speaker_labels,
        }
        if request.speaker_labels and request.speaker_identification:
            identification: dict[str, Any] = {"speaker_type": request.speaker_type}
            if request.known_values:
                identification["known_values"] = request.known_values
            body["speech_understanding"] = {"request": {"speaker_identification": identification}}

        response = await self.http.post(f"{self.base_url}/transcript", headers=self._headers, json=body)
        data = self._json(response, "submit")
        job_id = data.get("id")
        if not job_id:
            raise UpstreamError("AssemblyAI returned no transcript id", code="ASSEMBLYAI_ERROR")
        logger.info("AssemblyAI transcript job started: %s", job_id)
        return job_id

    async def poll(self, job_id: str) -> PollResult:
        response = await self.http.get(f"{self.base_url}/transcript/{job_id}", headers=self._headers)
        if response.status_code >= 400:
            raise TransientPollError(f"HTTP {response.status_code}: {response.text[:200]}")
        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise TransientPollError(f"Unreadable poll response: {e}") from e
        if not isinstance(data, dict):
            raise TransientPollError("Poll response was not a JSON object")

        status = data.get("status")
        if status == "completed":
            return PollResult.done(artifact_ref=job_id, payload=data)
        if status == "error":
            return PollResult.failed(data.get("error") or "Transcription failed", payload=data)
        return PollResult.pending(payload=data)
