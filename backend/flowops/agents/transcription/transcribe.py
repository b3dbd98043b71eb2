"""
Transcription agent backed by a hosted speech-to-text service.

Submits a job for an audio URL (uploading inline audio first when needed),
polls it with the LRO poller and formats speaker-labelled utterances into a
readable transcript.
"""

from __future__ import annotations

import binascii
import logging
from typing import Any, Awaitable, Callable

from ...errors import ValidationError
from ...providers.base import InlineMedia, TranscriptionModel, TranscriptionRequest
from ...services.lro_poller import LongRunningOperationPoller

logger = logging.getLogger(__name__)

_MEDIA_PREFIXES = ("audio/", "video/")


def _timestamp(ms: float | int | None) -> str:
    seconds = int((ms or 0) // 1000)
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours:d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def _speaker_name(label: Any) -> str:
    label = str(label or "").strip()
    # Diarization alone yields single letters; identification yields names or roles
    if len(label) == 1 and label.isalpha():
        return f"Speaker {label.upper()}"
    return label or "Speaker"


def format_utterances(utterances: list[dict[str, Any]]) -> str:
    """
    Render utterances as "[mm:ss] Speaker A: text" lines separated by a
    blank line.
    """
    lines = []
    for utt in utterances:
        text = (utt.get("text") or "").strip()
        if not text:
            continue
        lines.append(f"[{_timestamp(utt.get('start'))}] {_speaker_name(utt.get('speaker'))}: {text}")
    return "\n\n".join(lines)


def build_transcript(payload: dict[str, Any]) -> dict[str, Any]:
    """Turn a completed job payload into the operation result."""
    utterances = [u for u in payload.get("utterances") or [] if isinstance(u, dict)]
    normalized = [
        {
            "speaker": _speaker_name(u.get("speaker")),
            "start": (u.get("start") or 0) / 1000,
            "end": (u.get("end") or 0) / 1000,
            "text": (u.get("text") or "").strip(),
        }
        for u in utterances
    ]
    transcript = format_utterances(utterances) if normalized else ""
    if not transcript:
        transcript = (payload.get("text") or "").strip()
    return {"transcript": transcript, "utterances": normalized}


def decode_audio(audio_base64: str, mime_type: str | None = None) -> bytes:
    """
    Decode a data URL or bare base64 audio. A data URL carries its own mime
    type; bare base64 falls back to mime_type, then audio/mpeg.
    """
    media = InlineMedia.from_data_url(audio_base64, default_mime=(mime_type or "").strip() or "audio/mpeg")
    if not media.mime_type.startswith(_MEDIA_PREFIXES):
        raise ValidationError(
            f"Unsupported audio type: {media.mime_type}", code="INVALID_AUDIO", details=media.mime_type
        )
    try:
        return media.to_bytes()
    except (binascii.Error, ValueError) as e:
        raise ValidationError("audioBase64 is not valid base64", code="INVALID_AUDIO") from e


async def transcribe_audio(
    model: TranscriptionModel,
    *,
    audio_url: str | None = None,
    audio_base64: str | None = None,
    mime_type: str | None = None,
    speaker_labels: bool = True,
    speaker_identification: bool = False,
    speaker_type: str = "name",
    known_values: list[str] | None = None,
    poll_interval: float = 5.0,
    max_attempts: int = 120,
    sleep: Callable[[float], Awaitable[Any]] | None = None,
) -> dict[str, Any]:
    """
    Transcribe audio by URL or inline base64.

    Returns:
        {"transcript": str, "utterances": [{"speaker", "start", "end", "text"}]}
    """
    if not audio_url:
        audio_url = await model.upload(decode_audio(audio_base64 or "", mime_type))

    job_id = await model.submit(
        TranscriptionRequest(
            audio_url=audio_url,
            speaker_labels=speaker_labels,
            # Identification only makes sense on top of diarization
            speaker_identification=speaker_identification and speaker_labels,
            speaker_type=speaker_type,
            known_values=[v.strip() for v in (known_values or []) if v and v.strip()],
        )
    )

    poller_kwargs: dict[str, Any] = {}
    if sleep is not None:
        poller_kwargs["sleep"] = sleep
    poller = LongRunningOperationPoller(
        "transcription",
        interval=poll_interval,
        max_attempts=max_attempts,
        timeout_code="TRANSCRIBE_TIMEOUT",
        failure_code="TRANSCRIBE_ERROR",
        **poller_kwargs,
    )
    outcome = await poller.run(lambda: model.poll(job_id))

    result = build_transcript(outcome.result.payload or {})
    logger.info(
        "Transcription completed after %d polls: %d utterances, %d chars",
        outcome.attempts,
        len(result["utterances"]),
        len(result["transcript"]),
    )
    return result
