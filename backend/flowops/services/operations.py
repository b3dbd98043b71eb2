"""
Registered operations.

Each handler maps a validated request onto one agent function, choosing
providers from the context. Importing this module populates the dispatcher
registry.
"""

from __future__ import annotations

import logging
from typing import Any

from ..agents.article_extraction.extractor import extract_article
from ..agents.copywriting.advertorial import (
    generate_advertorial,
    generate_advertorial_copy,
    generate_copy,
    report_to_text,
)
from ..agents.copywriting.landing_pages import generate_landing_pages
from ..agents.copywriting.visual_concepts import generate_visual_concepts
from ..agents.image_generation.generator import generate_iphone_photo, generate_text_overlay
from ..agents.report_generation.report import generate_report
from ..agents.summarization.summarizer import extract_key_points, summarize
from ..agents.text_generation.generator import enhance_text, generate_meta_headlines
from ..agents.transcription.transcribe import transcribe_audio
from ..agents.video_generation.animator import animate_image
from ..errors import ValidationError
from ..models.operations import (
    AnimateRequest,
    ClassifyRequest,
    EnhanceTextRequest,
    ExtractKeyPointsRequest,
    FetchURLRequest,
    GenerateAdvertorialCopyRequest,
    GenerateAdvertorialRequest,
    GenerateCopyRequest,
    GenerateLandingPagesRequest,
    GenerateReportRequest,
    GenerateVisualConceptsRequest,
    IPhonePhotoRequest,
    MetaHeadlinesRequest,
    SummarizeRequest,
    TextOverlayRequest,
    TranscribeRequest,
)
from .operation_dispatcher import OperationContext, is_empty, operation, require
from .payload_classifier import PayloadKind, classify_payload, extract_text, select_angle

logger = logging.getLogger(__name__)


def _text_input(value: Any, code: str = "MISSING_TEXT") -> str:
    """Resolve untyped node input (string, report, advertorial...) to plain text."""
    text = extract_text(value)
    if text is None:
        raise ValidationError("Input has no usable text", code=code)
    return text


def _advertorial_content(value: Any) -> str | None:
    """Body of an advertorial given as JSON, markup or plain text."""
    payload = classify_payload(value)
    if payload.kind in (PayloadKind.ADVERTORIAL, PayloadKind.MARKUP):
        return payload.content
    if payload.kind is PayloadKind.PLAIN_TEXT:
        return payload.text
    return None


# ---------------------------------------------------------------------------
# Media
# ---------------------------------------------------------------------------


@operation(
    "iphone-photo",
    IPhonePhotoRequest,
    required=[require("text", "referenceImageUrl", code="MISSING_INPUT", message="Missing text or reference image")],
)
async def _op_iphone_photo(ctx: OperationContext, request: IPhonePhotoRequest) -> dict[str, Any]:
    return await generate_iphone_photo(
        vision=ctx.providers.text("gemini-flash"),
        prompt_writer=ctx.providers.text("gemini-pro"),
        image_model=ctx.providers.image(request.model or "gemini-flash"),
        text=request.text,
        extra_instructions=request.extra_instructions,
        reference_image=request.reference_image_url,
        fmt=request.format,
    )


@operation(
    "text-overlay",
    TextOverlayRequest,
    required=[
        require("imageUrl", code="MISSING_IMAGE"),
        require("text"),
    ],
)
async def _op_text_overlay(ctx: OperationContext, request: TextOverlayRequest) -> dict[str, Any]:
    return await generate_text_overlay(
        prompt_writer=ctx.providers.text("gemini-flash"),
        image_model=ctx.providers.image("gpt-image-1"),
        text=request.text,
        style=request.style,
    )


@operation("animate", AnimateRequest, required=[require("imageUrl", code="MISSING_IMAGE")])
async def _op_animate(ctx: OperationContext, request: AnimateRequest) -> dict[str, Any]:
    return await animate_image(
        ctx.providers.video(request.model),
        image_url=request.image_url,
        prompt=request.prompt,
        aspect_ratio=request.aspect_ratio,
        duration=request.duration,
        poll_interval=ctx.settings.video_poll_interval,
        max_attempts=ctx.settings.video_poll_max_attempts,
        sleep=ctx.sleep,
    )


@operation(
    "transcribe",
    TranscribeRequest,
    required=[require("audioUrl", "audioBase64", code="MISSING_AUDIO", message="Missing audioUrl or audioBase64")],
)
async def _op_transcribe(ctx: OperationContext, request: TranscribeRequest) -> dict[str, Any]:
    return await transcribe_audio(
        ctx.providers.transcription(),
        audio_url=(request.audio_url or "").strip() or None,
        audio_base64=request.audio_base64,
        mime_type=request.mime_type,
        speaker_labels=request.speaker_labels,
        speaker_identification=request.speaker_identification,
        speaker_type=request.speaker_type,
        known_values=request.known_values,
        poll_interval=ctx.settings.transcribe_poll_interval,
        max_attempts=ctx.settings.transcribe_poll_max_attempts,
        sleep=ctx.sleep,
    )


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


@operation("fetch-url", FetchURLRequest, required=[require("url")])
async def _op_fetch_url(ctx: OperationContext, request: FetchURLRequest) -> dict[str, Any]:
    url = request.url.strip()
    if not url.startswith(("http://", "https://")):
        raise ValidationError("url must start with http:// or https://", code="INVALID_URL")
    return await extract_article(ctx.http, ctx.providers.text(), url, request.instructions)


@operation("enhance-text", EnhanceTextRequest, required=[require("text")])
async def _op_enhance_text(ctx: OperationContext, request: EnhanceTextRequest) -> dict[str, Any]:
    return await enhance_text(ctx.providers.text(), request.text, request.style)


@operation("summarize", SummarizeRequest, required=[require("text")])
async def _op_summarize(ctx: OperationContext, request: SummarizeRequest) -> dict[str, Any]:
    return await summarize(ctx.providers.text(), _text_input(request.text), request.max_length)


@operation("extract-key-points", ExtractKeyPointsRequest, required=[require("text")])
async def _op_extract_key_points(ctx: OperationContext, request: ExtractKeyPointsRequest) -> dict[str, Any]:
    return await extract_key_points(
        ctx.providers.text(),
        _text_input(request.text),
        request.max_points or 5,
    )


@operation("generate-meta-headlines", MetaHeadlinesRequest, required=[require("text")])
async def _op_meta_headlines(ctx: OperationContext, request: MetaHeadlinesRequest) -> dict[str, Any]:
    payload = classify_payload(request.text)
    if payload.kind is PayloadKind.ADVERTORIAL and payload.headline:
        text = f"{payload.headline}\n\n{payload.content}"
    else:
        text = _text_input(request.text)
    return await generate_meta_headlines(ctx.providers.text(), text)


# ---------------------------------------------------------------------------
# Reports and copy
# ---------------------------------------------------------------------------


@operation("generate-report", GenerateReportRequest, required=[require("transcript")])
async def _op_generate_report(ctx: OperationContext, request: GenerateReportRequest) -> dict[str, Any]:
    return await generate_report(ctx.providers.text("gemini-pro"), request.transcript, request.episode_title)


@operation("generate-advertorial", GenerateAdvertorialRequest, required=[require("report")])
async def _op_generate_advertorial(ctx: OperationContext, request: GenerateAdvertorialRequest) -> dict[str, Any]:
    return await generate_advertorial(ctx.providers.text("gemini-pro"), request.report)


@operation(
    "generate-advertorial-copy",
    GenerateAdvertorialCopyRequest,
    required=[require("advertorialContent", code="MISSING_CONTENT")],
)
async def _op_generate_advertorial_copy(
    ctx: OperationContext, request: GenerateAdvertorialCopyRequest
) -> dict[str, Any]:
    content = _advertorial_content(request.advertorial_content)
    if not content:
        raise ValidationError("Connect advertorial content first", code="MISSING_CONTENT")
    return await generate_advertorial_copy(ctx.providers.text(), content)


@operation("generate-copy", GenerateCopyRequest, required=[require("report")])
async def _op_generate_copy(ctx: OperationContext, request: GenerateCopyRequest) -> dict[str, Any]:
    return await generate_copy(ctx.providers.text(), request.report, request.platform, request.mode)


@operation("generate-landing-pages", GenerateLandingPagesRequest, required=[require("report")])
async def _op_generate_landing_pages(ctx: OperationContext, request: GenerateLandingPagesRequest) -> dict[str, Any]:
    return await generate_landing_pages(ctx.providers.text("gemini-pro"), request.report, request.mode)


def _visual_concepts_source(request: GenerateVisualConceptsRequest) -> str:
    """
    Pick the source text for visual concepts. The mode's own input is tried
    first, then report, advertorial content and custom text in that order.
    """
    preferred = {
        "report": "report",
        "newsletter": "report",
        "advertorial": "advertorial",
        "custom": "custom",
    }[request.mode]
    order = [preferred] + [s for s in ("report", "advertorial", "custom") if s != preferred]

    for source in order:
        if source == "report" and not is_empty(request.report):
            return report_to_text(request.report)
        if source == "advertorial" and not is_empty(request.advertorial_content):
            content = _advertorial_content(request.advertorial_content)
            if content:
                return content
        if source == "custom" and not is_empty(request.custom_text):
            return request.custom_text.strip()
    raise ValidationError("Connect a report, advertorial or text first", code="MISSING_INPUT")


@operation(
    "generate-visual-concepts",
    GenerateVisualConceptsRequest,
    required=[
        require(
            "report",
            "advertorialContent",
            "customText",
            code="MISSING_INPUT",
            message="Missing report, advertorialContent or customText",
        )
    ],
)
async def _op_generate_visual_concepts(
    ctx: OperationContext, request: GenerateVisualConceptsRequest
) -> dict[str, Any]:
    source_text = _visual_concepts_source(request)
    return await generate_visual_concepts(ctx.providers.text(), source_text, request.count, request.mode)


@operation("classify", ClassifyRequest, required=[require("inputValue", code="MISSING_INPUT")])
async def _op_classify(ctx: OperationContext, request: ClassifyRequest) -> dict[str, Any]:
    result = classify_payload(request.input_value).to_dict()
    if request.angle:
        result["selected"] = select_angle(request.input_value, request.angle)
    return result
