"""
Request models for the operation endpoints.

The editor sends camelCase JSON; fields are snake_case here. Required
fields are declared on the operation registration, not on these models,
so that a missing field yields its MISSING_<FIELD> code rather than a
generic validation error.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OperationRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# ---- Media ----

class IPhonePhotoRequest(OperationRequest):
    text: str | None = None
    extra_instructions: str | None = None
    reference_image_url: str | None = None
    format: str | None = "square"
    model: str | None = None


class TextOverlayRequest(OperationRequest):
    image_url: str | None = None
    text: str | None = None
    style: str | None = None


class AnimateRequest(OperationRequest):
    image_url: str | None = None
    prompt: str | None = None
    aspect_ratio: str | None = "16:9"
    duration: int | None = Field(default=8, ge=1, le=60)
    model: str | None = None


class TranscribeRequest(OperationRequest):
    audio_url: str | None = None
    audio_base64: str | None = None
    mime_type: str | None = None
    speaker_labels: bool = True
    speaker_identification: bool = False
    speaker_type: Literal["name", "role"] = "name"
    known_values: list[str] = Field(default_factory=list)


# ---- Text ----

class FetchURLRequest(OperationRequest):
    url: str | None = None
    instructions: str | None = None


class EnhanceTextRequest(OperationRequest):
    text: str | None = None
    style: str | None = None


class SummarizeRequest(OperationRequest):
    text: Any = None
    max_length: int | None = Field(default=None, gt=0)


class ExtractKeyPointsRequest(OperationRequest):
    text: Any = None
    max_points: int | None = Field(default=5, gt=0, le=50)


class MetaHeadlinesRequest(OperationRequest):
    text: Any = None


# ---- Reports and copy ----

class GenerateReportRequest(OperationRequest):
    transcript: str | None = None
    episode_title: str | None = None


class GenerateAdvertorialRequest(OperationRequest):
    report: Any = None


class GenerateAdvertorialCopyRequest(OperationRequest):
    advertorial_content: Any = None


class GenerateCopyRequest(OperationRequest):
    report: Any = None
    platform: str | None = "meta"
    mode: str | None = "standard"


class GenerateLandingPagesRequest(OperationRequest):
    report: Any = None
    mode: Literal["report", "newsletter"] = "report"


class GenerateVisualConceptsRequest(OperationRequest):
    report: Any = None
    advertorial_content: Any = None
    custom_text: str | None = None
    count: int = Field(default=5, ge=1, le=10)
    mode: Literal["report", "newsletter", "advertorial", "custom"] = "custom"


class ClassifyRequest(OperationRequest):
    input_value: Any = None
    angle: Literal["fear", "greed", "curiosity", "urgency"] | None = None
