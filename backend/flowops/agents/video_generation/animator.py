"""
Image-to-video animation: start a video job, poll it, download the result.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from ...providers.base import InlineMedia, VideoModel, to_data_url
from ...services.lro_poller import LongRunningOperationPoller

logger = logging.getLogger(__name__)

DEFAULT_ANIMATE_PROMPT = "Animate this image with subtle, natural motion"


async def animate_image(
    video_model: VideoModel,
    *,
    image_url: str,
    prompt: str | None = None,
    aspect_ratio: str | None = None,
    duration: int | None = None,
    poll_interval: float = 10.0,
    max_attempts: int = 36,
    sleep: Callable[[float], Awaitable[Any]] | None = None,
) -> dict[str, Any]:
    """
    Animate a still image.

    The finished video sits behind an authenticated URI the browser cannot
    read, so it is downloaded here and returned inline as a data URL.

    Returns:
        {"videoUrl": "data:video/mp4;base64,..."}
    """
    image = InlineMedia.from_data_url(image_url)
    logger.info("Animate request - mimeType=%s base64 length=%d", image.mime_type, len(image.data))

    handle = await video_model.start(
        image,
        prompt or DEFAULT_ANIMATE_PROMPT,
        aspect_ratio or "16:9",
        duration or 8,
    )

    poller_kwargs: dict[str, Any] = {}
    if sleep is not None:
        poller_kwargs["sleep"] = sleep
    poller = LongRunningOperationPoller(
        "video generation",
        interval=poll_interval,
        max_attempts=max_attempts,
        timeout_code="VEO_TIMEOUT",
        failure_code="VEO_ERROR",
        download_code="VIDEO_DOWNLOAD_ERROR",
        **poller_kwargs,
    )

    async def materialize(uri: str) -> str:
        video_bytes = await video_model.download(uri)
        return to_data_url(video_bytes, "video/mp4")

    outcome = await poller.run(lambda: video_model.poll(handle), materialize=materialize)
    return {"videoUrl": outcome.artifact}
