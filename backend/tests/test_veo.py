"""
Image animation against a mocked Veo REST API.
"""

import base64
import json

import httpx
import pytest

from conftest import FakeClock

from flowops.agents.video_generation.animator import animate_image
from flowops.errors import DownloadError, OperationTimeoutError, ParseError, UpstreamError
from flowops.providers.veo import VeoVideoModel

OPERATION = "models/veo-2.0-generate-001/operations/op-123"
VIDEO_URI = "https://generativelanguage.googleapis.com/v1beta/files/vid-1:download?alt=media"
IMAGE = "data:image/png;base64," + base64.b64encode(b"\x89PNG fake").decode()


def done_response(uri=VIDEO_URI):
    return {
        "name": OPERATION,
        "done": True,
        "response": {"generateVideoResponse": {"generatedSamples": [{"video": {"uri": uri}}]}},
    }


def veo_transport(polls, seen, start=None, download=None):
    polls = list(polls)

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        assert request.headers["x-goog-api-key"] == "gemini-key"
        if request.method == "POST":
            return start if start is not None else httpx.Response(200, json={"name": OPERATION})
        if request.url.path.endswith(OPERATION):
            item = polls.pop(0)
            if isinstance(item, int):
                return httpx.Response(item, text="busy")
            return httpx.Response(200, json=item)
        if "files/vid-1" in request.url.path:
            return download if download is not None else httpx.Response(200, content=b"MP4DATA")
        return httpx.Response(404)

    return httpx.MockTransport(handler)


async def run_animate(polls, start=None, download=None, max_attempts=5):
    seen: list[httpx.Request] = []
    clock = FakeClock()
    async with httpx.AsyncClient(transport=veo_transport(polls, seen, start, download)) as http:
        model = VeoVideoModel(http, "gemini-key")
        result = await animate_image(
            model,
            image_url=IMAGE,
            prompt="slow pan",
            aspect_ratio="9:16",
            duration=6,
            poll_interval=10.0,
            max_attempts=max_attempts,
            sleep=clock.sleep,
        )
    return result, seen, clock


class TestVeoAnimation:

    @pytest.mark.asyncio
    async def test_full_flow(self):
        result, seen, clock = await run_animate([{"name": OPERATION}, {"name": OPERATION, "done": False}, done_response()])

        assert result == {"videoUrl": "data:video/mp4;base64," + base64.b64encode(b"MP4DATA").decode()}
        assert clock.sleeps == [10.0, 10.0, 10.0]

        start = seen[0]
        assert start.url.path.endswith("/models/veo-2.0-generate-001:predictLongRunning")
        body = json.loads(start.content)
        assert body["instances"][0]["image"] == {
            "bytesBase64Encoded": IMAGE.split(",", 1)[1],
            "mimeType": "image/png",
        }
        assert body["parameters"] == {"aspectRatio": "9:16", "durationSeconds": 6}

    @pytest.mark.asyncio
    async def test_failed_polls_count_toward_ceiling(self):
        result, seen, _ = await run_animate([500, 429, done_response()])
        assert result["videoUrl"].startswith("data:video/mp4;base64,")

        with pytest.raises(OperationTimeoutError) as exc:
            await run_animate([500, 500, 500], max_attempts=3)
        assert exc.value.code == "VEO_TIMEOUT"

    @pytest.mark.asyncio
    async def test_operation_error(self):
        with pytest.raises(UpstreamError) as exc:
            await run_animate([{"name": OPERATION, "done": True, "error": {"code": 3, "message": "Image rejected"}}])
        assert exc.value.code == "VEO_ERROR"
        assert exc.value.message == "Image rejected"

    @pytest.mark.asyncio
    async def test_done_without_video(self):
        with pytest.raises(UpstreamError) as exc:
            await run_animate([{"name": OPERATION, "done": True, "response": {}}])
        assert exc.value.code == "VEO_ERROR"

    @pytest.mark.asyncio
    async def test_start_rejected(self):
        with pytest.raises(UpstreamError) as exc:
            await run_animate([], start=httpx.Response(400, text="bad image"))
        assert exc.value.code == "VEO_START_ERROR"
        assert exc.value.details == "bad image"

    @pytest.mark.asyncio
    async def test_start_unparseable(self):
        with pytest.raises(ParseError) as exc:
            await run_animate([], start=httpx.Response(200, text="<html>"))
        assert exc.value.code == "VEO_PARSE_ERROR"

    @pytest.mark.asyncio
    async def test_start_without_operation_name(self):
        with pytest.raises(UpstreamError) as exc:
            await run_animate([], start=httpx.Response(200, json={}))
        assert exc.value.code == "NO_OPERATION"

    @pytest.mark.asyncio
    async def test_download_failure(self):
        with pytest.raises(DownloadError) as exc:
            await run_animate([done_response()], download=httpx.Response(403, text="forbidden"))
        assert exc.value.code == "VIDEO_DOWNLOAD_ERROR"
