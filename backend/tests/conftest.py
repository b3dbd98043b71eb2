"""
Shared fakes: scripted providers that record every call, so tests can
assert both results and that nothing remote was touched.
"""

import sys
from pathlib import Path

backend_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_root))

import httpx
import pytest

from flowops.config import Settings
from flowops.providers.base import ImageModel, TextModel, TranscriptionModel, VideoModel
from flowops.services.lro_poller import PollResult
from flowops.services.operation_dispatcher import OperationContext


TEST_SETTINGS = Settings(
    gemini_api_key="test-gemini",
    openai_api_key="test-openai",
    assemblyai_api_key="test-assemblyai",
    auth_username="editor",
    auth_password="s3cret",
    auth_token="test-token",
    video_poll_interval=10.0,
    video_poll_max_attempts=3,
    transcribe_poll_interval=5.0,
    transcribe_poll_max_attempts=4,
)


class FakeTextModel(TextModel):
    def __init__(self, responses=None, name="fake-text"):
        self.name = name
        self.responses = list(responses or [])
        self.calls: list[tuple[str, object]] = []

    async def generate(self, prompt, image=None):
        self.calls.append((prompt, image))
        if not self.responses:
            return "generated text"
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeImageModel(ImageModel):
    def __init__(self, name="fake-image"):
        self.name = name
        self.calls: list[tuple[str, str]] = []

    async def generate(self, prompt, aspect_ratio="1:1"):
        self.calls.append((prompt, aspect_ratio))
        return "data:image/png;base64,iVBORw0KGgo="


class FakeVideoModel(VideoModel):
    def __init__(self, polls=None, video=b"\x00\x00\x00\x18ftypmp42"):
        self.name = "fake-video"
        self.polls = list(polls or [PollResult.done("https://example.com/video.mp4")])
        self.video = video
        self.started: list[tuple] = []
        self.poll_count = 0

    async def start(self, image, prompt, aspect_ratio, duration):
        self.started.append((image, prompt, aspect_ratio, duration))
        return "operations/op-1"

    async def poll(self, handle):
        self.poll_count += 1
        return self.polls.pop(0)

    async def download(self, artifact_ref):
        return self.video


class FakeTranscriptionModel(TranscriptionModel):
    name = "fake-transcription"

    def __init__(self, polls=None):
        self.polls = list(polls or [])
        self.uploads: list[bytes] = []
        self.requests = []

    async def upload(self, audio):
        self.uploads.append(audio)
        return "https://cdn.example.com/upload/1"

    async def submit(self, request):
        self.requests.append(request)
        return "job-1"

    async def poll(self, job_id):
        return self.polls.pop(0)


class FakeProviders:
    """Stands in for ProviderRegistry and counts how often each capability is requested."""

    def __init__(self, text=None, image=None, video=None, transcription=None):
        self.text_model = text or FakeTextModel()
        self.image_model = image or FakeImageModel()
        self.video_model = video or FakeVideoModel()
        self.transcription_model = transcription or FakeTranscriptionModel()
        self.requested: list[tuple[str, object]] = []

    def text(self, model=None):
        self.requested.append(("text", model))
        return self.text_model

    def image(self, model=None):
        self.requested.append(("image", model))
        return self.image_model

    def video(self, model=None):
        self.requested.append(("video", model))
        return self.video_model

    def transcription(self):
        self.requested.append(("transcription", None))
        return self.transcription_model


class FakeClock:
    def __init__(self):
        self.sleeps: list[float] = []

    async def sleep(self, seconds):
        self.sleeps.append(seconds)


def unreachable_transport():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"Unexpected HTTP call: {request.method} {request.url}")

    return httpx.MockTransport(handler)


def make_context(providers=None, http=None, clock=None, settings=TEST_SETTINGS):
    return OperationContext(
        settings=settings,
        providers=providers or FakeProviders(),
        http=http or httpx.AsyncClient(transport=unreachable_transport()),
        sleep=(clock or FakeClock()).sleep,
    )


@pytest.fixture
def providers():
    return FakeProviders()


@pytest.fixture
def clock():
    return FakeClock()
