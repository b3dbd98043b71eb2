"""
Tests for the long-running operation poller.

Sleep is injected so the tests count suspensions instead of waiting.
"""

import httpx
import pytest

from conftest import FakeClock

from flowops.errors import DownloadError, OperationTimeoutError, UpstreamError
from flowops.services.lro_poller import (
    LongRunningOperationPoller,
    PollerState,
    PollResult,
    TransientPollError,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def scripted(results):
    """Status check that replays `results`; Exception instances are raised."""
    calls = {"count": 0}
    items = list(results)

    async def check():
        item = items[calls["count"]]
        calls["count"] += 1
        if isinstance(item, Exception):
            raise item
        return item

    return check, calls


def make_poller(clock, max_attempts=5, interval=10.0):
    return LongRunningOperationPoller(
        "test job",
        interval=interval,
        max_attempts=max_attempts,
        sleep=clock.sleep,
        timeout_code="JOB_TIMEOUT",
        failure_code="JOB_ERROR",
        download_code="JOB_DOWNLOAD_ERROR",
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestPollerCompletion:

    @pytest.mark.asyncio
    async def test_done_on_attempt_k_polls_and_sleeps_k_times(self):
        clock = FakeClock()
        check, calls = scripted([PollResult.pending(), PollResult.pending(), PollResult.done("ref-1")])
        poller = make_poller(clock)

        outcome = await poller.run(check)

        assert outcome.attempts == 3
        assert outcome.artifact == "ref-1"
        assert calls["count"] == 3
        assert clock.sleeps == [10.0, 10.0, 10.0]
        assert poller.state is PollerState.COMPLETED

    @pytest.mark.asyncio
    async def test_first_poll_done(self):
        clock = FakeClock()
        check, calls = scripted([PollResult.done("ref")])

        outcome = await make_poller(clock).run(check)

        assert outcome.attempts == 1
        assert len(clock.sleeps) == 1

    @pytest.mark.asyncio
    async def test_materializer_receives_artifact_ref(self):
        clock = FakeClock()
        check, _ = scripted([PollResult.done("uri://video")])
        seen = []

        async def materialize(ref):
            seen.append(ref)
            return "data:video/mp4;base64,AAAA"

        outcome = await make_poller(clock).run(check, materialize=materialize)

        assert seen == ["uri://video"]
        assert outcome.artifact == "data:video/mp4;base64,AAAA"

    @pytest.mark.asyncio
    async def test_payload_is_kept_on_result(self):
        clock = FakeClock()
        check, _ = scripted([PollResult.done("job", payload={"text": "hello"})])

        outcome = await make_poller(clock).run(check)

        assert outcome.result.payload == {"text": "hello"}


class TestPollerTimeout:

    @pytest.mark.asyncio
    async def test_times_out_after_exactly_ceiling_attempts(self):
        clock = FakeClock()
        check, calls = scripted([PollResult.pending()] * 10)
        poller = make_poller(clock, max_attempts=4)

        with pytest.raises(OperationTimeoutError) as exc:
            await poller.run(check)

        assert exc.value.code == "JOB_TIMEOUT"
        assert exc.value.status_code == 504
        assert calls["count"] == 4
        assert len(clock.sleeps) == 4
        assert poller.state is PollerState.TIMED_OUT

    def test_wall_clock_bound(self):
        poller = make_poller(FakeClock(), max_attempts=36, interval=10.0)
        assert poller.wall_clock_bound == 360.0

    def test_rejects_zero_ceiling(self):
        with pytest.raises(ValueError):
            make_poller(FakeClock(), max_attempts=0)


class TestPollerFailures:

    @pytest.mark.asyncio
    async def test_failure_stops_immediately(self):
        clock = FakeClock()
        check, calls = scripted([PollResult.pending(), PollResult.failed("quota exceeded"), PollResult.done("x")])
        poller = make_poller(clock)

        with pytest.raises(UpstreamError) as exc:
            await poller.run(check)

        assert exc.value.code == "JOB_ERROR"
        assert "quota exceeded" in exc.value.message
        assert calls["count"] == 2
        assert poller.state is PollerState.FAILED

    @pytest.mark.asyncio
    async def test_transient_errors_are_counted_but_tolerated(self):
        clock = FakeClock()
        check, calls = scripted([
            TransientPollError("HTTP 503"),
            httpx.ConnectError("reset"),
            PollResult.done("ref"),
        ])

        outcome = await make_poller(clock).run(check)

        assert outcome.attempts == 3
        assert calls["count"] == 3

    @pytest.mark.asyncio
    async def test_transient_errors_still_hit_ceiling(self):
        clock = FakeClock()
        check, calls = scripted([TransientPollError("HTTP 500")] * 3)

        with pytest.raises(OperationTimeoutError):
            await make_poller(clock, max_attempts=3).run(check)

        assert calls["count"] == 3

    @pytest.mark.asyncio
    async def test_download_failure_is_reported_as_download_error(self):
        clock = FakeClock()
        check, _ = scripted([PollResult.done("uri")])

        async def materialize(ref):
            raise httpx.ReadTimeout("slow")

        with pytest.raises(DownloadError) as exc:
            await make_poller(clock).run(check, materialize=materialize)

        assert exc.value.code == "JOB_DOWNLOAD_ERROR"

    @pytest.mark.asyncio
    async def test_done_without_ref_cannot_be_materialized(self):
        clock = FakeClock()
        check, _ = scripted([PollResult.done(None)])

        async def materialize(ref):
            return ref

        with pytest.raises(DownloadError):
            await make_poller(clock).run(check, materialize=materialize)
