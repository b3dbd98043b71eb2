"""
Long-running operation poller.

Drives a remote job that was already started by a provider:
sleep a fixed interval, ask for status once, repeat until the job is
done, reports an error, or the attempt ceiling is reached. On completion
the artifact reference can be materialized (e.g. an authenticated download
re-encoded as a data URL) before returning to the caller.

State machine:
    STARTED -> POLLING (-> POLLING ...) -> COMPLETED | FAILED | TIMED_OUT

The ceiling is the only timeout: the effective wall-clock bound is
interval * max_attempts. The interval never changes between attempts.
There is no upstream cancellation; a caller that stops awaiting simply
abandons the remote job.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

import httpx

from ..errors import (
    DownloadError,
    OperationError,
    OperationTimeoutError,
    UpstreamError,
)

logger = logging.getLogger(__name__)


class PollStatus(str, Enum):
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


class PollerState(str, Enum):
    STARTED = "started"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class PollResult:
    """One status check of a remote job."""

    status: PollStatus
    artifact_ref: str | None = None
    reason: str | None = None
    payload: dict[str, Any] | None = None

    @classmethod
    def pending(cls, payload: dict[str, Any] | None = None) -> "PollResult":
        return cls(PollStatus.PENDING, payload=payload)

    @classmethod
    def done(cls, artifact_ref: str | None = None, payload: dict[str, Any] | None = None) -> "PollResult":
        return cls(PollStatus.DONE, artifact_ref=artifact_ref, payload=payload)

    @classmethod
    def failed(cls, reason: str, payload: dict[str, Any] | None = None) -> "PollResult":
        return cls(PollStatus.FAILED, reason=reason, payload=payload)


@dataclass(frozen=True)
class PollOutcome:
    result: PollResult
    artifact: Any
    attempts: int


class TransientPollError(Exception):
    """A single status check failed; the poller skips it and keeps counting."""


StatusCheck = Callable[[], Awaitable[PollResult]]
Materializer = Callable[[str], Awaitable[Any]]
SleepFn = Callable[[float], Awaitable[Any]]


class LongRunningOperationPoller:
    """
    Polls one remote job handle. Create a new poller per request; the
    attempt counter and state are not meant to be shared.
    """

    def __init__(
        self,
        name: str,
        *,
        interval: float,
        max_attempts: int,
        sleep: SleepFn = asyncio.sleep,
        timeout_code: str = "TIMEOUT",
        failure_code: str = "UPSTREAM_ERROR",
        download_code: str = "DOWNLOAD_ERROR",
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.name = name
        self.interval = interval
        self.max_attempts = max_attempts
        self.timeout_code = timeout_code
        self.failure_code = failure_code
        self.download_code = download_code
        self._sleep = sleep
        self.state = PollerState.STARTED
        self.attempts = 0

    @property
    def wall_clock_bound(self) -> float:
        return self.interval * self.max_attempts

    async def run(self, check: StatusCheck, materialize: Materializer | None = None) -> PollOutcome:
        """
        Poll until the job resolves.

        Args:
            check: Coroutine function performing exactly one status request
            materialize: Optional coroutine turning the artifact reference into
                a self-contained value

        Returns:
            PollOutcome with the terminal PollResult and the materialized artifact
            (or the raw artifact reference when no materializer is given)

        Raises:
            UpstreamError: provider reported a failure (not retried)
            OperationTimeoutError: ceiling reached without resolution
            DownloadError: the artifact could not be materialized
        """
        self.state = PollerState.POLLING
        while self.attempts < self.max_attempts:
            await self._sleep(self.interval)
            self.attempts += 1

            try:
                result = await check()
            except (TransientPollError, httpx.HTTPError) as e:
                logger.warning(
                    "%s: poll %d/%d failed, continuing: %s",
                    self.name,
                    self.attempts,
                    self.max_attempts,
                    e,
                )
                continue

            logger.debug(
                "%s: poll %d/%d status=%s",
                self.name,
                self.attempts,
                self.max_attempts,
                result.status.value,
            )

            if result.status is PollStatus.FAILED:
                self.state = PollerState.FAILED
                logger.error("%s failed after %d polls: %s", self.name, self.attempts, result.reason)
                raise UpstreamError(
                    result.reason or f"{self.name} failed",
                    code=self.failure_code,
                )

            if result.status is PollStatus.DONE:
                self.state = PollerState.COMPLETED
                logger.info("%s completed after %d polls", self.name, self.attempts)
                artifact = await self._materialize(result, materialize)
                return PollOutcome(result=result, artifact=artifact, attempts=self.attempts)

        self.state = PollerState.TIMED_OUT
        logger.error(
            "%s timed out after %d polls (%.0fs)",
            self.name,
            self.attempts,
            self.wall_clock_bound,
        )
        raise OperationTimeoutError(
            f"{self.name} timed out after {self.attempts} status checks",
            code=self.timeout_code,
        )

    async def _materialize(self, result: PollResult, materialize: Materializer | None) -> Any:
        if materialize is None:
            return result.artifact_ref
        if not result.artifact_ref:
            raise DownloadError(
                f"{self.name} completed without an artifact reference",
                code=self.download_code,
            )
        try:
            return await materialize(result.artifact_ref)
        except DownloadError:
            raise
        except (OperationError, httpx.HTTPError) as e:
            logger.error("%s: artifact download failed: %s", self.name, e)
            raise DownloadError(
                f"Failed to download {self.name} artifact",
                code=self.download_code,
                details=str(e),
            ) from e
