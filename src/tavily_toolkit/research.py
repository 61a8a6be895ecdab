"""
Research Job Poller

Creates a Tavily research job and polls its status endpoint until the job
completes, fails, or the wait budget runs out. Abandoning a job on timeout is
purely local; the remote job keeps running and can be fetched later by id.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from .client import ApiError, ProviderResult, Success, TavilyClient, TransportError
from .settings import DEFAULT_POLL_INTERVAL_SECONDS, MAX_RESEARCH_WAIT_SECONDS

logger = logging.getLogger(__name__)

FAILED_STATUSES = ("failed", "error")


@dataclass(frozen=True)
class JobHandle:
    request_id: str
    created_at: float


@dataclass(frozen=True)
class ResearchFailed:
    request_id: str
    payload: dict[str, Any]


@dataclass(frozen=True)
class ResearchTimeout:
    request_id: str
    waited: float


ResearchResult = Success | ApiError | TransportError | ResearchFailed | ResearchTimeout


def is_completed(body: dict[str, Any]) -> bool:
    return body.get("status") == "completed" or bool(body.get("output"))


def is_failed(body: dict[str, Any]) -> bool:
    return body.get("status") in FAILED_STATUSES


class ResearchPoller:
    """Drives one research job from creation to a terminal state."""

    def __init__(
        self,
        client: TavilyClient,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        max_wait: float = MAX_RESEARCH_WAIT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if max_wait <= 0:
            raise ValueError("max_wait must be positive")
        self.client = client
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self._clock = clock
        self._sleep = sleep

    async def run(
        self,
        body: dict[str, Any],
        *,
        max_wait: float | None = None,
        progress_callback: Callable[..., None] | None = None,
    ) -> ResearchResult:
        """
        Create a research job and wait for its final result.

        Args:
            body: Research create request body
            max_wait: Override of the wait budget in seconds
            progress_callback: Optional ``callback(event_type, **kwargs)``

        Returns:
            The terminal outcome of the job
        """
        created = await self.client.execute("research", body)
        if not isinstance(created, Success):
            return created

        data = created.body
        request_id = data.get("request_id")
        if data.get("status") != "pending" or not request_id:
            # Completed synchronously
            return created

        job = JobHandle(request_id=str(request_id), created_at=self._clock())
        budget = max_wait if max_wait is not None else self.max_wait
        self._notify(progress_callback, "research_created", request_id=job.request_id)
        logger.info("Research job %s pending, polling every %ss", job.request_id, self.poll_interval)

        return await self._poll(job, budget, progress_callback)

    async def _poll(
        self,
        job: JobHandle,
        budget: float,
        progress_callback: Callable[..., None] | None,
    ) -> ResearchResult:
        attempt = 0
        while True:
            await self._sleep(self.poll_interval)
            elapsed = self._clock() - job.created_at
            if elapsed >= budget:
                logger.warning(
                    "Research job %s timed out after %.0fs", job.request_id, elapsed
                )
                return ResearchTimeout(request_id=job.request_id, waited=elapsed)

            attempt += 1
            result: ProviderResult = await self.client.fetch_research(job.request_id)
            if not isinstance(result, Success):
                return result

            status = result.body.get("status")
            self._notify(progress_callback, "research_polled", attempt=attempt, status=status)
            logger.debug("Research job %s poll %d: %s", job.request_id, attempt, status)

            if is_completed(result.body):
                self._notify(
                    progress_callback,
                    "research_completed",
                    request_id=job.request_id,
                    elapsed=self._clock() - job.created_at,
                )
                return result
            if is_failed(result.body):
                return ResearchFailed(request_id=job.request_id, payload=result.body)

    @staticmethod
    def _notify(callback: Callable[..., None] | None, event_type: str, **kwargs) -> None:
        if callback is not None:
            callback(event_type, **kwargs)
