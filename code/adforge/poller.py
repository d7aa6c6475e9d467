"""Job poller: watch an async backend job until it settles.

A job is submitted elsewhere and identified by its ``job_id``. The poller
waits ``interval`` seconds, fetches the status, reports progress, and repeats
until the backend reports a terminal status or ``max_attempts`` fetches have
been made.

Outcomes
--------
completed   -> ``on_complete(result)`` then the result is returned
failed      -> ``on_failure(JobFailedError)`` then it is raised
cancelled   -> ``on_failure(JobCancelledError)`` then it is raised
404         -> ``on_failure(JobNotFoundError)`` then it is raised
cap reached -> ``on_failure(JobTimeoutError)`` then it is raised; the check
               after the cap is never issued

A failed status fetch (network error, 5xx, ...) is logged and counts as an
attempt; polling carries on. Cancelling a poller stops it cooperatively: no
fetch is issued and no callback fires afterwards. The backend job itself
keeps running.
"""
from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
import structlog

from adforge.config import settings
from adforge.errors import (
    ApiConnectionError,
    ApiError,
    ApiTimeoutError,
    JobCancelledError,
    JobError,
    JobFailedError,
    JobNotFoundError,
    JobTimeoutError,
    NotFoundError,
)
from adforge.models.job import JobProgress, JobState, JobStatus

log = structlog.get_logger(__name__)

FetchStatus = Callable[[str], Awaitable[JobStatus]]
ProgressCallback = Callable[[JobProgress], Any]
CompleteCallback = Callable[[Any], Any]
FailureCallback = Callable[[JobError], Any]

_TRANSIENT_ERRORS = (ApiError, ApiConnectionError, ApiTimeoutError, httpx.HTTPError)


async def _call(callback: Optional[Callable[..., Any]], *args: Any) -> None:
    if callback is None:
        return
    outcome = callback(*args)
    if inspect.isawaitable(outcome):
        await outcome


class JobPoller:
    """Poll one job until it completes, fails, times out or is cancelled."""

    def __init__(
        self,
        job_id: str,
        fetch_status: FetchStatus,
        interval: Optional[float] = None,
        max_attempts: Optional[int] = -1,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
        on_failure: Optional[FailureCallback] = None,
    ) -> None:
        self.job_id = job_id
        self.fetch_status = fetch_status
        self.interval = settings.POLL_INTERVAL_S if interval is None else max(0.0, float(interval))
        # -1 means "use the configured cap"; None means no cap at all
        self.max_attempts = settings.POLL_MAX_ATTEMPTS if max_attempts == -1 else max_attempts
        self.on_progress = on_progress
        self.on_complete = on_complete
        self.on_failure = on_failure
        self.attempts = 0
        self.last_status: Optional[JobStatus] = None
        self._best_percentage = 0.0
        self._cancelled = False
        self._settled = False
        self._task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> "JobPoller":
        """Schedule polling as a background task. Idempotent."""
        if self._task is None:
            self._task = asyncio.create_task(self.run(), name=f"job-poller-{self.job_id}")
        return self

    async def wait(self) -> Any:
        """Start if needed and wait for the outcome."""
        self.start()
        assert self._task is not None
        return await self._task

    def cancel(self) -> None:
        if self._cancelled or self._settled:
            return
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        log.info("job_poll_cancelled", job_id=self.job_id, attempts=self.attempts)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._settled or self._cancelled

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    async def __aenter__(self) -> "JobPoller":
        return self.start()

    async def __aexit__(self, *_: Any) -> None:
        self.cancel()

    # ------------------------------------------------------------------
    # Polling loop
    # ------------------------------------------------------------------

    def _within_cap(self) -> bool:
        return self.max_attempts is None or self.attempts < self.max_attempts

    def _check_cancelled(self) -> None:
        if self._cancelled:
            raise asyncio.CancelledError()

    async def run(self) -> Any:
        """Poll inline and return the job result."""
        log.info(
            "job_poll_started",
            job_id=self.job_id,
            interval_s=self.interval,
            max_attempts=self.max_attempts,
        )
        while self._within_cap():
            await asyncio.sleep(self.interval)
            self._check_cancelled()

            self.attempts += 1
            try:
                status = await self.fetch_status(self.job_id)
            except NotFoundError as exc:
                self._check_cancelled()
                await self._fail(JobNotFoundError(self.job_id, str(exc) or f"Job {self.job_id} not found"))
            except _TRANSIENT_ERRORS as exc:
                self._check_cancelled()
                log.warning(
                    "job_poll_transient_error",
                    job_id=self.job_id,
                    attempt=self.attempts,
                    error=str(exc),
                )
                continue

            self._check_cancelled()
            self.last_status = status
            await self._report_progress(status)

            if status.status == JobState.COMPLETED:
                self._settled = True
                log.info("job_poll_completed", job_id=self.job_id, attempts=self.attempts)
                await _call(self.on_complete, status.result)
                return status.result
            if status.status == JobState.FAILED:
                await self._fail(JobFailedError(self.job_id, status.error or "Job failed"))
            if status.status == JobState.CANCELLED:
                await self._fail(JobCancelledError(self.job_id, status.error or "Job was cancelled"))

        await self._fail(JobTimeoutError(self.job_id, self.attempts))

    async def _report_progress(self, status: JobStatus) -> None:
        if status.status == JobState.COMPLETED:
            percentage = 100.0
        else:
            percentage = max(self._best_percentage, status.percentage)
        self._best_percentage = percentage
        step = status.progress.current_step if status.progress else status.status.value
        log.debug(
            "job_poll_status",
            job_id=self.job_id,
            status=status.status.value,
            percentage=percentage,
            attempt=self.attempts,
        )
        await _call(self.on_progress, JobProgress(percentage=percentage, current_step=step))

    async def _fail(self, error: JobError) -> None:
        self._settled = True
        log.warning(
            "job_poll_failed",
            job_id=self.job_id,
            error_type=type(error).__name__,
            error=error.message,
            attempts=self.attempts,
        )
        await _call(self.on_failure, error)
        raise error


async def poll_job(
    job_id: str,
    fetch_status: FetchStatus,
    interval: Optional[float] = None,
    max_attempts: Optional[int] = -1,
    on_progress: Optional[ProgressCallback] = None,
    on_complete: Optional[CompleteCallback] = None,
    on_failure: Optional[FailureCallback] = None,
) -> Any:
    """Poll *job_id* inline and return its result (see JobPoller)."""
    poller = JobPoller(
        job_id,
        fetch_status,
        interval=interval,
        max_attempts=max_attempts,
        on_progress=on_progress,
        on_complete=on_complete,
        on_failure=on_failure,
    )
    return await poller.run()


class PollerGroup:
    """At most one live poller per logical operation.

    Starting a poller under a key that already has one cancels the old one,
    so a page re-submitting "cinematic_ad" never ends up with two loops.
    Leaving the ``async with`` block cancels everything still running.
    """

    def __init__(self) -> None:
        self._pollers: Dict[str, JobPoller] = {}

    def start(self, key: str, job_id: str, fetch_status: FetchStatus, **kwargs: Any) -> JobPoller:
        self.cancel(key)
        poller = JobPoller(job_id, fetch_status, **kwargs).start()
        self._pollers[key] = poller
        assert poller.task is not None
        poller.task.add_done_callback(lambda task, k=key, p=poller: self._forget(k, p, task))
        return poller

    def _forget(self, key: str, poller: JobPoller, task: asyncio.Task) -> None:
        if self._pollers.get(key) is poller:
            del self._pollers[key]
        # Outcomes reach consumers through callbacks; mark them retrieved
        if not task.cancelled():
            task.exception()

    def get(self, key: str) -> Optional[JobPoller]:
        return self._pollers.get(key)

    def cancel(self, key: str) -> bool:
        poller = self._pollers.pop(key, None)
        if poller is None:
            return False
        poller.cancel()
        return True

    def cancel_all(self) -> None:
        for key in list(self._pollers):
            self.cancel(key)

    def active_keys(self) -> List[str]:
        return [key for key, poller in self._pollers.items() if not poller.done]

    async def __aenter__(self) -> "PollerGroup":
        return self

    async def __aexit__(self, *_: Any) -> None:
        self.cancel_all()
