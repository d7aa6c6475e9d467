"""Shared plumbing for resource groups."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from adforge.errors import JobFailedError
from adforge.models.job import SubmittedJob
from adforge.poller import CompleteCallback, FailureCallback, FetchStatus, ProgressCallback, poll_job

if TYPE_CHECKING:
    from adforge.client import AdForgeClient

# Job submission returns immediately; the work happens in the job
SUBMIT_TIMEOUT_S = 30.0


def video_url_of(job_id: str, result: Any) -> str:
    """``result["video_url"]`` of a finished video job, or JobFailedError."""
    video_url = result.get("video_url") if isinstance(result, dict) else None
    if not video_url:
        raise JobFailedError(job_id, "Video generation finished without a video URL.")
    return video_url


class Resource:
    def __init__(self, client: "AdForgeClient") -> None:
        self._client = client

    async def _submit(self, method: str, path: str, **kwargs: Any) -> SubmittedJob:
        kwargs.setdefault("timeout", SUBMIT_TIMEOUT_S)
        data = await self._client.request_data(method, path, **kwargs)
        return SubmittedJob.model_validate(data)

    async def _wait(
        self,
        job_id: str,
        interval: Optional[float] = None,
        max_attempts: Optional[int] = -1,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
        on_failure: Optional[FailureCallback] = None,
        fetch_status: Optional[FetchStatus] = None,
    ) -> Any:
        # Most jobs report through the centralized jobs endpoint
        return await poll_job(
            job_id,
            fetch_status or self._client.jobs.get,
            interval=interval,
            max_attempts=max_attempts,
            on_progress=on_progress,
            on_complete=on_complete,
            on_failure=on_failure,
        )
