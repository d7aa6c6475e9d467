"""Centralized job endpoints: GET/POST /api/v1/jobs.

Every long-running backend operation (scraping, ad generation, video
generation, remix, strategic analysis) is tracked here.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import ValidationError

from adforge.api.base import Resource
from adforge.errors import ApiError
from adforge.models.job import JobList, JobStatus
from adforge.poller import CompleteCallback, FailureCallback, ProgressCallback


def parse_status(data: Any, job_id: str) -> JobStatus:
    """Validate a status payload; a malformed one raises ApiError, which pollers retry."""
    try:
        status = JobStatus.model_validate(data)
    except ValidationError as exc:
        raise ApiError("Malformed job status", payload=data) from exc
    if not status.job_id:
        status.job_id = job_id
    return status


class JobsAPI(Resource):
    async def get(self, job_id: str) -> JobStatus:
        """Current status of one job. A 404 raises NotFoundError."""
        data = await self._client.request_data("GET", f"/api/v1/jobs/{job_id}", timeout=10.0)
        return parse_status(data, job_id)

    async def list(self, status: str = "all", limit: int = 50) -> JobList:
        data = await self._client.request_data(
            "GET", "/api/v1/jobs", params={"status": status, "limit": limit}, timeout=10.0
        )
        if isinstance(data, list):
            data = {"jobs": data}
        return JobList.model_validate(data)

    async def cancel(self, job_id: str) -> Any:
        """Ask the backend to cancel a job (explicit user action)."""
        return await self._client.request_data("POST", f"/api/v1/jobs/{job_id}/cancel", timeout=10.0)

    async def wait(
        self,
        job_id: str,
        interval: Optional[float] = None,
        max_attempts: Optional[int] = -1,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
        on_failure: Optional[FailureCallback] = None,
    ) -> Any:
        """Poll until the job settles and return its result."""
        return await self._wait(
            job_id,
            interval=interval,
            max_attempts=max_attempts,
            on_progress=on_progress,
            on_complete=on_complete,
            on_failure=on_failure,
        )
