"""Cinematic ads: one-step product showcase videos.

Generation returns a ``task_id`` (same thing as a job id). Completion is read
from the centralized jobs endpoint, where ``result.video_url`` carries the
finished video. Videos take minutes, so polling runs every 5 s with no cap
unless the caller sets one.
"""
from __future__ import annotations

from typing import Any, Optional

import structlog

from adforge.api.base import Resource, video_url_of
from adforge.config import settings
from adforge.models.creative import CinematicAdRequest
from adforge.models.job import JobStatus, SubmittedJob
from adforge.poller import ProgressCallback

log = structlog.get_logger(__name__)


class CinematicAPI(Resource):
    async def generate(self, request: CinematicAdRequest) -> SubmittedJob:
        request.validate_ready()
        log.info(
            "cinematic_ad_submit",
            product_name=request.product_name,
            target_duration=request.target_duration,
            style_modifiers=[m.value for m in request.style_modifiers],
        )
        return await self._submit(
            "POST",
            "/api/v1/cinematic-ads/generate-complete",
            json=request.to_payload(),
            timeout=120.0,
        )

    async def status(self, job_id: str) -> JobStatus:
        return await self._client.jobs.get(job_id)

    async def wait(
        self,
        job_id: str,
        interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """Poll until the video is ready and return its URL."""
        result: Any = await self._wait(
            job_id,
            interval=settings.CINEMATIC_POLL_INTERVAL_S if interval is None else interval,
            max_attempts=max_attempts,
            on_progress=on_progress,
        )
        video_url = video_url_of(job_id, result)
        log.info("cinematic_ad_ready", job_id=job_id)
        return video_url
