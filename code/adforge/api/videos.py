"""Generated videos: playground generation, the playground library and completed video jobs.

Playground and video-chat jobs report through their own status endpoint,
``/api/v1/video-chat/video-jobs/{job_id}``, not the centralized jobs one.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog

from adforge.api.base import Resource, video_url_of
from adforge.api.jobs import parse_status
from adforge.models.job import JobStatus, SubmittedJob
from adforge.poller import ProgressCallback
from adforge.validation import require

log = structlog.get_logger(__name__)

VIDEO_POLL_INTERVAL_S = 5.0


class VideosAPI(Resource):
    async def generate(
        self,
        prompt: str,
        image_url: str,
        aspect_ratio: str = "9:16",
        platform: str = "tiktok",
        duration: Optional[int] = None,
        provider: str = "openai",
    ) -> SubmittedJob:
        """Submit a playground video (prompt + reference image)."""
        require(prompt=prompt, image_url=image_url)
        payload: Dict[str, Any] = {
            "prompt": prompt,
            "image_url": image_url,
            "aspect_ratio": aspect_ratio,
            "platform": platform,
            "provider": provider,
        }
        if duration is not None:
            payload["duration"] = duration
        log.info("playground_video_submit", provider=provider, platform=platform, duration=duration)
        # Submission includes prompt enhancement on the backend
        return await self._submit(
            "POST", "/api/v1/video-playground/playground/generate-video", json=payload, timeout=600.0
        )

    async def job_status(self, job_id: str) -> JobStatus:
        data = await self._client.request_data("GET", f"/api/v1/video-chat/video-jobs/{job_id}", timeout=10.0)
        return parse_status(data, job_id)

    async def wait(
        self,
        job_id: str,
        interval: float = VIDEO_POLL_INTERVAL_S,
        max_attempts: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, Any]:
        """Poll a playground or video-chat job and return its result; ``video_url`` is guaranteed."""
        result = await self._wait(
            job_id,
            interval=interval,
            max_attempts=max_attempts,
            on_progress=on_progress,
            fetch_status=self.job_status,
        )
        video_url_of(job_id, result)
        return result

    async def playground(self, limit: int = 100, filter: str = "all") -> List[Dict[str, Any]]:
        data = await self._client.request_data(
            "GET",
            "/api/v1/video-playground/videos",
            params={"limit": limit, "filter": filter},
            not_found_default={"success": True, "data": {"videos": []}},
        )
        return data.get("videos", []) if isinstance(data, dict) else (data or [])

    async def from_jobs(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Completed video-generation jobs that produced a ``video_url``."""
        data = await self._client.request_data(
            "GET",
            "/api/v1/jobs",
            params={"status": "completed", "type": "video_generation", "limit": limit},
        )
        jobs = data.get("jobs", []) if isinstance(data, dict) else (data or [])
        videos = []
        for job in jobs:
            result = job.get("result_data") or job.get("result") or {}
            if not isinstance(result, dict) or not result.get("video_url"):
                continue
            videos.append(
                {
                    "id": job.get("job_id"),
                    "job_id": job.get("job_id"),
                    "video_url": result["video_url"],
                    "brand_id": job.get("brand_id"),
                    "product_id": job.get("product_id"),
                    "status": job.get("status"),
                    "created_at": job.get("created_at"),
                    "completed_at": job.get("completed_at"),
                }
            )
        return videos
