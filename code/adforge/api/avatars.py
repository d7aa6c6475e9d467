"""Avatar catalogue and avatar product videos."""
from __future__ import annotations

from typing import Any, Dict, Optional

import structlog

from adforge.api.base import Resource
from adforge.api.jobs import parse_status
from adforge.models.creative import AvatarVideoRequest
from adforge.models.job import JobStatus

log = structlog.get_logger(__name__)

# Filters the search endpoint understands; anything else is dropped
_SEARCH_FILTERS = frozenset(
    {"gender", "age", "situation", "accessories", "emotions", "ethnicity", "hair_style", "hair_color"}
)


class AvatarsAPI(Resource):
    async def list(self, limit: int = 50, last_doc_id: Optional[str] = None) -> Any:
        return await self._client.request_data(
            "GET",
            "/api/v1/avatars/list",
            params={"limit": limit, "last_doc_id": last_doc_id},
            timeout=15.0,
        )

    async def search(
        self,
        query: str = "",
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> Any:
        params: Dict[str, Any] = {"query": query or "", "limit": limit or None}
        for name, value in (filters or {}).items():
            if name in _SEARCH_FILTERS and value:
                params[name] = value
        return await self._client.request_data("GET", "/api/v1/avatars/search", params=params, timeout=15.0)

    async def generate_video(self, request: AvatarVideoRequest) -> Any:
        """Generate a product avatar video. The script and avatar are checked first."""
        request.validate_ready()
        payload = request.to_payload()
        log.info(
            "avatar_video_submit",
            avatar_source=request.avatar_source,
            provider=request.video_provider,
            has_product=bool(request.product_image_url),
        )
        # Avatar synthesis can run before the job is queued
        return await self._client.request_data(
            "POST", "/api/v1/avatars/product-video/generate", json=payload, timeout=180.0
        )

    async def videos(self, model: Optional[str] = None, limit: int = 50) -> Any:
        return await self._client.request_data(
            "GET", "/api/v1/avatars/videos", params={"limit": limit, "model": model}, timeout=15.0
        )

    async def job_status(self, job_id: str) -> JobStatus:
        data = await self._client.request_data("GET", f"/api/v1/avatars/job/{job_id}", timeout=10.0)
        return parse_status(data, job_id)
