"""Static ad generation, ad library and trending competitor ads."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog

from adforge.api.base import Resource
from adforge.models.creative import BulkAdRequest
from adforge.models.job import SubmittedJob
from adforge.poller import ProgressCallback

log = structlog.get_logger(__name__)

_EMPTY_ADS: Dict[str, Any] = {"ads": [], "count": 0}


class AdsAPI(Resource):
    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate_bulk(self, request: BulkAdRequest) -> SubmittedJob:
        """Submit a bulk ad generation job (multipart form)."""
        request.validate_ready()
        data, files = request.to_form()
        log.info(
            "bulk_ads_submit",
            brand_id=request.brand_id,
            product_id=request.product_id,
            count=request.count,
            has_logo_file="logo" in files,
        )
        return await self._submit(
            "POST",
            "/api/v1/ads/generate-bulk-dynamic-job",
            data=data,
            files=files or None,
        )

    async def remix(
        self,
        conversation_id: str,
        brand_id: str,
        product_id: str,
        brand_name: str = "",
        product_name: str = "",
        remix_mode: str = "similar",
        variations_count: int = 5,
    ) -> SubmittedJob:
        return await self._submit(
            "POST",
            f"/api/v1/ads/conversations/{conversation_id}/remix",
            data={
                "brand_id": brand_id,
                "product_id": product_id,
                "brand_name": brand_name or "",
                "product_name": product_name or "",
                "remix_mode": remix_mode,
                "variations_count": str(variations_count),
            },
        )

    async def generate_template_images(
        self,
        form: Dict[str, Any],
        files: Optional[Dict[str, Any]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Any:
        """Template image job, polled every 2 s for up to 5 minutes."""
        job = await self._submit("POST", "/api/v1/ads/image/template-job", data=form, files=files)
        return await self._wait(job.job_id, interval=2.0, max_attempts=150, on_progress=on_progress)

    # ------------------------------------------------------------------
    # Library
    # ------------------------------------------------------------------

    async def brand_ads(self, brand_id: str) -> Dict[str, Any]:
        return await self._client.request_data(
            "GET",
            f"/api/v1/brands/{brand_id}/ads",
            not_found_default={"success": True, "data": dict(_EMPTY_ADS)},
        )

    async def product_ads(self, brand_id: str, product_id: str, limit: int = 100) -> Dict[str, Any]:
        return await self._client.request_data(
            "GET",
            f"/api/v1/brands/{brand_id}/products/{product_id}/ads",
            params={"limit": limit},
            not_found_default={
                "success": True,
                "data": {"ads": [], "count": 0, "product": None, "brand": None},
            },
        )

    async def all_ads(self) -> Dict[str, Any]:
        return await self._client.request_data(
            "GET", "/api/v1/ads", not_found_default={"success": True, "data": dict(_EMPTY_ADS)}
        )

    async def grouped_by_product(self, brand_id: str) -> Dict[str, Any]:
        return await self._client.request_data(
            "GET",
            f"/api/v1/brands/{brand_id}/ads/grouped-by-product",
            timeout=15.0,
            not_found_default={"success": True, "data": {"products": [], "totalAds": 0, "brand": None}},
        )

    async def delete(self, brand_id: str, ad_id: str) -> Any:
        return await self._client.request_data("DELETE", f"/api/v1/brands/{brand_id}/ads/{ad_id}")

    async def template_ads(self, brand_id: str) -> Dict[str, Any]:
        return await self._client.request_data(
            "GET",
            f"/api/v1/ads/image/template/brand/{brand_id}",
            timeout=15.0,
            not_found_default={"success": True, "data": dict(_EMPTY_ADS)},
        )

    # ------------------------------------------------------------------
    # Trending competitor ads
    # ------------------------------------------------------------------

    async def trending(
        self,
        query: Optional[str] = None,
        languages: str = "English",
        min_running_days: Optional[int] = None,
        max_running_days: Optional[int] = None,
        order: str = "longest_running",
        limit: int = 20,
        display_format: str = "video",
        product_id: Optional[str] = None,
        brand_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Similar trending ads; with product/brand ids the backend builds the queries."""
        params: Dict[str, Any] = {
            "languages": languages,
            "limit": limit,
            "order": order,
            "display_format": display_format,
            "product_id": product_id,
            "brand_id": brand_id,
            "query": query or None,
            "min_running_days": min_running_days or None,
            "max_running_days": max_running_days or None,
        }
        data = await self._client.request_data(
            "GET", "/api/v1/foreplay/trending-ads/", params=params, timeout=600.0
        )
        if isinstance(data, dict):
            return data.get("ads", [])
        return data or []
