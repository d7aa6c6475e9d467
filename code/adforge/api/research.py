"""Product research produced in the background after scraping."""
from __future__ import annotations

from typing import Any

from adforge.api.base import Resource

# Research documents are assembled on demand and can be slow
_RESEARCH_TIMEOUT_S = 300.0


class ResearchAPI(Resource):
    def _base(self, brand_id: str, product_id: str) -> str:
        return f"/api/v1/research/products/{brand_id}/{product_id}/research"

    async def details(self, brand_id: str, product_id: str, research_id: str) -> Any:
        return await self._client.request_data(
            "GET", f"{self._base(brand_id, product_id)}/{research_id}", timeout=_RESEARCH_TIMEOUT_S
        )

    async def summary(self, brand_id: str, product_id: str, research_id: str) -> Any:
        return await self._client.request_data(
            "GET",
            f"{self._base(brand_id, product_id)}/{research_id}/summary",
            timeout=_RESEARCH_TIMEOUT_S,
        )

    async def trigger(self, brand_id: str, product_id: str) -> Any:
        return await self._client.request_data(
            "POST", f"{self._base(brand_id, product_id)}/trigger", json={}, timeout=30.0
        )

    async def products_with_status(self, brand_id: str) -> Any:
        return await self._client.request_data(
            "GET",
            f"/api/v1/brands/{brand_id}/products",
            params={"include_research_status": "true"},
            timeout=15.0,
            not_found_default={"success": True, "data": {"products": [], "count": 0}},
        )
