"""Brands and their products."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog

from adforge.api.base import Resource
from adforge.errors import AdForgeError
from adforge.models.catalog import Brand, BrandDraft
from adforge.models.creative import image_file
from adforge.validation import require

log = structlog.get_logger(__name__)


class BrandsAPI(Resource):
    async def list(self) -> List[Brand]:
        # Brands come back with their ad counts, which is slow
        data = await self._client.request_data("GET", "/api/v1/brands", timeout=30.0)
        rows = data.get("brands", []) if isinstance(data, dict) else (data or [])
        return [Brand.model_validate(row) for row in rows]

    async def get(self, brand_id: str) -> Brand:
        data = await self._client.request_data("GET", f"/api/v1/brands/{brand_id}", timeout=10.0)
        return Brand.model_validate(_brand_body(data))

    async def create(self, draft: BrandDraft, logo_path: Optional[Path] = None) -> Brand:
        """Create a brand, then upload its logo.

        A failed logo upload does not undo the creation; the brand is
        returned without a logo and the failure is logged.
        """
        require(name=draft.name, domain=draft.domain)
        data = await self._client.request_data(
            "POST", "/api/v1/brands", json=draft.create_payload(), timeout=30.0
        )
        brand = Brand.model_validate(_brand_body(data))
        log.info("brand_created", brand_id=brand.brand_id, has_logo=logo_path is not None)
        if logo_path is None:
            return brand
        return await self._attach_logo(brand, logo_path)

    async def update(self, brand_id: str, draft: BrandDraft, logo_path: Optional[Path] = None) -> Brand:
        """PATCH only the fields set on ``draft``; same logo rule as ``create``."""
        data = await self._client.request_data(
            "PATCH", f"/api/v1/brands/{brand_id}", json=draft.update_payload(), timeout=30.0
        )
        body = _brand_body(data) if isinstance(data, dict) else {}
        brand = Brand.model_validate({"brand_id": brand_id, **body})
        if logo_path is None:
            return brand
        return await self._attach_logo(brand, logo_path)

    async def upload_logo(self, brand_id: str, logo_path: Path) -> Any:
        return await self._client.request_data(
            "POST",
            f"/api/v1/brands/{brand_id}/upload-logo",
            files={"logo_file": image_file(Path(logo_path))},
            timeout=30.0,
        )

    async def delete(self, brand_id: str) -> Any:
        return await self._client.request_data("DELETE", f"/api/v1/brands/{brand_id}", timeout=10.0)

    async def products(self, brand_id: str) -> List[Any]:
        data = await self._client.request_data("GET", f"/api/v1/brands/{brand_id}/products", timeout=10.0)
        if isinstance(data, dict):
            return data.get("products", [])
        return data or []

    async def delete_product(self, brand_id: str, product_id: str) -> Any:
        return await self._client.request_data(
            "DELETE", f"/api/v1/brands/{brand_id}/products/{product_id}", timeout=10.0
        )

    async def _attach_logo(self, brand: Brand, logo_path: Path) -> Brand:
        try:
            uploaded = await self.upload_logo(brand.brand_id, logo_path)
        except AdForgeError as exc:
            log.warning("brand_logo_upload_failed", brand_id=brand.brand_id, error=str(exc))
            return brand
        body = _brand_body(uploaded) if isinstance(uploaded, dict) else {}
        return Brand.model_validate({**brand.model_dump(), **body})


def _brand_body(data: Any) -> Dict[str, Any]:
    if isinstance(data, dict) and isinstance(data.get("brand"), dict):
        return data["brand"]
    return data
