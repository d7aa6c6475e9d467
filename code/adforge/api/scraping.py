"""Product and store scraping, job based.

Submitting returns a job id at once; the backend scrapes, creates the brand
when none is given, and then kicks off product research in the background.
"""
from __future__ import annotations

from typing import Any, Optional

import structlog

from adforge.api.base import Resource
from adforge.models.catalog import ScrapedProduct
from adforge.models.job import SubmittedJob
from adforge.poller import ProgressCallback

log = structlog.get_logger(__name__)

# 180 checks, one per second: three minutes
SCRAPE_POLL_INTERVAL_S = 1.0
SCRAPE_POLL_MAX_ATTEMPTS = 180


class ScrapingAPI(Resource):
    async def scrape_product(self, url: str, brand_id: Optional[str] = None) -> SubmittedJob:
        log.info("scrape_product_submit", url=url, brand_id=brand_id)
        return await self._submit(
            "POST",
            "/api/v1/scraping/scrape-product-job",
            json={"url": url, "brand_id": brand_id},
            timeout=120.0,
        )

    async def scrape_store(self, url: str, brand_id: Optional[str] = None) -> SubmittedJob:
        log.info("scrape_store_submit", url=url, brand_id=brand_id)
        return await self._submit(
            "POST",
            "/api/v1/scraping/scrape-store-job",
            json={"url": url, "brand_id": brand_id},
            timeout=180.0,
        )

    async def health(self) -> Any:
        return await self._client.request_data("GET", "/api/v1/scraping/health")

    async def import_product(
        self,
        url: str,
        brand_id: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        interval: float = SCRAPE_POLL_INTERVAL_S,
        max_attempts: int = SCRAPE_POLL_MAX_ATTEMPTS,
    ) -> ScrapedProduct:
        """Scrape one product page and wait for the result."""
        job = await self.scrape_product(url, brand_id)
        result = await self._wait(
            job.job_id,
            interval=interval,
            max_attempts=max_attempts,
            on_progress=on_progress,
        )
        product = ScrapedProduct.model_validate(result or {})
        log.info(
            "scrape_product_completed",
            job_id=job.job_id,
            product_id=product.product_id,
            brand_id=product.brand_id,
        )
        return product
