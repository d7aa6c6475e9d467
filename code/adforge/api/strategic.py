"""Strategic analysis chat flow.

Research -> personas -> angle analysis (job) -> angle approval and creative
generation (job) -> video generation for a chosen creative variation.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import structlog

from adforge.api.base import Resource
from adforge.errors import InputError
from adforge.models.job import SubmittedJob
from adforge.poller import ProgressCallback
from adforge.validation import require

log = structlog.get_logger(__name__)

DEFAULT_VIDEO_STYLE = "perfect_ugc_hybrid"
DEFAULT_AD_LENGTH_S = 40
VARIATIONS = ("proof", "fear", "desire")


class StrategicAnalysisAPI(Resource):
    def _product(self, brand_id: str, product_id: str) -> str:
        return f"/api/v1/strategic-analysis/products/{brand_id}/{product_id}"

    def _analysis(self, brand_id: str, product_id: str, analysis_id: str) -> str:
        return f"/api/v1/strategic-analysis/analysis/{brand_id}/{product_id}/{analysis_id}"

    async def personas(self, brand_id: str, product_id: str, research_id: str) -> Any:
        # Persona extraction runs synchronously on the backend
        return await self._client.request_data(
            "GET",
            f"{self._product(brand_id, product_id)}/research/{research_id}/personas",
            timeout=180.0,
        )

    async def get_analysis(self, brand_id: str, product_id: str, analysis_id: str) -> Any:
        return await self._client.request_data(
            "GET", self._analysis(brand_id, product_id, analysis_id), timeout=60.0
        )

    async def analyze(
        self,
        brand_id: str,
        product_id: str,
        research_id: str,
        target_persona_id: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, Any]:
        """Run angle intelligence + offer diagnostic and return the full analysis.

        The job result only carries ``analysis_id``; the analysis itself is
        fetched once the job completes.
        """
        require(brand_id=brand_id, product_id=product_id, research_id=research_id)
        body: Dict[str, Any] = {}
        if target_persona_id:
            body["target_persona_id"] = target_persona_id
        job = await self._submit(
            "POST",
            f"{self._product(brand_id, product_id)}/research/{research_id}/analyze-job",
            json=body,
        )
        log.info("strategic_analysis_submitted", job_id=job.job_id, persona=target_persona_id)
        result = await self._wait(job.job_id, interval=2.0, max_attempts=300, on_progress=on_progress)

        analysis_id = result.get("analysis_id") if isinstance(result, dict) else None
        if not analysis_id:
            return result if isinstance(result, dict) else {"result": result}
        analysis = await self.get_analysis(brand_id, product_id, analysis_id)
        return {"analysis_id": analysis_id, **(analysis or {})}

    async def approve_angle(
        self,
        brand_id: str,
        product_id: str,
        analysis_id: str,
        angle_rank: int,
        ad_length: int = DEFAULT_AD_LENGTH_S,
        video_style: str = DEFAULT_VIDEO_STYLE,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Any:
        """Approve one ranked angle and wait for its creatives."""
        if not 1 <= angle_rank <= 7:
            raise InputError(f"angle_rank must be between 1 and 7, got {angle_rank}")
        payload = {
            "angle_rank": angle_rank,
            "ad_length": ad_length,
            "video_style": video_style,
            "awareness_level": "solution_aware",
            "campaign_objective": "conversion",
        }
        job = await self._submit(
            "POST",
            f"{self._analysis(brand_id, product_id, analysis_id)}/approve-angle-job",
            json=payload,
        )
        log.info("angle_approved", job_id=job.job_id, angle_rank=angle_rank, video_style=video_style)
        return await self._wait(job.job_id, interval=2.0, max_attempts=150, on_progress=on_progress)

    async def generate_video(
        self,
        brand_id: str,
        product_id: str,
        creative_gen_id: str,
        variation_id: str,
        video_style: str = DEFAULT_VIDEO_STYLE,
    ) -> SubmittedJob:
        if variation_id not in VARIATIONS:
            raise InputError(f"variation_id must be one of {', '.join(VARIATIONS)}")
        return await self._submit(
            "POST",
            f"/api/v1/sora/generate/{brand_id}/{product_id}",
            json={
                "creative_gen_id": creative_gen_id,
                "variation_id": variation_id,
                "video_style": video_style,
                "ai_model": "claude",
            },
            timeout=900.0,
        )

    async def get_creative_generation(self, brand_id: str, product_id: str, creative_gen_id: str) -> Any:
        return await self._client.request_data(
            "GET",
            f"/api/v1/strategic-analysis/creatives/{brand_id}/{product_id}/{creative_gen_id}",
            timeout=30.0,
        )
