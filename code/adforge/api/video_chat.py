"""Video chat: a conversation that refines a video idea into a Sora prompt, then renders it.

Flow: create a conversation from a reference image, exchange messages,
generate the prompt, trigger generation (a job), then wait on it through
``client.videos.wait``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog

from adforge.api.base import Resource
from adforge.models.job import SubmittedJob
from adforge.validation import require

log = structlog.get_logger(__name__)

DEFAULT_PROVIDER = "kie_story"
PROMPT_TOTAL_DURATION_S = 24


class VideoChatAPI(Resource):
    def _conversations(self, brand_id: str, product_id: str) -> str:
        return f"/api/v1/video-chat/brands/{brand_id}/products/{product_id}/video-conversations"

    async def create_conversation(
        self,
        brand_id: str,
        reference_image_url: str,
        product_id: Optional[str] = None,
        duration: Optional[int] = None,
        provider: str = DEFAULT_PROVIDER,
        platform: str = "tiktok",
        aspect_ratio: str = "9:16",
        language: str = "en",
    ) -> Any:
        """Start a conversation. Without ``product_id`` it is an avatar-only video."""
        require(brand_id=brand_id, reference_image_url=reference_image_url)
        payload: Dict[str, Any] = {
            "reference_image_url": reference_image_url,
            "provider": provider,
            "platform": platform,
            "aspect_ratio": aspect_ratio,
            "language": language,
        }
        if duration:
            payload["duration"] = duration
        log.info("video_conversation_create", brand_id=brand_id, product_id=product_id, provider=provider)
        return await self._client.request_data(
            "POST",
            f"/api/v1/video-chat/brands/{brand_id}/video-conversations",
            params={"product_id": product_id},
            json=payload,
            timeout=30.0,
        )

    async def send_message(
        self, brand_id: str, product_id: str, conversation_id: str, message: str, finish: bool = False
    ) -> Any:
        return await self._client.request_data(
            "POST",
            f"{self._conversations(brand_id, product_id)}/{conversation_id}/messages",
            json={"message": message, "finish": finish},
            timeout=120.0,
        )

    async def get_conversation(self, brand_id: str, product_id: str, conversation_id: str) -> Any:
        return await self._client.request_data(
            "GET", f"{self._conversations(brand_id, product_id)}/{conversation_id}", timeout=30.0
        )

    async def list_conversations(self, brand_id: str, product_id: str, limit: int = 50) -> Any:
        return await self._client.request_data(
            "GET", self._conversations(brand_id, product_id), params={"limit": limit}, timeout=30.0
        )

    async def delete_conversation(self, brand_id: str, product_id: str, conversation_id: str) -> Any:
        return await self._client.request_data(
            "DELETE", f"{self._conversations(brand_id, product_id)}/{conversation_id}", timeout=10.0
        )

    async def conversation_videos(self, brand_id: str, product_id: str, conversation_id: str) -> Any:
        return await self._client.request_data(
            "GET", f"{self._conversations(brand_id, product_id)}/{conversation_id}/videos", timeout=30.0
        )

    async def generate_prompt(
        self,
        video_description: str,
        brand_name: str = "",
        product_name: str = "",
        product_category: str = "",
        reference_image_url: str = "",
        additional_image_urls: Optional[List[str]] = None,
    ) -> Any:
        """Turn a free-text description into a structured Sora prompt."""
        require(video_description=video_description)
        return await self._client.request_data(
            "POST",
            "/api/v1/video-chat/generate-sora-prompt",
            json={
                "video_description": video_description,
                "brand_name": brand_name,
                "product_name": product_name,
                "product_category": product_category,
                "reference_image_url": reference_image_url,
                "additional_image_urls": additional_image_urls,
                "total_duration": PROMPT_TOTAL_DURATION_S,
            },
            timeout=340.0,
        )

    async def generate_video(
        self,
        brand_id: str,
        product_id: str,
        conversation_id: str,
        sora_prompt: Dict[str, Any],
        sora_analysis: Any = None,
        reference_image_url: Optional[str] = None,
        provider: str = DEFAULT_PROVIDER,
    ) -> SubmittedJob:
        """Render the conversation's prompt. ``sora_prompt`` is sent whole, optional duration included."""
        require(prompt=sora_prompt.get("prompt") if isinstance(sora_prompt, dict) else None)
        log.info(
            "video_conversation_generate",
            conversation_id=conversation_id,
            provider=provider,
            duration=sora_prompt.get("duration"),
        )
        return await self._submit(
            "POST",
            f"{self._conversations(brand_id, product_id)}/{conversation_id}/generate-video",
            json={
                "sora_prompt": sora_prompt,
                "sora_analysis": sora_analysis,
                "reference_image_url": reference_image_url,
                "provider": provider,
            },
            timeout=60.0,
        )
