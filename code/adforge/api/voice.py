"""Script emotion markup and voice selection for avatar videos.

``ScriptsAPI`` annotates a script with emotion markers and previews it with
a voice; ``VoiceAPI`` recommends voices and swaps the voice of a finished
video. The chosen ``voice_id`` goes into ``AvatarVideoRequest.voice_id``.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import structlog

from adforge.api.base import Resource
from adforge.errors import InputError
from adforge.models.creative import DEFAULT_VOICE_ID
from adforge.validation import require

log = structlog.get_logger(__name__)

DEFAULT_TTS_MODEL = "eleven_multilingual_v2"


def _unit(name: str, value: float) -> float:
    if not 0.0 <= value <= 1.0:
        raise InputError(f"{name} must be between 0 and 1, got {value}")
    return value


class ScriptsAPI(Resource):
    async def enhance_emotions(
        self,
        script: str,
        script_type: str = "product_demo",
        tone_preference: Optional[str] = None,
        intensity: str = "balanced",
    ) -> Any:
        require(script=script)
        payload: Dict[str, Any] = {"script": script, "script_type": script_type, "intensity": intensity}
        if tone_preference:
            payload["tone_preference"] = tone_preference
        log.info("script_enhance_emotions", script_type=script_type, intensity=intensity)
        return await self._client.request_data(
            "POST", "/api/v1/scripts/enhance-emotions", json=payload, timeout=60.0
        )

    async def recommend_voice(
        self,
        script: str,
        avatar_image_url: Optional[str] = None,
        avatar_description: Optional[str] = None,
        limit: int = 10,
    ) -> Any:
        require(script=script)
        payload: Dict[str, Any] = {"script": script, "limit": limit}
        if avatar_image_url:
            payload["avatar_image_url"] = avatar_image_url
        if avatar_description:
            payload["avatar_description"] = avatar_description
        return await self._client.request_data(
            "POST", "/api/v1/scripts/recommend-voice", json=payload, timeout=60.0
        )

    async def preview_voice(
        self,
        script: str,
        voice_id: str = DEFAULT_VOICE_ID,
        stability: float = 0.5,
        similarity: float = 0.6,
        style: float = 0.75,
        model_id: str = DEFAULT_TTS_MODEL,
    ) -> Any:
        """Synthesize ``script`` with one voice. The response carries the audio URL."""
        require(script=script, voice_id=voice_id)
        return await self._client.request_data(
            "POST",
            "/api/v1/scripts/preview-voice",
            json={
                "script": script,
                "voice_id": voice_id,
                "voice_stability": _unit("stability", stability),
                "voice_similarity": _unit("similarity", similarity),
                "voice_style": _unit("style", style),
                "model_id": model_id,
            },
            timeout=120.0,
        )

    async def available_emotions(self) -> Any:
        return await self._client.request_data("GET", "/api/v1/scripts/available-emotions", timeout=10.0)

    async def validate_emotions(self, script: str) -> Any:
        return await self._client.request_data(
            "POST", "/api/v1/scripts/validate-emotions", json={"script": script}, timeout=10.0
        )


class VoiceAPI(Resource):
    async def recommend(
        self,
        script: str,
        avatar_description: Optional[str] = None,
        avatar_image_url: Optional[str] = None,
        limit: int = 20,
    ) -> Any:
        return await self._client.request_data(
            "POST",
            "/api/v1/voice/recommend",
            json={
                "avatar_description": avatar_description,
                "script": script,
                "avatar_image_url": avatar_image_url,
                "limit": limit,
            },
            timeout=30.0,
        )

    async def change_voice(
        self,
        video_url: str,
        voice_id: str,
        stability: float = 0.55,
        similarity_boost: float = 0.6,
        style: float = 0.15,
    ) -> Any:
        """Re-voice a finished video (speech-to-speech)."""
        require(video_url=video_url, voice_id=voice_id)
        log.info("voice_change_submit", voice_id=voice_id)
        return await self._client.request_data(
            "POST",
            "/api/v1/voice/generate",
            json={
                "video_url": video_url,
                "voice_id": voice_id,
                "stability": _unit("stability", stability),
                "similarity_boost": _unit("similarity_boost", similarity_boost),
                "style": _unit("style", style),
            },
            timeout=120.0,
        )
