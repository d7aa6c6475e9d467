"""
AdForge - Creative Generation Request Models
Inputs for bulk static ads, avatar videos and cinematic ads.
"""
from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from adforge.validation import normalize_hex, require

DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"
MAX_PRODUCT_IMAGES = 3


def image_file(path: Path, filename: Optional[str] = None) -> Tuple[str, bytes, str]:
    """``(filename, content, mime)`` tuple for an httpx multipart upload."""
    suffix = path.suffix.lstrip(".").lower() or "png"
    if suffix == "jpg":
        suffix = "jpeg"
    mime = "image/svg+xml" if suffix == "svg" else f"image/{suffix}"
    return filename or path.name, path.read_bytes(), mime


class BulkAdRequest(BaseModel):
    """Multipart form for POST /api/v1/ads/generate-bulk-dynamic-job."""

    brand_id: str = ""
    product_id: str = ""
    brand_name: str = "Unknown Brand"
    product_full_name: str = ""
    product_description: str = ""
    primary_color_hex: str = "#000000"
    secondary_color_hex: str = "#ffffff"
    accent_color_hex: Optional[str] = None
    count: int = Field(default=4, ge=1, le=10)
    aspect_ratio: str = "1:1"
    lang: Optional[str] = None
    logo_path: Optional[Path] = Field(default=None, description="Local logo file, sent as upload")
    logo_url: Optional[str] = Field(default=None, description="Remote logo fetched by the backend")
    product_image_urls: List[str] = Field(default_factory=list)

    @field_validator("primary_color_hex", "secondary_color_hex", "accent_color_hex")
    @classmethod
    def _hex(cls, value: Optional[str]) -> Optional[str]:
        return normalize_hex(value) if value else value

    def validate_ready(self) -> None:
        require(
            brand_id=self.brand_id,
            product_id=self.product_id,
            product_image_urls=[u for u in self.product_image_urls if u],
        )

    def to_form(self) -> Tuple[Dict[str, str], Dict[str, Any]]:
        """Return ``(data, files)`` ready for an httpx multipart request."""
        data: Dict[str, str] = {
            "brand_id": self.brand_id,
            "product_id": self.product_id,
            "brand_name": self.brand_name or "Unknown Brand",
            "product_full_name": self.product_full_name,
            "product_description": self.product_description,
            "primary_color_hex": self.primary_color_hex,
            "secondary_color_hex": self.secondary_color_hex,
            "count": str(self.count),
            "aspect_ratio": self.aspect_ratio,
            # Backend expects a JSON string it can json.loads()
            "product_image_urls": json.dumps(
                [u for u in self.product_image_urls if u][:MAX_PRODUCT_IMAGES]
            ),
        }
        if self.accent_color_hex:
            data["accent_color_hex"] = self.accent_color_hex
        if self.lang:
            data["lang"] = self.lang

        files: Dict[str, Any] = {}
        if self.logo_path is not None:
            suffix = self.logo_path.suffix.lstrip(".").lower() or "png"
            files["logo"] = image_file(self.logo_path, f"logo.{suffix}")
        elif self.logo_url:
            data["logo_url"] = self.logo_url
        return data, files


class AvatarVideoRequest(BaseModel):
    """Body of POST /api/v1/avatars/product-video/generate."""

    avatar_source: Literal["provided", "generated"] = "provided"
    script: str = ""
    video_provider: str = "omni"
    aspect_ratio: str = "9:16"
    add_ambient_sound: bool = True
    ambient_setting: str = "studio"
    ambient_volume: float = Field(default=0.25, ge=0.0, le=1.0)
    voice_id: str = DEFAULT_VOICE_ID
    voice_stability: float = Field(default=0.5, ge=0.0, le=1.0)
    voice_similarity: float = Field(default=0.75, ge=0.0, le=1.0)
    product_image_url: Optional[str] = None
    product_name: Optional[str] = None
    avatar_image_url: Optional[str] = None
    avatar_description: Optional[str] = None

    def validate_ready(self) -> None:
        if self.avatar_source == "provided":
            require(script=self.script, avatar_image_url=self.avatar_image_url)
        else:
            require(script=self.script, avatar_description=self.avatar_description)

    def to_payload(self) -> Dict[str, Any]:
        exclude = {"avatar_description"} if self.avatar_source == "provided" else {"avatar_image_url"}
        return self.model_dump(exclude=exclude, exclude_none=True)


class StyleModifier(str, Enum):
    MINIMAL = "--minimal"
    LUXURY = "--luxury"
    HYPERCUT = "--hypercut"
    DRAMATIC = "--dramatic"
    SLOWMO = "--slowmo"
    NATURAL = "--natural"
    MACRO = "--macro"


STYLE_MODIFIER_INFO: Dict[str, Dict[str, str]] = {
    "--minimal": {"name": "Minimal", "description": "Fewer shots, more breathing room"},
    "--luxury": {"name": "Luxury", "description": "Premium feel, high-end aesthetic"},
    "--hypercut": {"name": "Hypercut", "description": "Fast-paced MTV-style editing"},
    "--dramatic": {"name": "Dramatic", "description": "High contrast lighting, intense mood"},
    "--slowmo": {"name": "Slow Motion", "description": "Prioritize slow-motion shots"},
    "--natural": {"name": "Natural", "description": "Lifestyle setting, organic feel"},
    "--macro": {"name": "Macro", "description": "Extreme close-ups, product details"},
}


class CinematicAdRequest(BaseModel):
    """Body of POST /api/v1/cinematic-ads/generate-complete."""

    product_name: str = ""
    product_description: str = ""
    product_image_url: Optional[str] = None
    brand_name: Optional[str] = None
    brand_logo_url: Optional[str] = None
    target_duration: int = Field(default=15, ge=10, le=15)
    style_modifiers: List[StyleModifier] = Field(default_factory=list)
    prefer_kie: bool = True

    def validate_ready(self) -> None:
        require(product_name=self.product_name, product_description=self.product_description)

    def to_payload(self) -> Dict[str, Any]:
        payload = self.model_dump(mode="json", exclude_none=True)
        if not payload.get("style_modifiers"):
            payload.pop("style_modifiers", None)
        return payload
