"""Brand and product models returned by scraping and brand endpoints."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from adforge.validation import normalize_hex


class ScrapedProduct(BaseModel):
    """Result payload of a completed scraping job."""

    model_config = ConfigDict(extra="allow")

    product_id: Optional[str] = None
    brand_id: Optional[str] = None
    product_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("product_name", "title"))
    brand_name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Any] = None
    images: List[str] = Field(default_factory=list)
    brand_logo: Optional[str] = None
    colors: List[Any] = Field(default_factory=list)
    url: Optional[str] = None


class Brand(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    brand_id: str = Field(validation_alias=AliasChoices("brandId", "brand_id", "id"))
    name: Optional[str] = Field(default=None, validation_alias=AliasChoices("name", "brandName", "brand_name"))
    logo_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("logoUrl", "logo_url"))
    product_count: int = Field(default=0, validation_alias=AliasChoices("productCount", "product_count"))
    ads_count: int = Field(default=0, validation_alias=AliasChoices("adsCount", "ads_count"))


class BrandDraft(BaseModel):
    """Fields for creating or updating a brand. Sent with the backend's camelCase keys."""

    name: Optional[str] = Field(default=None, serialization_alias="brandName")
    domain: Optional[str] = None
    primary_color: Optional[str] = Field(default=None, serialization_alias="primaryColor")
    secondary_color: Optional[str] = Field(default=None, serialization_alias="secondaryColor")
    accent_color: Optional[str] = Field(default=None, serialization_alias="accentColor")

    @field_validator("primary_color", "secondary_color", "accent_color")
    @classmethod
    def _hex(cls, value: Optional[str]) -> Optional[str]:
        return normalize_hex(value) if value else value

    def create_payload(self) -> Dict[str, Any]:
        payload = self.model_dump(by_alias=True)
        payload["primaryColor"] = payload["primaryColor"] or "#000000"
        payload["secondaryColor"] = payload["secondaryColor"] or "#ffffff"
        return payload

    def update_payload(self) -> Dict[str, Any]:
        """Only the fields that were set."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CreditBalance(BaseModel):
    model_config = ConfigDict(extra="allow")

    available: int = Field(default=0, validation_alias=AliasChoices("available", "balance", "credits"))
    used: int = Field(default=0, validation_alias=AliasChoices("used", "credits_used"))
    plan: Optional[str] = None


class Subscription(BaseModel):
    model_config = ConfigDict(extra="allow")

    plan: str = "free"
    status: Optional[str] = None
    credits_remaining: Optional[int] = None
    credits_used: Optional[int] = None
    current_period_end: Optional[str] = None
    cancel_at_period_end: bool = False
    scheduled_plan: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
