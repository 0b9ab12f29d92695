"""
Pydantic schemas for AI content suggestions.
"""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------

class SuggestionRequest(BaseModel):
    image_url: str = Field(alias="imageUrl", min_length=1)
    context: str = Field(default="", max_length=1000)

    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------

class SuggestionMeta(BaseModel):
    best_time_to_post: str = Field(default="", alias="bestTimeToPost")
    audience_type: str = Field(default="", alias="audienceType")
    engagement_tips: str = Field(default="", alias="engagementTips")

    model_config = ConfigDict(populate_by_name=True)


class SuggestionResult(BaseModel):
    """Suggestions for one image. ``fallback_used`` marks the static payload."""
    captions: list[str] = Field(default_factory=list)
    hashtags: list[str] = Field(default_factory=list)
    description: str = ""
    mood: str = ""
    colors: list[str] = Field(default_factory=list)
    meta: SuggestionMeta = Field(
        default_factory=SuggestionMeta,
        validation_alias=AliasChoices("meta", "suggestions"),
        serialization_alias="meta",
    )
    success: bool = True
    fallback_used: bool = Field(default=False, alias="fallbackUsed")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("hashtags")
    @classmethod
    def strip_hash(cls, v: list[str]) -> list[str]:
        tags = [tag.strip().lstrip("#") for tag in v]
        return [tag for tag in tags if tag]


# ---------------------------------------------------------------------------
# Hashtag-only / caption-only
# ---------------------------------------------------------------------------

CaptionTone = Literal["casual", "professional", "funny", "inspiring"]


class HashtagRequest(BaseModel):
    image_url: str = Field(alias="imageUrl", min_length=1)
    keywords: list[str] = Field(default_factory=list, max_length=20)

    model_config = ConfigDict(populate_by_name=True)


class HashtagResult(BaseModel):
    hashtags: list[str] = Field(default_factory=list)
    success: bool = True
    fallback_used: bool = Field(default=False, alias="fallbackUsed")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("hashtags")
    @classmethod
    def strip_hash(cls, v: list[str]) -> list[str]:
        tags = [tag.strip().lstrip("#") for tag in v]
        return [tag for tag in tags if tag]


class CaptionRequest(BaseModel):
    image_url: str = Field(alias="imageUrl", min_length=1)
    tone: CaptionTone = "casual"
    context: str = Field(default="", max_length=1000)

    model_config = ConfigDict(populate_by_name=True)


class CaptionResult(BaseModel):
    captions: list[str] = Field(default_factory=list)
    tone: CaptionTone = "casual"
    success: bool = True
    fallback_used: bool = Field(default=False, alias="fallbackUsed")

    model_config = ConfigDict(populate_by_name=True)
