"""
AI suggestion endpoints.

POST /ai/suggestions: captions, hashtags and description for an image
POST /ai/hashtags:    hashtags only, optionally steered by keywords
POST /ai/caption:     captions only, in a chosen tone
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from gramera.core.dependencies import get_suggestion_service
from gramera.core.rate_limit import rate_limit
from gramera.schemas.suggestion import (
    CaptionRequest,
    CaptionResult,
    HashtagRequest,
    HashtagResult,
    SuggestionRequest,
    SuggestionResult,
)
from gramera.services.suggestion_service import SuggestionService, validate_image_url

router = APIRouter(prefix="/ai", dependencies=[Depends(rate_limit("ai"))])


@router.post(
    "/suggestions",
    response_model=SuggestionResult,
    summary="Generate content suggestions for an image",
)
async def create_suggestions(
    data: SuggestionRequest,
    service: SuggestionService = Depends(get_suggestion_service),
) -> SuggestionResult:
    validate_image_url(data.image_url)
    return await service.suggest(data.image_url, data.context)


@router.post(
    "/hashtags",
    response_model=HashtagResult,
    summary="Generate hashtags for an image",
)
async def create_hashtags(
    data: HashtagRequest,
    service: SuggestionService = Depends(get_suggestion_service),
) -> HashtagResult:
    validate_image_url(data.image_url)
    return await service.hashtags(data.image_url, data.keywords)


@router.post(
    "/caption",
    response_model=CaptionResult,
    summary="Generate captions for an image",
)
async def create_caption(
    data: CaptionRequest,
    service: SuggestionService = Depends(get_suggestion_service),
) -> CaptionResult:
    validate_image_url(data.image_url)
    return await service.captions(data.image_url, data.tone, data.context)
