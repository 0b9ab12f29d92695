"""
Client for the external image-suggestion service.

Sends an image (URL or data URL) to an OpenAI-compatible chat completions
endpoint and parses the JSON reply. Three operations: full suggestions,
hashtags only, captions only. Any failure degrades to a static fallback
payload; nothing is raised to callers.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import httpx
from fastapi import HTTPException, status
from pydantic import ValidationError

from gramera.core.config import settings
from gramera.core.exceptions import SuggestionServiceError
from gramera.schemas.suggestion import (
    CaptionResult,
    CaptionTone,
    HashtagResult,
    SuggestionMeta,
    SuggestionResult,
)

logger = logging.getLogger(__name__)

IMAGE_URL_PATTERN = re.compile(r"^https?://.+\.(jpg|jpeg|png|gif|webp)(\?.*)?$", re.IGNORECASE)

PROMPT = """\
Analyze this image and provide social media content suggestions.
{context}
Respond with JSON only:
{{"captions": [3 captions], "hashtags": [15-20 hashtags without #],
"description": "accessible description", "mood": "overall mood",
"colors": ["dominant colors"],
"suggestions": {{"bestTimeToPost": "...", "audienceType": "...", "engagementTips": "..."}}}}
"""

HASHTAG_PROMPT = """\
Analyze this image and generate 20-25 relevant social media hashtags.
{keywords}
Mix broad and niche, popular and less competitive hashtags.
Return only a JSON array of hashtags without # symbols.
"""

CAPTION_PROMPT = """\
Analyze this image and generate 5 social media caption options with a {tone} tone.
{context}
Vary the length and include a call-to-action where it fits.
Return only a JSON array of captions.
"""

FALLBACK_CAPTIONS = [
    "Share your moment with the world! ✨",
    "Life is beautiful 📸",
    "Creating memories one post at a time 💫",
]
FALLBACK_HASHTAGS = [
    "gramera", "photo", "life", "memories",
    "moments", "photography", "beautiful", "inspiration",
]
FALLBACK_HASHTAGS_ONLY = [
    "photo", "gramera", "life", "moments",
    "photography", "beautiful", "amazing", "love",
]
FALLBACK_CAPTIONS_ONLY = [
    "Sharing a beautiful moment ✨",
    "Life is full of amazing experiences! What's your favorite part of today?",
    "Sometimes you just have to capture the magic 📸✨",
]

MAX_EXTRACTED_HASHTAGS = 20
MAX_EXTRACTED_CAPTIONS = 5


def fallback_result(success: bool = False) -> SuggestionResult:
    return SuggestionResult(
        captions=list(FALLBACK_CAPTIONS),
        hashtags=list(FALLBACK_HASHTAGS),
        description="A beautiful moment captured and shared",
        mood="positive",
        colors=[],
        meta=SuggestionMeta(
            best_time_to_post="6-9 PM local time",
            audience_type="general followers",
            engagement_tips="Ask questions in your caption to encourage comments",
        ),
        success=success,
        fallback_used=True,
    )


def validate_image_url(image_url: str) -> None:
    """Raise 400 unless the URL is a data:image URL or an http(s) image link."""
    if image_url.startswith("data:image/"):
        return
    if not IMAGE_URL_PATTERN.match(image_url):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_IMAGE_URL", "message": "Invalid image URL format"},
        )


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        text = text.rsplit("```", 1)[0]
    return text.strip()


def _parse_string_list(content: str) -> list[str] | None:
    """JSON array of strings, or None when the reply is something else."""
    try:
        data = json.loads(_strip_code_fence(content))
    except ValueError:
        return None
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        return None
    return data


def extract_hashtags(content: str) -> list[str]:
    """Pull hashtags out of a free-text reply: #tags first, then quoted words."""
    matches = re.findall(r"#\w+", content) or re.findall(r'"([^"]+)"', content)
    tags = [match.replace("#", "").strip() for match in matches]
    return [tag for tag in tags if len(tag) > 2][:MAX_EXTRACTED_HASHTAGS]


def extract_captions(content: str) -> list[str]:
    """Pull captions out of quoted or numbered lines of a free-text reply."""
    captions = []
    for line in content.splitlines():
        line = line.strip()
        if '"' not in line and not re.match(r"^\d+\.", line):
            continue
        caption = re.sub(r"^\d+\.\s*", "", line).replace('"', "").replace("'", "").strip()
        if len(caption) > 10:
            captions.append(caption)
    return captions[:MAX_EXTRACTED_CAPTIONS]


class SuggestionService:
    """Wraps one httpx.AsyncClient; close() when the app shuts down."""

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_url = api_url or settings.AI_API_URL
        self.api_key = settings.AI_API_KEY if api_key is None else api_key
        self.model = model or settings.AI_MODEL
        self._client = client or httpx.AsyncClient(
            timeout=timeout or settings.AI_TIMEOUT_SECONDS
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Full suggestions
    # ------------------------------------------------------------------

    async def suggest(self, image_url: str, context: str = "") -> SuggestionResult:
        """
        Return suggestions for ``image_url``.

        - No API key or transport/API error → fallback, success=False
        - Reply received but not parseable → fallback, success=True
        """
        if not self.enabled:
            logger.info("Suggestion service disabled (no API key), using fallback")
            return fallback_result(success=False)

        prompt = PROMPT.format(context=f"User context: {context}" if context else "")
        try:
            content = await self._complete(prompt, image_url)
        except SuggestionServiceError as exc:
            logger.error("Suggestion request failed: %s", exc)
            return fallback_result(success=False)

        try:
            data = json.loads(_strip_code_fence(content))
            if not isinstance(data, dict):
                raise ValueError("reply is not a JSON object")
            return SuggestionResult.model_validate(data)
        except (ValueError, ValidationError) as exc:
            logger.warning("Unparseable suggestion reply, using fallback: %s", exc)
            return fallback_result(success=True)

    # ------------------------------------------------------------------
    # Hashtags only
    # ------------------------------------------------------------------

    async def hashtags(self, image_url: str, keywords: list[str] | None = None) -> HashtagResult:
        """
        Hashtags for ``image_url``, optionally steered by ``keywords``.
        A non-JSON reply is mined for #tags or quoted words before falling back.
        """
        fallback = HashtagResult(hashtags=list(FALLBACK_HASHTAGS_ONLY), success=False, fallback_used=True)
        if not self.enabled:
            return fallback

        keyword_text = f"Focus on these keywords: {', '.join(keywords)}" if keywords else ""
        try:
            content = await self._complete(
                HASHTAG_PROMPT.format(keywords=keyword_text),
                image_url,
                detail="low",
                max_tokens=300,
                temperature=0.8,
            )
        except SuggestionServiceError as exc:
            logger.error("Hashtag request failed: %s", exc)
            return fallback

        tags = _parse_string_list(content)
        if tags is not None:
            return HashtagResult(hashtags=tags)

        extracted = extract_hashtags(content)
        if extracted:
            return HashtagResult(hashtags=extracted)
        logger.warning("No hashtags found in reply, using fallback")
        return HashtagResult(hashtags=list(FALLBACK_HASHTAGS_ONLY), fallback_used=True)

    # ------------------------------------------------------------------
    # Captions only
    # ------------------------------------------------------------------

    async def captions(
        self,
        image_url: str,
        tone: CaptionTone = "casual",
        context: str = "",
    ) -> CaptionResult:
        fallback = CaptionResult(
            captions=list(FALLBACK_CAPTIONS_ONLY),
            tone=tone,
            success=False,
            fallback_used=True,
        )
        if not self.enabled:
            return fallback

        prompt = CAPTION_PROMPT.format(
            tone=tone,
            context=f"Additional context: {context}" if context else "",
        )
        try:
            content = await self._complete(prompt, image_url, max_tokens=400, temperature=0.8)
        except SuggestionServiceError as exc:
            logger.error("Caption request failed: %s", exc)
            return fallback

        captions = _parse_string_list(content)
        if captions is None:
            captions = extract_captions(content)
        if captions:
            return CaptionResult(captions=captions, tone=tone)
        logger.warning("No captions found in reply, using fallback")
        return CaptionResult(captions=list(FALLBACK_CAPTIONS_ONLY), tone=tone, fallback_used=True)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _complete(
        self,
        prompt: str,
        image_url: str,
        detail: str = "high",
        max_tokens: int = 1000,
        temperature: float = 0.7,
    ) -> str:
        body: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": image_url, "detail": detail}},
                    ],
                }
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        try:
            resp = await self._client.post(
                self.api_url,
                json=body,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            resp.raise_for_status()
            return resp.json()["choices"][0]["message"]["content"]
        except httpx.HTTPError as exc:
            raise SuggestionServiceError(str(exc)) from exc
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise SuggestionServiceError(f"Unexpected response shape: {exc}") from exc
