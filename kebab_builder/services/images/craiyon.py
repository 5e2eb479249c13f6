"""
Craiyon Image Tier

Craiyon (formerly DALL-E mini) returns base64 JPEGs in a JSON body.
It is the slowest remote tier and sits last in the default priority.
Only the open view is generated; the same image is reused for the
wrapped view to avoid a second slow round-trip.
"""

import logging
from typing import Optional

import httpx

from kebab_builder.core.config import get_settings
from kebab_builder.services.images.base import GeneratedImages, ImageRequest
from kebab_builder.services.images.remote import (
    NEGATIVE_PROMPT,
    FailureKind,
    HttpImageGenerator,
    TierError,
    raise_for_status,
)

logger = logging.getLogger(__name__)

MAX_PROMPT = 300


class CraiyonImageGenerator(HttpImageGenerator):
    """Craiyon v3 image generation."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        super().__init__(
            timeout=timeout if timeout is not None else settings.craiyon_timeout,
            transport=transport,
        )
        self.url = url or settings.craiyon_url

    @property
    def provider_name(self) -> str:
        return "craiyon"

    @property
    def display_name(self) -> str:
        return "Craiyon (Free)"

    async def _generate(
        self,
        client: httpx.AsyncClient,
        request: ImageRequest,
    ) -> GeneratedImages:
        response = await client.post(
            self.url,
            json={
                "prompt": request.open_prompt[:MAX_PROMPT],
                "model": "art",
                "negative_prompt": NEGATIVE_PROMPT,
            },
        )
        raise_for_status(response, "Craiyon")

        images = response.json().get("images") or []
        if not images:
            raise TierError(FailureKind.SERVICE_UNAVAILABLE, "No images returned from Craiyon")

        image = f"data:image/jpeg;base64,{images[0]}"
        return GeneratedImages(
            open_image=image,
            wrapped_image=image,
            metadata={
                "service": self.display_name,
                "model": "Craiyon v3",
                "resolution": "512x512",
                "style": "AI-generated",
                "cost": "$0.00",
            },
        )
