"""
Pollinations Image Tier

Pollinations.ai renders an image for any prompt encoded in the URL, so
generation is just URL construction. A HEAD probe on the open-view URL
verifies the service is answering before the URLs are handed out; the
service signals throttling with HTTP 429, which is reported as
RATE_LIMITED rather than a generic outage.
"""

import logging
import random
from typing import Optional
from urllib.parse import quote, urlencode

import httpx

from kebab_builder.core.config import get_settings
from kebab_builder.services.images.base import GeneratedImages, ImageRequest
from kebab_builder.services.images.remote import HttpImageGenerator, raise_for_status

logger = logging.getLogger(__name__)

MAX_OPEN_PROMPT = 1000
MAX_WRAPPED_PROMPT = 800


class PollinationsImageGenerator(HttpImageGenerator):
    """Prompt-in-URL image generation via Pollinations.ai."""

    def __init__(
        self,
        url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rng: Optional[random.Random] = None,
    ):
        settings = get_settings()
        super().__init__(
            timeout=timeout if timeout is not None else settings.pollinations_timeout,
            transport=transport,
        )
        self.url = (url or settings.pollinations_url).rstrip("/")
        self.model = model or settings.pollinations_model
        self.rng = rng or random.Random()

    @property
    def provider_name(self) -> str:
        return "pollinations"

    @property
    def display_name(self) -> str:
        return "Pollinations.ai (Free)"

    def build_url(self, prompt: str, limit: int) -> str:
        query = urlencode({
            "width": 512,
            "height": 512,
            "model": self.model,
            "seed": self.rng.randrange(10000),
        })
        return f"{self.url}/{quote(prompt[:limit], safe='')}?{query}"

    async def _generate(
        self,
        client: httpx.AsyncClient,
        request: ImageRequest,
    ) -> GeneratedImages:
        # Compact prompts keep the URLs short
        open_prompt = request.open_prompt_compact or request.open_prompt
        wrapped_prompt = request.wrapped_prompt_compact or request.wrapped_prompt

        open_url = self.build_url(open_prompt, MAX_OPEN_PROMPT)
        wrapped_url = self.build_url(wrapped_prompt, MAX_WRAPPED_PROMPT)

        logger.debug(
            f"Pollinations prompt lengths: open={len(open_prompt)}, "
            f"wrapped={len(wrapped_prompt)}"
        )

        probe = await client.head(open_url)
        raise_for_status(probe, "Pollinations.ai")

        return GeneratedImages(
            open_image=open_url,
            wrapped_image=wrapped_url,
            metadata={
                "service": self.display_name,
                "model": f"{self.model.capitalize()} (Pollinations)",
                "resolution": "512x512",
                "style": "AI-generated",
                "cost": "$0.00",
            },
        )
