"""
Hugging Face Image Tier

Free Hugging Face Inference API running Stable Diffusion v1.5.
The fastest tier to give up: it gets a short timeout because the free
endpoint is often cold and would otherwise stall the whole chain.

API Documentation:
    https://huggingface.co/docs/api-inference
"""

import base64
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


class HuggingFaceImageGenerator(HttpImageGenerator):
    """
    Stable Diffusion through the Hugging Face Inference API.

    Each view is a separate POST returning raw image bytes, which are
    embedded as data URIs.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        super().__init__(
            timeout=timeout if timeout is not None else settings.huggingface_timeout,
            transport=transport,
        )
        self.url = url or settings.huggingface_url
        self.api_key = api_key if api_key is not None else settings.huggingface_api_key

    @property
    def provider_name(self) -> str:
        return "huggingface"

    @property
    def display_name(self) -> str:
        return "HuggingFace (Free)"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _render(self, client: httpx.AsyncClient, prompt: str) -> str:
        response = await client.post(
            self.url,
            headers=self._headers(),
            json={
                "inputs": prompt,
                "parameters": {
                    "negative_prompt": NEGATIVE_PROMPT,
                    "num_inference_steps": 20,
                    "guidance_scale": 7.5,
                },
            },
        )
        raise_for_status(response, "HuggingFace")

        content_type = response.headers.get("content-type", "image/jpeg").split(";")[0]
        if not content_type.startswith("image/") or not response.content:
            raise TierError(
                FailureKind.SERVICE_UNAVAILABLE,
                f"HuggingFace returned {content_type} instead of an image",
            )
        encoded = base64.b64encode(response.content).decode("ascii")
        return f"data:{content_type};base64,{encoded}"

    async def _generate(
        self,
        client: httpx.AsyncClient,
        request: ImageRequest,
    ) -> GeneratedImages:
        open_image = await self._render(client, request.open_prompt)
        wrapped_image = await self._render(client, request.wrapped_prompt)

        return GeneratedImages(
            open_image=open_image,
            wrapped_image=wrapped_image,
            metadata={
                "service": self.display_name,
                "model": "stable-diffusion-v1-5",
                "resolution": "512x512",
                "style": "AI-generated",
                "cost": "$0.00",
            },
        )
