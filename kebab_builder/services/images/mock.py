"""
Mock Image Generator

Stands in for a remote tier in development mode (ENV_MODE=development)
so the full fallback chain can be exercised without internet access or
third-party rate limits.

Behavior:
    - Simulates response times (100-500ms by default)
    - Randomly fails ~30% of requests, cycling through every FailureKind
    - Returns placeholder image URLs seeded by the prompt
"""

import asyncio
import hashlib
import logging
import random
import time
from typing import Optional

from kebab_builder.services.images.base import (
    BaseImageGenerator,
    FailureKind,
    GeneratedImages,
    ImageRequest,
    ImageResult,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_URL = "https://picsum.photos/seed/{seed}/512/512"


class MockImageGenerator(BaseImageGenerator):
    """
    Simulated remote tier.

    Attributes:
        name: Provider name this mock impersonates (e.g. "pollinations")
        failure_rate: Probability of a simulated failure (0.0-1.0)
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds

    Example:
        >>> generator = MockImageGenerator("pollinations", failure_rate=0.0)
        >>> result = await generator.generate(request)
        >>> result.images.open_image
        'https://picsum.photos/seed/.../512/512'
    """

    FAILURES = [
        (FailureKind.SERVICE_UNAVAILABLE, "Simulated service outage"),
        (FailureKind.TIMEOUT, "Simulated timeout"),
        (FailureKind.RATE_LIMITED, "Simulated rate limit - too many requests"),
    ]

    def __init__(
        self,
        name: str = "mock",
        failure_rate: float = 0.3,
        min_latency: float = 0.1,
        max_latency: float = 0.5,
        timeout: float = 10.0,
        rng: Optional[random.Random] = None,
    ):
        self.name = name
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.timeout = timeout
        self.rng = rng or random.Random()

        logger.info(
            f"MockImageGenerator '{name}' initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"latency={min_latency}-{max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return f"Mock {self.name} (Development)"

    @staticmethod
    def _seed(prompt: str) -> str:
        return hashlib.md5(prompt.encode("utf-8")).hexdigest()[:12]

    async def generate(self, request: ImageRequest) -> ImageResult:
        start_time = time.perf_counter()

        await asyncio.sleep(self.rng.uniform(self.min_latency, self.max_latency))
        elapsed = round((time.perf_counter() - start_time) * 1000, 1)

        if self.rng.random() < self.failure_rate:
            kind, message = self.rng.choice(self.FAILURES)
            logger.debug(f"Mock {self.name}: {message}")
            return ImageResult.failed(kind, message, elapsed)

        images = GeneratedImages(
            open_image=PLACEHOLDER_URL.format(seed=self._seed(request.open_prompt)),
            wrapped_image=PLACEHOLDER_URL.format(seed=self._seed(request.wrapped_prompt)),
            metadata={
                "service": self.display_name,
                "model": "placeholder",
                "resolution": "512x512",
                "style": "Placeholder",
                "cost": "$0.00",
                "responseTimeMs": elapsed,
            },
        )
        return ImageResult.ok(images, elapsed)
