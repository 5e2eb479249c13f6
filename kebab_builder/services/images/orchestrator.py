"""
Image Orchestrator

Walks the configured tiers in priority order and returns the first
success. Tiers run strictly one after another; each attempt is bounded
by the tier's own timeout and by whatever is left of the request budget.
When every remote tier has failed, or the budget is spent, the local SVG
renderer produces the images, so generate_images() always returns.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional

from kebab_builder.services.images.base import (
    BaseImageGenerator,
    FailureKind,
    GeneratedImages,
    ImageRequest,
    ImageResult,
)
from kebab_builder.services.images.svg import LocalSvgRenderer

logger = logging.getLogger(__name__)


class ImageOrchestrator:
    """
    Sequential fallback across image tiers.

    Example:
        >>> orchestrator = ImageOrchestrator([pollinations], LocalSvgRenderer(catalog))
        >>> images = await orchestrator.generate_images(request)
        >>> images.metadata["service"]
        'Pollinations.ai (Free)'
    """

    def __init__(
        self,
        generators: list[BaseImageGenerator],
        fallback: Optional[LocalSvgRenderer] = None,
        budget_seconds: Optional[float] = None,
    ):
        """
        Args:
            generators: Remote tiers in priority order
            fallback: Final local tier
            budget_seconds: Overall deadline for the remote tiers (None = no limit)
        """
        self.generators = list(generators)
        self.fallback = fallback or LocalSvgRenderer()
        self.budget_seconds = budget_seconds

    @property
    def tier_names(self) -> list[str]:
        return [g.provider_name for g in self.generators] + [self.fallback.provider_name]

    async def _attempt(
        self,
        generator: BaseImageGenerator,
        request: ImageRequest,
        timeout: float,
    ) -> ImageResult:
        start_time = time.perf_counter()
        try:
            return await asyncio.wait_for(generator.generate(request), timeout=timeout)
        except asyncio.TimeoutError:
            return ImageResult.failed(
                FailureKind.TIMEOUT,
                f"{generator.display_name} exceeded {timeout:.1f}s",
                round((time.perf_counter() - start_time) * 1000, 1),
            )
        except Exception as e:
            logger.exception(f"Unexpected error in image tier {generator.provider_name}")
            return ImageResult.failed(
                FailureKind.SERVICE_UNAVAILABLE,
                f"{generator.display_name} crashed: {e}",
                round((time.perf_counter() - start_time) * 1000, 1),
            )

    async def generate_images(self, request: ImageRequest) -> GeneratedImages:
        """
        Produce images for a kebab, never raising.

        Args:
            request: Prompts and composition data

        Returns:
            GeneratedImages: From the first successful tier, else the local SVG
        """
        start_time = time.perf_counter()
        attempts: list[dict] = []

        def remaining() -> Optional[float]:
            if self.budget_seconds is None:
                return None
            return self.budget_seconds - (time.perf_counter() - start_time)

        for generator in self.generators:
            left = remaining()
            if left is not None and left <= 0:
                logger.warning(
                    f"Image budget of {self.budget_seconds}s exhausted, "
                    f"skipping {generator.provider_name}"
                )
                attempts.append({
                    "service": generator.provider_name,
                    "outcome": "skipped",
                    "elapsedMs": 0.0,
                })
                continue

            timeout = generator.timeout if left is None else min(generator.timeout, left)
            logger.info(f"Trying image tier {generator.provider_name} (timeout {timeout:.1f}s)")
            result = await self._attempt(generator, request, timeout)

            if result.success and result.images is not None:
                attempts.append({
                    "service": generator.provider_name,
                    "outcome": "success",
                    "elapsedMs": result.response_time_ms,
                })
                logger.info(f"Image tier {generator.provider_name} succeeded")
                return self._finish(result.images, generator, attempts, start_time)

            kind = result.failure_kind or FailureKind.SERVICE_UNAVAILABLE
            attempts.append({
                "service": generator.provider_name,
                "outcome": kind.value,
                "elapsedMs": result.response_time_ms,
            })
            logger.warning(
                f"Image tier {generator.provider_name} failed ({kind.value}): "
                f"{result.error_message}"
            )

        images = self.fallback.render(request)
        attempts.append({
            "service": self.fallback.provider_name,
            "outcome": "success",
            "elapsedMs": 0.0,
        })
        logger.info("All remote image tiers failed, using local SVG")
        return self._finish(images, self.fallback, attempts, start_time)

    @staticmethod
    def _finish(
        images: GeneratedImages,
        generator: BaseImageGenerator,
        attempts: list[dict],
        start_time: float,
    ) -> GeneratedImages:
        images.metadata.setdefault("service", generator.display_name)
        images.metadata.update({
            "provider": generator.provider_name,
            "attempts": attempts,
            "generatedAt": datetime.now(timezone.utc).isoformat(),
            "totalTimeMs": round((time.perf_counter() - start_time) * 1000, 1),
        })
        return images
