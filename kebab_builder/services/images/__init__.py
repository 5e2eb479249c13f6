"""
Image Service Factory

Provides a single entry point for obtaining the image orchestrator.
Tier order comes from IMAGE_SERVICE_PRIORITY; each remote tier is a
MockImageGenerator in development mode and the real httpx client otherwise.
The local SVG renderer is always appended last.

Usage:
    from kebab_builder.services.images import get_image_orchestrator

    orchestrator = get_image_orchestrator()
    images = await orchestrator.generate_images(request)
"""

import logging
from functools import lru_cache
from typing import Callable

from kebab_builder.core.config import get_settings
from kebab_builder.services.catalog import get_catalog
from kebab_builder.services.images.base import (
    BaseImageGenerator,
    FailureKind,
    GeneratedImages,
    ImageRequest,
    ImageResult,
    Measurements,
)
from kebab_builder.services.images.craiyon import CraiyonImageGenerator
from kebab_builder.services.images.huggingface import HuggingFaceImageGenerator
from kebab_builder.services.images.mock import MockImageGenerator
from kebab_builder.services.images.orchestrator import ImageOrchestrator
from kebab_builder.services.images.pollinations import PollinationsImageGenerator
from kebab_builder.services.images.prompts import build_prompts
from kebab_builder.services.images.svg import LocalSvgRenderer, build_preview

logger = logging.getLogger(__name__)

REMOTE_TIERS: dict[str, Callable[[], BaseImageGenerator]] = {
    "huggingface": HuggingFaceImageGenerator,
    "pollinations": PollinationsImageGenerator,
    "craiyon": CraiyonImageGenerator,
}


def build_generators() -> list[BaseImageGenerator]:
    """
    Instantiate remote tiers in configured priority order.

    Unknown names are logged and skipped.
    """
    settings = get_settings()
    generators: list[BaseImageGenerator] = []

    for name in settings.image_service_priority_list:
        factory = REMOTE_TIERS.get(name)
        if factory is None:
            logger.warning(f"Ignoring unknown image service '{name}'")
            continue
        if settings.use_real_services:
            generators.append(factory())
        else:
            generators.append(MockImageGenerator(
                name=name,
                failure_rate=settings.mock_image_failure_rate,
                min_latency=settings.mock_image_min_latency,
                max_latency=settings.mock_image_max_latency,
            ))
    return generators


@lru_cache()
def get_image_orchestrator() -> ImageOrchestrator:
    """
    Get the configured image orchestrator.

    Returns:
        ImageOrchestrator: Remote tiers plus the local SVG fallback
    """
    settings = get_settings()
    orchestrator = ImageOrchestrator(
        generators=build_generators(),
        fallback=LocalSvgRenderer(get_catalog()),
        budget_seconds=settings.image_request_budget_seconds,
    )
    mode = "real" if settings.use_real_services else "mock"
    logger.info(
        f"Image Service: {' -> '.join(orchestrator.tier_names)} "
        f"({mode} tiers, {settings.env_mode.value} mode)"
    )
    return orchestrator


def reset_image_orchestrator() -> None:
    """
    Clear the cached orchestrator instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_image_orchestrator.cache_clear()
    logger.debug("Image orchestrator cache cleared")


__all__ = [
    "get_image_orchestrator",
    "reset_image_orchestrator",
    "build_generators",
    "build_prompts",
    "build_preview",
    "BaseImageGenerator",
    "FailureKind",
    "GeneratedImages",
    "ImageOrchestrator",
    "ImageRequest",
    "ImageResult",
    "LocalSvgRenderer",
    "Measurements",
    "MockImageGenerator",
    "HuggingFaceImageGenerator",
    "PollinationsImageGenerator",
    "CraiyonImageGenerator",
]
