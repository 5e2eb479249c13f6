"""
Image Generator Abstract Base Class

Defines the interface contract for every image generation tier.
Remote tiers (Hugging Face, Pollinations, Craiyon), the development
mock and the local SVG renderer all implement these methods, so the
orchestrator can walk them with a single loop.

Failures are returned, not raised: each tier reports an ImageResult
whose failure_kind tells the orchestrator why it should move on.

Design Pattern: Strategy Pattern
    - Tiers are interchangeable and ordered by configuration
    - New services can be added without modifying the orchestrator
"""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


class FailureKind(str, enum.Enum):
    """Why a tier did not produce images."""
    SERVICE_UNAVAILABLE = "service_unavailable"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"


@dataclass
class Measurements:
    """Physical annotations drawn on the wrapped view."""
    length: float = 20
    diameter: float = 5
    weight: float = 0


@dataclass
class ImageRequest:
    """
    Everything a tier may need to render a kebab.

    Attributes:
        open_prompt: Detailed prompt for the open (all ingredients) view
        wrapped_prompt: Detailed prompt for the wrapped view
        open_prompt_compact: Shorter prompt for URL-based services
        wrapped_prompt_compact: Shorter prompt for URL-based services
        size: Size key
        ingredients: Ingredient display names
        measurements: Length/diameter/weight annotations
    """
    open_prompt: str
    wrapped_prompt: str
    size: str = "medium"
    ingredients: list[str] = field(default_factory=list)
    measurements: Measurements = field(default_factory=Measurements)
    open_prompt_compact: Optional[str] = None
    wrapped_prompt_compact: Optional[str] = None


@dataclass
class GeneratedImages:
    """
    Final result handed back to the API.

    Attributes:
        open_image: URL or data URI of the open view
        wrapped_image: URL or data URI of the wrapped view
        metadata: Service used, model, timings and attempt log
    """
    open_image: str
    wrapped_image: str
    metadata: dict = field(default_factory=dict)


@dataclass
class ImageResult:
    """
    Uniform outcome of one tier attempt.

    Attributes:
        success: Whether the tier produced images
        images: The images when successful
        failure_kind: Failure category when unsuccessful
        error_message: Human-readable failure detail
        response_time_ms: Time spent in the tier
    """
    success: bool
    images: Optional[GeneratedImages] = None
    failure_kind: Optional[FailureKind] = None
    error_message: Optional[str] = None
    response_time_ms: float = 0.0

    @classmethod
    def ok(cls, images: GeneratedImages, response_time_ms: float = 0.0) -> "ImageResult":
        return cls(success=True, images=images, response_time_ms=response_time_ms)

    @classmethod
    def failed(
        cls,
        kind: FailureKind,
        message: str,
        response_time_ms: float = 0.0,
    ) -> "ImageResult":
        return cls(
            success=False,
            failure_kind=kind,
            error_message=message,
            response_time_ms=response_time_ms,
        )


class BaseImageGenerator(ABC):
    """
    Abstract base class for image generation tiers.

    Example:
        >>> generator = PollinationsImageGenerator()
        >>> result = await generator.generate(request)
        >>> if result.success:
        ...     print(result.images.open_image)
    """

    #: Seconds the orchestrator allows this tier
    timeout: float = 10.0

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the short name of the provider.

        Returns:
            str: Provider name (e.g., "pollinations", "local_svg")
        """
        pass

    @property
    @abstractmethod
    def display_name(self) -> str:
        """
        Return the name reported in response metadata.

        Returns:
            str: Display name (e.g., "Pollinations.ai (Free)")
        """
        pass

    @abstractmethod
    async def generate(self, request: ImageRequest) -> ImageResult:
        """
        Produce an open and a wrapped image for a kebab.

        Implementations must not raise for service problems; they
        return ImageResult.failed(...) instead.

        Args:
            request: Prompts and composition data

        Returns:
            ImageResult: Success with images, or a categorized failure
        """
        pass
