"""
Shared HTTP plumbing for remote image tiers.

Every remote tier talks to a free third-party service over httpx and
must map its failures onto the three FailureKind values:

    - HTTP 429                 -> RATE_LIMITED
    - httpx timeouts           -> TIMEOUT
    - anything else (5xx, DNS,
      malformed payloads, ...) -> SERVICE_UNAVAILABLE
"""

import logging
import time
from abc import abstractmethod
from typing import Optional

import httpx

from kebab_builder.services.images.base import (
    BaseImageGenerator,
    FailureKind,
    GeneratedImages,
    ImageRequest,
    ImageResult,
)

logger = logging.getLogger(__name__)

NEGATIVE_PROMPT = "blurry, low quality, distorted"


class TierError(Exception):
    """Raised inside a tier to report a categorized failure."""

    def __init__(self, kind: FailureKind, message: str):
        super().__init__(message)
        self.kind = kind


def raise_for_status(response: httpx.Response, service: str) -> None:
    """
    Translate a non-2xx response into a TierError.

    Raises:
        TierError: RATE_LIMITED for 429, SERVICE_UNAVAILABLE otherwise
    """
    if response.status_code == 429:
        raise TierError(FailureKind.RATE_LIMITED, f"{service} rate limited - too many requests")
    if response.is_error:
        raise TierError(
            FailureKind.SERVICE_UNAVAILABLE,
            f"{service} unavailable ({response.status_code})",
        )


class HttpImageGenerator(BaseImageGenerator):
    """
    Base class for tiers backed by an HTTP service.

    Subclasses implement _generate() and may raise TierError or let
    httpx exceptions escape; generate() converts them to ImageResult.
    """

    def __init__(
        self,
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
            follow_redirects=True,
        )

    @abstractmethod
    async def _generate(
        self,
        client: httpx.AsyncClient,
        request: ImageRequest,
    ) -> GeneratedImages:
        pass

    async def generate(self, request: ImageRequest) -> ImageResult:
        start_time = time.perf_counter()

        def elapsed_ms() -> float:
            return round((time.perf_counter() - start_time) * 1000, 1)

        try:
            async with self._client() as client:
                images = await self._generate(client, request)
        except TierError as e:
            return ImageResult.failed(e.kind, str(e), elapsed_ms())
        except httpx.TimeoutException as e:
            return ImageResult.failed(
                FailureKind.TIMEOUT,
                f"{self.display_name} timed out after {self.timeout}s ({type(e).__name__})",
                elapsed_ms(),
            )
        except httpx.HTTPError as e:
            return ImageResult.failed(
                FailureKind.SERVICE_UNAVAILABLE,
                f"{self.display_name} request failed: {e}",
                elapsed_ms(),
            )
        except (ValueError, KeyError, TypeError) as e:
            return ImageResult.failed(
                FailureKind.SERVICE_UNAVAILABLE,
                f"{self.display_name} returned an unusable payload: {e}",
                elapsed_ms(),
            )

        elapsed = elapsed_ms()
        images.metadata.setdefault("responseTimeMs", elapsed)
        return ImageResult.ok(images, elapsed)
