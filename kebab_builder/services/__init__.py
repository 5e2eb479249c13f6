"""
                        Services Module

Contains the business logic behind the API.
Image tiers follow the hybrid pattern: Mock (development) and Real
(production) implementations behind one factory.

Services:
    - catalog: In-memory ingredient and size reference data
    - composer: Selection resolution and builder session state
    - pricing: Price and nutrition aggregation
    - orders: Order materialization and persistence
    - images: Tiered AI image generation with local SVG fallback
"""

from kebab_builder.services.catalog import get_catalog
from kebab_builder.services.images import get_image_orchestrator
from kebab_builder.services.orders import get_order_service

__all__ = ["get_catalog", "get_image_orchestrator", "get_order_service"]
