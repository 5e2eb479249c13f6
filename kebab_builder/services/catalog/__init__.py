"""
Catalog Service Factory

Provides a single entry point for obtaining the process-wide catalog.
Size tiers can be patched from configuration (SIZE_OVERRIDES).

Usage:
    from kebab_builder.services.catalog import get_catalog

    catalog = get_catalog()
    size = catalog.get_size("medium")
"""

import dataclasses
import logging
from functools import lru_cache

from kebab_builder.core.config import get_settings
from kebab_builder.services.catalog.base import (
    Allergen,
    Catalog,
    Category,
    Ingredient,
    NutritionalInfo,
    SizeSpec,
)
from kebab_builder.services.catalog.data import (
    DEFAULT_INGREDIENTS,
    DEFAULT_SIZES,
    POPULAR_COMBOS,
)

logger = logging.getLogger(__name__)

_SIZE_FIELDS = {f.name for f in dataclasses.fields(SizeSpec)} - {"key"}


def apply_size_overrides(sizes: list[SizeSpec], overrides: dict) -> list[SizeSpec]:
    """
    Patch size tiers with configured values.

    Unknown sizes and unknown fields are logged and ignored.
    """
    by_key = {s.key: s for s in sizes}
    for key, patch in (overrides or {}).items():
        size = by_key.get(key)
        if size is None:
            logger.warning(f"Ignoring override for unknown size '{key}'")
            continue
        unknown = set(patch) - _SIZE_FIELDS
        if unknown:
            logger.warning(f"Ignoring unknown size fields for '{key}': {sorted(unknown)}")
        values = {k: v for k, v in patch.items() if k in _SIZE_FIELDS}
        if values.get("serves") is not None:
            values["serves"] = str(values["serves"])
        by_key[key] = dataclasses.replace(size, **values)
    return list(by_key.values())


@lru_cache()
def get_catalog() -> Catalog:
    """
    Get the configured catalog instance.

    Returns:
        Catalog: Default ingredients plus size tiers with overrides applied
    """
    settings = get_settings()
    sizes = apply_size_overrides(DEFAULT_SIZES, settings.size_overrides)
    catalog = Catalog(DEFAULT_INGREDIENTS, sizes)
    logger.info(
        f"Catalog loaded ({len(catalog.list_ingredients())} ingredients, "
        f"{len(catalog.sizes)} sizes)"
    )
    return catalog


def reset_catalog() -> None:
    """
    Clear the cached catalog instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_catalog.cache_clear()
    logger.debug("Catalog cache cleared")


__all__ = [
    "get_catalog",
    "reset_catalog",
    "apply_size_overrides",
    "Allergen",
    "Catalog",
    "Category",
    "Ingredient",
    "NutritionalInfo",
    "SizeSpec",
    "POPULAR_COMBOS",
]
