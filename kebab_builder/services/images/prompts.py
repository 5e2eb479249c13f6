"""
Prompt construction for the image tiers.

Prompts are assembled from each ingredient's visual_description, so the
builder never string-matches on display names. Compact variants drop the
photography boilerplate for services that carry the prompt in a URL.
"""

from typing import Optional

from kebab_builder.services.catalog import Category, Ingredient
from kebab_builder.services.composer import ResolvedComposition
from kebab_builder.services.images.base import ImageRequest, Measurements

OPEN_STYLE = (
    "professional food photography, top-down view, natural light, "
    "shallow depth of field, appetizing, high detail"
)
WRAPPED_STYLE = (
    "professional food photography, side view on a wooden board, "
    "studio lighting, appetizing, high detail"
)


def _join(items: list[str]) -> str:
    if len(items) <= 1:
        return "".join(items)
    return ", ".join(items[:-1]) + " and " + items[-1]


def _visuals(ingredients: list[Ingredient]) -> list[str]:
    seen: list[str] = []
    for ingredient in ingredients:
        visual = ingredient.visual_description or ingredient.name.lower()
        if visual not in seen:
            seen.append(visual)
    return seen


def _filling(composition: ResolvedComposition) -> str:
    parts = []
    proteins = _visuals(composition.by_category(Category.PROTEIN))
    vegetables = _visuals(composition.by_category(Category.VEGETABLE))
    sauces = _visuals(composition.by_category(Category.SAUCE))
    extras = _visuals(composition.by_category(Category.EXTRA))

    if proteins:
        parts.append(_join(proteins))
    if vegetables:
        parts.append(f"fresh {_join(vegetables)}")
    if sauces:
        parts.append(f"drizzled with {_join(sauces)}")
    if extras:
        parts.append(f"topped with {_join(extras)}")
    return ", ".join(parts) or "a simple filling"


def _tortilla(composition: ResolvedComposition) -> str:
    tortilla: Optional[Ingredient] = composition.tortilla
    if tortilla is None:
        return "soft flour tortilla"
    return tortilla.visual_description or tortilla.name.lower()


def build_prompts(composition: ResolvedComposition) -> ImageRequest:
    """
    Build the open and wrapped prompts for a composition.

    Args:
        composition: Resolved size and ingredients

    Returns:
        ImageRequest: Prompts, compact prompts, names and measurements
    """
    size = composition.size
    tortilla = _tortilla(composition)
    filling = _filling(composition)

    open_compact = f"open {size.key} kebab, {tortilla} laid flat with {filling}"
    wrapped_compact = (
        f"wrapped {size.key} kebab, {tortilla} rolled tightly, "
        f"{size.length}cm long, {size.diameter}cm wide"
    )

    return ImageRequest(
        open_prompt=f"{open_compact}, every ingredient clearly visible, {OPEN_STYLE}",
        wrapped_prompt=(
            f"{wrapped_compact}, filling of {filling} peeking out of one end, "
            f"{WRAPPED_STYLE}"
        ),
        open_prompt_compact=open_compact,
        wrapped_prompt_compact=wrapped_compact,
        size=size.key,
        ingredients=composition.ingredient_names,
        measurements=Measurements(
            length=size.length,
            diameter=size.diameter,
            weight=size.weight,
        ),
    )
