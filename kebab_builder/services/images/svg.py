"""
Local SVG Renderer

The last image tier. Renders both kebab views procedurally from the
composition data with no network access, so it always succeeds.

Also renders the lightweight layered preview used by
POST /ingredients/preview, together with its plain-text description.
"""

import base64
import logging
import time
from typing import Any, Optional
from xml.sax.saxutils import escape

from kebab_builder.services.catalog import Catalog, Category, Ingredient, SizeSpec
from kebab_builder.services.composer import ResolvedComposition
from kebab_builder.services.images.base import (
    BaseImageGenerator,
    GeneratedImages,
    ImageRequest,
    ImageResult,
    Measurements,
)

logger = logging.getLogger(__name__)

DEFAULT_SWATCH = "#94A3B8"
DEFAULT_TORTILLA = "#F5E6D3"
MAX_SWATCHES = 12
SWATCH_COLUMNS = 6

# Percentage of the tortilla each layer covers, by size
LAYER_COVERAGE = {
    Category.PROTEIN: {"small": 70, "medium": 75, "large": 80, "family": 85},
    Category.VEGETABLE: {"small": 50, "medium": 60, "large": 70, "family": 80},
    Category.SAUCE: {"small": 30, "medium": 40, "large": 50, "family": 60},
    Category.EXTRA: {"small": 40, "medium": 50, "large": 60, "family": 70},
}
DEFAULT_COVERAGE = {
    Category.PROTEIN: 75,
    Category.VEGETABLE: 60,
    Category.SAUCE: 40,
    Category.EXTRA: 50,
}
LAYER_TYPES = {
    Category.PROTEIN: "protein",
    Category.VEGETABLE: "vegetable",
    Category.SAUCE: "sauce",
    Category.EXTRA: "extra",
}


def _number(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _fmt(value: float) -> str:
    """20.0 -> "20", 2.5 -> "2.5"."""
    return f"{value:g}"


def to_data_uri(svg: str) -> str:
    """Encode SVG markup as a base64 data URI."""
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


def coverage_for(category: Category, size_key: str) -> int:
    return LAYER_COVERAGE[category].get(size_key, DEFAULT_COVERAGE[category])


# =============================================================================
# FALLBACK VIEWS
# =============================================================================

def render_open_svg(
    size: str,
    ingredients: list[str],
    measurements: Measurements,
    colors: Optional[dict[str, str]] = None,
) -> str:
    """
    Open view: spread tortilla with up to twelve labelled swatches.

    Args:
        size: Size key shown in the title
        ingredients: Ingredient display names
        measurements: Length and weight for the dimensions box
        colors: Swatch colour per ingredient name
    """
    colors = colors or {}
    length = _number(measurements.length, 20)
    weight = _number(measurements.weight, 0)

    swatches = []
    for index, name in enumerate((ingredients or [])[:MAX_SWATCHES]):
        name = str(name)
        x = 80 + (index % SWATCH_COLUMNS) * 60
        y = 140 + (index // SWATCH_COLUMNS) * 50
        color = colors.get(name, DEFAULT_SWATCH)
        swatches.append(
            f'<ellipse cx="{x}" cy="{y}" rx="25" ry="18" fill="{color}" '
            f'opacity="0.9" stroke="#374151" stroke-width="1"/>'
            f'<text x="{x}" y="{y + 35}" text-anchor="middle" font-size="9" '
            f'font-weight="bold" fill="#374151">{escape(name[:10])}</text>'
        )

    title = escape(str(size or "custom").upper())
    return (
        '<svg width="500" height="400" xmlns="http://www.w3.org/2000/svg">'
        '<defs><linearGradient id="bgGradient" x1="0%" y1="0%" x2="100%" y2="100%">'
        '<stop offset="0%" style="stop-color:#f8fafc;stop-opacity:1"/>'
        '<stop offset="100%" style="stop-color:#e2e8f0;stop-opacity:1"/>'
        '</linearGradient></defs>'
        '<rect width="500" height="400" fill="url(#bgGradient)"/>'
        '<ellipse cx="250" cy="200" rx="220" ry="140" fill="#f4e4bc" '
        'stroke="#d4a574" stroke-width="3" opacity="0.9"/>'
        f'{"".join(swatches)}'
        '<rect x="50" y="20" width="400" height="50" fill="rgba(255,255,255,0.9)" rx="10"/>'
        '<text x="250" y="40" text-anchor="middle" font-size="22" font-weight="bold" '
        f'fill="#1f2937">{title} KEBAB - OPEN VIEW</text>'
        '<text x="250" y="60" text-anchor="middle" font-size="14" fill="#6b7280">'
        'All Ingredients Visible</text>'
        '<rect x="350" y="320" width="130" height="60" fill="rgba(255,255,255,0.95)" '
        'stroke="#d1d5db" rx="5"/>'
        '<text x="415" y="340" text-anchor="middle" font-size="12" font-weight="bold" '
        'fill="#374151">SPECIFICATIONS</text>'
        '<text x="415" y="355" text-anchor="middle" font-size="10" fill="#6b7280">'
        f'Length: {_fmt(length)}cm</text>'
        '<text x="415" y="368" text-anchor="middle" font-size="10" fill="#6b7280">'
        f'Weight: {_fmt(weight)}g</text>'
        '</svg>'
    )


def render_wrapped_svg(size: str, measurements: Measurements) -> str:
    """Wrapped view: scaled roll with length and diameter arrows and a weight box."""
    length = _number(measurements.length, 20)
    diameter = _number(measurements.diameter, 5)
    weight = _number(measurements.weight, 0)

    # Scale for display, clamped to the canvas
    rx = min(max(length * 6, 20), 440) / 2
    ry = min(max(diameter * 6, 10), 240) / 2
    left, right = 250 - rx, 250 + rx
    top, bottom = 200 - ry, 200 + ry
    title = escape(str(size or "custom").upper())

    return (
        '<svg width="500" height="400" xmlns="http://www.w3.org/2000/svg">'
        '<defs><linearGradient id="kebabGradient" x1="0%" y1="0%" x2="100%" y2="0%">'
        '<stop offset="0%" style="stop-color:#f4e4bc;stop-opacity:1"/>'
        '<stop offset="50%" style="stop-color:#e6d3a3;stop-opacity:1"/>'
        '<stop offset="100%" style="stop-color:#c49a6b;stop-opacity:1"/>'
        '</linearGradient>'
        '<marker id="arrow" markerWidth="8" markerHeight="8" refX="4" refY="4" orient="auto-start-reverse">'
        '<path d="M0,0 L8,4 L0,8 z" fill="#111827"/></marker></defs>'
        '<rect width="500" height="400" fill="#ffffff"/>'
        f'<ellipse cx="250" cy="200" rx="{_fmt(rx)}" ry="{_fmt(ry)}" '
        'fill="url(#kebabGradient)" stroke="#d4a574" stroke-width="2"/>'
        f'<line x1="{_fmt(left)}" y1="{_fmt(bottom + 25)}" x2="{_fmt(right)}" '
        f'y2="{_fmt(bottom + 25)}" stroke="#111827" stroke-width="1.5" '
        'marker-start="url(#arrow)" marker-end="url(#arrow)"/>'
        f'<text x="250" y="{_fmt(bottom + 45)}" text-anchor="middle" font-size="12" '
        f'font-weight="bold">{_fmt(length)} cm</text>'
        f'<line x1="{_fmt(left - 20)}" y1="{_fmt(top)}" x2="{_fmt(left - 20)}" '
        f'y2="{_fmt(bottom)}" stroke="#111827" stroke-width="1.5" '
        'marker-start="url(#arrow)" marker-end="url(#arrow)"/>'
        f'<text x="{_fmt(left - 30)}" y="205" text-anchor="end" font-size="12" '
        f'font-weight="bold">&#8960; {_fmt(diameter)} cm</text>'
        '<text x="250" y="40" text-anchor="middle" font-size="20" font-weight="bold" '
        f'fill="#374151">{title} KEBAB - WRAPPED</text>'
        '<rect x="185" y="325" width="130" height="40" fill="#f9fafb" stroke="#d1d5db" rx="5"/>'
        '<text x="250" y="350" text-anchor="middle" font-size="14" font-weight="bold" '
        f'fill="#374151">Weight: {_fmt(weight)}g</text>'
        '</svg>'
    )


class LocalSvgRenderer(BaseImageGenerator):
    """
    Always-available final tier.

    Colours come from the catalog entry matching each ingredient name;
    unknown names get a neutral swatch.
    """

    timeout = 1.0

    METADATA = {
        "service": "Local SVG (Free)",
        "model": "SVG-Generator",
        "resolution": "512x512",
        "style": "Vector-Art",
        "cost": "$0.00",
        "note": "Vector graphics used as fallback",
    }

    def __init__(self, catalog: Optional[Catalog] = None):
        self.catalog = catalog

    @property
    def provider_name(self) -> str:
        return "local_svg"

    @property
    def display_name(self) -> str:
        return self.METADATA["service"]

    def _colors(self, names: list[str]) -> dict[str, str]:
        colors = {}
        if self.catalog is None:
            return colors
        for name in names:
            ingredient = self.catalog.find_by_name(str(name))
            if ingredient is not None and ingredient.color:
                colors[str(name)] = ingredient.color
        return colors

    def render(self, request: ImageRequest) -> GeneratedImages:
        """Render both views synchronously."""
        start_time = time.perf_counter()
        names = [str(n) for n in (request.ingredients or [])]
        measurements = request.measurements or Measurements()

        open_svg = render_open_svg(request.size, names, measurements, self._colors(names))
        wrapped_svg = render_wrapped_svg(request.size, measurements)

        elapsed = round((time.perf_counter() - start_time) * 1000, 1)
        return GeneratedImages(
            open_image=to_data_uri(open_svg),
            wrapped_image=to_data_uri(wrapped_svg),
            metadata={**self.METADATA, "generationTime": f"{elapsed / 1000:.2f}s"},
        )

    async def generate(self, request: ImageRequest) -> ImageResult:
        images = self.render(request)
        return ImageResult.ok(images)


# =============================================================================
# INGREDIENT PREVIEW
# =============================================================================

def render_preview_svg(size: SizeSpec, ingredients: list[Ingredient]) -> str:
    """Small layered side view used by the ingredient preview."""
    width = min(400, size.length * 15)
    height = min(200, size.diameter * 25)
    cx, cy = width / 2, height / 2

    tortilla = next((i for i in ingredients if i.category == Category.TORTILLA), None)
    tortilla_color = tortilla.color if tortilla and tortilla.color else DEFAULT_TORTILLA

    parts = [
        f'<svg width="{_fmt(width)}" height="{_fmt(height)}" '
        f'viewBox="0 0 {_fmt(width)} {_fmt(height)}" xmlns="http://www.w3.org/2000/svg">',
        f'<ellipse cx="{_fmt(cx)}" cy="{_fmt(height - 10)}" rx="{_fmt(cx - 10)}" ry="15" '
        'fill="#E6E6FA" stroke="#D3D3D3" stroke-width="2"/>',
        f'<ellipse cx="{_fmt(cx)}" cy="{_fmt(cy)}" rx="{_fmt(cx - 20)}" ry="{_fmt(cy - 20)}" '
        f'fill="{tortilla_color}" stroke="#D2B48C" stroke-width="1"/>',
    ]

    proteins = [i for i in ingredients if i.category == Category.PROTEIN]
    for index, protein in enumerate(proteins):
        offset = (index - len(proteins) / 2) * 20
        parts.append(
            f'<ellipse cx="{_fmt(cx + offset)}" cy="{_fmt(cy - 5)}" rx="{_fmt(width / 3)}" '
            f'ry="12" fill="{protein.color or DEFAULT_SWATCH}" opacity="0.8"/>'
        )

    vegetables = [i for i in ingredients if i.category == Category.VEGETABLE]
    for index, vegetable in enumerate(vegetables):
        offset = (index - len(vegetables) / 2) * 15
        parts.append(
            f'<circle cx="{_fmt(cx + offset)}" cy="{_fmt(cy - 10)}" r="8" '
            f'fill="{vegetable.color or DEFAULT_SWATCH}" opacity="0.7"/>'
        )

    sauces = [i for i in ingredients if i.category == Category.SAUCE]
    for index, sauce in enumerate(sauces):
        y = cy - 15 - index * 3
        parts.append(
            f'<path d="M {_fmt(width / 4)} {_fmt(y)} Q {_fmt(cx)} {_fmt(y - 5)} '
            f'{_fmt(3 * width / 4)} {_fmt(y)}" stroke="{sauce.color or DEFAULT_SWATCH}" '
            'stroke-width="3" fill="none" opacity="0.6"/>'
        )

    parts.append(
        f'<text x="10" y="20" font-family="Arial" font-size="12" fill="#333">'
        f'{escape(size.key.upper())} - {_fmt(size.length)}cm</text>'
    )
    parts.append("</svg>")
    return "".join(parts)


def describe_composition(size: SizeSpec, ingredients: list[Ingredient]) -> str:
    """
    One-sentence description of a kebab.

    Example:
        "Medium kebab (20cm x 5cm) featuring whole wheat tortilla wrapped
        around chicken breast, topped with lettuce. Weighs approximately
        250g and serves 1-2."
    """
    def names(category: Category) -> list[str]:
        return [i.name.lower() for i in ingredients if i.category == category]

    text = f"{size.key.capitalize()} kebab ({_fmt(size.length)}cm x {_fmt(size.diameter)}cm) featuring "

    tortillas = names(Category.TORTILLA)
    if tortillas:
        text += f"{tortillas[0]} wrapped around "

    proteins = names(Category.PROTEIN)
    if proteins:
        text += " and ".join(proteins)

    vegetables = names(Category.VEGETABLE)
    if vegetables:
        text += f", topped with {', '.join(vegetables)}"

    sauces = names(Category.SAUCE)
    if sauces:
        text += f", drizzled with {' and '.join(sauces)}"

    extras = names(Category.EXTRA)
    if extras:
        text += f", enhanced with {' and '.join(extras)}"

    text += f". Weighs approximately {_fmt(size.weight)}g and serves {size.serves}."
    return text


def build_preview(composition: ResolvedComposition, catalog: Catalog) -> dict:
    """
    Layered preview for the ingredient builder.

    The base layer falls back to the default white flour tortilla when
    none is selected.
    """
    size = composition.size
    tortilla = composition.tortilla or catalog.get_ingredient(20)

    layers = [{
        "type": "base",
        "name": tortilla.name if tortilla else "White Flour Tortilla",
        "color": (tortilla.color if tortilla else None) or DEFAULT_TORTILLA,
        "image": tortilla.image if tortilla else None,
        "coverage": None,
    }]
    for category, layer_type in LAYER_TYPES.items():
        for ingredient in composition.by_category(category):
            layers.append({
                "type": layer_type,
                "name": ingredient.name,
                "color": ingredient.color or DEFAULT_SWATCH,
                "image": ingredient.image,
                "coverage": coverage_for(category, size.key),
            })

    return {
        "size": {
            "name": size.key,
            "dimensions": f"{_fmt(size.length)}cm x {_fmt(size.diameter)}cm",
            "length": size.length,
            "width": size.diameter,
            "weight": size.weight,
            "serves": size.serves,
            "description": size.description,
        },
        "layers": layers,
        "visualization": {
            "svg": render_preview_svg(size, composition.ingredients),
            "description": describe_composition(size, composition.ingredients),
        },
    }
