"""
Catalog Types

Reference data for the kebab builder: purchasable ingredients and base
size tiers. The catalog is read-mostly and shared process-wide; the
composer, the preview renderer and the prompt builder all read the
same instance so category names and colours never drift between them.
"""

import enum
from dataclasses import dataclass, asdict, field
from typing import Iterable, Optional, Union

from kebab_builder.core.exceptions import IngredientNotFoundError, InvalidSizeError


class Category(str, enum.Enum):
    """Canonical ingredient categories."""
    TORTILLA = "tortilla"
    PROTEIN = "protein"
    VEGETABLE = "vegetable"
    SAUCE = "sauce"
    EXTRA = "extra"

    @classmethod
    def parse(cls, value: Union[str, "Category"]) -> "Category":
        """
        Parse a category name, accepting legacy plural spellings.

        Raises:
            ValueError: If the name is not a known category
        """
        if isinstance(value, Category):
            return value
        name = value.strip().lower()
        try:
            return cls(name)
        except ValueError:
            if name.endswith("s"):
                return cls(name[:-1])
            raise


class Allergen(str, enum.Enum):
    GLUTEN = "gluten"
    DAIRY = "dairy"
    NUTS = "nuts"
    SOY = "soy"
    EGGS = "eggs"
    FISH = "fish"
    SHELLFISH = "shellfish"


@dataclass(frozen=True)
class NutritionalInfo:
    """Per-portion nutrition beyond protein (grams, sodium in milligrams)."""
    calories: float = 0
    carbs: float = 0
    fat: float = 0
    fiber: float = 0
    sodium: float = 0


@dataclass(frozen=True)
class Ingredient:
    """
    A purchasable kebab ingredient.

    Attributes:
        id: Stable unique identifier
        name: Display name
        category: One of the canonical categories
        price: Unit price in dollars
        protein: Protein content in grams
        weight: Portion weight in grams
        image: Photo URL
        description: Short menu description
        available: Whether the ingredient can currently be ordered
        color: Swatch colour used by the vector renderer
        visual_description: Phrase used when building image prompts
        allergens: Declared allergens
        nutritional_info: Calories, carbs, fat, fiber and sodium per portion
    """
    id: int
    name: str
    category: Category
    price: float
    protein: float
    weight: float
    image: str
    description: str = ""
    available: bool = True
    color: str = "#94a3b8"
    visual_description: str = ""
    allergens: tuple[Allergen, ...] = ()
    nutritional_info: NutritionalInfo = field(default_factory=NutritionalInfo)

    @property
    def single_selection(self) -> bool:
        """Tortillas are the only single-selection category."""
        return self.category == Category.TORTILLA

    @property
    def formatted_price(self) -> str:
        return f"${self.price:.2f}"

    @property
    def is_healthy(self) -> bool:
        """More than 5g protein and more than 2g fiber per portion."""
        return self.protein > 5 and self.nutritional_info.fiber > 2

    def to_dict(self) -> dict:
        data = asdict(self)
        data["category"] = self.category.value
        data["allergens"] = [a.value for a in self.allergens]
        data["single_selection"] = self.single_selection
        data["formatted_price"] = self.formatted_price
        data["is_healthy"] = self.is_healthy
        return data


@dataclass(frozen=True)
class SizeSpec:
    """
    A base kebab size tier.

    Attributes:
        key: small | medium | large | family
        price: Base price in dollars
        length: Wrapped length in centimetres
        diameter: Wrapped diameter in centimetres
        weight: Nominal total weight in grams
        serves: Serving descriptor ("1", "1-2", ...)
        description: Human description
    """
    key: str
    price: float
    length: float
    diameter: float
    weight: float
    serves: str
    description: str

    def to_dict(self) -> dict:
        return asdict(self)


class Catalog:
    """
    In-memory catalog of ingredients and size tiers.

    Example:
        >>> catalog = get_catalog()
        >>> catalog.get_size("medium").price
        7.0
        >>> [i.name for i in catalog.list_ingredients("tortilla")][:1]
        ['White Flour Tortilla']
    """

    def __init__(self, ingredients: Iterable[Ingredient], sizes: Iterable[SizeSpec]):
        self._ingredients: dict[int, Ingredient] = {}
        for ingredient in ingredients:
            if ingredient.id in self._ingredients:
                raise ValueError(f"Duplicate ingredient id {ingredient.id}")
            self._ingredients[ingredient.id] = ingredient
        self._sizes: dict[str, SizeSpec] = {size.key: size for size in sizes}
        self._by_name = {i.name.lower(): i for i in self._ingredients.values()}

    # =========================================================================
    # INGREDIENTS
    # =========================================================================

    def list_ingredients(
        self,
        category: Optional[Union[str, Category]] = None,
        available_only: bool = False,
    ) -> list[Ingredient]:
        """
        List ingredients, optionally filtered by category and availability.

        Raises:
            ValueError: If the category name is unknown
        """
        items = list(self._ingredients.values())
        if category is not None:
            wanted = Category.parse(category)
            items = [i for i in items if i.category == wanted]
        if available_only:
            items = [i for i in items if i.available]
        return items

    def get_ingredient(self, ingredient_id: int) -> Optional[Ingredient]:
        return self._ingredients.get(ingredient_id)

    def require_ingredient(self, ingredient_id: int) -> Ingredient:
        ingredient = self._ingredients.get(ingredient_id)
        if ingredient is None:
            raise IngredientNotFoundError(ingredient_id)
        return ingredient

    def find_by_name(self, name: str) -> Optional[Ingredient]:
        """Case-insensitive lookup by display name."""
        return self._by_name.get((name or "").strip().lower())

    # =========================================================================
    # SIZES
    # =========================================================================

    @property
    def sizes(self) -> list[SizeSpec]:
        return list(self._sizes.values())

    @property
    def size_keys(self) -> list[str]:
        return list(self._sizes)

    @property
    def categories(self) -> list[str]:
        return [c.value for c in Category]

    def get_size(self, key: Optional[str]) -> SizeSpec:
        """
        Look up a size tier.

        Raises:
            InvalidSizeError: If the key is not an enumerated size
        """
        size = self._sizes.get((key or "").strip().lower())
        if size is None:
            raise InvalidSizeError(key)
        return size

    def config_snapshot(self) -> dict:
        """The full menu consumed by the builder frontend."""
        return {
            "base_prices": {s.key: s.to_dict() for s in self.sizes},
            "ingredient_categories": self.categories,
            "sizes": self.size_keys,
            "ingredients": [i.to_dict() for i in self._ingredients.values()],
        }
