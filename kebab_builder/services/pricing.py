"""
Pricing / Nutrition Aggregator

Pure function from a size tier and resolved ingredients to a totals
breakdown. Duplicated ingredients are summed, not deduplicated.
"""

from dataclasses import dataclass, field
from typing import Iterable

from kebab_builder.services.catalog import Allergen, Ingredient, SizeSpec


@dataclass(frozen=True)
class NutritionTotals:
    """Summed nutrition beyond protein (sodium in milligrams)."""
    calories: int = 0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sodium: int = 0


@dataclass(frozen=True)
class PriceBreakdown:
    """
    Derived totals for a composition.

    Attributes:
        size: Size key the totals were computed for
        base_price: Size tier price
        ingredients_price: Sum of resolved ingredient prices
        total_price: base + ingredients, rounded to cents
        total_protein: Protein grams, rounded to 0.1
        total_weight: Ingredient grams, rounded to whole grams
        item_count: Number of resolved ingredients, duplicates included
        nutrition: Calories, carbs, fat, fiber and sodium totals
        allergens: Union of ingredient allergens in canonical order
    """
    size: str
    base_price: float
    ingredients_price: float
    total_price: float
    total_protein: float
    total_weight: int
    item_count: int
    nutrition: NutritionTotals = field(default_factory=NutritionTotals)
    allergens: tuple[str, ...] = ()

    def lines(self, currency_symbol: str = "$") -> dict[str, str]:
        """Human-readable breakdown strings."""
        return {
            "base": f"{self.size} kebab: {currency_symbol}{self.base_price:.2f}",
            "ingredients": f"Ingredients: {currency_symbol}{self.ingredients_price:.2f}",
            "total": f"Total: {currency_symbol}{self.total_price:.2f}",
            "protein": f"Total Protein: {self.total_protein:.1f}g",
            "weight": f"Total Weight: {self.total_weight}g",
            "calories": f"Total Calories: {self.nutrition.calories}kcal",
        }


def sum_nutrition(ingredients: Iterable[Ingredient]) -> NutritionTotals:
    infos = [i.nutritional_info for i in ingredients]
    return NutritionTotals(
        calories=int(round(sum(n.calories for n in infos))),
        carbs=round(sum(n.carbs for n in infos), 1),
        fat=round(sum(n.fat for n in infos), 1),
        fiber=round(sum(n.fiber for n in infos), 1),
        sodium=int(round(sum(n.sodium for n in infos))),
    )


def collect_allergens(ingredients: Iterable[Ingredient]) -> tuple[str, ...]:
    found = {a for i in ingredients for a in i.allergens}
    return tuple(a.value for a in Allergen if a in found)


def aggregate(size: SizeSpec, ingredients: Iterable[Ingredient]) -> PriceBreakdown:
    """
    Compute price and nutrition totals.

    Args:
        size: Validated size tier
        ingredients: Resolved ingredients (duplicates counted each time)

    Returns:
        PriceBreakdown: Rounded totals
    """
    ingredients = list(ingredients)
    ingredients_price = sum(i.price for i in ingredients)

    return PriceBreakdown(
        size=size.key,
        base_price=round(size.price, 2),
        ingredients_price=round(ingredients_price, 2),
        total_price=round(size.price + ingredients_price, 2),
        total_protein=round(sum(i.protein for i in ingredients), 1),
        total_weight=int(round(sum(i.weight for i in ingredients))),
        item_count=len(ingredients),
        nutrition=sum_nutrition(ingredients),
        allergens=collect_allergens(ingredients),
    )
