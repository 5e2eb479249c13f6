from kebab_builder.services.composer import resolve_composition
from kebab_builder.services.pricing import NutritionTotals, aggregate


def test_medium_whole_wheat_chicken(catalog):
    composition = resolve_composition("medium", [21, 1], catalog)
    breakdown = aggregate(composition.size, composition.ingredients)

    assert breakdown.base_price == 7.00
    assert breakdown.ingredients_price == 5.00
    assert breakdown.total_price == 12.00
    assert breakdown.total_protein == 29.5
    assert breakdown.total_weight == 175
    assert breakdown.item_count == 2


def test_duplicates_are_summed(catalog):
    composition = resolve_composition("small", [20, 1, 1], catalog)
    breakdown = aggregate(composition.size, composition.ingredients)

    assert breakdown.ingredients_price == 9.00
    assert breakdown.total_price == 14.00
    assert breakdown.total_weight == 290


def test_no_ingredients_is_base_price_only(catalog):
    composition = resolve_composition("family", [], catalog)
    breakdown = aggregate(composition.size, composition.ingredients)

    assert breakdown.total_price == 14.00
    assert breakdown.total_protein == 0
    assert breakdown.total_weight == 0
    assert breakdown.item_count == 0


def test_rounding_to_cents(catalog):
    # 0.30 + 0.30 + 0.40 + 0.60 + 0.80 accumulates float error
    composition = resolve_composition("small", [11, 12, 13, 15, 9], catalog)
    breakdown = aggregate(composition.size, composition.ingredients)

    assert breakdown.ingredients_price == 2.40
    assert breakdown.total_price == 7.40


def test_breakdown_lines(catalog):
    composition = resolve_composition("medium", [21, 1], catalog)
    lines = aggregate(composition.size, composition.ingredients).lines("$")

    assert lines == {
        "base": "medium kebab: $7.00",
        "ingredients": "Ingredients: $5.00",
        "total": "Total: $12.00",
        "protein": "Total Protein: 29.5g",
        "weight": "Total Weight: 175g",
        "calories": "Total Calories: 338kcal",
    }


def test_nutrition_totals(catalog):
    composition = resolve_composition("medium", [21, 1], catalog)
    nutrition = aggregate(composition.size, composition.ingredients).nutrition

    assert nutrition == NutritionTotals(calories=338, carbs=22.0, fat=7.8, fiber=3.5, sodium=370)


def test_nutrition_counts_duplicates(catalog):
    composition = resolve_composition("small", [20, 1, 1], catalog)
    breakdown = aggregate(composition.size, composition.ingredients)

    assert breakdown.nutrition.calories == 150 + 2 * 198
    assert breakdown.item_count == 3


def test_allergens_are_unioned_in_canonical_order(catalog):
    # extra cheese, garlic sauce, white tortilla, yogurt sauce
    composition = resolve_composition("large", [16, 11, 20, 13], catalog)
    breakdown = aggregate(composition.size, composition.ingredients)

    assert breakdown.allergens == ("gluten", "dairy", "eggs")


def test_no_allergens(catalog):
    composition = resolve_composition("medium", [1, 5, 6], catalog)
    assert aggregate(composition.size, composition.ingredients).allergens == ()
