import pytest

from kebab_builder.core.config import get_settings
from kebab_builder.core.exceptions import IngredientNotFoundError, InvalidSizeError
from kebab_builder.services.catalog import (
    Allergen,
    Catalog,
    Category,
    apply_size_overrides,
    get_catalog,
    reset_catalog,
)
from kebab_builder.services.catalog.data import DEFAULT_INGREDIENTS, DEFAULT_SIZES, POPULAR_COMBOS


def test_default_catalog_contents(catalog):
    assert len(catalog.list_ingredients()) == 23
    assert catalog.size_keys == ["small", "medium", "large", "family"]
    assert [i.id for i in catalog.list_ingredients(Category.TORTILLA)] == [20, 21, 22, 23]


def test_size_table(catalog):
    medium = catalog.get_size("medium")
    assert (medium.price, medium.length, medium.diameter, medium.weight) == (7.0, 20, 5, 250)
    assert catalog.get_size(" Family ").price == 14.0


@pytest.mark.parametrize("key", [None, "", "huge"])
def test_unknown_size_rejected(catalog, key):
    with pytest.raises(InvalidSizeError) as exc:
        catalog.get_size(key)
    assert exc.value.field == "size"
    assert exc.value.status_code == 400


def test_category_accepts_plural_names(catalog):
    vegetables = catalog.list_ingredients("vegetables")
    assert vegetables
    assert all(i.category == Category.VEGETABLE for i in vegetables)
    assert Category.parse("Sauces") == Category.SAUCE


def test_unknown_category_raises_value_error(catalog):
    with pytest.raises(ValueError):
        catalog.list_ingredients("desserts")


def test_only_tortillas_are_single_selection(catalog):
    single = {i.id for i in catalog.list_ingredients() if i.single_selection}
    assert single == {20, 21, 22, 23}


def test_lookup_helpers(catalog):
    assert catalog.get_ingredient(999) is None
    with pytest.raises(IngredientNotFoundError):
        catalog.require_ingredient(999)
    assert catalog.find_by_name("chicken breast").id == 1


def test_every_ingredient_has_visual_attributes(catalog):
    for ingredient in catalog.list_ingredients():
        assert ingredient.color.startswith("#")
        assert ingredient.visual_description


def test_allergens_and_nutrition(catalog):
    assert catalog.get_ingredient(20).allergens == (Allergen.GLUTEN,)
    assert catalog.get_ingredient(18).allergens == (Allergen.DAIRY,)
    assert catalog.get_ingredient(1).allergens == ()
    assert catalog.get_ingredient(1).nutritional_info.calories == 198
    for ingredient in catalog.list_ingredients():
        assert ingredient.nutritional_info.calories > 0


def test_is_healthy_needs_protein_and_fiber(catalog):
    assert catalog.get_ingredient(14).is_healthy
    # high protein, no fiber
    assert not catalog.get_ingredient(1).is_healthy
    # fiber but little protein
    assert not catalog.get_ingredient(21).is_healthy


def test_formatted_price(catalog):
    assert catalog.get_ingredient(1).formatted_price == "$4.50"
    assert catalog.get_ingredient(20).formatted_price == "$0.00"


def test_duplicate_ids_rejected():
    with pytest.raises(ValueError):
        Catalog(DEFAULT_INGREDIENTS + DEFAULT_INGREDIENTS[:1], DEFAULT_SIZES)


def test_size_overrides_patch_known_fields_only():
    sizes = apply_size_overrides(
        DEFAULT_SIZES,
        {"medium": {"price": 7.5, "serves": 2, "colour": "red"}, "giant": {"price": 99}},
    )
    by_key = {s.key: s for s in sizes}
    assert by_key["medium"].price == 7.5
    assert by_key["medium"].serves == "2"
    assert by_key["small"].price == 5.0
    assert "giant" not in by_key


def test_popular_combos_include_one_tortilla(catalog):
    for combo in POPULAR_COMBOS:
        tortillas = [
            i for i in combo["ingredients"]
            if catalog.get_ingredient(i).category == Category.TORTILLA
        ]
        assert len(tortillas) == 1


def test_config_snapshot(catalog):
    snapshot = catalog.config_snapshot()
    assert snapshot["sizes"] == catalog.size_keys
    assert snapshot["base_prices"]["large"]["price"] == 9.0
    assert snapshot["ingredient_categories"] == ["tortilla", "protein", "vegetable", "sauce", "extra"]

    yogurt = next(i for i in snapshot["ingredients"] if i["id"] == 13)
    assert yogurt["allergens"] == ["dairy"]
    assert yogurt["nutritional_info"]["calories"] == 25
    assert yogurt["formatted_price"] == "$0.40"


def test_factory_applies_size_overrides_from_environment(monkeypatch):
    monkeypatch.setenv("SIZE_OVERRIDES", '{"medium": {"price": 7.5}}')
    get_settings.cache_clear()
    reset_catalog()

    try:
        assert get_catalog().get_size("medium").price == 7.5
        assert get_catalog() is get_catalog()
    finally:
        reset_catalog()
