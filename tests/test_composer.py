import pytest

from kebab_builder.core.exceptions import InvalidSizeError, MissingBaseError, MultipleBaseError
from kebab_builder.services.composer import Selection, resolve_composition


def test_resolve_keeps_order_and_duplicates(catalog):
    composition = resolve_composition("medium", [20, 1, 1, 5], catalog)
    assert composition.size.key == "medium"
    assert composition.ingredient_ids == [20, 1, 1, 5]
    assert composition.dropped_ids == []


def test_unknown_ids_are_dropped(catalog):
    composition = resolve_composition("small", [1, 999, "abc", "5", None, True, 1.9, 5.0, "1.5"], catalog)
    assert composition.ingredient_ids == [1, 5]
    assert composition.dropped_ids == [999, "abc", None, True, 1.9, 5.0, "1.5"]


def test_invalid_size_raises(catalog):
    with pytest.raises(InvalidSizeError):
        resolve_composition("xl", [1], catalog)


def test_no_tortilla_check_while_resolving(catalog):
    composition = resolve_composition("medium", [1, 5], catalog)
    assert composition.tortilla is None

    with pytest.raises(MissingBaseError):
        composition.ensure_single_base()


def test_two_tortillas_rejected(catalog):
    composition = resolve_composition("medium", [20, 21, 1], catalog)
    with pytest.raises(MultipleBaseError) as exc:
        composition.ensure_single_base()
    assert exc.value.field == "selectedIngredients"


def test_exactly_one_tortilla_passes(catalog):
    composition = resolve_composition("medium", [22, 1, 5], catalog)
    composition.ensure_single_base()
    assert composition.tortilla.name == "Spinach Tortilla"


class TestSelection:

    def test_toggle_regular_ingredient(self, catalog):
        selection = Selection()
        chicken = catalog.get_ingredient(1)

        assert selection.toggle(chicken) is True
        assert selection.ingredient_ids == [1]
        assert selection.toggle(chicken) is False
        assert selection.ingredient_ids == []

    def test_new_tortilla_replaces_previous(self, catalog):
        selection = Selection()
        selection.toggle(catalog.get_ingredient(20))
        selection.toggle(catalog.get_ingredient(1))
        selection.toggle(catalog.get_ingredient(21))

        assert selection.ingredient_ids == [1, 21]
        assert selection.tortilla_id == 21

    def test_toggling_selected_tortilla_deselects(self, catalog):
        selection = Selection()
        tortilla = catalog.get_ingredient(23)
        selection.toggle(tortilla)

        assert selection.toggle(tortilla) is False
        assert selection.tortilla_id is None
        assert selection.ingredient_ids == []

    def test_payload(self, catalog):
        selection = Selection()
        selection.choose_size("large")
        selection.toggle(catalog.get_ingredient(20))
        selection.toggle(catalog.get_ingredient(2))

        assert selection.to_payload() == {"size": "large", "selectedIngredients": [20, 2]}

        selection.clear()
        assert selection.to_payload() == {"size": "large", "selectedIngredients": []}
