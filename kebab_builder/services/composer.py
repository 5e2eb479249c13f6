"""
Kebab Composer

Resolves a client selection (size key + ingredient ids) against the
catalog. Resolution is lenient: ids that do not exist in the catalog are
dropped and reported, never raised. Duplicate ids are kept so the
aggregator can sum them.

The "exactly one tortilla" rule is not checked while composing; it is
enforced when an order is materialized (see ResolvedComposition.ensure_single_base).

Also contains Selection, the client-owned builder state with the
single-tortilla toggle semantics used by the storefront.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from kebab_builder.core.exceptions import MissingBaseError, MultipleBaseError
from kebab_builder.services.catalog import Catalog, Category, Ingredient, SizeSpec

logger = logging.getLogger(__name__)


@dataclass
class ResolvedComposition:
    """
    A size plus the catalog records of the selected ingredients.

    Attributes:
        size: Resolved size tier
        ingredients: Resolved ingredients in selection order (duplicates kept)
        dropped_ids: Requested ids that did not resolve
    """
    size: SizeSpec
    ingredients: list[Ingredient] = field(default_factory=list)
    dropped_ids: list = field(default_factory=list)

    @property
    def tortillas(self) -> list[Ingredient]:
        return self.by_category(Category.TORTILLA)

    @property
    def tortilla(self) -> Optional[Ingredient]:
        tortillas = self.tortillas
        return tortillas[0] if tortillas else None

    @property
    def ingredient_names(self) -> list[str]:
        return [i.name for i in self.ingredients]

    @property
    def ingredient_ids(self) -> list[int]:
        return [i.id for i in self.ingredients]

    def by_category(self, category: Category) -> list[Ingredient]:
        return [i for i in self.ingredients if i.category == category]

    def ensure_single_base(self) -> None:
        """
        Require exactly one tortilla.

        Raises:
            MissingBaseError: No tortilla selected
            MultipleBaseError: More than one tortilla selected
        """
        count = len(self.tortillas)
        if count == 0:
            raise MissingBaseError()
        if count > 1:
            raise MultipleBaseError(count)


def _parse_id(raw_id) -> Optional[int]:
    """Integer ids and digit strings only; booleans and floats never match."""
    if isinstance(raw_id, bool):
        return None
    if isinstance(raw_id, int):
        return raw_id
    if isinstance(raw_id, str):
        text = raw_id.strip()
        if text.isascii() and text.isdigit():
            return int(text)
    return None


def resolve_composition(
    size_key: Optional[str],
    ingredient_ids: Optional[Iterable],
    catalog: Catalog,
) -> ResolvedComposition:
    """
    Resolve a selection against the catalog.

    Args:
        size_key: One of the enumerated size keys
        ingredient_ids: Requested ingredient ids (order irrelevant, duplicates summed)
        catalog: Catalog snapshot to resolve against

    Returns:
        ResolvedComposition: Size and resolved ingredients

    Raises:
        InvalidSizeError: If size_key is not an enumerated size
    """
    size = catalog.get_size(size_key)

    resolved: list[Ingredient] = []
    dropped: list = []
    for raw_id in ingredient_ids or []:
        ingredient_id = _parse_id(raw_id)
        ingredient = catalog.get_ingredient(ingredient_id) if ingredient_id is not None else None
        if ingredient is None:
            dropped.append(raw_id)
            continue
        resolved.append(ingredient)

    if dropped:
        logger.debug(f"Dropped unknown ingredient ids: {dropped}")

    return ResolvedComposition(size=size, ingredients=resolved, dropped_ids=dropped)


@dataclass
class Selection:
    """
    Builder state owned by the client session.

    Mirrors what the storefront keeps in the browser: a chosen size and an
    ordered list of ingredient ids. Tortillas are single-selection: picking
    a new one replaces the old one.
    """
    size: Optional[str] = None
    ingredient_ids: list[int] = field(default_factory=list)
    tortilla_id: Optional[int] = None

    def choose_size(self, size_key: str) -> None:
        self.size = size_key

    def toggle(self, ingredient: Ingredient) -> bool:
        """
        Toggle an ingredient in or out of the selection.

        Returns:
            bool: True if the ingredient is selected afterwards
        """
        if ingredient.single_selection:
            if self.tortilla_id == ingredient.id:
                self.ingredient_ids.remove(ingredient.id)
                self.tortilla_id = None
                return False
            if self.tortilla_id is not None:
                self.ingredient_ids.remove(self.tortilla_id)
            self.tortilla_id = ingredient.id
            self.ingredient_ids.append(ingredient.id)
            return True

        if ingredient.id in self.ingredient_ids:
            self.ingredient_ids.remove(ingredient.id)
            return False
        self.ingredient_ids.append(ingredient.id)
        return True

    def clear(self) -> None:
        self.ingredient_ids.clear()
        self.tortilla_id = None

    def to_payload(self) -> dict:
        """Request body for /kebab-builder/calculate and /create."""
        return {"size": self.size, "selectedIngredients": list(self.ingredient_ids)}
