"""Composite-key index from unordered ingredient sets to a product.

Ingredient order never matters: resolved ingredients are sorted by name and
packed into a fixed three-slot ``RecipeKey``, with ``EMPTY_SLOT`` filling
the unused slots. ``{A, B}`` and ``{B, A}`` therefore produce the same key.

The index keeps two parallel structures:

- ``recipes``: records in the order they were added, for presentation
  and persistence.
- a key to product mapping for lookup, rebuilt from the records by
  :meth:`RecipeIndex.rehydrate` after a reload.

Collisions keep the first mapping and report ``DUPLICATE_RECIPE``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from recipe_workbook.models import EntityRef, NameLookup
from recipe_workbook.utils.diagnostics import Diagnostic, DiagnosticLog, Severity
from recipe_workbook.utils.exceptions import ErrorCode, InvalidRecipeKeyError
from recipe_workbook.utils.logging import get_logger

logger = get_logger(__name__)

MAX_INGREDIENTS = 3


class _EmptySlot(Enum):
    EMPTY = "empty"

    def __repr__(self) -> str:
        return "EMPTY_SLOT"


EMPTY_SLOT = _EmptySlot.EMPTY


class RecipeKey(NamedTuple):
    """Name-sorted ingredient names, padded with ``EMPTY_SLOT``."""

    first: str | _EmptySlot
    second: str | _EmptySlot = EMPTY_SLOT
    third: str | _EmptySlot = EMPTY_SLOT

    @classmethod
    def from_ingredients(cls, ingredients: Sequence[EntityRef]) -> RecipeKey:
        """Build the canonical key for an ingredient list in any order.

        Raises:
            InvalidRecipeKeyError: For zero or more than three ingredients.
        """
        if not ingredients or len(ingredients) > MAX_INGREDIENTS:
            raise InvalidRecipeKeyError(len(ingredients), MAX_INGREDIENTS)
        names: list[str | _EmptySlot] = sorted(item.name for item in ingredients)
        names.extend([EMPTY_SLOT] * (MAX_INGREDIENTS - len(names)))
        return cls(*names)

    @property
    def names(self) -> list[str]:
        return [slot for slot in self if isinstance(slot, str)]

    def __str__(self) -> str:
        return " + ".join(f"'{name}'" for name in self.names)


@dataclass(frozen=True)
class Recipe:
    """One recipe record: ingredients in canonical order and their product."""

    ingredients: tuple[EntityRef, ...]
    product: EntityRef

    @property
    def key(self) -> RecipeKey:
        return RecipeKey.from_ingredients(self.ingredients)

    @property
    def ingredient_names(self) -> list[str]:
        return [item.name for item in self.ingredients]

    def __str__(self) -> str:
        return f"({' + '.join(self.ingredient_names)}) => {self.product.name}"


class RecipeIndexState(str, Enum):
    EMPTY = "empty"
    POPULATED = "populated"


class RecipeIndex:
    """Deduplicating map from canonical ingredient keys to products."""

    def __init__(
        self,
        diagnostics: DiagnosticLog | None = None,
        default_product: EntityRef | None = None,
        source: str = "recipes",
    ) -> None:
        self._diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        self._recipes: list[Recipe] = []
        self._lookup: dict[RecipeKey, EntityRef] = {}
        self.default_product = default_product
        self.source = source

    @classmethod
    def from_records(
        cls,
        records: Iterable[Recipe],
        diagnostics: DiagnosticLog | None = None,
        default_product: EntityRef | None = None,
    ) -> RecipeIndex:
        index = cls(diagnostics=diagnostics, default_product=default_product)
        index.rehydrate(records)
        return index

    @property
    def diagnostics(self) -> DiagnosticLog:
        return self._diagnostics

    @property
    def state(self) -> RecipeIndexState:
        return RecipeIndexState.POPULATED if self._recipes else RecipeIndexState.EMPTY

    @property
    def count(self) -> int:
        return len(self._recipes)

    @property
    def recipes(self) -> tuple[Recipe, ...]:
        return tuple(self._recipes)

    def __len__(self) -> int:
        return len(self._recipes)

    def __iter__(self) -> Iterator[Recipe]:
        return iter(self._recipes)

    def clear(self) -> None:
        self._recipes.clear()
        self._lookup.clear()

    def try_add(
        self,
        lookup: NameLookup,
        product_name: str | None,
        ingredient_names: Iterable[str | None],
        row: int | None = None,
    ) -> bool:
        """Register a recipe from names.

        Blank and unknown ingredient names are dropped silently. The row
        is only used to locate diagnostics.

        Returns:
            False if no ingredient or no product resolved, or there are too
            many ingredients. True otherwise, including for a duplicate key,
            where the first mapping is kept.
        """
        resolved: list[EntityRef] = []
        for name in ingredient_names:
            if not name or not name.strip():
                continue
            item = lookup.resolve(name)
            if item is not None:
                resolved.append(item)

        if not resolved:
            return False

        resolved.sort(key=lambda item: item.name)

        product = None
        if product_name and product_name.strip():
            product = lookup.resolve(product_name)
            if product is None:
                self._report(
                    ErrorCode.PRODUCT_NOT_FOUND,
                    f"Recipe product '{product_name}' is not a known item",
                    Severity.WARNING,
                    row,
                    {"product": product_name},
                )
        if product is None:
            return False

        if len(resolved) > MAX_INGREDIENTS:
            self._report(
                ErrorCode.TOO_MANY_INGREDIENTS,
                f"Recipe for '{product.name}' has {len(resolved)} ingredients; "
                f"at most {MAX_INGREDIENTS} are supported",
                Severity.ERROR,
                row,
                {"ingredients": [item.name for item in resolved]},
            )
            return False

        self._insert(Recipe(tuple(resolved), product), row)
        return True

    def find_product(self, ingredients: Iterable[EntityRef]) -> EntityRef | None:
        """Product for an ingredient set in any order, or None."""
        items = list(ingredients)
        if not items or len(items) > MAX_INGREDIENTS:
            return None
        return self._lookup.get(RecipeKey.from_ingredients(items))

    def contains(self, ingredients: Iterable[EntityRef]) -> bool:
        return self.find_product(ingredients) is not None

    def craft(self, ingredients: Iterable[EntityRef]) -> EntityRef | None:
        """Like :meth:`find_product`, falling back to ``default_product``."""
        product = self.find_product(ingredients)
        return product if product is not None else self.default_product

    def rehydrate(self, records: Iterable[Recipe]) -> int:
        """Rebuild the index from stored records.

        Each record goes through the same canonicalization as
        :meth:`try_add`. Records that cannot form a key are skipped, and
        stored duplicates keep the first.

        Returns:
            Number of records registered.
        """
        self.clear()
        for position, record in enumerate(records, start=1):
            ingredients = tuple(sorted(record.ingredients, key=lambda item: item.name))
            try:
                RecipeKey.from_ingredients(ingredients)
            except InvalidRecipeKeyError as exc:
                self._report(
                    ErrorCode.INVALID_RECIPE_KEY,
                    f"Stored recipe for '{record.product.name}' skipped: {exc.message}",
                    Severity.ERROR,
                    position,
                    exc.details,
                )
                continue
            self._insert(Recipe(ingredients, record.product), position)

        logger.debug("Rehydrated recipe index", source=self.source, recipes=self.count)
        return self.count

    def _insert(self, recipe: Recipe, row: int | None) -> None:
        key = recipe.key
        existing = self._lookup.get(key)
        if existing is not None:
            self._report(
                ErrorCode.DUPLICATE_RECIPE,
                f"Duplicate recipe detected: {key} maps to both "
                f"{existing.name} and {recipe.product.name}. "
                "Only the first mapping will be kept",
                Severity.WARNING,
                row,
                {
                    "ingredients": key.names,
                    "existing_product": existing.name,
                    "attempted_product": recipe.product.name,
                },
            )
            return
        self._recipes.append(recipe)
        self._lookup[key] = recipe.product

    def _report(
        self,
        code: ErrorCode,
        message: str,
        severity: Severity,
        row: int | None,
        details: dict | None = None,
    ) -> None:
        self._diagnostics.report(
            Diagnostic(
                code=code,
                message=message,
                severity=severity,
                source=self.source,
                row=row,
                details=details or {},
            )
        )
