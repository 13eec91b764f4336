"""Name-keyed store of inventory items with JSON persistence.

The catalog plays the role of the host's asset database: importers
find-or-create items by name and category, and mark what they touched as
dirty. Saving writes the items and the recipe sequence into one
``CatalogDocument``; loading rebuilds the recipe lookup through
``RecipeIndex.rehydrate``.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from pydantic import ValidationError

from recipe_workbook.models import CatalogDocument, InventoryItem, RecipeEntry
from recipe_workbook.services.recipe_index import Recipe, RecipeIndex
from recipe_workbook.utils.diagnostics import Diagnostic, DiagnosticLog, Severity
from recipe_workbook.utils.exceptions import CatalogError, ErrorCode
from recipe_workbook.utils.logging import get_logger

logger = get_logger(__name__)


class ItemCatalog:
    """Items keyed by their unique name."""

    def __init__(self, items: list[InventoryItem] | None = None) -> None:
        self._items: dict[str, InventoryItem] = {}
        self._dirty: set[str] = set()
        for item in items or []:
            self._items[item.name] = item

    def find_or_create(self, name: str, category: str) -> InventoryItem:
        """Return the item called ``name``, creating it in ``category`` if new.

        The returned item is marked dirty either way, since callers fetch
        items in order to modify them.
        """
        item = self._items.get(name)
        if item is None:
            item = InventoryItem(name=name, category=category)
            self._items[name] = item
            logger.info("Created item", name=name, category=category)
        self.mark_dirty(item)
        return item

    def resolve(self, name: str) -> InventoryItem | None:
        return self._items.get(name)

    get = resolve

    def items_in(self, category: str) -> list[InventoryItem]:
        return [item for item in self._items.values() if item.category == category]

    @property
    def names(self) -> list[str]:
        return list(self._items)

    def mark_dirty(self, item: InventoryItem | str) -> None:
        name = item if isinstance(item, str) else item.name
        if name not in self._items:
            raise KeyError(f"Unknown item: {name}")
        self._dirty.add(name)

    @property
    def dirty_items(self) -> list[InventoryItem]:
        return [item for name, item in self._items.items() if name in self._dirty]

    def clear_dirty(self) -> None:
        self._dirty.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[InventoryItem]:
        return iter(self._items.values())

    # ------------------------------------------------------------------ #
    # Persistence
    # ------------------------------------------------------------------ #

    def to_document(self, recipes: RecipeIndex | None = None) -> CatalogDocument:
        entries = [
            RecipeEntry(ingredients=recipe.ingredient_names, product=recipe.product.name)
            for recipe in (recipes or [])
        ]
        default = recipes.default_product if recipes is not None else None
        return CatalogDocument(
            items=list(self._items.values()),
            recipes=entries,
            default_product=default.name if default is not None else None,
        )

    def save(self, path: str | Path, recipes: RecipeIndex | None = None) -> Path:
        """Write the catalog and recipe sequence as JSON and clear dirty marks.

        Raises:
            CatalogError: If the file cannot be written.
        """
        target = Path(path)
        document = self.to_document(recipes)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(document.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise CatalogError(
                f"Could not write catalog: {exc}",
                error_code=ErrorCode.CATALOG_WRITE_ERROR,
                file_path=str(target),
            ) from exc

        logger.info(
            "Saved catalog",
            path=str(target),
            items=len(document.items),
            recipes=len(document.recipes),
            dirty=len(self._dirty),
        )
        self.clear_dirty()
        return target

    @classmethod
    def load(
        cls, path: str | Path, diagnostics: DiagnosticLog | None = None
    ) -> tuple[ItemCatalog, RecipeIndex]:
        """Read a catalog file and rehydrate its recipe index.

        A missing file yields an empty catalog and index. Stored recipes
        that name unknown items are skipped with a diagnostic.

        Raises:
            CatalogError: If the file exists but cannot be read or parsed.
        """
        diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        source = Path(path)
        if not source.exists():
            logger.info("No catalog found, starting empty", path=str(source))
            return cls(), RecipeIndex(diagnostics=diagnostics)

        try:
            document = CatalogDocument.model_validate_json(
                source.read_text(encoding="utf-8")
            )
        except (OSError, ValidationError) as exc:
            raise CatalogError(
                f"Could not read catalog: {exc}",
                file_path=str(source),
                details={"error_type": type(exc).__name__},
            ) from exc

        catalog = cls(document.items)
        records: list[Recipe] = []
        for position, entry in enumerate(document.recipes, start=1):
            missing = [
                name for name in [*entry.ingredients, entry.product] if name not in catalog
            ]
            if missing:
                diagnostics.report(
                    Diagnostic(
                        code=ErrorCode.CATALOG_READ_ERROR,
                        message=(
                            f"Stored recipe for '{entry.product}' names unknown "
                            f"items: {', '.join(missing)}"
                        ),
                        severity=Severity.WARNING,
                        source=str(source),
                        row=position,
                        details={"missing": missing},
                    )
                )
                continue
            records.append(
                Recipe(
                    ingredients=tuple(catalog._items[name] for name in entry.ingredients),
                    product=catalog._items[entry.product],
                )
            )

        default = (
            catalog.resolve(document.default_product)
            if document.default_product
            else None
        )
        index = RecipeIndex.from_records(
            records, diagnostics=diagnostics, default_product=default
        )
        logger.info(
            "Loaded catalog",
            path=str(source),
            items=len(catalog),
            recipes=index.count,
        )
        return catalog, index
