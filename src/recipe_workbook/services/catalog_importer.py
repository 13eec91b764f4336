"""Import items and recipes from a workbook into the item catalog.

The importer reads the ingredient and potion tables into ``ItemCatalog``
items, then rebuilds the ``RecipeIndex`` from the recipe table. Every
data-shape problem is reported to the workbook's ``DiagnosticLog``; the
import continues past bad rows and missing tables.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from recipe_workbook.config import Settings
from recipe_workbook.models import Rarity
from recipe_workbook.services.item_catalog import ItemCatalog
from recipe_workbook.services.recipe_index import RecipeIndex
from recipe_workbook.services.table_view import TableView
from recipe_workbook.services.workbook_index import WorkbookIndex
from recipe_workbook.utils.diagnostics import Diagnostic, Severity
from recipe_workbook.utils.exceptions import ErrorCode
from recipe_workbook.utils.logging import (
    LogContext,
    ProgressTracker,
    get_logger,
    timed_operation,
)

logger = get_logger(__name__)

NAME_COLUMN = "Name"
DISPLAY_NAME_COLUMN = "Display Name"
RARITY_COLUMN = "Rarity"
COST_COLUMN = "Cost"
USES_COLUMN = "Uses"
MAX_PROFIT_COLUMN = "Max Profit"
ID_COLUMN = "ID"


@dataclass
class ImportReport:
    """Summary of one import run."""

    workbook: str | None
    items: dict[str, int] = field(default_factory=dict)
    recipes_added: int = 0
    duplicates: int = 0
    rows_skipped: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    def to_dict(self) -> dict[str, Any]:
        return {
            "workbook": self.workbook,
            "items": dict(self.items),
            "recipes_added": self.recipes_added,
            "duplicates": self.duplicates,
            "rows_skipped": self.rows_skipped,
            "errors": len(self.errors),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "duration_seconds": self.duration_seconds,
        }


class CatalogImporter:
    """Moves items and recipes between a workbook and the catalog."""

    def __init__(
        self,
        workbook: WorkbookIndex,
        catalog: ItemCatalog,
        recipes: RecipeIndex | None,
        settings: Settings | None = None,
    ) -> None:
        self._workbook = workbook
        self._catalog = catalog
        self._recipes = recipes
        self._settings = settings or Settings()
        self._diagnostics = workbook.diagnostics
        self._rows_skipped = 0
        self._rows_read = 0

    @property
    def catalog(self) -> ItemCatalog:
        return self._catalog

    @property
    def recipes(self) -> RecipeIndex | None:
        return self._recipes

    def _table(self, name: str) -> TableView | None:
        table = self._workbook.find_table(name)
        if table is None:
            self._diagnostics.report(
                Diagnostic(
                    code=ErrorCode.TABLE_NOT_FOUND,
                    message=(
                        f"Could not find table '{name}' in "
                        f"{self._workbook.source or 'workbook'}"
                    ),
                    source=name,
                    details={"known_tables": self._workbook.table_names},
                )
            )
        return table

    def import_items(self, category: str) -> int:
        """Create or update one catalog item per named row of a table.

        Returns:
            Number of items imported.
        """
        table = self._table(category)
        if table is None:
            return 0

        has_uses = table.has_column(USES_COLUMN)
        has_max_profit = table.has_column(MAX_PROFIT_COLUMN)
        tracker = ProgressTracker(
            logger, f"Importing {category}", total=table.row_count, log_interval=25
        )
        imported = 0
        for row in range(1, table.row_count + 1):
            tracker.update()
            self._rows_read += 1
            name = table.get_value(row, NAME_COLUMN, str)
            if not name.strip():
                self._rows_skipped += 1
                continue

            item = self._catalog.find_or_create(name, category)
            if not item.display_name.strip():
                item.display_name = name

            rarity = table.get_enum(row, RARITY_COLUMN, Rarity)
            if rarity.found:
                item.rarity = rarity.value

            item.cost = table.get_value(row, COST_COLUMN, int)
            if has_uses:
                item.uses = table.get_value(row, USES_COLUMN, int)
            if has_max_profit:
                item.max_profit = table.get_value(row, MAX_PROFIT_COLUMN, int)
            imported += 1

        tracker.complete()
        return imported

    def import_recipes(self) -> int:
        """Rebuild the recipe index from the recipe table.

        Returns:
            Number of rows accepted, duplicates included.
        """
        if self._recipes is None:
            self._diagnostics.report(
                Diagnostic(
                    code=ErrorCode.MISSING_RECIPE_COLLECTION,
                    message="No recipe index provided to store imported recipes",
                )
            )
            return 0

        table = self._table(self._settings.recipe_table)
        if table is None:
            return 0

        self._recipes.clear()
        self._recipes.source = table.name
        product_column = self._settings.recipe_product_column
        ingredient_columns = self._settings.ingredient_columns

        accepted = 0
        for row in range(1, table.row_count + 1):
            self._rows_read += 1
            product = table.get_value(row, product_column, str)
            ingredients = [
                table.get_value(row, column, str) for column in ingredient_columns
            ]
            if self._recipes.try_add(self._catalog, product, ingredients, row=row):
                accepted += 1
            else:
                self._rows_skipped += 1
        return accepted

    def export_items(self, category: str) -> int:
        """Write a category's items back into its table.

        Name, Display Name, Rarity and Cost are always written (appending
        any missing column); Uses and Max Profit only when the table has
        them. Rows beyond the item count are blanked, and an ID column is
        renumbered when present.

        Returns:
            Number of items written.
        """
        table = self._table(category)
        if table is None:
            return 0

        items = self._catalog.items_in(category)
        columns: dict[str, list[Any]] = {
            NAME_COLUMN: [item.name for item in items],
            DISPLAY_NAME_COLUMN: [item.display_name for item in items],
            RARITY_COLUMN: [item.rarity for item in items],
            COST_COLUMN: [item.cost for item in items],
        }
        optional: dict[str, list[Any]] = {
            USES_COLUMN: [item.uses for item in items],
            MAX_PROFIT_COLUMN: [item.max_profit for item in items],
        }
        columns.update(
            {name: values for name, values in optional.items() if table.has_column(name)}
        )

        for column, values in columns.items():
            padding = max(0, table.row_count - len(values))
            table.set_column(column, values + [None] * padding, append_if_absent=True)
        if table.has_column(ID_COLUMN):
            table.number_rows(ID_COLUMN)

        logger.info("Exported items", category=category, items=len(items))
        return len(items)

    def run(self) -> ImportReport:
        """Import ingredients, potions and recipes, in that order."""
        first_diagnostic = len(self._diagnostics)
        self._rows_skipped = 0
        self._rows_read = 0
        report = ImportReport(workbook=self._workbook.source)

        with LogContext(
            import_id=uuid.uuid4().hex[:12], workbook=self._workbook.source or "-"
        ), timed_operation(logger, "import") as metrics:
            for category in self._settings.item_tables:
                report.items[category] = self.import_items(category)
            self.import_recipes()

            report.diagnostics = self._diagnostics.entries[first_diagnostic:]
            report.recipes_added = self._recipes.count if self._recipes else 0
            report.duplicates = sum(
                1 for d in report.diagnostics if d.code == ErrorCode.DUPLICATE_RECIPE
            )
            report.rows_skipped = self._rows_skipped

            metrics.rows_read = self._rows_read
            metrics.items_imported = sum(report.items.values())
            metrics.recipes_added = report.recipes_added
            metrics.duplicates = report.duplicates
            metrics.diagnostics = len(report.diagnostics)

        report.duration_seconds = metrics.duration_seconds
        logger.log_import_result(
            workbook=self._workbook.source or "-",
            items=metrics.items_imported,
            recipes=report.recipes_added,
            duplicates=report.duplicates,
            errors=len(report.errors),
            duration_seconds=report.duration_seconds,
        )
        return report


def run_import(s: Settings) -> ImportReport:
    """Load the catalog and workbook, import, and persist the results.

    Raises:
        WorkbookNotFoundError: If the configured workbook does not exist.
        WorkbookReadError: If the workbook cannot be read.
        CatalogError: If the catalog cannot be read or written.
    """
    catalog, recipes = ItemCatalog.load(s.catalog_path)
    workbook = WorkbookIndex.load(s.workbook_path, diagnostics=recipes.diagnostics)

    importer = CatalogImporter(workbook, catalog, recipes, s)
    report = importer.run()

    if s.default_product:
        recipes.default_product = catalog.resolve(s.default_product)
    catalog.save(s.catalog_path, recipes)

    if s.output_path:
        for category in s.item_tables:
            importer.export_items(category)
        workbook.save(s.output_path)
    return report
