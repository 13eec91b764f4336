"""Services for recipe workbook import."""

from recipe_workbook.services.catalog_importer import (
    CatalogImporter,
    ImportReport,
    run_import,
)
from recipe_workbook.services.item_catalog import ItemCatalog
from recipe_workbook.services.range_view import RangeView
from recipe_workbook.services.recipe_index import (
    EMPTY_SLOT,
    Recipe,
    RecipeIndex,
    RecipeKey,
)
from recipe_workbook.services.table_view import TableView
from recipe_workbook.services.workbook_index import WorkbookIndex

__all__ = [
    "EMPTY_SLOT",
    "CatalogImporter",
    "ImportReport",
    "ItemCatalog",
    "RangeView",
    "Recipe",
    "RecipeIndex",
    "RecipeKey",
    "TableView",
    "WorkbookIndex",
    "run_import",
]
