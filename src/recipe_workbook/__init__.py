"""Recipe Workbook - typed table views and recipe indexing over Excel workbooks."""

from recipe_workbook.services import (
    CatalogImporter,
    ItemCatalog,
    RecipeIndex,
    WorkbookIndex,
)

__all__ = ["CatalogImporter", "ItemCatalog", "RecipeIndex", "WorkbookIndex", "main"]
__version__ = "0.1.0"


def main() -> None:
    """Run the configured import and exit non-zero if it reported errors."""
    import sys

    from recipe_workbook.config import settings, validate_settings_on_startup
    from recipe_workbook.services.catalog_importer import run_import
    from recipe_workbook.utils.exceptions import RecipeWorkbookError
    from recipe_workbook.utils.logging import configure_logging, get_logger

    configure_logging(level=settings.log_level_int)
    validate_settings_on_startup(settings)
    logger = get_logger(__name__)

    try:
        report = run_import(settings)
    except RecipeWorkbookError as exc:
        logger.error(str(exc), error_code=exc.error_code.value)
        sys.exit(1)

    if report.errors:
        sys.exit(1)
