"""Utilities package for recipe workbook import.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
- Diagnostics for tolerant batch reads (diagnostics.py)
"""

from recipe_workbook.utils.diagnostics import (
    Diagnostic,
    DiagnosticLog,
    ReadResult,
    Severity,
)
from recipe_workbook.utils.exceptions import (
    CatalogError,
    ErrorCode,
    InvalidRecipeKeyError,
    RangeNotFoundError,
    RecipeWorkbookError,
    StructuralGrowthError,
    TableNotFoundError,
    UnsupportedCellTypeError,
    WorkbookError,
)
from recipe_workbook.utils.logging import (
    LogContext,
    StructuredLogger,
    get_import_id,
    get_logger,
    set_import_id,
)

__all__ = [
    # Diagnostics
    "Diagnostic",
    "DiagnosticLog",
    "ReadResult",
    "Severity",
    # Exceptions
    "CatalogError",
    "ErrorCode",
    "InvalidRecipeKeyError",
    "RangeNotFoundError",
    "RecipeWorkbookError",
    "StructuralGrowthError",
    "TableNotFoundError",
    "UnsupportedCellTypeError",
    "WorkbookError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_import_id",
    "get_logger",
    "set_import_id",
]
