"""Centralized exception classes for recipe workbook import.

This module provides the error codes shared by exceptions and diagnostics,
plus a hierarchy of custom exceptions for the failures that abort an
operation (as opposed to data-shape problems, which are reported as
diagnostics and never raised).

Exception Hierarchy:
    RecipeWorkbookError (base)
    ├── WorkbookError
    │   ├── WorkbookNotFoundError
    │   ├── WorkbookReadError
    │   └── WorkbookWriteError
    ├── LookupFailedError
    │   ├── TableNotFoundError
    │   └── RangeNotFoundError
    ├── StructuralGrowthError
    ├── RecipeError
    │   └── InvalidRecipeKeyError
    ├── CatalogError
    └── UnsupportedCellTypeError

Error Codes:
    Every error and diagnostic carries a unique code (e.g., "E2001") that
    can be used for programmatic filtering of import results.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the application.

    Error codes are grouped by category:
    - E1xxx: Workbook file errors
    - E2xxx: Lookup errors (not found, out of range)
    - E3xxx: Recipe index errors
    - E4xxx: Structural edit errors
    - E5xxx: Catalog errors
    - E9xxx: Internal/unexpected errors
    """

    # Workbook errors (E1xxx)
    WORKBOOK_NOT_FOUND = "E1001"
    WORKBOOK_READ_ERROR = "E1002"
    WORKBOOK_WRITE_ERROR = "E1003"
    SHEET_NOT_FOUND = "E1004"
    DUPLICATE_NAME = "E1005"
    UNSUPPORTED_RANGE = "E1006"

    # Lookup errors (E2xxx)
    COLUMN_NOT_FOUND = "E2001"
    TABLE_NOT_FOUND = "E2002"
    RANGE_NOT_FOUND = "E2003"
    ENUM_LABEL_NOT_FOUND = "E2004"
    ROW_OUT_OF_RANGE = "E2005"
    COLUMN_OUT_OF_RANGE = "E2006"

    # Recipe errors (E3xxx)
    DUPLICATE_RECIPE = "E3001"
    PRODUCT_NOT_FOUND = "E3002"
    TOO_MANY_INGREDIENTS = "E3003"
    INVALID_RECIPE_KEY = "E3004"

    # Structural errors (E4xxx)
    STRUCTURAL_GROWTH_FAILED = "E4001"

    # Catalog errors (E5xxx)
    CATALOG_READ_ERROR = "E5001"
    CATALOG_WRITE_ERROR = "E5002"
    MISSING_RECIPE_COLLECTION = "E5003"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"
    CONFIGURATION_ERROR = "E9002"
    UNSUPPORTED_CELL_TYPE = "E9003"
    UNEXPECTED_ERROR = "E9999"


class RecipeWorkbookError(Exception):
    """Base exception for all recipe workbook errors.

    It provides:
    - Unique error codes for programmatic handling
    - Structured error details for logging and debugging

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for reports.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Workbook Errors (E1xxx)
# =============================================================================


class WorkbookError(RecipeWorkbookError):
    """Base class for workbook file errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.WORKBOOK_READ_ERROR,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with file path information.

        Args:
            message: Error message.
            error_code: Error code.
            file_path: Path to the problematic workbook.
            details: Additional details.
        """
        details = details or {}
        if file_path:
            details["file_path"] = file_path
        super().__init__(message, error_code, details)
        self.file_path = file_path


class WorkbookNotFoundError(WorkbookError):
    """Raised when the workbook file does not exist."""

    def __init__(
        self,
        file_path: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with file path.

        Args:
            file_path: Path to the workbook that was not found.
            message: Optional custom message.
            details: Additional details.
        """
        message = message or f"Workbook not found: {file_path}"
        super().__init__(
            message=message,
            error_code=ErrorCode.WORKBOOK_NOT_FOUND,
            file_path=file_path,
            details=details,
        )


class WorkbookReadError(WorkbookError):
    """Raised when openpyxl cannot decode the workbook."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.WORKBOOK_READ_ERROR,
            file_path=file_path,
            details=details,
        )


class WorkbookWriteError(WorkbookError):
    """Raised when the workbook cannot be saved."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.WORKBOOK_WRITE_ERROR,
            file_path=file_path,
            details=details,
        )


# =============================================================================
# Lookup Errors (E2xxx)
# =============================================================================


class LookupFailedError(RecipeWorkbookError):
    """Base class for lookups the caller has chosen to treat as fatal."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        name: str,
        known_names: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the requested name.

        Args:
            message: Error message.
            error_code: Error code.
            name: The name that could not be found.
            known_names: Names that were available.
            details: Additional details.
        """
        details = details or {}
        details["name"] = name
        if known_names is not None:
            details["known_names"] = known_names
        super().__init__(message, error_code, details)
        self.name = name
        self.known_names = known_names or []


class TableNotFoundError(LookupFailedError):
    """Raised by WorkbookIndex.require_table for an unknown table."""

    def __init__(self, name: str, known_names: list[str] | None = None) -> None:
        super().__init__(
            message=f"Could not find table '{name}'",
            error_code=ErrorCode.TABLE_NOT_FOUND,
            name=name,
            known_names=known_names,
        )


class RangeNotFoundError(LookupFailedError):
    """Raised by WorkbookIndex.require_range for an unknown named range."""

    def __init__(self, name: str, known_names: list[str] | None = None) -> None:
        super().__init__(
            message=f"Could not find named range '{name}'",
            error_code=ErrorCode.RANGE_NOT_FOUND,
            name=name,
            known_names=known_names,
        )


# =============================================================================
# Structural Errors (E4xxx)
# =============================================================================


class StructuralGrowthError(RecipeWorkbookError):
    """Raised when the cell store rejects a row or column insertion.

    This is fatal to the current operation and is never retried.
    """

    def __init__(
        self,
        axis: str,
        at: int,
        count: int,
        sheet: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the rejected insertion.

        Args:
            axis: "rows" or "columns".
            at: 1-based insertion index.
            count: Number of rows or columns requested.
            sheet: Title of the worksheet being edited.
            details: Additional details.
        """
        details = details or {}
        details.update({"axis": axis, "at": at, "count": count})
        if sheet:
            details["sheet"] = sheet
        super().__init__(
            f"Could not insert {count} {axis} at {at}"
            + (f" in sheet '{sheet}'" if sheet else ""),
            ErrorCode.STRUCTURAL_GROWTH_FAILED,
            details,
        )
        self.axis = axis
        self.at = at
        self.count = count


# =============================================================================
# Recipe Errors (E3xxx)
# =============================================================================


class RecipeError(RecipeWorkbookError):
    """Base class for recipe index errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INVALID_RECIPE_KEY,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class InvalidRecipeKeyError(RecipeError):
    """Raised when a recipe key would be empty or exceed its slot count."""

    def __init__(self, ingredient_count: int, max_slots: int) -> None:
        """Initialize with the offending ingredient count.

        Args:
            ingredient_count: Number of ingredients supplied.
            max_slots: Number of slots in a recipe key.
        """
        if ingredient_count == 0:
            message = "A recipe key needs at least one ingredient"
        else:
            message = (
                f"A recipe key holds at most {max_slots} ingredients, "
                f"got {ingredient_count}"
            )
        super().__init__(
            message,
            details={"ingredient_count": ingredient_count, "max_slots": max_slots},
        )
        self.ingredient_count = ingredient_count


# =============================================================================
# Catalog Errors (E5xxx)
# =============================================================================


class CatalogError(RecipeWorkbookError):
    """Raised when the item catalog cannot be read or written."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CATALOG_READ_ERROR,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if file_path:
            details["file_path"] = file_path
        super().__init__(message, error_code, details)
        self.file_path = file_path


# =============================================================================
# Internal Errors (E9xxx)
# =============================================================================


class UnsupportedCellTypeError(RecipeWorkbookError):
    """Raised when a typed read asks for a type the accessor cannot coerce to."""

    def __init__(self, target: Any) -> None:
        name = getattr(target, "__name__", repr(target))
        super().__init__(
            f"Cannot coerce cell values to {name}; "
            "use int, float, str, bool, object or an Enum",
            ErrorCode.UNSUPPORTED_CELL_TYPE,
            {"target_type": name},
        )
        self.target = target
