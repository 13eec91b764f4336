"""Configuration management for recipe workbook import.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
RW_ prefix, or via a .env file in the project root.

Environment Variables:
    RW_WORKBOOK_PATH: Workbook to import (default: data/PotionCrafting.xlsx)
    RW_OUTPUT_PATH: Optional workbook path to save after exporting items
    RW_CATALOG_PATH: JSON item catalog (default: data/catalog.json)
    RW_INGREDIENT_TABLE: Table holding ingredients (default: Ingredients)
    RW_POTION_TABLE: Table holding potions (default: Potions)
    RW_RECIPE_TABLE: Table holding recipes (default: Recipes)
    RW_RECIPE_PRODUCT_COLUMN: Recipe product column (default: Potion)
    RW_RECIPE_INGREDIENT_COLUMNS: Comma-separated ingredient columns
        (default: Item 1,Item 2,Item 3)
    RW_DEFAULT_PRODUCT: Item returned when no recipe matches (default: unset)
    RW_LOG_LEVEL: Logging level (default: INFO)
    RW_DEBUG: Enable debug mode (default: false)
"""

import logging
from typing import Any

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_INGREDIENT_COLUMNS = 3


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Example .env file:
        RW_WORKBOOK_PATH=Editor/PotionCrafting.xlsx
        RW_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="RW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # File Settings
    # =========================================================================

    workbook_path: str = "data/PotionCrafting.xlsx"
    """Workbook to read tables and named ranges from."""

    output_path: str | None = None
    """Where to save the workbook after exporting items; unset skips export."""

    catalog_path: str = "data/catalog.json"
    """JSON file holding the item catalog and recipe sequence."""

    # =========================================================================
    # Table Settings
    # =========================================================================

    ingredient_table: str = "Ingredients"
    """Table (and item category) holding ingredients."""

    potion_table: str = "Potions"
    """Table (and item category) holding potions."""

    recipe_table: str = "Recipes"
    """Table holding one recipe per row."""

    recipe_product_column: str = "Potion"
    """Recipe column naming the product."""

    recipe_ingredient_columns: str = "Item 1,Item 2,Item 3"
    """Comma-separated recipe columns naming the ingredients."""

    default_product: str | None = None
    """Catalog item returned by crafting when no recipe matches."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional logging."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator(
        "ingredient_table", "potion_table", "recipe_table", "recipe_product_column"
    )
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate table and column names are non-empty."""
        if not v.strip():
            raise ValueError("Table and column names must be non-empty")
        return v.strip()

    @field_validator("recipe_ingredient_columns")
    @classmethod
    def validate_ingredient_columns(cls, v: str) -> str:
        """Validate there are one to three non-empty ingredient columns."""
        columns = [column.strip() for column in v.split(",")]
        if not all(columns):
            raise ValueError(f"recipe_ingredient_columns has an empty entry: {v!r}")
        if len(columns) > MAX_INGREDIENT_COLUMNS:
            raise ValueError(
                f"recipe_ingredient_columns allows at most "
                f"{MAX_INGREDIENT_COLUMNS} columns, got {len(columns)}"
            )
        return ",".join(columns)

    @model_validator(mode="after")
    def validate_distinct_tables(self) -> "Settings":
        """Validate the three tables are distinct."""
        tables = [self.ingredient_table, self.potion_table, self.recipe_table]
        if len(set(tables)) != len(tables):
            raise ValueError(f"Table names must be distinct, got {tables}")
        return self

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def ingredient_columns(self) -> list[str]:
        """Get ingredient columns as a list."""
        return self.recipe_ingredient_columns.split(",")

    @property
    def item_tables(self) -> list[str]:
        """Item categories in import order."""
        return [self.ingredient_table, self.potion_table]

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary for logging."""
        return {
            "workbook_path": self.workbook_path,
            "output_path": self.output_path,
            "catalog_path": self.catalog_path,
            "ingredient_table": self.ingredient_table,
            "potion_table": self.potion_table,
            "recipe_table": self.recipe_table,
            "recipe_product_column": self.recipe_product_column,
            "recipe_ingredient_columns": self.ingredient_columns,
            "default_product": self.default_product,
            "log_level": self.log_level,
            "debug": self.debug,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Validate settings on application startup.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    if s.output_path and s.output_path == s.workbook_path:
        logger.warning(
            "RW_OUTPUT_PATH equals RW_WORKBOOK_PATH; the source workbook "
            "will be overwritten on export."
        )

    logger.info(
        f"Configuration loaded: workbook_path={s.workbook_path}, "
        f"catalog_path={s.catalog_path}, log_level={s.log_level}, debug={s.debug}"
    )


# Create the global settings instance
settings = Settings()
