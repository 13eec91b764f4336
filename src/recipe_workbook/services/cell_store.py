"""Raw cell storage backed by an openpyxl worksheet.

The views in this package only need four primitives from the grid they sit
on: read a cell, write a cell, insert rows, insert columns. ``CellStore``
names that contract; ``WorksheetCellStore`` implements it for openpyxl.

openpyxl's own ``insert_rows``/``insert_cols`` move cells but leave table
references and defined names untouched, so the store re-anchors every
table and workbook-scoped defined name on the sheet after each insertion.
Views read their region from those descriptors on every call, which keeps
sibling views on the same sheet consistent after a structural edit.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from openpyxl.workbook.defined_name import DefinedName
from openpyxl.worksheet.table import Table
from openpyxl.worksheet.worksheet import Worksheet

from recipe_workbook.cell_region import (
    CellRegion,
    qualify_address,
    split_qualified_address,
)
from recipe_workbook.utils.exceptions import StructuralGrowthError
from recipe_workbook.utils.logging import get_logger

logger = get_logger(__name__)


class CellStore(Protocol):
    """Raw, 1-based, untyped access to one worksheet grid."""

    @property
    def title(self) -> str: ...

    def get_cell(self, row: int, col: int) -> Any: ...

    def set_cell(self, row: int, col: int, value: Any) -> None: ...

    def insert_rows(self, at: int, count: int) -> None: ...

    def insert_columns(self, at: int, count: int) -> None: ...


def table_region(table: Table) -> CellRegion:
    """Current region of an openpyxl table."""
    return CellRegion.from_ref(table.ref)


def set_table_region(table: Table, region: CellRegion) -> None:
    """Point an openpyxl table (and its auto-filter) at a new region."""
    table.ref = region.ref
    if table.autoFilter is not None:
        totals = table.totalsRowCount or 0
        filter_region = region
        if totals and region.rows > totals:
            filter_region = region.resized(rows=region.rows - totals)
        table.autoFilter.ref = filter_region.ref


def defined_name_region(defined_name: DefinedName) -> tuple[str | None, CellRegion]:
    """Owning sheet title and region of a single-area defined name.

    Raises:
        ValueError: If the name does not point at one bounded cell range.
    """
    sheet, cells = split_qualified_address(defined_name.attr_text or "")
    return sheet, CellRegion.from_ref(cells)


def set_defined_name_region(
    defined_name: DefinedName, sheet: str, region: CellRegion
) -> None:
    defined_name.attr_text = qualify_address(sheet, region)


class WorksheetCellStore:
    """``CellStore`` over one openpyxl worksheet."""

    def __init__(self, worksheet: Worksheet) -> None:
        self._worksheet = worksheet

    @property
    def worksheet(self) -> Worksheet:
        return self._worksheet

    @property
    def title(self) -> str:
        return self._worksheet.title

    def get_cell(self, row: int, col: int) -> Any:
        return self._worksheet.cell(row=row, column=col).value

    def set_cell(self, row: int, col: int, value: Any) -> None:
        self._worksheet.cell(row=row, column=col).value = value

    def insert_rows(self, at: int, count: int) -> None:
        """Insert ``count`` blank rows before row ``at``.

        Raises:
            StructuralGrowthError: If the insertion is invalid or rejected.
        """
        self._insert("rows", at, count, self._worksheet.insert_rows)
        self._reanchor(lambda region: region.after_row_insert(at, count))

    def insert_columns(self, at: int, count: int) -> None:
        """Insert ``count`` blank columns before column ``at``.

        Raises:
            StructuralGrowthError: If the insertion is invalid or rejected.
        """
        self._insert("columns", at, count, self._worksheet.insert_cols)
        self._reanchor(lambda region: region.after_column_insert(at, count))

    def _insert(
        self, axis: str, at: int, count: int, insert: Callable[[int, int], None]
    ) -> None:
        if at < 1 or count < 1:
            raise StructuralGrowthError(axis, at, count, sheet=self.title)
        try:
            insert(at, count)
        except (ValueError, TypeError, IndexError) as exc:
            raise StructuralGrowthError(axis, at, count, sheet=self.title) from exc
        logger.debug(f"Inserted {axis}", sheet=self.title, at=at, count=count)

    def _reanchor(self, move: Callable[[CellRegion], CellRegion]) -> None:
        for table in self._worksheet.tables.values():
            region = table_region(table)
            moved = move(region)
            if moved != region:
                set_table_region(table, moved)

        workbook = self._worksheet.parent
        if workbook is None:
            return
        for defined_name in workbook.defined_names.values():
            try:
                sheet, region = defined_name_region(defined_name)
            except ValueError:
                continue
            if sheet != self.title:
                continue
            moved = move(region)
            if moved != region:
                set_defined_name_region(defined_name, sheet, moved)
