"""Name-addressed view over an openpyxl table.

Rows are 1-based over the data rows only: row 1 is the first row under
the header, and a totals row is never addressable. Columns are addressed
by header label.

Reads and writes never raise for data-shape problems. An out-of-range row
or unknown column is reported to the shared ``DiagnosticLog`` and the
read returns the type default inside a ``ReadResult``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any, TypeVar

import pandas as pd
from openpyxl.worksheet.table import Table, TableColumn

from recipe_workbook.cell_region import CellRegion
from recipe_workbook.services.cell_accessor import (
    TypedCellAccessor,
    default_for,
    zero_member,
)
from recipe_workbook.services.cell_store import (
    WorksheetCellStore,
    set_table_region,
    table_region,
)
from recipe_workbook.services.column_index import ColumnIndex
from recipe_workbook.utils.diagnostics import Diagnostic, DiagnosticLog, ReadResult
from recipe_workbook.utils.exceptions import ErrorCode
from recipe_workbook.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
E = TypeVar("E", bound=Enum)


class TableView:
    """Typed, name-addressed access to the data rows of one table.

    The region is read from the table descriptor on every call, so
    ``row_count`` always reflects structural edits made through the
    worksheet's cell store. The column index is built once from the header
    and only changes through :meth:`append_column`.
    """

    def __init__(
        self,
        store: WorksheetCellStore,
        table: Table,
        diagnostics: DiagnosticLog | None = None,
    ) -> None:
        self._store = store
        self._table = table
        self._cells = TypedCellAccessor(store)
        self._diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        self._columns = ColumnIndex(self._read_header())

    def __repr__(self) -> str:
        return f"TableView(name={self.name!r}, ref={self._table.ref!r})"

    # ------------------------------------------------------------------ #
    # Shape
    # ------------------------------------------------------------------ #

    @property
    def name(self) -> str:
        return self._table.displayName or self._table.name

    @property
    def sheet_title(self) -> str:
        return self._store.title

    @property
    def region(self) -> CellRegion:
        return table_region(self._table)

    @property
    def header_rows(self) -> int:
        count = self._table.headerRowCount
        return 1 if count is None else int(count)

    @property
    def totals_rows(self) -> int:
        return int(self._table.totalsRowCount or 0)

    @property
    def row_count(self) -> int:
        """Number of data rows, excluding header and totals rows."""
        return max(0, self.region.rows - self.header_rows - self.totals_rows)

    @property
    def column_count(self) -> int:
        return self.region.columns

    @property
    def columns(self) -> list[str]:
        return self._columns.names

    @property
    def column_index(self) -> ColumnIndex:
        return self._columns

    def has_column(self, name: str) -> bool:
        return name in self._columns

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def read_value(
        self, row: int, column: str, as_type: type[T] = object
    ) -> ReadResult[T]:
        """Read one cell, reporting any lookup failure.

        Args:
            row: Data row, starting at 1.
            column: Column label, case-sensitive.
            as_type: int, float, str, bool or object.

        Returns:
            ReadResult holding the coerced value, or the type default with
            ``found=False`` when the row or column is invalid.
        """
        default = default_for(as_type)
        collected: list[Diagnostic] = []
        cell = self._locate(row, column, collected)
        if cell is None:
            return ReadResult(default, found=False, diagnostics=collected)
        return ReadResult(self._cells.get(*cell, as_type))

    def get_value(self, row: int, column: str, as_type: type[T] = object) -> T:
        """Read one cell; the type default is returned on failure."""
        return self.read_value(row, column, as_type).value

    def get_enum(self, row: int, column: str, enum_type: type[E]) -> ReadResult[E]:
        """Read a label and map it to an enum member by name.

        A blank cell is not found and reports nothing. An unknown label is
        not found and reports one ENUM_LABEL_NOT_FOUND diagnostic. Either
        way the value is the enum's first member.
        """
        collected: list[Diagnostic] = []
        cell = self._locate(row, column, collected)
        if cell is None:
            return ReadResult(zero_member(enum_type), found=False, diagnostics=collected)

        parsed = self._cells.get_enum(*cell, enum_type)
        if parsed.matched:
            return ReadResult(parsed.value)
        if parsed.blank:
            return ReadResult(parsed.value, found=False)

        self._report(
            Diagnostic(
                code=ErrorCode.ENUM_LABEL_NOT_FOUND,
                message=(
                    f"Unknown {enum_type.__name__} value '{parsed.label}' in "
                    f"table {self.name}, row {row}, column {column}"
                ),
                source=self.name,
                row=row,
                column=column,
                details={"value": parsed.label, "enum": enum_type.__name__},
            ),
            collected,
        )
        return ReadResult(parsed.value, found=False, diagnostics=collected)

    def get_column_values(
        self, column: str, as_type: type[T] = object
    ) -> list[T] | None:
        """Read a whole column top to bottom; None if the column is unknown."""
        default_for(as_type)
        position = self._column_position(column)
        if position is None:
            return None
        return [row[0] for row in self._read_block(position, 1, as_type)]

    def get_column_block(
        self, start_column: str, width: int, as_type: type[T] = object
    ) -> list[list[T]] | None:
        """Read ``width`` consecutive columns starting at a named column.

        Only the first column must be named in the header; the rest are
        addressed positionally, which suits fixed-width groups such as
        three ingredient columns.
        """
        if width < 0:
            raise ValueError(f"width must be non-negative, got {width}")
        default_for(as_type)
        position = self._column_position(start_column)
        if position is None:
            return None
        return self._read_block(position, width, as_type)

    def to_dataframe(self) -> pd.DataFrame:
        """Data rows as a DataFrame with the header labels as columns."""
        rows = self._read_block(0, self.column_count, object)
        return pd.DataFrame(rows, columns=self.columns)

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def set_value(self, row: int, column: str, value: Any) -> bool:
        """Write one cell; False (with a diagnostic) if row or column is invalid."""
        cell = self._locate(row, column, None)
        if cell is None:
            return False
        self._cells.set(*cell, value)
        return True

    def set_column_block(
        self, start_column: str, values: Sequence[Sequence[Any]]
    ) -> bool:
        """Overwrite a block of columns starting at row 1.

        The start column is resolved before any structural edit, so a
        failed lookup leaves the sheet untouched. The table grows when
        ``values`` has more rows than ``row_count``.
        """
        position = self._column_position(start_column)
        if position is None:
            return False
        rows = [list(row) for row in values]
        self._grow_to(len(rows))
        self._write_block(position, rows)
        return True

    def set_column(
        self, column: str, values: Iterable[Any], append_if_absent: bool = False
    ) -> bool:
        """Overwrite one column starting at row 1, growing the table if needed.

        Args:
            column: Column label, case-sensitive.
            values: Values to write, one per data row.
            append_if_absent: Add the column after the last one when the
                header has no such label.

        Returns:
            True if written, False if the column is absent and may not be
            appended.
        """
        position = self._column_position(column, report=not append_if_absent)
        if position is None:
            if not append_if_absent:
                return False
            position = self.append_column(column)
        items = list(values)
        self._grow_to(len(items))
        self._write_block(position, [[value] for value in items])
        return True

    def append_column(self, name: str) -> int:
        """Insert a column after the last one and register its label.

        Returns the existing position unchanged if the label is already
        present.
        """
        existing = self._columns.resolve(name)
        if existing is not None:
            return existing

        region = self.region
        at = region.max_col + 1
        self._store.insert_columns(at, 1)
        set_table_region(self._table, region.resized(columns=region.columns + 1))
        if self.header_rows:
            self._store.set_cell(region.min_row, at, name)
        if self._table.tableColumns:
            next_id = max(column.id for column in self._table.tableColumns) + 1
            self._table.tableColumns.append(TableColumn(id=next_id, name=name))

        position = self._columns.append(name)
        logger.info("Appended column", table=self.name, column=name, position=position)
        return position

    def number_rows(self, column: str) -> bool:
        """Fill a column with 1..row_count."""
        return self.set_column(column, range(1, self.row_count + 1))

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _read_header(self) -> list[str]:
        region = self.region
        declared = [column.name for column in self._table.tableColumns]
        names: list[str] = []
        for offset in range(region.columns):
            label = ""
            if self.header_rows:
                raw = self._store.get_cell(region.min_row, region.min_col + offset)
                label = "" if raw is None else str(raw).strip()
            if not label and offset < len(declared) and declared[offset]:
                label = declared[offset]
            # Excel's own fallback label for an unnamed column
            names.append(label or f"Column{offset + 1}")
        return names

    def _report(
        self, diagnostic: Diagnostic, collected: list[Diagnostic] | None
    ) -> None:
        self._diagnostics.report(diagnostic)
        if collected is not None:
            collected.append(diagnostic)

    def _column_position(
        self,
        column: str,
        collected: list[Diagnostic] | None = None,
        row: int | None = None,
        report: bool = True,
    ) -> int | None:
        position = self._columns.resolve(column)
        if position is not None or not report:
            return position

        known = self._columns.names
        near = self._columns.near_matches(column)
        message = (
            f"Cannot find column named '{column}' in table {self.name}. "
            f"Valid columns are... {' '.join(repr(name) for name in known)}"
        )
        if near:
            message += " (check capitalization and whitespace)"
        self._report(
            Diagnostic(
                code=ErrorCode.COLUMN_NOT_FOUND,
                message=message,
                source=self.name,
                row=row,
                column=column,
                details={"known_columns": known, "near_matches": near},
            ),
            collected,
        )
        return None

    def _check_row(
        self, row: int, column: str, collected: list[Diagnostic] | None
    ) -> bool:
        row_count = self.row_count
        if 1 <= row <= row_count:
            return True
        self._report(
            Diagnostic(
                code=ErrorCode.ROW_OUT_OF_RANGE,
                message=(
                    f"Tried to access row {row} of table '{self.name}'. "
                    f"Valid rows are 1 - {row_count}"
                ),
                source=self.name,
                row=row,
                column=column,
                details={"valid_range": [1, row_count]},
            ),
            collected,
        )
        return False

    def _locate(
        self, row: int, column: str, collected: list[Diagnostic] | None
    ) -> tuple[int, int] | None:
        """Absolute (row, col) of a data cell, or None after reporting why not."""
        if not self._check_row(row, column, collected):
            return None
        position = self._column_position(column, collected, row=row)
        if position is None:
            return None
        region = self.region
        return region.min_row + self.header_rows + row - 1, region.min_col + position

    def _read_block(self, position: int, width: int, as_type: type[T]) -> list[list[T]]:
        region = self.region
        first_row = region.min_row + self.header_rows
        first_col = region.min_col + position
        return [
            [
                self._cells.get(first_row + offset, first_col + col, as_type)
                for col in range(width)
            ]
            for offset in range(self.row_count)
        ]

    def _write_block(self, position: int, rows: list[list[Any]]) -> None:
        region = self.region
        first_row = region.min_row + self.header_rows
        first_col = region.min_col + position
        for offset, row_values in enumerate(rows):
            for col, value in enumerate(row_values):
                self._cells.set(first_row + offset, first_col + col, value)

    def _grow_to(self, rows: int) -> None:
        """Add data rows until the table has at least ``rows`` of them.

        New rows go after the last data row (above any totals row), so
        existing rows keep their values in every column.
        """
        current = self.row_count
        if rows <= current:
            return
        extra = rows - current
        at = self.region.min_row + self.header_rows + current
        self._store.insert_rows(at, extra)

        # Rows appended below the last table row do not stretch the table.
        shortfall = rows - self.row_count
        if shortfall > 0:
            region = self.region
            set_table_region(self._table, region.resized(rows=region.rows + shortfall))
        logger.info(
            "Grew table",
            table=self.name,
            added_rows=extra,
            row_count=self.row_count,
        )
