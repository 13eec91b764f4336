"""Positional view over a workbook-scoped defined name."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any, TypeVar

from openpyxl.workbook.defined_name import DefinedName

from recipe_workbook.cell_region import CellRegion
from recipe_workbook.services.cell_accessor import (
    TypedCellAccessor,
    default_for,
    zero_member,
)
from recipe_workbook.services.cell_store import (
    WorksheetCellStore,
    defined_name_region,
    set_defined_name_region,
)
from recipe_workbook.utils.diagnostics import Diagnostic, DiagnosticLog, ReadResult
from recipe_workbook.utils.exceptions import ErrorCode
from recipe_workbook.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
E = TypeVar("E", bound=Enum)


class RangeView:
    """Typed access to a named rectangle by 1-based (row, col) offsets.

    There are no column names: (1, 1) is the anchor cell. The extent is read
    from the defined name's destination on every call, so it follows
    insertions made through the sheet's cell store.
    """

    def __init__(
        self,
        store: WorksheetCellStore,
        defined_name: DefinedName,
        diagnostics: DiagnosticLog | None = None,
    ) -> None:
        self._store = store
        self._defined_name = defined_name
        self._cells = TypedCellAccessor(store)
        self._diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

    def __repr__(self) -> str:
        return f"RangeView(name={self.name!r}, destination={self.destination!r})"

    @property
    def name(self) -> str:
        return self._defined_name.name

    @property
    def sheet_title(self) -> str:
        return self._store.title

    @property
    def destination(self) -> str:
        return self._defined_name.attr_text

    @property
    def region(self) -> CellRegion:
        return defined_name_region(self._defined_name)[1]

    @property
    def row_count(self) -> int:
        return self.region.rows

    @property
    def column_count(self) -> int:
        return self.region.columns

    # ------------------------------------------------------------------ #
    # Reads and writes
    # ------------------------------------------------------------------ #

    def read_value(
        self, row: int = 1, col: int = 1, as_type: type[T] = object
    ) -> ReadResult[T]:
        default = default_for(as_type)
        collected: list[Diagnostic] = []
        cell = self._locate(row, col, collected)
        if cell is None:
            return ReadResult(default, found=False, diagnostics=collected)
        return ReadResult(self._cells.get(*cell, as_type))

    def get_value(self, row: int = 1, col: int = 1, as_type: type[T] = object) -> T:
        return self.read_value(row, col, as_type).value

    def set_value(self, value: Any, row: int = 1, col: int = 1) -> bool:
        cell = self._locate(row, col, None)
        if cell is None:
            return False
        self._cells.set(*cell, value)
        return True

    def get_enum(self, enum_type: type[E], row: int = 1, col: int = 1) -> ReadResult[E]:
        """Map a label to an enum member; blank cells report nothing."""
        collected: list[Diagnostic] = []
        cell = self._locate(row, col, collected)
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
                    f"range {self.name}, row {row}, column {col}"
                ),
                source=self.name,
                row=row,
                column=col,
                details={"value": parsed.label, "enum": enum_type.__name__},
            ),
            collected,
        )
        return ReadResult(parsed.value, found=False, diagnostics=collected)

    def get_values(self, as_type: type[T] = object) -> list[list[T]]:
        """The whole range as ``row_count`` lists of ``column_count`` values."""
        default_for(as_type)
        region = self.region
        return [
            [self._cells.get(row, col, as_type) for col in range(region.min_col, region.max_col + 1)]
            for row in range(region.min_row, region.max_row + 1)
        ]

    def set_values(self, values: Sequence[Sequence[Any]]) -> None:
        """Write a grid from the anchor, growing the range to fit first.

        Ragged rows are allowed; the range grows to the widest one.
        """
        rows = [list(row) for row in values]
        width = max((len(row) for row in rows), default=0)
        self.expand_to_fit(len(rows), width)

        region = self.region
        for offset, row_values in enumerate(rows):
            for col, value in enumerate(row_values):
                self._cells.set(region.min_row + offset, region.min_col + col, value)

    def number_rows(self) -> None:
        """Fill the first column with 1..row_count."""
        self.set_values([[number] for number in range(1, self.row_count + 1)])

    def number_columns(self) -> None:
        """Fill the first row with 1..column_count."""
        self.set_values([list(range(1, self.column_count + 1))])

    def expand_to_fit(self, rows: int, columns: int) -> None:
        """Grow the range to at least ``rows`` x ``columns`` without writing.

        Rows are inserted first, directly below the anchor row; the column
        count is checked only after that insertion has settled.
        """
        if rows > self.row_count:
            self._grow("rows", rows)
        if columns > self.column_count:
            self._grow("columns", columns)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _report(
        self, diagnostic: Diagnostic, collected: list[Diagnostic] | None
    ) -> None:
        self._diagnostics.report(diagnostic)
        if collected is not None:
            collected.append(diagnostic)

    def _locate(
        self, row: int, col: int, collected: list[Diagnostic] | None
    ) -> tuple[int, int] | None:
        region = self.region
        if not 1 <= row <= region.rows:
            self._report(
                Diagnostic(
                    code=ErrorCode.ROW_OUT_OF_RANGE,
                    message=(
                        f"Tried to access row {row} of range '{self.name}'. "
                        f"Valid rows are 1 - {region.rows}"
                    ),
                    source=self.name,
                    row=row,
                    column=col,
                    details={"valid_range": [1, region.rows]},
                ),
                collected,
            )
            return None
        if not 1 <= col <= region.columns:
            self._report(
                Diagnostic(
                    code=ErrorCode.COLUMN_OUT_OF_RANGE,
                    message=(
                        f"Tried to access column {col} of range '{self.name}'. "
                        f"Valid columns are 1 - {region.columns}"
                    ),
                    source=self.name,
                    row=row,
                    column=col,
                    details={"valid_range": [1, region.columns]},
                ),
                collected,
            )
            return None
        return region.min_row + row - 1, region.min_col + col - 1

    def _grow(self, axis: str, target: int) -> None:
        region = self.region
        if axis == "rows":
            extra = target - region.rows
            self._store.insert_rows(region.min_row + 1, extra)
        else:
            extra = target - region.columns
            self._store.insert_columns(region.min_col + 1, extra)

        # A single-row (or single-column) range is not stretched by an
        # insertion just past its anchor.
        grown = self.region
        if axis == "rows" and grown.rows < target:
            grown = grown.resized(rows=target)
        elif axis == "columns" and grown.columns < target:
            grown = grown.resized(columns=target)
        set_defined_name_region(self._defined_name, self.sheet_title, grown)
        logger.info(f"Grew range {axis}", range=self.name, added=extra, size=target)
