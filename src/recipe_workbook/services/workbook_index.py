"""Discovery of tables and named ranges in an openpyxl workbook."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from recipe_workbook.services.cell_store import WorksheetCellStore, defined_name_region
from recipe_workbook.services.range_view import RangeView
from recipe_workbook.services.table_view import TableView
from recipe_workbook.utils.diagnostics import Diagnostic, DiagnosticLog, Severity
from recipe_workbook.utils.exceptions import (
    ErrorCode,
    RangeNotFoundError,
    TableNotFoundError,
    WorkbookNotFoundError,
    WorkbookReadError,
    WorkbookWriteError,
)
from recipe_workbook.utils.logging import get_logger

logger = get_logger(__name__)

# Names Excel reserves for print areas, filters and the like.
_RESERVED_PREFIX = "_xlnm."


class WorkbookIndex:
    """Name to view lookup over every table and named range of a workbook.

    Tables are registered from every worksheet; named ranges only when they
    are workbook-scoped and point at a single cell range on an existing
    sheet. Views on the same sheet share one cell store, so an insertion
    made through one view re-anchors the others.
    """

    def __init__(
        self,
        workbook: Workbook,
        source: str | None = None,
        diagnostics: DiagnosticLog | None = None,
    ) -> None:
        self._workbook = workbook
        self._source = source
        self._diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        self._stores: dict[str, WorksheetCellStore] = {}
        self._tables: dict[str, TableView] = {}
        self._ranges: dict[str, RangeView] = {}
        self._discover_tables()
        self._discover_ranges()
        logger.info(
            "Indexed workbook",
            source=source,
            tables=len(self._tables),
            ranges=len(self._ranges),
        )

    @classmethod
    def load(
        cls,
        source: str | Path | BinaryIO,
        diagnostics: DiagnosticLog | None = None,
    ) -> WorkbookIndex:
        """Open a workbook file and index it.

        Raises:
            WorkbookNotFoundError: If ``source`` is a path that does not exist.
            WorkbookReadError: If openpyxl cannot read the workbook.
        """
        label = str(source) if isinstance(source, (str, Path)) else None
        if isinstance(source, (str, Path)) and not Path(source).exists():
            raise WorkbookNotFoundError(str(source))
        try:
            workbook = load_workbook(filename=source)
        except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as exc:
            raise WorkbookReadError(
                f"Could not read workbook: {exc}",
                file_path=label,
                details={"error_type": type(exc).__name__},
            ) from exc
        return cls(workbook, source=label, diagnostics=diagnostics)

    @classmethod
    def from_workbook(
        cls, workbook: Workbook, diagnostics: DiagnosticLog | None = None
    ) -> WorkbookIndex:
        return cls(workbook, diagnostics=diagnostics)

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #

    @property
    def workbook(self) -> Workbook:
        return self._workbook

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def diagnostics(self) -> DiagnosticLog:
        return self._diagnostics

    @property
    def table_names(self) -> list[str]:
        return list(self._tables)

    @property
    def range_names(self) -> list[str]:
        return list(self._ranges)

    def find_table(self, name: str) -> TableView | None:
        return self._tables.get(name)

    def find_range(self, name: str) -> RangeView | None:
        return self._ranges.get(name)

    def require_table(self, name: str) -> TableView:
        view = self._tables.get(name)
        if view is None:
            raise TableNotFoundError(name, known_names=self.table_names)
        return view

    def require_range(self, name: str) -> RangeView:
        view = self._ranges.get(name)
        if view is None:
            raise RangeNotFoundError(name, known_names=self.range_names)
        return view

    def save(self, destination: str | Path) -> Path:
        """Write the workbook, including every structural edit, to disk.

        Raises:
            WorkbookWriteError: If the file cannot be written.
        """
        path = Path(destination)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._workbook.save(path)
        except (OSError, ValueError, TypeError) as exc:
            raise WorkbookWriteError(
                f"Could not save workbook: {exc}",
                file_path=str(path),
                details={"error_type": type(exc).__name__},
            ) from exc
        logger.info("Saved workbook", path=str(path))
        return path

    # ------------------------------------------------------------------ #
    # Discovery
    # ------------------------------------------------------------------ #

    def _store_for(self, title: str) -> WorksheetCellStore:
        store = self._stores.get(title)
        if store is None:
            store = WorksheetCellStore(self._workbook[title])
            self._stores[title] = store
        return store

    def _duplicate(self, kind: str, name: str, sheet: str) -> None:
        self._diagnostics.report(
            Diagnostic(
                code=ErrorCode.DUPLICATE_NAME,
                message=f"Duplicate {kind} name '{name}' on sheet '{sheet}' ignored",
                severity=Severity.WARNING,
                source=name,
                details={"kind": kind, "sheet": sheet},
            )
        )

    def _discover_tables(self) -> None:
        for worksheet in self._workbook.worksheets:
            for table in worksheet.tables.values():
                name = table.displayName or table.name
                if name in self._tables:
                    self._duplicate("table", name, worksheet.title)
                    continue
                self._tables[name] = TableView(
                    self._store_for(worksheet.title), table, self._diagnostics
                )

    def _discover_ranges(self) -> None:
        for defined_name in self._workbook.defined_names.values():
            name = defined_name.name
            if name.startswith(_RESERVED_PREFIX):
                continue

            try:
                sheet, _ = defined_name_region(defined_name)
            except ValueError:
                sheet = None
            if sheet is None:
                self._diagnostics.report(
                    Diagnostic(
                        code=ErrorCode.UNSUPPORTED_RANGE,
                        message=(
                            f"Named range '{name}' does not point at a single "
                            f"cell range: {defined_name.attr_text}"
                        ),
                        severity=Severity.WARNING,
                        source=name,
                    )
                )
                continue
            if sheet not in self._workbook.sheetnames:
                self._diagnostics.report(
                    Diagnostic(
                        code=ErrorCode.SHEET_NOT_FOUND,
                        message=f"Named range '{name}' refers to missing sheet '{sheet}'",
                        severity=Severity.WARNING,
                        source=name,
                        details={"sheet": sheet},
                    )
                )
                continue
            if name in self._ranges:
                self._duplicate("range", name, sheet)
                continue

            self._ranges[name] = RangeView(
                self._store_for(sheet), defined_name, self._diagnostics
            )
