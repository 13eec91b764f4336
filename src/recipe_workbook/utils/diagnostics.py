"""Structured diagnostics for tolerant batch reads.

Data-shape problems (a missing column, a row outside the table, an unknown
enum label, a duplicate recipe) never raise. They are reported as
``Diagnostic`` records to a shared ``DiagnosticLog`` and returned alongside
the substituted default in a ``ReadResult``, so a caller can tell a
legitimately zero cell from a failed read.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from recipe_workbook.utils.exceptions import ErrorCode
from recipe_workbook.utils.logging import StructuredLogger, get_logger

T = TypeVar("T")

logger = get_logger(__name__)


class Severity(str, Enum):
    """How serious a diagnostic is for the batch that produced it."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def log_level(self) -> int:
        return {
            Severity.INFO: logging.INFO,
            Severity.WARNING: logging.WARNING,
            Severity.ERROR: logging.ERROR,
        }[self]


@dataclass
class Diagnostic:
    """A located, coded report of a recoverable problem.

    Attributes:
        code: Error code from the shared ErrorCode enum.
        message: Human-readable description.
        severity: Severity of the problem.
        source: Table or range name the problem was found in.
        row: 1-based row within the source, when applicable.
        column: Column name (tables) or 1-based offset (ranges).
        details: Additional structured details.
    """

    code: ErrorCode
    message: str
    severity: Severity = Severity.ERROR
    source: str | None = None
    row: int | None = None
    column: str | int | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def location(self) -> str:
        """Render the source/row/column triple for log output."""
        parts = []
        if self.source is not None:
            parts.append(self.source)
        if self.row is not None:
            parts.append(f"row {self.row}")
        if self.column is not None:
            parts.append(f"column {self.column}")
        return ", ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for reports."""
        result: dict[str, Any] = {
            "code": self.code.value,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.source is not None:
            result["source"] = self.source
        if self.row is not None:
            result["row"] = self.row
        if self.column is not None:
            result["column"] = self.column
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class DiagnosticLog:
    """Collector shared by the views and indexes of one import.

    Every reported diagnostic is logged immediately at the level matching its
    severity and kept for later inspection.
    """

    def __init__(self, sink: StructuredLogger | None = None) -> None:
        self._entries: list[Diagnostic] = []
        self._logger = sink or logger

    def report(self, diagnostic: Diagnostic) -> Diagnostic:
        """Record and log a diagnostic.

        Args:
            diagnostic: The diagnostic to record.

        Returns:
            The same diagnostic, for chaining into a ReadResult.
        """
        self._entries.append(diagnostic)
        kwargs: dict[str, Any] = {"code": diagnostic.code.value}
        if diagnostic.location:
            kwargs["location"] = diagnostic.location
        self._logger.log(diagnostic.severity.log_level, diagnostic.message, **kwargs)
        return diagnostic

    @property
    def entries(self) -> list[Diagnostic]:
        return list(self._entries)

    def by_code(self, code: ErrorCode) -> list[Diagnostic]:
        return [d for d in self._entries if d.code == code]

    def by_severity(self, severity: Severity) -> list[Diagnostic]:
        return [d for d in self._entries if d.severity == severity]

    @property
    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._entries)


@dataclass
class ReadResult(Generic[T]):
    """Outcome of a typed read.

    ``value`` is always usable: on failure it holds the type's default.
    ``found`` says whether it came from the sheet; ``diagnostics`` holds any
    problems reported while reading. A blank enum cell is ``found=False``
    with no diagnostics.
    """

    value: T
    found: bool = True
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.found and not self.diagnostics

    def value_or(self, fallback: T) -> T:
        """Return the value when found, otherwise ``fallback``."""
        return self.value if self.found else fallback
