"""Tests for diagnostics and read results."""

import logging

import pytest

from recipe_workbook.utils.diagnostics import (
    Diagnostic,
    DiagnosticLog,
    ReadResult,
    Severity,
)
from recipe_workbook.utils.exceptions import ErrorCode


class TestDiagnostic:
    """Tests for the Diagnostic record."""

    def test_location(self) -> None:
        """location joins source, row and column."""
        diagnostic = Diagnostic(
            code=ErrorCode.ROW_OUT_OF_RANGE,
            message="Row 9",
            source="Recipes",
            row=9,
            column="Potion",
        )
        assert diagnostic.location == "Recipes, row 9, column Potion"

    def test_location_empty(self) -> None:
        """A diagnostic without location has an empty location."""
        assert Diagnostic(code=ErrorCode.INTERNAL_ERROR, message="x").location == ""

    def test_to_dict_omits_missing_fields(self) -> None:
        """Only populated fields are included."""
        diagnostic = Diagnostic(
            code=ErrorCode.DUPLICATE_RECIPE,
            message="dup",
            severity=Severity.WARNING,
            row=2,
        )
        assert diagnostic.to_dict() == {
            "code": "E3001",
            "severity": "warning",
            "message": "dup",
            "row": 2,
        }

    def test_str(self) -> None:
        """String form leads with the code."""
        diagnostic = Diagnostic(code=ErrorCode.COLUMN_NOT_FOUND, message="No column")
        assert str(diagnostic) == "[E2001] No column"


class TestDiagnosticLog:
    """Tests for DiagnosticLog."""

    def test_report_records_and_returns(self) -> None:
        """report keeps the diagnostic and hands it back."""
        log = DiagnosticLog()
        diagnostic = Diagnostic(code=ErrorCode.COLUMN_NOT_FOUND, message="x")

        assert log.report(diagnostic) is diagnostic
        assert log.entries == [diagnostic]
        assert len(log) == 1

    def test_report_logs_at_severity(self, caplog: pytest.LogCaptureFixture) -> None:
        """Warnings log at WARNING and errors at ERROR."""
        log = DiagnosticLog()
        with caplog.at_level(logging.INFO):
            log.report(
                Diagnostic(
                    code=ErrorCode.DUPLICATE_RECIPE,
                    message="Duplicate recipe",
                    severity=Severity.WARNING,
                    source="Recipes",
                )
            )
            log.report(Diagnostic(code=ErrorCode.COLUMN_NOT_FOUND, message="No column"))

        levels = [record.levelno for record in caplog.records]
        assert levels == [logging.WARNING, logging.ERROR]
        assert "code=E3001" in caplog.records[0].getMessage()
        assert "location=Recipes" in caplog.records[0].getMessage()

    def test_filters(self) -> None:
        """by_code and by_severity select matching entries."""
        log = DiagnosticLog()
        log.report(
            Diagnostic(
                code=ErrorCode.DUPLICATE_RECIPE, message="a", severity=Severity.WARNING
            )
        )
        log.report(Diagnostic(code=ErrorCode.ROW_OUT_OF_RANGE, message="b"))

        assert len(log.by_code(ErrorCode.DUPLICATE_RECIPE)) == 1
        assert len(log.by_severity(Severity.ERROR)) == 1
        assert log.has_errors is True

    def test_warnings_only_is_not_errors(self) -> None:
        """has_errors ignores warnings."""
        log = DiagnosticLog()
        log.report(
            Diagnostic(
                code=ErrorCode.DUPLICATE_RECIPE, message="a", severity=Severity.WARNING
            )
        )
        assert log.has_errors is False

    def test_clear(self) -> None:
        """clear empties the log."""
        log = DiagnosticLog()
        log.report(Diagnostic(code=ErrorCode.ROW_OUT_OF_RANGE, message="b"))
        log.clear()
        assert list(log) == []


class TestReadResult:
    """Tests for ReadResult."""

    def test_found_value(self) -> None:
        """A plain result is found and ok."""
        result = ReadResult(5)
        assert result.found is True
        assert result.ok is True
        assert result.value_or(9) == 5

    def test_missing_value(self) -> None:
        """A missing result falls back."""
        result: ReadResult[int] = ReadResult(0, found=False)
        assert result.ok is False
        assert result.value_or(9) == 9

    def test_legitimate_zero_is_distinguishable(self) -> None:
        """A real zero is found; a default zero is not."""
        assert ReadResult(0).found is True
        assert ReadResult(0, found=False).found is False
