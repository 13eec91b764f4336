"""Tests for the structured logging utilities."""

import logging
from unittest.mock import MagicMock, patch

from recipe_workbook.utils.logging import (
    LogContext,
    PerformanceMetrics,
    ProgressTracker,
    StructuredLogFormatter,
    StructuredLogger,
    clear_context,
    configure_logging,
    get_extra_context,
    get_import_id,
    get_logger,
    get_workbook,
    set_extra_context,
    set_import_id,
    set_workbook,
    timed_operation,
)


def _record(message: str = "Test message") -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=message,
        args=(),
        exc_info=None,
    )


class TestContextVariables:
    """Tests for context variable management."""

    def setup_method(self) -> None:
        """Clear context before each test."""
        clear_context()

    def teardown_method(self) -> None:
        """Clear context after each test."""
        clear_context()

    def test_import_id_default_none(self) -> None:
        """Import ID should default to None."""
        assert get_import_id() is None

    def test_set_and_get_import_id(self) -> None:
        """Should be able to set and get import ID."""
        set_import_id("imp-123")
        assert get_import_id() == "imp-123"

    def test_set_and_get_workbook(self) -> None:
        """Should be able to set and get the workbook label."""
        set_workbook("PotionCrafting.xlsx")
        assert get_workbook() == "PotionCrafting.xlsx"

    def test_extra_context_default_empty(self) -> None:
        """Extra context should default to empty dict."""
        assert get_extra_context() == {}

    def test_clear_context(self) -> None:
        """clear_context should reset all context variables."""
        set_import_id("imp-123")
        set_workbook("book.xlsx")
        set_extra_context({"table": "Recipes"})

        clear_context()

        assert get_import_id() is None
        assert get_workbook() is None
        assert get_extra_context() == {}


class TestPerformanceMetrics:
    """Tests for PerformanceMetrics dataclass."""

    def test_initialization(self) -> None:
        """Metrics should start at zero."""
        metrics = PerformanceMetrics(operation="import")
        assert metrics.operation == "import"
        assert metrics.end_time is None
        assert metrics.rows_read == 0
        assert metrics.recipes_added == 0

    def test_finish_sets_end_time(self) -> None:
        """finish should record the end time and a non-negative duration."""
        metrics = PerformanceMetrics(operation="import")
        metrics.finish()
        assert metrics.end_time is not None
        assert metrics.duration_seconds >= 0

    def test_to_dict_excludes_zero_values(self) -> None:
        """to_dict should only include non-zero counters."""
        metrics = PerformanceMetrics(operation="import", recipes_added=4)
        result = metrics.to_dict()

        assert result["operation"] == "import"
        assert result["recipes_added"] == 4
        assert "duplicates" not in result
        assert "rows_read" not in result

    def test_to_dict_with_custom_metrics(self) -> None:
        """Custom metrics should be included when present."""
        metrics = PerformanceMetrics(operation="import")
        metrics.custom_metrics["tables"] = 3
        assert metrics.to_dict()["custom_metrics"] == {"tables": 3}


class TestStructuredLogger:
    """Tests for StructuredLogger class."""

    def setup_method(self) -> None:
        """Set up test fixtures."""
        self.logger = get_logger("test_logger")

    def test_get_logger_returns_structured_logger(self) -> None:
        """get_logger should return StructuredLogger."""
        assert isinstance(get_logger(__name__), StructuredLogger)

    def test_logger_property(self) -> None:
        """Logger property should return underlying Python logger."""
        assert isinstance(self.logger.logger, logging.Logger)

    def test_build_message_without_kwargs(self) -> None:
        """_build_message without kwargs should return original message."""
        assert self.logger._build_message("Test message") == "Test message"

    def test_build_message_with_kwargs(self) -> None:
        """_build_message with kwargs should include key-value pairs."""
        msg = self.logger._build_message("Grew table", table="Recipes", added_rows=2)
        assert msg == "Grew table | table=Recipes, added_rows=2"

    @patch.object(logging.Logger, "info")
    def test_info_logging(self, mock_info: MagicMock) -> None:
        """Info method should log at INFO level."""
        self.logger.info("Created item", name="Herb")
        mock_info.assert_called_once()
        assert "name=Herb" in mock_info.call_args[0][0]

    @patch.object(logging.Logger, "warning")
    def test_warning_logging(self, mock_warning: MagicMock) -> None:
        """Warning method should log at WARNING level."""
        self.logger.warning("Test warning")
        mock_warning.assert_called_once()

    @patch.object(logging.Logger, "error")
    def test_error_logging(self, mock_error: MagicMock) -> None:
        """Error method should pass exc_info through."""
        self.logger.error("Test error", exc_info=True)
        mock_error.assert_called_once()
        assert mock_error.call_args.kwargs["exc_info"] is True

    @patch.object(logging.Logger, "log")
    def test_log_with_explicit_level(self, mock_log: MagicMock) -> None:
        """log should forward the given level."""
        self.logger.log(logging.WARNING, "Duplicate", code="E3001")
        assert mock_log.call_args[0][0] == logging.WARNING
        assert "code=E3001" in mock_log.call_args[0][1]

    @patch.object(logging.Logger, "info")
    def test_log_performance(self, mock_info: MagicMock) -> None:
        """log_performance should log metrics."""
        metrics = PerformanceMetrics(operation="import", rows_read=12)
        self.logger.log_performance(metrics)
        call_args = mock_info.call_args[0][0]
        assert "Performance: import" in call_args
        assert "rows_read=12" in call_args

    @patch.object(logging.Logger, "debug")
    def test_log_progress(self, mock_debug: MagicMock) -> None:
        """log_progress should log progress information at DEBUG."""
        self.logger.log_progress("Importing Potions", current=5, total=10)
        call_args = mock_debug.call_args[0][0]
        assert "Progress: Importing Potions" in call_args
        assert "50.0%" in call_args

    @patch.object(logging.Logger, "log")
    def test_log_import_result_success(self, mock_log: MagicMock) -> None:
        """A clean import should be logged at INFO."""
        self.logger.log_import_result(
            workbook="book.xlsx",
            items=5,
            recipes=2,
            duplicates=0,
            errors=0,
            duration_seconds=0.25,
        )
        assert mock_log.call_args[0][0] == logging.INFO
        assert "Import completed" in mock_log.call_args[0][1]
        assert "recipes=2" in mock_log.call_args[0][1]

    @patch.object(logging.Logger, "log")
    def test_log_import_result_with_errors(self, mock_log: MagicMock) -> None:
        """An import with error diagnostics should be logged at ERROR."""
        self.logger.log_import_result(
            workbook="book.xlsx",
            items=5,
            recipes=2,
            duplicates=1,
            errors=3,
            duration_seconds=0.25,
        )
        assert mock_log.call_args[0][0] == logging.ERROR


class TestLogContext:
    """Tests for LogContext context manager."""

    def setup_method(self) -> None:
        """Clear context before each test."""
        clear_context()

    def teardown_method(self) -> None:
        """Clear context after each test."""
        clear_context()

    def test_context_sets_values(self) -> None:
        """LogContext should set context values within block."""
        with LogContext(import_id="imp-1", workbook="book.xlsx", table="Recipes"):
            assert get_import_id() == "imp-1"
            assert get_workbook() == "book.xlsx"
            assert get_extra_context() == {"table": "Recipes"}

    def test_context_restores_values(self) -> None:
        """LogContext should restore original values after block."""
        set_import_id("original")
        set_extra_context({"original": "value"})

        with LogContext(import_id="new", table="Recipes"):
            assert get_import_id() == "new"

        assert get_import_id() == "original"
        assert get_extra_context() == {"original": "value"}

    def test_nested_contexts(self) -> None:
        """Nested LogContext should work correctly."""
        with LogContext(workbook="outer.xlsx"):
            with LogContext(workbook="inner.xlsx"):
                assert get_workbook() == "inner.xlsx"
            assert get_workbook() == "outer.xlsx"
        assert get_workbook() is None


class TestTimedOperation:
    """Tests for timed_operation context manager."""

    @patch.object(StructuredLogger, "log_performance")
    def test_timed_operation_logs_metrics(self, mock_log: MagicMock) -> None:
        """timed_operation should log metrics on exit."""
        with timed_operation(get_logger("test"), "import") as metrics:
            metrics.recipes_added = 3

        logged_metrics = mock_log.call_args[0][0]
        assert logged_metrics.operation == "import"
        assert logged_metrics.recipes_added == 3
        assert logged_metrics.end_time is not None

    @patch.object(StructuredLogger, "log_performance")
    def test_timed_operation_logs_on_error(self, mock_log: MagicMock) -> None:
        """Metrics are logged even when the block raises."""
        try:
            with timed_operation(get_logger("test"), "import"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        mock_log.assert_called_once()


class TestProgressTracker:
    """Tests for ProgressTracker class."""

    @patch.object(StructuredLogger, "log_progress")
    def test_update_with_interval(self, mock_log: MagicMock) -> None:
        """update should respect log_interval."""
        tracker = ProgressTracker(get_logger("test"), "Importing", total=10, log_interval=5)
        for _ in range(4):
            tracker.update()
        assert mock_log.call_count == 0
        tracker.update()
        assert mock_log.call_count == 1
        assert tracker.current == 5

    @patch.object(StructuredLogger, "log_progress")
    def test_zero_interval_logs_every_update(self, mock_log: MagicMock) -> None:
        """A non-positive interval is treated as one."""
        tracker = ProgressTracker(get_logger("test"), "Importing", total=3, log_interval=0)
        tracker.update()
        tracker.update()
        assert mock_log.call_count == 2

    @patch.object(StructuredLogger, "info")
    def test_complete_logs_summary(self, mock_info: MagicMock) -> None:
        """complete should log once and return a duration."""
        tracker = ProgressTracker(get_logger("test"), "Importing", total=0)
        assert tracker.complete() >= 0
        mock_info.assert_called_once()


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_with_string_level(self) -> None:
        """configure_logging should accept string level."""
        configure_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_configure_with_structured_formatter(self) -> None:
        """configure_logging should use StructuredLogFormatter by default."""
        configure_logging(level=logging.WARNING)
        root_logger = logging.getLogger()
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, StructuredLogFormatter)

    def test_configure_without_structured_formatter(self) -> None:
        """configure_logging can use standard formatter."""
        configure_logging(use_structured_formatter=False)
        handler = logging.getLogger().handlers[0]
        assert not isinstance(handler.formatter, StructuredLogFormatter)


class TestStructuredLogFormatter:
    """Tests for StructuredLogFormatter class."""

    def setup_method(self) -> None:
        """Clear context before each test."""
        clear_context()

    def teardown_method(self) -> None:
        """Clear context after each test."""
        clear_context()

    def test_format_without_context(self) -> None:
        """Formatter should leave the message alone without context."""
        formatter = StructuredLogFormatter("%(message)s")
        assert formatter.format(_record()) == "Test message"

    def test_format_with_import_context(self) -> None:
        """Formatter should prefix import_id and workbook when set."""
        set_import_id("imp-123")
        set_workbook("book.xlsx")
        formatter = StructuredLogFormatter("%(message)s")
        result = formatter.format(_record())
        assert result == "[import_id=imp-123 workbook=book.xlsx] Test message"

    def test_format_with_extra_context(self) -> None:
        """Formatter should include extra context."""
        set_extra_context({"table": "Recipes"})
        formatter = StructuredLogFormatter("%(message)s")
        assert "table=Recipes" in formatter.format(_record())

    def test_format_does_not_mutate_record(self) -> None:
        """The record message is restored after formatting."""
        set_import_id("imp-123")
        record = _record()
        StructuredLogFormatter("%(message)s").format(record)
        assert record.msg == "Test message"
