"""Structured logging utilities for recipe workbook import.

This module provides:
- Import ID and workbook tracking using contextvars for correlation
- Structured logging with consistent format and metadata
- Performance metrics logging helpers
- Progress tracking for row-by-row imports

Usage:
    from recipe_workbook.utils.logging import (
        get_logger,
        set_import_id,
        LogContext,
    )

    logger = get_logger(__name__)

    # Set import ID for correlation
    set_import_id("abc-123")

    # Log with context
    with LogContext(workbook="PotionCrafting.xlsx", table="Recipes"):
        logger.info("Importing recipes")

    # Log performance metrics
    with timed_operation(logger, "import_recipes") as metrics:
        metrics.rows_read += 1
"""

import logging
import time
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

# Context variables for import tracking
_import_id_var: ContextVar[str | None] = ContextVar("import_id", default=None)
_workbook_var: ContextVar[str | None] = ContextVar("workbook", default=None)
_extra_context_var: ContextVar[dict[str, Any] | None] = ContextVar(
    "extra_context", default=None
)


def get_import_id() -> str | None:
    """Get the current import ID from context.

    Returns:
        The current import ID or None if not set.
    """
    return _import_id_var.get()


def set_import_id(import_id: str | None) -> None:
    """Set the import ID in context.

    Args:
        import_id: The import ID to set, or None to clear.
    """
    _import_id_var.set(import_id)


def get_workbook() -> str | None:
    """Get the workbook being processed from context."""
    return _workbook_var.get()


def set_workbook(workbook: str | None) -> None:
    """Set the workbook being processed in context."""
    _workbook_var.set(workbook)


def get_extra_context() -> dict[str, Any]:
    """Get additional context from context vars.

    Returns:
        Dictionary of extra context values.
    """
    ctx = _extra_context_var.get()
    return ctx if ctx is not None else {}


def set_extra_context(context: dict[str, Any]) -> None:
    """Set additional context in context vars.

    Args:
        context: Dictionary of extra context values.
    """
    _extra_context_var.set(context)


def clear_context() -> None:
    """Clear all context variables."""
    _import_id_var.set(None)
    _workbook_var.set(None)
    _extra_context_var.set(None)


@dataclass
class PerformanceMetrics:
    """Container for performance metrics during an import.

    Attributes:
        operation: Name of the operation being measured.
        start_time: When the operation started.
        end_time: When the operation ended.
        duration_seconds: Duration in seconds.
        rows_read: Number of table rows read.
        rows_written: Number of table rows written.
        items_imported: Number of catalog items created or updated.
        recipes_added: Number of recipes registered.
        duplicates: Number of duplicate recipes discarded.
        diagnostics: Number of diagnostics reported.
        custom_metrics: Additional custom metrics.
    """

    operation: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None
    duration_seconds: float = 0.0
    rows_read: int = 0
    rows_written: int = 0
    items_imported: int = 0
    recipes_added: int = 0
    duplicates: int = 0
    diagnostics: int = 0
    custom_metrics: dict[str, Any] = field(default_factory=dict)

    def finish(self) -> None:
        """Mark the operation as complete and calculate duration."""
        self.end_time = datetime.now(UTC)
        self.duration_seconds = (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging.

        Returns:
            Dictionary with all non-zero metrics.
        """
        result: dict[str, Any] = {
            "operation": self.operation,
            "duration_seconds": self.duration_seconds,
        }
        for name in (
            "rows_read",
            "rows_written",
            "items_imported",
            "recipes_added",
            "duplicates",
            "diagnostics",
        ):
            value = getattr(self, name)
            if value > 0:
                result[name] = value
        if self.custom_metrics:
            result["custom_metrics"] = self.custom_metrics
        return result


class StructuredLogFormatter(logging.Formatter):
    """Log formatter that includes context variables.

    Adds import_id, workbook and any extra context to log records when
    available, creating a consistent structured format for all messages.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with context information.

        Args:
            record: The log record to format.

        Returns:
            Formatted log message string.
        """
        prefix_parts = []
        import_id = get_import_id()
        if import_id:
            prefix_parts.append(f"import_id={import_id}")
        workbook = get_workbook()
        if workbook:
            prefix_parts.append(f"workbook={workbook}")
        for key, value in get_extra_context().items():
            prefix_parts.append(f"{key}={value}")

        prefix = f"[{' '.join(prefix_parts)}] " if prefix_parts else ""

        original_msg = record.msg
        record.msg = f"{prefix}{original_msg}"
        result = super().format(record)
        record.msg = original_msg

        return result


class StructuredLogger:
    """Enhanced logger with structured logging capabilities.

    Wraps a standard Python logger with additional methods for:
    - Logging with key=value pairs
    - Performance metrics logging
    - Progress tracking
    - Import summaries
    """

    def __init__(self, name: str) -> None:
        """Initialize the structured logger.

        Args:
            name: Logger name (typically __name__ of the module).
        """
        self._logger = logging.getLogger(name)
        self._name = name

    @property
    def logger(self) -> logging.Logger:
        """Access the underlying Python logger."""
        return self._logger

    def _build_message(
        self,
        message: str,
        **kwargs: Any,
    ) -> str:
        """Build a message with structured key-value pairs.

        Args:
            message: Base message.
            **kwargs: Additional key-value pairs to include.

        Returns:
            Formatted message string.
        """
        if not kwargs:
            return message

        parts = [f"{k}={v}" for k, v in kwargs.items()]
        return f"{message} | {', '.join(parts)}"

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message."""
        self._logger.debug(self._build_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info message."""
        self._logger.info(self._build_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning message."""
        self._logger.warning(self._build_message(message, **kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log an error message.

        Args:
            message: Log message.
            exc_info: Whether to include exception info.
            **kwargs: Additional structured data.
        """
        self._logger.error(self._build_message(message, **kwargs), exc_info=exc_info)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an exception with traceback."""
        self._logger.exception(self._build_message(message, **kwargs))

    def log(self, level: int, message: str, **kwargs: Any) -> None:
        """Log a message at an explicit level."""
        self._logger.log(level, self._build_message(message, **kwargs))

    def log_performance(self, metrics: PerformanceMetrics) -> None:
        """Log performance metrics.

        Args:
            metrics: Performance metrics to log.
        """
        self.info(
            f"Performance: {metrics.operation}",
            **metrics.to_dict(),
        )

    def log_progress(
        self,
        stage: str,
        current: int,
        total: int,
        details: str | None = None,
    ) -> None:
        """Log progress for long-running operations.

        Args:
            stage: Current processing stage.
            current: Current progress count.
            total: Total items to process.
            details: Optional additional details.
        """
        percentage = (current / total * 100) if total > 0 else 0
        kwargs: dict[str, Any] = {
            "current": current,
            "total": total,
            "percentage": f"{percentage:.1f}%",
        }
        if details:
            kwargs["details"] = details
        self.debug(f"Progress: {stage}", **kwargs)

    def log_import_result(
        self,
        workbook: str,
        items: int,
        recipes: int,
        duplicates: int,
        errors: int,
        duration_seconds: float,
    ) -> None:
        """Log import completion.

        Logged at ERROR when any error diagnostic was reported, INFO otherwise.

        Args:
            workbook: Workbook that was imported.
            items: Number of catalog items touched.
            recipes: Number of recipes registered.
            duplicates: Number of duplicate recipes discarded.
            errors: Number of error diagnostics.
            duration_seconds: Total processing time.
        """
        level = logging.ERROR if errors else logging.INFO
        self.log(
            level,
            "Import completed",
            workbook=workbook,
            items=items,
            recipes=recipes,
            duplicates=duplicates,
            errors=errors,
            duration_seconds=f"{duration_seconds:.2f}",
        )


class LogContext:
    """Context manager for adding temporary context to logs.

    Usage:
        with LogContext(workbook="Potions.xlsx", table="Recipes"):
            logger.info("Processing...")  # Includes workbook and table
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize with context values.

        Args:
            **kwargs: Key-value pairs to add to log context.
        """
        self._new_context = kwargs
        self._old_context: dict[str, Any] = {}
        self._old_import_id: str | None = None
        self._old_workbook: str | None = None

    def __enter__(self) -> "LogContext":
        """Enter the context, saving old values and setting new ones."""
        self._old_context = get_extra_context().copy()
        self._old_import_id = get_import_id()
        self._old_workbook = get_workbook()

        new_context = dict(self._new_context)
        import_id = new_context.pop("import_id", None)
        workbook = new_context.pop("workbook", None)

        if import_id is not None:
            set_import_id(import_id)
        if workbook is not None:
            set_workbook(workbook)

        merged = self._old_context.copy()
        merged.update(new_context)
        set_extra_context(merged)

        return self

    def __exit__(self, *args: Any) -> None:
        """Exit the context, restoring old values."""
        set_extra_context(self._old_context)
        set_import_id(self._old_import_id)
        set_workbook(self._old_workbook)


@contextmanager
def timed_operation(
    logger: StructuredLogger,
    operation: str,
) -> Generator[PerformanceMetrics, None, None]:
    """Context manager for timing operations.

    Usage:
        with timed_operation(logger, "import_recipes") as metrics:
            metrics.recipes_added += 1

        # Logs: "Performance: import_recipes | duration_seconds=..."

    Args:
        logger: Logger to use for output.
        operation: Name of the operation.

    Yields:
        PerformanceMetrics instance for tracking.
    """
    metrics = PerformanceMetrics(operation=operation)
    try:
        yield metrics
    finally:
        metrics.finish()
        logger.log_performance(metrics)


def configure_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
    use_structured_formatter: bool = True,
) -> None:
    """Configure logging for the application.

    Args:
        level: Log level (int or string like "INFO").
        format_string: Custom format string (uses default if None).
        use_structured_formatter: Whether to use the structured formatter.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)

    formatter: logging.Formatter
    if use_structured_formatter:
        formatter = StructuredLogFormatter(format_string)
    else:
        formatter = logging.Formatter(format_string)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        StructuredLogger instance.

    Example:
        logger = get_logger(__name__)
        logger.info("Imported items", category="Ingredients", count=12)
    """
    return StructuredLogger(name)


class ProgressTracker:
    """Helper for tracking and logging progress of multi-row operations.

    Usage:
        tracker = ProgressTracker(logger, "Importing recipes", total=table.row_count)
        for row in range(1, table.row_count + 1):
            import_row(row)
            tracker.update()
        tracker.complete()
    """

    def __init__(
        self,
        logger: StructuredLogger,
        stage: str,
        total: int,
        log_interval: int = 1,
    ) -> None:
        """Initialize the progress tracker.

        Args:
            logger: Logger to use.
            stage: Description of the stage being tracked.
            total: Total number of items.
            log_interval: Log every N updates (1 = every update).
        """
        self._logger = logger
        self._stage = stage
        self._total = total
        self._current = 0
        self._log_interval = max(1, log_interval)
        self._start_time = time.time()

    @property
    def current(self) -> int:
        """Number of items processed so far."""
        return self._current

    def update(
        self,
        increment: int = 1,
        details: str | None = None,
    ) -> None:
        """Update progress.

        Args:
            increment: Number of items completed.
            details: Optional details about current item.
        """
        self._current += increment
        if self._current % self._log_interval == 0 or self._current == self._total:
            self._logger.log_progress(
                self._stage,
                self._current,
                self._total,
                details,
            )

    def complete(self) -> float:
        """Mark progress as complete.

        Returns:
            Total duration in seconds.
        """
        duration = time.time() - self._start_time
        self._logger.info(
            f"Completed: {self._stage}",
            total_items=self._total,
            duration_seconds=f"{duration:.2f}",
        )
        return duration
