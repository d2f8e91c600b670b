"""Logging utilities for Bezierforge."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog

_HANDLER_MARK = "_bezierforge_handler"


@dataclass
class ImportStats:
    """Statistics from one import run."""

    imported_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    truncated_objects: int = 0
    dropped_objects: int = 0
    point_count: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate import duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


def _install(handler: logging.Handler, root_logger: logging.Logger) -> None:
    setattr(handler, _HANDLER_MARK, True)
    root_logger.addHandler(handler)


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure structured logging to the console and an optional file.

    Handlers installed by an earlier call are replaced, so the function is
    safe to call more than once per process.

    Args:
        log_file: Path to log file (no file logging if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    _install(console_handler, root_logger)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        _install(file_handler, root_logger)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("bezierforge")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=console_level,
    )

    return logger


class ImportLogger:
    """Logger for tracking import progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._logger = logger or structlog.get_logger("bezierforge.import")
        self._stats = ImportStats()

    def log_object_imported(self, name: str, point_count: int, truncated: bool = False) -> None:
        """Log a successfully imported object."""
        self._logger.debug(
            "Object imported",
            object=name,
            points=point_count,
            truncated=truncated,
        )
        self._stats.imported_count += 1
        self._stats.point_count += point_count
        if truncated:
            self._stats.truncated_objects += 1

    def log_object_skipped(self, name: str, reason: str) -> None:
        """Log an object that produced no usable geometry."""
        self._logger.debug("Object skipped", object=name, reason=reason)
        self._stats.skipped_count += 1

    def log_object_error(self, name: str, error: Exception) -> None:
        """Log an object that failed to import."""
        self._logger.error(
            "Object import failed",
            object=name,
            error=str(error),
            error_type=type(error).__name__,
        )
        self._stats.error_count += 1
        self._stats.errors.append((name, str(error)))

    def log_limit(self, available: int, limit: int) -> None:
        """Log that candidates beyond the object cap were dropped."""
        message = f"Imported the first {limit} of {available} objects"
        self._logger.warning("Object limit reached", available=available, limit=limit)
        self._stats.dropped_objects += available - limit
        self._stats.warnings.append(message)

    def log_warning(self, message: str, **context: object) -> None:
        """Record a user-facing warning."""
        self._logger.warning(message, **context)
        self._stats.warnings.append(message)

    def log_chunk(self, chunk_index: int, processed: int, total: int) -> None:
        """Log completion of one chunk."""
        self._logger.debug("Chunk processed", chunk=chunk_index, processed=processed, total=total)

    @property
    def stats(self) -> ImportStats:
        """Get current import statistics."""
        return self._stats
