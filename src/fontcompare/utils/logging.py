"""Logging utilities for Fontcompare."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog

_HANDLER_MARK = "_fontcompare_handler"


@dataclass
class RunStats:
    """Statistics from a comparison run."""

    selected_count: int = 0
    succeeded_count: int = 0
    failed_count: int = 0
    page_count: int = 0
    failures: list[tuple[str, str]] = field(default_factory=list)
    variant_timings_ms: list[float] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None
    was_cancelled: bool = False
    output_path: Path | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate processing duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def failed_labels(self) -> list[str]:
        """Labels of the variants that failed, in selection order."""
        return [label for label, _ in self.failures]

    @property
    def avg_variant_time_ms(self) -> float | None:
        """Average time spent per variant."""
        if not self.variant_timings_ms:
            return None
        return sum(self.variant_timings_ms) / len(self.variant_timings_ms)

    def failure_summary(self) -> str | None:
        """One-line summary of failed variants, or None if all succeeded."""
        if not self.failures:
            return None
        total = self.succeeded_count + self.failed_count
        return (
            f"{self.failed_count} of {total} variants failed: "
            + ", ".join(self.failed_labels)
        )


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (no file logging if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, do not log to the console at all

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Drop handlers installed by a previous call
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root_logger.removeHandler(handler)
            handler.close()

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        setattr(file_handler, _HANDLER_MARK, True)
        root_logger.addHandler(file_handler)

    if not quiet:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, console_level.upper()))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        setattr(console_handler, _HANDLER_MARK, True)
        root_logger.addHandler(console_handler)

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

    logger = structlog.get_logger("fontcompare")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


class RunLogger:
    """Logger for tracking per-variant progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = RunStats()

    def log_variant_start(self, label: str) -> None:
        """Log start of variant processing."""
        self._logger.debug("Compiling variant", variant=label)

    def log_variant_complete(
        self,
        label: str,
        pages: int,
        duration_ms: float,
    ) -> None:
        """Log successful variant processing."""
        self._logger.info(
            "Variant rendered",
            variant=label,
            pages=pages,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.succeeded_count += 1
        self._stats.page_count += pages
        self._stats.variant_timings_ms.append(duration_ms)

    def log_variant_error(
        self,
        label: str,
        error: str,
        error_type: str | None = None,
        traceback: str | None = None,
    ) -> None:
        """Log variant processing error."""
        self._logger.error(
            "Variant failed",
            variant=label,
            error=error,
            error_type=error_type,
            traceback=traceback,
        )
        self._stats.failed_count += 1
        self._stats.failures.append((label, error))

    def log_page_count_mismatch(self, label: str, expected: int, actual: int) -> None:
        """Log a variant whose page count differs from the first variant."""
        self._logger.warning(
            "Page count differs between variants",
            variant=label,
            expected=expected,
            actual=actual,
        )

    @property
    def stats(self) -> RunStats:
        """Get current run statistics."""
        return self._stats
