"""Logging utilities for image-extrude."""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

import structlog


@dataclass
class PipelineStats:
    """Statistics from one pipeline run."""

    requested_mode: str | None = None
    effective_mode: str | None = None
    mode_coerced: bool = False
    fell_back: bool = False
    error_type: str | None = None
    error_stage: str | None = None
    stage_durations_ms: dict[str, float] = field(default_factory=dict)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate total run duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure structured logging to stderr and an optional file.

    Args:
        log_file: Path to log file, None to skip file output
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
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

    logger = structlog.get_logger("image_extrude")
    logger.debug(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=console_level,
    )

    return logger


class PipelineLogger:
    """Logger for tracking pipeline stages and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._logger = logger or structlog.get_logger("image_extrude.pipeline")
        self._stats = PipelineStats()

    def log_run_start(self, source: str, mode: str) -> None:
        """Log start of a pipeline run."""
        self._stats.start_time = time.time()
        self._stats.requested_mode = mode
        self._logger.debug("Pipeline started", source=source, mode=mode)

    def log_run_complete(self, triangles: int) -> None:
        """Log end of a pipeline run."""
        self._stats.end_time = time.time()
        self._logger.info(
            "Pipeline complete",
            mode=self._stats.effective_mode,
            triangles=triangles,
            fell_back=self._stats.fell_back,
            duration_ms=round(self._stats.duration_seconds * 1000, 2),
        )

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        """Time a pipeline stage.

        Example:
            with pipeline_logger.stage("trace"):
                section = trace_image(...)
        """
        self._logger.debug("Stage started", stage=name)
        started = time.perf_counter()
        yield
        duration_ms = (time.perf_counter() - started) * 1000
        self._stats.stage_durations_ms[name] = duration_ms
        self._logger.debug("Stage complete", stage=name, duration_ms=round(duration_ms, 2))

    def log_mode(self, requested: str, effective: str, mime_type: str | None) -> None:
        """Log the effective processing mode, warning when it was coerced."""
        self._stats.effective_mode = effective
        if requested != effective:
            self._stats.mode_coerced = True
            self._logger.warning(
                "Sample mode requested for non-vector source; using trace",
                requested=requested,
                effective=effective,
                mime_type=mime_type,
            )

    def log_fallback(self, error: Exception, stage: str) -> None:
        """Log a failure replaced by the placeholder solid."""
        self._logger.warning(
            "Pipeline failed; substituting placeholder solid",
            error=str(error),
            error_type=type(error).__name__,
            stage=stage,
        )
        self._stats.fell_back = True
        self._record_error(error, stage)

    def log_failure(self, error: Exception, stage: str) -> None:
        """Log a failure that is propagated to the caller."""
        self._logger.error(
            "Pipeline failed",
            error=str(error),
            error_type=type(error).__name__,
            stage=stage,
        )
        self._record_error(error, stage)

    def _record_error(self, error: Exception, stage: str) -> None:
        self._stats.error_type = type(error).__name__
        self._stats.error_stage = stage
        self._stats.end_time = time.time()

    @property
    def stats(self) -> PipelineStats:
        """Get current pipeline statistics."""
        return self._stats
