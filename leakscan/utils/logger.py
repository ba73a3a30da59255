"""Structured logging utilities for leakscan.

This module provides structured logging using structlog.
Logs are written to stderr: stdout belongs to the result aggregator and
must never carry anything but match output.
"""

import logging
import sys
import time
from contextvars import ContextVar
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

# Context variable for worker tracking
worker_id_var: ContextVar[Optional[int]] = ContextVar("worker_id", default=None)


def add_worker_id(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add worker id to log context if available."""
    worker_id = worker_id_var.get()
    if worker_id is not None:
        event_dict["worker"] = worker_id
    return event_dict


def add_timestamp(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add epoch timestamp to log entries."""
    event_dict["timestamp"] = time.time()
    return event_dict


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # sys.stderr is looked up on every call so redirection is honoured.
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    silent: bool = False,
) -> None:
    """Configure structured logging for the scanner.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format. If False, use console format.
        silent: If True, every log call is swallowed (``-s`` flag).
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_worker_id,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.insert(2, add_timestamp)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.extend([
            structlog.dev.ConsoleRenderer(colors=True),
        ])

    if silent:
        logger_factory: Any = structlog.ReturnLoggerFactory()
    else:
        logger_factory = _stderr_logger

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = "leakscan") -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


class PerformanceLogger:
    """Context manager for tracking operation performance."""

    def __init__(self, operation: str, logger: Optional[structlog.stdlib.BoundLogger] = None):
        """Initialize performance logger.

        Args:
            operation: Name of the operation being timed
            logger: Logger instance to use (creates new if None)
        """
        self.operation = operation
        self.logger = logger or get_logger()
        self.start_time: float = 0
        self.end_time: float = 0

    def __enter__(self) -> "PerformanceLogger":
        """Start timing."""
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Stop timing and log performance."""
        self.end_time = time.perf_counter()
        duration_ms = (self.end_time - self.start_time) * 1000

        if exc_type is not None:
            self.logger.debug(
                f"{self.operation} failed",
                operation=self.operation,
                duration_ms=duration_ms,
                error=str(exc_val),
            )
        else:
            self.logger.debug(
                f"{self.operation} completed",
                operation=self.operation,
                duration_ms=duration_ms,
            )

    @property
    def duration_ms(self) -> float:
        """Get duration in milliseconds."""
        if self.end_time == 0:
            return (time.perf_counter() - self.start_time) * 1000
        return (self.end_time - self.start_time) * 1000


def set_worker_id(worker_id: int) -> None:
    """Bind a worker number to every log line emitted by the current task.

    Each asyncio task runs in its own copy of the context, so the value
    never leaks between workers.
    """
    worker_id_var.set(worker_id)


# Sensible defaults until run.main() reconfigures from the CLI flags.
configure_logging()
