"""Structured logging setup for buildport.

Library modules only emit events through ``structlog.get_logger(__name__)``;
applications (the CLI, a build-tool plugin) decide how they are rendered
by calling :func:`configure_logging` once at startup.
"""

from __future__ import annotations

import logging
from typing import Any

import structlog

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for buildport.

    Events are routed through the standard library root logger, which
    writes to stderr, so they never mix with command output on stdout.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Raises:
        ValueError: If ``log_level`` is not a known level name.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    level_name = log_level.upper()
    if level_name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {log_level}")

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(1, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s")
    logging.getLogger().setLevel(getattr(logging, level_name))
