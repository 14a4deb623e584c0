"""Structured logging setup for tunnelctl.

Library modules log through the stdlib ``logging`` module or structlog;
this module routes both through one structlog pipeline.
"""

from __future__ import annotations

import logging
from typing import Any

import structlog

# Environment variable for the log level
LOG_LEVEL_ENV_VAR = "TUNNELCTL_LOG_LEVEL"

# Log level used when nothing is configured
DEFAULT_LOG_LEVEL = "WARNING"


def configure_logging(
    *,
    log_level: str = DEFAULT_LOG_LEVEL,
    json_format: bool = False,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON. If False, output human-readable lines.
        add_timestamp: If True, add an ISO timestamp to log entries.

    Raises:
        ValueError: If log_level is not a known level name.

    Example:
        >>> configure_logging(log_level="DEBUG")
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(1, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", level=level, force=True)
