# src/ghbackup/core/logging.py
"""Structured logging setup.

All modules log through structlog so that events carry key/value context
(checkpoint ids, remaining budget, paths) instead of formatted strings.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # Look up stderr per logger so redirected streams are honoured
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: str = "info", json_output: bool = False) -> None:
    """Configure structlog for the process.

    Args:
        level: Minimum level name (debug, info, warning, error)
        json_output: Render one JSON object per line instead of console output
    """
    numeric_level = _LEVELS[level.lower()]

    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Get a bound structlog logger.

    Args:
        name: Logger name, usually ``__name__``
        **initial_values: Context bound to every event from this logger
    """
    if name is not None:
        initial_values.setdefault("logger_name", name)
    return structlog.get_logger(**initial_values)
