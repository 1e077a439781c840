"""Structured logging with run_id support.

Uses structlog for structured logging with JSON or console output.
Entries logged during a simulation carry its run_id.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

from vending_monitor.core.enums import LogFormat

# Context var for run_id propagation
_run_id: ContextVar[str] = ContextVar("run_id", default="")


def get_run_id() -> str:
    """Current run ID, or an empty string outside a run."""
    return _run_id.get()


def new_run_id() -> str:
    """Generate and set a new run ID."""
    rid = str(uuid.uuid4())
    _run_id.set(rid)
    return rid


def _add_run_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: add run_id to entries logged during a run."""
    rid = get_run_id()
    if rid:
        event_dict["run_id"] = rid
    return event_dict


def setup_logging(
    level: str = "INFO",
    format: LogFormat | str = LogFormat.CONSOLE,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: "json" for machine-readable output, "console" for humans.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        _add_run_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if LogFormat(format) is LogFormat.JSON:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a module."""
    return structlog.get_logger(name)
