"""Structured logging for OpsDesk.

structlog builds the event dict; the stdlib ``logging`` tree delivers it. Every
event reaches the root handlers: the console stream (stderr, so stdout stays
free for command output) and, when configured, a rotating JSON file.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

import structlog

LOG_FILE_NAME = "opsdesk.log"

# Applied to structlog events and to plain stdlib records alike
_SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def _formatter(renderer) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def setup_logging(
    debug: bool = False,
    log_dir: str | None = "logs",
    log_max_bytes: int = 10_000_000,
    log_backup_count: int = 5,
) -> None:
    """Configure structured logging for the command center.

    The console gets JSON lines, or human-readable lines in debug mode. The
    file in ``log_dir`` always gets JSON lines. Calling this again replaces the
    previous handlers.
    """
    log_level = logging.DEBUG if debug else logging.INFO

    structlog.configure(
        processors=_SHARED_PROCESSORS + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(log_level)
    console.setFormatter(_formatter(
        structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()
    ))
    root_logger.addHandler(console)

    if not log_dir:
        return

    try:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, LOG_FILE_NAME),
            maxBytes=log_max_bytes,
            backupCount=log_backup_count,
            encoding="utf-8",
        )
    except OSError as exc:
        root_logger.warning("log file unavailable in %s: %s", log_dir, exc)
        return

    file_handler.setLevel(log_level)
    file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    root_logger.addHandler(file_handler)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a named structured logger."""
    return structlog.get_logger(name)
