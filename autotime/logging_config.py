"""
Tool: Logging
Purpose: structlog over stdlib logging for autotime runs

Console output on stderr by default, JSON lines with AUTOTIME_LOG_FORMAT=json.
Set AUTOTIME_LOG_FILE to also append JSON lines to a file, which is handy
when the autofill runs unattended from cron.

Every event logged while a run is active carries the run's context
(run_id, dry_run, window_days) through structlog contextvars.

Usage:
    from autotime.logging_config import get_logger, run_context, setup_logging

    setup_logging()
    logger = get_logger(__name__)

    with run_context(dry_run=True, window_days=5):
        logger.info("history_aggregated", entries=42)
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

# Third-party loggers that are chatty at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _handler(handler: logging.Handler, renderer: structlog.types.Processor) -> logging.Handler:
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    return handler


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    log_file: str | Path | None = None,
) -> None:
    """
    Configure structlog and the root stdlib logger.

    Args:
        level: Level name (default: AUTOTIME_LOG_LEVEL or INFO)
        json_output: JSON renderer on stderr (default: AUTOTIME_LOG_FORMAT == "json")
        log_file: Also append JSON lines here (default: AUTOTIME_LOG_FILE)
    """
    level = level or os.environ.get("AUTOTIME_LOG_LEVEL", "INFO")
    if json_output is None:
        json_output = os.environ.get("AUTOTIME_LOG_FORMAT", "").lower() == "json"
    log_file = log_file or os.environ.get("AUTOTIME_LOG_FILE") or None

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    console_renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )
    handlers = [_handler(logging.StreamHandler(sys.stderr), console_renderer)]

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            _handler(logging.FileHandler(path, encoding="utf-8"), structlog.processors.JSONRenderer())
        )

    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)
        old.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


@contextmanager
def run_context(**values) -> Iterator[str]:
    """Bind a fresh run_id plus ``values`` to every event logged inside the block."""
    run_id = uuid.uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(run_id=run_id, **values):
        yield run_id


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["NOISY_LOGGERS", "get_logger", "run_context", "setup_logging"]
