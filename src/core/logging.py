"""Logging configuration for the rental leverage model.

structlog renders on top of the standard library. Console output by
default, JSON lines for batch runs. Events logged inside ``run_context``
carry that run's identifiers, so interleaved sweep runs stay separable.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import structlog

LOG_DIR = Path(__file__).parent.parent.parent / "logs"
LOG_FILE = LOG_DIR / "rentsim.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

_configured: bool = False


def _resolve_level(level: str | None) -> int:
    if level is None:
        from src.core.settings import get_settings
        settings = get_settings()
        level = "DEBUG" if settings.debug_mode else settings.log_level
    return getattr(logging, level.upper(), logging.INFO)


def _build_handlers() -> list[logging.Handler]:
    """Stdout always; a rotating file too, except under pytest."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if os.environ.get("PYTEST_CURRENT_TEST"):
        return handlers
    try:
        LOG_DIR.mkdir(exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            str(LOG_FILE),
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        ))
    except OSError:
        # Read-only install location: console only
        pass
    return handlers


def _build_processors(json_output: bool) -> list[Any]:
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    return [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_logging(
    level: str | None = None,
    json_output: bool = False,
) -> structlog.BoundLogger:
    """Configure structured logging once per process.

    Args:
        level: Log level name. Defaults to ``RENTSIM_LOG_LEVEL``, or DEBUG
            when ``RENTSIM_DEBUG_MODE`` is set.
        json_output: Render JSON lines instead of console text.

    Returns:
        Root structlog logger.
    """
    global _configured

    if _configured:
        return structlog.get_logger()

    logging.basicConfig(
        format="%(message)s",
        level=_resolve_level(level),
        handlers=_build_handlers(),
        force=True,
    )
    structlog.configure(
        processors=_build_processors(json_output),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _configured = True
    return structlog.get_logger()


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Logger bound to ``name`` (usually the module), configuring lazily."""
    if not _configured:
        configure_logging()

    logger = structlog.get_logger()
    if name:
        return logger.bind(logger_name=name)
    return logger


@contextmanager
def run_context(**values: Any) -> Iterator[None]:
    """Attach ``values`` to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(**values):
        yield
