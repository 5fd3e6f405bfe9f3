"""Logging setup.

Every record goes to a ``QueueHandler`` on the root logger. A
``QueueListener`` thread passes it on to the stderr and file handlers, so a
slow terminal or disk never holds up a page fetch.

Usage:
    from index_pager.infra.logging import setup_logging

    setup_logging()              # from LOG_* settings, once per process
    setup_logging(level="DEBUG", force=True)
"""

from __future__ import annotations

import atexit
import logging
import logging.config
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from queue import SimpleQueue
from typing import Any

from index_pager.core.settings import LoggingSettings, get_logging_settings
from index_pager.infra.logging.formatters import JSONFormatter, text_formatter

logger = logging.getLogger(__name__)

_listener: QueueListener | None = None
_LOGGING_INITIALIZED = False


def shutdown() -> None:
    """Flush queued records and stop the listener thread. Safe to call twice."""
    global _listener

    if _listener is not None:
        _listener.stop()
        _listener = None


def build_handlers(settings: LoggingSettings) -> list[logging.Handler]:
    """Create the output handlers the listener feeds."""
    formatter: logging.Formatter = (
        JSONFormatter(static={"service": settings.service_name})
        if settings.json_logs
        else text_formatter()
    )
    handlers: list[logging.Handler] = []

    if settings.console_enabled:
        console = logging.StreamHandler()
        console.setLevel(settings.effective_console_level)
        handlers.append(console)

    path = settings.effective_file_path
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path,
                maxBytes=settings.file_max_bytes,
                backupCount=settings.file_backup_count,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(settings: LoggingSettings) -> None:
    """Apply ``settings`` to the root logger, replacing earlier configuration."""
    shutdown()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "root": {"level": settings.level, "handlers": []},
            "loggers": {name: {"level": level} for name, level in settings.logger_levels.items()},
        }
    )
    logging.captureWarnings(settings.capture_warnings)

    handlers = build_handlers(settings)
    if not handlers:
        return

    global _listener
    queue: SimpleQueue[logging.LogRecord] = SimpleQueue()
    _listener = QueueListener(queue, *handlers, respect_handler_level=True)
    _listener.start()
    logging.getLogger().addHandler(QueueHandler(queue))
    atexit.register(shutdown)

    logger.debug(
        "Logging configured",
        extra={"level": settings.level, "json": settings.json_logs, "handlers": len(handlers)},
    )


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **overrides: Any,
) -> None:
    """Configure logging once per process.

    Args:
        log_settings: Settings to apply (LOG_* environment if omitted)
        force: Reconfigure even if logging was already set up
        **overrides: Field values replacing those of the settings, e.g.
            ``level="DEBUG"``
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings = log_settings or get_logging_settings()
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(settings)
    _LOGGING_INITIALIZED = True
