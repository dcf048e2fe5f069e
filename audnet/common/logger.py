"""
Structured logging for the adapter server.

structlog renders our own events; uvicorn and httpx log through the
standard library, so their records are routed through the same renderer
and every line on stdout has one format.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional, TextIO

import structlog
from structlog.types import Processor

from audnet.common.config import LoggingSettings

# httpx logs every outbound call at INFO; the dispatcher already does.
_NOISY_LOGGERS = ("httpx", "httpcore")


def _renderer(fmt: str) -> Processor:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging(config: LoggingSettings, stream: Optional[TextIO] = None) -> None:
    """Configure structlog and the standard library root logger from ``config``."""
    level = logging.getLevelName(config.level.upper())

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if config.format == "json":
        shared_processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[*shared_processors, structlog.stdlib.ExtraAdder()],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(config.format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """
    Return a logger, bound to ``name`` when one is given.

    Loggers stay lazy until first use, so module-level loggers created
    before ``setup_logging`` runs still pick up its configuration.
    """
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()


class LoggerMixin:
    """Gives a class a ``logger`` bound to its class name."""

    @property
    def logger(self) -> structlog.BoundLogger:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger


def log_context(**kwargs: Any) -> None:
    """
    Bind ``kwargs`` to every event logged from the current context.

    The HTTP middleware binds ``request_id`` here, so adapter and dispatcher
    events for one auction can be correlated without passing it around.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_log_context() -> None:
    structlog.contextvars.clear_contextvars()
