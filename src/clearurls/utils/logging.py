"""Structlog configuration — JSON in production, console output otherwise."""

from __future__ import annotations

import logging
import sys

import structlog

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def configure_logging(environment: str, log_level: str = "INFO") -> None:
    """Route structlog through the stdlib root logger.

    Production emits newline-delimited JSON; any other *environment* gets a
    colourised console renderer.  Library use never calls this: the
    cleaning modules only obtain loggers and leave configuration to the
    application.

    Args:
        environment: ``"production"`` or ``"development"`` (default).
        log_level:   Standard log-level name, e.g. ``"DEBUG"``.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    if environment == "production":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    # Per-request access lines drown out the cleaning events in production.
    if environment == "production":
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
