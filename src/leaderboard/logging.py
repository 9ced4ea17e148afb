"""Logging for pipeline runs.

Stages emit structlog events; the persistence services write plain
progress lines through stdlib loggers. Both end up on one root handler
whose ``ProcessorFormatter`` renders every record the same way, so
``LEADERBOARD_LOG_FORMAT=json`` yields one JSON object per line.
"""

from __future__ import annotations

import logging
from typing import IO

import structlog

from leaderboard.config import Settings

_handler: logging.Handler | None = None


def setup_logging(settings: Settings, stream: IO[str] | None = None) -> logging.Handler:
    """Configure structlog and the stdlib root logger for one run.

    Calling it again replaces the handler installed by the previous call.
    Returns the installed handler.
    """
    global _handler

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if settings.log_format == "json":
        rendering: list[structlog.types.Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        rendering = [structlog.dev.ConsoleRenderer()]

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *rendering],
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    root.addHandler(handler)
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    _handler = handler
    return handler
