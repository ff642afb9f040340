"""structlog setup shared by the collector and the API server.

Both run in one asyncio event loop, so context is carried through
structlog.contextvars (a collection round binds ``round_id`` there and every
log line emitted while that round runs picks it up). Process-wide fields
such as the service name and monitored pools are attached to every line by
a static context processor instead.
"""

import logging
import os
from collections.abc import Mapping
from typing import Any

import structlog

# Third-party loggers that are chatty at INFO (httpx logs every RPC request).
_NOISY_LOGGERS = ("httpx", "httpcore", "aiosqlite", "uvicorn.access")


def static_context(context: Mapping[str, Any]) -> structlog.types.Processor:
    """Processor adding fixed key/values to each event.

    Keys already present on the event (bound or passed explicitly) win.
    """
    fields = dict(context)

    def _add_static_context(
        logger: Any, method_name: str, event_dict: structlog.types.EventDict
    ) -> structlog.types.EventDict:
        for key, value in fields.items():
            event_dict.setdefault(key, value)
        return event_dict

    return _add_static_context


def setup_logging(
    log_level: str = "INFO",
    log_format: str | None = None,
    **context: Any,
) -> None:
    """Configure structlog on top of stdlib logging.

    ``log_format`` is "json" (production) or "console" (development). When not
    given it is read from the LOG_FORMAT environment variable, default console.
    Extra keyword arguments are added to every log line, e.g.
    ``setup_logging("INFO", service="pricefeed", pools=["WATER"])``.
    """
    fmt = (log_format or os.environ.get("LOG_FORMAT", "console")).lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        static_context(context),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if fmt == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
