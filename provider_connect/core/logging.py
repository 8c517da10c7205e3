"""Structured logging setup built on structlog.

Events are snake_case names with keyword context, for example::

    logger.info("oauth_state_created", provider="anthropic", category="auth")

``setup_logging`` routes stdlib loggers (uvicorn, httpx) through the same
processor chain so every line shares one format.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import BoundLogger


_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def setup_logging(json_logs: bool = False, log_level_name: str = "INFO") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        json_logs: Render JSON lines instead of the console format
        log_level_name: Root log level name (DEBUG, INFO, ...)
    """
    level = getattr(logging, log_level_name.upper(), logging.INFO)
    shared = _shared_processors()

    structlog.configure(
        processors=[
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    renderer: Any
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
        final = [structlog.processors.format_exc_info, renderer]
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        final = [renderer]

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *final,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> BoundLogger:
    """Get a structlog logger bound to ``name``."""
    return structlog.stdlib.get_logger(name)  # type: ignore[no-any-return]


def get_plugin_logger(plugin_name: str) -> BoundLogger:
    """Get a logger that tags every event with the plugin name."""
    return get_logger(f"provider_connect.plugins.{plugin_name}").bind(
        plugin=plugin_name
    )
