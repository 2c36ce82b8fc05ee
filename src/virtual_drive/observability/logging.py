"""Structured logging for virtual-drive.

Every event is a structlog key/value record routed through stdlib logging,
so uvicorn and httpx output share one formatter. Each record carries the
current request ID (when inside a request) and never carries a Supabase
key, even if a caller passes one along by mistake.

Usage::

    from virtual_drive.observability.logging import configure_logging, get_logger

    configure_logging(level="DEBUG", json_output=False)
    logger = get_logger(__name__)
    logger.info("item_created", path="Adobe", name="Photoshop")
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog

# Set by RequestIdMiddleware for the lifetime of one HTTP request.
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

_SECRET_KEYS = frozenset({
    "apikey",
    "authorization",
    "service_role_key",
    "supabase_service_role_key",
})

_QUIET_LOGGERS = {
    # One INFO line per PostgREST round trip.
    "httpx": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}

_configured = False


def _add_request_id(logger: Any, method_name: str, event_dict: dict) -> dict:
    rid = request_id_ctx.get()
    if rid is not None:
        event_dict.setdefault("request_id", rid)
    return event_dict


def _redact_secrets(logger: Any, method_name: str, event_dict: dict) -> dict:
    for key in _SECRET_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = True,
    force: bool = False,
) -> None:
    """Install the structlog pipeline and the root stdlib handler.

    Runs once per process; later calls are ignored unless ``force`` is set.

    Args:
        level: Root log level name (DEBUG, INFO, WARNING, ERROR).
        json_output: JSON lines when True, colourless console text otherwise.
        force: Reconfigure even if logging was already set up.
    """
    global _configured
    if _configured and not force:
        return
    _configured = True

    pre_chain: list = [
        structlog.contextvars.merge_contextvars,
        _add_request_id,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to the given name."""
    return structlog.get_logger(name)
