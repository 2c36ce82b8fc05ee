"""Observability infrastructure for virtual-drive.

Provides structured logging, Prometheus metrics and request-ID
correlation for the engine and the HTTP surface.

Quick start::

    from virtual_drive.observability import configure_logging, get_logger

    configure_logging()
"""

from .logging import configure_logging, get_logger, request_id_ctx
from .metrics import metrics_text

__all__ = [
    "configure_logging",
    "get_logger",
    "metrics_text",
    "request_id_ctx",
]
