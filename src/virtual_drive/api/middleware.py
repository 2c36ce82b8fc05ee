"""HTTP middleware for the virtual drive API.

``RequestIdMiddleware`` binds a correlation ID to every request, and
``MetricsMiddleware`` records per-route counters and latency.
"""

from __future__ import annotations

import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..observability.logging import get_logger, request_id_ctx
from ..observability.metrics import HTTP_REQUEST_DURATION_SECONDS, HTTP_REQUESTS_TOTAL

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Client-supplied IDs must look like a UUID-ish token; anything else is replaced.
_VALID_REQUEST_ID = re.compile(r"^[a-zA-Z0-9\-]{8,128}$")

_UNMATCHED_ROUTE = "unmatched"


def _accepted_request_id(raw: str | None) -> str:
    if raw and _VALID_REQUEST_ID.match(raw):
        return raw
    return str(uuid.uuid4())


def _route_template(request: Request) -> str:
    """Label by route template (``/api/files``), never by raw URL."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or _UNMATCHED_ROUTE


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Accept or mint ``X-Request-ID`` and expose it to structlog via contextvars."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        rid = _accepted_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_ctx.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers[REQUEST_ID_HEADER] = rid
        return response


class MetricsMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            elapsed = time.perf_counter() - started
            route = _route_template(request)
            HTTP_REQUESTS_TOTAL.labels(
                method=request.method, route=route, status=str(status),
            ).inc()
            HTTP_REQUEST_DURATION_SECONDS.labels(method=request.method, route=route).observe(elapsed)
            logger.info(
                "http_request",
                method=request.method,
                route=route,
                status=status,
                duration_ms=round(elapsed * 1000, 2),
            )
