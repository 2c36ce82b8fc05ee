"""Virtual drive FastAPI application factory.

The create_app() factory is the single entry point for building the ASGI
application. It wires middleware (request-ID, metrics, CORS), the file
routes, and injects the storage backend via dependency injection.

Usage:
    # Local development (volatile in-memory storage)
    from virtual_drive.api import create_app
    app = create_app()

    # Durable storage configured from the environment
    app = create_app(DriveSettings.from_env())

    # Testing (full DI control)
    app = create_app(settings, storage=InMemoryFileStorage())
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from ..db.errors import SupabaseError
from ..errors import FileSystemError, describe_error
from ..observability.logging import configure_logging, get_logger
from ..observability.metrics import metrics_text
from ..operations import FileOperations
from ..protocols import FileStorage
from ..settings import DriveSettings, build_storage
from .middleware import MetricsMiddleware, RequestIdMiddleware
from .router import create_file_router

logger = get_logger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(FileSystemError)
    async def file_system_error_handler(request: Request, exc: FileSystemError):
        info = describe_error(exc.code)
        logger.warning(
            "request_failed",
            path=request.url.path,
            error_code=exc.code.value,
            error=exc.message,
        )
        return JSONResponse(
            status_code=info.http_status,
            content={
                "success": False,
                "error": exc.message,
                "code": exc.code.value,
                "retryable": info.retryable,
            },
        )

    @app.exception_handler(SupabaseError)
    async def supabase_error_handler(request: Request, exc: SupabaseError):
        logger.error(
            "request_failed",
            path=request.url.path,
            status_code=exc.status_code,
            error=exc.message,
        )
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Storage backend error",
                "code": "storage_error",
                "retryable": False,
            },
        )


def create_app(
    settings: Optional[DriveSettings] = None,
    *,
    storage: Optional[FileStorage] = None,
) -> FastAPI:
    """Build the virtual drive ASGI app.

    Args:
        settings: Service configuration. Defaults to ``DriveSettings()``.
        storage: Backend to use instead of the one ``settings`` selects.
    """
    if settings is None:
        settings = DriveSettings()

    configure_logging(
        level=settings.log_level,
        json_output=settings.log_format == "json",
    )

    if storage is None:
        storage = build_storage(settings)
    operations = FileOperations(storage)

    app = FastAPI(title="Virtual Drive", version="0.1.0")
    app.state.settings = settings
    app.state.storage = storage
    app.state.operations = operations

    # Middleware runs in reverse registration order; request IDs wrap the rest.
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    _register_error_handlers(app)
    app.include_router(create_file_router(operations))

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "storage": settings.storage_type,
        }

    @app.get("/metrics")
    async def metrics():
        body, content_type = metrics_text()
        return Response(content=body, media_type=content_type)

    logger.info(
        "app_created",
        storage_type=settings.storage_type,
        storage_backend=type(storage).__name__,
    )
    return app
