"""
Widget Service - FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires settings, the storage backend, middleware,
       exception handlers and routes, and returns the app.
Who:   uvicorn (`widget_service.main:app`), `python -m widget_service`, tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │                                                     │
    │  Routes:      /widgets  /widgets/{id}  /health      │
    │  Docs:        /api-docs  /openapi.json              │
    │                                                     │
    │  app.state.widget_service ── one WidgetService      │
    │                              (memory | cosmos)      │
    │                                                     │
    │  Exception Handlers:                                │
    │    ServiceErrorResponse → result code               │
    │    WidgetApiError / Exception → 500                 │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate backend settings (log only), log URLs
    Shutdown: close the backend (releases the Cosmos client)
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Optional

import yaml
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from widget_service import __version__
from widget_service.config import Settings, settings
from widget_service.exceptions import ConfigurationError, ServiceErrorResponse, WidgetApiError
from widget_service.middleware.logging import RequestLoggingMiddleware
from widget_service.middleware.request_id import RequestIDMiddleware, request_id_var
from widget_service.routes import health, widgets
from widget_service.schemas.widget import ErrorResponse
from widget_service.services.factory import build_widget_service
from widget_service.services.widget_base import WidgetService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure process-wide logging once, before anything else logs.

    Format: 2024-01-15T12:00:00 [INFO] widget_service.access: GET /widgets 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # The Cosmos SDK logs every HTTP exchange at INFO
    logging.getLogger("azure").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Static OpenAPI Document
# ══════════════════════════════════════════════════════════════════════════

def load_openapi_document(path: str) -> Dict[str, Any]:
    """
    Read a pre-generated OpenAPI document (YAML or JSON) from disk.

    Raises:
        ConfigurationError: file missing, unparsable, or not a mapping
    """
    spec_path = Path(path)
    logger.info("Loading OpenAPI document from %s", spec_path.resolve())
    try:
        document = yaml.safe_load(spec_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            message=f"Could not read OpenAPI document '{path}'",
            context={"path": path, "error": str(e)},
        ) from e
    if not isinstance(document, dict):
        raise ConfigurationError(
            message=f"OpenAPI document '{path}' must be a mapping",
            context={"path": path},
        )
    return document


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings
    service: WidgetService = app.state.widget_service

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("Widget Service starting up (backend=%s)", service.name)

    # Misconfiguration is reported but not fatal: the backend turns it into
    # 500 results on first use and /health reports it.
    try:
        config.validate_backend_configuration()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    logger.info(
        "Server listening on http://%s:%d - api-docs at http://%s:%d%s",
        config.backend_host,
        config.backend_port,
        config.backend_host,
        config.backend_port,
        config.docs_url,
    )
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Widget Service shutting down...")
    await service.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    # request.state lives in the ASGI scope, so it is visible to the outermost
    # error middleware too; the ContextVar is not
    return getattr(request.state, "request_id", "") or request_id_var.get("")


def _error_response(status_code: int, message: str, rid: str) -> JSONResponse:
    body = ErrorResponse(code=status_code, message=message, request_id=rid or None)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to JSON error responses.

    Handler hierarchy:
        ServiceErrorResponse → status and message of the backend's result
        WidgetApiError       → 500 with the exception message
        Exception            → 500 generic message, traceback logged
    """

    @app.exception_handler(ServiceErrorResponse)
    async def handle_service_error(request: Request, exc: ServiceErrorResponse):
        rid = _request_id(request)
        if exc.status_code >= 500:
            logger.error("[%s] Backend error: %s", rid, exc.message)
        return _error_response(exc.status_code, exc.message, rid)

    @app.exception_handler(WidgetApiError)
    async def handle_app_error(request: Request, exc: WidgetApiError):
        rid = _request_id(request)
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return _error_response(exc.status_code, exc.message, rid)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _error_response(
            500, "An unexpected error occurred. Please try again or contact support.", rid
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    widget_service: Optional[WidgetService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to use; defaults to the module-level singleton.
        widget_service: Backend to serve; defaults to the one named by
            `config.widget_backend`. Injected explicitly by tests.

    Raises:
        ConfigurationError: OPENAPI_SPEC_PATH is set but unreadable.
    """
    config = config or settings
    service = widget_service or build_widget_service(config)

    app = FastAPI(
        title="Widget Service API",
        description="CRUD service for widgets over interchangeable storage backends.",
        version=__version__,
        docs_url=config.docs_url,
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.widget_service = service

    if config.openapi_spec_path:
        app.openapi_schema = load_openapi_document(config.openapi_spec_path)

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(widgets.router)
    app.include_router(health.router)

    return app


# uvicorn entry point: `uvicorn widget_service.main:app`
app = create_app()
