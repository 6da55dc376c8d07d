import hmac
import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.asynchronous.database import AsyncDatabase
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes.health import router as health_router
from app.api.routes.orders import router as orders_router
from app.api.routes.products import router as products_router
from app.api.routes.users import router as users_router
from app.core.config import AppEnvironment, settings
from app.core.db import create_mongo_client, get_database
from app.core.errors import AppError, InvalidRequestBodyError, StorageError, get_status_code
from app.core.middleware import RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from app.core.observability import (
    ObservabilityMiddleware,
    configure_structured_logging,
    extract_request_context,
    metrics_endpoint,
)
from app.core.request_logging import RequestLoggingMiddleware

if settings.observability_structured_logs:
    configure_structured_logging(settings.app_log_level)

logger = logging.getLogger(__name__)

# String values matching any of these are hidden in prod responses
_LEAKY_DETAIL_PATTERNS = [
    re.compile(r"[/\\][\w/-]+\.py", re.IGNORECASE),
    re.compile(r"mongodb(\+srv)?://", re.IGNORECASE),
    re.compile(r"\b[\w.-]+:\d{2,5}\b"),
    re.compile(r"\$(set|where|regex)\b", re.IGNORECASE),
]

# Replaces StorageError messages (raw driver text) in prod responses
_STORAGE_ERROR_MESSAGE = "storage operation failed"


def _is_leaky(value: str) -> bool:
    return any(pattern.search(value) for pattern in _LEAKY_DETAIL_PATTERNS)


def _sanitize_error_details(details: dict[str, Any]) -> dict[str, Any]:
    """
    Redact error details that could expose internals in production.

    Source paths, MongoDB connection strings, host:port pairs and query
    operators are replaced with ``[REDACTED]``; nested dicts (also inside
    lists) are walked. Outside prod the details are returned as-is.
    """
    if settings.app_env != AppEnvironment.PROD:
        return details

    def clean(value: Any) -> Any:
        if isinstance(value, str):
            return "[REDACTED]" if _is_leaky(value) else value
        if isinstance(value, dict):
            return {key: clean(item) for key, item in value.items()}
        if isinstance(value, list):
            return [clean(item) if isinstance(item, dict) else item for item in value]
        return value

    return clean(details)


def _sanitize_error_message(exc: AppError) -> str:
    """Hide storage driver messages and leaky messages in production."""
    if settings.app_env != AppEnvironment.PROD:
        return exc.message
    if isinstance(exc, StorageError):
        return _STORAGE_ERROR_MESSAGE
    return "[REDACTED]" if _is_leaky(exc.message) else exc.message


def _error_body(error: str, message: Any, details: dict[str, Any] | None = None) -> dict:
    return {"error": error, "message": message, "details": details or {}}


def _error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=get_status_code(exc),
        content=_error_body(
            exc.__class__.__name__,
            _sanitize_error_message(exc),
            _sanitize_error_details(exc.details),
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Connect to MongoDB for the app's lifetime unless a database was injected."""
    client = None
    if getattr(app.state, "database", None) is None:
        client = create_mongo_client(settings)
        app.state.database = get_database(client, settings)
    try:
        yield
    finally:
        if client is not None:
            await client.close()
            app.state.database = None
            logger.info("Closed MongoDB client")


# ============================================================================
# Middleware
# ============================================================================


def _add_middleware(app: FastAPI) -> None:
    # Starlette runs the last-added middleware outermost
    if settings.app_env in (AppEnvironment.LOCAL, AppEnvironment.TEST):
        app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestSizeLimitMiddleware, max_size_mb=settings.max_request_size_mb)
    app.add_middleware(SecurityHeadersMiddleware)

    if settings.observability_enabled:
        app.add_middleware(
            ObservabilityMiddleware, header_name=settings.observability_request_id_header
        )


# ============================================================================
# Exception Handlers
# ============================================================================


def _add_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """Domain errors: status from ERROR_STATUS_MAP, body from the exception."""
        context = {"details": exc.details, "path": request.url.path}
        context.update(extract_request_context(request))
        log = logger.error if get_status_code(exc) >= 500 else logger.warning
        log(f"{exc.__class__.__name__}: {exc.message}", extra=context)
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Bodies that are not valid JSON or don't fit the entity become a 400."""
        errors = [
            {
                "loc": list(err.get("loc", ())),
                "type": err.get("type", ""),
                "msg": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        logger.warning(
            f"Invalid request body for {request.method} {request.url.path}",
            extra={"errors": errors, **extract_request_context(request)},
        )
        return _error_response(InvalidRequestBodyError("invalid request body", {"errors": errors}))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Unknown routes, wrong methods and explicit HTTPExceptions."""
        if exc.status_code >= 500:
            logger.error(
                f"HTTP {exc.status_code}: {exc.detail}",
                extra={"path": request.url.path, **extract_request_context(request)},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body("HTTPException", exc.detail),
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Anything else: log with traceback, answer with a generic 500."""
        logger.error(
            f"Unhandled exception: {exc}",
            exc_info=True,
            extra={"path": request.url.path, **extract_request_context(request)},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("InternalServerError", "An unexpected error occurred"),
        )


# ============================================================================
# Metrics Endpoint
# ============================================================================


async def protected_metrics(request: Request) -> Response:
    """
    Prometheus scrape endpoint.

    The caller must send METRICS_TOKEN in the X-Metrics-Token header; with
    no token configured the endpoint refuses every request.
    """
    expected = settings.metrics_token
    if not expected:
        logger.error("Metrics requested but METRICS_TOKEN is not set")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Metrics token not configured. Set METRICS_TOKEN environment variable.",
        )

    supplied = request.headers.get("X-Metrics-Token") or ""
    if not hmac.compare_digest(supplied, expected):
        logger.warning(
            "Rejected metrics request with a bad token",
            extra={"client_ip": request.client.host if request.client else "unknown"},
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid metrics token")

    return metrics_endpoint()


def create_app(database: AsyncDatabase | None = None) -> FastAPI:
    """
    Build the Commerce API application.

    Args:
        database: Database handle to serve from. When omitted, the lifespan
            connects to MONGODB_URL on startup and closes the client on
            shutdown. Tests pass an in-memory substitute here.
    """
    app = FastAPI(
        title="Commerce API",
        description="CRUD API for users, products and orders backed by MongoDB",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.database = database

    _add_middleware(app)
    _add_exception_handlers(app)

    for router in (health_router, users_router, products_router, orders_router):
        app.include_router(router)

    if settings.observability_enabled:
        app.add_route("/metrics", protected_metrics)

    return app


app = create_app()
