"""
Logging, correlation IDs and Prometheus metrics for the Commerce API.

Every request gets a request_id (taken from the incoming header when
present) that is echoed back in the response and attached to every JSON
log line emitted while the request is handled. HTTP traffic and MongoDB
calls are counted and timed on a private Prometheus registry served by
``/metrics``.
"""

import json
import logging
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from fastapi import Request, Response
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# ============================================================================
# Correlation IDs
# ============================================================================

_request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Return the request_id bound to the current context, or ''."""
    return _request_id_ctx.get()


def set_correlation_id(request_id: str) -> None:
    _request_id_ctx.set(request_id)


# ============================================================================
# JSON Logging
# ============================================================================

# Attributes every LogRecord has; anything else arrived through ``extra=``
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """
    Render log records as one JSON object per line.

    Keys: timestamp, level, logger, message, request_id (when bound),
    exception (when exc_info is set), file/line/function and ``extra``
    holding whatever the caller passed via ``logger.x(..., extra={...})``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
            }

        entry.update(file=record.pathname, line=record.lineno, function=record.funcName)

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_RECORD_ATTRS
        }
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str)


def configure_structured_logging(level: str = "INFO") -> None:
    """Replace the root logger's handlers with a single JSON stream handler."""
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


# ============================================================================
# Prometheus Metrics
# ============================================================================

_registry = CollectorRegistry()

_HTTP_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
_STORAGE_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)


class Metrics:
    """HTTP and storage collectors registered on one registry."""

    def __init__(self, registry: CollectorRegistry) -> None:
        self.registry = registry

        # HTTP
        self.http_requests_total = Counter(
            "http_requests_total",
            "HTTP requests by method, route and status",
            ["method", "route", "status_code"],
            registry=registry,
        )
        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "HTTP request latency",
            ["method", "route"],
            buckets=_HTTP_BUCKETS,
            registry=registry,
        )
        self.http_requests_in_progress = Gauge(
            "http_requests_in_progress",
            "HTTP requests being handled",
            ["method", "route"],
            registry=registry,
        )
        self.http_errors_total = Counter(
            "http_errors_total",
            "Requests that raised out of the application",
            ["error_type", "method", "route"],
            registry=registry,
        )

        # MongoDB
        self.storage_operation_duration_seconds = Histogram(
            "storage_operation_duration_seconds",
            "MongoDB call latency",
            ["collection", "operation"],
            buckets=_STORAGE_BUCKETS,
            registry=registry,
        )
        self.storage_operations_total = Counter(
            "storage_operations_total",
            "MongoDB calls by outcome",
            ["collection", "operation", "status"],
            registry=registry,
        )


metrics = Metrics(_registry)


# ============================================================================
# Request Middleware
# ============================================================================

# First path segments whose second segment is a user-supplied key
_KEYED_RESOURCES = {"users", "product", "order"}

# Paths without a key segment that are reported under their own name
_STATIC_ROUTES = {
    "/users",
    "/products",
    "/getProducts",
    "/createOrder",
    "/health",
    "/readyz",
    "/metrics",
    "/docs",
    "/redoc",
    "/openapi.json",
}

UNMATCHED_ROUTE = "unmatched"


def _route_label(path: str) -> str:
    """
    Metric label for a request path.

    Keyed resource paths collapse to a template (/users/{key}); known static
    paths keep their name; anything else is reported as ``unmatched``.
    """
    if path in _STATIC_ROUTES:
        return path
    parts = path.strip("/").split("/")
    if len(parts) == 2 and parts[0] in _KEYED_RESOURCES and parts[1]:
        return f"/{parts[0]}/{{key}}"
    return UNMATCHED_ROUTE


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """
    Bind a request_id, time the request and record HTTP metrics.

    Requests to ``skip_paths`` are still measured but not logged.
    """

    def __init__(
        self,
        app: ASGIApp,
        metrics_instance: Metrics | None = None,
        skip_paths: list[str] | None = None,
        header_name: str = "X-Request-ID",
    ) -> None:
        super().__init__(app)
        self.metrics = metrics_instance or metrics
        self.skip_paths = set(skip_paths or ["/health", "/readyz", "/metrics"])
        self.header_name = header_name
        self.logger = logging.getLogger("app.request")

    def _observe(self, method: str, route: str, status_code: int, elapsed: float) -> None:
        self.metrics.http_requests_total.labels(
            method=method, route=route, status_code=status_code
        ).inc()
        self.metrics.http_request_duration_seconds.labels(method=method, route=route).observe(
            elapsed
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.header_name) or generate_request_id()
        set_correlation_id(request_id)

        method = request.method
        route = _route_label(request.url.path)
        in_progress = self.metrics.http_requests_in_progress.labels(method=method, route=route)
        in_progress.inc()
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed = time.perf_counter() - started
            error_type = type(e).__name__
            self._observe(method, route, 500, elapsed)
            self.metrics.http_errors_total.labels(
                error_type=error_type, method=method, route=route
            ).inc()
            self.logger.error(
                f"{method} {route} failed with {error_type}",
                extra={
                    "method": method,
                    "route": route,
                    "status_code": 500,
                    "latency_ms": round(elapsed * 1000, 2),
                    "error_type": error_type,
                },
                exc_info=True,
            )
            raise
        finally:
            in_progress.dec()

        elapsed = time.perf_counter() - started
        self._observe(method, route, response.status_code, elapsed)
        response.headers[self.header_name] = request_id

        if route not in self.skip_paths:
            self.logger.info(
                f"{method} {route} {response.status_code}",
                extra={
                    "method": method,
                    "route": route,
                    "status_code": response.status_code,
                    "latency_ms": round(elapsed * 1000, 2),
                },
            )
        return response


# ============================================================================
# Storage Metrics
# ============================================================================


class StorageMetricsWrapper:
    """
    Time MongoDB calls and count them by outcome.

    Usage:
        with storage_metrics.track("users", "find_one"):
            doc = await db["users"].find_one({"email": email})
    """

    def __init__(self, metrics_instance: Metrics | None = None) -> None:
        self.metrics = metrics_instance or metrics

    @contextmanager
    def track(self, collection: str, operation: str) -> Iterator[None]:
        started = time.perf_counter()
        outcome = "success"
        try:
            yield
        except Exception:
            outcome = "error"
            raise
        finally:
            self.metrics.storage_operation_duration_seconds.labels(
                collection=collection, operation=operation
            ).observe(time.perf_counter() - started)
            self.metrics.storage_operations_total.labels(
                collection=collection, operation=operation, status=outcome
            ).inc()


storage_metrics = StorageMetricsWrapper()


def metrics_endpoint() -> Response:
    """Serve the registry in the Prometheus text exposition format."""
    return Response(
        content=generate_latest(_registry),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


def extract_request_context(request: Request) -> dict[str, Any]:
    """Fields identifying the current request in error logs."""
    return {"request_id": get_request_id(), "method": request.method}
