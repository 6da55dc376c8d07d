"""HTTP middleware: request body size limit and response security headers."""

import logging
from collections.abc import Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

_BODY_METHODS = ("POST", "PUT", "PATCH")


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Answer 413 RequestTooLarge when a request body exceeds ``max_size_mb``.

    The declared Content-Length is checked first; for methods that carry a
    body the bytes actually received are checked as well, so an absent or
    understated header does not get a large body through.
    """

    def __init__(self, app, max_size_mb: int = 1):
        super().__init__(app)
        self.max_size_bytes = max_size_mb * 1024 * 1024

    def _reject(self, request: Request, size: int, source: str) -> JSONResponse:
        logger.warning(
            f"Rejected {request.method} {request.url.path}: {size} bytes ({source}) "
            f"over the {self.max_size_bytes} byte limit",
            extra={"path": request.url.path, "size": size, "limit": self.max_size_bytes},
        )
        return JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content={
                "error": "RequestTooLarge",
                "message": "Request body exceeds maximum allowed size",
                "details": {"max_bytes": self.max_size_bytes},
            },
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_size_bytes:
            return self._reject(request, int(declared), "content-length")

        if request.method in _BODY_METHODS:
            # Body is cached on the request for downstream handlers
            received = len(await request.body())
            if received > self.max_size_bytes:
                return self._reject(request, received, "received")

        return await call_next(request)


# Swagger UI and ReDoc load their assets from a CDN
DOCS_PATHS = {"/docs", "/redoc", "/openapi.json"}

_API_CSP = "; ".join(
    [
        "default-src 'none'",
        "frame-ancestors 'none'",
        "base-uri 'none'",
        "form-action 'none'",
    ]
)
_DOCS_CSP = "; ".join(
    [
        "default-src 'self'",
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
        "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
        "img-src 'self' data: https://fastapi.tiangolo.com",
        "connect-src 'self'",
    ]
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Set browser security headers on every response.

    JSON endpoints get a deny-all Content-Security-Policy and
    ``X-Frame-Options: DENY``; the interactive docs get a policy that lets
    their CDN assets load.
    """

    def __init__(
        self,
        app: ASGIApp,
        hsts_max_age: int = 31536000,
        include_subdomains: bool = True,
    ) -> None:
        super().__init__(app)
        hsts = f"max-age={hsts_max_age}"
        if include_subdomains:
            hsts += "; includeSubDomains"
        self.hsts = hsts

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        is_docs = request.url.path in DOCS_PATHS

        headers = response.headers
        headers["Strict-Transport-Security"] = self.hsts
        headers["Content-Security-Policy"] = _DOCS_CSP if is_docs else _API_CSP
        if not is_docs:
            headers["X-Frame-Options"] = "DENY"
        headers["X-Content-Type-Options"] = "nosniff"
        headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=(), payment=()"
        return response
