"""
Per-call API logging for local and test runs.

Each request produces one JSON line on the ``app.api`` logger with the
method, path, headers, request and response bodies, status and duration.
User passwords and credential headers never reach the log.
"""

import json
import logging
import time
from typing import Any

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.observability import get_request_id

logger = logging.getLogger("app.api")

SENSITIVE_HEADERS = frozenset(
    {"authorization", "cookie", "set-cookie", "x-api-key", "x-metrics-token"}
)
SENSITIVE_FIELDS = frozenset({"password", "token", "secret", "api_key"})

# Probe and scrape traffic is not logged
SKIP_PATHS = frozenset({"/health", "/readyz", "/metrics"})

REDACTED = "***REDACTED***"


def _sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    return {
        name: REDACTED if name.lower() in SENSITIVE_HEADERS else value
        for name, value in headers.items()
    }


def _sanitize_body(body: Any) -> Any:
    """Replace sensitive field values at any depth of a decoded JSON body."""
    if isinstance(body, list):
        return [_sanitize_body(item) for item in body]
    if not isinstance(body, dict):
        return body
    return {
        key: REDACTED if key.lower() in SENSITIVE_FIELDS else _sanitize_body(value)
        for key, value in body.items()
    }


def _decode_body(raw: bytes) -> Any:
    """JSON-decode a captured body; undecodable bodies are kept as truncated text."""
    if not raw:
        return None
    text = raw.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except ValueError:
        return {"raw": text[:1000]}


def _format_body_for_log(body: Any, max_size: int = 10000) -> str:
    if body is None:
        return ""
    rendered = json.dumps(_sanitize_body(body), default=str)
    if len(rendered) <= max_size:
        return rendered
    return rendered[:max_size] + "... (truncated)"


class RequestLoggingMiddleware:
    """
    Pure ASGI middleware recording every API call.

    Bodies are copied from the ASGI messages as they stream past, so the
    application still receives and sends them untouched. 5xx responses
    log at ERROR, 4xx at WARNING, everything else at INFO.
    """

    def __init__(self, app: ASGIApp, enabled: bool = True) -> None:
        self.app = app
        self.enabled = enabled

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.enabled or scope.get("path") in SKIP_PATHS:
            await self.app(scope, receive, send)
            return

        captured = {"request": b"", "response": b"", "status": 500}
        started = time.perf_counter()

        async def capture_receive() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                captured["request"] += message.get("body", b"")
            return message

        async def capture_send(message: Message) -> None:
            if message["type"] == "http.response.start":
                captured["status"] = message["status"]
            elif message["type"] == "http.response.body":
                captured["response"] += message.get("body", b"")
            await send(message)

        await self.app(scope, capture_receive, capture_send)

        status_code = captured["status"]
        headers = {
            name.decode("latin-1"): value.decode("latin-1")
            for name, value in scope.get("headers", [])
        }
        entry = {
            "type": "api_call",
            "request_id": get_request_id() or "unknown",
            "request": {
                "method": scope.get("method", ""),
                "path": scope.get("path", ""),
                "query_string": scope.get("query_string", b"").decode("latin-1") or None,
                "headers": _sanitize_headers(headers),
                "body": _format_body_for_log(_decode_body(captured["request"])),
            },
            "response": {
                "status_code": status_code,
                "body": _format_body_for_log(_decode_body(captured["response"]), max_size=5000),
            },
            "performance": {"duration_ms": round((time.perf_counter() - started) * 1000, 2)},
        }

        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(level, json.dumps(entry))
