"""
Tests for request/response logging middleware.

Tests cover:
- Header sanitization (_sanitize_headers)
- Body sanitization (_sanitize_body)
- Body decoding and formatting for logging
- RequestLoggingMiddleware log levels and skipped paths
- Password redaction for user requests
"""

import json
import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.request_logging import (
    REDACTED,
    RequestLoggingMiddleware,
    _decode_body,
    _format_body_for_log,
    _sanitize_body,
    _sanitize_headers,
)


def _api_entries(caplog) -> list[dict]:
    return [json.loads(r.getMessage()) for r in caplog.records if r.name == "app.api"]


class TestSanitizeHeaders:
    @pytest.mark.anyio
    async def test_redacts_sensitive_headers(self):
        result = _sanitize_headers(
            {
                "Authorization": "Bearer secret-token",
                "x-metrics-token": "abc",
                "content-type": "application/json",
            }
        )
        assert result["Authorization"] == REDACTED
        assert result["x-metrics-token"] == REDACTED
        assert result["content-type"] == "application/json"


class TestSanitizeBody:
    @pytest.mark.anyio
    async def test_redacts_password(self):
        result = _sanitize_body({"name": "Ann", "email": "ann@x.com", "password": "p1"})
        assert result == {"name": "Ann", "email": "ann@x.com", "password": REDACTED}

    @pytest.mark.anyio
    async def test_redacts_nested_fields(self):
        result = _sanitize_body({"users": [{"Password": "p1"}], "meta": {"token": "t"}})
        assert result == {"users": [{"Password": REDACTED}], "meta": {"token": REDACTED}}

    @pytest.mark.anyio
    async def test_scalars_unchanged(self):
        assert _sanitize_body(42) == 42
        assert _sanitize_body(None) is None


class TestDecodeAndFormat:
    @pytest.mark.anyio
    async def test_decode_empty_body(self):
        assert _decode_body(b"") is None

    @pytest.mark.anyio
    async def test_decode_json(self):
        assert _decode_body(b'{"price": 500}') == {"price": 500}

    @pytest.mark.anyio
    async def test_decode_invalid_json_keeps_raw_text(self):
        assert _decode_body(b"not json") == {"raw": "not json"}

    @pytest.mark.anyio
    async def test_format_none_is_empty(self):
        assert _format_body_for_log(None) == ""

    @pytest.mark.anyio
    async def test_format_truncates_large_body(self):
        result = _format_body_for_log({"data": "x" * 200}, max_size=50)
        assert result.endswith("... (truncated)")
        assert len(result) == 50 + len("... (truncated)")


class TestRequestLoggingMiddleware:
    @pytest.mark.anyio
    async def test_user_create_is_logged_without_password(self, client, caplog):
        caplog.set_level(logging.INFO, logger="app.api")

        client.post("/users", json={"name": "Ann", "email": "ann@x.com", "password": "p1"})

        entries = _api_entries(caplog)
        assert len(entries) == 1
        entry = entries[0]
        assert entry["request"]["method"] == "POST"
        assert entry["request"]["path"] == "/users"
        assert entry["response"]["status_code"] == 201
        assert "p1" not in entry["request"]["body"]
        assert REDACTED in entry["request"]["body"]

    @pytest.mark.anyio
    async def test_not_found_logged_as_warning(self, client, caplog):
        caplog.set_level(logging.INFO, logger="app.api")

        client.get("/users/ghost@x.com")

        records = [r for r in caplog.records if r.name == "app.api"]
        assert [r.levelno for r in records] == [logging.WARNING]

    @pytest.mark.anyio
    async def test_health_is_skipped(self, client, caplog):
        caplog.set_level(logging.INFO, logger="app.api")

        client.get("/health")

        assert _api_entries(caplog) == []

    @pytest.mark.anyio
    async def test_disabled_middleware_logs_nothing(self, caplog):
        caplog.set_level(logging.INFO, logger="app.api")
        app = FastAPI()
        app.add_middleware(RequestLoggingMiddleware, enabled=False)

        @app.get("/ping")
        async def ping():
            return {"ok": True}

        response = TestClient(app).get("/ping")

        assert response.status_code == 200
        assert _api_entries(caplog) == []
