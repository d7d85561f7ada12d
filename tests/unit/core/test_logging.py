"""
Tests for structured request logging and PII masking.
"""

import json
import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.middleware.logging import (
    StructuredFormatter,
    StructuredLoggingMiddleware,
    is_sensitive_field,
    mask_headers,
    mask_pii_text,
    mask_sensitive_data,
    should_log_request,
)


class TestMasking:

    @pytest.mark.parametrize("field", ["password", "new_password", "access_token", "API_KEY", "Cookie"])
    def test_sensitive_fields(self, field):
        assert is_sensitive_field(field) is True

    @pytest.mark.parametrize("field", ["title", "status", "page"])
    def test_regular_fields(self, field):
        assert is_sensitive_field(field) is False

    def test_mask_pii_text(self):
        masked = mask_pii_text("Contact jane@example.com or +91 98765 43210")
        assert "jane@example.com" not in masked
        assert "[EMAIL]" in masked
        assert "[PHONE]" in masked

    def test_mask_sensitive_data_nested(self):
        masked = mask_sensitive_data({
            "email": "bob@acme.test",
            "password": "Secret123!",
            "profile": {"notes": "call 555-123-4567 today"},
            "tags": ["ok", "x@y.io"],
        })
        assert masked["password"] == "[REDACTED]"
        assert masked["email"] == "[EMAIL]"
        assert "[PHONE]" in masked["profile"]["notes"]
        assert masked["tags"] == ["ok", "[EMAIL]"]

    def test_max_depth(self):
        data = {"a": {"b": {"c": "deep"}}}
        assert mask_sensitive_data(data, max_depth=1) == {"a": {"b": "[MAX_DEPTH_EXCEEDED]"}}

    def test_mask_headers(self):
        masked = mask_headers({
            "Authorization": "Bearer eyJhbGciOi",
            "X-Api-Key": "abc",
            "Accept": "application/json",
        })
        assert masked["Authorization"] == "Bearer [REDACTED]"
        assert masked["X-Api-Key"] == "[REDACTED]"
        assert masked["Accept"] == "application/json"

    def test_health_checks_not_logged(self):
        assert should_log_request("/health") is False
        assert should_log_request("/api/v1/jobs") is True


class TestStructuredLoggingMiddleware:

    @pytest.fixture
    def logging_client(self):
        app = FastAPI()
        app.add_middleware(StructuredLoggingMiddleware)

        @app.get("/api/v1/jobs")
        async def jobs():
            return []

        @app.get("/health")
        async def health():
            return {"status": "healthy"}

        return TestClient(app)

    def test_request_id_generated(self, logging_client):
        response = logging_client.get("/api/v1/jobs")
        assert response.headers["x-request-id"]

    def test_request_id_propagated(self, logging_client):
        response = logging_client.get("/api/v1/jobs", headers={"X-Request-ID": "req-123"})
        assert response.headers["x-request-id"] == "req-123"

    def test_request_events_logged(self, logging_client, caplog):
        with caplog.at_level(logging.INFO, logger="core.middleware.logging"):
            logging_client.get(
                "/api/v1/jobs?search=jane@example.com",
                headers={"Authorization": "Bearer secret-token"},
            )

        events = [json.loads(r.getMessage()) for r in caplog.records if r.name == "core.middleware.logging"]
        assert [e["event"] for e in events] == ["request_started", "request_completed"]
        assert events[0]["query_params"]["search"] == "[EMAIL]"
        assert events[0]["headers"]["authorization"] == "Bearer [REDACTED]"
        assert events[1]["status_code"] == 200
        assert "secret-token" not in caplog.text

    def test_health_not_logged(self, logging_client, caplog):
        with caplog.at_level(logging.INFO, logger="core.middleware.logging"):
            response = logging_client.get("/health")
        assert response.headers["x-request-id"]
        assert not [r for r in caplog.records if r.name == "core.middleware.logging"]


class TestStructuredFormatter:

    def test_json_output(self):
        record = logging.LogRecord("api", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        record.request_id = "req-1"
        output = json.loads(StructuredFormatter().format(record))

        assert output["message"] == "hello world"
        assert output["level"] == "INFO"
        assert output["request_id"] == "req-1"
