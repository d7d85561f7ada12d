"""
Tests for the error envelope and exception classification.
"""

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, OperationalError

from core.middleware.authorization import InsufficientPermissions, JobAccessDenied
from core.middleware.error_handling import (
    ConflictError,
    ErrorHandlingMiddleware,
    ResourceNotFound,
    classify_exception,
    sanitize_error_message,
    setup_error_handlers,
)


class Payload(BaseModel):
    title: str


@pytest.fixture
def error_client():
    """Small app raising one error per route."""
    app = FastAPI()
    setup_error_handlers(app)
    app.add_middleware(ErrorHandlingMiddleware, debug=False)

    @app.get("/missing")
    async def missing():
        raise ResourceNotFound("Job", 42)

    @app.get("/forbidden")
    async def forbidden():
        raise JobAccessDenied("You do not have access to this job")

    @app.get("/conflict")
    async def conflict():
        raise ConflictError("User with this email already exists")

    @app.get("/invalid")
    async def invalid():
        raise ValueError("Minimum salary cannot be greater than maximum")

    @app.get("/http")
    async def http_error():
        raise HTTPException(
            status_code=401,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.post("/validate")
    async def validate(payload: Payload):
        return payload

    @app.get("/crash")
    async def crash():
        raise RuntimeError("database password=hunter2 leaked")

    return TestClient(app, raise_server_exceptions=False)


class TestSanitizeErrorMessage:

    def test_password_redacted(self):
        sanitized = sanitize_error_message('Error: password="secret123"')
        assert "secret123" not in sanitized
        assert "[REDACTED]" in sanitized

    def test_connection_string_redacted(self):
        sanitized = sanitize_error_message(
            "could not connect to postgresql+asyncpg://app:pw@db:5432/ats"
        )
        assert "app:pw" not in sanitized

    def test_plain_message_unchanged(self):
        assert sanitize_error_message("Job 3 not found") == "Job 3 not found"

    def test_json_secret_redacted(self):
        sanitized = sanitize_error_message('{"token": "abc.def", "job_id": 3}')
        assert "abc.def" not in sanitized
        assert '"job_id": 3' in sanitized

    @pytest.mark.parametrize("message", [
        "Current password is incorrect",
        "New password must be different from the current password",
        "Password is too weak: add a special character",
        "Your token has expired",
    ])
    def test_prose_about_secrets_unchanged(self, message):
        assert sanitize_error_message(message) == message

    def test_value_error_message_reaches_client(self):
        _, code, message, _ = classify_exception(ValueError("Current password is incorrect"))
        assert code == "INVALID_INPUT"
        assert message == "Current password is incorrect"


class TestClassifyException:

    @pytest.mark.parametrize("exc,expected_status,expected_code", [
        (ResourceNotFound("Application", 9), 404, "NOT_FOUND"),
        (ConflictError("duplicate"), 409, "CONFLICT"),
        (InsufficientPermissions("nope"), 403, "INSUFFICIENT_PERMISSIONS"),
        (ValueError("bad"), 400, "INVALID_INPUT"),
        (IntegrityError("stmt", {}, Exception("dup")), 409, "INTEGRITY_ERROR"),
        (OperationalError("stmt", {}, Exception("down")), 503, "DATABASE_ERROR"),
        (TimeoutError(), 504, "TIMEOUT"),
        (RuntimeError("boom"), 500, "INTERNAL_SERVER_ERROR"),
    ])
    def test_mapping(self, exc, expected_status, expected_code):
        status_code, code, _, _ = classify_exception(exc)
        assert status_code == expected_status
        assert code == expected_code

    def test_not_found_message(self):
        assert str(ResourceNotFound("Job", 42)) == "Job 42 not found"
        assert str(ResourceNotFound("Access grant")) == "Access grant not found"

    def test_debug_adds_details_for_unexpected_errors(self):
        _, _, _, details = classify_exception(RuntimeError("boom"), debug=True)
        assert details["type"] == "RuntimeError"
        assert "traceback" in details


class TestErrorEnvelope:

    def test_not_found(self, error_client):
        response = error_client.get("/missing")
        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "NOT_FOUND"
        assert error["message"] == "Job 42 not found"
        assert error["path"] == "/missing"
        assert error["method"] == "GET"

    def test_authorization_error_uses_its_code(self, error_client):
        response = error_client.get("/forbidden")
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "JOB_ACCESS_DENIED"

    def test_conflict(self, error_client):
        response = error_client.get("/conflict")
        assert response.status_code == 409
        assert response.json()["error"]["message"] == "User with this email already exists"

    def test_value_error_is_bad_request(self, error_client):
        response = error_client.get("/invalid")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_INPUT"

    def test_http_exception(self, error_client):
        response = error_client.get("/http")
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid email or password"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_validation_error_lists_fields(self, error_client):
        response = error_client.post("/validate", json={})
        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"][0]["field"] == "body.title"

    def test_unexpected_error_hides_internals(self, error_client):
        response = error_client.get("/crash")
        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "INTERNAL_SERVER_ERROR"
        assert "hunter2" not in response.text
        assert "details" not in error
