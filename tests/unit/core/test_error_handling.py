"""
Tests for error handling middleware.

Tests:
- Sensitive data sanitization
- {code, message} responses for domain errors
- Request validation errors
- Internal errors with trace ids
"""

import json
import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from core.errors import (
    InternalError,
    MissingHRApprovalError,
    NotFoundError,
    ValidationError,
)
from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    sanitize_error_message,
    setup_error_handlers,
)


class TestSensitiveDataSanitization:
    """Test sensitive data sanitization."""

    @pytest.mark.parametrize("sensitive_input", [
        'password="secret123"',
        "totp: 123456",
        'totp_secret_key="JBSWY3DPEHPK3PXP"',
        'token="abc123xyz"',
        'api_key="sk_live_12345"',
        'secret="confidential"',
        "authorization: Bearer",
        "SSN: 123-45-6789",
        "card: 4532123456789010",
    ])
    def test_redacted(self, sensitive_input):
        assert "[REDACTED]" in sanitize_error_message(sensitive_input)

    @pytest.mark.parametrize("safe_input", [
        'username="john_doe"',
        "message=Operation successful",
        "count=12345",
    ])
    def test_not_redacted(self, safe_input):
        assert sanitize_error_message(safe_input) == safe_input


class Body(BaseModel):
    count: int


@pytest.fixture
def client():
    app = FastAPI()
    setup_error_handlers(app)
    app.add_middleware(ErrorHandlingMiddleware)

    @app.get("/not-found")
    async def not_found():
        raise NotFoundError("job requisition")

    @app.get("/guard")
    async def guard():
        raise MissingHRApprovalError()

    @app.get("/invalid")
    async def invalid():
        raise ValidationError(["You must provide a tenant id"])

    @app.get("/internal")
    async def internal():
        raise InternalError("password=hunter2 leaked into detail")

    @app.get("/crash")
    async def crash():
        raise RuntimeError("unexpected")

    @app.post("/body")
    async def body(body: Body):
        return body

    return TestClient(app, raise_server_exceptions=False)


class TestErrorResponses:
    """Test rendering of errors."""

    def test_not_found(self, client):
        response = client.get("/not-found")

        assert response.status_code == 404
        assert response.json() == {
            "code": "RESOURCE-NOT-FOUND-ERROR",
            "message": "The job requisition does not exist",
        }

    def test_guard(self, client):
        response = client.get("/guard")

        assert response.status_code == 403
        assert response.json() == {
            "code": "MISSING-HR-APPROVAL-ERROR",
            "message": "HR approval is missing",
        }

    def test_validation(self, client):
        response = client.get("/invalid")

        assert response.status_code == 400
        assert response.json()["message"] == (
            "There are one or more errors with your input(s):\nYou must provide a tenant id"
        )

    def test_internal_error_hides_detail(self, client, caplog):
        with caplog.at_level(logging.ERROR, logger="core.middleware.error_handling"):
            response = client.get("/internal")

        body = response.json()
        assert response.status_code == 500
        assert body["code"] == "INTERNAL-SERVER-ERROR"
        assert body["message"].startswith("Something went wrong. Trace ID: ")
        assert "hunter2" not in json.dumps(body)

        record = caplog.records[-1]
        assert record.trace_id in body["message"]
        assert "hunter2" not in record.error_message

    def test_unhandled_exception(self, client):
        response = client.get("/crash")

        assert response.status_code == 500
        assert response.json()["code"] == "INTERNAL-SERVER-ERROR"
        assert "unexpected" not in response.text

    def test_invalid_json(self, client):
        response = client.post(
            "/body", content=b'{"count": ', headers={"content-type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID-JSON-ERROR"

    def test_wrong_type(self, client):
        response = client.post("/body", json={"count": "many"})

        assert response.status_code == 400
        assert response.json() == {
            "code": "INPUT-VALIDATION-ERROR",
            "message": "There are one or more errors with your input(s):\nThe count is invalid",
        }

    def test_unknown_route(self, client):
        response = client.get("/nowhere")

        assert response.status_code == 404
        assert response.json()["code"] == "RESOURCE-NOT-FOUND-ERROR"
