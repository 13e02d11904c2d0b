"""Tests for global exception handlers.

Validates that application errors map to the right HTTP status codes with a
consistent error format and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import AppError, RateLimitAppError
from app.core.exception_handlers import setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_app_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-app-error")
        async def endpoint():
            raise AppError(code="invalid_policy", message="Unknown rate limit policy")

        response = client.get("/test-app-error")

        assert response.status_code == 400
        data = response.json()
        assert data["error"]["code"] == "invalid_policy"
        assert data["error"]["message"] == "Unknown rate limit policy"
        assert "request_id" in data["error"]
        assert "details" not in data["error"]

    def test_rate_limit_error_returns_429_with_headers(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/test-rate-limit")
        async def endpoint():
            raise RateLimitAppError(
                code="rate_limit_exceeded",
                message="Too many requests. Try again later.",
                details={"policy": "login", "retry_after": 30},
                headers={"Retry-After": "30", "X-RateLimit-Limit": "3"},
            )

        response = client.get("/test-rate-limit")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "30"
        assert response.headers["X-RateLimit-Limit"] == "3"
        assert response.json()["error"]["details"]["policy"] == "login"

    def test_rate_limit_error_without_headers(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-rate-limit-bare")
        async def endpoint():
            raise RateLimitAppError(code="rate_limit_exceeded", message="Too many requests.")

        response = client.get("/test-rate-limit-bare")

        assert response.status_code == 429
        assert "Retry-After" not in response.headers


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_general_exception_handler_logic(self):
        from app.core.exception_handlers import general_exception_handler

        request = AsyncMock()
        request.url.path = "/api/posts"
        request.method = "POST"

        exc = RuntimeError("Unexpected error: database connection failed")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["error"]["code"] == "internal_server_error"
        assert "database connection" not in data["error"]["message"]
        assert "RuntimeError" not in bytes(response.body).decode()


class TestErrorHandlerIntegration:
    """Integration tests for exception handler setup."""

    def test_setup_exception_handlers_registers_handlers(self, app_with_handlers: FastAPI):
        assert AppError in app_with_handlers.exception_handlers
        assert Exception in app_with_handlers.exception_handlers

    def test_rate_limit_error_str_is_message(self):
        exc = RateLimitAppError(code="rate_limit_exceeded", message="Too many requests.")

        assert str(exc) == "Too many requests."
        assert exc.headers == {}
