"""
Tests for custom exception hierarchy.

WHY: Exception testing ensures:
1. Exceptions serialize correctly without leaking sensitive data
2. HTTP status codes map correctly
3. Exception handlers produce one JSON error envelope
"""

import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from pydantic import BaseModel

from workspace_sso.core.exceptions import (
    AppException,
    AuthenticationError,
    FeatureDisabledError,
    IdentityProviderError,
    LicenseLimitExceededError,
    NotAcceptableError,
    ResourceAlreadyExistsError,
    TokenExpiredError,
    TokenInvalidError,
    ValidationError,
)
from workspace_sso.core.exception_handlers import (
    app_exception_handler,
    generic_exception_handler,
    validation_exception_handler,
)


class TestAppException:
    """Test base AppException class."""

    def test_default_message(self):
        exc = AppException()
        assert exc.message == "An unexpected error occurred"
        assert exc.status_code == 500

    def test_custom_status_code(self):
        exc = AppException(status_code=418)
        assert exc.status_code == 418

    def test_to_dict_basic(self):
        exc = AppException(message="Test error", user_id=123)

        assert exc.to_dict() == {
            "error": "AppException",
            "message": "Test error",
            "status_code": 500,
            "details": {"user_id": 123},
        }

    def test_to_dict_filters_sensitive_data(self):
        """Provider tokens, secrets and PKCE verifiers never reach a response."""
        exc = AppException(
            message="Test error",
            token="id-token",
            secret="client-secret",
            code_verifier="pkce",
            api_key="key",
            reason="google_token_rejected",
        )

        assert exc.to_dict()["details"] == {"reason": "google_token_rejected"}

    def test_to_dict_no_context(self):
        assert AppException().to_dict()["details"] is None


class TestSignInExceptions:
    @pytest.mark.parametrize(
        "exc_class,status_code",
        [
            (AuthenticationError, 401),
            (IdentityProviderError, 401),
            (FeatureDisabledError, 401),
            (TokenExpiredError, 401),
            (TokenInvalidError, 401),
            (NotAcceptableError, 406),
            (ValidationError, 400),
            (ResourceAlreadyExistsError, 409),
            (LicenseLimitExceededError, 451),
        ],
    )
    def test_status_codes(self, exc_class, status_code):
        assert exc_class().status_code == status_code

    def test_provider_errors_are_authentication_errors(self):
        assert issubclass(IdentityProviderError, AuthenticationError)
        assert issubclass(FeatureDisabledError, AuthenticationError)

    def test_identity_provider_default_message(self):
        assert IdentityProviderError().message == "Invalid credentials"


class TestExceptionHandlerIntegration:
    """Test exception handler integration with FastAPI."""

    @pytest.fixture
    def app(self):
        app = FastAPI()
        app.add_exception_handler(AppException, app_exception_handler)
        app.add_exception_handler(RequestValidationError, validation_exception_handler)
        app.add_exception_handler(Exception, generic_exception_handler)

        class Body(BaseModel):
            token: str

        @app.get("/archived")
        async def archived():
            raise NotAcceptableError(message="User has been removed from the system", user_id=1)

        @app.get("/provider")
        async def provider():
            raise IdentityProviderError(token="leaked-token", reason="google_token_rejected")

        @app.post("/body")
        async def body(payload: Body):
            return payload

        @app.get("/crash")
        async def crash():
            raise RuntimeError("database exploded")

        return app

    @pytest.fixture
    def client(self, app):
        return TestClient(app, raise_server_exceptions=False)

    def test_app_exception_envelope(self, client):
        response = client.get("/archived")

        assert response.status_code == 406
        assert response.json() == {
            "error": "NotAcceptableError",
            "message": "User has been removed from the system",
            "status_code": 406,
            "details": {"user_id": 1},
        }

    def test_sensitive_context_is_filtered(self, client):
        response = client.get("/provider")

        assert response.status_code == 401
        assert "leaked-token" not in response.text

    def test_validation_errors_use_same_envelope(self, client):
        response = client.post("/body", json={})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "ValidationError"
        assert data["details"]["errors"][0]["field"] == "body.token"

    def test_unexpected_errors_are_hidden(self, client):
        response = client.get("/crash")

        assert response.status_code == 500
        assert response.json()["message"] == "An unexpected error occurred"
        assert "exploded" not in response.text
