"""
Tests for session token signing and verification.

WHY: Session tokens issued after SSO sign-in are the credential the rest
of the platform trusts; tampered, expired or foreign tokens must fail.
"""

from datetime import timedelta

import pytest
from jose import jwt

from workspace_sso.core.auth import create_access_token, verify_token
from workspace_sso.core.exceptions import TokenExpiredError, TokenInvalidError


SESSION_CLAIMS = {"username": 7, "sub": "jo@acme.com", "organizationId": 3, "isSSOLogin": True}


class TestTokenCreation:
    """Test JWT token creation."""

    def test_includes_session_and_standard_claims(self, test_settings):
        token = create_access_token(SESSION_CLAIMS, config=test_settings)

        payload = jwt.decode(token, test_settings.JWT_SECRET, algorithms=[test_settings.JWT_ALGORITHM])

        assert payload["username"] == 7
        assert payload["sub"] == "jo@acme.com"
        assert payload["organizationId"] == 3
        assert payload["isSSOLogin"] is True
        assert {"exp", "iat", "nbf"} <= payload.keys()

    def test_default_expiration(self, test_settings):
        token = create_access_token(SESSION_CLAIMS, config=test_settings)
        payload = jwt.get_unverified_claims(token)

        lifetime = payload["exp"] - payload["iat"]
        # exp and iat are taken from two clock reads
        assert abs(lifetime - test_settings.JWT_EXPIRATION_MINUTES * 60) <= 1

    def test_input_is_not_mutated(self, test_settings):
        claims = dict(SESSION_CLAIMS)
        create_access_token(claims, config=test_settings)

        assert "exp" not in claims


class TestTokenVerification:
    """Test JWT token verification."""

    def test_valid_token(self, test_settings):
        token = create_access_token(SESSION_CLAIMS, config=test_settings)

        payload = verify_token(token, config=test_settings)

        assert payload["sub"] == "jo@acme.com"

    def test_expired_token(self, test_settings):
        token = create_access_token(SESSION_CLAIMS, expires_delta=timedelta(seconds=-1), config=test_settings)

        with pytest.raises(TokenExpiredError) as exc_info:
            verify_token(token, config=test_settings)

        assert "expired" in str(exc_info.value).lower()

    def test_wrong_secret(self, test_settings):
        token = jwt.encode(SESSION_CLAIMS, "wrong-secret", algorithm=test_settings.JWT_ALGORITHM)

        with pytest.raises(TokenInvalidError):
            verify_token(token, config=test_settings)

    def test_malformed_token(self, test_settings):
        with pytest.raises(TokenInvalidError):
            verify_token("not.a.valid.jwt.token", config=test_settings)

    def test_wrong_algorithm(self, test_settings):
        token = jwt.encode(SESSION_CLAIMS, test_settings.JWT_SECRET, algorithm="HS512")

        with pytest.raises(TokenInvalidError):
            verify_token(token, config=test_settings)
