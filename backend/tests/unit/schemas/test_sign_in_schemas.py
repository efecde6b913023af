"""
Unit tests for the sign-in request body.

WHY: The login page posts camelCase fields and may echo the OAuth state;
only the token and the workspace id matter to the server.
"""

import pytest
from pydantic import ValidationError

from workspace_sso.schemas.sign_in import SSOResponseBody


class TestSSOResponseBody:
    def test_camel_case_organization_id(self):
        body = SSOResponseBody.model_validate({"token": "code", "organizationId": 7})

        assert body.organization_id == 7

    def test_oauth_state_is_ignored(self):
        body = SSOResponseBody.model_validate({"token": "code", "state": "xyz"})

        assert body.token == "code"
        assert "state" not in body.model_dump()

    def test_empty_token_rejected(self):
        with pytest.raises(ValidationError):
            SSOResponseBody.model_validate({"token": ""})
