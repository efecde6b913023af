"""
Integration tests for the SSO sign-in endpoints.

WHY: The login pages only see the HTTP surface: routes, request body,
PKCE cookie, the sign-in response and the JSON error envelope.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sso.core.auth import verify_token
from workspace_sso.models.organization_user import MembershipStatus
from workspace_sso.models.sso_config import SSOType
from workspace_sso.models.user import UserStatus
from tests.factories import (
    MembershipFactory,
    OrganizationFactory,
    SSOConfigFactory,
    UserFactory,
)


class TestCommonSignIn:
    """POST /api/oauth/sign-in/common/{sso_type}"""

    @pytest.mark.asyncio
    async def test_first_sign_in_returns_session(self, client: AsyncClient, test_settings):
        response = await client.post("/api/oauth/sign-in/common/google", json={"token": "id-token"})

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "jo@acme.com"
        assert data["first_name"] == "Jo"
        assert data["organization"] == "Untitled workspace"
        assert data["admin"] is True
        assert data["super_admin"] is False
        assert {g["group"] for g in data["group_permissions"]} == {"all_users", "admin"}

        claims = verify_token(data["auth_token"], config=test_settings)
        assert claims["username"] == data["id"]
        assert claims["organizationId"] == data["organization_id"]
        assert claims["isSSOLogin"] is True

    @pytest.mark.asyncio
    async def test_organization_id_in_body(self, client: AsyncClient, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session, name="Acme", enable_sign_up=True)

        response = await client.post(
            "/api/oauth/sign-in/common/git",
            json={"token": "code", "state": "xyz", "organizationId": org.id},
        )

        assert response.status_code == 200
        assert response.json()["organization"] == "Acme"

    @pytest.mark.asyncio
    async def test_pkce_cookie_reaches_provider(self, client: AsyncClient, stub_provider):
        client.cookies.set("oidc_code_verifier", "pkce-verifier")

        response = await client.post("/api/oauth/sign-in/common/openid", json={"token": "auth-code"})

        assert response.status_code == 200
        assert stub_provider.calls[0]["code_verifier"] == "pkce-verifier"

    @pytest.mark.asyncio
    async def test_unknown_provider(self, client: AsyncClient):
        response = await client.post("/api/oauth/sign-in/common/saml", json={"token": "x"})

        assert response.status_code == 401
        assert response.json()["error"] == "AuthenticationError"

    @pytest.mark.asyncio
    async def test_unlicensed_oidc(self, client: AsyncClient, test_settings):
        test_settings.LICENSE_FEATURES = []

        response = await client.post("/api/oauth/sign-in/common/openid", json={"token": "auth-code"})

        assert response.status_code == 401
        assert response.json()["message"] == "OIDC login disabled"

    @pytest.mark.asyncio
    async def test_archived_user(self, client: AsyncClient, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session)
        user = await UserFactory.create(db_session, organization=org, status=UserStatus.ARCHIVED)
        await MembershipFactory.create(db_session, user, org)

        response = await client.post("/api/oauth/sign-in/common/google", json={"token": "id-token"})

        assert response.status_code == 406
        assert response.json() == {
            "error": "NotAcceptableError",
            "message": "User has been removed from the system, please contact the administrator",
            "status_code": 406,
            "details": None,
        }

    @pytest.mark.asyncio
    async def test_seat_limit(self, client: AsyncClient, test_settings):
        test_settings.LICENSE_MAX_USERS = 0

        response = await client.post("/api/oauth/sign-in/common/google", json={"token": "id-token"})

        assert response.status_code == 451
        assert "auth_token" not in response.text


class TestConfigSignIn:
    """POST /api/oauth/sign-in/{config_id}"""

    @pytest.mark.asyncio
    async def test_member_signs_in(self, client: AsyncClient, db_session: AsyncSession, test_settings):
        org = await OrganizationFactory.create(db_session, name="Acme")
        config = await SSOConfigFactory.create(db_session, org, sso=SSOType.GOOGLE)
        user = await UserFactory.create(db_session, organization=org)
        await MembershipFactory.create(db_session, user, org, status=MembershipStatus.INVITED)

        response = await client.post(f"/api/oauth/sign-in/{config.id}", json={"token": "id-token"})

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == user.id
        assert data["organization_id"] == org.id
        assert verify_token(data["auth_token"], config=test_settings)["isSSOLogin"] is False

    @pytest.mark.asyncio
    async def test_stranger_without_sign_up(self, client: AsyncClient, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session, enable_sign_up=False)
        config = await SSOConfigFactory.create(db_session, org)

        response = await client.post(f"/api/oauth/sign-in/{config.id}", json={"token": "id-token"})

        assert response.status_code == 401
        assert response.json()["message"] == "User does not exist in the workspace"

    @pytest.mark.asyncio
    async def test_unknown_config(self, client: AsyncClient):
        response = await client.post("/api/oauth/sign-in/999", json={"token": "id-token"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_domain_restriction(self, client: AsyncClient, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session, enable_sign_up=True, domain="example.org")
        config = await SSOConfigFactory.create(db_session, org)

        response = await client.post(f"/api/oauth/sign-in/{config.id}", json={"token": "id-token"})

        assert response.status_code == 401
        assert "Domain verification failed" in response.json()["message"]


class TestRequestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"token": ""}])
    async def test_token_is_required(self, client: AsyncClient, body):
        response = await client.post("/api/oauth/sign-in/common/google", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    @pytest.mark.asyncio
    async def test_config_id_must_be_numeric(self, client: AsyncClient):
        response = await client.post("/api/oauth/sign-in/not-a-number", json={"token": "x"})

        assert response.status_code == 400


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
