"""
Tests for SessionIssuer.

WHY: The session token is what the rest of the platform trusts. Its
claims must name the user and the workspace the sign-in resolved to, and
the response must describe the user's rights in that workspace.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sso.core.auth import verify_token
from workspace_sso.models.group_permission import ADMIN_GROUP, ALL_USERS_GROUP
from workspace_sso.models.user import UserType
from workspace_sso.services.session_issuer import SessionIssuer, build_session_payload
from tests.factories import GroupFactory, MembershipFactory, OrganizationFactory, UserFactory


class TestBuildSessionPayload:
    @pytest.mark.asyncio
    async def test_claims(self, db_session: AsyncSession):
        org = await OrganizationFactory.create(db_session)
        user = await UserFactory.create(db_session, organization=org)

        payload = build_session_payload(user, org, is_sso_login=True)

        assert payload == {
            "username": user.id,
            "sub": "jo@acme.com",
            "organizationId": org.id,
            "isSSOLogin": True,
        }


class TestSessionIssuer:
    @pytest.mark.asyncio
    async def test_member_session(self, db_session: AsyncSession, test_settings):
        org = await OrganizationFactory.create(db_session, name="Acme")
        user = await UserFactory.create(db_session, organization=org)
        await MembershipFactory.create(db_session, user, org, groups=[ALL_USERS_GROUP])
        all_users = (await GroupFactory.get(db_session, org, [ALL_USERS_GROUP]))[0]
        await GroupFactory.grant_app(db_session, all_users, app_id="crm", read=True)

        response = await SessionIssuer(db_session, test_settings).issue(user, org, is_sso_login=False)

        assert response.id == user.id
        assert response.email == "jo@acme.com"
        assert response.first_name == "Jo"
        assert response.organization_id == org.id
        assert response.organization == "Acme"
        assert response.super_admin is False
        assert response.admin is False
        assert [g.group for g in response.group_permissions] == [ALL_USERS_GROUP]
        assert [a.app_id for a in response.app_group_permissions] == ["crm"]

        claims = verify_token(response.auth_token, config=test_settings)
        assert claims["username"] == user.id
        assert claims["sub"] == "jo@acme.com"
        assert claims["organizationId"] == org.id
        assert claims["isSSOLogin"] is False

    @pytest.mark.asyncio
    async def test_workspace_admin(self, db_session: AsyncSession, test_settings):
        org = await OrganizationFactory.create(db_session)
        user = await UserFactory.create(db_session, organization=org)
        await MembershipFactory.create(db_session, user, org, groups=[ALL_USERS_GROUP, ADMIN_GROUP])

        response = await SessionIssuer(db_session, test_settings).issue(user, org, is_sso_login=True)

        assert response.admin is True
        assert {g.group for g in response.group_permissions} == {ALL_USERS_GROUP, ADMIN_GROUP}

    @pytest.mark.asyncio
    async def test_super_admin_without_membership(self, db_session: AsyncSession, test_settings):
        org = await OrganizationFactory.create(db_session)
        admin = await UserFactory.create(db_session, email="root@acme.com", user_type=UserType.INSTANCE)

        response = await SessionIssuer(db_session, test_settings).issue(admin, org, is_sso_login=True)

        assert response.super_admin is True
        assert response.admin is False
        assert response.group_permissions == []
