"""
Session issuance after a successful SSO sign-in.

WHY: The session is bound to one (user, organization) pair. The JWT claims
name the user, their email and the workspace; the response around it
gives the frontend what it needs to render the workspace right away.
"""

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sso.core.auth import create_access_token
from workspace_sso.core.config import Settings, settings as default_settings
from workspace_sso.dao.user import UserDAO
from workspace_sso.models.group_permission import ADMIN_GROUP
from workspace_sso.models.organization import Organization
from workspace_sso.models.user import User, is_super_admin
from workspace_sso.schemas.sign_in import (
    AppGroupPermissionResponse,
    GroupPermissionResponse,
    SignInResponse,
)


def build_session_payload(user: User, organization: Organization, is_sso_login: bool) -> Dict[str, Any]:
    """JWT claims of a sign-in session."""
    return {
        "username": user.id,
        "sub": user.email,
        "organizationId": organization.id,
        "isSSOLogin": is_sso_login,
    }


class SessionIssuer:
    """Signs the session token and builds the sign-in response."""

    def __init__(self, session: AsyncSession, config: Optional[Settings] = None):
        self.config = config or default_settings
        self.user_dao = UserDAO(session)

    async def issue(
        self,
        user: User,
        organization: Organization,
        is_sso_login: bool,
    ) -> SignInResponse:
        """
        Issue a session for a user in an organization.

        Args:
            user: Signed-in user
            organization: Workspace the session is bound to
            is_sso_login: Whether instance-level SSO was used

        Returns:
            SignInResponse carrying the signed token
        """
        payload = build_session_payload(user, organization, is_sso_login)
        token = create_access_token(payload, config=self.config)

        groups = await self.user_dao.group_permissions(user, organization.id)
        app_groups = await self.user_dao.app_group_permissions(user, organization.id)

        return SignInResponse(
            id=user.id,
            auth_token=token,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            organization_id=organization.id,
            organization=organization.name,
            super_admin=is_super_admin(user),
            admin=await self.user_dao.has_group(user, ADMIN_GROUP, organization.id),
            group_permissions=[GroupPermissionResponse.model_validate(g) for g in groups],
            app_group_permissions=[AppGroupPermissionResponse.model_validate(a) for a in app_groups],
        )
