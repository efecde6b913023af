"""
Organization Data Access Object.

WHY: OrganizationDAO is the OrganizationStore of the sign-in flow:
workspace creation (with default groups), lookups with SSO configs, and
the list of workspaces a user may enter through instance SSO.
"""

from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.orm import selectinload, with_loader_criteria
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sso.dao.base import BaseDAO
from workspace_sso.dao.organization_user import OrganizationUserDAO
from workspace_sso.dao.user import UserDAO
from workspace_sso.models.organization import Organization, DEFAULT_WORKSPACE_NAME
from workspace_sso.models.organization_user import OrganizationUser, MembershipStatus
from workspace_sso.models.sso_config import SSOConfig
from workspace_sso.models.group_permission import (
    GroupPermission,
    ALL_USERS_GROUP,
    ADMIN_GROUP,
    DEFAULT_GROUPS,
)
from workspace_sso.models.user import User


# Default abilities of the groups every new workspace starts with
DEFAULT_GROUP_ABILITIES = {
    ALL_USERS_GROUP: {"app_create": False, "app_delete": False, "folder_create": False},
    ADMIN_GROUP: {"app_create": True, "app_delete": True, "folder_create": True},
}


class OrganizationDAO(BaseDAO[Organization]):
    """Data Access Object for Organization model."""

    def __init__(self, session: AsyncSession):
        """Initialize OrganizationDAO with session."""
        super().__init__(Organization, session)

    async def create_workspace(
        self,
        name: str = DEFAULT_WORKSPACE_NAME,
        owner: Optional[User] = None,
    ) -> Organization:
        """
        Create an organization seeded with the default groups.

        When an owner is given, they get an active membership and join
        every default group, which makes them the workspace admin.

        Args:
            name: Workspace name
            owner: Optional user who owns the new workspace

        Returns:
            Created Organization instance
        """
        organization = await self.create(name=name)

        for group in DEFAULT_GROUPS:
            self.session.add(
                GroupPermission(
                    organization_id=organization.id,
                    group=group,
                    **DEFAULT_GROUP_ABILITIES[group],
                )
            )
        await self.session.flush()

        if owner is not None:
            await OrganizationUserDAO(self.session).create_membership(
                user=owner,
                organization=organization,
                is_invite=False,
            )
            await UserDAO(self.session).add_to_groups(owner, organization.id, DEFAULT_GROUPS)

        return organization

    async def get_with_sso_configs(
        self,
        organization_id: int,
        enabled_only: bool = True,
    ) -> Optional[Organization]:
        """
        Retrieve an organization with its SSO configs loaded.

        Args:
            organization_id: Organization primary key
            enabled_only: Only load configs that are switched on

        Returns:
            Organization with sso_configs populated, or None
        """
        query = (
            select(Organization)
            .where(Organization.id == organization_id)
            .options(selectinload(Organization.sso_configs))
            .execution_options(populate_existing=True)
        )
        if enabled_only:
            query = query.options(
                with_loader_criteria(SSOConfig, SSOConfig.enabled.is_(True))
            )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_with_sso_login_support(self, user: User) -> List[Organization]:
        """
        Workspaces the user may enter through instance-level SSO.

        WHY: A user signing in from the common login page lands in one of
        the workspaces they are a member of (active or invited) that accept
        instance SSO. Ordered by name so the fallback choice is stable.
        """
        result = await self.session.execute(
            select(Organization)
            .join(OrganizationUser, OrganizationUser.organization_id == Organization.id)
            .where(
                OrganizationUser.user_id == user.id,
                OrganizationUser.status.in_([MembershipStatus.ACTIVE, MembershipStatus.INVITED]),
                Organization.inherit_sso.is_(True),
            )
            .order_by(Organization.name, Organization.id)
        )
        return list(result.scalars().all())

    async def get_single_organization(self) -> Optional[Organization]:
        """Any organization of the install (the oldest one)."""
        result = await self.session.execute(
            select(Organization).order_by(Organization.created_at, Organization.id).limit(1)
        )
        return result.scalar_one_or_none()
