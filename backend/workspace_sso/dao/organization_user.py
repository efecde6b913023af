"""
Organization membership Data Access Object.

WHY: OrganizationUserDAO is the MembershipStore of the sign-in flow. It
owns the only state transition sign-in performs on memberships:
invited -> active.
"""

from typing import Optional, Sequence
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sso.dao.base import BaseDAO
from workspace_sso.models.organization import Organization
from workspace_sso.models.organization_user import OrganizationUser, MembershipStatus
from workspace_sso.models.user import User


SIGN_IN_MEMBERSHIP_STATUSES = (MembershipStatus.ACTIVE, MembershipStatus.INVITED)


class OrganizationUserDAO(BaseDAO[OrganizationUser]):
    """Data Access Object for OrganizationUser model."""

    def __init__(self, session: AsyncSession):
        """Initialize OrganizationUserDAO with session."""
        super().__init__(OrganizationUser, session)

    async def create_membership(
        self,
        user: User,
        organization: Organization,
        is_invite: bool = False,
    ) -> OrganizationUser:
        """
        Create a membership of a user in an organization.

        Args:
            user: Member
            organization: Workspace joined
            is_invite: Create the membership as a pending invite instead of active

        Returns:
            Created OrganizationUser
        """
        return await self.create(
            user_id=user.id,
            organization_id=organization.id,
            status=MembershipStatus.INVITED if is_invite else MembershipStatus.ACTIVE,
        )

    async def activate(self, membership: OrganizationUser) -> OrganizationUser:
        """
        Move a membership to active.

        Active memberships are left untouched; there is no way back to
        invited through this method.
        """
        if membership.status != MembershipStatus.ACTIVE:
            await self.update(membership, status=MembershipStatus.ACTIVE)
        return membership

    async def get_for_user(
        self,
        user_id: int,
        organization_id: int,
    ) -> Optional[OrganizationUser]:
        """Membership of a user in an organization, whatever its status."""
        result = await self.session.execute(
            select(OrganizationUser).where(
                OrganizationUser.user_id == user_id,
                OrganizationUser.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_by_email_and_org(
        self,
        email: str,
        organization_id: int,
        statuses: Sequence[MembershipStatus] = SIGN_IN_MEMBERSHIP_STATUSES,
    ) -> Optional[OrganizationUser]:
        """
        Membership of the user with an email inside one organization.

        WHY: Direct logins into a workspace only care whether this e-mail
        is (or was invited to be) part of that workspace; the user is
        loaded with the membership so callers do not lazy-load.

        Args:
            email: Email of the user (case-insensitive)
            organization_id: Workspace to look in
            statuses: Membership statuses that count

        Returns:
            OrganizationUser with user loaded, or None
        """
        result = await self.session.execute(
            select(OrganizationUser)
            .join(User, OrganizationUser.user_id == User.id)
            .where(
                func.lower(User.email) == email.lower(),
                OrganizationUser.organization_id == organization_id,
                OrganizationUser.status.in_(list(statuses)),
            )
            .options(selectinload(OrganizationUser.user))
        )
        return result.scalar_one_or_none()
