"""
User Data Access Object.

WHY: UserDAO is the UserStore of the sign-in flow: e-mail lookups, account
creation with group assignment, and the permission queries that feed the
session response.
"""

from typing import Optional, Iterable, List, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sso.dao.base import BaseDAO
from workspace_sso.models.user import User, UserStatus
from workspace_sso.models.group_permission import (
    GroupPermission,
    UserGroupPermission,
    AppGroupPermission,
    ALL_USERS_GROUP,
)
from workspace_sso.core.exceptions import ResourceAlreadyExistsError


class UserDAO(BaseDAO[User]):
    """Data Access Object for User model."""

    def __init__(self, session: AsyncSession):
        """Initialize UserDAO with session."""
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve user by email address.

        WHY: Email is the unique identifier across the platform.
        Case-insensitive comparison prevents duplicate accounts with
        different casing (user@example.com vs USER@EXAMPLE.COM).

        Args:
            email: User's email address

        Returns:
            User instance if found, None otherwise
        """
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        """Check if email already exists in database."""
        result = await self.session.execute(
            select(User.id).where(func.lower(User.email) == email.lower()).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def get_count(self) -> int:
        """
        Count every user in the system.

        WHY: Zero users means the first sign-in is bootstrapping the
        install and may create a workspace regardless of instance settings.
        """
        return await self.count()

    async def count_billable(self) -> int:
        """Count users that occupy a license seat (anyone not archived)."""
        result = await self.session.execute(
            select(func.count()).select_from(User).where(User.status != UserStatus.ARCHIVED)
        )
        return result.scalar_one()

    async def create_user(
        self,
        email: str,
        first_name: Optional[str],
        last_name: Optional[str],
        organization_id: int,
        groups: Iterable[str] = (ALL_USERS_GROUP,),
    ) -> User:
        """
        Create a new active user and place them in groups of an organization.

        Args:
            email: User's email address
            first_name: Given name from the identity provider
            last_name: Family name from the identity provider
            organization_id: Organization that becomes the user's default
            groups: Group names inside that organization to join

        Returns:
            Created User instance

        Raises:
            ResourceAlreadyExistsError: If email already exists
        """
        if await self.email_exists(email):
            raise ResourceAlreadyExistsError(
                message="User with this email already exists",
                resource_type="User",
                email=email,
            )

        user = await self.create(
            email=email,
            first_name=first_name,
            last_name=last_name,
            status=UserStatus.ACTIVE,
            default_organization_id=organization_id,
        )
        await self.add_to_groups(user, organization_id, groups)
        return user

    async def find_or_create_by_email(
        self,
        email: str,
        first_name: Optional[str],
        last_name: Optional[str],
        organization_id: int,
    ) -> Tuple[User, bool]:
        """
        Return the user for an email, creating it in an organization if absent.

        Returns:
            Tuple of (user, new_user_created)
        """
        existing = await self.get_by_email(email)
        if existing:
            return existing, False

        user = await self.create_user(
            email=email,
            first_name=first_name,
            last_name=last_name,
            organization_id=organization_id,
        )
        return user, True

    async def add_to_groups(
        self,
        user: User,
        organization_id: int,
        groups: Iterable[str],
    ) -> None:
        """
        Add a user to named groups of an organization.

        Groups that do not exist in the organization are skipped, as are
        groups the user already belongs to.
        """
        group_names = list(groups)
        if not group_names:
            return

        result = await self.session.execute(
            select(GroupPermission).where(
                GroupPermission.organization_id == organization_id,
                GroupPermission.group.in_(group_names),
            )
        )
        for group in result.scalars().all():
            already = await self.session.execute(
                select(UserGroupPermission.id).where(
                    UserGroupPermission.user_id == user.id,
                    UserGroupPermission.group_permission_id == group.id,
                )
            )
            if already.scalar_one_or_none() is None:
                self.session.add(
                    UserGroupPermission(user_id=user.id, group_permission_id=group.id)
                )
        await self.session.flush()

    async def has_group(self, user: User, group: str, organization_id: int) -> bool:
        """Check whether the user belongs to a named group of an organization."""
        result = await self.session.execute(
            select(UserGroupPermission.id)
            .join(GroupPermission, UserGroupPermission.group_permission_id == GroupPermission.id)
            .where(
                UserGroupPermission.user_id == user.id,
                GroupPermission.organization_id == organization_id,
                GroupPermission.group == group,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def group_permissions(self, user: User, organization_id: int) -> List[GroupPermission]:
        """Groups the user belongs to in an organization, ordered by id."""
        result = await self.session.execute(
            select(GroupPermission)
            .join(UserGroupPermission, UserGroupPermission.group_permission_id == GroupPermission.id)
            .where(
                UserGroupPermission.user_id == user.id,
                GroupPermission.organization_id == organization_id,
            )
            .order_by(GroupPermission.id)
        )
        return list(result.scalars().all())

    async def app_group_permissions(
        self, user: User, organization_id: int
    ) -> List[AppGroupPermission]:
        """App-level grants of every group the user belongs to in an organization."""
        result = await self.session.execute(
            select(AppGroupPermission)
            .join(GroupPermission, AppGroupPermission.group_permission_id == GroupPermission.id)
            .join(UserGroupPermission, UserGroupPermission.group_permission_id == GroupPermission.id)
            .where(
                UserGroupPermission.user_id == user.id,
                GroupPermission.organization_id == organization_id,
            )
            .order_by(AppGroupPermission.id)
        )
        return list(result.scalars().all())
