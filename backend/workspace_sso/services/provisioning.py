"""
Provisioning of users and memberships during SSO sign-in.

WHY: After the caller's identity is established, sign-in has to make sure
the user, the target workspace and an active membership between them
exist. Depending on where the sign-in started this means joining an
existing workspace, finishing an invitation, or creating a personal
workspace just in time.

All writes of one sign-in, including the final license seat check, run in
a single transaction: either everything is kept or nothing is.
"""

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sso.core.exceptions import AuthenticationError
from workspace_sso.dao.organization import OrganizationDAO
from workspace_sso.dao.organization_user import OrganizationUserDAO
from workspace_sso.dao.user import UserDAO
from workspace_sso.db.session import transaction
from workspace_sso.models.group_permission import ALL_USERS_GROUP, DEFAULT_GROUPS
from workspace_sso.models.organization import Organization
from workspace_sso.models.organization_user import OrganizationUser
from workspace_sso.models.user import User, UserStatus, is_super_admin
from workspace_sso.services.identity_providers import NormalizedIdentity
from workspace_sso.services.license_service import LicenseService
from workspace_sso.services.tenant_resolver import OrganizationPolicy, ResolvedTenant


logger = logging.getLogger(__name__)


class ProvisioningOutcome(str, enum.Enum):
    """What provisioning had to do to let the user in."""

    CREATED = "created"  # a user, workspace or membership was created
    REACTIVATED = "reactivated"  # a pending membership or invite was activated
    FOUND = "found"  # everything already existed


@dataclass
class ProvisioningResult:
    """
    The (user, organization) pair the session is issued for.

    membership is None only for super-admins entering a workspace they are
    not a member of.
    """

    outcome: ProvisioningOutcome
    user: User
    organization: Organization
    membership: Optional[OrganizationUser]


class ProvisioningEngine:
    """Finds or creates the user, workspace and membership of a sign-in."""

    def __init__(self, session: AsyncSession, license_service: Optional[LicenseService] = None):
        self.session = session
        self.license_service = license_service or LicenseService()
        self.user_dao = UserDAO(session)
        self.organization_dao = OrganizationDAO(session)
        self.membership_dao = OrganizationUserDAO(session)

    async def provision(
        self,
        tenant: ResolvedTenant,
        identity: NormalizedIdentity,
        existing_user: Optional[User],
        allow_personal_workspace: bool,
    ) -> ProvisioningResult:
        """
        Provision the signing-in user inside one transaction.

        Args:
            tenant: Resolved tenant of the sign-in
            identity: Normalized identity (email and first name guaranteed)
            existing_user: User already registered with this email, if any
            allow_personal_workspace: Whether a new workspace may be created

        Returns:
            ProvisioningResult for the session

        Raises:
            AuthenticationError: If the user may not enter any workspace
            LicenseLimitExceededError: If the seat limit would be exceeded
        """
        async with transaction(self.session):
            if tenant.is_bound:
                result = await self._provision_into_organization(
                    tenant.organization, tenant.policy, identity
                )
            else:
                result = await self._provision_from_common_page(
                    tenant.policy, identity, existing_user, allow_personal_workspace
                )

            await self.license_service.validate_license(self.session)

        logger.info(
            "Provisioned SSO sign-in: outcome=%s user_id=%s organization_id=%s",
            result.outcome.value,
            result.user.id,
            result.organization.id,
        )
        return result

    # ========================================================================
    # Direct login into a known organization
    # ========================================================================

    async def _provision_into_organization(
        self,
        organization: Organization,
        policy: OrganizationPolicy,
        identity: NormalizedIdentity,
    ) -> ProvisioningResult:
        if not policy.enable_sign_up:
            return await self.find_and_activate_user(identity.email, organization)
        return await self.find_or_create_user(identity, organization)

    async def find_and_activate_user(
        self,
        email: str,
        organization: Organization,
    ) -> ProvisioningResult:
        """
        Let in an existing member of a workspace that does not allow sign-up.

        Raises:
            AuthenticationError: If the email has no active or invited
                membership in the workspace
        """
        membership = await self.membership_dao.get_by_email_and_org(email, organization.id)
        if membership is None:
            raise AuthenticationError(message="User does not exist in the workspace")

        outcome = ProvisioningOutcome.FOUND
        if not membership.is_active:
            await self.membership_dao.activate(membership)
            outcome = ProvisioningOutcome.REACTIVATED

        return ProvisioningResult(outcome, membership.user, organization, membership)

    async def find_or_create_user(
        self,
        identity: NormalizedIdentity,
        organization: Organization,
    ) -> ProvisioningResult:
        """Let anyone with a valid identity into a workspace that allows sign-up."""
        membership = await self.membership_dao.get_by_email_and_org(identity.email, organization.id)

        if membership is None:
            user, new_user_created = await self.user_dao.find_or_create_by_email(
                email=identity.email,
                first_name=identity.first_name,
                last_name=identity.last_name,
                organization_id=organization.id,
            )
            if not new_user_created:
                await self.user_dao.add_to_groups(user, organization.id, [ALL_USERS_GROUP])
            membership = await self.membership_dao.create_membership(user, organization, is_invite=False)
            return ProvisioningResult(ProvisioningOutcome.CREATED, user, organization, membership)

        outcome = ProvisioningOutcome.FOUND
        if not membership.is_active:
            await self.membership_dao.activate(membership)
            outcome = ProvisioningOutcome.REACTIVATED

        return ProvisioningResult(outcome, membership.user, organization, membership)

    # ========================================================================
    # Common login page, no workspace bound yet
    # ========================================================================

    async def _provision_from_common_page(
        self,
        policy: OrganizationPolicy,
        identity: NormalizedIdentity,
        user: Optional[User],
        allow_personal_workspace: bool,
    ) -> ProvisioningResult:
        outcome = ProvisioningOutcome.FOUND

        if user is None:
            if not (policy.enable_sign_up and allow_personal_workspace):
                raise AuthenticationError(message="User does not exist in the workspace")
            return await self._create_user_with_workspace(identity)

        if user.invitation_token:
            await self._complete_invitation(user)
            outcome = ProvisioningOutcome.REACTIVATED

        organization = await self._select_organization(user)
        if organization is None:
            if not allow_personal_workspace:
                raise AuthenticationError(message="User not included in any workspace")
            organization = await self.organization_dao.create_workspace(owner=user)
            outcome = ProvisioningOutcome.CREATED

        membership = await self.membership_dao.get_for_user(user.id, organization.id)
        if membership is not None and not membership.is_active:
            await self.membership_dao.activate(membership)
            if outcome == ProvisioningOutcome.FOUND:
                outcome = ProvisioningOutcome.REACTIVATED

        return ProvisioningResult(outcome, user, organization, membership)

    async def _create_user_with_workspace(self, identity: NormalizedIdentity) -> ProvisioningResult:
        """First sign-in of a new user: a personal workspace they administer."""
        organization = await self.organization_dao.create_workspace()
        user = await self.user_dao.create_user(
            email=identity.email,
            first_name=identity.first_name,
            last_name=identity.last_name,
            organization_id=organization.id,
            groups=DEFAULT_GROUPS,
        )
        membership = await self.membership_dao.create_membership(user, organization, is_invite=False)
        return ProvisioningResult(ProvisioningOutcome.CREATED, user, organization, membership)

    async def _complete_invitation(self, user: User) -> None:
        """
        Finish the setup of an invited user.

        The invitation token is dropped and the membership of the default
        workspace becomes active, whatever the domain policy of the
        workspace they end up in.
        """
        changes = {"invitation_token": None}
        if user.status == UserStatus.INVITED:
            changes["status"] = UserStatus.ACTIVE
        await self.user_dao.update(user, **changes)

        if user.default_organization_id is None:
            return
        membership = await self.membership_dao.get_for_user(user.id, user.default_organization_id)
        if membership is not None:
            await self.membership_dao.activate(membership)

    async def _select_organization(self, user: User) -> Optional[Organization]:
        """
        Workspace an existing user lands in.

        The default workspace wins when it is a candidate, otherwise the
        first candidate. Super-admins may enter their default workspace or
        any workspace of the install without being a member.
        """
        candidates: List[Organization]
        if not is_super_admin(user):
            candidates = await self.organization_dao.find_with_sso_login_support(user)
        else:
            organization = None
            if user.default_organization_id is not None:
                organization = await self.organization_dao.get_by_id(user.default_organization_id)
            if organization is None:
                organization = await self.organization_dao.get_single_organization()
            candidates = [organization] if organization is not None else []

        default = next(
            (org for org in candidates if org.id == user.default_organization_id),
            None,
        )
        if default is not None:
            return default
        if candidates:
            return candidates[0]
        return None
