"""
SSO sign-in orchestration.

WHY: This service is the single entry point of federated sign-in. It runs
the stages in a fixed order and stops at the first failure:

1. Resolve the tenant (workspace + provider config)
2. Exchange the provider token for a normalized identity
3. Check eligibility (identity complete, not archived, domain allowed)
4. Provision user / workspace / membership in one transaction
5. Issue the session

SECURITY (OWASP A07):
- Archived accounts are refused with a distinct 406
- Domain allow-lists are enforced for everyone but super-admins
- No session is issued when any stage fails
"""

import logging
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sso.core.config import Settings, settings as default_settings
from workspace_sso.core.exceptions import (
    AuthenticationError,
    FeatureDisabledError,
    IdentityProviderError,
    NotAcceptableError,
)
from workspace_sso.dao.sso_config import InstanceSettingDAO
from workspace_sso.dao.user import UserDAO
from workspace_sso.models.instance_setting import ALLOW_PERSONAL_WORKSPACE
from workspace_sso.models.sso_config import SSOType
from workspace_sso.models.user import User, UserStatus, is_super_admin
from workspace_sso.schemas.sign_in import SignInRequest, SignInResponse
from workspace_sso.services.domain_policy import is_valid_domain
from workspace_sso.services.identity_providers import (
    IdentityProvider,
    NormalizedIdentity,
    build_identity_providers,
)
from workspace_sso.services.license_service import LicenseService, OIDC_FEATURE
from workspace_sso.services.provisioning import ProvisioningEngine
from workspace_sso.services.session_issuer import SessionIssuer
from workspace_sso.services.tenant_resolver import ResolvedTenant, TenantResolver


logger = logging.getLogger(__name__)


class SignInService:
    """
    Federated sign-in for the multi-tenant workspace platform.

    WHY: Collaborators are injected so tests can swap identity providers
    and license rules without touching HTTP or environment variables.
    """

    def __init__(
        self,
        session: AsyncSession,
        config: Optional[Settings] = None,
        identity_providers: Optional[Dict[SSOType, IdentityProvider]] = None,
        license_service: Optional[LicenseService] = None,
    ):
        """
        Initialize the sign-in service.

        Args:
            session: Request-scoped database session
            config: Settings (defaults to the application settings)
            identity_providers: Adapters keyed by provider tag
            license_service: Feature flags and seat limits
        """
        self.session = session
        self.config = config or default_settings
        self.identity_providers = identity_providers or build_identity_providers(self.config)
        self.license_service = license_service or LicenseService(self.config)

        self.user_dao = UserDAO(session)
        self.instance_settings = InstanceSettingDAO(session)
        self.resolver = TenantResolver(session, self.config)
        self.provisioning = ProvisioningEngine(session, self.license_service)
        self.issuer = SessionIssuer(session, self.config)

    async def sign_in(self, request: SignInRequest) -> SignInResponse:
        """
        Sign a user in through SSO.

        Args:
            request: Provider token plus whichever of organization id,
                config id and provider tag the login page supplied

        Returns:
            SignInResponse with the signed session token

        Raises:
            AuthenticationError: Tenant unresolved, credentials rejected,
                domain not allowed, or no eligible workspace
            NotAcceptableError: Account is archived
            LicenseLimitExceededError: Seat limit reached while provisioning
        """
        tenant = await self.resolver.resolve(
            organization_id=request.organization_id,
            config_id=request.config_id,
            sso_type=request.sso_type,
        )

        identity = await self._exchange_identity(request, tenant)
        existing_user = await self._check_eligibility(identity, tenant)
        allow_personal_workspace = await self._allow_personal_workspace(existing_user)

        result = await self.provisioning.provision(
            tenant=tenant,
            identity=identity,
            existing_user=existing_user,
            allow_personal_workspace=allow_personal_workspace,
        )

        is_sso_login = request.config_id is None and request.sso_type is not None
        return await self.issuer.issue(result.user, result.organization, is_sso_login)

    async def _exchange_identity(
        self,
        request: SignInRequest,
        tenant: ResolvedTenant,
    ) -> NormalizedIdentity:
        sso = tenant.sso_config.sso
        provider = self.identity_providers.get(sso)
        if provider is None:
            raise AuthenticationError(message="Unsupported SSO provider", sso_type=sso.value)

        code_verifier = None
        if sso == SSOType.OPENID:
            if not self.license_service.is_feature_enabled(OIDC_FEATURE):
                raise FeatureDisabledError(message="OIDC login disabled")
            code_verifier = request.code_verifier

        return await provider.sign_in(request.token, tenant.sso_config, code_verifier=code_verifier)

    async def _check_eligibility(
        self,
        identity: NormalizedIdentity,
        tenant: ResolvedTenant,
    ) -> Optional[User]:
        """
        Reject identities that may not sign in.

        Returns:
            The already registered user with this email, if any
        """
        if not (identity.provider_user_id and identity.email):
            raise IdentityProviderError(message="Invalid credentials")

        user = await self.user_dao.get_by_email(identity.email)

        if user is not None and user.status == UserStatus.ARCHIVED:
            logger.warning("Archived user attempted SSO sign-in: user_id=%s", user.id)
            raise NotAcceptableError(
                message="User has been removed from the system, please contact the administrator"
            )

        if not is_super_admin(user) and not is_valid_domain(identity.email, tenant.policy.domain):
            logger.warning("SSO sign-in rejected by domain policy (%s)", tenant.mode.value)
            raise AuthenticationError(
                message="You cannot sign in using the mail id - Domain verification failed"
            )

        if not identity.first_name:
            identity.first_name = identity.email.split("@")[0]

        return user

    async def _allow_personal_workspace(self, user: Optional[User]) -> bool:
        """
        Whether provisioning may create a workspace for this user.

        The very first user of an install always may, so it can be
        bootstrapped through SSO.
        """
        if is_super_admin(user):
            return True
        if await self.instance_settings.get_value(ALLOW_PERSONAL_WORKSPACE) == "true":
            return True
        return await self.user_dao.get_count() == 0
