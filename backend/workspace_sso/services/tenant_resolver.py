"""
Tenant resolution for SSO sign-in.

WHY: A sign-in can start from three places, and each one determines the
target workspace and the identity provider settings differently:

1. A workspace's own SSO login page, which knows the stored config id.
2. A workspace's login page using instance-wide SSO, which knows the
   organization id and the provider tag.
3. The platform-wide login page, which only knows the provider tag; no
   workspace is bound yet and instance settings decide the policy.

Exactly one mode applies to a request. Anything that cannot be resolved
is rejected, never silently defaulted.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sso.core.config import Settings, settings as default_settings
from workspace_sso.core.exceptions import AuthenticationError
from workspace_sso.dao.organization import OrganizationDAO
from workspace_sso.dao.sso_config import SSOConfigDAO
from workspace_sso.models.organization import Organization
from workspace_sso.models.sso_config import SSOConfig, SSOType
from workspace_sso.services.identity_providers import ProviderConfig


logger = logging.getLogger(__name__)


class ResolutionMode(str, enum.Enum):
    EXPLICIT_CONFIG = "explicit_config"
    ORGANIZATION_INSTANCE_SSO = "organization_instance_sso"
    COMMON_PAGE = "common_page"


@dataclass(frozen=True)
class OrganizationPolicy:
    """Sign-up and domain policy that applies to the sign-in."""

    enable_sign_up: bool
    domain: Optional[str]

    @classmethod
    def of(cls, organization: Organization) -> "OrganizationPolicy":
        return cls(enable_sign_up=bool(organization.enable_sign_up), domain=organization.domain)


@dataclass(frozen=True)
class InstanceSSOConfig:
    """
    Instance-level SSO settings, read once per resolution.

    WHY: Instance SSO is configured through the environment; collecting it
    here keeps the resolver from reading settings piecemeal.
    """

    enable_sign_up: bool
    domain: Optional[str]
    providers: Dict[SSOType, ProviderConfig] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, config: Settings) -> "InstanceSSOConfig":
        providers = {
            SSOType.GOOGLE: ProviderConfig(
                sso=SSOType.GOOGLE,
                enabled=bool(config.SSO_GOOGLE_OAUTH2_CLIENT_ID),
                configs={"client_id": config.SSO_GOOGLE_OAUTH2_CLIENT_ID},
            ),
            SSOType.GIT: ProviderConfig(
                sso=SSOType.GIT,
                enabled=bool(config.SSO_GIT_OAUTH2_CLIENT_ID),
                configs={
                    "client_id": config.SSO_GIT_OAUTH2_CLIENT_ID,
                    "client_secret": config.SSO_GIT_OAUTH2_CLIENT_SECRET,
                    "host_name": config.SSO_GIT_OAUTH2_HOST,
                },
            ),
            SSOType.OPENID: ProviderConfig(
                sso=SSOType.OPENID,
                enabled=bool(config.SSO_OPENID_CLIENT_ID),
                configs={
                    "client_id": config.SSO_OPENID_CLIENT_ID,
                    "client_secret": config.SSO_OPENID_CLIENT_SECRET,
                    "well_known_url": config.SSO_OPENID_WELL_KNOWN_URL,
                },
            ),
        }
        return cls(
            enable_sign_up=not config.SSO_DISABLE_SIGNUPS,
            domain=config.SSO_ACCEPTED_DOMAINS,
            providers=providers,
        )

    @property
    def policy(self) -> OrganizationPolicy:
        return OrganizationPolicy(enable_sign_up=self.enable_sign_up, domain=self.domain)


@dataclass
class ResolvedTenant:
    """
    Outcome of tenant resolution.

    organization is None only in COMMON_PAGE mode, where the workspace is
    chosen (or created) during provisioning.
    """

    mode: ResolutionMode
    organization: Optional[Organization]
    policy: OrganizationPolicy
    sso_config: ProviderConfig

    @property
    def is_bound(self) -> bool:
        return self.organization is not None


def _stored_config(config: SSOConfig) -> ProviderConfig:
    return ProviderConfig(
        sso=SSOType(config.sso),
        enabled=bool(config.enabled),
        configs=dict(config.configs or {}),
        config_id=config.id,
    )


def parse_sso_type(sso_type: Optional[str]) -> Optional[SSOType]:
    """Provider tag from a request, rejecting unknown providers."""
    if sso_type is None:
        return None
    try:
        return SSOType(sso_type)
    except ValueError:
        raise AuthenticationError(message="Unsupported SSO provider", sso_type=sso_type)


class TenantResolver:
    """Determines the target organization and provider config of a sign-in."""

    def __init__(self, session: AsyncSession, config: Optional[Settings] = None):
        self.session = session
        self.config = config or default_settings
        self.organization_dao = OrganizationDAO(session)
        self.sso_config_dao = SSOConfigDAO(session)

    async def resolve(
        self,
        organization_id: Optional[int] = None,
        config_id: Optional[int] = None,
        sso_type: Optional[SSOType] = None,
    ) -> ResolvedTenant:
        """
        Resolve the tenant of a sign-in request.

        Args:
            organization_id: Workspace whose login page started the sign-in
            config_id: Stored SSO config selected by a workspace login page
            sso_type: Provider tag for instance SSO

        Returns:
            ResolvedTenant

        Raises:
            AuthenticationError: If no mode applies or its lookups fail
        """
        instance = InstanceSSOConfig.from_settings(self.config)
        multi_workspace = self.config.multi_workspace_enabled

        if config_id is not None:
            resolved = await self._resolve_explicit_config(config_id)
        elif multi_workspace and sso_type is not None and organization_id is not None:
            resolved = await self._resolve_organization_instance_sso(organization_id, sso_type, instance)
        elif multi_workspace and sso_type is not None:
            resolved = ResolvedTenant(
                mode=ResolutionMode.COMMON_PAGE,
                organization=None,
                policy=instance.policy,
                sso_config=instance.providers[sso_type],
            )
        else:
            raise AuthenticationError()

        if not resolved.sso_config.enabled:
            logger.warning(
                "Sign-in attempted with disabled %s SSO (%s)",
                resolved.sso_config.sso.value,
                resolved.mode.value,
            )
            raise AuthenticationError(message="SSO login is not enabled")

        logger.debug(
            "Resolved sign-in tenant: mode=%s organization_id=%s sso=%s",
            resolved.mode.value,
            resolved.organization.id if resolved.organization is not None else None,
            resolved.sso_config.sso.value,
        )
        return resolved

    async def _resolve_explicit_config(self, config_id: int) -> ResolvedTenant:
        sso_config = await self.sso_config_dao.get_with_organization(config_id)
        if sso_config is None or sso_config.organization is None:
            raise AuthenticationError()

        organization = sso_config.organization
        return ResolvedTenant(
            mode=ResolutionMode.EXPLICIT_CONFIG,
            organization=organization,
            policy=OrganizationPolicy.of(organization),
            sso_config=_stored_config(sso_config),
        )

    async def _resolve_organization_instance_sso(
        self,
        organization_id: int,
        sso_type: SSOType,
        instance: InstanceSSOConfig,
    ) -> ResolvedTenant:
        organization = await self.organization_dao.get_with_sso_configs(organization_id)
        if organization is None:
            raise AuthenticationError()

        sso_config: Optional[ProviderConfig] = None
        stored = next((c for c in organization.sso_configs if SSOType(c.sso) == sso_type), None)
        if stored is not None:
            sso_config = _stored_config(stored)
        elif organization.inherit_sso and instance.providers[sso_type].enabled:
            # Workspace has no own config for this provider but accepts
            # instance-level SSO
            sso_config = instance.providers[sso_type]

        if sso_config is None:
            raise AuthenticationError()

        return ResolvedTenant(
            mode=ResolutionMode.ORGANIZATION_INSTANCE_SSO,
            organization=organization,
            policy=OrganizationPolicy.of(organization),
            sso_config=sso_config,
        )
