"""
Identity provider adapters.

WHY: Each provider has its own token exchange, but the sign-in flow only
needs four facts about the caller. Every adapter turns a provider token
into the same NormalizedIdentity, and the orchestrator picks the adapter
from a dict keyed by the provider tag.

ARCHITECTURE:
- Uses httpx for async HTTP requests (transport injectable for tests)
- google: ID token validated through Google's tokeninfo endpoint
- git: OAuth code exchange against GitHub or GitHub Enterprise
- openid: OIDC discovery + authorization code exchange with PKCE

SECURITY (OWASP A07):
- Tokens and secrets are never logged
- Any provider failure is reported as invalid credentials
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Tuple

import httpx

from workspace_sso.core.config import Settings, settings as default_settings
from workspace_sso.core.exceptions import IdentityProviderError
from workspace_sso.models.sso_config import SSOType


logger = logging.getLogger(__name__)


GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"

GITHUB_URL = "https://github.com"
GITHUB_API_URL = "https://api.github.com"


@dataclass
class NormalizedIdentity:
    """Provider-agnostic identity of the caller. Never persisted as-is."""

    provider_user_id: Optional[str]
    email: Optional[str]
    first_name: Optional[str] = None
    last_name: Optional[str] = None


@dataclass
class ProviderConfig:
    """
    Provider settings used for one exchange.

    Either loaded from a stored SSOConfig (config_id set) or synthesized
    from instance settings (config_id None).
    """

    sso: SSOType
    enabled: bool
    configs: Dict[str, Any] = field(default_factory=dict)
    config_id: Optional[int] = None


class IdentityProvider(Protocol):
    """Exchanges a provider token for a NormalizedIdentity."""

    async def sign_in(
        self,
        token: str,
        config: ProviderConfig,
        code_verifier: Optional[str] = None,
    ) -> NormalizedIdentity:
        ...


def split_name(name: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Split a display name into (first, last) on the first space."""
    if not name:
        return None, None
    parts = name.strip().split(" ", 1)
    first = parts[0] or None
    last = parts[1].strip() if len(parts) > 1 and parts[1].strip() else None
    return first, last


def _json(response: httpx.Response, failure: str, expected: type = dict) -> Any:
    """Decode a 2xx JSON body of the expected type or raise IdentityProviderError."""
    if not response.is_success:
        raise IdentityProviderError(
            message="Invalid credentials",
            reason=failure,
            provider_status=response.status_code,
        )
    try:
        payload = response.json()
    except ValueError:
        raise IdentityProviderError(message="Invalid credentials", reason=failure)
    if not isinstance(payload, expected):
        raise IdentityProviderError(message="Invalid credentials", reason=failure)
    return payload


class _HTTPClientFactory:
    """Builds httpx clients with the configured timeout and transport."""

    def __init__(self, config: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    def __call__(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.SSO_HTTP_TIMEOUT_SECONDS,
            transport=self.transport,
        )


class GoogleIdentityProvider:
    """Google sign-in: the token is a Google-issued ID token."""

    def __init__(self, client_factory: _HTTPClientFactory):
        self._client = client_factory

    async def sign_in(
        self,
        token: str,
        config: ProviderConfig,
        code_verifier: Optional[str] = None,
    ) -> NormalizedIdentity:
        client_id = config.configs.get("client_id")

        async with self._client() as client:
            try:
                response = await client.get(GOOGLE_TOKENINFO_URL, params={"id_token": token})
            except httpx.HTTPError as e:
                logger.warning("Google token validation failed: %s", type(e).__name__)
                raise IdentityProviderError(message="Invalid credentials", reason="google_unreachable")

        payload = _json(response, "google_token_rejected")

        # WHY: An ID token minted for another client must not log anyone in
        if client_id and payload.get("aud") != client_id:
            raise IdentityProviderError(message="Invalid credentials", reason="google_audience_mismatch")

        return NormalizedIdentity(
            provider_user_id=payload.get("sub"),
            email=payload.get("email"),
            first_name=payload.get("given_name"),
            last_name=payload.get("family_name"),
        )


class GitIdentityProvider:
    """GitHub / GitHub Enterprise sign-in: the token is an OAuth code."""

    def __init__(self, client_factory: _HTTPClientFactory):
        self._client = client_factory

    @staticmethod
    def _urls(host_name: Optional[str]) -> Tuple[str, str]:
        if host_name:
            host = host_name.rstrip("/")
            return f"{host}/login/oauth/access_token", f"{host}/api/v3"
        return f"{GITHUB_URL}/login/oauth/access_token", GITHUB_API_URL

    async def sign_in(
        self,
        token: str,
        config: ProviderConfig,
        code_verifier: Optional[str] = None,
    ) -> NormalizedIdentity:
        token_url, api_url = self._urls(config.configs.get("host_name"))

        async with self._client() as client:
            try:
                token_response = await client.post(
                    token_url,
                    json={
                        "client_id": config.configs.get("client_id"),
                        "client_secret": config.configs.get("client_secret"),
                        "code": token,
                    },
                    headers={"Accept": "application/json"},
                )
                tokens = _json(token_response, "git_code_exchange_failed")
                access_token = tokens.get("access_token")
                if not access_token:
                    # GitHub answers 200 with an "error" field for bad codes
                    raise IdentityProviderError(
                        message="Invalid credentials",
                        reason=tokens.get("error", "git_code_exchange_failed"),
                    )

                headers = {
                    "Authorization": f"token {access_token}",
                    "Accept": "application/vnd.github+json",
                }
                profile = _json(
                    await client.get(f"{api_url}/user", headers=headers),
                    "git_user_fetch_failed",
                )

                email = profile.get("email")
                if not email:
                    # Private e-mail addresses are only listed on /user/emails
                    emails = _json(
                        await client.get(f"{api_url}/user/emails", headers=headers),
                        "git_email_fetch_failed",
                        expected=list,
                    )
                    primary = next(
                        (e for e in emails if isinstance(e, dict) and e.get("primary")), None
                    )
                    email = primary.get("email") if primary else None

            except httpx.HTTPError as e:
                logger.warning("Git OAuth exchange failed: %s", type(e).__name__)
                raise IdentityProviderError(message="Invalid credentials", reason="git_unreachable")

        first_name, last_name = split_name(profile.get("name"))
        user_id = profile.get("id")

        return NormalizedIdentity(
            provider_user_id=str(user_id) if user_id is not None else None,
            email=email,
            first_name=first_name,
            last_name=last_name,
        )


class OidcIdentityProvider:
    """
    OpenID Connect sign-in: the token is an authorization code.

    The PKCE code verifier was stored in a cookie when the login started
    and must be replayed here.
    """

    def __init__(self, client_factory: _HTTPClientFactory, config: Settings):
        self._client = client_factory
        self.config = config

    def redirect_uri(self, config_id: Optional[int]) -> str:
        host = self.config.HOST_URL.rstrip("/")
        if config_id is not None:
            return f"{host}/sso/oidc/{config_id}"
        return f"{host}/sso/oidc"

    async def sign_in(
        self,
        token: str,
        config: ProviderConfig,
        code_verifier: Optional[str] = None,
    ) -> NormalizedIdentity:
        well_known_url = config.configs.get("well_known_url")
        if not well_known_url:
            raise IdentityProviderError(message="Invalid credentials", reason="oidc_not_configured")

        async with self._client() as client:
            try:
                discovery = _json(await client.get(well_known_url), "oidc_discovery_failed")

                form = {
                    "grant_type": "authorization_code",
                    "code": token,
                    "redirect_uri": self.redirect_uri(config.config_id),
                    "client_id": config.configs.get("client_id"),
                    "client_secret": config.configs.get("client_secret"),
                }
                if code_verifier:
                    form["code_verifier"] = code_verifier

                tokens = _json(
                    await client.post(discovery["token_endpoint"], data=form),
                    "oidc_code_exchange_failed",
                )
                access_token = tokens.get("access_token")
                if not access_token:
                    raise IdentityProviderError(message="Invalid credentials", reason="oidc_no_access_token")

                claims = _json(
                    await client.get(
                        discovery["userinfo_endpoint"],
                        headers={"Authorization": f"Bearer {access_token}"},
                    ),
                    "oidc_userinfo_failed",
                )
            except httpx.HTTPError as e:
                logger.warning("OIDC exchange failed: %s", type(e).__name__)
                raise IdentityProviderError(message="Invalid credentials", reason="oidc_unreachable")
            except (KeyError, TypeError):
                raise IdentityProviderError(message="Invalid credentials", reason="oidc_discovery_incomplete")

        first_name = claims.get("given_name")
        last_name = claims.get("family_name")
        if not first_name:
            first_name, fallback_last = split_name(claims.get("name"))
            last_name = last_name or fallback_last

        return NormalizedIdentity(
            provider_user_id=claims.get("sub"),
            email=claims.get("email"),
            first_name=first_name,
            last_name=last_name,
        )


def build_identity_providers(
    config: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[SSOType, IdentityProvider]:
    """
    Adapters for every supported provider, keyed by provider tag.

    Args:
        config: Settings (timeouts, host URL)
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """
    config = config or default_settings
    client_factory = _HTTPClientFactory(config, transport)
    return {
        SSOType.GOOGLE: GoogleIdentityProvider(client_factory),
        SSOType.GIT: GitIdentityProvider(client_factory),
        SSOType.OPENID: OidcIdentityProvider(client_factory, config),
    }
