"""
SSO sign-in API endpoints.

WHY: The login pages post the provider's token here after the redirect:
1. /oauth/sign-in/{config_id} - Workspace login page using a stored SSO config
2. /oauth/sign-in/common/{sso_type} - Instance SSO, from the platform login
   page or from a workspace login page when organizationId is sent

SECURITY (OWASP A07):
- Provider tokens are verified server-side before any account is touched
- The OIDC PKCE code verifier travels in a cookie, never in the body
- Failed sign-ins leave no partial accounts behind
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sso.db.session import get_db
from workspace_sso.schemas.sign_in import SignInRequest, SignInResponse, SSOResponseBody
from workspace_sso.services.sign_in_service import SignInService
from workspace_sso.services.tenant_resolver import parse_sso_type


router = APIRouter(prefix="/oauth", tags=["OAuth"])


def get_sign_in_service(db: AsyncSession = Depends(get_db)) -> SignInService:
    """Sign-in service bound to the request session."""
    return SignInService(db)


async def _sign_in(
    request: Request,
    body: SSOResponseBody,
    service: SignInService,
    config_id: Optional[int] = None,
    sso_type: Optional[str] = None,
) -> SignInResponse:
    sign_in_request = SignInRequest(
        token=body.token,
        organization_id=body.organization_id,
        config_id=config_id,
        sso_type=parse_sso_type(sso_type),
        cookies=dict(request.cookies),
    )
    response = await service.sign_in(sign_in_request)

    # WHY: The session token is only valid once the provisioning writes
    # are durable
    await service.session.commit()
    return response


@router.post(
    "/sign-in/common/{sso_type}",
    response_model=SignInResponse,
    summary="Sign in with instance SSO",
    description="Completes a sign-in through an instance-level identity provider.",
)
async def sign_in_common(
    sso_type: str,
    body: SSOResponseBody,
    request: Request,
    service: SignInService = Depends(get_sign_in_service),
):
    """
    Sign in through instance SSO.

    WHY: Without organizationId the user is not bound to a workspace yet;
    provisioning picks one, or creates a personal workspace.
    """
    return await _sign_in(request, body, service, sso_type=sso_type)


@router.post(
    "/sign-in/{config_id}",
    response_model=SignInResponse,
    summary="Sign in with a workspace SSO config",
    description="Completes a sign-in through the SSO config of one workspace.",
)
async def sign_in_with_config(
    config_id: int,
    body: SSOResponseBody,
    request: Request,
    service: SignInService = Depends(get_sign_in_service),
):
    """Sign in through a stored per-workspace SSO config."""
    return await _sign_in(request, body, service, config_id=config_id)
