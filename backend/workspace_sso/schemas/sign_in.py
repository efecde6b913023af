"""
Pydantic schemas for SSO sign-in.

WHY: Schemas define the request/response contract of the sign-in
endpoints, providing validation, OpenAPI documentation and a clear
separation between API shapes and database models.

SECURITY (OWASP A07):
- Provider tokens are accepted but never echoed back
- The session credential only appears in successful responses
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from workspace_sso.models.sso_config import SSOType


# ============================================================================
# Requests
# ============================================================================


class SSOResponseBody(BaseModel):
    """
    Body posted by the login page after the provider redirect.

    WHY: organizationId keeps the camelCase name the login page sends;
    when present, instance SSO binds the sign-in to that workspace. The
    OAuth state the page may also send was already checked in the browser
    and is ignored here.
    """

    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., min_length=1, description="ID token or authorization code from the provider")
    organization_id: Optional[int] = Field(
        default=None,
        alias="organizationId",
        description="Workspace whose login page started the sign-in",
    )


class SignInRequest(BaseModel):
    """Transport-agnostic sign-in request handed to the orchestrator."""

    token: str
    organization_id: Optional[int] = None
    config_id: Optional[int] = None
    sso_type: Optional[SSOType] = None
    cookies: Dict[str, str] = Field(default_factory=dict)

    @property
    def code_verifier(self) -> Optional[str]:
        return self.cookies.get("oidc_code_verifier")


# ============================================================================
# Responses
# ============================================================================


class GroupPermissionResponse(BaseModel):
    """A group the user belongs to in the signed-in workspace."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: int
    group: str
    app_create: bool
    app_delete: bool
    folder_create: bool


class AppGroupPermissionResponse(BaseModel):
    """App-level grant of one of the user's groups."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    group_permission_id: int
    app_id: str
    read: bool
    update: bool
    delete: bool


class SignInResponse(BaseModel):
    """
    Successful sign-in.

    Field names are snake_case on the wire.
    """

    id: int
    auth_token: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    organization_id: int
    organization: str
    super_admin: bool
    admin: bool
    group_permissions: List[GroupPermissionResponse] = Field(default_factory=list)
    app_group_permissions: List[AppGroupPermissionResponse] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 42,
                "auth_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "email": "jo@acme.com",
                "first_name": "Jo",
                "last_name": "Doe",
                "organization_id": 7,
                "organization": "Acme",
                "super_admin": False,
                "admin": True,
                "group_permissions": [],
                "app_group_permissions": [],
            }
        }
    )
