"""Request and response schemas."""

from workspace_sso.schemas.sign_in import (
    AppGroupPermissionResponse,
    GroupPermissionResponse,
    SignInRequest,
    SignInResponse,
    SSOResponseBody,
)

__all__ = [
    "AppGroupPermissionResponse",
    "GroupPermissionResponse",
    "SignInRequest",
    "SignInResponse",
    "SSOResponseBody",
]
