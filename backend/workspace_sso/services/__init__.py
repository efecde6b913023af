"""
Services package.

WHY: Business logic of SSO sign-in lives here, separate from the HTTP layer
and the DAOs.
"""

from workspace_sso.services.sign_in_service import SignInService

__all__ = ["SignInService"]
