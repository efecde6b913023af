"""
Custom exception hierarchy for structured error handling.

WHY: Custom exceptions provide:
1. Consistent error handling across the API
2. HTTP status code mapping for FastAPI
3. Structured error responses with contextual data
4. No sensitive data leaks in error messages (OWASP A04)

Every sign-in failure is one of these exceptions. The sign-in flow never
returns a session credential together with an error.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    WHY: Centralizing exception handling in a base class ensures consistent
    error responses, HTTP status code mapping, and prevents sensitive data
    leaks in error messages.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        """
        Initialize exception with message and context.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (overrides class default)
            **context: Additional context for debugging (filtered in to_dict)
        """
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for JSON response.

        Returns:
            Dictionary with error details (sensitive fields filtered out)
        """
        # WHY: Provider tokens and client secrets must never reach a response
        sensitive_fields = {"password", "token", "secret", "key", "api_key", "code_verifier"}
        filtered_context = {
            k: v for k, v in self.context.items() if k.lower() not in sensitive_fields
        }

        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": filtered_context if filtered_context else None,
        }


# ============================================================================
# Authentication Exceptions (OWASP A07)
# ============================================================================


class AuthenticationError(AppException):
    """
    Raised when authentication fails.

    WHY: Unresolvable tenants, failed domain checks and missing workspace
    memberships all surface as the same 401 so callers cannot probe which
    step of the sign-in rejected them.

    HTTP Status: 401 Unauthorized
    """

    status_code = 401
    default_message = "Authentication failed"


class IdentityProviderError(AuthenticationError):
    """
    Raised when an identity provider rejects a token or returns an
    unusable identity.

    HTTP Status: 401 Unauthorized
    """

    default_message = "Invalid credentials"


class FeatureDisabledError(AuthenticationError):
    """
    Raised when a login method is not enabled by the license.

    WHY: Kept apart from IdentityProviderError so a disabled feature is
    never reported as rejected credentials.

    HTTP Status: 401 Unauthorized
    """

    default_message = "Feature is disabled"


class TokenExpiredError(AuthenticationError):
    """
    Raised when JWT token has expired.

    HTTP Status: 401 Unauthorized
    """

    default_message = "Token has expired"


class TokenInvalidError(AuthenticationError):
    """
    Raised when JWT token is malformed or has invalid signature.

    HTTP Status: 401 Unauthorized
    """

    default_message = "Token is invalid"


class NotAcceptableError(AppException):
    """
    Raised when an account exists but may no longer sign in.

    WHY: Archived users get a distinct status code so the login page can
    tell them to contact an administrator instead of retrying.

    HTTP Status: 406 Not Acceptable
    """

    status_code = 406
    default_message = "Account is not allowed to sign in"


# ============================================================================
# Validation & Resource Exceptions
# ============================================================================


class ValidationError(AppException):
    """
    Raised when input validation fails.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Validation failed"


class ResourceAlreadyExistsError(AppException):
    """
    Raised when attempting to create a resource that already exists.

    WHY: Two concurrent first sign-ins for the same email race on the
    users.email unique constraint; the loser gets a 409 and can retry.

    HTTP Status: 409 Conflict
    """

    status_code = 409
    default_message = "Resource already exists"


# ============================================================================
# Licensing Exceptions
# ============================================================================


class LicenseLimitExceededError(AppException):
    """
    Raised when provisioning would exceed the licensed seat count.

    WHY: Raised inside the provisioning transaction so the user and
    workspace created by the same sign-in are rolled back with it.

    HTTP Status: 451 Unavailable For Legal Reasons
    """

    status_code = 451
    default_message = "License user limit reached"
