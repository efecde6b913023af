"""
JWT signing and verification for session credentials.

WHY: Sessions issued after SSO sign-in are stateless JWTs, so any API node
can authorize a request without shared session storage. The claims carry
the user id, email and the organization the session is bound to.
"""

from datetime import datetime, timedelta
from typing import Dict, Any, Optional
from jose import jwt, JWTError

from workspace_sso.core.config import Settings, settings as default_settings
from workspace_sso.core.exceptions import (
    TokenExpiredError,
    TokenInvalidError,
)


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
    config: Optional[Settings] = None,
) -> str:
    """
    Create a JWT access token.

    Token includes:
    - Session claims (username, sub, organizationId, isSSOLogin)
    - exp: Expiration time (default: JWT_EXPIRATION_MINUTES)
    - iat: Issued at time (for audit)
    - nbf: Not before time (prevents premature use)

    Args:
        data: Claims to encode in the token
        expires_delta: Optional custom expiration time
        config: Settings to sign with (defaults to the application settings)

    Returns:
        JWT token string

    Example:
        >>> token = create_access_token({"username": 1, "sub": "a@b.com"})
        >>> len(token) > 100
        True
    """
    config = config or default_settings
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=config.JWT_EXPIRATION_MINUTES)

    to_encode.update(
        {
            "exp": expire,  # Expiration time
            "iat": datetime.utcnow(),  # Issued at
            "nbf": datetime.utcnow(),  # Not before (immediately valid)
        }
    )

    return jwt.encode(
        to_encode,
        config.JWT_SECRET,
        algorithm=config.JWT_ALGORITHM,
    )


def verify_token(token: str, config: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string
        config: Settings to verify with (defaults to the application settings)

    Returns:
        Decoded token payload

    Raises:
        TokenExpiredError: If token has expired
        TokenInvalidError: If token is malformed or signature invalid
    """
    config = config or default_settings
    try:
        return jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
        )

    except jwt.ExpiredSignatureError:
        raise TokenExpiredError(message="Token has expired")

    except JWTError as e:
        raise TokenInvalidError(
            message="Invalid token",
            error=str(e),
        )
