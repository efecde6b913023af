"""
License gate.

WHY: Two licensing rules touch sign-in: OIDC login is a licensed feature,
and provisioning must not push the install over its seat limit. The seat
check runs inside the provisioning transaction so an over-limit sign-in
leaves nothing behind.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sso.core.config import Settings, settings as default_settings
from workspace_sso.core.exceptions import LicenseLimitExceededError
from workspace_sso.dao.user import UserDAO


logger = logging.getLogger(__name__)

OIDC_FEATURE = "oidc"


class LicenseService:
    """Feature flags and seat limits read from settings."""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    def is_feature_enabled(self, feature: str) -> bool:
        return feature in self.config.LICENSE_FEATURES

    async def validate_license(self, session: AsyncSession) -> None:
        """
        Fail when the install holds more billable users than licensed.

        Args:
            session: Session of the running provisioning transaction, so
                users created by it are counted

        Raises:
            LicenseLimitExceededError: If the seat limit is exceeded
        """
        max_users = self.config.LICENSE_MAX_USERS
        if max_users is None:
            return

        user_count = await UserDAO(session).count_billable()
        if user_count > max_users:
            logger.warning("License seat limit exceeded: %s users, %s allowed", user_count, max_users)
            raise LicenseLimitExceededError(
                message="License user limit reached, contact the administrator",
                user_count=user_count,
                max_users=max_users,
            )
