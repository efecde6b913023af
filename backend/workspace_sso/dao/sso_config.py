"""
SSO config and instance setting Data Access Objects.

WHY: Tenant resolution needs two lookups: a stored SSO config by id
(with its organization) and runtime instance settings.
"""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sso.dao.base import BaseDAO
from workspace_sso.models.sso_config import SSOConfig
from workspace_sso.models.instance_setting import InstanceSetting


class SSOConfigDAO(BaseDAO[SSOConfig]):
    """Data Access Object for SSOConfig model."""

    def __init__(self, session: AsyncSession):
        super().__init__(SSOConfig, session)

    async def get_with_organization(self, config_id: int) -> Optional[SSOConfig]:
        """Retrieve an SSO config with its owning organization loaded."""
        result = await self.session.execute(
            select(SSOConfig)
            .where(SSOConfig.id == config_id)
            .options(selectinload(SSOConfig.organization))
        )
        return result.scalar_one_or_none()


class InstanceSettingDAO(BaseDAO[InstanceSetting]):
    """Data Access Object for InstanceSetting model."""

    def __init__(self, session: AsyncSession):
        super().__init__(InstanceSetting, session)

    async def get_value(self, key: str) -> Optional[str]:
        """Value of an instance setting, or None when it was never set."""
        result = await self.session.execute(
            select(InstanceSetting.value).where(InstanceSetting.key == key)
        )
        return result.scalar_one_or_none()
