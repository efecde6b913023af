"""
Data Access Objects package.

WHY: All database access of the sign-in flow goes through these DAOs so the
services only deal with models and business rules.
"""

from workspace_sso.dao.base import BaseDAO
from workspace_sso.dao.user import UserDAO
from workspace_sso.dao.organization import OrganizationDAO
from workspace_sso.dao.organization_user import OrganizationUserDAO
from workspace_sso.dao.sso_config import SSOConfigDAO, InstanceSettingDAO

__all__ = [
    "BaseDAO",
    "UserDAO",
    "OrganizationDAO",
    "OrganizationUserDAO",
    "SSOConfigDAO",
    "InstanceSettingDAO",
]
