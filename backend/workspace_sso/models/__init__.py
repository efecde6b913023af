"""
Database models package.

WHY: Centralizing model imports ensures Alembic can discover all models
for migration generation and makes it easier to import models elsewhere.
"""

from workspace_sso.models.base import Base, TimestampMixin, PrimaryKeyMixin
from workspace_sso.models.organization import Organization, DEFAULT_WORKSPACE_NAME
from workspace_sso.models.user import User, UserStatus, UserType, is_super_admin
from workspace_sso.models.organization_user import OrganizationUser, MembershipStatus
from workspace_sso.models.sso_config import SSOConfig, SSOType
from workspace_sso.models.group_permission import (
    GroupPermission,
    UserGroupPermission,
    AppGroupPermission,
    ALL_USERS_GROUP,
    ADMIN_GROUP,
    DEFAULT_GROUPS,
)
from workspace_sso.models.instance_setting import InstanceSetting, ALLOW_PERSONAL_WORKSPACE

__all__ = [
    "Base",
    "TimestampMixin",
    "PrimaryKeyMixin",
    "Organization",
    "DEFAULT_WORKSPACE_NAME",
    "User",
    "UserStatus",
    "UserType",
    "is_super_admin",
    "OrganizationUser",
    "MembershipStatus",
    "SSOConfig",
    "SSOType",
    "GroupPermission",
    "UserGroupPermission",
    "AppGroupPermission",
    "ALL_USERS_GROUP",
    "ADMIN_GROUP",
    "DEFAULT_GROUPS",
    "InstanceSetting",
    "ALLOW_PERSONAL_WORKSPACE",
]
