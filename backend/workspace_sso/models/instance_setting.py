"""
Instance setting model.

WHY: A few switches are changed at runtime by super-admins rather than
through environment variables, e.g. whether any SSO user may get a
personal workspace.
"""

from sqlalchemy import Column, String

from workspace_sso.models.base import Base, TimestampMixin, PrimaryKeyMixin


ALLOW_PERSONAL_WORKSPACE = "ALLOW_PERSONAL_WORKSPACE"


class InstanceSetting(Base, PrimaryKeyMixin, TimestampMixin):
    """Key/value instance-wide setting."""

    __tablename__ = "instance_settings"

    key = Column(String(255), unique=True, nullable=False, index=True)
    value = Column(String(1024), nullable=True)

    def __repr__(self) -> str:
        return f"<InstanceSetting(key={self.key}, value={self.value})>"
