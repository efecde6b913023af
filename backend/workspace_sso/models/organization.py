"""
Organization model.

WHY: Organizations (workspaces) are the tenants of the platform. Each one
owns its memberships, its SSO configurations and its sign-up policy.
"""

from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship

from workspace_sso.models.base import Base, TimestampMixin, PrimaryKeyMixin


DEFAULT_WORKSPACE_NAME = "Untitled workspace"


class Organization(Base, PrimaryKeyMixin, TimestampMixin):
    """
    Organization model representing a tenant in the multi-tenant system.

    Sign-in policy lives on the organization:
    - enable_sign_up: unknown SSO users may join without an invite
    - domain: comma-separated e-mail domain allow-list (empty = anyone)
    - inherit_sso: instance-level SSO providers may be used to log in here
    """

    __tablename__ = "organizations"

    name = Column(String(255), nullable=False, index=True)

    enable_sign_up = Column(Boolean, nullable=False, default=False)

    # WHY: Stored as the raw comma-separated string admins type in;
    # parsing happens in the domain policy so whitespace is tolerated
    domain = Column(String(1024), nullable=True)

    inherit_sso = Column(Boolean, nullable=False, default=True)

    # Relationships
    sso_configs = relationship(
        "SSOConfig",
        back_populates="organization",
        cascade="all, delete-orphan",
        order_by="SSOConfig.id",
    )
    organization_users = relationship(
        "OrganizationUser",
        back_populates="organization",
        cascade="all, delete-orphan",
    )
    group_permissions = relationship(
        "GroupPermission",
        back_populates="organization",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name})>"
