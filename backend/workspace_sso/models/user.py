"""
User model.

WHY: Users are platform-wide identities keyed by e-mail. Access to a
workspace is granted separately through OrganizationUser memberships, so
one user can belong to many organizations.
"""

import enum
from sqlalchemy import Column, Integer, String, Enum, ForeignKey, Index, func
from sqlalchemy.orm import relationship

from workspace_sso.models.base import Base, TimestampMixin, PrimaryKeyMixin


class UserStatus(str, enum.Enum):
    """
    Account status.

    ARCHIVED is terminal: an archived user can never sign in again.
    """

    ACTIVE = "active"
    INVITED = "invited"
    ARCHIVED = "archived"


class UserType(str, enum.Enum):
    """
    Account scope.

    INSTANCE users are super-administrators of the whole install; they skip
    domain restrictions and workspace membership gating.
    """

    WORKSPACE = "workspace"
    INSTANCE = "instance"


class User(Base, PrimaryKeyMixin, TimestampMixin):
    """User model representing individuals who sign in to the platform."""

    __tablename__ = "users"

    # WHY: unique=True is the storage-level backstop against two concurrent
    # first sign-ins creating the same account
    email = Column(String(255), unique=True, index=True, nullable=False)

    # Lookups compare e-mails case-insensitively, so storage must too
    __table_args__ = (
        Index("uq_users_email_lower", func.lower(email), unique=True),
    )

    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)

    status = Column(
        Enum(UserStatus, name="user_status"),
        nullable=False,
        default=UserStatus.ACTIVE,
    )

    # Set while the user still has to finish an invitation
    invitation_token = Column(String(255), nullable=True)

    default_organization_id = Column(
        Integer,
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    user_type = Column(
        Enum(UserType, name="user_type"),
        nullable=False,
        default=UserType.WORKSPACE,
    )

    # Relationships
    default_organization = relationship("Organization", foreign_keys=[default_organization_id])
    organization_users = relationship(
        "OrganizationUser",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    user_group_permissions = relationship(
        "UserGroupPermission",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def is_super_admin(self) -> bool:
        return self.user_type == UserType.INSTANCE

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, status={self.status})>"


def is_super_admin(user: "User | None") -> bool:
    """Super-admin check that tolerates a user that does not exist yet."""
    return bool(user is not None and user.is_super_admin)
