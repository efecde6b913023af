"""
Group permission models.

WHY: The session response tells the frontend which groups the user is in
for the workspace they signed into, and what those groups may do. New
workspaces are seeded with the "all_users" and "admin" groups.
"""

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from workspace_sso.models.base import Base, TimestampMixin, PrimaryKeyMixin


ALL_USERS_GROUP = "all_users"
ADMIN_GROUP = "admin"
DEFAULT_GROUPS = (ALL_USERS_GROUP, ADMIN_GROUP)


class GroupPermission(Base, PrimaryKeyMixin, TimestampMixin):
    """A named group inside one organization."""

    __tablename__ = "group_permissions"
    __table_args__ = (UniqueConstraint("organization_id", "group"),)

    organization_id = Column(
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    group = Column(String(255), nullable=False)

    app_create = Column(Boolean, nullable=False, default=False)
    app_delete = Column(Boolean, nullable=False, default=False)
    folder_create = Column(Boolean, nullable=False, default=False)

    organization = relationship("Organization", back_populates="group_permissions")
    user_group_permissions = relationship(
        "UserGroupPermission",
        back_populates="group_permission",
        cascade="all, delete-orphan",
    )
    app_group_permissions = relationship(
        "AppGroupPermission",
        back_populates="group_permission",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<GroupPermission(id={self.id}, organization_id={self.organization_id}, group={self.group})>"


class UserGroupPermission(Base, PrimaryKeyMixin, TimestampMixin):
    """Membership of a user in a group."""

    __tablename__ = "user_group_permissions"
    __table_args__ = (UniqueConstraint("user_id", "group_permission_id"),)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    group_permission_id = Column(
        Integer,
        ForeignKey("group_permissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user = relationship("User", back_populates="user_group_permissions")
    group_permission = relationship("GroupPermission", back_populates="user_group_permissions")


class AppGroupPermission(Base, PrimaryKeyMixin, TimestampMixin):
    """Access a group has on one app of the workspace."""

    __tablename__ = "app_group_permissions"
    __table_args__ = (UniqueConstraint("group_permission_id", "app_id"),)

    group_permission_id = Column(
        Integer,
        ForeignKey("group_permissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Apps live in another service; only their id is referenced here
    app_id = Column(String(64), nullable=False)

    read = Column(Boolean, nullable=False, default=False)
    update = Column(Boolean, nullable=False, default=False)
    delete = Column(Boolean, nullable=False, default=False)

    group_permission = relationship("GroupPermission", back_populates="app_group_permissions")
