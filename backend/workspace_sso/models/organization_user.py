"""
Organization membership model.

WHY: A membership is what actually grants a user access to a workspace.
It carries its own status so a user can be active in one workspace while
an invite to another one is still pending.
"""

import enum
from sqlalchemy import Column, Integer, String, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from workspace_sso.models.base import Base, TimestampMixin, PrimaryKeyMixin


class MembershipStatus(str, enum.Enum):
    """
    Membership status.

    Sign-in only ever moves a membership from INVITED to ACTIVE.
    """

    INVITED = "invited"
    ACTIVE = "active"


class OrganizationUser(Base, PrimaryKeyMixin, TimestampMixin):
    """Join entity between User and Organization."""

    __tablename__ = "organization_users"
    __table_args__ = (
        # WHY: Exactly one membership per (user, organization), enforced by
        # the database so concurrent sign-ins cannot duplicate it
        UniqueConstraint("user_id", "organization_id"),
    )

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    organization_id = Column(
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status = Column(
        Enum(MembershipStatus, name="membership_status"),
        nullable=False,
        default=MembershipStatus.INVITED,
    )

    role = Column(String(64), nullable=False, default="all-users")

    # Relationships
    user = relationship("User", back_populates="organization_users")
    organization = relationship("Organization", back_populates="organization_users")

    @property
    def is_active(self) -> bool:
        return self.status == MembershipStatus.ACTIVE

    def __repr__(self) -> str:
        return (
            f"<OrganizationUser(id={self.id}, user_id={self.user_id}, "
            f"organization_id={self.organization_id}, status={self.status})>"
        )
