"""
SSO configuration model.

WHY: Each organization can configure its own identity providers (its own
Google client id, its own GitHub Enterprise host, its own OIDC issuer).
Instance-wide providers are not stored here; they come from settings.
"""

import enum
from sqlalchemy import Column, Integer, Boolean, Enum, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship

from workspace_sso.models.base import Base, TimestampMixin, PrimaryKeyMixin


class SSOType(str, enum.Enum):
    """Supported identity providers."""

    GOOGLE = "google"
    GIT = "git"
    OPENID = "openid"


class SSOConfig(Base, PrimaryKeyMixin, TimestampMixin):
    """
    Per-organization identity provider configuration.

    configs holds the provider-specific keys:
    - google: client_id
    - git: client_id, client_secret, host_name
    - openid: client_id, client_secret, well_known_url
    """

    __tablename__ = "sso_configs"
    __table_args__ = (UniqueConstraint("organization_id", "sso"),)

    organization_id = Column(
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    sso = Column(Enum(SSOType, name="sso_type"), nullable=False)

    enabled = Column(Boolean, nullable=False, default=True)

    configs = Column(JSON, nullable=False, default=dict)

    organization = relationship("Organization", back_populates="sso_configs")

    def __repr__(self) -> str:
        return f"<SSOConfig(id={self.id}, organization_id={self.organization_id}, sso={self.sso})>"
