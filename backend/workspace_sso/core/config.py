"""Application configuration"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # API
    API_V1_PREFIX: str = "/api"
    PROJECT_NAME: str = "Workspace SSO API"
    VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Security
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 1440  # 24 hours

    # Database
    DATABASE_URL: str

    # URLs
    # WHY: OIDC redirect URIs must match the ones registered with the
    # identity provider, which point back at the platform host
    HOST_URL: str = "http://localhost:8000"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:8082",
    ]

    # Workspaces
    # WHY: Single-workspace installs only allow logins through a stored
    # per-organization SSO config, never through instance SSO
    DISABLE_MULTI_WORKSPACE: bool = False

    # Instance SSO
    # WHY: Instance-level SSO lets users sign in from the common login page
    # before they are bound to any organization
    SSO_DISABLE_SIGNUPS: bool = False
    SSO_ACCEPTED_DOMAINS: Optional[str] = None  # comma-separated allow-list

    SSO_GOOGLE_OAUTH2_CLIENT_ID: Optional[str] = None

    SSO_GIT_OAUTH2_CLIENT_ID: Optional[str] = None
    SSO_GIT_OAUTH2_CLIENT_SECRET: Optional[str] = None
    SSO_GIT_OAUTH2_HOST: Optional[str] = None  # GitHub Enterprise host, e.g. https://git.example.com

    SSO_OPENID_CLIENT_ID: Optional[str] = None
    SSO_OPENID_CLIENT_SECRET: Optional[str] = None
    SSO_OPENID_WELL_KNOWN_URL: Optional[str] = None

    SSO_HTTP_TIMEOUT_SECONDS: float = 10.0

    # Licensing
    # WHY: OIDC is a paid feature; seat limits cap the number of
    # non-archived users the install may hold
    LICENSE_FEATURES: list[str] = []
    LICENSE_MAX_USERS: Optional[int] = None

    @property
    def multi_workspace_enabled(self) -> bool:
        """Instance SSO is only reachable when multi-workspace mode is on."""
        return not self.DISABLE_MULTI_WORKSPACE

    @property
    def async_database_url(self) -> str:
        """Get async database URL"""
        return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")


settings = Settings()
